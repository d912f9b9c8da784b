"""
Vault Store - JSON persistence for wallet records.

File layout:
    {"version": 1, "wallets": {"<address>": {...record...}}}

Every mutation reloads the file under the store lock, applies the
change and writes it back atomically (temp file + replace, mode 0600).
The store also owns the single-primary invariant.
"""

import json
import logging
import threading
from pathlib import Path
from typing import Callable, Optional

from ..errors import AlreadyExists, CorruptVault, NotFound, RecordChanged
from ..utils import set_secure_permissions, utc_now_iso
from .record import WalletRecord, WalletInfo, normalize_address

logger = logging.getLogger(__name__)

VAULT_VERSION = 1


def _unlock_order(records: list[WalletRecord]) -> list[WalletRecord]:
    """Primary first, then newest first."""
    newest_first = sorted(records, key=lambda r: r.created_at, reverse=True)
    return sorted(newest_first, key=lambda r: not r.is_primary)


class VaultStore:
    """
    Durable address -> WalletRecord mapping.

    Usage:
        store = VaultStore(Path("~/.seedvault/vault.json"))
        store.save(record)
        record = store.load(record.address)
    """

    def __init__(self, path: str | Path):
        self.path = Path(path)
        self._lock = threading.RLock()

    # ============================================
    # File I/O
    # ============================================

    def _read(self) -> dict[str, WalletRecord]:
        """Read all records from disk. Missing file = empty vault."""
        if not self.path.exists():
            return {}
        try:
            with open(self.path, "r") as f:
                data = json.load(f)
            wallets = data.get("wallets", {})
            if not isinstance(wallets, dict):
                raise CorruptVault("Vault 'wallets' must be an object")
            records = {}
            for item in wallets.values():
                record = WalletRecord.from_dict(item)
                records[normalize_address(record.address)] = record
            return records
        except CorruptVault:
            raise
        except (json.JSONDecodeError, KeyError, TypeError, ValueError, AttributeError) as e:
            logger.error(f"Vault file {self.path} is unreadable: {e}")
            raise CorruptVault(f"Vault file is unreadable: {e}") from e

    def _write(self, records: dict[str, WalletRecord]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        data = {
            "version": VAULT_VERSION,
            "wallets": {key: r.to_dict() for key, r in records.items()},
        }

        temp_path = self.path.with_suffix('.tmp')
        with open(temp_path, 'w') as f:
            json.dump(data, f, indent=2)
        set_secure_permissions(temp_path)

        temp_path.replace(self.path)
        set_secure_permissions(self.path)

    def _mutate(self, change: Callable[[dict[str, WalletRecord]], object]):
        """Locked read-modify-write. The change's return value is passed through."""
        with self._lock:
            records = self._read()
            result = change(records)
            self._write(records)
            return result

    @staticmethod
    def _ensure_primary(records: dict[str, WalletRecord]) -> None:
        """Keep exactly one primary while the vault is non-empty."""
        primaries = [r for r in records.values() if r.is_primary]
        if not records or len(primaries) == 1:
            return
        if primaries:
            keep = _unlock_order(primaries)[0]
        else:
            keep = _unlock_order(list(records.values()))[0]
        for r in records.values():
            r.is_primary = r is keep

    # ============================================
    # Operations
    # ============================================

    @staticmethod
    def _insert(records: dict[str, WalletRecord], record: WalletRecord, overwrite: bool) -> None:
        key = normalize_address(record.address)
        existing = records.get(key)
        if existing is not None and not overwrite:
            raise AlreadyExists()
        if existing is not None and existing.is_primary:
            record.is_primary = True
        if not records:
            record.is_primary = True
        if record.is_primary:
            for other in records.values():
                other.is_primary = False
        records[key] = record

    def save(self, record: WalletRecord, overwrite: bool = False) -> WalletRecord:
        """
        Persist a record.

        The first record in an empty vault becomes primary. Saving a
        primary record clears the flag on every other record.

        Raises:
            AlreadyExists: Address present and overwrite is False
        """
        def change(records):
            self._insert(records, record, overwrite)
            self._ensure_primary(records)
            return record

        saved = self._mutate(change)
        logger.info(f"Saved wallet {record.address} ({record.primary_chain})")
        return saved

    def save_many(self, records_to_save: list[WalletRecord]) -> list[WalletRecord]:
        """
        Persist several new records in one write. Either all of them
        land on disk or none do.

        Raises:
            AlreadyExists: Any address already present (nothing is written)
        """
        def change(records):
            keys = [normalize_address(r.address) for r in records_to_save]
            if len(set(keys)) != len(keys) or any(k in records for k in keys):
                raise AlreadyExists()
            for record in records_to_save:
                self._insert(records, record, overwrite=False)
            self._ensure_primary(records)
            return records_to_save

        saved = self._mutate(change)
        logger.info(f"Saved {len(saved)} wallet(s): {', '.join(r.address for r in saved)}")
        return saved

    def replace_secrets(
        self,
        address: str,
        expected_private_key: str,
        encrypted_private_key: str,
        encrypted_mnemonic: Optional[str],
        kdf: dict,
    ) -> WalletRecord:
        """
        Swap a record's sealed secrets and KDF parameters.

        Applied only if the stored private key envelope still equals
        expected_private_key, i.e. nobody re-keyed or replaced the
        record since the caller read it. Metadata (access count, last
        access, primary flag) is taken from the current record.

        Raises:
            NotFound: Address not in the vault
            RecordChanged: The stored envelope differs from expected_private_key
        """
        key = normalize_address(address)

        def change(records):
            record = records.get(key)
            if record is None:
                raise NotFound()
            if record.encrypted_private_key != expected_private_key:
                raise RecordChanged()
            record.encrypted_private_key = encrypted_private_key
            record.encrypted_mnemonic = encrypted_mnemonic
            record.kdf = dict(kdf)
            return record

        return self._mutate(change)

    def load(self, address: str) -> Optional[WalletRecord]:
        """Get a record by address, or None."""
        with self._lock:
            return self._read().get(normalize_address(address))

    def exists(self, address: str) -> bool:
        return self.load(address) is not None

    def update_access_metadata(self, address: str) -> WalletRecord:
        """
        Bump access_count and set last_access to now.

        Raises:
            NotFound: Address not in the vault
        """
        key = normalize_address(address)

        def change(records):
            record = records.get(key)
            if record is None:
                raise NotFound()
            record.access_count += 1
            record.last_access = utc_now_iso()
            return record

        return self._mutate(change)

    def remove(self, address: str, expected_private_key: Optional[str] = None) -> bool:
        """
        Delete a record. Removing the primary promotes the newest remaining.

        With expected_private_key set, the record is only removed while its
        stored private key envelope is still that value.

        Raises:
            RecordChanged: The stored envelope differs from expected_private_key
        """
        key = normalize_address(address)

        def change(records):
            record = records.get(key)
            if record is None:
                return False
            if expected_private_key is not None and record.encrypted_private_key != expected_private_key:
                raise RecordChanged()
            del records[key]
            self._ensure_primary(records)
            return True

        with self._lock:
            if not self.path.exists():
                return False
            removed = self._mutate(change)
        if removed:
            logger.info(f"Removed wallet {address}")
        return removed

    def set_primary(self, address: str) -> WalletRecord:
        """
        Make an address the primary wallet.

        Raises:
            NotFound: Address not in the vault
        """
        key = normalize_address(address)

        def change(records):
            record = records.get(key)
            if record is None:
                raise NotFound()
            for other in records.values():
                other.is_primary = other is record
            return record

        return self._mutate(change)

    def list_all(self) -> list[WalletInfo]:
        """Metadata for every wallet, primary first then newest first."""
        return [r.info() for r in self.records_for_unlock()]

    def records_for_unlock(self) -> list[WalletRecord]:
        """Full records in unlock order. Only the authenticator needs these."""
        with self._lock:
            return _unlock_order(list(self._read().values()))

    def __len__(self) -> int:
        with self._lock:
            return len(self._read())
