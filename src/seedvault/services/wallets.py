"""
Wallet Service - Import, re-key, inspect and delete vault wallets.

Every operation that touches secrets proves the password first by
opening the record's envelopes. New envelopes are always sealed with
the currently configured KDF cost.
"""

import logging
from typing import Optional

from ..chains import get_chain
from ..errors import NotFound
from ..models import VaultStore, WalletInfo, WalletRecord
from ..wallet.addresses import encode_address
from ..wallet.crypto import DEFAULT_KDF, EnvelopeCipher, KdfParams
from ..wallet.keys import derive_keypair, keypair_from_private_key
from ..wallet.mnemonic import mnemonic_to_seed, validate_mnemonic
from ..wallet.passwords import require_valid_password
from .auth import open_record

logger = logging.getLogger(__name__)


class WalletService:
    """Wallet management on top of the vault store."""

    def __init__(self, store: VaultStore, kdf_params: KdfParams = DEFAULT_KDF):
        self.store = store
        self.cipher = EnvelopeCipher(kdf_params)

    def _seal(self, secret: Optional[str], password: str) -> Optional[str]:
        if secret is None:
            return None
        return self.cipher.seal(secret, password).serialize()

    def _require(self, address: str) -> WalletRecord:
        record = self.store.load(address)
        if record is None:
            raise NotFound()
        return record

    def import_wallet(
        self,
        password: str,
        chain: str,
        mnemonic: Optional[str] = None,
        private_key: Optional[str] = None,
        overwrite: bool = False,
        address_format: Optional[str] = None,
    ) -> WalletInfo:
        """
        Import an existing wallet from a seed phrase or a raw private key.

        Exactly one of mnemonic / private_key must be given. Private key
        imports have no mnemonic to reveal later.

        Raises:
            ValueError: Neither or both secrets given
            InvalidPassword, InvalidMnemonic, InvalidPrivateKey, UnsupportedChain
            AlreadyExists: Address already protected and overwrite is False
        """
        if (mnemonic is None) == (private_key is None):
            raise ValueError("Provide either a mnemonic or a private key")

        require_valid_password(password)
        spec = get_chain(chain)

        phrase = None
        if mnemonic is not None:
            phrase = validate_mnemonic(mnemonic)
            keypair = derive_keypair(mnemonic_to_seed(phrase), spec)
        else:
            keypair = keypair_from_private_key(private_key)

        address = encode_address(keypair, spec, address_format)
        record = WalletRecord(
            address=address,
            encrypted_mnemonic=self._seal(phrase, password),
            encrypted_private_key=self._seal(keypair.private_key_hex, password),
            primary_chain=spec.name,
            is_imported=True,
            kdf=self.cipher.params.to_dict(),
        )
        self.store.save(record, overwrite=overwrite)
        logger.info(f"Imported wallet {address} ({spec.name}, {'mnemonic' if phrase else 'private key'})")
        return self.store.load(address).info()

    def change_password(self, address: str, current_password: str, new_password: str) -> WalletInfo:
        """
        Re-seal a wallet's secrets under a new password.

        Raises:
            NotFound: Unknown address (or removed while re-sealing)
            WrongPassword: current_password does not open the record
            InvalidPassword: new_password fails the policy
            RecordChanged: The record was re-keyed while re-sealing
        """
        record = self._require(address)
        private_key, mnemonic = open_record(record, current_password)
        require_valid_password(new_password)

        # Sealing is slow; the store swaps the secrets only if the record
        # still holds the envelope that was opened above.
        updated = self.store.replace_secrets(
            address,
            expected_private_key=record.encrypted_private_key,
            encrypted_private_key=self._seal(private_key, new_password),
            encrypted_mnemonic=self._seal(mnemonic, new_password),
            kdf=self.cipher.params.to_dict(),
        )
        logger.info(f"Password changed for {record.address}")
        return updated.info()

    def get_wallet_info(self, address: str) -> WalletInfo:
        """Metadata for one wallet. Raises NotFound."""
        return self._require(address).info()

    def list_wallets(self) -> list[WalletInfo]:
        return self.store.list_all()

    def delete_wallet(self, address: str, password: str) -> bool:
        """
        Remove a wallet after proving the password.

        Raises:
            NotFound: Unknown address
            WrongPassword: Password does not open the record
            RecordChanged: The record was re-keyed after the password check
        """
        record = self._require(address)
        open_record(record, password)
        removed = self.store.remove(address, expected_private_key=record.encrypted_private_key)
        if removed:
            logger.info(f"Deleted wallet {record.address}")
        return removed

    def set_primary(self, address: str) -> WalletInfo:
        """Make a wallet the first one tried by password-only unlock."""
        return self.store.set_primary(address).info()

    def is_protected(self, address: str) -> bool:
        """Whether the address already has a password-protected record."""
        return self.store.exists(address)
