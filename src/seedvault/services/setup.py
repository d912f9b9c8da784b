"""
Setup Manager - First-run "confirm your seed phrase" sessions.

A PendingSetup holds a freshly generated mnemonic, the chosen password
and the derived per-chain wallets in process memory only, until one of:
- the user confirms the phrase (or saves explicitly): sealed into the vault
- the user dismisses it
- it expires and is swept

State machine:
    CREATED -> SHOWN_SEED -> CONFIRMED -> PERSISTED
    CREATED/SHOWN_SEED -> PERSISTED          (explicit save)
    any -> DISMISSED | EXPIRED               (terminal, evicted)

After persistence the session is kept once more for setup_grace_ttl so
the phrase can still be revealed for a deferred backup.
"""

import logging
import threading
import time
import uuid
from dataclasses import dataclass, field
from typing import Callable, Iterable, Optional

from ..chains import DEFAULT_CHAIN, ChainSpec, get_chain
from ..errors import MnemonicMismatch, SetupExpired, SetupNotFound
from ..models import VaultStore, WalletInfo, WalletRecord
from ..wallet.addresses import encode_address
from ..wallet.crypto import DEFAULT_KDF, EnvelopeCipher, KdfParams
from ..wallet.keys import derive_keypair
from ..wallet.mnemonic import generate_mnemonic, mnemonic_to_seed, normalize_mnemonic
from ..wallet.passwords import require_valid_password

logger = logging.getLogger(__name__)

DEFAULT_SETUP_TTL = 600         # 10 minutes
DEFAULT_GRACE_TTL = 3600        # 1 hour after the wallet is saved
DEFAULT_SWEEP_INTERVAL = 60

# Setup states
STATE_CREATED = "created"
STATE_SHOWN_SEED = "shown_seed"
STATE_CONFIRMED = "confirmed"
STATE_PERSISTED = "persisted"
STATE_EXPIRED = "expired"
STATE_DISMISSED = "dismissed"


@dataclass
class DerivedWallet:
    """One chain's key material inside a pending setup."""
    chain: str
    address: str
    private_key_hex: str = field(repr=False)
    derivation_path: str = ""

    def to_public_dict(self) -> dict:
        return {
            "chain": self.chain,
            "address": self.address,
            "derivation_path": self.derivation_path,
        }


@dataclass
class PendingSetup:
    """A generated wallet waiting for seed phrase confirmation."""
    setup_id: str
    mnemonic: str = field(repr=False)
    password: str = field(repr=False)
    derived_wallets: list[DerivedWallet]
    created_at: float
    expires_at: float
    wallet_saved: bool = False
    state: str = STATE_CREATED
    saved_addresses: list[str] = field(default_factory=list)
    persisting: int = 0             # confirm/save calls in flight; the sweeper skips while > 0
    sealed_keys: dict[str, str] = field(default_factory=dict, repr=False)   # address -> last sealed key envelope
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    @property
    def addresses(self) -> list[str]:
        return [w.address for w in self.derived_wallets]

    def is_expired(self, now: float) -> bool:
        return now > self.expires_at

    def to_public_dict(self) -> dict:
        """Session view without the password or keys."""
        return {
            "setup_id": self.setup_id,
            "state": self.state,
            "wallets": [w.to_public_dict() for w in self.derived_wallets],
            "created_at": self.created_at,
            "expires_at": self.expires_at,
            "wallet_saved": self.wallet_saved,
        }


class SetupManager:
    """
    Owns every pending setup session and the sweeper thread that
    evicts abandoned ones.

    Usage:
        manager = SetupManager(store)
        manager.start()
        setup = manager.create("Correct1", ["ethereum", "bitcoin"])
        phrase = manager.reveal(setup.setup_id)
        manager.confirm(setup.setup_id, phrase)
        manager.stop()
    """

    def __init__(
        self,
        store: VaultStore,
        kdf_params: KdfParams = DEFAULT_KDF,
        ttl_seconds: float = DEFAULT_SETUP_TTL,
        grace_ttl_seconds: float = DEFAULT_GRACE_TTL,
        sweep_interval: float = DEFAULT_SWEEP_INTERVAL,
        clock: Callable[[], float] = time.time,
    ):
        self.store = store
        self.cipher = EnvelopeCipher(kdf_params)
        self.ttl_seconds = ttl_seconds
        self.grace_ttl_seconds = grace_ttl_seconds
        self.sweep_interval = sweep_interval
        self._clock = clock
        self._sessions: dict[str, PendingSetup] = {}
        self._lock = threading.Lock()
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    # ============================================
    # Session lifecycle
    # ============================================

    def create(
        self,
        password: str,
        chains: Optional[Iterable[str]] = None,
        word_count: int = 12
    ) -> PendingSetup:
        """
        Generate a mnemonic and derive a wallet per requested chain.

        EVM chains share one address; duplicates collapse into the
        first chain that produced them.

        Raises:
            InvalidPassword: Password fails the policy
            UnsupportedChain: Unknown chain identifier
        """
        require_valid_password(password)
        specs: list[ChainSpec] = [get_chain(c) for c in (chains or [DEFAULT_CHAIN])]

        mnemonic = generate_mnemonic(word_count)
        seed = mnemonic_to_seed(mnemonic)

        derived: list[DerivedWallet] = []
        seen = set()
        for spec in specs:
            keypair = derive_keypair(seed, spec)
            address = encode_address(keypair, spec)
            if address in seen:
                continue
            seen.add(address)
            derived.append(DerivedWallet(
                chain=spec.name,
                address=address,
                private_key_hex=keypair.private_key_hex,
                derivation_path=keypair.path,
            ))

        now = self._clock()
        session = PendingSetup(
            setup_id=str(uuid.uuid4()),
            mnemonic=mnemonic,
            password=password,
            derived_wallets=derived,
            created_at=now,
            expires_at=now + self.ttl_seconds,
        )
        with self._lock:
            self._sessions[session.setup_id] = session

        logger.info(f"Setup {session.setup_id} created for {', '.join(w.chain for w in derived)}")
        return session

    def _lookup(self, setup_id: str) -> PendingSetup:
        # Caller holds self._lock
        session = self._sessions.get(setup_id)
        if session is None:
            raise SetupNotFound()
        if session.is_expired(self._clock()) and not session.persisting:
            session.state = STATE_EXPIRED
            del self._sessions[setup_id]
            logger.info(f"Setup {setup_id} expired")
            raise SetupExpired()
        return session

    def get(self, setup_id: str) -> PendingSetup:
        """
        Look up a live session.

        Raises:
            SetupNotFound: Unknown or already evicted
            SetupExpired: Past expiry (the session is evicted)
        """
        with self._lock:
            return self._lookup(setup_id)

    def _claim(self, setup_id: str) -> PendingSetup:
        """Look up a session and hold it against the sweeper until _release()."""
        with self._lock:
            session = self._lookup(setup_id)
            session.persisting += 1
            return session

    def _release(self, session: PendingSetup) -> None:
        with self._lock:
            session.persisting -= 1

    def reveal(self, setup_id: str) -> str:
        """Return the session's mnemonic for display."""
        session = self.get(setup_id)
        with session._lock:
            if session.state == STATE_CREATED:
                session.state = STATE_SHOWN_SEED
            return session.mnemonic

    def confirm(self, setup_id: str, phrase: str) -> list[WalletInfo]:
        """
        Check the user's copy of the phrase and persist the wallets.

        A mismatch leaves the session in place so the user can retry
        until expiry. Confirming an already persisted session with the
        right phrase returns the saved wallets again.

        Raises:
            SetupNotFound, SetupExpired: Session lookup failed
            MnemonicMismatch: Phrase differs after normalization
        """
        session = self._claim(setup_id)
        try:
            if normalize_mnemonic(phrase or "") != normalize_mnemonic(session.mnemonic):
                logger.info(f"Setup {setup_id}: seed phrase mismatch")
                raise MnemonicMismatch()
            return self._persist(session, confirmed=True)
        finally:
            self._release(session)

    def save(self, setup_id: str) -> list[WalletInfo]:
        """Persist without confirmation (user chose to back up later)."""
        session = self._claim(setup_id)
        try:
            return self._persist(session, confirmed=False)
        finally:
            self._release(session)

    def dismiss(self, setup_id: str) -> bool:
        """Evict a session in any state. Returns False if it was not present."""
        with self._lock:
            session = self._sessions.pop(setup_id, None)
        if session is None:
            return False
        session.state = STATE_DISMISSED
        logger.info(f"Setup {setup_id} dismissed")
        return True

    def _already_written(self, session: PendingSetup, wallet: DerivedWallet) -> bool:
        """Whether an earlier, failed attempt of this session still reached the disk."""
        sealed = session.sealed_keys.get(wallet.address)
        if sealed is None:
            return False
        stored = self.store.load(wallet.address)
        return stored is not None and stored.encrypted_private_key == sealed

    def _persist(self, session: PendingSetup, confirmed: bool) -> list[WalletInfo]:
        with session._lock:
            if not session.wallet_saved:
                if confirmed:
                    session.state = STATE_CONFIRMED

                records = []
                for wallet in session.derived_wallets:
                    if self._already_written(session, wallet):
                        continue
                    record = WalletRecord(
                        address=wallet.address,
                        encrypted_mnemonic=self.cipher.seal(session.mnemonic, session.password).serialize(),
                        encrypted_private_key=self.cipher.seal(wallet.private_key_hex, session.password).serialize(),
                        primary_chain=wallet.chain,
                        kdf=self.cipher.params.to_dict(),
                    )
                    session.sealed_keys[wallet.address] = record.encrypted_private_key
                    records.append(record)

                # One write for the whole set: a failure leaves nothing behind
                if records:
                    self.store.save_many(records)
                session.saved_addresses = session.addresses
                session.wallet_saved = True
                session.state = STATE_PERSISTED
                # Grace period for deferred seed viewing, granted once
                session.expires_at = self._clock() + self.grace_ttl_seconds
                logger.info(f"Setup {session.setup_id} persisted {len(session.saved_addresses)} wallet(s)")

            infos = []
            for address in session.saved_addresses:
                record = self.store.load(address)
                if record is not None:
                    infos.append(record.info())
            return infos

    # ============================================
    # Sweeping
    # ============================================

    def sweep(self) -> int:
        """Evict expired sessions. Sessions mid-persistence are skipped."""
        now = self._clock()
        with self._lock:
            expired = [
                sid for sid, s in self._sessions.items()
                if s.is_expired(now) and not s.persisting
            ]
            for sid in expired:
                self._sessions.pop(sid).state = STATE_EXPIRED
        if expired:
            logger.info(f"Swept {len(expired)} expired setup session(s)")
        return len(expired)

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        """Start the background sweeper."""
        if self.is_running:
            return
        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._run_sweeper,
            name="seedvault-setup-sweeper",
            daemon=True,
        )
        self._thread.start()

    def stop(self, timeout: Optional[float] = 5.0) -> None:
        """Stop the sweeper and wait for it to exit."""
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None

    def _run_sweeper(self) -> None:
        while not self._stop_event.wait(self.sweep_interval):
            try:
                self.sweep()
            except Exception:
                logger.exception("Setup sweep failed")
