"""
Authenticator - Unlock vault records and issue access tokens.

Two unlock paths:
- by address: one record, one KDF evaluation
- by password only: trial decryption over every record (primary first,
  then newest first). This costs one KDF per wallet, so it is
  rate-limited per client and can be switched off.

Tokens are stateless HS256 JWTs carrying {address, iat, exp}.
"""

import logging
import secrets
import threading
import time
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Callable, Optional

import jwt

from ..errors import (
    CorruptEnvelope,
    InvalidToken,
    NotFound,
    PasswordOnlyUnlockDisabled,
    RateLimited,
    WrongPassword,
)
from ..models import VaultStore, WalletRecord
from ..wallet.crypto import DEFAULT_KDF, EnvelopeCipher, KdfParams

logger = logging.getLogger(__name__)

TOKEN_ALGORITHM = "HS256"
DEFAULT_TOKEN_TTL = 900             # 15 minutes
DEFAULT_PASSWORD_ONLY_LIMIT = 5     # attempts per minute per client
RATE_WINDOW_SECONDS = 60
LOCAL_CLIENT = "local"


class RateLimiter:
    """
    Sliding-window limiter keyed by client.

    Limits attempts per client per minute.
    """

    def __init__(self, requests_per_minute: int = DEFAULT_PASSWORD_ONLY_LIMIT,
                 clock: Callable[[], float] = time.time):
        self.requests_per_minute = requests_per_minute
        self._clock = clock
        self._request_times: dict[str, list[float]] = defaultdict(list)
        self._lock = threading.Lock()

    def is_rate_limited(self, client_key: str) -> bool:
        """Check if client has exceeded the limit. Records the attempt if not."""
        now = self._clock()
        window_start = now - RATE_WINDOW_SECONDS

        with self._lock:
            # Clean old entries; clients with none left are dropped
            for key in list(self._request_times):
                recent = [t for t in self._request_times[key] if t > window_start]
                if recent:
                    self._request_times[key] = recent
                else:
                    del self._request_times[key]

            if len(self._request_times.get(client_key, ())) >= self.requests_per_minute:
                return True
            self._request_times[client_key].append(now)
            return False

    def reset(self):
        """Reset all rate limiting state."""
        with self._lock:
            self._request_times.clear()


class TokenIssuer:
    """
    Signs and verifies access tokens.

    With no secret configured a random one is generated for this
    process, so tokens stop verifying after a restart.
    """

    def __init__(self, secret: Optional[str] = None, ttl_seconds: int = DEFAULT_TOKEN_TTL,
                 clock: Callable[[], float] = time.time):
        if not secret:
            logger.warning(
                "No token secret configured (SEEDVAULT_TOKEN_SECRET); "
                "using a per-process secret, tokens will not survive a restart"
            )
            secret = secrets.token_hex(32)
        self._secret = secret
        self.ttl_seconds = ttl_seconds
        self._clock = clock

    def issue(self, address: str) -> str:
        iat = int(self._clock())
        payload = {"address": address, "iat": iat, "exp": iat + self.ttl_seconds}
        return jwt.encode(payload, self._secret, algorithm=TOKEN_ALGORITHM)

    def verify(self, token: str) -> dict:
        """
        Decode a token and check signature and expiry.

        Returns: The token claims
        Raises:
            InvalidToken: Tampered, malformed or expired
        """
        try:
            claims = jwt.decode(
                token,
                self._secret,
                algorithms=[TOKEN_ALGORITHM],
                options={"require": ["address", "iat", "exp"], "verify_exp": False, "verify_iat": False},
            )
        except jwt.PyJWTError as e:
            logger.debug(f"Token rejected: {e}")
            raise InvalidToken() from None
        # Expiry is checked against the injected clock
        if int(claims["exp"]) <= int(self._clock()):
            raise InvalidToken("Token expired")
        return claims


def open_record(record: WalletRecord, password: str) -> tuple[str, Optional[str]]:
    """
    Open both envelopes of a record with the cost parameters they were
    sealed with.

    Returns: (private_key_hex, mnemonic or None)
    Raises:
        WrongPassword: Any envelope failed to open
    """
    params = KdfParams.from_dict(record.kdf) if record.kdf else DEFAULT_KDF
    cipher = EnvelopeCipher(params)
    private_key = cipher.open(record.encrypted_private_key, password)
    mnemonic = None
    if record.encrypted_mnemonic is not None:
        mnemonic = cipher.open(record.encrypted_mnemonic, password)
    return private_key, mnemonic


@dataclass
class UnlockResult:
    """Secrets and token for a successfully unlocked wallet."""
    address: str
    chain: str
    private_key: str = field(repr=False)
    token: str = field(repr=False)
    mnemonic: Optional[str] = field(default=None, repr=False)
    last_access: Optional[str] = None
    access_count: int = 0


class Authenticator:
    """
    Unlocks wallets by trial decryption.

    Usage:
        auth = Authenticator(store, TokenIssuer(secret))
        result = auth.unlock_by_address(address, password)
        claims = auth.tokens.verify(result.token)
    """

    def __init__(
        self,
        store: VaultStore,
        tokens: TokenIssuer,
        allow_password_only: bool = True,
        password_only_limit: int = DEFAULT_PASSWORD_ONLY_LIMIT,
        clock: Callable[[], float] = time.time,
    ):
        self.store = store
        self.tokens = tokens
        self.allow_password_only = allow_password_only
        self.rate_limiter = RateLimiter(password_only_limit, clock=clock)

    def _complete(self, record: WalletRecord, private_key: str, mnemonic: Optional[str]) -> UnlockResult:
        updated = self.store.update_access_metadata(record.address)
        logger.info(f"Unlocked wallet {record.address}")
        return UnlockResult(
            address=record.address,
            chain=record.primary_chain,
            private_key=private_key,
            mnemonic=mnemonic,
            token=self.tokens.issue(record.address),
            last_access=updated.last_access,
            access_count=updated.access_count,
        )

    def verify_password(self, address: str, password: str) -> WalletRecord:
        """
        Check a password against one record without touching metadata.

        Raises:
            NotFound: No record for the address
            WrongPassword: Decryption failed
        """
        record = self.store.load(address)
        if record is None:
            raise NotFound()
        open_record(record, password)
        return record

    def unlock_by_address(self, address: str, password: str) -> UnlockResult:
        """
        Unlock one wallet.

        Raises:
            NotFound: No record for the address
            WrongPassword: Decryption failed
        """
        record = self.store.load(address)
        if record is None:
            raise NotFound()
        private_key, mnemonic = open_record(record, password)
        return self._complete(record, private_key, mnemonic)

    def unlock_by_password_only(self, password: str, client_key: str = LOCAL_CLIENT) -> UnlockResult:
        """
        Find the wallet sealed with this password.

        Raises:
            PasswordOnlyUnlockDisabled: Turned off in settings
            RateLimited: Too many attempts from this client in the last minute
            WrongPassword: No record opened (also for an empty vault)
        """
        if not self.allow_password_only:
            raise PasswordOnlyUnlockDisabled()
        if self.rate_limiter.is_rate_limited(client_key):
            logger.warning(f"Password-only unlock rate limited for {client_key}")
            raise RateLimited()

        for record in self.store.records_for_unlock():
            try:
                private_key, mnemonic = open_record(record, password)
            except (WrongPassword, CorruptEnvelope):
                continue
            return self._complete(record, private_key, mnemonic)

        raise WrongPassword()
