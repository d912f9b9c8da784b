"""
Wallet Crypto - Password envelope encryption.

Industry-standard security:
- Argon2id key derivation (memory-hard), fresh 16-byte salt per envelope
- AES-256-GCM authenticated encryption, fresh 12-byte IV per envelope

Secrets never exist unencrypted on disk.
"""

import secrets
from dataclasses import dataclass, asdict

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from argon2.low_level import hash_secret_raw, Type

from ..errors import CorruptEnvelope, WrongPassword


# ============================================
# Security Constants
# ============================================

# Argon2id parameters (OWASP recommendations for high-security)
ARGON2_TIME_COST = 3
ARGON2_MEMORY_COST = 65536  # 64 MB
ARGON2_PARALLELISM = 4
ARGON2_HASH_LEN = 32  # 256 bits for AES-256

# AES-GCM constants
AES_IV_SIZE = 12  # 96 bits (recommended for GCM)
AES_TAG_SIZE = 16
SALT_SIZE = 16

KDF_ALGORITHM = "argon2id"
ENVELOPE_SEPARATOR = ":"


@dataclass(frozen=True)
class KdfParams:
    """Argon2id cost parameters. Stored next to every sealed record."""
    time_cost: int = ARGON2_TIME_COST
    memory_cost: int = ARGON2_MEMORY_COST
    parallelism: int = ARGON2_PARALLELISM
    algorithm: str = KDF_ALGORITHM

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "KdfParams":
        algorithm = data.get("algorithm", KDF_ALGORITHM)
        if algorithm != KDF_ALGORITHM:
            raise CorruptEnvelope(f"Unsupported KDF: {algorithm}")
        try:
            params = cls(
                time_cost=int(data["time_cost"]),
                memory_cost=int(data["memory_cost"]),
                parallelism=int(data["parallelism"]),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise CorruptEnvelope(f"Invalid KDF parameters: {e}") from None
        # Argon2 minimums
        if min(params.time_cost, params.parallelism) < 1 or params.memory_cost < 8 * params.parallelism:
            raise CorruptEnvelope("Invalid KDF parameters")
        return params


DEFAULT_KDF = KdfParams()


# ============================================
# Key Derivation
# ============================================

def derive_key(password: str, salt: bytes, params: KdfParams = DEFAULT_KDF) -> bytes:
    """
    Derive an encryption key from password using Argon2id.

    Argon2id is memory-hard, making brute-force attacks expensive.
    With the default parameters, each password guess requires ~64MB RAM.
    """
    return hash_secret_raw(
        secret=password.encode('utf-8'),
        salt=salt,
        time_cost=params.time_cost,
        memory_cost=params.memory_cost,
        parallelism=params.parallelism,
        hash_len=ARGON2_HASH_LEN,
        type=Type.ID
    )


# ============================================
# Envelope
# ============================================

@dataclass(frozen=True)
class Envelope:
    """Everything needed to re-derive the key and verify the ciphertext."""
    salt: bytes
    iv: bytes
    ciphertext: bytes
    tag: bytes

    def serialize(self) -> str:
        """Encode as salt:iv:ciphertext:tag (lowercase hex)."""
        return ENVELOPE_SEPARATOR.join(
            part.hex() for part in (self.salt, self.iv, self.ciphertext, self.tag)
        )

    @classmethod
    def parse(cls, text: str) -> "Envelope":
        """
        Decode a serialized envelope.

        Raises:
            CorruptEnvelope: Wrong field count, bad hex or bad field sizes
        """
        if not isinstance(text, str):
            raise CorruptEnvelope()
        parts = text.split(ENVELOPE_SEPARATOR)
        if len(parts) != 4:
            raise CorruptEnvelope("Expected salt:iv:ciphertext:tag")
        try:
            salt, iv, ciphertext, tag = (bytes.fromhex(p) for p in parts)
        except ValueError:
            raise CorruptEnvelope("Envelope fields must be hex") from None
        if len(salt) < SALT_SIZE or len(iv) != AES_IV_SIZE or len(tag) != AES_TAG_SIZE:
            raise CorruptEnvelope("Envelope field sizes are invalid")
        return cls(salt=salt, iv=iv, ciphertext=ciphertext, tag=tag)

    def __str__(self) -> str:
        return self.serialize()


class EnvelopeCipher:
    """
    Seals and opens secrets under a password.

    Usage:
        cipher = EnvelopeCipher()
        envelope = cipher.seal(seed_phrase, password)
        stored = envelope.serialize()

        seed_phrase = cipher.open(Envelope.parse(stored), password)
    """

    def __init__(self, params: KdfParams = DEFAULT_KDF):
        self.params = params

    def seal(self, plaintext: str, password: str) -> Envelope:
        """
        Encrypt plaintext with a password.

        Every call draws a new salt and IV, so sealing the same
        plaintext twice never yields the same envelope.
        """
        salt = secrets.token_bytes(SALT_SIZE)
        key = derive_key(password, salt, self.params)
        iv = secrets.token_bytes(AES_IV_SIZE)

        aesgcm = AESGCM(key)
        ciphertext_and_tag = aesgcm.encrypt(iv, plaintext.encode('utf-8'), None)

        return Envelope(
            salt=salt,
            iv=iv,
            ciphertext=ciphertext_and_tag[:-AES_TAG_SIZE],
            tag=ciphertext_and_tag[-AES_TAG_SIZE:],
        )

    def open(self, envelope: Envelope | str, password: str) -> str:
        """
        Decrypt an envelope with a password.

        Raises:
            WrongPassword: Tag verification failed, for whatever reason
                (wrong password or tampered data). The cause is not exposed.
            CorruptEnvelope: A serialized envelope could not be parsed
        """
        if isinstance(envelope, str):
            envelope = Envelope.parse(envelope)

        key = derive_key(password, envelope.salt, self.params)
        aesgcm = AESGCM(key)
        try:
            plaintext = aesgcm.decrypt(envelope.iv, envelope.ciphertext + envelope.tag, None)
            return plaintext.decode('utf-8')
        except (InvalidTag, UnicodeDecodeError):
            raise WrongPassword() from None


def seal(plaintext: str, password: str, params: KdfParams = DEFAULT_KDF) -> Envelope:
    """Encrypt with a one-off cipher."""
    return EnvelopeCipher(params).seal(plaintext, password)


def open_envelope(envelope: Envelope | str, password: str, params: KdfParams = DEFAULT_KDF) -> str:
    """Decrypt with a one-off cipher."""
    return EnvelopeCipher(params).open(envelope, password)
