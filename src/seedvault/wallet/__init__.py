"""
Wallet package - Key material for SeedVault.

Contains:
- mnemonic: BIP-39 seed phrase generation and validation
- keys: BIP-32 derivation for every chain in the table
- addresses: Chain-specific address encoding
- crypto: Password envelope encryption (Argon2id + AES-GCM)
- passwords: Password policy
- messages: EIP-191 message signing
"""

from .mnemonic import (
    generate_mnemonic,
    validate_mnemonic,
    is_valid_mnemonic,
    normalize_mnemonic,
    mnemonic_to_seed,
)
from .keys import KeyPair, derive_keypair, keypair_from_private_key, encode_wif
from .addresses import encode_address, validate_address
from .crypto import (
    KdfParams,
    DEFAULT_KDF,
    Envelope,
    EnvelopeCipher,
    seal,
    open_envelope,
)
from .passwords import PasswordCheck, validate_password, password_strength, require_valid_password
from .messages import sign_message, verify_message, recover_signer

__all__ = [
    # Mnemonic
    "generate_mnemonic",
    "validate_mnemonic",
    "is_valid_mnemonic",
    "normalize_mnemonic",
    "mnemonic_to_seed",
    # Keys
    "KeyPair",
    "derive_keypair",
    "keypair_from_private_key",
    "encode_wif",
    # Addresses
    "encode_address",
    "validate_address",
    # Crypto
    "KdfParams",
    "DEFAULT_KDF",
    "Envelope",
    "EnvelopeCipher",
    "seal",
    "open_envelope",
    # Passwords
    "PasswordCheck",
    "validate_password",
    "password_strength",
    "require_valid_password",
    # Messages
    "sign_message",
    "verify_message",
    "recover_signer",
]
