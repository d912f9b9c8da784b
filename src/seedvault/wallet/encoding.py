"""
Encoding primitives shared by every address family.

Hashes (SHA-256, RIPEMD-160, Keccak-256), Base58Check with a selectable
alphabet and bech32 SegWit encoding. Address code must use these rather
than re-implementing them per chain.
"""

import hashlib

import base58
import bech32
from Crypto.Hash import RIPEMD160
from eth_utils import keccak

# Bitcoin alphabet (also used by Tron)
BITCOIN_ALPHABET = b"123456789ABCDEFGHJKLMNPQRSTUVWXYZabcdefghijkmnopqrstuvwxyz"
# XRP Ledger reorders the alphabet so account addresses start with 'r'
XRP_ALPHABET = b"rpshnaf39wBUDNEGHJKLM4PQRST7VWXYZ2bcdeCg65jkm8oFqi1tuvAxyz"

SEGWIT_V0 = 0


# ============================================
# Hashing
# ============================================

def sha256(data: bytes) -> bytes:
    return hashlib.sha256(data).digest()


def double_sha256(data: bytes) -> bytes:
    return sha256(sha256(data))


def ripemd160(data: bytes) -> bytes:
    return RIPEMD160.new(data).digest()


def hash160(data: bytes) -> bytes:
    """RIPEMD160(SHA256(data)) - Bitcoin's address hash."""
    return ripemd160(sha256(data))


def keccak256(data: bytes) -> bytes:
    return keccak(data)


# ============================================
# Base58Check
# ============================================

def base58check_encode(payload: bytes, alphabet: bytes = BITCOIN_ALPHABET) -> str:
    """Base58 encode payload with a 4-byte double-SHA256 checksum appended."""
    return base58.b58encode_check(payload, alphabet=alphabet).decode("ascii")


def base58check_decode(text: str, alphabet: bytes = BITCOIN_ALPHABET) -> bytes:
    """
    Decode Base58Check text and verify its checksum.

    Raises:
        ValueError: On bad characters or checksum mismatch
    """
    return base58.b58decode_check(text, alphabet=alphabet)


def versioned_checksum(version: int, body: bytes, alphabet: bytes = BITCOIN_ALPHABET) -> str:
    """Base58Check of a single version byte followed by body."""
    return base58check_encode(bytes([version]) + body, alphabet)


# ============================================
# Bech32 (SegWit)
# ============================================

def segwit_encode(hrp: str, program: bytes, version: int = SEGWIT_V0) -> str:
    """Encode a witness program as a bech32 address."""
    address = bech32.encode(hrp, version, program)
    if address is None:
        raise ValueError("Invalid witness program")
    return address


def segwit_decode(hrp: str, address: str) -> tuple[int, bytes]:
    """
    Decode a bech32 SegWit address.

    Raises:
        ValueError: If the address is not valid for this HRP
    """
    version, program = bech32.decode(hrp, address)
    if version is None:
        raise ValueError("Invalid bech32 address")
    return version, bytes(program)
