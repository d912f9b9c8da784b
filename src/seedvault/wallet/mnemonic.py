"""
Mnemonic/Seed engine - BIP-39 seed phrases.

- 12 words = 128 bits of entropy, 24 words = 256 bits
- Entropy comes from the OS CSPRNG (via the mnemonic package)
- Seed = PBKDF2-HMAC-SHA512(mnemonic, "mnemonic" + passphrase), passphrase always empty here
"""

from mnemonic import Mnemonic
from eth_account.hdaccount import seed_from_mnemonic

from ..errors import InvalidMnemonic

WORD_COUNTS = {12: 128, 24: 256}  # words -> entropy bits

_mnemo = Mnemonic("english")


def normalize_mnemonic(text: str) -> str:
    """Lowercase and collapse whitespace: '  Abandon\tABOUT ' -> 'abandon about'."""
    return " ".join(text.lower().split())


def generate_mnemonic(word_count: int = 12) -> str:
    """
    Generate a fresh seed phrase.

    Args:
        word_count: 12 (128-bit) or 24 (256-bit)
    """
    if word_count not in WORD_COUNTS:
        raise InvalidMnemonic("word_count must be 12 or 24")
    return _mnemo.generate(strength=WORD_COUNTS[word_count])


def validate_mnemonic(words: str) -> str:
    """
    Validate a seed phrase and return it normalized.

    Raises:
        InvalidMnemonic: Wrong word count, unknown word or bad checksum
    """
    if not isinstance(words, str):
        raise InvalidMnemonic()
    phrase = normalize_mnemonic(words)
    count = len(phrase.split())
    if count not in WORD_COUNTS:
        raise InvalidMnemonic(f"Seed phrase must have 12 or 24 words, got {count}")
    if not _mnemo.check(phrase):
        raise InvalidMnemonic("Seed phrase checksum is invalid")
    return phrase


def is_valid_mnemonic(words: str) -> bool:
    try:
        validate_mnemonic(words)
        return True
    except InvalidMnemonic:
        return False


def mnemonic_to_seed(phrase: str) -> bytes:
    """Derive the 64-byte BIP-39 seed. Pure; callers validate first."""
    return seed_from_mnemonic(validate_mnemonic(phrase), passphrase="")
