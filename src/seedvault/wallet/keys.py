"""
Key derivation - BIP-32 keys for every chain in the derivation table.

All supported chains are secp256k1, so one derivation routine serves
all of them; the chain only selects the path.
"""

from dataclasses import dataclass

from eth_account import Account
from eth_account.hdaccount import key_from_seed
from eth_keys import keys
from eth_keys.exceptions import ValidationError as KeyValidationError

from ..chains import ChainSpec, FAMILY_BITCOIN, get_chain
from ..errors import InvalidPrivateKey, UnsupportedChain
from .encoding import base58check_encode

# Enable HD wallet features
Account.enable_unaudited_hdwallet_features()

PRIVATE_KEY_SIZE = 32
# secp256k1 group order; valid keys are 1..N-1
SECP256K1_N = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141


@dataclass(frozen=True)
class KeyPair:
    """A secp256k1 key pair. Handle private_key with care."""
    private_key: bytes          # 32 bytes
    public_key: bytes           # 64 bytes, uncompressed without the 0x04 prefix
    compressed_public_key: bytes  # 33 bytes
    path: str = ""              # Derivation path, or "imported"

    @property
    def private_key_hex(self) -> str:
        return self.private_key.hex()

    def __repr__(self) -> str:
        return f"KeyPair(public_key={self.compressed_public_key.hex()}, path={self.path!r})"


def _keypair(private_key: bytes, path: str) -> KeyPair:
    pk = keys.PrivateKey(private_key)
    return KeyPair(
        private_key=private_key,
        public_key=pk.public_key.to_bytes(),
        compressed_public_key=pk.public_key.to_compressed_bytes(),
        path=path,
    )


def derive_keypair(seed: bytes, chain: str | ChainSpec) -> KeyPair:
    """
    Derive the key pair for a chain from a BIP-39 seed.

    Pure: the same (seed, chain) always yields identical bytes.

    Raises:
        UnsupportedChain: If the chain is not registered
    """
    spec = chain if isinstance(chain, ChainSpec) else get_chain(chain)
    private_key = key_from_seed(seed, spec.derivation_path)
    return _keypair(private_key, spec.derivation_path)


def keypair_from_private_key(private_key: str | bytes) -> KeyPair:
    """
    Build a key pair from a raw private key (hex with or without 0x, or bytes).

    Raises:
        InvalidPrivateKey: If the key is malformed or out of range
    """
    if isinstance(private_key, str):
        pkey = private_key.strip()
        if pkey.startswith("0x") or pkey.startswith("0X"):
            pkey = pkey[2:]
        try:
            pkey_bytes = bytes.fromhex(pkey)
        except ValueError:
            raise InvalidPrivateKey("Private key must be hex") from None
    else:
        pkey_bytes = bytes(private_key)

    if len(pkey_bytes) != PRIVATE_KEY_SIZE:
        raise InvalidPrivateKey(f"Private key must be {PRIVATE_KEY_SIZE} bytes")
    if not 0 < int.from_bytes(pkey_bytes, "big") < SECP256K1_N:
        raise InvalidPrivateKey("Private key is out of range")
    try:
        return _keypair(pkey_bytes, "imported")
    except KeyValidationError:
        raise InvalidPrivateKey("Private key is out of range") from None


def encode_wif(private_key: bytes, chain: str | ChainSpec, compressed: bool = True) -> str:
    """
    Export a private key in Wallet Import Format (Bitcoin-family chains).

    Raises:
        UnsupportedChain: If the chain has no WIF version byte
    """
    spec = chain if isinstance(chain, ChainSpec) else get_chain(chain)
    if spec.family != FAMILY_BITCOIN or spec.wif_version is None:
        raise UnsupportedChain(f"WIF export is not available for {spec.name}")
    payload = bytes([spec.wif_version]) + private_key
    if compressed:
        payload += b"\x01"
    return base58check_encode(payload)
