"""
Address encoder - public key -> chain-specific address string.

One encoder per address family, all built on the shared primitives in
encoding.py:

- EVM:      0x + hex(keccak256(uncompressed)[-20:])
- Bitcoin:  P2PKH / P2SH-P2WPKH (Base58Check) or P2WPKH (bech32)
- Tron:     Base58Check(0x41 + keccak256(uncompressed)[-20:])
- XRP:      Base58Check(0x00 + hash160(compressed)), XRP alphabet
"""

from typing import Optional

from ..chains import (
    ChainSpec,
    FAMILY_BITCOIN,
    FAMILY_EVM,
    FAMILY_TRON,
    FAMILY_XRP,
    FORMAT_P2PKH,
    FORMAT_P2SH_P2WPKH,
    FORMAT_P2WPKH,
    get_chain,
)
from ..errors import UnsupportedAddressFormat, UnsupportedChain
from .encoding import (
    BITCOIN_ALPHABET,
    XRP_ALPHABET,
    base58check_decode,
    hash160,
    keccak256,
    segwit_decode,
    segwit_encode,
    versioned_checksum,
)
from .keys import KeyPair

COMPRESSED_KEY_SIZE = 33
UNCOMPRESSED_KEY_SIZE = 64
HASH_SIZE = 20


def _uncompressed(public_key: bytes) -> bytes:
    """Accept 65-byte (0x04-prefixed) or 64-byte raw uncompressed keys."""
    if len(public_key) == UNCOMPRESSED_KEY_SIZE + 1 and public_key[0] == 0x04:
        return public_key[1:]
    if len(public_key) == UNCOMPRESSED_KEY_SIZE:
        return public_key
    raise ValueError("Expected an uncompressed secp256k1 public key")


def _compressed(public_key: bytes) -> bytes:
    if len(public_key) != COMPRESSED_KEY_SIZE or public_key[0] not in (0x02, 0x03):
        raise ValueError("Expected a compressed secp256k1 public key")
    return public_key


def _keccak_account_id(uncompressed: bytes) -> bytes:
    """Last 20 bytes of Keccak-256 over the raw 64-byte key."""
    return keccak256(_uncompressed(uncompressed))[-HASH_SIZE:]


# ============================================
# Family Encoders
# ============================================

def encode_evm(uncompressed: bytes) -> str:
    return "0x" + _keccak_account_id(uncompressed).hex()


def encode_tron(uncompressed: bytes, spec: ChainSpec) -> str:
    return versioned_checksum(spec.p2pkh_version, _keccak_account_id(uncompressed))


def encode_xrp(compressed: bytes, spec: ChainSpec) -> str:
    return versioned_checksum(spec.p2pkh_version, hash160(_compressed(compressed)), XRP_ALPHABET)


def encode_bitcoin(compressed: bytes, spec: ChainSpec, address_format: str) -> str:
    key_hash = hash160(_compressed(compressed))

    if address_format == FORMAT_P2PKH:
        return versioned_checksum(spec.p2pkh_version, key_hash)

    if address_format == FORMAT_P2SH_P2WPKH:
        # Redeem script: OP_0 PUSH20 <key hash>
        redeem_script = b"\x00\x14" + key_hash
        return versioned_checksum(spec.p2sh_version, hash160(redeem_script))

    if address_format == FORMAT_P2WPKH:
        return segwit_encode(spec.bech32_hrp, key_hash)

    raise UnsupportedAddressFormat(f"{address_format} is not supported for {spec.name}")


# ============================================
# Public API
# ============================================

def encode_address(
    public_key: bytes | KeyPair,
    chain: str | ChainSpec,
    address_format: Optional[str] = None
) -> str:
    """
    Encode a public key as an address for the given chain.

    Args:
        public_key: KeyPair, or raw key bytes. EVM/Tron need the
            uncompressed key; Bitcoin-family/XRP need the compressed key.
        chain: Chain identifier or ChainSpec
        address_format: One of the chain's formats (default: chain default)

    Raises:
        UnsupportedChain: Unknown chain
        UnsupportedAddressFormat: Format not offered by this chain
            (e.g. SegWit on Dogecoin)
    """
    spec = chain if isinstance(chain, ChainSpec) else get_chain(chain)
    address_format = address_format or spec.default_format
    if not spec.supports_format(address_format):
        raise UnsupportedAddressFormat(
            f"{spec.display_name} does not support {address_format} addresses"
        )

    if isinstance(public_key, KeyPair):
        uncompressed = public_key.public_key
        compressed = public_key.compressed_public_key
    else:
        uncompressed = compressed = public_key

    if spec.family == FAMILY_EVM:
        return encode_evm(uncompressed)
    if spec.family == FAMILY_BITCOIN:
        return encode_bitcoin(compressed, spec, address_format)
    if spec.family == FAMILY_TRON:
        return encode_tron(uncompressed, spec)
    if spec.family == FAMILY_XRP:
        return encode_xrp(compressed, spec)

    raise UnsupportedChain(f"No address encoder for family {spec.family}")


def validate_address(address: str, chain: str | ChainSpec) -> bool:
    """
    Check that an address string is well-formed for a chain.

    Verifies prefix/version byte, length and checksum. Does not check
    that the address was derived by this vault.
    """
    spec = chain if isinstance(chain, ChainSpec) else get_chain(chain)
    if not isinstance(address, str) or not address:
        return False

    if spec.family == FAMILY_EVM:
        body = address[2:] if address[:2].lower() == "0x" else None
        if body is None or len(body) != HASH_SIZE * 2:
            return False
        try:
            bytes.fromhex(body)
        except ValueError:
            return False
        return True

    if spec.family == FAMILY_BITCOIN and spec.bech32_hrp and address.lower().startswith(spec.bech32_hrp + "1"):
        try:
            version, program = segwit_decode(spec.bech32_hrp, address)
        except ValueError:
            return False
        return version == 0 and len(program) == HASH_SIZE

    alphabet = XRP_ALPHABET if spec.family == FAMILY_XRP else BITCOIN_ALPHABET
    try:
        payload = base58check_decode(address, alphabet)
    except ValueError:
        return False
    if len(payload) != HASH_SIZE + 1:
        return False

    versions = {spec.p2pkh_version}
    if spec.family == FAMILY_BITCOIN and spec.supports_format(FORMAT_P2SH_P2WPKH):
        versions.add(spec.p2sh_version)
    return payload[0] in versions
