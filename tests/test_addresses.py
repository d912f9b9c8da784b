import base58
import pytest

from seedvault.chains import (
    FAMILY_EVM,
    FORMAT_P2PKH,
    FORMAT_P2SH_P2WPKH,
    FORMAT_P2WPKH,
    get_chain,
    get_chain_by_id,
    is_supported_chain,
    list_chains,
)
from seedvault.errors import InvalidPrivateKey, UnsupportedAddressFormat, UnsupportedChain
from seedvault.wallet.addresses import encode_address, validate_address
from seedvault.wallet.encoding import XRP_ALPHABET, base58check_decode, double_sha256, hash160, segwit_decode
from seedvault.wallet.keys import derive_keypair, encode_wif, keypair_from_private_key
from seedvault.wallet.mnemonic import generate_mnemonic, mnemonic_to_seed

from conftest import ABANDON_MNEMONIC

ONE = "00" * 31 + "01"
ONE_HASH160 = bytes.fromhex("751e76e8199196d454941c45d1b3a323f1433bd6")
ONE_EVM = "0x7e5f4552091a69125d5dfcb7b8c2659029395bdf"


@pytest.fixture(scope="module")
def abandon_seed():
    return mnemonic_to_seed(ABANDON_MNEMONIC)


@pytest.fixture(scope="module")
def key_one():
    return keypair_from_private_key(ONE)


# ============================================
# Known vectors
# ============================================

def test_evm_address_from_mnemonic(abandon_seed):
    keypair = derive_keypair(abandon_seed, "ethereum")
    assert keypair.path == "m/44'/60'/0'/0/0"
    assert encode_address(keypair, "ethereum") == "0x9858effd232b4033e47d90003d41ec34ecaeda94"


def test_evm_chains_share_one_address(abandon_seed):
    addresses = {
        encode_address(derive_keypair(abandon_seed, spec), spec)
        for spec in list_chains(FAMILY_EVM)
    }
    assert addresses == {"0x9858effd232b4033e47d90003d41ec34ecaeda94"}


def test_bitcoin_native_segwit_from_mnemonic(abandon_seed):
    keypair = derive_keypair(abandon_seed, "bitcoin")
    assert encode_address(keypair, "bitcoin") == "bc1qcr8te4kr609gcawutmrza0j4xv80jy8z306fyu"


def test_private_key_one_vectors(key_one):
    assert key_one.compressed_public_key.hex() == (
        "0279be667ef9dcbbac55a06295ce870b07029bfcdb2dce28d959f2815b16f81798"
    )
    assert encode_address(key_one, "ethereum") == ONE_EVM
    assert encode_address(key_one, "bitcoin", FORMAT_P2PKH) == "1BgGZ9tcN4rm9KBzDn7KprQz87SZ26SAMH"
    assert encode_address(key_one, "bitcoin", FORMAT_P2WPKH) == "bc1qw508d6qejxtdg4y5r3zarvary0c5xw7kv8f3t4"


def test_wif_export(key_one):
    assert encode_wif(key_one.private_key, "bitcoin") == "KwDiBf89QgGbjEhKnhXJuH7LrciVrZi3qYjgd9M7rFU73sVHnoWn"
    assert encode_wif(key_one.private_key, "bitcoin", compressed=False) == (
        "5HpHagT65TZzG1PH3CSu63k8DbpvD8s5ip4nEB3kEsreAnchuDf"
    )
    with pytest.raises(UnsupportedChain):
        encode_wif(key_one.private_key, "ethereum")


# ============================================
# Structure of the other families
# ============================================

def test_p2sh_p2wpkh_wraps_witness_program(key_one):
    address = encode_address(key_one, "bitcoin", FORMAT_P2SH_P2WPKH)
    assert address.startswith("3")
    payload = base58check_decode(address)
    assert payload[0] == 0x05
    assert payload[1:] == hash160(b"\x00\x14" + ONE_HASH160)


def test_dogecoin_is_legacy_only(key_one):
    address = encode_address(key_one, "dogecoin")
    assert address.startswith("D")
    assert base58check_decode(address) == bytes([0x1E]) + ONE_HASH160

    for fmt in (FORMAT_P2WPKH, FORMAT_P2SH_P2WPKH):
        with pytest.raises(UnsupportedAddressFormat):
            encode_address(key_one, "dogecoin", fmt)


def test_litecoin_formats(key_one):
    legacy = encode_address(key_one, "litecoin", FORMAT_P2PKH)
    assert legacy.startswith("L")
    assert base58check_decode(legacy) == bytes([0x30]) + ONE_HASH160

    segwit = encode_address(key_one, "litecoin")
    assert segwit.startswith("ltc1q")
    assert segwit_decode("ltc", segwit) == (0, ONE_HASH160)


def test_tron_uses_evm_account_id(key_one):
    address = encode_address(key_one, "tron")
    assert address.startswith("T")
    assert base58check_decode(address) == bytes([0x41]) + bytes.fromhex(ONE_EVM[2:])


def test_xrp_uses_its_own_alphabet(key_one):
    address = encode_address(key_one, "xrp")
    assert address.startswith("r")
    assert base58check_decode(address, XRP_ALPHABET) == bytes([0x00]) + ONE_HASH160


def test_scenario_a_reproducible_from_mnemonic():
    phrase = generate_mnemonic()

    def addresses(p):
        seed = mnemonic_to_seed(p)
        return (
            encode_address(derive_keypair(seed, "ethereum"), "ethereum"),
            encode_address(derive_keypair(seed, "dogecoin"), "dogecoin"),
        )

    evm, doge = addresses(phrase)
    assert evm.startswith("0x")
    assert doge.startswith("D")
    assert addresses(phrase) == (evm, doge)


# ============================================
# Errors and validation
# ============================================

def test_unknown_chain():
    with pytest.raises(UnsupportedChain):
        get_chain("solana")
    assert get_chain("ETHEREUM").name == "ethereum"
    assert not is_supported_chain("solana")
    assert get_chain_by_id(137).name == "polygon"
    assert get_chain_by_id(999999) is None


def test_base58check_checksum_is_double_sha256(key_one):
    address = encode_address(key_one, "bitcoin", FORMAT_P2PKH)
    raw = base58.b58decode(address)
    assert raw[-4:] == double_sha256(raw[:-4])[:4]


@pytest.mark.parametrize("bad", ["zz" * 32, "00" * 32, "01" * 31, "ff" * 32])
def test_invalid_private_keys(bad):
    with pytest.raises(InvalidPrivateKey):
        keypair_from_private_key(bad)


def test_private_key_accepts_0x_prefix(key_one):
    assert keypair_from_private_key("0x" + ONE).public_key == key_one.public_key


def test_keypair_repr_hides_private_key(key_one):
    assert ONE not in repr(key_one)


@pytest.mark.parametrize("chain", [c.name for c in list_chains()])
def test_encoded_addresses_validate(key_one, chain):
    spec = get_chain(chain)
    for fmt in spec.address_formats:
        assert validate_address(encode_address(key_one, spec, fmt), spec)


def test_validate_address_rejects_foreign_addresses(key_one):
    btc = encode_address(key_one, "bitcoin", FORMAT_P2PKH)
    assert not validate_address(btc, "dogecoin")
    assert not validate_address(btc[:-1] + ("1" if btc[-1] != "1" else "2"), "bitcoin")
    assert not validate_address("0x1234", "ethereum")
    assert not validate_address("", "xrp")
