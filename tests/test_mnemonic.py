import pytest

from seedvault.errors import InvalidMnemonic
from seedvault.wallet.mnemonic import (
    generate_mnemonic,
    is_valid_mnemonic,
    mnemonic_to_seed,
    normalize_mnemonic,
    validate_mnemonic,
)

from conftest import ABANDON_MNEMONIC


@pytest.mark.parametrize("count", [12, 24])
def test_generate_mnemonic_word_counts(count):
    phrase = generate_mnemonic(count)
    assert len(phrase.split()) == count
    assert is_valid_mnemonic(phrase)


def test_generate_mnemonic_is_random():
    assert generate_mnemonic() != generate_mnemonic()


def test_generate_mnemonic_rejects_other_counts():
    with pytest.raises(InvalidMnemonic):
        generate_mnemonic(15)


def test_validate_normalizes_case_and_whitespace():
    messy = "  " + ABANDON_MNEMONIC.upper().replace(" ", " \t ") + "\n"
    assert validate_mnemonic(messy) == ABANDON_MNEMONIC
    assert normalize_mnemonic(messy) == ABANDON_MNEMONIC


def test_validate_rejects_bad_checksum():
    bad = " ".join(["abandon"] * 12)
    with pytest.raises(InvalidMnemonic):
        validate_mnemonic(bad)
    assert not is_valid_mnemonic(bad)


def test_validate_rejects_wrong_word_count():
    with pytest.raises(InvalidMnemonic, match="12 or 24"):
        validate_mnemonic("abandon abandon about")


def test_validate_rejects_unknown_word():
    words = ABANDON_MNEMONIC.split()
    words[0] = "notaword"
    assert not is_valid_mnemonic(" ".join(words))


def test_seed_is_deterministic_and_64_bytes():
    seed = mnemonic_to_seed(ABANDON_MNEMONIC)
    assert len(seed) == 64
    assert seed == mnemonic_to_seed(ABANDON_MNEMONIC.upper())
    # BIP-39 reference seed for this phrase with an empty passphrase
    assert seed.hex().startswith("5eb00bbddcf069084889a8ab9155568165f5c453ccb85e70811aaed6f6da5fc1")
