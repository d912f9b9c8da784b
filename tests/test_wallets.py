import pytest

from seedvault.errors import (
    AlreadyExists,
    InvalidMnemonic,
    InvalidPassword,
    InvalidPrivateKey,
    NotFound,
    RecordChanged,
    UnsupportedAddressFormat,
    WrongPassword,
)
from seedvault.services.auth import open_record
from seedvault.services.wallets import WalletService

from conftest import ABANDON_MNEMONIC

EVM_ADDRESS = "0x9858effd232b4033e47d90003d41ec34ecaeda94"
KEY_ONE = "00" * 31 + "01"


@pytest.fixture
def service(store, kdf):
    return WalletService(store, kdf)


def test_import_mnemonic(service, store):
    info = service.import_wallet("Correct1", "ethereum", mnemonic=ABANDON_MNEMONIC)
    assert info.address == EVM_ADDRESS
    assert info.is_imported
    assert info.is_primary
    assert info.has_mnemonic

    _, mnemonic = open_record(store.load(EVM_ADDRESS), "Correct1")
    assert mnemonic == ABANDON_MNEMONIC


def test_import_private_key_has_no_mnemonic(service, store):
    info = service.import_wallet("Correct1", "bitcoin", private_key=KEY_ONE)
    assert info.address == "bc1qw508d6qejxtdg4y5r3zarvary0c5xw7kv8f3t4"
    assert not info.has_mnemonic

    private_key, mnemonic = open_record(store.load(info.address), "Correct1")
    assert private_key == KEY_ONE
    assert mnemonic is None


def test_import_with_address_format(service):
    info = service.import_wallet("Correct1", "bitcoin", private_key=KEY_ONE, address_format="p2pkh")
    assert info.address == "1BgGZ9tcN4rm9KBzDn7KprQz87SZ26SAMH"
    with pytest.raises(UnsupportedAddressFormat):
        service.import_wallet("Correct1", "dogecoin", private_key=KEY_ONE, address_format="p2wpkh")


def test_import_requires_exactly_one_secret(service):
    with pytest.raises(ValueError):
        service.import_wallet("Correct1", "ethereum")
    with pytest.raises(ValueError):
        service.import_wallet("Correct1", "ethereum", mnemonic=ABANDON_MNEMONIC, private_key=KEY_ONE)


def test_import_validation(service):
    with pytest.raises(InvalidPassword):
        service.import_wallet("short", "ethereum", mnemonic=ABANDON_MNEMONIC)
    with pytest.raises(InvalidMnemonic):
        service.import_wallet("Correct1", "ethereum", mnemonic="abandon " * 11 + "abandon")
    with pytest.raises(InvalidPrivateKey):
        service.import_wallet("Correct1", "ethereum", private_key="xyz")


def test_reimport_conflicts_unless_overwrite(service, store):
    service.import_wallet("Correct1", "ethereum", mnemonic=ABANDON_MNEMONIC)
    assert service.is_protected(EVM_ADDRESS)

    with pytest.raises(AlreadyExists):
        service.import_wallet("Other123", "ethereum", mnemonic=ABANDON_MNEMONIC)

    service.import_wallet("Other123", "ethereum", mnemonic=ABANDON_MNEMONIC, overwrite=True)
    with pytest.raises(WrongPassword):
        open_record(store.load(EVM_ADDRESS), "Correct1")
    open_record(store.load(EVM_ADDRESS), "Other123")


def test_change_password(service, store):
    service.import_wallet("Correct1", "ethereum", mnemonic=ABANDON_MNEMONIC)
    before = store.load(EVM_ADDRESS)

    with pytest.raises(WrongPassword):
        service.change_password(EVM_ADDRESS, "Wrong1", "Newpass1")
    with pytest.raises(InvalidPassword):
        service.change_password(EVM_ADDRESS, "Correct1", "weak")

    service.change_password(EVM_ADDRESS, "Correct1", "Newpass1")
    after = store.load(EVM_ADDRESS)
    assert after.encrypted_mnemonic != before.encrypted_mnemonic
    assert after.created_at == before.created_at
    assert after.is_primary

    with pytest.raises(WrongPassword):
        open_record(after, "Correct1")
    assert open_record(after, "Newpass1")[1] == ABANDON_MNEMONIC


def test_wallet_info_and_delete(service, store):
    service.import_wallet("Correct1", "ethereum", mnemonic=ABANDON_MNEMONIC)
    assert service.get_wallet_info(EVM_ADDRESS).primary_chain == "ethereum"

    with pytest.raises(WrongPassword):
        service.delete_wallet(EVM_ADDRESS, "Wrong1")
    assert store.exists(EVM_ADDRESS)

    assert service.delete_wallet(EVM_ADDRESS, "Correct1")
    assert not service.is_protected(EVM_ADDRESS)
    with pytest.raises(NotFound):
        service.get_wallet_info(EVM_ADDRESS)
    with pytest.raises(NotFound):
        service.delete_wallet(EVM_ADDRESS, "Correct1")


def test_set_primary(service):
    first = service.import_wallet("Correct1", "ethereum", mnemonic=ABANDON_MNEMONIC)
    second = service.import_wallet("Correct1", "xrp", private_key=KEY_ONE)
    assert first.is_primary and not second.is_primary

    service.set_primary(second.address)
    wallets = service.list_wallets()
    assert wallets[0].address == second.address
    assert [w.is_primary for w in wallets] == [True, False]


def during_seal(monkeypatch, service, action):
    """Run action once, while change_password is sealing the new envelopes."""
    original = service.cipher.seal
    pending = [action]

    def seal(secret, password):
        if pending:
            pending.pop()()
        return original(secret, password)

    monkeypatch.setattr(service.cipher, "seal", seal)


def test_change_password_does_not_resurrect_removed_wallet(service, store, monkeypatch):
    service.import_wallet("Correct1", "ethereum", mnemonic=ABANDON_MNEMONIC)
    during_seal(monkeypatch, service, lambda: store.remove(EVM_ADDRESS))

    with pytest.raises(NotFound):
        service.change_password(EVM_ADDRESS, "Correct1", "Newpass1")
    assert not store.exists(EVM_ADDRESS)


def test_change_password_keeps_concurrent_metadata(service, store, monkeypatch):
    service.import_wallet("Correct1", "ethereum", mnemonic=ABANDON_MNEMONIC)
    other = service.import_wallet("Correct1", "xrp", private_key=KEY_ONE)

    def touch():
        store.update_access_metadata(EVM_ADDRESS)
        store.set_primary(other.address)

    during_seal(monkeypatch, service, touch)
    info = service.change_password(EVM_ADDRESS, "Correct1", "Newpass1")

    assert info.access_count == 1
    assert not info.is_primary
    assert service.get_wallet_info(other.address).is_primary
    assert open_record(store.load(EVM_ADDRESS), "Newpass1")[1] == ABANDON_MNEMONIC


def test_change_password_loses_to_concurrent_rekey(service, store, monkeypatch, make_record):
    service.import_wallet("Correct1", "ethereum", mnemonic=ABANDON_MNEMONIC)
    replacement = make_record(EVM_ADDRESS, password="Other123")
    during_seal(monkeypatch, service, lambda: store.save(replacement, overwrite=True))

    with pytest.raises(RecordChanged):
        service.change_password(EVM_ADDRESS, "Correct1", "Newpass1")
    assert store.load(EVM_ADDRESS).encrypted_private_key == replacement.encrypted_private_key


def test_delete_aborts_if_rekeyed_after_password_check(service, store, monkeypatch, make_record):
    service.import_wallet("Correct1", "ethereum", mnemonic=ABANDON_MNEMONIC)
    replacement = make_record(EVM_ADDRESS, password="Other123")

    def open_then_rekey(record, password):
        opened = open_record(record, password)
        store.save(replacement, overwrite=True)
        return opened

    monkeypatch.setattr("seedvault.services.wallets.open_record", open_then_rekey)
    with pytest.raises(RecordChanged):
        service.delete_wallet(EVM_ADDRESS, "Correct1")
    assert store.load(EVM_ADDRESS).encrypted_private_key == replacement.encrypted_private_key
