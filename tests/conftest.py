import pytest

from seedvault.models import VaultStore, WalletRecord
from seedvault.wallet.crypto import EnvelopeCipher, KdfParams

ABANDON_MNEMONIC = "abandon abandon abandon abandon abandon abandon abandon abandon abandon abandon abandon about"
TOKEN_SECRET = "test-secret-" + "0" * 40


class FakeClock:
    """Manually advanced clock for TTL and token tests."""

    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture(autouse=True)
def isolated_home(tmp_path, monkeypatch):
    """Keep every test away from the real ~/.seedvault."""
    home = tmp_path / "home"
    monkeypatch.setenv("SEEDVAULT_HOME", str(home))
    for key in ("SEEDVAULT_TOKEN_SECRET", "SEEDVAULT_LOG_LEVEL", "SEEDVAULT_DATA_DIR"):
        monkeypatch.delenv(key, raising=False)
    return home


@pytest.fixture
def kdf():
    """Argon2id parameters cheap enough for tests."""
    return KdfParams(time_cost=1, memory_cost=1024, parallelism=1)


@pytest.fixture
def cipher(kdf):
    return EnvelopeCipher(kdf)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store(tmp_path):
    return VaultStore(tmp_path / "vault" / "vault.json")


@pytest.fixture
def make_record(cipher, kdf):
    """Build a sealed record for an arbitrary address."""

    def _make(address, password="Correct1", private_key="11" * 32, mnemonic=None,
              created_at="2026-01-01T00:00:00+00:00", chain="ethereum", **kwargs):
        return WalletRecord(
            address=address,
            encrypted_private_key=cipher.seal(private_key, password).serialize(),
            encrypted_mnemonic=cipher.seal(mnemonic, password).serialize() if mnemonic else None,
            primary_chain=chain,
            created_at=created_at,
            kdf=kdf.to_dict(),
            **kwargs,
        )

    return _make
