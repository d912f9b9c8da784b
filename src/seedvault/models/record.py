"""
Wallet records - what the vault stores per address.

WalletRecord holds the two sealed secrets plus metadata. WalletInfo is
the secret-free view handed to listing and info callers.
"""

from dataclasses import dataclass, asdict, field
from typing import Optional

from ..utils import format_address, utc_now_iso


def normalize_address(address: str) -> str:
    """Vault key for an address. Hex (EVM) addresses are case-insensitive."""
    address = address.strip()
    if address[:2].lower() == "0x":
        return address.lower()
    return address


@dataclass
class WalletRecord:
    """One protected wallet. Both secrets are serialized envelopes."""
    address: str
    encrypted_private_key: str
    primary_chain: str
    encrypted_mnemonic: Optional[str] = None   # None for bare private key imports
    created_at: str = field(default_factory=utc_now_iso)
    last_access: Optional[str] = None
    access_count: int = 0
    is_imported: bool = False
    is_primary: bool = False
    kdf: dict = field(default_factory=dict)    # KdfParams.to_dict() used to seal

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "WalletRecord":
        return cls(
            address=data["address"],
            encrypted_private_key=data["encrypted_private_key"],
            primary_chain=data["primary_chain"],
            encrypted_mnemonic=data.get("encrypted_mnemonic"),
            created_at=data.get("created_at") or utc_now_iso(),
            last_access=data.get("last_access"),
            access_count=int(data.get("access_count", 0)),
            is_imported=bool(data.get("is_imported", False)),
            is_primary=bool(data.get("is_primary", False)),
            kdf=dict(data.get("kdf") or {}),
        )

    @property
    def has_mnemonic(self) -> bool:
        return self.encrypted_mnemonic is not None

    def info(self) -> "WalletInfo":
        return WalletInfo(
            address=self.address,
            primary_chain=self.primary_chain,
            created_at=self.created_at,
            last_access=self.last_access,
            access_count=self.access_count,
            is_imported=self.is_imported,
            is_primary=self.is_primary,
            has_mnemonic=self.has_mnemonic,
        )


@dataclass
class WalletInfo:
    """Metadata about a wallet (never contains secrets)."""
    address: str
    primary_chain: str
    created_at: str
    last_access: Optional[str] = None
    access_count: int = 0
    is_imported: bool = False
    is_primary: bool = False
    has_mnemonic: bool = True

    def to_dict(self) -> dict:
        return asdict(self)

    def display_label(self) -> str:
        """Format for display: * 0x1234...5678 (ethereum)"""
        marker = "*" if self.is_primary else " "
        return f"{marker} {format_address(self.address)} ({self.primary_chain})"
