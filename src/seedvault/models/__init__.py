"""
Models package - Persistent data for SeedVault.

Contains:
- WalletRecord: Sealed secrets plus metadata, one per address
- WalletInfo: Secret-free metadata view
- VaultStore: JSON persistence with the single-primary invariant
"""

from .record import WalletRecord, WalletInfo, normalize_address
from .store import VaultStore, VAULT_VERSION

__all__ = [
    "WalletRecord",
    "WalletInfo",
    "normalize_address",
    "VaultStore",
    "VAULT_VERSION",
]
