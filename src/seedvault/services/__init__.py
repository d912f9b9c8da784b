"""
Services package - Vault operations for SeedVault.

Contains:
- SetupManager: Pending seed phrase confirmation sessions
- Authenticator, TokenIssuer: Unlock and access tokens
- WalletService: Import, password change, delete, primary selection
- CryptoWorkerPool: Background threads for KDF-bound work
"""

from .setup import SetupManager, PendingSetup, DerivedWallet
from .auth import Authenticator, TokenIssuer, UnlockResult, RateLimiter, open_record
from .wallets import WalletService
from .workers import CryptoWorkerPool

__all__ = [
    "SetupManager",
    "PendingSetup",
    "DerivedWallet",
    "Authenticator",
    "TokenIssuer",
    "UnlockResult",
    "RateLimiter",
    "open_record",
    "WalletService",
    "CryptoWorkerPool",
]
