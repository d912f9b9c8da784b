"""
SeedVault - Multi-chain wallet vault.

Custodies BIP-39 seed phrases and per-chain keys for a single user
under one password. Nothing unencrypted is ever written to disk.
"""

from .app import VaultContext, build_context
from .config import Settings, load_settings
from .errors import VaultError

__version__ = "0.1.0"

__all__ = [
    "VaultContext",
    "build_context",
    "Settings",
    "load_settings",
    "VaultError",
    "__version__",
]
