"""
Shared utility functions for SeedVault.

Contains path helpers and common utilities used across packages.
"""

import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional


# Secure file permissions (Unix only)
SECURE_FILE_MODE = 0o600  # Owner read/write only


def get_app_dir() -> Path:
    """Get the application data directory (SEEDVAULT_HOME or ~/.seedvault)."""
    home = os.environ.get("SEEDVAULT_HOME")
    app_dir = Path(home) if home else Path.home() / ".seedvault"
    app_dir.mkdir(parents=True, exist_ok=True)
    return app_dir


def get_settings_path(app_dir: Optional[Path] = None) -> Path:
    """Get path to settings file."""
    return (app_dir or get_app_dir()) / "settings.json"


def get_logs_dir(app_dir: Optional[Path] = None) -> Path:
    """Get the logs directory."""
    logs_dir = (app_dir or get_app_dir()) / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)
    return logs_dir


def set_secure_permissions(filepath: Path) -> None:
    """
    Set restrictive file permissions on Unix systems.

    Sets file to mode 0600 (owner read/write only) to protect vault data.
    No-op on Windows (NTFS uses ACLs, not Unix permissions).
    """
    if os.name == 'posix':
        try:
            os.chmod(filepath, SECURE_FILE_MODE)
        except OSError:
            # Best effort - don't fail save operation if chmod fails
            pass


def utc_now_iso() -> str:
    """Current UTC time as an ISO-8601 string."""
    return datetime.now(timezone.utc).isoformat()


def format_address(address: str, chars: int = 4) -> str:
    """Format address as 0x1234...5678"""
    prefix = 2 if address.startswith("0x") else 0
    if len(address) <= chars * 2 + prefix:
        return address
    return f"{address[:chars + prefix]}...{address[-chars:]}"
