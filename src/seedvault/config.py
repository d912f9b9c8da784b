"""
Settings - runtime configuration for SeedVault.

Values come from (later wins):
- Built-in defaults
- settings.json in the app directory
- SEEDVAULT_* environment variables
"""

import json
import logging
import os
from dataclasses import dataclass, field, fields, asdict
from pathlib import Path
from typing import Optional

from .utils import get_app_dir, get_settings_path

logger = logging.getLogger(__name__)

ENV_PREFIX = "SEEDVAULT_"


@dataclass
class Settings:
    """Application settings."""
    data_dir: str = ""                      # Empty = app dir
    vault_filename: str = "vault.json"

    # Argon2id cost (OWASP high-security defaults)
    kdf_time_cost: int = 3
    kdf_memory_cost: int = 65536            # KiB (64 MB)
    kdf_parallelism: int = 4

    # Pending setup sessions
    setup_ttl_seconds: int = 600            # 10 minutes to confirm the seed phrase
    setup_grace_ttl_seconds: int = 3600     # Deferred seed viewing after save
    sweep_interval_seconds: int = 60

    # Access tokens
    token_ttl_seconds: int = 900
    token_secret: str = field(default="", repr=False)

    # Password-only unlock costs one KDF per wallet
    allow_password_only_unlock: bool = True
    password_only_attempts_per_minute: int = 5

    worker_threads: int = 2

    log_level: str = "INFO"
    log_retention_days: int = 0             # 0 = console only

    @property
    def vault_path(self) -> Path:
        base = Path(self.data_dir) if self.data_dir else get_app_dir()
        return base / self.vault_filename

    def to_dict(self) -> dict:
        data = asdict(self)
        data.pop("token_secret")
        return data


def _coerce(raw, current):
    """Coerce a raw settings value to the type of the default."""
    if isinstance(current, bool):
        if isinstance(raw, bool):
            return raw
        return str(raw).strip().lower() in {"1", "true", "yes", "y", "on"}
    if isinstance(current, int):
        return int(raw)
    return str(raw)


def _apply(settings: Settings, values: dict, source: str) -> None:
    known = {f.name: f for f in fields(Settings)}
    for key, raw in values.items():
        if key not in known:
            logger.warning(f"Ignoring unknown setting '{key}' from {source}")
            continue
        try:
            setattr(settings, key, _coerce(raw, getattr(settings, key)))
        except (TypeError, ValueError):
            logger.warning(f"Invalid value for setting '{key}' from {source}, keeping default")


def load_settings(path: Optional[Path] = None, environ: Optional[dict] = None) -> Settings:
    """
    Load settings from disk and environment.

    Args:
        path: Settings file (default: settings.json in the app dir)
        environ: Environment mapping (default: os.environ)

    A malformed settings file is logged and ignored.
    """
    settings = Settings()
    environ = os.environ if environ is None else environ

    settings_path = Path(path) if path else get_settings_path()
    if settings_path.exists():
        try:
            with open(settings_path, 'r') as f:
                data = json.load(f)
            if isinstance(data, dict):
                _apply(settings, data, str(settings_path))
            else:
                logger.warning(f"Settings file {settings_path} is not an object, ignoring")
        except (json.JSONDecodeError, OSError) as e:
            logger.warning(f"Failed to load settings: {e}")

    env_values = {}
    for f in fields(Settings):
        env_key = ENV_PREFIX + f.name.upper()
        if env_key in environ:
            env_values[f.name] = environ[env_key]
    _apply(settings, env_values, "environment")

    return settings
