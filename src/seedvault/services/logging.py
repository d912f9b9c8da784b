"""
Logging - Application logging configuration and disk persistence.

Provides:
- Python logging configuration with console and optional file output
- Log persistence to daily files: seedvault-YYYY-MM-DD.log
- Automatic cleanup of old log files
"""

from datetime import datetime, timedelta
from pathlib import Path
from typing import Optional
import logging

from ..utils import get_logs_dir

LOG_FORMAT = '%(asctime)s [%(levelname)s] %(name)s: %(message)s'
LOG_PREFIX = "seedvault-"


def configure_logging(
    level: int | str = logging.INFO,
    retention_days: int = 0,
    logs_dir: Optional[Path] = None
) -> None:
    """
    Configure Python logging for the application.

    Sets up a root logger with console output. When retention_days > 0,
    also writes to today's log file and prunes files older than that.

    Args:
        level: Logging level (default: INFO)
        retention_days: Days of log files to keep (0 = console only)
        logs_dir: Override the logs directory
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    root_logger = logging.getLogger()

    # Only configure if not already configured
    if root_logger.handlers:
        return

    root_logger.setLevel(level)

    # Console handler with simple format
    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt='%H:%M:%S'))
    root_logger.addHandler(console_handler)

    if retention_days > 0:
        file_handler = logging.FileHandler(get_log_file_path(logs_dir=logs_dir), encoding='utf-8')
        file_handler.setLevel(level)
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt='%Y-%m-%d %H:%M:%S'))
        root_logger.addHandler(file_handler)
        cleanup_old_logs(retention_days, logs_dir=logs_dir)


def get_log_file_path(date: Optional[datetime] = None, logs_dir: Optional[Path] = None) -> Path:
    """Get the log file path for a specific date (defaults to today)."""
    if date is None:
        date = datetime.now()
    filename = f"{LOG_PREFIX}{date.strftime('%Y-%m-%d')}.log"
    return (logs_dir or get_logs_dir()) / filename


def cleanup_old_logs(retention_days: int, logs_dir: Optional[Path] = None) -> int:
    """
    Delete log files older than retention_days.

    Args:
        retention_days: Delete files older than this (0 = delete all)

    Returns:
        Number of files deleted
    """
    if retention_days < 0:
        return 0

    logs_dir = logs_dir or get_logs_dir()
    cutoff_date = datetime.now() - timedelta(days=retention_days)
    deleted_count = 0

    for file_path in logs_dir.glob(f"{LOG_PREFIX}*.log"):
        # Parse date from filename
        try:
            date_str = file_path.stem.replace(LOG_PREFIX, "")
            file_date = datetime.strptime(date_str, "%Y-%m-%d")

            if file_date < cutoff_date:
                file_path.unlink()
                deleted_count += 1
        except (ValueError, OSError):
            # Skip files that don't match expected format
            pass

    return deleted_count
