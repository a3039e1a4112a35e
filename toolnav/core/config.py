"""
Configuration for the tool directory.

Settings come from environment variables; CLI options override them.
"""

import os
import sys
from dataclasses import dataclass
from pathlib import Path

# Busy-retry defaults: 5 retries, 100ms base delay doubling per attempt
DEFAULT_MAX_RETRIES = 5
DEFAULT_RETRY_DELAY = 0.1

DEFAULT_CACHE_TTL_SECONDS = 60.0

DB_FILENAME = "ai_tools.db"


def get_default_db_path() -> Path:
    """
    Get the default database location for this OS.

    Returns
    -------
    Path
        Path to the SQLite database file
    """
    if sys.platform == "win32":
        base = Path(os.environ.get("APPDATA", Path.home() / "AppData" / "Roaming"))
    elif sys.platform == "darwin":
        base = Path.home() / "Library" / "Application Support"
    else:
        base = Path(os.environ.get("XDG_DATA_HOME", Path.home() / ".local" / "share"))
    return base / "toolnav" / DB_FILENAME


@dataclass
class Settings:
    # Storage
    db_path: str = ""

    # Busy retry
    max_retries: int = DEFAULT_MAX_RETRIES
    retry_delay: float = DEFAULT_RETRY_DELAY

    # Response cache
    cache_ttl: float = DEFAULT_CACHE_TTL_SECONDS

    log_level: str = "INFO"


def load_settings() -> Settings:
    """Build settings from TOOLNAV_* environment variables."""
    db_path = os.getenv("TOOLNAV_DB_PATH") or str(get_default_db_path())

    try:
        max_retries = int(os.getenv("TOOLNAV_RETRY_MAX", DEFAULT_MAX_RETRIES))
        retry_delay = float(
            os.getenv("TOOLNAV_RETRY_DELAY_MS", DEFAULT_RETRY_DELAY * 1000)
        ) / 1000
        cache_ttl = float(os.getenv("TOOLNAV_CACHE_TTL", DEFAULT_CACHE_TTL_SECONDS))
    except ValueError as exc:
        raise ValueError(f"Invalid configuration: {exc}") from exc

    return Settings(
        db_path=db_path,
        max_retries=max(0, max_retries),
        retry_delay=max(0.0, retry_delay),
        cache_ttl=cache_ttl,
        log_level=os.getenv("TOOLNAV_LOG_LEVEL", "INFO").upper(),
    )
