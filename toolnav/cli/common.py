"""
Shared CLI context and options.
"""
import logging
from pathlib import Path
from typing import Optional

import click

from toolnav.core.config import Settings, load_settings
from toolnav.core.db import ToolDatabase

logger = logging.getLogger(__name__)


class CLIContext:
    """State passed between the group and its commands via ``ctx.obj``."""

    def __init__(self, settings: Settings, verbose: bool = False):
        self.settings = settings
        self.verbose = verbose
        self._db: Optional[ToolDatabase] = None

    @property
    def db_path(self) -> Path:
        return Path(self.settings.db_path)

    @db_path.setter
    def db_path(self, value) -> None:
        if self._db is not None:
            self.close()
        self.settings.db_path = str(value)

    def get_db(self) -> ToolDatabase:
        """Open the database on first use."""
        if self._db is None:
            logger.debug("Opening database at %s", self.settings.db_path)
            self._db = ToolDatabase.from_settings(self.settings)
        return self._db

    def close(self) -> None:
        if self._db is not None:
            self._db.close()
            self._db = None


def db_option(f):
    """Per-command ``--db-path`` override."""
    return click.option(
        '--db-path',
        type=click.Path(),
        help='Path to database file (default: OS-specific location)'
    )(f)


def load_cli_settings() -> Settings:
    try:
        return load_settings()
    except ValueError as e:
        raise click.UsageError(str(e))
