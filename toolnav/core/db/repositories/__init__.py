"""
Repository classes for database operations.

Each repository handles operations for a specific domain entity.
"""

from .base import BaseRepository
from .category import CategoryRepository
from .migration_log import MigrationLogRepository
from .site import SiteRepository
from .tag import TagRepository
from .tool import ToolRepository

__all__ = [
    "BaseRepository",
    "CategoryRepository",
    "MigrationLogRepository",
    "SiteRepository",
    "TagRepository",
    "ToolRepository",
]
