"""
Database module for the tool directory.

Provides an SQLite store with prepared statements, busy retries, and FTS5
full-text search, using a repository pattern architecture.
"""

from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Tuple, TypeVar

from toolnav.core.config import DEFAULT_MAX_RETRIES, DEFAULT_RETRY_DELAY, Settings
from toolnav.core.models import CreatedTool, ToolCreate, ToolUpdate

from .connection import DatabaseConnection
from .constants import DEFAULT_SEARCH_LIMIT
from .repositories.category import CategoryRepository
from .repositories.migration_log import MigrationLogRepository
from .repositories.site import SiteRepository
from .repositories.tag import TagRepository
from .repositories.tool import ToolRepository
from .retry import call_with_retry, is_busy_error, with_retry
from .schema import SchemaManager
from .search.fts import FTSManager
from .search.tools import search_tools
from .statements import PreparedStatements

T = TypeVar("T")


class ToolDatabase:
    """
    Main database facade combining all repositories.

    One instance owns one connection; open it, pass it to whoever needs the
    store, and close it when done. Every public operation is atomic and is
    retried while SQLite reports the database as locked.

    Example
    -------
    >>> db = ToolDatabase("ai_tools.db")
    >>> tool_id = db.resolve_tool_id(12)
    >>> db.increment_view_count(tool_id)
    >>> db.search_tools("chat*")
    >>> db.close()
    """

    def __init__(
        self,
        db_path: Optional[str] = None,
        max_retries: int = DEFAULT_MAX_RETRIES,
        retry_delay: float = DEFAULT_RETRY_DELAY,
    ):
        """
        Open the database, ensure the schema, and prepare statements.

        Parameters
        ----------
        db_path : str, optional
            Path to database file. If None, uses default OS-specific location.
        max_retries : int
            Busy retries per operation
        retry_delay : float
            Seconds before the first busy retry; doubles each retry
        """
        self.max_retries = max_retries
        self.retry_delay = retry_delay

        self.conn = DatabaseConnection(db_path)
        self._schema = SchemaManager(self.conn)
        self._retry(self._schema.ensure)

        self.statements = PreparedStatements(self.conn)
        self.statements.initialize()

        self.fts = FTSManager(self.conn)

        # Repositories
        self.categories = CategoryRepository(self.conn, self.statements)
        self.tags = TagRepository(self.conn, self.statements)
        self.tools = ToolRepository(
            self.conn, self.statements, categories=self.categories, tags=self.tags
        )
        self.site = SiteRepository(self.conn, self.statements)
        self.migration_log = MigrationLogRepository(self.conn, self.statements)

    @classmethod
    def from_settings(cls, settings: Settings) -> "ToolDatabase":
        return cls(
            settings.db_path,
            max_retries=settings.max_retries,
            retry_delay=settings.retry_delay,
        )

    @property
    def db_path(self) -> str:
        return self.conn.db_path

    def close(self):
        """Close the database connection."""
        self.conn.close()

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, *args):
        """Context manager exit."""
        self.close()

    def _retry(self, operation: Callable[..., T], *args: Any) -> T:
        return call_with_retry(
            operation,
            *args,
            max_retries=self.max_retries,
            base_delay=self.retry_delay,
        )

    # --- Tool methods ---
    def list_active_tools(self) -> List[Dict[str, Any]]:
        """Delegate to ToolRepository.list_active()."""
        return self._retry(self.tools.list_active)

    def resolve_tool_id(self, legacy_id: int) -> Optional[int]:
        """Delegate to ToolRepository.resolve_id()."""
        return self._retry(self.tools.resolve_id, legacy_id)

    def get_tool(self, tool_id: int) -> Optional[Dict[str, Any]]:
        """Delegate to ToolRepository.get()."""
        return self._retry(self.tools.get, tool_id)

    def get_tool_by_legacy_id(self, legacy_id: int) -> Optional[Dict[str, Any]]:
        """Delegate to ToolRepository.get_by_legacy_id()."""
        return self._retry(self.tools.get_by_legacy_id, legacy_id)

    def increment_view_count(self, tool_id: int) -> int:
        """Delegate to ToolRepository.increment_view_count()."""
        return self._retry(self.tools.increment_view_count, tool_id)

    def soft_delete_tool(self, tool_id: int) -> int:
        """Delegate to ToolRepository.soft_delete()."""
        return self._retry(self.tools.soft_delete, tool_id)

    def update_tool(self, tool_id: int, data: ToolUpdate) -> int:
        """Delegate to ToolRepository.update()."""
        return self._retry(self.tools.update, tool_id, data)

    def create_tool(self, data: ToolCreate) -> CreatedTool:
        """Delegate to ToolRepository.create()."""
        return self._retry(self.tools.create, data)

    def sync_view_counts(self, counts: Mapping[int, int]) -> int:
        """Delegate to ToolRepository.sync_view_counts()."""
        return self._retry(self.tools.sync_view_counts, counts)

    # --- Category methods ---
    def list_active_categories(self) -> List[Dict[str, Any]]:
        """Delegate to CategoryRepository.list_active()."""
        return self._retry(self.categories.list_active)

    def resolve_category_id(self, legacy_id: int) -> Optional[int]:
        """Delegate to CategoryRepository.resolve_id()."""
        return self._retry(self.categories.resolve_id, legacy_id)

    def reorder_categories(self, orders: Iterable[Tuple[int, int]]) -> int:
        """Delegate to CategoryRepository.reorder()."""
        # Materialize so a retry replays the same pairs
        return self._retry(self.categories.reorder, list(orders))

    # --- Tag methods ---
    def add_tag(self, tool_id: int, name: str) -> int:
        """Delegate to TagRepository.add()."""
        return self._retry(self.tags.add, tool_id, name)

    def remove_tag(self, tool_id: int, tag_id: int) -> int:
        """Delegate to TagRepository.remove()."""
        return self._retry(self.tags.remove, tool_id, tag_id)

    def get_tool_tags(self, tool_id: int) -> List[Dict[str, Any]]:
        """Delegate to TagRepository.get_for_tool()."""
        return self._retry(self.tags.get_for_tool, tool_id)

    def list_tags(self) -> List[Dict[str, Any]]:
        """Delegate to TagRepository.get_all()."""
        return self._retry(self.tags.get_all)

    # --- Site methods ---
    def get_site_config(self) -> Dict[str, Any]:
        """Delegate to SiteRepository.get_config()."""
        return self._retry(self.site.get_config)

    # --- Search methods ---
    def search_tools(self, query: str, limit: int = DEFAULT_SEARCH_LIMIT) -> List[Dict[str, Any]]:
        """Delegate to search_tools function."""
        if not query or not query.strip():
            return []
        return self._retry(search_tools, self.statements, query, limit)

    # --- FTS methods ---
    def rebuild_search_index(self) -> int:
        """Delegate to FTSManager.rebuild()."""
        return self._retry(self.fts.rebuild)

    def verify_search_index(self) -> Dict[str, int]:
        """Delegate to FTSManager.verify()."""
        return self._retry(self.fts.verify)


__all__ = [
    # Main facade
    "ToolDatabase",
    # Connection/Schema
    "DatabaseConnection",
    "SchemaManager",
    "PreparedStatements",
    # Retry
    "call_with_retry",
    "with_retry",
    "is_busy_error",
    # Repositories
    "ToolRepository",
    "CategoryRepository",
    "TagRepository",
    "SiteRepository",
    "MigrationLogRepository",
    # Search
    "FTSManager",
    "search_tools",
]
