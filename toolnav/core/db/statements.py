"""
Prepared statement registry.

Every recurring query shape is declared here once, by name. ``initialize()``
compiles each statement against the open connection so schema drift fails
at startup rather than on the first request; afterwards executions hit the
connection's statement cache, which is sized above the registry.
"""

import logging
import sqlite3
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Sequence

from toolnav.core.errors import StatementsNotInitializedError

from .constants import BM25_WEIGHTS

if TYPE_CHECKING:
    from .connection import DatabaseConnection

logger = logging.getLogger(__name__)


BM25_CALL = f"bm25(tools_fts, {', '.join(str(w) for w in BM25_WEIGHTS)})"

ACTIVE_TOOL_COLUMNS = """
    id, legacy_id, name, description, logo, url, category_id,
    category_legacy_id, category_name, is_featured, is_new, view_count,
    added_date, created_at, updated_at, tags
"""

STATEMENTS: Dict[str, str] = {
    # Tools
    "get_active_tools": f"""
        SELECT {ACTIVE_TOOL_COLUMNS}
        FROM v_active_tools
        ORDER BY view_count DESC
    """,
    "get_tool_id_by_legacy_id": """
        SELECT id FROM tools WHERE legacy_id = ? AND is_deleted = 0
    """,
    "get_tool_by_id": f"""
        SELECT {ACTIVE_TOOL_COLUMNS} FROM v_active_tools WHERE id = ?
    """,
    "get_tool_by_legacy_id": f"""
        SELECT {ACTIVE_TOOL_COLUMNS} FROM v_active_tools WHERE legacy_id = ?
    """,
    "get_max_tool_legacy_id": """
        SELECT MAX(legacy_id) FROM tools
    """,
    "insert_tool": """
        INSERT INTO tools (
            legacy_id, name, description, logo, url, category_id,
            is_featured, is_new, added_date
        ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, datetime('now'))
    """,
    "increment_view_count": """
        UPDATE tools SET view_count = view_count + 1
        WHERE id = ? AND is_deleted = 0
    """,
    "raise_view_count": """
        UPDATE tools SET view_count = MAX(view_count, ?)
        WHERE legacy_id = ? AND is_deleted = 0
    """,
    "soft_delete_tool": """
        UPDATE tools SET is_deleted = 1, updated_at = CURRENT_TIMESTAMP
        WHERE id = ? AND is_deleted = 0
    """,
    # Categories
    "get_active_categories": """
        SELECT id, legacy_id, name, icon, display_order, tool_count
        FROM v_category_stats
        ORDER BY display_order
    """,
    "get_category_id_by_legacy_id": """
        SELECT id FROM categories WHERE legacy_id = ? AND is_deleted = 0
    """,
    "update_category_order": """
        UPDATE categories
        SET display_order = ?, updated_at = CURRENT_TIMESTAMP
        WHERE legacy_id = ? AND is_deleted = 0
    """,
    # Site
    "get_site_config": """
        SELECT site_name, description FROM site_config WHERE id = 1
    """,
    "get_site_keywords": """
        SELECT keyword FROM site_keywords ORDER BY id
    """,
    # Tags
    "get_tool_tags_by_id": """
        SELECT tg.id, tg.name
        FROM tags tg
        JOIN tool_tags tt ON tg.id = tt.tag_id
        WHERE tt.tool_id = ?
        ORDER BY tg.name
    """,
    "get_tag_by_name": """
        SELECT id FROM tags WHERE name = ? COLLATE NOCASE
    """,
    "insert_tag": """
        INSERT INTO tags (name) VALUES (?)
    """,
    "insert_tool_tag": """
        INSERT OR IGNORE INTO tool_tags (tool_id, tag_id) VALUES (?, ?)
    """,
    "delete_tool_tag": """
        DELETE FROM tool_tags WHERE tool_id = ? AND tag_id = ?
    """,
    "get_all_tags": """
        SELECT id, name FROM tags ORDER BY name
    """,
    # Full-text search
    "search_tools": f"""
        SELECT
            t.id, t.legacy_id, t.name, t.description, t.logo, t.url,
            t.category_id, t.category_legacy_id, t.category_name,
            t.is_featured, t.is_new, t.view_count, t.added_date,
            t.created_at, t.updated_at, t.tags
        FROM tools_fts fts
        JOIN v_active_tools t ON fts.rowid = t.id
        WHERE tools_fts MATCH ?
        ORDER BY {BM25_CALL}
        LIMIT ?
    """,
}


class PreparedStatements:
    """
    Named, pre-compiled statements bound to one connection.

    Statements carry no state beyond their bound parameters, so callers may
    interleave executions freely; SQLite serializes the writers.
    """

    def __init__(self, conn: "DatabaseConnection", statements: Optional[Dict[str, str]] = None):
        self._conn = conn
        self._sql: Dict[str, str] = dict(statements if statements is not None else STATEMENTS)
        self._initialized = False

    @property
    def initialized(self) -> bool:
        return self._initialized

    @property
    def names(self) -> List[str]:
        return sorted(self._sql)

    def initialize(self) -> None:
        """
        Compile every statement once against the current schema.

        Safe to call repeatedly; later calls are no-ops.

        Raises
        ------
        sqlite3.OperationalError
            If a statement references a missing table or column
        """
        if self._initialized:
            logger.debug("Prepared statements already initialized, skipping")
            return

        for name, sql in self._sql.items():
            placeholders = sql.count("?")
            try:
                # EXPLAIN compiles without running the statement
                self._conn.execute(f"EXPLAIN {sql}", (None,) * placeholders).fetchall()
            except sqlite3.Error:
                logger.error("Failed to prepare statement %s", name)
                raise

        self._initialized = True
        logger.info("Prepared %d statements", len(self._sql))

    def get(self, name: str) -> str:
        """
        Return the SQL for a registered statement.

        Raises
        ------
        StatementsNotInitializedError
            Before ``initialize()`` completed, or for an unknown name
        """
        if not self._initialized:
            raise StatementsNotInitializedError(
                f"Prepared statement {name} used before initialization"
            )
        try:
            return self._sql[name]
        except KeyError:
            raise StatementsNotInitializedError(
                f"Prepared statement {name} is not registered"
            ) from None

    def execute(self, name: str, params: Sequence[Any] = ()) -> sqlite3.Cursor:
        return self._conn.execute(self.get(name), tuple(params))

    def fetchone(self, name: str, params: Sequence[Any] = ()) -> Optional[sqlite3.Row]:
        return self.execute(name, params).fetchone()

    def fetchall(self, name: str, params: Sequence[Any] = ()) -> List[sqlite3.Row]:
        return self.execute(name, params).fetchall()

    def run(self, name: str, params: Sequence[Any] = ()) -> int:
        """Execute a write statement and return the number of rows changed."""
        return self.execute(name, params).rowcount
