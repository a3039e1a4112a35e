"""
FTS5 index management for tool search.

The index is derived data: triggers keep it current, and it can always be
rebuilt from tools, tags, tool_tags, and categories.
"""

import logging
from typing import TYPE_CHECKING, Dict

from ..schema import FTS_INSERT, FTS_ROW_SELECT

if TYPE_CHECKING:
    from ..connection import DatabaseConnection

logger = logging.getLogger(__name__)


class FTSManager:
    """
    Manages the tools_fts index.

    Handles rebuilding, consistency checks, and optimization of the
    full-text search index.
    """

    def __init__(self, conn: "DatabaseConnection"):
        """
        Initialize FTS manager.

        Parameters
        ----------
        conn : DatabaseConnection
            Database connection
        """
        self._conn = conn

    def rebuild(self) -> int:
        """
        Rebuild the index from all active tools.

        Returns
        -------
        int
            Number of tools indexed
        """
        with self._conn.transaction():
            cursor = self._conn.cursor()
            cursor.execute("DELETE FROM tools_fts")
            cursor.execute(f"{FTS_INSERT} {FTS_ROW_SELECT} WHERE t.is_deleted = 0")
            cursor.execute("SELECT COUNT(*) FROM tools_fts")
            count = cursor.fetchone()[0]

        logger.info("Rebuilt FTS index with %d tools", count)
        return count

    def verify(self) -> Dict[str, int]:
        """
        Compare active tool and index row counts.

        Returns
        -------
        Dict[str, int]
            ``{"active_tools", "indexed", "in_sync"}`` (in_sync is 0 or 1)
        """
        cursor = self._conn.cursor()
        cursor.execute("SELECT COUNT(*) FROM tools WHERE is_deleted = 0")
        active = cursor.fetchone()[0]
        cursor.execute("SELECT COUNT(*) FROM tools_fts")
        indexed = cursor.fetchone()[0]

        if active != indexed:
            logger.warning(
                "FTS index out of sync: %d active tools, %d indexed", active, indexed
            )
        return {"active_tools": active, "indexed": indexed, "in_sync": int(active == indexed)}

    def optimize(self) -> None:
        """Merge the index b-trees (FTS5 'optimize' command)."""
        self._conn.execute("INSERT INTO tools_fts(tools_fts) VALUES('optimize')")
        logger.info("Optimized FTS index")
