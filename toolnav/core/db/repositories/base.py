"""
Base repository class providing common database operations.
"""

import sqlite3
from typing import TYPE_CHECKING, Any, Dict, List, Optional

if TYPE_CHECKING:
    from ..connection import DatabaseConnection
    from ..statements import PreparedStatements


def row_to_dict(row: Optional[sqlite3.Row]) -> Optional[Dict[str, Any]]:
    """Convert a sqlite3.Row to a plain dict, passing None through."""
    return dict(row) if row is not None else None


def rows_to_dicts(rows: List[sqlite3.Row]) -> List[Dict[str, Any]]:
    return [dict(row) for row in rows]


class BaseRepository:
    """
    Base class for all repository implementations.

    Provides access to the connection (for transactions and ad hoc SQL)
    and to the shared prepared statement registry.
    """

    def __init__(self, conn: "DatabaseConnection", statements: "PreparedStatements"):
        """
        Initialize repository with database connection.

        Parameters
        ----------
        conn : DatabaseConnection
            Database connection to use for operations.
        statements : PreparedStatements
            Initialized statement registry bound to ``conn``.
        """
        self._conn = conn
        self._statements = statements

    def cursor(self):
        """Get a new cursor for database operations."""
        return self._conn.cursor()

    def transaction(self):
        """Atomic block; see DatabaseConnection.transaction()."""
        return self._conn.transaction()
