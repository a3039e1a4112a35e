"""
Database connection management for the tool directory.

Provides a DatabaseConnection class that handles SQLite connection
lifecycle, pragma configuration, explicit transactions, and context
manager support.
"""

import logging
import sqlite3
from contextlib import contextmanager
from typing import Iterator, Optional

from toolnav.core.config import get_default_db_path
from toolnav.core.errors import DatabaseError

from .constants import BUSY_TIMEOUT_MS, STATEMENT_CACHE_SIZE

logger = logging.getLogger(__name__)


class DatabaseConnection:
    """
    SQLite database connection with WAL mode and explicit transactions.

    The connection runs in autocommit mode: a single statement is its own
    transaction. Multi-statement writes must go through ``transaction()``.
    """

    def __init__(self, db_path: Optional[str] = None, busy_timeout_ms: int = BUSY_TIMEOUT_MS):
        """
        Initialize database connection.

        Parameters
        ----------
        db_path : str, optional
            Path to database file. If None, uses default OS-specific location.
        busy_timeout_ms : int
            How long SQLite waits on a lock before raising "database is locked".
        """
        if db_path is None:
            default_path = get_default_db_path()
            default_path.parent.mkdir(parents=True, exist_ok=True)
            db_path = str(default_path)

        self.db_path = db_path
        self.busy_timeout_ms = busy_timeout_ms
        self._conn: Optional[sqlite3.Connection] = None
        self._depth = 0
        self._connect()

    def _connect(self) -> None:
        """Establish database connection with WAL mode and foreign keys."""
        self._conn = sqlite3.connect(
            self.db_path,
            check_same_thread=False,
            isolation_level=None,
            cached_statements=STATEMENT_CACHE_SIZE,
        )
        self._conn.row_factory = sqlite3.Row

        cursor = self._conn.cursor()
        cursor.execute("PRAGMA foreign_keys = ON")
        # WAL lets readers proceed while a writer holds the lock
        cursor.execute("PRAGMA journal_mode = WAL")
        cursor.fetchone()
        cursor.execute("PRAGMA synchronous = NORMAL")
        cursor.execute("PRAGMA temp_store = MEMORY")
        cursor.execute(f"PRAGMA busy_timeout = {int(self.busy_timeout_ms)}")

        logger.debug("Database connection established: %s", self.db_path)

    @property
    def connection(self) -> sqlite3.Connection:
        """Get the underlying SQLite connection."""
        if self._conn is None:
            raise DatabaseError(f"Database connection is closed: {self.db_path}")
        return self._conn

    @property
    def in_transaction(self) -> bool:
        return self._depth > 0

    def cursor(self) -> sqlite3.Cursor:
        """Get a new cursor for the database connection."""
        return self.connection.cursor()

    def execute(self, sql: str, params=()) -> sqlite3.Cursor:
        return self.connection.execute(sql, params)

    @contextmanager
    def transaction(self) -> Iterator["DatabaseConnection"]:
        """
        Run the enclosed statements atomically.

        The outermost block takes the write lock up front with
        ``BEGIN IMMEDIATE``; nested blocks become savepoints so an inner
        failure can be caught without abandoning the outer transaction.
        """
        conn = self.connection
        if self._depth == 0:
            conn.execute("BEGIN IMMEDIATE")
            self._depth += 1
            try:
                yield self
                conn.execute("COMMIT")
            except BaseException:
                if conn.in_transaction:
                    conn.execute("ROLLBACK")
                raise
            finally:
                self._depth -= 1
        else:
            name = f"sp_{self._depth}"
            conn.execute(f"SAVEPOINT {name}")
            self._depth += 1
            try:
                yield self
            except BaseException:
                conn.execute(f"ROLLBACK TO SAVEPOINT {name}")
                conn.execute(f"RELEASE SAVEPOINT {name}")
                raise
            else:
                conn.execute(f"RELEASE SAVEPOINT {name}")
            finally:
                self._depth -= 1

    def close(self) -> None:
        """Close the database connection."""
        if self._conn is not None:
            self._conn.close()
            self._conn = None
            self._depth = 0
            logger.debug("Database connection closed: %s", self.db_path)

    def __enter__(self) -> "DatabaseConnection":
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Context manager exit - close connection."""
        self.close()
