"""
FastAPI dependencies for shared resources.

Sync routes run on a threadpool, and a ToolDatabase owns a single
connection whose transaction state must not be shared between threads, so
each worker thread gets its own instance, opened on first use and closed
at shutdown.
"""

import logging
import threading
from typing import List

from fastapi import Request

from toolnav.core.cache import TimestampedCache
from toolnav.core.config import Settings
from toolnav.core.db import ToolDatabase

logger = logging.getLogger(__name__)


class DatabasePool:
    """One ToolDatabase per thread, all sharing the same settings."""

    def __init__(self, settings: Settings):
        self.settings = settings
        self._local = threading.local()
        self._opened: List[ToolDatabase] = []
        self._lock = threading.Lock()

    def get(self) -> ToolDatabase:
        db = getattr(self._local, "db", None)
        if db is None:
            db = ToolDatabase.from_settings(self.settings)
            self._local.db = db
            with self._lock:
                self._opened.append(db)
            logger.debug("Opened database connection for thread %s", threading.current_thread().name)
        return db

    def close_all(self) -> None:
        with self._lock:
            opened, self._opened = self._opened, []
        for db in opened:
            db.close()
        self._local = threading.local()
        logger.info("Closed %d database connections", len(opened))


def get_db(request: Request) -> ToolDatabase:
    """
    Dependency that provides the calling thread's database.

    Returns
    ----
    ToolDatabase
        Database instance owned by the app's pool
    """
    return request.app.state.databases.get()


def get_cache(request: Request) -> TimestampedCache:
    """Dependency that provides the app's response cache."""
    return request.app.state.cache
