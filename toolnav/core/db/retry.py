"""
Retry wrapper for transient "database is locked" / "database is busy" errors.

Only wrap operations that are atomic on their own: a single statement or a
statement sequence already inside ``DatabaseConnection.transaction()``.
Re-running a half-applied multi-statement sequence is not safe.
"""

import functools
import logging
import sqlite3
import time
from typing import Any, Callable, TypeVar

from toolnav.core.config import DEFAULT_MAX_RETRIES, DEFAULT_RETRY_DELAY
from toolnav.core.errors import DatabaseBusyError, DatabaseError

logger = logging.getLogger(__name__)

T = TypeVar("T")

_BUSY_MARKERS = ("database is locked", "database is busy", "sqlite_busy", "database table is locked")


def is_busy_error(error: BaseException) -> bool:
    """Return True for SQLite lock-contention errors."""
    if not isinstance(error, sqlite3.OperationalError):
        return False
    message = str(error).lower()
    return any(marker in message for marker in _BUSY_MARKERS)


def call_with_retry(
    operation: Callable[..., T],
    *args: Any,
    max_retries: int = DEFAULT_MAX_RETRIES,
    base_delay: float = DEFAULT_RETRY_DELAY,
    sleep: Callable[[float], None] = time.sleep,
    **kwargs: Any,
) -> T:
    """
    Call ``operation`` and retry it while SQLite reports lock contention.

    Parameters
    ----------
    operation : callable
        Atomic database operation
    max_retries : int
        Retries after the first attempt (default 5)
    base_delay : float
        Seconds before the first retry; doubles on every retry (default 0.1)
    sleep : callable
        Delay function, injectable for tests

    Returns
    -------
    The operation's return value

    Raises
    ------
    DatabaseBusyError
        The database stayed locked for ``max_retries + 1`` attempts
    DatabaseError
        Any other SQLite error, raised on the first occurrence
    """
    attempt = 0
    while True:
        try:
            return operation(*args, **kwargs)
        except sqlite3.Error as e:
            if not is_busy_error(e):
                raise DatabaseError(str(e)) from e

            if attempt >= max_retries:
                logger.error(
                    "SQLite busy after %d attempts: %s", attempt + 1, e
                )
                raise DatabaseBusyError(attempt + 1) from e

            delay = base_delay * (2 ** attempt)
            logger.warning(
                "SQLite busy, retrying in %.3fs (attempt %d/%d)",
                delay,
                attempt + 1,
                max_retries,
            )
            sleep(delay)
            attempt += 1


def with_retry(
    max_retries: int = DEFAULT_MAX_RETRIES,
    base_delay: float = DEFAULT_RETRY_DELAY,
) -> Callable[[Callable[..., T]], Callable[..., T]]:
    """Decorator form of ``call_with_retry``."""

    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> T:
            return call_with_retry(
                func, *args, max_retries=max_retries, base_delay=base_delay, **kwargs
            )

        return wrapper

    return decorator
