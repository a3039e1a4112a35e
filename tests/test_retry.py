"""
Tests for the busy-retry wrapper.
"""

import sqlite3

import pytest

from toolnav.core.db import ToolDatabase
from toolnav.core.db.retry import call_with_retry, is_busy_error, with_retry
from toolnav.core.errors import DatabaseBusyError, DatabaseError


class FlakyOperation:
    """Raises ``error`` for the first ``failures`` calls, then returns 42."""

    def __init__(self, failures, error=None):
        self.failures = failures
        self.error = error or sqlite3.OperationalError("database is locked")
        self.calls = 0

    def __call__(self, *args, **kwargs):
        self.calls += 1
        if self.calls <= self.failures:
            raise self.error
        return 42


def test_is_busy_error():
    assert is_busy_error(sqlite3.OperationalError("database is locked"))
    assert is_busy_error(sqlite3.OperationalError("database table is locked"))
    assert is_busy_error(sqlite3.OperationalError("SQLITE_BUSY: database is busy"))
    assert not is_busy_error(sqlite3.OperationalError("no such table: tools"))
    assert not is_busy_error(sqlite3.IntegrityError("database is locked"))
    assert not is_busy_error(ValueError("database is locked"))


def test_retries_with_exponential_backoff():
    sleeps = []
    operation = FlakyOperation(failures=2)

    result = call_with_retry(operation, max_retries=5, base_delay=0.1, sleep=sleeps.append)

    assert result == 42
    assert operation.calls == 3
    assert sleeps == pytest.approx([0.1, 0.2])


def test_gives_up_after_max_retries():
    sleeps = []
    operation = FlakyOperation(failures=10)

    with pytest.raises(DatabaseBusyError) as exc_info:
        call_with_retry(operation, max_retries=3, base_delay=0.1, sleep=sleeps.append)

    assert exc_info.value.attempts == 4
    assert operation.calls == 4
    assert sleeps == pytest.approx([0.1, 0.2, 0.4])
    assert isinstance(exc_info.value.__cause__, sqlite3.OperationalError)


def test_busy_error_is_a_database_error():
    with pytest.raises(DatabaseError):
        call_with_retry(FlakyOperation(failures=1), max_retries=0, sleep=lambda _: None)


def test_other_sqlite_errors_are_not_retried():
    sleeps = []
    operation = FlakyOperation(failures=1, error=sqlite3.IntegrityError("UNIQUE constraint failed"))

    with pytest.raises(DatabaseError) as exc_info:
        call_with_retry(operation, sleep=sleeps.append)

    assert not isinstance(exc_info.value, DatabaseBusyError)
    assert operation.calls == 1
    assert sleeps == []


def test_non_database_errors_propagate_untouched():
    operation = FlakyOperation(failures=1, error=KeyError("missing"))

    with pytest.raises(KeyError):
        call_with_retry(operation, sleep=lambda _: None)
    assert operation.calls == 1


def test_arguments_are_passed_through():
    @with_retry(max_retries=2, base_delay=0)
    def add(a, b, scale=1):
        return (a + b) * scale

    assert add(1, 2, scale=10) == 30


def test_locked_database_surfaces_busy_error(temp_db_path):
    """A writer blocked by another connection's transaction exhausts its retries."""
    holder = ToolDatabase(temp_db_path)
    blocked = ToolDatabase(temp_db_path, max_retries=1, retry_delay=0.01)
    blocked.conn.execute("PRAGMA busy_timeout = 0")
    try:
        with holder.conn.transaction():
            holder.conn.execute(
                "INSERT INTO categories (legacy_id, name) VALUES (1, 'Locked')"
            )
            with pytest.raises(DatabaseBusyError) as exc_info:
                blocked.reorder_categories([(1, 3)])
            assert exc_info.value.attempts == 2
    finally:
        blocked.close()
        holder.close()
