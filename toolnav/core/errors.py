"""
Error taxonomy for the data-access and migration layer.

"Not found" is never an exception here: id resolution returns None.
"""

from typing import List, Optional


class ToolNavError(Exception):
    """Base class for all toolnav errors."""


class ValidationError(ToolNavError):
    """Caller-supplied data failed a precondition."""


class DatabaseError(ToolNavError):
    """Storage-layer failure that is not retried (constraint, I/O, corruption)."""


class DatabaseBusyError(DatabaseError):
    """The database stayed locked after every retry attempt."""

    def __init__(self, attempts: int, message: Optional[str] = None):
        self.attempts = attempts
        super().__init__(
            message or f"Database is busy, try again later ({attempts} attempts)"
        )


class StatementsNotInitializedError(DatabaseError):
    """A prepared statement was used before the registry finished initializing."""


class MigrationIntegrityError(ToolNavError):
    """Post-load verification found mismatched counts or dangling references."""

    def __init__(self, failed_checks: List[str]):
        self.failed_checks = failed_checks
        super().__init__(
            "Data verification failed: " + ", ".join(failed_checks)
        )
