"""
Migration log repository: one audit row per migration stage.
"""

from typing import Any, Dict, List, Optional

from ..constants import STATUS_COMPLETED, STATUS_FAILED, STATUS_RUNNING
from .base import BaseRepository, rows_to_dicts

NOW = "strftime('%Y-%m-%d %H:%M:%f', 'now')"


class MigrationLogRepository(BaseRepository):
    """
    Append-only stage log written by the migration pipeline.

    Each statement autocommits, so a stage row survives the rollback of the
    stage it describes.
    """

    def start(self, batch_name: str) -> int:
        """Insert a ``running`` row and return its id."""
        cursor = self.cursor()
        cursor.execute(
            "INSERT INTO migration_log (batch_name, status) VALUES (?, ?)",
            (batch_name, STATUS_RUNNING),
        )
        return cursor.lastrowid

    def complete(self, log_id: int, records_migrated: int) -> None:
        self.cursor().execute(
            f"""
            UPDATE migration_log
            SET status = ?, records_migrated = ?, completed_at = {NOW}
            WHERE id = ?
            """,
            (STATUS_COMPLETED, records_migrated, log_id),
        )

    def fail(self, log_id: int, error_message: str, records_migrated: Optional[int] = None) -> None:
        self.cursor().execute(
            f"""
            UPDATE migration_log
            SET status = ?, error_message = ?, completed_at = {NOW},
                records_migrated = COALESCE(?, records_migrated)
            WHERE id = ?
            """,
            (STATUS_FAILED, error_message, records_migrated, log_id),
        )

    def list(self) -> List[Dict[str, Any]]:
        """
        All log rows in start order, with ``duration_seconds``.

        Returns
        -------
        List[Dict[str, Any]]
            Log rows; ``duration_seconds`` is None while a stage is running
        """
        cursor = self.cursor()
        cursor.execute("""
            SELECT
                id, batch_name, status, records_migrated,
                started_at, completed_at, error_message,
                CASE WHEN completed_at IS NULL THEN NULL
                     ELSE (julianday(completed_at) - julianday(started_at)) * 86400.0
                END AS duration_seconds
            FROM migration_log
            ORDER BY started_at, id
        """)
        return rows_to_dicts(cursor.fetchall())
