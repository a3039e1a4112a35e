"""
Tool repository for database operations on tools.
"""

import logging
from typing import TYPE_CHECKING, Any, Dict, List, Mapping, Optional

from toolnav.core.errors import ValidationError
from toolnav.core.models import CreatedTool, ToolCreate, ToolUpdate

from .base import BaseRepository, row_to_dict, rows_to_dicts

if TYPE_CHECKING:
    from .category import CategoryRepository
    from .tag import TagRepository

logger = logging.getLogger(__name__)


class ToolRepository(BaseRepository):
    """
    Repository for tool CRUD operations.

    Handles listing, lookup by internal or legacy id, view counting,
    partial updates, soft deletion, and transactional creation with tags.
    """

    def __init__(self, conn, statements, categories: "CategoryRepository", tags: "TagRepository"):
        super().__init__(conn, statements)
        self._categories = categories
        self._tags = tags

    def list_active(self) -> List[Dict[str, Any]]:
        """
        List active tools in active categories, most viewed first.

        Returns
        -------
        List[Dict[str, Any]]
            Tool rows with ``category_name`` and comma-joined ``tags``
            (None when the tool has no tags)
        """
        return rows_to_dicts(self._statements.fetchall("get_active_tools"))

    def resolve_id(self, legacy_id: int) -> Optional[int]:
        """
        Map a tool legacy id to its internal id.

        Returns
        -------
        Optional[int]
            Internal id, or None when no active tool has that legacy id
        """
        row = self._statements.fetchone("get_tool_id_by_legacy_id", (legacy_id,))
        return row["id"] if row else None

    def get(self, tool_id: int) -> Optional[Dict[str, Any]]:
        """Get the joined row of an active tool by internal id, or None."""
        return row_to_dict(self._statements.fetchone("get_tool_by_id", (tool_id,)))

    def get_by_legacy_id(self, legacy_id: int) -> Optional[Dict[str, Any]]:
        """Get the joined row of an active tool by legacy id, or None."""
        return row_to_dict(self._statements.fetchone("get_tool_by_legacy_id", (legacy_id,)))

    def increment_view_count(self, tool_id: int) -> int:
        """
        Add one view to an active tool.

        The increment happens inside SQLite, so concurrent callers never
        lose updates.

        Returns
        -------
        int
            Rows changed (0 if the tool is missing or deleted)
        """
        return self._statements.run("increment_view_count", (tool_id,))

    def soft_delete(self, tool_id: int) -> int:
        """
        Mark a tool deleted.

        Returns
        -------
        int
            1 on the first call, 0 once the tool is already deleted
        """
        return self._statements.run("soft_delete_tool", (tool_id,))

    def update(self, tool_id: int, data: ToolUpdate) -> int:
        """
        Write the fields set on ``data`` to an active tool.

        Parameters
        ----------
        tool_id : int
            Internal tool id
        data : ToolUpdate
            Partial update; unset fields are left alone

        Returns
        -------
        int
            Rows changed; 0 without touching the database when nothing is set
        """
        changes = data.changes()
        if not changes:
            return 0

        # Column names come from ToolUpdate.UPDATABLE_COLUMNS, never from input keys
        assignments = ", ".join(f"{column} = ?" for column in changes)
        params = list(changes.values()) + [tool_id]
        cursor = self.cursor()
        cursor.execute(
            f"""
            UPDATE tools
            SET {assignments}, updated_at = CURRENT_TIMESTAMP
            WHERE id = ? AND is_deleted = 0
            """,
            params,
        )
        return cursor.rowcount

    def create(self, data: ToolCreate) -> CreatedTool:
        """
        Create a tool and its tag associations in one transaction.

        The new legacy id is one past the highest ever assigned, deleted
        tools included, so legacy ids are never reused.

        Parameters
        ----------
        data : ToolCreate
            Tool fields, category legacy id, and tag names

        Returns
        -------
        CreatedTool
            Internal id and legacy id of the new tool

        Raises
        ------
        ValidationError
            If the category does not exist or is deleted
        """
        with self.transaction():
            category_id = self._categories.resolve_id(data.category_legacy_id)
            if category_id is None:
                raise ValidationError(
                    f"Category not found: {data.category_legacy_id}"
                )

            row = self._statements.fetchone("get_max_tool_legacy_id")
            legacy_id = (row[0] or 0) + 1

            cursor = self._statements.execute(
                "insert_tool",
                (
                    legacy_id,
                    data.name,
                    data.description or None,
                    data.logo or None,
                    data.url or None,
                    category_id,
                    int(data.is_featured),
                    int(data.is_new),
                ),
            )
            tool_id = cursor.lastrowid

            for tag_name in data.tags:
                self._tags.add(tool_id, tag_name)

        logger.info("Created tool %s (legacy id %d)", data.name, legacy_id)
        return CreatedTool(id=tool_id, legacy_id=legacy_id)

    def sync_view_counts(self, counts: Mapping[int, int]) -> int:
        """
        Merge externally collected view counts, keyed by legacy id.

        A stored count is only ever raised, never lowered.

        Returns
        -------
        int
            Number of tools whose row matched
        """
        updated = 0
        with self.transaction():
            for legacy_id, count in counts.items():
                updated += self._statements.run(
                    "raise_view_count", (max(0, int(count)), legacy_id)
                )
        return updated
