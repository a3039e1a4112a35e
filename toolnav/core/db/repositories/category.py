"""
Category repository for database operations on categories.
"""

from typing import Any, Dict, Iterable, List, Optional, Tuple

from .base import BaseRepository, rows_to_dicts


class CategoryRepository(BaseRepository):
    """
    Repository for category reads and ordering.

    Categories are addressed externally by legacy id and are never
    hard-deleted.
    """

    def list_active(self) -> List[Dict[str, Any]]:
        """
        List non-deleted categories in display order.

        Returns
        -------
        List[Dict[str, Any]]
            Category rows, each with a live ``tool_count`` of active tools
        """
        return rows_to_dicts(self._statements.fetchall("get_active_categories"))

    def resolve_id(self, legacy_id: int) -> Optional[int]:
        """Map a category legacy id to its internal id; None if absent or deleted."""
        row = self._statements.fetchone("get_category_id_by_legacy_id", (legacy_id,))
        return row["id"] if row else None

    def reorder(self, orders: Iterable[Tuple[int, int]]) -> int:
        """
        Apply new display positions atomically.

        Parameters
        ----------
        orders : Iterable[Tuple[int, int]]
            ``(category legacy id, display_order)`` pairs

        Returns
        -------
        int
            Number of categories updated; unknown ids are skipped
        """
        updated = 0
        with self.transaction():
            for legacy_id, display_order in orders:
                updated += self._statements.run(
                    "update_category_order", (display_order, legacy_id)
                )
        return updated
