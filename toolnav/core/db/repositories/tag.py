"""
Tag repository for database operations on tags.
"""

from typing import Any, Dict, List, Optional

from .base import BaseRepository, rows_to_dicts


class TagRepository(BaseRepository):
    """
    Repository for tag operations.

    Tags are shared between tools and matched case-insensitively. Removing a
    tag from a tool deletes only the association; tag rows are never pruned.
    """

    def find_id(self, name: str) -> Optional[int]:
        """Return the id of the tag named ``name`` (any case), or None."""
        row = self._statements.fetchone("get_tag_by_name", (name,))
        return row["id"] if row else None

    def find_or_create(self, name: str) -> int:
        """
        Get the id of a tag, inserting it on first use.

        Parameters
        ----------
        name : str
            Tag name; an existing tag differing only in case is reused

        Returns
        -------
        int
            Tag ID
        """
        tag_id = self.find_id(name)
        if tag_id is not None:
            return tag_id
        return self._statements.execute("insert_tag", (name,)).lastrowid

    def add(self, tool_id: int, name: str) -> int:
        """
        Attach a tag to a tool, creating the tag if needed.

        Runs in one transaction (a savepoint when called inside another).
        Re-adding an existing association is a no-op.

        Returns
        -------
        int
            Tag ID
        """
        with self.transaction():
            tag_id = self.find_or_create(name)
            self._statements.run("insert_tool_tag", (tool_id, tag_id))
        return tag_id

    def remove(self, tool_id: int, tag_id: int) -> int:
        """
        Detach a tag from a tool.

        Returns
        -------
        int
            Number of associations removed (0 or 1)
        """
        return self._statements.run("delete_tool_tag", (tool_id, tag_id))

    def get_for_tool(self, tool_id: int) -> List[Dict[str, Any]]:
        """
        Get all tags for a tool.

        Returns
        -------
        List[Dict[str, Any]]
            ``{"id", "name"}`` dicts ordered by name
        """
        return rows_to_dicts(self._statements.fetchall("get_tool_tags_by_id", (tool_id,)))

    def get_all(self) -> List[Dict[str, Any]]:
        """Get every tag, referenced or not, ordered by name."""
        return rows_to_dicts(self._statements.fetchall("get_all_tags"))
