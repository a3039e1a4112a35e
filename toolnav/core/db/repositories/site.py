"""
Site configuration repository.
"""

from typing import Any, Dict

from .base import BaseRepository


class SiteRepository(BaseRepository):
    """Reads the singleton site_config row and its keyword list."""

    def get_config(self) -> Dict[str, Any]:
        """
        Get site name, description, and keywords.

        Returns
        -------
        Dict[str, Any]
            ``{"site_name", "description", "keywords"}``
        """
        row = self._statements.fetchone("get_site_config")
        keywords = self._statements.fetchall("get_site_keywords")
        return {
            "site_name": row["site_name"] if row else "",
            "description": row["description"] if row else "",
            "keywords": [kw["keyword"] for kw in keywords],
        }
