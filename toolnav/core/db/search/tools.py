"""
Ranked full-text search over active tools.
"""

import logging
import sqlite3
from typing import TYPE_CHECKING, Any, Dict, List

from ...errors import ValidationError
from ..constants import DEFAULT_SEARCH_LIMIT, MAX_SEARCH_LIMIT
from ..retry import is_busy_error

if TYPE_CHECKING:
    from ..statements import PreparedStatements

logger = logging.getLogger(__name__)


def search_tools(
    statements: "PreparedStatements",
    query: str,
    limit: int = DEFAULT_SEARCH_LIMIT,
) -> List[Dict[str, Any]]:
    """
    Search active tools by name, description, tags, and category name.

    Parameters
    ----------
    statements : PreparedStatements
        Initialized statement registry
    query : str
        FTS5 query: plain terms, AND/OR/NOT, ``prefix*``, ``name: value``
    limit : int
        Maximum results, clamped to 1..MAX_SEARCH_LIMIT

    Returns
    -------
    List[Dict[str, Any]]
        Tool rows in relevance order, with comma-joined ``tags``. Blank or
        malformed queries return an empty list.
    """
    if not query or not query.strip():
        return []

    if isinstance(limit, bool) or not isinstance(limit, int):
        raise ValidationError(f"Invalid search limit: {limit!r}")
    limit = max(1, min(limit, MAX_SEARCH_LIMIT))

    try:
        rows = statements.fetchall("search_tools", (query, limit))
    except sqlite3.OperationalError as e:
        if is_busy_error(e):
            raise
        # Handle malformed FTS queries gracefully
        logger.debug("FTS query error for '%s': %s", query, e)
        return []

    return [dict(row) for row in rows]
