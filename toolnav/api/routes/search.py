"""
Search API routes.
"""
import time
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response

from toolnav.api.deps import get_db
from toolnav.api.responses import success
from toolnav.api.schemas import ToolOut
from toolnav.core.db import ToolDatabase
from toolnav.core.db.constants import DEFAULT_SEARCH_LIMIT, MAX_SEARCH_LIMIT

router = APIRouter()


@router.get("/search")
def search(
    response: Response,
    q: Optional[str] = Query(None),
    limit: int = Query(DEFAULT_SEARCH_LIMIT, ge=1, le=MAX_SEARCH_LIMIT),
    db: ToolDatabase = Depends(get_db),
):
    """
    Full-text search over active tools.

    Parameters
    ----
    q : str
        FTS5 query: terms, AND/OR/NOT, ``prefix*``, ``name: value``
    limit : int
        Maximum results (default 20, max 100)
    """
    if not q or not q.strip():
        raise HTTPException(status_code=400, detail="Search query required")

    start = time.perf_counter()
    results = db.search_tools(q, limit)
    elapsed_ms = (time.perf_counter() - start) * 1000

    response.headers["Cache-Control"] = "public, max-age=60, stale-while-revalidate=120"
    return success({
        "query": q,
        "total": len(results),
        "searchTime": f"{elapsed_ms:.1f}ms",
        "results": [ToolOut.from_row(row).model_dump() for row in results],
    })
