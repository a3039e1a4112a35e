"""
Health check API route.
"""
from fastapi import APIRouter, Depends

from toolnav.api.deps import get_db
from toolnav.api.responses import success
from toolnav.core.db import ToolDatabase

router = APIRouter()


@router.get("/health")
def health(db: ToolDatabase = Depends(get_db)):
    """
    Health check endpoint.

    Reports readiness and whether the search index matches the active tools.
    """
    index = db.verify_search_index()
    return success({
        "status": "ready",
        "searchIndex": {
            "activeTools": index["active_tools"],
            "indexed": index["indexed"],
            "inSync": bool(index["in_sync"]),
        },
    })
