"""
Category API routes.
"""

from fastapi import APIRouter, Depends, HTTPException

from toolnav.api.deps import get_cache, get_db
from toolnav.api.responses import success
from toolnav.api.schemas import CategoryOrderRequest, CategoryOut
from toolnav.core.cache import TimestampedCache
from toolnav.core.db import ToolDatabase

router = APIRouter()


@router.get("/categories")
def list_categories(db: ToolDatabase = Depends(get_db)):
    """Active categories in display order, with live tool counts."""
    categories = [CategoryOut.from_row(row).model_dump() for row in db.list_active_categories()]
    return success({"categories": categories})


@router.put("/categories/order")
def reorder_categories(
    body: CategoryOrderRequest,
    db: ToolDatabase = Depends(get_db),
    cache: TimestampedCache = Depends(get_cache),
):
    """
    Set display positions for several categories at once.

    All pairs are applied in one transaction; unknown ids are skipped.
    """
    if not body.categories:
        raise HTTPException(status_code=400, detail="No categories given")

    updated = db.reorder_categories(
        (item.id, item.display_order) for item in body.categories
    )
    cache.invalidate()
    return success({"updated": updated}, "Category order updated")
