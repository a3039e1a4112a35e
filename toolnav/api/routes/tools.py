"""
Tool API routes: create, update, delete, views, tags, and view-count sync.

Tools are addressed by legacy id in every path.
"""

import logging
from typing import Dict

from fastapi import APIRouter, Body, Depends, HTTPException, Path
from pydantic import ValidationError as PydanticValidationError

from toolnav.api.deps import get_cache, get_db
from toolnav.api.responses import success
from toolnav.api.schemas import (
    MAX_TAG_LENGTH,
    TagAddRequest,
    TagOut,
    TagRemoveRequest,
    ToolCreateRequest,
    ToolOut,
    ToolUpdateRequest,
)
from toolnav.core.cache import TimestampedCache
from toolnav.core.db import ToolDatabase
from toolnav.core.errors import ValidationError
from toolnav.core.models import ToolCreate, ToolUpdate
from toolnav.core.utils import extract_legacy_id

logger = logging.getLogger(__name__)

router = APIRouter()


def _require_tool(db: ToolDatabase, legacy_id: int) -> int:
    tool_id = db.resolve_tool_id(legacy_id)
    if tool_id is None:
        raise HTTPException(status_code=404, detail=f"Tool not found: {legacy_id}")
    return tool_id


def _tag_list(db: ToolDatabase, tool_id: int):
    return [TagOut(**tag).model_dump() for tag in db.get_tool_tags(tool_id)]


@router.post("/tools")
def create_tool(
    body: ToolCreateRequest,
    db: ToolDatabase = Depends(get_db),
    cache: TimestampedCache = Depends(get_cache),
):
    """
    Create a tool in an existing category.

    The new tool gets the next unused legacy id.
    """
    if not body.name.strip():
        raise HTTPException(status_code=400, detail="Tool name must not be empty")

    try:
        data = ToolCreate(
            name=body.name,
            category_legacy_id=body.category_id,
            description=body.description.strip() if body.description else None,
            logo=body.logo.strip() if body.logo else None,
            url=body.url.strip() if body.url else None,
            is_featured=body.is_featured,
            is_new=body.is_new,
            tags=body.tags,
        )
    except PydanticValidationError as e:
        raise ValidationError(str(e)) from e

    created = db.create_tool(data)
    cache.invalidate()

    tool = db.get_tool(created.id)
    return success({"tool": ToolOut.from_row(tool).model_dump()}, "Tool created")


@router.post("/tools/sync-viewcount")
def sync_view_counts(
    counts: Dict[str, int] = Body(...),
    db: ToolDatabase = Depends(get_db),
    cache: TimestampedCache = Depends(get_cache),
):
    """
    Merge view counts collected elsewhere, keyed by slug id ("tool-001").

    Counts only ever increase.
    """
    by_legacy_id = {extract_legacy_id(key): value for key, value in counts.items()}
    updated = db.sync_view_counts(by_legacy_id)
    cache.invalidate()
    logger.info("Synced view counts for %d of %d tools", updated, len(by_legacy_id))
    return success({"updatedCount": updated}, f"Updated view counts for {updated} tools")


@router.put("/tools/{legacy_id}")
def update_tool(
    body: ToolUpdateRequest,
    legacy_id: int = Path(..., gt=0),
    db: ToolDatabase = Depends(get_db),
    cache: TimestampedCache = Depends(get_cache),
):
    """Apply a partial update; fields absent from the body are unchanged."""
    tool_id = _require_tool(db, legacy_id)

    fields = body.model_dump(exclude_unset=True)
    if "category_id" in fields:
        category_legacy_id = fields.pop("category_id")
        if category_legacy_id is not None:
            category_id = db.resolve_category_id(category_legacy_id)
            if category_id is None:
                raise ValidationError(f"Category not found: {category_legacy_id}")
            fields["category_id"] = category_id

    db.update_tool(tool_id, ToolUpdate(**fields))
    cache.invalidate()

    tool = db.get_tool(tool_id)
    return success({"tool": ToolOut.from_row(tool).model_dump()}, "Tool updated")


@router.delete("/tools/{legacy_id}")
def delete_tool(
    legacy_id: int = Path(..., gt=0),
    db: ToolDatabase = Depends(get_db),
    cache: TimestampedCache = Depends(get_cache),
):
    """Soft-delete a tool; it disappears from listings and search."""
    tool_id = _require_tool(db, legacy_id)
    db.soft_delete_tool(tool_id)
    cache.invalidate()
    return success(message="Tool deleted")


@router.post("/tools/{legacy_id}/view")
def record_view(
    legacy_id: int = Path(..., gt=0),
    db: ToolDatabase = Depends(get_db),
    cache: TimestampedCache = Depends(get_cache),
):
    tool_id = _require_tool(db, legacy_id)
    db.increment_view_count(tool_id)
    cache.invalidate()
    tool = db.get_tool(tool_id)
    return success({"viewCount": (tool or {}).get("view_count", 0)})


@router.get("/tools/{legacy_id}/tags")
def list_tool_tags(
    legacy_id: int = Path(..., gt=0),
    db: ToolDatabase = Depends(get_db),
):
    tool_id = _require_tool(db, legacy_id)
    return success({"tags": _tag_list(db, tool_id)})


@router.post("/tools/{legacy_id}/tags")
def add_tool_tag(
    body: TagAddRequest,
    legacy_id: int = Path(..., gt=0),
    db: ToolDatabase = Depends(get_db),
    cache: TimestampedCache = Depends(get_cache),
):
    """Attach a tag by name, creating it on first use (case-insensitive)."""
    name = body.tag_name.strip()
    if not name:
        raise HTTPException(status_code=400, detail="Tag name must not be empty")
    if len(name) > MAX_TAG_LENGTH:
        raise HTTPException(
            status_code=400, detail=f"Tag name must be at most {MAX_TAG_LENGTH} characters"
        )

    tool_id = _require_tool(db, legacy_id)
    db.add_tag(tool_id, name)
    cache.invalidate()
    return success({"tags": _tag_list(db, tool_id)}, "Tag added")


@router.delete("/tools/{legacy_id}/tags")
def remove_tool_tag(
    body: TagRemoveRequest,
    legacy_id: int = Path(..., gt=0),
    db: ToolDatabase = Depends(get_db),
    cache: TimestampedCache = Depends(get_cache),
):
    """Detach a tag from the tool; the tag itself is kept."""
    tool_id = _require_tool(db, legacy_id)
    db.remove_tag(tool_id, body.tag_id)
    cache.invalidate()
    return success({"tags": _tag_list(db, tool_id)}, "Tag removed")
