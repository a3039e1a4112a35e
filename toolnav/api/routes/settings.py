"""
Site settings route: everything the directory front page renders.
"""

from fastapi import APIRouter, Depends

from toolnav.api.deps import get_cache, get_db
from toolnav.api.responses import success
from toolnav.api.schemas import CategoryOut, SettingsOut, SiteConfigOut, ToolOut
from toolnav.core.cache import TimestampedCache
from toolnav.core.db import ToolDatabase

SETTINGS_CACHE_KEY = "settings"

router = APIRouter()


def load_settings_payload(db: ToolDatabase) -> dict:
    site = db.get_site_config()
    payload = SettingsOut(
        siteConfig=SiteConfigOut(
            siteName=site["site_name"],
            description=site["description"],
            keywords=site["keywords"],
        ),
        categories=[CategoryOut.from_row(row) for row in db.list_active_categories()],
        tools=[ToolOut.from_row(row) for row in db.list_active_tools()],
    )
    return payload.model_dump()


@router.get("/settings")
def get_settings(
    db: ToolDatabase = Depends(get_db),
    cache: TimestampedCache = Depends(get_cache),
):
    """Site config, active categories, and active tools (cached until the next write)."""
    payload = cache.get_or_refresh(SETTINGS_CACHE_KEY, lambda: load_settings_payload(db))
    return success(payload)
