"""
Pydantic schemas for API request/response models.

Field names on the wire are camelCase, matching the seed file format.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from toolnav.core.models import CategoryOrder

MAX_TAG_LENGTH = 50


class ToolCreateRequest(BaseModel):
    """Body of POST /api/tools."""

    model_config = ConfigDict(populate_by_name=True)

    name: str
    category_id: int = Field(alias="categoryId")
    description: Optional[str] = None
    logo: Optional[str] = None
    url: Optional[str] = None
    is_featured: bool = Field(default=False, alias="isFeatured")
    is_new: bool = Field(default=False, alias="isNew")
    tags: List[str] = Field(default_factory=list)


class ToolUpdateRequest(BaseModel):
    """Body of PUT /api/tools/{id}; only fields present are changed."""

    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    name: Optional[str] = None
    description: Optional[str] = None
    logo: Optional[str] = None
    url: Optional[str] = None
    category_id: Optional[int] = Field(default=None, alias="categoryId")
    is_featured: Optional[bool] = Field(default=None, alias="isFeatured")
    is_new: Optional[bool] = Field(default=None, alias="isNew")


class TagAddRequest(BaseModel):
    tag_name: str = Field(alias="tagName")

    model_config = ConfigDict(populate_by_name=True)


class TagRemoveRequest(BaseModel):
    tag_id: int = Field(alias="tagId")

    model_config = ConfigDict(populate_by_name=True)


class CategoryOrderRequest(BaseModel):
    """Body of PUT /api/categories/order."""

    categories: List[CategoryOrder]


class ToolOut(BaseModel):
    """Tool as returned to clients, addressed by legacy id."""

    id: int
    name: str
    description: Optional[str] = None
    logo: Optional[str] = None
    url: Optional[str] = None
    categoryId: Optional[int] = None
    categoryName: Optional[str] = None
    isFeatured: bool = False
    isNew: bool = False
    viewCount: int = 0
    addedDate: Optional[str] = None
    tags: List[str] = Field(default_factory=list)

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "ToolOut":
        tags = row.get("tags")
        return cls(
            id=row["legacy_id"],
            name=row["name"],
            description=row.get("description"),
            logo=row.get("logo"),
            url=row.get("url"),
            categoryId=row.get("category_legacy_id"),
            categoryName=row.get("category_name"),
            isFeatured=bool(row.get("is_featured")),
            isNew=bool(row.get("is_new")),
            viewCount=row.get("view_count") or 0,
            addedDate=row.get("added_date"),
            tags=[tag for tag in tags.split(",") if tag] if tags else [],
        )


class CategoryOut(BaseModel):
    id: int
    name: str
    icon: Optional[str] = None
    displayOrder: int = 0
    toolCount: int = 0

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "CategoryOut":
        return cls(
            id=row["legacy_id"],
            name=row["name"],
            icon=row.get("icon"),
            displayOrder=row.get("display_order") or 0,
            toolCount=row.get("tool_count") or 0,
        )


class SiteConfigOut(BaseModel):
    siteName: str
    description: str
    keywords: List[str] = Field(default_factory=list)


class SettingsOut(BaseModel):
    """Payload of GET /api/settings."""

    siteConfig: SiteConfigOut
    categories: List[CategoryOut]
    tools: List[ToolOut]


class TagOut(BaseModel):
    id: int
    name: str
