"""
Domain models for the tool directory.

These models describe write inputs (tool creation, partial updates, category
ordering) and the JSON seed document consumed by the migration pipeline.
Read paths return plain dicts built from ``sqlite3.Row``.

All models use Pydantic for validation, serialization, and type safety.
"""

from typing import Any, ClassVar, Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

from toolnav.core.errors import ValidationError


class ToolCreate(BaseModel):
    """
    Input for creating a tool.

    The category is referenced by its legacy id, the same identifier the
    HTTP layer and the seed file use.
    """

    name: str = Field(min_length=1)
    category_legacy_id: int
    description: Optional[str] = None
    logo: Optional[str] = None
    url: Optional[str] = None
    is_featured: bool = False
    is_new: bool = False
    tags: List[str] = Field(default_factory=list)

    @field_validator("name")
    @classmethod
    def strip_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("name must not be blank")
        return value

    @field_validator("tags")
    @classmethod
    def clean_tags(cls, value: List[str]) -> List[str]:
        return [tag.strip() for tag in value if tag and tag.strip()]


class ToolUpdate(BaseModel):
    """
    Partial update for a tool.

    Only fields that were explicitly set are written. The set of updatable
    columns is ``UPDATABLE_COLUMNS``; anything else is rejected.
    """

    model_config = ConfigDict(extra="forbid")

    UPDATABLE_COLUMNS: ClassVar[Tuple[str, ...]] = (
        "name",
        "description",
        "logo",
        "url",
        "category_id",
        "is_featured",
        "is_new",
    )
    NOT_NULL_COLUMNS: ClassVar[Tuple[str, ...]] = ("name", "is_featured", "is_new")

    name: Optional[str] = None
    description: Optional[str] = None
    logo: Optional[str] = None
    url: Optional[str] = None
    category_id: Optional[int] = None
    is_featured: Optional[bool] = None
    is_new: Optional[bool] = None

    def changes(self) -> Dict[str, Any]:
        """
        Columns to write, in ``UPDATABLE_COLUMNS`` order.

        Booleans are stored as 0/1 integers.

        Raises
        ------
        ValidationError
            If a NOT NULL column is explicitly set to None, or the name is blank
        """
        data = self.model_dump(exclude_unset=True)
        changes: Dict[str, Any] = {}
        for column in self.UPDATABLE_COLUMNS:
            if column not in data:
                continue
            value = data[column]
            if value is None and column in self.NOT_NULL_COLUMNS:
                raise ValidationError(f"{column} must not be null")
            if column == "name":
                value = value.strip()
                if not value:
                    raise ValidationError("Tool name must not be empty")
            if isinstance(value, bool):
                value = int(value)
            changes[column] = value
        return changes


class CreatedTool(BaseModel):
    """Identifiers assigned to a newly created tool."""

    id: int
    legacy_id: int


class CategoryOrder(BaseModel):
    """New display position for a category, addressed by legacy id."""

    id: int
    display_order: int = Field(ge=0, alias="displayOrder")

    model_config = ConfigDict(populate_by_name=True)


# =============================================================================
# Seed document (migration input)
# =============================================================================


class SeedSiteConfig(BaseModel):
    site_name: str = Field(alias="siteName")
    description: str = ""
    keywords: List[str] = Field(default_factory=list)

    model_config = ConfigDict(populate_by_name=True)


class SeedCategory(BaseModel):
    id: str
    name: str
    icon: Optional[str] = None


class SeedTool(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str
    description: Optional[str] = None
    logo: Optional[str] = None
    url: Optional[str] = None
    category_id: str = Field(alias="categoryId")
    is_featured: bool = Field(default=False, alias="isFeatured")
    is_new: bool = Field(default=False, alias="isNew")
    view_count: int = Field(default=0, alias="viewCount")
    added_date: Optional[str] = Field(default=None, alias="addedDate")
    tags: List[str] = Field(default_factory=list)

    @field_validator("view_count", mode="before")
    @classmethod
    def default_view_count(cls, value: Any) -> Any:
        return 0 if value is None else value

    @field_validator("tags", mode="before")
    @classmethod
    def default_tags(cls, value: Any) -> Any:
        return [] if value is None else value


class SeedDocument(BaseModel):
    """Top-level JSON snapshot: ``siteConfig``, ``categories``, ``tools``."""

    model_config = ConfigDict(populate_by_name=True)

    site_config: SeedSiteConfig = Field(alias="siteConfig")
    categories: List[SeedCategory] = Field(default_factory=list)
    tools: List[SeedTool] = Field(default_factory=list)
