"""
Tests for write-input and seed models.
"""

import pytest
from pydantic import ValidationError as PydanticValidationError

from toolnav.core.errors import ValidationError
from toolnav.core.models import CategoryOrder, SeedDocument, ToolCreate, ToolUpdate


def test_tool_update_only_reports_set_fields():
    update = ToolUpdate(is_new=False, name="Renamed")
    assert update.changes() == {"name": "Renamed", "is_new": 0}


def test_tool_update_column_order_is_fixed():
    update = ToolUpdate(url="https://x.test", description="d", is_featured=True)
    assert list(update.changes()) == ["description", "url", "is_featured"]
    assert update.changes()["is_featured"] == 1


def test_tool_update_explicit_none_is_written():
    assert ToolUpdate(logo=None).changes() == {"logo": None}
    assert ToolUpdate().changes() == {}


@pytest.mark.parametrize("field", ["name", "is_featured", "is_new"])
def test_tool_update_rejects_null_for_required_columns(field):
    with pytest.raises(ValidationError, match=field):
        ToolUpdate(**{field: None}).changes()


def test_tool_update_strips_name_and_rejects_blank():
    assert ToolUpdate(name="  Claude 3 ").changes() == {"name": "Claude 3"}
    with pytest.raises(ValidationError):
        ToolUpdate(name="   ").changes()


def test_tool_update_rejects_unknown_columns():
    with pytest.raises(PydanticValidationError):
        ToolUpdate(view_count=10)


def test_tool_create_cleans_name_and_tags():
    data = ToolCreate(name="  Gemini ", category_legacy_id=1, tags=[" NLP", "", "  ", "Chat"])
    assert data.name == "Gemini"
    assert data.tags == ["NLP", "Chat"]


def test_tool_create_rejects_blank_name():
    with pytest.raises(PydanticValidationError):
        ToolCreate(name="   ", category_legacy_id=1)


def test_category_order_accepts_both_spellings():
    assert CategoryOrder(id=5, displayOrder=1).display_order == 1
    assert CategoryOrder(id=5, display_order=2).display_order == 2
    with pytest.raises(PydanticValidationError):
        CategoryOrder(id=5, display_order=-1)


def test_seed_document_reads_camel_case():
    doc = SeedDocument.model_validate({
        "siteConfig": {"siteName": "Site", "keywords": ["a"]},
        "categories": [{"id": "category-1", "name": "One", "icon": "x"}],
        "tools": [{
            "id": "tool-001",
            "name": "Tool",
            "categoryId": "category-1",
            "isFeatured": True,
            "viewCount": None,
            "tags": None,
        }],
    })
    tool = doc.tools[0]
    assert doc.site_config.site_name == "Site"
    assert tool.category_id == "category-1"
    assert tool.is_featured is True
    assert tool.view_count == 0
    assert tool.tags == []
