"""
Tests for FTS5 search and index maintenance.
"""

import pytest

from toolnav.core.db import ToolDatabase
from toolnav.core.db.search import search_tools
from toolnav.core.errors import ValidationError
from toolnav.core.models import ToolCreate, ToolUpdate


def names(results):
    return {row["name"] for row in results}


# =============================================================================
# 1. Queries
# =============================================================================
def test_blank_query_touches_no_database(seeded_db_path):
    db = ToolDatabase(seeded_db_path)
    db.close()
    assert db.search_tools("") == []
    assert db.search_tools("   ") == []


def test_prefix_query_matches_name_description_and_tags(seeded_db):
    results = seeded_db.search_tools("Chat*")
    # ChatGPT by name, Claude by its "chat" tag, Perplexity by "Chat-based"
    assert names(results) == {"ChatGPT", "Claude", "Perplexity"}


def test_results_carry_joined_fields(seeded_db):
    result = seeded_db.search_tools("Midjourney")[0]
    assert result["legacy_id"] == 4
    assert result["category_name"] == "Creative"
    assert set(result["tags"].split(",")) == {"Image", "Art"}


def test_category_name_is_searchable(seeded_db):
    assert names(seeded_db.search_tools("Productivity")) == {"Notion AI", "Copilot", "Cursor", "ElevenLabs"}


def test_column_filter(seeded_db):
    assert names(seeded_db.search_tools("name: code")) == set()
    assert names(seeded_db.search_tools("description: code")) == {"Copilot", "Cursor"}


def test_boolean_operators(seeded_db):
    assert names(seeded_db.search_tools("image NOT open")) == {"Midjourney"}
    assert names(seeded_db.search_tools("voice OR video")) == {"ElevenLabs", "Runway"}


def test_name_match_ranks_first(seeded_db):
    seeded_db.create_tool(
        ToolCreate(name="Notes", category_legacy_id=3, description="Cursor plugin for notes")
    )
    results = seeded_db.search_tools("cursor")
    assert results[0]["name"] == "Cursor"
    assert names(results) == {"Cursor", "Notes"}


@pytest.mark.parametrize("query", ['"unbalanced', "AND", "name:", "(chat"])
def test_malformed_query_returns_empty(seeded_db, query):
    assert seeded_db.search_tools(query) == []


def test_limit_is_clamped(seeded_db):
    assert len(seeded_db.search_tools("Chat*", limit=1)) == 1
    assert len(seeded_db.search_tools("Chat*", limit=0)) == 1
    assert len(seeded_db.search_tools("Chat*", limit=1000)) == 3


@pytest.mark.parametrize("limit", ["5", 2.5, True])
def test_non_integer_limit_is_rejected(seeded_db, limit):
    with pytest.raises(ValidationError):
        search_tools(seeded_db.statements, "Chat*", limit)


# =============================================================================
# 2. Index maintenance by triggers
# =============================================================================
def test_deleted_tool_leaves_results(seeded_db):
    seeded_db.soft_delete_tool(seeded_db.resolve_tool_id(1))
    assert names(seeded_db.search_tools("Chat*")) == {"Claude", "Perplexity"}


def test_removed_tag_leaves_results(seeded_db):
    tool_id = seeded_db.resolve_tool_id(2)
    (chat_tag,) = [t for t in seeded_db.get_tool_tags(tool_id) if t["name"] == "Chat"]
    seeded_db.remove_tag(tool_id, chat_tag["id"])
    assert "Claude" not in names(seeded_db.search_tools("Chat*"))


def test_added_tag_is_searchable(seeded_db):
    seeded_db.add_tag(seeded_db.resolve_tool_id(10), "Podcast")
    assert names(seeded_db.search_tools("podcast")) == {"ElevenLabs"}


def test_renamed_tool_is_reindexed(seeded_db):
    seeded_db.update_tool(seeded_db.resolve_tool_id(6), ToolUpdate(name="Gen Studio"))
    assert names(seeded_db.search_tools("studio")) == {"Gen Studio"}
    assert seeded_db.search_tools("runway") == []


def test_renamed_category_is_reindexed(seeded_db):
    seeded_db.conn.execute("UPDATE categories SET name = 'Visual' WHERE legacy_id = 2")
    assert names(seeded_db.search_tools("visual")) == {"Midjourney", "Stable Diffusion", "Runway"}
    assert seeded_db.search_tools("creative") == []


def test_view_count_changes_leave_index_alone(seeded_db):
    before = seeded_db.conn.execute("SELECT COUNT(*) FROM tools_fts").fetchone()[0]
    seeded_db.increment_view_count(seeded_db.resolve_tool_id(1))
    assert seeded_db.conn.execute("SELECT COUNT(*) FROM tools_fts").fetchone()[0] == before
    assert seeded_db.verify_search_index()["in_sync"] == 1


# =============================================================================
# 3. Rebuild and verify
# =============================================================================
def test_rebuild_restores_index(seeded_db):
    seeded_db.conn.execute("DELETE FROM tools_fts")
    assert seeded_db.verify_search_index() == {"active_tools": 10, "indexed": 0, "in_sync": 0}

    assert seeded_db.rebuild_search_index() == 10
    assert seeded_db.verify_search_index()["in_sync"] == 1
    assert names(seeded_db.search_tools("Chat*")) == {"ChatGPT", "Claude", "Perplexity"}


def test_empty_index_is_filled_on_open(seeded_db_path):
    db = ToolDatabase(seeded_db_path)
    db.conn.execute("DELETE FROM tools_fts")
    db.close()

    db = ToolDatabase(seeded_db_path)
    try:
        assert db.verify_search_index()["indexed"] == 10
    finally:
        db.close()


def test_optimize_keeps_results(seeded_db):
    seeded_db.fts.optimize()
    assert len(seeded_db.search_tools("code")) == 2
