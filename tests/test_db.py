"""
Tests for the ToolDatabase facade and its repositories.

Databases are populated from the shared seed document (see conftest.py):
legacy ids 1-10 for tools, 1-3 for categories.
"""

import sqlite3
import threading

import pytest

from toolnav.core.db import PreparedStatements, ToolDatabase
from toolnav.core.errors import DatabaseError, StatementsNotInitializedError, ValidationError
from toolnav.core.models import ToolCreate, ToolUpdate


def tag_count(db):
    return db.conn.execute("SELECT COUNT(*) FROM tags").fetchone()[0]


# =============================================================================
# 1. Schema and statements
# =============================================================================
def test_schema_is_idempotent(temp_db_path):
    """Opening the same file twice does not fail or duplicate the site row."""
    ToolDatabase(temp_db_path).close()
    db = ToolDatabase(temp_db_path)
    try:
        rows = db.conn.execute("SELECT COUNT(*) FROM site_config").fetchone()[0]
        assert rows == 1
        assert db.conn.execute("PRAGMA journal_mode").fetchone()[0] == "wal"
        assert db.conn.execute("PRAGMA foreign_keys").fetchone()[0] == 1
    finally:
        db.close()


def test_statements_unusable_before_initialize(temp_db):
    statements = PreparedStatements(temp_db.conn)
    assert not statements.initialized
    with pytest.raises(StatementsNotInitializedError):
        statements.get("get_active_tools")

    statements.initialize()
    statements.initialize()
    assert statements.initialized
    assert "search_tools" in statements.names
    assert statements.fetchall("get_active_tools") == []


def test_unknown_statement_name(temp_db):
    with pytest.raises(StatementsNotInitializedError):
        temp_db.statements.get("drop_everything")


def test_statement_against_missing_table_fails_at_initialize(temp_db):
    statements = PreparedStatements(temp_db.conn, {"broken": "SELECT id FROM no_such_table WHERE id = ?"})
    with pytest.raises(sqlite3.OperationalError):
        statements.initialize()
    assert not statements.initialized


def test_closed_database_rejects_queries(temp_db_path):
    db = ToolDatabase(temp_db_path)
    db.close()
    with pytest.raises(DatabaseError):
        db.list_active_tools()


# =============================================================================
# 2. Identifier resolution and reads
# =============================================================================
def test_legacy_id_round_trip(seeded_db):
    for legacy_id in range(1, 11):
        tool_id = seeded_db.resolve_tool_id(legacy_id)
        assert tool_id is not None
        assert seeded_db.get_tool(tool_id)["legacy_id"] == legacy_id


def test_unknown_ids_resolve_to_none(seeded_db):
    assert seeded_db.resolve_tool_id(999) is None
    assert seeded_db.resolve_category_id(999) is None
    assert seeded_db.get_tool(999) is None
    assert seeded_db.get_tool_by_legacy_id(999) is None


def test_list_active_tools_sorted_by_views(seeded_db):
    tools = seeded_db.list_active_tools()
    assert len(tools) == 10
    views = [tool["view_count"] for tool in tools]
    assert views == sorted(views, reverse=True)
    assert tools[0]["name"] == "ChatGPT"
    assert tools[0]["category_name"] == "Assistants"
    assert set(tools[0]["tags"].split(",")) == {"Chat", "NLP"}


def test_list_active_categories(seeded_db):
    categories = seeded_db.list_active_categories()
    assert [c["legacy_id"] for c in categories] == [1, 2, 3]
    assert [c["tool_count"] for c in categories] == [3, 3, 4]


def test_site_config(seeded_db):
    site = seeded_db.get_site_config()
    assert site["site_name"] == "AI Tool Navigator"
    assert site["keywords"] == ["AI", "tools", "directory"]


# =============================================================================
# 3. View counts
# =============================================================================
def test_increment_view_count(seeded_db):
    tool_id = seeded_db.resolve_tool_id(1)
    assert seeded_db.increment_view_count(tool_id) == 1
    assert seeded_db.get_tool(tool_id)["view_count"] == 501


def test_concurrent_increments_are_not_lost(seeded_db_path):
    """N callers on N connections each add one view; the total rises by N."""
    workers = 8
    rounds = 5
    dbs = [ToolDatabase(seeded_db_path, retry_delay=0.01) for _ in range(workers)]
    tool_id = dbs[0].resolve_tool_id(3)
    before = dbs[0].get_tool(tool_id)["view_count"]
    errors = []

    def hammer(db):
        try:
            for _ in range(rounds):
                db.increment_view_count(tool_id)
        except Exception as e:  # surfaced below
            errors.append(e)

    threads = [threading.Thread(target=hammer, args=(db,)) for db in dbs]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    try:
        assert errors == []
        assert dbs[0].get_tool(tool_id)["view_count"] == before + workers * rounds
    finally:
        for db in dbs:
            db.close()


def test_sync_view_counts_only_raises(seeded_db):
    updated = seeded_db.sync_view_counts({1: 1000, 2: 5, 999: 50})
    assert updated == 2
    assert seeded_db.get_tool_by_legacy_id(1)["view_count"] == 1000
    assert seeded_db.get_tool_by_legacy_id(2)["view_count"] == 300


# =============================================================================
# 4. Soft delete and updates
# =============================================================================
def test_soft_delete_is_idempotent(seeded_db):
    tool_id = seeded_db.resolve_tool_id(4)

    assert seeded_db.soft_delete_tool(tool_id) == 1
    assert seeded_db.soft_delete_tool(tool_id) == 0

    assert seeded_db.resolve_tool_id(4) is None
    assert seeded_db.get_tool(tool_id) is None
    assert len(seeded_db.list_active_tools()) == 9
    row = seeded_db.conn.execute("SELECT is_deleted FROM tools WHERE id = ?", (tool_id,)).fetchone()
    assert row["is_deleted"] == 1


def test_update_writes_only_set_fields(seeded_db):
    tool_id = seeded_db.resolve_tool_id(2)
    before = seeded_db.get_tool(tool_id)

    assert seeded_db.update_tool(tool_id, ToolUpdate(name="Claude 3", is_featured=True)) == 1

    after = seeded_db.get_tool(tool_id)
    assert after["name"] == "Claude 3"
    assert after["is_featured"] == 1
    assert after["description"] == before["description"]
    assert after["view_count"] == before["view_count"]


def test_empty_update_is_a_no_op(seeded_db):
    tool_id = seeded_db.resolve_tool_id(2)
    assert seeded_db.update_tool(tool_id, ToolUpdate()) == 0


def test_update_rejects_null_name(seeded_db):
    tool_id = seeded_db.resolve_tool_id(2)
    with pytest.raises(ValidationError):
        seeded_db.update_tool(tool_id, ToolUpdate(name=None))
    assert seeded_db.get_tool(tool_id)["name"] == "Claude"


def test_update_moves_tool_between_categories(seeded_db):
    tool_id = seeded_db.resolve_tool_id(9)
    category_id = seeded_db.resolve_category_id(1)

    seeded_db.update_tool(tool_id, ToolUpdate(category_id=category_id))

    assert seeded_db.get_tool(tool_id)["category_name"] == "Assistants"
    counts = {c["legacy_id"]: c["tool_count"] for c in seeded_db.list_active_categories()}
    assert counts == {1: 4, 2: 3, 3: 3}


def test_update_of_deleted_tool_changes_nothing(seeded_db):
    tool_id = seeded_db.resolve_tool_id(5)
    seeded_db.soft_delete_tool(tool_id)
    assert seeded_db.update_tool(tool_id, ToolUpdate(name="Ghost")) == 0


def test_update_with_missing_category_is_a_database_error(seeded_db):
    tool_id = seeded_db.resolve_tool_id(5)
    with pytest.raises(DatabaseError):
        seeded_db.update_tool(tool_id, ToolUpdate(category_id=999))


# =============================================================================
# 5. Creation and tags
# =============================================================================
def test_create_tool_with_tags(seeded_db):
    tags_before = tag_count(seeded_db)

    created = seeded_db.create_tool(
        ToolCreate(name="Gemini", category_legacy_id=1, url="https://gemini.test", tags=["NLP", "Chat"])
    )

    assert created.legacy_id == 11
    links = seeded_db.conn.execute(
        "SELECT COUNT(*) FROM tool_tags WHERE tool_id = ?", (created.id,)
    ).fetchone()[0]
    assert links == 2
    # Both tags already existed
    assert tag_count(seeded_db) == tags_before

    listed = {tool["legacy_id"]: tool for tool in seeded_db.list_active_tools()}
    assert listed[11]["category_name"] == "Assistants"
    assert sorted(tag["name"] for tag in seeded_db.get_tool_tags(created.id)) == ["Chat", "NLP"]


def test_create_tool_reuses_tags_case_insensitively(seeded_db):
    tags_before = tag_count(seeded_db)
    created = seeded_db.create_tool(
        ToolCreate(name="Bard", category_legacy_id=1, tags=["nlp", "CHAT", "Brand New"])
    )
    assert tag_count(seeded_db) == tags_before + 1
    assert sorted(t["name"] for t in seeded_db.get_tool_tags(created.id)) == ["Brand New", "Chat", "NLP"]


def test_create_tool_in_empty_database(temp_db):
    temp_db.conn.execute("INSERT INTO categories (legacy_id, name) VALUES (6, 'Agents')")

    created = temp_db.create_tool(ToolCreate(name="AutoGPT", category_legacy_id=6, tags=["NLP", "Chat"]))

    assert created.legacy_id == 1
    assert tag_count(temp_db) == 2
    assert temp_db.get_tool(created.id)["category_legacy_id"] == 6


def test_legacy_ids_are_not_reused_after_delete(seeded_db):
    seeded_db.soft_delete_tool(seeded_db.resolve_tool_id(10))
    created = seeded_db.create_tool(ToolCreate(name="Next", category_legacy_id=2))
    assert created.legacy_id == 11


def test_create_tool_with_unknown_category_writes_nothing(seeded_db):
    with pytest.raises(ValidationError):
        seeded_db.create_tool(ToolCreate(name="Orphan", category_legacy_id=42, tags=["Fresh"]))

    assert len(seeded_db.list_active_tools()) == 10
    assert seeded_db.conn.execute("SELECT COUNT(*) FROM tags WHERE name = 'Fresh'").fetchone()[0] == 0


def test_add_and_remove_tag(seeded_db):
    tool_id = seeded_db.resolve_tool_id(5)

    tag_id = seeded_db.add_tag(tool_id, "Open Source")
    assert seeded_db.add_tag(tool_id, "open source") == tag_id
    assert [t["name"] for t in seeded_db.get_tool_tags(tool_id)] == ["Image", "Open Source"]

    assert seeded_db.remove_tag(tool_id, tag_id) == 1
    assert seeded_db.remove_tag(tool_id, tag_id) == 0
    assert [t["name"] for t in seeded_db.get_tool_tags(tool_id)] == ["Image"]
    # The tag row survives without any association
    assert "Open Source" in [t["name"] for t in seeded_db.list_tags()]


# =============================================================================
# 6. Category ordering
# =============================================================================
def test_reorder_categories(seeded_db):
    updated = seeded_db.reorder_categories([(3, 0), (1, 2), (99, 1)])
    assert updated == 2
    orders = {c["legacy_id"]: c["display_order"] for c in seeded_db.list_active_categories()}
    assert orders == {1: 2, 2: 1, 3: 0}


def test_reorder_is_atomic_for_readers(seeded_db_path):
    """A second connection sees either the old or the new order, never a mix."""
    writer = ToolDatabase(seeded_db_path)
    reader = ToolDatabase(seeded_db_path)

    def orders():
        return {c["legacy_id"]: c["display_order"] for c in reader.list_active_categories()}

    try:
        before = orders()
        with writer.conn.transaction():
            writer.categories.reorder([(3, 0), (1, 2)])
            assert orders() == before
        assert orders() == {1: 2, 2: 1, 3: 0}
    finally:
        reader.close()
        writer.close()


def test_failed_reorder_rolls_back_every_pair(seeded_db):
    with pytest.raises(DatabaseError):
        seeded_db.reorder_categories([(1, 7), (2, -1)])

    orders = {c["legacy_id"]: c["display_order"] for c in seeded_db.list_active_categories()}
    assert orders == {1: 0, 2: 1, 3: 2}
    assert not seeded_db.conn.in_transaction


# =============================================================================
# 7. Transactions
# =============================================================================
def test_nested_transaction_failure_keeps_outer_work(seeded_db):
    conn = seeded_db.conn
    with conn.transaction():
        conn.execute("UPDATE tools SET view_count = 1 WHERE legacy_id = 1")
        with pytest.raises(RuntimeError):
            with conn.transaction():
                conn.execute("UPDATE tools SET view_count = 2 WHERE legacy_id = 2")
                raise RuntimeError("inner failure")

    assert seeded_db.get_tool_by_legacy_id(1)["view_count"] == 1
    assert seeded_db.get_tool_by_legacy_id(2)["view_count"] == 300
