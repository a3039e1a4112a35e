"""
Database schema management for the tool directory.

Provides SchemaManager class that handles table creation, views,
indexes, the FTS5 virtual table, and the triggers that keep it in sync.
"""

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .connection import DatabaseConnection

logger = logging.getLogger(__name__)


# Derives one tools_fts row per matching tool; used by triggers and rebuilds.
FTS_ROW_SELECT = """
    SELECT
        t.id,
        t.name,
        COALESCE(t.description, ''),
        COALESCE(
            (SELECT GROUP_CONCAT(tg.name, ' ')
             FROM tool_tags tt
             JOIN tags tg ON tt.tag_id = tg.id
             WHERE tt.tool_id = t.id),
            ''
        ),
        COALESCE(c.name, '')
    FROM tools t
    LEFT JOIN categories c ON t.category_id = c.id
"""

FTS_INSERT = "INSERT INTO tools_fts(rowid, name, description, tags, category_name)"

TABLES = (
    "migration_log",
    "site_keywords",
    "site_config",
    "tool_tags",
    "tags",
    "tools",
    "categories",
)


class SchemaManager:
    """
    Manages database schema creation.

    This class handles:
    - Table creation
    - Views used by the read paths
    - FTS5 virtual table setup
    - Trigger setup for FTS sync
    - Index creation
    """

    def __init__(self, conn: "DatabaseConnection"):
        """
        Initialize schema manager.

        Parameters
        ----------
        conn : DatabaseConnection
            Database connection to use for schema operations.
        """
        self._conn = conn

    def ensure(self) -> None:
        """Ensure all database schema exists."""
        with self._conn.transaction():
            cursor = self._conn.cursor()

            self._create_categories_table(cursor)
            self._create_tools_table(cursor)
            self._create_tags_table(cursor)
            self._create_tool_tags_table(cursor)
            self._create_site_tables(cursor)
            self._create_migration_log_table(cursor)

            self._create_views(cursor)

            self._create_tools_fts(cursor)
            self._create_fts_triggers(cursor)

            self._create_indexes(cursor)

            self._check_fts_migration(cursor)

        logger.info("Database schema initialized at %s", self._conn.db_path)

    def _create_categories_table(self, cursor) -> None:
        cursor.execute("""
            CREATE TABLE IF NOT EXISTS categories (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                legacy_id INTEGER UNIQUE NOT NULL,
                name TEXT NOT NULL,
                icon TEXT,
                display_order INTEGER NOT NULL DEFAULT 0 CHECK (display_order >= 0),
                is_deleted INTEGER NOT NULL DEFAULT 0 CHECK (is_deleted IN (0, 1)),
                created_at TEXT DEFAULT CURRENT_TIMESTAMP,
                updated_at TEXT DEFAULT CURRENT_TIMESTAMP
            )
        """)

    def _create_tools_table(self, cursor) -> None:
        """Create tools table. category_id may be NULL for an unresolved import."""
        cursor.execute("""
            CREATE TABLE IF NOT EXISTS tools (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                legacy_id INTEGER UNIQUE NOT NULL,
                name TEXT NOT NULL,
                description TEXT,
                logo TEXT,
                url TEXT,
                category_id INTEGER,
                is_featured INTEGER NOT NULL DEFAULT 0 CHECK (is_featured IN (0, 1)),
                is_new INTEGER NOT NULL DEFAULT 0 CHECK (is_new IN (0, 1)),
                view_count INTEGER NOT NULL DEFAULT 0 CHECK (view_count >= 0),
                added_date TEXT,
                is_deleted INTEGER NOT NULL DEFAULT 0 CHECK (is_deleted IN (0, 1)),
                created_at TEXT DEFAULT CURRENT_TIMESTAMP,
                updated_at TEXT DEFAULT CURRENT_TIMESTAMP,
                FOREIGN KEY (category_id) REFERENCES categories(id)
            )
        """)

    def _create_tags_table(self, cursor) -> None:
        cursor.execute("""
            CREATE TABLE IF NOT EXISTS tags (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                name TEXT NOT NULL UNIQUE COLLATE NOCASE,
                created_at TEXT DEFAULT CURRENT_TIMESTAMP
            )
        """)

    def _create_tool_tags_table(self, cursor) -> None:
        """Create junction table for tool-tag associations."""
        cursor.execute("""
            CREATE TABLE IF NOT EXISTS tool_tags (
                tool_id INTEGER NOT NULL,
                tag_id INTEGER NOT NULL,
                PRIMARY KEY (tool_id, tag_id),
                FOREIGN KEY (tool_id) REFERENCES tools(id) ON DELETE CASCADE,
                FOREIGN KEY (tag_id) REFERENCES tags(id) ON DELETE CASCADE
            )
        """)

    def _create_site_tables(self, cursor) -> None:
        """Create the singleton site_config row and its keyword list."""
        cursor.execute("""
            CREATE TABLE IF NOT EXISTS site_config (
                id INTEGER PRIMARY KEY CHECK (id = 1),
                site_name TEXT NOT NULL DEFAULT '',
                description TEXT NOT NULL DEFAULT '',
                updated_at TEXT DEFAULT CURRENT_TIMESTAMP
            )
        """)
        cursor.execute("""
            INSERT OR IGNORE INTO site_config (id, site_name, description)
            VALUES (1, '', '')
        """)
        cursor.execute("""
            CREATE TABLE IF NOT EXISTS site_keywords (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                keyword TEXT NOT NULL UNIQUE
            )
        """)

    def _create_migration_log_table(self, cursor) -> None:
        cursor.execute("""
            CREATE TABLE IF NOT EXISTS migration_log (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                batch_name TEXT NOT NULL,
                status TEXT NOT NULL CHECK (status IN ('running', 'completed', 'failed')),
                records_migrated INTEGER NOT NULL DEFAULT 0,
                started_at TEXT NOT NULL DEFAULT (strftime('%Y-%m-%d %H:%M:%f', 'now')),
                completed_at TEXT,
                error_message TEXT
            )
        """)

    def _create_views(self, cursor) -> None:
        """Create the active-tool and category-stats views."""
        cursor.execute("""
            CREATE VIEW IF NOT EXISTS v_active_tools AS
            SELECT
                t.id,
                t.legacy_id,
                t.name,
                t.description,
                t.logo,
                t.url,
                t.category_id,
                c.legacy_id AS category_legacy_id,
                c.name AS category_name,
                t.is_featured,
                t.is_new,
                t.view_count,
                t.added_date,
                t.created_at,
                t.updated_at,
                (SELECT GROUP_CONCAT(tg.name, ',')
                 FROM tool_tags tt
                 JOIN tags tg ON tt.tag_id = tg.id
                 WHERE tt.tool_id = t.id) AS tags
            FROM tools t
            JOIN categories c ON t.category_id = c.id
            WHERE t.is_deleted = 0 AND c.is_deleted = 0
        """)

        cursor.execute("""
            CREATE VIEW IF NOT EXISTS v_category_stats AS
            SELECT
                c.id,
                c.legacy_id,
                c.name,
                c.icon,
                c.display_order,
                c.created_at,
                c.updated_at,
                (SELECT COUNT(*)
                 FROM tools t
                 WHERE t.category_id = c.id AND t.is_deleted = 0) AS tool_count
            FROM categories c
            WHERE c.is_deleted = 0
        """)

    def _create_tools_fts(self, cursor) -> None:
        """Create FTS5 virtual table keyed by tools.id (rowid)."""
        cursor.execute("""
            CREATE VIRTUAL TABLE IF NOT EXISTS tools_fts USING fts5(
                name,
                description,
                tags,
                category_name,
                tokenize='unicode61 remove_diacritics 2'
            )
        """)

    def _create_fts_triggers(self, cursor) -> None:
        """
        Create triggers that keep tools_fts in sync with its sources.

        View-count updates do not touch the index: the tool update triggers
        only fire for the indexed columns and is_deleted.
        """
        cursor.execute(f"""
            CREATE TRIGGER IF NOT EXISTS tools_fts_insert
            AFTER INSERT ON tools
            WHEN NEW.is_deleted = 0
            BEGIN
                {FTS_INSERT}
                {FTS_ROW_SELECT}
                WHERE t.id = NEW.id;
            END
        """)

        cursor.execute(f"""
            CREATE TRIGGER IF NOT EXISTS tools_fts_update
            AFTER UPDATE OF name, description, category_id, is_deleted ON tools
            WHEN NEW.is_deleted = 0
            BEGIN
                DELETE FROM tools_fts WHERE rowid = OLD.id;
                {FTS_INSERT}
                {FTS_ROW_SELECT}
                WHERE t.id = NEW.id;
            END
        """)

        cursor.execute("""
            CREATE TRIGGER IF NOT EXISTS tools_fts_delete
            AFTER UPDATE OF is_deleted ON tools
            WHEN NEW.is_deleted = 1
            BEGIN
                DELETE FROM tools_fts WHERE rowid = OLD.id;
            END
        """)

        cursor.execute(f"""
            CREATE TRIGGER IF NOT EXISTS tools_fts_tag_insert
            AFTER INSERT ON tool_tags
            BEGIN
                DELETE FROM tools_fts WHERE rowid = NEW.tool_id;
                {FTS_INSERT}
                {FTS_ROW_SELECT}
                WHERE t.id = NEW.tool_id AND t.is_deleted = 0;
            END
        """)

        cursor.execute(f"""
            CREATE TRIGGER IF NOT EXISTS tools_fts_tag_delete
            AFTER DELETE ON tool_tags
            BEGIN
                DELETE FROM tools_fts WHERE rowid = OLD.tool_id;
                {FTS_INSERT}
                {FTS_ROW_SELECT}
                WHERE t.id = OLD.tool_id AND t.is_deleted = 0;
            END
        """)

        cursor.execute(f"""
            CREATE TRIGGER IF NOT EXISTS tools_fts_category_rename
            AFTER UPDATE OF name ON categories
            BEGIN
                DELETE FROM tools_fts
                WHERE rowid IN (SELECT id FROM tools WHERE category_id = NEW.id);
                {FTS_INSERT}
                {FTS_ROW_SELECT}
                WHERE t.category_id = NEW.id AND t.is_deleted = 0;
            END
        """)

    def _create_indexes(self, cursor) -> None:
        """Create performance indexes."""
        indexes = [
            ("idx_tools_category", "tools", "category_id"),
            ("idx_tools_active_views", "tools", "is_deleted, view_count DESC"),
            ("idx_tool_tags_tag", "tool_tags", "tag_id"),
            ("idx_categories_order", "categories", "display_order"),
            ("idx_migration_log_started", "migration_log", "started_at"),
        ]

        for idx_name, table, columns in indexes:
            cursor.execute(
                f"CREATE INDEX IF NOT EXISTS {idx_name} ON {table}({columns})"
            )

    def _check_fts_migration(self, cursor) -> None:
        """Populate tools_fts for databases created before the index existed."""
        cursor.execute("SELECT COUNT(*) FROM tools_fts")
        fts_count = cursor.fetchone()[0]
        cursor.execute("SELECT COUNT(*) FROM tools WHERE is_deleted = 0")
        tool_count = cursor.fetchone()[0]

        if tool_count > 0 and fts_count == 0:
            logger.info("Building FTS index for %d tools...", tool_count)
            cursor.execute(f"{FTS_INSERT} {FTS_ROW_SELECT} WHERE t.is_deleted = 0")
