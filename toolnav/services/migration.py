"""
One-shot migration of a JSON seed snapshot into the relational store.

Stages run in a fixed order and stop at the first failure:

1. recreate the database file and schema
2. load and validate the JSON source
3. site configuration and keywords
4. categories (display order = position in the source array)
5. tools and tags, in per-batch transactions
6. integrity checks
7. report

Stages 2-6 each leave a migration_log row. There is no transaction spanning
stages: a failure keeps whatever earlier stages committed, and the run is
repeated from the same source file.
"""

import json
import logging
import os
import sqlite3
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Union

from pydantic import ValidationError as PydanticValidationError

from toolnav.core.db import ToolDatabase
from toolnav.core.db.constants import DEFAULT_BATCH_SIZE
from toolnav.core.errors import DatabaseError, MigrationIntegrityError, ValidationError
from toolnav.core.models import SeedDocument
from toolnav.core.utils import batched, extract_legacy_id

logger = logging.getLogger(__name__)


@dataclass
class IntegrityCheck:
    """One verification query and the count it must return."""

    name: str
    query: str
    expected: int
    actual: Optional[int] = None

    @property
    def passed(self) -> bool:
        return self.actual == self.expected


@dataclass
class MigrationStats:
    site_keywords: int = 0
    categories: int = 0
    tools: int = 0
    tags: int = 0
    tool_tags: int = 0


@dataclass
class MigrationReport:
    """Outcome of a completed migration."""

    site_name: str
    stats: MigrationStats
    checks: List[IntegrityCheck]
    logs: List[Dict[str, Any]]
    db_size_bytes: int
    duration_seconds: float
    batch_size: int = DEFAULT_BATCH_SIZE

    def format(self) -> str:
        """Human-readable summary for the CLI."""
        lines = [
            "Migration report",
            "=" * 60,
            f"Site name: {self.site_name}",
            f"Keywords: {self.stats.site_keywords}",
            f"Categories: {self.stats.categories}",
            f"Tools: {self.stats.tools}",
            f"Tags: {self.stats.tags}",
            f"Tool-tag associations: {self.stats.tool_tags}",
            "=" * 60,
            "",
            "Integrity checks:",
        ]
        for check in self.checks:
            mark = "PASS" if check.passed else "FAIL"
            lines.append(
                f"  [{mark}] {check.name}: {check.actual} (expected {check.expected})"
            )
        lines.append("")
        lines.append("Migration log:")
        for log in self.logs:
            duration = log.get("duration_seconds")
            duration_str = f"{duration:.2f}s" if duration is not None else "?"
            lines.append(
                f"  [{log['status'].upper()}] {log['batch_name']} - "
                f"{log['records_migrated']} records ({duration_str})"
            )
            if log.get("error_message"):
                lines.append(f"    error: {log['error_message']}")
        lines.append("")
        lines.append(f"Database size: {self.db_size_bytes / 1024:.2f} KB")
        lines.append(f"Total time: {self.duration_seconds:.2f}s")
        return "\n".join(lines)


class MigrationPipeline:
    """
    Load a seed JSON file into a fresh database.

    Parameters
    ----------
    source_path : str or Path
        JSON document with ``siteConfig``, ``categories`` and ``tools``
    db_path : str or Path
        Database file to (re)create; an existing file is deleted
    batch_size : int
        Tools per transaction in the tools stage
    progress : callable, optional
        ``progress(done, total)`` after each committed tool batch
    """

    def __init__(
        self,
        source_path: Union[str, Path],
        db_path: Union[str, Path],
        batch_size: int = DEFAULT_BATCH_SIZE,
        progress: Optional[Callable[[int, int], None]] = None,
    ):
        if batch_size <= 0:
            raise ValueError("batch_size must be positive")
        self.source_path = Path(source_path)
        self.db_path = Path(db_path)
        self.batch_size = batch_size
        self.progress = progress

        self.db: Optional[ToolDatabase] = None
        self.data: Optional[SeedDocument] = None
        self.stats = MigrationStats()

    def run(self) -> MigrationReport:
        """
        Execute all stages.

        Returns
        -------
        MigrationReport
            Counts, check results, and log rows

        Raises
        ------
        MigrationIntegrityError
            If any post-load check fails
        """
        start = time.monotonic()
        logger.info("Starting migration from %s into %s", self.source_path, self.db_path)

        try:
            self.recreate_schema()
            self._run_stage("load_source", self.load_source)
            self._run_stage("site_config", self.migrate_site_config)
            self._run_stage("categories", self.migrate_categories)
            self._run_stage("tools_and_tags", self.migrate_tools_and_tags)
            checks = self._run_stage("verify", self.verify)
            report = self.build_report(checks, time.monotonic() - start)
        finally:
            self.close()

        logger.info("Migration completed in %.2fs", report.duration_seconds)
        return report

    def close(self) -> None:
        if self.db is not None:
            self.db.close()
            self.db = None

    # -------------------------------------------------------------------------
    # Stage bookkeeping
    # -------------------------------------------------------------------------

    def _run_stage(self, name: str, stage: Callable[[], Any]) -> Any:
        """Run one stage between a ``running`` and a final log row update."""
        log = self.db.migration_log
        log_id = log.start(name)
        logger.info("Stage %s started", name)
        try:
            result = stage()
        except Exception as e:
            log.fail(log_id, str(e), self._records_for(name))
            logger.error("Stage %s failed: %s", name, e)
            if isinstance(e, sqlite3.Error):
                raise DatabaseError(str(e)) from e
            raise
        log.complete(log_id, self._records_for(name))
        logger.info("Stage %s completed", name)
        return result

    def _records_for(self, name: str) -> int:
        if name == "load_source":
            return len(self.data.tools) if self.data else 0
        if name == "site_config":
            return self.stats.site_keywords
        if name == "categories":
            return self.stats.categories
        if name == "tools_and_tags":
            return self.stats.tools
        return 0

    # -------------------------------------------------------------------------
    # Stages
    # -------------------------------------------------------------------------

    def recreate_schema(self) -> None:
        """Delete the database file (and WAL siblings) and create the schema."""
        for suffix in ("", "-wal", "-shm"):
            path = Path(f"{self.db_path}{suffix}")
            if path.exists():
                logger.warning("Removing existing database file %s", path)
                path.unlink()

        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self.db = ToolDatabase(str(self.db_path))

    def load_source(self) -> SeedDocument:
        """
        Parse and validate the JSON source.

        Raises
        ------
        ValidationError
            If the file is not valid JSON or does not match the seed format
        """
        try:
            with open(self.source_path, "r", encoding="utf-8") as f:
                raw = json.load(f)
        except json.JSONDecodeError as e:
            raise ValidationError(f"Invalid JSON in {self.source_path}: {e}") from e

        try:
            self.data = SeedDocument.model_validate(raw)
        except PydanticValidationError as e:
            raise ValidationError(f"Invalid seed document: {e}") from e

        logger.info(
            "Loaded %d tools and %d categories",
            len(self.data.tools),
            len(self.data.categories),
        )
        return self.data

    def migrate_site_config(self) -> None:
        site = self.data.site_config
        conn = self.db.conn
        with conn.transaction():
            conn.execute(
                """
                UPDATE site_config
                SET site_name = ?, description = ?, updated_at = CURRENT_TIMESTAMP
                WHERE id = 1
                """,
                (site.site_name, site.description),
            )
            for keyword in site.keywords:
                conn.execute(
                    "INSERT OR IGNORE INTO site_keywords (keyword) VALUES (?)", (keyword,)
                )
                self.stats.site_keywords += 1

    def migrate_categories(self) -> None:
        conn = self.db.conn
        with conn.transaction():
            for index, category in enumerate(self.data.categories):
                conn.execute(
                    """
                    INSERT INTO categories (legacy_id, name, icon, display_order)
                    VALUES (?, ?, ?, ?)
                    """,
                    (extract_legacy_id(category.id), category.name, category.icon, index),
                )
                self.stats.categories += 1

    def migrate_tools_and_tags(self) -> None:
        """
        Insert tools and their tags, one transaction per batch.

        An unknown category reference is stored as a NULL category_id and
        reported by the integrity checks.
        """
        conn = self.db.conn
        tools = self.data.tools
        total = len(tools)
        done = 0

        for batch in batched(tools, self.batch_size):
            with conn.transaction():
                for tool in batch:
                    cursor = conn.execute(
                        """
                        INSERT INTO tools (
                            legacy_id, name, description, logo, url, category_id,
                            is_featured, is_new, view_count, added_date
                        ) VALUES (
                            ?, ?, ?, ?, ?,
                            (SELECT id FROM categories WHERE legacy_id = ?),
                            ?, ?, ?, ?
                        )
                        """,
                        (
                            extract_legacy_id(tool.id),
                            tool.name,
                            tool.description or None,
                            tool.logo or None,
                            tool.url or None,
                            extract_legacy_id(tool.category_id),
                            int(tool.is_featured),
                            int(tool.is_new),
                            max(0, tool.view_count),
                            tool.added_date or None,
                        ),
                    )
                    tool_id = cursor.lastrowid

                    for tag in tool.tags:
                        created = conn.execute(
                            "INSERT OR IGNORE INTO tags (name) VALUES (?)", (tag,)
                        ).rowcount
                        self.stats.tags += created
                        linked = conn.execute(
                            """
                            INSERT OR IGNORE INTO tool_tags (tool_id, tag_id)
                            VALUES (?, (SELECT id FROM tags WHERE name = ? COLLATE NOCASE))
                            """,
                            (tool_id, tag),
                        ).rowcount
                        self.stats.tool_tags += linked

            # Counted after commit so the log reflects what persisted
            self.stats.tools += len(batch)
            done += len(batch)
            logger.info("Progress: %d/%d (%d%%)", done, total, round(done / total * 100))
            if self.progress:
                self.progress(done, total)

    def integrity_checks(self) -> List[IntegrityCheck]:
        return [
            IntegrityCheck(
                name="category count",
                query="SELECT COUNT(*) FROM categories WHERE is_deleted = 0",
                expected=len(self.data.categories),
            ),
            IntegrityCheck(
                name="tool count",
                query="SELECT COUNT(*) FROM tools WHERE is_deleted = 0",
                expected=len(self.data.tools),
            ),
            IntegrityCheck(
                name="tools with missing category",
                query="""
                    SELECT COUNT(*) FROM tools
                    WHERE category_id IS NULL
                       OR category_id NOT IN (SELECT id FROM categories)
                """,
                expected=0,
            ),
            IntegrityCheck(
                name="orphan tag associations",
                query="""
                    SELECT COUNT(*) FROM tool_tags tt
                    WHERE NOT EXISTS (SELECT 1 FROM tools WHERE id = tt.tool_id)
                """,
                expected=0,
            ),
        ]

    def verify(self) -> List[IntegrityCheck]:
        """
        Run the integrity battery.

        Raises
        ------
        MigrationIntegrityError
            Listing every failed check
        """
        checks = self.integrity_checks()
        for check in checks:
            check.actual = self.db.conn.execute(check.query).fetchone()[0]
            if check.passed:
                logger.info("Check %s: %d", check.name, check.actual)
            else:
                logger.error(
                    "Check %s: %d (expected %d)", check.name, check.actual, check.expected
                )

        failed = [check.name for check in checks if not check.passed]
        if failed:
            raise MigrationIntegrityError(failed)
        return checks

    def build_report(self, checks: List[IntegrityCheck], duration: float) -> MigrationReport:
        self.db.conn.execute("PRAGMA wal_checkpoint(TRUNCATE)")
        return MigrationReport(
            site_name=self.data.site_config.site_name,
            stats=self.stats,
            checks=checks,
            logs=self.db.migration_log.list(),
            db_size_bytes=os.path.getsize(self.db_path),
            duration_seconds=duration,
            batch_size=self.batch_size,
        )
