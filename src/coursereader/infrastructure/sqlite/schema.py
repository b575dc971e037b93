"""
Versioned SQLite schema for the local course store.

Version history:
- v1: courses (single markdown body), progress keyed by course, notes
- v2: parts, chapters and subchapters tables; course metadata columns;
      chapter/subchapter references on progress and notes

Migrations only ever append: new tables, new nullable columns and indexes.
Existing columns are never dropped or repurposed, so every row written by
an older release survives an upgrade.
"""

from __future__ import annotations

import logging
import sqlite3
from typing import Callable

logger = logging.getLogger(__name__)

# Current schema version - increment together with a new MIGRATIONS entry
SCHEMA_VERSION = 2

# ============================================================================
# Version 1
# ============================================================================

SCHEMA_V1_STATEMENTS = (
    """
    CREATE TABLE IF NOT EXISTS schema_meta (
        key TEXT PRIMARY KEY,
        value TEXT
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS courses (
        id TEXT PRIMARY KEY,
        title TEXT NOT NULL,
        description TEXT NOT NULL DEFAULT '',
        content TEXT,
        created_at TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS progress (
        id TEXT PRIMARY KEY,
        completed INTEGER NOT NULL DEFAULT 0,
        last_read TEXT
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS notes (
        id TEXT PRIMARY KEY,
        course_id TEXT NOT NULL,
        title TEXT NOT NULL,
        content TEXT NOT NULL DEFAULT '',
        created_at TEXT NOT NULL
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_courses_title ON courses(title)",
    "CREATE INDEX IF NOT EXISTS idx_notes_course ON notes(course_id, created_at)",
)

# ============================================================================
# Version 2
# ============================================================================

SCHEMA_V2_TABLES = (
    """
    CREATE TABLE IF NOT EXISTS parts (
        id TEXT PRIMARY KEY,                 -- courseId-partId
        course_id TEXT NOT NULL REFERENCES courses(id),
        part_id TEXT NOT NULL,
        title TEXT NOT NULL,
        sort_order INTEGER,
        UNIQUE(course_id, part_id)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS chapters (
        id TEXT PRIMARY KEY,                 -- courseId-chapterId
        course_id TEXT NOT NULL REFERENCES courses(id),
        chapter_id TEXT NOT NULL,
        part_id TEXT,
        title TEXT NOT NULL,
        content TEXT NOT NULL DEFAULT '',
        sort_order INTEGER,
        created_at TEXT NOT NULL,
        UNIQUE(course_id, chapter_id)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS subchapters (
        id TEXT PRIMARY KEY,                 -- courseId-chapterId-subchapterId
        course_id TEXT NOT NULL REFERENCES courses(id),
        chapter_id TEXT NOT NULL,
        subchapter_id TEXT NOT NULL,
        title TEXT NOT NULL,
        content TEXT NOT NULL DEFAULT '',
        sort_order INTEGER,
        created_at TEXT NOT NULL,
        UNIQUE(course_id, chapter_id, subchapter_id),
        FOREIGN KEY (course_id, chapter_id) REFERENCES chapters(course_id, chapter_id)
    )
    """,
)

# (table, column, declaration) appended by v2
SCHEMA_V2_COLUMNS = (
    ("courses", "sort_order", "INTEGER"),
    ("courses", "author", "TEXT"),
    ("courses", "version", "TEXT"),
    ("courses", "tags", "TEXT"),  # JSON array
    ("courses", "difficulty", "TEXT"),
    ("courses", "estimated_hours", "REAL"),
    ("courses", "prerequisites", "TEXT"),  # JSON array
    ("progress", "course_id", "TEXT"),
    ("progress", "chapter_id", "TEXT"),
    ("progress", "subchapter_id", "TEXT"),
    ("notes", "chapter_id", "TEXT"),
    ("notes", "subchapter_id", "TEXT"),
)

SCHEMA_V2_INDEXES = (
    "CREATE INDEX IF NOT EXISTS idx_courses_order ON courses(sort_order)",
    "CREATE INDEX IF NOT EXISTS idx_parts_course ON parts(course_id, sort_order)",
    "CREATE INDEX IF NOT EXISTS idx_chapters_course ON chapters(course_id, sort_order)",
    "CREATE INDEX IF NOT EXISTS idx_subchapters_chapter ON subchapters(course_id, chapter_id, sort_order)",
    "CREATE INDEX IF NOT EXISTS idx_progress_course ON progress(course_id, chapter_id)",
    "CREATE INDEX IF NOT EXISTS idx_notes_chapter ON notes(course_id, chapter_id)",
)


def table_exists(connection: sqlite3.Connection, table: str) -> bool:
    row = connection.execute(
        "SELECT 1 FROM sqlite_master WHERE type = 'table' AND name = ?", (table,)
    ).fetchone()
    return row is not None


def column_names(connection: sqlite3.Connection, table: str) -> set[str]:
    return {row[1] for row in connection.execute(f"PRAGMA table_info({table})")}


def add_column_if_missing(
    connection: sqlite3.Connection, table: str, column: str, declaration: str
) -> bool:
    """
    Append a column to an existing table.

    Returns:
        True if the column was added, False if it already existed
    """
    if column in column_names(connection, table):
        return False
    connection.execute(f"ALTER TABLE {table} ADD COLUMN {column} {declaration}")
    logger.debug("Added column %s.%s", table, column)
    return True


def read_schema_version(connection: sqlite3.Connection) -> int:
    """
    Get the stored schema version.

    Returns 0 for a brand-new database. A v1 file written before the
    version row existed is recognized by its courses table.
    """
    if not table_exists(connection, "schema_meta"):
        return 1 if table_exists(connection, "courses") else 0

    row = connection.execute(
        "SELECT value FROM schema_meta WHERE key = 'version'"
    ).fetchone()
    if row is None or row[0] is None:
        return 1 if table_exists(connection, "courses") else 0
    return int(row[0])


def write_schema_version(connection: sqlite3.Connection, version: int) -> None:
    connection.execute(
        """
        INSERT OR REPLACE INTO schema_meta (key, value)
        VALUES ('version', ?)
        """,
        (str(version),),
    )


def migrate_to_v1(connection: sqlite3.Connection) -> None:
    """Create the first-release tables."""
    for statement in SCHEMA_V1_STATEMENTS:
        connection.execute(statement)


def migrate_to_v2(connection: sqlite3.Connection) -> None:
    """
    Add the part/chapter/subchapter structure.

    v1 progress rows were keyed by course id; that key is copied into the
    new course_id column so existing completion state stays attached.
    """
    for statement in SCHEMA_V2_TABLES:
        connection.execute(statement)

    for table, column, declaration in SCHEMA_V2_COLUMNS:
        add_column_if_missing(connection, table, column, declaration)

    connection.execute("UPDATE progress SET course_id = id WHERE course_id IS NULL")

    for statement in SCHEMA_V2_INDEXES:
        connection.execute(statement)


# version -> migration producing that version
MIGRATIONS: dict[int, Callable[[sqlite3.Connection], None]] = {
    1: migrate_to_v1,
    2: migrate_to_v2,
}


def apply_migrations(
    connection: sqlite3.Connection, target_version: int = SCHEMA_VERSION
) -> int:
    """
    Bring the schema up to target_version.

    The caller owns the transaction. Each step records its version so a
    later run resumes after the last completed step.

    Returns:
        The version found before migrating (0 for a new database)

    Raises:
        RuntimeError: If the database was written by a newer release
    """
    current = read_schema_version(connection)
    if current > target_version:
        raise RuntimeError(
            f"Database schema v{current} is newer than supported v{target_version}"
        )

    for version in range(current + 1, target_version + 1):
        logger.info("Migrating local store schema to v%d", version)
        MIGRATIONS[version](connection)
        write_schema_version(connection, version)

    return current
