"""
SQLite-based local store for offline course reading.

Provides CRUD operations for:
- Courses, parts, chapters and subchapters (written by sync)
- Progress and notes (written by user actions only)
- Change notifications fired after each committed write

Uses stdlib sqlite3 with no ORM.
"""

from __future__ import annotations

import json
import logging
import sqlite3
import threading
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Callable, Iterable, Iterator

from coursereader.domain.models import (
    DEFAULT_ORDER,
    Chapter,
    Course,
    Note,
    Part,
    Progress,
    Subchapter,
    utc_now,
)
from coursereader.domain.record_keys import progress_key
from coursereader.infrastructure.sqlite.schema import (
    SCHEMA_VERSION,
    apply_migrations,
    read_schema_version,
)

logger = logging.getLogger(__name__)

MEMORY_DATABASE = ":memory:"

# Every record table, in parent-first order
TABLES = ("courses", "parts", "chapters", "subchapters", "progress", "notes")

ChangeListener = Callable[[frozenset[str]], None]

# Display order: explicit order first, missing order last, ties by insertion
_ORDER_BY = f"COALESCE(sort_order, {DEFAULT_ORDER}), rowid"

# Progress lookup by id and natural keys; first-release rows have no course_id
_PROGRESS_MATCH = (
    "id = ? AND COALESCE(course_id, id) = ? "
    "AND chapter_id IS ? AND subchapter_id IS ?"
)


def _to_iso(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


def _from_iso(value: str | None) -> datetime | None:
    return datetime.fromisoformat(value) if value else None


def _to_json(values: list[str] | None) -> str | None:
    return json.dumps(list(values)) if values else None


def _from_json(value: str | None) -> list[str]:
    return list(json.loads(value)) if value else []


class CourseStore:
    """
    SQLite-backed storage for courses and learner state.

    Usage:
        store = CourseStore(Path("data/courses.db"))
        store.initialize_schema()

        with store.transaction():
            store.upsert_course(course)
            store.upsert_chapter(chapter)

        unsubscribe = store.subscribe(on_change, tables={"chapters"})
    """

    def __init__(self, db_path: Path | str) -> None:
        """
        Initialize local store.

        Args:
            db_path: Path to SQLite database file (created if not exists),
                or ":memory:" for a throwaway store
        """
        self.db_path = (
            db_path if str(db_path) == MEMORY_DATABASE else Path(db_path)
        )
        self._connection: sqlite3.Connection | None = None
        # Held for every statement and for the whole of an outermost
        # transaction; _depth and _dirty belong to the thread holding it
        self._lock = threading.RLock()
        self._depth = 0
        self._dirty: set[str] = set()
        self._listeners: list[tuple[ChangeListener, frozenset[str] | None]] = []
        logger.info("CourseStore initialized: %s", self.db_path)

    def _get_connection(self) -> sqlite3.Connection:
        """Get or create database connection."""
        with self._lock:
            return self._connect()

    def _connect(self) -> sqlite3.Connection:
        if self._connection is None:
            if isinstance(self.db_path, Path):
                # Ensure parent directory exists
                self.db_path.parent.mkdir(parents=True, exist_ok=True)

            # Autocommit mode; transaction() issues BEGIN/COMMIT itself
            self._connection = sqlite3.connect(
                str(self.db_path), isolation_level=None, check_same_thread=False
            )
            self._connection.execute("PRAGMA foreign_keys = ON")
            self._connection.row_factory = sqlite3.Row
            logger.debug("Database connection established")
        return self._connection

    def close(self) -> None:
        """Close database connection."""
        with self._lock:
            if self._connection:
                self._connection.close()
                self._connection = None
                logger.debug("Database connection closed")

    def _query(self, sql: str, params: tuple = ()) -> list[sqlite3.Row]:
        """Run a read under the store lock and fetch every row."""
        with self._lock:
            return self._connect().execute(sql, params).fetchall()

    def _query_one(self, sql: str, params: tuple = ()) -> sqlite3.Row | None:
        with self._lock:
            return self._connect().execute(sql, params).fetchone()

    # ========================================================================
    # Schema Management
    # ========================================================================

    def initialize_schema(self) -> int:
        """
        Create or migrate the schema to the current version.

        Safe to call multiple times. Existing rows are always preserved.

        Returns:
            Schema version found before initialization (0 for a new database)
        """
        with self.transaction() as conn:
            previous = apply_migrations(conn)

        if previous == SCHEMA_VERSION:
            logger.debug("Database schema already at version %d", SCHEMA_VERSION)
        else:
            logger.info(
                "Database schema initialized (v%d -> v%d)", previous, SCHEMA_VERSION
            )
        return previous

    def schema_version(self) -> int:
        with self._lock:
            return read_schema_version(self._connect())

    # ========================================================================
    # Transactions & Change Notification
    # ========================================================================

    @contextmanager
    def transaction(self) -> Iterator[sqlite3.Connection]:
        """
        Run a unit of work: commit on success, roll back on exception.

        Nested use on the same thread joins the outer transaction. Other
        threads wait until the outermost transaction ends and then run their
        own. Listeners are notified once, after the outermost commit, and
        never for a rolled-back transaction.
        """
        with self._lock:
            conn = self._connect()

            if self._depth:
                self._depth += 1
                try:
                    yield conn
                finally:
                    self._depth -= 1
                return

            conn.execute("BEGIN")
            self._depth = 1
            try:
                yield conn
                conn.execute("COMMIT")
            except BaseException:
                self._dirty.clear()
                if conn.in_transaction:
                    conn.execute("ROLLBACK")
                raise
            finally:
                self._depth = 0

            changed = frozenset(self._dirty)
            self._dirty.clear()

        if changed:
            self._notify(changed)

    def subscribe(
        self, listener: ChangeListener, tables: Iterable[str] | None = None
    ) -> Callable[[], None]:
        """
        Register a listener for committed changes.

        Args:
            listener: Called with the set of table names that changed
            tables: Only notify for these tables (all tables when None)

        Returns:
            Callable that removes the subscription
        """
        entry = (listener, frozenset(tables) if tables is not None else None)
        self._listeners.append(entry)

        def unsubscribe() -> None:
            if entry in self._listeners:
                self._listeners.remove(entry)

        return unsubscribe

    def _notify(self, changed: frozenset[str]) -> None:
        for listener, tables in list(self._listeners):
            if tables is not None and not tables & changed:
                continue
            try:
                listener(changed)
            except Exception as e:
                logger.warning("Store change listener failed: %s", e)

    def _write(self, table: str, sql: str, params: tuple = ()) -> int:
        """Execute one write statement; returns affected row count."""
        with self.transaction() as conn:
            cursor = conn.execute(sql, params)
            if cursor.rowcount:
                self._dirty.add(table)
            return cursor.rowcount

    def _upsert(self, table: str, key: str, sql: str, params: tuple) -> None:
        """
        Execute an upsert whose DO UPDATE only fires for the same natural key.

        Raises:
            ValueError: If the composite id already belongs to a record with
                different natural keys (e.g. course "a" chapter "b-c" versus
                course "a-b" chapter "c")
        """
        if not self._write(table, sql, params):
            raise ValueError(
                f"Id '{key}' in {table} already belongs to another record"
            )

    # ========================================================================
    # Course Operations
    # ========================================================================

    def upsert_course(self, course: Course) -> Course:
        """
        Insert a course or update it in place, keeping its creation time.

        Updating in place keeps the row under any child rows that
        reference it.
        """
        if course.created_at is None:
            course.created_at = utc_now()

        self._write(
            "courses",
            """
            INSERT INTO courses (
                id, title, description, sort_order, author, version, tags,
                difficulty, estimated_hours, prerequisites, created_at
            )
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            ON CONFLICT(id) DO UPDATE SET
                title = excluded.title,
                description = excluded.description,
                sort_order = excluded.sort_order,
                author = excluded.author,
                version = excluded.version,
                tags = excluded.tags,
                difficulty = excluded.difficulty,
                estimated_hours = excluded.estimated_hours,
                prerequisites = excluded.prerequisites
            """,
            (
                course.key,
                course.title,
                course.description or "",
                course.sort_order,
                course.author,
                course.version,
                _to_json(course.tags),
                course.difficulty,
                course.estimated_hours,
                _to_json(course.prerequisites),
                _to_iso(course.created_at),
            ),
        )
        logger.debug("Upserted course %s (version=%s)", course.id, course.version)
        return course

    def get_course(self, course_id: str) -> Course | None:
        """Get a course by ID."""
        row = self._query_one("SELECT * FROM courses WHERE id = ?", (course_id,))
        return self._row_to_course(row) if row else None

    def list_courses(self) -> list[Course]:
        """All courses in display order."""
        rows = self._query(f"SELECT * FROM courses ORDER BY {_ORDER_BY}")
        return [self._row_to_course(row) for row in rows]

    def get_course_versions(self) -> dict[str, str | None]:
        """Lookup of courseId -> stored version for every local course."""
        rows = self._query("SELECT id, version FROM courses")
        return {row["id"]: row["version"] for row in rows}

    def delete_course_structure(self, course_id: str) -> int:
        """
        Delete the parts, chapters and subchapters of a course.

        The course row, progress and notes are left in place.

        Returns:
            Number of rows deleted
        """
        deleted = 0
        with self.transaction():
            # Children before parents
            for table in ("subchapters", "chapters", "parts"):
                deleted += self._write(
                    table, f"DELETE FROM {table} WHERE course_id = ?", (course_id,)
                )
        logger.debug("Deleted %d structural rows of course %s", deleted, course_id)
        return deleted

    def delete_course(self, course_id: str) -> bool:
        """
        Remove a course and everything attached to it, user data included.

        Only explicit user removal calls this; sync never does.

        Returns:
            True if the course existed
        """
        with self.transaction():
            self.delete_course_structure(course_id)
            self._write(
                "progress", "DELETE FROM progress WHERE course_id = ?", (course_id,)
            )
            self._write("notes", "DELETE FROM notes WHERE course_id = ?", (course_id,))
            removed = self._write(
                "courses", "DELETE FROM courses WHERE id = ?", (course_id,)
            )

        if removed:
            logger.info("Removed course %s and its user data", course_id)
        return bool(removed)

    # ========================================================================
    # Structure Operations
    # ========================================================================

    def upsert_part(self, part: Part) -> Part:
        self._upsert(
            "parts",
            part.id,
            """
            INSERT INTO parts (id, course_id, part_id, title, sort_order)
            VALUES (?, ?, ?, ?, ?)
            ON CONFLICT(id) DO UPDATE SET
                title = excluded.title,
                sort_order = excluded.sort_order
            WHERE course_id = excluded.course_id AND part_id = excluded.part_id
            """,
            (part.id, part.course_id, part.part_id, part.title, part.sort_order),
        )
        return part

    def get_parts(self, course_id: str) -> list[Part]:
        rows = self._query(
            f"SELECT * FROM parts WHERE course_id = ? ORDER BY {_ORDER_BY}",
            (course_id,),
        )
        return [
            Part(
                course_id=row["course_id"],
                part_id=row["part_id"],
                title=row["title"],
                sort_order=row["sort_order"],
            )
            for row in rows
        ]

    def upsert_chapter(self, chapter: Chapter) -> Chapter:
        """Insert or replace a chapter's content wholesale."""
        if chapter.created_at is None:
            chapter.created_at = utc_now()

        self._upsert(
            "chapters",
            chapter.id,
            """
            INSERT INTO chapters (
                id, course_id, chapter_id, part_id, title, content,
                sort_order, created_at
            )
            VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            ON CONFLICT(id) DO UPDATE SET
                part_id = excluded.part_id,
                title = excluded.title,
                content = excluded.content,
                sort_order = excluded.sort_order
            WHERE course_id = excluded.course_id
                AND chapter_id = excluded.chapter_id
            """,
            (
                chapter.id,
                chapter.course_id,
                chapter.chapter_id,
                chapter.part_id,
                chapter.title,
                chapter.content or "",
                chapter.sort_order,
                _to_iso(chapter.created_at),
            ),
        )
        return chapter

    def get_chapter(self, course_id: str, chapter_id: str) -> Chapter | None:
        row = self._query_one(
            "SELECT * FROM chapters WHERE course_id = ? AND chapter_id = ?",
            (course_id, chapter_id),
        )
        return self._row_to_chapter(row) if row else None

    def get_chapters(self, course_id: str) -> list[Chapter]:
        """Chapters of a course in display order."""
        rows = self._query(
            f"SELECT * FROM chapters WHERE course_id = ? ORDER BY {_ORDER_BY}",
            (course_id,),
        )
        return [self._row_to_chapter(row) for row in rows]

    def upsert_subchapter(self, subchapter: Subchapter) -> Subchapter:
        """Insert or replace a subchapter; its chapter must already exist."""
        if subchapter.created_at is None:
            subchapter.created_at = utc_now()

        self._upsert(
            "subchapters",
            subchapter.id,
            """
            INSERT INTO subchapters (
                id, course_id, chapter_id, subchapter_id, title, content,
                sort_order, created_at
            )
            VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            ON CONFLICT(id) DO UPDATE SET
                title = excluded.title,
                content = excluded.content,
                sort_order = excluded.sort_order
            WHERE course_id = excluded.course_id
                AND chapter_id = excluded.chapter_id
                AND subchapter_id = excluded.subchapter_id
            """,
            (
                subchapter.id,
                subchapter.course_id,
                subchapter.chapter_id,
                subchapter.subchapter_id,
                subchapter.title,
                subchapter.content or "",
                subchapter.sort_order,
                _to_iso(subchapter.created_at),
            ),
        )
        return subchapter

    def get_subchapter(
        self, course_id: str, chapter_id: str, subchapter_id: str
    ) -> Subchapter | None:
        row = self._query_one(
            """
            SELECT * FROM subchapters
            WHERE course_id = ? AND chapter_id = ? AND subchapter_id = ?
            """,
            (course_id, chapter_id, subchapter_id),
        )
        return self._row_to_subchapter(row) if row else None

    def get_subchapters(
        self, course_id: str, chapter_id: str | None = None
    ) -> list[Subchapter]:
        """Subchapters of a course, or of one chapter, in display order."""
        if chapter_id is None:
            rows = self._query(
                f"SELECT * FROM subchapters WHERE course_id = ? ORDER BY {_ORDER_BY}",
                (course_id,),
            )
        else:
            rows = self._query(
                f"""
                SELECT * FROM subchapters
                WHERE course_id = ? AND chapter_id = ?
                ORDER BY {_ORDER_BY}
                """,
                (course_id, chapter_id),
            )
        return [self._row_to_subchapter(row) for row in rows]

    # ========================================================================
    # Progress Operations
    # ========================================================================

    def upsert_progress(self, progress: Progress) -> Progress:
        self._upsert(
            "progress",
            progress.id,
            """
            INSERT INTO progress (
                id, course_id, chapter_id, subchapter_id, completed, last_read
            )
            VALUES (?, ?, ?, ?, ?, ?)
            ON CONFLICT(id) DO UPDATE SET
                course_id = excluded.course_id,
                completed = excluded.completed,
                last_read = excluded.last_read
            -- First-release rows may predate the course_id column
            WHERE COALESCE(course_id, id) = excluded.course_id
                AND chapter_id IS excluded.chapter_id
                AND subchapter_id IS excluded.subchapter_id
            """,
            (
                progress.id,
                progress.course_id,
                progress.chapter_id,
                progress.subchapter_id,
                int(progress.completed),
                _to_iso(progress.last_read),
            ),
        )
        return progress

    def get_progress(
        self,
        course_id: str,
        chapter_id: str | None,
        subchapter_id: str | None = None,
    ) -> Progress | None:
        row = self._query_one(
            f"SELECT * FROM progress WHERE {_PROGRESS_MATCH}",
            self._progress_params(course_id, chapter_id, subchapter_id),
        )
        return self._row_to_progress(row) if row else None

    @staticmethod
    def _progress_params(
        course_id: str, chapter_id: str | None, subchapter_id: str | None
    ) -> tuple:
        return (
            progress_key(course_id, chapter_id, subchapter_id),
            course_id,
            chapter_id,
            subchapter_id,
        )

    def list_progress(self, course_id: str | None = None) -> list[Progress]:
        if course_id is None:
            rows = self._query("SELECT * FROM progress ORDER BY rowid")
        else:
            rows = self._query(
                "SELECT * FROM progress WHERE course_id = ? ORDER BY rowid",
                (course_id,),
            )
        return [self._row_to_progress(row) for row in rows]

    def delete_progress(
        self,
        course_id: str,
        chapter_id: str | None,
        subchapter_id: str | None = None,
    ) -> bool:
        removed = self._write(
            "progress",
            f"DELETE FROM progress WHERE {_PROGRESS_MATCH}",
            self._progress_params(course_id, chapter_id, subchapter_id),
        )
        return bool(removed)

    # ========================================================================
    # Note Operations
    # ========================================================================

    def upsert_note(self, note: Note) -> Note:
        self._write(
            "notes",
            """
            INSERT INTO notes (
                id, course_id, chapter_id, subchapter_id, title, content, created_at
            )
            VALUES (?, ?, ?, ?, ?, ?, ?)
            ON CONFLICT(id) DO UPDATE SET
                chapter_id = excluded.chapter_id,
                subchapter_id = excluded.subchapter_id,
                title = excluded.title,
                content = excluded.content
            """,
            (
                note.id,
                note.course_id,
                note.chapter_id,
                note.subchapter_id,
                note.title,
                note.content or "",
                _to_iso(note.created_at),
            ),
        )
        return note

    # Notes get a random id at creation, so adding is an upsert of a new key
    add_note = upsert_note

    def get_note(self, note_id: str) -> Note | None:
        row = self._query_one("SELECT * FROM notes WHERE id = ?", (note_id,))
        return self._row_to_note(row) if row else None

    def list_notes(
        self, course_id: str | None = None, chapter_id: str | None = None
    ) -> list[Note]:
        """Notes, newest first, optionally filtered by course and chapter."""
        clauses = []
        params: list[str] = []
        if course_id is not None:
            clauses.append("course_id = ?")
            params.append(course_id)
        if chapter_id is not None:
            clauses.append("chapter_id = ?")
            params.append(chapter_id)
        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""

        rows = self._query(
            f"SELECT * FROM notes {where} ORDER BY created_at DESC, rowid DESC",
            tuple(params),
        )
        return [self._row_to_note(row) for row in rows]

    def delete_note(self, note_id: str) -> bool:
        return bool(self._write("notes", "DELETE FROM notes WHERE id = ?", (note_id,)))

    # ========================================================================
    # Reporting
    # ========================================================================

    def table_counts(self) -> dict[str, int]:
        """Row count per record table."""
        return {
            table: self._query_one(f"SELECT COUNT(*) FROM {table}")[0]
            for table in TABLES
        }

    # ========================================================================
    # Row Mapping
    # ========================================================================

    @staticmethod
    def _row_to_course(row: sqlite3.Row) -> Course:
        return Course(
            id=row["id"],
            title=row["title"],
            description=row["description"] or "",
            sort_order=row["sort_order"],
            author=row["author"],
            version=row["version"],
            tags=_from_json(row["tags"]),
            difficulty=row["difficulty"],
            estimated_hours=row["estimated_hours"],
            prerequisites=_from_json(row["prerequisites"]),
            created_at=_from_iso(row["created_at"]),
        )

    @staticmethod
    def _row_to_chapter(row: sqlite3.Row) -> Chapter:
        return Chapter(
            course_id=row["course_id"],
            chapter_id=row["chapter_id"],
            title=row["title"],
            content=row["content"],
            part_id=row["part_id"],
            sort_order=row["sort_order"],
            created_at=_from_iso(row["created_at"]),
        )

    @staticmethod
    def _row_to_subchapter(row: sqlite3.Row) -> Subchapter:
        return Subchapter(
            course_id=row["course_id"],
            chapter_id=row["chapter_id"],
            subchapter_id=row["subchapter_id"],
            title=row["title"],
            content=row["content"],
            sort_order=row["sort_order"],
            created_at=_from_iso(row["created_at"]),
        )

    @staticmethod
    def _row_to_progress(row: sqlite3.Row) -> Progress:
        return Progress(
            # First-release rows were keyed by course id alone
            course_id=row["course_id"] or row["id"],
            chapter_id=row["chapter_id"],
            subchapter_id=row["subchapter_id"],
            completed=bool(row["completed"]),
            last_read=_from_iso(row["last_read"]),
        )

    @staticmethod
    def _row_to_note(row: sqlite3.Row) -> Note:
        return Note(
            id=row["id"],
            course_id=row["course_id"],
            chapter_id=row["chapter_id"],
            subchapter_id=row["subchapter_id"],
            title=row["title"],
            content=row["content"] or "",
            created_at=_from_iso(row["created_at"]) or utc_now(),
        )
