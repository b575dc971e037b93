"""
Progress and notes service.

User-action API over the progress and notes tables. The sync engine never
calls into this module; these are the only writers of learner state apart
from explicit course removal.

Orphans:
    A progress row or note whose chapter/subchapter is no longer stored
    (content restructured by a version bump) is kept as-is and flagged here
    at read time. Orphaned progress does not count towards completion.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime

from coursereader.domain.models import Course, Note, Progress, utc_now
from coursereader.infrastructure.sqlite.store import CourseStore

logger = logging.getLogger(__name__)


@dataclass
class OrphanReport:
    """Learner records of one course that point at removed content."""

    course_id: str
    progress: list[Progress] = field(default_factory=list)
    notes: list[Note] = field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.progress) + len(self.notes)


@dataclass
class OverallStats:
    completed: int = 0
    in_progress: int = 0
    total: int = 0

    def to_dict(self) -> dict[str, int]:
        return {
            "completed": self.completed,
            "inProgress": self.in_progress,
            "total": self.total,
        }


class ProgressService:
    """
    Completion tracking, notes and progress statistics.

    Usage:
        service = ProgressService(store)
        service.toggle_completion("nextjs", "routing")
        percent = service.course_progress("nextjs")
    """

    def __init__(self, store: CourseStore) -> None:
        self.store = store

    # ========================================================================
    # Completion
    # ========================================================================

    def toggle_completion(
        self, course_id: str, chapter_id: str, subchapter_id: str | None = None
    ) -> Progress:
        """
        Flip completion for a chapter or subchapter.

        The first toggle creates a completed row.
        """
        progress = self.store.get_progress(course_id, chapter_id, subchapter_id)
        if progress is None:
            progress = Progress(
                course_id=course_id,
                chapter_id=chapter_id,
                subchapter_id=subchapter_id,
                completed=True,
            )
        else:
            progress.completed = not progress.completed

        progress.last_read = utc_now()
        self.store.upsert_progress(progress)
        logger.debug("Progress %s completed=%s", progress.id, progress.completed)
        return progress

    def set_completed(
        self,
        course_id: str,
        chapter_id: str,
        subchapter_id: str | None = None,
        completed: bool = True,
    ) -> Progress:
        progress = self.store.get_progress(course_id, chapter_id, subchapter_id)
        if progress is None:
            progress = Progress(course_id, chapter_id, subchapter_id)
        progress.completed = completed
        progress.last_read = utc_now()
        return self.store.upsert_progress(progress)

    def is_completed(
        self, course_id: str, chapter_id: str, subchapter_id: str | None = None
    ) -> bool:
        progress = self.store.get_progress(course_id, chapter_id, subchapter_id)
        return bool(progress and progress.completed)

    # ========================================================================
    # Notes
    # ========================================================================

    def add_note(
        self,
        course_id: str,
        title: str,
        content: str = "",
        chapter_id: str | None = None,
        subchapter_id: str | None = None,
    ) -> Note:
        """
        Save a new note.

        Raises:
            ValueError: If the title is blank
        """
        if not title or not title.strip():
            raise ValueError("Note title cannot be empty")

        note = Note(
            course_id=course_id,
            title=title.strip(),
            content=content,
            chapter_id=chapter_id,
            subchapter_id=subchapter_id,
        )
        return self.store.add_note(note)

    def list_notes(self, course_id: str, chapter_id: str | None = None) -> list[Note]:
        """Notes for a course (or one chapter), newest first."""
        return self.store.list_notes(course_id, chapter_id)

    def delete_note(self, note_id: str) -> bool:
        return self.store.delete_note(note_id)

    # ========================================================================
    # Orphans
    # ========================================================================

    def is_orphaned(self, record: Progress | Note) -> bool:
        """
        True when the record refers to content that is no longer stored.

        Course-level records are orphaned only when the course itself is gone.
        """
        if record.chapter_id is None:
            return self.store.get_course(record.course_id) is None
        if record.subchapter_id:
            return (
                self.store.get_subchapter(
                    record.course_id, record.chapter_id, record.subchapter_id
                )
                is None
            )
        return self.store.get_chapter(record.course_id, record.chapter_id) is None

    def find_orphans(self, course_id: str) -> OrphanReport:
        chapter_ids, subchapter_ids = self._content_ids(course_id)
        report = OrphanReport(course_id=course_id)
        for progress in self.store.list_progress(course_id):
            if self._is_orphan(progress, chapter_ids, subchapter_ids):
                report.progress.append(progress)
        for note in self.store.list_notes(course_id):
            if self._is_orphan(note, chapter_ids, subchapter_ids):
                report.notes.append(note)
        return report

    def _content_ids(self, course_id: str) -> tuple[set[str], set[tuple[str, str]]]:
        chapter_ids = {c.chapter_id for c in self.store.get_chapters(course_id)}
        subchapter_ids = {
            (s.chapter_id, s.subchapter_id)
            for s in self.store.get_subchapters(course_id)
        }
        return chapter_ids, subchapter_ids

    @staticmethod
    def _is_orphan(
        record: Progress | Note,
        chapter_ids: set[str],
        subchapter_ids: set[tuple[str, str]],
    ) -> bool:
        # Course-level records are checked against the course, not its content
        if record.chapter_id is None:
            return False
        if record.subchapter_id:
            return (record.chapter_id, record.subchapter_id) not in subchapter_ids
        return record.chapter_id not in chapter_ids

    # ========================================================================
    # Statistics
    # ========================================================================

    def course_progress(self, course_id: str) -> int:
        """
        Percent of chapters and subchapters completed, 0-100.

        Counts completed rows that still point at stored content.
        """
        chapter_ids, subchapter_ids = self._content_ids(course_id)
        total = len(chapter_ids) + len(subchapter_ids)
        if total == 0:
            return 0

        done = sum(
            1
            for p in self.store.list_progress(course_id)
            if p.completed
            and p.chapter_id is not None
            and not self._is_orphan(p, chapter_ids, subchapter_ids)
        )
        return min(100, round(done / total * 100))

    def overall_stats(self) -> OverallStats:
        stats = OverallStats()
        for course in self.store.list_courses():
            stats.total += 1
            percent = self.course_progress(course.id)
            if percent == 100:
                stats.completed += 1
            elif percent > 0:
                stats.in_progress += 1
        return stats

    def continue_learning(self) -> Course | None:
        """
        Pick the course to resume.

        The in-progress course read most recently, else the first incomplete
        course, else the first course.
        """
        courses = self.store.list_courses()
        if not courses:
            return None

        candidates = []
        for course in courses:
            percent = self.course_progress(course.id)
            candidates.append((course, percent, self._last_read(course.id)))

        in_progress = [c for c in candidates if 0 < c[1] < 100]
        if in_progress:
            # max() keeps the first of equal timestamps, i.e. display order
            return max(in_progress, key=lambda c: c[2].timestamp() if c[2] else 0.0)[0]

        incomplete = next((c for c in candidates if c[1] < 100), None)
        if incomplete:
            return incomplete[0]
        return courses[0]

    def _last_read(self, course_id: str) -> datetime | None:
        times = [p.last_read for p in self.store.list_progress(course_id) if p.last_read]
        return max(times) if times else None
