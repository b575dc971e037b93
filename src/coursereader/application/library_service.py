"""
Library service.

Course-level user actions: listing the library, importing a single course
from the catalog and removing a course together with its learner data.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from coursereader.domain.models import Course
from coursereader.domain.sync_types import CourseAction
from coursereader.application.progress_service import ProgressService
from coursereader.application.sync_service import SyncEngine
from coursereader.infrastructure.sqlite.store import CourseStore

logger = logging.getLogger(__name__)


@dataclass
class CourseSummary:
    course: Course
    chapter_count: int
    progress: int

    def to_dict(self) -> dict:
        return {
            "id": self.course.id,
            "title": self.course.title,
            "version": self.course.version,
            "chapters": self.chapter_count,
            "progress": self.progress,
        }


class LibraryService:
    """High-level operations over the learner's course library."""

    def __init__(
        self,
        store: CourseStore,
        engine: SyncEngine,
        progress_service: ProgressService | None = None,
    ) -> None:
        self.store = store
        self.engine = engine
        self.progress = progress_service or ProgressService(store)

    def list_library(self) -> list[CourseSummary]:
        """Stored courses in display order with chapter counts and progress."""
        return [
            CourseSummary(
                course=course,
                chapter_count=len(self.store.get_chapters(course.id)),
                progress=self.progress.course_progress(course.id),
            )
            for course in self.store.list_courses()
        ]

    def remove_course(self, course_id: str) -> bool:
        """
        Remove a course and all of its parts, chapters, progress and notes.

        Returns:
            True if the course existed
        """
        removed = self.store.delete_course(course_id)
        if not removed:
            logger.warning("Course %s not found; nothing removed", course_id)
        return removed

    def import_from_catalog(self, course_id: str) -> CourseAction:
        """
        Fetch the catalog and import one course from it.

        Raises:
            CatalogUnavailable: If the catalog cannot be read
            KeyError: If the catalog has no course with this id
            ImportWriteFailure: If the import was rolled back
        """
        available = self.engine.catalog_reader.list_available_courses()
        course = next((c for c in available if c.id == course_id), None)
        if course is None:
            raise KeyError(course_id)

        action = self.engine.import_course(course)
        logger.info("Imported course %s from catalog (%s)", course_id, action.value)
        return action
