"""
Sync Engine - brings the local store in line with the course catalog.

Structural content (courses, parts, chapters, subchapters) follows the
catalog; progress and notes are never touched.

Workflow:
1. Fetch the catalog (failure aborts before any store access)
2. Read stored course versions
3. Classify each catalog course: new, changed or unchanged
4. Import new courses, replace changed ones, skip the rest
5. Report counts

Courses that disappear from the catalog are kept, with their user data.
"""

from __future__ import annotations

import logging
import sqlite3
import threading

from coursereader.domain.catalog import AvailableCourse, sort_by_order
from coursereader.domain.errors import (
    CatalogUnavailable,
    ImportWriteFailure,
    SyncInProgress,
)
from coursereader.domain.models import Chapter, Course, Part, Subchapter, utc_now
from coursereader.domain.sync_types import CourseAction, SyncReport, classify_course
from coursereader.application.sync_status import SyncStatusTracker
from coursereader.infrastructure.catalog.reader import CatalogReader
from coursereader.infrastructure.sqlite.store import CourseStore

logger = logging.getLogger(__name__)


class SyncEngine:
    """
    Orchestrator for catalog synchronization.

    Not re-entrant: a sync() call made while another is running returns a
    skipped report immediately.
    """

    def __init__(
        self,
        store: CourseStore,
        catalog_reader: CatalogReader,
        status_tracker: SyncStatusTracker | None = None,
    ) -> None:
        self.store = store
        self.catalog_reader = catalog_reader
        self.status_tracker = status_tracker
        self._lock = threading.Lock()

    @property
    def syncing(self) -> bool:
        return self._lock.locked()

    def sync(self) -> SyncReport:
        """
        Execute one sync.

        Never raises; every failure is captured in the returned report.
        """
        if not self._lock.acquire(blocking=False):
            skipped = SyncInProgress("A sync is already in progress")
            logger.warning("%s; request skipped", skipped)
            return SyncReport(timestamp=utc_now(), error=str(skipped), skipped=True)

        try:
            if self.status_tracker:
                self.status_tracker.begin()

            try:
                report = self._run()
            except Exception as e:
                logger.exception("Sync failed unexpectedly")
                report = SyncReport(timestamp=utc_now(), error=f"Sync failed: {e}")

            if self.status_tracker:
                self.status_tracker.settle(report)
            return report
        finally:
            self._lock.release()

    def _run(self) -> SyncReport:
        # ─────────────────────────────────────────────────────────────
        # PHASE 1: Fetch Catalog
        # ─────────────────────────────────────────────────────────────
        try:
            available = sort_by_order(self.catalog_reader.list_available_courses())
        except CatalogUnavailable as e:
            logger.error("Catalog unavailable: %s", e)
            return SyncReport(timestamp=utc_now(), error=str(e))
        except Exception as e:
            logger.exception("Catalog reader failed")
            return SyncReport(
                timestamp=utc_now(), error=str(CatalogUnavailable(str(e)))
            )

        # ─────────────────────────────────────────────────────────────
        # PHASE 2: Stored Versions
        # ─────────────────────────────────────────────────────────────
        stored_versions = self.store.get_course_versions()
        logger.info(
            "Syncing %d catalog courses against %d local courses",
            len(available),
            len(stored_versions),
        )

        # ─────────────────────────────────────────────────────────────
        # PHASE 3: Classify & Apply (one transaction per course)
        # ─────────────────────────────────────────────────────────────
        imported = updated = unchanged = 0
        failed: list[str] = []

        for course in available:
            action = classify_course(course, stored_versions)
            if action is CourseAction.UNCHANGED:
                unchanged += 1
                continue

            try:
                self.import_course(course, replace=action is CourseAction.CHANGED)
            except ImportWriteFailure as e:
                logger.error("%s", e)
                failed.append(course.id)
                continue

            # Later duplicates of the same id compare against what was just written
            stored_versions[course.id] = course.version
            if action is CourseAction.NEW:
                imported += 1
            else:
                updated += 1

        # ─────────────────────────────────────────────────────────────
        # PHASE 4: Report
        # ─────────────────────────────────────────────────────────────
        error = None
        if failed:
            error = f"Failed to import {len(failed)} course(s): {', '.join(failed)}"

        report = SyncReport(
            timestamp=utc_now(),
            new_courses_imported=imported,
            courses_updated=updated,
            courses_unchanged=unchanged,
            error=error,
            failed_courses=failed,
        )
        logger.info(
            "Sync complete: %d new, %d updated, %d unchanged, %d failed",
            imported,
            updated,
            unchanged,
            len(failed),
        )
        return report

    def import_course(
        self, course: AvailableCourse, replace: bool | None = None
    ) -> CourseAction:
        """
        Write one catalog course as a single unit of work.

        Args:
            course: Catalog course to import
            replace: Delete the course's existing parts, chapters and
                subchapters first. None decides from whether the course
                is already stored.

        Returns:
            CourseAction.NEW or CourseAction.CHANGED

        Raises:
            ImportWriteFailure: If any write fails; the course is left exactly
                as it was before the call
        """
        try:
            with self.store.transaction():
                if replace is None:
                    replace = self.store.get_course(course.id) is not None
                if replace:
                    self.store.delete_course_structure(course.id)
                self._write_course(course)
        except (sqlite3.Error, ValueError) as e:
            raise ImportWriteFailure(course.id, e) from e

        logger.debug("Imported course %s (version=%s)", course.id, course.version)
        return CourseAction.CHANGED if replace else CourseAction.NEW

    def _write_course(self, course: AvailableCourse) -> None:
        """Course row, then parts, then each chapter followed by its subchapters."""
        self.store.upsert_course(
            Course(
                id=course.id,
                title=course.title,
                description=course.description,
                sort_order=course.order,
                author=course.author,
                version=course.version,
                tags=list(course.tags or []),
                difficulty=course.difficulty,
                estimated_hours=course.estimated_hours,
                prerequisites=list(course.prerequisites or []),
            )
        )

        for part in sort_by_order(course.parts):
            self.store.upsert_part(
                Part(
                    course_id=course.id,
                    part_id=part.id,
                    title=part.title,
                    sort_order=part.order,
                )
            )

        for chapter in sort_by_order(course.chapters_content):
            self.store.upsert_chapter(
                Chapter(
                    course_id=course.id,
                    chapter_id=chapter.id,
                    title=chapter.title,
                    content=chapter.content,
                    part_id=chapter.part_id,
                    sort_order=chapter.order,
                )
            )
            for subchapter in sort_by_order(chapter.subchapters):
                self.store.upsert_subchapter(
                    Subchapter(
                        course_id=course.id,
                        chapter_id=chapter.id,
                        subchapter_id=subchapter.id,
                        title=subchapter.title,
                        content=subchapter.content,
                        sort_order=subchapter.order,
                    )
                )
