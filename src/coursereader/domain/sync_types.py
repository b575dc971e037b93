"""
Sync Engine types.

This module defines the enums and dataclasses used by the sync engine and
its consumers (CLI, status subscribers). It also holds the pure
classification rule that decides what happens to each catalog course.

Architecture Note:
    This is a pure domain module with NO external dependencies.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Mapping

from coursereader.domain.catalog import AvailableCourse


class CourseAction(str, Enum):
    """What a sync does with one catalog course."""

    NEW = "new"  # not stored locally -> import
    CHANGED = "changed"  # stored with a different version -> replace
    UNCHANGED = "unchanged"  # same version, or unversioned -> skip


class SyncPhase(str, Enum):
    """Lifecycle of the process-wide sync status."""

    IDLE = "idle"
    SYNCING = "syncing"
    SETTLED = "settled"


def classify_course(
    course: AvailableCourse, stored_versions: Mapping[str, str | None]
) -> CourseAction:
    """
    Classify a catalog course against the locally stored versions.

    Args:
        course: Course as offered by the catalog
        stored_versions: courseId -> stored version for every local course

    Returns:
        CourseAction for this course
    """
    if course.id not in stored_versions:
        return CourseAction.NEW

    # An unversioned catalog course never triggers a replace
    if course.has_version and course.version != stored_versions[course.id]:
        return CourseAction.CHANGED

    return CourseAction.UNCHANGED


@dataclass
class SyncReport:
    """
    Outcome of one sync() call.

    This is THE data structure all consumers (CLI, status subscribers) use.
    """

    timestamp: datetime
    new_courses_imported: int = 0
    courses_updated: int = 0
    courses_unchanged: int = 0
    error: str | None = None
    # Courses whose import was rolled back; retried by the next sync
    failed_courses: list[str] = field(default_factory=list)
    # True when the call was suppressed because a sync was already running
    skipped: bool = False

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def changes(self) -> int:
        return self.new_courses_imported + self.courses_updated

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "newCoursesImported": self.new_courses_imported,
            "coursesUpdated": self.courses_updated,
            "coursesUnchanged": self.courses_unchanged,
            "timestamp": self.timestamp.isoformat(),
            "error": self.error,
            "failedCourses": list(self.failed_courses),
            "skipped": self.skipped,
        }


@dataclass(frozen=True)
class SyncStatus:
    """Read-only snapshot of the sync lifecycle."""

    phase: SyncPhase = SyncPhase.IDLE
    last_report: SyncReport | None = None
    last_synced: datetime | None = None

    @property
    def syncing(self) -> bool:
        return self.phase is SyncPhase.SYNCING
