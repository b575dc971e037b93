"""
Error types raised across the sync boundary.

There is no OrphanedReference error: a progress row or note pointing at
removed content is a data condition handled at read time, not an error.
"""

from __future__ import annotations


class CourseReaderError(Exception):
    """Base exception for coursereader operations."""


class CatalogUnavailable(CourseReaderError):
    """The course catalog could not be read (storage, network or parse error)."""


class ImportWriteFailure(CourseReaderError):
    """A local store write failed while importing one course."""

    def __init__(self, course_id: str, cause: BaseException | None = None):
        self.course_id = course_id
        self.cause = cause
        detail = f": {cause}" if cause is not None else ""
        super().__init__(f"Failed to import course '{course_id}'{detail}")


class SyncInProgress(CourseReaderError):
    """Another sync is already running."""
