"""
Domain layer package.

Contains pure data models and rules with no I/O dependencies.
Models are serialized to/from SQLite via the infrastructure layer.
"""

from coursereader.domain.models import (
    DEFAULT_ORDER,
    Course,
    Part,
    Chapter,
    Subchapter,
    Progress,
    Note,
)
from coursereader.domain.catalog import (
    AvailableCourse,
    CatalogPart,
    CatalogChapter,
    CatalogSubchapter,
    sort_by_order,
)
from coursereader.domain.sync_types import (
    CourseAction,
    SyncPhase,
    SyncReport,
    SyncStatus,
    classify_course,
)
from coursereader.domain.errors import (
    CourseReaderError,
    CatalogUnavailable,
    ImportWriteFailure,
    SyncInProgress,
)

__all__ = [
    # Records
    "DEFAULT_ORDER",
    "Course",
    "Part",
    "Chapter",
    "Subchapter",
    "Progress",
    "Note",
    # Catalog
    "AvailableCourse",
    "CatalogPart",
    "CatalogChapter",
    "CatalogSubchapter",
    "sort_by_order",
    # Sync
    "CourseAction",
    "SyncPhase",
    "SyncReport",
    "SyncStatus",
    "classify_course",
    # Errors
    "CourseReaderError",
    "CatalogUnavailable",
    "ImportWriteFailure",
    "SyncInProgress",
]
