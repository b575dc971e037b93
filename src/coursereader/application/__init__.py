"""
Application layer package.

Contains service classes that orchestrate business workflows.
Services coordinate between domain models and infrastructure.
"""

from coursereader.application.sync_service import SyncEngine
from coursereader.application.sync_status import SyncStatusTracker
from coursereader.application.progress_service import (
    OrphanReport,
    OverallStats,
    ProgressService,
)
from coursereader.application.library_service import CourseSummary, LibraryService

__all__ = [
    "SyncEngine",
    "SyncStatusTracker",
    "ProgressService",
    "OrphanReport",
    "OverallStats",
    "LibraryService",
    "CourseSummary",
]
