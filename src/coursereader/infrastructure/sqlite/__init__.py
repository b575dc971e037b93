"""
SQLite infrastructure package.

Provides the local course store, its versioned schema and first-use seeding.
"""

from coursereader.infrastructure.sqlite.store import CourseStore, TABLES
from coursereader.infrastructure.sqlite.schema import SCHEMA_VERSION
from coursereader.infrastructure.sqlite.seed import (
    DEMO_COURSE_ID,
    populate_demo_course,
)

__all__ = [
    "CourseStore",
    "TABLES",
    "SCHEMA_VERSION",
    "DEMO_COURSE_ID",
    "populate_demo_course",
]
