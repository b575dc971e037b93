"""
Domain models for coursereader.

This module contains the records mirrored into the local store:
- Structural content authored in the catalog (courses, parts, chapters, subchapters)
- User-authored state (progress, notes)

These models are pure data structures with no I/O dependencies.
They are serialized to/from SQLite via the infrastructure layer.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone

from coursereader.domain.record_keys import (
    chapter_key,
    course_key,
    part_key,
    progress_key,
    subchapter_key,
)

# Sort position used when a record carries no explicit order
DEFAULT_ORDER = 999


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def effective_order(order: int | None) -> int:
    """Order value used for sorting; missing values sort last."""
    return DEFAULT_ORDER if order is None else order


# ============================================================================
# Structural Content (written by sync)
# ============================================================================


@dataclass
class Course:
    """
    A course mirrored from the catalog.

    Attributes:
        id: Natural course id from the catalog
        version: Change-detection field; a different catalog version
            triggers a wholesale replace of the course content
        sort_order: Display order (None sorts last)
    """

    id: str
    title: str
    description: str = ""
    sort_order: int | None = None
    author: str | None = None
    version: str | None = None
    tags: list[str] = field(default_factory=list)
    difficulty: str | None = None
    estimated_hours: float | None = None
    prerequisites: list[str] = field(default_factory=list)
    created_at: datetime | None = None

    @property
    def key(self) -> str:
        return course_key(self.id)

    @property
    def effective_order(self) -> int:
        return effective_order(self.sort_order)


@dataclass
class Part:
    """Optional grouping layer above chapters."""

    course_id: str
    part_id: str
    title: str
    sort_order: int | None = None

    @property
    def id(self) -> str:
        return part_key(self.course_id, self.part_id)


@dataclass
class Chapter:
    """
    A chapter owned by exactly one course.

    Content is markdown and is replaced wholesale on update.
    """

    course_id: str
    chapter_id: str
    title: str
    content: str = ""
    part_id: str | None = None
    sort_order: int | None = None
    created_at: datetime | None = None

    @property
    def id(self) -> str:
        return chapter_key(self.course_id, self.chapter_id)


@dataclass
class Subchapter:
    """A subchapter owned by exactly one chapter."""

    course_id: str
    chapter_id: str
    subchapter_id: str
    title: str
    content: str = ""
    sort_order: int | None = None
    created_at: datetime | None = None

    @property
    def id(self) -> str:
        return subchapter_key(self.course_id, self.chapter_id, self.subchapter_id)


# ============================================================================
# User-Authored State (never written by sync)
# ============================================================================


@dataclass
class Progress:
    """
    Completion state for a chapter or subchapter.

    Keyed to the finest-grained unit the learner was viewing. Rows carried
    over from the first schema have no chapter_id and track the whole course.
    """

    course_id: str
    chapter_id: str | None
    subchapter_id: str | None = None
    completed: bool = False
    last_read: datetime | None = None

    @property
    def id(self) -> str:
        return progress_key(self.course_id, self.chapter_id, self.subchapter_id)


@dataclass
class Note:
    """A learner note, optionally attached to a chapter or subchapter."""

    course_id: str
    title: str
    content: str = ""
    chapter_id: str | None = None
    subchapter_id: str | None = None
    created_at: datetime = field(default_factory=utc_now)
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
