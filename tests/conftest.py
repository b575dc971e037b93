"""
Shared fixtures for coursereader tests.

Stores are in-memory unless a test needs a file on disk (migrations, CLI).
Catalogs are static in-memory readers whose course list tests mutate.
"""

from __future__ import annotations

from typing import Any

import pytest

from coursereader.domain.catalog import AvailableCourse
from coursereader.infrastructure.sqlite import CourseStore


class StaticCatalog:
    """Catalog reader returning a fixed course list."""

    def __init__(self, courses: list[AvailableCourse] | None = None):
        self.courses = list(courses or [])
        self.calls = 0

    def list_available_courses(self) -> list[AvailableCourse]:
        self.calls += 1
        return list(self.courses)


def make_course(
    course_id: str = "c1",
    version: str | None = "1.0",
    chapters: list[dict[str, Any]] | None = None,
    **fields: Any,
) -> AvailableCourse:
    """
    Build a catalog course from compact chapter dicts.

    Chapters default to a single chapter "ch1" with order 1.
    """
    if chapters is None:
        chapters = [{"id": "ch1", "title": "Chapter 1", "content": "# One", "order": 1}]
    data = {
        "id": course_id,
        "title": fields.pop("title", f"Course {course_id}"),
        "description": fields.pop("description", ""),
        "version": version,
        "chaptersContent": chapters,
    }
    data.update(fields)
    return AvailableCourse.model_validate(data)


@pytest.fixture
def store():
    store = CourseStore(":memory:")
    store.initialize_schema()
    yield store
    store.close()


@pytest.fixture
def catalog():
    return StaticCatalog()


@pytest.fixture
def course_factory():
    return make_course
