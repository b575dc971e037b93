"""
Composite record keys for the local course store.

Every content row is addressed by a key built from its natural keys, so
importing the same catalog twice writes the same rows instead of new ones.

Key format: courseId-chapterId-subchapterId (dash-joined, parents first)

Examples:
    chapter_key("nextjs", "routing")            -> "nextjs-routing"
    subchapter_key("nextjs", "routing", "dyn")  -> "nextjs-routing-dyn"
"""

from __future__ import annotations

KEY_SEPARATOR = "-"


def build_record_key(*parts: str) -> str:
    """
    Build a composite key from natural key parts.

    Raises:
        ValueError: If any part is missing or blank
    """
    if not parts:
        raise ValueError("at least one key part is required")

    cleaned = []
    for part in parts:
        if part is None or not str(part).strip():
            raise ValueError(f"key parts cannot be empty: {parts!r}")
        cleaned.append(str(part).strip())
    return KEY_SEPARATOR.join(cleaned)


def course_key(course_id: str) -> str:
    """Courses are keyed by their own id."""
    return build_record_key(course_id)


def part_key(course_id: str, part_id: str) -> str:
    return build_record_key(course_id, part_id)


def chapter_key(course_id: str, chapter_id: str) -> str:
    return build_record_key(course_id, chapter_id)


def subchapter_key(course_id: str, chapter_id: str, subchapter_id: str) -> str:
    return build_record_key(course_id, chapter_id, subchapter_id)


def progress_key(
    course_id: str, chapter_id: str | None, subchapter_id: str | None = None
) -> str:
    """
    Key for a progress row at the finest unit the learner is viewing.

    Chapter-level progress shares the chapter key, subchapter-level progress
    shares the subchapter key. Course-level rows (chapter_id None) are the
    first-release layout and share the course key.
    """
    if chapter_id is None:
        if subchapter_id:
            raise ValueError("subchapter progress requires a chapter id")
        return course_key(course_id)
    if subchapter_id:
        return subchapter_key(course_id, chapter_id, subchapter_id)
    return chapter_key(course_id, chapter_id)
