"""
Filesystem catalog reader.

Walks the authored course tree and assembles AvailableCourse documents:

    <courses_dir>/
        <folder>/
            metadata.json       course fields, parts and chapter index
            chapters/
                01-intro.md     chapter and subchapter markdown files

Each chapter entry in metadata.json names its markdown file and its part:

    {"id": "intro", "title": "Intro", "part": "basics", "order": 1,
     "file": "01-intro.md", "subchapters": [{"id": "...", "file": "..."}]}
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from coursereader.domain.catalog import (
    AvailableCourse,
    CatalogChapter,
    CatalogPart,
    CatalogSubchapter,
    sort_by_order,
)
from coursereader.domain.errors import CatalogUnavailable

logger = logging.getLogger(__name__)

METADATA_FILE = "metadata.json"
CHAPTERS_DIR = "chapters"


# ============================================================================
# metadata.json models
# ============================================================================


class SubchapterEntry(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    title: str
    order: Optional[int] = None
    file: str


class ChapterEntry(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    title: str
    part: Optional[str] = None
    order: Optional[int] = None
    file: str
    subchapters: List[SubchapterEntry] = Field(default_factory=list)


class CourseMetadata(BaseModel):
    """Contents of one course folder's metadata.json."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    id: str = Field(..., min_length=1)
    title: str
    description: str = ""
    author: Optional[str] = None
    version: Optional[str] = None
    order: Optional[int] = None
    tags: Optional[List[str]] = None
    difficulty: Optional[str] = None
    estimated_hours: Optional[float] = Field(None, alias="estimatedHours")
    prerequisites: Optional[List[str]] = None
    parts: List[CatalogPart] = Field(default_factory=list)
    chapters: List[ChapterEntry] = Field(default_factory=list)

    @field_validator("version", mode="before")
    @classmethod
    def normalize_version(cls, v):
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            return str(v)
        return v


# ============================================================================
# Reader
# ============================================================================


class FilesystemCatalogReader:
    """
    Server-side catalog reader over the authored course directory.

    Usage:
        reader = FilesystemCatalogReader(Path("content/courses"))
        courses = reader.list_available_courses()
    """

    def __init__(self, courses_dir: Path | str) -> None:
        self.courses_dir = Path(courses_dir)

    def list_available_courses(self) -> list[AvailableCourse]:
        """
        Load every course folder, sorted by order (missing last).

        Returns:
            Courses found; empty when the courses directory does not exist

        Raises:
            CatalogUnavailable: If the courses directory cannot be read
        """
        if not self.courses_dir.exists():
            logger.info("No courses directory found at %s", self.courses_dir)
            return []

        if not self.courses_dir.is_dir():
            raise CatalogUnavailable(f"Not a directory: {self.courses_dir}")

        try:
            folders = sorted(p for p in self.courses_dir.iterdir() if p.is_dir())
        except OSError as e:
            raise CatalogUnavailable(
                f"Cannot read courses directory {self.courses_dir}: {e}"
            ) from e

        courses = []
        for folder in folders:
            if not (folder / METADATA_FILE).is_file():
                continue
            if not (folder / CHAPTERS_DIR).is_dir():
                continue
            try:
                course = self.load_course(folder)
            except (OSError, ValueError, ValidationError) as e:
                # One broken course must not hide the others
                logger.error("Error loading course %s: %s", folder.name, e)
                continue
            courses.append(course)
            logger.debug("Processed course: %s", course.title)

        logger.info("Loaded %d courses from %s", len(courses), self.courses_dir)
        return sort_by_order(courses)

    def load_course(self, folder: Path) -> AvailableCourse:
        """
        Assemble one course folder into an AvailableCourse.

        A chapter whose markdown file is missing keeps empty content. A
        subchapter whose file is missing is dropped.

        Raises:
            ValueError: If metadata.json is not valid JSON
            ValidationError: If metadata.json does not match the course shape
        """
        with open(folder / METADATA_FILE, "r", encoding="utf-8") as f:
            metadata = CourseMetadata.model_validate(json.load(f))

        chapters_path = folder / CHAPTERS_DIR
        chapters = []
        for entry in metadata.chapters:
            subchapters = []
            for sub in entry.subchapters:
                sub_file = chapters_path / sub.file
                if not sub_file.is_file():
                    logger.debug("Skipping subchapter %s: missing %s", sub.id, sub_file)
                    continue
                subchapters.append(
                    CatalogSubchapter(
                        id=sub.id,
                        title=sub.title,
                        content=sub_file.read_text(encoding="utf-8"),
                        order=sub.order,
                    )
                )

            chapter_file = chapters_path / entry.file
            content = ""
            if chapter_file.is_file():
                content = chapter_file.read_text(encoding="utf-8")

            chapters.append(
                CatalogChapter(
                    id=entry.id,
                    title=entry.title,
                    part_id=entry.part,
                    content=content,
                    order=entry.order,
                    subchapters=sort_by_order(subchapters),
                )
            )

        return AvailableCourse(
            id=metadata.id,
            title=metadata.title,
            description=metadata.description,
            author=metadata.author,
            version=metadata.version,
            order=metadata.order,
            tags=metadata.tags,
            difficulty=metadata.difficulty,
            estimated_hours=metadata.estimated_hours,
            prerequisites=metadata.prerequisites,
            parts=metadata.parts,
            chapters_content=sort_by_order(chapters),
        )
