"""
Catalog document models.

An AvailableCourse is one course as published by the catalog: metadata,
parts and the full markdown of every chapter and subchapter. The wire format
is camelCase JSON; attributes are snake_case and both spellings are accepted.
"""

from __future__ import annotations

from typing import Any, Iterable, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from coursereader.domain.models import effective_order

T = TypeVar("T")


def sort_by_order(items: Iterable[T]) -> List[T]:
    """
    Sort catalog items ascending by their ``order`` attribute.

    Missing orders sort last (999). Equal orders keep their input order.
    """
    return sorted(items, key=lambda item: effective_order(getattr(item, "order", None)))


class CatalogModel(BaseModel):
    """Base model with camelCase aliases for the JSON wire format."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_wire(self) -> dict[str, Any]:
        """Serialize for the HTTP endpoint (camelCase, None values dropped)."""
        return self.model_dump(by_alias=True, exclude_none=True)


class CatalogPart(CatalogModel):
    id: str
    title: str
    order: Optional[int] = None


class CatalogSubchapter(CatalogModel):
    id: str
    title: str
    content: str = ""
    order: Optional[int] = None


class CatalogChapter(CatalogModel):
    id: str
    title: str
    part_id: Optional[str] = None
    content: str = ""
    order: Optional[int] = None
    subchapters: List[CatalogSubchapter] = Field(default_factory=list)


class AvailableCourse(CatalogModel):
    """A course document offered by the catalog."""

    id: str = Field(..., min_length=1, description="Natural course id")
    title: str
    description: str = ""
    author: Optional[str] = None
    version: Optional[str] = Field(
        None, description="Change-detection field; empty means unversioned"
    )
    order: Optional[int] = None
    tags: Optional[List[str]] = None
    difficulty: Optional[str] = None
    estimated_hours: Optional[float] = None
    prerequisites: Optional[List[str]] = None
    parts: List[CatalogPart] = Field(default_factory=list)
    chapters_content: List[CatalogChapter] = Field(default_factory=list)

    @field_validator("version", mode="before")
    @classmethod
    def normalize_version(cls, v: Any) -> Any:
        """Accept numeric versions ("version": 1.0) as strings."""
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            return str(v)
        return v

    @property
    def has_version(self) -> bool:
        """True only for a non-empty version string."""
        return bool(self.version)
