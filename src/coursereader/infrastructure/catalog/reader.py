"""
Catalog reader interface.

A reader produces the authoritative list of courses, sorted ascending by
order with missing orders last. It fails with CatalogUnavailable when the
underlying storage cannot be read.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from coursereader.domain.catalog import AvailableCourse


@runtime_checkable
class CatalogReader(Protocol):
    def list_available_courses(self) -> list[AvailableCourse]:
        ...
