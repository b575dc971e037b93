"""
Catalog readers.

Provides the filesystem reader behind the HTTP endpoint and the HTTP reader
the sync engine uses against that endpoint.
"""

from coursereader.infrastructure.catalog.reader import CatalogReader
from coursereader.infrastructure.catalog.filesystem import FilesystemCatalogReader
from coursereader.infrastructure.catalog.http import HttpCatalogReader

__all__ = [
    "CatalogReader",
    "FilesystemCatalogReader",
    "HttpCatalogReader",
]
