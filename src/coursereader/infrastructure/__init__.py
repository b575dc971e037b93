"""
Infrastructure layer package.

Contains all I/O and external system integrations:
- SQLite local store (sqlite/)
- Catalog readers for the content directory and HTTP endpoint (catalog/)
- Configuration file loading (config/)
- Logging setup
"""

from coursereader.infrastructure.logging_config import setup_logging
from coursereader.infrastructure.sqlite import CourseStore
from coursereader.infrastructure.catalog import (
    CatalogReader,
    FilesystemCatalogReader,
    HttpCatalogReader,
)
from coursereader.infrastructure.config import ConfigManager, ConfigRepository

__all__ = [
    # Logging
    "setup_logging",
    # Store
    "CourseStore",
    # Catalog
    "CatalogReader",
    "FilesystemCatalogReader",
    "HttpCatalogReader",
    # Config
    "ConfigManager",
    "ConfigRepository",
]
