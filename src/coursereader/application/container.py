"""
Dependency injection container for the application.

This module provides a centralized way to create and manage application dependencies.
Components are built lazily on first access.
"""

import logging
from pathlib import Path
from typing import Any, Dict, Optional

from ..domain.config import AppSettings
from ..infrastructure.catalog import (
    CatalogReader,
    FilesystemCatalogReader,
    HttpCatalogReader,
)
from ..infrastructure.config.manager import ConfigManager
from ..infrastructure.sqlite import CourseStore, populate_demo_course
from .library_service import LibraryService
from .progress_service import ProgressService
from .sync_service import SyncEngine
from .sync_status import SyncStatusTracker

logger = logging.getLogger(__name__)


class Container:
    """
    Dependency injection container.

    Manages the creation and lifecycle of application services and infrastructure components.
    """

    def __init__(
        self,
        config_dir: Optional[Path] = None,
        overrides: Optional[Dict[str, Any]] = None,
        settings: Optional[AppSettings] = None,
    ):
        """
        Initialize the container.

        Args:
            config_dir: Base directory for configuration files
            overrides: Command-line setting overrides
            settings: Ready-made settings (skips the config file entirely)
        """
        self.config_dir = config_dir or Path.cwd() / "config"
        self._overrides = overrides or {}
        self._settings = settings

        self._config_manager: Optional[ConfigManager] = None
        self._store: Optional[CourseStore] = None
        self._catalog_reader: Optional[CatalogReader] = None
        self._status_tracker: Optional[SyncStatusTracker] = None
        self._sync_engine: Optional[SyncEngine] = None
        self._progress_service: Optional[ProgressService] = None
        self._library_service: Optional[LibraryService] = None

    @property
    def config_manager(self) -> ConfigManager:
        """Get the configuration manager."""
        if self._config_manager is None:
            self._config_manager = ConfigManager(self.config_dir, self._overrides)
        return self._config_manager

    @property
    def settings(self) -> AppSettings:
        """Get the effective settings (file + overrides)."""
        if self._settings is None:
            self._settings = self.config_manager.load_settings()
        return self._settings

    @property
    def store(self) -> CourseStore:
        """Get the local store, migrated and seeded on first use."""
        if self._store is None:
            store = CourseStore(self.settings.database_path)
            previous_version = store.initialize_schema()
            if previous_version == 0 and self.settings.seed_demo_course:
                populate_demo_course(store)
            self._store = store
        return self._store

    @property
    def catalog_reader(self) -> CatalogReader:
        """Get the catalog reader: HTTP when a catalog URL is set, else the content directory."""
        if self._catalog_reader is None:
            if self.settings.catalog_url:
                self._catalog_reader = HttpCatalogReader(
                    self.settings.catalog_url, timeout=self.settings.request_timeout
                )
            else:
                self._catalog_reader = FilesystemCatalogReader(self.settings.content_dir)
            logger.debug("Catalog reader: %s", type(self._catalog_reader).__name__)
        return self._catalog_reader

    @property
    def status_tracker(self) -> SyncStatusTracker:
        if self._status_tracker is None:
            self._status_tracker = SyncStatusTracker()
        return self._status_tracker

    @property
    def sync_engine(self) -> SyncEngine:
        """Get the sync engine."""
        if self._sync_engine is None:
            self._sync_engine = SyncEngine(
                self.store, self.catalog_reader, self.status_tracker
            )
        return self._sync_engine

    @property
    def progress_service(self) -> ProgressService:
        if self._progress_service is None:
            self._progress_service = ProgressService(self.store)
        return self._progress_service

    @property
    def library_service(self) -> LibraryService:
        if self._library_service is None:
            self._library_service = LibraryService(
                self.store, self.sync_engine, self.progress_service
            )
        return self._library_service

    def close(self) -> None:
        """Release the store connection."""
        if self._store is not None:
            self._store.close()
            self._store = None
