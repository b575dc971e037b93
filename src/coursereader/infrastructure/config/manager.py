"""
Configuration manager for the application layer.

This module provides the application layer interface for configuration operations.
It merges the settings file with command-line overrides.
"""

import logging
from pathlib import Path
from typing import Any, Dict, Optional

from coursereader.domain.config import AppSettings
from coursereader.infrastructure.config.repository import ConfigRepository

logger = logging.getLogger(__name__)


class ConfigManager:
    """
    Application layer manager for configuration operations.

    Settings resolve in order: CLI overrides, then the settings file,
    then model defaults.
    """

    def __init__(
        self,
        config_dir: Optional[Path] = None,
        overrides: Optional[Dict[str, Any]] = None,
    ):
        """
        Initialize the config manager.

        Args:
            config_dir: Base directory for configuration files.
                       Defaults to 'config' subdirectory of current working directory.
            overrides: Setting values from the command line; None values are ignored
        """
        if config_dir is None:
            config_dir = Path.cwd() / "config"

        self.config_dir = Path(config_dir)
        self.repository = ConfigRepository(self.config_dir)
        self.overrides = {k: v for k, v in (overrides or {}).items() if v is not None}
        self._settings: Optional[AppSettings] = None

    def load_settings(self, force_reload: bool = False) -> AppSettings:
        """
        Load effective settings.

        Args:
            force_reload: Whether to force reload from disk

        Returns:
            AppSettings domain model

        Raises:
            ValueError: If the settings file or an override is invalid
        """
        if self._settings is None or force_reload:
            logger.info("Loading settings from %s", self.config_dir)
            base = self.repository.load_settings()
            if self.overrides:
                logger.debug("Applying overrides: %s", sorted(self.overrides))
                base = AppSettings(**{**base.model_dump(), **self.overrides})
            self._settings = base

        return self._settings

    def clear_cache(self) -> None:
        """Clear cached settings."""
        self._settings = None
        logger.info("Configuration cache cleared")

    def get_config_summary(self) -> Dict[str, Any]:
        """
        Get a summary of current configuration state.

        Returns:
            Dictionary with configuration summary
        """
        summary: Dict[str, Any] = {
            "config_directory": str(self.config_dir),
            "settings_loaded": self._settings is not None,
            "overrides": sorted(self.overrides),
        }

        if self._settings:
            summary.update(
                {
                    "database_path": str(self._settings.database_path),
                    "catalog_source": self._settings.catalog_url
                    or str(self._settings.content_dir),
                }
            )

        return summary
