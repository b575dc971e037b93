"""
Configuration repository for loading config files.

This module provides the infrastructure layer for configuration persistence.
It handles file I/O operations and basic validation.
"""

import json
import logging
import re
from pathlib import Path
from typing import Any, Dict

from pydantic import ValidationError

from coursereader.domain.config import AppSettings

logger = logging.getLogger(__name__)

SETTINGS_FILE = "coursereader"

# Whole-line // comments only; URLs inside string values keep their "//"
_LINE_COMMENT = re.compile(r"^\s*//.*$", re.MULTILINE)


def _strip_comments(jsonc_content: str) -> str:
    """Strip full-line // comments from JSONC content."""
    return _LINE_COMMENT.sub("", jsonc_content)


class ConfigRepository:
    """
    Repository for configuration file operations.

    Handles loading of configuration files with support for
    JSON and JSONC formats.
    """

    def __init__(self, config_dir: Path):
        """
        Initialize the config repository.

        Args:
            config_dir: Base directory for configuration files
        """
        self.config_dir = Path(config_dir)

    def load_json_file(self, filename: str, allow_jsonc: bool = True) -> Dict[str, Any]:
        """
        Load a JSON or JSONC file.

        Args:
            filename: Name of the file to load (without extension)
            allow_jsonc: Whether to try JSONC if JSON doesn't exist

        Returns:
            Parsed JSON data as dictionary

        Raises:
            FileNotFoundError: If file doesn't exist
            ValueError: If file cannot be parsed
        """
        json_path = self.config_dir / f"{filename}.json"
        jsonc_path = self.config_dir / f"{filename}.jsonc"

        if json_path.exists():
            try:
                with open(json_path, "r", encoding="utf-8") as f:
                    return json.load(f)
            except json.JSONDecodeError as e:
                logger.error("Failed to parse JSON file %s: %s", json_path, e)
                raise ValueError(f"Invalid JSON in {json_path}") from e

        if allow_jsonc and jsonc_path.exists():
            try:
                with open(jsonc_path, "r", encoding="utf-8") as f:
                    return json.loads(_strip_comments(f.read()))
            except json.JSONDecodeError as e:
                logger.error("Failed to parse JSONC file %s: %s", jsonc_path, e)
                raise ValueError(f"Invalid JSONC in {jsonc_path}") from e

        raise FileNotFoundError(
            f"Config file '{filename}.json' or '{filename}.jsonc' not found in {self.config_dir}"
        )

    def load_settings(self) -> AppSettings:
        """
        Load application settings.

        A missing settings file yields the defaults.

        Returns:
            Parsed AppSettings domain model

        Raises:
            ValueError: If the settings file cannot be parsed or validated
        """
        try:
            data = self.load_json_file(SETTINGS_FILE)
        except FileNotFoundError:
            logger.debug("No settings file in %s, using defaults", self.config_dir)
            return AppSettings()

        if not isinstance(data, dict):
            raise ValueError(f"{SETTINGS_FILE} settings must be a JSON object")

        try:
            return AppSettings(**data)
        except ValidationError as e:
            logger.error("Failed to load settings: %s", e)
            raise ValueError(f"Invalid settings: {e}") from e

