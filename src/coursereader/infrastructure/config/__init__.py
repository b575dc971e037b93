"""
Configuration infrastructure package.

Loads the coursereader settings file and applies command-line overrides.
"""

from coursereader.infrastructure.config.repository import ConfigRepository, SETTINGS_FILE
from coursereader.infrastructure.config.manager import ConfigManager

__all__ = [
    "ConfigRepository",
    "ConfigManager",
    "SETTINGS_FILE",
]
