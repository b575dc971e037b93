"""
Application settings domain model.

This module defines the AppSettings entity containing every setting that
controls where courses are read from and where the local store lives.
"""

import logging
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class AppSettings(BaseModel):
    """
    Domain model for application configuration.

    Resolution order: config file settings, then CLI overrides, then defaults.
    """

    model_config = ConfigDict(extra="ignore")

    database_path: Path = Field(
        Path("data/courses.db"), description="SQLite file holding the local store"
    )
    content_dir: Path = Field(
        Path("content/courses"), description="Directory of authored course folders"
    )
    catalog_url: Optional[str] = Field(
        None,
        description="Catalog endpoint; when unset the catalog is read from content_dir",
    )
    request_timeout: float = Field(
        10.0, description="Seconds to wait for the catalog endpoint", ge=1, le=120
    )
    seed_demo_course: bool = Field(
        True, description="Populate a demo course when the store is first created"
    )
    log_level: str = Field("INFO", description="Console log level")
    log_file: Optional[str] = Field(None, description="Optional log file path")
    api_host: str = Field("127.0.0.1", description="Bind address for the API server")
    api_port: int = Field(8000, description="Port for the API server", ge=1, le=65535)

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Accept standard logging level names, case-insensitive."""
        level = str(v).upper().strip()
        if level not in logging.getLevelNamesMapping():
            raise ValueError(f"Unknown log level: {v}")
        return level

    @field_validator("catalog_url")
    @classmethod
    def validate_catalog_url(cls, v: Optional[str]) -> Optional[str]:
        """Blank URLs mean 'not configured'."""
        if v is None or not v.strip():
            return None
        if not v.startswith(("http://", "https://")):
            raise ValueError("catalog_url must be an http(s) URL")
        return v.strip()

    @property
    def numeric_log_level(self) -> int:
        return logging.getLevelNamesMapping()[self.log_level]
