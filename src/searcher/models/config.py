"""
Configuration data models for searcher.

This module defines the immutable per-run search configuration and the
user settings that can be loaded from a YAML file.
"""

import logging
from pathlib import Path
from typing import Dict, Any
from pydantic import BaseModel, ConfigDict, Field, field_validator


LOG_LEVELS = ['CRITICAL', 'ERROR', 'WARNING', 'INFO', 'DEBUG']


class SearchConfig(BaseModel):
    """
    Configuration for a single search run.

    Created once at startup and shared read-only by every worker for the
    lifetime of the scan.

    Attributes:
        content_pattern: Regex searched for within each line
        file_pattern: Regex a bare filename must match to be scanned
        colored: Whether matches are rendered with ANSI styling
        root: Directory the search starts from
    """

    model_config = ConfigDict(frozen=True)

    content_pattern: str = Field(..., description="Regex searched for within each line")
    file_pattern: str = Field(..., description="Regex a bare filename must match")
    colored: bool = Field(True, description="Whether matches are rendered with ANSI styling")
    root: str = Field(".", description="Directory the search starts from")

    @field_validator('root')
    @classmethod
    def validate_root(cls, v: str) -> str:
        """Reject empty roots; the path is kept as given so output paths match it."""
        if not v or not v.strip():
            raise ValueError("Search root cannot be empty")
        return v

    def get_root_path(self) -> Path:
        """Get the search root as a Path."""
        return Path(self.root)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return self.model_dump()


class SearchSettings(BaseModel):
    """
    User settings loaded from a searcher YAML file.

    Attributes:
        colored: Default for colored output when --uncolored is not given
        log_level: Logging level name used when --verbose is not given
    """

    colored: bool = Field(True, description="Default for colored output")
    log_level: str = Field("WARNING", description="Logging level name")

    @field_validator('log_level', mode='before')
    @classmethod
    def validate_log_level(cls, v) -> str:
        """Validate and normalize the logging level name."""
        if not isinstance(v, str):
            raise ValueError(f"Invalid log level: {v}")
        level = v.strip().upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"Invalid log level '{v}'. Must be one of: {LOG_LEVELS}")
        return level

    def get_log_level(self) -> int:
        """Get the numeric logging level."""
        return logging.getLevelName(self.log_level)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return self.model_dump()
