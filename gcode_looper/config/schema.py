"""
Pydantic models that mirror the YAML configuration consumed by *gcode_looper*.

The classes define a strongly-typed representation of the configuration file
so that the rest of the codebase works with validated objects instead of
ad-hoc dictionaries. Every key is optional; omitted keys keep the defaults
declared here.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, field_validator

_MIB = 1024 * 1024
_GIB = 1024 * _MIB


class ArchiveLayout(BaseModel, frozen=True):
    """Where toolpaths live inside a project archive.

    Attributes:
        metadata_dir:    Required top-level directory (matched
                         case-insensitively).
        toolpath_suffix: Extension identifying toolpath members.
        project_suffix:  Expected input extension; a mismatch only warns.
    """

    metadata_dir: str = "metadata"
    toolpath_suffix: str = ".gcode"
    project_suffix: str = ".3mf"

    @field_validator("metadata_dir")
    @classmethod
    def _single_segment(cls, v: str) -> str:
        """Reject nested directory names such as ``a/b``."""
        v = v.strip().strip("/")
        if not v or "/" in v or "\\" in v:
            raise ValueError("metadata_dir must be a single path segment")
        return v

    @field_validator("toolpath_suffix", "project_suffix")
    @classmethod
    def _dotted(cls, v: str) -> str:
        """Normalise suffixes to a leading dot."""
        v = v.strip()
        if not v:
            raise ValueError("suffix must not be empty")
        return v if v.startswith(".") else f".{v}"


class Limits(BaseModel, frozen=True):
    """Advisory thresholds in bytes."""

    large_input_bytes: int = Field(100 * _MIB, gt=0)
    large_output_bytes: int = Field(1 * _GIB, gt=0)


class Streaming(BaseModel, frozen=True):
    """Buffer and compression settings for the streaming stages."""

    chunk_size: int = Field(1 * _MIB, gt=0)
    compress_level: int = Field(9, ge=0, le=9)


class Estimate(BaseModel, frozen=True):
    """Size-estimation tunables."""

    fallback_ratio: float = Field(0.5, gt=0, le=1)


class ConfigSchema(BaseModel, frozen=True):
    """Root configuration object."""

    version: str = "1"
    tool_identity: str = "3mf-looper"
    temp_prefix: str = "gcode-3mf-looper-"
    log_dir: Optional[Path] = None

    layout: ArchiveLayout = Field(default_factory=ArchiveLayout)
    limits: Limits = Field(default_factory=Limits)
    streaming: Streaming = Field(default_factory=Streaming)
    estimate: Estimate = Field(default_factory=Estimate)

    @field_validator("tool_identity")
    @classmethod
    def _one_line(cls, v: str) -> str:
        """Marker comments are single lines; reject embedded newlines."""
        if "\n" in v or "\r" in v or not v.strip():
            raise ValueError("tool_identity must be a non-empty single line")
        return v.strip()


__all__ = ["ArchiveLayout", "Limits", "Streaming", "Estimate", "ConfigSchema"]
