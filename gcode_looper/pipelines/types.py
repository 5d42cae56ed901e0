"""
Typed, immutable value objects that circulate between pipeline stages.

The module depends only on the Python standard library and *pydantic* so that
it can be imported early by the CLI layer before any archive is touched.

Every class inherits from :class:`pydantic.BaseModel` with ``frozen=True``
to guarantee hash-ability and prevent accidental mutation once the objects
have been created.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field


# --------------------------------------------------------------------------- #
# Loop specifiers                                                             #
# --------------------------------------------------------------------------- #
class CountSpec(BaseModel, frozen=True):
    """Fixed number of repetitions (``5``)."""

    kind: Literal["count"] = "count"
    value: int = Field(..., ge=1)
    raw: str = ""

    def describe(self) -> str:
        """Return a short human label used in console summaries."""
        return f"{self.value} repetition(s)"


class TimeSpec(BaseModel, frozen=True):
    """Total print-time budget in minutes (``90m``, ``2h``, ``1d``)."""

    kind: Literal["time"] = "time"
    minutes: float = Field(..., gt=0)
    raw: str = ""

    def describe(self) -> str:
        """Return a short human label used in console summaries."""
        return f"at most {self.minutes:g} min ({self.raw})"


class MassSpec(BaseModel, frozen=True):
    """Total filament budget in grams (``100g``, ``2.5kg``)."""

    kind: Literal["mass"] = "mass"
    grams: float = Field(..., gt=0)
    raw: str = ""

    def describe(self) -> str:
        """Return a short human label used in console summaries."""
        return f"at most {self.grams:g} g ({self.raw})"


#: Tagged variant; exactly one of the three shapes is ever active.
LoopSpecifier = Annotated[
    Union[CountSpec, TimeSpec, MassSpec], Field(discriminator="kind")
]


class SelectionMode(str, Enum):
    """How to pick toolpaths when an archive offers more than one."""

    ASK = "ask"
    ALL = "all"
    FIRST = "first"


# --------------------------------------------------------------------------- #
# Archive metadata                                                            #
# --------------------------------------------------------------------------- #
class ArchiveEntry(BaseModel, frozen=True):
    """One member of an opened archive as exposed by :class:`ArchiveHandle`.

    Attributes
    ----------
    name
        Raw member name as stored in the central directory.
    is_file
        ``False`` for directory entries.
    compressed_size / uncompressed_size
        Sizes in bytes when the archive exposes them, else ``None``.
    """

    name: str
    is_file: bool
    compressed_size: int | None = None
    uncompressed_size: int | None = None


class EntrySizes(BaseModel, frozen=True):
    """Compressed and uncompressed byte counts of one toolpath member."""

    compressed_size: int | None = None
    uncompressed_size: int | None = None


class ToolpathCandidate(BaseModel, frozen=True):
    """A ``metadata/<name>.gcode`` entry discovered inside an archive."""

    name: str
    compressed_size: int | None = None
    uncompressed_size: int | None = None

    @property
    def sizes(self) -> EntrySizes:
        """Return the size pair as an :class:`EntrySizes` object."""
        return EntrySizes(
            compressed_size=self.compressed_size,
            uncompressed_size=self.uncompressed_size,
        )


# --------------------------------------------------------------------------- #
# Analysis & planning                                                         #
# --------------------------------------------------------------------------- #
class ToolpathAnalysis(BaseModel, frozen=True):
    """Time and filament estimates extracted from one toolpath file."""

    minutes: int = Field(0, ge=0)
    grams: float = Field(0.0, ge=0)


class LoopPlan(BaseModel, frozen=True):
    """Repetition count plus the totals it implies."""

    repetitions: int = Field(..., ge=1)
    per_loop_minutes: float = 0.0
    per_loop_grams: float = 0.0
    total_minutes: float = 0.0
    total_grams: float = 0.0


class ToolpathSource(BaseModel, frozen=True):
    """One ``(toolpathFilePath, displayName)`` pair fed to the loop writer."""

    path: Path
    display_name: str


class InputSelection(BaseModel, frozen=True):
    """Toolpaths offered by and chosen for a single input archive.

    Attributes
    ----------
    archive
        Absolute path of the input archive.
    candidates
        Every ``metadata/*.gcode`` entry in archive order.
    selected
        Names picked for looping, a subsequence of *candidates*.
    """

    archive: Path
    candidates: list[ToolpathCandidate]
    selected: list[str]

    def selected_candidates(self) -> list[ToolpathCandidate]:
        """Return the candidate objects matching :attr:`selected`, in order."""
        by_name = {c.name: c for c in self.candidates}
        return [by_name[n] for n in self.selected]


class LoopResult(BaseModel, frozen=True):
    """Summary object returned by :meth:`LoopJob.run`.

    Attributes
    ----------
    output_path
        Archive written next to the first input.
    plan
        Repetitions and totals that were applied.
    selections
        Per-input candidate lists and chosen toolpaths.
    estimated_bytes
        Advisory size prediction, ``None`` when size metadata was missing.
    actual_bytes
        Size of the written archive.
    """

    output_path: Path
    plan: LoopPlan
    selections: list[InputSelection]
    estimated_bytes: int | None = None
    actual_bytes: int = 0


__all__ = [
    "CountSpec",
    "TimeSpec",
    "MassSpec",
    "LoopSpecifier",
    "SelectionMode",
    "ArchiveEntry",
    "EntrySizes",
    "ToolpathCandidate",
    "ToolpathAnalysis",
    "LoopPlan",
    "ToolpathSource",
    "InputSelection",
    "LoopResult",
]
