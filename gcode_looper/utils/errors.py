"""Exception taxonomy shared by the looping pipeline and the CLI layer."""

from __future__ import annotations


class LooperError(RuntimeError):
    """Base class for every failure that aborts a looping run."""

    pass


class InvalidLoopSpecifier(LooperError, ValueError):
    """Raised when the loop specifier matches none of the accepted grammars."""


class MissingInputFiles(LooperError):
    """Raised when no input archive was supplied."""


class InputNotFound(LooperError):
    """Raised when an input path does not exist."""


class InputNotAFile(LooperError):
    """Raised when an input path exists but is not a regular file."""


class NoToolpathFound(LooperError):
    """Raised when an archive holds no ``metadata/*.gcode`` entry."""


class AmbiguousSelectionNonInteractive(LooperError):
    """Raised when several toolpaths qualify and nobody can pick one."""


class MissingMetadataDirectory(LooperError):
    """Raised when an extracted archive lacks the metadata directory."""


class ZeroLoopsComputed(LooperError):
    """Raised when the requested target does not fit a single loop."""

    def __init__(self, per_loop_minutes: float, per_loop_grams: float) -> None:
        self.per_loop_minutes = per_loop_minutes
        self.per_loop_grams = per_loop_grams
        super().__init__(
            f"Target yields 0 loops (per loop: {per_loop_minutes:g} min, "
            f"{per_loop_grams:.2f} g). Increase target or add files."
        )


class UserCancelled(LooperError):
    """Raised when the user declines a prompt. Not a defect."""


class IOFailure(LooperError):
    """Raised when reading or writing an archive or stream fails."""


__all__ = [
    "LooperError",
    "InvalidLoopSpecifier",
    "MissingInputFiles",
    "InputNotFound",
    "InputNotAFile",
    "NoToolpathFound",
    "AmbiguousSelectionNonInteractive",
    "MissingMetadataDirectory",
    "ZeroLoopsComputed",
    "UserCancelled",
    "IOFailure",
]
