"""
Helpers for identifying project archives.

The predicate compares the basename suffix only, without probing the ZIP
structure. Callers treat a mismatch as a warning; the format check happens
when :mod:`zipfile` opens the file.
"""

from __future__ import annotations

from pathlib import Path


def looks_like_project_archive(path: Path, suffix: str = ".3mf") -> bool:
    """Return *True* when *path* carries the expected project suffix.

    The check is case-insensitive and only looks at the final suffix::

        >>> looks_like_project_archive(Path("benchy.gcode.3mf"))
        True
        >>> looks_like_project_archive(Path("BENCHY.3MF"))
        True
        >>> looks_like_project_archive(Path("benchy.zip"))
        False

    Args:
        path: Filesystem path to test (existence is not required).
        suffix: Expected extension including the dot.

    Returns:
        ``True`` if the basename ends with *suffix*.
    """
    return path.name.lower().endswith(suffix.lower())


__all__ = ["looks_like_project_archive"]
