"""Scoped working directories and best-effort removal helpers.

Removal never raises: each attempt is reported through the module logger at
*INFO* or *ERROR* level so failures stay visible without masking the error
that triggered cleanup in the first place.
"""

from __future__ import annotations

import logging
import shutil
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

log = logging.getLogger(__name__)


def _rm_file(path: Path) -> bool:
    """Unlink *path* and report the outcome. Missing files count as removed."""
    try:
        path.unlink(missing_ok=True)
        log.debug("Deleted %s", path)
        return True
    except OSError as exc:
        log.error("Failed to remove %s: %s", path, exc)
        return False


def _rm_dir(path: Path) -> bool:
    """Recursively remove *path* via :pyfunc:`shutil.rmtree`."""
    try:
        shutil.rmtree(path)
        log.info("Removed working directory %s", path)
        return True
    except FileNotFoundError:
        return True
    except OSError as exc:
        log.error("Failed to remove %s: %s", path, exc)
        return False


def remove_quietly(path: Path) -> bool:
    """Remove a file or directory tree without ever raising.

    Args:
        path: File or directory slated for removal.

    Returns:
        ``True`` when *path* is gone afterwards.
    """
    if path.is_dir() and not path.is_symlink():
        return _rm_dir(path)
    return _rm_file(path)


@contextmanager
def work_directory(root: Path | None = None, *, prefix: str = "gcode-3mf-looper-") -> Iterator[Path]:
    """Create a unique per-run directory and remove it on exit.

    The directory is created with :func:`tempfile.mkdtemp` so no two runs
    ever share it. Removal runs on success *and* on error.

    Args:
        root: Parent directory; ``None`` selects the OS temp root.
        prefix: Directory name prefix.

    Yields:
        Path to the freshly created directory.
    """
    path = Path(tempfile.mkdtemp(prefix=prefix, dir=str(root) if root else None))
    log.debug("Created working directory %s", path)
    try:
        yield path
    finally:
        remove_quietly(path)


__all__ = ["remove_quietly", "work_directory"]
