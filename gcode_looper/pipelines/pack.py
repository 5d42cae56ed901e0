"""
Repack a working directory into a new ZIP-format archive.

Every regular file below *source_dir* is written at maximum compression with
its path relative to *source_dir* (no wrapping top-level folder).
:meth:`zipfile.ZipFile.write` streams each file in small chunks and switches
to ZIP64 automatically for large members.

A file that vanishes between the directory walk and the write is logged and
skipped; any other failure removes the partial archive and raises.
"""

from __future__ import annotations

import logging
import os
import zipfile
from pathlib import Path
from typing import Iterator

from gcode_looper.utils.cleanup import remove_quietly
from gcode_looper.utils.errors import IOFailure

log = logging.getLogger(__name__)


def _iter_files(source_dir: Path) -> Iterator[Path]:
    """Yield regular files below *source_dir* in a stable, sorted walk order."""
    for root, dirs, files in os.walk(source_dir):
        dirs.sort()
        for name in sorted(files):
            yield Path(root) / name


def build_archive(
    source_dir: Path,
    dest: Path,
    logger: logging.Logger | None = None,
    *,
    compress_level: int = 9,
) -> Path:
    """Write the contents of *source_dir* into a new archive at *dest*.

    Args:
        source_dir: Directory whose contents become the archive root.
        dest: Output archive path; an existing file is replaced.
        logger: Optional logger; defaults to the module logger.
        compress_level: Deflate level 0–9.

    Returns:
        *dest*.

    Raises:
        IOFailure: When *source_dir* is missing or writing fails.
    """
    logger = logger or log
    source_dir = Path(source_dir)
    dest = Path(dest)
    if not source_dir.is_dir():
        raise IOFailure(f"Cannot archive missing directory {source_dir}")

    logger.info("Creating archive %s", dest)
    added = 0
    try:
        with zipfile.ZipFile(
            dest,
            "w",
            compression=zipfile.ZIP_DEFLATED,
            compresslevel=compress_level,
            allowZip64=True,
        ) as zf:
            for path in _iter_files(source_dir):
                arcname = path.relative_to(source_dir).as_posix()
                try:
                    zf.write(path, arcname)
                except FileNotFoundError as exc:
                    logger.warning("Skipping vanished file %s: %s", arcname, exc)
                    continue
                added += 1
                logger.debug("Added to archive: %s", arcname)
    except (OSError, zipfile.LargeZipFile) as exc:
        remove_quietly(dest)
        raise IOFailure(f"Failed to create archive {dest.name}: {exc}") from exc

    logger.debug("Archive %s holds %d file(s)", dest.name, added)
    return dest


__all__ = ["build_archive"]
