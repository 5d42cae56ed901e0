"""
Extraction helper for project archives.

:func:`extract_archive` streams every member of a ZIP archive to disk below a
destination directory, preserving relative paths. Members are copied in
fixed-size chunks so a multi-hundred-megabyte toolpath never sits in memory
as a whole.
"""

from __future__ import annotations

import logging
import shutil
import zipfile
from pathlib import Path, PurePosixPath

from gcode_looper.utils.errors import IOFailure
from .index import normalize_entry_path

log = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 1024 * 1024


# ---------------------------------------------------------------------------
# 0 – member path safety
# ---------------------------------------------------------------------------


def _member_target(dest: Path, name: str) -> Path | None:
    """Return the on-disk target for member *name*, or ``None`` to skip it.

    Raises:
        IOFailure: When *name* would escape *dest* (``../`` traversal).
    """
    rel = PurePosixPath(normalize_entry_path(name))
    parts = [p for p in rel.parts if p not in ("", ".")]
    if not parts:
        return None
    if ".." in parts:
        raise IOFailure(f"Refusing to extract member outside destination: {name!r}")
    return dest.joinpath(*parts)


# ---------------------------------------------------------------------------
# 1 – public entry point
# ---------------------------------------------------------------------------


def extract_archive(
    archive: Path,
    dest: Path,
    logger: logging.Logger | None = None,
    *,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> list[Path]:
    """Stream every member of *archive* into *dest*.

    Parameters
    ----------
    archive
        ZIP-format file to unpack.
    dest
        Destination directory; created when missing.
    logger
        Existing logger to attach messages to. When *None* the module-level
        logger is used.
    chunk_size
        Copy buffer size in bytes.

    Returns
    -------
    list[Path]
        Extracted regular files in archive order.

    Raises
    ------
    IOFailure
        On any read/write failure or unsafe member name.
    """
    logger = logger or log
    archive = Path(archive).expanduser().resolve()
    dest = Path(dest).expanduser().resolve()

    extracted: list[Path] = []
    try:
        dest.mkdir(parents=True, exist_ok=True)
        logger.info("Extracting %s -> %s", archive.name, dest)
        with zipfile.ZipFile(archive, "r") as zf:
            for info in zf.infolist():
                target = _member_target(dest, info.filename)
                if target is None:
                    continue
                if info.is_dir():
                    target.mkdir(parents=True, exist_ok=True)
                    continue
                target.parent.mkdir(parents=True, exist_ok=True)
                with zf.open(info, "r") as src, open(target, "wb") as dst:
                    shutil.copyfileobj(src, dst, chunk_size)
                extracted.append(target)
                logger.debug("Extracted file: %s", target)
    except IOFailure:
        raise
    except (OSError, zipfile.BadZipFile, zipfile.LargeZipFile) as exc:
        logger.error("Failed to unpack %s: %s", archive, exc)
        raise IOFailure(f"Failed to extract {archive.name}: {exc}") from exc

    logger.debug("Extracted %d file(s) from %s", len(extracted), archive.name)
    return extracted


__all__ = ["extract_archive"]
