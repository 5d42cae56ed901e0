"""
Archive introspection: find the toolpath members of a project archive.

Only the central directory is read; no member is decompressed. A toolpath
qualifies when, after path normalisation, it is a regular file with exactly
two segments ``<metadata_dir>/<name><suffix>`` (both compared
case-insensitively). Results keep archive enumeration order because the
selection prompt and the ``--first-gcode`` flag depend on it.
"""

from __future__ import annotations

import logging
import zipfile
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from gcode_looper.utils.errors import IOFailure, NoToolpathFound
from .types import ArchiveEntry, EntrySizes, ToolpathCandidate

log = logging.getLogger(__name__)

DEFAULT_METADATA_DIR = "metadata"
DEFAULT_TOOLPATH_SUFFIX = ".gcode"


# ---------------------------------------------------------------------------
# 0 – path normalisation
# ---------------------------------------------------------------------------


def normalize_entry_path(name: str) -> str:
    """Return *name* with forward slashes and no leading ``./`` or ``/``."""
    p = name.replace("\\", "/")
    if p.startswith("./"):
        p = p[2:]
    if p.startswith("/"):
        p = p[1:]
    return p


def _toolpath_name(entry: ArchiveEntry, metadata_dir: str, suffix: str) -> str | None:
    """Return the basename when *entry* is a top-level toolpath, else ``None``."""
    if not entry.is_file or not entry.name:
        return None
    segments = normalize_entry_path(entry.name).split("/")
    if len(segments) != 2:
        return None
    first, second = segments
    if first.lower() != metadata_dir.lower():
        return None
    if not second.lower().endswith(suffix.lower()):
        return None
    return second


# ---------------------------------------------------------------------------
# 1 – archive handle
# ---------------------------------------------------------------------------


class ArchiveHandle:
    """Read-only view over an opened ZIP archive.

    The handle owns the open :class:`zipfile.ZipFile` but never copies member
    data into memory. Use :func:`open_archive` to obtain one.
    """

    def __init__(self, path: Path, zf: zipfile.ZipFile) -> None:
        self.path = path
        self._zf = zf

    def entries(self) -> Iterator[ArchiveEntry]:
        """Yield every member lazily, in central-directory order."""
        for info in self._zf.infolist():
            yield ArchiveEntry(
                name=info.filename,
                is_file=not info.is_dir(),
                compressed_size=getattr(info, "compress_size", None),
                uncompressed_size=getattr(info, "file_size", None),
            )


@contextmanager
def open_archive(path: Path) -> Iterator[ArchiveHandle]:
    """Open *path* as a ZIP archive for the duration of the ``with`` block.

    Raises:
        IOFailure: When the file cannot be read or is not a ZIP archive.
    """
    try:
        zf = zipfile.ZipFile(path, "r")
    except (OSError, zipfile.BadZipFile) as exc:
        raise IOFailure(f"Could not open archive {path}: {exc}") from exc
    try:
        yield ArchiveHandle(Path(path), zf)
    finally:
        zf.close()


# ---------------------------------------------------------------------------
# 2 – public queries
# ---------------------------------------------------------------------------


def scan_toolpaths(
    archive: Path,
    *,
    metadata_dir: str = DEFAULT_METADATA_DIR,
    suffix: str = DEFAULT_TOOLPATH_SUFFIX,
) -> list[ToolpathCandidate]:
    """Return every top-level toolpath of *archive* with its sizes.

    Duplicate basenames (e.g. ``metadata/a.gcode`` and ``Metadata/a.gcode``)
    are reported once, at the position of their first occurrence.

    Raises:
        IOFailure: When the archive cannot be read.
    """
    found: list[ToolpathCandidate] = []
    seen: set[str] = set()
    with open_archive(archive) as handle:
        for entry in handle.entries():
            name = _toolpath_name(entry, metadata_dir, suffix)
            if name is None or name in seen:
                continue
            seen.add(name)
            found.append(
                ToolpathCandidate(
                    name=name,
                    compressed_size=entry.compressed_size,
                    uncompressed_size=entry.uncompressed_size,
                )
            )
    log.debug("Toolpaths in %s: %s", archive, [c.name for c in found])
    return found


def list_top_level_toolpaths(
    archive: Path,
    *,
    metadata_dir: str = DEFAULT_METADATA_DIR,
    suffix: str = DEFAULT_TOOLPATH_SUFFIX,
) -> list[str]:
    """Return toolpath basenames of *archive* in archive order.

    Raises:
        NoToolpathFound: When no ``<metadata_dir>/*<suffix>`` entry exists.
        IOFailure: When the archive cannot be read.
    """
    names = [c.name for c in scan_toolpaths(archive, metadata_dir=metadata_dir, suffix=suffix)]
    if not names:
        raise NoToolpathFound(
            f"No top-level {metadata_dir}/*{suffix} found in {Path(archive).name}."
        )
    return names


def sizes_of(
    archive: Path,
    *,
    metadata_dir: str = DEFAULT_METADATA_DIR,
    suffix: str = DEFAULT_TOOLPATH_SUFFIX,
) -> dict[str, EntrySizes]:
    """Return ``{name: EntrySizes}`` for every toolpath of *archive*.

    Either size may be ``None`` when the archive does not record it.
    """
    return {
        c.name: c.sizes
        for c in scan_toolpaths(archive, metadata_dir=metadata_dir, suffix=suffix)
    }


def find_metadata_directory(
    extracted_root: Path, name: str = DEFAULT_METADATA_DIR
) -> Path | None:
    """Locate the metadata directory below an extracted archive.

    An exact-case match wins; otherwise the first directory whose name equals
    *name* case-insensitively (in sorted order) is returned.

    Returns:
        Path to the directory, or ``None`` when absent.
    """
    candidate = extracted_root / name
    if candidate.is_dir():
        return candidate
    if not extracted_root.is_dir():
        return None
    for child in sorted(extracted_root.iterdir()):
        if child.is_dir() and child.name.lower() == name.lower():
            return child
    return None


__all__ = [
    "ArchiveHandle",
    "open_archive",
    "normalize_entry_path",
    "scan_toolpaths",
    "list_top_level_toolpaths",
    "sizes_of",
    "find_metadata_directory",
]
