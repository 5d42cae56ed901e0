"""
Concatenate toolpath files *R* times into one file with marker comments.

Output layout::

    ; <identity>: File modified at <ts> for <R> loops for files: a.gcode, b.gcode
    ; <identity>: Starting loop 1 for "a.gcode"
    <bytes of a.gcode>
    ; <identity>: Starting loop 1 for "b.gcode"
    <bytes of b.gcode>
    ; <identity>: Starting loop 2
    ; <identity>: Starting loop 2 for "a.gcode"
    ...
    <blank line>
    <header repeated verbatim>

Source bytes are copied verbatim in fixed-size chunks through a buffered
writer, so at most one read chunk and one write buffer are alive at a time.
Everything is written to ``<target>.tmp`` which replaces *target* only after
a flushed, fsynced close. An interrupted run therefore leaves the target
untouched; the ``.tmp`` leftover is harmless.
"""

from __future__ import annotations

import logging
import os
import shutil
from datetime import datetime
from pathlib import Path
from typing import Sequence

from gcode_looper.utils.cleanup import remove_quietly
from gcode_looper.utils.errors import IOFailure
from .types import ToolpathSource

log = logging.getLogger(__name__)

DEFAULT_IDENTITY = "3mf-looper"
DEFAULT_CHUNK_SIZE = 1024 * 1024
TMP_SUFFIX = ".tmp"


# ---------------------------------------------------------------------------
# 0 – marker text
# ---------------------------------------------------------------------------


def format_timestamp(moment: datetime) -> str:
    """Return ``YYYY-MM-DD HH:MM:SS`` for *moment* (local time, no zone)."""
    return moment.strftime("%Y-%m-%d %H:%M:%S")


def loop_header(
    display_names: Sequence[str],
    repetitions: int,
    *,
    identity: str = DEFAULT_IDENTITY,
    moment: datetime | None = None,
) -> str:
    """Return the header line, also used verbatim as footer (no newline)."""
    stamp = format_timestamp(moment or datetime.now())
    names = ", ".join(display_names)
    return (
        f"; {identity}: File modified at {stamp} for {repetitions} loops "
        f"for files: {names}"
    )


def loop_marker(index: int, *, identity: str = DEFAULT_IDENTITY) -> str:
    """Return the standalone marker emitted before loops 2..R."""
    return f"; {identity}: Starting loop {index}\n"


def file_marker(index: int, display_name: str, *, identity: str = DEFAULT_IDENTITY) -> str:
    """Return the marker emitted before every file of every loop."""
    return f'; {identity}: Starting loop {index} for "{display_name}"\n'


# ---------------------------------------------------------------------------
# 1 – streaming writer
# ---------------------------------------------------------------------------


def _stream_loops(
    dst,
    sources: Sequence[ToolpathSource],
    repetitions: int,
    header: str,
    identity: str,
    chunk_size: int,
) -> None:
    """Write the full looped layout into the open binary stream *dst*."""
    dst.write((header + "\n").encode("utf-8"))
    for i in range(1, repetitions + 1):
        if i > 1:
            dst.write(loop_marker(i, identity=identity).encode("utf-8"))
        for src in sources:
            dst.write(file_marker(i, src.display_name, identity=identity).encode("utf-8"))
            with open(src.path, "rb") as fh:
                shutil.copyfileobj(fh, dst, chunk_size)
        log.debug("Loop %d/%d written", i, repetitions)
    dst.write(("\n" + header + "\n").encode("utf-8"))


def write_loops(
    sources: Sequence[ToolpathSource],
    target: Path,
    repetitions: int,
    *,
    identity: str = DEFAULT_IDENTITY,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    moment: datetime | None = None,
) -> Path:
    """Write *repetitions* loops of *sources* into *target* atomically.

    *target* may be one of the sources: every read finishes before the
    temporary file is renamed over it.

    Args:
        sources: Ordered ``(path, display_name)`` pairs.
        target: File to create or replace.
        repetitions: Number of loops, at least 1.
        identity: Tool name embedded in every marker comment.
        chunk_size: Copy and write buffer size in bytes.
        moment: Timestamp for the header; ``None`` means now.

    Returns:
        *target*.

    Raises:
        ValueError: When *sources* is empty or *repetitions* < 1.
        IOFailure: When reading a source or writing the output fails.
    """
    if not sources:
        raise ValueError("write_loops() needs at least one source")
    if repetitions < 1:
        raise ValueError(f"repetitions must be >= 1, got {repetitions}")

    target = Path(target)
    tmp = target.with_name(target.name + TMP_SUFFIX)
    header = loop_header(
        [s.display_name for s in sources], repetitions, identity=identity, moment=moment
    )

    log.info(
        "Writing %d toolpath(s) x %d loop(s) into %s",
        len(sources),
        repetitions,
        target.name,
    )
    try:
        with open(tmp, "wb", buffering=chunk_size) as dst:
            _stream_loops(dst, sources, repetitions, header, identity, chunk_size)
            dst.flush()
            os.fsync(dst.fileno())
        os.replace(tmp, target)
    except OSError as exc:
        remove_quietly(tmp)
        raise IOFailure(f"Could not write looped toolpath {target}: {exc}") from exc

    return target


__all__ = [
    "format_timestamp",
    "loop_header",
    "loop_marker",
    "file_marker",
    "write_loops",
]
