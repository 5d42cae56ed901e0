"""Shared builders for synthetic toolpaths and archives."""

from __future__ import annotations

from pathlib import Path
from zipfile import ZipFile

MODEL_XML = b'<?xml version="1.0"?><model unit="millimeter"></model>'


def gcode_text(minutes: int | None = None, grams=(0, 0, 0, 0), body: str = "G1 X1 Y1\n") -> str:
    """Return a small slicer-like toolpath with optional time/filament lines."""
    lines = ["; HEADER_BLOCK_START\n"]
    if minutes is not None:
        lines.append(f"M73 P0 R{minutes}\n")
    lines.append(body)
    if minutes is not None:
        lines.append("M73 P100 R0\n")
    if grams is not None:
        lines.append("; filament used [g] = " + ", ".join(str(g) for g in grams) + "\n")
    return "".join(lines)


def read_member(archive: Path, name: str) -> bytes:
    """Return the bytes of member *name* in *archive*."""
    with ZipFile(archive) as zf:
        return zf.read(name)
