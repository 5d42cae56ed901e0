"""
Public façade for the *utils* package.

Anything imported here becomes part of the *stable* public API.
Internal helpers live in their own modules and are **not** re-exported.
"""

from __future__ import annotations

# ─── errors ───────────────────────────────────────────────────────────────
from .errors import LooperError, UserCancelled

# ─── archive / cleanup ───────────────────────────────────────────────────
from .archive import looks_like_project_archive
from .cleanup import remove_quietly, work_directory

# ─── labels & naming ─────────────────────────────────────────────────────
from .naming import format_duration, format_mass, output_filename

__all__: list[str] = [
    "LooperError",
    "UserCancelled",
    "looks_like_project_archive",
    "remove_quietly",
    "work_directory",
    "format_duration",
    "format_mass",
    "output_filename",
]
