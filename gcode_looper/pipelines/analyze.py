"""
Stream a toolpath file and pull out the slicer's time and filament estimates.

Two scans run on every line:

* **time** – the first ``M73 P<percent> R<minutes>`` directive sets the
  per-file duration. Later progress updates count down and are ignored.
* **filament** – every ``; filament used [g] = a, b, c, d`` comment replaces
  the previous one; the four values of the *last* match are summed. Slicers
  emit per-segment estimates before the final summary line.

The file is iterated line by line, so memory use does not depend on its size.
Missing markers yield zero, not an error.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path

from gcode_looper.utils.errors import IOFailure
from .types import ToolpathAnalysis

log = logging.getLogger(__name__)

_NUM = r"([0-9]+(?:\.[0-9]+)?)"

TIME_RE = re.compile(r"\bM73\s+P\d+\s+R(\d+)\b")
FILAMENT_RE = re.compile(
    r";\s*filament used \[g\]\s*=\s*"
    + r"\s*,\s*".join([_NUM] * 4),
    re.IGNORECASE,
)


def analyze_toolpath(path: Path) -> ToolpathAnalysis:
    """Return the time/filament estimate embedded in the toolpath at *path*.

    Args:
        path: Extracted ``.gcode`` file.

    Returns:
        :class:`ToolpathAnalysis` with ``minutes`` from the first ``M73`` line
        and ``grams`` from the last filament summary (both ``0`` if absent).

    Raises:
        IOFailure: When the file cannot be read.
    """
    minutes: int | None = None
    last_filament: re.Match[str] | None = None

    try:
        with open(path, "r", encoding="utf-8", errors="replace") as fh:
            for line in fh:
                if minutes is None:
                    t = TIME_RE.search(line)
                    if t:
                        minutes = int(t.group(1))
                f = FILAMENT_RE.search(line)
                if f:
                    last_filament = f
    except OSError as exc:
        raise IOFailure(f"Could not read toolpath {path}: {exc}") from exc

    grams = 0.0
    if last_filament is not None:
        grams = sum(float(v) for v in last_filament.groups())

    result = ToolpathAnalysis(minutes=minutes or 0, grams=grams)
    log.debug("Analysed %s: %s min, %.2f g", Path(path).name, result.minutes, result.grams)
    return result


__all__ = ["analyze_toolpath", "TIME_RE", "FILAMENT_RE"]
