"""Human-readable labels and the output archive name.

Labels round half-up so that ``90.5`` minutes reads ``1h31m`` regardless of
Python's banker's rounding.
"""

from __future__ import annotations

import math
import re
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:  # pragma: no cover
    from gcode_looper.pipelines.types import LoopPlan

_GCODE_TAIL = re.compile(r"\.gcode$", re.IGNORECASE)


def _round_half_up(value: float) -> int:
    """Round *value* to the nearest integer, ties away from zero for x >= 0."""
    return int(math.floor(value + 0.5))


def format_duration(total_minutes: float) -> str:
    """Return ``{d}d{h}h{m}m``, ``{h}h{m}m`` or ``{m}m`` for *total_minutes*.

    >>> format_duration(45)
    '45m'
    >>> format_duration(125)
    '2h5m'
    >>> format_duration(1505)
    '1d1h5m'
    """
    minutes = max(0, _round_half_up(total_minutes))
    days, rem = divmod(minutes, 24 * 60)
    hours, mins = divmod(rem, 60)
    if days > 0:
        return f"{days}d{hours}h{mins}m"
    if hours > 0:
        return f"{hours}h{mins}m"
    return f"{mins}m"


def format_mass(grams: float) -> str:
    """Return integer grams below one kilogram, else kilograms with 2 decimals.

    >>> format_mass(999.4)
    '999g'
    >>> format_mass(1234)
    '1.23kg'
    """
    g = max(0, _round_half_up(grams))
    if g >= 1000:
        return f"{grams / 1000:.2f}kg"
    return f"{g}g"


def core_name(first_input: Path) -> str:
    """Return the input basename without ``.3mf`` and a trailing ``.gcode``.

    ``Benchy.gcode.3mf`` → ``Benchy``; ``Benchy.3mf`` → ``Benchy``.
    """
    return _GCODE_TAIL.sub("", Path(first_input).stem)


def output_filename(plan: LoopPlan, first_input: Path) -> str:
    """Compose ``Loop X {n} - {duration} - {mass} - {core}.gcode.3mf``."""
    return (
        f"Loop X {plan.repetitions} - {format_duration(plan.total_minutes)} - "
        f"{format_mass(plan.total_grams)} - {core_name(first_input)}.gcode.3mf"
    )


def output_path_for(plan: LoopPlan, first_input: Path) -> Path:
    """Return the sibling path of *first_input* that receives the output."""
    return Path(first_input).parent / output_filename(plan, first_input)


__all__ = [
    "format_duration",
    "format_mass",
    "core_name",
    "output_filename",
    "output_path_for",
]
