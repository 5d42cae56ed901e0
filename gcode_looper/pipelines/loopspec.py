"""
Parse the user-supplied loop target into a :data:`LoopSpecifier`.

Three grammars are tried in order against the *whole* token:

1. bare positive integer           → :class:`CountSpec`
2. ``<number>[mhd]``               → :class:`TimeSpec` (minutes)
3. ``<number>(g|kg)``              → :class:`MassSpec` (grams)

Units are case-insensitive. Anything else, including trailing garbage such as
``2hx``, raises :class:`InvalidLoopSpecifier` before any file is opened.
"""

from __future__ import annotations

import re

from gcode_looper.utils.errors import InvalidLoopSpecifier
from .types import CountSpec, LoopSpecifier, MassSpec, TimeSpec

_COUNT_RE = re.compile(r"\d+")
_TIME_RE = re.compile(r"(\d+(?:\.\d+)?)([mhd])", re.IGNORECASE)
_MASS_RE = re.compile(r"(\d+(?:\.\d+)?)(kg|g)", re.IGNORECASE)

_MINUTES_PER_UNIT = {"m": 1, "h": 60, "d": 24 * 60}
_GRAMS_PER_UNIT = {"g": 1, "kg": 1000}

USAGE_HINT = "Use a count (e.g. 5), a time (e.g. 90m, 2h, 1d) or a mass (e.g. 100g, 2.5kg)."


def parse_loop_specifier(token: str) -> LoopSpecifier:
    """Return the loop specifier encoded by *token*.

    >>> parse_loop_specifier("5").value
    5
    >>> parse_loop_specifier("1.5h").minutes
    90.0
    >>> parse_loop_specifier("2KG").grams
    2000.0

    Args:
        token: Raw command-line token; surrounding whitespace is ignored.

    Returns:
        One of :class:`CountSpec`, :class:`TimeSpec` or :class:`MassSpec`.

    Raises:
        InvalidLoopSpecifier: When *token* matches none of the grammars or
            describes a non-positive quantity.
    """
    raw = str(token).strip()

    if _COUNT_RE.fullmatch(raw):
        value = int(raw)
        if value >= 1:
            return CountSpec(value=value, raw=raw)

    m = _TIME_RE.fullmatch(raw)
    if m:
        minutes = float(m.group(1)) * _MINUTES_PER_UNIT[m.group(2).lower()]
        if minutes > 0:
            return TimeSpec(minutes=minutes, raw=raw)

    m = _MASS_RE.fullmatch(raw)
    if m:
        grams = float(m.group(1)) * _GRAMS_PER_UNIT[m.group(2).lower()]
        if grams > 0:
            return MassSpec(grams=grams, raw=raw)

    raise InvalidLoopSpecifier(f"Invalid loop specifier {token!r}. {USAGE_HINT}")


__all__ = ["parse_loop_specifier", "USAGE_HINT"]
