"""Per-loop totals and the repetition count derived from a loop specifier."""

from __future__ import annotations

import math
from typing import Iterable

from gcode_looper.utils.errors import ZeroLoopsComputed
from .types import CountSpec, LoopPlan, LoopSpecifier, MassSpec, TimeSpec, ToolpathAnalysis


def per_loop_totals(analyses: Iterable[ToolpathAnalysis]) -> tuple[int, float]:
    """Return ``(minutes, grams)`` summed over one loop's toolpaths."""
    minutes = 0
    grams = 0.0
    for a in analyses:
        minutes += a.minutes
        grams += a.grams
    return minutes, grams


def _fit(target: float, per_loop: float) -> int:
    """Return the largest ``n`` with ``n * per_loop <= target``; 0 if none.

    A zero divisor yields 0 instead of dividing.
    """
    if per_loop <= 0:
        return 0
    n = math.floor(target / per_loop)
    # float division may round up across an integer boundary
    while n > 0 and n * per_loop > target:
        n -= 1
    return max(n, 0)


def compute_repetitions(spec: LoopSpecifier, per_loop_minutes: float, per_loop_grams: float) -> int:
    """Return the repetition count for *spec* without validating it."""
    if isinstance(spec, CountSpec):
        return spec.value
    if isinstance(spec, TimeSpec):
        return _fit(spec.minutes, per_loop_minutes)
    if isinstance(spec, MassSpec):
        return _fit(spec.grams, per_loop_grams)
    raise TypeError(f"Unsupported loop specifier: {spec!r}")


def plan_loops(spec: LoopSpecifier, per_loop_minutes: float, per_loop_grams: float) -> LoopPlan:
    """Return the :class:`LoopPlan` for *spec* and the measured per-loop totals.

    Raises:
        ZeroLoopsComputed: When fewer than one loop fits the target.
    """
    repetitions = compute_repetitions(spec, per_loop_minutes, per_loop_grams)
    if repetitions < 1:
        raise ZeroLoopsComputed(per_loop_minutes, per_loop_grams)
    return LoopPlan(
        repetitions=repetitions,
        per_loop_minutes=per_loop_minutes,
        per_loop_grams=per_loop_grams,
        total_minutes=per_loop_minutes * repetitions,
        total_grams=math.ceil(per_loop_grams * repetitions),
    )


__all__ = ["per_loop_totals", "compute_repetitions", "plan_loops"]
