import pytest

from gcode_looper.pipelines.compute import compute_repetitions, per_loop_totals, plan_loops
from gcode_looper.pipelines.types import CountSpec, MassSpec, TimeSpec, ToolpathAnalysis
from gcode_looper.utils.errors import ZeroLoopsComputed


def test_count_is_used_as_is():
    """A count target ignores the per-loop totals, even zero ones."""
    assert compute_repetitions(CountSpec(value=7), 0, 0) == 7
    assert compute_repetitions(CountSpec(value=7), 999, 999) == 7


def test_time_target_across_two_inputs():
    """Toolpaths of 20 min/5 g and 10 min/3 g fit twice into one hour."""
    minutes, grams = per_loop_totals(
        [ToolpathAnalysis(minutes=20, grams=5), ToolpathAnalysis(minutes=10, grams=3)]
    )
    assert (minutes, grams) == (30, 8.0)
    assert compute_repetitions(TimeSpec(minutes=60), minutes, grams) == 2
    assert compute_repetitions(TimeSpec(minutes=59), minutes, grams) == 1


def test_mass_target_floors():
    assert compute_repetitions(MassSpec(grams=100), 0, 30) == 3
    assert compute_repetitions(MassSpec(grams=2500), 0, 12.5) == 200


def test_zero_divisor_yields_zero_loops():
    assert compute_repetitions(MassSpec(grams=100), 30, 0) == 0
    with pytest.raises(ZeroLoopsComputed) as exc:
        plan_loops(MassSpec(grams=100), 30, 0)
    assert "Target yields 0 loops" in str(exc.value)


def test_target_smaller_than_one_loop():
    with pytest.raises(ZeroLoopsComputed):
        plan_loops(TimeSpec(minutes=20), 30, 1)


def test_plan_totals():
    """Total grams round up; total minutes are exact."""
    plan = plan_loops(CountSpec(value=3), 30, 3.3)
    assert plan.repetitions == 3
    assert plan.total_minutes == 90
    assert plan.total_grams == 10


@pytest.mark.parametrize("target,per_loop", [(60, 7), (100, 0.3), (1440, 45.5), (2500, 12.1)])
def test_no_overshoot(target, per_loop):
    """repetitions x per-loop never exceeds the target."""
    n = compute_repetitions(TimeSpec(minutes=target), per_loop, 0)
    assert n * per_loop <= target
    assert (n + 1) * per_loop > target
