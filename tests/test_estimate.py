import pytest

from gcode_looper.pipelines.estimate import compression_ratio, estimate_output_size
from gcode_looper.pipelines.types import EntrySizes


def test_ratio_is_pooled_over_members():
    members = [EntrySizes(compressed_size=50, uncompressed_size=100),
               EntrySizes(compressed_size=25, uncompressed_size=100)]
    assert compression_ratio(members) == pytest.approx(0.375)


def test_ratio_falls_back_without_complete_sizes():
    assert compression_ratio([EntrySizes(uncompressed_size=100)]) == 0.5
    assert compression_ratio([], fallback=0.3) == 0.3


def test_estimate_formula():
    """first size - replaced compressed + ceil(uncompressed * R * ratio)."""
    replaced = EntrySizes(compressed_size=100, uncompressed_size=400)
    est = estimate_output_size(1000, replaced, [replaced], 3)
    assert est == 1000 - 100 + 300


def test_estimate_rounds_up():
    replaced = EntrySizes(compressed_size=1, uncompressed_size=3)
    assert estimate_output_size(10, replaced, [replaced], 1) == 10 - 1 + 1


def test_estimate_unknown_when_sizes_missing():
    """Missing size metadata yields no estimate rather than an error."""
    full = EntrySizes(compressed_size=10, uncompressed_size=40)
    assert estimate_output_size(100, EntrySizes(uncompressed_size=40), [full], 2) is None
    assert estimate_output_size(100, full, [full, EntrySizes(compressed_size=3)], 2) is None


def test_estimate_never_negative():
    replaced = EntrySizes(compressed_size=500, uncompressed_size=0)
    assert estimate_output_size(10, replaced, [replaced], 5) == 0
