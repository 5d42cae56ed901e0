"""
Predict the size of the output archive without compressing anything.

::

    estimate = first_archive_size
             - compressed size of the replaced member
             + ceil(per_loop_uncompressed × repetitions × ratio)

``ratio`` is ``Σ compressed / Σ uncompressed`` over the selected members
whose sizes are both known, or the fallback ratio when none are. The
estimate is advisory only: missing size metadata yields ``None`` instead of
an error.
"""

from __future__ import annotations

import logging
import math
from typing import Sequence

from .types import EntrySizes

log = logging.getLogger(__name__)

DEFAULT_FALLBACK_RATIO = 0.5


def compression_ratio(
    members: Sequence[EntrySizes], *, fallback: float = DEFAULT_FALLBACK_RATIO
) -> float:
    """Return the observed compressed/uncompressed ratio of *members*."""
    total_compressed = 0
    total_uncompressed = 0
    for m in members:
        if m.compressed_size is None or m.uncompressed_size is None:
            continue
        total_compressed += m.compressed_size
        total_uncompressed += m.uncompressed_size
    if total_uncompressed <= 0:
        return fallback
    return total_compressed / total_uncompressed


def estimate_output_size(
    first_archive_size: int,
    replaced: EntrySizes,
    per_loop: Sequence[EntrySizes],
    repetitions: int,
    *,
    fallback_ratio: float = DEFAULT_FALLBACK_RATIO,
) -> int | None:
    """Return the predicted output archive size in bytes, or ``None``.

    Args:
        first_archive_size: On-disk size of the first input archive.
        replaced: Sizes of the member whose content is replaced.
        per_loop: Sizes of every toolpath concatenated in one loop.
        repetitions: Loop count.
        fallback_ratio: Ratio used when no member reports both sizes.

    Returns:
        Estimated size (never negative), or ``None`` when the replaced
        member's compressed size or any per-loop uncompressed size is unknown.
    """
    if replaced.compressed_size is None:
        log.debug("Size estimate skipped: replaced member has no compressed size")
        return None
    if any(m.uncompressed_size is None for m in per_loop):
        log.debug("Size estimate skipped: uncompressed size missing")
        return None

    per_loop_uncompressed = sum(m.uncompressed_size or 0 for m in per_loop)
    ratio = compression_ratio(per_loop, fallback=fallback_ratio)
    new_compressed = math.ceil(per_loop_uncompressed * repetitions * ratio)
    return max(0, first_archive_size - replaced.compressed_size + new_compressed)


__all__ = ["compression_ratio", "estimate_output_size", "DEFAULT_FALLBACK_RATIO"]
