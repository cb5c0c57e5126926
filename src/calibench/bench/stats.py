"""Integer summary statistics over benchmark samples.

Samples are whole microseconds, and every statistic reported for them
is a whole number too:

- mean is the truncated integer mean.
- sd is the truncated sample standard deviation.  The sum of squared
  deviations is accumulated with 64-bit wraparound, so very large or
  very numerous samples wrap silently instead of raising.
- median is the element at index ``n // 2`` of the sorted samples,
  which is the upper-middle element when ``n`` is even.

An empty sample list reduces to all zeros.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Sequence

_UINT64_MASK = (1 << 64) - 1
_INT64_SIGN = 1 << 63


def _wrap_int64(value: int) -> int:
    """Wrap an integer into the signed 64-bit range."""
    value &= _UINT64_MASK
    return value - (1 << 64) if value & _INT64_SIGN else value


# ---------------------------------------------------------------------------
# Reductions
# ---------------------------------------------------------------------------


def mean_sd(samples: Sequence[int]) -> tuple[int, int]:
    """Return ``(mean, sd)`` of *samples* as truncated integers.

    ``([]) -> (0, 0)`` and ``([x]) -> (x, 0)``.
    """
    if not samples:
        return 0, 0
    if len(samples) == 1:
        return samples[0], 0

    count = len(samples)
    mean = sum(samples) // count

    sum_sq = 0
    for sample in samples:
        diff = _wrap_int64(sample - mean)
        sum_sq = (sum_sq + _wrap_int64(diff * diff)) & _UINT64_MASK

    return mean, int(math.sqrt(float(sum_sq) / (count - 1)))


def median(samples: Sequence[int]) -> int:
    """Return the element at index ``len // 2`` of the sorted samples.

    Raises:
        ValueError: If *samples* is empty.
    """
    if not samples:
        raise ValueError("median() of an empty sample sequence")
    return sorted(samples)[len(samples) // 2]


# ---------------------------------------------------------------------------
# SampleStats
# ---------------------------------------------------------------------------


@dataclass
class SampleStats:
    """Summary of one benchmark's samples, in microseconds."""

    count: int
    min: int
    max: int
    mean: int
    sd: int
    median: int


def describe(samples: Sequence[int]) -> SampleStats:
    """Reduce *samples* to count/min/max/mean/sd/median.

    An empty sequence yields all zeros.
    """
    mean, sd = mean_sd(samples)
    if not samples:
        return SampleStats(count=0, min=0, max=0, mean=mean, sd=sd, median=0)
    return SampleStats(
        count=len(samples),
        min=min(samples),
        max=max(samples),
        mean=mean,
        sd=sd,
        median=median(samples),
    )
