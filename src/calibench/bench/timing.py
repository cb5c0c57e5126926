"""Timing and resource capture for benchmark samples.

Times a single in-process call of a benchmark body with a monotonic
nanosecond clock, and measures growth of the process's peak resident
set size with ``resource.getrusage(RUSAGE_SELF)``.
"""

from __future__ import annotations

import logging
import resource
import sys
import time
from dataclasses import dataclass
from typing import Callable

log = logging.getLogger("calibench")


# ---------------------------------------------------------------------------
# Clock
# ---------------------------------------------------------------------------


class Clock:
    """Monotonic time source.

    Timestamps are opaque; only the difference between two of them, in
    nanoseconds, is meaningful.
    """

    def now(self) -> int:
        return time.perf_counter_ns()

    @staticmethod
    def diff_ns(start: int, end: int) -> int:
        """Nanoseconds elapsed between two timestamps from :meth:`now`."""
        return end - start


# ---------------------------------------------------------------------------
# Resource sampling
# ---------------------------------------------------------------------------


@dataclass
class ResourceSnapshot:
    """Process resource usage at one point in time."""

    max_rss_bytes: int
    voluntary_switches: int = 0
    involuntary_switches: int = 0


def _rss_to_bytes(ru_maxrss: int, platform: str = sys.platform) -> int:
    """Normalize ``ru_maxrss`` to bytes.

    On Linux, ru_maxrss is in KB.  On macOS, ru_maxrss is in bytes.
    """
    if platform == "darwin":
        return ru_maxrss
    return ru_maxrss * 1024


class ResourceSampler:
    """Captures peak RSS and context switch counts for this process."""

    def capture(self) -> ResourceSnapshot:
        usage = resource.getrusage(resource.RUSAGE_SELF)
        return ResourceSnapshot(
            max_rss_bytes=_rss_to_bytes(usage.ru_maxrss),
            voluntary_switches=usage.ru_nvcsw,
            involuntary_switches=usage.ru_nivcsw,
        )


# ---------------------------------------------------------------------------
# SampleRunner
# ---------------------------------------------------------------------------


class SampleRunner:
    """Times benchmark calls and reports RSS growth for one benchmark.

    The RSS baseline is captured when the runner is created, so a fresh
    runner must be made for every benchmark.

    Args:
        clock: Time source (defaults to a monotonic :class:`Clock`).
        resources: Resource sampler (defaults to :class:`ResourceSampler`).
    """

    def __init__(
        self,
        clock: Clock | None = None,
        resources: ResourceSampler | None = None,
    ) -> None:
        self.clock = clock or Clock()
        self.resources = resources or ResourceSampler()
        self.baseline = self.resources.capture()

    def run(self, fn: Callable[[int], None], num_iters: int) -> int:
        """Call ``fn(num_iters)`` once and return the elapsed nanoseconds.

        *num_iters* must be a positive integer; the body is responsible
        for looping that many times.
        """
        start = self.clock.now()
        fn(num_iters)
        end = self.clock.now()
        return self.clock.diff_ns(start, end)

    def measure_memory_usage(self) -> int:
        """Return peak RSS growth since the baseline, in bytes.

        The delta is not clamped: it can be zero or negative.
        """
        current = self.resources.capture()
        max_rss = current.max_rss_bytes - self.baseline.max_rss_bytes

        if log.isEnabledFor(logging.DEBUG):

            def delta(attr: str) -> str:
                b = getattr(self.baseline, attr)
                c = getattr(current, attr)
                return f"{c} - {b} = {c - b}"

            log.debug(
                "    MAX_RSS %s (%d pages)",
                delta("max_rss_bytes"),
                int(max_rss / resource.getpagesize()),
            )
            log.debug("    ICS %s", delta("involuntary_switches"))
            log.debug("    VCS %s", delta("voluntary_switches"))

        return max_rss
