"""Benchmark result data structures.

Hierarchy::

    BenchOutcome (one per selected benchmark, in run order)
      → index, name
      → result: BenchResult | None   (None = unsupported, skipped)
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, fields
from typing import Any, Sequence

from calibench.bench.stats import describe


# ---------------------------------------------------------------------------
# BenchResult
# ---------------------------------------------------------------------------


@dataclass
class BenchResult:
    """Summary of one measured benchmark.

    Timing fields are microseconds per iteration.  ``max_rss`` is the
    peak RSS growth in bytes over the whole measurement window; it is
    reported as measured and may be negative.
    """

    sample_count: int
    min: int
    max: int
    mean: int
    sd: int
    median: int
    max_rss: int

    @classmethod
    def from_samples(cls, samples: Sequence[int], *, max_rss: int = 0) -> BenchResult:
        """Reduce raw samples into a result."""
        stats = describe(samples)
        return cls(
            sample_count=stats.count,
            min=stats.min,
            max=stats.max,
            mean=stats.mean,
            sd=stats.sd,
            median=stats.median,
            max_rss=max_rss,
        )

    def values(self) -> list[int]:
        """Field values in report column order."""
        return [
            self.sample_count,
            self.min,
            self.max,
            self.mean,
            self.sd,
            self.median,
            self.max_rss,
        ]

    def to_dict(self) -> dict[str, int]:
        """Serialize to a JSON-compatible dict."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> BenchResult:
        """Deserialize from a dict, ignoring unknown fields."""
        known = {f.name for f in fields(cls)}
        return cls(**{k: int(v) for k, v in data.items() if k in known})


# ---------------------------------------------------------------------------
# BenchOutcome
# ---------------------------------------------------------------------------


@dataclass
class BenchOutcome:
    """What happened to one selected benchmark."""

    index: str
    name: str
    result: BenchResult | None = None

    @property
    def skipped(self) -> bool:
        """True if the benchmark was unsupported and not measured."""
        return self.result is None

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a JSON-compatible dict."""
        return {
            "index": self.index,
            "name": self.name,
            "skipped": self.skipped,
            "result": self.result.to_dict() if self.result else None,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> BenchOutcome:
        result_data = data.get("result")
        return cls(
            index=str(data["index"]),
            name=data["name"],
            result=BenchResult.from_dict(result_data) if result_data else None,
        )
