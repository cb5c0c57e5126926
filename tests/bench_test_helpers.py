"""Shared test fixtures for benchmark tests."""

from __future__ import annotations

from typing import Any, Callable

from calibench.bench.config import RunConfig
from calibench.bench.selection import select_tests
from calibench.bench.timing import ResourceSnapshot, SampleRunner
from calibench.registry import BenchmarkInfo, Registry


class FakeClock:
    """Clock whose time only moves when a test advances it."""

    def __init__(self) -> None:
        self.ticks = 0

    def now(self) -> int:
        return self.ticks

    def advance(self, ns: int) -> None:
        self.ticks += ns

    @staticmethod
    def diff_ns(start: int, end: int) -> int:
        return end - start


class FakeResources:
    """Resource sampler returning scripted peak RSS values in order.

    The last value repeats once the script is exhausted.
    """

    def __init__(self, rss_values: list[int]) -> None:
        self.rss_values = list(rss_values)
        self.calls = 0

    def capture(self) -> ResourceSnapshot:
        value = self.rss_values[min(self.calls, len(self.rss_values) - 1)]
        self.calls += 1
        return ResourceSnapshot(max_rss_bytes=value)


def make_body(
    clock: FakeClock,
    cost_ns: int,
    calls: list[int] | None = None,
) -> Callable[[int], None]:
    """Body costing *cost_ns* per iteration; records each iteration count."""

    def body(n: int) -> None:
        if calls is not None:
            calls.append(n)
        clock.advance(cost_ns * n)

    return body


def make_sampler_factory(
    clock: FakeClock,
    rss_values: list[int] | None = None,
) -> Callable[[], SampleRunner]:
    """Factory for SampleRunners sharing *clock* with scripted RSS."""

    def factory() -> SampleRunner:
        return SampleRunner(
            clock=clock,  # type: ignore[arg-type]
            resources=FakeResources(rss_values or [0]),  # type: ignore[arg-type]
        )

    return factory


def make_info(name: str, *, tags: list[str] | None = None, supported: bool = True) -> BenchmarkInfo:
    """Create a BenchmarkInfo with a no-op body (or none)."""
    return BenchmarkInfo(
        name=name,
        run=noop_body if supported else None,
        tags=frozenset(tags or []),  # type: ignore[arg-type]
    )


def make_registry(entries: dict[str, list[str]]) -> Registry:
    """Create a Registry from name -> tags, in the given order."""
    return Registry(make_info(name, tags=tags) for name, tags in entries.items())


def make_config(registry: Registry | None = None, **kwargs: Any) -> RunConfig:
    """Create a RunConfig, selecting every benchmark of *registry* by tag defaults."""
    tests = select_tests(registry) if registry is not None else []
    return RunConfig(tests=tests, **kwargs)


# ---------------------------------------------------------------------------
# Importable targets for registry loading tests
# ---------------------------------------------------------------------------

CALLS: list[str] = []


def noop_body(n: int) -> None:
    for _ in range(n):
        pass


def recording_setup() -> None:
    CALLS.append("setup")


def recording_teardown() -> None:
    CALLS.append("teardown")


NOT_CALLABLE = 42

SAMPLE_REGISTRY = Registry(
    [
        BenchmarkInfo(name="Zeta", run=noop_body, tags=frozenset({"list"})),  # type: ignore[arg-type]
        BenchmarkInfo(name="Alpha", run=noop_body, tags=frozenset({"dict"})),  # type: ignore[arg-type]
        BenchmarkInfo(name="Mid", run=None, tags=frozenset({"io"})),  # type: ignore[arg-type]
        BenchmarkInfo(name="Flaky", run=noop_body, tags=frozenset({"list", "unstable"})),  # type: ignore[arg-type]
    ]
)


def build_sample_registry() -> Registry:
    return Registry(
        [
            BenchmarkInfo(name="Built", run=noop_body),
        ]
    )
