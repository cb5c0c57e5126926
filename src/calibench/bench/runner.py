"""Benchmark execution engine.

For each selected benchmark, takes ``num_samples`` samples.  Each
sample is calibrated so that it measures a window of roughly
``iteration_scale`` seconds regardless of how expensive one call of
the body is:

1. Run the setup hook (untimed).
2. Choose the iteration count ("scale"):
   - auto (``fixed_num_iters == 0``): time one iteration, then
     ``scale = 1s * iteration_scale // t1``.  A zero ``t1`` falls back
     to scale 1.
   - fixed: ``scale = fixed_num_iters``; when that is exactly 1, the
     single iteration is timed here since nothing else will time it.
3. Cap the scale at ``sys.maxsize // 10_000``.
4. If the scale is above 1, time ``scale`` iterations; otherwise keep
   the time from step 2 with scale 1.
5. Record ``elapsed_ns // scale // 1000`` microseconds.
6. Run the teardown hook.

RSS growth is measured once, after the last sample.  Benchmarks without
a body are skipped and produce no result.  Everything runs sequentially
on the calling thread, with no timeouts.
"""

from __future__ import annotations

import logging
import sys
from typing import Any, Callable

from calibench.bench.config import RunConfig
from calibench.bench.results import BenchOutcome, BenchResult
from calibench.bench.timing import SampleRunner
from calibench.registry import BenchmarkBody, BenchmarkInfo

log = logging.getLogger("calibench")

# Target duration of one auto-calibrated sample, before iteration_scale.
TARGET_SAMPLE_NS = 1_000_000_000

# Hard ceiling on iterations per sample, leaving headroom for anything
# that multiplies by the scale.
MAX_SCALE = sys.maxsize // 10_000

SamplerFactory = Callable[[], SampleRunner]
ReportCallback = Any  # Callable[[BenchOutcome], None] | None


# ---------------------------------------------------------------------------
# Single benchmark
# ---------------------------------------------------------------------------


def _measure_sample(
    fn: BenchmarkBody,
    config: RunConfig,
    sampler: SampleRunner,
) -> int:
    """Take one calibrated sample and return it in microseconds."""
    elapsed_ns = 0
    if config.fixed_num_iters == 0:
        elapsed_ns = sampler.run(fn, 1)
        if elapsed_ns > 0:
            scale = TARGET_SAMPLE_NS * config.iteration_scale // elapsed_ns
        else:
            if config.verbose:
                log.warning(
                    "    Warning: elapsed time is 0. "
                    "This can be safely ignored if the body is empty."
                )
            scale = 1
    else:
        scale = config.fixed_num_iters
        if scale == 1:
            elapsed_ns = sampler.run(fn, 1)

    scale = min(scale, MAX_SCALE)

    if scale > 1:
        log.debug("    Measuring with scale %d.", scale)
        elapsed_ns = sampler.run(fn, scale)
    else:
        scale = 1

    return elapsed_ns // scale // 1000


def run_benchmark(
    info: BenchmarkInfo,
    config: RunConfig,
    *,
    sampler_factory: SamplerFactory = SampleRunner,
) -> BenchResult | None:
    """Measure one benchmark.

    Args:
        info: The benchmark to measure.
        config: Sampling parameters.
        sampler_factory: Builds the SampleRunner for this benchmark.
            Called once, before the first sample, so the RSS baseline
            belongs to this benchmark alone.

    Returns:
        The reduced result, or None if the benchmark has no body
        (unsupported on this platform).
    """
    if info.run is None:
        log.debug("Skipping unsupported benchmark %s!", info.name)
        return None

    log.debug("Running %s for %d samples.", info.name, config.num_samples)

    sampler = sampler_factory()
    samples: list[int] = []
    for s in range(config.num_samples):
        if info.setup is not None:
            info.setup()
        sample = _measure_sample(info.run, config, sampler)
        log.debug("    Sample %d,%d", s, sample)
        if info.teardown is not None:
            info.teardown()
        samples.append(sample)

    return BenchResult.from_samples(samples, max_rss=sampler.measure_memory_usage())


# ---------------------------------------------------------------------------
# BenchRunner
# ---------------------------------------------------------------------------


class BenchRunner:
    """Runs every selected benchmark of a RunConfig in order.

    Usage::

        config = build_config(registry, cli_overrides={...})
        runner = BenchRunner(config, report_callback=print_outcome)
        outcomes = runner.run()

    The callback receives each :class:`BenchOutcome` as soon as it is
    available, so reports can be streamed.
    """

    def __init__(
        self,
        config: RunConfig,
        report_callback: ReportCallback = None,
        *,
        sampler_factory: SamplerFactory = SampleRunner,
    ) -> None:
        self.config = config
        self.report: Any = report_callback or self._default_report
        self.sampler_factory = sampler_factory
        self._outcomes: list[BenchOutcome] = []

    def run(self) -> list[BenchOutcome]:
        """Execute all selected benchmarks.

        Returns:
            One BenchOutcome per selected benchmark, in selection order.
        """
        self._outcomes = []
        for index, info in self.config.tests:
            result = run_benchmark(info, self.config, sampler_factory=self.sampler_factory)
            outcome = BenchOutcome(index=index, name=info.name, result=result)
            self._outcomes.append(outcome)
            self.report(outcome)
        return list(self._outcomes)

    @property
    def measured_count(self) -> int:
        """Number of benchmarks that produced a result."""
        return sum(1 for o in self._outcomes if not o.skipped)

    @property
    def skipped_count(self) -> int:
        return sum(1 for o in self._outcomes if o.skipped)

    @staticmethod
    def _default_report(outcome: BenchOutcome) -> None:
        """Default report callback: log one line per benchmark."""
        if outcome.result is None:
            log.info("  [%s] %s: unsupported", outcome.index, outcome.name)
        else:
            log.info(
                "  [%s] %-30s mean %dus  sd %dus  (%d samples)",
                outcome.index,
                outcome.name,
                outcome.result.mean,
                outcome.result.sd,
                outcome.result.sample_count,
            )
