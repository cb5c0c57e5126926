"""Command-line interface for calibench.

Subcommands:
    calibench run     Measure the selected benchmarks and print the report
    calibench list    Print the selected benchmarks with their indices and tags
"""

from __future__ import annotations

import time
from pathlib import Path
from typing import Any

import click

from calibench import __version__
from calibench.logging import setup_logging


@click.group()
@click.version_option(version=__version__)
def main() -> None:
    """calibench — calibrated micro-benchmarks for Python callables."""


def _load(
    registry_target: str,
    profile_path: Path | None,
    cli_overrides: dict[str, Any],
    action: Any,
) -> Any:
    """Load the registry and build the run configuration.

    Configuration errors end the invocation with exit code 1 before
    anything is measured.
    """
    from calibench.bench.config import build_config, load_profile
    from calibench.registry import load_registry

    try:
        registry = load_registry(registry_target)
        profile_data = load_profile(profile_path) if profile_path else None
        return build_config(
            registry,
            profile_data=profile_data,
            cli_overrides=cli_overrides,
            action=action,
        )
    except (ValueError, FileNotFoundError) as exc:
        click.echo(f"Error: {exc}", err=True)
        raise SystemExit(1) from exc


_registry_option = click.option(
    "--registry",
    "registry_target",
    required=True,
    help="Benchmark registry: 'package.module[:attr]' or a YAML file.",
)
_profile_option = click.option(
    "--profile",
    "profile_path",
    type=click.Path(exists=True, path_type=Path),
    default=None,
    help="YAML profile with default run options.",
)
_tags_option = click.option(
    "--tags",
    type=str,
    default=None,
    help="Run tests tagged with all of these comma-separated tags.",
)
_skip_tags_option = click.option(
    "--skip-tags",
    type=str,
    default=None,
    help="Skip tests tagged with any of these tags (default: unstable,skip).",
)
_delim_option = click.option(
    "--delim",
    type=str,
    default=None,
    help="Output field delimiter (default: ',').",
)
_quiet_option = click.option("-q", "--quiet", is_flag=True, help="Only show warnings and errors.")


# ---------------------------------------------------------------------------
# run
# ---------------------------------------------------------------------------


@main.command()
@click.argument("tests", nargs=-1)
@_registry_option
@_profile_option
@_tags_option
@_skip_tags_option
@_delim_option
@click.option(
    "--iter-scale",
    type=int,
    default=None,
    help="Multiply the one-second calibration window (default: 1).",
)
@click.option(
    "--num-iters",
    type=int,
    default=None,
    help="Fixed iterations per sample; 0 auto-calibrates (default: 0).",
)
@click.option(
    "--num-samples",
    type=int,
    default=None,
    help="Samples taken of each benchmark (default: 1).",
)
@click.option(
    "--sleep",
    "after_run_sleep",
    type=int,
    default=None,
    help="Seconds to sleep after the run before exiting.",
)
@click.option(
    "--output",
    "-o",
    type=click.Path(path_type=Path),
    default=None,
    help="Also write the results to this file.",
)
@click.option(
    "--format",
    "fmt",
    type=click.Choice(["csv", "json"]),
    default="csv",
    show_default=True,
    help="Format of the --output file.",
)
@click.option(
    "--log-file",
    type=click.Path(path_type=Path),
    default=None,
    help="Write DEBUG-level diagnostics to this file.",
)
@click.option("-v", "--verbose", is_flag=True, default=False, help="Show per-sample details.")
@_quiet_option
def run(  # noqa: PLR0913
    tests: tuple[str, ...],
    registry_target: str,
    profile_path: Path | None,
    tags: str | None,
    skip_tags: str | None,
    delim: str | None,
    iter_scale: int | None,
    num_iters: int | None,
    num_samples: int | None,
    after_run_sleep: int | None,
    output: Path | None,
    fmt: str,
    log_file: Path | None,
    verbose: bool,
    quiet: bool,
) -> None:
    """Measure benchmarks and print a delimited report.

    TESTS are benchmark names or indices (see 'calibench list').  When
    given, they replace tag filtering.

    \b
    Examples:
        calibench run --registry mypkg.benches
        calibench run --registry benches.yaml --num-samples 5 --tags list
        calibench run --registry mypkg.benches 3 DictInsert --num-iters 1000
    """
    from calibench.bench.config import RunAction, format_config
    from calibench.bench.display import format_header, format_outcome, format_totals
    from calibench.bench.export import export_csv, export_json
    from calibench.bench.runner import BenchRunner

    log = setup_logging(verbose=verbose, quiet=quiet, log_file=log_file)

    config = _load(
        registry_target,
        profile_path,
        {
            "tests": tests,
            "tags": tags,
            "skip_tags": skip_tags,
            "delim": delim,
            "iter_scale": iter_scale,
            "num_iters": num_iters,
            "num_samples": num_samples,
            "sleep": after_run_sleep,
            "verbose": True if verbose else None,
        },
        RunAction.RUN,
    )
    if config.verbose and not verbose:
        # Verbosity enabled by the profile.
        log = setup_logging(verbose=True, log_file=log_file)

    if config.verbose:
        click.echo(format_config(config))

    click.echo(format_header(config.delim))

    def report(outcome: Any) -> None:
        click.echo(format_outcome(outcome, config.delim))

    runner = BenchRunner(config, report_callback=report)
    try:
        outcomes = runner.run()
    except KeyboardInterrupt:
        click.echo("\nBenchmark interrupted.", err=True)
        raise SystemExit(130)  # noqa: B904

    click.echo()
    click.echo(format_totals(runner.measured_count, config.delim))

    if output:
        text = export_json(outcomes, config) if fmt == "json" else export_csv(outcomes)
        output.write_text(text, encoding="utf-8")
        log.info("Results saved to: %s", output)

    if config.after_run_sleep:
        time.sleep(config.after_run_sleep)


# ---------------------------------------------------------------------------
# list
# ---------------------------------------------------------------------------


@main.command("list")
@click.argument("tests", nargs=-1)
@_registry_option
@_profile_option
@_tags_option
@_skip_tags_option
@_delim_option
@_quiet_option
def list_cmd(
    tests: tuple[str, ...],
    registry_target: str,
    profile_path: Path | None,
    tags: str | None,
    skip_tags: str | None,
    delim: str | None,
    quiet: bool,
) -> None:
    """List the selected benchmarks with their indices and tags.

    Indices come from the name-sorted registry and do not change with
    the filter, so they can be passed back to 'calibench run'.
    """
    from calibench.bench.config import RunAction
    from calibench.bench.display import format_test_list

    setup_logging(quiet=quiet)

    config = _load(
        registry_target,
        profile_path,
        {"tests": tests, "tags": tags, "skip_tags": skip_tags, "delim": delim},
        RunAction.LIST,
    )
    click.echo(format_test_list(config.tests, config.delim))
