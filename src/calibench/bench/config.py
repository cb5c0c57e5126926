"""Run configuration and benchmark profile loading.

Handles:
- Loading run profiles from YAML files.
- Merging CLI options with profile values and defaults.
- Validating the numeric options before anything runs.
- Resolving the test selection against the registry.
- Formatting the configuration echo printed in verbose mode.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any

from calibench.bench.selection import TestSelection, select_tests, unmatched_tests
from calibench.registry import DEFAULT_SKIP_TAGS, Registry, parse_tags

log = logging.getLogger("calibench")


class RunAction(enum.Enum):
    """What an invocation does with its selection."""

    RUN = "run"
    LIST = "list"


# ---------------------------------------------------------------------------
# RunConfig
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class RunConfig:
    """Resolved, immutable configuration for one harness invocation."""

    # Report field separator.
    delim: str = ","

    # Multiplies the one-second target window of each auto-calibrated
    # sample, so a body runs for N times longer than it normally would.
    iteration_scale: int = 1

    # 0 means auto-calibrate; otherwise run this many iterations.
    fixed_num_iters: int = 0

    # Samples taken of each benchmark.
    num_samples: int = 1

    verbose: bool = False

    # Seconds to sleep after the run, so external tools can attach to
    # the still-live process.
    after_run_sleep: int | None = None

    # Selected benchmarks and the explicit filter that produced them.
    tests: TestSelection = field(default_factory=list)
    tests_filter: tuple[str, ...] = ()

    action: RunAction = RunAction.RUN


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


@dataclass
class ValidationError:
    """A single configuration validation error."""

    field: str
    message: str
    severity: str = "error"  # "error" or "warning"


def validate_config(config: RunConfig) -> list[ValidationError]:
    """Validate a run configuration.

    Returns a list of validation errors.  Empty list means valid.
    """
    errors: list[ValidationError] = []

    if config.iteration_scale < 1:
        errors.append(
            ValidationError(
                field="iteration_scale",
                message=f"Iteration scale must be at least 1 (got {config.iteration_scale}).",
            )
        )

    if config.fixed_num_iters < 0:
        errors.append(
            ValidationError(
                field="fixed_num_iters",
                message=(
                    f"Fixed iteration count cannot be negative (got {config.fixed_num_iters})."
                ),
            )
        )

    if config.num_samples < 0:
        errors.append(
            ValidationError(
                field="num_samples",
                message=f"Number of samples cannot be negative (got {config.num_samples}).",
            )
        )
    elif config.num_samples == 0:
        errors.append(
            ValidationError(
                field="num_samples",
                message="Number of samples is 0; every result will be empty.",
                severity="warning",
            )
        )

    if config.after_run_sleep is not None and config.after_run_sleep < 0:
        errors.append(
            ValidationError(
                field="after_run_sleep",
                message=f"Sleep duration cannot be negative (got {config.after_run_sleep}).",
            )
        )

    if not config.delim:
        errors.append(
            ValidationError(
                field="delim",
                message="Delimiter must be a non-empty string.",
            )
        )

    return errors


# ---------------------------------------------------------------------------
# YAML profile loading
# ---------------------------------------------------------------------------


def load_profile(profile_path: Path) -> dict[str, Any]:
    """Load a run profile from a YAML file.

    Profile format (every key optional)::

        delim: ","
        iter_scale: 1
        num_iters: 0
        num_samples: 5
        verbose: false
        sleep: 10
        tags: [list]            # or "list,dict"
        skip_tags: [unstable, skip]
        tests: [ListAppend, "3"]

    Returns:
        The parsed YAML as a dict.
    """
    import yaml

    if not profile_path.exists():
        raise FileNotFoundError(f"Profile not found: {profile_path}")

    try:
        data = yaml.safe_load(profile_path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise ValueError(f"Cannot parse profile {profile_path}: {exc}") from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"Profile must be a YAML mapping, got {type(data).__name__}")

    return data


def _coerce_int(name: str, value: Any) -> int | None:
    """Convert an option value to int, rejecting malformed input.

    Accepts ints and integer strings such as ``"5"``.  Floats are
    rejected rather than truncated.
    """
    if value is None:
        return None
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            pass
    raise ValueError(f"Invalid value for {name}: {value!r} is not an integer.")


def _coerce_bool(name: str, value: Any) -> bool:
    if not isinstance(value, bool):
        raise ValueError(f"Invalid value for {name}: {value!r} is not true or false.")
    return value


def _coerce_tests(value: Any) -> tuple[str, ...]:
    if not value:
        return ()
    if isinstance(value, (str, int)):
        value = [value]
    return tuple(str(t) for t in value)


def build_config(
    registry: Registry,
    *,
    profile_data: dict[str, Any] | None = None,
    cli_overrides: dict[str, Any] | None = None,
    action: RunAction = RunAction.RUN,
) -> RunConfig:
    """Build a RunConfig from defaults, a profile, and CLI options.

    CLI values take precedence over profile values, which take
    precedence over defaults.  A CLI value of None (or an empty test
    list) means "not given".  Keys in both mappings: ``delim``,
    ``iter_scale``, ``num_iters``, ``num_samples``, ``verbose``,
    ``sleep``, ``tags``, ``skip_tags``, ``tests``.

    Raises:
        ValueError: On unknown tags, malformed numbers, or any fatal
            validation error.  Nothing has run at this point.
    """
    profile = profile_data or {}
    cli = cli_overrides or {}

    def pick(key: str, default: Any = None) -> Any:
        value = cli.get(key)
        if value is None or (key == "tests" and not value):
            value = profile.get(key)
        return default if value is None else value

    # Tag names are checked before anything else is resolved.
    tags = parse_tags(pick("tags"))
    skip_value = pick("skip_tags")
    skip_tags = DEFAULT_SKIP_TAGS if skip_value is None else parse_tags(skip_value)

    tests_filter = _coerce_tests(pick("tests"))

    config = RunConfig(
        delim=str(pick("delim", ",")),
        iteration_scale=_coerce_int("iter_scale", pick("iter_scale", 1)) or 0,
        fixed_num_iters=_coerce_int("num_iters", pick("num_iters", 0)) or 0,
        num_samples=_coerce_int("num_samples", pick("num_samples", 1)) or 0,
        verbose=_coerce_bool("verbose", pick("verbose", False)),
        after_run_sleep=_coerce_int("sleep", pick("sleep")),
        tests_filter=tests_filter,
        action=action,
    )

    errors = validate_config(config)
    for w in (e for e in errors if e.severity == "warning"):
        log.warning("Config warning: %s: %s", w.field, w.message)
    fatal = [e for e in errors if e.severity == "error"]
    if fatal:
        messages = [f"  {e.field}: {e.message}" for e in fatal]
        raise ValueError("Invalid run configuration:\n" + "\n".join(messages))

    for name in unmatched_tests(registry, tests_filter):
        log.warning("No benchmark matches '%s'", name)

    selection = select_tests(
        registry,
        specified_tests=tests_filter,
        tags=tags,
        skip_tags=skip_tags,
    )
    return replace(config, tests=selection)


# ---------------------------------------------------------------------------
# Verbose echo
# ---------------------------------------------------------------------------


def format_config(config: RunConfig) -> str:
    """Format the configuration block printed before a verbose run."""
    test_list = ", ".join(info.name for _, info in config.tests)
    lines = [
        "--- CONFIG ---",
        f"NumSamples: {config.num_samples}",
        f"Verbose: {config.verbose}",
        f"IterScale: {config.iteration_scale}",
        f"FixedIters: {config.fixed_num_iters}",
        f"Tests Filter: {list(config.tests_filter)}",
        f"Tests to run: {test_list}",
        "",
        "--- DATA ---",
    ]
    return "\n".join(lines) + "\n"
