"""Export benchmark results to CSV and JSON.

CSV format: one row per selected benchmark, the same columns as the
console report.  Unsupported benchmarks keep their row with the value
columns left empty and ``status`` set to ``unsupported``.

JSON format: the run configuration plus every outcome, for tooling
that post-processes a single invocation.
"""

from __future__ import annotations

import csv
import io
import json
from typing import Any

from calibench.bench.config import RunConfig
from calibench.bench.display import report_columns
from calibench.bench.results import BenchOutcome


def export_csv(outcomes: list[BenchOutcome]) -> str:
    """Export outcomes as CSV.

    Columns:
        #, TEST, SAMPLES, MIN(us), MAX(us), MEAN(us), SD(us),
        MEDIAN(us), MAX_RSS(B), status
    """
    output = io.StringIO()
    writer = csv.writer(output)

    columns = report_columns()
    writer.writerow(columns + ["status"])

    for o in outcomes:
        if o.result is None:
            writer.writerow([o.index, o.name] + [""] * (len(columns) - 2) + ["unsupported"])
        else:
            writer.writerow([o.index, o.name] + o.result.values() + ["ok"])

    return output.getvalue()


def _config_to_dict(config: RunConfig) -> dict[str, Any]:
    return {
        "delim": config.delim,
        "iteration_scale": config.iteration_scale,
        "fixed_num_iters": config.fixed_num_iters,
        "num_samples": config.num_samples,
        "verbose": config.verbose,
        "after_run_sleep": config.after_run_sleep,
        "tests_filter": list(config.tests_filter),
        "tests": [info.name for _, info in config.tests],
    }


def export_json(outcomes: list[BenchOutcome], config: RunConfig) -> str:
    """Export the configuration and outcomes as a JSON document."""
    data = {
        "config": _config_to_dict(config),
        "results": [o.to_dict() for o in outcomes],
        "totals": {
            "measured": sum(1 for o in outcomes if not o.skipped),
            "skipped": sum(1 for o in outcomes if o.skipped),
        },
    }
    return json.dumps(data, indent=2) + "\n"
