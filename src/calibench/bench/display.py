"""Delimited report formatting.

The report is one header line, one line per selected benchmark in run
order, a blank line, and a totals line::

    #,TEST,SAMPLES,MIN(us),MAX(us),MEAN(us),SD(us),MEDIAN(us),MAX_RSS(B)
    1,DictInsert,3,12,15,13,1,13,8192
    4,MmapScan,Unsupported

    Totals,1

Unsupported benchmarks are listed but not counted in the totals.
"""

from __future__ import annotations

from typing import Iterable

from calibench.bench.results import BenchOutcome
from calibench.registry import BenchmarkInfo

UNSUPPORTED = "Unsupported"

_TIME_COLUMNS = ["MIN", "MAX", "MEAN", "SD", "MEDIAN"]


def report_columns() -> list[str]:
    """Column names of the run report."""
    return ["#", "TEST", "SAMPLES"] + [f"{c}(us)" for c in _TIME_COLUMNS] + ["MAX_RSS(B)"]


def format_header(delim: str = ",") -> str:
    return delim.join(report_columns())


def format_outcome(outcome: BenchOutcome, delim: str = ",") -> str:
    """Format one report line."""
    if outcome.result is None:
        values = [UNSUPPORTED]
    else:
        values = [str(v) for v in outcome.result.values()]
    return delim.join([outcome.index, outcome.name] + values)


def format_totals(count: int, delim: str = ",") -> str:
    return f"Totals{delim}{count}"


def format_test_list(
    tests: Iterable[tuple[str, BenchmarkInfo]],
    delim: str = ",",
) -> str:
    """Format the ``list`` output: index, name and sorted tags per test."""
    lines = [delim.join(["#", "Test", "[Tags]"])]
    for index, info in tests:
        tags = "[" + ", ".join(info.sorted_tags()) + "]"
        lines.append(delim.join([index, info.name, tags]))
    return "\n".join(lines)
