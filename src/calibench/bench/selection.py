"""Selection of which registered benchmarks to run.

Every benchmark gets a stable index: its 1-based position, as a string,
in the registry sorted by name.  Indices do not depend on the filter,
so ``calibench run 3`` names the same benchmark no matter which tags
are in effect.

Selection is either explicit (by name or index) or by tags: a
benchmark is selected when it carries all required tags and none of
the skip tags.  An explicit list, when given, replaces tag filtering
entirely.  The result keeps registry order, not sorted order.
"""

from __future__ import annotations

from typing import Iterable

from calibench.registry import (
    DEFAULT_SKIP_TAGS,
    BenchmarkCategory,
    BenchmarkInfo,
    parse_tags,
)

TestSelection = list[tuple[str, BenchmarkInfo]]


def assign_indices(benchmarks: Iterable[BenchmarkInfo]) -> dict[str, str]:
    """Map each benchmark name to its 1-based index in name order."""
    ordered = sorted(benchmarks, key=lambda b: b.name)
    return {info.name: str(i + 1) for i, info in enumerate(ordered)}


def select_tests(
    registry: Iterable[BenchmarkInfo],
    specified_tests: Iterable[str] = (),
    tags: Iterable[str | BenchmarkCategory] = (),
    skip_tags: Iterable[str | BenchmarkCategory] = DEFAULT_SKIP_TAGS,
) -> TestSelection:
    """Return ``(index, info)`` pairs for the benchmarks to run.

    Args:
        registry: All registered benchmarks, in registration order.
        specified_tests: Names or index strings to run.  When non-empty,
            tag filtering is not applied.
        tags: Run only benchmarks carrying all of these tags.
        skip_tags: Never run (by tag) benchmarks carrying any of these.

    Raises:
        ValueError: If any tag name is unknown.  Raised before any
            selection takes place.
    """
    required = parse_tags(tags)
    skipped = parse_tags(skip_tags)
    wanted = set(specified_tests)

    benchmarks = list(registry)
    indices = assign_indices(benchmarks)

    def by_tags(info: BenchmarkInfo) -> bool:
        return info.tags.issuperset(required) and info.tags.isdisjoint(skipped)

    def by_names_or_indices(info: BenchmarkInfo) -> bool:
        return info.name in wanted or indices[info.name] in wanted

    keep = by_names_or_indices if wanted else by_tags
    return [(indices[info.name], info) for info in benchmarks if keep(info)]


def unmatched_tests(
    registry: Iterable[BenchmarkInfo],
    specified_tests: Iterable[str],
) -> list[str]:
    """Return the specified names/indices that match no benchmark."""
    indices = assign_indices(registry)
    known = set(indices) | set(indices.values())
    return sorted(t for t in set(specified_tests) if t not in known)
