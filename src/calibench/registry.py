"""Registry of runnable benchmarks.

A registry is an ordered collection of :class:`BenchmarkInfo` entries,
each naming a benchmark body that accepts an iteration count, optional
setup/teardown hooks, and a set of category tags used for selection.

Registries are built explicitly and passed to the selector; there is no
process-wide list.  They can be declared in Python with
:meth:`Registry.benchmark`, or loaded from an importable module
(``package.module:attr``) or from a YAML file::

    benchmarks:
      - name: ListAppend
        run: mypkg.benches:list_append
        setup: mypkg.benches:setup_lists
        tags: [validation, list]
      - name: MmapScan
        run: null            # unsupported on this platform
        tags: [io]
"""

from __future__ import annotations

import enum
import importlib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Iterable, Iterator

import yaml

from calibench.logging import get_logger

log = get_logger("registry")

BenchmarkBody = Callable[[int], None]
Hook = Callable[[], None]


# ---------------------------------------------------------------------------
# Categories
# ---------------------------------------------------------------------------


class BenchmarkCategory(str, enum.Enum):
    """Known benchmark tags."""

    VALIDATION = "validation"
    API = "api"
    ALGORITHM = "algorithm"
    RUNTIME = "runtime"
    REFCOUNT = "refcount"
    ABSTRACTION = "abstraction"
    EXCEPTIONS = "exceptions"
    BRIDGING = "bridging"
    EXCLUSIVITY = "exclusivity"
    CPUBENCH = "cpubench"
    REGRESSION = "regression"
    MINIAPPLICATION = "miniapplication"
    LIST = "list"
    DICT = "dict"
    SET = "set"
    STRING = "string"
    BYTES = "bytes"
    IO = "io"
    # Sentinels excluded from tag-based selection by default.
    UNSTABLE = "unstable"
    SKIP = "skip"

    def __str__(self) -> str:
        return self.value


DEFAULT_SKIP_TAGS: frozenset[BenchmarkCategory] = frozenset(
    {BenchmarkCategory.UNSTABLE, BenchmarkCategory.SKIP}
)


def parse_tag(name: str | BenchmarkCategory) -> BenchmarkCategory:
    """Convert a tag name to a :class:`BenchmarkCategory`.

    Raises:
        ValueError: If *name* is not a known category.
    """
    if isinstance(name, BenchmarkCategory):
        return name
    try:
        return BenchmarkCategory(name.strip())
    except ValueError:
        valid = ", ".join(c.value for c in BenchmarkCategory)
        raise ValueError(f"Unknown benchmark tag '{name}'. Valid tags: {valid}") from None


def parse_tags(value: str | Iterable[str | BenchmarkCategory] | None) -> frozenset[BenchmarkCategory]:
    """Parse a comma-separated string (``"list,dict"``) or an iterable of tags.

    Empty segments are ignored.  The first unknown tag raises ValueError.
    """
    if value is None:
        return frozenset()
    if isinstance(value, str):
        items: list[str | BenchmarkCategory] = [p for p in value.split(",") if p.strip()]
    else:
        items = list(value)
    return frozenset(parse_tag(item) for item in items)


# ---------------------------------------------------------------------------
# BenchmarkInfo
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class BenchmarkInfo:
    """A registered benchmark.

    ``run`` receives the number of iterations to perform and is expected
    to loop internally.  A ``run`` of None marks the benchmark as
    unsupported on this platform: it is listed and selected like any
    other, but never measured.
    """

    name: str
    run: BenchmarkBody | None = None
    tags: frozenset[BenchmarkCategory] = field(default_factory=frozenset)
    setup: Hook | None = None
    teardown: Hook | None = None

    def __post_init__(self) -> None:
        if not self.name or not self.name.strip():
            raise ValueError("Benchmark names must be non-empty.")
        # Accept any iterable of tag names and normalize.
        object.__setattr__(self, "tags", parse_tags(self.tags))

    @property
    def supported(self) -> bool:
        """True if the benchmark has a body that can be measured."""
        return self.run is not None

    def sorted_tags(self) -> list[str]:
        """Tag names in alphabetical order."""
        return sorted(tag.value for tag in self.tags)


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------


class Registry:
    """Ordered, name-unique collection of benchmarks.

    Iteration yields benchmarks in registration order.

    Usage::

        registry = Registry()

        @registry.benchmark(tags=["list", "validation"])
        def list_append(n: int) -> None:
            for _ in range(n):
                [].append(1)
    """

    def __init__(self, benchmarks: Iterable[BenchmarkInfo] = ()) -> None:
        self._benchmarks: dict[str, BenchmarkInfo] = {}
        for info in benchmarks:
            self.register(info)

    def register(self, info: BenchmarkInfo) -> BenchmarkInfo:
        """Add a benchmark.  Raises ValueError on a duplicate name."""
        if info.name in self._benchmarks:
            raise ValueError(f"Benchmark '{info.name}' is already registered.")
        self._benchmarks[info.name] = info
        return info

    def benchmark(
        self,
        name: str | None = None,
        *,
        tags: Iterable[str | BenchmarkCategory] = (),
        setup: Hook | None = None,
        teardown: Hook | None = None,
    ) -> Callable[[BenchmarkBody], BenchmarkBody]:
        """Decorator registering a function as a benchmark body.

        The benchmark name defaults to the function's ``__name__``.
        """

        def decorator(fn: BenchmarkBody) -> BenchmarkBody:
            self.register(
                BenchmarkInfo(
                    name=name or fn.__name__,
                    run=fn,
                    tags=parse_tags(tags),
                    setup=setup,
                    teardown=teardown,
                )
            )
            return fn

        return decorator

    def get(self, name: str) -> BenchmarkInfo | None:
        return self._benchmarks.get(name)

    def names(self) -> list[str]:
        return list(self._benchmarks)

    def __iter__(self) -> Iterator[BenchmarkInfo]:
        return iter(list(self._benchmarks.values()))

    def __len__(self) -> int:
        return len(self._benchmarks)

    def __contains__(self, name: object) -> bool:
        return name in self._benchmarks


# ---------------------------------------------------------------------------
# Loading
# ---------------------------------------------------------------------------


def _import_target(target: str) -> tuple[Any, str]:
    """Import the module part of ``module:attr`` and return (module, attr)."""
    module_name, _, attr = target.partition(":")
    module_name = module_name.strip()
    if not module_name:
        raise ValueError(f"Invalid import target '{target}'. Expected 'module' or 'module:attr'.")
    try:
        module = importlib.import_module(module_name)
    except ImportError as exc:
        raise ValueError(f"Cannot import module '{module_name}': {exc}") from exc
    return module, attr.strip()


def resolve_callable(target: str) -> Callable[..., Any]:
    """Resolve a ``module:function`` reference to a callable.

    Raises:
        ValueError: If the module cannot be imported, the attribute is
            missing, or it is not callable.
    """
    if ":" not in target:
        raise ValueError(f"Invalid callable reference '{target}'. Expected 'module:function'.")
    module, attr = _import_target(target)
    obj: Any = module
    for part in attr.split("."):
        try:
            obj = getattr(obj, part)
        except AttributeError:
            raise ValueError(f"'{target}' does not exist.") from None
    if not callable(obj):
        raise ValueError(f"'{target}' is not callable.")
    return obj  # type: ignore[no-any-return]


def load_registry_module(target: str) -> Registry:
    """Load a registry from ``package.module[:attr]``.

    *attr* defaults to ``registry`` and may name either a
    :class:`Registry` instance or a zero-argument factory returning one.
    """
    module, attr = _import_target(target)
    attr = attr or "registry"
    obj = getattr(module, attr, None)
    if obj is None:
        raise ValueError(f"Module '{module.__name__}' has no attribute '{attr}'.")
    if not isinstance(obj, Registry) and callable(obj):
        obj = obj()
    if not isinstance(obj, Registry):
        raise ValueError(f"'{target}' is not a calibench Registry (got {type(obj).__name__}).")
    log.debug("Loaded %d benchmarks from %s", len(obj), target)
    return obj


def load_registry_file(path: Path) -> Registry:
    """Load a registry from a YAML file.

    Raises:
        FileNotFoundError: If *path* does not exist.
        ValueError: If the file is malformed or references unknown
            tags or unresolvable callables.
    """
    if not path.exists():
        raise FileNotFoundError(f"Registry file not found: {path}")

    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise ValueError(f"Cannot parse registry file {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ValueError(f"Registry file must be a YAML mapping, got {type(data).__name__}")

    entries = data.get("benchmarks") or []
    if not isinstance(entries, list):
        raise ValueError("Registry 'benchmarks' must be a list of benchmark definitions")

    registry = Registry()
    for position, entry in enumerate(entries, start=1):
        if not isinstance(entry, dict) or not entry.get("name"):
            raise ValueError(f"Benchmark #{position} in {path} must be a mapping with a 'name'")
        name = str(entry["name"])

        def _hook(key: str) -> Any:
            ref = entry.get(key)
            return resolve_callable(str(ref)) if ref else None

        registry.register(
            BenchmarkInfo(
                name=name,
                run=_hook("run"),
                tags=parse_tags(entry.get("tags")),
                setup=_hook("setup"),
                teardown=_hook("teardown"),
            )
        )

    log.debug("Loaded %d benchmarks from %s", len(registry), path)
    return registry


def load_registry(target: str | Path) -> Registry:
    """Load a registry from a YAML file path or an importable module."""
    if isinstance(target, Path) or str(target).endswith((".yaml", ".yml")):
        return load_registry_file(Path(target))
    return load_registry_module(str(target))
