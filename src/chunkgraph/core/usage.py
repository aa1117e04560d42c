"""
Export usage information supplied by the build.

The bundler answers "which exports of this module are used?" with one of
three readings, modelled here as an explicit tagged variant:

- UNKNOWN: the build has no information. Every declared export is dead.
- ALL_USED: usage resolved to "everything". Nothing is dead.
- PARTIAL: a concrete set of used names (possibly empty).

"No information" and "nothing used" give the same dead set, but they are
different facts and stay distinct here.
"""

import logging
import re
from dataclasses import dataclass, field
from enum import StrEnum
from typing import (
    Any,
    Callable,
    Collection,
    Dict,
    FrozenSet,
    Iterable,
    List,
    Mapping,
    Optional,
    Pattern,
    Protocol,
    Union,
)

logger = logging.getLogger(__name__)


class UsageState(StrEnum):
    UNKNOWN = "unknown"
    ALL_USED = "all_used"
    PARTIAL = "partial"


@dataclass(frozen=True)
class UsedExports:
    """One reading of the usage oracle for a module in a runtime."""
    state: UsageState
    names: FrozenSet[str] = field(default_factory=frozenset)

    @classmethod
    def unknown(cls) -> "UsedExports":
        return cls(UsageState.UNKNOWN)

    @classmethod
    def all_used(cls) -> "UsedExports":
        return cls(UsageState.ALL_USED)

    @classmethod
    def partial(cls, names: Iterable[str]) -> "UsedExports":
        return cls(UsageState.PARTIAL, frozenset(names))

    @classmethod
    def from_raw(cls, value: Any) -> "UsedExports":
        """
        Interpret a raw ``usedExports`` value from a build stats document.

        ``None`` -> UNKNOWN, ``True`` -> ALL_USED, ``False`` -> PARTIAL(empty),
        a list of names -> PARTIAL(names).
        """
        if value is None:
            return cls.unknown()
        if value is True:
            return cls.all_used()
        if value is False:
            return cls.partial(())
        if isinstance(value, (list, tuple, set, frozenset)):
            return cls.partial(str(name) for name in value)
        logger.debug(f"Unrecognized usedExports value {value!r}, treating as unknown")
        return cls.unknown()

    def dead_exports(self, exports: Iterable[str]) -> List[str]:
        """Exports the build reports as unused, in declaration order."""
        if self.state is UsageState.UNKNOWN:
            return list(exports)
        if self.state is UsageState.ALL_USED:
            return []
        return [name for name in exports if name not in self.names]


class UsageOracle(Protocol):
    """Per-module, per-runtime usage lookup."""

    def __call__(self, file_name: str, runtime: Optional[str]) -> UsedExports:
        ...


RawUsage = Union[None, bool, List[str], Dict[str, Any]]


class MetadataUsageOracle:
    """
    Usage oracle backed by the ``usedExports`` fields of a build stats document.

    A raw value may be keyed by runtime (``{"client": [...], "server": true}``);
    a runtime missing from such a mapping reads as UNKNOWN. A bare value
    applies to every runtime.
    """

    def __init__(self, usage_by_file: Mapping[str, RawUsage]):
        self._usage_by_file = dict(usage_by_file)

    def __call__(self, file_name: str, runtime: Optional[str]) -> UsedExports:
        if file_name not in self._usage_by_file:
            return UsedExports.unknown()
        raw = self._usage_by_file[file_name]
        if isinstance(raw, dict):
            if runtime is None or runtime not in raw:
                return UsedExports.unknown()
            raw = raw[runtime]
        return UsedExports.from_raw(raw)


class ForcedUsageOracle:
    """Reports ALL_USED for a fixed set of modules and defers to ``inner`` otherwise."""

    def __init__(self, inner: UsageOracle, forced: Collection[str]):
        self._inner = inner
        self._forced = frozenset(forced)

    def __call__(self, file_name: str, runtime: Optional[str]) -> UsedExports:
        if file_name in self._forced:
            return UsedExports.all_used()
        return self._inner(file_name, runtime)


ChunkTest = Union[str, Pattern[str], Callable[[str], bool], Collection[str]]


class ChunkMatcher:
    """
    Decides which chunks have tree-shaking disabled.

    Accepts an exact chunk name, a compiled regex, a predicate, or a
    collection of names.
    """

    def __init__(self, test: Optional[ChunkTest] = None):
        self._test = test

    @classmethod
    def from_config(cls, entries: Iterable[str]) -> "ChunkMatcher":
        """Build from config strings; a ``re:`` prefix marks a regex."""
        names: List[str] = []
        patterns: List[Pattern[str]] = []
        for entry in entries:
            if entry.startswith("re:"):
                patterns.append(re.compile(entry[3:]))
            else:
                names.append(entry)

        if not patterns:
            return cls(frozenset(names))

        name_set = frozenset(names)

        def _matches(name: str) -> bool:
            return name in name_set or any(p.search(name) for p in patterns)

        return cls(_matches)

    def __call__(self, name: Optional[str]) -> bool:
        test = self._test
        if not name or test is None:
            return False
        if isinstance(test, str):
            return test == name
        if isinstance(test, re.Pattern):
            return test.search(name) is not None
        if callable(test):
            return bool(test(name))
        return name in test
