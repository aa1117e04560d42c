"""
Raw size report.

Reads the JSON report a bundle analyzer emits (one entry per output asset,
with nested ``groups`` mirroring directories and concatenations) and answers
size lookups by chunk id and by path substring.
"""

import json
import logging
import re
from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic.alias_generators import to_camel

from ..core.errors import BuildStatsError
from ..core.types import ZERO_SIZE, SizeMetrics

logger = logging.getLogger(__name__)

# A content hash of 8+ hex chars introduced by "." or "-"
CONTENT_HASH_PATTERN = re.compile(r"([.-])([0-9a-f]{8,})(?=\.|$)", re.IGNORECASE)


class SizeEntry(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    label: str = ""
    path: Optional[str] = None
    stat_size: int = 0
    parsed_size: int = 0
    gzip_size: int = 0
    concatenated: bool = False
    groups: List["SizeEntry"] = Field(default_factory=list)

    @field_validator("stat_size", "parsed_size", "gzip_size", mode="before")
    @classmethod
    def _missing_is_zero(cls, value: Any) -> Any:
        return value or 0

    @property
    def is_concatenated(self) -> bool:
        return self.concatenated or "concatenated" in self.label

    @property
    def sizes(self) -> SizeMetrics:
        return SizeMetrics(
            stat_size=self.stat_size,
            parsed_size=self.parsed_size,
            gzip_size=self.gzip_size,
        )


def chunk_id_from_label(label: str) -> str:
    """
    Derive a chunk id from an asset label.

    static/chunks/main-1a2b3c4d.js -> main
    pages/index.0123abcd.js        -> pages/index
    vendor.js                      -> vendor
    """
    name = label.replace("static/chunks/", "", 1).replace("../", "")
    match = CONTENT_HASH_PATTERN.search(name)
    if match:
        return name[:match.start()]
    dot = name.rfind(".")
    return name[:dot] if dot > 0 else name


def flatten_groups(groups: List[SizeEntry]) -> List[SizeEntry]:
    """Pre-order flattening of nested groups; each result has no children."""
    result: List[SizeEntry] = []
    stack = list(reversed(groups))
    while stack:
        entry = stack.pop()
        result.append(entry.model_copy(update={
            "groups": [],
            "concatenated": entry.is_concatenated,
        }))
        stack.extend(reversed(entry.groups))
    return result


class SizeReport:
    """Chunk and module sizes keyed by derived chunk id."""

    def __init__(self, entries: List[SizeEntry]):
        self._chunk_sizes: Dict[str, SizeMetrics] = {}
        self._groups: Dict[str, List[SizeEntry]] = {}
        for entry in entries:
            chunk_id = chunk_id_from_label(entry.label)
            self._chunk_sizes[chunk_id] = entry.sizes
            self._groups[chunk_id] = flatten_groups(entry.groups)

    @classmethod
    def empty(cls) -> "SizeReport":
        return cls([])

    @classmethod
    def from_data(cls, data: Any) -> "SizeReport":
        if not isinstance(data, list):
            raise BuildStatsError(f"Size report must be a list, got {type(data).__name__}")
        try:
            return cls([SizeEntry.model_validate(item) for item in data])
        except ValidationError as e:
            raise BuildStatsError(f"Invalid size report: {e}") from e

    @classmethod
    def load(cls, path: Path) -> "SizeReport":
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            raise BuildStatsError(f"Could not read size report {path}: {e}") from e

        report = cls.from_data(data)
        logger.debug(f"Loaded sizes for {len(report.chunk_ids)} chunks from {path}")
        return report

    @property
    def chunk_ids(self) -> List[str]:
        return list(self._chunk_sizes)

    def chunk_size(self, chunk_id: str) -> SizeMetrics:
        return self._chunk_sizes.get(chunk_id, ZERO_SIZE)

    def module_size(self, chunk_id: str, needle: str) -> SizeMetrics:
        """Sizes of the first group in ``chunk_id`` whose path contains ``needle``."""
        if not needle:
            return ZERO_SIZE
        for entry in self._groups.get(chunk_id, []):
            if entry.path and needle in entry.path:
                return entry.sizes
        return ZERO_SIZE
