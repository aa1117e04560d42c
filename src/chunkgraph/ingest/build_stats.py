"""
Raw build stats document.

The bundler integration writes one JSON document per runtime describing
every chunk, the modules in it (with concatenation nesting), why each
module was included, and the build's export usage reading:

    {
      "runtime": "client",
      "context": "/abs/project",
      "chunks": [
        {"id": 1, "name": "main", "initial": true, "modules": [...]}
      ]
    }
"""

import json
import logging
from pathlib import Path
from typing import Any, Iterator, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel

from ..core.errors import BuildStatsError
from ..core.types import ModuleKind

logger = logging.getLogger(__name__)


class RawModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


class RawReason(RawModel):
    """One inbound connection of a module."""
    origin: Optional[str] = Field(default=None, alias="from")
    explanation: str = ""
    type: Optional[str] = None
    # Source location of the dependency in the origin module
    loc: Optional[str] = None


class RawModule(RawModel):
    id: Union[str, int, None] = None
    type: ModuleKind = ModuleKind.NORMAL
    file_name: str = ""
    # Absolute or context-relative path of the source file
    resource: Optional[str] = None
    reasons: List[RawReason] = Field(default_factory=list)
    # null | true | false | [names] | {runtime: ...}
    used_exports: Any = None
    modules: List["RawModule"] = Field(default_factory=list)

    def iter_tree(self) -> Iterator["RawModule"]:
        """This module and every module nested inside it, pre-order."""
        stack = [self]
        while stack:
            module = stack.pop()
            yield module
            stack.extend(reversed(module.modules))


class RawChunk(RawModel):
    id: Union[str, int, None] = None
    name: Optional[str] = None
    debug_id: Optional[int] = None
    initial: bool = False
    modules: List[RawModule] = Field(default_factory=list)

    @property
    def key(self) -> str:
        """Chunk identifier: name, else id, else a debug-id based fallback."""
        if self.name:
            return self.name
        if self.id is not None and str(self.id):
            return str(self.id)
        return f"chunk-{self.debug_id}"

    def iter_modules(self) -> Iterator[RawModule]:
        for module in self.modules:
            yield from module.iter_tree()


class BuildStats(RawModel):
    runtime: Optional[str] = None
    context: Optional[str] = None
    chunks: List[RawChunk] = Field(default_factory=list)


def parse_build_stats(data: Any) -> BuildStats:
    try:
        return BuildStats.model_validate(data)
    except ValidationError as e:
        raise BuildStatsError(f"Invalid build stats: {e}") from e


def load_build_stats(path: Path) -> BuildStats:
    """
    Load a build stats document.

    Raises:
        BuildStatsError: If the file is missing or not a valid document.
    """
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise BuildStatsError(f"Could not read build stats {path}: {e}") from e

    stats = parse_build_stats(data)
    logger.debug(f"Loaded {len(stats.chunks)} chunks from {path}")
    return stats
