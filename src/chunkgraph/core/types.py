"""
Core type definitions for chunkgraph.

Every record is an immutable pydantic model. Field names are snake_case in
Python and camelCase on the wire, so a serialized graph can be embedded in a
standalone report without any reference back to the bundler.
"""

from enum import StrEnum
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ModuleKind(StrEnum):
    """How the bundler materialized a module."""
    NORMAL = "Normal"
    CONCATENATED = "Concatenated"
    EXTERNAL = "External"


class ChunkKind(StrEnum):
    """Load timing of an output chunk."""
    SYNC = "sync"
    LAZY = "lazy"
    PRELOAD = "preload"
    PREFETCH = "prefetch"


class NodeKind(StrEnum):
    """Categories of nodes in the dependency graph."""
    MODULE = "module"
    CHUNK = "chunk"


class ArtifactModel(BaseModel):
    """Base for build artifacts: frozen, camelCase aliases, snake_case access."""

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


class SizeMetrics(ArtifactModel):
    """
    Byte sizes of a chunk or module.

    Zero means the size is unknown or could not be matched in the size report.
    """
    stat_size: int = Field(default=0, ge=0)
    parsed_size: int = Field(default=0, ge=0)
    gzip_size: int = Field(default=0, ge=0)


ZERO_SIZE = SizeMetrics()


class Reason(ArtifactModel):
    """Why a module was pulled into the build."""
    origin: Optional[str] = Field(default=None, alias="from")
    explanation: str = ""
    type: Optional[str] = None


class Module(ArtifactModel):
    """
    A single source file or a synthetic concatenation wrapper.

    ``sub_modules`` is only populated for ``ModuleKind.CONCATENATED``; each
    sub-module is a complete Module with its own reasons.
    """
    id: Union[str, int, None] = None
    file_name: str = ""
    kind: ModuleKind = ModuleKind.NORMAL
    size_metrics: SizeMetrics = ZERO_SIZE
    exports: List[str] = Field(default_factory=list)
    dead_exports: List[str] = Field(default_factory=list)
    is_commonjs: bool = Field(default=False, alias="isCommonJS")
    sub_modules: List["Module"] = Field(default_factory=list)
    reasons: List[Reason] = Field(default_factory=list)

    @property
    def is_concatenated(self) -> bool:
        return self.kind is ModuleKind.CONCATENATED


class Chunk(ArtifactModel):
    """An output bundle and the top-level modules it carries."""
    id: str
    kind: ChunkKind = ChunkKind.SYNC
    size_metrics: SizeMetrics = ZERO_SIZE
    modules: List[Module] = Field(default_factory=list)


class GraphNode(ArtifactModel):
    """One node per chunk and one per real (non-wrapper) module."""
    id: str
    kind: NodeKind
    data: Union[Chunk, Module]
    dependencies: List[str] = Field(default_factory=list)


class GraphLink(ArtifactModel):
    """Directed edge. Containment links carry no reason."""
    source: str
    target: str
    reason: Optional[Reason] = None


class GraphData(ArtifactModel):
    """The complete graph handed to report consumers."""
    nodes: List[GraphNode] = Field(default_factory=list)
    links: List[GraphLink] = Field(default_factory=list)

    def node(self, node_id: str) -> Optional[GraphNode]:
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)
