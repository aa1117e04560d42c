"""
Core modules for chunkgraph.

This package contains the fundamental building blocks:
- types: Build artifact records (Module, Chunk, GraphData, ...)
- usage: The three-state export usage oracle
- registry: Path-keyed lookup across chunks and concatenation wrappers
- classifier: Chunk load-timing classification
- graph / builder: The concatenation-aware dependency graph
"""

from .builder import GraphBuilder, build_graph
from .classifier import ChunkClassifier, classify_chunk
from .errors import BuildStatsError, ChunkGraphError, ConfigError, GraphInvariantError
from .graph import ChunkDependencyGraph
from .registry import ModuleRegistry
from .types import (
    Chunk, ChunkKind, GraphData, GraphLink, GraphNode,
    Module, ModuleKind, NodeKind, Reason, SizeMetrics,
)
from .usage import (
    ChunkMatcher, ForcedUsageOracle, MetadataUsageOracle,
    UsageOracle, UsageState, UsedExports,
)

__all__ = [
    # Types
    "Chunk", "ChunkKind", "GraphData", "GraphLink", "GraphNode",
    "Module", "ModuleKind", "NodeKind", "Reason", "SizeMetrics",
    # Usage
    "ChunkMatcher", "ForcedUsageOracle", "MetadataUsageOracle",
    "UsageOracle", "UsageState", "UsedExports",
    # Graph
    "ChunkDependencyGraph", "GraphBuilder", "ModuleRegistry", "build_graph",
    "ChunkClassifier", "classify_chunk",
    # Errors
    "BuildStatsError", "ChunkGraphError", "ConfigError", "GraphInvariantError",
]
