"""
Build input ingestion.

Reads the bundler's build stats document and the optional size report, and
assembles them into chunks and the dependency graph.
"""

from .assembler import BuildReport, ChunkAssembler, analyze_build, inbound_locations
from .build_stats import BuildStats, RawChunk, RawModule, RawReason, load_build_stats, parse_build_stats
from .sizes import SizeEntry, SizeReport, chunk_id_from_label, flatten_groups

__all__ = [
    "BuildReport",
    "ChunkAssembler",
    "analyze_build",
    "inbound_locations",
    "BuildStats",
    "RawChunk",
    "RawModule",
    "RawReason",
    "load_build_stats",
    "parse_build_stats",
    "SizeEntry",
    "SizeReport",
    "chunk_id_from_label",
    "flatten_groups",
]
