"""
Build assembly.

Turns a raw build stats document (plus an optional size report) into
Chunk/Module records, then into the dependency graph:

    BuildStats -> ChunkAssembler -> [Chunk] -> ModuleRegistry -> GraphBuilder -> GraphData

Each runtime is assembled independently; nothing here is shared between
passes.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Set

from ..config import ChunkGraphConfig
from ..core.builder import GraphBuilder
from ..core.classifier import ChunkClassifier
from ..core.registry import ModuleRegistry
from ..core.types import Chunk, GraphData, Module, ModuleKind, Reason, SizeMetrics
from ..core.usage import ChunkMatcher, ForcedUsageOracle, MetadataUsageOracle, UsageOracle
from ..parsing.javascript.analyzer import EMPTY_EXPORTS, ModuleExports, SourceAnalyzer
from .build_stats import BuildStats, RawChunk, RawModule
from .sizes import SizeReport

logger = logging.getLogger(__name__)


@dataclass
class BuildReport:
    """Everything derived from one runtime's build."""
    runtime: str
    chunks: List[Chunk]
    graph: GraphData

    def to_dict(self) -> Dict[str, Any]:
        return {
            "runtime": self.runtime,
            "chunks": {
                chunk.id: chunk.model_dump(mode="json", by_alias=True)
                for chunk in self.chunks
            },
            "graph": self.graph.to_dict(),
        }


def inbound_locations(raw_chunk: RawChunk) -> Iterator[str]:
    """Source locations of connections into the chunk's top-level modules."""
    for module in raw_chunk.modules:
        for reason in module.reasons:
            if reason.origin and reason.loc:
                yield reason.loc


class ChunkAssembler:
    """
    Builds Chunk records from raw build stats.

    Per module: static analysis of its source, size backfill from the size
    report, and conversion of inclusion reasons. Per chunk: load-timing
    classification.
    """

    def __init__(
        self,
        config: Optional[ChunkGraphConfig] = None,
        sizes: Optional[SizeReport] = None,
        analyzer: Optional[SourceAnalyzer] = None,
        tree_shaking_matcher: Optional[ChunkMatcher] = None,
    ):
        self._config = config or ChunkGraphConfig()
        self._sizes = sizes or SizeReport.empty()
        self._analyzer = analyzer or SourceAnalyzer()
        self._classifier = ChunkClassifier(
            prefetch_markers=self._config.prefetch_markers,
            preload_markers=self._config.preload_markers,
        )
        self._matcher = tree_shaking_matcher or ChunkMatcher.from_config(
            self._config.disable_tree_shaking
        )

    def assemble(self, stats: BuildStats) -> List[Chunk]:
        runtime = stats.runtime or self._config.runtime
        context = Path(stats.context) if stats.context else self._config.context_dir()
        oracle = self.usage_oracle(stats)
        analyses: Dict[str, ModuleExports] = {}

        chunks = []
        for raw_chunk in stats.chunks:
            chunk_id = raw_chunk.key
            kind = self._classifier.classify(
                chunk_id, raw_chunk.initial, inbound_locations(raw_chunk)
            )
            modules = [
                self._module(raw, chunk_id, runtime, context, oracle, analyses)
                for raw in raw_chunk.modules
            ]
            chunks.append(Chunk(
                id=chunk_id,
                kind=kind,
                size_metrics=self._sizes.chunk_size(chunk_id),
                modules=modules,
            ))

        logger.info(f"Assembled {len(chunks)} chunks for runtime {runtime!r}")
        return chunks

    def usage_oracle(self, stats: BuildStats) -> UsageOracle:
        """
        Metadata-backed oracle, with every module of a tree-shaking-disabled
        chunk reported as fully used.
        """
        usage_by_file: Dict[str, Any] = {}
        forced: Set[str] = set()
        for raw_chunk in stats.chunks:
            disabled = self._matcher(raw_chunk.name)
            for raw in raw_chunk.iter_modules():
                if not raw.file_name:
                    continue
                usage_by_file.setdefault(raw.file_name, raw.used_exports)
                if disabled:
                    forced.add(raw.file_name)

        oracle: UsageOracle = MetadataUsageOracle(usage_by_file)
        if forced:
            logger.debug(f"Tree-shaking disabled for {len(forced)} modules")
            oracle = ForcedUsageOracle(oracle, forced)
        return oracle

    def _module(
        self,
        raw: RawModule,
        chunk_id: str,
        runtime: str,
        context: Path,
        oracle: UsageOracle,
        analyses: Dict[str, ModuleExports],
        wrapper: Optional[str] = None,
    ) -> Module:
        sub_modules: List[Module] = []
        analysis = EMPTY_EXPORTS

        if raw.type is ModuleKind.CONCATENATED:
            needle = f"./{raw.file_name}" if raw.file_name else ""
            sub_modules = [
                self._module(sub, chunk_id, runtime, context, oracle, analyses, wrapper=raw.file_name)
                for sub in raw.modules
            ]
        elif wrapper is not None:
            needle = f"./{wrapper}/{raw.file_name}" if raw.file_name else ""
        else:
            needle = raw.file_name

        if raw.type is ModuleKind.NORMAL and raw.file_name:
            if raw.file_name not in analyses:
                analyses[raw.file_name] = self._analyze(raw, runtime, context, oracle)
            analysis = analyses[raw.file_name]

        return Module(
            id=raw.id,
            file_name=raw.file_name,
            kind=raw.type,
            size_metrics=self._size(chunk_id, needle),
            exports=analysis.exports,
            dead_exports=analysis.dead_exports,
            is_commonjs=analysis.is_commonjs,
            sub_modules=sub_modules,
            reasons=[
                Reason(origin=r.origin, explanation=r.explanation, type=r.type)
                for r in raw.reasons
            ],
        )

    def _size(self, chunk_id: str, needle: str) -> SizeMetrics:
        return self._sizes.module_size(chunk_id, needle)

    def _analyze(
        self,
        raw: RawModule,
        runtime: str,
        context: Path,
        oracle: UsageOracle,
    ) -> ModuleExports:
        resource = Path(raw.resource or raw.file_name)
        if not resource.is_absolute():
            resource = context / resource
        return self._analyzer.analyze_file(
            resource,
            oracle(raw.file_name, runtime),
            max_bytes=self._config.max_source_bytes,
        )


def analyze_build(
    stats: BuildStats,
    config: Optional[ChunkGraphConfig] = None,
    sizes: Optional[SizeReport] = None,
    analyzer: Optional[SourceAnalyzer] = None,
    tree_shaking_matcher: Optional[ChunkMatcher] = None,
) -> BuildReport:
    """Run a full pass for one runtime."""
    config = config or ChunkGraphConfig()
    assembler = ChunkAssembler(
        config=config,
        sizes=sizes,
        analyzer=analyzer,
        tree_shaking_matcher=tree_shaking_matcher,
    )
    chunks = assembler.assemble(stats)
    registry = ModuleRegistry.build(chunks)
    graph = GraphBuilder(registry).build(chunks)
    return BuildReport(runtime=stats.runtime or config.runtime, chunks=chunks, graph=graph)
