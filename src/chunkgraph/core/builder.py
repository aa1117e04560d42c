"""
Dependency Graph Builder.

Builds one graph across all chunks in which concatenation wrappers are
transparent:

- containment: a chunk links straight to every real module it carries,
  including modules nested inside wrappers at any depth;
- imports: a reason that names a wrapper is rerouted to the wrapper's true
  importers, found with a worklist and a visited set of wrapper names so
  self-referential concatenation terminates.
"""

import logging
from collections import deque
from typing import Dict, Iterable, List, Optional, Set

from .graph import ChunkDependencyGraph
from .registry import ModuleRegistry
from .types import Chunk, GraphData, Module, Reason

logger = logging.getLogger(__name__)

VIA_CONCATENATED_TEMPLATE = "via concatenated source module: {wrapper}"


class GraphBuilder:
    """Turns chunks plus a ModuleRegistry into GraphData."""

    def __init__(self, registry: ModuleRegistry):
        self._registry = registry
        self._importer_cache: Dict[str, List[str]] = {}

    def build(self, chunks: Iterable[Chunk]) -> GraphData:
        return self.build_graph(chunks).to_graph_data()

    def build_graph(self, chunks: Iterable[Chunk]) -> ChunkDependencyGraph:
        """Same as ``build`` but returns the traversable graph."""
        chunks = [chunk for chunk in chunks if chunk.id]
        graph = ChunkDependencyGraph()

        for chunk in chunks:
            graph.add_chunk(chunk)

        for chunk in chunks:
            self._add_containment(graph, chunk)

        for module in self._registry:
            self._add_import_links(graph, module)

        stats = graph.get_stats()
        logger.debug(
            f"Built graph with {stats['total_nodes']} nodes and {stats['total_links']} links"
        )
        return graph

    def _add_containment(self, graph: ChunkDependencyGraph, chunk: Chunk) -> None:
        stack = list(reversed(chunk.modules))
        while stack:
            module = stack.pop()
            if module.is_concatenated:
                stack.extend(reversed(module.sub_modules))
                continue
            if not module.file_name:
                continue
            # The registry entry is canonical when a path shows up in several chunks.
            graph.add_module(self._registry.get(module.file_name) or module)
            graph.add_link(chunk.id, module.file_name)

    def _add_import_links(self, graph: ChunkDependencyGraph, module: Module) -> None:
        target = module.file_name
        for reason in module.reasons:
            origin = reason.origin
            if not origin or origin == target:
                continue

            source = self._registry.lookup(origin)
            if source is None:
                logger.debug(f"Dropping reason {origin!r} -> {target!r}: origin not in build")
                continue

            if not source.is_concatenated:
                graph.add_link(origin, target, reason)
                continue

            explanation = VIA_CONCATENATED_TEMPLATE.format(wrapper=origin)
            for importer in self.resolve_importers(source):
                if importer == target:
                    continue
                graph.add_link(
                    importer,
                    target,
                    Reason(origin=importer, explanation=explanation, type=reason.type),
                )

    def resolve_importers(self, wrapper: Module) -> List[str]:
        """
        Real modules that cause ``wrapper`` to be included.

        Walks inbound reasons breadth-first; reasons naming another wrapper
        enqueue that wrapper once. Returns an empty list when no real
        importer is reachable.
        """
        cached = self._importer_cache.get(wrapper.file_name)
        if cached is not None:
            return cached

        importers: List[str] = []
        visited: Set[str] = {wrapper.file_name}
        pending = deque([wrapper])

        while pending:
            current = pending.popleft()
            for reason in _inbound_reasons(current):
                origin = reason.origin
                if not origin:
                    continue
                source = self._registry.lookup(origin)
                if source is None:
                    continue
                if source.is_concatenated:
                    if origin not in visited:
                        visited.add(origin)
                        pending.append(source)
                elif origin not in importers:
                    importers.append(origin)

        self._importer_cache[wrapper.file_name] = importers
        return importers


def _inbound_reasons(wrapper: Module) -> List[Reason]:
    """
    Reasons that bring a wrapper in from outside.

    The wrapper's own reasons plus any sub-module reason whose origin is not
    part of the same concatenation.
    """
    inside: Set[str] = {wrapper.file_name}
    nested: List[Module] = []
    stack = list(reversed(wrapper.sub_modules))
    while stack:
        sub = stack.pop()
        inside.add(sub.file_name)
        nested.append(sub)
        stack.extend(reversed(sub.sub_modules))

    reasons = list(wrapper.reasons)
    for sub in nested:
        reasons.extend(r for r in sub.reasons if r.origin and r.origin not in inside)
    return reasons


def build_graph(chunks: Iterable[Chunk], registry: Optional[ModuleRegistry] = None) -> GraphData:
    """Build GraphData, constructing the registry when one is not supplied."""
    chunks = list(chunks)
    if registry is None:
        registry = ModuleRegistry.build(chunks)
    return GraphBuilder(registry).build(chunks)
