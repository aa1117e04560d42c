"""
Dependency graph storage backed by rustworkx.

It manages:
- The bimap between string node ids (chunk ids, module file names) and
  rustworkx integer indices.
- One link per ordered (source, target) pair. The underlying PyDiGraph is
  not a multigraph, so re-adding a pair replaces the stored link in place
  (last writer wins) and keeps its first position.
- Conversion to the plain ``GraphData`` structure.
"""

from collections import defaultdict
from typing import Any, Dict, Iterator, List, Optional, Set

import rustworkx as rx

from .errors import GraphInvariantError
from .types import Chunk, GraphData, GraphLink, GraphNode, Module, NodeKind, Reason


class ChunkDependencyGraph:
    """
    Chunk/module graph with O(1) id lookup.

    Nodes hold their owning Chunk or Module; edges hold a GraphLink.
    """

    def __init__(self):
        self._graph = rx.PyDiGraph(multigraph=False)
        self._id_to_idx: Dict[str, int] = {}
        self._idx_to_id: Dict[int, str] = {}
        self._nodes_by_kind: Dict[NodeKind, Set[str]] = defaultdict(set)

    def add_chunk(self, chunk: Chunk) -> None:
        self._add_node(chunk.id, NodeKind.CHUNK, chunk)

    def add_module(self, module: Module) -> None:
        """Add a node for a real module; existing nodes are left untouched."""
        if module.is_concatenated:
            raise GraphInvariantError(
                f"Concatenation wrapper {module.file_name!r} cannot become a graph node"
            )
        self._add_node(module.file_name, NodeKind.MODULE, module)

    def _add_node(self, node_id: str, kind: NodeKind, data: Any) -> None:
        if node_id in self._id_to_idx:
            existing = self._graph[self._id_to_idx[node_id]]
            if existing[0] is not kind:
                raise GraphInvariantError(
                    f"Node id {node_id!r} is used by both a {existing[0]} and a {kind}"
                )
            return
        idx = self._graph.add_node((kind, data))
        self._id_to_idx[node_id] = idx
        self._idx_to_id[idx] = node_id
        self._nodes_by_kind[kind].add(node_id)

    def add_link(self, source: str, target: str, reason: Optional[Reason] = None) -> None:
        """
        Add or replace the link for ``(source, target)``.

        Both endpoints must already be nodes.
        """
        missing = [node_id for node_id in (source, target) if node_id not in self._id_to_idx]
        if missing:
            raise GraphInvariantError(f"Link {source!r} -> {target!r} has no node for {missing}")

        link = GraphLink(source=source, target=target, reason=reason)
        self._graph.add_edge(self._id_to_idx[source], self._id_to_idx[target], link)

    def has_link(self, source: str, target: str) -> bool:
        if source not in self._id_to_idx or target not in self._id_to_idx:
            return False
        return self._graph.has_edge(self._id_to_idx[source], self._id_to_idx[target])

    def get_link(self, source: str, target: str) -> Optional[GraphLink]:
        if not self.has_link(source, target):
            return None
        return self._graph.get_edge_data(self._id_to_idx[source], self._id_to_idx[target])

    def get_node_ids(self, kind: NodeKind) -> Set[str]:
        return set(self._nodes_by_kind.get(kind, set()))

    def get_descendants(self, node_id: str) -> Set[str]:
        """All node ids reachable along outgoing links."""
        if node_id not in self._id_to_idx:
            return set()
        indices = rx.descendants(self._graph, self._id_to_idx[node_id])
        return {self._idx_to_id[idx] for idx in indices}

    def get_ancestors(self, node_id: str) -> Set[str]:
        """All node ids that reach ``node_id``."""
        if node_id not in self._id_to_idx:
            return set()
        indices = rx.ancestors(self._graph, self._id_to_idx[node_id])
        return {self._idx_to_id[idx] for idx in indices}

    def iter_links(self) -> Iterator[GraphLink]:
        """Links in first-insertion order."""
        edge_map = self._graph.edge_index_map()
        for edge_idx in sorted(edge_map):
            yield edge_map[edge_idx][2]

    @property
    def node_count(self) -> int:
        return self._graph.num_nodes()

    @property
    def link_count(self) -> int:
        return self._graph.num_edges()

    def get_stats(self) -> Dict[str, Any]:
        orphans = len([
            idx for idx in self._graph.node_indices()
            if self._graph.in_degree(idx) == 0 and self._graph.out_degree(idx) == 0
        ])
        return {
            "total_nodes": self.node_count,
            "total_links": self.link_count,
            "nodes_by_kind": {kind.value: len(ids) for kind, ids in self._nodes_by_kind.items()},
            "orphans": orphans,
        }

    def to_graph_data(self) -> GraphData:
        """
        Materialize nodes and links.

        A node's ``dependencies`` are the targets of its surviving outgoing
        links, in link order, so the two can never disagree.
        """
        links = list(self.iter_links())
        dependencies: Dict[str, List[str]] = defaultdict(list)
        for link in links:
            dependencies[link.source].append(link.target)

        nodes = []
        for idx in sorted(self._graph.node_indices()):
            kind, data = self._graph[idx]
            node_id = self._idx_to_id[idx]
            nodes.append(GraphNode(
                id=node_id,
                kind=kind,
                data=data,
                dependencies=dependencies.get(node_id, []),
            ))
        return GraphData(nodes=nodes, links=links)
