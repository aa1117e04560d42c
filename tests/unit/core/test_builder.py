"""Unit tests for the concatenation-aware graph builder."""

import json

import pytest

from chunkgraph.core.builder import GraphBuilder, build_graph
from chunkgraph.core.errors import GraphInvariantError
from chunkgraph.core.registry import ModuleRegistry
from chunkgraph.core.types import Chunk, GraphData, Module, ModuleKind, NodeKind, Reason


def reason(origin=None, explanation="", type="harmony side effect evaluation"):
    return Reason(origin=origin, explanation=explanation, type=type)


def module(name, *origins, kind=ModuleKind.NORMAL, subs=()):
    return Module(
        file_name=name,
        kind=kind,
        reasons=[reason(o) for o in origins],
        sub_modules=list(subs),
    )


def wrapper(name, *subs, origins=()):
    return module(name, *origins, kind=ModuleKind.CONCATENATED, subs=subs)


def link_pairs(data: GraphData):
    return [(link.source, link.target) for link in data.links]


def import_links(data: GraphData):
    return [link for link in data.links if link.reason is not None]


def assert_graph_properties(data: GraphData, wrapper_names=()):
    ids = [node.id for node in data.nodes]
    assert len(ids) == len(set(ids))
    for name in wrapper_names:
        assert name not in ids

    pairs = link_pairs(data)
    assert len(pairs) == len(set(pairs))

    by_id = {node.id: node for node in data.nodes}
    for source, target in pairs:
        assert source in by_id and target in by_id
        assert target in by_id[source].dependencies
    for node in data.nodes:
        assert sorted(node.dependencies) == sorted(t for s, t in pairs if s == node.id)


class TestConcatenationTransparency:
    def test_sub_modules_get_nodes_and_direct_containment(self):
        chunk = Chunk(id="main", modules=[
            wrapper("src/w.ts + 1 modules", module("src/a.ts"), module("src/b.ts")),
        ])
        data = build_graph([chunk])

        assert [n.id for n in data.nodes] == ["main", "src/a.ts", "src/b.ts"]
        assert link_pairs(data) == [("main", "src/a.ts"), ("main", "src/b.ts")]
        assert_graph_properties(data, wrapper_names=["src/w.ts + 1 modules"])

    def test_nested_wrappers_are_flattened(self):
        inner = wrapper("src/inner.ts", module("src/leaf.ts"))
        chunk = Chunk(id="main", modules=[wrapper("src/outer.ts", inner, module("src/mid.ts"))])
        data = build_graph([chunk])

        assert link_pairs(data) == [("main", "src/leaf.ts"), ("main", "src/mid.ts")]
        assert_graph_properties(data, wrapper_names=["src/outer.ts", "src/inner.ts"])

    def test_module_shared_by_chunks_is_one_node(self):
        chunks = [
            Chunk(id="a", modules=[module("src/shared.ts")]),
            Chunk(id="b", modules=[module("src/shared.ts")]),
        ]
        data = build_graph(chunks)

        assert [n.id for n in data.nodes] == ["a", "b", "src/shared.ts"]
        assert link_pairs(data) == [("a", "src/shared.ts"), ("b", "src/shared.ts")]

    def test_node_data_is_registry_entry(self):
        first = Module(id=1, file_name="src/shared.ts")
        second = Module(id=2, file_name="src/shared.ts")
        chunks = [Chunk(id="b", modules=[second]), Chunk(id="a", modules=[first])]
        registry = ModuleRegistry.build([Chunk(id="x", modules=[first])])

        data = GraphBuilder(registry).build(chunks)

        assert data.node("src/shared.ts").data.id == 1


class TestImportLinks:
    def test_direct_import(self):
        chunk = Chunk(id="main", modules=[
            module("src/entry.ts", None),
            module("src/x.ts", "src/entry.ts"),
        ])
        data = build_graph([chunk])

        links = import_links(data)
        assert [(l.source, l.target) for l in links] == [("src/entry.ts", "src/x.ts")]
        assert links[0].reason.origin == "src/entry.ts"
        assert data.node("src/entry.ts").dependencies == ["src/x.ts"]

    def test_import_routed_through_wrapper(self):
        chunk = Chunk(id="main", modules=[
            module("Entry.ts"),
            module("X.ts", "Y.ts"),
            wrapper("Y.ts", module("Y1.ts", "Entry.ts")),
        ])
        data = build_graph([chunk])

        link = next(l for l in data.links if l.target == "X.ts" and l.reason)
        assert link.source == "Entry.ts"
        assert link.reason.origin == "Entry.ts"
        assert "via concatenated source module: Y.ts" == link.reason.explanation
        assert data.node("Y.ts") is None
        assert ("Y.ts", "X.ts") not in link_pairs(data)
        assert_graph_properties(data, wrapper_names=["Y.ts"])

    def test_wrapper_own_reasons_are_followed(self):
        chunk = Chunk(id="main", modules=[
            module("src/entry.ts"),
            module("src/x.ts", "src/w.ts"),
            wrapper("src/w.ts", module("src/w1.ts"), origins=["src/entry.ts"]),
        ])
        data = build_graph([chunk])

        assert ("src/entry.ts", "src/x.ts") in link_pairs(data)

    def test_reasons_inside_the_wrapper_are_not_importers(self):
        chunk = Chunk(id="main", modules=[
            module("src/entry.ts"),
            module("src/x.ts", "src/w.ts"),
            wrapper(
                "src/w.ts",
                module("src/w1.ts", "src/entry.ts"),
                module("src/w2.ts", "src/w1.ts"),
            ),
        ])
        data = build_graph([chunk])

        sources = [l.source for l in import_links(data) if l.target == "src/x.ts"]
        assert sources == ["src/entry.ts"]
        # The sub-module import is still a regular direct link.
        assert ("src/w1.ts", "src/w2.ts") in link_pairs(data)

    def test_wrapper_chain_resolves_to_real_importer(self):
        chunk = Chunk(id="main", modules=[
            module("src/entry.ts"),
            module("src/x.ts", "src/w1.ts"),
            wrapper("src/w1.ts", module("src/a.ts", "src/w2.ts")),
            wrapper("src/w2.ts", module("src/b.ts", "src/entry.ts")),
        ])
        data = build_graph([chunk])

        link = next(l for l in import_links(data) if l.target == "src/x.ts")
        assert link.source == "src/entry.ts"
        assert link.reason.explanation == "via concatenated source module: src/w1.ts"
        assert_graph_properties(data, wrapper_names=["src/w1.ts", "src/w2.ts"])

    def test_nested_wrapper_reasons_are_followed(self):
        inner = wrapper("src/inner.ts", module("src/leaf.ts", "src/entry.ts"))
        chunk = Chunk(id="main", modules=[
            module("src/entry.ts"),
            module("src/x.ts", "src/outer.ts"),
            wrapper("src/outer.ts", inner),
        ])
        data = build_graph([chunk])

        assert ("src/entry.ts", "src/x.ts") in link_pairs(data)

    def test_wrapper_cycle_terminates_with_no_link(self):
        chunk = Chunk(id="main", modules=[
            module("src/x.ts", "src/w1.ts"),
            wrapper("src/w1.ts", module("src/a.ts", "src/w2.ts")),
            wrapper("src/w2.ts", module("src/b.ts", "src/w1.ts")),
        ])
        data = build_graph([chunk])

        assert import_links(data) == []
        assert_graph_properties(data, wrapper_names=["src/w1.ts", "src/w2.ts"])

    def test_self_referential_wrapper_terminates(self):
        chunk = Chunk(id="main", modules=[
            module("src/x.ts", "src/w.ts"),
            wrapper("src/w.ts", module("src/a.ts"), origins=["src/w.ts"]),
        ])
        data = build_graph([chunk])

        assert import_links(data) == []

    def test_importer_equal_to_target_is_skipped(self):
        chunk = Chunk(id="main", modules=[
            module("src/x.ts", "src/w.ts"),
            wrapper("src/w.ts", module("src/a.ts", "src/x.ts")),
        ])
        data = build_graph([chunk])

        assert ("src/x.ts", "src/x.ts") not in link_pairs(data)
        assert ("src/x.ts", "src/a.ts") in link_pairs(data)

    def test_unresolved_origin_is_dropped(self):
        chunk = Chunk(id="main", modules=[module("src/x.ts", "node_modules/gone.js")])
        data = build_graph([chunk])

        assert import_links(data) == []

    def test_entry_and_self_reasons_produce_no_link(self):
        chunk = Chunk(id="main", modules=[module("src/x.ts", None, "", "src/x.ts")])
        data = build_graph([chunk])

        assert link_pairs(data) == [("main", "src/x.ts")]

    def test_duplicate_reasons_yield_one_link(self):
        chunk = Chunk(id="main", modules=[
            module("src/a.ts"),
            module("src/x.ts", "src/a.ts", "src/a.ts"),
        ])
        data = build_graph([chunk])

        assert link_pairs(data).count(("src/a.ts", "src/x.ts")) == 1
        assert data.node("src/a.ts").dependencies == ["src/x.ts"]

    def test_last_writer_wins_for_duplicate_pair(self):
        x = Module(file_name="src/x.ts", reasons=[
            reason("src/a.ts", explanation="first"),
            reason("src/a.ts", explanation="second"),
        ])
        chunk = Chunk(id="main", modules=[module("src/a.ts"), x])
        data = build_graph([chunk])

        links = [l for l in data.links if (l.source, l.target) == ("src/a.ts", "src/x.ts")]
        assert len(links) == 1
        assert links[0].reason.explanation == "second"

    def test_routed_and_direct_links_to_same_pair_dedup(self):
        x = Module(file_name="src/x.ts", reasons=[
            reason("src/entry.ts", explanation="direct"),
            reason("src/w.ts", explanation="through wrapper"),
        ])
        chunk = Chunk(id="main", modules=[
            module("src/entry.ts"),
            x,
            wrapper("src/w.ts", module("src/w1.ts", "src/entry.ts")),
        ])
        data = build_graph([chunk])

        links = [l for l in data.links if (l.source, l.target) == ("src/entry.ts", "src/x.ts")]
        assert len(links) == 1
        assert links[0].reason.explanation == "via concatenated source module: src/w.ts"


class TestBuilderInvariants:
    def test_chunk_id_colliding_with_module_raises(self):
        chunk = Chunk(id="src/a.ts", modules=[module("src/a.ts")])
        with pytest.raises(GraphInvariantError):
            build_graph([chunk])

    def test_chunks_without_id_are_skipped(self):
        data = build_graph([Chunk(id="", modules=[module("src/a.ts")])])
        assert data.nodes == []

    def test_build_graph_exposes_traversal(self):
        chunk = Chunk(id="main", modules=[module("src/a.ts"), module("src/b.ts", "src/a.ts")])
        registry = ModuleRegistry.build([chunk])
        graph = GraphBuilder(registry).build_graph([chunk])

        assert graph.get_node_ids(NodeKind.CHUNK) == {"main"}
        assert graph.get_descendants("src/a.ts") == {"src/b.ts"}

    def test_resolve_importers_is_cached(self):
        w = wrapper("src/w.ts", module("src/w1.ts", "src/entry.ts"))
        chunk = Chunk(id="main", modules=[module("src/entry.ts"), w])
        builder = GraphBuilder(ModuleRegistry.build([chunk]))

        assert builder.resolve_importers(w) == ["src/entry.ts"]
        assert builder.resolve_importers(w) is builder.resolve_importers(w)


class TestGraphDataSerialization:
    def test_to_dict_uses_wire_names(self):
        chunk = Chunk(id="main", modules=[
            module("src/a.ts"),
            module("src/b.ts", "src/a.ts"),
        ])
        payload = build_graph([chunk]).to_dict()

        json.dumps(payload)
        import_link = payload["links"][-1]
        assert import_link["reason"]["from"] == "src/a.ts"
        module_node = next(n for n in payload["nodes"] if n["id"] == "src/b.ts")
        assert module_node["kind"] == "module"
        assert module_node["data"]["fileName"] == "src/b.ts"
        assert module_node["data"]["isCommonJS"] is False
        assert module_node["data"]["sizeMetrics"] == {"statSize": 0, "parsedSize": 0, "gzipSize": 0}
