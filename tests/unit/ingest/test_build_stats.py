"""Unit tests for the build stats document models."""

import json

import pytest

from chunkgraph.core.errors import BuildStatsError
from chunkgraph.core.types import ModuleKind
from chunkgraph.ingest.build_stats import RawChunk, load_build_stats, parse_build_stats


class TestRawChunk:
    @pytest.mark.parametrize("data, key", [
        ({"id": 3, "name": "main"}, "main"),
        ({"id": 3}, "3"),
        ({"id": "abc"}, "abc"),
        ({"debugId": 7}, "chunk-7"),
        ({"id": "", "debugId": 2}, "chunk-2"),
    ])
    def test_key(self, data, key):
        assert RawChunk.model_validate(data).key == key

    def test_iter_modules_includes_nested(self):
        chunk = RawChunk.model_validate({
            "id": 1,
            "modules": [
                {"fileName": "a.ts"},
                {
                    "fileName": "w.ts",
                    "type": "Concatenated",
                    "modules": [{"fileName": "b.ts"}, {"fileName": "c.ts"}],
                },
            ],
        })
        assert [m.file_name for m in chunk.iter_modules()] == ["a.ts", "w.ts", "b.ts", "c.ts"]


class TestParseBuildStats:
    def test_wire_names(self):
        stats = parse_build_stats({
            "runtime": "server",
            "context": "/project",
            "chunks": [{
                "id": 0,
                "initial": True,
                "modules": [{
                    "id": 12,
                    "type": "External",
                    "fileName": "react",
                    "reasons": [{"from": "src/a.ts", "explanation": "import", "loc": "1:0-20"}],
                    "usedExports": {"server": ["default"]},
                }],
            }],
        })

        module = stats.chunks[0].modules[0]
        assert stats.runtime == "server"
        assert module.type is ModuleKind.EXTERNAL
        assert module.reasons[0].origin == "src/a.ts"
        assert module.reasons[0].loc == "1:0-20"
        assert module.used_exports == {"server": ["default"]}

    def test_unknown_fields_are_ignored(self):
        stats = parse_build_stats({"chunks": [], "hash": "abc", "version": "5"})
        assert stats.chunks == []

    def test_invalid_document(self):
        with pytest.raises(BuildStatsError):
            parse_build_stats({"chunks": [{"modules": [{"type": "Weird"}]}]})

    def test_load(self, tmp_path):
        path = tmp_path / "stats.json"
        path.write_text(json.dumps({"chunks": [{"id": 1, "name": "main"}]}))

        assert load_build_stats(path).chunks[0].key == "main"

    def test_load_missing(self, tmp_path):
        with pytest.raises(BuildStatsError):
            load_build_stats(tmp_path / "missing.json")
