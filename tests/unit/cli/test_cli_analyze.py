"""Unit tests for the 'analyze' and 'init' commands."""

import json

import yaml
from click.testing import CliRunner

from chunkgraph.cli.commands.analyze import analyze
from chunkgraph.cli.commands.initialize import init
from chunkgraph.config import DEFAULT_CONFIG


class TestAnalyzeCommand:
    def _write(self, tmp_path, name, text):
        path = tmp_path / name
        path.write_text(text)
        return str(path)

    def test_json_with_used(self, tmp_path):
        path = self._write(tmp_path, "m.ts", "export const a = 1;\nexport const b = 2;\n")
        result = CliRunner().invoke(analyze, [path, "--used", "a", "--json"])

        assert result.exit_code == 0, result.output
        data = json.loads(result.output)["data"]
        assert data["exports"] == ["a", "b"]
        assert data["dead_exports"] == ["b"]
        assert data["is_commonjs"] is False

    def test_unknown_usage_by_default(self, tmp_path):
        path = self._write(tmp_path, "m.js", "exports.a = 1;\n")
        result = CliRunner().invoke(analyze, [path, "--json"])

        data = json.loads(result.output)["data"]
        assert data["is_commonjs"] is True
        assert data["dead_exports"] == ["a"]

    def test_all_used(self, tmp_path):
        path = self._write(tmp_path, "m.js", "export const a = 1;\n")
        result = CliRunner().invoke(analyze, [path, "--all-used", "--json"])

        assert json.loads(result.output)["data"]["dead_exports"] == []

    def test_text_output(self, tmp_path):
        path = self._write(tmp_path, "m.js", "export const a = 1;\nexport const b = 2;\n")
        result = CliRunner().invoke(analyze, [path, "--used", "a, ,"])

        assert result.exit_code == 0, result.output
        assert "ES module" in result.output
        lines = [line.split() for line in result.output.splitlines()]
        assert ["a", "used"] in lines
        assert ["b", "dead"] in lines

    def test_no_exports(self, tmp_path):
        path = self._write(tmp_path, "m.js", "console.log(1);\n")
        result = CliRunner().invoke(analyze, [path])

        assert "No exports found" in result.output

    def test_used_and_all_used_conflict(self, tmp_path):
        path = self._write(tmp_path, "m.js", "export const a = 1;\n")
        result = CliRunner().invoke(analyze, [path, "--used", "a", "--all-used"])

        assert result.exit_code == 2
        assert "mutually exclusive" in result.output


class TestInitCommand:
    def test_creates_config(self):
        runner = CliRunner()
        with runner.isolated_filesystem() as fs:
            result = runner.invoke(init)

            assert result.exit_code == 0, result.output
            written = yaml.safe_load(open(f"{fs}/.chunkgraph/config.yaml").read())
            assert written == DEFAULT_CONFIG

    def test_keeps_existing_config_without_force(self):
        runner = CliRunner()
        with runner.isolated_filesystem() as fs:
            runner.invoke(init)
            path = f"{fs}/.chunkgraph/config.yaml"
            with open(path, "w") as f:
                f.write("runtime: server\n")

            result = runner.invoke(init)

            assert result.exit_code == 0
            assert "already exists" in result.output
            assert open(path).read() == "runtime: server\n"

    def test_force_overwrites(self):
        runner = CliRunner()
        with runner.isolated_filesystem() as fs:
            path = f"{fs}/.chunkgraph/config.yaml"
            runner.invoke(init)
            with open(path, "w") as f:
                f.write("runtime: server\n")

            runner.invoke(init, ["--force"])

            assert yaml.safe_load(open(path).read()) == DEFAULT_CONFIG
