"""
Build Command - Assemble chunks and the dependency graph from build output.
"""

import json
import logging
import sys
from collections import Counter
from pathlib import Path
from typing import Any, Dict, Optional

import click
from rich.console import Console
from rich.table import Table

from ...config import load_config
from ...core.errors import ChunkGraphError
from ...core.types import GraphData, NodeKind
from ...ingest.assembler import BuildReport, analyze_build
from ...ingest.build_stats import load_build_stats
from ...ingest.sizes import SizeReport
from ..utils import configure_logging, echo_error, echo_json, echo_success, format_bytes, json_envelope

logger = logging.getLogger(__name__)

console = Console()


def summarize(graph: GraphData) -> Dict[str, Any]:
    """Counts over a finished graph."""
    chunk_kinds = Counter(
        str(node.data.kind) for node in graph.nodes if node.kind is NodeKind.CHUNK
    )
    return {
        "chunks": sum(chunk_kinds.values()),
        "modules": sum(1 for node in graph.nodes if node.kind is NodeKind.MODULE),
        "links": len(graph.links),
        "import_links": sum(1 for link in graph.links if link.reason is not None),
        "chunks_by_kind": dict(chunk_kinds),
    }


def _render_table(report: BuildReport) -> None:
    table = Table(title=f"Chunks ({report.runtime})")
    table.add_column("Chunk", style="cyan")
    table.add_column("Kind")
    table.add_column("Modules", justify="right")
    table.add_column("Parsed", justify="right")
    table.add_column("Gzip", justify="right")

    for chunk in report.chunks:
        table.add_row(
            chunk.id,
            str(chunk.kind),
            str(len(chunk.modules)),
            format_bytes(chunk.size_metrics.parsed_size),
            format_bytes(chunk.size_metrics.gzip_size),
        )
    console.print(table)


@click.command()
@click.argument("stats_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--sizes", "sizes_file", type=click.Path(exists=True, dir_okay=False, path_type=Path),
              help="Bundle analyzer size report (JSON)")
@click.option("--config", "config_file", type=click.Path(path_type=Path),
              help="Config file (default: .chunkgraph/config.yaml)")
@click.option("-o", "--output", type=click.Path(path_type=Path), help="Write graph JSON to this file")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.option("-v", "--verbose", is_flag=True, help="Show debug logging")
def build(
    stats_file: Path,
    sizes_file: Optional[Path],
    config_file: Optional[Path],
    output: Optional[Path],
    as_json: bool,
    verbose: bool,
):
    """
    Build the chunk dependency graph from a build stats document.

    Source files referenced by the stats are parsed to find exports and
    CommonJS modules; a size report, when given, backfills chunk and module
    sizes.
    """
    configure_logging(verbose)

    try:
        config = load_config(config_file)
        stats = load_build_stats(stats_file)
        sizes = SizeReport.load(sizes_file) if sizes_file else None
        report = analyze_build(stats, config=config, sizes=sizes)
    except ChunkGraphError as e:
        if as_json:
            echo_json(json_envelope("build", error=e))
        else:
            echo_error(str(e))
        sys.exit(1)

    graph_dict = report.graph.to_dict()
    summary = summarize(report.graph)

    if output:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(json.dumps(graph_dict, indent=2))
        logger.debug(f"Wrote graph to {output}")

    if as_json:
        echo_json(json_envelope("build", {
            "runtime": report.runtime,
            "summary": summary,
            "output_path": str(output) if output else None,
            "graph": graph_dict,
        }))
        return

    _render_table(report)
    echo_success("Build analyzed")
    click.echo(f"   Modules: {summary['modules']}")
    click.echo(f"   Links:   {summary['links']} ({summary['import_links']} imports)")
    if output:
        click.echo(f"   Graph written to {output}")
