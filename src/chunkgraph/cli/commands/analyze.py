"""
Analyze Command - Run the source analyzer on a single file.
"""

import sys
from pathlib import Path
from typing import Optional

import click

from ...config import MAX_SOURCE_BYTES
from ...core.usage import UsedExports
from ...parsing.javascript.analyzer import SourceAnalyzer, read_source
from ..utils import configure_logging, echo_error, echo_info, echo_json, json_envelope


def _usage(used: Optional[str], all_used: bool) -> UsedExports:
    if all_used:
        return UsedExports.all_used()
    if used is None:
        return UsedExports.unknown()
    return UsedExports.partial(name.strip() for name in used.split(",") if name.strip())


@click.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--used", help="Comma-separated export names the build reports as used")
@click.option("--all-used", is_flag=True, help="Treat every export as used")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.option("-v", "--verbose", is_flag=True, help="Show debug logging")
def analyze(file: Path, used: Optional[str], all_used: bool, as_json: bool, verbose: bool):
    """
    Show the exports of one JavaScript/TypeScript file.

    Without --used or --all-used, usage is unknown and every export is
    reported dead.
    """
    configure_logging(verbose)

    if used is not None and all_used:
        raise click.UsageError("--used and --all-used are mutually exclusive")

    source = read_source(file, MAX_SOURCE_BYTES)
    if source is None:
        error = OSError(f"Could not read {file}")
        if as_json:
            echo_json(json_envelope("analyze", error=error))
        else:
            echo_error(str(error))
        sys.exit(1)

    result = SourceAnalyzer().analyze(source, _usage(used, all_used), file)

    if as_json:
        echo_json(json_envelope("analyze", {
            "file": str(file),
            "is_commonjs": result.is_commonjs,
            "exports": result.exports,
            "dead_exports": result.dead_exports,
        }))
        return

    click.echo(f"📄 {file}")
    click.echo(f"   Module format: {'CommonJS' if result.is_commonjs else 'ES module'}")
    if not result.exports:
        echo_info("No exports found")
        return

    dead = set(result.dead_exports)
    for name in result.exports:
        marker = click.style("dead", fg="red") if name in dead else click.style("used", fg="green")
        click.echo(f"   {name:<30} {marker}")
