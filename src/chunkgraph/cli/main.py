"""
chunkgraph CLI - Main entry point.

This module registers all CLI commands. Each command is implemented
in its own module under cli/commands/.
"""

import click

from .commands import analyze, build, initialize


@click.group()
@click.version_option(package_name="chunkgraph")
def main():
    """chunkgraph: Bundle chunk and module dependency analysis.

    Reads the bundler's build stats, parses module sources for exports, and
    produces a graph of chunks, modules and the imports between them.

    \b
    Quick Start:
      chunkgraph init
      chunkgraph build stats.json --sizes report.json -o graph.json
      chunkgraph analyze src/index.ts --used default
    """
    pass


main.add_command(build.build)
main.add_command(analyze.analyze)
main.add_command(initialize.init)

if __name__ == "__main__":
    main()
