"""
Init Command - Write the default project configuration.
"""

from pathlib import Path

import click
from rich.console import Console
from rich.panel import Panel

from ...config import CONFIG_DIR, CONFIG_FILE, write_default_config

console = Console()


@click.command()
@click.option("--force", is_flag=True, help="Overwrite existing configuration")
def init(force: bool):
    """
    Initialize chunkgraph in the current directory.

    Creates .chunkgraph/config.yaml with the default settings.
    """
    console.print(Panel.fit("🚀 [bold blue]chunkgraph Initialization[/bold blue]", border_style="blue"))

    config_file = Path.cwd() / CONFIG_DIR / CONFIG_FILE

    if config_file.exists() and not force:
        console.print(f"[yellow]Configuration already exists at {config_file}[/yellow]")
        console.print("Use --force to overwrite it.")
        return

    write_default_config(config_file)

    console.print("\n✨ [bold green]Initialized successfully![/bold green]")
    console.print(f"   Config created at: [dim]{config_file}[/dim]")
