"""
CLI Utilities - Shared helper functions for command line operations.

Formatted printing, logging setup and the JSON envelope every command uses
in ``--json`` mode.
"""

import json
import logging
from typing import Any, Dict, Optional

import click


def echo_success(message: str) -> None:
    """
    Print a success message with a green checkmark.

    Args:
        message (str): The message to display.
    """
    click.echo(click.style(f"✅ {message}", fg="green"))


def echo_error(message: str) -> None:
    """
    Print an error message with a red cross.

    Args:
        message (str): The error message to display.
    """
    click.echo(click.style(f"❌ {message}", fg="red"), err=True)


def echo_info(message: str) -> None:
    click.echo(click.style(f"   {message}", dim=True))


def configure_logging(verbose: bool) -> None:
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")


def json_envelope(command: str, data: Any = None, error: Optional[Exception] = None) -> Dict[str, Any]:
    """
    Standard response shape for ``--json`` output.

    {"meta": {"command": ..., "status": "success"}, "data": {...}}
    {"meta": {"command": ..., "status": "error"}, "error": {"type": ..., "message": ...}}
    """
    if error is not None:
        return {
            "meta": {"command": command, "status": "error"},
            "error": {"type": type(error).__name__, "message": str(error)},
        }
    return {"meta": {"command": command, "status": "success"}, "data": data}


def echo_json(payload: Dict[str, Any]) -> None:
    click.echo(json.dumps(payload, indent=2, default=str))


def format_bytes(size: int) -> str:
    if size < 1024:
        return f"{size} B"
    if size < 1024 * 1024:
        return f"{size / 1024:.1f} KB"
    return f"{size / (1024 * 1024):.1f} MB"
