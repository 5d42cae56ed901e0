"""Console formatting helpers shared by the CLI summary and prompts."""

from __future__ import annotations

import math
from pathlib import Path

import click

__all__ = [
    "echo_banner",
    "echo_item",
    "echo_success",
    "echo_section",
    "echo_command_hint",
    "format_mb",
]


def format_mb(n_bytes: int, *, ceil: bool = False) -> str:
    """Return *n_bytes* as megabytes, two decimals or rounded up."""
    mb = n_bytes / (1024 * 1024)
    if ceil:
        return f"{math.ceil(mb)}mb"
    return f"{mb:.2f} MB"


def echo_banner(text: str) -> None:
    """Print a cyan run banner."""
    click.secho(f"\n=== {text} ===", fg="cyan")


def echo_item(text: str) -> None:
    """Echo an indented bullet line."""
    click.echo(f"  • {text}")


def echo_success(text: str) -> None:
    """Print the green completion line."""
    click.secho(f"✓ {text}", fg="green")


def echo_section(text: str) -> None:
    """Print a magenta sub-heading such as the result block."""
    click.secho(f"\n  — {text} —", fg="magenta")


def echo_command_hint(command: str, paths: list[Path]) -> None:
    """Show the non-interactive command that reproduces the last run."""
    quoted = " ".join(f'"{p}"' for p in paths)
    click.echo("\nHint: to generate this file again, run:")
    click.secho(f"{command} {quoted}", fg="cyan", bold=True)
