"""Utility functions to print formatted CLI messages."""

from __future__ import annotations

import click

__all__ = ["echo_banner", "echo_setting"]


def echo_banner(text: str) -> None:
    """Print a colourful banner announcing the supervisor start.

    Args:
        text: Banner text.
    """
    click.secho(f"\n=== {text} ===", fg="cyan")


def echo_setting(label: str, value: object) -> None:
    """Echo one aligned ``label : value`` line of the start-up summary."""
    click.echo(f"  {label:<9}: {value}")
