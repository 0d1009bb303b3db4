"""Formatted CLI output for run progress and resolved paths."""

from __future__ import annotations

import click

from beagle.civet.result import Found, ResolvedPath

__all__ = ["echo_banner", "echo_subject", "echo_success", "echo_section", "echo_resolved"]


def echo_banner(text: str) -> None:
    """Print a cyan banner announcing a processing step."""
    click.secho(f"\n=== {text} ===", fg="cyan")


def echo_subject(keyname: str, scan_date: str | None = None) -> None:
    if scan_date:
        click.echo(f"  • {keyname} ({scan_date})")
    else:
        click.echo(f"  • {keyname}")


def echo_success(text: str) -> None:
    click.secho(f"✓ {text}", fg="green")


def echo_section(text: str) -> None:
    """Magenta header used for modality and Civet sub-directory blocks."""
    click.secho(f"\n  -- {text} --", fg="magenta")


def echo_resolved(label: str, result: ResolvedPath) -> None:
    """Print one resolver result: green when found, red when missing.

    Args:
        label: Accessor name shown in the first column.
        result: Value returned by a :class:`~beagle.civet.CivetResolver`
            accessor.
    """
    if isinstance(result, Found):
        click.echo(f"    {label:<28} " + click.style(str(result.path), fg="green"))
    else:
        click.echo(
            f"    {label:<28} " + click.style(f"{result.path}  [missing {result.kind}]", fg="red")
        )
