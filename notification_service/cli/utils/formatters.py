"""Output formatting utilities for CLI commands."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

if TYPE_CHECKING:
    from notification_service.features.notifications.schemas import ChannelOutcome

_STATUS_COLORS = {"sent": "green", "skipped": "yellow", "failed": "red"}


def success(message: str) -> None:
    """Print a success message in green."""
    click.secho(f"✓ {message}", fg="green")


def error(message: str) -> None:
    """Print an error message in red."""
    click.secho(f"✗ {message}", fg="red", err=True)


def warning(message: str) -> None:
    """Print a warning message in yellow."""
    click.secho(f"⚠ {message}", fg="yellow")


def info(message: str) -> None:
    """Print an info message in blue."""
    click.secho(f"ℹ {message}", fg="blue")


def header(message: str) -> None:
    """Print a header message in cyan bold."""
    click.secho(f"\n{message}", fg="cyan", bold=True)


def outcome_line(outcome: ChannelOutcome) -> None:
    """Print one channel outcome, colored by status."""
    status = str(outcome.status)
    line = f"  {outcome.channel!s:<9} {status.upper():<8}"
    if outcome.reason:
        line += f" {outcome.reason}"
    details = outcome.to_dict()
    for key in ("provider_id", "scheduled_for", "error"):
        if details.get(key):
            line += f"  {key}={details[key]}"
    click.secho(line, fg=_STATUS_COLORS.get(status))
