"""Shared error display for commands."""

import logging
import sys

import click

from hotdeck.exceptions import format_error_for_display

logger = logging.getLogger(__name__)


def exit_with_error(error: Exception) -> None:
    """Print a friendly error (and recovery hint) to stderr and exit with code 1."""
    logger.error(f"Command failed: {error}")

    user_message, recovery_hint = format_error_for_display(error)
    click.echo(f"ERROR: {user_message}", err=True)
    if recovery_hint:
        click.echo(f"\n{recovery_hint}", err=True)

    ctx = click.get_current_context(silent=True)
    log_path = ctx.find_root().obj.get("log_path") if ctx and ctx.find_root().obj else None
    if log_path:
        click.echo(f"\nFor details, check the log file: {log_path}", err=True)
    sys.exit(1)
