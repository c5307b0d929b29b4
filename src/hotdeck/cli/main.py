"""Main CLI entry point."""

import logging
import logging.handlers
from pathlib import Path
from typing import Optional

import click

from hotdeck import __version__

from .commands import config, keys_group, midi_group, run

logger = logging.getLogger(__name__)

DEFAULT_LOG_DIR = Path.home() / ".hotdeck" / "logs"


def resolve_log_path(debug: bool, log_file: Optional[Path]) -> Path:
    """Log file used for the given flags."""
    if log_file:
        return log_file
    if debug:
        return Path.cwd() / "hotdeck-debug.log"
    return DEFAULT_LOG_DIR / "hotdeck.log"


def setup_logging(verbose: int, debug: bool, log_file: Optional[Path], log_level: str) -> Path:
    """
    Configure logging for the application.

    Args:
        verbose: Verbosity count (0 = WARNING, 1 = INFO, 2+ = DEBUG)
        debug: If True, enable debug mode logging to ./hotdeck-debug.log
        log_file: Custom log file path (optional)
        log_level: Log level used together with --log-file

    Returns:
        Path of the log file
    """
    if debug or verbose >= 2:
        level = logging.DEBUG
    elif verbose == 1:
        level = logging.INFO
    else:
        level = logging.WARNING

    # Explicit log level wins when logging to a custom file
    if log_file:
        level = getattr(logging, log_level.upper())

    log_path = resolve_log_path(debug, log_file)
    log_path.parent.mkdir(parents=True, exist_ok=True)

    formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    # Keeps last 5 files, max 10MB each
    file_handler = logging.handlers.RotatingFileHandler(
        log_path,
        maxBytes=10 * 1024 * 1024,
        backupCount=5,
    )
    file_handler.setLevel(level)
    file_handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.addHandler(file_handler)

    logger.info(f"Logging configured: level={logging.getLevelName(level)}, file={log_path}")
    return log_path


@click.group()
@click.version_option(version=__version__, prog_name="hotdeck")
@click.option("-v", "--verbose", count=True, help="Increase verbosity (-v: INFO, -vv: DEBUG)")
@click.option(
    "--debug",
    is_flag=True,
    help="Enable debug mode (DEBUG level, logs to ./hotdeck-debug.log)",
)
@click.option(
    "--log-file",
    type=click.Path(path_type=Path),
    default=None,
    help="Custom log file path",
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default="INFO",
    help="Log level for file logging (default: INFO)",
)
@click.pass_context
def cli(ctx, verbose: int, debug: bool, log_file: Optional[Path], log_level: str):
    """
    hotdeck - keyboard and MIDI input routing for streaming consoles.

    \b
    Examples:
      # Run the console and print every dispatched action
      hotdeck run

      # List MIDI devices
      hotdeck midi list

      # Press a control to see which mapping key it uses
      hotdeck midi learn

      # Check how a key binding is normalized
      hotdeck keys normalize "Shift+Ctrl+D"
    """
    ctx.ensure_object(dict)
    ctx.obj["log_path"] = setup_logging(verbose, debug, log_file, log_level)


cli.add_command(run)
cli.add_command(midi_group)
cli.add_command(config)
cli.add_command(keys_group)

if __name__ == "__main__":
    cli()
