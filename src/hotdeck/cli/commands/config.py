"""Config command implementations."""

import logging
from pathlib import Path
from typing import Optional

import click

from hotdeck.exceptions import HotdeckError
from hotdeck.models import DEFAULT_CONFIG_PATH, AppConfig
from hotdeck.utils import PydanticPersistence

from ._errors import exit_with_error

logger = logging.getLogger(__name__)

config_path_option = click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Config file (default: ~/.hotdeck/config.json)",
)


@click.group(name="config")
def config():
    """Inspect and create the configuration file."""
    pass


@config.command(name="path")
@config_path_option
def config_path_cmd(config_path: Optional[Path]):
    """Print the config file location."""
    path = config_path or DEFAULT_CONFIG_PATH
    suffix = "" if path.exists() else " (not created yet)"
    click.echo(f"{path}{suffix}")


@config.command(name="show")
@config_path_option
@click.option("--field", "-f", default=None, help="Show a single field")
def show(config_path: Optional[Path], field: Optional[str]):
    """Display the effective configuration as JSON."""
    try:
        config_obj = AppConfig.load_or_default(config_path)
    except HotdeckError as e:
        exit_with_error(e)
        return

    if field is None:
        click.echo(config_obj.model_dump_json(indent=2))
        return

    if field not in AppConfig.model_fields:
        raise click.BadParameter(
            f"Unknown field {field!r}. Choose from: {', '.join(AppConfig.model_fields)}",
            param_hint="--field",
        )
    click.echo(f"{field} = {getattr(config_obj, field)!r}")


@config.command(name="init")
@config_path_option
@click.option("--force", is_flag=True, help="Overwrite an existing config (a .bak copy is kept)")
def init(config_path: Optional[Path], force: bool):
    """Write a config file with default settings."""
    path = config_path or DEFAULT_CONFIG_PATH
    if path.exists() and not force:
        click.echo(f"Config already exists: {path} (use --force to overwrite)", err=True)
        raise SystemExit(1)

    try:
        AppConfig().save(path)
    except (HotdeckError, OSError) as e:
        exit_with_error(e)
        return

    logger.info(f"Wrote default config to {path}")
    click.echo(f"Wrote default config to {path}")


@config.command(name="validate")
@config_path_option
def validate(config_path: Optional[Path]):
    """Check the config file for errors."""
    path = config_path or DEFAULT_CONFIG_PATH
    is_valid, error = PydanticPersistence.validate_json(path, AppConfig)
    if is_valid:
        click.echo(f"Config is valid: {path}")
    else:
        click.echo(f"Config is invalid: {error}", err=True)
        raise SystemExit(1)
