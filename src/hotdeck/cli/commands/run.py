"""Run command - headless console printing every dispatched action."""

import logging
import time
from datetime import datetime
from pathlib import Path
from typing import Any, Optional

import click

from hotdeck.core import StreamConsole
from hotdeck.dispatch import DispatchEvent
from hotdeck.exceptions import HotdeckError
from hotdeck.models import AppConfig

from ._errors import exit_with_error

logger = logging.getLogger(__name__)

# Raw MIDI traffic is too noisy for the default output
QUIET_EVENTS = {DispatchEvent.MIDI_MESSAGE}


def make_printer(category: DispatchEvent):
    def handler(payload: Any) -> None:
        timestamp = datetime.now().strftime("%H:%M:%S.%f")[:-3]
        if payload is None:
            click.echo(f"[{timestamp}] {category.value}")
        else:
            click.echo(f"[{timestamp}] {category.value}: {payload}")

    return handler


@click.command()
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Config file (default: ~/.hotdeck/config.json)",
)
@click.option(
    "--keyboard/--no-keyboard",
    default=None,
    help="Listen to the global keyboard (default: from config)",
)
@click.option("--show-midi", is_flag=True, help="Also print every raw MIDI message")
def run(config_path: Optional[Path], keyboard: Optional[bool], show_midi: bool):
    """
    Run the console headless and print every dispatched action.

    Keyboard hotkeys of the configured decks and all MIDI inputs are routed
    as in a full console. Press Ctrl+C to stop.
    """
    try:
        config_obj = AppConfig.load_or_default(config_path)
    except HotdeckError as e:
        exit_with_error(e)
        return

    if keyboard is not None:
        config_obj = config_obj.model_copy(update={"keyboard_listener": keyboard})

    logger.info("Starting hotdeck console")

    with StreamConsole(config_obj) as console:
        for category in DispatchEvent:
            if category in QUIET_EVENTS and not show_midi:
                continue
            console.on(category, make_printer(category))

        midi_ok = console.start()
        if midi_ok:
            ports = console.hub.connected_ports
            click.echo(f"MIDI inputs: {', '.join(ports) if ports else 'none yet (hot-plug enabled)'}")
        else:
            click.echo("MIDI unavailable - running keyboard-only", err=True)

        deck = console.decks.active_deck
        if deck is not None:
            click.echo(f"Active deck: {deck.name} ({deck.id})")
        click.echo("Press Ctrl+C to stop\n")

        try:
            while True:
                time.sleep(0.1)
        except KeyboardInterrupt:
            logger.info("Console interrupted by user")
            click.echo("\nShutting down...", err=True)
