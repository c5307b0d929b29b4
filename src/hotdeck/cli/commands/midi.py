"""MIDI command implementations."""

import json
import logging
import time
from datetime import datetime
from pathlib import Path
from typing import Optional

import click
import mido

from hotdeck.dispatch import ActionDispatcher
from hotdeck.exceptions import HotdeckError
from hotdeck.midi import (
    MidiCapture,
    MidiFeedbackOutput,
    MidiInputHub,
    MidiMappingTable,
    MidiMessage,
    mapping_key_for,
)
from hotdeck.models import AppConfig

from ._errors import exit_with_error

logger = logging.getLogger(__name__)


def _wait_forever(hub: MidiInputHub, message: str) -> None:
    click.echo("\nPress Ctrl+C to stop\n")
    try:
        while True:
            time.sleep(0.1)
    except KeyboardInterrupt:
        click.echo(f"\n\n{message}")
    finally:
        hub.stop()


@click.group(name="midi")
def midi_group():
    """MIDI device and mapping commands."""
    pass


@midi_group.command(name="list")
def list_midi():
    """List available MIDI ports."""
    try:
        ports = MidiInputHub.list_ports()
    except HotdeckError as e:
        exit_with_error(e)
        return

    click.echo("MIDI Input Ports:\n")
    if not ports["input"]:
        click.echo("  No MIDI input ports found.")
    else:
        for i, port in enumerate(ports["input"]):
            click.echo(f"  [{i}] {port}")

    click.echo("\nMIDI Output Ports:\n")
    if not ports["output"]:
        click.echo("  No MIDI output ports found.")
    else:
        for i, port in enumerate(ports["output"]):
            click.echo(f"  [{i}] {port}")


@midi_group.command(name="monitor")
@click.option(
    "--filter-clock/--no-filter-clock",
    default=True,
    help="Filter out clock messages (default: enabled)",
)
def monitor_midi(filter_clock: bool):
    """
    Monitor all MIDI input ports and print incoming messages.

    Ports plugged in while monitoring are picked up automatically.
    """
    hub = MidiInputHub(poll_interval=2.0)

    def on_message(port_name: str, msg: mido.Message) -> None:
        if filter_clock and msg.type == "clock":
            return
        timestamp = datetime.now().strftime("%H:%M:%S.%f")[:-3]
        click.echo(f"[{timestamp}] {port_name}: {msg}")

    def on_connection(port_name: str, connected: bool) -> None:
        click.echo(f"{'Connected' if connected else 'Disconnected'}: {port_name}")

    hub.on_message(on_message)
    hub.on_connection_changed(on_connection)
    try:
        hub.start()
    except HotdeckError as e:
        exit_with_error(e)
        return

    if filter_clock:
        click.echo("Filtering: clock messages (use --no-filter-clock to show all)")
    _wait_forever(hub, "Stopping monitor...")


@midi_group.command(name="feedback")
@click.argument("note", type=click.IntRange(0, 127))
@click.option(
    "--velocity",
    type=click.IntRange(0, 127),
    default=127,
    show_default=True,
    help="Note-on velocity (0 turns the LED off)",
)
@click.option("--channel", type=click.IntRange(0, 15), default=0, show_default=True, help="MIDI channel")
@click.option("--port", "-p", default=None, help="Output port name (default: first available output)")
def feedback_midi(note: int, velocity: int, channel: int, port: Optional[str]):
    """Send a note-on to light a controller LED."""
    output = MidiFeedbackOutput()
    try:
        output.start()
    except HotdeckError as e:
        exit_with_error(e)
        return

    try:
        if port is not None and not output.select_output(port):
            click.echo(f"Could not open MIDI output: {port}", err=True)
            raise SystemExit(1)
        if not output.send_feedback(note, velocity, channel):
            click.echo("No MIDI output port available.", err=True)
            raise SystemExit(1)
        click.echo(
            f"Sent note {note} (velocity {velocity}, channel {channel}) to {output.current_port}"
        )
    finally:
        output.stop()


@midi_group.command(name="learn")
def learn_midi():
    """
    Print the mapping key of every control you press.

    Use the printed key with `set_mapping` or in the `midi_mappings`
    section of the config file.
    """
    dispatcher = ActionDispatcher()
    capture = MidiCapture(MidiMappingTable(), dispatcher)

    def on_learned(message: MidiMessage) -> None:
        key = mapping_key_for(message)
        if key is None:
            click.echo(f"{message.kind.value} (not mappable)")
        else:
            click.echo(f"{message.kind.value} ch{message.channel + 1} -> key {key!r} (value {message.value})")

    capture.start_learning(on_learned)

    hub = MidiInputHub()
    hub.on_message(lambda port_name, msg: capture.handle_mido(msg))
    try:
        hub.start()
    except HotdeckError as e:
        exit_with_error(e)
        return

    click.echo("Learning: move a fader or press a pad")
    try:
        _wait_forever(hub, "Stopping learning...")
    finally:
        capture.stop_learning()


@midi_group.command(name="mappings")
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Config file (default: ~/.hotdeck/config.json)",
)
@click.option("--json", "as_json", is_flag=True, help="Print mappings as JSON")
def list_mappings(config_path: Optional[Path], as_json: bool):
    """Show the effective MIDI mapping table (defaults plus config overrides)."""
    try:
        config_obj = AppConfig.load_or_default(config_path)
    except HotdeckError as e:
        exit_with_error(e)
        return

    table = MidiMappingTable(overrides=dict(config_obj.midi_mappings))
    mappings = table.get_all_mappings()
    overridden = table.overrides()

    if as_json:
        click.echo(json.dumps({key: m.model_dump() for key, m in mappings.items()}, indent=2))
        return

    click.echo("MIDI Mappings:\n")
    for key, mapping in sorted(mappings.items(), key=lambda item: _sort_key(item[0])):
        marker = "*" if key in overridden else " "
        if mapping.kind == "volume":
            detail = f"volume {mapping.target} ({mapping.min}-{mapping.max})"
        else:
            detail = f"hotkey {mapping.action}" + (f" -> {mapping.target}" if mapping.target else "")
        click.echo(f" {marker} {key:>8}  {detail}")
    if overridden:
        click.echo("\n  * = set in config")


def _sort_key(key: str) -> tuple[int, int, str]:
    if key.isdigit():
        return (0, int(key), key)
    if key.startswith("note_") and key[5:].isdigit():
        return (1, int(key[5:]), key)
    return (2, 0, key)
