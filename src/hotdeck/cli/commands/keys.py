"""Key binding helper commands."""

import click

from hotdeck.hotkeys import canonical_binding, clean_binding, is_valid_binding


@click.group(name="keys")
def keys_group():
    """Key binding helpers."""
    pass


@keys_group.command(name="normalize")
@click.argument("binding")
def normalize(binding: str):
    """
    Show how BINDING is stored and compared.

    \b
    Example:
      hotdeck keys normalize "Shift+Ctrl+D"
    """
    if not is_valid_binding(binding):
        click.echo(f"Invalid binding: {binding!r}", err=True)
        raise SystemExit(1)

    click.echo(f"registered as: {clean_binding(binding)}")
    click.echo(f"compared as:   {canonical_binding(binding)}")
