"""Main entry point for hotdeck."""

from hotdeck.cli.main import cli

if __name__ == "__main__":
    cli()
