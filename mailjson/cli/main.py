"""Main CLI entry point for mailjson."""

import typer
from typing_extensions import Annotated

from mailjson import __version__
from mailjson.cli import commands

app = typer.Typer(
    name="mailjson",
    help="Mirror an IMAP mailbox into a conversation-grouped JSON archive",
    no_args_is_help=True,
)

# Register commands and command groups
app.command(name="archive")(commands.archive.archive)
app.add_typer(commands.config.app, name="config")


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(__version__)
        raise typer.Exit()


@app.callback()
def root(
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            callback=_version_callback,
            is_eager=True,
            help="Print the version and exit",
        ),
    ] = False,
):
    """Mirror an IMAP mailbox into a conversation-grouped JSON archive."""


@app.command()
def version():
    """Show version information."""
    typer.echo(f"mailjson version {__version__}")


def main():
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
