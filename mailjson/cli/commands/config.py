"""Config command implementation."""

import typer
from typing_extensions import Annotated

from mailjson.config import (
    CONFIG_FILE,
    get_defaults,
    init_config,
    load_config,
    set_config_value,
)
from mailjson.config.paths import CONFIG_DIR

app = typer.Typer(help="Manage configuration")


@app.command()
def init(
    force: Annotated[
        bool, typer.Option("--force", "-f", help="Overwrite existing config")
    ] = False,
):
    """Initialize configuration directory and template config file."""
    created = init_config(overwrite=force)

    if created:
        typer.echo(f"Created config directory: {CONFIG_DIR}")
        typer.echo(f"Created config file: {CONFIG_FILE}")
    else:
        typer.echo(f"Config already exists at {CONFIG_FILE}")
        typer.echo("Use --force to overwrite.")


@app.command()
def show():
    """Display the effective configuration (file values over built-in defaults)."""
    config = load_config()

    try:
        defaults = get_defaults(config)
    except ValueError as e:
        typer.echo(f"Invalid config: {e}", err=True)
        raise typer.Exit(1)

    if not config:
        typer.echo(f"No config file at {CONFIG_FILE}, using built-in defaults.")
        typer.echo()

    typer.echo("[defaults]")
    for key, value in defaults.items():
        typer.echo(f"  {key} = {value}")


@app.command("set")
def set_value(
    key: Annotated[
        str,
        typer.Argument(help="Configuration key (dot notation, e.g., 'defaults.output_dir')"),
    ],
    value: Annotated[str, typer.Argument(help="Configuration value")],
):
    """Set a configuration value using dot notation.

    Examples:
        mailjson config set defaults.output_dir ~/archive
        mailjson config set defaults.use_netrc false
    """
    try:
        set_config_value(key, value)
        typer.echo(f"Set {key} = {value}")
    except ValueError as e:
        typer.echo(f"Invalid value: {e}", err=True)
        raise typer.Exit(1)
