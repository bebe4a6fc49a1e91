#!/usr/bin/env python3
"""
Main CLI entry point for wxdash
"""

import typer

from wxdash import __version__
from wxdash.commands.layout import app as layout_app
from wxdash.commands.workspace import app as workspace_app
from wxdash.config.settings import get_env_var, get_storage_dir, validate_all_env_vars
from wxdash.ui.gui import gui
from wxdash.utils.logging_utils import setup_cli_logging
from wxdash.utils.output import console


# Version command
def version():
    """Show wxdash version"""
    typer.echo(f"wxdash version {__version__}")
    typer.echo(f"Storage: {get_storage_dir()}")


# Callback for global options
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose output"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Suppress non-error output"),
):
    """
    wxdash - Weather research dashboard layouts

    Arrange the widgets of a city dashboard on a responsive grid, and build
    multi-city workspaces.

    [bold]Examples:[/bold]

    Show a city's layout as it renders at 640px:
        [cyan]wxdash layout show austin --width 640[/cyan]

    Make the forecast models widget wider:
        [cyan]wxdash layout resize austin models --w 3 --h 2[/cyan]

    Open the dashboard:
        [cyan]wxdash gui austin[/cyan]
    """
    if verbose and quiet:
        typer.echo("Error: --verbose and --quiet are mutually exclusive", err=True)
        raise typer.Exit(1)

    for error in validate_all_env_vars():
        console.print(f"[yellow]Warning: {error}[/yellow]")

    try:
        level = get_env_var("WXDASH_LOG_LEVEL")
    except ValueError:
        level = None
    setup_cli_logging(verbose=verbose, quiet=quiet, level=level)


def create_app() -> typer.Typer:
    """Create and configure the main CLI application"""
    app = typer.Typer(
        name="wxdash",
        help="Weather research dashboard layouts",
        rich_markup_mode="rich",
        no_args_is_help=True,
    )
    app.add_typer(layout_app, name="layout", help="Inspect and edit city dashboard layouts")
    app.add_typer(workspace_app, name="workspace", help="Manage multi-city workspaces")
    app.command()(gui)
    app.command()(version)
    app.callback()(main)
    return app


# Create the app instance
app = create_app()


def run():
    """Entry point for the CLI"""
    app()


if __name__ == "__main__":
    run()
