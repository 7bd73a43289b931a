#!/usr/bin/env python3
"""
Main CLI entry point for usekit
"""

from pathlib import Path
from typing import Optional

import typer

from usekit import __version__
from usekit.commands.activate import activate, init
from usekit.commands.check import check
from usekit.commands.keybindings import app as keys_app
from usekit.config.settings import validate_all_env_vars
from usekit.utils.logging_utils import setup_cli_logging
from usekit.utils.output import err_console


def version():
    """Show usekit version"""
    typer.echo(f"usekit version {__version__}")


def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose output"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Suppress non-error output"),
    log_dir: Optional[Path] = typer.Option(
        None, "--log-dir", help="Also write a rotating usekit.log in this directory"
    ),
):
    """
    usekit - declarative component activation for editor startup

    Components are declared in an init file and activated in order, each
    one isolated from the failures of the others.

    [bold]Examples:[/bold]

    Check which external tools are installed:
        [cyan]usekit check[/cyan]

    Activate an init file and fire a hook:
        [cyan]usekit activate init.yaml --fire text-mode[/cyan]

    See which handler a key runs in a mode:
        [cyan]usekit keys -c init.yaml resolve "ctrl+c a" --scope org-mode[/cyan]
    """
    if verbose and quiet:
        typer.echo("Error: --verbose and --quiet are mutually exclusive", err=True)
        raise typer.Exit(1)

    setup_cli_logging(verbose=verbose, quiet=quiet, log_dir=log_dir)

    for error in validate_all_env_vars():
        err_console.print(f"[yellow]Warning: {error}[/yellow]")


def create_app() -> typer.Typer:
    """Create and configure the main CLI application"""
    app = typer.Typer(rich_markup_mode="rich", no_args_is_help=True)

    app.command()(check)
    app.command()(activate)
    app.command()(init)
    app.command()(version)
    app.add_typer(keys_app, name="keys", help="Inspect key bindings")

    app.callback()(main)
    return app


# Create the app instance
app = create_app()


def run():
    """Entry point for the CLI"""
    app()


if __name__ == "__main__":
    run()
