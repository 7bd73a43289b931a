"""Key binding inspection commands for usekit."""

from pathlib import Path
from typing import List, Optional

import typer
from rich.table import Table

from usekit.keybindings.resolver import BindingResolver, describe_handler
from usekit.utils.output import console, print_json

from ._helpers import load_or_exit, start

app = typer.Typer()


@app.callback(invoke_without_command=True)
def keys(
    ctx: typer.Context,
    config: Optional[Path] = typer.Option(
        None, "--config", "-c", help="Init file (default: USEKIT_INIT)"
    ),
    list_all: bool = typer.Option(False, "--list", "-l", help="List all key bindings"),
    overrides: bool = typer.Option(
        False, "--overrides", "-o", help="Show bindings replaced by later declarations"
    ),
    scope: Optional[str] = typer.Option(
        None, "--scope", "-s", help="Show the effective bindings in a scope"
    ),
    fire: List[str] = typer.Option(
        [], "--fire", "-f", help="Fire an event first so deferred components bind their keys"
    ),
    json_output: bool = typer.Option(False, "--json", "-j", help="Output as JSON"),
):
    """
    Inspect the key bindings produced by activating an init file.

    By default, shows a summary of bindings and overrides.
    """
    if ctx.invoked_subcommand is not None:
        ctx.obj = config
        return

    init = load_or_exit(config)
    startup, _ = start(init)

    with startup:
        for event in fire:
            startup.hooks.fire(event)
        resolver = startup.resolver

        if json_output:
            print_json(resolver.to_dict())
        elif overrides:
            _show_overrides(resolver)
        elif scope:
            _show_scope(resolver, scope)
        elif list_all:
            _show_all_bindings(resolver)
        else:
            _show_summary(resolver)


@app.command()
def resolve(
    ctx: typer.Context,
    chord: str = typer.Argument(..., help='Key chord, e.g. "ctrl+c a"'),
    scope: str = typer.Option("global", "--scope", "-s", help="Scope to resolve from"),
):
    """Show which handler a chord runs in a scope."""
    init = load_or_exit(ctx.obj)
    startup, _ = start(init)

    with startup:
        try:
            handler = startup.resolver.resolve(scope, chord)
        except ValueError as e:
            console.print(f"[red]Error: {e}[/red]")
            raise typer.Exit(1) from e

    if handler is None:
        console.print(f"[yellow]'{chord}' is not bound in {scope}[/yellow]")
        raise typer.Exit(1)
    console.print(describe_handler(handler))


def _show_summary(resolver: BindingResolver):
    """Show key binding summary."""
    console.print("\n[bold]Key Binding Summary[/bold]\n")

    table = Table(show_header=False, box=None)
    table.add_column("Metric", style="dim")
    table.add_column("Value", style="bold")

    table.add_row("Total bindings", str(len(resolver)))
    table.add_row("Scopes", str(len(resolver.maps)))
    table.add_row("Overrides", str(len(resolver.overrides)))

    console.print(table)
    console.print()

    if resolver.overrides:
        console.print("Run [bold]usekit keys --overrides[/bold] to see details.")
    console.print()


def _show_overrides(resolver: BindingResolver):
    """Show bindings replaced by later writers."""
    if not resolver.overrides:
        console.print("[green]No key binding overrides[/green]")
        return

    console.print(f"\n[bold]Key Binding Overrides ({len(resolver.overrides)})[/bold]\n")

    table = Table(show_header=True, box=None)
    table.add_column("Key", style="bold")
    table.add_column("Scope")
    table.add_column("Previous")
    table.add_column("Now")
    table.add_column("By", style="dim")

    for override in resolver.overrides:
        data = override.to_dict()
        table.add_row(
            data["chord"], data["scope"], data["previous"], data["replacement"], data["source"] or ""
        )

    console.print(table)
    console.print()


def _show_scope(resolver: BindingResolver, scope: str):
    """Show the effective bindings visible from one scope."""
    effective = resolver.bindings_for(scope)
    own = resolver.bindings_for(scope, include_global=False)

    console.print(f"\n[bold]{scope}[/bold] ({len(effective)} bindings)\n")

    table = Table(show_header=True, box=None, padding=(0, 1))
    table.add_column("Key", style="bold", width=20)
    table.add_column("Handler")
    table.add_column("From", style="dim")

    for chord in sorted(effective):
        origin = scope if chord in own else "global"
        table.add_row(chord, describe_handler(effective[chord]), origin)

    console.print(table)
    console.print()


def _show_all_bindings(resolver: BindingResolver):
    """Show all key bindings grouped by scope."""
    console.print(f"\n[bold]All Key Bindings ({len(resolver)})[/bold]\n")

    for scope in resolver.scopes():
        chords = resolver.maps[scope]
        console.print(f"[bold]{scope}[/bold] ({len(chords)} bindings)")

        table = Table(show_header=True, box=None, padding=(0, 1))
        table.add_column("Key", style="bold", width=20)
        table.add_column("Handler")

        for chord in sorted(chords):
            table.add_row(chord, describe_handler(chords[chord]))

        console.print(table)
        console.print()
