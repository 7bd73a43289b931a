"""Activation commands for usekit."""

from pathlib import Path
from typing import List, Optional

import typer
from rich.table import Table

from usekit.config.init_file import get_config_path, save_example_config
from usekit.services.activator import OutcomeStatus
from usekit.utils.output import console, print_json

from ._helpers import load_or_exit, start

_STATUS_STYLE = {
    OutcomeStatus.ACTIVATED: "green",
    OutcomeStatus.DEFERRED: "cyan",
    OutcomeStatus.SKIPPED: "dim",
    OutcomeStatus.FAILED: "red",
}


def activate(
    config: Optional[Path] = typer.Argument(None, help="Init file (default: USEKIT_INIT)"),
    fire: List[str] = typer.Option(
        [], "--fire", "-f", help="Fire an event after activation (repeatable)"
    ),
    demand: List[str] = typer.Option(
        [], "--demand", "-d", help="Force a deferred component to activate (repeatable)"
    ),
    strict: bool = typer.Option(
        False, "--strict", help="Exit with status 1 if any component failed"
    ),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """
    Activate the components declared in an init file.

    Failing components are reported and skipped; the rest still activate.
    """
    init = load_or_exit(config)
    ctx, _ = start(init)

    with ctx:
        for event in fire:
            ctx.hooks.fire(event)
        for name in demand:
            if ctx.activator.demand(name) is None:
                console.print(f"[yellow]'{name}' is not a pending deferred component[/yellow]")

        outcomes = _latest_outcomes(ctx.activator.outcomes)
        failed = [o for o in outcomes if o.status is OutcomeStatus.FAILED]

        if json_output:
            print_json(
                {
                    "components": [o.to_dict() for o in outcomes],
                    "pending": ctx.activator.pending(),
                    "settings": ctx.settings.to_dict(),
                    "load_errors": init.errors,
                }
            )
        else:
            _show_outcomes(outcomes, ctx.activator.pending(), init.errors)

    if strict and (failed or init.errors):
        raise typer.Exit(1)


def _latest_outcomes(outcomes):
    """Keep the last outcome per component, in first-seen order."""
    latest = {}
    for outcome in outcomes:
        latest[outcome.name] = outcome
    return list(latest.values())


def _show_outcomes(outcomes, pending, load_errors):
    console.print(f"\n[bold]Components ({len(outcomes)})[/bold]\n")

    table = Table(show_header=True, box=None, padding=(0, 1))
    table.add_column("Component", style="bold")
    table.add_column("Status")
    table.add_column("Detail", style="dim")

    for outcome in outcomes:
        style = _STATUS_STYLE[outcome.status]
        detail = ""
        if outcome.status is OutcomeStatus.FAILED:
            detail = outcome.to_dict()["error"] or ""
            detail = f"{outcome.step}: {detail}"
        elif outcome.trigger:
            detail = f"triggered by {outcome.trigger}"
        table.add_row(outcome.name, f"[{style}]{outcome.status.value}[/{style}]", detail)

    console.print(table)
    console.print()

    if pending:
        console.print(f"[cyan]Waiting for a trigger:[/cyan] {', '.join(pending)}")
    if load_errors:
        console.print(f"[yellow]Skipped {len(load_errors)} malformed entries:[/yellow]")
        for error in load_errors:
            console.print(f"  • {error}")


def init():
    """Create an example init file."""
    path = get_config_path()

    if save_example_config(path):
        console.print(f"[green]Created init file at {path}[/green]")
    else:
        console.print(f"[yellow]Init file already exists at {path}[/yellow]")
