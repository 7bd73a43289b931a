"""Shared helpers for usekit commands."""

import logging
from pathlib import Path
from typing import List, Optional, Tuple

import typer

from usekit.config.init_file import InitFile, load_init_file
from usekit.exceptions import ConfigurationError
from usekit.services.activator import ActivationOutcome
from usekit.services.startup_context import StartupContext
from usekit.utils.output import err_console

logger = logging.getLogger(__name__)


def load_or_exit(config: Optional[Path]) -> InitFile:
    """Load an init file, exiting with status 1 if it is unusable."""
    if config is not None and not config.exists():
        err_console.print(f"[red]Init file not found: {config}[/red]")
        raise typer.Exit(1)
    try:
        return load_init_file(config)
    except ConfigurationError as e:
        err_console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1) from e


def start(init: InitFile) -> Tuple[StartupContext, List[ActivationOutcome]]:
    """Register and activate everything in an init file.

    User bindings from the ``bindings`` section are applied last so they
    win over any component binding for the same chord.
    """
    ctx = StartupContext()
    ctx.register_many(init.declarations)
    outcomes = ctx.activate()

    for binding in init.bindings:
        ctx.resolver.bind(binding.scope, binding.chord, binding.handler, source="user")

    return ctx, outcomes
