"""Capability check command for usekit."""

from pathlib import Path
from typing import Optional

import typer

from usekit.config.constants import DEFAULT_CAPABILITY_MANIFEST
from usekit.services.prober import print_report, probe_startup
from usekit.utils.output import console, print_json

from ._helpers import load_or_exit


def check(
    config: Optional[Path] = typer.Argument(
        None, help="Init file whose 'capabilities' section to probe"
    ),
    defaults: bool = typer.Option(
        False, "--defaults", help="Probe the built-in manifest instead of the init file"
    ),
    jobs: int = typer.Option(1, "--jobs", "-j", min=1, help="Probe requirements in parallel"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """
    Check which external tools are available on this host.

    Missing tools are reported but never make the command fail.
    """
    if defaults:
        manifest = DEFAULT_CAPABILITY_MANIFEST
    else:
        init = load_or_exit(config)
        manifest = init.capabilities or DEFAULT_CAPABILITY_MANIFEST

    report = probe_startup(manifest, max_workers=jobs)

    if json_output:
        print_json(report.to_dict())
        return

    console.print("\n[bold]External Capabilities[/bold]\n")
    print_report(report, console)
