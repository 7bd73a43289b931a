"""Capability probing for external executables.

Optional components often shell out to tools such as spell checkers or
media players. The prober checks, once at startup, which of those tools
the host actually has. A missing tool is reported, never raised: absence
is data, and the rest of startup carries on.
"""

import logging
import shutil
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Iterable, List, Optional, Tuple

from rich.console import Console
from rich.table import Table

from usekit.config.constants import DEFAULT_CAPABILITY_MANIFEST, DEFAULT_PROBE_WORKERS
from usekit.models.capabilities import CapabilityReport, CapabilityRequirement
from usekit.utils.output import console as default_console

logger = logging.getLogger(__name__)

Which = Callable[[str], Optional[str]]


class CapabilityProber:
    """Checks capability requirements against the host's executable search path.

    Args:
        which: Lookup returning the path of an executable or None.
            Defaults to ``shutil.which``; tests inject a fake.
        max_workers: Probe requirements in parallel when greater than 1.
            Requirements share no state, so order of evaluation does not
            matter; the report always follows manifest order.
    """

    def __init__(self, which: Optional[Which] = None, max_workers: int = DEFAULT_PROBE_WORKERS):
        self.which = which or shutil.which
        self.max_workers = max(1, int(max_workers))

    def _lookup(self, candidate: str) -> Optional[str]:
        try:
            return self.which(candidate)
        except Exception as e:
            # A broken lookup only means this candidate was not found
            logger.warning(f"Lookup of '{candidate}' failed: {e}")
            return None

    def check(self, requirement: CapabilityRequirement) -> Optional[str]:
        """Return the path of the first candidate found, or None."""
        for candidate in requirement.candidates:
            path = self._lookup(candidate)
            if path:
                return path
        return None

    def probe(self, manifest: Iterable) -> CapabilityReport:
        """
        Probe every requirement in a manifest.

        Args:
            manifest: CapabilityRequirement objects, executable names, or
                lists of alternative names

        Returns:
            CapabilityReport listing unsatisfied requirements in manifest order
        """
        requirements = CapabilityRequirement.from_manifest(manifest)

        if self.max_workers > 1 and len(requirements) > 1:
            with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
                paths = list(pool.map(self.check, requirements))
        else:
            paths = [self.check(req) for req in requirements]

        results: List[Tuple[CapabilityRequirement, Optional[str]]] = list(zip(requirements, paths))

        missing = []
        found = {}
        for requirement, path in results:
            if path is None:
                if requirement not in missing:
                    missing.append(requirement)
            else:
                found[requirement] = path

        report = CapabilityReport(missing=tuple(missing), found=found)
        logger.debug(f"Probed {len(requirements)} capabilities, {len(missing)} missing")
        return report


def probe_startup(
    manifest: Optional[Iterable] = None,
    which: Optional[Which] = None,
    max_workers: int = DEFAULT_PROBE_WORKERS,
) -> CapabilityReport:
    """Probe once at startup and emit a single diagnostic if anything is missing."""
    if manifest is None:
        manifest = DEFAULT_CAPABILITY_MANIFEST
    report = CapabilityProber(which=which, max_workers=max_workers).probe(manifest)
    if not report.ok:
        logger.warning(report.diagnostic())
    return report


def print_report(report: CapabilityReport, console: Optional[Console] = None) -> None:
    """Print a capability report."""
    console = console or default_console

    table = Table(show_header=True, box=None, padding=(0, 1))
    table.add_column("Requirement", style="bold")
    table.add_column("Status")
    table.add_column("Path", style="dim")

    for requirement, path in report.found.items():
        table.add_row(requirement.label, "[green]found[/green]", path)
    for requirement in report.missing:
        table.add_row(requirement.label, "[yellow]missing[/yellow]", "")

    console.print(table)
    console.print()

    if report.ok:
        console.print("[green]All external capabilities are available[/green]")
    else:
        console.print(f"[yellow]{report.diagnostic()}[/yellow]")
        console.print("[dim]Components that need these tools may not work fully.[/dim]")
