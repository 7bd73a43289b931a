"""Activation and probing services."""

from .activator import ActivationOutcome, Activator, DeferredLatch, OutcomeStatus
from .hooks import HookBus
from .prober import CapabilityProber, print_report, probe_startup
from .registry import DeclarationRegistry
from .settings_store import SettingsStore
from .shell import ShellAction
from .startup_context import StartupContext

__all__ = [
    "ActivationOutcome",
    "Activator",
    "CapabilityProber",
    "DeclarationRegistry",
    "DeferredLatch",
    "HookBus",
    "OutcomeStatus",
    "SettingsStore",
    "ShellAction",
    "StartupContext",
    "print_report",
    "probe_startup",
]
