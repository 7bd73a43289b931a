"""Data models for usekit."""

from .capabilities import CapabilityReport, CapabilityRequirement
from .declarations import (
    Action,
    ComponentDeclaration,
    Guard,
    HookSpec,
    KeyBinding,
    LoadTiming,
)

__all__ = [
    "Action",
    "CapabilityReport",
    "CapabilityRequirement",
    "ComponentDeclaration",
    "Guard",
    "HookSpec",
    "KeyBinding",
    "LoadTiming",
]
