"""
usekit key binding system.

Scoped chord maps with last-writer-wins semantics.

Usage:
    from usekit.keybindings import BindingResolver

    resolver = BindingResolver()
    resolver.bind("global", "ctrl+c a", "org-agenda")
    handler = resolver.resolve("org-mode", "ctrl+c a")
"""

from .context import normalize_chord, normalize_scope
from .resolver import BindingOverride, BindingResolver, describe_handler

__all__ = [
    "BindingOverride",
    "BindingResolver",
    "describe_handler",
    "normalize_chord",
    "normalize_scope",
]
