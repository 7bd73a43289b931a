"""
Key binding resolver.

Holds one chord-to-handler map per scope. Binding an existing
(scope, chord) pair replaces the handler: the last writer wins, so
declarations applied later take precedence. Overwrites are recorded as
``BindingOverride`` entries for diagnostics, never raised.
"""

import logging
import threading
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from usekit.config.constants import GLOBAL_SCOPE

from .context import normalize_chord, normalize_scope

logger = logging.getLogger(__name__)


def describe_handler(handler: Any) -> str:
    """Readable name for a handler: command names as-is, callables by qualified name."""
    if isinstance(handler, str):
        return handler
    module = getattr(handler, "__module__", None)
    name = getattr(handler, "__qualname__", None) or getattr(handler, "__name__", None)
    if name:
        return f"{module}.{name}" if module else name
    return repr(handler)


@dataclass
class BindingOverride:
    """A binding that replaced an earlier one for the same scope and chord."""

    scope: str
    chord: str
    previous: Any
    replacement: Any
    source: Optional[str] = None  # Declaration that performed the overwrite

    def to_string(self) -> str:
        """Format override for logging/display."""
        origin = f" by '{self.source}'" if self.source else ""
        return (
            f"Key '{self.chord}' ({self.scope}) rebound{origin}: "
            f"{describe_handler(self.previous)} -> {describe_handler(self.replacement)}"
        )

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "scope": self.scope,
            "chord": self.chord,
            "previous": describe_handler(self.previous),
            "replacement": describe_handler(self.replacement),
            "source": self.source,
        }


@dataclass
class BindingResolver:
    """
    Scoped key binding maps with last-writer-wins semantics.

    Usage:
        resolver = BindingResolver()
        resolver.bind("global", "ctrl+x ctrl+s", "save-buffer")
        resolver.bind("org-mode", "ctrl+c ctrl+c", "org-ctrl-c-ctrl-c")

        resolver.resolve("org-mode", "ctrl+x ctrl+s")  # "save-buffer" (global)
        resolver.resolve("global", "ctrl+c ctrl+c")    # None
    """

    # Chord maps indexed by scope
    maps: Dict[str, Dict[str, Any]] = field(default_factory=dict)

    # Overwrites seen so far, oldest first
    overrides: List[BindingOverride] = field(default_factory=list)

    _lock: threading.RLock = field(
        default_factory=threading.RLock, init=False, repr=False, compare=False
    )

    def bind(
        self, scope: str, chord: str, handler: Any, source: Optional[str] = None
    ) -> Optional[Any]:
        """
        Bind a chord to a handler in a scope.

        Args:
            scope: "global" or a named context
            chord: Key chord, normalised before storage
            handler: Callable or command name
            source: Name of the declaration making the binding, for diagnostics

        Returns:
            The handler this scope had for the chord before, if any

        Raises:
            ValueError: If the chord is malformed or the handler is None
        """
        if handler is None:
            raise ValueError("Cannot bind a key to None; use unbind()")
        scope = normalize_scope(scope)
        chord = normalize_chord(chord)

        with self._lock:
            chords = self.maps.setdefault(scope, {})
            previous = chords.get(chord)
            chords[chord] = handler

            if previous is not None and previous != handler:
                override = BindingOverride(scope, chord, previous, handler, source)
                self.overrides.append(override)
                logger.debug(override.to_string())
            return previous

    def restore(self, scope: str, chord: str, handler: Optional[Any]) -> None:
        """Put back an earlier binding without recording an override.

        A ``None`` handler removes the chord from the scope.
        """
        if handler is None:
            self.unbind(scope, chord)
            return
        with self._lock:
            self.maps.setdefault(normalize_scope(scope), {})[normalize_chord(chord)] = handler

    def unbind(self, scope: str, chord: str) -> bool:
        """Remove a binding. Returns True if one was removed."""
        scope = normalize_scope(scope)
        chord = normalize_chord(chord)
        with self._lock:
            chords = self.maps.get(scope)
            if not chords or chord not in chords:
                return False
            del chords[chord]
            if not chords:
                del self.maps[scope]
            return True

    def resolve(self, scope: str, chord: str) -> Optional[Any]:
        """
        Get the handler for a chord as seen from a scope.

        A named context's own binding wins; otherwise the global binding
        applies. Returns None when neither has the chord.
        """
        scope = normalize_scope(scope)
        chord = normalize_chord(chord)

        handler = self.maps.get(scope, {}).get(chord)
        if handler is None and scope != GLOBAL_SCOPE:
            handler = self.maps.get(GLOBAL_SCOPE, {}).get(chord)
        return handler

    def bindings_for(self, scope: str, include_global: bool = True) -> Dict[str, Any]:
        """Get the effective chord map for a scope."""
        scope = normalize_scope(scope)
        effective: Dict[str, Any] = {}
        if include_global and scope != GLOBAL_SCOPE:
            effective.update(self.maps.get(GLOBAL_SCOPE, {}))
        effective.update(self.maps.get(scope, {}))
        return effective

    def scopes(self) -> List[str]:
        """Scopes that currently hold at least one binding, global first."""
        names = sorted(self.maps)
        if GLOBAL_SCOPE in names:
            names.remove(GLOBAL_SCOPE)
            names.insert(0, GLOBAL_SCOPE)
        return names

    def clear(self) -> None:
        with self._lock:
            self.maps.clear()
            self.overrides.clear()

    def __len__(self) -> int:
        return sum(len(chords) for chords in self.maps.values())

    def summary(self) -> str:
        """Get a summary of the resolver state."""
        return "\n".join(
            [
                "Key Binding Summary:",
                f"  Total bindings: {len(self)}",
                f"  Scopes: {len(self.maps)}",
                f"  Overrides: {len(self.overrides)}",
            ]
        )

    def to_dict(self) -> dict:
        """Convert resolver to dictionary for serialization."""
        return {
            "bindings": {
                scope: {chord: describe_handler(h) for chord, h in self.maps[scope].items()}
                for scope in self.scopes()
            },
            "overrides": [o.to_dict() for o in self.overrides],
            "summary": {
                "total_bindings": len(self),
                "scopes": len(self.maps),
                "overrides": len(self.overrides),
            },
        }
