"""
Binding scopes and key chord normalisation.

A scope is either the global scope, whose bindings are visible everywhere,
or a named context (a mode map such as ``org-mode`` or ``dired``). A named
context binding wins over a global binding for the same chord. There are no
other precedence levels.
"""

from usekit.config.constants import GLOBAL_SCOPE

# Modifier names accepted in chords, mapped to their canonical spelling
_MODIFIER_ALIASES = {
    "c": "ctrl",
    "ctrl": "ctrl",
    "control": "ctrl",
    "m": "alt",
    "meta": "alt",
    "alt": "alt",
    "s": "super",
    "super": "super",
    "cmd": "super",
    "shift": "shift",
}

_MODIFIER_ORDER = ["ctrl", "alt", "super", "shift"]


def normalize_scope(scope: str | None) -> str:
    """Return the canonical scope name; empty or None means global."""
    if scope is None:
        return GLOBAL_SCOPE
    scope = str(scope).strip()
    return scope or GLOBAL_SCOPE


def _normalize_stroke(stroke: str) -> str:
    parts = [p for p in stroke.split("+") if p != ""]
    if stroke.endswith("+"):
        # "ctrl++" binds the plus key itself
        parts.append("+")
    if not parts:
        raise ValueError(f"Empty key stroke in {stroke!r}")

    *modifiers, key = parts
    canonical = set()
    for modifier in modifiers:
        name = _MODIFIER_ALIASES.get(modifier.lower())
        if name is None:
            raise ValueError(f"Unknown modifier {modifier!r} in {stroke!r}")
        canonical.add(name)

    ordered = [m for m in _MODIFIER_ORDER if m in canonical]
    return "+".join(ordered + [key])


def normalize_chord(chord: str) -> str:
    """
    Normalise a key chord.

    A chord is one or more strokes separated by whitespace; each stroke is
    ``modifier+...+key``. Modifiers are lower-cased, de-aliased and sorted,
    the key itself keeps its case. ``"C+x  Shift+Ctrl+s"`` becomes
    ``"ctrl+x ctrl+shift+s"``.

    Raises:
        ValueError: If the chord is empty or uses an unknown modifier.
    """
    if not isinstance(chord, str):
        raise ValueError(f"Key chord must be a string, got {type(chord).__name__}")
    strokes = chord.split()
    if not strokes:
        raise ValueError("Key chord must not be empty")
    return " ".join(_normalize_stroke(stroke) for stroke in strokes)
