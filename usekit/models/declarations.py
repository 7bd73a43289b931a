"""Component declaration records.

A declaration is a passive description of how one component is activated
and configured. Declarations are validated when they are built, so the
activator never has to second-guess their shape.
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from types import MappingProxyType
from typing import Any, Callable, Iterable, Mapping, Tuple, Union

from usekit.exceptions import DeclarationError
from usekit.keybindings.context import normalize_chord, normalize_scope

Action = Callable[[], Any]
Guard = Union[None, bool, Callable[[], bool]]


class LoadTiming(Enum):
    """When a declaration's activation sequence runs."""

    IMMEDIATE = "immediate"
    DEFERRED = "deferred"  # On first trigger event or explicit demand

    @classmethod
    def parse(cls, value: Union[str, "LoadTiming"]) -> "LoadTiming":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            valid = ", ".join(t.value for t in cls)
            raise DeclarationError(
                f"Unknown load timing {value!r}; expected one of: {valid}"
            ) from None


@dataclass(frozen=True)
class HookSpec:
    """A handler to attach to a host event."""

    event: str
    handler: Callable[..., Any]

    def __post_init__(self):
        if not isinstance(self.event, str) or not self.event.strip():
            raise DeclarationError("Hook event must be a non-empty string")
        if not callable(self.handler):
            raise DeclarationError(
                f"Hook handler for '{self.event}' must be callable", event=self.event
            )
        object.__setattr__(self, "event", self.event.strip())


@dataclass(frozen=True)
class KeyBinding:
    """A key chord bound to a handler within a scope.

    The handler is opaque to usekit: a callable, or a command name that the
    host's input dispatch layer knows how to run.
    """

    scope: str
    chord: str
    handler: Any

    def __post_init__(self):
        try:
            chord = normalize_chord(self.chord)
        except ValueError as e:
            raise DeclarationError(str(e), chord=self.chord) from e
        if self.handler is None:
            raise DeclarationError(f"Key binding '{chord}' has no handler", chord=chord)
        object.__setattr__(self, "scope", normalize_scope(self.scope))
        object.__setattr__(self, "chord", chord)

    @property
    def key(self) -> Tuple[str, str]:
        return (self.scope, self.chord)


def _coerce_hooks(hooks: Iterable[Any]) -> Tuple[HookSpec, ...]:
    result = []
    for hook in hooks:
        if isinstance(hook, HookSpec):
            result.append(hook)
        elif isinstance(hook, (tuple, list)) and len(hook) == 2:
            result.append(HookSpec(*hook))
        else:
            raise DeclarationError(f"Hook must be (event, handler), got {hook!r}")
    return tuple(result)


def _coerce_bindings(bindings: Iterable[Any]) -> Tuple[KeyBinding, ...]:
    result = []
    for binding in bindings:
        if isinstance(binding, KeyBinding):
            result.append(binding)
        elif isinstance(binding, (tuple, list)) and len(binding) == 3:
            result.append(KeyBinding(*binding))
        else:
            raise DeclarationError(
                f"Key binding must be (scope, chord, handler), got {binding!r}"
            )
    return tuple(result)


def _coerce_actions(actions: Iterable[Any], kind: str, name: str) -> Tuple[Action, ...]:
    actions = tuple(actions)
    for action in actions:
        if not callable(action):
            raise DeclarationError(f"{kind} action must be callable", name=name)
    return actions


@dataclass(frozen=True)
class ComponentDeclaration:
    """
    How one component should be activated and configured.

    ``load_timing`` tags the variant: immediate declarations run their whole
    sequence during ``activate_all``; deferred ones wait for the first of
    their trigger events (explicit ``triggers`` plus every hook event) or an
    explicit demand. ``triggers`` is only valid on deferred declarations.
    """

    name: str
    guard: Guard = None
    load_timing: LoadTiming = LoadTiming.IMMEDIATE
    config_settings: Mapping[str, Any] = field(default_factory=dict)
    hooks: Tuple[HookSpec, ...] = ()
    key_bindings: Tuple[KeyBinding, ...] = ()
    init_actions: Tuple[Action, ...] = ()
    post_config_actions: Tuple[Action, ...] = ()
    triggers: Tuple[str, ...] = ()

    def __post_init__(self):
        if not isinstance(self.name, str) or not self.name.strip():
            raise DeclarationError("Declaration name must be a non-empty string")
        name = self.name.strip()
        object.__setattr__(self, "name", name)

        if not (self.guard is None or isinstance(self.guard, bool) or callable(self.guard)):
            raise DeclarationError("Guard must be a bool or a callable", name=name)

        object.__setattr__(self, "load_timing", LoadTiming.parse(self.load_timing))

        if not isinstance(self.config_settings, Mapping):
            raise DeclarationError("config_settings must be a mapping", name=name)
        for key in self.config_settings:
            if not isinstance(key, str):
                raise DeclarationError(f"Setting name {key!r} must be a string", name=name)
        # Read-only view over a private copy
        object.__setattr__(self, "config_settings", MappingProxyType(dict(self.config_settings)))

        object.__setattr__(self, "hooks", _coerce_hooks(self.hooks))
        object.__setattr__(self, "key_bindings", _coerce_bindings(self.key_bindings))
        object.__setattr__(self, "init_actions", _coerce_actions(self.init_actions, "init", name))
        object.__setattr__(
            self,
            "post_config_actions",
            _coerce_actions(self.post_config_actions, "post-config", name),
        )

        if isinstance(self.triggers, str):
            object.__setattr__(self, "triggers", (self.triggers,))
        triggers = tuple(str(t).strip() for t in self.triggers)
        if any(not t for t in triggers):
            raise DeclarationError("Trigger events must be non-empty", name=name)
        if triggers and self.load_timing is LoadTiming.IMMEDIATE:
            raise DeclarationError("Only deferred declarations take triggers", name=name)
        object.__setattr__(self, "triggers", triggers)

    @property
    def is_deferred(self) -> bool:
        return self.load_timing is LoadTiming.DEFERRED

    def trigger_events(self) -> Tuple[str, ...]:
        """Events that activate a deferred declaration, in first-seen order."""
        seen = dict.fromkeys(self.triggers)
        for hook in self.hooks:
            seen.setdefault(hook.event)
        return tuple(seen)

    def guard_allows(self) -> bool:
        """Evaluate the guard. Exceptions from a callable guard propagate."""
        if self.guard is None:
            return True
        if isinstance(self.guard, bool):
            return self.guard
        return bool(self.guard())

    def copy(self) -> "ComponentDeclaration":
        return replace(self)

    def merged_with(self, newer: "ComponentDeclaration") -> "ComponentDeclaration":
        """
        Combine this declaration with a later one for the same name.

        Settings merge by key and bindings by (scope, chord), the newer value
        winning and keeping the original position. Hooks are unioned. Guard,
        timing, triggers and actions come from the newer declaration.
        """
        if newer.name != self.name:
            raise DeclarationError(
                "Cannot merge declarations with different names",
                name=self.name,
                other=newer.name,
            )

        settings = dict(self.config_settings)
        settings.update(newer.config_settings)

        bindings = {b.key: b for b in self.key_bindings}
        for binding in newer.key_bindings:
            bindings[binding.key] = binding

        hooks = tuple(dict.fromkeys(self.hooks + newer.hooks))

        return replace(
            newer,
            config_settings=settings,
            key_bindings=tuple(bindings.values()),
            hooks=hooks,
        )
