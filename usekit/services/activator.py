"""
Component activation.

Walks the declaration registry in order and, for each declaration:

1. evaluates its guard (false means skip, with no side effects);
2. immediate: runs init actions, applies settings, attaches hooks,
   registers key bindings, runs post-config actions;
3. deferred: arms a one-shot latch on the declaration's trigger events
   that performs step 2 the first time any of them fires.

Every declaration is processed inside its own boundary. Whatever goes
wrong in one of them becomes a FAILED outcome tagged with the failing
step; the next declaration is activated as if nothing happened.
"""

import functools
import logging
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any, Callable, Dict, List, Optional, Set, Tuple

from usekit.exceptions import ActivationFailure, ConfigurationError
from usekit.models.declarations import ComponentDeclaration, HookSpec

if TYPE_CHECKING:
    from usekit.services.registry import DeclarationRegistry
    from usekit.services.startup_context import StartupContext

logger = logging.getLogger(__name__)


class OutcomeStatus(Enum):
    """Result of processing one declaration."""

    ACTIVATED = "activated"
    DEFERRED = "deferred"  # Latch armed, waiting for a trigger
    SKIPPED = "skipped"  # Guard was false
    FAILED = "failed"


@dataclass
class ActivationOutcome:
    """What happened to one declaration."""

    name: str
    status: OutcomeStatus
    step: Optional[str] = None  # Failing step for FAILED outcomes
    error: Optional[ActivationFailure] = None
    trigger: Optional[str] = None  # Event that activated a deferred declaration

    @property
    def ok(self) -> bool:
        return self.status is not OutcomeStatus.FAILED

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        cause = self.error.__cause__ if self.error is not None else None
        return {
            "name": self.name,
            "status": self.status.value,
            "step": self.step,
            "error": str(cause or self.error) if self.error is not None else None,
            "trigger": self.trigger,
        }


class DeferredLatch:
    """One-shot activation for a deferred declaration.

    The latch subscribes to each trigger event. The first firing (or an
    explicit demand) detaches all of its subscriptions and runs the
    activation sequence; later firings are no-ops.
    """

    def __init__(self, decl: ComponentDeclaration, activator: "Activator"):
        self.decl = decl
        self.fired = False
        self.outcome: Optional[ActivationOutcome] = None
        self._activator = activator
        self._subscriptions: List[Tuple[str, Callable[..., Any]]] = []

    @property
    def events(self) -> Tuple[str, ...]:
        return tuple(event for event, _ in self._subscriptions)

    def arm(self) -> None:
        hooks = self._activator.context.hooks
        for event in self.decl.trigger_events():
            callback = functools.partial(self.fire, event)
            hooks.subscribe(event, callback)
            self._subscriptions.append((event, callback))

    def disarm(self) -> None:
        hooks = self._activator.context.hooks
        while self._subscriptions:
            event, callback = self._subscriptions[-1]
            hooks.unsubscribe(event, callback)
            self._subscriptions.pop()

    def fire(
        self, event: Optional[str] = None, *args: Any, **kwargs: Any
    ) -> Optional[ActivationOutcome]:
        """Activate the declaration once. Returns None when already fired.

        Handlers newly attached for the triggering event are then called once
        with that event's arguments. Handlers that were already subscribed
        saw the event in the current dispatch and are not called again.
        """
        if self.fired:
            return None
        self.fired = True
        try:
            self.disarm()
        except Exception as e:
            logger.warning(f"Could not detach triggers of '{self.decl.name}': {e}")

        logger.debug(f"Deferred activation of '{self.decl.name}' triggered by {event or 'demand'}")
        replay = (args, kwargs) if event is not None else None
        self.outcome = self._activator._activate_now(self.decl, trigger=event, replay=replay)
        return self.outcome


class Activator:
    """
    Applies declarations to a startup context.

    Usage:
        with StartupContext() as ctx:
            ctx.registry.register(ComponentDeclaration("editor", config_settings={"indent": 4}))
            outcomes = Activator(ctx).activate_all(ctx.registry)
            failed = [o for o in outcomes if not o.ok]
    """

    def __init__(self, context: "StartupContext"):
        self.context = context
        self.outcomes: List[ActivationOutcome] = []
        self._activated: Set[str] = set()
        self._initialized: Set[str] = set()
        self._latches: Dict[str, DeferredLatch] = {}

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def activate_all(self, registry: "DeclarationRegistry") -> List[ActivationOutcome]:
        """Process every declaration in registry order.

        Returns:
            One outcome per declaration, in the same order

        Raises:
            ConfigurationError: If the context has already been closed
        """
        if self.context.closed:
            raise ConfigurationError("Cannot activate components on a closed startup context")

        results = [self.activate(decl) for decl in registry.list_in_order()]

        failed = [o.name for o in results if not o.ok]
        if failed:
            logger.warning(f"{len(failed)} component(s) failed to activate: {', '.join(failed)}")
        return results

    def activate(self, decl: ComponentDeclaration) -> ActivationOutcome:
        """Process a single declaration inside its own failure boundary."""
        allowed = self._check_guard(decl)
        if isinstance(allowed, ActivationOutcome):
            return allowed

        if decl.is_deferred and decl.name not in self._activated:
            return self._defer(decl)

        return self._activate_now(decl, guard_checked=True)

    def demand(self, name: str) -> Optional[ActivationOutcome]:
        """Force a pending deferred declaration to activate now.

        Returns:
            The activation outcome, or None if there is no pending latch
        """
        latch = self._latches.get(name)
        if latch is None:
            return None
        return latch.fire()

    def pending(self) -> List[str]:
        """Deferred declarations still waiting for a trigger."""
        return [name for name, latch in self._latches.items() if not latch.fired]

    def is_activated(self, name: str) -> bool:
        return name in self._activated

    def triggers_for(self, name: str) -> Tuple[str, ...]:
        """Events a pending deferred declaration is subscribed to."""
        latch = self._latches.get(name)
        return latch.events if latch is not None else ()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _record(self, outcome: ActivationOutcome) -> ActivationOutcome:
        self.outcomes.append(outcome)
        return outcome

    def _failure(
        self, decl: ComponentDeclaration, step: str, error: Exception
    ) -> ActivationOutcome:
        failure = ActivationFailure(decl.name, step)
        failure.__cause__ = error
        logger.error(
            f"Component '{decl.name}' failed during {step}: {error}",
            exc_info=(type(error), error, error.__traceback__),
        )
        return self._record(
            ActivationOutcome(decl.name, OutcomeStatus.FAILED, step=step, error=failure)
        )

    def _check_guard(self, decl: ComponentDeclaration):
        try:
            allowed = decl.guard_allows()
        except Exception as e:
            return self._failure(decl, "guard", e)
        if not allowed:
            logger.debug(f"Component '{decl.name}' skipped by its guard")
            return self._record(ActivationOutcome(decl.name, OutcomeStatus.SKIPPED))
        return True

    def _defer(self, decl: ComponentDeclaration) -> ActivationOutcome:
        latch = DeferredLatch(decl, self)
        previous = self._latches.get(decl.name)
        try:
            if previous is not None and not previous.fired:
                # Re-declared before its first trigger: re-arm with the new content
                previous.disarm()
            latch.arm()
        except Exception as e:
            # Neither latch may fire from whatever subscriptions are left
            latch.fired = True
            if previous is not None:
                previous.fired = True
            self._latches.pop(decl.name, None)
            try:
                latch.disarm()
            except Exception as cleanup_error:
                logger.warning(f"Could not detach triggers of '{decl.name}': {cleanup_error}")
            return self._failure(decl, "hooks", e)

        self._latches[decl.name] = latch

        if latch.events:
            logger.debug(f"Component '{decl.name}' deferred until: {', '.join(latch.events)}")
        else:
            logger.debug(f"Component '{decl.name}' deferred until demanded")
        return self._record(ActivationOutcome(decl.name, OutcomeStatus.DEFERRED))

    def _activate_now(
        self,
        decl: ComponentDeclaration,
        trigger: Optional[str] = None,
        guard_checked: bool = False,
        replay: Optional[Tuple[tuple, dict]] = None,
    ) -> ActivationOutcome:
        """Run the activation sequence for one declaration.

        A failure after hooks or bindings were attached detaches them again,
        so a FAILED declaration leaves no live handlers behind. Settings and
        the effects of actions that already ran are kept.

        Args:
            replay: Positional and keyword arguments of the triggering event,
                passed to the hook handlers this activation attaches for it
        """
        if self.context.closed:
            return self._failure(
                decl, "context", ConfigurationError("Startup context is closed")
            )

        if not guard_checked:
            allowed = self._check_guard(decl)
            if isinstance(allowed, ActivationOutcome):
                return allowed

        ctx = self.context
        attached: List[HookSpec] = []
        bound: List[Tuple[str, str, Any]] = []
        step = "init"
        try:
            if decl.name not in self._initialized:
                for action in decl.init_actions:
                    action()
                self._initialized.add(decl.name)

            step = "settings"
            for key, value in decl.config_settings.items():
                ctx.settings.apply(decl.name, key, value)

            step = "hooks"
            for hook in decl.hooks:
                # HookBus returns False for a handler it already has
                if ctx.hooks.subscribe(hook.event, hook.handler) is not False:
                    attached.append(hook)

            step = "bindings"
            for binding in decl.key_bindings:
                previous = ctx.resolver.bind(
                    binding.scope, binding.chord, binding.handler, source=decl.name
                )
                bound.append((binding.scope, binding.chord, previous))

            step = "config"
            for action in decl.post_config_actions:
                action()
        except Exception as e:
            self._detach(decl, attached, bound)
            return self._failure(decl, step, e)

        self._activated.add(decl.name)
        logger.info(f"Activated component '{decl.name}'")
        outcome = self._record(
            ActivationOutcome(decl.name, OutcomeStatus.ACTIVATED, trigger=trigger)
        )

        if replay is not None:
            args, kwargs = replay
            for hook in attached:
                if hook.event == trigger:
                    self._run_handler(decl, hook, args, kwargs)
        return outcome

    def _run_handler(self, decl: ComponentDeclaration, hook: HookSpec, args, kwargs) -> None:
        try:
            hook.handler(*args, **kwargs)
        except Exception as e:
            logger.error(
                f"Hook handler of '{decl.name}' for '{hook.event}' failed: {e}",
                exc_info=True,
            )

    def _detach(self, decl: ComponentDeclaration, attached, bound) -> None:
        """Undo the hooks and bindings of a failed activation."""
        for hook in attached:
            try:
                self.context.hooks.unsubscribe(hook.event, hook.handler)
            except Exception as e:
                logger.warning(f"Could not detach '{hook.event}' hook of '{decl.name}': {e}")
        for scope, chord, previous in reversed(bound):
            self.context.resolver.restore(scope, chord, previous)
