"""In-process event subscription surface.

Hosts that have their own event API can pass any object with the same
``subscribe``/``unsubscribe`` methods to the activator; ``HookBus`` is the
implementation used by the CLI and the tests.
"""

import logging
from typing import Any, Callable, Dict, List

logger = logging.getLogger(__name__)

Handler = Callable[..., Any]


class HookBus:
    """Named events with ordered handler lists."""

    def __init__(self):
        self._handlers: Dict[str, List[Handler]] = {}

    def subscribe(self, event: str, handler: Handler) -> bool:
        """Attach a handler. Returns False if it was already attached."""
        handlers = self._handlers.setdefault(event, [])
        if handler in handlers:
            return False
        handlers.append(handler)
        return True

    def unsubscribe(self, event: str, handler: Handler) -> bool:
        """Detach a handler. Returns True if it was attached."""
        handlers = self._handlers.get(event)
        if not handlers or handler not in handlers:
            return False
        handlers.remove(handler)
        if not handlers:
            del self._handlers[event]
        return True

    def subscribers(self, event: str) -> List[Handler]:
        return list(self._handlers.get(event, []))

    def events(self) -> List[str]:
        return list(self._handlers)

    def fire(self, event: str, *args: Any, **kwargs: Any) -> int:
        """
        Run every handler for an event, in subscription order.

        Handlers attached while the event is being dispatched only see later
        firings. A failing handler is logged and the rest still run.

        Returns:
            Number of handlers that completed without raising
        """
        completed = 0
        for handler in self.subscribers(event):
            try:
                handler(*args, **kwargs)
                completed += 1
            except Exception as e:
                logger.error(f"Hook handler for '{event}' failed: {e}", exc_info=True)
        return completed

    def clear(self) -> None:
        self._handlers.clear()
