"""Process-scoped startup state.

One ``StartupContext`` is built when the host starts and closed when it
exits. It owns the declaration registry, the key binding maps, the hook
surface and the applied settings, and it is passed explicitly to whatever
needs them instead of living in module globals.
"""

import logging
from typing import Iterable, List, Optional

from usekit.keybindings.resolver import BindingResolver
from usekit.models.capabilities import CapabilityReport
from usekit.models.declarations import ComponentDeclaration
from usekit.services.activator import ActivationOutcome, Activator
from usekit.services.hooks import HookBus
from usekit.services.prober import Which, probe_startup
from usekit.services.registry import DeclarationRegistry
from usekit.services.settings_store import SettingsStore

logger = logging.getLogger(__name__)


class StartupContext:
    """Owns all startup state for one host process.

    Usage:
        with StartupContext() as ctx:
            ctx.probe(manifest)
            ctx.register_many(declarations)
            ctx.activate()
            ctx.hooks.fire("after-init")
    """

    def __init__(
        self,
        registry: Optional[DeclarationRegistry] = None,
        resolver: Optional[BindingResolver] = None,
        hooks: Optional[HookBus] = None,
        settings: Optional[SettingsStore] = None,
    ):
        self.registry = registry if registry is not None else DeclarationRegistry()
        self.resolver = resolver if resolver is not None else BindingResolver()
        self.hooks = hooks if hooks is not None else HookBus()
        self.settings = settings if settings is not None else SettingsStore()
        self.capabilities: Optional[CapabilityReport] = None
        self.closed = False
        self.activator = Activator(self)

    def register(self, decl: ComponentDeclaration) -> None:
        self.registry.register(decl)

    def register_many(self, declarations: Iterable[ComponentDeclaration]) -> None:
        self.registry.register_many(declarations)

    def activate(self) -> List[ActivationOutcome]:
        """Activate every registered declaration in order."""
        return self.activator.activate_all(self.registry)

    def probe(
        self,
        manifest: Optional[Iterable] = None,
        which: Optional[Which] = None,
        max_workers: int = 1,
    ) -> CapabilityReport:
        """Probe external capabilities and keep the report on the context."""
        self.capabilities = probe_startup(manifest, which=which, max_workers=max_workers)
        return self.capabilities

    def close(self) -> None:
        """Tear down all state. Safe to call more than once."""
        if self.closed:
            return
        self.closed = True
        self.hooks.clear()
        self.resolver.clear()
        self.settings.clear()
        logger.debug("Startup context closed")

    def __enter__(self) -> "StartupContext":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
