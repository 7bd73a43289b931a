"""
Declaration registry.

Keeps component declarations in registration order. Registering a name
again merges the new declaration into the old one but keeps the position
of the first registration, so a component that is reconfigured later in
the init file still activates where it was first declared.
"""

import logging
from typing import Dict, Iterable, Iterator, List, Optional

from usekit.models.declarations import ComponentDeclaration

logger = logging.getLogger(__name__)


class DeclarationRegistry:
    """Ordered, name-unique collection of component declarations."""

    def __init__(self, declarations: Optional[Iterable[ComponentDeclaration]] = None):
        # dicts keep insertion order; replacing a value keeps the key's slot
        self._declarations: Dict[str, ComponentDeclaration] = {}
        for decl in declarations or ():
            self.register(decl)

    def register(self, decl: ComponentDeclaration) -> None:
        """Insert a declaration, or merge it into an existing one of the same name."""
        if not isinstance(decl, ComponentDeclaration):
            raise TypeError(f"Expected ComponentDeclaration, got {type(decl).__name__}")

        existing = self._declarations.get(decl.name)
        if existing is None:
            self._declarations[decl.name] = decl
            return

        logger.debug(f"Re-declaration of '{decl.name}' merged into earlier declaration")
        self._declarations[decl.name] = existing.merged_with(decl)

    def register_many(self, declarations: Iterable[ComponentDeclaration]) -> None:
        """Register multiple declarations at once."""
        for decl in declarations:
            self.register(decl)

    def get(self, name: str) -> Optional[ComponentDeclaration]:
        decl = self._declarations.get(name)
        return decl.copy() if decl is not None else None

    def list_in_order(self) -> List[ComponentDeclaration]:
        """Copies of all declarations, in first-registration order."""
        return [decl.copy() for decl in self._declarations.values()]

    def names(self) -> List[str]:
        return list(self._declarations)

    def __contains__(self, name: object) -> bool:
        return name in self._declarations

    def __len__(self) -> int:
        return len(self._declarations)

    def __iter__(self) -> Iterator[ComponentDeclaration]:
        return iter(self.list_in_order())
