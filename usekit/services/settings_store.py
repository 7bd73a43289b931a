"""Per-component configuration values applied during activation."""

from typing import Any, Dict, Optional


class SettingsStore:
    """Ordered settings for each activated component.

    Applying a setting twice keeps its original position and replaces the
    value, mirroring how later assignments in an init file behave.
    """

    def __init__(self):
        self._values: Dict[str, Dict[str, Any]] = {}

    def apply(self, component: str, key: str, value: Any) -> None:
        self._values.setdefault(component, {})[key] = value

    def get(self, component: str, key: str, default: Optional[Any] = None) -> Any:
        return self._values.get(component, {}).get(key, default)

    def component(self, component: str) -> Dict[str, Any]:
        """Copy of all settings applied for a component."""
        return dict(self._values.get(component, {}))

    def components(self) -> list:
        return list(self._values)

    def to_dict(self) -> Dict[str, Dict[str, Any]]:
        return {name: dict(values) for name, values in self._values.items()}

    def clear(self) -> None:
        self._values.clear()
