"""Capability requirement and report records."""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Tuple

from usekit.exceptions import ConfigurationError


@dataclass(frozen=True)
class CapabilityRequirement:
    """An external executable, or an ordered group of alternatives.

    The requirement is satisfied when any candidate is found.
    """

    candidates: Tuple[str, ...]

    def __post_init__(self):
        candidates = self.candidates
        if isinstance(candidates, str):
            candidates = (candidates,)
        candidates = tuple(candidates)
        if not candidates:
            raise ConfigurationError("Capability requirement needs at least one candidate")
        for candidate in candidates:
            if not isinstance(candidate, str) or not candidate.strip():
                raise ConfigurationError(
                    "Capability candidates must be non-empty strings",
                    candidate=candidate,
                )
        object.__setattr__(self, "candidates", tuple(c.strip() for c in candidates))

    @property
    def label(self) -> str:
        return " | ".join(self.candidates)

    @classmethod
    def from_manifest(cls, manifest: Iterable[Any]) -> List["CapabilityRequirement"]:
        """Build requirements from a static manifest.

        Each item is a requirement, a single executable name, or a list of
        alternatives.
        """
        return [item if isinstance(item, cls) else cls(item) for item in manifest]


@dataclass(frozen=True)
class CapabilityReport:
    """Result of probing the host once at startup."""

    missing: Tuple[CapabilityRequirement, ...] = ()
    found: Dict[CapabilityRequirement, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.missing

    def diagnostic(self) -> str:
        """Single human-readable line describing what is missing."""
        if self.ok:
            return "All external capabilities are available"
        labels = ", ".join(req.label for req in self.missing)
        noun = "capability" if len(self.missing) == 1 else "capabilities"
        return f"Missing {len(self.missing)} external {noun}: {labels}"

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "ok": self.ok,
            "missing": [list(req.candidates) for req in self.missing],
            "found": {req.label: path for req, path in self.found.items()},
        }
