"""Extractor registry for tagthem.

Provides registration and lookup of extractor factories so extractors can
be declared in configuration by type name.
"""

from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from typing import Any

from tagthem.tagger import Extractor, ExtractorKind


@dataclass
class ExtractorDefinition:
    """Declarative extractor definition (from YAML).

    Attributes:
        type: Registered extractor type ("pattern", "range", ...)
        name: Name results are reported under (defaults to the type)
        kinds: Scalar kinds the extractor is attached to; empty means the
            type's registered defaults
        params: Type-specific parameters
    """

    type: str
    name: str = ""
    kinds: list[ExtractorKind] = field(default_factory=list)
    params: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ExtractorDefinition":
        """Create ExtractorDefinition from YAML/JSON dict."""
        if not isinstance(data, dict) or "type" not in data:
            raise ValueError(f"Extractor definition has no 'type': {data!r}")

        kinds = data.get("kinds", [])
        if isinstance(kinds, str):
            kinds = [kinds]

        params = data.get("params") or {}
        if not isinstance(params, dict):
            raise ValueError(f"Extractor '{data['type']}' params must be a mapping")

        return cls(
            type=data["type"],
            name=data.get("name") or data["type"],
            kinds=[ExtractorKind(kind) for kind in kinds],
            params=params,
        )


ExtractorFactory = Callable[[ExtractorDefinition], Extractor]


class ExtractorRegistry:
    """Registry for extractor types.

    Example:
        ExtractorRegistry.register_factory(
            "pattern", _pattern_factory, kinds=[ExtractorKind.STRING]
        )
        extractor = ExtractorRegistry.create(
            ExtractorDefinition.from_dict({"type": "pattern", "params": {...}})
        )
    """

    _factories: dict[str, ExtractorFactory] = {}
    _kinds: dict[str, list[ExtractorKind]] = {}

    @classmethod
    def register_factory(
        cls,
        name: str,
        factory: ExtractorFactory,
        kinds: Iterable[ExtractorKind],
    ) -> None:
        """Register a factory that builds extractors from definitions.

        Idempotent - re-registering the same name is a no-op.

        Args:
            name: Extractor type name used in configuration
            factory: Function that takes an ExtractorDefinition and returns an extractor
            kinds: Scalar kinds the extractor handles when a definition does not say
        """
        if name in cls._factories:
            return
        cls._factories[name] = factory
        cls._kinds[name] = list(kinds)

    @classmethod
    def create(cls, definition: ExtractorDefinition) -> Extractor:
        """Create an extractor instance from a definition.

        Raises:
            ValueError: If the type is not registered
        """
        if definition.type not in cls._factories:
            raise ValueError(
                f"Extractor type '{definition.type}' is not registered. "
                "Available types: " + ", ".join(cls.list_registered())
            )
        return cls._factories[definition.type](definition)

    @classmethod
    def default_kinds(cls, name: str) -> list[ExtractorKind]:
        """Scalar kinds a registered type handles by default."""
        if name not in cls._kinds:
            raise ValueError(f"Extractor type '{name}' is not registered")
        return list(cls._kinds[name])

    @classmethod
    def is_registered(cls, name: str) -> bool:
        """Check if an extractor type is registered."""
        return name in cls._factories

    @classmethod
    def list_registered(cls) -> list[str]:
        """List all registered extractor types."""
        return sorted(cls._factories.keys())

    @classmethod
    def clear(cls) -> None:
        """Clear all registrations. Primarily for testing."""
        cls._factories.clear()
        cls._kinds.clear()
