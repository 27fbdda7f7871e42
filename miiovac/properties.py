"""Property schema registry.

A device model declares which raw fields it reads from the device, the public
name each one is exposed under and how the raw value is transformed. The
registry keeps both directions of the name lookup so callers can request
properties by public name while the wire protocol deals in raw keys.
"""

import logging
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from typing import Any

from .exceptions import UnknownProperty

logger = logging.getLogger(__name__)

Transform = Callable[[Any], Any]


def identity(value: Any) -> Any:
    """Return the raw value unchanged."""
    return value


def scale(divisor: float) -> Transform:
    """Build a transform dividing numeric raw values by ``divisor``."""

    def _scale(value: Any) -> Any:
        if value is None:
            return None
        return value / divisor

    return _scale


def enum_map(table: Mapping[Any, Any], fallback: str = "unknown-{}") -> Transform:
    """Build a transform looking raw values up in ``table``.

    Values missing from the table are formatted through ``fallback``.
    """

    def _lookup(value: Any) -> Any:
        if value is None:
            return None
        if value in table:
            return table[value]
        return fallback.format(value)

    return _lookup


@dataclass(frozen=True)
class PropertyDefinition:
    """Declared property: raw key, public name and value transform."""

    raw_key: str
    name: str
    transform: Transform = identity

    def apply(self, raw_value: Any) -> Any:
        """Transform a raw value, passing absent values through as None."""
        if raw_value is None:
            return None
        return self.transform(raw_value)


class PropertyRegistry:
    """Holds the property definitions of one device model."""

    def __init__(self):
        self._definitions: dict[str, PropertyDefinition] = {}
        self._reverse: dict[str, str] = {}

    def define(
        self, raw_key: str, name: str | None = None, transform: Transform | None = None
    ) -> PropertyDefinition:
        """Register a property, replacing any earlier definition of ``raw_key``.

        Args:
            raw_key: Field name used by the device
            name: Public name, defaults to ``raw_key``
            transform: Raw value transform, defaults to identity

        Returns:
            The stored definition
        """
        definition = PropertyDefinition(
            raw_key=raw_key, name=name or raw_key, transform=transform or identity
        )

        previous = self._definitions.get(raw_key)
        if previous is not None:
            logger.debug(f"Redefining property {raw_key} ({previous.name} -> {definition.name})")
            self._reverse.pop(previous.name, None)

        owner = self._reverse.get(definition.name)
        if owner is not None and owner != raw_key:
            raise ValueError(
                f"Property name '{definition.name}' already used by raw key '{owner}'"
            )

        self._definitions[raw_key] = definition
        self._reverse[definition.name] = raw_key
        return definition

    def reverse_lookup(self, name: str) -> str:
        """Return the raw key for public ``name``.

        Raises:
            UnknownProperty: if ``name`` was never defined
        """
        try:
            return self._reverse[name]
        except KeyError:
            raise UnknownProperty(name) from None

    def to_raw_key(self, name: str) -> str:
        """Translate ``name`` to its raw key, treating unknown names as raw."""
        try:
            return self.reverse_lookup(name)
        except UnknownProperty:
            return name

    def definition_for(self, key: str) -> PropertyDefinition | None:
        """Find a definition by raw key or by public name."""
        definition = self._definitions.get(key)
        if definition is None and key in self._reverse:
            definition = self._definitions[self._reverse[key]]
        return definition

    def public_name(self, raw_key: str) -> str:
        """Return the public name for ``raw_key`` (itself when undeclared)."""
        definition = self._definitions.get(raw_key)
        return definition.name if definition else raw_key

    def project(self, raw_keys: Iterable[str], merged: Mapping[str, Any]) -> dict[str, Any]:
        """Project raw values into a public-name keyed mapping.

        Undeclared raw keys are passed through untransformed under their raw
        name so ad hoc property requests still produce a value.
        """
        mapped: dict[str, Any] = {}
        for raw_key in raw_keys:
            definition = self._definitions.get(raw_key)
            value = merged.get(raw_key)
            if definition is None:
                mapped[raw_key] = value
            else:
                mapped[definition.name] = definition.apply(value)
        return mapped

    def order(self, names: Iterable[str]) -> list[str]:
        """Sort public names in declaration order, undeclared names last."""
        position = {definition.name: idx for idx, definition in enumerate(self)}
        return sorted(names, key=lambda name: position.get(name, len(position)))

    @property
    def names(self) -> list[str]:
        """Public names in declaration order."""
        return [definition.name for definition in self]

    def __iter__(self):
        return iter(self._definitions.values())

    def __len__(self) -> int:
        return len(self._definitions)

    def __contains__(self, name: object) -> bool:
        return name in self._reverse
