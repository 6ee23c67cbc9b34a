"""Collectors for values supplied by the program itself."""

from __future__ import annotations

from layerfig.value.convert import to_value
from layerfig.value.model import Value


class FromSelf:
    """Collector that snapshots a typed configuration instance."""

    def __init__(self, instance: object) -> None:
        self.instance: object = instance
        self.name: str = "self"

    def collect(self, target: type[object]) -> Value:
        return to_value(self.instance)


class FromValue:
    """Collector that hands through an already built value."""

    def __init__(self, value: Value) -> None:
        self.value: Value = value
        self.name: str = "value"

    def collect(self, target: type[object]) -> Value:
        return self.value


def from_self(instance: object) -> FromSelf:
    """Load config from a configuration instance.

    Example:
        >>> builder = Builder(AppConfig).collect(from_self(AppConfig(debug=True)))
    """
    return FromSelf(instance)


def from_value(value: Value) -> FromValue:
    """Load config from a generic value."""
    return FromValue(value)
