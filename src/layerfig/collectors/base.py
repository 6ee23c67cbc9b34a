"""Collector protocol and shared snapshot helper."""

from __future__ import annotations

import dataclasses
from typing import Protocol, get_args, runtime_checkable

from pydantic import BaseModel

from layerfig.merge.engine import merge_with_default
from layerfig.value.convert import (
    UnknownFieldObserver,
    dataclass_hints,
    is_union,
    project,
    strip_annotated,
    to_value,
)
from layerfig.value.defaults import zero_value
from layerfig.value.model import Map, Some, Str, Struct, Value, keyed_entries


@runtime_checkable
class Collector(Protocol):
    """Protocol for configuration sources.

    A collector produces one value snapshot per call. Calls must not depend
    on other collectors and must be deterministic for a fixed environment and
    filesystem.
    """

    name: str

    def collect(self, target: type[object]) -> Value:
        """Collect a value snapshot shaped after the target type.

        Args:
            target: Type the built configuration will be projected into

        Returns:
            Value snapshot of this source

        Raises:
            ConfigError: If the source cannot produce a value
        """
        ...


def snapshot(data: object, target: type[object], on_unknown: UnknownFieldObserver | None = None) -> Value:
    """Validate plain data against the target type and convert it into a value.

    Fields the data leaves out are filled with the target's declared zero
    value for validation only: the snapshot keeps just the fields the data
    mentions, converted to the target's types. Fields the target does not
    declare are reported to on_unknown and dropped.

    Args:
        data: Plain data produced by a source
        target: Type to validate the data against
        on_unknown: Called with the dotted path of every undeclared field

    Returns:
        Value snapshot of the fields the source set

    Raises:
        ConfigValidationError: If the data does not satisfy the target
    """
    raw = _by_alias(to_value(data), target)
    instance = project(merge_with_default(zero_value(target), raw), target, on_unknown)
    return _mentioned(to_value(instance), raw)


def _mentioned(full: Value, raw: Value) -> Value:
    """Restrict a validated struct to the keys present in the raw input."""
    if isinstance(full, Some):
        return Some(_mentioned(full.value, raw))
    raw_entries = keyed_entries(raw)
    if not isinstance(full, Struct) or raw_entries is None:
        return full
    present = {key.value if isinstance(key, Str) else key: value for key, value in raw_entries.items()}
    return Struct(
        full.name,
        {key: _mentioned(value, present[key]) for key, value in full.fields.items() if key in present},
    )


def _by_alias(raw: Value, annotation: object) -> Value:
    """Key the raw input the way snapshots key fields: by alias where a model declares one."""
    keys = _field_keys(annotation)
    if not keys or not isinstance(raw, Map):
        return raw
    renamed: dict[Value, Value] = {}
    for key, value in raw.entries.items():
        if isinstance(key, Str) and key.value in keys:
            snapshot_key, field_annotation = keys[key.value]
            renamed[Str(snapshot_key)] = _by_alias(value, field_annotation)
        else:
            renamed[key] = value
    return Map(renamed)


def _field_keys(annotation: object) -> dict[str, tuple[str, object]]:
    """Map every accepted field key to the snapshot key and annotation.

    Field names count alongside aliases only where the model validates by name.
    """
    annotation = strip_annotated(annotation)
    if is_union(annotation):
        arms = [arm for arm in get_args(annotation) if arm is not type(None)]
        if len(arms) != 1:
            return {}
        annotation = strip_annotated(arms[0])
    if isinstance(annotation, type) and issubclass(annotation, BaseModel):
        config = annotation.model_config
        by_name = bool(config.get("populate_by_name") or config.get("validate_by_name"))
        keys: dict[str, tuple[str, object]] = {}
        for name, field in annotation.model_fields.items():
            if field.alias:
                keys[field.alias] = (field.alias, field.annotation)
            if not field.alias or by_name:
                keys[name] = (field.alias or name, field.annotation)
        return keys
    if isinstance(annotation, type) and dataclasses.is_dataclass(annotation):
        return {key: (key, hint) for key, hint in dataclass_hints(annotation).items()}
    return {}
