"""Structural merge of generic values.

Three operations combine values layer by layer:

- ``merge``: right-biased recursive union of two values.
- ``merge_with_default``: reshapes a raw source value after the default layer.
- ``merge3``: default-aware merge deciding, field by field, whether a
  candidate layer actually set a field or only carries its default.

Only keyed collections (Map, Struct, StructVariant) with matching identity are
merged recursively. Every other pair resolves to the right-hand value.
"""

from __future__ import annotations

from collections.abc import Mapping

from layerfig.exceptions import ConfigMergeError
from layerfig.value.model import Map, Str, Struct, StructVariant, Value, keyed_entries


def _identity(value: Value) -> tuple[object, ...] | None:
    match value:
        case Map():
            return (Map,)
        case Struct(name=name):
            return (Struct, name)
        case StructVariant(name=name, variant_index=index, variant=variant):
            return (StructVariant, name, index, variant)
        case _:
            return None


def compatible(left: Value, right: Value) -> bool:
    """Check whether two values may be merged key by key.

    Maps are compatible with maps. Structs need the same name. Struct variants
    need the same enum name, variant index and variant name.

    Args:
        left: Earlier value
        right: Later value

    Returns:
        True if both are keyed collections of the same identity
    """
    identity = _identity(left)
    return identity is not None and identity == _identity(right)


def _rebuild(template: Value, entries: Mapping[object, Value]) -> Value:
    match template:
        case Map():
            return Map(entries)  # pyright: ignore[reportArgumentType]
        case Struct(name=name):
            return Struct(name, entries)  # pyright: ignore[reportArgumentType]
        case StructVariant(name=name, variant_index=index, variant=variant):
            return StructVariant(name, index, variant, entries)  # pyright: ignore[reportArgumentType]
        case _:
            msg = f"Cannot rebuild entries into {type(template).__name__}"
            raise TypeError(msg)


def _key_label(key: object) -> str:
    if isinstance(key, Str):
        return key.value
    return str(key)


def _join(path: str, key: object) -> str:
    label = _key_label(key)
    return f"{path}.{label}" if path else label


def merge(left: Value, right: Value) -> Value:
    """Merge two values with right-hand precedence.

    Compatible keyed collections are merged key by key: keys present on one
    side are carried through and keys present on both sides are merged
    recursively. Any other pair returns right unchanged.

    Args:
        left: Earlier value
        right: Later value (takes precedence)

    Returns:
        Merged value
    """
    if not compatible(left, right):
        return right

    left_entries = keyed_entries(left) or {}
    right_entries = keyed_entries(right) or {}
    merged: dict[object, Value] = dict(left_entries)
    for key, right_value in right_entries.items():
        left_value = merged.get(key)
        merged[key] = right_value if left_value is None else merge(left_value, right_value)
    return _rebuild(left, merged)


def _as_default_shape(default: Value, candidate: Value) -> Value:
    # A map keyed by strings is a struct that lost its name on the way in
    if isinstance(default, Struct) and isinstance(candidate, Map):
        if all(isinstance(key, Str) for key in candidate.entries):
            return Struct(default.name, {key.value: value for key, value in candidate.entries.items()})  # pyright: ignore[reportAttributeAccessIssue]
    return candidate


def merge_with_default(default: Value, candidate: Value) -> Value:
    """Reshape a raw source value after the default layer.

    Walks candidate's keys, recursing where the default holds a compatible
    substructure and keeping candidate's value otherwise. Keys the default
    declares and candidate lacks are filled from the default, so the result
    has the default's shape. No default-versus-set decision is made here.

    Args:
        default: Default layer snapshot
        candidate: Raw value produced by a source

    Returns:
        Candidate in the default's shape
    """
    candidate = _as_default_shape(default, candidate)
    if not compatible(default, candidate):
        return candidate

    default_entries = keyed_entries(default) or {}
    candidate_entries = keyed_entries(candidate) or {}
    normalized: dict[object, Value] = {}
    for key, default_value in default_entries.items():
        candidate_value = candidate_entries.get(key)
        if candidate_value is None:
            normalized[key] = default_value
        else:
            normalized[key] = merge_with_default(default_value, candidate_value)
    for key, candidate_value in candidate_entries.items():
        if key not in normalized:
            normalized[key] = candidate_value
    return _rebuild(candidate, normalized)


def merge3(default: Value, accumulated: Value, candidate: Value) -> Value:
    """Merge a candidate layer into the accumulated value using the default as reference.

    For each key of candidate, with ``d`` the default, ``a`` the accumulated
    and ``c`` the candidate value:

    - ``a == d`` and ``c == d``: keep ``d``
    - ``a == d`` and ``c != d``: take ``c``
    - ``a != d`` and ``c == d``: keep ``a``
    - ``a != d`` and ``c != d``: recurse into compatible collections,
      otherwise ``merge(a, c)``

    A key missing from accumulated takes candidate's value. Keys of
    accumulated that candidate lacks are kept. Equality is structural.

    Args:
        default: Default layer snapshot, a structural superset of candidate
        accumulated: Value merged from the previous layers
        candidate: Value of the current layer

    Returns:
        New accumulated value

    Raises:
        ConfigMergeError: If candidate holds a key the default does not declare
    """
    return _merge3(default, accumulated, candidate, "")


def _merge3(default: Value, accumulated: Value, candidate: Value, path: str) -> Value:
    if not (compatible(default, candidate) and compatible(accumulated, candidate)):
        return candidate

    default_entries = keyed_entries(default) or {}
    accumulated_entries = keyed_entries(accumulated) or {}
    candidate_entries = keyed_entries(candidate) or {}
    merged: dict[object, Value] = dict(accumulated_entries)

    for key, candidate_value in candidate_entries.items():
        key_path = _join(path, key)
        default_value = default_entries.get(key)
        if default_value is None:
            raise ConfigMergeError(
                f"Field '{key_path}' is not declared by the default layer",
                config_path=key_path,
            )

        accumulated_value = accumulated_entries.get(key)
        if accumulated_value is None:
            merged[key] = candidate_value
            continue

        accumulated_set = accumulated_value != default_value
        candidate_set = candidate_value != default_value
        if not accumulated_set and not candidate_set:
            merged[key] = default_value
        elif not accumulated_set:
            merged[key] = candidate_value
        elif not candidate_set:
            merged[key] = accumulated_value
        elif compatible(default_value, candidate_value) and compatible(accumulated_value, candidate_value):
            merged[key] = _merge3(default_value, accumulated_value, candidate_value, key_path)
        else:
            merged[key] = merge(accumulated_value, candidate_value)

    return _rebuild(candidate, merged)


def changed_paths(before: Value, after: Value) -> list[str]:
    """List the dotted paths whose value differs between two values.

    Args:
        before: Earlier value
        after: Later value

    Returns:
        Paths of changed leaves, in after's key order. The root path is ""
    """
    return _changed_paths(before, after, "")


def _changed_paths(before: Value, after: Value, path: str) -> list[str]:
    if before == after:
        return []
    if not compatible(before, after):
        return [path]

    before_entries = keyed_entries(before) or {}
    after_entries = keyed_entries(after) or {}
    paths: list[str] = []
    for key, after_value in after_entries.items():
        before_value = before_entries.get(key)
        if before_value is None:
            paths.append(_join(path, key))
        else:
            paths.extend(_changed_paths(before_value, after_value, _join(path, key)))
    for key in before_entries:
        if key not in after_entries:
            paths.append(_join(path, key))
    return paths
