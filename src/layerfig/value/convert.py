"""Conversion between typed Python objects and generic values.

``to_value`` turns pydantic models, dataclasses, named tuples, enums, builtin
containers and scalars into the generic value model. ``to_python`` turns a
value back into plain Python data, and ``project`` validates a value into a
target type with pydantic, reporting fields the target does not declare.
"""

from __future__ import annotations

import dataclasses
import functools
import logging
import types
from collections.abc import Callable, Mapping, Sequence
from enum import Enum
from typing import Annotated, Any, Union, get_args, get_origin, get_type_hints

from pydantic import BaseModel, TypeAdapter, ValidationError
from pydantic_core import PydanticSerializationError, to_jsonable_python

from layerfig.exceptions import ConfigValidationError
from layerfig.value.model import (
    NOTHING,
    Bool,
    Bytes,
    Char,
    Float,
    Int,
    IntKind,
    Map,
    NewtypeStruct,
    NewtypeVariant,
    Nothing,
    Seq,
    Some,
    Str,
    Struct,
    StructVariant,
    Tuple,
    TupleStruct,
    TupleVariant,
    Unit,
    UnitStruct,
    UnitVariant,
    Value,
    keyed_entries,
)

logger = logging.getLogger(__name__)

# Callback invoked with the dotted path of a field the target type does not declare
type UnknownFieldObserver = Callable[[str], None]

_SEQUENCE_ORIGINS: frozenset[object] = frozenset({list, set, frozenset, Sequence})
_MAPPING_ORIGINS: frozenset[object] = frozenset({dict, Mapping})


def to_value(obj: object) -> Value:
    """Convert a Python object into a generic value.

    Args:
        obj: Object to convert

    Returns:
        Generic value snapshot of obj

    Raises:
        TypeError: If obj has no serializable representation
    """
    match obj:
        case Value():
            return obj
        case None:
            return NOTHING
        case Enum():
            return _enum_to_value(obj)
        case bool():
            return Bool(obj)
        case int():
            return Int(obj, IntKind.for_value(obj))
        case float():
            return Float(obj)
        case str():
            return Str(obj)
        case bytes() | bytearray():
            return Bytes(bytes(obj))
        case BaseModel():
            return _model_to_value(obj)
        case _ if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
            return _dataclass_to_value(obj)
        case tuple() if _is_namedtuple(obj):
            return TupleStruct(type(obj).__name__, [to_value(item) for item in obj])
        case tuple():
            return Tuple([to_value(item) for item in obj])
        case Mapping():
            return Map((to_value(k), to_value(v)) for k, v in obj.items())  # pyright: ignore[reportUnknownVariableType]
        case list() | set() | frozenset():
            return Seq([to_value(item) for item in obj])  # pyright: ignore[reportUnknownVariableType]
        case _:
            try:
                jsonable: object = to_jsonable_python(obj)
            except PydanticSerializationError as e:
                msg = f"Cannot convert {type(obj).__name__} to a value"
                raise TypeError(msg) from e
            return to_value(jsonable)


def _enum_to_value(member: Enum) -> UnitVariant:
    enum_type = type(member)
    return UnitVariant(enum_type.__name__, list(enum_type).index(member), member.name)


def _is_namedtuple(obj: tuple[object, ...]) -> bool:
    return hasattr(type(obj), "_fields")


def _wrap_optional(raw: object, annotation: object) -> Value:
    value = to_value(raw)
    if raw is not None and is_optional(annotation):
        return Some(value)
    return value


def _model_to_value(model: BaseModel) -> Struct:
    model_type = type(model)
    fields: dict[str, Value] = {}
    for name, field in model_type.model_fields.items():
        raw: object = getattr(model, name)
        fields[field.alias or name] = _wrap_optional(raw, field.annotation)
    return Struct(model_type.__name__, fields)


def _dataclass_to_value(obj: object) -> Struct:
    hints = dataclass_hints(type(obj))
    fields: dict[str, Value] = {}
    for field in dataclasses.fields(obj):  # pyright: ignore[reportArgumentType]
        raw: object = getattr(obj, field.name)
        fields[field.name] = _wrap_optional(raw, hints.get(field.name, field.type))
    return Struct(type(obj).__name__, fields)


def dataclass_hints(cls: type) -> dict[str, object]:
    """Resolve dataclass field annotations, keeping unresolved ones as written."""
    try:
        return dict(get_type_hints(cls))
    except NameError:
        logger.debug(f"Unresolved annotations on {cls.__name__}, using raw field types")
        return {field.name: field.type for field in dataclasses.fields(cls)}


def strip_annotated(annotation: object) -> object:
    """Return the underlying type of an Annotated[...] annotation."""
    while get_origin(annotation) is Annotated:
        annotation = get_args(annotation)[0]
    return annotation


def is_union(annotation: object) -> bool:
    """Check whether annotation is a union (``X | Y`` or ``Union[X, Y]``)."""
    origin = get_origin(annotation)
    return origin is Union or origin is types.UnionType


def is_optional(annotation: object) -> bool:
    """Check whether annotation admits None."""
    annotation = strip_annotated(annotation)
    return is_union(annotation) and type(None) in get_args(annotation)


def to_python(value: Value) -> object:
    """Convert a generic value into plain Python data.

    Structs and maps become dicts, optional values unwrap, unit markers become
    None, unit variants become their variant name and data carrying variants
    become a single key dict of variant name to payload.

    Args:
        value: Value to convert

    Returns:
        Plain Python data
    """
    match value:
        case Unit() | Nothing() | UnitStruct():
            return None
        case Bool(value=v):
            return v
        case Int(value=v):
            return v
        case Float(value=v):
            return v
        case Char(value=v) | Str(value=v):
            return v
        case Bytes(value=v):
            return v
        case Some(value=inner) | NewtypeStruct(value=inner):
            return to_python(inner)
        case UnitVariant(variant=variant):
            return variant
        case NewtypeVariant(variant=variant, value=inner):
            return {variant: to_python(inner)}
        case Seq(items=items):
            return [to_python(item) for item in items]
        case Tuple(items=items) | TupleStruct(items=items):
            return tuple(to_python(item) for item in items)
        case TupleVariant(variant=variant, items=items):
            return {variant: [to_python(item) for item in items]}
        case Map(entries=entries):
            return {_key_to_python(k): to_python(v) for k, v in entries.items()}
        case Struct(fields=fields):
            return {k: to_python(v) for k, v in fields.items()}
        case StructVariant(variant=variant, fields=fields):
            return {variant: {k: to_python(v) for k, v in fields.items()}}
        case _:
            msg = f"Unsupported value type: {type(value).__name__}"
            raise TypeError(msg)


def _key_to_python(key: Value) -> object:
    converted = to_python(key)
    if isinstance(converted, list):
        return tuple(converted)  # pyright: ignore[reportUnknownArgumentType]
    return converted


@functools.cache
def _adapter(target: object) -> TypeAdapter[Any]:  # pyright: ignore[reportExplicitAny]
    return TypeAdapter(target)


def project[T](
    value: Value,
    target: type[T],
    on_unknown: UnknownFieldObserver | None = None,
) -> T:
    """Interpret a generic value as an instance of target.

    The value is first shaped using the target's annotations (enum members
    resolved by name, optional values unwrapped), then validated by pydantic.

    Args:
        value: Value to project
        target: Type to validate into (pydantic model, dataclass or any type
            pydantic can validate)
        on_unknown: Called once with the dotted path of every field present
            in value but not declared by the target

    Returns:
        Validated instance of target

    Raises:
        ConfigValidationError: If the value does not satisfy the target type
    """
    data = _prepare(value, target, "", on_unknown)
    try:
        return _adapter(target).validate_python(data)  # pyright: ignore[reportAny]
    except ValidationError as e:
        raise ConfigValidationError(
            f"Value does not match {getattr(target, '__name__', str(target))}",
            pydantic_error=e,
        ) from e


def _join(path: str, key: object) -> str:
    return f"{path}.{key}" if path else str(key)


def declared_fields(target: type) -> dict[str, object] | None:
    """Map every accepted field key of a model or dataclass to its annotation.

    Pydantic fields are reachable by alias and by name.

    Args:
        target: Type to inspect

    Returns:
        Field annotations by key, or None if target declares no fields
    """
    if issubclass(target, BaseModel):
        declared: dict[str, object] = {}
        for name, field in target.model_fields.items():
            declared[name] = field.annotation
            if field.alias:
                declared[field.alias] = field.annotation
        return declared
    if dataclasses.is_dataclass(target):
        return dataclass_hints(target)
    return None


def _prepare(
    value: Value,
    annotation: object,
    path: str,
    on_unknown: UnknownFieldObserver | None,
) -> object:
    annotation = strip_annotated(annotation)

    if is_union(annotation):
        match value:
            case Nothing():
                return None
            case Some(value=inner):
                value = inner
            case _:
                pass
        arms = [arm for arm in get_args(annotation) if arm is not type(None)]
        if len(arms) == 1:
            return _prepare(value, arms[0], path, on_unknown)
        # Ambiguous unions are left to pydantic's smart mode
        return to_python(value)

    if isinstance(annotation, type) and get_origin(annotation) is None:
        if issubclass(annotation, Enum) and isinstance(value, UnitVariant):
            member = annotation.__members__.get(value.variant)
            return member if member is not None else value.variant
        declared = declared_fields(annotation)
        entries = keyed_entries(value)
        if declared is not None and entries is not None:
            return _prepare_fields(entries, declared, path, on_unknown)

    origin = get_origin(annotation)
    args = get_args(annotation)
    match value:
        case Seq(items=items) | Tuple(items=items) if origin in _SEQUENCE_ORIGINS and args:
            return [_prepare(item, args[0], f"{path}[{i}]", on_unknown) for i, item in enumerate(items)]
        case Seq(items=items) | Tuple(items=items) | TupleStruct(items=items) if origin is tuple and args:
            if len(args) == 2 and args[1] is Ellipsis:
                return tuple(_prepare(item, args[0], f"{path}[{i}]", on_unknown) for i, item in enumerate(items))
            if len(args) == len(items):
                return tuple(
                    _prepare(item, arg, f"{path}[{i}]", on_unknown)
                    for i, (item, arg) in enumerate(zip(items, args, strict=True))
                )
        case Map(entries=entries) if origin in _MAPPING_ORIGINS and len(args) == 2:
            data: dict[object, object] = {}
            for k, v in entries.items():
                key = _prepare(k, args[0], path, None)
                data[key] = _prepare(v, args[1], _join(path, key), on_unknown)
            return data
        case Struct(fields=fields) if origin in _MAPPING_ORIGINS and len(args) == 2:
            return {k: _prepare(v, args[1], _join(path, k), on_unknown) for k, v in fields.items()}
        case _:
            pass
    return to_python(value)


def _prepare_fields(
    entries: Mapping[object, Value],
    declared: Mapping[str, object],
    path: str,
    on_unknown: UnknownFieldObserver | None,
) -> dict[object, object]:
    data: dict[object, object] = {}
    for raw_key, field_value in entries.items():
        key = to_python(raw_key) if isinstance(raw_key, Value) else raw_key
        field_path = _join(path, key)
        if isinstance(key, str) and key in declared:
            data[key] = _prepare(field_value, declared[key], field_path, on_unknown)
            continue
        if on_unknown is not None:
            on_unknown(field_path)
        data[key] = to_python(field_value)
    return data
