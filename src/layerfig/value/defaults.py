"""Default detection and declared zero values.

``is_default`` tells whether a value equals the zero value of its shape.
``zero_value`` builds the zero value a type declares: field defaults where the
type has them, the zero of each annotation otherwise.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Mapping, Sequence
from enum import Enum
from typing import Literal, get_args, get_origin

from pydantic import BaseModel
from pydantic_core import PydanticUndefined

from layerfig.value.convert import dataclass_hints, is_optional, strip_annotated, to_value
from layerfig.value.model import (
    NOTHING,
    UNIT,
    Bool,
    Bytes,
    Char,
    Float,
    Int,
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
)


def is_default(value: Value) -> bool:
    """Check whether a value is the zero value of its shape.

    Unit variants are never default: nothing tells which variant of an enum
    the schema treats as its zero case. Newtype variants follow the same rule.

    Args:
        value: Value to classify

    Returns:
        True if value is equivalent to the zero value of its shape
    """
    match value:
        case Bool(value=v):
            return not v
        case Int(value=v):
            return v == 0
        case Float(value=v):
            return v == 0.0
        case Char(value=v):
            return v == "\0"
        case Str(value=v):
            return v == ""
        case Bytes(value=v):
            return v == b""
        case Unit() | Nothing() | UnitStruct():
            return True
        case Some(value=inner) | NewtypeStruct(value=inner):
            return is_default(inner)
        case UnitVariant() | NewtypeVariant():
            return False
        case Seq(items=items) | Tuple(items=items) | TupleStruct(items=items) | TupleVariant(items=items):
            return not items
        case Map(entries=entries):
            return not entries
        case Struct(fields=fields) | StructVariant(fields=fields):
            return not fields
        case _:
            msg = f"Unsupported value type: {type(value).__name__}"
            raise TypeError(msg)


def zero_value(target: object) -> Value:
    """Build the declared zero value of a type.

    Models and dataclasses use their field defaults and fall back to the zero
    value of the field annotation for required fields.

    Args:
        target: Type or annotation to build the zero value for

    Returns:
        Zero value snapshot
    """
    target = strip_annotated(target)
    if is_optional(target):
        return NOTHING

    origin = get_origin(target)
    args = get_args(target)
    if origin is Literal:
        return to_value(args[0])
    if origin is tuple:
        if not args or (len(args) == 2 and args[1] is Ellipsis):
            return Tuple()
        return Tuple([zero_value(arg) for arg in args])
    if origin in (list, set, frozenset, Sequence):
        return Seq()
    if origin in (dict, Mapping):
        return Map()
    if origin is not None or not isinstance(target, type):
        return UNIT

    if issubclass(target, BaseModel):
        return _model_zero(target)
    if dataclasses.is_dataclass(target):
        return _dataclass_zero(target)
    if issubclass(target, Enum):
        members = list(target)
        return to_value(members[0]) if members else UNIT
    if issubclass(target, bool):
        return Bool(False)
    if issubclass(target, int):
        return Int(0)
    if issubclass(target, float):
        return Float(0.0)
    if issubclass(target, str):
        return Str("")
    if issubclass(target, bytes):
        return Bytes(b"")
    if issubclass(target, tuple):
        return Tuple()
    if issubclass(target, (list, set, frozenset)):
        return Seq()
    if issubclass(target, dict):
        return Map()
    return UNIT


def _field_default(raw: object, annotation: object) -> Value:
    value = to_value(raw)
    if raw is not None and is_optional(annotation):
        return Some(value)
    return value


def _model_zero(model: type[BaseModel]) -> Struct:
    fields: dict[str, Value] = {}
    for name, field in model.model_fields.items():
        key = field.alias or name
        if field.is_required():
            fields[key] = zero_value(field.annotation)
            continue
        default: object = field.get_default(call_default_factory=True)
        if default is PydanticUndefined:
            fields[key] = zero_value(field.annotation)
        else:
            fields[key] = _field_default(default, field.annotation)
    return Struct(model.__name__, fields)


def _dataclass_zero(cls: type) -> Struct:
    hints = dataclass_hints(cls)
    fields: dict[str, Value] = {}
    for field in dataclasses.fields(cls):
        annotation = hints.get(field.name, field.type)
        if field.default is not dataclasses.MISSING:
            fields[field.name] = _field_default(field.default, annotation)
        elif field.default_factory is not dataclasses.MISSING:
            fields[field.name] = _field_default(field.default_factory(), annotation)
        else:
            fields[field.name] = zero_value(annotation)
    return Struct(cls.__name__, fields)
