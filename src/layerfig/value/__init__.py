"""Generic value model, default detection and typed conversion."""

from __future__ import annotations

from .convert import UnknownFieldObserver, project, to_python, to_value
from .defaults import is_default, zero_value
from .model import (
    NOTHING,
    UNIT,
    Bool,
    Bytes,
    Char,
    Float,
    FloatKind,
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
)

__all__ = [
    # Value model
    "Value",
    "Unit",
    "Bool",
    "Int",
    "IntKind",
    "Float",
    "FloatKind",
    "Char",
    "Str",
    "Bytes",
    "Nothing",
    "Some",
    "UnitStruct",
    "UnitVariant",
    "NewtypeStruct",
    "NewtypeVariant",
    "Seq",
    "Tuple",
    "TupleStruct",
    "TupleVariant",
    "Map",
    "Struct",
    "StructVariant",
    "UNIT",
    "NOTHING",
    # Defaults
    "is_default",
    "zero_value",
    # Conversion
    "UnknownFieldObserver",
    "project",
    "to_python",
    "to_value",
]
