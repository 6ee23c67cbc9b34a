"""Generic value model for layered configuration.

This module defines the closed tagged union that every configuration source is
converted into before merging. One frozen dataclass exists per shape a
serializable value can take:

- Scalars: Unit, Bool, Int, Float, Char, Str, Bytes
- Optionality: Nothing, Some
- Named unit markers: UnitStruct, UnitVariant
- Wrappers: NewtypeStruct, NewtypeVariant
- Sequences: Seq, Tuple, TupleStruct, TupleVariant
- Keyed collections: Map, Struct, StructVariant

All values are immutable, hashable and compare by deep structural equality.
Keyed collections keep insertion order for deterministic output, but equality
ignores it.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Final, override


class IntKind(Enum):
    """Integer width and signedness."""

    I8 = ("i8", True, 8)
    I16 = ("i16", True, 16)
    I32 = ("i32", True, 32)
    I64 = ("i64", True, 64)
    I128 = ("i128", True, 128)
    U8 = ("u8", False, 8)
    U16 = ("u16", False, 16)
    U32 = ("u32", False, 32)
    U64 = ("u64", False, 64)
    U128 = ("u128", False, 128)

    def __init__(self, label: str, signed: bool, bits: int) -> None:
        self.label: str = label
        self.signed: bool = signed
        self.bits: int = bits

    @property
    def min_value(self) -> int:
        """Smallest integer representable by this kind."""
        return -(1 << (self.bits - 1)) if self.signed else 0

    @property
    def max_value(self) -> int:
        """Largest integer representable by this kind."""
        return (1 << (self.bits - 1)) - 1 if self.signed else (1 << self.bits) - 1

    def contains(self, value: int) -> bool:
        """Check whether value fits in this kind."""
        return self.min_value <= value <= self.max_value

    @classmethod
    def for_value(cls, value: int) -> IntKind:
        """Pick the narrowest of I64, U64, I128, U128 that holds value.

        Args:
            value: Python integer to classify

        Returns:
            Integer kind able to represent value

        Raises:
            ValueError: If value does not fit in 128 bits
        """
        for kind in (cls.I64, cls.U64, cls.I128, cls.U128):
            if kind.contains(value):
                return kind
        msg = f"Integer {value} does not fit in 128 bits"
        raise ValueError(msg)

    @override
    def __str__(self) -> str:
        return self.label


class FloatKind(Enum):
    """Floating point width."""

    F32 = "f32"
    F64 = "f64"

    @override
    def __str__(self) -> str:
        return self.value


class Value:
    """Base class of every generic value."""

    __slots__ = ()


# Scalars


@dataclass(frozen=True, slots=True)
class Unit(Value):
    """Absence marker carrying no data."""


@dataclass(frozen=True, slots=True)
class Bool(Value):
    """Boolean scalar."""

    value: bool


@dataclass(frozen=True, slots=True)
class Int(Value):
    """Integer scalar of a given width and signedness."""

    value: int
    kind: IntKind = IntKind.I64

    def __post_init__(self) -> None:
        if isinstance(self.value, bool) or not isinstance(self.value, int):
            msg = f"Int requires an integer, got {type(self.value).__name__}"
            raise TypeError(msg)
        if not self.kind.contains(self.value):
            msg = f"Integer {self.value} out of range for {self.kind}"
            raise ValueError(msg)


@dataclass(frozen=True, slots=True)
class Float(Value):
    """Floating point scalar of a given width."""

    value: float
    kind: FloatKind = FloatKind.F64


@dataclass(frozen=True, slots=True)
class Char(Value):
    """Single character."""

    value: str

    def __post_init__(self) -> None:
        if len(self.value) != 1:
            msg = f"Char requires exactly one character, got {self.value!r}"
            raise ValueError(msg)


@dataclass(frozen=True, slots=True)
class Str(Value):
    """Text string."""

    value: str


@dataclass(frozen=True, slots=True)
class Bytes(Value):
    """Byte string."""

    value: bytes


# Optionality


@dataclass(frozen=True, slots=True)
class Nothing(Value):
    """Optional value that is absent."""


@dataclass(frozen=True, slots=True)
class Some(Value):
    """Optional value that is present."""

    value: Value


# Named unit markers


@dataclass(frozen=True, slots=True)
class UnitStruct(Value):
    """Named struct without fields."""

    name: str


@dataclass(frozen=True, slots=True)
class UnitVariant(Value):
    """Enum variant without payload."""

    name: str
    variant_index: int
    variant: str


# Wrappers


@dataclass(frozen=True, slots=True)
class NewtypeStruct(Value):
    """Named wrapper around a single value."""

    name: str
    value: Value


@dataclass(frozen=True, slots=True)
class NewtypeVariant(Value):
    """Enum variant wrapping a single value."""

    name: str
    variant_index: int
    variant: str
    value: Value


# Sequences


def _freeze_items(items: Iterable[Value]) -> tuple[Value, ...]:
    return tuple(items)


@dataclass(frozen=True, slots=True)
class Seq(Value):
    """Variable length ordered sequence."""

    items: tuple[Value, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "items", _freeze_items(self.items))


@dataclass(frozen=True, slots=True)
class Tuple(Value):
    """Fixed arity ordered sequence."""

    items: tuple[Value, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "items", _freeze_items(self.items))


@dataclass(frozen=True, slots=True)
class TupleStruct(Value):
    """Named fixed arity sequence."""

    name: str
    items: tuple[Value, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "items", _freeze_items(self.items))


@dataclass(frozen=True, slots=True)
class TupleVariant(Value):
    """Enum variant carrying a fixed arity sequence."""

    name: str
    variant_index: int
    variant: str
    items: tuple[Value, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "items", _freeze_items(self.items))


# Keyed collections


def _hash_entries(entries: Mapping[object, Value]) -> int:
    return hash(frozenset(entries.items()))


@dataclass(frozen=True, slots=True)
class Map(Value):
    """Insertion ordered mapping of unique value keys to values.

    The entries dict is private to the instance and must be treated as
    read-only.
    """

    entries: dict[Value, Value]

    def __init__(self, entries: Mapping[Value, Value] | Iterable[tuple[Value, Value]] = ()) -> None:
        object.__setattr__(self, "entries", dict(entries))

    @override
    def __hash__(self) -> int:
        return _hash_entries(self.entries)


@dataclass(frozen=True, slots=True)
class Struct(Value):
    """Named struct with ordered string keyed fields."""

    name: str
    fields: dict[str, Value]

    def __init__(self, name: str, fields: Mapping[str, Value] | Iterable[tuple[str, Value]] = ()) -> None:
        object.__setattr__(self, "name", name)
        object.__setattr__(self, "fields", dict(fields))

    @override
    def __hash__(self) -> int:
        return hash((self.name, _hash_entries(self.fields)))


@dataclass(frozen=True, slots=True)
class StructVariant(Value):
    """Enum variant carrying named fields."""

    name: str
    variant_index: int
    variant: str
    fields: dict[str, Value]

    def __init__(
        self,
        name: str,
        variant_index: int,
        variant: str,
        fields: Mapping[str, Value] | Iterable[tuple[str, Value]] = (),
    ) -> None:
        object.__setattr__(self, "name", name)
        object.__setattr__(self, "variant_index", variant_index)
        object.__setattr__(self, "variant", variant)
        object.__setattr__(self, "fields", dict(fields))

    @override
    def __hash__(self) -> int:
        return hash((self.name, self.variant_index, self.variant, _hash_entries(self.fields)))


UNIT: Final[Unit] = Unit()
NOTHING: Final[Nothing] = Nothing()


def keyed_entries(value: Value) -> Mapping[object, Value] | None:
    """Return the entries of a keyed collection, or None for other shapes.

    Args:
        value: Value to inspect

    Returns:
        The key to value mapping of a Map, Struct or StructVariant
    """
    match value:
        case Map(entries=entries):
            return entries
        case Struct(fields=fields) | StructVariant(fields=fields):
            return fields
        case _:
            return None
