## sixbasic — Copyright © 2025, Alex J. Champandard.  Licensed under AGPLv3; see LICENSE! ⚘

import math
from enum import IntEnum
from types import MappingProxyType
from collections import namedtuple
from dataclasses import dataclass, field

from .errors import BasicTypeMismatch, BasicOverflow, BasicSubscriptOutOfRange


# Ordered by width, so numeric promotion is just `max()` of two kinds.
class Kind(IntEnum):
    INTEGER = 0
    LONG = 1
    SINGLE = 2
    DOUBLE = 3
    STRING = 4

    @property
    def is_numeric(self) -> bool:
        return self is not Kind.STRING

    @property
    def is_integral(self) -> bool:
        return self in (Kind.INTEGER, Kind.LONG)


SUFFIX_KINDS = {'%': Kind.INTEGER, '&': Kind.LONG, '!': Kind.SINGLE, '#': Kind.DOUBLE, '$': Kind.STRING}
TYPE_NAME_KINDS = {'INTEGER': Kind.INTEGER, 'LONG': Kind.LONG, 'SINGLE': Kind.SINGLE, 'DOUBLE': Kind.DOUBLE, 'STRING': Kind.STRING}
LIMITS = {Kind.INTEGER: (-32768, 32767), Kind.LONG: (-2**31, 2**31 - 1)}


# Value is a namedtuple to stay small and hashable, yet provide kind/data accessors.
class Value(namedtuple('Value', ['kind', 'data'])):
    __slots__ = ()

    def __repr__(self):
        return f"{self.kind.name}({self.data!r})"

    @property
    def truthy(self) -> bool:
        if self.kind is Kind.STRING:
            raise BasicTypeMismatch("Type mismatch: string used as a condition.")
        return self.data != 0


TRUE = Value(Kind.INTEGER, -1)
FALSE = Value(Kind.INTEGER, 0)


def default_value(kind: Kind) -> Value:
    if kind is Kind.STRING: return Value(kind, "")
    return Value(kind, 0 if kind.is_integral else 0.0)

def kind_of_name(name: str, default: Kind = Kind.SINGLE) -> Kind:
    return SUFFIX_KINDS.get(name[-1:], default)

def number(kind: Kind, data) -> Value:
    """Build a numeric value, widening integer kinds that overflow instead of failing."""
    if kind.is_integral:
        if kind is Kind.INTEGER and not LIMITS[Kind.INTEGER][0] <= data <= LIMITS[Kind.INTEGER][1]:
            kind = Kind.LONG
        if kind is Kind.LONG and not LIMITS[Kind.LONG][0] <= data <= LIMITS[Kind.LONG][1]:
            return number(Kind.DOUBLE, float(data))
        return Value(kind, int(data))
    data = float(data)
    if math.isinf(data) or math.isnan(data):
        raise BasicOverflow("Overflow in numeric result.")
    return Value(kind, data)

def boolean(flag: bool) -> Value:
    return TRUE if flag else FALSE

def coerce(value: Value, kind: Kind) -> Value:
    """Convert `value` for storage into a slot of `kind`, as assignment does."""
    if value.kind is kind:
        return value
    if (kind is Kind.STRING) != (value.kind is Kind.STRING):
        raise BasicTypeMismatch(f"Type mismatch: cannot store {value.kind.name} into {kind.name}.")
    if kind.is_integral:
        rounded = round(value.data)
        lo, hi = LIMITS[kind]
        if not lo <= rounded <= hi:
            raise BasicOverflow(f"Overflow: {rounded} does not fit in {kind.name}.")
        return Value(kind, rounded)
    return Value(kind, float(value.data))


class BasicArray:
    """Dense, zero-based, fixed-extent array of one kind; `extents` are the upper bounds."""

    def __init__(self, kind: Kind, extents: tuple):
        if any(e < 0 for e in extents):
            raise BasicSubscriptOutOfRange(f"Array dimension {extents} is negative.")
        self.kind = kind
        self.extents = tuple(extents)
        self.data = [default_value(kind).data] * math.prod(e + 1 for e in self.extents)

    def _offset(self, indices: tuple) -> int:
        if len(indices) != len(self.extents):
            raise BasicSubscriptOutOfRange(f"Array has {len(self.extents)} dimension(s), got {len(indices)} subscript(s).")
        offset = 0
        for index, extent in zip(indices, self.extents):
            if not 0 <= index <= extent:
                raise BasicSubscriptOutOfRange(f"Subscript {index} out of range 0..{extent}.")
            offset = offset * (extent + 1) + index
        return offset

    def get(self, indices: tuple) -> Value:
        return Value(self.kind, self.data[self._offset(indices)])

    def set(self, indices: tuple, value: Value) -> None:
        self.data[self._offset(indices)] = coerce(value, self.kind).data

    def __len__(self):
        return len(self.data)


# Frames for the control stack; WHILE and DO loops need none as their links are static.
GosubFrame = namedtuple('GosubFrame', ['return_index'])
ForFrame = namedtuple('ForFrame', ['var', 'limit', 'step', 'body', 'loop'])


# Expression tree ─────────────────────────────────────────────────────────────────────────
Literal = namedtuple('Literal', ['value'])
Var = namedtuple('Var', ['name'])
ArrayRef = namedtuple('ArrayRef', ['name', 'indices'])
Call = namedtuple('Call', ['name', 'args'])
Unary = namedtuple('Unary', ['op', 'operand'])
Binary = namedtuple('Binary', ['op', 'left', 'right'])


@dataclass
class Statement:
    kind: str
    args: dict
    line: int
    column: int = 1
    label: object = None
    jump: int | None = None
    link: int | None = None

    def __repr__(self):
        return f"<{self.kind} @{self.line}>"


@dataclass(frozen=True)
class Program:
    statements: tuple
    labels: MappingProxyType
    data: tuple = ()
    data_labels: MappingProxyType = field(default_factory=lambda: MappingProxyType({}))
    source: str = ""
    filename: str | None = None

    def __len__(self):
        return len(self.statements)
