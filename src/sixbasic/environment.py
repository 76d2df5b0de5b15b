## sixbasic — Copyright © 2025, Alex J. Champandard.  Licensed under AGPLv3; see LICENSE! ⚘

from dataclasses import dataclass, field

from .types import Kind, Value, BasicArray, default_value, kind_of_name, coerce
from .errors import BasicArrayRedeclared


AUTO_DIM_EXTENT = 10


@dataclass
class Environment:
    """Flat, case-insensitive variable namespace owned by a single interpreter."""

    scalars: dict[str, Value] = field(default_factory=dict)
    arrays: dict[str, BasicArray] = field(default_factory=dict)
    declared: dict[str, Kind] = field(default_factory=dict)

    def kind_of(self, name: str) -> Kind:
        name = name.upper()
        return self.declared.get(name) or kind_of_name(name)

    def declare(self, name: str, kind: Kind) -> None:
        name = name.upper()
        self.declared[name] = kind
        if name in self.scalars:
            self.scalars[name] = coerce(self.scalars[name], kind)

    def get(self, name: str) -> Value:
        name = name.upper()
        if (value := self.scalars.get(name)) is None:
            value = self.scalars[name] = default_value(self.kind_of(name))
        return value

    def set(self, name: str, value: Value) -> Value:
        name = name.upper()
        value = self.scalars[name] = coerce(value, self.kind_of(name))
        return value

    def dim(self, name: str, extents: tuple, kind: Kind | None = None) -> BasicArray:
        name = name.upper()
        if name in self.arrays:
            raise BasicArrayRedeclared(f"Array `{name}` is already dimensioned.")
        if kind is not None:
            self.declared[name] = kind
        array = self.arrays[name] = BasicArray(kind or self.kind_of(name), extents)
        return array

    def array(self, name: str, rank: int) -> BasicArray:
        """Look up an array, dimensioning it to `AUTO_DIM_EXTENT` per subscript on first use."""
        name = name.upper()
        if (array := self.arrays.get(name)) is None:
            array = self.arrays[name] = BasicArray(self.kind_of(name), (AUTO_DIM_EXTENT,) * rank)
        return array

    def clear(self) -> None:
        self.scalars.clear()
        self.arrays.clear()
        self.declared.clear()
