"""Static types and runtime value formatting."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum, auto
from math import isinf, isnan
from typing import TYPE_CHECKING, ClassVar, Optional, Union

if TYPE_CHECKING:
    from .parser import Literal

Value = Union[int, float, bool, str, list]


class TypeKind(Enum):
    FLOAT = auto()
    INT = auto()
    BOOL = auto()
    STRING = auto()
    ARRAY = auto()
    ANY = auto()


_NAMES = {
    TypeKind.INT: "int",
    TypeKind.FLOAT: "float",
    TypeKind.BOOL: "bool",
    TypeKind.STRING: "string",
    TypeKind.ANY: "any",
}


@dataclass(frozen=True, eq=False)
class Type:
    """A language type. ``any`` matches any scalar type, but not itself or arrays."""

    kind: TypeKind
    element: Optional[Type] = None

    INT: ClassVar[Type]
    FLOAT: ClassVar[Type]
    BOOL: ClassVar[Type]
    STRING: ClassVar[Type]
    ANY: ClassVar[Type]

    def __post_init__(self) -> None:
        if (self.kind is TypeKind.ARRAY) != (self.element is not None):
            raise ValueError("only array types carry an element type")

    @classmethod
    def array_of(cls, element: Type) -> Type:
        return cls(TypeKind.ARRAY, element)

    def array_depth(self) -> int:
        """Number of array levels wrapped around the innermost type."""
        depth = 0
        current = self
        while current.kind is TypeKind.ARRAY:
            depth += 1
            current = current.element
        return depth

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Type):
            return NotImplemented
        kinds = (self.kind, other.kind)
        if kinds == (TypeKind.ARRAY, TypeKind.ARRAY):
            return self.element == other.element
        if TypeKind.ARRAY in kinds:
            return False
        if kinds == (TypeKind.ANY, TypeKind.ANY):
            return False
        if TypeKind.ANY in kinds:
            return True
        return self.kind is other.kind

    def __hash__(self) -> int:
        return hash(self.array_depth())

    def __str__(self) -> str:
        if self.kind is TypeKind.ARRAY:
            return f"[{self.element}]"
        return _NAMES[self.kind]


Type.INT = Type(TypeKind.INT)
Type.FLOAT = Type(TypeKind.FLOAT)
Type.BOOL = Type(TypeKind.BOOL)
Type.STRING = Type(TypeKind.STRING)
Type.ANY = Type(TypeKind.ANY)


def _format_float(number: float) -> str:
    if isnan(number):
        return "NaN"
    if isinf(number):
        return "inf" if number > 0 else "-inf"
    text = format(Decimal(repr(number)), "f")
    if text.endswith(".0"):
        text = text[:-2]
    return text


def format_value(value: Value, value_type: Type) -> str:
    """Render a runtime value the way the VM prints results."""
    kind = value_type.kind
    if kind is TypeKind.FLOAT:
        return _format_float(float(value))
    if kind is TypeKind.INT:
        return str(int(value))
    if kind is TypeKind.BOOL:
        return "true" if value else "false"
    if kind is TypeKind.STRING:
        return f'"{value}"'
    if kind is TypeKind.ARRAY:
        items = " ".join(format_value(item, value_type.element) for item in value)
        return f"[{items}]"
    raise ValueError("cannot format a value of type any")


def value_from_literal(literal: Literal) -> Value:
    """Runtime value held by a source literal."""
    return literal.value