"""
Runtime values for the plcscript interpreter.

A RuntimeValue is a tagged union: the ``kind`` tag names the
representation of ``value`` (``None``, ``bool``, ``int``, ``Decimal``, a
one-character ``str``, a ``str``, or an arbitrary host object). ``scope`` is
the member table used for ``value.field`` and ``value.method(...)``.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from decimal import Decimal
from enum import StrEnum, auto
from typing import TYPE_CHECKING, Any

from plcscript.core.errors import RuntimeTypeError
from plcscript.core.ir.nodes import Literal, LiteralKind

if TYPE_CHECKING:
    from plcscript.core.lang.scope import Scope, Variable


class ValueKind(StrEnum):
    """Representations a runtime value can have."""

    NIL = auto()
    BOOLEAN = auto()
    INTEGER = auto()
    DECIMAL = auto()
    CHARACTER = auto()
    STRING = auto()
    OBJECT = auto()


COMPARABLE_KINDS = frozenset(
    {ValueKind.INTEGER, ValueKind.DECIMAL, ValueKind.CHARACTER, ValueKind.STRING}
)
NUMERIC_KINDS = frozenset({ValueKind.INTEGER, ValueKind.DECIMAL})


@dataclass(frozen=True, slots=True)
class RuntimeValue:
    """An immutable runtime value."""

    kind: ValueKind
    value: Any = None
    scope: Scope | None = None

    def get_field(self, name: str) -> Variable:
        if self.scope is None:
            raise RuntimeTypeError(f"A {self.kind} value has no field {name}.")
        return self.scope.lookup_variable(name)

    def call_method(self, name: str, arguments: list[RuntimeValue]) -> RuntimeValue:
        if self.scope is None:
            raise RuntimeTypeError(f"A {self.kind} value has no method {name}.")
        function = self.scope.lookup_function(name, len(arguments) + 1)
        return function.invoke([self, *arguments])

    def with_scope(self, scope: Scope | None) -> RuntimeValue:
        return replace(self, scope=scope)

    def __str__(self) -> str:
        return to_text(self)


NIL = RuntimeValue(ValueKind.NIL)
TRUE = RuntimeValue(ValueKind.BOOLEAN, True)
FALSE = RuntimeValue(ValueKind.BOOLEAN, False)


def create(value: Any, scope: Scope | None = None) -> RuntimeValue:
    """Wrap a Python value, inferring its kind.

    Strings always become STRING values; use :func:`character` for
    characters.
    """
    if value is None:
        return NIL
    if isinstance(value, bool):
        return RuntimeValue(ValueKind.BOOLEAN, value, scope)
    if isinstance(value, int):
        return RuntimeValue(ValueKind.INTEGER, value, scope)
    if isinstance(value, Decimal):
        return RuntimeValue(ValueKind.DECIMAL, value, scope)
    if isinstance(value, str):
        return RuntimeValue(ValueKind.STRING, value, scope)
    return RuntimeValue(ValueKind.OBJECT, value, scope)


def boolean(value: bool) -> RuntimeValue:
    return TRUE if value else FALSE


def character(value: str) -> RuntimeValue:
    if len(value) != 1:
        raise ValueError(f"Expected a single character, got {value!r}")
    return RuntimeValue(ValueKind.CHARACTER, value)


def from_literal(literal: Literal) -> RuntimeValue:
    """Construct the runtime value of a literal node."""
    if literal.kind == LiteralKind.CHARACTER:
        return character(literal.value)
    return create(literal.value)


def to_text(value: RuntimeValue) -> str:
    """Textual representation used by ``print`` and string concatenation."""
    if value.kind == ValueKind.NIL:
        return "null"
    if value.kind == ValueKind.BOOLEAN:
        return "true" if value.value else "false"
    return str(value.value)
