"""
Static types for plcscript.

Types are interned singletons compared by identity. Each carries its
source name, the name the Java emitter writes, and a member Scope holding
the fields and methods available through ``value.member`` syntax.

Methods in a member scope take the receiver as their first parameter, so
a method called with N arguments is stored with arity N + 1.

Member scopes are frozen once registration finishes. A host type defines
its members in the callback passed to :func:`register_type`:

    def counter_members(counter: Type) -> None:
        counter.scope.define_function("bump", "bump", [counter, INTEGER], INTEGER, bump)

    COUNTER = register_type("Counter", "Counter", counter_members)
"""

from __future__ import annotations

from collections.abc import Callable

from plcscript.core.errors import ScopeError
from plcscript.core.lang.scope import Function, Scope, Variable


class Type:
    """An interned static type."""

    __slots__ = ("name", "jvm_name", "scope")

    def __init__(self, name: str, jvm_name: str, scope: Scope | None = None) -> None:
        self.name = name
        self.jvm_name = jvm_name
        self.scope = scope if scope is not None else Scope(None)

    def get_field(self, name: str) -> Variable:
        return self.scope.lookup_variable(name)

    def get_method(self, name: str, arity: int) -> Function:
        return self.scope.lookup_function(name, arity + 1)

    def __repr__(self) -> str:
        return f"Type({self.name})"

    def __str__(self) -> str:
        return self.name


_TYPES: dict[str, Type] = {}


def register_type(
    name: str, jvm_name: str, members: Callable[[Type], None] | None = None
) -> Type:
    """Register (or return the already registered) type named ``name``.

    Args:
        name: Source type name.
        jvm_name: Name written by the Java emitter.
        members: Called once with the new type to define its fields and
            methods; the member scope is frozen afterwards. Ignored when
            the type is already registered.

    Raises:
        ScopeError: If ``name`` is registered with a different JVM name.
    """
    existing = _TYPES.get(name)
    if existing is not None:
        if existing.jvm_name != jvm_name:
            raise ScopeError(
                f"The type {name} is already registered as {existing.jvm_name}."
            )
        return existing
    type_ = Type(name, jvm_name)
    if members is not None:
        members(type_)
    type_.scope.freeze()
    _TYPES[name] = type_
    return type_


def get_type(name: str) -> Type:
    """Resolve a source type name.

    Raises:
        ScopeError: If no type with that name is registered.
    """
    try:
        return _TYPES[name]
    except KeyError:
        raise ScopeError(f"Unknown type {name}.") from None


def registered_types() -> list[Type]:
    return list(_TYPES.values())


ANY = register_type("Any", "Object")
NIL = register_type("Nil", "Void")
# Constraint type: only ever an assignability target, never a value's type.
COMPARABLE = register_type("Comparable", "Comparable")
BOOLEAN = register_type("Boolean", "boolean")
INTEGER = register_type("Integer", "int")
DECIMAL = register_type("Decimal", "double")
CHARACTER = register_type("Character", "char")
STRING = register_type("String", "String")
INTEGER_ITERABLE = register_type("IntegerIterable", "Iterable<Integer>")

COMPARABLE_TYPES = frozenset({INTEGER, DECIMAL, CHARACTER, STRING})
NUMERIC_TYPES = frozenset({INTEGER, DECIMAL})
