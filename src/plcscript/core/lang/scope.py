"""
Lexical binding environments shared by the analyzer and the interpreter.

A Scope holds two tables: variables keyed by name and functions keyed by
name and arity (overloading by parameter count only). Lookups walk the
parent chain; a child scope may shadow, never replace, an outer binding.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING

from plcscript.core.errors import ScopeError

if TYPE_CHECKING:
    from plcscript.core.lang.types import Type
    from plcscript.core.lang.values import RuntimeValue


@dataclass
class Variable:
    """A variable binding. ``value`` is the only mutable part."""

    name: str
    jvm_name: str
    type: Type
    value: RuntimeValue


@dataclass(frozen=True)
class Function:
    """
    A function binding shared by built-ins and user-defined methods.

    Attributes:
        name: Source name
        jvm_name: Name written by the Java emitter
        parameter_types: Declared parameter types, positionally
        return_type: Declared return type
        behavior: Callable receiving the evaluated arguments
    """

    name: str
    jvm_name: str
    parameter_types: tuple[Type, ...]
    return_type: Type
    behavior: Callable[[list[RuntimeValue]], RuntimeValue]

    @property
    def arity(self) -> int:
        return len(self.parameter_types)

    def invoke(self, arguments: list[RuntimeValue]) -> RuntimeValue:
        return self.behavior(arguments)


class Scope:
    """A lexical scope with an optional parent."""

    def __init__(self, parent: Scope | None = None) -> None:
        self.parent = parent
        self._variables: dict[str, Variable] = {}
        self._functions: dict[tuple[str, int], Function] = {}
        self._frozen = False

    def freeze(self) -> Scope:
        """Make this scope read-only; later definitions raise ScopeError."""
        self._frozen = True
        return self

    @property
    def frozen(self) -> bool:
        return self._frozen

    def _check_writable(self) -> None:
        if self._frozen:
            raise ScopeError("Cannot define names in a read-only scope.")

    # -- Variables --

    def define_variable(
        self, name: str, jvm_name: str, type: Type, value: RuntimeValue
    ) -> Variable:
        self._check_writable()
        if name in self._variables:
            raise ScopeError(f"The variable {name} is already defined in this scope.")
        variable = Variable(name=name, jvm_name=jvm_name, type=type, value=value)
        self._variables[name] = variable
        return variable

    def lookup_variable(self, name: str) -> Variable:
        scope: Scope | None = self
        while scope is not None:
            if name in scope._variables:
                return scope._variables[name]
            scope = scope.parent
        raise ScopeError(f"The variable {name} is not defined in this scope.")

    def has_variable(self, name: str) -> bool:
        """Check if a variable is defined in this immediate scope."""
        return name in self._variables

    # -- Functions --

    def define_function(
        self,
        name: str,
        jvm_name: str,
        parameter_types: Sequence[Type],
        return_type: Type,
        behavior: Callable[[list[RuntimeValue]], RuntimeValue],
    ) -> Function:
        self._check_writable()
        key = (name, len(parameter_types))
        if key in self._functions:
            raise ScopeError(
                f"The function {name}/{key[1]} is already defined in this scope."
            )
        function = Function(
            name=name,
            jvm_name=jvm_name,
            parameter_types=tuple(parameter_types),
            return_type=return_type,
            behavior=behavior,
        )
        self._functions[key] = function
        return function

    def lookup_function(self, name: str, arity: int) -> Function:
        scope: Scope | None = self
        while scope is not None:
            function = scope._functions.get((name, arity))
            if function is not None:
                return function
            scope = scope.parent
        raise ScopeError(f"The function {name}/{arity} is not defined in this scope.")

    def has_function(self, name: str, arity: int) -> bool:
        """Check if a function is defined in this immediate scope."""
        return (name, arity) in self._functions

    def __repr__(self) -> str:
        names = ", ".join(self._variables)
        funcs = ", ".join(f"{n}/{a}" for n, a in self._functions)
        return f"Scope(variables=[{names}], functions=[{funcs}])"
