"""Shared pytest fixtures for plcscript tests."""

from __future__ import annotations

import io

import pytest

from plcscript.core.lang import types, values
from plcscript.core.lang.builtins import create_root_scope
from plcscript.core.lang.scope import Scope
from plcscript.core.lang.types import Type
from plcscript.core.lang.values import RuntimeValue


class Counter:
    """Host object exposed to programs through the Counter type."""

    def __init__(self) -> None:
        self.count = 0

    def bump(self, amount: int) -> int:
        self.count += amount
        return self.count


@pytest.fixture
def output() -> io.StringIO:
    """Stream that receives everything ``print`` writes."""
    return io.StringIO()


@pytest.fixture
def root_scope(output: io.StringIO) -> Scope:
    """Root scope whose ``print`` writes to ``output``."""
    return create_root_scope(output)


@pytest.fixture
def host_scope(root_scope: Scope) -> Scope:
    """Root scope extended with a ``range(start, stop)`` integer sequence."""
    scope = Scope(root_scope)

    def _range(arguments: list[RuntimeValue]) -> RuntimeValue:
        start, stop = arguments
        return values.create(range(start.value, stop.value))

    scope.define_function(
        "range", "range", [types.INTEGER, types.INTEGER], types.INTEGER_ITERABLE, _range
    )
    return scope


def _bump(arguments: list[RuntimeValue]) -> RuntimeValue:
    receiver, amount = arguments
    return values.create(receiver.value.bump(amount.value))


def _counter_members(counter: Type) -> None:
    counter.scope.define_variable("count", "count", types.INTEGER, values.NIL)
    counter.scope.define_function("bump", "bump", [counter, types.INTEGER], types.INTEGER, _bump)


@pytest.fixture
def counter_type() -> Type:
    """Host type with a ``count`` field and a ``bump(amount)`` method."""
    return types.register_type("Counter", "Counter", _counter_members)


@pytest.fixture
def counter_scope(root_scope: Scope, counter_type: Type) -> Scope:
    """Root scope with a Counter-typed variable ``c``."""
    scope = Scope(root_scope)
    scope.define_variable(
        "c", "c", counter_type, RuntimeValue(values.ValueKind.OBJECT, Counter())
    )
    return scope
