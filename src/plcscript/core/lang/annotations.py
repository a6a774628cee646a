"""
Analysis results, kept beside the AST.

AST nodes are frozen pydantic models that compare by value, so two
``AccessExpr(name="x")`` nodes are equal. Annotations are therefore keyed
by node identity; each entry also holds the node so the id stays valid.
"""

from __future__ import annotations

from typing import Any, Generic, TypeVar

from plcscript.core.ir.nodes import Source
from plcscript.core.lang.scope import Function, Variable
from plcscript.core.lang.types import Type

T = TypeVar("T")


class _SideTable(Generic[T]):
    """Write-once mapping from node identity to a value."""

    def __init__(self, what: str) -> None:
        self._what = what
        self._entries: dict[int, tuple[Any, T]] = {}

    def set(self, node: Any, value: T) -> None:
        key = id(node)
        existing = self._entries.get(key)
        if existing is not None and existing[1] is value:
            return
        if existing is not None:
            raise ValueError(f"{type(node).__name__} already has a resolved {self._what}")
        self._entries[key] = (node, value)

    def get(self, node: Any) -> T:
        entry = self._entries.get(id(node))
        if entry is None:
            raise KeyError(f"{type(node).__name__} has no resolved {self._what}")
        return entry[1]

    def __contains__(self, node: Any) -> bool:
        return id(node) in self._entries

    def __len__(self) -> int:
        return len(self._entries)


class Annotations:
    """Resolved types, variables and functions for one analysis pass."""

    def __init__(self, source: Source | None = None) -> None:
        self.source = source
        self._types: _SideTable[Type] = _SideTable("type")
        self._variables: _SideTable[Variable] = _SideTable("variable")
        self._functions: _SideTable[Function] = _SideTable("function")

    # -- Expression types --

    def set_type(self, node: Any, type_: Type) -> None:
        self._types.set(node, type_)

    def type_of(self, node: Any) -> Type:
        return self._types.get(node)

    def has_type(self, node: Any) -> bool:
        return node in self._types

    # -- Variables (AccessExpr, DeclarationStmt, FieldDef) --

    def set_variable(self, node: Any, variable: Variable) -> None:
        self._variables.set(node, variable)

    def variable_of(self, node: Any) -> Variable:
        return self._variables.get(node)

    def has_variable(self, node: Any) -> bool:
        return node in self._variables

    # -- Functions (FuncCall, MethodDef) --

    def set_function(self, node: Any, function: Function) -> None:
        self._functions.set(node, function)

    def function_of(self, node: Any) -> Function:
        return self._functions.get(node)

    def has_function(self, node: Any) -> bool:
        return node in self._functions

    def __repr__(self) -> str:
        return (
            f"Annotations(types={len(self._types)}, variables={len(self._variables)}, "
            f"functions={len(self._functions)})"
        )
