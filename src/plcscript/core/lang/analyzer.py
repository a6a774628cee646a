"""
Static analysis for plcscript.

Walks a parsed Source, resolves every name and type, and records the
results in an :class:`Annotations` side table. The traversal is fixed:
fields, then method signatures (all methods are hoisted), then method
bodies; statements in source order; left operands before right ones.
The first violation raises :class:`StaticTypeError`.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager

from plcscript.core.errors import ScopeError, StaticTypeError
from plcscript.core.ir.nodes import (
    LOGICAL_OPS,
    AccessExpr,
    AssignmentStmt,
    BinaryExpr,
    BinaryOp,
    DeclarationStmt,
    Expr,
    ExpressionStmt,
    FieldDef,
    ForStmt,
    FuncCall,
    GroupExpr,
    IfStmt,
    Literal,
    LiteralKind,
    MethodDef,
    Node,
    ReturnStmt,
    Source,
    Stmt,
    WhileStmt,
)
from plcscript.core.lang import types, values
from plcscript.core.lang.annotations import Annotations
from plcscript.core.lang.builtins import builtin_scope
from plcscript.core.lang.scope import Function, Scope, Variable
from plcscript.core.lang.types import Type

logger = logging.getLogger(__name__)

ENTRY_POINT = "main"

INTEGER_MIN = -(2**31)
INTEGER_MAX = 2**31 - 1


def require_assignable(target: Type, source: Type) -> None:
    """Check that a value of type ``source`` may be stored as ``target``.

    Identical types always pass, ``Any`` accepts everything and
    ``Comparable`` accepts Integer, Decimal, Character and String.

    Raises:
        StaticTypeError: For every other combination.
    """
    if target is source or target is types.ANY:
        return
    if target is types.COMPARABLE and source in types.COMPARABLE_TYPES:
        return
    raise StaticTypeError(f"Expected a value of type {target}, received {source}.")


@contextmanager
def _static_errors() -> Iterator[None]:
    """Report scope failures (unknown or duplicate names) as type errors."""
    try:
        yield
    except ScopeError as e:
        raise StaticTypeError(e.message) from e


def _analysis_placeholder(arguments: list[values.RuntimeValue]) -> values.RuntimeValue:
    raise StaticTypeError("Functions defined during analysis cannot be invoked.")


class Analyzer:
    """Static analyzer with its own scope chain.

    Args:
        parent: Root scope holding built-ins (the shared builtin scope by
            default).
    """

    def __init__(self, parent: Scope | None = None) -> None:
        self.scope = Scope(parent if parent is not None else builtin_scope())
        self.annotations = Annotations()
        self._return_type: Type | None = None

    @contextmanager
    def _child_scope(self) -> Iterator[Scope]:
        previous = self.scope
        self.scope = Scope(previous)
        try:
            yield self.scope
        finally:
            self.scope = previous

    def analyze(self, source: Source) -> Annotations:
        self.annotations = Annotations(source)
        self.visit(source)
        return self.annotations

    def visit(self, node: Node) -> None:
        """Dispatch analysis to the handler for ``node``'s type."""
        if isinstance(node, Source):
            self._visit_source(node)
        elif isinstance(node, FieldDef):
            self._visit_field(node)
        elif isinstance(node, MethodDef):
            self._visit_method_body(node)
        elif isinstance(node, ExpressionStmt):
            self._visit_expression_stmt(node)
        elif isinstance(node, DeclarationStmt):
            self._visit_declaration(node)
        elif isinstance(node, AssignmentStmt):
            self._visit_assignment(node)
        elif isinstance(node, IfStmt):
            self._visit_if(node)
        elif isinstance(node, ForStmt):
            self._visit_for(node)
        elif isinstance(node, WhileStmt):
            self._visit_while(node)
        elif isinstance(node, ReturnStmt):
            self._visit_return(node)
        else:
            self.annotations.set_type(node, self._infer(node))

    def type_of(self, expression: Expr) -> Type:
        """Analyze ``expression`` and return its resolved type."""
        self.visit(expression)
        return self.annotations.type_of(expression)

    # -- Program structure --

    def _visit_source(self, source: Source) -> None:
        for field in source.fields:
            self.visit(field)
        for method in source.methods:
            self._define_method(method)
        for method in source.methods:
            self.visit(method)

        with _static_errors():
            main = self.scope.lookup_function(ENTRY_POINT, 0)
        if main.return_type is not types.INTEGER:
            raise StaticTypeError(
                f"The {ENTRY_POINT}/0 function must return {types.INTEGER}, "
                f"not {main.return_type}."
            )
        logger.debug(
            "Analyzed %d fields and %d methods", len(source.fields), len(source.methods)
        )

    def _visit_field(self, field: FieldDef) -> None:
        with _static_errors():
            declared = types.get_type(field.type_name)
        if field.value is not None:
            require_assignable(declared, self.type_of(field.value))
        self.annotations.set_variable(field, self._define_variable(field.name, declared))

    def _define_method(self, method: MethodDef) -> Function:
        with _static_errors():
            parameter_types = [types.get_type(name) for name in method.parameter_type_names]
            return_type = (
                types.get_type(method.return_type_name)
                if method.return_type_name is not None
                else types.NIL
            )
            function = self.scope.define_function(
                method.name, method.name, parameter_types, return_type, _analysis_placeholder
            )
        self.annotations.set_function(method, function)
        return function

    def _visit_method_body(self, method: MethodDef) -> None:
        function = self.annotations.function_of(method)
        previous_return = self._return_type
        self._return_type = function.return_type
        try:
            with self._child_scope():
                for name, type_ in zip(method.parameters, function.parameter_types):
                    self._define_variable(name, type_)
                self._visit_block(method.statements)
        finally:
            self._return_type = previous_return

    def _visit_block(self, statements: list[Stmt]) -> None:
        for statement in statements:
            self.visit(statement)

    # -- Statements --

    def _visit_expression_stmt(self, stmt: ExpressionStmt) -> None:
        if not isinstance(stmt.expression, FuncCall):
            raise StaticTypeError(
                f"The expression statement {stmt.expression} must be a function call."
            )
        self.visit(stmt.expression)

    def _visit_declaration(self, stmt: DeclarationStmt) -> None:
        if stmt.type_name is None and stmt.value is None:
            raise StaticTypeError(
                f"The declaration of {stmt.name} needs a type or an initial value."
            )
        declared: Type | None = None
        if stmt.type_name is not None:
            with _static_errors():
                declared = types.get_type(stmt.type_name)
        if stmt.value is not None:
            value_type = self.type_of(stmt.value)
            if declared is None:
                declared = value_type
            else:
                require_assignable(declared, value_type)
        assert declared is not None
        self.annotations.set_variable(stmt, self._define_variable(stmt.name, declared))

    def _visit_assignment(self, stmt: AssignmentStmt) -> None:
        if not isinstance(stmt.receiver, AccessExpr):
            raise StaticTypeError(f"Cannot assign to {stmt.receiver}.")
        target = self.type_of(stmt.receiver)
        require_assignable(target, self.type_of(stmt.value))

    def _visit_if(self, stmt: IfStmt) -> None:
        require_assignable(types.BOOLEAN, self.type_of(stmt.condition))
        if not stmt.then_statements:
            raise StaticTypeError("An IF statement needs at least one statement.")
        with self._child_scope():
            self._visit_block(stmt.then_statements)
        with self._child_scope():
            self._visit_block(stmt.else_statements)

    def _visit_for(self, stmt: ForStmt) -> None:
        require_assignable(types.INTEGER_ITERABLE, self.type_of(stmt.value))
        if not stmt.statements:
            raise StaticTypeError("A FOR statement needs at least one statement.")
        with self._child_scope():
            self._define_variable(stmt.name, types.INTEGER)
            self._visit_block(stmt.statements)

    def _visit_while(self, stmt: WhileStmt) -> None:
        require_assignable(types.BOOLEAN, self.type_of(stmt.condition))
        with self._child_scope():
            self._visit_block(stmt.statements)

    def _visit_return(self, stmt: ReturnStmt) -> None:
        if self._return_type is None:
            raise StaticTypeError("RETURN is only allowed inside a method.")
        require_assignable(self._return_type, self.type_of(stmt.value))

    # -- Expressions --

    def _infer(self, expr: Expr) -> Type:
        if isinstance(expr, Literal):
            return _infer_literal(expr)
        if isinstance(expr, GroupExpr):
            if not isinstance(expr.expression, BinaryExpr):
                raise StaticTypeError(f"Only binary expressions may be grouped: {expr}.")
            return self.type_of(expr.expression)
        if isinstance(expr, BinaryExpr):
            return self._infer_binary(expr)
        if isinstance(expr, AccessExpr):
            return self._infer_access(expr)
        if isinstance(expr, FuncCall):
            return self._infer_call(expr)
        raise StaticTypeError(f"Cannot analyze {type(expr).__name__}.")

    def _infer_binary(self, expr: BinaryExpr) -> Type:
        left = self.type_of(expr.left)
        right = self.type_of(expr.right)
        op = expr.op

        if op in LOGICAL_OPS:
            require_assignable(types.BOOLEAN, left)
            require_assignable(types.BOOLEAN, right)
            return types.BOOLEAN

        if op == BinaryOp.ADD:
            if left is types.STRING or right is types.STRING:
                return types.STRING
            if left is right and left in types.NUMERIC_TYPES:
                return left
            raise StaticTypeError(f"Cannot add {left} and {right}.")

        if op in (BinaryOp.SUB, BinaryOp.MUL, BinaryOp.DIV):
            if left is right and left in types.NUMERIC_TYPES:
                return left
            raise StaticTypeError(
                f"Operator {op.value} needs two numbers of the same type, "
                f"got {left} and {right}."
            )

        # Comparison
        require_assignable(types.COMPARABLE, left)
        if left is not right:
            raise StaticTypeError(f"Cannot compare {left} with {right}.")
        return types.BOOLEAN

    def _infer_access(self, expr: AccessExpr) -> Type:
        if expr.receiver is not None:
            receiver = self.type_of(expr.receiver)
            with _static_errors():
                variable = receiver.get_field(expr.name)
        else:
            with _static_errors():
                variable = self.scope.lookup_variable(expr.name)
        self.annotations.set_variable(expr, variable)
        return variable.type

    def _infer_call(self, expr: FuncCall) -> Type:
        if expr.receiver is not None:
            receiver = self.type_of(expr.receiver)
            with _static_errors():
                function = receiver.get_method(expr.name, expr.arity)
            # The receiver occupies the first parameter.
            parameter_types = function.parameter_types[1:]
        else:
            with _static_errors():
                function = self.scope.lookup_function(expr.name, expr.arity)
            parameter_types = function.parameter_types
        self.annotations.set_function(expr, function)

        for argument, parameter_type in zip(expr.arguments, parameter_types):
            require_assignable(parameter_type, self.type_of(argument))
        return function.return_type

    def _define_variable(self, name: str, type_: Type) -> Variable:
        with _static_errors():
            return self.scope.define_variable(name, name, type_, values.NIL)


def _infer_literal(literal: Literal) -> Type:
    kind = literal.kind
    if kind == LiteralKind.NIL:
        return types.NIL
    if kind == LiteralKind.BOOLEAN:
        return types.BOOLEAN
    if kind == LiteralKind.CHARACTER:
        return types.CHARACTER
    if kind == LiteralKind.STRING:
        return types.STRING
    if kind == LiteralKind.INTEGER:
        if not INTEGER_MIN <= literal.value <= INTEGER_MAX:
            raise StaticTypeError(f"The integer {literal.value} does not fit in 32 bits.")
        return types.INTEGER
    if not literal.value.is_finite():
        raise StaticTypeError(f"The decimal {literal} is out of range.")
    return types.DECIMAL


def analyze(source: Source, scope: Scope | None = None) -> Annotations:
    """Analyze a program and return its annotations.

    Args:
        source: Parsed program.
        scope: Root scope with built-ins; the shared builtin scope if None.

    Raises:
        StaticTypeError: On the first static violation.
    """
    return Analyzer(scope).analyze(source)
