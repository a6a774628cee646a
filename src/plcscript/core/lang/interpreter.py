"""
Tree-walking interpreter for plcscript.

Statements complete with either :class:`Normal` or :class:`Returning`;
a ``RETURN`` travels outward as a ``Returning`` value until the enclosing
method call unwraps it. Every block runs in a child scope that is popped
on every exit path.

Integers are arbitrary precision. Decimals are exact; division rounds
half-to-even to the scale of the dividend.
"""

from __future__ import annotations

import decimal
import logging
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from decimal import Decimal
from fractions import Fraction

from plcscript.core.errors import PlcRuntimeError, RuntimeTypeError, ScopeError
from plcscript.core.ir.nodes import (
    COMPARISON_OPS,
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
from plcscript.core.lang.values import RuntimeValue, ValueKind

logger = logging.getLogger(__name__)

ENTRY_POINT = "main"

# Large enough that no addition, subtraction or multiplication rounds.
_EXACT = decimal.Context(
    prec=decimal.MAX_PREC, Emax=decimal.MAX_EMAX, Emin=decimal.MIN_EMIN
)

_KIND_TYPES: dict[ValueKind, Type] = {
    ValueKind.NIL: types.NIL,
    ValueKind.BOOLEAN: types.BOOLEAN,
    ValueKind.INTEGER: types.INTEGER,
    ValueKind.DECIMAL: types.DECIMAL,
    ValueKind.CHARACTER: types.CHARACTER,
    ValueKind.STRING: types.STRING,
    ValueKind.OBJECT: types.ANY,
}


@dataclass(frozen=True)
class Normal:
    """The statement ran to completion."""

    value: RuntimeValue = values.NIL


@dataclass(frozen=True)
class Returning:
    """A RETURN is propagating out of the enclosing method."""

    value: RuntimeValue


Completion = Normal | Returning

_STATEMENTS = (
    ExpressionStmt,
    DeclarationStmt,
    AssignmentStmt,
    IfStmt,
    ForStmt,
    WhileStmt,
    ReturnStmt,
)


@contextmanager
def _runtime_errors() -> Iterator[None]:
    """Report scope failures (unknown or duplicate names) as runtime errors."""
    try:
        yield
    except ScopeError as e:
        raise PlcRuntimeError(e.message) from e


def _require(value: RuntimeValue, *kinds: ValueKind) -> RuntimeValue:
    if value.kind not in kinds:
        expected = " or ".join(kinds)
        raise RuntimeTypeError(f"Expected a {expected} value, received {value.kind}.")
    return value


def _divide_integer(dividend: int, divisor: int) -> int:
    """Integer division truncating toward zero."""
    quotient = abs(dividend) // abs(divisor)
    return -quotient if (dividend < 0) != (divisor < 0) else quotient


def _divide_decimal(dividend: Decimal, divisor: Decimal) -> Decimal:
    """Exact quotient rounded half-to-even to the dividend's scale."""
    exponent = dividend.as_tuple().exponent
    if not isinstance(exponent, int) or not divisor.is_finite():
        raise RuntimeTypeError(f"Cannot divide {dividend} by {divisor}.")
    scaled = Fraction(dividend) / Fraction(divisor) / Fraction(10) ** exponent
    # round() on a Fraction rounds half to even.
    return Decimal(round(scaled)).scaleb(exponent, context=_EXACT)


class Interpreter:
    """Evaluates programs, statements and expressions.

    Args:
        parent: Root scope holding built-ins (the shared builtin scope by
            default).
        annotations: Optional analysis results, used to type variables
            declared without a type name.
    """

    def __init__(
        self, parent: Scope | None = None, annotations: Annotations | None = None
    ) -> None:
        self.scope = Scope(parent if parent is not None else builtin_scope())
        self.annotations = annotations

    @contextmanager
    def _push_scope(self, parent: Scope | None = None) -> Iterator[Scope]:
        previous = self.scope
        self.scope = Scope(parent if parent is not None else previous)
        try:
            yield self.scope
        finally:
            self.scope = previous

    def run(self, source: Source) -> RuntimeValue:
        """Define fields and methods, then call ``main/0``.

        Raises:
            PlcRuntimeError: If ``main`` is missing or does not produce an
                Integer (it fell off the end, or returned an unset field).
        """
        for field in source.fields:
            self._execute_field(field)
        for method in source.methods:
            self._define_method(method)
        with _runtime_errors():
            main = self.scope.lookup_function(ENTRY_POINT, 0)
        result = main.invoke([])
        logger.debug("%s/0 returned %s", ENTRY_POINT, result)
        if result.kind != ValueKind.INTEGER:
            raise PlcRuntimeError(
                f"{ENTRY_POINT}/0 must return an Integer, got {result.kind}."
            )
        return result

    def visit(self, node: Node) -> RuntimeValue:
        """Evaluate any node.

        A Source yields the value returned by ``main``; a statement yields
        the value it returned (NIL when it completed normally).
        """
        if isinstance(node, Source):
            return self.run(node)
        if isinstance(node, FieldDef):
            self._execute_field(node)
            return values.NIL
        if isinstance(node, MethodDef):
            self._define_method(node)
            return values.NIL
        if isinstance(node, _STATEMENTS):
            return self.execute(node).value
        return self.evaluate(node)

    # -- Program structure --

    def _execute_field(self, field: FieldDef) -> Variable:
        with _runtime_errors():
            declared = types.get_type(field.type_name)
        value = self.evaluate(field.value) if field.value is not None else values.NIL
        return self._define_variable(field.name, declared, value)

    def _define_method(self, method: MethodDef) -> Function:
        with _runtime_errors():
            parameter_types = [types.get_type(name) for name in method.parameter_type_names]
            return_type = (
                types.get_type(method.return_type_name)
                if method.return_type_name is not None
                else types.NIL
            )
        # Method bodies see the scope the method was defined in.
        defining_scope = self.scope

        def behavior(arguments: list[RuntimeValue]) -> RuntimeValue:
            with self._push_scope(defining_scope):
                for name, type_, value in zip(method.parameters, parameter_types, arguments):
                    self._define_variable(name, type_, value)
                completion = self.execute_block(method.statements)
            return completion.value if isinstance(completion, Returning) else values.NIL

        with _runtime_errors():
            return self.scope.define_function(
                method.name, method.name, parameter_types, return_type, behavior
            )

    # -- Statements --

    def execute(self, stmt: Stmt) -> Completion:
        """Execute one statement."""
        if isinstance(stmt, ExpressionStmt):
            self.evaluate(stmt.expression)
            return Normal()
        if isinstance(stmt, DeclarationStmt):
            self._execute_declaration(stmt)
            return Normal()
        if isinstance(stmt, AssignmentStmt):
            self._execute_assignment(stmt)
            return Normal()
        if isinstance(stmt, IfStmt):
            condition = _require(self.evaluate(stmt.condition), ValueKind.BOOLEAN)
            branch = stmt.then_statements if condition.value else stmt.else_statements
            with self._push_scope():
                return self.execute_block(branch)
        if isinstance(stmt, ForStmt):
            return self._execute_for(stmt)
        if isinstance(stmt, WhileStmt):
            return self._execute_while(stmt)
        if isinstance(stmt, ReturnStmt):
            return Returning(self.evaluate(stmt.value))
        raise PlcRuntimeError(f"Cannot execute {type(stmt).__name__}.")

    def execute_block(self, statements: list[Stmt]) -> Completion:
        """Execute statements in the current scope, stopping at a RETURN."""
        for statement in statements:
            completion = self.execute(statement)
            if isinstance(completion, Returning):
                return completion
        return Normal()

    def _execute_declaration(self, stmt: DeclarationStmt) -> None:
        value = self.evaluate(stmt.value) if stmt.value is not None else values.NIL
        if stmt.type_name is not None:
            with _runtime_errors():
                declared = types.get_type(stmt.type_name)
        elif self.annotations is not None and self.annotations.has_variable(stmt):
            declared = self.annotations.variable_of(stmt).type
        else:
            declared = _KIND_TYPES[value.kind]
        self._define_variable(stmt.name, declared, value)

    def _execute_assignment(self, stmt: AssignmentStmt) -> None:
        receiver = stmt.receiver
        if not isinstance(receiver, AccessExpr):
            raise PlcRuntimeError(f"Cannot assign to {receiver}.")
        with _runtime_errors():
            if receiver.receiver is not None:
                variable = self.evaluate(receiver.receiver).get_field(receiver.name)
            else:
                variable = self.scope.lookup_variable(receiver.name)
        variable.value = self.evaluate(stmt.value)

    def _execute_for(self, stmt: ForStmt) -> Completion:
        iterable = _require(self.evaluate(stmt.value), ValueKind.OBJECT)
        try:
            items = iter(iterable.value)
        except TypeError:
            raise RuntimeTypeError(f"A {iterable.kind} value is not iterable.") from None
        for item in items:
            value = item if isinstance(item, RuntimeValue) else values.create(item)
            with self._push_scope():
                self._define_variable(stmt.name, types.INTEGER, value)
                completion = self.execute_block(stmt.statements)
            if isinstance(completion, Returning):
                return completion
        return Normal()

    def _execute_while(self, stmt: WhileStmt) -> Completion:
        while _require(self.evaluate(stmt.condition), ValueKind.BOOLEAN).value:
            with self._push_scope():
                completion = self.execute_block(stmt.statements)
            if isinstance(completion, Returning):
                return completion
        return Normal()

    # -- Expressions --

    def evaluate(self, expr: Expr) -> RuntimeValue:
        """Evaluate an expression."""
        if isinstance(expr, Literal):
            return values.from_literal(expr)
        if isinstance(expr, GroupExpr):
            return self.evaluate(expr.expression)
        if isinstance(expr, BinaryExpr):
            return self._evaluate_binary(expr)
        if isinstance(expr, AccessExpr):
            return self._evaluate_access(expr)
        if isinstance(expr, FuncCall):
            return self._evaluate_call(expr)
        raise PlcRuntimeError(f"Cannot evaluate {type(expr).__name__}.")

    def _evaluate_binary(self, expr: BinaryExpr) -> RuntimeValue:
        op = expr.op
        left = self.evaluate(expr.left)

        if op == BinaryOp.AND:
            if not _require(left, ValueKind.BOOLEAN).value:
                return left
            return _require(self.evaluate(expr.right), ValueKind.BOOLEAN)
        if op == BinaryOp.OR:
            if _require(left, ValueKind.BOOLEAN).value:
                return left
            return _require(self.evaluate(expr.right), ValueKind.BOOLEAN)

        right = self.evaluate(expr.right)
        if op in COMPARISON_OPS:
            return values.boolean(_compare(op, left, right))
        if op == BinaryOp.ADD and ValueKind.STRING in (left.kind, right.kind):
            return values.create(values.to_text(left) + values.to_text(right))
        return _arithmetic(op, left, right)

    def _evaluate_access(self, expr: AccessExpr) -> RuntimeValue:
        with _runtime_errors():
            if expr.receiver is not None:
                return self.evaluate(expr.receiver).get_field(expr.name).value
            variable = self.scope.lookup_variable(expr.name)
        if variable.type is types.ANY:
            return variable.value
        return variable.value.with_scope(variable.type.scope)

    def _evaluate_call(self, expr: FuncCall) -> RuntimeValue:
        if expr.receiver is not None:
            receiver = self.evaluate(expr.receiver)
            arguments = [self.evaluate(argument) for argument in expr.arguments]
            with _runtime_errors():
                return receiver.call_method(expr.name, arguments)
        arguments = [self.evaluate(argument) for argument in expr.arguments]
        with _runtime_errors():
            function = self.scope.lookup_function(expr.name, expr.arity)
        return function.invoke(arguments)

    def _define_variable(self, name: str, type_: Type, value: RuntimeValue) -> Variable:
        with _runtime_errors():
            return self.scope.define_variable(name, name, type_, value)


def _compare(op: BinaryOp, left: RuntimeValue, right: RuntimeValue) -> bool:
    if op == BinaryOp.EQ:
        return left.kind == right.kind and left.value == right.value
    if op == BinaryOp.NE:
        return not (left.kind == right.kind and left.value == right.value)

    if left.kind not in values.COMPARABLE_KINDS or left.kind != right.kind:
        raise RuntimeTypeError(
            f"Cannot order a {left.kind} value against a {right.kind} value."
        )
    if op == BinaryOp.LT:
        return left.value < right.value
    if op == BinaryOp.LE:
        return left.value <= right.value
    if op == BinaryOp.GT:
        return left.value > right.value
    return left.value >= right.value


def _arithmetic(op: BinaryOp, left: RuntimeValue, right: RuntimeValue) -> RuntimeValue:
    if left.kind not in values.NUMERIC_KINDS or left.kind != right.kind:
        raise RuntimeTypeError(
            f"Operator {op.value} needs two numbers of the same kind, "
            f"got {left.kind} and {right.kind}."
        )
    a, b = left.value, right.value

    if op == BinaryOp.DIV:
        if b == 0:
            raise PlcRuntimeError("Division by zero.")
        if left.kind == ValueKind.INTEGER:
            return values.create(_divide_integer(a, b))
        return values.create(_divide_decimal(a, b))

    if left.kind == ValueKind.INTEGER:
        if op == BinaryOp.ADD:
            return values.create(a + b)
        if op == BinaryOp.SUB:
            return values.create(a - b)
        return values.create(a * b)

    if op == BinaryOp.ADD:
        return values.create(_EXACT.add(a, b))
    if op == BinaryOp.SUB:
        return values.create(_EXACT.subtract(a, b))
    return values.create(_EXACT.multiply(a, b))


def evaluate(
    node: Node, scope: Scope | None = None, annotations: Annotations | None = None
) -> RuntimeValue:
    """Evaluate a program, statement or expression.

    Args:
        node: Source (runs ``main/0``), statement or expression.
        scope: Root scope with built-ins; the shared builtin scope if None.
        annotations: Optional analysis results for ``node``.

    Raises:
        PlcRuntimeError: On the first dynamic failure.
    """
    return Interpreter(scope, annotations).visit(node)
