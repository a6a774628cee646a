"""
Java source emitter.

Serializes an analyzed Source into a single Java class. The emitter does
no inference of its own: variable types, JVM names and function names all
come from the analyzer's annotations.

Output shape::

    public class Main {

        int x = 1 + 2;

        public static void main(String[] args) {
            System.exit(new Main().main());
        }

        int main() {
            return x;
        }

    }
"""

from __future__ import annotations

import logging

from plcscript.core.ir.nodes import (
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
    ReturnStmt,
    Source,
    Stmt,
    WhileStmt,
)
from plcscript.core.lang.annotations import Annotations
from plcscript.core.settings import EmitConfig

logger = logging.getLogger(__name__)

_ESCAPES = {
    "\b": "\\b",
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
    "'": "\\'",
    '"': '\\"',
    "\\": "\\\\",
}

_JAVA_OPERATORS = {BinaryOp.AND: "&&", BinaryOp.OR: "||"}


def escape(text: str) -> str:
    """Re-escape literal text for a Java string or character literal."""
    return "".join(_ESCAPES.get(ch, ch) for ch in text)


class _JavaWriter:
    """Accumulates indented Java lines."""

    def __init__(self, annotations: Annotations, config: EmitConfig) -> None:
        self.annotations = annotations
        self.config = config
        self.lines: list[str] = []
        self.depth = 0

    def line(self, text: str = "") -> None:
        self.lines.append(" " * (self.config.indent * self.depth) + text if text else "")

    def block(self, header: str, statements: list[Stmt], footer: str = "}") -> None:
        self.line(header)
        self.depth += 1
        for statement in statements:
            self.statement(statement)
        self.depth -= 1
        self.line(footer)

    # -- Program structure --

    def source(self, source: Source) -> None:
        self.line(f"public class {self.config.class_name} {{")
        self.depth += 1
        self.line()
        if source.fields:
            for field in source.fields:
                self.field(field)
            self.line()
        self.line("public static void main(String[] args) {")
        self.depth += 1
        self.line(f"System.exit(new {self.config.class_name}().main());")
        self.depth -= 1
        self.line("}")
        for method in source.methods:
            self.line()
            self.method(method)
        self.line()
        self.depth -= 1
        self.line("}")

    def field(self, field: FieldDef) -> None:
        variable = self.annotations.variable_of(field)
        text = f"{variable.type.jvm_name} {variable.jvm_name}"
        if field.value is not None:
            text += f" = {self.expression(field.value)}"
        self.line(text + ";")

    def method(self, method: MethodDef) -> None:
        function = self.annotations.function_of(method)
        return_type = (
            function.return_type.jvm_name if method.return_type_name is not None else "void"
        )
        parameters = ", ".join(
            f"{type_.jvm_name} {name}"
            for name, type_ in zip(method.parameters, function.parameter_types)
        )
        self.block(f"{return_type} {function.jvm_name}({parameters}) {{", method.statements)

    # -- Statements --

    def statement(self, stmt: Stmt) -> None:
        if isinstance(stmt, ExpressionStmt):
            self.line(f"{self.expression(stmt.expression)};")
        elif isinstance(stmt, DeclarationStmt):
            variable = self.annotations.variable_of(stmt)
            text = f"{variable.type.jvm_name} {variable.jvm_name}"
            if stmt.value is not None:
                text += f" = {self.expression(stmt.value)}"
            self.line(text + ";")
        elif isinstance(stmt, AssignmentStmt):
            self.line(f"{self.expression(stmt.receiver)} = {self.expression(stmt.value)};")
        elif isinstance(stmt, IfStmt):
            header = f"if ({self.expression(stmt.condition)}) {{"
            if stmt.else_statements:
                self.block(header, stmt.then_statements, "} else {")
                self.depth += 1
                for statement in stmt.else_statements:
                    self.statement(statement)
                self.depth -= 1
                self.line("}")
            else:
                self.block(header, stmt.then_statements)
        elif isinstance(stmt, ForStmt):
            iterable = self.expression(stmt.value)
            self.block(f"for (int {stmt.name} : {iterable}) {{", stmt.statements)
        elif isinstance(stmt, WhileStmt):
            self.block(f"while ({self.expression(stmt.condition)}) {{", stmt.statements)
        elif isinstance(stmt, ReturnStmt):
            self.line(f"return {self.expression(stmt.value)};")

    # -- Expressions --

    def expression(self, expr: Expr) -> str:
        if isinstance(expr, Literal):
            return _literal(expr)
        if isinstance(expr, GroupExpr):
            return f"({self.expression(expr.expression)})"
        if isinstance(expr, BinaryExpr):
            operator = _JAVA_OPERATORS.get(expr.op, expr.op.value)
            return f"{self.expression(expr.left)} {operator} {self.expression(expr.right)}"
        if isinstance(expr, AccessExpr):
            name = self.annotations.variable_of(expr).jvm_name
            if expr.receiver is not None:
                return f"{self.expression(expr.receiver)}.{name}"
            return name
        if isinstance(expr, FuncCall):
            name = self.annotations.function_of(expr).jvm_name
            arguments = ", ".join(self.expression(argument) for argument in expr.arguments)
            if expr.receiver is not None:
                return f"{self.expression(expr.receiver)}.{name}({arguments})"
            return f"{name}({arguments})"
        raise TypeError(f"Cannot emit {type(expr).__name__}")


def _literal(literal: Literal) -> str:
    kind = literal.kind
    if kind == LiteralKind.NIL:
        return "null"
    if kind == LiteralKind.BOOLEAN:
        return "true" if literal.value else "false"
    if kind == LiteralKind.STRING:
        return f'"{escape(literal.value)}"'
    if kind == LiteralKind.CHARACTER:
        return f"'{escape(literal.value)}'"
    return str(literal.value)


def emit(source: Source, annotations: Annotations, config: EmitConfig | None = None) -> str:
    """Render an analyzed program as Java source.

    Args:
        source: The program that ``annotations`` were produced for.
        annotations: Analyzer output for ``source``.
        config: Class name and indentation; defaults to ``Main`` and 4.

    Returns:
        Java source text ending with a newline.
    """
    writer = _JavaWriter(annotations, config or EmitConfig())
    writer.source(source)
    logger.debug("Emitted %d lines of Java", len(writer.lines))
    return "\n".join(writer.lines) + "\n"
