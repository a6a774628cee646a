"""
AST node types for plcscript programs.

Three closed families of frozen pydantic models:

- Program structure: Source, FieldDef, MethodDef
- Statements: ExpressionStmt, DeclarationStmt, AssignmentStmt, IfStmt,
  ForStmt, WhileStmt, ReturnStmt
- Expressions: Literal, GroupExpr, BinaryExpr, AccessExpr, FuncCall

Nodes are never mutated after parsing. Analysis results (resolved types,
variables and functions) live in a separate side table keyed by node
identity; see ``plcscript.core.lang.annotations``.
"""

from __future__ import annotations

from decimal import Decimal
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

# ---------------------------------------------------------------------------
# Operators and literal kinds
# ---------------------------------------------------------------------------


class BinaryOp(StrEnum):
    """Binary operators, valued by their source spelling."""

    # Logical
    AND = "AND"
    OR = "OR"
    # Comparison
    LT = "<"
    LE = "<="
    GT = ">"
    GE = ">="
    EQ = "=="
    NE = "!="
    # Arithmetic
    ADD = "+"
    SUB = "-"
    MUL = "*"
    DIV = "/"


LOGICAL_OPS = frozenset({BinaryOp.AND, BinaryOp.OR})
COMPARISON_OPS = frozenset(
    {BinaryOp.LT, BinaryOp.LE, BinaryOp.GT, BinaryOp.GE, BinaryOp.EQ, BinaryOp.NE}
)
ARITHMETIC_OPS = frozenset({BinaryOp.ADD, BinaryOp.SUB, BinaryOp.MUL, BinaryOp.DIV})


class LiteralKind(StrEnum):
    """Kinds of literal values."""

    NIL = "nil"
    BOOLEAN = "boolean"
    INTEGER = "integer"
    DECIMAL = "decimal"
    CHARACTER = "character"
    STRING = "string"


def _kind_of(value: Any) -> LiteralKind:
    if value is None:
        return LiteralKind.NIL
    if isinstance(value, bool):
        return LiteralKind.BOOLEAN
    if isinstance(value, int):
        return LiteralKind.INTEGER
    if isinstance(value, Decimal):
        return LiteralKind.DECIMAL
    if isinstance(value, str):
        return LiteralKind.STRING
    raise ValueError(f"Unsupported literal value: {value!r}")


# ---------------------------------------------------------------------------
# Expressions
# ---------------------------------------------------------------------------


class Literal(BaseModel):
    """
    A literal value: NIL, boolean, integer, decimal, character, or string.

    ``kind`` is inferred from ``value`` when omitted. Characters are plain
    one-character strings and must be marked with ``LiteralKind.CHARACTER``.

    Examples:
        - Literal(value=None) → NIL
        - Literal(value=42) → 42
        - Literal(value="c", kind=LiteralKind.CHARACTER) → 'c'
    """

    # Any: pydantic's Decimal validation rejects the infinities the
    # analyzer needs to see.
    value: Any = Field(default=None, description="The literal value")
    kind: LiteralKind = Field(default=LiteralKind.NIL, description="Literal kind")

    model_config = ConfigDict(frozen=True)

    @model_validator(mode="before")
    @classmethod
    def _infer_kind(cls, data: Any) -> Any:
        if isinstance(data, dict) and "kind" not in data:
            return {**data, "kind": _kind_of(data.get("value"))}
        return data

    @model_validator(mode="after")
    def _check_character(self) -> Literal:
        if self.kind == LiteralKind.CHARACTER and not (
            isinstance(self.value, str) and len(self.value) == 1
        ):
            raise ValueError("character literal must be a single character")
        return self

    def __str__(self) -> str:
        if self.kind == LiteralKind.NIL:
            return "NIL"
        if self.kind == LiteralKind.BOOLEAN:
            return "TRUE" if self.value else "FALSE"
        if self.kind == LiteralKind.STRING:
            return f'"{self.value}"'
        if self.kind == LiteralKind.CHARACTER:
            return f"'{self.value}'"
        return str(self.value)


class GroupExpr(BaseModel):
    """Parenthesized expression: (expression)."""

    expression: Expr

    model_config = ConfigDict(frozen=True)

    def __str__(self) -> str:
        return f"({self.expression})"


class BinaryExpr(BaseModel):
    """Binary operation: left op right."""

    op: BinaryOp
    left: Expr
    right: Expr

    model_config = ConfigDict(frozen=True)

    def __str__(self) -> str:
        return f"{self.left} {self.op.value} {self.right}"


class AccessExpr(BaseModel):
    """
    Variable or member access.

    Examples:
        - AccessExpr(name="x") → x
        - AccessExpr(receiver=AccessExpr(name="point"), name="x") → point.x
    """

    receiver: Expr | None = Field(default=None, description="Receiver expression")
    name: str = Field(description="Variable or member name")

    model_config = ConfigDict(frozen=True)

    def __str__(self) -> str:
        if self.receiver is not None:
            return f"{self.receiver}.{self.name}"
        return self.name


class FuncCall(BaseModel):
    """
    Function or method call: name(arg1, arg2, ...) or receiver.name(...).

    Functions are resolved by name and arity.
    """

    receiver: Expr | None = Field(default=None, description="Receiver expression")
    name: str = Field(description="Function name")
    arguments: list[Expr] = Field(default_factory=list, description="Arguments")

    model_config = ConfigDict(frozen=True)

    @property
    def arity(self) -> int:
        return len(self.arguments)

    def __str__(self) -> str:
        args_str = ", ".join(str(a) for a in self.arguments)
        prefix = f"{self.receiver}." if self.receiver is not None else ""
        return f"{prefix}{self.name}({args_str})"


# ---------------------------------------------------------------------------
# Statements
# ---------------------------------------------------------------------------


class ExpressionStmt(BaseModel):
    """Expression evaluated for effect: expression;"""

    expression: Expr

    model_config = ConfigDict(frozen=True)


class DeclarationStmt(BaseModel):
    """Local declaration: LET name (: type)? (= value)?;"""

    name: str
    type_name: str | None = None
    value: Expr | None = None

    model_config = ConfigDict(frozen=True)


class AssignmentStmt(BaseModel):
    """Assignment: receiver = value;"""

    receiver: Expr
    value: Expr

    model_config = ConfigDict(frozen=True)


class IfStmt(BaseModel):
    """IF condition DO then_statements (ELSE else_statements)? END"""

    condition: Expr
    then_statements: list[Stmt] = Field(default_factory=list)
    else_statements: list[Stmt] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)


class ForStmt(BaseModel):
    """FOR name IN value DO statements END"""

    name: str
    value: Expr
    statements: list[Stmt] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)


class WhileStmt(BaseModel):
    """WHILE condition DO statements END"""

    condition: Expr
    statements: list[Stmt] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)


class ReturnStmt(BaseModel):
    """RETURN value;"""

    value: Expr

    model_config = ConfigDict(frozen=True)


# ---------------------------------------------------------------------------
# Program structure
# ---------------------------------------------------------------------------


class FieldDef(BaseModel):
    """Program-level binding: LET name: type (= value)?;"""

    name: str
    type_name: str
    value: Expr | None = None

    model_config = ConfigDict(frozen=True)


class MethodDef(BaseModel):
    """DEF name(p: T, ...) (: R)? DO statements END"""

    name: str
    parameters: list[str] = Field(default_factory=list)
    parameter_type_names: list[str] = Field(default_factory=list)
    return_type_name: str | None = None
    statements: list[Stmt] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)

    @model_validator(mode="after")
    def _check_parameters(self) -> MethodDef:
        if len(self.parameters) != len(self.parameter_type_names):
            raise ValueError("each parameter needs exactly one type name")
        return self

    @property
    def arity(self) -> int:
        return len(self.parameters)


class Source(BaseModel):
    """Program root: fields followed by methods."""

    fields: list[FieldDef] = Field(default_factory=list)
    methods: list[MethodDef] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)


# ---------------------------------------------------------------------------
# Union types
# ---------------------------------------------------------------------------

Expr = Literal | GroupExpr | BinaryExpr | AccessExpr | FuncCall

Stmt = (
    ExpressionStmt
    | DeclarationStmt
    | AssignmentStmt
    | IfStmt
    | ForStmt
    | WhileStmt
    | ReturnStmt
)

Node = Source | FieldDef | MethodDef | Stmt | Expr

# Rebuild models for recursive forward references
GroupExpr.model_rebuild()
BinaryExpr.model_rebuild()
AccessExpr.model_rebuild()
FuncCall.model_rebuild()
ExpressionStmt.model_rebuild()
DeclarationStmt.model_rebuild()
AssignmentStmt.model_rebuild()
IfStmt.model_rebuild()
ForStmt.model_rebuild()
WhileStmt.model_rebuild()
ReturnStmt.model_rebuild()
FieldDef.model_rebuild()
MethodDef.model_rebuild()
Source.model_rebuild()
