"""
Intermediate representation for plcscript programs.

Re-exports the AST node models so callers can write
``from plcscript.core.ir import Source, FuncCall``.
"""

from .nodes import (
    ARITHMETIC_OPS,
    COMPARISON_OPS,
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

__all__ = [
    # Operators
    "ARITHMETIC_OPS",
    "BinaryOp",
    "COMPARISON_OPS",
    "LOGICAL_OPS",
    "LiteralKind",
    # Expressions
    "AccessExpr",
    "BinaryExpr",
    "Expr",
    "FuncCall",
    "GroupExpr",
    "Literal",
    # Statements
    "AssignmentStmt",
    "DeclarationStmt",
    "ExpressionStmt",
    "ForStmt",
    "IfStmt",
    "ReturnStmt",
    "Stmt",
    "WhileStmt",
    # Program structure
    "FieldDef",
    "MethodDef",
    "Node",
    "Source",
]
