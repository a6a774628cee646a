"""
Recursive descent parser for plcscript.

Grammar:
    source         → ("LET" field)* ("DEF" method)*
    field          → IDENT ":" IDENT ("=" expression)? ";"
    method         → IDENT "(" (IDENT ":" IDENT ("," IDENT ":" IDENT)*)? ")"
                     (":" IDENT)? "DO" statement* "END"
    statement      → "LET" IDENT (":" IDENT)? ("=" expression)? ";"
                   | "IF" expression "DO" statement* ("ELSE" statement*)? "END"
                   | "FOR" IDENT "IN" expression "DO" statement* "END"
                   | "WHILE" expression "DO" statement* "END"
                   | "RETURN" expression ";"
                   | expression ("=" expression)? ";"
    expression     → logical
    logical        → equality (("AND" | "OR") equality)?
    equality       → additive (("<" | "<=" | ">" | ">=" | "==" | "!=") additive)?
    additive       → multiplicative (("+" | "-") multiplicative)?
    multiplicative → secondary (("*" | "/") secondary)?
    secondary      → primary ("." IDENT ("(" args ")")?)?
    primary        → "NIL" | "TRUE" | "FALSE" | INTEGER | DECIMAL | CHARACTER
                   | STRING | "(" expression ")" | IDENT "(" args ")" | IDENT
    args           → (expression ("," expression)*)?

Each binary level applies at most one operator, so ``1 + 2 + 3`` needs
explicit grouping. The whole token list must be consumed.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable
from decimal import Decimal

from plcscript.core.errors import ParseError
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
from plcscript.core.lang.tokenizer import Token, TokenKind

logger = logging.getLogger(__name__)

_ESCAPES = {"b": "\b", "n": "\n", "r": "\r", "t": "\t", "'": "'", '"': '"', "\\": "\\"}
_ESCAPE_RE = re.compile(r"\\([bnrt'\"\\])")

_LOGICAL = ("AND", "OR")
_EQUALITY = ("<", "<=", ">", ">=", "==", "!=")
_ADDITIVE = ("+", "-")
_MULTIPLICATIVE = ("*", "/")


def unescape(text: str) -> str:
    """Replace the recognized backslash escapes in literal text."""
    return _ESCAPE_RE.sub(lambda m: _ESCAPES[m.group(1)], text)


class _Parser:
    """Recursive descent parser over a token list."""

    def __init__(self, tokens: list[Token]) -> None:
        self.tokens = tokens
        self.index = 0

    # -- Token stream --

    def has(self, offset: int = 0) -> bool:
        return self.index + offset < len(self.tokens)

    def peek(self, *patterns: TokenKind | str) -> bool:
        """Check upcoming tokens against kinds or literal texts, one per token."""
        for offset, pattern in enumerate(patterns):
            if not self.has(offset):
                return False
            token = self.tokens[self.index + offset]
            if isinstance(pattern, TokenKind):
                if token.kind != pattern:
                    return False
            elif token.value != pattern:
                return False
        return True

    def match(self, *patterns: TokenKind | str) -> bool:
        if not self.peek(*patterns):
            return False
        self.index += len(patterns)
        return True

    def previous(self) -> Token:
        return self.tokens[self.index - 1]

    def error(self, message: str) -> ParseError:
        if self.has():
            token = self.tokens[self.index]
            found = f"{token.value!r}"
            pos: int | None = token.pos
        else:
            found = "end of input"
            last = self.tokens[-1] if self.tokens else None
            pos = last.pos + len(last.value) if last is not None else 0
        return ParseError(f"{message}, found {found}.", self.index, pos)

    def expect(self, pattern: TokenKind | str, what: str | None = None) -> Token:
        if not self.match(pattern):
            raise self.error(f"Expected {what or repr(pattern)}")
        return self.previous()

    def expect_identifier(self, what: str) -> str:
        return self.expect(TokenKind.IDENTIFIER, what).value

    def expect_end(self) -> None:
        if self.has():
            raise self.error("Expected end of input")

    # -- Program structure --

    def parse_source(self) -> Source:
        fields: list[FieldDef] = []
        methods: list[MethodDef] = []
        while self.match("LET"):
            fields.append(self.parse_field())
        while self.match("DEF"):
            methods.append(self.parse_method())
        self.expect_end()
        return Source(fields=fields, methods=methods)

    def parse_field(self) -> FieldDef:
        """IDENT ":" IDENT ("=" expression)? ";" (after LET)"""
        name = self.expect_identifier("a field name")
        self.expect(":")
        type_name = self.expect_identifier("a type name")
        value = self.parse_expression() if self.match("=") else None
        self.expect(";")
        return FieldDef(name=name, type_name=type_name, value=value)

    def parse_method(self) -> MethodDef:
        """IDENT "(" params ")" (":" IDENT)? "DO" statement* "END" (after DEF)"""
        name = self.expect_identifier("a method name")
        self.expect("(")
        parameters: list[str] = []
        type_names: list[str] = []
        if not self.peek(")"):
            while True:
                parameters.append(self.expect_identifier("a parameter name"))
                self.expect(":")
                type_names.append(self.expect_identifier("a parameter type"))
                if not self.match(","):
                    break
        self.expect(")")
        return_type_name = self.expect_identifier("a return type") if self.match(":") else None
        self.expect("DO")
        statements = self.parse_block("END")
        self.expect("END")
        return MethodDef(
            name=name,
            parameters=parameters,
            parameter_type_names=type_names,
            return_type_name=return_type_name,
            statements=statements,
        )

    def parse_block(self, *terminators: str) -> list[Stmt]:
        """Parse statements up to (not including) one of the terminators."""
        statements: list[Stmt] = []
        while not any(self.peek(t) for t in terminators):
            if not self.has():
                expected = " or ".join(terminators)
                raise self.error(f"Expected {expected}")
            statements.append(self.parse_statement())
        return statements

    # -- Statements --

    def parse_statement(self) -> Stmt:
        if self.match("LET"):
            return self.parse_declaration()
        if self.match("IF"):
            return self.parse_if()
        if self.match("FOR"):
            return self.parse_for()
        if self.match("WHILE"):
            return self.parse_while()
        if self.match("RETURN"):
            return self.parse_return()
        return self.parse_expression_statement()

    def parse_declaration(self) -> DeclarationStmt:
        name = self.expect_identifier("a variable name")
        type_name = self.expect_identifier("a type name") if self.match(":") else None
        value = self.parse_expression() if self.match("=") else None
        self.expect(";")
        return DeclarationStmt(name=name, type_name=type_name, value=value)

    def parse_if(self) -> IfStmt:
        condition = self.parse_expression()
        self.expect("DO")
        then_statements = self.parse_block("ELSE", "END")
        else_statements: list[Stmt] = []
        if self.match("ELSE"):
            else_statements = self.parse_block("END")
        self.expect("END")
        return IfStmt(
            condition=condition,
            then_statements=then_statements,
            else_statements=else_statements,
        )

    def parse_for(self) -> ForStmt:
        name = self.expect_identifier("a loop variable")
        self.expect("IN")
        value = self.parse_expression()
        self.expect("DO")
        statements = self.parse_block("END")
        self.expect("END")
        return ForStmt(name=name, value=value, statements=statements)

    def parse_while(self) -> WhileStmt:
        condition = self.parse_expression()
        self.expect("DO")
        statements = self.parse_block("END")
        self.expect("END")
        return WhileStmt(condition=condition, statements=statements)

    def parse_return(self) -> ReturnStmt:
        value = self.parse_expression()
        self.expect(";")
        return ReturnStmt(value=value)

    def parse_expression_statement(self) -> Stmt:
        expression = self.parse_expression()
        if self.match("="):
            value = self.parse_expression()
            self.expect(";")
            return AssignmentStmt(receiver=expression, value=value)
        self.expect(";")
        return ExpressionStmt(expression=expression)

    # -- Expressions --

    def parse_expression(self) -> Expr:
        return self.parse_logical()

    def _parse_binary(self, operators: tuple[str, ...], operand: Callable[[], Expr]) -> Expr:
        left = operand()
        for operator in operators:
            if self.match(operator):
                return BinaryExpr(op=BinaryOp(operator), left=left, right=operand())
        return left

    def parse_logical(self) -> Expr:
        return self._parse_binary(_LOGICAL, self.parse_equality)

    def parse_equality(self) -> Expr:
        return self._parse_binary(_EQUALITY, self.parse_additive)

    def parse_additive(self) -> Expr:
        return self._parse_binary(_ADDITIVE, self.parse_multiplicative)

    def parse_multiplicative(self) -> Expr:
        return self._parse_binary(_MULTIPLICATIVE, self.parse_secondary)

    def parse_secondary(self) -> Expr:
        receiver = self.parse_primary()
        if not self.match("."):
            return receiver
        name = self.expect_identifier("a member name")
        if self.match("("):
            return FuncCall(receiver=receiver, name=name, arguments=self.parse_arguments())
        return AccessExpr(receiver=receiver, name=name)

    def parse_arguments(self) -> list[Expr]:
        """args ")" (after the opening parenthesis)"""
        arguments: list[Expr] = []
        if not self.match(")"):
            arguments.append(self.parse_expression())
            while self.match(","):
                arguments.append(self.parse_expression())
            self.expect(")")
        return arguments

    def parse_primary(self) -> Expr:
        if self.match("NIL"):
            return Literal(value=None)
        if self.match("TRUE"):
            return Literal(value=True)
        if self.match("FALSE"):
            return Literal(value=False)
        if self.match(TokenKind.INTEGER):
            return Literal(value=int(self.previous().value))
        if self.match(TokenKind.DECIMAL):
            # Literals carry double precision: Decimal of the shortest repr.
            return Literal(value=Decimal(repr(float(self.previous().value))))
        if self.match(TokenKind.CHARACTER):
            text = unescape(self.previous().value[1:-1])
            return Literal(value=text, kind=LiteralKind.CHARACTER)
        if self.match(TokenKind.STRING):
            return Literal(value=unescape(self.previous().value[1:-1]))
        if self.match("("):
            expression = self.parse_expression()
            self.expect(")")
            return GroupExpr(expression=expression)
        if self.match(TokenKind.IDENTIFIER):
            name = self.previous().value
            if self.match("("):
                return FuncCall(name=name, arguments=self.parse_arguments())
            return AccessExpr(name=name)
        raise self.error("Expected an expression")


def parse(tokens: list[Token]) -> Source:
    """Parse a full program.

    Raises:
        ParseError: On the first grammar violation or on leftover tokens.
    """
    source = _Parser(tokens).parse_source()
    logger.debug(
        "Parsed %d fields and %d methods", len(source.fields), len(source.methods)
    )
    return source


def parse_expression(tokens: list[Token]) -> Expr:
    """Parse a single expression that spans the whole token list."""
    parser = _Parser(tokens)
    expression = parser.parse_expression()
    parser.expect_end()
    return expression
