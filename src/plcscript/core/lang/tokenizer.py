"""
Tokenizer for plcscript.

Converts source text into a flat list of tokens. Keywords are not a
separate kind: ``LET``, ``DEF`` and friends are IDENTIFIER tokens that the
parser matches by text. No end-of-input token is produced.
"""

from __future__ import annotations

import logging
import re
from enum import StrEnum, auto

from plcscript.core.errors import LexError

logger = logging.getLogger(__name__)


class TokenKind(StrEnum):
    """Token kinds for plcscript."""

    IDENTIFIER = auto()
    INTEGER = auto()
    DECIMAL = auto()
    CHARACTER = auto()
    STRING = auto()
    OPERATOR = auto()


class Token:
    """A single token: its kind, literal source text and start offset."""

    __slots__ = ("kind", "value", "pos")

    def __init__(self, kind: TokenKind, value: str, pos: int) -> None:
        self.kind = kind
        self.value = value
        self.pos = pos

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Token):
            return NotImplemented
        return (self.kind, self.value, self.pos) == (other.kind, other.value, other.pos)

    def __hash__(self) -> int:
        return hash((self.kind, self.value, self.pos))

    def __repr__(self) -> str:
        return f"Token({self.kind}, {self.value!r}, pos={self.pos})"


_WHITESPACE = "[ \b\n\r\t]"
_ESCAPE = "[bnrt'\"\\\\]"
_COMPARISON_OPERATORS = ("<=", ">=", "==", "!=")


class _Lexer:
    """Single-pass scanner over a character window.

    ``peek`` and ``match`` take one regular expression per upcoming
    character; ``emit`` turns the characters consumed since the last
    emit into a token.
    """

    def __init__(self, source: str) -> None:
        self.source = source
        self.index = 0
        self.length = 0

    def has(self, offset: int) -> bool:
        return self.index + self.length + offset < len(self.source)

    def get(self, offset: int) -> str:
        return self.source[self.index + self.length + offset]

    def peek(self, *patterns: str) -> bool:
        for offset, pattern in enumerate(patterns):
            if not self.has(offset) or not re.fullmatch(pattern, self.get(offset)):
                return False
        return True

    def match(self, *patterns: str) -> bool:
        if not self.peek(*patterns):
            return False
        self.length += len(patterns)
        return True

    def skip(self) -> None:
        self.index += self.length
        self.length = 0

    def emit(self, kind: TokenKind) -> Token:
        token = Token(kind, self.source[self.index : self.index + self.length], self.index)
        self.skip()
        return token

    # -- Token shapes --

    def lex(self) -> list[Token]:
        tokens: list[Token] = []
        while self.has(0):
            if self.match(_WHITESPACE):
                self.skip()
            else:
                tokens.append(self.lex_token())
        return tokens

    def lex_token(self) -> Token:
        if self.peek("[A-Za-z]"):
            return self.lex_identifier()
        if self.peek('"'):
            return self.lex_string()
        if self.peek("'"):
            return self.lex_character()
        if self.peek("[+-]", "[0-9]") or self.peek("[0-9]"):
            return self.lex_number()
        return self.lex_operator()

    def lex_identifier(self) -> Token:
        self.match("[A-Za-z]")
        while self.match("[A-Za-z0-9_-]"):
            pass
        return self.emit(TokenKind.IDENTIFIER)

    def lex_number(self) -> Token:
        self.match("[+-]")
        while self.match("[0-9]"):
            pass
        if self.match(r"\.", "[0-9]"):
            while self.match("[0-9]"):
                pass
            return self.emit(TokenKind.DECIMAL)
        return self.emit(TokenKind.INTEGER)

    def lex_character(self) -> Token:
        start = self.index
        self.match("'")
        if self.peek("'"):
            raise LexError("Empty character literal.", start)
        if self.peek(r"\\"):
            self.lex_escape()
        elif not self.match("[^'\n\r]"):
            raise LexError("Unterminated character literal.", start)
        if self.match("'"):
            return self.emit(TokenKind.CHARACTER)
        if self.peek("[^'\n\r]"):
            raise LexError("Character literal has more than one character.", start)
        raise LexError("Unterminated character literal.", start)

    def lex_string(self) -> Token:
        start = self.index
        self.match('"')
        while self.peek('[^"\n\r]'):
            if self.peek(r"\\"):
                self.lex_escape()
            else:
                self.match('[^"\n\r]')
        if not self.match('"'):
            raise LexError("Unterminated string literal.", start)
        return self.emit(TokenKind.STRING)

    def lex_escape(self) -> None:
        backslash = self.index + self.length
        if self.match(r"\\", _ESCAPE):
            return
        if not self.has(1):
            # A trailing backslash is reported by the caller as unterminated.
            self.match(r"\\")
            return
        raise LexError(f"Invalid escape sequence \\{self.get(1)}.", backslash)

    def lex_operator(self) -> Token:
        for operator in _COMPARISON_OPERATORS:
            if self.match(*(re.escape(ch) for ch in operator)):
                return self.emit(TokenKind.OPERATOR)
        self.match(".")
        return self.emit(TokenKind.OPERATOR)


def tokenize(source: str) -> list[Token]:
    """Tokenize plcscript source text.

    Raises:
        LexError: On a malformed literal; ``pos`` is the offset of the
            opening quote, or of the backslash for an invalid escape.
    """
    tokens = _Lexer(source).lex()
    logger.debug("Tokenized %d characters into %d tokens", len(source), len(tokens))
    return tokens
