"""Tests for the plcscript tokenizer.

Covers:
- Token shapes: identifiers, numbers, characters, strings, operators
- Whitespace handling and the non-whitespace round-trip
- LexError offsets for malformed literals
"""

from __future__ import annotations

import re

import pytest

from plcscript.core.errors import LexError
from plcscript.core.lang.tokenizer import Token, TokenKind, tokenize


def kinds(text: str) -> list[TokenKind]:
    return [token.kind for token in tokenize(text)]


def texts(text: str) -> list[str]:
    return [token.value for token in tokenize(text)]


# ============================================================================
# Token shapes
# ============================================================================


class TestIdentifiers:
    def test_keyword_is_identifier(self) -> None:
        assert tokenize("LET") == [Token(TokenKind.IDENTIFIER, "LET", 0)]

    def test_underscore_and_hyphen_continue_identifier(self) -> None:
        assert texts("a_b-c1 x") == ["a_b-c1", "x"]

    def test_identifier_cannot_start_with_digit(self) -> None:
        assert kinds("1abc") == [TokenKind.INTEGER, TokenKind.IDENTIFIER]


class TestNumbers:
    def test_integer(self) -> None:
        assert tokenize("42") == [Token(TokenKind.INTEGER, "42", 0)]

    def test_decimal(self) -> None:
        assert tokenize("3.14") == [Token(TokenKind.DECIMAL, "3.14", 0)]

    def test_signed_numbers(self) -> None:
        assert tokenize("-5 +1.5") == [
            Token(TokenKind.INTEGER, "-5", 0),
            Token(TokenKind.DECIMAL, "+1.5", 3),
        ]

    def test_sign_without_digit_is_operator(self) -> None:
        assert kinds("- 5") == [TokenKind.OPERATOR, TokenKind.INTEGER]

    def test_trailing_dot_not_consumed(self) -> None:
        assert tokenize("1.") == [
            Token(TokenKind.INTEGER, "1", 0),
            Token(TokenKind.OPERATOR, ".", 1),
        ]

    def test_dot_before_identifier(self) -> None:
        assert texts("1.foo") == ["1", ".", "foo"]


class TestCharacters:
    def test_character(self) -> None:
        assert tokenize("'c'") == [Token(TokenKind.CHARACTER, "'c'", 0)]

    def test_escaped_character(self) -> None:
        assert tokenize("'\\n'") == [Token(TokenKind.CHARACTER, "'\\n'", 0)]

    def test_escaped_quote(self) -> None:
        assert texts("'\\''") == ["'\\''"]

    def test_empty_character_fails_at_quote(self) -> None:
        with pytest.raises(LexError) as exc_info:
            tokenize("x ''")
        assert exc_info.value.pos == 2

    def test_multiple_characters_fail_at_quote(self) -> None:
        with pytest.raises(LexError) as exc_info:
            tokenize("'ab'")
        assert exc_info.value.pos == 0

    def test_unterminated_character(self) -> None:
        with pytest.raises(LexError) as exc_info:
            tokenize("'a")
        assert exc_info.value.pos == 0

    def test_invalid_escape_fails_at_backslash(self) -> None:
        with pytest.raises(LexError) as exc_info:
            tokenize("'\\q'")
        assert exc_info.value.pos == 1


class TestStrings:
    def test_string_keeps_literal_text(self) -> None:
        assert tokenize('"a\\nb"') == [Token(TokenKind.STRING, '"a\\nb"', 0)]

    def test_string_with_spaces(self) -> None:
        assert texts('print("hello world")') == ["print", "(", '"hello world"', ")"]

    def test_escaped_quote_does_not_terminate(self) -> None:
        assert texts('"say \\"hi\\""') == ['"say \\"hi\\""']

    def test_all_escapes(self) -> None:
        assert kinds('"\\b\\n\\r\\t\\\'\\"\\\\"') == [TokenKind.STRING]

    def test_unterminated_fails_at_opening_quote(self) -> None:
        with pytest.raises(LexError) as exc_info:
            tokenize('"unterminated')
        assert exc_info.value.pos == 0

    def test_unterminated_after_other_tokens(self) -> None:
        with pytest.raises(LexError) as exc_info:
            tokenize('x = "abc')
        assert exc_info.value.pos == 4

    def test_newline_terminates_string(self) -> None:
        with pytest.raises(LexError) as exc_info:
            tokenize('"a\nb"')
        assert exc_info.value.pos == 0

    def test_invalid_escape_fails_at_backslash(self) -> None:
        with pytest.raises(LexError) as exc_info:
            tokenize('"bad \\q"')
        assert exc_info.value.pos == 5

    def test_trailing_backslash_is_unterminated(self) -> None:
        with pytest.raises(LexError) as exc_info:
            tokenize('"abc\\')
        assert exc_info.value.pos == 0


class TestOperators:
    @pytest.mark.parametrize("op", ["<=", ">=", "==", "!="])
    def test_comparison_operators_are_single_tokens(self, op: str) -> None:
        assert tokenize(op) == [Token(TokenKind.OPERATOR, op, 0)]

    def test_separated_characters_stay_separate(self) -> None:
        assert texts("< =") == ["<", "="]

    def test_any_other_character(self) -> None:
        assert texts("&&;(") == ["&", "&", ";", "("]

    def test_statement(self) -> None:
        assert tokenize("LET x = 5;") == [
            Token(TokenKind.IDENTIFIER, "LET", 0),
            Token(TokenKind.IDENTIFIER, "x", 4),
            Token(TokenKind.OPERATOR, "=", 6),
            Token(TokenKind.INTEGER, "5", 8),
            Token(TokenKind.OPERATOR, ";", 9),
        ]


# ============================================================================
# Whitespace
# ============================================================================


class TestWhitespace:
    def test_only_whitespace(self) -> None:
        assert tokenize(" \t\r\n\b") == []

    def test_empty_input(self) -> None:
        assert tokenize("") == []

    def test_round_trip_reproduces_non_whitespace(self) -> None:
        text = (
            "LET x: Integer = 1 + 2;\n"
            "DEF main(): Integer DO\n"
            "\tIF x >= -3 AND 'c' != 'd' DO\r\n"
            '\t\tprint("a\\tb");\n'
            "\tEND\n"
            "\tRETURN x;\n"
            "END\n"
        )
        skeleton = re.sub("[ \b\n\r\t]", "", text)
        assert "".join(texts(text)) == skeleton
