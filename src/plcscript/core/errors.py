"""
Error types for the plcscript tokenizer, parser, analyzer, and interpreter.

Every stage fails fast on its first error. Lexical and syntactic errors
carry a position that :func:`locate` turns into a line/column context for
display.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional


class PlcError(Exception):
    """Base exception for all plcscript errors."""

    def __init__(self, message: str, context: Optional["ErrorContext"] = None):
        self.message = message
        self.context = context
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format error message with context if available."""
        if self.context:
            return f"{self.context.format()}\n{self.message}"
        return self.message

    def with_context(self, context: "ErrorContext") -> "PlcError":
        """Attach source context after the fact (the pipeline knows the text)."""
        self.context = context
        self.args = (self._format_message(),)
        return self


class LexError(PlcError):
    """
    Raised when no token shape matches or a token is malformed.

    Examples:
    - Unterminated string or character literal
    - Empty or multi-character character literal
    - Unrecognized escape sequence
    """

    def __init__(self, message: str, pos: int, context: Optional["ErrorContext"] = None):
        self.pos = pos
        super().__init__(message, context)


class ParseError(PlcError):
    """
    Raised when the token sequence does not follow the grammar.

    ``index`` is the index of the offending token (``len(tokens)`` at end of
    input); ``pos`` is its source offset when known.
    """

    def __init__(
        self,
        message: str,
        index: int,
        pos: int | None = None,
        context: Optional["ErrorContext"] = None,
    ):
        self.index = index
        self.pos = pos
        super().__init__(message, context)


class StaticTypeError(PlcError):
    """
    Raised when a program violates a static typing or shape rule.

    Examples:
    - Value not assignable to the declared type
    - Non-boolean condition
    - Integer literal wider than 32 bits
    - Missing ``main/0`` entry point
    """

    pass


class ScopeError(PlcError):
    """Raised by a Scope for undefined or duplicate names."""

    pass


class PlcRuntimeError(PlcError):
    """Raised when evaluation fails (division by zero, unresolved names...)."""

    pass


class RuntimeTypeError(PlcRuntimeError):
    """Raised when a runtime value lacks the representation an operator needs."""

    pass


@dataclass
class ErrorContext:
    """
    Context information for an error, including source location.

    Attributes:
        line: Line number (1-indexed)
        column: Column number (1-indexed)
        file: Optional path of the source file
        snippet: Optional source lines around the error
        first_line: Line number of the first snippet line
    """

    line: int
    column: int
    file: Path | None = None
    snippet: str | None = None
    first_line: int = 1

    def format(self) -> str:
        """
        Format error context as a human-readable string.

        Returns:
            Formatted string like: "program.plc:3:5"
        """
        location = f"{self.file or '<input>'}:{self.line}:{self.column}"
        if self.snippet:
            return f"{location}\n{self._format_snippet()}"
        return location

    def _format_snippet(self) -> str:
        """Format code snippet with line numbers and error marker."""
        if not self.snippet:
            return ""

        formatted = []
        for i, line in enumerate(self.snippet.split("\n")):
            line_num = self.first_line + i
            prefix = f"{line_num:4d} | "
            formatted.append(prefix + line)

            if line_num == self.line:
                marker_pos = len(prefix) + self.column - 1
                formatted.append(" " * marker_pos + "^")

        return "\n".join(formatted)


def locate(text: str, pos: int, file: Path | None = None, radius: int = 2) -> ErrorContext:
    """
    Build an ErrorContext for a source offset.

    Args:
        text: Full source text
        pos: 0-indexed offset (clamped to the text length)
        file: Optional path used in the location prefix
        radius: Number of lines shown before and after the error line

    Returns:
        ErrorContext with line, column and a snippet of nearby lines
    """
    pos = max(0, min(pos, len(text)))
    line = text.count("\n", 0, pos) + 1
    column = pos - (text.rfind("\n", 0, pos) + 1) + 1

    lines = text.split("\n")
    first = max(1, line - radius)
    last = min(len(lines), line + radius)
    snippet = "\n".join(lines[first - 1 : last])

    return ErrorContext(line=line, column=column, file=file, snippet=snippet, first_line=first)
