"""
Text-level driver: tokenize → parse → analyze → evaluate or emit.

Each stage runs only if the previous one succeeded and the first error
propagates unchanged, except that lexical and syntax errors get the
line/column context of their offset attached.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from plcscript.core.errors import LexError, ParseError, locate
from plcscript.core.ir.nodes import Source
from plcscript.core.lang.analyzer import analyze
from plcscript.core.lang.annotations import Annotations
from plcscript.core.lang.emitter import emit
from plcscript.core.lang.interpreter import evaluate
from plcscript.core.lang.parser import parse
from plcscript.core.lang.scope import Scope
from plcscript.core.lang.tokenizer import Token, tokenize
from plcscript.core.lang.values import RuntimeValue
from plcscript.core.settings import EmitConfig

logger = logging.getLogger(__name__)

__all__ = [
    "CheckedProgram",
    "check_text",
    "emit_text",
    "locate",
    "parse_text",
    "run_text",
    "tokenize_text",
]


@dataclass(frozen=True)
class CheckedProgram:
    """A parsed program together with its analysis results."""

    source: Source
    annotations: Annotations


def tokenize_text(text: str, file: Path | None = None) -> list[Token]:
    try:
        return tokenize(text)
    except LexError as e:
        e.with_context(locate(text, e.pos, file))
        raise


def parse_text(text: str, file: Path | None = None) -> Source:
    """Tokenize and parse ``text``.

    Raises:
        LexError: With source context attached.
        ParseError: With source context attached when the offset is known.
    """
    tokens = tokenize_text(text, file)
    try:
        return parse(tokens)
    except ParseError as e:
        if e.pos is not None:
            e.with_context(locate(text, e.pos, file))
        raise


def check_text(text: str, scope: Scope | None = None, file: Path | None = None) -> CheckedProgram:
    """Parse and analyze ``text``."""
    source = parse_text(text, file)
    annotations = analyze(source, scope)
    logger.debug("Checked %s", file or "<input>")
    return CheckedProgram(source=source, annotations=annotations)


def run_text(text: str, scope: Scope | None = None, file: Path | None = None) -> RuntimeValue:
    """Check ``text`` and evaluate it, returning the value ``main`` returned.

    ``scope`` is the root scope for both analysis and evaluation; use
    :func:`plcscript.core.lang.builtins.create_root_scope` to redirect
    ``print`` output.
    """
    program = check_text(text, scope, file)
    return evaluate(program.source, scope, program.annotations)


def emit_text(
    text: str,
    config: EmitConfig | None = None,
    scope: Scope | None = None,
    file: Path | None = None,
) -> str:
    """Check ``text`` and render it as Java source.

    ``scope`` supplies host functions for analysis, such as the
    IntegerIterable producer a FOR loop needs.
    """
    program = check_text(text, scope, file)
    return emit(program.source, program.annotations, config)
