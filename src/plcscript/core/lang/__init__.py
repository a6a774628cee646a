"""
plcscript language front end and evaluator.

Usage:
    from plcscript.core.lang import tokenize, parse, analyze, evaluate

    source = parse(tokenize("DEF main(): Integer DO RETURN 1; END"))
    annotations = analyze(source)
    result = evaluate(source, annotations=annotations)
    # result.value == 1
"""

from plcscript.core.lang.analyzer import analyze, require_assignable
from plcscript.core.lang.emitter import emit
from plcscript.core.lang.interpreter import evaluate
from plcscript.core.lang.parser import parse, parse_expression
from plcscript.core.lang.tokenizer import Token, TokenKind, tokenize

__all__ = [
    "Token",
    "TokenKind",
    "analyze",
    "emit",
    "evaluate",
    "parse",
    "parse_expression",
    "require_assignable",
    "tokenize",
]
