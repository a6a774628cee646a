"""
plcscript - a small statically typed scripting language.

Tokenizer, parser, static analyzer, tree-walking interpreter and Java
emitter, plus a text-level pipeline and a command-line interface.
"""

from __future__ import annotations

import re
from importlib.metadata import version as _metadata_version
from pathlib import Path as _Path

from .core.errors import (
    LexError,
    ParseError,
    PlcError,
    PlcRuntimeError,
    RuntimeTypeError,
    ScopeError,
    StaticTypeError,
)


def _get_version() -> str:
    """Get version from pyproject.toml (editable) or importlib.metadata (installed)."""
    pyproject = _Path(__file__).parent.parent.parent / "pyproject.toml"
    if pyproject.exists():
        content = pyproject.read_text()
        if match := re.search(r'^version\s*=\s*["\']([^"\']+)["\']', content, re.MULTILINE):
            return match.group(1)

    try:
        return _metadata_version("plcscript")
    except Exception:
        return "0.0.0"


__version__ = _get_version()

__all__ = [
    "__version__",
    "LexError",
    "ParseError",
    "PlcError",
    "PlcRuntimeError",
    "RuntimeTypeError",
    "ScopeError",
    "StaticTypeError",
]
