"""
Built-in functions.

The language has exactly one built-in, ``print/1``. It lives in a root
scope that analyzers and interpreters use as their parent.
"""

from __future__ import annotations

import functools
from typing import TextIO

from plcscript.core.lang import types, values
from plcscript.core.lang.scope import Scope
from plcscript.core.lang.values import RuntimeValue


def create_root_scope(stream: TextIO | None = None) -> Scope:
    """Build a read-only root scope whose ``print`` writes to ``stream``.

    Args:
        stream: Output stream. ``None`` means ``sys.stdout`` as it is at
            call time (so pytest's ``capsys`` sees the output).
    """
    scope = Scope(None)

    def _print(arguments: list[RuntimeValue]) -> RuntimeValue:
        print(values.to_text(arguments[0]), file=stream)
        return values.NIL

    scope.define_function("print", "System.out.println", [types.ANY], types.NIL, _print)
    return scope.freeze()


@functools.cache
def builtin_scope() -> Scope:
    """The process-wide root scope writing to standard output."""
    return create_root_scope()
