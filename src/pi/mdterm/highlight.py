"""Syntax highlighting of fenced code through Pygments."""

from __future__ import annotations

from typing import Any

from pygments import highlight
from pygments.formatters import get_formatter_by_name
from pygments.lexers import get_lexer_by_name, guess_lexer

DEFAULT_FORMATTER = "terminal"


def highlight_code(code: str, language: str | None = None, **options: Any) -> str:
    """Highlight *code* as *language*, guessing the lexer when it is not given.

    ``formatter`` selects the Pygments formatter by name; every other option
    is passed to it.  Raises ``pygments.util.ClassNotFound`` for unknown
    languages or formatters.
    """
    options = dict(options)
    formatter = get_formatter_by_name(options.pop("formatter", DEFAULT_FORMATTER), **options)
    if language:
        lexer = get_lexer_by_name(language, stripnl=False, ensurenl=False)
    else:
        lexer = guess_lexer(code, stripnl=False, ensurenl=False)

    result = highlight(code, lexer, formatter)
    if not code.endswith("\n") and result.endswith("\n"):
        result = result[:-1]
    return result
