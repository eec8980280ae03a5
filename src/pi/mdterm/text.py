"""Text pipeline helpers shared by the renderer handlers."""

from __future__ import annotations

from typing import Callable

TransformFn = Callable[[str], str]

# Stands in for ':' inside code spans until the emoji pass has run.
COLON_MARKER = "\ue003"

# Hard (non-reflowed) line break.  Upstream line-ending normalization and the
# private-use range keep it out of document text.
HARD_BREAK = "\ue000"

_ENTITIES = (
    ("&amp;", "&"),
    ("&lt;", "<"),
    ("&gt;", ">"),
    ("&quot;", '"'),
    ("&#39;", "'"),
)


def identity(text: str) -> str:
    return text


def compose(*funcs: TransformFn) -> TransformFn:
    """Compose transforms right to left: ``compose(f, g)(s) == f(g(s))``."""

    def composed(text: str) -> str:
        for func in reversed(funcs):
            text = func(text)
        return text

    return composed


def unescape_entities(text: str) -> str:
    for entity, char in _ENTITIES:
        text = text.replace(entity, char)
    return text


def protect_colons(text: str) -> str:
    return text.replace(":", COLON_MARKER)


def undo_colon(text: str) -> str:
    return text.replace(COLON_MARKER, ":")


def fix_hard_return(text: str, reflow: bool) -> str:
    """Turn hard-break markers back into newlines when reflowing."""
    return text.replace(HARD_BREAK, "\n") if reflow else text
