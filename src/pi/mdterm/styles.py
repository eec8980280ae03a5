"""Style functions: composable ANSI SGR wrappers.

``style("green", "bold")`` returns a callable that wraps text in the opening
codes of both attributes and closes them in reverse order.  Nested styles are
kept intact: a closing code of the same attribute already present inside the
text re-opens the outer style, and every line of multi-line text is closed and
re-opened around its newline so that styles never bleed across lines.
"""

from __future__ import annotations

import re
from typing import Callable

from pi.mdterm.text import identity

StyleFn = Callable[[str], str]

# name -> (open, close)
_SGR: dict[str, tuple[int, int]] = {
    "reset": (0, 0),
    "bold": (1, 22),
    "dim": (2, 22),
    "italic": (3, 23),
    "underline": (4, 24),
    "inverse": (7, 27),
    "hidden": (8, 28),
    "strikethrough": (9, 29),
    # Foreground colors
    "black": (30, 39),
    "red": (31, 39),
    "green": (32, 39),
    "yellow": (33, 39),
    "blue": (34, 39),
    "magenta": (35, 39),
    "cyan": (36, 39),
    "white": (37, 39),
    "gray": (90, 39),
    "grey": (90, 39),
    "red_bright": (91, 39),
    "green_bright": (92, 39),
    "yellow_bright": (93, 39),
    "blue_bright": (94, 39),
    "magenta_bright": (95, 39),
    "cyan_bright": (96, 39),
    "white_bright": (97, 39),
    # Background colors
    "bg_black": (40, 49),
    "bg_red": (41, 49),
    "bg_green": (42, 49),
    "bg_yellow": (43, 49),
    "bg_blue": (44, 49),
    "bg_magenta": (45, 49),
    "bg_cyan": (46, 49),
    "bg_white": (47, 49),
    "bg_gray": (100, 49),
    "bg_grey": (100, 49),
}

_NEWLINE_RE = re.compile(r"\r?\n")


def _sgr(code: int) -> str:
    return f"\x1b[{code}m"


def style(*names: str) -> StyleFn:
    """Build a style function applying the SGR attributes *names* in order.

    Raises ``ValueError`` for an unknown attribute name.
    """
    codes: list[tuple[str, str]] = []
    for name in names:
        try:
            open_code, close_code = _SGR[name]
        except KeyError:
            raise ValueError(f"Unknown style: {name!r}") from None
        codes.append((_sgr(open_code), _sgr(close_code)))

    if not codes:
        return identity

    open_all = "".join(o for o, _ in codes)
    close_all = "".join(c for _, c in reversed(codes))

    def apply(text: str) -> str:
        if not text:
            return text
        if "\x1b" in text:
            for open_code, close_code in reversed(codes):
                text = text.replace(close_code, open_code)
        if "\n" in text:
            text = _NEWLINE_RE.sub(lambda m: close_all + m.group(0) + open_all, text)
        return open_all + text + close_all

    return apply


def parse_style(spec: str) -> StyleFn:
    """Build a style function from a space-separated spec like ``"green bold"``."""
    return style(*spec.replace(".", " ").split())


# ---------------------------------------------------------------------------
# Default scheme
# ---------------------------------------------------------------------------

CODE = style("yellow")
BLOCKQUOTE = style("gray", "italic")
HTML = style("gray")
HEADING = style("green", "bold")
FIRST_HEADING = style("magenta", "underline", "bold")
HR = style("reset")
LISTITEM = style("reset")
TABLE = style("reset")
PARAGRAPH = style("reset")
STRONG = style("bold")
EM = style("italic")
CODESPAN = style("yellow")
DELETE = style("dim", "gray", "strikethrough")
LINK = style("blue")
HREF = style("blue", "underline")
