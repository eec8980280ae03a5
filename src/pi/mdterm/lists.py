"""List bulleting/numbering, indentation and nested-list repair."""

from __future__ import annotations

import re
from functools import lru_cache

# Prefixes every rendered list item until the list formatter replaces it
# with the final point marker.
BULLET_MARKER = "\ue004"

BULLET_POINT = "* "

_BULLET_POINT_PATTERN = r"\*"
_NUMBERED_POINT_PATTERN = r"\d+\."
_POINT_PATTERN = f"(?:{_BULLET_POINT_PATTERN}|{_NUMBERED_POINT_PATTERN})"


@lru_cache(maxsize=16)
def _pointed_line_re(indent: str) -> re.Pattern[str]:
    return re.compile(f"(?:{re.escape(indent)})*{_POINT_PATTERN}")


@lru_cache(maxsize=16)
def _nested_point_re(indent: str) -> re.Pattern[str]:
    # Last char of the parent point plus up to two trailing spaces, then the
    # indentation and body of the sub point.
    return re.compile(
        r"(\S(?: |  )?)"
        f"((?:{re.escape(indent)})+)"
        f"({_POINT_PATTERN}.*)$"
    )


def section(text: str) -> str:
    """Terminate a block with a blank line."""
    return text + "\n\n"


def indent_lines(indent: str, text: str) -> str:
    """Indent every non-empty line of *text*."""
    return "\n".join(indent + line if line else line for line in text.split("\n"))


def indentify(indent: str, text: str) -> str:
    """Indent every line of *text*, empty ones included."""
    if not text:
        return text
    return indent + text.replace("\n", "\n" + indent)


def is_pointed_line(line: str, indent: str) -> bool:
    """Whether *line* starts, after whole indent units, with ``*`` or ``N.``."""
    return _pointed_line_re(indent).match(line) is not None


def numbered_point(n: int) -> str:
    return f"{n}. "


def _to_spaces(text: str) -> str:
    return " " * len(text)


def bullet_point_lines(lines: str, indent: str) -> str:
    out: list[str] = []
    for line in lines.split("\n"):
        if not line:
            continue
        if line.startswith(BULLET_MARKER):
            out.append(BULLET_POINT + line[len(BULLET_MARKER) :])
        elif is_pointed_line(line, indent):
            out.append(line)
        else:
            out.append(_to_spaces(BULLET_POINT) + line)
    return "\n".join(out)


def numbered_lines(lines: str, indent: str) -> str:
    out: list[str] = []
    num = 0
    for line in lines.split("\n"):
        if not line:
            continue
        if line.startswith(BULLET_MARKER):
            num += 1
            out.append(numbered_point(num) + line[len(BULLET_MARKER) :])
        elif is_pointed_line(line, indent):
            out.append(line)
        else:
            out.append(_to_spaces(numbered_point(num)) + line)
    return "\n".join(out)


def format_list(body: str, ordered: bool, indent: str) -> str:
    """Replace item placeholders in *body* with bullets or numbers.

    Continuation lines are padded to line up with the text after the point;
    lines that already carry a point (nested lists) are left alone.
    """
    body = body.strip()
    if ordered:
        return numbered_lines(body, indent)
    return bullet_point_lines(body, indent)


def fix_nested_lists(body: str, indent: str) -> str:
    """Move sub points glued to the end of their parent line onto their own line."""
    pattern = _nested_point_re(indent)
    out: list[str] = []
    for line in body.split("\n"):
        match = pattern.search(line)
        if match is None:
            out.append(line)
            continue
        out.append(line[: match.end(1)])
        out.append(indent + line[match.start(2) :])
    return "\n".join(out)
