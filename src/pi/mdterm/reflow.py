"""Reflow engine: escape-aware greedy word wrap.

Hard breaks (the :data:`~pi.mdterm.text.HARD_BREAK` marker, plus ``<br />``
when rendering GFM) split the text into sections that are wrapped
independently.  Inside a section, escape sequences are never split and never
count towards the column; words longer than the width are split over as many
lines as needed.
"""

from __future__ import annotations

import re

from pi.mdterm.ansi import ANSI_PATTERN, text_length
from pi.mdterm.text import HARD_BREAK

_HARD_BREAK_RE = re.compile(re.escape(HARD_BREAK))
_HARD_BREAK_GFM_RE = re.compile(re.escape(HARD_BREAK) + r"|<br\s*/?>")
_ESCAPE_SPLIT_RE = re.compile(f"({ANSI_PATTERN})")
_WHITESPACE_RE = re.compile(r"[ \t\n]+")


def reflow_text(text: str, width: int, gfm: bool = False) -> str:
    """Munge newlines and spaces in *text* so no line is wider than *width*."""
    if not text:
        return ""

    width = max(1, width)
    split_re = _HARD_BREAK_GFM_RE if gfm else _HARD_BREAK_RE

    lines: list[str] = []
    for section in split_re.split(text):
        lines.extend(_reflow_section(section, width))
    return "\n".join(lines)


def _split_words(section: str) -> list[str]:
    """Split *section* into words on visible whitespace.

    Escape sequences stay attached to the word they precede (or end); a word
    may span several escape sequences, e.g. ``bo\\x1b[1mld``.
    """
    words: list[str] = []
    current: list[str] = []
    has_text = False

    for piece in _ESCAPE_SPLIT_RE.split(section):
        if not piece:
            continue
        if piece.startswith("\x1b") and not text_length(piece):
            current.append(piece)
            continue
        for i, chunk in enumerate(_WHITESPACE_RE.split(piece)):
            if i and has_text:
                words.append("".join(current))
                current = []
                has_text = False
            if chunk:
                current.append(chunk)
                has_text = True

    if current:
        words.append("".join(current))
    return words


def split_at_column(word: str, column: int) -> tuple[str, str]:
    """Split *word* after *column* visible characters, keeping escapes whole."""
    head: list[str] = []
    count = 0
    pieces = _ESCAPE_SPLIT_RE.split(word)

    for index, piece in enumerate(pieces):
        if not piece:
            continue
        if piece.startswith("\x1b") and not text_length(piece):
            if count >= column:
                return "".join(head), "".join(pieces[index:])
            head.append(piece)
            continue
        take = column - count
        if len(piece) >= take:
            head.append(piece[:take])
            return "".join(head), piece[take:] + "".join(pieces[index + 1 :])
        head.append(piece)
        count += len(piece)

    return "".join(head), ""


def _flush(lines: list[str], line: str) -> str:
    """Push *line* if it has visible content; return what carries over."""
    if text_length(line):
        lines.append(line)
        return ""
    return line


def _reflow_section(section: str, width: int) -> list[str]:
    lines: list[str] = []
    line = ""
    column = 0

    for word in _split_words(section):
        length = text_length(word)
        if not length:
            line += word
            continue

        gap = 1 if column else 0
        if column + gap + length <= width:
            line += " " * gap + word
            column += gap + length
            continue

        if length <= width:
            line = _flush(lines, line) + word
            column = length
            continue

        # The word is longer than a whole line: split it.
        room = width - column - gap
        if room <= 0:
            line = _flush(lines, line)
            gap = 0
            room = width
        head, rest = split_at_column(word, room)
        line = _flush(lines, line + " " * gap + head)

        while text_length(rest) >= width:
            chunk, rest = split_at_column(rest, width)
            lines.append(line + chunk)
            line = ""

        line += rest
        column = text_length(rest)

    # Trailing escapes (closing codes) belong to the last line.
    tail = _flush(lines, line)
    if tail:
        if lines:
            lines[-1] += tail
        else:
            lines.append(tail)
    return lines
