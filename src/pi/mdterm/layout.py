"""Box-drawing table layout.

:class:`TableLayout` takes a header row and data rows of already rendered
(possibly styled) cell strings and produces a bordered text block::

    ┌──────┬──────┐
    │ A    │ B    │
    ├──────┼──────┤
    │ 1    │ 2    │
    └──────┴──────┘

Column widths follow the widest cell unless fixed through ``col_widths``;
fixed-width cells are word-wrapped (``word_wrap``) or truncated.
"""

from __future__ import annotations

import logging
from typing import Any, Sequence

from pi.mdterm.ansi import display_width, take_columns
from pi.mdterm.reflow import reflow_text
from pi.mdterm.styles import StyleFn, style

logger = logging.getLogger(__name__)

DEFAULT_CHARS: dict[str, str] = {
    "top": "─",
    "top-mid": "┬",
    "top-left": "┌",
    "top-right": "┐",
    "bottom": "─",
    "bottom-mid": "┴",
    "bottom-left": "└",
    "bottom-right": "┘",
    "left": "│",
    "left-mid": "├",
    "mid": "─",
    "mid-mid": "┼",
    "right": "│",
    "right-mid": "┤",
    "middle": "│",
}

DEFAULT_STYLE: dict[str, Any] = {
    "padding_left": 1,
    "padding_right": 1,
    "head": ["red"],
    "border": ["grey"],
    "compact": False,
}


class TableLayout:
    """Lays out rows of cell strings inside box-drawing borders."""

    def __init__(
        self,
        head: Sequence[str] | None = None,
        *,
        chars: dict[str, str] | None = None,
        style: dict[str, Any] | None = None,
        col_widths: Sequence[int | None] | None = None,
        col_aligns: Sequence[str | None] | None = None,
        word_wrap: bool = False,
        truncate: str = "…",
        **extra: Any,
    ) -> None:
        if extra:
            logger.debug("Ignoring unknown table options: %s", sorted(extra))
        self._head = list(head or [])
        self._rows: list[list[str]] = []
        self._chars = {**DEFAULT_CHARS, **(chars or {})}
        self._style = {**DEFAULT_STYLE, **(style or {})}
        self._col_widths = list(col_widths or [])
        self._col_aligns = list(col_aligns or [])
        self._word_wrap = word_wrap
        self._truncate = truncate

        self._head_style = _style_fn(self._style["head"])
        self._border_style = _style_fn(self._style["border"])

    def push(self, row: Sequence[str]) -> None:
        self._rows.append([str(cell) for cell in row])

    def __len__(self) -> int:
        return len(self._rows)

    # -- rendering ----------------------------------------------------------

    def to_string(self) -> str:
        rows = ([self._head] if self._head else []) + self._rows
        num_cols = max((len(row) for row in rows), default=0)
        if num_cols == 0:
            return ""

        pad_left = int(self._style["padding_left"])
        pad_right = int(self._style["padding_right"])
        widths = self._column_widths(rows, num_cols, pad_left + pad_right)

        lines: list[str] = []
        self._add_border(lines, widths, "top", "top-left", "top-mid", "top-right")

        has_head = bool(self._head)
        for index, row in enumerate(rows):
            is_head = has_head and index == 0
            # Compact tables only separate the header from the body.
            if index > 0 and (not self._style["compact"] or (has_head and index == 1)):
                self._add_border(lines, widths, "mid", "left-mid", "mid-mid", "right-mid")
            lines.extend(self._render_row(row, widths, num_cols, pad_left, pad_right, is_head))

        self._add_border(lines, widths, "bottom", "bottom-left", "bottom-mid", "bottom-right")
        return "\n".join(lines)

    def __str__(self) -> str:
        return self.to_string()

    def _column_widths(
        self, rows: list[list[str]], num_cols: int, padding: int
    ) -> list[int]:
        widths: list[int] = []
        for col in range(num_cols):
            fixed = self._col_widths[col] if col < len(self._col_widths) else None
            if fixed:
                widths.append(max(fixed - padding, 1))
                continue
            natural = 0
            for row in rows:
                if col < len(row):
                    for line in row[col].split("\n"):
                        natural = max(natural, display_width(line))
            widths.append(natural)
        return widths

    def _cell_lines(self, text: str, width: int, fixed: bool) -> list[str]:
        if fixed and self._word_wrap:
            text = reflow_text(text, width)
        lines = text.split("\n")
        if fixed:
            lines = [self._fit(line, width) for line in lines]
        return lines

    def _fit(self, line: str, width: int) -> str:
        if display_width(line) <= width:
            return line
        room = width - display_width(self._truncate)
        if room <= 0:
            return take_columns(line, width)
        return take_columns(line, room) + self._truncate

    def _render_row(
        self,
        row: list[str],
        widths: list[int],
        num_cols: int,
        pad_left: int,
        pad_right: int,
        is_head: bool,
    ) -> list[str]:
        cells: list[list[str]] = []
        for col in range(num_cols):
            text = row[col] if col < len(row) else ""
            fixed = col < len(self._col_widths) and bool(self._col_widths[col])
            cells.append(self._cell_lines(text, widths[col], fixed))

        height = max(len(cell) for cell in cells)
        left = self._border_style(self._chars["left"])
        middle = self._border_style(self._chars["middle"])
        right = self._border_style(self._chars["right"])

        out: list[str] = []
        for line_idx in range(height):
            parts: list[str] = []
            for col, cell in enumerate(cells):
                content = cell[line_idx] if line_idx < len(cell) else ""
                content = self._align(content, widths[col], col)
                if is_head:
                    content = self._head_style(content)
                parts.append(" " * pad_left + content + " " * pad_right)
            out.append(left + middle.join(parts) + right)
        return out

    def _align(self, content: str, width: int, col: int) -> str:
        gap = max(0, width - display_width(content))
        align = self._col_aligns[col] if col < len(self._col_aligns) else None
        if align == "right":
            return " " * gap + content
        if align == "center":
            left = gap // 2
            return " " * left + content + " " * (gap - left)
        return content + " " * gap

    def _add_border(
        self,
        lines: list[str],
        widths: list[int],
        fill: str,
        left: str,
        mid: str,
        right: str,
    ) -> None:
        pad = int(self._style["padding_left"]) + int(self._style["padding_right"])
        segments = [self._chars[fill] * (w + pad) for w in widths]
        line = self._chars[left] + self._chars[mid].join(segments) + self._chars[right]
        if line:
            lines.append(self._border_style(line))


def _style_fn(names: Sequence[str] | str) -> StyleFn:
    if isinstance(names, str):
        names = names.split()
    return style(*names)
