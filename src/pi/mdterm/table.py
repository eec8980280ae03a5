"""Table assembly: flattened, marker-delimited rows back into a grid.

While the tree walker renders a table, every cell is terminated by
:data:`CELL_SPLIT` and every row is wrapped on both sides by :data:`ROW_WRAP`.
The flattened text goes through the inline text pipeline in one piece and is
then split back into rows of cells for the layout.
"""

from __future__ import annotations

import re
from typing import Any, Mapping

from pi.mdterm.layout import TableLayout
from pi.mdterm.text import TransformFn, identity

CELL_SPLIT = "\ue001"
ROW_WRAP = "\ue002"

_ROW_RE = re.compile(f"{ROW_WRAP}(.*?){ROW_WRAP}", re.DOTALL)


def terminate_cell(content: str) -> str:
    return content + CELL_SPLIT


def wrap_row(content: str) -> str:
    return ROW_WRAP + content + ROW_WRAP + "\n"


def split_table_rows(text: str, transform: TransformFn = identity) -> list[list[str]]:
    """Split marker-delimited *text* into rows of cells.

    *transform* is applied once to the whole text before splitting.  Each
    cell is terminated (not separated) by its marker, so the empty trailing
    piece of every split is dropped.
    """
    if not text:
        return []
    rows: list[list[str]] = []
    for match in _ROW_RE.finditer(transform(text)):
        cells = match.group(1).split(CELL_SPLIT)
        rows.append(cells[:-1])
    return rows


def assemble_table(
    header: str,
    body: str,
    transform: TransformFn = identity,
    options: Mapping[str, Any] | None = None,
) -> str:
    """Lay out the flattened *header* and *body* rows as a bordered table.

    A ``head`` entry in *options* replaces the rendered header row.
    """
    head_rows = split_table_rows(header, transform)
    settings = dict(options or {})
    settings.setdefault("head", head_rows[0] if head_rows else None)
    table = TableLayout(**settings)
    for row in split_table_rows(body, transform):
        table.push(row)
    return table.to_string()
