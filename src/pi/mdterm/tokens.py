"""Document token variants consumed by the renderer.

The set is closed: the renderer dispatches over exactly these classes.  Tokens
are treated as borrowed; handlers never mutate them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal, Union

Align = Literal["left", "center", "right"] | None


@dataclass
class Text:
    """Plain text.

    At block level (tight list items) ``tokens`` holds the parsed inline
    content of the text.
    """

    text: str = ""
    tokens: list[Token] = field(default_factory=list)


@dataclass
class Heading:
    depth: int = 1
    tokens: list[Token] = field(default_factory=list)


@dataclass
class Paragraph:
    tokens: list[Token] = field(default_factory=list)


@dataclass
class ListItem:
    tokens: list[Token] = field(default_factory=list)
    task: bool = False
    checked: bool = False
    loose: bool = False


@dataclass
class List:
    items: list[ListItem] = field(default_factory=list)
    ordered: bool = False


@dataclass
class TableCell:
    tokens: list[Token] = field(default_factory=list)
    header: bool = False
    align: Align = None


@dataclass
class TableRow:
    cells: list[TableCell] = field(default_factory=list)


@dataclass
class Table:
    header: TableRow = field(default_factory=TableRow)
    rows: list[TableRow] = field(default_factory=list)


@dataclass
class Code:
    text: str = ""
    lang: str | None = None


@dataclass
class Blockquote:
    tokens: list[Token] = field(default_factory=list)


@dataclass
class Strong:
    tokens: list[Token] = field(default_factory=list)


@dataclass
class Em:
    tokens: list[Token] = field(default_factory=list)


@dataclass
class Codespan:
    text: str = ""


@dataclass
class Delete:
    tokens: list[Token] = field(default_factory=list)


@dataclass
class Link:
    href: str = ""
    title: str | None = None
    tokens: list[Token] = field(default_factory=list)


@dataclass
class Image:
    href: str = ""
    title: str | None = None
    text: str = ""


@dataclass
class HorizontalRule:
    pass


@dataclass
class LineBreak:
    pass


@dataclass
class HTML:
    text: str = ""


@dataclass
class Checkbox:
    checked: bool = False


Token = Union[
    Text,
    Heading,
    Paragraph,
    List,
    ListItem,
    Table,
    TableRow,
    TableCell,
    Code,
    Blockquote,
    Strong,
    Em,
    Codespan,
    Delete,
    Link,
    Image,
    HorizontalRule,
    LineBreak,
    HTML,
    Checkbox,
]
