"""Markdown source to token tree, through ``markdown-it-py``.

markdown-it-py produces a flat open/close token stream; it is folded into a
:class:`~markdown_it.tree.SyntaxTreeNode` tree and then converted node by node
into the token variants of :mod:`pi.mdterm.tokens`.

Conversion rules worth knowing:

- Paragraphs of tight list items are hidden by markdown-it; they become
  block-level :class:`Text` tokens carrying their inline tokens.
- A ``[ ]`` / ``[x]`` prefix on an item's first line makes it a task item.
- Soft breaks become ``"\\n"`` text and adjacent text tokens are merged.
"""

from __future__ import annotations

import logging
import re

from markdown_it import MarkdownIt
from markdown_it.tree import SyntaxTreeNode

from pi.mdterm.tokens import (
    HTML,
    Align,
    Blockquote,
    Code,
    Codespan,
    Delete,
    Em,
    Heading,
    HorizontalRule,
    Image,
    LineBreak,
    Link,
    List,
    ListItem,
    Paragraph,
    Strong,
    Table,
    TableCell,
    TableRow,
    Text,
    Token,
)

logger = logging.getLogger(__name__)

_md_parser = MarkdownIt("gfm-like")

_TASK_RE = re.compile(r"^\[([ xX])\] +")
_ALIGN_RE = re.compile(r"text-align:\s*(left|center|right)")


def parse_markdown(text: str) -> list[Token]:
    """Parse markdown *text* into a list of block tokens."""
    root = SyntaxTreeNode(_md_parser.parse(text))
    return _convert_blocks(root.children)


# ---------------------------------------------------------------------------
# Block level
# ---------------------------------------------------------------------------


def _convert_blocks(nodes: list[SyntaxTreeNode]) -> list[Token]:
    tokens: list[Token] = []
    for node in nodes:
        token = _convert_block(node)
        if token is not None:
            tokens.append(token)
    return tokens


def _convert_block(node: SyntaxTreeNode) -> Token | None:
    t = node.type

    if t == "heading":
        return Heading(depth=int(node.tag[1:]), tokens=_inline_of(node))

    if t == "paragraph":
        inline = _inline_of(node)
        if node.hidden:
            return Text(text=_content_of(node), tokens=inline)
        return Paragraph(tokens=inline)

    if t in ("bullet_list", "ordered_list"):
        items = [_convert_list_item(child) for child in node.children if child.type == "list_item"]
        return List(items=items, ordered=t == "ordered_list")

    if t == "blockquote":
        return Blockquote(tokens=_convert_blocks(node.children))

    if t == "fence":
        info = node.info.strip()
        return Code(text=_strip_final_newline(node.content), lang=info.split()[0] if info else None)

    if t == "code_block":
        return Code(text=_strip_final_newline(node.content))

    if t == "hr":
        return HorizontalRule()

    if t == "table":
        return _convert_table(node)

    if t == "html_block":
        return HTML(text=node.content)

    logger.debug("Skipping unsupported block node: %s", t)
    return None


def _convert_list_item(node: SyntaxTreeNode) -> ListItem:
    tokens = _convert_blocks(node.children)
    loose = any(child.type == "paragraph" and not child.hidden for child in node.children)
    item = ListItem(tokens=tokens, loose=loose)

    first = tokens[0] if tokens else None
    if isinstance(first, (Text, Paragraph)) and first.tokens and isinstance(first.tokens[0], Text):
        lead = first.tokens[0]
        match = _TASK_RE.match(lead.text)
        if match:
            item.task = True
            item.checked = match.group(1) in "xX"
            lead.text = lead.text[match.end() :]
            if not lead.text:
                del first.tokens[0]
            if isinstance(first, Text):
                first.text = _TASK_RE.sub("", first.text, count=1)
    return item


def _convert_table(node: SyntaxTreeNode) -> Table:
    table = Table()
    for section in node.children:
        for row_node in section.children:
            row = TableRow(cells=[_convert_cell(cell) for cell in row_node.children])
            if section.type == "thead":
                table.header = row
            else:
                table.rows.append(row)
    return table


def _convert_cell(node: SyntaxTreeNode) -> TableCell:
    return TableCell(
        tokens=_inline_of(node),
        header=node.type == "th",
        align=_cell_align(node),
    )


def _cell_align(node: SyntaxTreeNode) -> Align:
    style = node.attrs.get("style")
    if not isinstance(style, str):
        return None
    match = _ALIGN_RE.search(style)
    if match is None:
        return None
    return match.group(1)  # type: ignore[return-value]


def _strip_final_newline(text: str) -> str:
    return text[:-1] if text.endswith("\n") else text


# ---------------------------------------------------------------------------
# Inline level
# ---------------------------------------------------------------------------


def _inline_node(node: SyntaxTreeNode) -> SyntaxTreeNode | None:
    for child in node.children:
        if child.type == "inline":
            return child
    return None


def _content_of(node: SyntaxTreeNode) -> str:
    inline = _inline_node(node)
    return inline.content if inline is not None else ""


def _inline_of(node: SyntaxTreeNode) -> list[Token]:
    inline = _inline_node(node)
    if inline is None:
        return []
    return _convert_inline(inline.children)


def _convert_inline(nodes: list[SyntaxTreeNode]) -> list[Token]:
    tokens: list[Token] = []
    for node in nodes:
        token = _convert_inline_node(node)
        if token is None:
            continue
        prev = tokens[-1] if tokens else None
        if isinstance(token, Text) and isinstance(prev, Text) and not prev.tokens:
            prev.text += token.text
            continue
        tokens.append(token)
    return tokens


def _convert_inline_node(node: SyntaxTreeNode) -> Token | None:
    match node.type:
        case "text":
            # Newer markdown-it-py releases leave empty text beside delimiters.
            return Text(text=node.content) if node.content else None
        case "softbreak":
            return Text(text="\n")
        case "hardbreak":
            return LineBreak()
        case "strong":
            return Strong(tokens=_convert_inline(node.children))
        case "em":
            return Em(tokens=_convert_inline(node.children))
        case "s":
            return Delete(tokens=_convert_inline(node.children))
        case "code_inline":
            return Codespan(text=node.content)
        case "link":
            title = node.attrs.get("title")
            return Link(
                href=str(node.attrs.get("href", "")),
                title=str(title) if title is not None else None,
                tokens=_convert_inline(node.children),
            )
        case "image":
            title = node.attrs.get("title")
            return Image(
                href=str(node.attrs.get("src", "")),
                title=str(title) if title is not None else None,
                text=node.content,
            )
        case "html_inline":
            return HTML(text=node.content)
        case _:
            logger.debug("Treating unsupported inline node %s as text", node.type)
            return Text(text=node.content) if node.content else None
