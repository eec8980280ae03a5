"""Token tree to styled terminal text.

:class:`Renderer` has one handler per token kind.  Each handler returns a
string fragment; block handlers terminate their fragment with a blank line
and fragments are joined by plain concatenation.  The renderer itself holds
only its resolved configuration, so one instance can render any number of
documents.

Text flowing through headings, paragraphs, list items and table cells passes
through the same pipeline: emoji shortcodes are replaced, HTML entities are
unescaped, and colons hidden inside code spans are restored last so that a
code span never turns into an emoji.
"""

from __future__ import annotations

import dataclasses
import logging
import re
from typing import Sequence
from urllib.parse import unquote

from pi.mdterm.ansi import hyperlink
from pi.mdterm.config import DEFAULT_WIDTH, RenderConfig, resolve_tab
from pi.mdterm.emojis import insert_emojis
from pi.mdterm.highlight import highlight_code
from pi.mdterm.hyperlinks import get_hyperlink_support
from pi.mdterm.lists import BULLET_MARKER, fix_nested_lists, indent_lines, indentify, section
from pi.mdterm.parser import parse_markdown
from pi.mdterm.reflow import reflow_text
from pi.mdterm.table import assemble_table, terminate_cell, wrap_row
from pi.mdterm.text import (
    HARD_BREAK,
    compose,
    fix_hard_return,
    identity,
    protect_colons,
    undo_colon,
    unescape_entities,
)
from pi.mdterm.tokens import (
    HTML,
    Blockquote,
    Checkbox,
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
from pi.mdterm.walker import RenderContext, TreeWalker

logger = logging.getLogger(__name__)

_MALFORMED_ESCAPE_RE = re.compile(r"%(?![0-9A-Fa-f]{2})")
_NON_PROTOCOL_RE = re.compile(r"[^\w:]", re.ASCII)


class Renderer:
    """Renders token trees with a fixed :class:`RenderConfig`."""

    def __init__(self, config: RenderConfig | None = None) -> None:
        self.config = config or RenderConfig()
        self.tab = resolve_tab(self.config.tab)
        self.emoji = insert_emojis if self.config.emoji else identity
        self.unescape = unescape_entities if self.config.unescape else identity
        self.transform = compose(undo_colon, self.unescape, self.emoji)
        self.highlight = self.config.highlight or highlight_code
        if self.config.hyperlinks is None:
            self.hyperlinks = get_hyperlink_support().stdout
        else:
            self.hyperlinks = self.config.hyperlinks

    def render(self, tokens: Sequence[Token], *, gfm: bool = True, sanitize: bool = False) -> str:
        """Render a list of block tokens."""
        ctx = RenderContext(walker=TreeWalker(self), gfm=gfm, sanitize=sanitize)
        return ctx.parse(tokens)

    def render_token(self, token: Token, ctx: RenderContext) -> str:
        match token:
            case Text():
                return self.render_text(token, ctx)
            case Code():
                return self.render_code(token, ctx)
            case Blockquote():
                return self.render_blockquote(token, ctx)
            case HTML():
                return self.render_html(token, ctx)
            case Heading():
                return self.render_heading(token, ctx)
            case HorizontalRule():
                return self.render_hr(token, ctx)
            case List():
                return self.render_list(token, ctx)
            case ListItem():
                return self.render_list_item(token, ctx)
            case Checkbox():
                return self.render_checkbox(token, ctx)
            case Paragraph():
                return self.render_paragraph(token, ctx)
            case Table():
                return self.render_table(token, ctx)
            case TableRow():
                return self.render_table_row(token, ctx)
            case TableCell():
                return self.render_table_cell(token, ctx)
            case Strong():
                return self.render_strong(token, ctx)
            case Em():
                return self.render_em(token, ctx)
            case Codespan():
                return self.render_codespan(token, ctx)
            case LineBreak():
                return self.render_br(token, ctx)
            case Delete():
                return self.render_delete(token, ctx)
            case Link():
                return self.render_link(token, ctx)
            case Image():
                return self.render_image(token, ctx)
            case _:
                logger.debug("No handler for token %r", type(token).__name__)
                return ""

    # -- block level ---------------------------------------------------------

    def render_text(self, token: Text, ctx: RenderContext) -> str:
        return self.config.text(token.text)

    def render_code(self, token: Code, ctx: RenderContext) -> str:
        code = fix_hard_return(token.text, self.config.reflow_text)
        try:
            highlighted = self.highlight(code, token.lang, **self.config.highlight_options)
        except Exception:
            logger.debug("Highlighting failed for language %r", token.lang, exc_info=True)
            highlighted = self.config.code(code)
        return section(indentify(self.tab, highlighted))

    def render_blockquote(self, token: Blockquote, ctx: RenderContext) -> str:
        quote = ctx.parse(token.tokens)
        return section(self.config.blockquote(indentify(self.tab, quote.strip())))

    def render_html(self, token: HTML, ctx: RenderContext) -> str:
        return self.config.html(token.text)

    def render_heading(self, token: Heading, ctx: RenderContext) -> str:
        text = self.transform(ctx.parse_inline(token.tokens))
        if self.config.show_section_prefix:
            text = "#" * token.depth + " " + text
        if self.config.reflow_text:
            text = reflow_text(text, self.config.width, ctx.gfm)
        if token.depth == 1:
            return section(self.config.first_heading(text))
        return section(self.config.heading(text))

    def render_hr(self, token: HorizontalRule, ctx: RenderContext) -> str:
        length = self.config.width if self.config.reflow_text else DEFAULT_WIDTH
        return section(self.config.hr("-" * max(length, 1)))

    def render_list(self, token: List, ctx: RenderContext) -> str:
        body = "".join(self.render_list_item(item, ctx) for item in token.items)
        body = self.config.list(body, token.ordered, self.tab)
        return section(fix_nested_lists(indent_lines(self.tab, body), self.tab))

    def render_list_item(self, token: ListItem, ctx: RenderContext) -> str:
        tokens = token.tokens
        text = ""
        if token.task:
            checkbox = self.render_checkbox(Checkbox(checked=token.checked), ctx)
            if token.loose:
                tokens = _with_leading_text(tokens, checkbox + " ")
            else:
                text += checkbox

        text += ctx.parse(tokens, loose=token.loose)
        text = fix_hard_return(text, self.config.reflow_text)
        if "\n" in text:
            text = text.strip()

        transform = compose(self.config.listitem, self.transform)
        return "\n" + BULLET_MARKER + transform(text)

    def render_checkbox(self, token: Checkbox, ctx: RenderContext) -> str:
        return "[X] " if token.checked else "[ ] "

    def render_paragraph(self, token: Paragraph, ctx: RenderContext) -> str:
        transform = compose(self.config.paragraph, self.transform)
        text = transform(ctx.parse_inline(token.tokens))
        if self.config.reflow_text:
            text = reflow_text(text, self.config.width, ctx.gfm)
        return section(text)

    def render_table(self, token: Table, ctx: RenderContext) -> str:
        header = self.render_table_row(token.header, ctx)
        body = "".join(self.render_table_row(row, ctx) for row in token.rows)
        options = dict(self.config.table_options)
        options.setdefault("col_aligns", [cell.align for cell in token.header.cells])
        table = assemble_table(header, body, self.transform, options)
        return section(self.config.table(table))

    def render_table_row(self, token: TableRow, ctx: RenderContext) -> str:
        return wrap_row("".join(self.render_table_cell(cell, ctx) for cell in token.cells))

    def render_table_cell(self, token: TableCell, ctx: RenderContext) -> str:
        return terminate_cell(ctx.parse_inline(token.tokens))

    # -- inline level --------------------------------------------------------

    def render_strong(self, token: Strong, ctx: RenderContext) -> str:
        return self.config.strong(ctx.parse_inline(token.tokens))

    def render_em(self, token: Em, ctx: RenderContext) -> str:
        text = fix_hard_return(ctx.parse_inline(token.tokens), self.config.reflow_text)
        return self.config.em(text)

    def render_codespan(self, token: Codespan, ctx: RenderContext) -> str:
        text = fix_hard_return(token.text, self.config.reflow_text)
        return self.config.codespan(protect_colons(text))

    def render_br(self, token: LineBreak, ctx: RenderContext) -> str:
        return HARD_BREAK if self.config.reflow_text else "\n"

    def render_delete(self, token: Delete, ctx: RenderContext) -> str:
        return self.config.delete(ctx.parse_inline(token.tokens))

    def render_link(self, token: Link, ctx: RenderContext) -> str:
        text = ctx.parse_inline(token.tokens)
        href = token.href

        if ctx.sanitize:
            try:
                protocol = link_protocol(href)
            except ValueError:
                logger.debug("Dropping link with undecodable URL %r", href)
                return ""
            if protocol.startswith("javascript:"):
                logger.debug("Dropping javascript link %r", href)
                return ""

        if self.hyperlinks:
            label = self.config.href(self.emoji(text)) if text else self.config.href(href)
            out = hyperlink(label, href.replace("+", "%20"))
        else:
            has_text = bool(text) and text != href
            out = self.emoji(text) + " (" if has_text else ""
            out += self.config.href(href)
            if has_text:
                out += ")"
        return self.config.link(out)

    def render_image(self, token: Image, ctx: RenderContext) -> str:
        title = token.title or None
        if self.config.image is not None:
            return self.config.image(token.href, title, token.text)
        out = "![" + token.text
        if title:
            out += " – " + title
        return out + "](" + token.href + ")\n"


def _with_leading_text(tokens: list[Token], prefix: str) -> list[Token]:
    """Return *tokens* with *prefix* put in front of the first paragraph's text."""
    first = tokens[0] if tokens else None
    if isinstance(first, Paragraph):
        inner = first.tokens
        if inner and isinstance(inner[0], Text):
            lead = dataclasses.replace(inner[0], text=prefix + inner[0].text)
            inner = [lead, *inner[1:]]
        else:
            inner = [Text(text=prefix), *inner]
        return [dataclasses.replace(first, tokens=inner), *tokens[1:]]
    return [Text(text=prefix), *tokens]


def decode_uri_component(text: str) -> str:
    """Strictly percent-decode *text* as UTF-8.

    Raises ``ValueError`` for a stray ``%`` or an invalid UTF-8 sequence.
    """
    if _MALFORMED_ESCAPE_RE.search(text):
        raise ValueError(f"malformed percent escape in {text!r}")
    return unquote(text, errors="strict")


def link_protocol(href: str) -> str:
    """Normalized scheme-ish prefix of *href* used to spot ``javascript:`` links."""
    decoded = decode_uri_component(unquote(href, encoding="latin-1"))
    return _NON_PROTOCOL_RE.sub("", decoded).lower()


def render_markdown(
    text: str,
    config: RenderConfig | None = None,
    *,
    gfm: bool = True,
    sanitize: bool = False,
) -> str:
    """Parse markdown *text* and render it for the terminal."""
    return Renderer(config).render(parse_markdown(text), gfm=gfm, sanitize=sanitize)
