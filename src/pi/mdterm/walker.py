"""Depth-first token tree walker and the per-render context.

The renderer never walks the tree on its own: handlers ask the context to
render their children, and the walker dispatches each child back to the
renderer.  A fresh :class:`RenderContext` is created for every render call,
so nothing about one document leaks into the next.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, Sequence

from pi.mdterm.tokens import Paragraph, Text, Token


class TokenRenderer(Protocol):
    def render_token(self, token: Token, ctx: RenderContext) -> str: ...

    def render_paragraph(self, token: Paragraph, ctx: RenderContext) -> str: ...

    def render_text(self, token: Text, ctx: RenderContext) -> str: ...


@dataclass
class RenderContext:
    """Per-call state: the active walker and the parser options."""

    walker: TreeWalker
    gfm: bool = True
    sanitize: bool = False

    def parse(self, tokens: Sequence[Token], loose: bool = True) -> str:
        return self.walker.parse(tokens, self, loose=loose)

    def parse_inline(self, tokens: Sequence[Token]) -> str:
        return self.walker.parse_inline(tokens, self)


class TreeWalker:
    """Renders token sequences by dispatching every token to a renderer."""

    def __init__(self, renderer: TokenRenderer) -> None:
        self._renderer = renderer

    def parse(self, tokens: Sequence[Token], ctx: RenderContext, loose: bool = True) -> str:
        """Render block-level *tokens*.

        Runs of block-level :class:`Text` (tight list content) are joined with
        newlines; when *loose* they are rendered as a paragraph.
        """
        out: list[str] = []
        i = 0
        n = len(tokens)

        while i < n:
            token = tokens[i]
            if not isinstance(token, Text):
                out.append(self._renderer.render_token(token, ctx))
                i += 1
                continue

            bodies = [self._text_body(token, ctx)]
            while i + 1 < n and isinstance(tokens[i + 1], Text):
                i += 1
                bodies.append(self._text_body(tokens[i], ctx))
            body = "\n".join(bodies)

            if loose:
                paragraph = Paragraph(tokens=[Text(text=body)])
                out.append(self._renderer.render_paragraph(paragraph, ctx))
            else:
                out.append(body)
            i += 1

        return "".join(out)

    def parse_inline(self, tokens: Sequence[Token], ctx: RenderContext) -> str:
        return "".join(self._renderer.render_token(token, ctx) for token in tokens)

    def _text_body(self, token: Text, ctx: RenderContext) -> str:
        if token.tokens:
            return self.parse_inline(token.tokens, ctx)
        return self._renderer.render_text(token, ctx)
