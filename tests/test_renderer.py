"""Tests for pi.mdterm.renderer -- end-to-end markdown rendering.

Most tests swap every style for the identity function so that the exact
output bytes can be asserted.
"""

from __future__ import annotations

import dataclasses

import pytest

from pi.mdterm.ansi import hyperlink, strip_ansi
from pi.mdterm.config import RenderConfig
from pi.mdterm.renderer import Renderer, decode_uri_component, link_protocol, render_markdown
from pi.mdterm.text import HARD_BREAK, identity
from pi.mdterm.tokens import (
    Checkbox,
    Codespan,
    Heading,
    HorizontalRule,
    LineBreak,
    Link,
    List,
    ListItem,
    Paragraph,
    Text,
)

_STYLE_FIELDS = (
    "code",
    "blockquote",
    "html",
    "heading",
    "first_heading",
    "hr",
    "listitem",
    "table",
    "paragraph",
    "strong",
    "em",
    "codespan",
    "delete",
    "link",
    "href",
)

PLAIN = RenderConfig(hyperlinks=False, **{name: identity for name in _STYLE_FIELDS})


def _plain(**changes) -> RenderConfig:
    return dataclasses.replace(PLAIN, **changes)


def markup(text: str, config: RenderConfig = PLAIN, **kwargs) -> str:
    return render_markdown(text, config, **kwargs)


# ---------------------------------------------------------------------------
# Reflow
# ---------------------------------------------------------------------------


class TestReflow:
    """Paragraphs and headings wrapped to the configured width."""

    def test_wraps_paragraph(self) -> None:
        config = _plain(reflow_text=True, width=10, show_section_prefix=False)
        assert markup("Now is the time\n", config) == "Now is the\ntime\n\n"

    def test_splits_long_words(self) -> None:
        config = _plain(reflow_text=True, width=10)
        assert markup("Now is the time: 01234567890\n", config) == "Now is the\ntime: 0123\n4567890\n\n"

    def test_splits_urls(self) -> None:
        config = _plain(reflow_text=True, width=10)
        out = markup("Now is the time: http://timeanddate.com\n", config)
        assert out == "Now is the\ntime: http\n://timeand\ndate.com\n\n"

    def test_heading_without_prefix(self) -> None:
        config = _plain(reflow_text=True, width=10, show_section_prefix=False)
        assert markup("# Contents", config) == "Contents\n\n"

    def test_heading_prefix_is_reflowed_too(self) -> None:
        config = _plain(reflow_text=True, width=11)
        assert markup("## Table of Contents", config) == "## Table of\nContents\n\n"

    def test_hard_breaks_survive(self) -> None:
        config = _plain(reflow_text=True, width=80)
        assert markup("Now  \nis    \nthe<br />time\n", config) == "Now\nis\nthe\ntime\n\n"

    def test_line_break_without_reflow(self) -> None:
        assert markup("a  \nb") == "a\nb\n\n"

    def test_reflow_with_default_styles_stays_within_width(self) -> None:
        config = RenderConfig(hyperlinks=False, reflow_text=True, width=12)
        out = render_markdown("Some **bold** words that need wrapping here", config)
        for line in strip_ansi(out).split("\n"):
            assert len(line) <= 12


# ---------------------------------------------------------------------------
# Blocks
# ---------------------------------------------------------------------------


class TestBlocks:
    def test_heading_with_prefix(self) -> None:
        assert markup("### Sub") == "### Sub\n\n"

    def test_first_heading_style(self) -> None:
        config = _plain(first_heading=lambda s: "<1>" + s, heading=lambda s: "<n>" + s)
        assert markup("# A\n\n## B", config) == "<1># A\n\n<n>## B\n\n"

    def test_paragraph(self) -> None:
        assert markup("Hello world") == "Hello world\n\n"

    def test_blockquote(self) -> None:
        assert markup("> Blockquote") == "    Blockquote\n\n"

    def test_blockquote_tab_string(self) -> None:
        assert markup("> Blockquote", _plain(tab="\t")) == "\tBlockquote\n\n"

    def test_blockquote_double_tab(self) -> None:
        assert markup("> Blockquote", _plain(tab="\t\t")) == "\t\tBlockquote\n\n"

    def test_blockquote_int_tab(self) -> None:
        assert markup("> Blockquote", _plain(tab=2)) == "  Blockquote\n\n"

    def test_invalid_tab_falls_back(self) -> None:
        assert markup("> Blockquote", _plain(tab="dsakdskajhdsa")) == "    Blockquote\n\n"

    def test_multi_paragraph_blockquote(self) -> None:
        assert markup("> a\n>\n> b") == "    a\n    \n    b\n\n"

    def test_hr_default_width(self) -> None:
        assert markup("---") == "-" * 80 + "\n\n"

    def test_hr_uses_width_when_reflowing(self) -> None:
        assert markup("---", _plain(reflow_text=True, width=20)) == "-" * 20 + "\n\n"

    def test_code_uses_highlighter(self) -> None:
        calls = []

        def highlight(code, lang, **options):
            calls.append((code, lang, options))
            return "HL"

        config = _plain(highlight=highlight, highlight_options={"theme": "x"})
        assert markup("```js\nvar a;\n```", config) == "    HL\n\n"
        assert calls == [("var a;", "js", {"theme": "x"})]

    def test_code_falls_back_to_code_style(self) -> None:
        def broken(code, lang, **options):
            raise RuntimeError("boom")

        config = _plain(highlight=broken, code=lambda s: "[" + s + "]")
        assert markup("```\na\nb\n```", config) == "    [a\n    b]\n\n"

    def test_code_with_pygments(self) -> None:
        out = markup("```python\nx = 1\n```")
        assert strip_ansi(out) == "    x = 1\n\n"

    def test_unknown_language_falls_back(self) -> None:
        out = markup("```nosuchlang\nx\n```", _plain(code=lambda s: "<" + s + ">"))
        assert out == "    <x>\n\n"

    def test_html(self) -> None:
        config = _plain(html=lambda s: "{" + s + "}")
        assert markup("<div>hi</div>\n", config) == "{<div>hi</div>\n}"


# ---------------------------------------------------------------------------
# Lists
# ---------------------------------------------------------------------------


class TestLists:
    def test_unordered(self) -> None:
        assert markup("* ul item\n* ul item") == "    * ul item\n    * ul item\n\n"

    def test_ordered(self) -> None:
        assert markup("1. ol item\n2. ol item") == "    1. ol item\n    2. ol item\n\n"

    def test_nested_unordered(self) -> None:
        assert markup("* ul item\n    * ul item") == "    * ul item\n        * ul item\n\n"

    def test_nested_ordered(self) -> None:
        assert markup("1. ol item\n    1. ol item") == "    1. ol item\n        1. ol item\n\n"

    def test_ordered_in_unordered(self) -> None:
        assert markup("* ul item\n    1. ol item") == "    * ul item\n        1. ol item\n\n"

    def test_unordered_in_ordered(self) -> None:
        assert markup("1. ol item\n    * ul item") == "    1. ol item\n        * ul item\n\n"

    def test_task_items(self) -> None:
        assert markup("* [ ] task item\n* [X] task item") == "    * [ ] task item\n    * [X] task item\n\n"

    def test_loose_items_become_paragraphs(self) -> None:
        assert markup("* a\n\n* b") == "    * a\n    * b\n\n"

    def test_loose_task_item(self) -> None:
        assert markup("* [x] done\n\n* b") == "    * [X]  done\n    * b\n\n"

    def test_multiline_item_is_padded(self) -> None:
        assert markup("* a\n  b") == "    * a\n      b\n\n"

    def test_hard_break_in_item_with_reflow(self) -> None:
        out = markup("* one  \n  two\n", _plain(reflow_text=True, width=40))
        assert HARD_BREAK not in out
        assert out == "    * one\n      two\n\n"

    def test_listitem_style(self) -> None:
        config = _plain(listitem=lambda s: s.upper())
        assert markup("* a", config) == "    * A\n\n"

    def test_custom_list_formatter(self) -> None:
        config = _plain(list=lambda body, ordered, tab: "LIST")
        assert markup("* a", config) == "    LIST\n\n"

    def test_tokens_are_not_mutated(self) -> None:
        para = Paragraph(tokens=[Text(text="done")])
        item = ListItem(tokens=[para], task=True, checked=True, loose=True)
        token = List(items=[item])
        out = Renderer(PLAIN).render([token])
        assert out == "    * [X]  done\n\n"
        assert para.tokens == [Text(text="done")]


# ---------------------------------------------------------------------------
# Tables
# ---------------------------------------------------------------------------


class TestTables:
    TABLE = "| Foo | Bar |\n| --- | --- |\n| 1 | 2 |\n"

    def test_layout(self) -> None:
        config = _plain(table_options={"style": {"head": [], "border": []}})
        assert markup(self.TABLE, config) == (
            "┌─────┬─────┐\n"
            "│ Foo │ Bar │\n"
            "├─────┼─────┤\n"
            "│ 1   │ 2   │\n"
            "└─────┴─────┘\n\n"
        )

    def test_column_alignment(self) -> None:
        config = _plain(table_options={"style": {"head": [], "border": []}})
        assert markup("| Name | B |\n| ---: | :-: |\n| 1 | 22 |\n", config) == (
            "┌──────┬────┐\n"
            "│ Name │ B  │\n"
            "├──────┼────┤\n"
            "│    1 │ 22 │\n"
            "└──────┴────┘\n\n"
        )

    def test_explicit_alignment_option_wins(self) -> None:
        config = _plain(table_options={"style": {"head": [], "border": []}, "col_aligns": []})
        out = markup("| Name |\n| ---: |\n| 1 |\n", config)
        assert "│ 1    │" in out

    def test_table_options(self) -> None:
        config = _plain(table_options={"chars": {"top": "@@@@TABLE@@@@@"}})
        assert "@@@@TABLE@@@@@" in markup(self.TABLE, config)

    def test_no_markers_leak(self) -> None:
        out = markup("| a: `b:c` |\n| --- |\n| `x:y` |\n")
        assert all(ch not in out for ch in "\ue001\ue002\ue003\ue004")
        assert "b:c" in out and "x:y" in out

    def test_table_style(self) -> None:
        config = _plain(table=lambda s: "T" + s)
        assert markup(self.TABLE, config).startswith("T")

    def test_emoji_in_cells(self) -> None:
        assert "👍" in markup("| :+1: |\n| --- |\n| :+1: |\n")


# ---------------------------------------------------------------------------
# Inline spans
# ---------------------------------------------------------------------------


class TestInline:
    def test_styles_are_applied(self) -> None:
        config = _plain(
            strong=lambda s: "B(" + s + ")",
            em=lambda s: "I(" + s + ")",
            delete=lambda s: "D(" + s + ")",
            codespan=lambda s: "C(" + s + ")",
        )
        assert markup("**a** *b* ~~c~~ `d`", config) == "B(a) I(b) D(c) C(d)\n\n"

    def test_em_sees_hard_breaks_as_newlines_when_reflowing(self) -> None:
        config = _plain(reflow_text=True, em=lambda s: s.replace("\n", "|"))
        assert markup("*a  \nb*", config) == "a|b\n\n"

    def test_codespan_keeps_colons(self) -> None:
        assert markup("`a:b`") == "a:b\n\n"

    def test_text_hook(self) -> None:
        assert markup("hi", _plain(text=str.upper)) == "HI\n\n"

    def test_default_styles_emit_escapes(self) -> None:
        out = render_markdown("**bold**", RenderConfig(hyperlinks=False))
        assert "\x1b[1m" in out
        assert strip_ansi(out) == "bold\n\n"


class TestEmojis:
    def test_replaced(self) -> None:
        assert markup("Nice :+1:") == "Nice 👍 \n\n"

    def test_unknown_kept(self) -> None:
        assert markup("Some :someundefined:") == "Some :someundefined:\n\n"

    def test_not_in_codespan(self) -> None:
        assert markup("Some `:+1:`") == "Some :+1:\n\n"

    def test_disabled(self) -> None:
        assert markup("Some :+1:", _plain(emoji=False)) == "Some :+1:\n\n"


class TestEntities:
    def test_entities_are_unescaped(self) -> None:
        text = "# This &lt; is &quot;foo&quot;. it&#39;s a &amp; string\n\n> This &lt; is &quot;foo&quot;. it&#39;s a &amp; string"
        expected = "# This < is \"foo\". it's a & string\n\n    This < is \"foo\". it's a & string"
        assert markup(text).strip() == expected

    def test_unescape_disabled_keeps_literal_entities(self) -> None:
        assert markup("&amp;amp;", _plain(unescape=False)) == "&amp;\n\n"

    def test_unescape_enabled(self) -> None:
        assert markup("&amp;amp;") == "&\n\n"


# ---------------------------------------------------------------------------
# Links and images
# ---------------------------------------------------------------------------


class TestLinks:
    def test_text_and_url(self) -> None:
        assert markup("[Google](http://google.com)").strip() == "Google (http://google.com)"

    def test_bare_url(self) -> None:
        assert markup("http://google.com").strip() == "http://google.com"

    def test_link_style_wraps_everything(self) -> None:
        config = _plain(link=lambda s: "<" + s + ">", href=lambda s: "_" + s + "_")
        assert markup("[a](http://x.io)", config).strip() == "<a (_http://x.io_)>"

    def test_emoji_in_link_text(self) -> None:
        assert markup("[:+1:](http://x.io)").strip() == "👍  (http://x.io)"

    def test_hyperlinks(self) -> None:
        config = _plain(hyperlinks=True)
        out = markup("[Google](http://google.com/a+b)", config).strip()
        assert out == hyperlink("Google", "http://google.com/a%20b")

    def test_hyperlink_without_text_uses_url(self) -> None:
        config = _plain(hyperlinks=True)
        assert markup("<http://x.io>", config).strip() == hyperlink("http://x.io", "http://x.io")

    # markdown-it already refuses javascript: links, so these build tokens.

    def _link(self, href: str, *, sanitize: bool) -> str:
        para = Paragraph(tokens=[Link(href=href, tokens=[Text(text="x")]), Text(text=" after")])
        return Renderer(PLAIN).render([para], sanitize=sanitize)

    def test_sanitize_drops_javascript(self) -> None:
        assert self._link("javascript:alert(1)", sanitize=True) == " after\n\n"

    def test_sanitize_drops_obfuscated_javascript(self) -> None:
        assert self._link("Java Script:alert(1)", sanitize=True) == " after\n\n"
        assert self._link("java%73cript:alert(1)", sanitize=True) == " after\n\n"

    def test_sanitize_drops_undecodable_urls(self) -> None:
        assert self._link("http://a.io/%E0%A4%A", sanitize=True) == " after\n\n"

    def test_sanitize_keeps_safe_links(self) -> None:
        assert self._link("http://a.io", sanitize=True) == "x (http://a.io) after\n\n"

    def test_javascript_allowed_without_sanitize(self) -> None:
        assert self._link("javascript:alert(1)", sanitize=False) == "x (javascript:alert(1)) after\n\n"

    def test_markdown_sanitize_flag(self) -> None:
        assert markup("[x](http://a.io)", sanitize=True).strip() == "x (http://a.io)"


class TestLinkProtocol:
    def test_normalizes(self) -> None:
        assert link_protocol("Java Script:alert(1)") == "javascript:alert1"

    def test_double_decoding(self) -> None:
        assert link_protocol("%256A%2561vascript:") == "javascript:"

    def test_malformed_escape_raises(self) -> None:
        with pytest.raises(ValueError):
            decode_uri_component("%E0%A4%A")

    def test_invalid_utf8_raises(self) -> None:
        with pytest.raises(ValueError):
            decode_uri_component("%C3%28")


class TestImages:
    def test_default(self) -> None:
        assert markup("![Alt](./img.png)") == "![Alt](./img.png)\n\n\n"

    def test_with_title(self) -> None:
        assert markup('![Alt](./img.png "T")') == "![Alt – T](./img.png)\n\n\n"

    def test_custom_handler(self) -> None:
        seen = []

        def image(href, title, text):
            seen.append((href, title, text))
            return "IMAGE"

        out = markup("# Title\n\n![Alt text](./img.png)", _plain(image=image))
        assert out == "# Title\n\nIMAGE\n\n"
        assert seen == [("./img.png", None, "Alt text")]


# ---------------------------------------------------------------------------
# Dispatch and state
# ---------------------------------------------------------------------------


class TestRenderer:
    def test_token_handlers(self) -> None:
        renderer = Renderer(PLAIN)
        assert renderer.render([HorizontalRule()]) == "-" * 80 + "\n\n"
        assert renderer.render([Heading(depth=2, tokens=[Text(text="x")])]) == "## x\n\n"

    def test_checkbox(self) -> None:
        renderer = Renderer(PLAIN)
        assert renderer.render([Checkbox(checked=True), Checkbox()]) == "[X] [ ] "

    def test_br_marker_when_reflowing(self) -> None:
        renderer = Renderer(_plain(reflow_text=True))
        ctx_out = renderer.render([Paragraph(tokens=[Text(text="a"), LineBreak(), Text(text="b")])])
        assert ctx_out == "a\nb\n\n"
        assert HARD_BREAK not in ctx_out

    def test_unknown_token_renders_empty(self) -> None:
        class Stray:
            pass

        assert Renderer(PLAIN).render([Stray()]) == ""  # type: ignore[list-item]

    def test_top_level_block_text_becomes_paragraph(self) -> None:
        config = _plain(paragraph=lambda s: "P:" + s)
        out = Renderer(config).render([Text(text="a"), Text(text="b")])
        assert out == "P:a\nb\n\n"

    def test_codespan_token(self) -> None:
        out = Renderer(PLAIN).render([Paragraph(tokens=[Codespan(text="a:b")])])
        assert out == "a:b\n\n"

    def test_renderer_is_reusable(self) -> None:
        renderer = Renderer(PLAIN)
        tokens = [Paragraph(tokens=[Text(text="same")])]
        assert renderer.render(tokens) == renderer.render(tokens)

    def test_detects_hyperlinks_when_unset(self, monkeypatch: pytest.MonkeyPatch) -> None:
        from pi.mdterm import renderer as renderer_module
        from pi.mdterm.hyperlinks import HyperlinkSupport

        monkeypatch.setattr(
            renderer_module,
            "get_hyperlink_support",
            lambda: HyperlinkSupport(stdout=True, stderr=False),
        )
        assert Renderer(RenderConfig()).hyperlinks is True
