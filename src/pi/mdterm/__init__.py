"""pi-mdterm: Markdown rendering for ANSI terminals."""

# ANSI helpers
from pi.mdterm.ansi import display_width, hyperlink, strip_ansi, text_length

# Configuration
from pi.mdterm.config import RenderConfig, config_from_dict, resolve_tab

# Collaborators
from pi.mdterm.emojis import insert_emojis, lookup_emoji
from pi.mdterm.highlight import highlight_code
from pi.mdterm.hyperlinks import (
    HyperlinkSupport,
    get_hyperlink_support,
    reset_hyperlink_support_cache,
    supports_color,
    supports_hyperlinks,
)
from pi.mdterm.layout import TableLayout

# List formatting
from pi.mdterm.lists import fix_nested_lists, format_list, indent_lines, indentify, section
from pi.mdterm.parser import parse_markdown

# Reflow
from pi.mdterm.reflow import reflow_text

# Renderer
from pi.mdterm.renderer import Renderer, render_markdown

# Styles
from pi.mdterm.styles import StyleFn, parse_style, style

# Tree walking
from pi.mdterm.walker import RenderContext, TreeWalker

__all__ = [
    # ANSI helpers
    "display_width",
    "hyperlink",
    "strip_ansi",
    "text_length",
    # Configuration
    "RenderConfig",
    "config_from_dict",
    "resolve_tab",
    # Collaborators
    "HyperlinkSupport",
    "TableLayout",
    "get_hyperlink_support",
    "highlight_code",
    "insert_emojis",
    "lookup_emoji",
    "parse_markdown",
    "reset_hyperlink_support_cache",
    "supports_color",
    "supports_hyperlinks",
    # List formatting
    "fix_nested_lists",
    "format_list",
    "indent_lines",
    "indentify",
    "section",
    # Reflow
    "reflow_text",
    # Renderer
    "Renderer",
    "render_markdown",
    # Styles
    "StyleFn",
    "parse_style",
    "style",
    # Tree walking
    "RenderContext",
    "TreeWalker",
]
