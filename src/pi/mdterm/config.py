"""Renderer configuration."""

from __future__ import annotations

import re
from dataclasses import dataclass, field, fields
from typing import Any, Callable, Mapping

from pi.mdterm import styles
from pi.mdterm.lists import format_list
from pi.mdterm.styles import StyleFn, parse_style
from pi.mdterm.text import TransformFn, identity

ListFormatter = Callable[[str, bool, str], str]
ImageHandler = Callable[[str, "str | None", str], str]
Highlighter = Callable[..., str]

DEFAULT_TAB = 4
DEFAULT_WIDTH = 80

TAB_ALLOWED_CHARACTERS = ("\t",)


@dataclass(frozen=True)
class RenderConfig:
    # Style functions per render target
    code: StyleFn = styles.CODE
    blockquote: StyleFn = styles.BLOCKQUOTE
    html: StyleFn = styles.HTML
    heading: StyleFn = styles.HEADING
    first_heading: StyleFn = styles.FIRST_HEADING
    hr: StyleFn = styles.HR
    listitem: StyleFn = styles.LISTITEM
    list: ListFormatter = format_list
    table: StyleFn = styles.TABLE
    paragraph: StyleFn = styles.PARAGRAPH
    strong: StyleFn = styles.STRONG
    em: StyleFn = styles.EM
    codespan: StyleFn = styles.CODESPAN
    delete: StyleFn = styles.DELETE
    link: StyleFn = styles.LINK
    href: StyleFn = styles.HREF
    text: TransformFn = identity

    unescape: bool = True
    emoji: bool = True
    width: int = DEFAULT_WIDTH
    show_section_prefix: bool = True
    reflow_text: bool = False
    tab: int | str = DEFAULT_TAB
    table_options: Mapping[str, Any] = field(default_factory=dict)

    image: ImageHandler | None = None
    highlight: Highlighter | None = None
    highlight_options: Mapping[str, Any] = field(default_factory=dict)
    # None detects support on stdout
    hyperlinks: bool | None = None


def is_allowed_tab_string(tab: str) -> bool:
    return any(re.fullmatch(f"(?:{re.escape(char)})+", tab) for char in TAB_ALLOWED_CHARACTERS)


def resolve_tab(tab: object, fallback: int = DEFAULT_TAB) -> str:
    """Turn a tab setting into the indent unit.

    A positive int means that many spaces; a string is kept when it consists
    of allowed whitespace only.  Anything else falls back to *fallback* spaces.
    """
    if isinstance(tab, bool):
        return " " * fallback
    if isinstance(tab, int):
        return " " * tab if tab > 0 else " " * fallback
    if isinstance(tab, str) and is_allowed_tab_string(tab):
        return tab
    return " " * fallback


# ---------------------------------------------------------------------------
# Dict deserialization
# ---------------------------------------------------------------------------

_STYLE_KEYS = frozenset(
    {
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
    }
)

_MAPPING_KEYS = frozenset({"table_options", "highlight_options"})

_ALIASES = {"del": "delete"}

_CAMEL_RE = re.compile(r"(?<!^)(?=[A-Z])")


def _snake_case(key: str) -> str:
    key = _CAMEL_RE.sub("_", key).lower()
    return _ALIASES.get(key, key)


def config_from_dict(data: Mapping[str, Any]) -> RenderConfig:
    """Build a RenderConfig from a JSON-compatible dict.

    Keys may be camelCase (``reflowText``) or snake_case (``reflow_text``).
    Style targets accept either a callable or space-separated style names such
    as ``"green bold"``.  Unknown keys are ignored.
    """
    if not isinstance(data, Mapping):
        raise TypeError(f"Expected a mapping, got {type(data).__name__}")

    known = {f.name for f in fields(RenderConfig)}
    kwargs: dict[str, Any] = {}
    for raw_key, value in data.items():
        key = _snake_case(str(raw_key))
        if key not in known:
            continue
        if key in _STYLE_KEYS and isinstance(value, str):
            value = parse_style(value)
        elif key in _MAPPING_KEYS:
            if not isinstance(value, Mapping):
                raise ValueError(f"{raw_key} must be a mapping")
            if key == "table_options":
                value = {_snake_case(str(k)): v for k, v in value.items()}
            else:
                value = dict(value)
        kwargs[key] = value
    return RenderConfig(**kwargs)
