"""ANSI-aware text measurement.

Two notions of width live here:

* :func:`text_length` -- the character count a terminal renders once escape
  sequences are removed.  Every layout decision of the renderer (reflow,
  horizontal rules) is made on this length.
* :func:`display_width` -- the column count, taking East Asian wide
  characters and emoji clusters into account.  Used by the table layout
  where cells are padded against each other.
"""

from __future__ import annotations

import re
import unicodedata

import grapheme
import wcwidth as _wcwidth

# ---------------------------------------------------------------------------
# Escape sequence patterns
# ---------------------------------------------------------------------------

# CSI sequences: ESC[ <params> <intermediates> <final byte>
_CSI_PATTERN = r"\x1b\[[0-9;?]*[ -/]*[@-~]"
# OSC sequences (hyperlinks, titles): ESC] <payload> (BEL | ST)
_OSC_PATTERN = r"\x1b\][^\x07\x1b]*(?:\x07|\x1b\\)"

ANSI_PATTERN = f"{_CSI_PATTERN}|{_OSC_PATTERN}"
ANSI_RE = re.compile(ANSI_PATTERN)

_OSC8_START = "\x1b]8;;"
_BEL = "\x07"


def strip_ansi(text: str) -> str:
    """Remove every ANSI escape sequence from *text*."""
    if not text or "\x1b" not in text:
        return text
    return ANSI_RE.sub("", text)


def text_length(text: str) -> int:
    """Return the length of *text* not counting ANSI escape codes.

    See http://en.wikipedia.org/wiki/ANSI_escape_code#graphics
    """
    return len(strip_ansi(text))


def hyperlink(text: str, url: str) -> str:
    """Wrap *text* in an OSC 8 hyperlink pointing at *url*."""
    return f"{_OSC8_START}{url}{_BEL}{text}{_OSC8_START}{_BEL}"


# ---------------------------------------------------------------------------
# Display width (capped cache, as measuring clusters is comparatively slow)
# ---------------------------------------------------------------------------

_width_cache: dict[str, int] = {}
_WIDTH_CACHE_MAX = 512


def _grapheme_width(g: str) -> int:
    """Return the terminal display width of a single grapheme cluster."""
    if not g:
        return 0

    if len(g) == 1:
        cp = ord(g)
        if cp < 0x20 or (0x7F <= cp <= 0x9F):
            return 0
        return max(_wcwidth.wcwidth(g), 0)

    for ch in g:
        cp = ord(ch)
        # VS16, ZWJ sequences, skin tones, regional indicators
        if cp in (0xFE0F, 0x200D) or 0x1F3FB <= cp <= 0x1F3FF or 0x1F1E6 <= cp <= 0x1F1FF:
            return 2

    first_cp = ord(g[0])
    if first_cp >= 0x1F000 or 0x2600 <= first_cp <= 0x27BF:
        return 2

    cat = unicodedata.category(g[0])
    if cat.startswith("M") or cat == "Cf":
        return 0

    return max(_wcwidth.wcwidth(g[0]), 0)


def display_width(text: str) -> int:
    """Return how many terminal columns *text* occupies.

    Escape sequences are ignored; ASCII text takes a fast path.
    """
    stripped = strip_ansi(text)
    if not stripped:
        return 0

    if stripped.isascii() and stripped.isprintable():
        return len(stripped)

    cached = _width_cache.get(stripped)
    if cached is not None:
        return cached

    total = sum(_grapheme_width(g) for g in grapheme.graphemes(stripped))

    if len(_width_cache) >= _WIDTH_CACHE_MAX:
        _width_cache.clear()
    _width_cache[stripped] = total
    return total


def take_columns(text: str, max_cols: int) -> str:
    """Return the longest prefix of *text* that fits in *max_cols* columns.

    Escape sequences are preserved and cost nothing; the cut happens on a
    grapheme boundary.
    """
    result: list[str] = []
    cols = 0
    pos = 0

    for match in ANSI_RE.finditer(text):
        cols, done = _take_plain(text[pos : match.start()], max_cols, cols, result)
        if done:
            return "".join(result)
        result.append(match.group(0))
        pos = match.end()

    _take_plain(text[pos:], max_cols, cols, result)
    return "".join(result)


def _take_plain(
    plain: str, max_cols: int, cols: int, out: list[str]
) -> tuple[int, bool]:
    for g in grapheme.graphemes(plain):
        w = _grapheme_width(g)
        if cols + w > max_cols:
            return cols, True
        out.append(g)
        cols += w
    return cols, False
