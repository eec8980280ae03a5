"""Emoji shortcode substitution (``:+1:`` -> glyph)."""

from __future__ import annotations

import re

import emoji

_SHORTCODE_RE = re.compile(r":([A-Za-z0-9_\-+]+?):")


def lookup_emoji(name: str) -> str | None:
    """Return the glyph for the GitHub-style shortcode *name*, or ``None``."""
    shortcode = f":{name}:"
    glyph = emoji.emojize(shortcode, language="alias")
    if glyph == shortcode:
        return None
    return glyph


def _replace(match: re.Match[str]) -> str:
    glyph = lookup_emoji(match.group(1))
    if glyph is None:
        return match.group(0)
    return glyph + " "


def insert_emojis(text: str) -> str:
    """Replace every known ``:name:`` shortcode in *text*; unknown ones stay."""
    if ":" not in text:
        return text
    return _SHORTCODE_RE.sub(_replace, text)
