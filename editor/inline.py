"""Inline markup helpers: escaping, bold spans, caret-offset splitting.

Block content is a tiny HTML subset: escaped text plus ``<strong>`` spans.
Two views of it are used here:

- the inline-markdown view (``Text **bold**``) used by the codec and by
  plain-text surfaces;
- the glyph view: one entry per visible character with its bold flag. Caret
  offsets are counted in glyphs, so splitting or re-marking at an offset
  never cuts through a tag or an entity, and both halves come out balanced.
"""

from __future__ import annotations

import html
import re
from dataclasses import dataclass


_BOLD_MD = re.compile(r"\*\*(.*?)\*\*")
_BOLD_TAG = re.compile(r"<(?:strong|b)>(.*?)</(?:strong|b)>")
_ANY_TAG = re.compile(r"<[^>]+>")

_TOKEN = re.compile(
    r"<[^>]*>|&(?:#\d+|#[xX][0-9a-fA-F]+|[A-Za-z][A-Za-z0-9]*);|.",
    re.DOTALL,
)
_OPEN_BOLD = re.compile(r"<\s*(?:strong|b)(?:\s[^>]*)?>", re.IGNORECASE)
_CLOSE_BOLD = re.compile(r"<\s*/\s*(?:strong|b)\s*>", re.IGNORECASE)


# ── Escaping ──────────────────────────────────────────────────


def escape_html(s: str) -> str:
    return (
        s.replace("&", "&amp;")
        .replace("<", "&lt;")
        .replace(">", "&gt;")
        .replace('"', "&quot;")
        .replace("'", "&#039;")
    )


def unescape_html(s: str) -> str:
    """Decode entities; ``&nbsp;`` becomes a plain space."""
    return html.unescape(s.replace("&nbsp;", " "))


# ── Inline markdown <-> markup ────────────────────────────────


def markdown_to_markup(text: str) -> str:
    """``a **b** <c>`` -> ``a <strong>b</strong> &lt;c&gt;``."""
    return _BOLD_MD.sub(r"<strong>\1</strong>", escape_html(text))


def markup_to_markdown(markup: str) -> str:
    """Bold spans back to ``**x**``, other tags stripped, entities decoded."""
    text = _BOLD_TAG.sub(r"**\1**", markup or "")
    text = _ANY_TAG.sub("", text)
    return unescape_html(text)


def markdown_offset_to_visible(text: str, offset: int) -> int:
    """Map an offset in inline-markdown text to a visible-character offset.

    The ``**`` delimiters of matched bold pairs are not visible; an offset
    inside a delimiter snaps to its visible edge.
    """
    offset = max(0, min(offset, len(text)))
    hidden = 0
    for m in _BOLD_MD.finditer(text):
        for start in (m.start(), m.end() - 2):
            hidden += min(2, max(0, offset - start))
    return offset - hidden


def visible_offset_to_markdown(text: str, offset: int) -> int:
    """Smallest inline-markdown offset that shows the caret at *offset*."""
    for pos in range(len(text) + 1):
        if markdown_offset_to_visible(text, pos) >= offset:
            return pos
    return len(text)


# ── Glyph model ───────────────────────────────────────────────


@dataclass
class Glyph:
    char: str
    bold: bool = False


def parse_glyphs(markup: str) -> list[Glyph]:
    """Split markup into visible characters.

    ``<strong>``/``<b>`` (any case, with attributes) toggle bold; every other
    tag is dropped. Entities decode to the character they stand for.
    """
    glyphs: list[Glyph] = []
    depth = 0
    for m in _TOKEN.finditer(markup or ""):
        tok = m.group(0)
        if len(tok) > 1 and tok[0] == "<":
            if _OPEN_BOLD.fullmatch(tok):
                depth += 1
            elif _CLOSE_BOLD.fullmatch(tok):
                depth = max(0, depth - 1)
            continue
        if len(tok) > 1 and tok[0] == "&":
            tok = unescape_html(tok)
        for ch in tok:
            glyphs.append(Glyph(ch, depth > 0))
    return glyphs


def serialize_glyphs(glyphs: list[Glyph]) -> str:
    out: list[str] = []
    bold = False
    for g in glyphs:
        if g.bold != bold:
            out.append("<strong>" if g.bold else "</strong>")
            bold = g.bold
        out.append(escape_html(g.char))
    if bold:
        out.append("</strong>")
    return "".join(out)


def visible_text(markup: str) -> str:
    return "".join(g.char for g in parse_glyphs(markup))


def sanitize_markup(markup: str) -> str:
    """Normalize surface markup to escaped text plus balanced strong spans."""
    return serialize_glyphs(parse_glyphs(markup))


def split_markup(markup: str, offset: int) -> tuple[str, str] | None:
    """Split at a visible-character offset. None if the offset is out of range."""
    glyphs = parse_glyphs(markup)
    if offset < 0 or offset > len(glyphs):
        return None
    return serialize_glyphs(glyphs[:offset]), serialize_glyphs(glyphs[offset:])


def toggle_bold(markup: str, start: int, end: int) -> str:
    """Toggle bold over visible range [start, end).

    If every character in the range is already bold the range is unbolded,
    otherwise the whole range becomes bold. An empty range changes nothing.
    """
    glyphs = parse_glyphs(markup)
    start = max(0, min(start, len(glyphs)))
    end = max(start, min(end, len(glyphs)))
    if start == end:
        return serialize_glyphs(glyphs)
    target = not all(g.bold for g in glyphs[start:end])
    for g in glyphs[start:end]:
        g.bold = target
    return serialize_glyphs(glyphs)
