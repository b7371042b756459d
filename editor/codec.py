"""Markdown <-> block codec.

One block per line. Lines are classified by ordered pattern precedence:
heading-3 > heading-2 > heading-1 > checklist > bullet > numbered > image >
paragraph. Anything unrecognized is a paragraph; decoding never fails.

Recognizes:
    # Heading / ## Heading / ### Heading
    - [ ] Task   - [x] Task   (also * [ ] and [X])
    - Item       * Item
    1. Item
    ![alt](src)
"""

from __future__ import annotations

import logging
import re

from editor.inline import markdown_to_markup, markup_to_markdown
from editor.models import (
    BULLET_ITEM,
    CHECKLIST_ITEM,
    HEADING1,
    HEADING2,
    HEADING3,
    IMAGE,
    NUMBERED_ITEM,
    PARAGRAPH,
    Block,
    make_block,
)

logger = logging.getLogger(__name__)


_HEADING3 = re.compile(r"^###\s+(.+)$")
_HEADING2 = re.compile(r"^##\s+(.+)$")
_HEADING1 = re.compile(r"^#\s+(.+)$")
_CHECKLIST = re.compile(r"^[-*]\s+\[([ xX])\]\s+(.+)$")
_BULLET = re.compile(r"^[-*]\s+(.+)$")
_NUMBERED = re.compile(r"^\d+\.\s+(.+)$")
_IMAGE = re.compile(r"^!\[(.*?)\]\((.*?)\)$")

_HEADINGS = (
    (_HEADING3, HEADING3),
    (_HEADING2, HEADING2),
    (_HEADING1, HEADING1),
)

_PREFIXES = {
    HEADING1: "# ",
    HEADING2: "## ",
    HEADING3: "### ",
    BULLET_ITEM: "- ",
    NUMBERED_ITEM: "1. ",
}


def decode_line(line: str) -> Block:
    """Classify a single markdown line into a fresh block."""
    if not line.strip():
        return make_block(PARAGRAPH)

    for pattern, block_type in _HEADINGS:
        m = pattern.match(line)
        if m:
            return make_block(block_type, markdown_to_markup(m.group(1)))

    m = _CHECKLIST.match(line)
    if m:
        return make_block(
            CHECKLIST_ITEM,
            markdown_to_markup(m.group(2)),
            checked=m.group(1).lower() == "x",
        )

    m = _BULLET.match(line)
    if m:
        return make_block(BULLET_ITEM, markdown_to_markup(m.group(1)))

    m = _NUMBERED.match(line)
    if m:
        return make_block(NUMBERED_ITEM, markdown_to_markup(m.group(1)))

    m = _IMAGE.match(line)
    if m:
        return make_block(IMAGE, alt=m.group(1), src=m.group(2))

    return make_block(PARAGRAPH, markdown_to_markup(line))


def decode(text: str) -> list[Block]:
    """Parse markdown into blocks. Never returns an empty list."""
    if not text:
        return [make_block(PARAGRAPH)]
    blocks = [decode_line(line) for line in text.split("\n")]
    logger.debug("decoded %d block(s) from %d char(s)", len(blocks), len(text))
    return blocks or [make_block(PARAGRAPH)]


def encode_block(block: Block) -> str:
    if block.type == IMAGE:
        return f"![{block.alt}]({block.src})"
    content = markup_to_markdown(block.content)
    if block.type == CHECKLIST_ITEM:
        return f"- [{'x' if block.checked else ' '}] {content}"
    return _PREFIXES.get(block.type, "") + content


def encode(blocks: list[Block]) -> str:
    """Serialize blocks to markdown, one line per block."""
    return "\n".join(encode_block(b) for b in blocks)
