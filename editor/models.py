"""Typed dataclasses for the LifeNotes data model.

Blocks are a closed set of variants: TextBlock, ChecklistBlock and ImageBlock.
Each variant only carries the fields that mean something for it; switching a
block's type goes through with_fields(), which re-tags it into the right
variant. All records use from_dict/to_dict for JSON/YAML serialization.
Unknown keys are ignored; missing keys use defaults.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from typing import Any, Literal, Union


# ── Block types ───────────────────────────────────────────────


BlockType = Literal[
    "paragraph",
    "heading1",
    "heading2",
    "heading3",
    "bulletItem",
    "numberedItem",
    "checklistItem",
    "image",
]

PARAGRAPH = "paragraph"
HEADING1 = "heading1"
HEADING2 = "heading2"
HEADING3 = "heading3"
BULLET_ITEM = "bulletItem"
NUMBERED_ITEM = "numberedItem"
CHECKLIST_ITEM = "checklistItem"
IMAGE = "image"

HEADING_TYPES = {HEADING1, HEADING2, HEADING3}
TEXT_TYPES = {PARAGRAPH, HEADING1, HEADING2, HEADING3, BULLET_ITEM, NUMBERED_ITEM}
BLOCK_TYPES = TEXT_TYPES | {CHECKLIST_ITEM, IMAGE}


def new_block_id() -> str:
    """Fresh opaque block id. Never reused."""
    return uuid.uuid4().hex


# ── Block variants ────────────────────────────────────────────


@dataclass
class TextBlock:
    """Paragraph, heading, bullet or numbered item."""

    id: str
    type: str = PARAGRAPH
    content: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "type": self.type, "content": self.content}


@dataclass
class ChecklistBlock:
    id: str
    content: str = ""
    checked: bool = False

    @property
    def type(self) -> str:
        return CHECKLIST_ITEM

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "type": CHECKLIST_ITEM,
            "content": self.content,
            "checked": self.checked,
        }


@dataclass
class ImageBlock:
    id: str
    src: str = ""
    alt: str = ""

    @property
    def type(self) -> str:
        return IMAGE

    @property
    def content(self) -> str:
        # Images have no inline text; reads as empty for merge/remove checks.
        return ""

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "type": IMAGE, "src": self.src, "alt": self.alt}


Block = Union[TextBlock, ChecklistBlock, ImageBlock]


def make_block(
    block_type: str = PARAGRAPH,
    content: str = "",
    *,
    checked: bool = False,
    src: str = "",
    alt: str = "",
    block_id: str | None = None,
) -> Block:
    """Build the variant for *block_type*. Unknown types become paragraphs."""
    bid = block_id or new_block_id()
    if block_type == CHECKLIST_ITEM:
        return ChecklistBlock(id=bid, content=content, checked=bool(checked))
    if block_type == IMAGE:
        return ImageBlock(id=bid, src=src or "", alt=alt or "")
    if not isinstance(block_type, str) or block_type not in TEXT_TYPES:
        block_type = PARAGRAPH
    return TextBlock(id=bid, type=block_type, content=content)


def with_fields(block: Block, **fields: Any) -> Block:
    """Return a copy of *block* with *fields* applied.

    A ``type`` change re-tags the block into the matching variant. Text
    survives conversions between text and checklist variants; an image has
    no content, so converting one back to text starts empty. Fields that do
    not belong to the resulting variant are dropped, and the id never changes.
    """
    new_type = fields.get("type", block.type)
    if not isinstance(new_type, str) or new_type not in BLOCK_TYPES:
        new_type = block.type

    content = fields.get("content", block.content)
    checked = fields.get("checked", getattr(block, "checked", False))
    src = fields.get("src", getattr(block, "src", ""))
    alt = fields.get("alt", getattr(block, "alt", ""))

    return make_block(
        new_type,
        content if isinstance(content, str) else str(content),
        checked=bool(checked),
        src=str(src or ""),
        alt=str(alt or ""),
        block_id=block.id,
    )


def block_from_dict(d: dict[str, Any]) -> Block:
    """Build a block from its dict form; a missing id gets a fresh one."""
    if not d or not isinstance(d, dict):
        return make_block()
    return make_block(
        str(d.get("type", PARAGRAPH)),
        str(d.get("content", "") or ""),
        checked=bool(d.get("checked", False)),
        src=str(d.get("src", "") or ""),
        alt=str(d.get("alt", "") or ""),
        block_id=str(d["id"]) if d.get("id") else None,
    )


def block_signature(block: Block) -> tuple[str, str, bool, str, str]:
    """Identity-free view of a block: (type, content, checked, src, alt)."""
    return (
        block.type,
        block.content,
        bool(getattr(block, "checked", False)),
        getattr(block, "src", ""),
        getattr(block, "alt", ""),
    )


# ── Rendering helpers ─────────────────────────────────────────


_PLACEHOLDERS = {
    HEADING1: "Heading 1",
    HEADING2: "Heading 2",
    HEADING3: "Heading 3",
}


def placeholder(block_type: str) -> str:
    return _PLACEHOLDERS.get(block_type, "")


def list_number(blocks: list[Block], index: int) -> int | None:
    """Displayed ordinal of a numbered item.

    Markdown always stores ``1.``; the renderer counts the run of consecutive
    numbered items ending at *index*. Returns None for other block types.
    """
    if index < 0 or index >= len(blocks) or blocks[index].type != NUMBERED_ITEM:
        return None
    count = 1
    for j in range(index - 1, -1, -1):
        if blocks[j].type != NUMBERED_ITEM:
            break
        count += 1
    return count


# ── Settings ──────────────────────────────────────────────────


@dataclass
class EditorSettings:
    timezone: str = "UTC"
    arrow_threshold: float = 30.0
    default_image_alt: str = "Image"
    line_height: float = 24.0
    read_only: bool = False

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> EditorSettings:
        if not d or not isinstance(d, dict):
            return cls()
        defaults = cls()
        editor = d.get("editor", {})
        if not isinstance(editor, dict):
            editor = {}
        try:
            threshold = float(editor.get("arrow_threshold", defaults.arrow_threshold))
        except (TypeError, ValueError):
            threshold = defaults.arrow_threshold
        try:
            line_height = float(editor.get("line_height", defaults.line_height))
        except (TypeError, ValueError):
            line_height = defaults.line_height
        return cls(
            timezone=str(d.get("timezone", defaults.timezone) or defaults.timezone),
            arrow_threshold=threshold,
            default_image_alt=str(editor.get("default_image_alt", defaults.default_image_alt)),
            line_height=line_height if line_height > 0 else defaults.line_height,
            read_only=bool(editor.get("read_only", False)),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "timezone": self.timezone,
            "editor": {
                "arrow_threshold": self.arrow_threshold,
                "default_image_alt": self.default_image_alt,
                "line_height": self.line_height,
                "read_only": self.read_only,
            },
        }


# ── Notes ─────────────────────────────────────────────────────


@dataclass
class Note:
    id: str = ""
    title: str = ""
    markdown: str = ""
    created_at: str = ""
    updated_at: str = ""

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> Note:
        return cls(
            id=str(d.get("id", "")),
            title=str(d.get("title", "")),
            markdown=str(d.get("markdown", "") or ""),
            created_at=str(d.get("createdAt", "") or ""),
            updated_at=str(d.get("updatedAt", "") or ""),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "markdown": self.markdown,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }


@dataclass
class NotesFile:
    notes: list[Note] = field(default_factory=list)

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> NotesFile:
        if not d or not isinstance(d, dict):
            return cls()
        return cls(notes=[Note.from_dict(n) for n in (d.get("notes") or []) if isinstance(n, dict)])

    def to_dict(self) -> dict[str, Any]:
        return {"notes": [n.to_dict() for n in self.notes]}
