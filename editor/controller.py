"""Document controller: the live block list behind one editor.

Owns the block sequence, the focused-block pointer and a queue of pending
focus requests. Mediates between the host's value/on_change contract and the
blocks: every mutation re-encodes the whole document and emits it, and
set_from_external() skips values that are just the controller's own
emission coming back.

All operations are synchronous and total. Refused edits (unknown ids,
deleting the last block, merging text into an image, read-only mode) are
no-ops, logged at debug level.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable

from editor.caret import EditingSurface
from editor.codec import decode, encode
from editor.inline import sanitize_markup, visible_text
from editor.models import (
    BLOCK_TYPES,
    HEADING_TYPES,
    IMAGE,
    PARAGRAPH,
    Block,
    make_block,
    with_fields,
)

logger = logging.getLogger(__name__)


@dataclass
class FocusRequest:
    """Where the rendering layer should put focus after the next commit."""

    block_id: str
    caret: int = 0


class DocumentController:
    """Block sequence + focus for one editor instance."""

    def __init__(
        self,
        value: str = "",
        on_change: Callable[[str], Any] | None = None,
        read_only: bool = False,
        surface: EditingSurface | None = None,
        default_image_alt: str = "Image",
    ) -> None:
        self.on_change = on_change
        self.read_only = read_only
        self.surface = surface
        self.default_image_alt = default_image_alt
        self.blocks: list[Block] = []
        self.focused_id: str | None = None
        self._pending: list[FocusRequest] = []
        self._encoded = ""
        self.set_from_external(value)

    # ── Read access ────────────────────────────────────────────

    @property
    def markdown(self) -> str:
        """The controller's own last emission (encoding of current blocks)."""
        return self._encoded

    @property
    def current_type(self) -> str | None:
        block = self.get(self.focused_id) if self.focused_id else None
        return block.type if block else None

    def get(self, block_id: str | None) -> Block | None:
        for b in self.blocks:
            if b.id == block_id:
                return b
        return None

    def index_of(self, block_id: str | None) -> int:
        for i, b in enumerate(self.blocks):
            if b.id == block_id:
                return i
        return -1

    # ── Host boundary ──────────────────────────────────────────

    def set_from_external(self, text: str | None) -> bool:
        """Adopt a host value. Returns True if the blocks were replaced."""
        text = text or ""
        if self.blocks and text == self._encoded:
            return False
        self.blocks = decode(text)
        self._encoded = encode(self.blocks)
        self._pending.clear()
        if self.focused_id is not None and self.index_of(self.focused_id) == -1:
            self.focused_id = None
        return True

    def _emit(self) -> None:
        self._encoded = encode(self.blocks)
        if self.on_change is not None:
            self.on_change(self._encoded)

    def _refuse(self, op: str, reason: str, block_id: str | None = None) -> None:
        logger.debug("%s refused for block %s: %s", op, block_id, reason)

    def _schedule_focus(self, block_id: str, caret: int = 0) -> None:
        self._pending.append(FocusRequest(block_id, caret))

    def take_pending_focus(self) -> FocusRequest | None:
        """Post-commit hook for the rendering layer.

        Applies queued focus requests in order, skipping blocks that no
        longer exist, and returns the one that ended up applied.
        """
        applied: FocusRequest | None = None
        while self._pending:
            req = self._pending.pop(0)
            if self.index_of(req.block_id) == -1:
                continue
            self.focused_id = req.block_id
            applied = req
        return applied

    @property
    def has_pending_focus(self) -> bool:
        return bool(self._pending)

    # ── Mutations ──────────────────────────────────────────────

    def update(self, block_id: str, **fields: Any) -> bool:
        """Replace fields of one block. Content is sanitized on the way in."""
        if self.read_only:
            self._refuse("update", "read-only", block_id)
            return False
        idx = self.index_of(block_id)
        if idx == -1:
            self._refuse("update", "unknown block", block_id)
            return False
        if "content" in fields:
            fields["content"] = sanitize_markup(str(fields["content"] or ""))
        updated = with_fields(self.blocks[idx], **fields)
        if updated == self.blocks[idx]:
            return False
        self.blocks[idx] = updated
        self._emit()
        return True

    def add(
        self,
        after_id: str | None,
        block_type: str = PARAGRAPH,
        content: str = "",
        **extra: Any,
    ) -> str | None:
        """Insert a block after *after_id* (or at the end). Returns its id."""
        if self.read_only:
            self._refuse("add", "read-only", after_id)
            return None
        block = make_block(
            block_type,
            sanitize_markup(content),
            checked=bool(extra.get("checked", False)),
            src=str(extra.get("src", "") or ""),
            alt=str(extra.get("alt", "") or ""),
        )
        idx = self.index_of(after_id)
        if idx == -1:
            self.blocks.append(block)
        else:
            self.blocks.insert(idx + 1, block)
        self._emit()
        self._schedule_focus(block.id)
        return block.id

    def split(self, block_id: str, left: str, right: str) -> str | None:
        """Keep *left* in the block, move *right* into a new block after it.

        Headings demote the new block to a paragraph; list and checklist types
        carry over, with a fresh checklist item unchecked. Splitting an image
        leaves it whole and adds an empty paragraph.
        """
        if self.read_only:
            self._refuse("split", "read-only", block_id)
            return None
        idx = self.index_of(block_id)
        if idx == -1:
            self._refuse("split", "unknown block", block_id)
            return None
        current = self.blocks[idx]

        if current.type == IMAGE:
            new_block = make_block(PARAGRAPH)
        else:
            self.blocks[idx] = with_fields(current, content=sanitize_markup(left))
            new_type = PARAGRAPH if current.type in HEADING_TYPES else current.type
            new_block = make_block(new_type, sanitize_markup(right), checked=False)

        self.blocks.insert(idx + 1, new_block)
        self._emit()
        self._schedule_focus(new_block.id)
        return new_block.id

    def merge(self, block_id: str) -> bool:
        """Fold a block into the one before it.

        With an image on either side only an empty block can go (it is
        removed); anything else is refused. Focus goes to the previous block
        with the caret where the two contents meet.
        """
        if self.read_only:
            self._refuse("merge", "read-only", block_id)
            return False
        idx = self.index_of(block_id)
        if idx <= 0:
            self._refuse("merge", "no previous block", block_id)
            return False
        prev, current = self.blocks[idx - 1], self.blocks[idx]

        if IMAGE in (prev.type, current.type):
            if current.content:
                self._refuse("merge", "image neighbour", block_id)
                return False
            del self.blocks[idx]
            self._emit()
            self._schedule_focus(prev.id, len(visible_text(prev.content)))
            return True

        boundary = len(visible_text(prev.content))
        self.blocks[idx - 1] = with_fields(prev, content=sanitize_markup(prev.content + current.content))
        del self.blocks[idx]
        self._emit()
        self._schedule_focus(prev.id, boundary)
        return True

    def remove(self, block_id: str) -> bool:
        """Delete a block; the sole remaining block is never deleted."""
        if self.read_only:
            self._refuse("remove", "read-only", block_id)
            return False
        idx = self.index_of(block_id)
        if idx == -1:
            self._refuse("remove", "unknown block", block_id)
            return False
        if len(self.blocks) == 1:
            self._refuse("remove", "last block", block_id)
            return False

        del self.blocks[idx]
        target = self.blocks[idx - 1] if idx > 0 else self.blocks[0]
        self.focused_id = target.id
        self._emit()
        self._schedule_focus(target.id, len(visible_text(target.content)))
        return True

    # ── Focus ──────────────────────────────────────────────────

    def focus(self, block_id: str | None) -> bool:
        if block_id is None:
            self.focused_id = None
            return True
        if self.index_of(block_id) == -1:
            return False
        self.focused_id = block_id
        return True

    def focus_previous(self, block_id: str) -> bool:
        idx = self.index_of(block_id)
        if idx <= 0:
            return False
        self.focused_id = self.blocks[idx - 1].id
        return True

    def focus_next(self, block_id: str) -> bool:
        idx = self.index_of(block_id)
        if idx == -1 or idx >= len(self.blocks) - 1:
            return False
        self.focused_id = self.blocks[idx + 1].id
        return True

    # ── Toolbar commands ───────────────────────────────────────

    def toggle_type(self, block_type: str) -> bool:
        """Set the focused block to *block_type*, or back to paragraph."""
        if block_type not in BLOCK_TYPES or block_type == IMAGE:
            self._refuse("toggle_type", f"not a toggle target: {block_type}")
            return False
        block = self.get(self.focused_id) if self.focused_id else None
        if block is None:
            self._refuse("toggle_type", "nothing focused")
            return False
        new_type = PARAGRAPH if block.type == block_type else block_type
        return self.update(block.id, type=new_type)

    def toggle_bold(self) -> bool:
        """Ask the active surface to toggle bold on its selection.

        The blocks are not touched here; the surface reports the new markup
        through its normal input path.
        """
        if self.read_only or self.surface is None:
            self._refuse("toggle_bold", "no editable surface")
            return False
        self.surface.apply_inline_mark("strong")
        return True

    def add_image(self, url_provider: Callable[[], str | None]) -> str | None:
        """Insert an image from *url_provider*; returns the image block id.

        An empty focused (or last) paragraph turns into the image in place;
        otherwise the image goes right after it.
        """
        if self.read_only:
            self._refuse("add_image", "read-only")
            return None
        target = self.get(self.focused_id) if self.focused_id else None
        if target is None:
            target = self.blocks[-1]
        url = url_provider()
        if not url:
            self._refuse("add_image", "no url", target.id)
            return None
        if target.type == PARAGRAPH and not target.content:
            self.update(target.id, type=IMAGE, src=url, alt=self.default_image_alt)
            return target.id
        return self.add(target.id, IMAGE, src=url, alt=self.default_image_alt)
