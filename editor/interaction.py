"""Per-block event interpretation.

Turns raw surface events (input, keys, checkbox clicks, focus) into
controller calls. The handler keeps no state between events; everything it
needs about the caret comes from a CaretInspector at event time.

Shortcuts typed at the start of a paragraph retype it in place:

    - [ ]  -> checklist (unchecked)     ###  -> heading 3
    - [x]  -> checklist (checked)       ##   -> heading 2
    - / *  -> bullet item               #    -> heading 1
    1.     -> numbered item

The marker may be followed by a plain or a non-breaking space.
"""

from __future__ import annotations

import enum
import logging
import re
from dataclasses import dataclass, field
from typing import Any

from editor.caret import CaretInspector, is_caret_at_bottom, is_caret_at_top
from editor.controller import DocumentController
from editor.inline import escape_html, split_markup, visible_text
from editor.models import (
    BULLET_ITEM,
    CHECKLIST_ITEM,
    HEADING1,
    HEADING2,
    HEADING3,
    IMAGE,
    NUMBERED_ITEM,
    PARAGRAPH,
)

logger = logging.getLogger(__name__)


class Action(str, enum.Enum):
    EDITED = "edited"
    RETYPED = "retyped"
    SPLIT = "split"
    APPENDED = "appended"
    MERGED = "merged"
    REMOVED = "removed"
    NAVIGATED = "navigated"
    CHECKED = "checked"
    FOCUSED = "focused"
    DEFAULT = "default"
    IGNORED = "ignored"

    @property
    def handled(self) -> bool:
        """True when the surface must suppress its own default behavior."""
        return self not in (Action.DEFAULT, Action.IGNORED)


@dataclass
class Shortcut:
    pattern: re.Pattern[str]
    block_type: str
    extra: dict[str, Any] = field(default_factory=dict)


_SPACE = "[ \u00a0]"

# Checklist markers come first. With "- " ahead of them, "- [ ] A" would
# become a bullet reading "[ ] A", which is what the web editor this
# replaces did.
SHORTCUTS = [
    Shortcut(re.compile(rf"^- \[ \]{_SPACE}"), CHECKLIST_ITEM, {"checked": False}),
    Shortcut(re.compile(rf"^- \[x\]{_SPACE}"), CHECKLIST_ITEM, {"checked": True}),
    Shortcut(re.compile(rf"^###{_SPACE}"), HEADING3),
    Shortcut(re.compile(rf"^##{_SPACE}"), HEADING2),
    Shortcut(re.compile(rf"^#{_SPACE}"), HEADING1),
    Shortcut(re.compile(rf"^[-*]{_SPACE}"), BULLET_ITEM),
    Shortcut(re.compile(rf"^\d+\.{_SPACE}"), NUMBERED_ITEM),
]


def match_shortcut(text: str) -> tuple[Shortcut, int] | None:
    """First shortcut whose marker starts *text*, with the marker length."""
    for shortcut in SHORTCUTS:
        m = shortcut.pattern.match(text)
        if m:
            return shortcut, m.end()
    return None


class BlockInteractionHandler:
    """Interprets events from block surfaces for one controller."""

    def __init__(self, controller: DocumentController, arrow_threshold: float = 30.0) -> None:
        self.controller = controller
        self.arrow_threshold = arrow_threshold

    def handle_input(self, block_id: str, markup: str) -> Action:
        """Content of a block changed to *markup*."""
        ctl = self.controller
        block = ctl.get(block_id)
        if block is None or ctl.read_only:
            return Action.IGNORED

        if block.type == PARAGRAPH:
            text = visible_text(markup)
            found = match_shortcut(text)
            if found:
                shortcut, length = found
                parts = split_markup(markup, length)
                rest = parts[1] if parts else escape_html(text[length:])
                ctl.update(block_id, type=shortcut.block_type, content=rest, **shortcut.extra)
                logger.debug("block %s retyped to %s", block_id, shortcut.block_type)
                return Action.RETYPED

        ctl.update(block_id, content=markup)
        return Action.EDITED

    def handle_key(self, block_id: str, key: str, caret: CaretInspector) -> Action:
        """Interpret a key press; DEFAULT means let the surface handle it."""
        ctl = self.controller
        block = ctl.get(block_id)
        if block is None or ctl.read_only:
            return Action.IGNORED

        if key == "Enter":
            return self._enter(block_id, block.type, caret)
        if key == "Backspace":
            return self._backspace(block_id, block.type, caret)
        if key == "ArrowUp":
            if is_caret_at_top(caret, self.arrow_threshold):
                ctl.focus_previous(block_id)
                return Action.NAVIGATED
            return Action.DEFAULT
        if key == "ArrowDown":
            if is_caret_at_bottom(caret, self.arrow_threshold):
                ctl.focus_next(block_id)
                return Action.NAVIGATED
            return Action.DEFAULT
        return Action.DEFAULT

    def _enter(self, block_id: str, block_type: str, caret: CaretInspector) -> Action:
        if block_type == IMAGE:
            self.controller.add(block_id)
            return Action.APPENDED
        parts = caret.split_content_at_caret()
        if parts is None:
            logger.debug("no split point for block %s, appending", block_id)
            self.controller.add(block_id)
            return Action.APPENDED
        left, right = parts
        self.controller.split(block_id, left, right)
        return Action.SPLIT

    def _backspace(self, block_id: str, block_type: str, caret: CaretInspector) -> Action:
        if not caret.is_collapsed():
            return Action.DEFAULT
        if block_type == IMAGE or not caret.content_text():
            self.controller.remove(block_id)
            return Action.REMOVED
        if caret.text_before_caret() == "":
            self.controller.merge(block_id)
            return Action.MERGED
        return Action.DEFAULT

    def handle_check(self, block_id: str, checked: bool) -> Action:
        block = self.controller.get(block_id)
        if block is None or block.type != CHECKLIST_ITEM or self.controller.read_only:
            return Action.IGNORED
        self.controller.update(block_id, checked=checked)
        return Action.CHECKED

    def handle_focus(self, block_id: str) -> Action:
        if not self.controller.focus(block_id):
            return Action.IGNORED
        return Action.FOCUSED
