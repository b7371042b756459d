"""Caret inspector and editing-surface capabilities.

The interaction handler never touches a live widget. It asks a
CaretInspector for caret facts (offset, text before the caret, geometry, a
split of the markup at the caret) and asks an EditingSurface to apply inline
marks. Real surfaces (the Textual inputs in cli/) implement these protocols;
MarkupCaret and MarkupSurface implement them over a plain markup string.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Callable, Protocol

from editor.inline import split_markup, toggle_bold, visible_text


@dataclass
class Rect:
    top: float
    bottom: float


class CaretInspector(Protocol):
    def is_collapsed(self) -> bool: ...

    def caret_offset(self) -> int | None: ...

    def content_text(self) -> str: ...

    def text_before_caret(self) -> str: ...

    def caret_rect(self) -> Rect | None: ...

    def content_rect(self) -> Rect: ...

    def split_content_at_caret(self) -> tuple[str, str] | None: ...


class EditingSurface(Protocol):
    def apply_inline_mark(self, mark: str) -> None: ...


def is_caret_at_top(inspector: CaretInspector, threshold: float) -> bool:
    rect = inspector.caret_rect()
    if rect is None:
        return False
    return rect.top - inspector.content_rect().top < threshold


def is_caret_at_bottom(inspector: CaretInspector, threshold: float) -> bool:
    rect = inspector.caret_rect()
    if rect is None:
        return False
    return inspector.content_rect().bottom - rect.bottom < threshold


# ── In-memory implementations ─────────────────────────────────


@dataclass
class MarkupCaret:
    """Caret over a markup string, offsets in visible characters.

    Geometry assumes the text wraps every ``wrap_width`` characters and each
    visual line is ``line_height`` units tall. ``anchor`` is the other end of
    a selection; None or equal to ``offset`` means collapsed.
    """

    markup: str
    offset: int | None = 0
    anchor: int | None = None
    wrap_width: int = 80
    line_height: float = 24.0

    def is_collapsed(self) -> bool:
        return self.anchor is None or self.anchor == self.offset

    def caret_offset(self) -> int | None:
        if self.offset is None:
            return None
        return max(0, min(self.offset, len(self.content_text())))

    def content_text(self) -> str:
        return visible_text(self.markup)

    def text_before_caret(self) -> str:
        offset = self.caret_offset()
        return self.content_text()[: offset or 0]

    def _line_count(self) -> int:
        return max(1, math.ceil(len(self.content_text()) / self.wrap_width))

    def caret_rect(self) -> Rect | None:
        offset = self.caret_offset()
        if offset is None:
            return None
        line = min(offset // self.wrap_width, self._line_count() - 1)
        return Rect(top=line * self.line_height, bottom=(line + 1) * self.line_height)

    def content_rect(self) -> Rect:
        return Rect(top=0.0, bottom=self._line_count() * self.line_height)

    def split_content_at_caret(self) -> tuple[str, str] | None:
        offset = self.caret_offset()
        if offset is None:
            return None
        return split_markup(self.markup, offset)


@dataclass
class MarkupSurface:
    """Editing surface over one block's markup.

    Applying a mark rewrites the markup over the current selection and hands
    the result to ``on_input``, the same path a keystroke takes.
    """

    block_id: str
    markup: str
    start: int = 0
    end: int = 0
    on_input: Callable[[str, str], object] | None = None

    def apply_inline_mark(self, mark: str) -> None:
        if mark != "strong":
            return
        self.markup = toggle_bold(self.markup, self.start, self.end)
        if self.on_input is not None:
            self.on_input(self.block_id, self.markup)
