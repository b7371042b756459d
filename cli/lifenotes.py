#!/usr/bin/env python3
"""LifeNotes TUI: block-structured note editor powered by Textual."""

from __future__ import annotations

import logging
import os
import sys
import threading
from pathlib import Path

from textual import on, work
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical, VerticalScroll
from textual.message import Message
from textual.screen import ModalScreen
from textual.widgets import Footer, Header, Input, Label, Static
from textual.worker import get_current_worker

from editor import (
    BlockInteractionHandler,
    DocumentController,
    EditorSettings,
    Note,
    create_note,
    dispatch,
    find_note,
    list_number,
    load_notes,
    load_settings,
    placeholder,
    save_notes,
    save_settings,
    settings_path,
    toggle_bold,
    update_note,
    visible_text,
    workspace_root,
)
from editor.caret import MarkupCaret, Rect
from editor.inline import (
    markdown_offset_to_visible,
    markdown_to_markup,
    markup_to_markdown,
    sanitize_markup,
    split_markup,
    visible_offset_to_markdown,
)
from editor.models import (
    BULLET_ITEM,
    CHECKLIST_ITEM,
    HEADING1,
    HEADING2,
    HEADING3,
    IMAGE,
    NUMBERED_ITEM,
    Block,
)

if os.environ.get("LIFENOTES_LOG_LEVEL"):
    logging.basicConfig(level=os.environ["LIFENOTES_LOG_LEVEL"].upper())

logger = logging.getLogger(__name__)


CSS = """
Screen {
    layout: vertical;
}

#blocks {
    height: 1fr;
    padding: 0 1;
}

.block-row {
    height: 3;
}

.block-marker {
    width: 5;
    padding: 1 1 0 0;
    text-align: right;
    color: $text-muted;
}

.block-input {
    width: 1fr;
}

.heading .block-input {
    text-style: bold;
}

.checked .block-input {
    text-style: strike;
    color: $text-muted;
}

.image-view {
    width: 1fr;
    padding: 1 1 0 1;
    color: $accent;
}

.image-view:focus {
    background: $boost;
}

#url-dialog {
    width: 60;
    height: auto;
    padding: 1 2;
    border: thick $accent;
    background: $surface;
}
"""


_BLOCK_KEYS = [
    Binding("enter", "block_key('Enter')", show=False),
    Binding("backspace", "block_key('Backspace')", show=False),
    Binding("up", "block_key('ArrowUp')", show=False),
    Binding("down", "block_key('ArrowDown')", show=False),
]


def _marker(blocks: list[Block], index: int) -> str:
    block = blocks[index]
    if block.type == HEADING1:
        return "H1"
    if block.type == HEADING2:
        return "H2"
    if block.type == HEADING3:
        return "H3"
    if block.type == BULLET_ITEM:
        return "•"
    if block.type == NUMBERED_ITEM:
        return f"{list_number(blocks, index)}."
    if block.type == CHECKLIST_ITEM:
        return "[x]" if block.checked else "[ ]"
    if block.type == IMAGE:
        return "img"
    return ""


class BlockChanged(Message):
    """Structure or focus changed; the view needs a sync."""


# ── Caret adapter ──────────────────────────────────────────────


class InputCaret:
    """CaretInspector and EditingSurface over a single-line Input.

    The input shows inline markdown; offsets are translated to visible
    characters so they line up with the block's markup. A single line means
    the caret is always on both the first and the last visual line.
    """

    def __init__(self, widget: Input, line_height: float = 24.0) -> None:
        self.widget = widget
        self.line_height = line_height

    @property
    def markup(self) -> str:
        return sanitize_markup(markdown_to_markup(self.widget.value))

    def _visible(self, offset: int) -> int:
        return markdown_offset_to_visible(self.widget.value, offset)

    def _selection(self) -> tuple[int, int]:
        sel = self.widget.selection
        start, end = sorted((sel.start, sel.end))
        return self._visible(start), self._visible(end)

    def is_collapsed(self) -> bool:
        start, end = self._selection()
        return start == end

    def caret_offset(self) -> int | None:
        return self._visible(self.widget.cursor_position)

    def content_text(self) -> str:
        return visible_text(self.markup)

    def text_before_caret(self) -> str:
        return self.content_text()[: self.caret_offset() or 0]

    def caret_rect(self) -> Rect | None:
        return Rect(top=0.0, bottom=self.line_height)

    def content_rect(self) -> Rect:
        return Rect(top=0.0, bottom=self.line_height)

    def split_content_at_caret(self) -> tuple[str, str] | None:
        offset = self.caret_offset()
        if offset is None:
            return None
        return split_markup(self.markup, offset)

    def apply_inline_mark(self, mark: str) -> None:
        if mark != "strong":
            return
        start, end = self._selection()
        # Setting the value posts Input.Changed, which feeds the handler.
        self.widget.value = markup_to_markdown(toggle_bold(self.markup, start, end))


# ── Block widgets ──────────────────────────────────────────────


class BlockInput(Input):
    """Editable text of one block."""

    BINDINGS = _BLOCK_KEYS

    def __init__(self, block_id: str, handler: BlockInteractionHandler, line_height: float, **kwargs) -> None:
        super().__init__(**kwargs)
        self.block_id = block_id
        self.handler = handler
        self.caret = InputCaret(self, line_height)

    def action_block_key(self, key: str) -> None:
        action = self.handler.handle_key(self.block_id, key, self.caret)
        if action.handled:
            self.app.post_message(BlockChanged())
        elif key == "Backspace":
            self.action_delete_left()

    def on_focus(self) -> None:
        self.handler.handle_focus(self.block_id)


class ImageView(Static, can_focus=True):
    """Non-editable image block; only structural keys apply."""

    BINDINGS = _BLOCK_KEYS

    def __init__(self, block_id: str, handler: BlockInteractionHandler, **kwargs) -> None:
        super().__init__(**kwargs)
        self.block_id = block_id
        self.handler = handler

    def action_block_key(self, key: str) -> None:
        action = self.handler.handle_key(self.block_id, key, MarkupCaret(""))
        if action.handled:
            self.app.post_message(BlockChanged())

    def on_focus(self) -> None:
        self.handler.handle_focus(self.block_id)


class BlockRow(Horizontal):
    def __init__(self, block: Block, body: Input | ImageView, **kwargs) -> None:
        super().__init__(**kwargs)
        self.block_id = block.id
        self.is_image = block.type == IMAGE
        self.marker = Label("", classes="block-marker")
        self.body = body

    def compose(self) -> ComposeResult:
        yield self.marker
        yield self.body

    def on_mount(self) -> None:
        self.add_class("block-row")


class UrlPrompt(ModalScreen[str]):
    """Ask for an image URL."""

    DEFAULT_CSS = """
    UrlPrompt {
        align: center middle;
    }
    """

    BINDINGS = [Binding("escape", "cancel", "Cancel")]

    def compose(self) -> ComposeResult:
        yield Vertical(
            Label("Image URL"),
            Input(placeholder="https://…", id="url-input"),
            id="url-dialog",
        )

    def on_mount(self) -> None:
        self.query_one("#url-input", Input).focus()

    @on(Input.Submitted, "#url-input")
    def _submit(self, event: Input.Submitted) -> None:
        self.dismiss(event.value.strip())

    def action_cancel(self) -> None:
        self.dismiss("")


# ── Main app ───────────────────────────────────────────────────


class LifeNotesApp(App):
    """LifeNotes: edit one note as a list of blocks."""

    TITLE = "LifeNotes"
    CSS = CSS

    BINDINGS = [
        Binding("f1", "toggle_type('paragraph')", "Text"),
        Binding("f2", "toggle_type('heading1')", "H1"),
        Binding("f3", "toggle_type('heading2')", "H2"),
        Binding("f4", "toggle_type('heading3')", "H3"),
        Binding("f5", "toggle_type('bulletItem')", "Bullets"),
        Binding("f6", "toggle_type('numberedItem')", "Numbers"),
        Binding("f7", "toggle_type('checklistItem')", "Checkbox"),
        Binding("f8", "insert_image", "Image"),
        Binding("ctrl+b", "bold", "Bold", priority=True),
        Binding("ctrl+x", "toggle_check", "Check", priority=True),
        Binding("ctrl+s", "save", "Save", priority=True),
        Binding("ctrl+q", "quit_app", "Quit", priority=True),
    ]

    def __init__(self, note: Note, root: Path, settings: EditorSettings) -> None:
        super().__init__()
        self.note = note
        self.root = root
        self.settings = settings
        self.controller = DocumentController(
            note.markdown,
            on_change=self._on_document_change,
            read_only=settings.read_only,
            default_image_alt=settings.default_image_alt,
        )
        self.handler = BlockInteractionHandler(self.controller, arrow_threshold=settings.arrow_threshold)
        self._rows: dict[str, BlockRow] = {}
        self._sync_scheduled = False
        # Serializes the load, update, save sequence on notes.json.
        self._save_lock = threading.Lock()

    def compose(self) -> ComposeResult:
        yield Header()
        yield VerticalScroll(id="blocks")
        yield Footer()

    async def on_mount(self) -> None:
        self.sub_title = self.note.title + ("  [read-only]" if self.controller.read_only else "")
        await self._sync_view()
        first = self.controller.blocks[0].id
        self.controller.focus(first)
        self._focus_widget(first, 0)

    # ── Document -> view ───────────────────────────────────────

    def _on_document_change(self, markdown: str) -> None:
        self._schedule_sync()
        self._auto_save()

    def _schedule_sync(self) -> None:
        if not self._sync_scheduled:
            self._sync_scheduled = True
            self.call_later(self._sync_view)

    def _make_row(self, block: Block) -> BlockRow:
        if block.type == IMAGE:
            body = ImageView(block.id, self.handler, classes="image-view")
        else:
            body = BlockInput(
                block.id,
                self.handler,
                self.settings.line_height,
                value=markup_to_markdown(block.content),
                classes="block-input",
                disabled=self.controller.read_only,
            )
        return BlockRow(block, body)

    async def _sync_view(self) -> None:
        self._sync_scheduled = False
        blocks = self.controller.blocks
        container = self.query_one("#blocks", VerticalScroll)

        layout = [(b.id, b.type == IMAGE) for b in blocks]
        current = [(bid, row.is_image) for bid, row in self._rows.items()]
        if layout != current:
            await container.remove_children()
            self._rows = {b.id: self._make_row(b) for b in blocks}
            await container.mount_all(self._rows.values())

        for i, block in enumerate(blocks):
            row = self._rows[block.id]
            row.marker.update(_marker(blocks, i))
            row.set_class(block.type in (HEADING1, HEADING2, HEADING3), "heading")
            row.set_class(block.type == CHECKLIST_ITEM and block.checked, "checked")
            if isinstance(row.body, ImageView):
                row.body.update(f"🖼  {block.alt or 'image'}  ({block.src})")
                continue
            row.body.placeholder = placeholder(block.type)
            # Only rewrite the text when it disagrees with the block, so the
            # caret of the input being typed in stays put.
            if row.body.caret.markup != block.content:
                row.body.value = markup_to_markdown(block.content)

        self.call_after_refresh(self._apply_focus)

    def _apply_focus(self) -> None:
        request = self.controller.take_pending_focus()
        if request is not None:
            self._focus_widget(request.block_id, request.caret)
            return
        focused_id = self.controller.focused_id
        if focused_id and getattr(self.focused, "block_id", None) != focused_id:
            self._focus_widget(focused_id, None)

    def _focus_widget(self, block_id: str, caret: int | None) -> None:
        row = self._rows.get(block_id)
        if row is None:
            return
        row.body.focus()
        row.scroll_visible()
        if isinstance(row.body, BlockInput):
            value = row.body.value
            row.body.cursor_position = (
                len(value) if caret is None else visible_offset_to_markdown(value, caret)
            )

    # ── View -> document ───────────────────────────────────────

    @on(Input.Changed, ".block-input")
    def _on_block_input(self, event: Input.Changed) -> None:
        widget = event.input
        if not isinstance(widget, BlockInput):
            return
        block = self.controller.get(widget.block_id)
        if block is None or widget.caret.markup == block.content:
            return
        self.handler.handle_input(widget.block_id, widget.caret.markup)

    def on_block_changed(self, message: BlockChanged) -> None:
        self._schedule_sync()

    # ── Toolbar actions ────────────────────────────────────────

    def _focused_input(self) -> BlockInput | None:
        return self.focused if isinstance(self.focused, BlockInput) else None

    def action_toggle_type(self, block_type: str) -> None:
        if dispatch(self.controller, block_type):
            self._schedule_sync()

    def action_bold(self) -> None:
        widget = self._focused_input()
        self.controller.surface = widget.caret if widget else None
        dispatch(self.controller, "bold")

    def action_toggle_check(self) -> None:
        block = self.controller.get(self.controller.focused_id)
        if block is not None and block.type == CHECKLIST_ITEM:
            self.handler.handle_check(block.id, not block.checked)

    def action_insert_image(self) -> None:
        if self.controller.read_only:
            return

        def _insert(url: str | None) -> None:
            if dispatch(self.controller, "image", url_provider=lambda: url):
                self._schedule_sync()

        self.push_screen(UrlPrompt(), _insert)

    # ── Persistence ────────────────────────────────────────────

    def _save(self, markdown: str) -> Note:
        with self._save_lock:
            notes_file = load_notes(self.root)
            updated, errors = update_note(notes_file, self.note.id, {"markdown": markdown}, self.root)
            if errors or updated is None:
                raise ValueError("; ".join(errors) or f"Note not found: {self.note.id}")
            save_notes(notes_file, self.root)
            return updated

    def _set_note(self, note: Note) -> None:
        self.note = note

    @work(thread=True, exclusive=True)
    def _auto_save(self) -> None:
        if get_current_worker().is_cancelled:
            return
        try:
            # Current document, not the value that triggered this worker.
            note = self._save(self.controller.markdown)
        except (OSError, ValueError) as e:
            logger.exception("autosave of note %s failed", self.note.id)
            self.call_from_thread(self.notify, f"Autosave failed: {e}", title="Error", severity="error")
            return
        self.call_from_thread(self._set_note, note)

    def action_save(self) -> None:
        try:
            self.note = self._save(self.controller.markdown)
        except (OSError, ValueError) as e:
            self.notify(f"Save failed: {e}", title="Error", severity="error")
            return
        self.notify("Saved", title=self.note.title, severity="information")

    def action_quit_app(self) -> None:
        if not self.controller.read_only:
            try:
                self._save(self.controller.markdown)
            except (OSError, ValueError) as e:
                self.notify(f"Save failed: {e}", title="Error", severity="error")
                return
        self.exit()


# ── Entry point ────────────────────────────────────────────────


def open_note(root: Path, note_id: str | None) -> tuple[Note | None, list[str]]:
    """Find *note_id* (or the latest note), creating it if needed."""
    notes_file = load_notes(root)
    if note_id:
        note = find_note(notes_file, note_id)
        if note is not None:
            return note, []
        note, errors = create_note(notes_file, {"id": note_id, "title": note_id}, root)
    elif notes_file.notes:
        return max(notes_file.notes, key=lambda n: n.updated_at), []
    else:
        note, errors = create_note(notes_file, {"title": "Untitled"}, root)
    if errors:
        return None, errors
    save_notes(notes_file, root)
    return note, []


def main() -> None:
    root = workspace_root()
    root.mkdir(parents=True, exist_ok=True)
    if not settings_path(root).exists():
        save_settings(EditorSettings(), root)

    note, errors = open_note(root, sys.argv[1] if len(sys.argv) > 1 else None)
    if note is None:
        print(f"Cannot open note: {'; '.join(errors)}")
        sys.exit(1)

    app = LifeNotesApp(note, root, load_settings(root))
    app.run()


if __name__ == "__main__":
    main()
