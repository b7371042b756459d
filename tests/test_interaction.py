"""Tests for editor/interaction.py: shortcuts and key handling against MarkupCaret."""

import pytest

from editor.caret import MarkupCaret
from editor.controller import DocumentController
from editor.interaction import Action, BlockInteractionHandler, match_shortcut
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


def _setup(value, **kwargs):
    ctl = DocumentController(value, **kwargs)
    return ctl, BlockInteractionHandler(ctl)


# ── Shortcuts ─────────────────────────────────────────────────


@pytest.mark.parametrize(
    "typed,block_type,checked",
    [
        ("- [ ] ", CHECKLIST_ITEM, False),
        ("- [x] ", CHECKLIST_ITEM, True),
        ("### ", HEADING3, None),
        ("## ", HEADING2, None),
        ("# ", HEADING1, None),
        ("- ", BULLET_ITEM, None),
        ("* ", BULLET_ITEM, None),
        ("12. ", NUMBERED_ITEM, None),
        ("#\u00a0", HEADING1, None),
    ],
)
def test_match_shortcut(typed, block_type, checked):
    found = match_shortcut(typed + "rest")
    assert found is not None
    shortcut, length = found
    assert shortcut.block_type == block_type
    assert length == len(typed)
    if checked is not None:
        assert shortcut.extra["checked"] is checked


@pytest.mark.parametrize("text", ["#Title", "-item", "1.x", "plain", "[ ] x"])
def test_no_shortcut(text):
    assert match_shortcut(text) is None


def test_typing_heading_shortcut_retypes_paragraph():
    ctl, handler = _setup("")
    block_id = ctl.blocks[0].id
    assert handler.handle_input(block_id, "# Title") is Action.RETYPED
    assert ctl.blocks[0].type == HEADING1
    assert ctl.blocks[0].content == "Title"
    assert ctl.blocks[0].id == block_id


def test_checklist_shortcut_sets_checked():
    ctl, handler = _setup("")
    handler.handle_input(ctl.blocks[0].id, "- [x] Done")
    block = ctl.blocks[0]
    assert (block.type, block.content, block.checked) == (CHECKLIST_ITEM, "Done", True)


def test_shortcut_keeps_bold_and_escaping():
    ctl, handler = _setup("")
    handler.handle_input(ctl.blocks[0].id, "- <strong>a</strong> &amp; b")
    assert ctl.blocks[0].type == BULLET_ITEM
    assert ctl.blocks[0].content == "<strong>a</strong> &amp; b"


def test_shortcut_only_applies_to_paragraphs():
    ctl, handler = _setup("- item")
    assert handler.handle_input(ctl.blocks[0].id, "# not a heading") is Action.EDITED
    assert ctl.blocks[0].type == BULLET_ITEM
    assert ctl.blocks[0].content == "# not a heading"


def test_plain_input_updates_content():
    changes = []
    ctl, handler = _setup("Hel", on_change=changes.append)
    assert handler.handle_input(ctl.blocks[0].id, "Hello") is Action.EDITED
    assert changes == ["Hello"]


def test_input_unknown_block_is_ignored():
    _, handler = _setup("x")
    assert handler.handle_input("missing", "y") is Action.IGNORED


# ── Enter ─────────────────────────────────────────────────────


def test_enter_splits_at_caret():
    ctl, handler = _setup("Hello World")
    block_id = ctl.blocks[0].id
    action = handler.handle_key(block_id, "Enter", MarkupCaret("Hello World", 5))
    assert action is Action.SPLIT
    assert action.handled
    assert [b.content for b in ctl.blocks] == ["Hello", " World"]
    assert ctl.take_pending_focus().block_id == ctl.blocks[1].id


def test_enter_at_end_gives_empty_block_of_same_list_type():
    ctl, handler = _setup("- item")
    handler.handle_key(ctl.blocks[0].id, "Enter", MarkupCaret("item", 4))
    assert [(b.type, b.content) for b in ctl.blocks] == [(BULLET_ITEM, "item"), (BULLET_ITEM, "")]


def test_enter_without_caret_appends():
    ctl, handler = _setup("text")
    action = handler.handle_key(ctl.blocks[0].id, "Enter", MarkupCaret("text", None))
    assert action is Action.APPENDED
    assert [b.content for b in ctl.blocks] == ["text", ""]


def test_enter_on_image_adds_paragraph():
    ctl, handler = _setup("![a](b.png)")
    action = handler.handle_key(ctl.blocks[0].id, "Enter", MarkupCaret(""))
    assert action is Action.APPENDED
    assert [b.type for b in ctl.blocks] == [IMAGE, PARAGRAPH]


# ── Backspace ─────────────────────────────────────────────────


def test_backspace_at_start_merges():
    ctl, handler = _setup("Hello\n World")
    second = ctl.blocks[1]
    action = handler.handle_key(second.id, "Backspace", MarkupCaret(second.content, 0))
    assert action is Action.MERGED
    assert [b.content for b in ctl.blocks] == ["Hello World"]


def test_backspace_on_empty_block_removes():
    ctl, handler = _setup("a\n")
    empty = ctl.blocks[1]
    action = handler.handle_key(empty.id, "Backspace", MarkupCaret("", 0))
    assert action is Action.REMOVED
    assert len(ctl.blocks) == 1


def test_backspace_on_image_removes():
    ctl, handler = _setup("a\n![x](y.png)")
    action = handler.handle_key(ctl.blocks[1].id, "Backspace", MarkupCaret(""))
    assert action is Action.REMOVED
    assert ctl.markdown == "a"


def test_backspace_mid_text_is_default():
    ctl, handler = _setup("Hello")
    action = handler.handle_key(ctl.blocks[0].id, "Backspace", MarkupCaret("Hello", 3))
    assert action is Action.DEFAULT
    assert not action.handled


def test_backspace_with_selection_is_default():
    ctl, handler = _setup("a\nHello")
    action = handler.handle_key(ctl.blocks[1].id, "Backspace", MarkupCaret("Hello", 0, anchor=3))
    assert action is Action.DEFAULT
    assert len(ctl.blocks) == 2


def test_backspace_on_sole_empty_block_keeps_it():
    ctl, handler = _setup("")
    handler.handle_key(ctl.blocks[0].id, "Backspace", MarkupCaret("", 0))
    assert len(ctl.blocks) == 1


# ── Arrows ────────────────────────────────────────────────────


def test_arrow_up_on_first_line_moves_to_previous():
    ctl, handler = _setup("a\nb")
    a, b = ctl.blocks
    action = handler.handle_key(b.id, "ArrowUp", MarkupCaret("b", 0))
    assert action is Action.NAVIGATED
    assert ctl.focused_id == a.id


def test_arrow_up_inside_wrapped_text_is_default():
    ctl, handler = _setup("a\n" + "x" * 100)
    b = ctl.blocks[1]
    caret = MarkupCaret(b.content, 90, wrap_width=40)
    assert handler.handle_key(b.id, "ArrowUp", caret) is Action.DEFAULT


def test_arrow_down_on_last_line_moves_to_next():
    ctl, handler = _setup("x" * 100 + "\nb")
    a, b = ctl.blocks
    caret = MarkupCaret(a.content, 95, wrap_width=40)
    assert handler.handle_key(a.id, "ArrowDown", caret) is Action.NAVIGATED
    assert ctl.focused_id == b.id


def test_arrow_down_on_first_of_many_lines_is_default():
    ctl, handler = _setup("x" * 100 + "\nb")
    a = ctl.blocks[0]
    caret = MarkupCaret(a.content, 5, wrap_width=40)
    assert handler.handle_key(a.id, "ArrowDown", caret) is Action.DEFAULT


def test_other_keys_are_default():
    ctl, handler = _setup("a")
    assert handler.handle_key(ctl.blocks[0].id, "Tab", MarkupCaret("a")) is Action.DEFAULT


# ── Check / focus / read-only ─────────────────────────────────


def test_handle_check():
    ctl, handler = _setup("- [ ] task")
    assert handler.handle_check(ctl.blocks[0].id, True) is Action.CHECKED
    assert ctl.markdown == "- [x] task"


def test_handle_check_on_non_checklist_is_ignored():
    ctl, handler = _setup("text")
    assert handler.handle_check(ctl.blocks[0].id, True) is Action.IGNORED


def test_handle_focus():
    ctl, handler = _setup("a")
    assert handler.handle_focus(ctl.blocks[0].id) is Action.FOCUSED
    assert ctl.focused_id == ctl.blocks[0].id
    assert handler.handle_focus("missing") is Action.IGNORED


def test_read_only_ignores_everything():
    ctl, handler = _setup("Hello", read_only=True)
    block_id = ctl.blocks[0].id
    assert handler.handle_input(block_id, "# x") is Action.IGNORED
    assert handler.handle_key(block_id, "Enter", MarkupCaret("Hello", 2)) is Action.IGNORED
    assert ctl.markdown == "Hello"
