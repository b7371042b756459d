"""Tests for editor/models.py: block variants, settings and notes."""

from editor.models import (
    CHECKLIST_ITEM,
    HEADING1,
    IMAGE,
    NUMBERED_ITEM,
    PARAGRAPH,
    ChecklistBlock,
    EditorSettings,
    ImageBlock,
    Note,
    NotesFile,
    TextBlock,
    block_from_dict,
    list_number,
    make_block,
    placeholder,
    with_fields,
)


def test_make_block_variants():
    assert isinstance(make_block(PARAGRAPH, "x"), TextBlock)
    assert isinstance(make_block(CHECKLIST_ITEM, "x"), ChecklistBlock)
    assert isinstance(make_block(IMAGE, src="a.png"), ImageBlock)


def test_make_block_unknown_type_is_paragraph():
    block = make_block("table", "x")
    assert block.type == PARAGRAPH
    assert block.content == "x"


def test_with_fields_retags_and_keeps_id():
    block = make_block(PARAGRAPH, "Buy milk")
    checklist = with_fields(block, type=CHECKLIST_ITEM, checked=True)
    assert isinstance(checklist, ChecklistBlock)
    assert checklist.id == block.id
    assert checklist.content == "Buy milk"
    assert checklist.checked is True

    back = with_fields(checklist, type=HEADING1)
    assert isinstance(back, TextBlock)
    assert back.type == HEADING1
    assert not hasattr(back, "checked")


def test_with_fields_image_to_text_starts_empty():
    image = make_block(IMAGE, src="a.png", alt="A")
    text = with_fields(image, type=PARAGRAPH)
    assert text.content == ""
    assert text.id == image.id


def test_with_fields_ignores_unknown_type():
    block = make_block(HEADING1, "x")
    assert with_fields(block, type="nope").type == HEADING1


def test_block_dict_round_trip():
    block = make_block(CHECKLIST_ITEM, "task", checked=True)
    again = block_from_dict(block.to_dict())
    assert again == block


def test_block_from_dict_missing_id_gets_fresh_one():
    block = block_from_dict({"type": IMAGE, "src": "x.png"})
    assert block.id
    assert block.type == IMAGE


def test_image_has_no_content():
    assert make_block(IMAGE, "ignored", src="x").content == ""


def test_placeholder():
    assert placeholder(HEADING1) == "Heading 1"
    assert placeholder(PARAGRAPH) == ""


def test_list_number_counts_runs():
    blocks = [
        make_block(NUMBERED_ITEM, "a"),
        make_block(NUMBERED_ITEM, "b"),
        make_block(PARAGRAPH, "break"),
        make_block(NUMBERED_ITEM, "c"),
    ]
    assert [list_number(blocks, i) for i in range(4)] == [1, 2, None, 1]


def test_editor_settings_defaults():
    s = EditorSettings.from_dict({})
    assert s.timezone == "UTC"
    assert s.arrow_threshold == 30.0
    assert s.default_image_alt == "Image"
    assert s.read_only is False


def test_editor_settings_from_dict():
    s = EditorSettings.from_dict(
        {"timezone": "Europe/Berlin", "editor": {"arrow_threshold": "12", "read_only": True}}
    )
    assert s.timezone == "Europe/Berlin"
    assert s.arrow_threshold == 12.0
    assert s.read_only is True


def test_editor_settings_malformed_values_fall_back():
    s = EditorSettings.from_dict({"editor": {"arrow_threshold": "far", "line_height": -3}})
    assert s.arrow_threshold == 30.0
    assert s.line_height == 24.0


def test_editor_settings_round_trip():
    s = EditorSettings(timezone="Asia/Tokyo", arrow_threshold=10, read_only=True)
    assert EditorSettings.from_dict(s.to_dict()) == s


def test_note_round_trip():
    note = Note(id="n", title="N", markdown="# x", created_at="2026-01-01T00:00:00", updated_at="2026-01-02T00:00:00")
    d = note.to_dict()
    assert d["createdAt"] == "2026-01-01T00:00:00"
    assert Note.from_dict(d) == note


def test_notes_file_skips_garbage():
    nf = NotesFile.from_dict({"notes": [{"id": "a", "title": "A"}, "junk", None]})
    assert [n.id for n in nf.notes] == ["a"]
