"""Tests for cli/lifenotes.py: note opening and saving from the terminal editor."""

import asyncio
import threading

import pytest

from cli.lifenotes import LifeNotesApp, open_note
from editor.notes import delete_note, find_note, load_notes, save_notes
from editor.workspace import load_settings


def _disk_markdown(root, note_id):
    return find_note(load_notes(root), note_id).markdown


def _app(root, note_id="journal"):
    return LifeNotesApp(find_note(load_notes(root), note_id), root, load_settings(root))


def test_open_note_existing(workspace):
    note, errors = open_note(workspace, "groceries")
    assert errors == []
    assert note.title == "Groceries"


def test_open_note_creates_missing(workspace):
    note, errors = open_note(workspace, "ideas")
    assert errors == []
    assert find_note(load_notes(workspace), "ideas") is not None
    assert note.markdown == ""


def test_save_writes_markdown_and_returns_note(workspace):
    app = _app(workspace)
    note = app._save("- saved")
    assert note.markdown == "- saved"
    assert _disk_markdown(workspace, "journal") == "- saved"


def test_save_of_deleted_note_raises(workspace):
    app = _app(workspace)
    notes_file = load_notes(workspace)
    delete_note(notes_file, "journal")
    save_notes(notes_file, workspace)
    with pytest.raises(ValueError):
        app._save("gone")


def test_concurrent_saves_keep_every_other_note(workspace):
    app = _app(workspace)
    threads = [threading.Thread(target=app._save, args=(f"line {i}",)) for i in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    notes_file = load_notes(workspace)
    assert [n.id for n in notes_file.notes] == ["groceries", "journal"]
    assert find_note(notes_file, "journal").markdown.startswith("line ")


def test_autosave_lands_latest_document(workspace):
    app = _app(workspace)

    async def type_and_wait():
        async with app.run_test() as pilot:
            await pilot.press(*"abcdef")
            await pilot.pause()
            await app.workers.wait_for_complete()
            return app.controller.markdown

    final = asyncio.run(type_and_wait())
    assert final != "Quiet day.\n1. Walk\n1. Read"
    assert _disk_markdown(workspace, "journal") == final
