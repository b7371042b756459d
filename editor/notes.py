"""Note CRUD and validation over data/notes.json."""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Any

from editor.fileio import read_json, write_json_atomic
from editor.models import Note, NotesFile
from editor.workspace import notes_path as _notes_path
from editor.workspace import timestamp

logger = logging.getLogger(__name__)


# ── Validation ────────────────────────────────────────────────


_SLUG_RE = re.compile(r"^[a-z0-9]+(?:-[a-z0-9]+)*$")
EDITABLE_FIELDS = {"title", "markdown"}


def slugify(title: str) -> str:
    """'My First Note!' -> 'my-first-note'; empty titles give 'note'."""
    slug = re.sub(r"[^a-z0-9]+", "-", title.lower()).strip("-")
    return slug or "note"


def validate_note(note: dict[str, Any]) -> list[str]:
    """Validate note fields and return list of errors (empty if valid)."""
    errors = []
    if "title" not in note:
        errors.append("Missing required field: title")
    elif not isinstance(note["title"], str) or not note["title"].strip():
        errors.append("title must be a non-empty string")

    if "markdown" in note and not isinstance(note["markdown"], str):
        errors.append("markdown must be a string")

    if "id" in note and (not isinstance(note["id"], str) or not _SLUG_RE.match(note["id"])):
        errors.append(f"Invalid note id: {note['id']!r}")

    return errors


# ── CRUD ──────────────────────────────────────────────────────


def load_notes(root: Path | None = None) -> NotesFile:
    return NotesFile.from_dict(read_json(_notes_path(root)))


def save_notes(notes_file: NotesFile, root: Path | None = None) -> None:
    """Write notes.json atomically."""
    write_json_atomic(_notes_path(root), notes_file.to_dict())


def find_note(notes_file: NotesFile, note_id: str) -> Note | None:
    for n in notes_file.notes:
        if n.id == note_id:
            return n
    return None


def _unique_id(notes_file: NotesFile, base: str) -> str:
    taken = {n.id for n in notes_file.notes}
    if base not in taken:
        return base
    n = 2
    while f"{base}-{n}" in taken:
        n += 1
    return f"{base}-{n}"


def create_note(
    notes_file: NotesFile, note_data: dict[str, Any], root: Path | None = None
) -> tuple[Note, list[str]]:
    """Create and add a new note. Returns (note, errors)."""
    errors = validate_note(note_data)
    if errors:
        return Note(), errors

    if "id" in note_data:
        note_id = note_data["id"]
        if find_note(notes_file, note_id):
            return Note(), [f"Note ID already exists: {note_id}"]
    else:
        note_id = _unique_id(notes_file, slugify(note_data["title"]))

    now = timestamp(root)
    note = Note(
        id=note_id,
        title=note_data["title"].strip(),
        markdown=note_data.get("markdown", ""),
        created_at=now,
        updated_at=now,
    )
    notes_file.notes.append(note)
    logger.info("created note %s", note.id)
    return note, []


def update_note(
    notes_file: NotesFile, note_id: str, updates: dict[str, Any], root: Path | None = None
) -> tuple[Note | None, list[str]]:
    """Update title and/or markdown of a note. Returns (updated_note, errors)."""
    note = find_note(notes_file, note_id)
    if not note:
        return None, [f"Note not found: {note_id}"]

    unknown = sorted(set(updates) - EDITABLE_FIELDS)
    if unknown:
        return None, [f"Field cannot be updated: {name}" for name in unknown]

    note_dict = note.to_dict()
    note_dict.update(updates)
    errors = validate_note(note_dict)
    if errors:
        return None, errors

    updated = Note.from_dict(note_dict)
    updated.title = updated.title.strip()
    updated.updated_at = timestamp(root)
    for i, n in enumerate(notes_file.notes):
        if n.id == note_id:
            notes_file.notes[i] = updated
            break
    logger.info("updated note %s", note_id)
    return updated, []


def delete_note(notes_file: NotesFile, note_id: str) -> bool:
    for i, n in enumerate(notes_file.notes):
        if n.id == note_id:
            notes_file.notes.pop(i)
            logger.info("deleted note %s", note_id)
            return True
    return False
