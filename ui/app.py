from __future__ import annotations

import logging
import os
import secrets
from pathlib import Path
from typing import Any, Callable

from editor import (
    Action,
    BlockInteractionHandler,
    DocumentController,
    FocusRequest,
    block_from_dict,
    create_note,
    decode,
    delete_note,
    encode,
    find_note,
    load_notes,
    load_settings,
    save_notes,
    update_note,
    workspace_root as _workspace_root,
)

from fastapi import FastAPI, Depends, HTTPException, status
from fastapi import Body
from fastapi.security import HTTPBasic, HTTPBasicCredentials

if os.environ.get("LIFENOTES_LOG_LEVEL"):
    logging.basicConfig(level=os.environ["LIFENOTES_LOG_LEVEL"].upper())

logger = logging.getLogger(__name__)


# ── Auth ──────────────────────────────────────────────────────

app = FastAPI(title="LifeNotes", version="0.1.0")

security = HTTPBasic(auto_error=False)


def get_current_user(credentials: HTTPBasicCredentials | None = Depends(security)) -> str:
    expected_username = os.environ.get("LIFENOTES_USERNAME", "")
    expected_password = os.environ.get("LIFENOTES_PASSWORD", "")

    if not expected_username or not expected_password:
        return "guest"

    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Basic"},
        )

    correct_username = secrets.compare_digest(credentials.username.encode("utf-8"), expected_username.encode("utf-8"))
    correct_password = secrets.compare_digest(credentials.password.encode("utf-8"), expected_password.encode("utf-8"))

    if not (correct_username and correct_password):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
            headers={"WWW-Authenticate": "Basic"},
        )

    return credentials.username


# ── Editor sessions ───────────────────────────────────────────

# One live controller per (workspace, note id).
_sessions: dict[tuple[str, str], tuple[DocumentController, BlockInteractionHandler]] = {}


def _persist_to(root: Path, note_id: str) -> Callable[[str], None]:
    def on_change(markdown: str) -> None:
        notes_file = load_notes(root)
        _, errors = update_note(notes_file, note_id, {"markdown": markdown}, root)
        if errors:
            logger.warning("could not persist note %s: %s", note_id, "; ".join(errors))
            return
        save_notes(notes_file, root)

    return on_change


def _session(root: Path, note_id: str, markdown: str) -> tuple[DocumentController, BlockInteractionHandler]:
    key = (str(root), note_id)
    if key in _sessions:
        controller, handler = _sessions[key]
        controller.set_from_external(markdown)
        return controller, handler
    settings = load_settings(root)
    controller = DocumentController(
        markdown,
        on_change=_persist_to(root, note_id),
        read_only=settings.read_only,
        default_image_alt=settings.default_image_alt,
    )
    handler = BlockInteractionHandler(controller, arrow_threshold=settings.arrow_threshold)
    _sessions[key] = (controller, handler)
    return controller, handler


def _drop_session(root: Path, note_id: str) -> None:
    _sessions.pop((str(root), note_id), None)


def _editor_state(controller: DocumentController, focus: FocusRequest | None = None) -> dict[str, Any]:
    return {
        "markdown": controller.markdown,
        "blocks": [b.to_dict() for b in controller.blocks],
        "focused_id": controller.focused_id,
        "current_type": controller.current_type,
        "focus": {"block_id": focus.block_id, "caret": focus.caret} if focus else None,
    }


def _require(payload: dict[str, Any], name: str) -> Any:
    if payload.get(name) is None:
        raise HTTPException(status_code=400, detail=f"Missing {name}")
    return payload[name]


# ── Endpoints ─────────────────────────────────────────────────

@app.get("/healthz")
def healthz() -> dict[str, str]:
    return {"ok": "true"}


@app.get("/api/notes")
def api_list_notes(username: str = Depends(get_current_user)) -> dict[str, Any]:
    notes_file = load_notes(_workspace_root())
    return {"notes": [n.to_dict() for n in notes_file.notes]}


@app.post("/api/notes")
def api_create_note(payload: dict[str, Any] = Body(...), username: str = Depends(get_current_user)) -> dict[str, Any]:
    """Create a new note."""
    root = _workspace_root()
    notes_file = load_notes(root)
    note, errors = create_note(notes_file, payload, root)
    if errors:
        raise HTTPException(status_code=400, detail="; ".join(errors))
    save_notes(notes_file, root)
    return {"ok": True, "note": note.to_dict()}


@app.get("/api/notes/{note_id}")
def api_get_note(note_id: str, username: str = Depends(get_current_user)) -> dict[str, Any]:
    """A note plus its decoded blocks."""
    note = find_note(load_notes(_workspace_root()), note_id)
    if note is None:
        raise HTTPException(status_code=404, detail=f"Note not found: {note_id}")
    return {"note": note.to_dict(), "blocks": [b.to_dict() for b in decode(note.markdown)]}


@app.put("/api/notes/{note_id}")
def api_update_note(note_id: str, payload: dict[str, Any] = Body(...), username: str = Depends(get_current_user)) -> dict[str, Any]:
    root = _workspace_root()
    notes_file = load_notes(root)
    if find_note(notes_file, note_id) is None:
        raise HTTPException(status_code=404, detail=f"Note not found: {note_id}")
    updated, errors = update_note(notes_file, note_id, payload, root)
    if errors:
        raise HTTPException(status_code=400, detail="; ".join(errors))
    save_notes(notes_file, root)
    return {"ok": True, "note": updated.to_dict() if updated else None}


@app.delete("/api/notes/{note_id}")
def api_delete_note(note_id: str, username: str = Depends(get_current_user)) -> dict[str, Any]:
    root = _workspace_root()
    notes_file = load_notes(root)
    if not delete_note(notes_file, note_id):
        raise HTTPException(status_code=404, detail=f"Note not found: {note_id}")
    save_notes(notes_file, root)
    _drop_session(root, note_id)
    return {"ok": True, "note_id": note_id}


@app.post("/api/markdown/decode")
def api_decode(payload: dict[str, Any] = Body(...), username: str = Depends(get_current_user)) -> dict[str, Any]:
    markdown = payload.get("markdown", "")
    if not isinstance(markdown, str):
        raise HTTPException(status_code=400, detail="markdown must be a string")
    return {"blocks": [b.to_dict() for b in decode(markdown)]}


@app.post("/api/markdown/encode")
def api_encode(payload: dict[str, Any] = Body(...), username: str = Depends(get_current_user)) -> dict[str, Any]:
    blocks = payload.get("blocks")
    if not isinstance(blocks, list):
        raise HTTPException(status_code=400, detail="blocks must be a list")
    return {"markdown": encode([block_from_dict(b) for b in blocks])}


BLOCK_FIELDS = {"type", "content", "checked", "src", "alt"}

EDIT_COMMANDS = {
    "input", "update", "add", "split", "merge", "remove", "focus",
    "focus_previous", "focus_next", "check", "toggle_type", "add_image",
}


@app.post("/api/notes/{note_id}/edit")
def api_edit_note(note_id: str, payload: dict[str, Any] = Body(...), username: str = Depends(get_current_user)) -> dict[str, Any]:
    """Apply one editor operation to the note's live document."""
    command = payload.get("command")
    if command not in EDIT_COMMANDS:
        raise HTTPException(status_code=400, detail=f"Unknown command: {command}")

    root = _workspace_root()
    note = find_note(load_notes(root), note_id)
    if note is None:
        raise HTTPException(status_code=404, detail=f"Note not found: {note_id}")
    controller, handler = _session(root, note_id, note.markdown)
    action: Action | None = None

    if command == "input":
        action = handler.handle_input(_require(payload, "block_id"), str(payload.get("markup", "")))
    elif command == "update":
        fields = payload.get("fields") or {}
        if not isinstance(fields, dict):
            raise HTTPException(status_code=400, detail="fields must be an object")
        fields = {k: v for k, v in fields.items() if k in BLOCK_FIELDS}
        controller.update(_require(payload, "block_id"), **fields)
    elif command == "add":
        extra = {k: payload[k] for k in ("checked", "src", "alt") if k in payload}
        controller.add(
            payload.get("after_id"),
            payload.get("block_type", "paragraph"),
            str(payload.get("content", "")),
            **extra,
        )
    elif command == "split":
        controller.split(_require(payload, "block_id"), str(payload.get("left", "")), str(payload.get("right", "")))
    elif command == "merge":
        controller.merge(_require(payload, "block_id"))
    elif command == "remove":
        controller.remove(_require(payload, "block_id"))
    elif command == "focus":
        action = handler.handle_focus(_require(payload, "block_id"))
    elif command == "focus_previous":
        controller.focus_previous(_require(payload, "block_id"))
    elif command == "focus_next":
        controller.focus_next(_require(payload, "block_id"))
    elif command == "check":
        action = handler.handle_check(_require(payload, "block_id"), bool(payload.get("checked", False)))
    elif command == "toggle_type":
        controller.toggle_type(str(_require(payload, "block_type")))
    else:
        url = payload.get("url")
        controller.add_image(lambda: url)

    if action is Action.IGNORED:
        logger.debug("edit %s ignored for note %s", command, note_id)
    return _editor_state(controller, controller.take_pending_focus())
