"""Workspace root, settings, timezone and path helpers for LifeNotes."""

from __future__ import annotations

import logging
import os
from datetime import datetime
from pathlib import Path
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from editor.fileio import read_yaml, write_yaml_atomic
from editor.models import EditorSettings

logger = logging.getLogger(__name__)


def workspace_root() -> Path:
    """The workspace directory (holds settings.yaml and data/)."""
    return Path(
        os.environ.get("LIFENOTES_ROOT", str(Path.home() / "lifenotes"))
    ).expanduser().resolve()


# ── Path helpers ──────────────────────────────────────────────

def settings_path(root: Path | None = None) -> Path:
    if root is None:
        root = workspace_root()
    return root / "settings.yaml"


def notes_path(root: Path | None = None) -> Path:
    if root is None:
        root = workspace_root()
    return root / "data" / "notes.json"


# ── Settings ──────────────────────────────────────────────────

def load_settings(root: Path | None = None) -> EditorSettings:
    """Read settings.yaml; a missing file gives the defaults."""
    return EditorSettings.from_dict(read_yaml(settings_path(root)))


def save_settings(settings: EditorSettings, root: Path | None = None) -> None:
    write_yaml_atomic(settings_path(root), settings.to_dict())


def get_user_timezone(root: Path | None = None) -> ZoneInfo:
    """Timezone from settings.yaml, defaulting to UTC."""
    name = load_settings(root).timezone
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning("unknown timezone %r in settings, using UTC", name)
        return ZoneInfo("UTC")


def now_local(root: Path | None = None) -> datetime:
    return datetime.now(get_user_timezone(root))


def timestamp(root: Path | None = None) -> str:
    """Current time as ISO seconds in the user's timezone."""
    return now_local(root).isoformat(timespec="seconds")
