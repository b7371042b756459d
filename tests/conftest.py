"""Shared test fixtures for LifeNotes tests."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
import yaml


@pytest.fixture
def workspace(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Create a temporary workspace with settings and two notes."""
    root = tmp_path / "workspace"
    (root / "data").mkdir(parents=True)

    settings = {
        "timezone": "UTC",
        "editor": {
            "arrow_threshold": 30,
            "default_image_alt": "Image",
            "line_height": 24,
            "read_only": False,
        },
    }
    (root / "settings.yaml").write_text(
        yaml.dump(settings, default_flow_style=False), encoding="utf-8"
    )

    notes = {
        "notes": [
            {
                "id": "groceries",
                "title": "Groceries",
                "markdown": "# Groceries\n- [ ] Milk\n- [x] Bread\nRemember the **coupons**",
                "createdAt": "2026-02-10T09:00:00+00:00",
                "updatedAt": "2026-02-10T09:00:00+00:00",
            },
            {
                "id": "journal",
                "title": "Journal",
                "markdown": "Quiet day.\n1. Walk\n1. Read",
                "createdAt": "2026-02-11T21:30:00+00:00",
                "updatedAt": "2026-02-11T21:30:00+00:00",
            },
        ],
    }
    (root / "data" / "notes.json").write_text(
        json.dumps(notes, indent=2), encoding="utf-8"
    )

    monkeypatch.setenv("LIFENOTES_ROOT", str(root))
    monkeypatch.delenv("LIFENOTES_USERNAME", raising=False)
    monkeypatch.delenv("LIFENOTES_PASSWORD", raising=False)
    return root


@pytest.fixture
def changes() -> list[str]:
    """Collects every markdown value a controller emits."""
    return []


@pytest.fixture
def client(workspace: Path):
    from fastapi.testclient import TestClient

    from ui import app as app_module

    app_module._sessions.clear()
    yield TestClient(app_module.app)
    app_module._sessions.clear()
