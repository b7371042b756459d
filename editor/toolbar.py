"""Toolbar commands over a DocumentController."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable

from editor.controller import DocumentController
from editor.models import (
    BULLET_ITEM,
    CHECKLIST_ITEM,
    HEADING1,
    HEADING2,
    HEADING3,
    NUMBERED_ITEM,
    PARAGRAPH,
)

logger = logging.getLogger(__name__)

BOLD = "bold"
IMAGE_COMMAND = "image"

TYPE_COMMANDS = [PARAGRAPH, HEADING1, HEADING2, HEADING3, BULLET_ITEM, NUMBERED_ITEM, CHECKLIST_ITEM]

LABELS = {
    PARAGRAPH: "Normal Text",
    BOLD: "Bold",
    HEADING1: "Heading 1",
    HEADING2: "Heading 2",
    HEADING3: "Heading 3",
    BULLET_ITEM: "Bullet List",
    NUMBERED_ITEM: "Ordered List",
    CHECKLIST_ITEM: "Checkbox",
    IMAGE_COMMAND: "Image",
}

COMMANDS = [PARAGRAPH, BOLD, HEADING1, HEADING2, HEADING3, BULLET_ITEM, NUMBERED_ITEM, CHECKLIST_ITEM, IMAGE_COMMAND]


@dataclass
class ToolbarEntry:
    command: str
    label: str
    active: bool = False


@dataclass
class ToolbarState:
    visible: bool
    current_type: str | None = None
    entries: list[ToolbarEntry] = field(default_factory=list)


def toolbar_state(controller: DocumentController) -> ToolbarState:
    """What the toolbar shows for the controller's focused block."""
    if controller.read_only:
        return ToolbarState(visible=False)
    current = controller.current_type
    entries = [ToolbarEntry(cmd, LABELS[cmd], cmd in TYPE_COMMANDS and cmd == current) for cmd in COMMANDS]
    return ToolbarState(visible=True, current_type=current, entries=entries)


def dispatch(
    controller: DocumentController,
    command: str,
    url_provider: Callable[[], str | None] | None = None,
) -> bool:
    """Route a toolbar command. Returns whether anything happened."""
    if command in TYPE_COMMANDS:
        return controller.toggle_type(command)
    if command == BOLD:
        return controller.toggle_bold()
    if command == IMAGE_COMMAND:
        if url_provider is None:
            logger.debug("image command without a url provider")
            return False
        return controller.add_image(url_provider) is not None
    logger.debug("unknown toolbar command: %s", command)
    return False
