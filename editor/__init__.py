"""LifeNotes editor core: block model, markdown codec and document controller.

Public API re-exports for convenient imports:
    from editor import decode, encode, DocumentController, BlockInteractionHandler, ...
"""

# Models
from editor.models import (
    PARAGRAPH,
    HEADING1,
    HEADING2,
    HEADING3,
    BULLET_ITEM,
    NUMBERED_ITEM,
    CHECKLIST_ITEM,
    IMAGE,
    BLOCK_TYPES,
    Block,
    TextBlock,
    ChecklistBlock,
    ImageBlock,
    EditorSettings,
    Note,
    NotesFile,
    make_block,
    with_fields,
    block_from_dict,
    block_signature,
    list_number,
    placeholder,
)

# Codec
from editor.codec import decode, decode_line, encode, encode_block

# Inline markup
from editor.inline import (
    escape_html,
    markdown_to_markup,
    markup_to_markdown,
    sanitize_markup,
    split_markup,
    toggle_bold,
    visible_text,
)

# Caret
from editor.caret import (
    CaretInspector,
    EditingSurface,
    MarkupCaret,
    MarkupSurface,
    Rect,
    is_caret_at_top,
    is_caret_at_bottom,
)

# Controller & interaction
from editor.controller import DocumentController, FocusRequest
from editor.interaction import Action, BlockInteractionHandler, match_shortcut
from editor.toolbar import ToolbarState, toolbar_state, dispatch

# Workspace & notes
from editor.workspace import (
    workspace_root,
    settings_path,
    notes_path,
    load_settings,
    save_settings,
    now_local,
)
from editor.notes import (
    validate_note,
    load_notes,
    save_notes,
    find_note,
    create_note,
    update_note,
    delete_note,
)
