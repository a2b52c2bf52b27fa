"""
Chat Screenshot Editor - Session Model

THE MODEL for one editing session. Owns the settings, the layer store,
the censor store and the current text selection, and is passed to the
renderers explicitly (there is no global state).

Usage:
    session = EditorSession()
    session.set_character_name("John Doe")
    session.import_chat_text("John Doe says: Hi")
    session.select_text(session.layers.active_layer.id, 0, 0, 4)
    session.cycle_censor()
"""

import logging
from dataclasses import dataclass, field

from models.censor_store import CensorStore, SelectionContext
from models.layer_store import LayerStore
from models.transform import Transform
from services.chat_parser import ChatParser
from constants import DEFAULT_CANVAS_WIDTH, DEFAULT_CANVAS_HEIGHT, DEFAULT_CHAT_LINE_WIDTH

logger = logging.getLogger(__name__)


@dataclass
class EditorSettings:
    """User settings persisted with the session snapshot."""
    character_name: str = ''
    canvas_width: int = DEFAULT_CANVAS_WIDTH
    canvas_height: int = DEFAULT_CANVAS_HEIGHT
    image_transform: Transform = field(default_factory=Transform)
    image_drag_enabled: bool = False
    chat_drag_enabled: bool = True
    show_black_bars: bool = False
    strip_timestamps: bool = False
    chat_line_width: int = DEFAULT_CHAT_LINE_WIDTH
    screenshot_theme: str = ''
    always_prompt_save_location: bool = False
    selected_text: str = ''


class EditorSession:
    """Owned store for layers, censor regions, selection and settings."""

    def __init__(self, settings: EditorSettings = None):
        self.settings = settings if settings is not None else EditorSettings()
        self.parser = ChatParser(self.settings.strip_timestamps, self.settings.character_name)
        self.censors = CensorStore()
        self.layers = LayerStore(self.parser, self.censors)
        self.selection = SelectionContext.empty()

    # ========================================
    # Parse Options
    # ========================================

    def set_character_name(self, name: str) -> None:
        """Change the player name and re-classify every layer."""
        self.settings.character_name = name or ''
        self.parser.player_name = self.settings.character_name
        self.layers.reparse_all()

    def set_strip_timestamps(self, enabled: bool) -> None:
        """Toggle timestamp stripping and re-classify every layer."""
        self.settings.strip_timestamps = bool(enabled)
        self.parser.strip_timestamps = self.settings.strip_timestamps
        self.layers.reparse_all()

    # ========================================
    # Text
    # ========================================

    def set_layer_text(self, layer_id: int, text: str) -> None:
        """Replace a layer's text and re-classify it.

        Raises:
            ValueError: If the layer does not exist
        """
        layer = self.layers.get(layer_id)
        if layer is None:
            raise ValueError(f"Layer {layer_id} not found")
        layer.set_text(text, self.parser)

    def import_chat_text(self, text: str) -> None:
        """Load text into the active layer (file drop / file picker)."""
        layer = self.layers.active_layer
        layer.set_text(text, self.parser)
        logger.info(f"Imported {len(layer.lines)} chat lines into {layer.name}")

    # ========================================
    # Selection / Censoring
    # ========================================

    def select_text(self, layer_id: int, line_index: int, start: int, end: int) -> SelectionContext:
        """Derive the selection context from plain-text offsets.

        Empty, reversed or out-of-range selections reset the context.
        """
        layer = self.layers.get(layer_id)
        line = layer.get_line(line_index) if layer is not None else None
        if line is None:
            return self.clear_selection()

        plain = line.plain_text
        if start > end:
            start, end = end, start
        start = max(0, start)
        end = min(len(plain), end)
        if end <= start:
            return self.clear_selection()

        self.selection = SelectionContext(layer_id, line_index, start, end, plain[start:end])
        self.settings.selected_text = self.selection.text
        return self.selection

    def clear_selection(self) -> SelectionContext:
        self.selection = SelectionContext.empty()
        self.settings.selected_text = ''
        return self.selection

    def cycle_censor(self):
        """Advance the censor state of the current selection."""
        return self.censors.cycle(self.selection)

    # ========================================
    # Lifecycle
    # ========================================

    def remove_layer(self, layer_id: int) -> bool:
        removed = self.layers.remove(layer_id)
        if removed and self.selection.layer_id == layer_id:
            self.clear_selection()
        return removed

    def reset(self) -> None:
        """Full session reset: one empty layer, no censoring, no selection."""
        self.layers.reset()
        self.censors.clear()
        self.clear_selection()
        logger.info("Session reset")

    # ========================================
    # Serialization
    # ========================================

    def to_snapshot(self) -> dict:
        """Export as a JSON-compatible snapshot dict."""
        from services.session_store import session_to_snapshot
        return session_to_snapshot(self)

    @staticmethod
    def from_snapshot(data) -> 'EditorSession':
        """Rebuild a session from snapshot data, defaulting malformed fields."""
        from services.session_store import session_from_snapshot
        return session_from_snapshot(data)
