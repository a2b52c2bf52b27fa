"""
Chat Screenshot Editor - Layer Data Model

A Layer is one independently placed block of classified chat text.

This is part of the MODEL layer - pure data, no UI logic.

Usage:
    layer = Layer(layer_id=1, name="Layer 1", raw_text="John says: Hi")
    layer.reparse(parser)
    layer.transform = layer.transform.translated(10, 0)
    data = layer.to_dict()
"""

import logging
from typing import List, Optional

from models.styled_line import StyledLine
from models.transform import Transform

logger = logging.getLogger(__name__)


class Layer:
    """Chat text layer.

    Attributes:
        id: Unique id, assigned by the LayerStore and never reused
        name: Display name
        raw_text: Text as typed or loaded
        lines: Parsed lines (empty until parsed)
        transform: Placement on the canvas
        visible: Whether the layer is rendered
    """

    def __init__(self, layer_id: int, name: str, raw_text: str = '',
                 transform: Optional[Transform] = None, visible: bool = True):
        self.id = layer_id
        self.name = name
        self.raw_text = raw_text
        self.lines: List[StyledLine] = []
        self.transform = transform if transform is not None else Transform()
        self.visible = visible

    @property
    def needs_parse(self) -> bool:
        """True if there is text but nothing has been classified yet."""
        return bool(self.raw_text.strip()) and not self.lines

    def set_text(self, raw_text: str, parser) -> None:
        """Replace the raw text and re-classify it."""
        self.raw_text = raw_text or ''
        self.reparse(parser)

    def reparse(self, parser) -> None:
        """Re-classify raw_text with the given ChatParser."""
        self.lines = parser.parse(self.raw_text)
        logger.debug(f"Layer {self.id} parsed into {len(self.lines)} lines")

    def get_line(self, line_index: int) -> Optional[StyledLine]:
        if 0 <= line_index < len(self.lines):
            return self.lines[line_index]
        return None

    def to_dict(self) -> dict:
        """Export persisted fields (parsed lines are rebuilt on load)."""
        return {
            'id': self.id,
            'name': self.name,
            'text': self.raw_text,
            'transform': self.transform.to_dict(),
            'visible': self.visible,
        }

    def __repr__(self) -> str:
        return f"Layer(id={self.id}, name={self.name!r}, lines={len(self.lines)})"
