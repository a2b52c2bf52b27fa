"""Parsed chat line records."""
from dataclasses import dataclass
from typing import Optional, Tuple

from models.color import Color
from utils.markup import strip_markup


@dataclass(frozen=True)
class Segment:
    """A run of characters sharing one color."""
    text: str
    color: Color


@dataclass(frozen=True)
class StyledLine:
    """One classified chat line.

    Attributes:
        id: Index of the line among the surviving (non-blank) lines at parse time
        text: Display text; marker lines carry inline color spans
        color: Line color (the base color for marker lines)
        segments: Plain text pieces with their colors, in order
        marker_color: Marker color when the line came from a split-marker rule
        marker: The marker text for such lines
    """
    id: int
    text: str
    color: Color
    segments: Tuple[Segment, ...] = ()
    marker: Optional[str] = None
    marker_color: Optional[Color] = None

    @property
    def plain_text(self) -> str:
        """Marker-stripped text; censor offsets index into this."""
        if self.has_markers:
            return strip_markup(self.text)
        return self.text

    @property
    def has_markers(self) -> bool:
        return self.marker is not None

    def same_as(self, other: 'StyledLine') -> bool:
        """Structural equality on what is displayed (text and color)."""
        return self.id == other.id and self.text == other.text and self.color == other.color
