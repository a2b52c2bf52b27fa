"""
Chat Screenshot Editor - Text Layout

Deterministic word wrapping for chat lines on a raster surface.

The raster has no flow layout, so lines are wrapped here with a greedy
algorithm against a pixel budget. Each emitted run remembers where it
starts in the logical line so censor offsets (defined against the whole
line) land on the right wrapped fragment.
"""

import logging
from dataclasses import dataclass
from typing import Callable, List

from PIL import ImageFont

from constants import CHAT_FONT_SIZE, CHAT_FONT_CANDIDATES, CHAT_LINE_HEIGHT

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Run:
    """A contiguous span of a logical line emitted as one output line.

    Attributes:
        text: Run text
        start: Offset of the run's first character in the logical line
    """
    text: str
    start: int

    @property
    def end(self) -> int:
        return self.start + len(self.text)


@dataclass(frozen=True)
class PlacedRun:
    """A run positioned within a layer surface (layer-local pixels)."""
    line: object
    run: Run
    y: int


class TextMeasurer:
    """Font holder and pixel-width measurement for chat text.

    Args:
        font_size: Pixel size of the chat font
        font_path: Explicit TrueType file; otherwise CHAT_FONT_CANDIDATES are tried
    """

    def __init__(self, font_size: int = CHAT_FONT_SIZE, font_path: str = None):
        self.font_size = font_size
        self.font = self._load_font(font_size, font_path)
        self._widths = {}

    @staticmethod
    def _load_font(font_size, font_path):
        candidates = [font_path] if font_path else list(CHAT_FONT_CANDIDATES)
        for candidate in candidates:
            try:
                return ImageFont.truetype(candidate, font_size)
            except OSError:
                continue
        if font_path:
            logger.warning(f"Font '{font_path}' not found, using built-in font")
        else:
            logger.debug("No system chat font found, using built-in font")
        return ImageFont.load_default(size=font_size)

    def measure(self, text: str) -> float:
        """Advance width of text in pixels."""
        if not text:
            return 0.0
        width = self._widths.get(text)
        if width is None:
            width = float(self.font.getlength(text))
            self._widths[text] = width
        return width

    __call__ = measure


def wrap_line(text: str, max_width: float, measure: Callable[[str], float]) -> List[Run]:
    """Greedy word wrap of one logical line.

    Words are separated by single spaces. A word is moved to a new run the
    moment it would push the current run past max_width; a single word wider
    than the budget still gets a run of its own. Joining the run texts with
    single spaces reproduces the input exactly.

    Args:
        text: Plain line text
        max_width: Pixel budget per run
        measure: Width function

    Returns:
        Runs in order, each with its absolute start offset
    """
    if measure(text) <= max_width:
        return [Run(text, 0)]

    runs = []
    offset = 0
    current = []

    for word in text.split(' '):
        if current and measure(' '.join(current + [word])) > max_width:
            flushed = ' '.join(current)
            runs.append(Run(flushed, offset))
            # One space is consumed between the flushed run and the next
            offset += len(flushed) + 1
            current = [word]
        else:
            current.append(word)

    if current:
        runs.append(Run(' '.join(current), offset))
    return runs


def layout_layer(layer, measure: Callable[[str], float], max_width: float,
                 line_height: int = CHAT_LINE_HEIGHT) -> List[PlacedRun]:
    """Wrap every line of a layer and stack the runs top to bottom.

    Returns:
        Placed runs with layer-local y positions
    """
    placed = []
    y = 0
    for line in layer.lines:
        for run in wrap_line(line.plain_text, max_width, measure):
            placed.append(PlacedRun(line, run, y))
            y += line_height
    return placed
