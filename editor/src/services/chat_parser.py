"""
Chat Screenshot Editor - Chat Parser

Turns raw multi-line chat logs into ordered StyledLine records.

Blank lines are dropped before ids are assigned, so line ids (and every
censor region that references them) count surviving lines only.
"""

import logging
import re
from typing import List

from models.styled_line import StyledLine
from services.chat_classifier import classify
from constants import TIMESTAMP_PATTERN

logger = logging.getLogger(__name__)

_TIMESTAMP_RE = re.compile(TIMESTAMP_PATTERN)


def strip_timestamp(line: str) -> str:
    """Remove a leading "[HH:MM:SS] " prefix if present."""
    return _TIMESTAMP_RE.sub('', line, count=1)


def parse_chat(raw_text: str, strip_timestamps: bool = False, player_name: str = '') -> List[StyledLine]:
    """Parse raw chat text into styled lines.

    Args:
        raw_text: Multi-line chat log text
        strip_timestamps: Remove leading "[HH:MM:SS] " prefixes before classifying
        player_name: Configured character name for player-aware rules

    Returns:
        List of StyledLine with sequential ids starting at 0
    """
    if not raw_text:
        return []

    lines = []
    for raw_line in raw_text.split('\n'):
        if not raw_line.strip():
            continue
        text = strip_timestamp(raw_line) if strip_timestamps else raw_line
        text = text.strip()
        if not text:
            continue

        result = classify(text, player_name)
        lines.append(StyledLine(
            id=len(lines),
            text=result.display_text,
            color=result.color,
            segments=result.segments,
            marker=result.marker,
            marker_color=result.marker_color,
        ))

    logger.debug(f"Parsed {len(lines)} chat lines")
    return lines


class ChatParser:
    """Chat parser bound to the session's parse options.

    Layers hold a reference to this so re-parsing on selection or on an
    option change uses the current character name and timestamp setting.
    """

    def __init__(self, strip_timestamps: bool = False, player_name: str = ''):
        self.strip_timestamps = strip_timestamps
        self.player_name = player_name

    def parse(self, raw_text: str) -> List[StyledLine]:
        return parse_chat(raw_text, self.strip_timestamps, self.player_name)
