"""
Chat Screenshot Editor - Line Classifier

Assigns display colors to a single chat line using the ordered rule table.

Tiers, evaluated strictly in this order, each short-circuiting the rest:
    1. Player-aware rules (only when a player name is configured)
    2. Full-line rules
    3. Split-marker rules (per-segment colors, inline markup)
    4. Fallback: first rule in table order that matches, else default color
"""

import re
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

from models.chat_rules import (
    CHAT_RULES, DEFAULT_COLOR,
    PlayerAwareRule, FullLineRule, SplitMarkerRule, PlainRule
)
from models.color import Color
from models.styled_line import Segment
from utils.markup import segments_to_markup


@dataclass(frozen=True)
class Classification:
    """Result of classifying one line.

    Attributes:
        display_text: Text to display; marker lines carry inline spans
        color: Single line color (base color for marker lines)
        segments: Plain text pieces with their colors
        rule: Name of the rule that decided the color, None for default
        marker: Marker text when a split-marker rule applied
        marker_color: Marker color when a split-marker rule applied
    """
    display_text: str
    color: Color
    segments: Tuple[Segment, ...]
    rule: Optional[str] = None
    marker: Optional[str] = None
    marker_color: Optional[Color] = None


def normalize_name(name: str) -> str:
    """Character names are written with underscores or spaces interchangeably."""
    return (name or '').replace('_', ' ').strip()


def starts_with_player(line: str, player_name: str) -> bool:
    """True if line begins with the player name as a whole word."""
    name = normalize_name(player_name)
    if not name:
        return False
    text = line.replace('_', ' ')
    if not text.startswith(name):
        return False
    rest = text[len(name):]
    return not rest or not re.match(r'\w', rest)


def _single(line: str, color: Color, rule: Optional[str]) -> Classification:
    return Classification(line, color, (Segment(line, color),), rule)


def _split(line: str, rule: SplitMarkerRule) -> Classification:
    segments = tuple(
        Segment(part, rule.marker_color if part == rule.marker else rule.color)
        for part in rule.split(line)
    )
    return Classification(
        segments_to_markup(segments, rule.color),
        rule.color,
        segments,
        rule.name,
        rule.marker,
        rule.marker_color,
    )


def classify(line: str, player_name: str = '', rules: Sequence = CHAT_RULES) -> Classification:
    """Classify a chat line.

    Args:
        line: Raw line text (timestamp already stripped if requested)
        player_name: Configured character name, may be empty
        rules: Ordered rule table

    Returns:
        Classification with display text, color and segments
    """
    # Tier 1: player-aware rules
    if normalize_name(player_name):
        for rule in rules:
            if isinstance(rule, PlayerAwareRule) and rule.matches(line):
                own = starts_with_player(line, player_name)
                return _single(line, rule.own_color if own else rule.color, rule.name)

    # Tier 2: full-line rules
    for rule in rules:
        if isinstance(rule, FullLineRule) and rule.matches(line):
            return _single(line, rule.color, rule.name)

    # Tier 3: split-marker rules
    for rule in rules:
        if isinstance(rule, SplitMarkerRule) and rule.matches(line):
            return _split(line, rule)

    # Tier 4: first match in table order
    for rule in rules:
        if isinstance(rule, (PlainRule, PlayerAwareRule)) and rule.matches(line):
            return _single(line, rule.color, rule.name)

    return _single(line, DEFAULT_COLOR, None)

