"""
Chat Screenshot Editor - Chat Rule Table

The ordered rule table that drives line classification. Each rule is one of
four closed variants, and every variant carries exactly the fields its tier
needs:

    PlayerAwareRule  - colored by whether the line starts with the player name
    FullLineRule     - whole line gets one color, wins over marker rules
    SplitMarkerRule  - marker text gets its own color, the rest the base color
    PlainRule        - ordinary single-color rule, used by the fallback tier

Order matters: tiers short-circuit and, within a tier, the first matching
rule wins. Reordering CHAT_RULES changes classification results.
"""

import re
from dataclasses import dataclass, field
from typing import Pattern, Tuple, Union

from models.color import Color
from constants import (
    PHONE_OWN_COLOR, PHONE_OTHER_COLOR, RADIO_COLOR, OOC_COLOR, ACTION_COLOR,
    ADVERTISEMENT_COLOR, ALERT_MARKER_COLOR, CHARACTER_KILL_MARKER_COLOR,
    LOW_COLOR, SAY_COLOR, SHOUT_COLOR, WHISPER_COLOR, MONEY_COLOR, INFO_COLOR,
    DEFAULT_CHAT_COLOR, ALERT_MARKER, CHARACTER_KILL_MARKER
)


def _compile(pattern):
    return re.compile(pattern) if isinstance(pattern, str) else pattern


@dataclass(frozen=True)
class PlayerAwareRule:
    """Tier 1: own messages and other people's messages get different colors.

    `color` is what the line gets when no player name is configured and the
    rule is reached through the fallback tier.
    """
    name: str
    pattern: Pattern
    own_color: Color
    color: Color

    def __post_init__(self):
        object.__setattr__(self, 'pattern', _compile(self.pattern))

    def matches(self, line: str) -> bool:
        return self.pattern.search(line) is not None


@dataclass(frozen=True)
class FullLineRule:
    """Tier 2: the entire line takes this rule's color."""
    name: str
    pattern: Pattern
    color: Color

    def __post_init__(self):
        object.__setattr__(self, 'pattern', _compile(self.pattern))

    def matches(self, line: str) -> bool:
        return self.pattern.search(line) is not None


@dataclass(frozen=True)
class SplitMarkerRule:
    """Tier 3: the line is split around `marker`, which gets `marker_color`."""
    name: str
    pattern: Pattern
    marker: str
    color: Color
    marker_color: Color
    split_pattern: Pattern = field(default=None)

    def __post_init__(self):
        object.__setattr__(self, 'pattern', _compile(self.pattern))
        if self.split_pattern is None:
            # Capturing group keeps the marker itself in re.split() output
            object.__setattr__(self, 'split_pattern', re.compile(f"({re.escape(self.marker)})"))
        else:
            object.__setattr__(self, 'split_pattern', _compile(self.split_pattern))
        if self.marker_color == self.color:
            raise ValueError(f"Rule '{self.name}': marker color must differ from base color")

    def matches(self, line: str) -> bool:
        return self.pattern.search(line) is not None

    def split(self, line: str):
        """Split line into alternating plain/marker pieces, dropping empties."""
        return [part for part in self.split_pattern.split(line) if part]


@dataclass(frozen=True)
class PlainRule:
    """Tier 4 only: first matching rule in table order decides the color."""
    name: str
    pattern: Pattern
    color: Color

    def __post_init__(self):
        object.__setattr__(self, 'pattern', _compile(self.pattern))

    def matches(self, line: str) -> bool:
        return self.pattern.search(line) is not None


ChatRule = Union[PlayerAwareRule, FullLineRule, SplitMarkerRule, PlainRule]

DEFAULT_COLOR = Color.parse(DEFAULT_CHAT_COLOR, 'default')


# ======================================================================
# RULE TABLE
# ======================================================================

CHAT_RULES: Tuple[ChatRule, ...] = (
    PlayerAwareRule('cellphone', r'\((?:cell)?phone\)',
                    Color.parse(PHONE_OWN_COLOR, 'cellphone_own'),
                    Color.parse(PHONE_OTHER_COLOR, 'cellphone')),
    PlayerAwareRule('sms', r'^\[SMS',
                    Color.parse(PHONE_OWN_COLOR, 'sms_own'),
                    Color.parse(PHONE_OTHER_COLOR, 'sms')),

    # "** [" must stay ahead of the single-asterisk action rule
    FullLineRule('radio', r'^\*\*\s*\[', Color.parse(RADIO_COLOR, 'radio')),
    FullLineRule('ooc', r'^\(\(.*\)\)$', Color.parse(OOC_COLOR, 'ooc')),
    FullLineRule('action', r'^\*', Color.parse(ACTION_COLOR, 'action')),
    FullLineRule('do', r'\(\(\s*[^()]+\s*\)\)\*$', Color.parse(ACTION_COLOR, 'do')),
    FullLineRule('advertisement', r'^\[Advertisement\]', Color.parse(ADVERTISEMENT_COLOR, 'advertisement')),

    SplitMarkerRule('alert', r'\[!\]', ALERT_MARKER,
                    Color.parse(DEFAULT_CHAT_COLOR, 'alert'),
                    Color.parse(ALERT_MARKER_COLOR, 'alert_marker')),
    SplitMarkerRule('character_kill', r'\[Character kill\]', CHARACTER_KILL_MARKER,
                    Color.parse(DEFAULT_CHAT_COLOR, 'character_kill'),
                    Color.parse(CHARACTER_KILL_MARKER_COLOR, 'character_kill_marker')),

    # "says [low]:" must stay ahead of "says:"
    PlainRule('low', r'says \[low\]:', Color.parse(LOW_COLOR, 'low')),
    PlainRule('says', r'says:', Color.parse(SAY_COLOR, 'says')),
    PlainRule('shouts', r'shouts:', Color.parse(SHOUT_COLOR, 'shouts')),
    PlainRule('whispers', r'whispers:', Color.parse(WHISPER_COLOR, 'whispers')),
    PlainRule('money', r'^You have (?:received|given) \$', Color.parse(MONEY_COLOR, 'money')),
    PlainRule('info', r'^\[INFO\]', Color.parse(INFO_COLOR, 'info')),
)


def marker_rules(rules=CHAT_RULES):
    """Split-marker rules in table order (the renderer's special markers)."""
    return [rule for rule in rules if isinstance(rule, SplitMarkerRule)]


def get_rule(name: str, rules=CHAT_RULES) -> ChatRule:
    """Look up a rule by name.

    Raises:
        KeyError: If no rule has that name
    """
    for rule in rules:
        if rule.name == name:
            return rule
    raise KeyError(name)


def find_marker(text: str, rules=CHAT_RULES):
    """First split-marker rule (table order) whose marker occurs in text.

    Both renderers resolve markers with this on a line's plain text, so a
    line containing a marker is a marker line whatever tier colored it.
    Every wrapped run of a marker line is split around that rule's marker
    and none of its runs is censored.
    """
    for rule in marker_rules(rules):
        if rule.marker in text:
            return rule
    return None
