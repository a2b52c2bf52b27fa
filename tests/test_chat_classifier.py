"""
Tests for the chat rule table and the tiered line classifier.

Covers:
- Player-aware rules (own vs other messages, name normalization)
- Full-line rules winning over later rules
- Split-marker rules producing per-segment colors and inline markup
- Fallback tier (first match in table order, default color)
- Rule variant validation
"""
import pytest

from models.color import Color
from models.chat_rules import (
    CHAT_RULES, DEFAULT_COLOR, SplitMarkerRule, FullLineRule,
    get_rule, marker_rules
)
from services.chat_classifier import classify, starts_with_player, normalize_name
from constants import (
    PHONE_OWN_COLOR, PHONE_OTHER_COLOR, RADIO_COLOR, OOC_COLOR, ACTION_COLOR,
    ALERT_MARKER_COLOR, CHARACTER_KILL_MARKER_COLOR, LOW_COLOR, SAY_COLOR,
    WHISPER_COLOR, INFO_COLOR, DEFAULT_CHAT_COLOR
)


def hex_of(result):
    return result.color.to_hex()


# ══════════════════════════════════════════════════════════════════════════
# Player-aware tier
# ══════════════════════════════════════════════════════════════════════════

class TestPlayerAware:

    def test_own_phone_message(self):
        result = classify("John Doe (phone): where are you?", "John Doe")
        assert hex_of(result) == PHONE_OWN_COLOR
        assert result.rule == 'cellphone'

    def test_other_phone_message(self):
        result = classify("Jane Roe (phone): on my way", "John Doe")
        assert hex_of(result) == PHONE_OTHER_COLOR

    def test_underscore_name_matches_spaced_line(self):
        result = classify("John Doe (cellphone): hi", "John_Doe")
        assert hex_of(result) == PHONE_OWN_COLOR

    def test_prefix_must_be_whole_word(self):
        result = classify("Johnny (phone): hi", "John")
        assert hex_of(result) == PHONE_OTHER_COLOR

    def test_sms_from_player(self):
        # SMS lines start with the tag, never with the player's name
        result = classify("[SMS from 555-1234]: hey", "John Doe")
        assert hex_of(result) == PHONE_OTHER_COLOR
        assert result.rule == 'sms'

    def test_without_player_name_falls_to_fallback_tier(self):
        result = classify("John Doe (phone): hi", "")
        assert hex_of(result) == PHONE_OTHER_COLOR
        assert result.rule == 'cellphone'

    def test_blank_player_name_is_no_name(self):
        assert normalize_name("  ") == ''
        assert not starts_with_player("John says: hi", "   ")

    def test_starts_with_player_exact_line(self):
        assert starts_with_player("John", "John")
        assert starts_with_player("John: hi", "John")
        assert not starts_with_player("Johnson: hi", "John")


# ══════════════════════════════════════════════════════════════════════════
# Full-line tier
# ══════════════════════════════════════════════════════════════════════════

class TestFullLine:

    def test_action_beats_says(self):
        result = classify("* John Doe says: this is an emote")
        assert hex_of(result) == ACTION_COLOR

    def test_radio_ahead_of_action(self):
        result = classify("** [CH: 1] John Doe says: copy that")
        assert hex_of(result) == RADIO_COLOR

    def test_ooc_whole_line(self):
        result = classify("((John Doe says: brb))")
        assert hex_of(result) == OOC_COLOR

    def test_ooc_requires_closing_parens_at_end(self):
        result = classify("((not closed) John says: hi")
        assert hex_of(result) == SAY_COLOR

    def test_do_line(self):
        result = classify("The door is locked ((John Doe))*")
        assert hex_of(result) == ACTION_COLOR
        assert result.rule == 'do'

    def test_full_line_beats_marker(self):
        result = classify("* [!] waves frantically")
        assert hex_of(result) == ACTION_COLOR
        assert result.marker is None

    def test_full_line_not_overridden_by_player_rule_without_name(self):
        # Player-aware rules only run first when a name is configured
        result = classify("* John Doe (phone) drops it")
        assert hex_of(result) == ACTION_COLOR

    def test_player_tier_runs_before_full_line(self):
        result = classify("* John Doe (phone) drops it", "John Doe")
        assert hex_of(result) == PHONE_OTHER_COLOR


# ══════════════════════════════════════════════════════════════════════════
# Split-marker tier
# ══════════════════════════════════════════════════════════════════════════

class TestSplitMarker:

    def test_alert_segments(self):
        result = classify("[!] Server restart")
        assert result.marker == '[!]'
        assert result.marker_color.to_hex() == ALERT_MARKER_COLOR
        assert hex_of(result) == DEFAULT_CHAT_COLOR
        assert [s.text for s in result.segments] == ['[!]', ' Server restart']
        assert result.segments[0].color.to_hex() == ALERT_MARKER_COLOR
        assert result.segments[1].color.to_hex() == DEFAULT_CHAT_COLOR

    def test_alert_markup(self):
        result = classify("[!] Server restart")
        assert result.display_text == f'<span style="color: {ALERT_MARKER_COLOR}">[!]</span> Server restart'

    def test_marker_in_middle(self):
        result = classify("Admin: [!] warning [!] twice")
        assert [s.text for s in result.segments] == ['Admin: ', '[!]', ' warning ', '[!]', ' twice']

    def test_markup_escapes_text(self):
        result = classify("[!] a < b & c")
        assert '&lt;' in result.display_text
        assert '&amp;' in result.display_text

    def test_character_kill(self):
        result = classify("[Character kill] John Doe has died")
        assert result.marker_color.to_hex() == CHARACTER_KILL_MARKER_COLOR
        assert result.rule == 'character_kill'

    def test_marker_beats_plain_rules(self):
        result = classify("[!] John says: hi")
        assert result.rule == 'alert'

    def test_first_marker_rule_in_table_order_wins(self):
        result = classify("[Character kill] [!] both")
        assert result.rule == 'alert'

    def test_marker_color_must_differ(self):
        white = Color.parse('#FFFFFF')
        with pytest.raises(ValueError):
            SplitMarkerRule('bad', r'\[x\]', '[x]', white, white)

    def test_marker_rules_in_table_order(self):
        assert [r.name for r in marker_rules()] == ['alert', 'character_kill']


# ══════════════════════════════════════════════════════════════════════════
# Fallback tier
# ══════════════════════════════════════════════════════════════════════════

class TestFallback:

    @pytest.mark.parametrize("line,expected", [
        ("John says: hi", SAY_COLOR),
        ("John says [low]: psst", LOW_COLOR),
        ("John whispers: secret", WHISPER_COLOR),
        ("[INFO] You are now on duty", INFO_COLOR),
    ])
    def test_plain_rules(self, line, expected):
        assert hex_of(classify(line)) == expected

    def test_low_ahead_of_says(self):
        assert classify("John says [low]: psst").rule == 'low'

    def test_unmatched_line_gets_default(self):
        result = classify("Just some text")
        assert result.color == DEFAULT_COLOR
        assert result.rule is None
        assert result.display_text == "Just some text"

    def test_plain_line_keeps_raw_text(self):
        result = classify("John says: a < b")
        assert result.display_text == "John says: a < b"

    def test_custom_rule_table(self):
        red = Color.parse('#FF0000')
        rules = (FullLineRule('shout', r'!$', red),)
        assert classify("hey!", rules=rules).color == red
        assert classify("John says: hey", rules=rules).color == DEFAULT_COLOR


class TestRuleTable:

    def test_get_rule(self):
        assert get_rule('radio').color.to_hex() == RADIO_COLOR

    def test_get_unknown_rule(self):
        with pytest.raises(KeyError):
            get_rule('nope')

    def test_rule_names_unique(self):
        names = [rule.name for rule in CHAT_RULES]
        assert len(names) == len(set(names))
