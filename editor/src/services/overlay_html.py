"""
Chat Screenshot Editor - Live Overlay Markup

Builds the HTML/CSS overlay that a flow-layout host (web view) draws over
the background while editing. Wrapping is left to the host; colors and
censoring follow the raster compositor exactly:

    - line color from classification; any line containing a special marker
      is split around it (models.chat_rules.find_marker) and not censored
    - censor regions resolved with the same first-match scan over
      plain-text offsets
    - INVISIBLE -> opacity 0, BLACK_BAR -> black fill, BLUR -> blur filter

Nothing in the Qt application imports this module: session_markup() is the
public entry point for web-view hosts embedding the editor.
"""

from typing import Dict, List

from models.censor_store import CensorKind, scan_regions
from models.chat_rules import CHAT_RULES, find_marker
from models.styled_line import Segment
from utils.markup import escape_text, segments_to_markup
from constants import BLUR_RADIUS, OUTLINE_OFFSETS

CENSOR_STYLES = {
    CensorKind.INVISIBLE: 'opacity: 0',
    CensorKind.BLACK_BAR: 'background-color: #000000; color: #000000',
    CensorKind.BLUR: f'filter: blur({BLUR_RADIUS}px)',
}

# Same eight stamps the raster outline uses
TEXT_OUTLINE = ', '.join(f'{dx}px {dy}px 0 #000000' for dx, dy in OUTLINE_OFFSETS)


def _css(style: Dict[str, str]) -> str:
    return '; '.join(f'{key}: {value}' for key, value in style.items())


def layer_style(layer, chat_line_width: int) -> Dict[str, str]:
    """CSS properties placing a layer element over the canvas."""
    t = layer.transform
    return {
        'position': 'absolute',
        'left': f'{t.x:g}px',
        'top': f'{t.y:g}px',
        'transform': f'scale({t.scale:g})',
        'transform-origin': 'top left',
        'max-width': f'{chat_line_width}px',
        'display': 'block' if layer.visible else 'none',
    }


def line_style(line, show_bars: bool = False) -> Dict[str, str]:
    """CSS properties for one chat line element."""
    style = {
        'color': line.color.to_hex(),
        'text-shadow': TEXT_OUTLINE,
        'white-space': 'pre-wrap',
    }
    if show_bars:
        style['background-color'] = '#000000'
        style['display'] = 'inline'
    return style


def censored_markup(text: str, regions) -> str:
    """Escape text and wrap censored ranges in styled spans.

    Args:
        text: Plain line text
        regions: Regions of this line sorted by start

    Returns:
        HTML fragment
    """
    parts = []
    for start, end, region in scan_regions(0, len(text), regions):
        piece = escape_text(text[start:end])
        if region is None:
            parts.append(piece)
        else:
            parts.append(f'<span style="{CENSOR_STYLES[region.kind]}">{piece}</span>')
    return ''.join(parts)


def marker_markup(text: str, rule, base_color) -> str:
    """Split text around the rule's marker; only the marker gets a color span."""
    segments = [
        Segment(part, rule.marker_color if part == rule.marker else base_color)
        for part in rule.split(text)
    ]
    return segments_to_markup(segments, base_color)


def line_markup(layer, line, censors, rules=CHAT_RULES) -> str:
    """Inner HTML of one line; marker lines bypass censoring."""
    plain = line.plain_text
    rule = find_marker(plain, rules)
    if rule is not None:
        return marker_markup(plain, rule, line.color)
    return censored_markup(plain, censors.regions_for_line(layer.id, line.id))


def layer_markup(layer, censors, chat_line_width: int, show_bars: bool = False) -> str:
    """HTML for one layer, one div per line carrying data attributes for selection mapping."""
    rows = []
    for line in layer.lines:
        rows.append(
            f'<div class="chat-line" data-layer-id="{layer.id}" data-line-index="{line.id}" '
            f'style="{_css(line_style(line, show_bars))}">{line_markup(layer, line, censors)}</div>'
        )
    return (f'<div class="chat-layer" data-layer-id="{layer.id}" '
            f'style="{_css(layer_style(layer, chat_line_width))}">{"".join(rows)}</div>')


def session_markup(session) -> str:
    """Overlay HTML for every visible, non-empty layer in draw order."""
    settings = session.settings
    blocks: List[str] = []
    for layer in session.layers:
        if not layer.visible or not layer.lines:
            continue
        blocks.append(layer_markup(layer, session.censors, settings.chat_line_width,
                                   settings.show_black_bars))
    return (f'<div class="chat-overlay" style="position: relative; '
            f'width: {settings.canvas_width}px; height: {settings.canvas_height}px">'
            f'{"".join(blocks)}</div>')
