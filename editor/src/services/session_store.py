"""
Chat Screenshot Editor - Session Persistence

Reads and writes the session snapshot (JSON). Every field is validated and
defaulted on its own, so one malformed value never throws away the rest of
the saved session.

Snapshot keys:
    characterName, chatLayers[{id, name, text, transform, visible}],
    selectedChatLayerId, dropZoneWidth, dropZoneHeight, imageTransform,
    imageDragEnabled, chatDragEnabled, showBlackBars,
    censoredRegions[{layerId, lineIndex, startOffset, endOffset, type}],
    selectedText, stripTimestamps, chatLineWidth, screenshotTheme,
    alwaysPromptSaveLocation

Older snapshots without chatLayers become a single layer holding the text.
"""

import json
import logging
import os
from pathlib import Path

from models.censor_store import CensorKind, CensorRegion
from models.layer import Layer
from models.session import EditorSession, EditorSettings
from models.transform import Transform
from constants import SESSION_DIR_NAME, SESSION_FILE_NAME

logger = logging.getLogger(__name__)


def default_session_path() -> Path:
    return Path(os.path.expanduser("~")) / SESSION_DIR_NAME / SESSION_FILE_NAME


# ========================================
# Field Readers
# ========================================

def _read_str(data, key, default=''):
    value = data.get(key, default)
    return value if isinstance(value, str) else default


def _read_bool(data, key, default=False):
    value = data.get(key, default)
    return value if isinstance(value, bool) else default


def _read_int(data, key, default, minimum=None):
    value = data.get(key, default)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return default
    if value != value or value in (float('inf'), float('-inf')):
        return default
    value = int(value)
    if minimum is not None and value < minimum:
        return default
    return value


def _read_settings(data) -> EditorSettings:
    defaults = EditorSettings()
    return EditorSettings(
        character_name=_read_str(data, 'characterName'),
        canvas_width=_read_int(data, 'dropZoneWidth', defaults.canvas_width, minimum=1),
        canvas_height=_read_int(data, 'dropZoneHeight', defaults.canvas_height, minimum=1),
        image_transform=Transform.from_dict(data.get('imageTransform')),
        image_drag_enabled=_read_bool(data, 'imageDragEnabled', defaults.image_drag_enabled),
        chat_drag_enabled=_read_bool(data, 'chatDragEnabled', defaults.chat_drag_enabled),
        show_black_bars=_read_bool(data, 'showBlackBars', defaults.show_black_bars),
        strip_timestamps=_read_bool(data, 'stripTimestamps', defaults.strip_timestamps),
        chat_line_width=_read_int(data, 'chatLineWidth', defaults.chat_line_width, minimum=1),
        screenshot_theme=_read_str(data, 'screenshotTheme'),
        always_prompt_save_location=_read_bool(data, 'alwaysPromptSaveLocation',
                                               defaults.always_prompt_save_location),
        selected_text=_read_str(data, 'selectedText'),
    )


def _read_layers(entries):
    """Valid layer entries; ids that are missing or duplicated are skipped."""
    layers = []
    seen = set()
    if not isinstance(entries, list):
        return layers
    for entry in entries:
        if not isinstance(entry, dict):
            continue
        layer_id = _read_int(entry, 'id', None, minimum=0)
        if layer_id is None or layer_id in seen:
            logger.warning(f"Skipping chat layer with bad id: {entry.get('id')!r}")
            continue
        seen.add(layer_id)
        layers.append(Layer(
            layer_id,
            _read_str(entry, 'name') or f"Layer {layer_id}",
            _read_str(entry, 'text'),
            Transform.from_dict(entry.get('transform')),
            _read_bool(entry, 'visible', True),
        ))
    return layers


def _read_regions(entries, layer_ids):
    regions = []
    if not isinstance(entries, list):
        return regions
    for entry in entries:
        if not isinstance(entry, dict):
            continue
        layer_id = _read_int(entry, 'layerId', None)
        line_index = _read_int(entry, 'lineIndex', None, minimum=0)
        start = _read_int(entry, 'startOffset', None, minimum=0)
        end = _read_int(entry, 'endOffset', None, minimum=0)
        kind = CensorKind.from_value(entry.get('type'))
        if None in (layer_id, line_index, start, end, kind) or end <= start:
            logger.warning(f"Skipping malformed censor region: {entry!r}")
            continue
        if layer_id not in layer_ids:
            continue
        regions.append(CensorRegion(layer_id, line_index, start, end, kind))
    return regions


# ========================================
# Snapshot <-> Session
# ========================================

def session_to_snapshot(session: EditorSession) -> dict:
    """Serialize a session to a JSON-compatible dict."""
    settings = session.settings
    return {
        'characterName': settings.character_name,
        'chatLayers': [layer.to_dict() for layer in session.layers],
        'selectedChatLayerId': session.layers.selected_id,
        'dropZoneWidth': settings.canvas_width,
        'dropZoneHeight': settings.canvas_height,
        'imageTransform': settings.image_transform.to_dict(),
        'imageDragEnabled': settings.image_drag_enabled,
        'chatDragEnabled': settings.chat_drag_enabled,
        'showBlackBars': settings.show_black_bars,
        'censoredRegions': session.censors.to_list(),
        'selectedText': settings.selected_text,
        'stripTimestamps': settings.strip_timestamps,
        'chatLineWidth': settings.chat_line_width,
        'screenshotTheme': settings.screenshot_theme,
        'alwaysPromptSaveLocation': settings.always_prompt_save_location,
    }


def session_from_snapshot(data) -> EditorSession:
    """Rebuild a session from snapshot data (dict or legacy plain text).

    Never raises on malformed content; bad fields fall back to defaults.
    """
    if isinstance(data, str):
        data = {'text': data}
    if not isinstance(data, dict):
        logger.warning("Session snapshot is not an object, starting fresh")
        return EditorSession()

    session = EditorSession(_read_settings(data))

    if 'chatLayers' in data:
        layers = _read_layers(data.get('chatLayers'))
    else:
        # Legacy shape: the whole document is one layer's text
        text = data.get('text')
        if not isinstance(text, str):
            text = json.dumps(data)
        layers = [Layer(1, "Layer 1", text)]

    if layers:
        selected = _read_int(data, 'selectedChatLayerId', None)
        session.layers.restore(layers, selected)
        for layer in layers:
            layer.reparse(session.parser)

    layer_ids = {layer.id for layer in session.layers}
    for region in _read_regions(data.get('censoredRegions'), layer_ids):
        session.censors.add(region)

    return session


def load_session(path=None) -> EditorSession:
    """Load the saved session, or a fresh one if missing or unreadable."""
    path = Path(path) if path is not None else default_session_path()
    if not path.exists():
        return EditorSession()
    try:
        raw = path.read_text(encoding='utf-8')
    except OSError as e:
        logger.warning(f"Could not read session {path}: {e}")
        return EditorSession()
    try:
        data = json.loads(raw)
    except json.JSONDecodeError:
        # Pre-JSON sessions stored only the chat text
        logger.warning(f"Session {path} is not JSON, treating it as chat text")
        data = raw
    return session_from_snapshot(data)


def save_session(session: EditorSession, path=None) -> Path:
    """Write the session snapshot as JSON."""
    path = Path(path) if path is not None else default_session_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, 'w', encoding='utf-8') as f:
        json.dump(session_to_snapshot(session), f, indent=2)
    logger.debug(f"Saved session to {path}")
    return path
