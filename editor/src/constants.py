"""
Chat Screenshot Editor - Constants and Configuration

This module contains all constant values used throughout the application:
- Chat colors (default and per-rule palette)
- Default layer/session settings
- Text layout and raster rendering constants
- Accepted input file types
"""

# ======================================================================
# CHAT COLORS
# ======================================================================
# Colors mirror the in-game chat box so exported screenshots look native

DEFAULT_CHAT_COLOR = '#FFFFFF'

PHONE_OWN_COLOR = '#FFEC8B'
PHONE_OTHER_COLOR = '#F9F900'
RADIO_COLOR = '#8D8DFF'
OOC_COLOR = '#AFAFAF'
ACTION_COLOR = '#C2A2DA'
ADVERTISEMENT_COLOR = '#00D900'
ALERT_MARKER_COLOR = '#FF3333'
CHARACTER_KILL_MARKER_COLOR = '#F00000'
LOW_COLOR = '#BEBEBE'
SAY_COLOR = '#F1F1F1'
SHOUT_COLOR = '#FFFFFF'
WHISPER_COLOR = '#EDA841'
MONEY_COLOR = '#33AA33'
INFO_COLOR = '#FFA500'

OUTLINE_COLOR = (0, 0, 0, 255)
BAR_COLOR = (0, 0, 0, 255)
CANVAS_BACKGROUND = (0, 0, 0, 255)

# ======================================================================
# MARKERS
# ======================================================================

ALERT_MARKER = '[!]'
CHARACTER_KILL_MARKER = '[Character kill]'

# Leading "[HH:MM:SS] " chat log timestamp
TIMESTAMP_PATTERN = r'^\[\d{2}:\d{2}:\d{2}\] '

# ======================================================================
# SESSION DEFAULTS
# ======================================================================

DEFAULT_CANVAS_WIDTH = 800
DEFAULT_CANVAS_HEIGHT = 600
DEFAULT_CHAT_LINE_WIDTH = 700
DEFAULT_LAYER_NAME_PREFIX = 'Layer'
DEFAULT_TRANSFORM_X = 0.0
DEFAULT_TRANSFORM_Y = 0.0
DEFAULT_TRANSFORM_SCALE = 1.0
MIN_TRANSFORM_SCALE = 0.05
MAX_TRANSFORM_SCALE = 20.0
ZOOM_STEP = 1.1

DEFAULT_EXPORT_NAME = 'screenshot'
SESSION_DIR_NAME = '.chatscreen'
SESSION_FILE_NAME = 'session.json'

# ======================================================================
# TEXT LAYOUT / RASTER RENDERING
# ======================================================================

CHAT_FONT_SIZE = 14
CHAT_LINE_HEIGHT = 18

# Tried in order; Pillow's built-in scalable font is the last resort
CHAT_FONT_CANDIDATES = [
    'arialbd.ttf',
    'Arial Bold.ttf',
    'DejaVuSans-Bold.ttf',
    'LiberationSans-Bold.ttf',
]

OUTLINE_WIDTH = 1
OUTLINE_OFFSETS = [
    (-1, -1), (0, -1), (1, -1),
    (-1, 0),           (1, 0),
    (-1, 1),  (0, 1),  (1, 1),
]

BAR_PADDING = 4
BLUR_RADIUS = 4

# Room around a layer surface so outline, bars and blur halos never clip
SURFACE_MARGIN = BAR_PADDING + 3 * BLUR_RADIUS + OUTLINE_WIDTH

# ======================================================================
# INPUT FILES
# ======================================================================

IMAGE_EXTENSIONS = ('.png', '.jpg', '.jpeg', '.gif', '.bmp', '.webp', '.tif', '.tiff')
CHAT_EXTENSIONS = ('.txt',)
CHAT_MIME_TYPE = 'text/plain'
