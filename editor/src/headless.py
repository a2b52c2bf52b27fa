"""Headless Screenshot Renderer - CLI entry point.

Reads a chat log and a background image, classifies the chat, applies
optional censoring and writes the composed PNG without opening a window.

Usage:
    python headless.py <chat_file> <image_file> [-o OUTPUT_DIR] [options]

Examples:
    python headless.py chatlog.txt screenshot.png
    python headless.py chatlog.txt screenshot.png --character "John Doe" --strip-timestamps
    python headless.py chatlog.txt screenshot.png --censor 0:0:8:blackbar --bars -o renders/
"""

import sys
import os
import argparse
import logging

# Add editor/src to path so imports work when running directly
_src_dir = os.path.dirname(os.path.abspath(__file__))
if _src_dir not in sys.path:
    sys.path.insert(0, _src_dir)

from models.censor_store import CensorKind, CENSOR_CYCLE
from services.export import ExportError, export_screenshot
from services.file_operations import (
    UnsupportedFileError, ImageDecodeError,
    load_chat_file, load_image_file, decode_image
)
from models.session import EditorSession
from services.session_store import load_session

logger = logging.getLogger(__name__)


def _parse_censor(value: str):
    """Parse "LINE:START:END[:KIND]" into (line, start, end, kind).

    Raises:
        argparse.ArgumentTypeError: If the value is malformed
    """
    parts = value.split(':')
    if len(parts) not in (3, 4):
        raise argparse.ArgumentTypeError(f"Expected LINE:START:END[:KIND], got '{value}'")
    try:
        line, start, end = (int(p) for p in parts[:3])
    except ValueError:
        raise argparse.ArgumentTypeError(f"Line and offsets must be integers: '{value}'")
    kind = CensorKind.INVISIBLE
    if len(parts) == 4:
        kind = CensorKind.from_value(parts[3])
        if kind is None:
            names = ', '.join(k.value for k in CensorKind)
            raise argparse.ArgumentTypeError(f"Unknown censor kind '{parts[3]}' (use {names})")
    if end <= start or start < 0:
        raise argparse.ArgumentTypeError(f"Censor range must satisfy 0 <= START < END: '{value}'")
    return line, start, end, kind


def build_arg_parser():
    parser = argparse.ArgumentParser(
        description="Render a chat log over an image to a PNG screenshot."
    )
    parser.add_argument("chat_file", help="Chat log (.txt)")
    parser.add_argument("image_file", help="Background image")
    parser.add_argument("-o", "--output-dir", default=".", help="Directory for the PNG (default: current)")
    parser.add_argument("--session", help="Start from a saved session snapshot (JSON)")
    parser.add_argument("--character", help="Character name for player-aware coloring")
    parser.add_argument("--strip-timestamps", action="store_true", help="Drop leading [HH:MM:SS] stamps")
    parser.add_argument("--bars", action="store_true", help="Draw black bars behind chat lines")
    parser.add_argument("--theme", help="Screenshot theme used in the file name")
    parser.add_argument("--width", type=int, help="Canvas width in pixels")
    parser.add_argument("--height", type=int, help="Canvas height in pixels")
    parser.add_argument("--line-width", type=int, help="Maximum chat line width in pixels")
    parser.add_argument("--position", type=float, nargs=2, metavar=("X", "Y"),
                        help="Chat layer position on the canvas")
    parser.add_argument("--scale", type=float, help="Chat layer scale")
    parser.add_argument("--censor", type=_parse_censor, action="append", default=[],
                        metavar="LINE:START:END[:KIND]",
                        help="Censor a character range (kinds: invisible, blackbar, blur)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return parser


def _apply_censor(session, layer_id, line, start, end, kind):
    selection = session.select_text(layer_id, line, start, end)
    if not selection.is_valid:
        logger.warning(f"Ignoring censor {line}:{start}:{end}, no such text")
        return
    # Walk the cycle until the requested kind is reached
    for _ in range(CENSOR_CYCLE.index(kind) + 1):
        session.cycle_censor()


def main(argv=None):
    args = build_arg_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s: %(message)s",
    )

    session = load_session(args.session) if args.session else EditorSession()
    settings = session.settings
    if args.width:
        settings.canvas_width = args.width
    if args.height:
        settings.canvas_height = args.height
    if args.line_width:
        settings.chat_line_width = args.line_width
    if args.bars:
        settings.show_black_bars = True
    if args.theme is not None:
        settings.screenshot_theme = args.theme
    settings.always_prompt_save_location = False

    try:
        if args.character is not None:
            session.set_character_name(args.character)
        if args.strip_timestamps:
            session.set_strip_timestamps(True)

        session.import_chat_text(load_chat_file(args.chat_file))
        background = decode_image(load_image_file(args.image_file))
    except (UnsupportedFileError, ImageDecodeError, OSError) as e:
        logger.error(str(e))
        return 1

    layer = session.layers.active_layer
    if args.position:
        layer.transform = layer.transform.translated(args.position[0] - layer.transform.x,
                                                     args.position[1] - layer.transform.y)
    if args.scale:
        layer.transform = layer.transform.zoomed(args.scale / layer.transform.scale)

    for line, start, end, kind in args.censor:
        _apply_censor(session, layer.id, line, start, end, kind)
    session.clear_selection()

    try:
        path = export_screenshot(session, background, download_dir=args.output_dir)
    except ExportError as e:
        logger.error(f"Export failed: {e}")
        return 1

    print(path)
    return 0


if __name__ == "__main__":
    sys.exit(main())
