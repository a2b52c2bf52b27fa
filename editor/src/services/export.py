"""
Chat Screenshot Editor - Export Service

Produces the final PNG: background image fitted to the canvas, every visible
chat layer on top, encoded in memory and handed to a save collaborator.

No file is written until encoding has fully succeeded, so a failed export
never leaves a partial file behind.
"""

import io
import logging
import os
import re
from datetime import datetime
from pathlib import Path
from typing import Callable, Optional

from PIL import Image

from services.compositor import Compositor
from constants import DEFAULT_EXPORT_NAME

logger = logging.getLogger(__name__)


class ExportError(RuntimeError):
    """The export could not be completed; nothing was written."""


def sanitize_theme(theme: str) -> str:
    """Keep [A-Za-z0-9 _-], collapse whitespace runs to single hyphens."""
    cleaned = re.sub(r'[^A-Za-z0-9 _-]', '', theme or '').strip()
    return re.sub(r'\s+', '-', cleaned)


def build_export_filename(theme: str = '', when: Optional[datetime] = None) -> str:
    """Name like "05032024 - 1407 - My-Screenshot.png".

    Args:
        theme: Screenshot theme typed by the user
        when: Timestamp to use, defaults to now
    """
    when = when or datetime.now()
    name = sanitize_theme(theme) or DEFAULT_EXPORT_NAME
    return f"{when.strftime('%d%m%Y')} - {when.strftime('%H%M')} - {name}.png"


def compose_export(session, background: Image.Image, compositor: Optional[Compositor] = None) -> Image.Image:
    """Compose the export canvas.

    Raises:
        ExportError: If there is no background image
    """
    if background is None:
        raise ExportError("No image loaded")
    compositor = compositor or Compositor()
    return compositor.render(session, background)


def encode_png(image: Image.Image) -> bytes:
    """Encode an image as PNG bytes.

    Raises:
        ExportError: If encoding fails
    """
    buffer = io.BytesIO()
    try:
        image.save(buffer, format='PNG')
    except (OSError, ValueError) as e:
        raise ExportError(f"PNG encoding failed: {e}") from e
    data = buffer.getvalue()
    if not data:
        raise ExportError("PNG encoding produced no data")
    return data


def default_download_dir() -> Path:
    downloads = Path.home() / 'Downloads'
    return downloads if downloads.is_dir() else Path.home()


def unique_path(directory: Path, filename: str) -> Path:
    """directory/filename, or "name (2).png" style if that already exists."""
    candidate = directory / filename
    stem, suffix = os.path.splitext(filename)
    counter = 2
    while candidate.exists():
        candidate = directory / f"{stem} ({counter}){suffix}"
        counter += 1
    return candidate


def save_export(data: bytes, filename: str,
                save_dialog: Optional[Callable[[str], Optional[str]]] = None,
                download_dir: Optional[Path] = None) -> Path:
    """Write PNG bytes via the save dialog, or fall back to a download.

    Args:
        data: Encoded PNG
        filename: Suggested file name
        save_dialog: Called with the suggested name; returns a chosen path.
            Returning nothing or raising falls back to the download directory.
        download_dir: Fallback directory (defaults to ~/Downloads)

    Returns:
        Path the file was written to
    """
    if save_dialog is not None:
        try:
            chosen = save_dialog(filename)
        except (OSError, RuntimeError, NotImplementedError) as e:
            logger.warning(f"Save dialog unavailable ({e}), downloading instead")
            chosen = None
        if chosen:
            path = Path(chosen)
            path.write_bytes(data)
            logger.info(f"Saved screenshot to {path}")
            return path
        logger.info("Save dialog dismissed, downloading instead")

    directory = Path(download_dir) if download_dir is not None else default_download_dir()
    directory.mkdir(parents=True, exist_ok=True)
    path = unique_path(directory, filename)
    path.write_bytes(data)
    logger.info(f"Downloaded screenshot to {path}")
    return path


def export_screenshot(session, background: Image.Image,
                      save_dialog: Optional[Callable[[str], Optional[str]]] = None,
                      download_dir: Optional[Path] = None,
                      compositor: Optional[Compositor] = None,
                      when: Optional[datetime] = None) -> Path:
    """Compose, encode and save the screenshot.

    The save dialog is only offered when the session asks to always prompt
    for a save location.

    Raises:
        ExportError: If composing, encoding or writing fails
    """
    image = compose_export(session, background, compositor)
    data = encode_png(image)
    filename = build_export_filename(session.settings.screenshot_theme, when)
    dialog = save_dialog if session.settings.always_prompt_save_location else None
    try:
        return save_export(data, filename, dialog, download_dir)
    except OSError as e:
        raise ExportError(f"Could not write {filename}: {e}") from e
