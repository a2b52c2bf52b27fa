"""
Chat Screenshot Editor - File Operations Service

Input handling for background images and chat logs.
Separates file validation and decoding from UI logic.
"""

import base64
import binascii
import io
import logging
import mimetypes
import os
import re

from PIL import Image, UnidentifiedImageError

from utils.logger import loggerWarn
from constants import IMAGE_EXTENSIONS, CHAT_EXTENSIONS, CHAT_MIME_TYPE

logger = logging.getLogger(__name__)

_DATA_URL_RE = re.compile(r'^data:(?P<mime>[\w.+-]+/[\w.+-]+)?(?P<base64>;base64)?,(?P<data>.*)$', re.DOTALL)


class UnsupportedFileError(ValueError):
    """A dropped or picked file is not of an accepted type."""


class ImageDecodeError(ValueError):
    """Image data could not be decoded."""


def guess_mime_type(filename):
    mime, _ = mimetypes.guess_type(filename)
    return mime


def is_image_file(filename, mime_type=None):
    """Accept image/* MIME types or known image extensions."""
    if mime_type and mime_type.startswith('image/'):
        return True
    return os.path.splitext(filename)[1].lower() in IMAGE_EXTENSIONS


def is_chat_file(filename, mime_type=None):
    """Accept text/plain or .txt files."""
    if mime_type == CHAT_MIME_TYPE:
        return True
    return os.path.splitext(filename)[1].lower() in CHAT_EXTENSIONS


def load_image_file(filename, mime_type=None):
    """Read an image file into a data URL.

    Args:
        filename: Path to the image
        mime_type: MIME type reported by the drop source, if any

    Returns:
        "data:<mime>;base64,..." string

    Raises:
        UnsupportedFileError: If the file is not an image
        OSError: If the file cannot be read
    """
    if not is_image_file(filename, mime_type):
        loggerWarn(f"'{os.path.basename(filename)}' is not an image file", "Unsupported File")
        raise UnsupportedFileError(f"Not an image file: {filename}")

    with open(filename, 'rb') as f:
        payload = f.read()

    mime = mime_type or guess_mime_type(filename) or 'application/octet-stream'
    logger.info(f"Loaded image {filename} ({len(payload)} bytes)")
    return f"data:{mime};base64,{base64.b64encode(payload).decode('ascii')}"


def decode_image(data_url):
    """Decode a data URL produced by load_image_file().

    Returns:
        RGBA PIL image, fully loaded

    Raises:
        ImageDecodeError: If the URL or the image data is invalid
    """
    match = _DATA_URL_RE.match(data_url or '')
    if not match or not match.group('base64'):
        raise ImageDecodeError("Not a base64 data URL")

    try:
        payload = base64.b64decode(match.group('data'), validate=True)
    except (binascii.Error, ValueError) as e:
        raise ImageDecodeError(f"Invalid base64 image data: {e}") from e

    try:
        with Image.open(io.BytesIO(payload)) as image:
            image.load()
            return image.convert('RGBA')
    except (UnidentifiedImageError, OSError) as e:
        raise ImageDecodeError(f"Could not decode image: {e}") from e


def load_chat_file(filename, mime_type=None):
    """Read a chat log text file.

    Raises:
        UnsupportedFileError: If the file is not plain text
        OSError: If the file cannot be read
    """
    if not is_chat_file(filename, mime_type):
        loggerWarn(f"'{os.path.basename(filename)}' is not a .txt chat log", "Unsupported File")
        raise UnsupportedFileError(f"Not a text file: {filename}")

    with open(filename, 'r', encoding='utf-8-sig', errors='replace') as f:
        text = f.read()

    logger.info(f"Loaded chat log {filename}")
    return text
