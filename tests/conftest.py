"""
Shared fixtures for Chat Screenshot Editor tests.

Provides sample chat logs, sessions, a deterministic text measurer and
small images.
"""
import sys
import os
import pytest

# Ensure editor/src is on the path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'editor', 'src'))

# Widgets are created without a display
os.environ.setdefault('QT_QPA_PLATFORM', 'offscreen')


# ── Sample chat logs ─────────────────────────────────────────────────────

SAMPLE_CHAT = """\
John Doe says: Hi there
*waves at Jane*

Jane Roe shouts: Hello!
((brb))
[!] Server restart in 5 minutes
"""

SAMPLE_TIMESTAMPED = (
    "[12:00:01] John Doe says: Hi there\n"
    "[12:00:05] *waves*\n"
    "[12:00:09] \n"
)


class FixedWidthMeasurer:
    """Every character is 7px wide; keeps wrapping tests font independent."""

    def __init__(self, char_width=7, font_size=14):
        self.char_width = char_width
        self.font_size = font_size
        from services.layout import TextMeasurer
        self.font = TextMeasurer(font_size).font

    def measure(self, text):
        return float(len(text) * self.char_width)

    __call__ = measure


@pytest.fixture
def sample_chat():
    return SAMPLE_CHAT


@pytest.fixture
def timestamped_chat():
    return SAMPLE_TIMESTAMPED


@pytest.fixture
def measure():
    """Plain width function: 7px per character"""
    return lambda text: float(len(text) * 7)


@pytest.fixture
def measurer():
    return FixedWidthMeasurer()


@pytest.fixture
def session():
    """Fresh session with one empty layer"""
    from models.session import EditorSession
    return EditorSession()


@pytest.fixture
def chat_session(sample_chat):
    """Session whose active layer holds SAMPLE_CHAT"""
    from models.session import EditorSession
    session = EditorSession()
    session.set_character_name("John Doe")
    session.import_chat_text(sample_chat)
    return session


@pytest.fixture
def background():
    """Small solid grey background image"""
    from PIL import Image
    return Image.new('RGBA', (200, 100), (128, 128, 128, 255))


@pytest.fixture
def image_file(tmp_path):
    """PNG written to disk"""
    from PIL import Image
    path = tmp_path / "background.png"
    Image.new('RGB', (40, 30), (10, 200, 30)).save(path)
    return path


@pytest.fixture
def chat_file(tmp_path, sample_chat):
    path = tmp_path / "chatlog.txt"
    path.write_text(sample_chat, encoding='utf-8')
    return path
