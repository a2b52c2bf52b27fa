"""UI components for the Chat Screenshot Editor

Direct imports for convenience:
"""

from .preview_widget import PreviewWidget
from .chat_panel import ChatPanel

__all__ = [
    'PreviewWidget',
    'ChatPanel',
]
