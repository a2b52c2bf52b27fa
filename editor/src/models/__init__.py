"""
Chat Screenshot Editor - Data Models

This module contains the data model classes for the editing session.
This is the MODEL in MVC architecture: no Qt, no rendering.
"""

from .color import Color
from .transform import Transform, Vec2
from .styled_line import StyledLine, Segment
from .layer import Layer
from .censor_store import CensorKind, CensorRegion, CensorStore, SelectionContext

__all__ = [
    'Color', 'Transform', 'Vec2', 'StyledLine', 'Segment', 'Layer',
    'CensorKind', 'CensorRegion', 'CensorStore', 'SelectionContext',
]
