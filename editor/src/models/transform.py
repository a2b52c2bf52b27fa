"""Transform data structures for layer and background placement."""
import math
from dataclasses import dataclass

from constants import (
    DEFAULT_TRANSFORM_X, DEFAULT_TRANSFORM_Y, DEFAULT_TRANSFORM_SCALE,
    MIN_TRANSFORM_SCALE, MAX_TRANSFORM_SCALE
)


@dataclass
class Vec2:
    """2D vector for coordinate pairs (canvas pixels)."""
    x: float
    y: float

    def __iter__(self):
        """Allow tuple unpacking: x, y = vec2"""
        return iter((self.x, self.y))


@dataclass
class Transform:
    """Translate-then-uniform-scale placement about the element's top-left.

    A point p in element space lands on the canvas at (x, y) + scale * p.
    Used for both chat layers and the background image's pan/zoom.
    """
    x: float = DEFAULT_TRANSFORM_X
    y: float = DEFAULT_TRANSFORM_Y
    scale: float = DEFAULT_TRANSFORM_SCALE

    def __post_init__(self):
        if not self.scale > 0:
            raise ValueError(f"Transform scale must be > 0, got {self.scale}")

    def translated(self, dx: float, dy: float) -> 'Transform':
        """Return a copy moved by (dx, dy) canvas pixels."""
        return Transform(self.x + dx, self.y + dy, self.scale)

    def zoomed(self, factor: float, anchor: Vec2 = None) -> 'Transform':
        """Return a copy scaled by factor, keeping anchor (canvas pixels) fixed.

        The resulting scale is clamped to the allowed zoom range.
        """
        new_scale = max(MIN_TRANSFORM_SCALE, min(MAX_TRANSFORM_SCALE, self.scale * factor))
        if anchor is None:
            return Transform(self.x, self.y, new_scale)
        ratio = new_scale / self.scale
        return Transform(
            anchor.x - (anchor.x - self.x) * ratio,
            anchor.y - (anchor.y - self.y) * ratio,
            new_scale
        )

    def to_dict(self) -> dict:
        return {'x': self.x, 'y': self.y, 'scale': self.scale}

    @staticmethod
    def from_dict(data) -> 'Transform':
        """Build a Transform from persisted data, defaulting malformed fields."""
        if not isinstance(data, dict):
            return Transform()

        def _number(key, default):
            value = data.get(key, default)
            if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
                return default
            return float(value)

        scale = _number('scale', DEFAULT_TRANSFORM_SCALE)
        if scale <= 0:
            scale = DEFAULT_TRANSFORM_SCALE
        return Transform(_number('x', DEFAULT_TRANSFORM_X), _number('y', DEFAULT_TRANSFORM_Y), scale)
