"""
Chat Screenshot Editor - Color Domain Model

Canonical color representation for chat text.
Rule tables, parsed lines and renderers all exchange Color objects.
"""

from typing import Optional, Tuple


class Color:
    """Immutable color with uint8 RGB storage and an optional name tag.

    Internal storage: _r, _g, _b (uint8 0-255), _name (string)

    Colors are shared between the rule table and every parsed line,
    so there are no setters; build a new Color instead.
    """

    def __init__(self, r: int, g: int, b: int, name: str = ""):
        """Direct construction from RGB uint8 values (0-255).

        Args:
            r: Red component (0-255)
            g: Green component (0-255)
            b: Blue component (0-255)
            name: Optional color name (e.g. the rule that produced it)
        """
        # Clamp to valid uint8 range
        self._r = max(0, min(255, int(r)))
        self._g = max(0, min(255, int(g)))
        self._b = max(0, min(255, int(b)))
        self._name = name

    @property
    def r(self) -> int:
        """Red component (0-255) - READ ONLY"""
        return self._r

    @property
    def g(self) -> int:
        """Green component (0-255) - READ ONLY"""
        return self._g

    @property
    def b(self) -> int:
        """Blue component (0-255) - READ ONLY"""
        return self._b

    @property
    def name(self) -> str:
        """Color name (empty string for anonymous colors) - READ ONLY"""
        return self._name

    # ========================================
    # Conversion Methods
    # ========================================

    def to_hex(self) -> str:
        """Convert to hex color string: #RRGGBB.

        Returns:
            Hex color string with leading #
        """
        return f"#{self._r:02X}{self._g:02X}{self._b:02X}"

    def to_rgba(self, alpha: int = 255) -> Tuple[int, int, int, int]:
        """Convert to a Pillow fill tuple.

        Args:
            alpha: Alpha component (0-255)

        Returns:
            (r, g, b, a) tuple
        """
        return (self._r, self._g, self._b, alpha)

    def to_qcolor(self):
        """Convert to PyQt5 QColor object.

        Returns:
            QColor: Qt color object for UI rendering
        """
        from PyQt5.QtGui import QColor
        return QColor(self._r, self._g, self._b)

    # ========================================
    # Static Factory Methods
    # ========================================

    @staticmethod
    def from_hex(hex_string: str, name: str = "") -> Optional['Color']:
        """Create Color from hex string: #RRGGBB or RRGGBB.

        Args:
            hex_string: Hex color string with or without leading #
            name: Optional name tag

        Returns:
            Color object if parse succeeds, None otherwise
        """
        if not isinstance(hex_string, str):
            return None

        # Strip leading # if present
        hex_string = hex_string.strip().lstrip('#')

        # Must be 6 hex digits
        if len(hex_string) != 6:
            return None

        try:
            r = int(hex_string[0:2], 16)
            g = int(hex_string[2:4], 16)
            b = int(hex_string[4:6], 16)
            return Color(r, g, b, name=name)
        except ValueError:
            return None

    @staticmethod
    def parse(hex_string: str, name: str = "") -> 'Color':
        """Like from_hex() but raises for malformed input (used for table data)."""
        color = Color.from_hex(hex_string, name)
        if color is None:
            raise ValueError(f"Invalid hex color: {hex_string!r}")
        return color

    # ========================================
    # Equality and Hashing
    # ========================================

    def __eq__(self, other) -> bool:
        """Test equality based on RGB values (name tag is informational)."""
        if not isinstance(other, Color):
            return False
        return self._r == other._r and self._g == other._g and self._b == other._b

    def __hash__(self) -> int:
        """Hash based on RGB values for use in dicts/sets."""
        return hash((self._r, self._g, self._b))

    def __repr__(self) -> str:
        """Debug representation."""
        if self._name:
            return f"Color({self.to_hex()}, {self._name!r})"
        return f"Color({self.to_hex()})"

    def __str__(self) -> str:
        """String representation - uses hex format."""
        return self.to_hex()
