"""
Chat Screenshot Editor - Raster Compositor

Paints classified chat layers onto a Pillow RGBA canvas.

This is the authoritative rendering path: the export uses it directly and
the Qt preview shows its output, so what the user sees is what gets saved.

Per visible layer:
    1. Wrap every line to the chat line width (services.layout)
    2. Draw each run on a layer surface at scale 1:
       - optional black bar behind the run
       - runs of a marker line (see models.chat_rules.find_marker) are split
         around the marker and colored per piece, without censoring
       - other runs are scanned against the line's censor regions; plain
         pieces get an 8-direction outline, censored pieces are hidden,
         covered by a bar, or blurred
    3. Scale the surface by the layer transform and composite it at (x, y)
"""

import logging
import math
from typing import Optional, Tuple

from PIL import Image, ImageDraw, ImageFilter

from models.censor_store import CensorKind, scan_regions
from models.chat_rules import CHAT_RULES, marker_rules, find_marker
from services.layout import TextMeasurer, layout_layer
from utils.coordinate_transforms import background_matrix, affine_coefficients
from constants import (
    CHAT_LINE_HEIGHT, OUTLINE_COLOR, OUTLINE_OFFSETS, BAR_COLOR, BAR_PADDING,
    BLUR_RADIUS, SURFACE_MARGIN, CANVAS_BACKGROUND
)

logger = logging.getLogger(__name__)


def fit_background(image: Image.Image, canvas_size: Tuple[int, int], image_transform) -> Image.Image:
    """Place the background image on a transparent canvas-sized surface.

    Args:
        image: Decoded background image
        canvas_size: (width, height) of the output
        image_transform: Pan/zoom Transform applied after the aspect fit

    Returns:
        RGBA image of canvas_size
    """
    source = image.convert('RGBA')
    matrix = background_matrix(source.size, canvas_size, image_transform)
    return source.transform(
        canvas_size,
        Image.Transform.AFFINE,
        affine_coefficients(matrix),
        resample=Image.Resampling.BICUBIC,
    )


def composite_at(canvas: Image.Image, surface: Image.Image, x: int, y: int) -> None:
    """Alpha-composite surface onto canvas at (x, y), clipping at the edges."""
    source_x = max(0, -x)
    source_y = max(0, -y)
    if source_x >= surface.width or source_y >= surface.height:
        return
    if x >= canvas.width or y >= canvas.height:
        return
    canvas.alpha_composite(surface, dest=(max(0, x), max(0, y)), source=(source_x, source_y))


class Compositor:
    """Renders chat layers of an EditorSession.

    Args:
        measurer: TextMeasurer (font + widths); a default one is created if omitted
        line_height: Vertical advance per run
        rules: Rule table supplying the special markers
    """

    def __init__(self, measurer: Optional[TextMeasurer] = None,
                 line_height: int = CHAT_LINE_HEIGHT, rules=CHAT_RULES):
        self.measurer = measurer if measurer is not None else TextMeasurer()
        self.line_height = line_height
        self.markers = marker_rules(rules)
        # Vertically center glyphs in the line box
        self.text_dy = max(0, (line_height - self.measurer.font_size) // 2)

    # ========================================
    # Public API
    # ========================================

    def render(self, session, background: Optional[Image.Image] = None) -> Image.Image:
        """Compose a full canvas: black, background (fitted), then all layers.

        Args:
            session: EditorSession to draw
            background: Decoded background image, or None for black

        Returns:
            RGBA canvas of the session's configured size
        """
        settings = session.settings
        size = (int(settings.canvas_width), int(settings.canvas_height))
        canvas = Image.new('RGBA', size, CANVAS_BACKGROUND)
        if background is not None:
            canvas.alpha_composite(fit_background(background, size, settings.image_transform))
        self.draw_layers(canvas, session)
        return canvas

    def draw_layers(self, canvas: Image.Image, session) -> None:
        """Draw every visible, non-empty layer onto canvas in store order."""
        settings = session.settings
        for layer in session.layers:
            if not layer.visible or not layer.lines:
                continue
            surface = self.render_layer(layer, session.censors,
                                        settings.chat_line_width, settings.show_black_bars)
            self._place_surface(canvas, surface, layer.transform)

    def render_layer(self, layer, censors, max_width: float, show_bars: bool = False) -> Image.Image:
        """Render one layer at scale 1.

        The layer origin sits at (SURFACE_MARGIN, SURFACE_MARGIN) on the
        returned surface so outline, bars and blur halos are never clipped.
        """
        placed = layout_layer(layer, self.measurer, max_width, self.line_height)
        widest = max((self.measurer(p.run.text) for p in placed), default=0.0)
        width = int(math.ceil(widest)) + 2 * SURFACE_MARGIN
        height = len(placed) * self.line_height + 2 * SURFACE_MARGIN

        surface = Image.new('RGBA', (max(1, width), max(1, height)), (0, 0, 0, 0))
        draw = ImageDraw.Draw(surface)
        for item in placed:
            self._draw_run(surface, draw, layer.id, item.line, item.run,
                           SURFACE_MARGIN, SURFACE_MARGIN + item.y, censors, show_bars)
        return surface

    # ========================================
    # Run Drawing
    # ========================================

    def _draw_run(self, surface, draw, layer_id, line, run, x, y, censors, show_bars):
        if show_bars:
            width = self.measurer(run.text)
            draw.rectangle([x - BAR_PADDING, y, x + width + BAR_PADDING, y + self.line_height - 1],
                           fill=BAR_COLOR)

        rule = find_marker(line.plain_text, self.markers)
        if rule is not None:
            self._draw_marker_run(draw, run.text, rule, line.color, x, y)
        else:
            regions = censors.regions_for_line(layer_id, line.id)
            self._draw_censored_run(surface, draw, run, regions, line.color, x, y)

    def _draw_marker_run(self, draw, text, rule, color, x, y):
        cursor = x
        for part in rule.split(text):
            fill = rule.marker_color if part == rule.marker else color
            self._draw_text(draw, cursor, y, part, fill)
            cursor += self.measurer(part)

    def _draw_censored_run(self, surface, draw, run, regions, color, x, y):
        """Walk the run left to right, switching treatment at region boundaries."""
        cursor = x
        for piece_start, piece_end, region in scan_regions(run.start, run.end, regions):
            piece = run.text[piece_start - run.start:piece_end - run.start]
            width = self.measurer(piece)

            if region is None:
                self._draw_text(draw, cursor, y, piece, color)
            elif region.kind == CensorKind.BLACK_BAR:
                draw.rectangle([cursor, y, cursor + width, y + self.line_height - 1], fill=BAR_COLOR)
            elif region.kind == CensorKind.BLUR:
                self._draw_blurred(surface, cursor, y, piece, color, width)
            # INVISIBLE: advance without painting

            cursor += width

    def _draw_text(self, draw, x, y, text, color):
        """Outlined glyphs: black at the eight neighbours, then the fill."""
        if not text:
            return
        font = self.measurer.font
        ty = y + self.text_dy
        for dx, dy in OUTLINE_OFFSETS:
            draw.text((x + dx, ty + dy), text, font=font, fill=OUTLINE_COLOR)
        draw.text((x, ty), text, font=font, fill=color.to_rgba())

    def _draw_blurred(self, surface, x, y, text, color, width):
        pad = 3 * BLUR_RADIUS
        buffer = Image.new('RGBA', (int(math.ceil(width)) + 2 * pad, self.line_height + 2 * pad), (0, 0, 0, 0))
        self._draw_text(ImageDraw.Draw(buffer), pad, pad, text, color)
        blurred = buffer.filter(ImageFilter.GaussianBlur(BLUR_RADIUS))
        surface.alpha_composite(blurred, dest=(int(round(x)) - pad, int(y) - pad))

    # ========================================
    # Placement
    # ========================================

    @staticmethod
    def _place_surface(canvas, surface, transform):
        """Translate then scale about the layer origin, then composite."""
        scale = transform.scale
        if scale != 1.0:
            size = (max(1, int(round(surface.width * scale))), max(1, int(round(surface.height * scale))))
            surface = surface.resize(size, Image.Resampling.LANCZOS)
        dest_x = int(round(transform.x - SURFACE_MARGIN * scale))
        dest_y = int(round(transform.y - SURFACE_MARGIN * scale))
        composite_at(canvas, surface, dest_x, dest_y)

    def layer_bounds(self, layer, max_width: float) -> Tuple[float, float, float, float]:
        """Canvas-space (left, top, right, bottom) of a layer's text block.

        Used by the preview for hit testing when starting a drag.
        """
        placed = layout_layer(layer, self.measurer, max_width, self.line_height)
        widest = max((self.measurer(p.run.text) for p in placed), default=0.0)
        t = layer.transform
        return (t.x, t.y, t.x + widest * t.scale, t.y + len(placed) * self.line_height * t.scale)
