"""
Tests for the raster compositor.

Pixel checks run against a grey canvas-sized background, so anything
brighter than the background is chat text and pure black inside a line
box is a bar or outline.
"""
import numpy as np
import pytest
from PIL import Image

from models.censor_store import CensorKind, CensorRegion
from models.session import EditorSession
from models.transform import Transform
from services.compositor import Compositor, composite_at, fit_background
from services.layout import TextMeasurer, layout_layer
from constants import CHAT_LINE_HEIGHT, BAR_PADDING

GREY = (128, 128, 128, 255)


@pytest.fixture(scope='module')
def compositor():
    return Compositor(TextMeasurer())


@pytest.fixture
def grey():
    return Image.new('RGBA', (800, 600), GREY)


def make_session(text, x=50, y=50):
    session = EditorSession()
    session.import_chat_text(text)
    session.layers.active_layer.transform = Transform(x, y)
    return session


def pixels(canvas, box):
    return np.asarray(canvas.crop(box)).astype(int)


def has_bright(canvas, box):
    """True if any pixel in box is near white."""
    rgb = pixels(canvas, box)[..., :3]
    return bool((rgb.min(axis=-1) > 200).any())


def piece_box(compositor, prefix, piece, x=50, y=50):
    """Interior canvas box of `piece` drawn after `prefix` on the first line."""
    left = x + compositor.measurer(prefix)
    right = left + compositor.measurer(piece)
    return (int(left) + 2, y + 1, int(right) - 2, y + CHAT_LINE_HEIGHT - 1)


# ══════════════════════════════════════════════════════════════════════════
# Canvas and background
# ══════════════════════════════════════════════════════════════════════════

class TestCanvas:

    def test_empty_session_is_black(self, compositor):
        canvas = compositor.render(EditorSession())
        assert canvas.size == (800, 600)
        assert canvas.getpixel((400, 300)) == (0, 0, 0, 255)

    def test_canvas_size_from_settings(self, compositor):
        session = EditorSession()
        session.settings.canvas_width = 320
        session.settings.canvas_height = 200
        assert compositor.render(session).size == (320, 200)

    def test_background_fitted_and_centered(self, compositor, background):
        # 200x100 into 800x600: scale 4, letterboxed top and bottom
        canvas = compositor.render(EditorSession(), background)
        assert canvas.getpixel((400, 300))[:3] == (128, 128, 128)
        assert canvas.getpixel((400, 50)) == (0, 0, 0, 255)
        assert canvas.getpixel((400, 550)) == (0, 0, 0, 255)

    def test_background_transform_about_fitted_corner(self, background):
        fitted = fit_background(background, (800, 600), Transform(0, 0, 0.5))
        assert fitted.size == (800, 600)
        assert fitted.getpixel((100, 150))[3] == 255
        assert fitted.getpixel((700, 200))[3] == 0

    def test_background_pan(self, background):
        fitted = fit_background(background, (800, 600), Transform(0, 150, 1.0))
        # Image now spans y 250..650
        assert fitted.getpixel((400, 200))[3] == 0
        assert fitted.getpixel((400, 300))[3] == 255

    def test_composite_at_clips_negative(self):
        canvas = Image.new('RGBA', (10, 10), (0, 0, 0, 255))
        surface = Image.new('RGBA', (5, 5), (255, 0, 0, 255))
        composite_at(canvas, surface, -3, -3)
        assert canvas.getpixel((0, 0)) == (255, 0, 0, 255)
        assert canvas.getpixel((2, 2)) == (0, 0, 0, 255)

    def test_composite_fully_outside(self):
        canvas = Image.new('RGBA', (10, 10), (0, 0, 0, 255))
        surface = Image.new('RGBA', (5, 5), (255, 0, 0, 255))
        composite_at(canvas, surface, 20, 20)
        composite_at(canvas, surface, -10, 0)
        assert canvas.getpixel((0, 0)) == (0, 0, 0, 255)


# ══════════════════════════════════════════════════════════════════════════
# Layers
# ══════════════════════════════════════════════════════════════════════════

class TestLayers:

    def test_text_drawn_at_layer_position(self, compositor, grey):
        session = make_session("John says: hello")
        canvas = compositor.render(session, grey)
        assert has_bright(canvas, piece_box(compositor, "", "John says: hello"))
        assert not has_bright(canvas, (400, 300, 600, 400))

    def test_hidden_layer_not_drawn(self, compositor, grey):
        session = make_session("John says: hello")
        session.layers.active_layer.visible = False
        canvas = compositor.render(session, grey)
        assert not has_bright(canvas, piece_box(compositor, "", "John says: hello"))

    def test_text_has_black_outline(self, compositor, grey):
        session = make_session("John says: hello")
        canvas = compositor.render(session, grey)
        rgb = pixels(canvas, piece_box(compositor, "", "John says: hello"))[..., :3]
        assert (rgb.max(axis=-1) < 40).any()

    def test_scaled_layer_bounds(self, compositor):
        session = make_session("John says: hello", x=10, y=20)
        layer = session.layers.active_layer
        left, top, right, bottom = compositor.layer_bounds(layer, 700)
        layer.transform = Transform(10, 20, 2.0)
        s_left, s_top, s_right, s_bottom = compositor.layer_bounds(layer, 700)
        assert (s_left, s_top) == (left, top)
        assert s_right - s_left == pytest.approx(2 * (right - left))
        assert s_bottom - s_top == pytest.approx(2 * (bottom - top))

    def test_scaled_layer_drawn_larger(self, compositor, grey):
        session = make_session("John says: hello")
        session.layers.active_layer.transform = Transform(50, 50, 2.0)
        canvas = compositor.render(session, grey)
        # The second half of the doubled text lies beyond the unscaled width
        width = compositor.measurer("John says: hello")
        box = (int(50 + width) + 4, 52, int(50 + 2 * width) - 4, 50 + 2 * CHAT_LINE_HEIGHT - 2)
        assert has_bright(canvas, box)

    def test_wrapped_lines_stack(self, compositor, grey):
        session = make_session("John says: " + "word " * 30)
        session.settings.chat_line_width = 150
        canvas = compositor.render(session, grey)
        second_row = (52, 50 + CHAT_LINE_HEIGHT + 1, 50 + 100, 50 + 2 * CHAT_LINE_HEIGHT - 1)
        assert has_bright(canvas, second_row)

    def test_black_bars(self, compositor, grey):
        session = make_session("John says: hello")
        session.settings.show_black_bars = True
        canvas = compositor.render(session, grey)
        # Left padding of the bar, beside the outline
        assert canvas.getpixel((50 - BAR_PADDING + 1, 50 + 2))[:3] == (0, 0, 0)

    def test_no_bars_by_default(self, compositor, grey):
        canvas = compositor.render(make_session("John says: hello"), grey)
        assert canvas.getpixel((50 - BAR_PADDING + 1, 50 + 2))[:3] == (128, 128, 128)

    def test_marker_drawn_in_marker_color(self, compositor, grey):
        session = make_session("[!] restart")
        canvas = compositor.render(session, grey)
        rgb = pixels(canvas, piece_box(compositor, "", "[!]"))[..., :3]
        red = (rgb[..., 0] > 150) & (rgb[..., 0] - rgb[..., 1] > 100)
        assert red.any()


# ══════════════════════════════════════════════════════════════════════════
# Censoring
# ══════════════════════════════════════════════════════════════════════════

class TestCensoring:

    TEXT = "aaaa bbbbbbbb cccc"

    def render_with(self, compositor, grey, kind):
        session = make_session(self.TEXT)
        layer_id = session.layers.active_layer.id
        if kind is not None:
            session.censors.add(CensorRegion(layer_id, 0, 5, 13, kind))
        return compositor.render(session, grey)

    def box(self, compositor):
        return piece_box(compositor, "aaaa ", "bbbbbbbb")

    def test_uncensored_text_visible(self, compositor, grey):
        canvas = self.render_with(compositor, grey, None)
        assert has_bright(canvas, self.box(compositor))

    def test_invisible_hides_text_keeps_spacing(self, compositor, grey):
        canvas = self.render_with(compositor, grey, CensorKind.INVISIBLE)
        rgb = pixels(canvas, self.box(compositor))[..., :3]
        assert (rgb == 128).all()
        # Text after the region stays where it was
        assert has_bright(canvas, piece_box(compositor, "aaaa bbbbbbbb ", "cccc"))

    def test_black_bar_fills_box(self, compositor, grey):
        canvas = self.render_with(compositor, grey, CensorKind.BLACK_BAR)
        rgb = pixels(canvas, self.box(compositor))[..., :3]
        assert (rgb == 0).all()

    def test_blur_hides_glyphs(self, compositor, grey):
        plain = pixels(self.render_with(compositor, grey, None), self.box(compositor))
        blurred = pixels(self.render_with(compositor, grey, CensorKind.BLUR), self.box(compositor))
        assert not (plain == blurred).all()
        # Blur spreads ink instead of removing it
        assert (blurred[..., :3] != 128).any()

    def test_censor_on_other_line_ignored(self, compositor, grey):
        session = make_session(self.TEXT)
        session.censors.add(CensorRegion(session.layers.active_layer.id, 3, 5, 13, CensorKind.BLACK_BAR))
        canvas = compositor.render(session, grey)
        assert has_bright(canvas, self.box(compositor))

    def test_marker_runs_skip_censoring(self, compositor, grey):
        session = make_session("[!] restart now")
        session.censors.add(CensorRegion(session.layers.active_layer.id, 0, 0, 3, CensorKind.BLACK_BAR))
        canvas = compositor.render(session, grey)
        rgb = pixels(canvas, piece_box(compositor, "", "[!]"))[..., :3]
        assert not (rgb == 0).all()

    def test_black_bar_on_wrapped_run(self, compositor, grey):
        text = "alpha beta gamma delta epsilon zeta eta theta secret omega"
        session = make_session(text)
        session.settings.chat_line_width = 120
        layer = session.layers.active_layer
        start = text.index("secret")
        session.censors.add(CensorRegion(layer.id, 0, start, start + 6, CensorKind.BLACK_BAR))

        placed = layout_layer(layer, compositor.measurer, 120)
        index = next(i for i, p in enumerate(placed) if "secret" in p.run.text)
        assert index >= 2
        run, row_y = placed[index].run, 50 + placed[index].y
        prefix = run.text[:start - run.start]

        canvas = compositor.render(session, grey)
        rgb = pixels(canvas, piece_box(compositor, prefix, "secret", y=row_y))[..., :3]
        assert (rgb == 0).all()
        # Same x on the first row is still text
        assert not (pixels(canvas, piece_box(compositor, prefix, "secret"))[..., :3] == 0).all()
