"""Live preview of the composed screenshot.

Shows the compositor's raster output scaled to fit the widget, so the
preview and the exported PNG are the same pixels. Left-drag pans the
active chat layer (or the background image when image dragging is on),
the mouse wheel zooms it.
"""

from PyQt5.QtWidgets import QWidget, QSizePolicy
from PyQt5.QtCore import Qt, QPointF, QRectF, pyqtSignal
from PyQt5.QtGui import QImage, QPainter, QPixmap, QColor

from models.transform import Vec2
from services.compositor import Compositor
from utils.coordinate_transforms import widget_to_canvas, widget_delta_to_canvas
from constants import ZOOM_STEP


def pil_to_qimage(image):
	"""Convert a PIL image to a QImage that owns its pixel data."""
	rgba = image.convert('RGBA')
	data = rgba.tobytes('raw', 'RGBA')
	qimage = QImage(data, rgba.width, rgba.height, rgba.width * 4, QImage.Format_RGBA8888)
	return qimage.copy()


class PreviewWidget(QWidget):
	"""Raster preview with drag/zoom gestures"""

	sessionChanged = pyqtSignal()  # Emitted when a gesture changed a transform
	dragEnded = pyqtSignal()  # Emitted on release (save the session here)

	def __init__(self, session, compositor=None, parent=None):
		super().__init__(parent)
		self.session = session
		self.compositor = compositor if compositor is not None else Compositor()
		self.background = None
		self._pixmap = None

		# Active gesture: 'layer', 'image' or None
		self._drag_target = None
		self._drag_start_pos = None
		self._drag_start_transform = None

		self.setMinimumSize(320, 240)
		self.setSizePolicy(QSizePolicy.Expanding, QSizePolicy.Expanding)
		self.setMouseTracking(False)

	# ========================================
	# Content
	# ========================================

	def set_session(self, session):
		self.session = session
		self.refresh()

	def set_background(self, image):
		"""Set the decoded background (PIL image) or None"""
		self.background = image
		self.refresh()

	def refresh(self):
		"""Re-render the composed canvas"""
		canvas = self.compositor.render(self.session, self.background)
		self._pixmap = QPixmap.fromImage(pil_to_qimage(canvas))
		self.update()

	def pixmap(self):
		return self._pixmap

	def canvas_size(self):
		settings = self.session.settings
		return (settings.canvas_width, settings.canvas_height)

	def _target_rect(self):
		"""Widget rect the canvas is drawn into (aspect fit, centered)"""
		cw, ch = self.canvas_size()
		scale = min(self.width() / cw, self.height() / ch)
		w, h = cw * scale, ch * scale
		return QRectF((self.width() - w) / 2.0, (self.height() - h) / 2.0, w, h)

	def paintEvent(self, event):
		painter = QPainter(self)
		painter.fillRect(self.rect(), QColor(20, 20, 20))
		if self._pixmap is not None:
			painter.setRenderHint(QPainter.SmoothPixmapTransform)
			painter.drawPixmap(self._target_rect(), self._pixmap, QRectF(self._pixmap.rect()))
		painter.end()

	def resizeEvent(self, event):
		super().resizeEvent(event)
		self.update()

	# ========================================
	# Gestures
	# ========================================

	def _to_canvas(self, pos):
		return widget_to_canvas(pos.x(), pos.y(), (self.width(), self.height()), self.canvas_size())

	def _hit_active_layer(self, canvas_x, canvas_y):
		layer = self.session.layers.active_layer
		if not layer.visible or not layer.lines:
			return False
		left, top, right, bottom = self.compositor.layer_bounds(layer, self.session.settings.chat_line_width)
		return left <= canvas_x <= right and top <= canvas_y <= bottom

	def _pick_target(self, pos):
		settings = self.session.settings
		canvas_x, canvas_y = self._to_canvas(pos)
		if settings.chat_drag_enabled and self._hit_active_layer(canvas_x, canvas_y):
			return 'layer'
		if settings.image_drag_enabled and self.background is not None:
			return 'image'
		return None

	def _get_transform(self, target):
		if target == 'layer':
			return self.session.layers.active_layer.transform
		return self.session.settings.image_transform

	def _set_transform(self, target, transform):
		if target == 'layer':
			self.session.layers.active_layer.transform = transform
		else:
			self.session.settings.image_transform = transform

	def begin_drag(self, pos):
		"""Start a drag at widget position pos; returns the target or None"""
		target = self._pick_target(pos)
		if target is None:
			return None
		self._drag_target = target
		self._drag_start_pos = QPointF(pos)
		self._drag_start_transform = self._get_transform(target)
		return target

	def drag_to(self, pos):
		"""Move the dragged element so it follows the cursor"""
		if self._drag_target is None:
			return
		dx, dy = widget_delta_to_canvas(pos.x() - self._drag_start_pos.x(), pos.y() - self._drag_start_pos.y(),
										(self.width(), self.height()), self.canvas_size())
		self._set_transform(self._drag_target, self._drag_start_transform.translated(dx, dy))
		self.refresh()
		self.sessionChanged.emit()

	def end_drag(self):
		if self._drag_target is None:
			return
		self._drag_target = None
		self._drag_start_pos = None
		self._drag_start_transform = None
		self.dragEnded.emit()

	def is_dragging(self):
		return self._drag_target is not None

	def zoom_at(self, pos, steps):
		"""Zoom the element under pos by ZOOM_STEP per wheel step"""
		target = self._pick_target(pos)
		if target is None:
			return
		canvas_x, canvas_y = self._to_canvas(pos)
		factor = ZOOM_STEP ** steps
		self._set_transform(target, self._get_transform(target).zoomed(factor, Vec2(canvas_x, canvas_y)))
		self.refresh()
		self.sessionChanged.emit()

	def mousePressEvent(self, event):
		"""Grab the mouse for the duration of the drag"""
		if event.button() == Qt.LeftButton and self.begin_drag(event.pos()) is not None:
			self.grabMouse()
			self.setCursor(Qt.ClosedHandCursor)
			event.accept()
		else:
			super().mousePressEvent(event)

	def mouseMoveEvent(self, event):
		if self.is_dragging():
			self.drag_to(event.pos())
			event.accept()
		else:
			super().mouseMoveEvent(event)

	def mouseReleaseEvent(self, event):
		if event.button() == Qt.LeftButton and self.is_dragging():
			self.releaseMouse()
			self.setCursor(Qt.ArrowCursor)
			self.end_drag()
			event.accept()
		else:
			super().mouseReleaseEvent(event)

	def wheelEvent(self, event):
		steps = event.angleDelta().y() / 120.0
		if steps:
			self.zoom_at(event.pos(), steps)
			event.accept()
