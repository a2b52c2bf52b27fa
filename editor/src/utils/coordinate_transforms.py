"""Coordinate transformation utilities for canvas rendering.

Provides conversion between the coordinate systems in play:
- Image pixels (uploaded background, Y-down)
- Canvas pixels (export surface, Y-down)
- Element space (layer or fitted image, before its Transform)
- Qt widget pixels (preview, canvas scaled to fit the widget)

Matrices are 3x3 numpy arrays acting on column vectors (x, y, 1).
"""

import numpy as np


def transform_matrix(transform):
	"""Matrix for a translate-then-uniform-scale Transform.

	Args:
		transform: Transform with x, y and scale

	Returns:
		3x3 matrix mapping element space to its parent space
	"""
	s = transform.scale
	return np.array([
		[s, 0.0, transform.x],
		[0.0, s, transform.y],
		[0.0, 0.0, 1.0],
	])


def translation_matrix(tx, ty):
	return np.array([
		[1.0, 0.0, tx],
		[0.0, 1.0, ty],
		[0.0, 0.0, 1.0],
	])


def scale_matrix(s):
	return np.array([
		[s, 0.0, 0.0],
		[0.0, s, 0.0],
		[0.0, 0.0, 1.0],
	])


def fit_scale_and_offset(src_size, dst_size):
	"""Aspect-preserving fit of src inside dst, centered.

	Args:
		src_size: (width, height) of the content
		dst_size: (width, height) of the target

	Returns:
		(scale, offset_x, offset_y)
	"""
	src_w, src_h = src_size
	dst_w, dst_h = dst_size
	if src_w <= 0 or src_h <= 0:
		raise ValueError(f"Cannot fit empty size {src_size}")
	scale = min(dst_w / src_w, dst_h / src_h)
	offset_x = (dst_w - src_w * scale) / 2.0
	offset_y = (dst_h - src_h * scale) / 2.0
	return scale, offset_x, offset_y


def background_matrix(image_size, canvas_size, image_transform):
	"""Image pixels -> canvas pixels for the background.

	The image is fitted and centered first; its own pan/zoom Transform then
	applies about the fitted image's top-left corner.
	"""
	fit, offset_x, offset_y = fit_scale_and_offset(image_size, canvas_size)
	return translation_matrix(offset_x, offset_y) @ transform_matrix(image_transform) @ scale_matrix(fit)


def affine_coefficients(matrix):
	"""Pillow AFFINE data for a forward matrix.

	Image.transform() samples the source through the inverse mapping
	(output pixel -> input pixel), so the matrix is inverted here.

	Returns:
		(a, b, c, d, e, f) tuple
	"""
	inverse = np.linalg.inv(matrix)
	return tuple(float(v) for v in inverse[:2, :].flatten())


def apply_matrix(matrix, x, y):
	"""Map a single point through a matrix."""
	px, py, _ = matrix @ np.array([x, y, 1.0])
	return float(px), float(py)


def widget_to_canvas(widget_x, widget_y, widget_size, canvas_size):
	"""Convert preview widget pixels to canvas pixels.

	The preview shows the canvas scaled to fit the widget and centered.

	Returns:
		(canvas_x, canvas_y)
	"""
	scale, offset_x, offset_y = fit_scale_and_offset(canvas_size, widget_size)
	return (widget_x - offset_x) / scale, (widget_y - offset_y) / scale


def widget_delta_to_canvas(dx, dy, widget_size, canvas_size):
	"""Convert a widget-space drag delta to canvas pixels."""
	scale, _, _ = fit_scale_and_offset(canvas_size, widget_size)
	return dx / scale, dy / scale
