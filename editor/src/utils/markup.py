"""Inline color markup used for marker segments.

Marker lines carry their per-segment colors as HTML spans so the live
overlay can show them directly; the renderers strip the markup back to
plain text before measuring, wrapping or resolving censor offsets.
"""

import html
import re

_TAG_RE = re.compile(r'<[^>]*>')


def escape_text(text):
	"""HTML-escape text for inline display (quotes left alone)."""
	return html.escape(text, quote=False)


def color_span(text, color):
	"""Wrap already-escaped text in a colored span."""
	return f'<span style="color: {color.to_hex()}">{text}</span>'


def segments_to_markup(segments, base_color):
	"""Build inline markup: segments in base_color stay bare, others get a span."""
	parts = []
	for segment in segments:
		escaped = escape_text(segment.text)
		if segment.color == base_color:
			parts.append(escaped)
		else:
			parts.append(color_span(escaped, segment.color))
	return ''.join(parts)


def strip_markup(text):
	"""Remove inline spans and unescape entities, giving the plain line text."""
	return html.unescape(_TAG_RE.sub('', text))
