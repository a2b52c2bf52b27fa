"""Side panel for chat layers, parse options and censoring.

Every edit goes straight into the EditorSession; the panel emits
sessionChanged so the main window can refresh the preview and autosave.
"""

from PyQt5.QtWidgets import (
	QWidget, QVBoxLayout, QHBoxLayout, QFormLayout, QGroupBox, QLineEdit,
	QPlainTextEdit, QCheckBox, QSpinBox, QListWidget, QListWidgetItem,
	QPushButton, QLabel
)
from PyQt5.QtCore import Qt, pyqtSignal


class ChatPanel(QWidget):
	"""Layer list, layer text, settings and the censor control"""

	sessionChanged = pyqtSignal()

	def __init__(self, session, parent=None):
		super().__init__(parent)
		self.session = session
		self._updating = False  # Suppress feedback while syncing widgets from the model
		self._setup_ui()
		self.sync_from_session()

	# ========================================
	# UI Setup
	# ========================================

	def _setup_ui(self):
		layout = QVBoxLayout(self)

		settings_group = QGroupBox("Settings")
		form = QFormLayout(settings_group)

		self.character_edit = QLineEdit()
		self.character_edit.setPlaceholderText("Firstname_Lastname")
		self.character_edit.editingFinished.connect(self._on_character_changed)
		form.addRow("Character:", self.character_edit)

		self.theme_edit = QLineEdit()
		self.theme_edit.setPlaceholderText("Screenshot theme")
		self.theme_edit.editingFinished.connect(self._on_theme_changed)
		form.addRow("Theme:", self.theme_edit)

		self.line_width_spin = QSpinBox()
		self.line_width_spin.setRange(50, 4000)
		self.line_width_spin.setSuffix(" px")
		self.line_width_spin.valueChanged.connect(self._on_line_width_changed)
		form.addRow("Line width:", self.line_width_spin)

		self.width_spin = QSpinBox()
		self.width_spin.setRange(1, 8000)
		self.width_spin.valueChanged.connect(self._on_canvas_size_changed)
		self.height_spin = QSpinBox()
		self.height_spin.setRange(1, 8000)
		self.height_spin.valueChanged.connect(self._on_canvas_size_changed)
		size_row = QHBoxLayout()
		size_row.addWidget(self.width_spin)
		size_row.addWidget(QLabel("x"))
		size_row.addWidget(self.height_spin)
		form.addRow("Canvas:", size_row)

		self.strip_check = QCheckBox("Strip timestamps")
		self.strip_check.toggled.connect(self._on_strip_toggled)
		self.bars_check = QCheckBox("Black bars")
		self.bars_check.toggled.connect(self._on_bars_toggled)
		self.image_drag_check = QCheckBox("Drag image")
		self.image_drag_check.toggled.connect(self._on_image_drag_toggled)
		self.chat_drag_check = QCheckBox("Drag chat")
		self.chat_drag_check.toggled.connect(self._on_chat_drag_toggled)
		self.prompt_check = QCheckBox("Always ask where to save")
		self.prompt_check.toggled.connect(self._on_prompt_toggled)
		for check in (self.strip_check, self.bars_check, self.image_drag_check,
					  self.chat_drag_check, self.prompt_check):
			form.addRow(check)

		layout.addWidget(settings_group)

		# Layers
		layers_group = QGroupBox("Chat Layers")
		layers_layout = QVBoxLayout(layers_group)

		self.layer_list = QListWidget()
		self.layer_list.currentItemChanged.connect(self._on_layer_selected)
		self.layer_list.itemChanged.connect(self._on_layer_item_changed)
		layers_layout.addWidget(self.layer_list)

		buttons = QHBoxLayout()
		self.add_button = QPushButton("Add")
		self.add_button.clicked.connect(self.add_layer)
		self.remove_button = QPushButton("Remove")
		self.remove_button.clicked.connect(self.remove_active_layer)
		self.up_button = QPushButton("Up")
		self.up_button.clicked.connect(lambda: self._move_active(up=True))
		self.down_button = QPushButton("Down")
		self.down_button.clicked.connect(lambda: self._move_active(up=False))
		for button in (self.add_button, self.remove_button, self.up_button, self.down_button):
			buttons.addWidget(button)
		layers_layout.addLayout(buttons)

		self.text_edit = QPlainTextEdit()
		self.text_edit.setPlaceholderText("Paste chat log here")
		self.text_edit.textChanged.connect(self._on_text_changed)
		layers_layout.addWidget(self.text_edit)

		layout.addWidget(layers_group)

		# Censoring
		censor_group = QGroupBox("Censor")
		censor_layout = QVBoxLayout(censor_group)

		self.line_list = QListWidget()
		self.line_list.currentRowChanged.connect(self._on_line_selected)
		censor_layout.addWidget(self.line_list)

		self.line_view = QLineEdit()
		self.line_view.setReadOnly(True)
		self.line_view.selectionChanged.connect(self._on_text_selected)
		censor_layout.addWidget(self.line_view)

		self.censor_button = QPushButton("Censor Selection")
		self.censor_button.setToolTip("Cycles: hidden, black bar, blur, off")
		self.censor_button.clicked.connect(self.cycle_censor)
		censor_layout.addWidget(self.censor_button)

		self.censor_status = QLabel("")
		censor_layout.addWidget(self.censor_status)

		layout.addWidget(censor_group)

	# ========================================
	# Model -> Widgets
	# ========================================

	def set_session(self, session):
		self.session = session
		self.sync_from_session()

	def sync_from_session(self):
		"""Refresh every widget from the session"""
		self._updating = True
		try:
			settings = self.session.settings
			self.character_edit.setText(settings.character_name)
			self.theme_edit.setText(settings.screenshot_theme)
			self.line_width_spin.setValue(settings.chat_line_width)
			self.width_spin.setValue(settings.canvas_width)
			self.height_spin.setValue(settings.canvas_height)
			self.strip_check.setChecked(settings.strip_timestamps)
			self.bars_check.setChecked(settings.show_black_bars)
			self.image_drag_check.setChecked(settings.image_drag_enabled)
			self.chat_drag_check.setChecked(settings.chat_drag_enabled)
			self.prompt_check.setChecked(settings.always_prompt_save_location)
			self._rebuild_layer_list()
			self._sync_active_layer()
		finally:
			self._updating = False

	def _rebuild_layer_list(self):
		self.layer_list.clear()
		active_id = self.session.layers.active_layer.id
		for layer in self.session.layers:
			item = QListWidgetItem(layer.name)
			item.setData(Qt.UserRole, layer.id)
			item.setFlags(item.flags() | Qt.ItemIsUserCheckable)
			item.setCheckState(Qt.Checked if layer.visible else Qt.Unchecked)
			self.layer_list.addItem(item)
			if layer.id == active_id:
				self.layer_list.setCurrentItem(item)

	def _sync_active_layer(self):
		layer = self.session.layers.active_layer
		self.text_edit.setPlainText(layer.raw_text)
		self._rebuild_line_list()

	def _rebuild_line_list(self):
		self.line_list.clear()
		self.line_view.clear()
		for line in self.session.layers.active_layer.lines:
			item = QListWidgetItem(line.plain_text)
			item.setForeground(line.color.to_qcolor())
			self.line_list.addItem(item)

	# ========================================
	# Settings Handlers
	# ========================================

	def _changed(self):
		if not self._updating:
			self.sessionChanged.emit()

	def _on_character_changed(self):
		if self._updating or self.character_edit.text() == self.session.settings.character_name:
			return
		self.session.set_character_name(self.character_edit.text())
		self._rebuild_line_list()
		self._changed()

	def _on_theme_changed(self):
		if self._updating:
			return
		self.session.settings.screenshot_theme = self.theme_edit.text()
		self._changed()

	def _on_line_width_changed(self, value):
		if self._updating:
			return
		self.session.settings.chat_line_width = value
		self._changed()

	def _on_canvas_size_changed(self, _value):
		if self._updating:
			return
		self.session.settings.canvas_width = self.width_spin.value()
		self.session.settings.canvas_height = self.height_spin.value()
		self._changed()

	def _on_strip_toggled(self, checked):
		if self._updating:
			return
		self.session.set_strip_timestamps(checked)
		self._rebuild_line_list()
		self._changed()

	def _on_bars_toggled(self, checked):
		if self._updating:
			return
		self.session.settings.show_black_bars = checked
		self._changed()

	def _on_image_drag_toggled(self, checked):
		if self._updating:
			return
		self.session.settings.image_drag_enabled = checked
		self._changed()

	def _on_chat_drag_toggled(self, checked):
		if self._updating:
			return
		self.session.settings.chat_drag_enabled = checked
		self._changed()

	def _on_prompt_toggled(self, checked):
		if self._updating:
			return
		self.session.settings.always_prompt_save_location = checked
		self._changed()

	# ========================================
	# Layer Handlers
	# ========================================

	def add_layer(self):
		layer = self.session.layers.create()
		self.session.layers.select(layer.id)
		self.sync_from_session()
		self._changed()

	def remove_active_layer(self):
		if self.session.remove_layer(self.session.layers.active_layer.id):
			self.sync_from_session()
			self._changed()

	def _move_active(self, up):
		layers = self.session.layers
		moved = layers.move_up(layers.active_layer.id) if up else layers.move_down(layers.active_layer.id)
		if moved:
			self.sync_from_session()
			self._changed()

	def _on_layer_selected(self, current, _previous):
		if self._updating or current is None:
			return
		self.session.layers.select(current.data(Qt.UserRole))
		self.session.clear_selection()
		self._updating = True
		try:
			self._sync_active_layer()
		finally:
			self._updating = False
		self._changed()

	def _on_layer_item_changed(self, item):
		if self._updating:
			return
		layer = self.session.layers.get(item.data(Qt.UserRole))
		if layer is None:
			return
		layer.visible = item.checkState() == Qt.Checked
		layer.name = item.text() or layer.name
		self._changed()

	def _on_text_changed(self):
		if self._updating:
			return
		self.session.set_layer_text(self.session.layers.active_layer.id, self.text_edit.toPlainText())
		self._rebuild_line_list()
		self._changed()

	# ========================================
	# Censoring
	# ========================================

	def _on_line_selected(self, row):
		self.session.clear_selection()
		line = self.session.layers.active_layer.get_line(row)
		self.line_view.setText(line.plain_text if line is not None else '')

	def _on_text_selected(self):
		row = self.line_list.currentRow()
		start = self.line_view.selectionStart()
		if row < 0 or start < 0:
			self.session.clear_selection()
			return
		end = start + len(self.line_view.selectedText())
		self.session.select_text(self.session.layers.active_layer.id, row, start, end)

	def cycle_censor(self):
		"""Advance the censor state of the selected characters"""
		if not self.session.selection.is_valid:
			self.censor_status.setText("Select text in a line first")
			return
		region = self.session.cycle_censor()
		self.censor_status.setText(region.kind.value if region is not None else "removed")
		self._changed()
