import sys
import os
import logging

# Configure logging
logging.basicConfig(
    level=logging.WARNING,  # Only show warnings and errors
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[
        logging.StreamHandler(sys.stdout)  # Output to console
    ]
)

# Add editor/src to path so imports work when running directly
if __name__ == "__main__":
    current_dir = os.path.dirname(os.path.abspath(__file__))
    if current_dir not in sys.path:
        sys.path.insert(0, current_dir)

# PyQt5 import/s
from PyQt5 import QtWidgets
from PyQt5.QtWidgets import QMainWindow, QSplitter, QFileDialog, QMessageBox
from PyQt5.QtCore import Qt, QTimer
from PyQt5.QtGui import QPalette, QColor

# Component imports
from components.preview_widget import PreviewWidget
from components.chat_panel import ChatPanel

# Utility imports
from utils.logger import loggerRaise, loggerWarn, set_main_window

# Service imports
from services.compositor import Compositor
from services.export import ExportError, export_screenshot
from services.file_operations import (
    UnsupportedFileError, ImageDecodeError,
    is_image_file, is_chat_file, guess_mime_type,
    load_image_file, load_chat_file, decode_image
)
from services.session_store import load_session, save_session

logger = logging.getLogger(__name__)

AUTOSAVE_DELAY_MS = 500


class ChatScreenshotEditor(QMainWindow):
    def __init__(self, session_path=None):
        super().__init__()
        self.setWindowTitle("Chat Screenshot Editor")
        self.resize(1280, 800)
        self.setAcceptDrops(True)

        self.session_path = session_path
        self.session = load_session(session_path)
        self.compositor = Compositor()

        self.background = None  # Decoded PIL image, not persisted

        # Autosave, debounced
        self.autosave_timer = QTimer()
        self.autosave_timer.setSingleShot(True)
        self.autosave_timer.timeout.connect(self._save_session)

        set_main_window(self)

        self.setup_ui()
        self._create_menu_bar()

    def setup_ui(self):
        splitter = QSplitter(Qt.Horizontal)

        self.preview = PreviewWidget(self.session, self.compositor)
        self.preview.sessionChanged.connect(self._schedule_autosave)
        self.preview.dragEnded.connect(self._save_session)
        splitter.addWidget(self.preview)

        self.chat_panel = ChatPanel(self.session)
        self.chat_panel.sessionChanged.connect(self._on_session_changed)
        splitter.addWidget(self.chat_panel)

        splitter.setStretchFactor(0, 3)
        splitter.setStretchFactor(1, 1)
        self.setCentralWidget(splitter)
        self.preview.refresh()

    def _create_menu_bar(self):
        menubar = self.menuBar()
        file_menu = menubar.addMenu("&File")

        open_image_action = file_menu.addAction("Open &Image...")
        open_image_action.setShortcut("Ctrl+O")
        open_image_action.triggered.connect(self.open_image)

        import_chat_action = file_menu.addAction("Import &Chat Log...")
        import_chat_action.setShortcut("Ctrl+L")
        import_chat_action.triggered.connect(self.import_chat)

        file_menu.addSeparator()

        export_action = file_menu.addAction("&Export Screenshot")
        export_action.setShortcut("Ctrl+E")
        export_action.triggered.connect(self.export_png)

        file_menu.addSeparator()

        reset_action = file_menu.addAction("&Reset Session")
        reset_action.triggered.connect(self.reset_session)

        exit_action = file_menu.addAction("E&xit")
        exit_action.setShortcut("Alt+F4")
        exit_action.triggered.connect(self.close)

    # ========================================
    # Session Sync
    # ========================================

    def _on_session_changed(self):
        self.preview.refresh()
        self._schedule_autosave()

    def _schedule_autosave(self):
        self.autosave_timer.start(AUTOSAVE_DELAY_MS)

    def _save_session(self):
        self.autosave_timer.stop()
        try:
            save_session(self.session, self.session_path)
        except OSError as e:
            logger.warning(f"Could not save session: {e}")

    # ========================================
    # Input Files
    # ========================================

    def set_background_file(self, filename, mime_type=None):
        """Load a background image; wrong types and broken images are reported, not raised"""
        try:
            self.background = decode_image(load_image_file(filename, mime_type))
        except UnsupportedFileError:
            return False
        except (ImageDecodeError, OSError) as e:
            QMessageBox.warning(self, "Image Error", f"Could not load image:\n{e}")
            return False
        self.preview.set_background(self.background)
        return True

    def import_chat_file(self, filename, mime_type=None):
        try:
            text = load_chat_file(filename, mime_type)
        except UnsupportedFileError:
            return False
        except OSError as e:
            QMessageBox.warning(self, "Chat Log Error", f"Could not read chat log:\n{e}")
            return False
        self.session.import_chat_text(text)
        self.chat_panel.sync_from_session()
        self._on_session_changed()
        return True

    def open_image(self):
        filename, _ = QFileDialog.getOpenFileName(
            self, "Open Image", "", "Images (*.png *.jpg *.jpeg *.gif *.bmp *.webp);;All Files (*)"
        )
        if filename:
            self.set_background_file(filename)

    def import_chat(self):
        filename, _ = QFileDialog.getOpenFileName(self, "Import Chat Log", "", "Text Files (*.txt)")
        if filename:
            self.import_chat_file(filename)

    def dragEnterEvent(self, event):
        if event.mimeData().hasUrls():
            event.acceptProposedAction()
        else:
            super().dragEnterEvent(event)

    def dropEvent(self, event):
        """Images become the background, .txt files replace the active layer's text"""
        for url in event.mimeData().urls():
            filename = url.toLocalFile()
            if not filename:
                continue
            mime_type = guess_mime_type(filename)
            if is_image_file(filename, mime_type):
                self.set_background_file(filename, mime_type)
            elif is_chat_file(filename, mime_type):
                self.import_chat_file(filename, mime_type)
            else:
                loggerWarn(f"'{os.path.basename(filename)}' is not an image or a .txt chat log", "Unsupported File")
        event.acceptProposedAction()

    # ========================================
    # Core Application Methods
    # ========================================

    def _ask_save_path(self, suggested_name):
        filename, _ = QFileDialog.getSaveFileName(
            self, "Save Screenshot", suggested_name, "PNG Files (*.png)"
        )
        if filename and not filename.lower().endswith('.png'):
            filename += '.png'
        return filename or None

    def export_png(self):
        """Export the composed screenshot"""
        if self.background is None:
            QMessageBox.information(self, "Export", "Load an image before exporting.")
            return
        try:
            path = export_screenshot(self.session, self.background,
                                     save_dialog=self._ask_save_path, compositor=self.compositor)
        except ExportError as e:
            loggerRaise(e, "Failed to export screenshot")
            return
        self.statusBar().showMessage(f"Saved {path}", 5000)

    def reset_session(self):
        self.session.reset()
        self.chat_panel.sync_from_session()
        self._on_session_changed()

    def closeEvent(self, event):
        self._save_session()
        super().closeEvent(event)


def main():
    """Main entry point for the Chat Screenshot Editor application"""
    app = QtWidgets.QApplication([])

    # Use Fusion style with dark palette
    app.setStyle("Fusion")

    dark_palette = QPalette()
    dark_palette.setColor(QPalette.Window, QColor(53, 53, 53))
    dark_palette.setColor(QPalette.WindowText, Qt.white)
    dark_palette.setColor(QPalette.Base, QColor(25, 25, 25))
    dark_palette.setColor(QPalette.AlternateBase, QColor(53, 53, 53))
    dark_palette.setColor(QPalette.Text, Qt.white)
    dark_palette.setColor(QPalette.Button, QColor(53, 53, 53))
    dark_palette.setColor(QPalette.ButtonText, Qt.white)
    dark_palette.setColor(QPalette.Highlight, QColor(42, 130, 218))
    dark_palette.setColor(QPalette.HighlightedText, Qt.black)
    app.setPalette(dark_palette)

    window = ChatScreenshotEditor()
    window.show()
    app.exec_()


if __name__ == "__main__":
    main()
