"""
Tests for the export service: filename builder, encoding and the save
dialog / download fallback.
"""
import io
from datetime import datetime

import pytest
from PIL import Image

from models.session import EditorSession
from services.export import (
    ExportError, build_export_filename, sanitize_theme, compose_export,
    encode_png, save_export, export_screenshot, unique_path
)

WHEN = datetime(2024, 3, 5, 14, 7)


class TestFilename:

    def test_theme_with_punctuation(self):
        assert build_export_filename("My Screenshot!", WHEN) == "05032024 - 1407 - My-Screenshot.png"

    def test_empty_theme_uses_default(self):
        assert build_export_filename("", WHEN) == "05032024 - 1407 - screenshot.png"

    def test_theme_of_only_symbols_uses_default(self):
        assert build_export_filename("!!!", WHEN) == "05032024 - 1407 - screenshot.png"

    @pytest.mark.parametrize("theme,expected", [
        ("  Bank   robbery ", "Bank-robbery"),
        ("a/b\\c:d", "abcd"),
        ("keep_under-score", "keep_under-score"),
    ])
    def test_sanitize(self, theme, expected):
        assert sanitize_theme(theme) == expected


class TestCompose:

    def test_requires_background(self):
        with pytest.raises(ExportError):
            compose_export(EditorSession(), None)

    def test_encode_png(self, background):
        data = encode_png(background)
        assert data.startswith(b'\x89PNG')
        assert Image.open(io.BytesIO(data)).size == background.size


class TestSave:

    def test_download_when_no_dialog(self, tmp_path):
        path = save_export(b'png', "shot.png", download_dir=tmp_path)
        assert path == tmp_path / "shot.png"
        assert path.read_bytes() == b'png'

    def test_download_does_not_overwrite(self, tmp_path):
        (tmp_path / "shot.png").write_bytes(b'old')
        path = save_export(b'new', "shot.png", download_dir=tmp_path)
        assert path.name == "shot (2).png"
        assert (tmp_path / "shot.png").read_bytes() == b'old'

    def test_unique_path_counts_up(self, tmp_path):
        (tmp_path / "a.png").write_bytes(b'')
        (tmp_path / "a (2).png").write_bytes(b'')
        assert unique_path(tmp_path, "a.png").name == "a (3).png"

    def test_dialog_choice_used(self, tmp_path):
        target = tmp_path / "chosen.png"
        path = save_export(b'png', "shot.png", save_dialog=lambda name: str(target),
                           download_dir=tmp_path / "downloads")
        assert path == target
        assert not (tmp_path / "downloads").exists()

    def test_dialog_cancel_falls_back(self, tmp_path):
        path = save_export(b'png', "shot.png", save_dialog=lambda name: None, download_dir=tmp_path)
        assert path == tmp_path / "shot.png"

    def test_dialog_unsupported_falls_back(self, tmp_path):
        def unsupported(name):
            raise NotImplementedError("no native dialog")
        path = save_export(b'png', "shot.png", save_dialog=unsupported, download_dir=tmp_path)
        assert path.exists()

    def test_dialog_receives_suggested_name(self, tmp_path):
        seen = []
        save_export(b'png', "shot.png", save_dialog=lambda name: seen.append(name), download_dir=tmp_path)
        assert seen == ["shot.png"]


class TestExportScreenshot:

    def test_writes_png(self, tmp_path, background):
        session = EditorSession()
        session.import_chat_text("John says: hi")
        session.settings.screenshot_theme = "My Screenshot!"
        path = export_screenshot(session, background, download_dir=tmp_path, when=WHEN)
        assert path.name == "05032024 - 1407 - My-Screenshot.png"
        with Image.open(path) as image:
            assert image.size == (800, 600)

    def test_dialog_only_when_always_prompt(self, tmp_path, background):
        calls = []

        def dialog(name):
            calls.append(name)
            return str(tmp_path / "picked.png")

        session = EditorSession()
        export_screenshot(session, background, save_dialog=dialog, download_dir=tmp_path, when=WHEN)
        assert calls == []

        session.settings.always_prompt_save_location = True
        path = export_screenshot(session, background, save_dialog=dialog, download_dir=tmp_path, when=WHEN)
        assert len(calls) == 1
        assert path == tmp_path / "picked.png"

    def test_no_background_writes_nothing(self, tmp_path):
        with pytest.raises(ExportError):
            export_screenshot(EditorSession(), None, download_dir=tmp_path)
        assert list(tmp_path.iterdir()) == []

    def test_write_failure_is_export_error(self, tmp_path, background):
        blocker = tmp_path / "file"
        blocker.write_text("not a directory")
        with pytest.raises(ExportError):
            export_screenshot(EditorSession(), background, download_dir=blocker / "sub")
