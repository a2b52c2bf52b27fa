"""
Tests for the headless CLI renderer.
"""
import argparse
import json

import pytest
from PIL import Image

from headless import main, _parse_censor
from models.censor_store import CensorKind


class TestCensorArgument:

    def test_default_kind(self):
        assert _parse_censor("0:0:4") == (0, 0, 4, CensorKind.INVISIBLE)

    def test_explicit_kind(self):
        assert _parse_censor("2:5:9:blur") == (2, 5, 9, CensorKind.BLUR)

    @pytest.mark.parametrize("value", ["0:4", "a:0:4", "0:4:4", "0:0:4:sparkle", "0:-1:4"])
    def test_rejects(self, value):
        with pytest.raises(argparse.ArgumentTypeError):
            _parse_censor(value)


class TestMain:

    def test_renders_png(self, tmp_path, chat_file, image_file, capsys):
        out_dir = tmp_path / "out"
        code = main([str(chat_file), str(image_file), "-o", str(out_dir),
                     "--theme", "Street Talk", "--width", "320", "--height", "240"])
        assert code == 0
        outputs = list(out_dir.glob("*.png"))
        assert len(outputs) == 1
        assert outputs[0].name.endswith(" - Street-Talk.png")
        assert str(outputs[0]) in capsys.readouterr().out
        with Image.open(outputs[0]) as image:
            assert image.size == (320, 240)

    def test_censor_option(self, tmp_path, chat_file, image_file):
        out_dir = tmp_path / "out"
        code = main([str(chat_file), str(image_file), "-o", str(out_dir),
                     "--character", "John Doe", "--censor", "0:0:8:blackbar", "--bars",
                     "--position", "20", "30", "--scale", "1.5"])
        assert code == 0

    def test_session_snapshot_used(self, tmp_path, chat_file, image_file):
        snapshot = tmp_path / "session.json"
        snapshot.write_text(json.dumps({'dropZoneWidth': 111, 'dropZoneHeight': 77, 'chatLayers': []}))
        out_dir = tmp_path / "out"
        assert main([str(chat_file), str(image_file), "-o", str(out_dir), "--session", str(snapshot)]) == 0
        with Image.open(next(out_dir.glob("*.png"))) as image:
            assert image.size == (111, 77)

    def test_wrong_chat_type(self, tmp_path, image_file):
        assert main([str(image_file), str(image_file), "-o", str(tmp_path)]) == 1

    def test_broken_image(self, tmp_path, chat_file):
        broken = tmp_path / "broken.png"
        broken.write_bytes(b"not an image")
        assert main([str(chat_file), str(broken), "-o", str(tmp_path / "out")]) == 1
        assert not (tmp_path / "out").exists()

    def test_missing_chat_file(self, tmp_path, image_file):
        assert main([str(tmp_path / "nope.txt"), str(image_file), "-o", str(tmp_path)]) == 1
