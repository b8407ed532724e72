"""
Instant Film — CLI Tests

Run with: pytest tests/test_cli.py -v
"""

import os
import sys
import zipfile

import pytest
from unittest.mock import patch

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import instant_film
from conftest import _make_test_frame, _encode


def _run(argv):
    with patch.object(sys, "argv", ["instant_film.py", *argv]):
        instant_film.main()


@pytest.fixture
def photos(tmp_path, corrupt_bytes):
    src = tmp_path / "src"
    src.mkdir()
    (src / "one.png").write_bytes(_encode(_make_test_frame(24, 16)))
    (src / "two.jpg").write_bytes(_encode(_make_test_frame(20, 20), "JPEG"))
    (src / "bad.png").write_bytes(corrupt_bytes)
    (src / "notes.txt").write_text("not an image")
    return src


class TestProcess:

    def test_writes_pngs(self, photos, tmp_path, capsys):
        out = tmp_path / "out"
        _run(["process", *sorted(str(p) for p in photos.iterdir()), "--out", str(out)])
        assert sorted(p.name for p in out.iterdir()) == ["instant-film-one.png", "instant-film-two.png"]
        stdout = capsys.readouterr().out
        assert "2/3 processed" in stdout

    def test_zip_output(self, photos, tmp_path):
        out = tmp_path / "out"
        _run(["process", str(photos / "one.png"), str(photos / "two.jpg"), "--out", str(out), "--zip", "--mono"])
        archive = out / "instant-film-photos.zip"
        assert archive.exists()
        with zipfile.ZipFile(archive) as zf:
            assert sorted(zf.namelist()) == ["instant-film-one.png", "instant-film-two.png"]

    def test_nothing_processable_exits(self, photos, tmp_path):
        with pytest.raises(SystemExit) as exc:
            _run(["process", str(photos / "notes.txt"), "--out", str(tmp_path / "out")])
        assert exc.value.code == 1

    def test_all_corrupt_exits(self, photos, tmp_path):
        with pytest.raises(SystemExit) as exc:
            _run(["process", str(photos / "bad.png"), "--out", str(tmp_path / "out")])
        assert exc.value.code == 1


class TestListEffects:

    def test_lists_stack(self, capsys):
        _run(["list-effects"])
        out = capsys.readouterr().out
        assert "1. color_grade" in out
        assert "6. light_leak" in out
        assert "[color mode only]" in out

    def test_category_filter(self, capsys):
        _run(["list-effects", "--category", "texture"])
        out = capsys.readouterr().out
        assert "grain" in out
        assert "vignette" not in out


def test_no_command_prints_help(capsys):
    _run([])
    assert "usage" in capsys.readouterr().out.lower()
