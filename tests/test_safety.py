"""
Instant Film — Safety Guard Tests
Preflight checks for CLI inputs and HTTP uploads.

Run with: pytest tests/test_safety.py -v
"""

import os
import sys

import pytest
from unittest.mock import patch

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from core.safety import preflight, check_upload, SafetyError, ALLOWED_EXTENSIONS


# ---------------------------------------------------------------------------
# PREFLIGHT (files on disk)
# ---------------------------------------------------------------------------

class TestPreflight:

    def test_valid_image(self, tmp_path, png_bytes):
        path = tmp_path / "photo.png"
        path.write_bytes(png_bytes)
        info = preflight(str(path))
        assert info["extension"] == ".png"
        assert info["size_mb"] < 1
        assert info["path"] == os.path.realpath(str(path))

    def test_uppercase_extension(self, tmp_path, jpeg_bytes):
        path = tmp_path / "PHOTO.JPG"
        path.write_bytes(jpeg_bytes)
        assert preflight(str(path))["extension"] == ".jpg"

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            preflight(str(tmp_path / "nope.png"))

    def test_directory_rejected(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            preflight(str(tmp_path))

    def test_disallowed_extension(self, tmp_path):
        path = tmp_path / "clip.mp4"
        path.write_bytes(b"\0" * 16)
        with pytest.raises(SafetyError, match="not allowed"):
            preflight(str(path))

    def test_oversized(self, tmp_path, png_bytes):
        path = tmp_path / "big.png"
        path.write_bytes(png_bytes)
        with patch("core.safety.MAX_FILE_MB", 0):
            with pytest.raises(SafetyError, match="exceeds"):
                preflight(str(path))


# ---------------------------------------------------------------------------
# UPLOADS
# ---------------------------------------------------------------------------

class TestCheckUpload:

    def test_accepts_image(self):
        check_upload("holiday.jpeg", 1024)

    def test_no_filename(self):
        with pytest.raises(SafetyError, match="No filename"):
            check_upload("", 10)

    def test_empty_upload(self):
        with pytest.raises(SafetyError, match="empty"):
            check_upload("a.png", 0)

    def test_text_file(self):
        with pytest.raises(SafetyError):
            check_upload("notes.txt", 10)

    def test_no_extension(self):
        with pytest.raises(SafetyError):
            check_upload("README", 10)

    def test_too_large(self):
        with patch("core.safety.MAX_FILE_MB", 1):
            with pytest.raises(SafetyError):
                check_upload("a.png", 2 * 1024 * 1024)

    def test_video_not_allowed(self):
        assert ".mp4" not in ALLOWED_EXTENSIONS
        assert {".png", ".jpg", ".jpeg"} <= ALLOWED_EXTENSIONS
