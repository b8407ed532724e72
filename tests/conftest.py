"""
Conftest: shared fixtures for all Instant Film test modules.

1. Synthetic RGBA frames (gradients, not blank)
2. Encoded image bytes (PNG / JPEG / corrupt) for pipeline and batch tests
3. Deterministic random sources standing in for the shared unseeded one
"""

import os
import sys
from io import BytesIO

import numpy as np
import pytest
from PIL import Image

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))


def _make_test_frame(width=64, height=48):
    """Generate a synthetic opaque RGBA frame (gradient, not blank)."""
    frame = np.zeros((height, width, 4), dtype=np.uint8)
    frame[:, :, 0] = np.linspace(0, 255, width, dtype=np.uint8)  # R gradient
    frame[:, :, 1] = 128  # constant G
    frame[:, :, 2] = np.linspace(255, 0, width, dtype=np.uint8)  # B inverse
    frame[:, :, 3] = 255
    return frame


def _solid_frame(value, width=32, height=24, alpha=255):
    frame = np.zeros((height, width, 4), dtype=np.uint8)
    frame[:, :, :3] = value
    frame[:, :, 3] = alpha
    return frame


def _encode(frame, fmt="PNG"):
    img = Image.fromarray(frame)
    if fmt == "JPEG":
        img = img.convert("RGB")
    buf = BytesIO()
    img.save(buf, format=fmt)
    return buf.getvalue()


class FixedRandom:
    """Stand-in for np.random.RandomState whose uniform() always lands at
    the same fraction of its range. Counts draws."""

    def __init__(self, value=0.5):
        self.value = value
        self.calls = 0

    def uniform(self, low=0.0, high=1.0, size=None):
        self.calls += 1
        v = low + (high - low) * self.value
        if size is None:
            return v
        return np.full(size, v, dtype=np.float64)


@pytest.fixture
def frame():
    return _make_test_frame()


@pytest.fixture
def png_bytes():
    return _encode(_make_test_frame(40, 30))


@pytest.fixture
def jpeg_bytes():
    return _encode(_make_test_frame(36, 24), fmt="JPEG")


@pytest.fixture
def corrupt_bytes():
    return b"\x89PNG\r\n\x1a\nthis is not really a png"


@pytest.fixture
def rng():
    return np.random.RandomState(1234)
