"""
Instant Film — Raster Frames
Frames are (H, W, 4) uint8 RGBA numpy arrays, row-major, top-left origin.
"""

import numpy as np
from PIL import Image


class RasterError(ValueError):
    """Array does not satisfy the RGBA frame contract."""
    pass


def check_raster(frame) -> np.ndarray:
    """Validate an RGBA frame and return it unchanged.

    Raises:
        RasterError: wrong type, dtype, channel count, or empty frame.
    """
    if not isinstance(frame, np.ndarray):
        raise RasterError(f"Expected numpy array, got {type(frame).__name__}")
    if frame.dtype != np.uint8:
        raise RasterError(f"Expected uint8 samples, got {frame.dtype}")
    if frame.ndim != 3 or frame.shape[2] != 4:
        raise RasterError(f"Expected (H, W, 4) RGBA frame, got shape {frame.shape}")
    h, w = frame.shape[:2]
    if h == 0 or w == 0:
        raise RasterError(f"Empty frame ({w}x{h})")
    return frame


def frame_size(frame: np.ndarray) -> tuple[int, int]:
    """Return (width, height)."""
    return frame.shape[1], frame.shape[0]


HIGH_DEPTH_MODES = {"I;16", "I;16L", "I;16B", "I;16N", "I"}


def _to_8bit(img: Image.Image) -> Image.Image:
    """Scale 16/32-bit integer or float samples down to an 8-bit L image.

    Integer samples are read as 16-bit and keep their top byte. Float
    samples in [0, 1] are scaled by 255; anything else is stretched over
    its own range.
    """
    samples = np.array(img)
    if img.mode == "F":
        samples = np.nan_to_num(samples.astype(np.float64))
        lo, hi = samples.min(), samples.max()
        if lo >= 0.0 and hi <= 1.0:
            samples = samples * 255.0
        elif hi > lo:
            samples = (samples - lo) / (hi - lo) * 255.0
        samples = np.rint(samples)
    else:
        samples = samples.astype(np.int64) >> 8
    return Image.fromarray(np.clip(samples, 0, 255).astype(np.uint8))


def image_to_frame(img: Image.Image) -> np.ndarray:
    """Convert any PIL image to a contiguous RGBA frame."""
    if img.mode in HIGH_DEPTH_MODES or img.mode == "F":
        img = _to_8bit(img)
    if img.mode != "RGBA":
        img = img.convert("RGBA")
    return np.ascontiguousarray(np.array(img, dtype=np.uint8))


def frame_to_image(frame: np.ndarray) -> Image.Image:
    """Wrap an RGBA frame as a PIL image."""
    return Image.fromarray(check_raster(frame))
