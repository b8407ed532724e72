"""
Instant Film — Texture Effects
Film grain and surface scratches.
"""

from dataclasses import dataclass

import numpy as np
import cv2

from effects.composite import source_over

GRAIN_STRENGTH = 45.0  # noise spans [-22.5, +22.5]

SCRATCH_COUNT = 15
SCRATCH_SPAN = 0.2  # end point lands within +/- half of this fraction of w/h
SCRATCH_LIGHT = ((255, 255, 255), 0.25)
SCRATCH_DARK = ((0, 0, 0), 0.2)
SCRATCH_MIN_WIDTH = 0.5
SCRATCH_WIDTH_RANGE = 2.0

_SUBPIXEL_SHIFT = 4  # cv2.line fixed-point fractional bits


@dataclass(frozen=True)
class Scratch:
    """One scratch segment, in pixel coordinates."""
    start: tuple
    end: tuple
    width: float
    color: tuple
    opacity: float


def grain(frame: np.ndarray, rng=None) -> np.ndarray:
    """Monochrome film grain.

    One noise value per pixel, drawn from (U(0,1) - 0.5) * 45 and added to
    R, G and B alike so the grain carries no color. Alpha is untouched and
    results saturate at 0/255.

    Args:
        frame: (H, W, 4) uint8 RGBA array.
        rng: Random source with a numpy-style uniform(low, high, size).

    Returns:
        Grainy frame.
    """
    if rng is None:
        from effects import default_rng
        rng = default_rng()
    h, w = frame.shape[:2]
    noise_val = (np.asarray(rng.uniform(0.0, 1.0, (h, w)), dtype=np.float32) - 0.5) * GRAIN_STRENGTH

    result = frame.copy()
    rgb = frame[:, :, :3].astype(np.float32) + noise_val[:, :, np.newaxis]
    result[:, :, :3] = np.clip(np.rint(rgb), 0, 255).astype(np.uint8)
    return result


def scratch_segments(width: int, height: int, rng=None) -> list[Scratch]:
    """Plan the scratch segments for a frame of the given size."""
    if rng is None:
        from effects import default_rng
        rng = default_rng()
    segments = []
    for _ in range(SCRATCH_COUNT):
        color, opacity = SCRATCH_LIGHT if rng.uniform(0.0, 1.0) > 0.5 else SCRATCH_DARK
        stroke = rng.uniform(0.0, 1.0) * SCRATCH_WIDTH_RANGE + SCRATCH_MIN_WIDTH
        x0 = rng.uniform(0.0, 1.0) * width
        y0 = rng.uniform(0.0, 1.0) * height
        x1 = x0 + (rng.uniform(0.0, 1.0) - 0.5) * (width * SCRATCH_SPAN)
        y1 = y0 + (rng.uniform(0.0, 1.0) - 0.5) * (height * SCRATCH_SPAN)
        segments.append(Scratch((x0, y0), (x1, y1), stroke, color, opacity))
    return segments


def _stroke_mask(shape: tuple, scratch: Scratch) -> np.ndarray:
    """Anti-aliased coverage of one segment as (H, W) float 0.0-1.0."""
    scale = 1 << _SUBPIXEL_SHIFT
    mask = np.zeros(shape, dtype=np.uint8)
    p0 = (int(round(scratch.start[0] * scale)), int(round(scratch.start[1] * scale)))
    p1 = (int(round(scratch.end[0] * scale)), int(round(scratch.end[1] * scale)))
    thickness = max(1, int(round(scratch.width)))
    cv2.line(mask, p0, p1, 255, thickness, cv2.LINE_AA, _SUBPIXEL_SHIFT)
    coverage = mask.astype(np.float32) / 255.0
    # Hairlines thinner than a pixel are drawn at reduced coverage
    return coverage * min(1.0, scratch.width)


def scratches(frame: np.ndarray, rng=None) -> np.ndarray:
    """Draw 15 thin translucent scratches, white or black, anywhere on the frame.

    Args:
        frame: (H, W, 4) uint8 RGBA array.
        rng: Random source with a numpy-style uniform(low, high, size).

    Returns:
        Scratched frame.
    """
    h, w = frame.shape[:2]
    result = frame
    for scratch in scratch_segments(w, h, rng):
        coverage = _stroke_mask((h, w), scratch)
        result = source_over(result, scratch.color, coverage * scratch.opacity)
    return result
