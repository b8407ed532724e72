"""
Instant Film — Resampler
Two-stage resize: a half-size bilinear pre-downsample, then a bilinear
draw into the target size. The softening of the intermediate pass is part
of the look and is kept even when the target equals the source size.
"""

import numpy as np
import cv2

from core.raster import check_raster, RasterError


class InvalidDimensions(ValueError):
    """Resize target (or source) has a non-positive dimension."""
    pass


def half_size(width: int, height: int) -> tuple[int, int]:
    """Intermediate size for the pre-downsample pass (never below 1px)."""
    return max(1, width // 2), max(1, height // 2)


def resize(source: np.ndarray, target_width: int, target_height: int) -> np.ndarray:
    """Resize an RGBA frame through a half-size intermediate.

    Args:
        source: (H, W, 4) uint8 RGBA array.
        target_width: Output width in pixels (> 0).
        target_height: Output height in pixels (> 0).

    Returns:
        New (target_height, target_width, 4) uint8 frame.

    Raises:
        InvalidDimensions: If a target dimension is <= 0 or the source is malformed.
    """
    if int(target_width) <= 0 or int(target_height) <= 0:
        raise InvalidDimensions(
            f"Target size must be positive, got {target_width}x{target_height}"
        )
    try:
        check_raster(source)
    except RasterError as e:
        raise InvalidDimensions(str(e)) from e

    h, w = source.shape[:2]
    # 1. Pre-downsample to half size
    intermediate = cv2.resize(source, half_size(w, h), interpolation=cv2.INTER_LINEAR)
    # 2. Draw intermediate into the target
    return cv2.resize(
        intermediate, (int(target_width), int(target_height)),
        interpolation=cv2.INTER_LINEAR,
    )
