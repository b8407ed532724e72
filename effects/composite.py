"""
Instant Film — Compositing
Source-over alpha blending of flat colors and gradients onto RGBA frames.
"""

import numpy as np


def source_over(frame: np.ndarray, color, alpha) -> np.ndarray:
    """Composite a colored layer over an RGBA frame (source-over).

    Args:
        frame: (H, W, 4) uint8 RGBA array.
        color: RGB triple, or (H, W, 3) array of per-pixel colors (0-255).
        alpha: Layer opacity. Scalar, or (H, W) array of per-pixel opacities (0.0-1.0).

    Returns:
        New (H, W, 4) uint8 frame.
    """
    dst = frame.astype(np.float32) / 255.0
    src_rgb = np.asarray(color, dtype=np.float32) / 255.0
    src_a = np.clip(np.asarray(alpha, dtype=np.float32), 0.0, 1.0)
    if src_a.ndim == 2:
        src_a = src_a[:, :, np.newaxis]

    dst_rgb = dst[:, :, :3]
    dst_a = dst[:, :, 3:4]

    out_a = src_a + dst_a * (1.0 - src_a)
    # Premultiplied sum, then back to straight alpha
    out_rgb = src_rgb * src_a + dst_rgb * dst_a * (1.0 - src_a)
    out_rgb = np.divide(out_rgb, out_a, out=np.zeros_like(out_rgb), where=out_a > 0)

    result = np.empty(frame.shape, dtype=np.float32)
    result[:, :, :3] = out_rgb
    result[:, :, 3:4] = np.broadcast_to(out_a, dst_a.shape)
    return np.clip(np.rint(result * 255.0), 0, 255).astype(np.uint8)


def radial_distance(width: int, height: int, cx: float, cy: float) -> np.ndarray:
    """Distance of every pixel center from (cx, cy), shape (H, W)."""
    ys, xs = np.mgrid[0:height, 0:width].astype(np.float32)
    return np.sqrt((xs + 0.5 - cx) ** 2 + (ys + 0.5 - cy) ** 2)
