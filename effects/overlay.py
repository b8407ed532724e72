"""
Instant Film — Overlays
Paper tint, vignette and light leak. Each one paints a translucent layer
over the whole frame with source-over compositing.
"""

import numpy as np

from effects.composite import source_over, radial_distance

PAPER_TINT = (247, 237, 213)
PAPER_TINT_OPACITY = 0.08

VIGNETTE_AMOUNT = 0.8
VIGNETTE_OPACITY = 0.5

LEAK_COLORS = [(255, 50, 50), (255, 200, 50)]  # red, amber
LEAK_OPACITY = 0.15
LEAK_MIN_RADIUS = 200


def paper_tint(frame: np.ndarray) -> np.ndarray:
    """Flat warm-paper wash over the frame."""
    return source_over(frame, PAPER_TINT, PAPER_TINT_OPACITY)


def vignette(frame: np.ndarray) -> np.ndarray:
    """Radial darkening toward the corners.

    Gradient from transparent black at min(w, h) / 3 to 50% black at
    w / 2 + w * 0.8, both centered on the frame. Inside the inner radius
    the gradient is fully transparent; beyond the outer radius it holds.

    Args:
        frame: (H, W, 4) uint8 RGBA array.

    Returns:
        Vignetted frame.
    """
    h, w = frame.shape[:2]
    inner = min(w, h) / 3.0
    outer = w / 2.0 + w * VIGNETTE_AMOUNT
    dist = radial_distance(w, h, w / 2.0, h / 2.0)
    t = np.clip((dist - inner) / (outer - inner), 0.0, 1.0)
    return source_over(frame, (0, 0, 0), t * VIGNETTE_OPACITY)


def light_leak(frame: np.ndarray, rng=None) -> np.ndarray:
    """Colored radial glow centered somewhere near the top-left of the frame.

    Color is red or amber with equal odds. The center lands in
    [-0.2w, 0.8w] x [-0.2h, 0.8h] and the radius in
    [200, 200 + 0.8 * max(w, h)]. Opacity falls linearly from 15% at the
    center to nothing at the radius.

    Args:
        frame: (H, W, 4) uint8 RGBA array.
        rng: Random source with a numpy-style uniform(low, high, size).

    Returns:
        Frame with the leak composited on top.
    """
    if rng is None:
        from effects import default_rng
        rng = default_rng()
    h, w = frame.shape[:2]

    color = LEAK_COLORS[0] if rng.uniform(0.0, 1.0) > 0.5 else LEAK_COLORS[1]
    cx = rng.uniform(0.0, 1.0) * w - w * 0.2
    cy = rng.uniform(0.0, 1.0) * h - h * 0.2
    radius = rng.uniform(0.0, 1.0) * max(w, h) * 0.8 + LEAK_MIN_RADIUS

    dist = radial_distance(w, h, cx, cy)
    alpha = LEAK_OPACITY * (1.0 - np.clip(dist / radius, 0.0, 1.0))
    return source_over(frame, color, alpha)
