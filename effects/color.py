"""
Instant Film — Color Grade
CSS-style filter primitives (sepia, contrast, brightness, saturate, hue-rotate,
grayscale) and the combined instant-film grade built from them.

Primitives work on float RGB in 0.0-1.0 and clamp after every step, the same
way a browser filter chain clamps between filter primitives.
"""

import math

import numpy as np

# Luminance coefficients used by grayscale/saturate/hue-rotate matrices
LUMA = np.array([0.2126, 0.7152, 0.0722], dtype=np.float32)

# Instant-film chain: sepia -> contrast -> brightness -> saturate -> hue-rotate
FILM_GRADE = {
    "sepia": 0.3,
    "contrast": 1.5,
    "brightness": 0.9,
    "saturate": 1.2,
    "hue_rotate": -5.0,
}


def _apply_matrix(rgb: np.ndarray, matrix: np.ndarray) -> np.ndarray:
    return np.clip(rgb @ matrix.T.astype(np.float32), 0.0, 1.0)


def sepia(rgb: np.ndarray, amount: float = 1.0) -> np.ndarray:
    """Sepia tone. amount 0.0 (none) to 1.0 (full)."""
    a = 1.0 - max(0.0, min(1.0, float(amount)))
    matrix = np.array([
        [0.393 + 0.607 * a, 0.769 - 0.769 * a, 0.189 - 0.189 * a],
        [0.349 - 0.349 * a, 0.686 + 0.314 * a, 0.168 - 0.168 * a],
        [0.272 - 0.272 * a, 0.534 - 0.534 * a, 0.131 + 0.869 * a],
    ])
    return _apply_matrix(rgb, matrix)


def contrast(rgb: np.ndarray, amount: float = 1.0) -> np.ndarray:
    """Linear contrast around mid-gray. 1.0 = no change."""
    return np.clip((rgb - 0.5) * float(amount) + 0.5, 0.0, 1.0)


def brightness(rgb: np.ndarray, amount: float = 1.0) -> np.ndarray:
    """Linear multiplier. 1.0 = no change."""
    return np.clip(rgb * float(amount), 0.0, 1.0)


def saturate(rgb: np.ndarray, amount: float = 1.0) -> np.ndarray:
    """Saturation matrix. 0.0 = gray, 1.0 = no change, >1 = boosted."""
    s = float(amount)
    matrix = np.array([
        [0.213 + 0.787 * s, 0.715 - 0.715 * s, 0.072 - 0.072 * s],
        [0.213 - 0.213 * s, 0.715 + 0.285 * s, 0.072 - 0.072 * s],
        [0.213 - 0.213 * s, 0.715 - 0.715 * s, 0.072 + 0.928 * s],
    ])
    return _apply_matrix(rgb, matrix)


def hue_rotate(rgb: np.ndarray, degrees: float = 0.0) -> np.ndarray:
    """Rotate hue by N degrees (luminance-preserving matrix)."""
    rad = math.radians(float(degrees))
    c, s = math.cos(rad), math.sin(rad)
    matrix = np.array([
        [0.213 + c * 0.787 - s * 0.213, 0.715 - c * 0.715 - s * 0.715, 0.072 - c * 0.072 + s * 0.928],
        [0.213 - c * 0.213 + s * 0.143, 0.715 + c * 0.285 + s * 0.140, 0.072 - c * 0.072 - s * 0.283],
        [0.213 - c * 0.213 - s * 0.787, 0.715 - c * 0.715 + s * 0.715, 0.072 + c * 0.928 + s * 0.072],
    ])
    return _apply_matrix(rgb, matrix)


def grayscale(rgb: np.ndarray) -> np.ndarray:
    """Full desaturation to luminance. Output channels are identical."""
    luma = np.clip(rgb @ LUMA, 0.0, 1.0)
    return np.repeat(luma[:, :, np.newaxis], 3, axis=2)


def color_grade(frame: np.ndarray, monochrome: bool = False) -> np.ndarray:
    """Instant-film color grade.

    Args:
        frame: (H, W, 4) uint8 RGBA array.
        monochrome: If True, desaturate to gray instead of the warm film grade.

    Returns:
        Graded frame, alpha untouched.
    """
    rgb = frame[:, :, :3].astype(np.float32) / 255.0

    if monochrome:
        rgb = grayscale(rgb)
    else:
        rgb = sepia(rgb, FILM_GRADE["sepia"])
        rgb = contrast(rgb, FILM_GRADE["contrast"])
        rgb = brightness(rgb, FILM_GRADE["brightness"])
        rgb = saturate(rgb, FILM_GRADE["saturate"])
        rgb = hue_rotate(rgb, FILM_GRADE["hue_rotate"])

    result = frame.copy()
    result[:, :, :3] = np.clip(np.rint(rgb * 255.0), 0, 255).astype(np.uint8)
    return result
