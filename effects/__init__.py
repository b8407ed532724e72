"""
Instant Film — Effects Registry
Every effect is a function: (frame: np.ndarray, **params) -> np.ndarray
operating on (H, W, 4) uint8 RGBA frames.

The instant-film look is a fixed chain (FILM_STACK) whose order is part of
the visible result.
"""

import numpy as np

from effects.color import color_grade
from effects.overlay import paper_tint, vignette, light_leak
from effects.texture import grain, scratches

# Master registry: name -> (function, metadata, description)
EFFECTS = {
    "color_grade": {
        "fn": color_grade,
        "category": "color",
        "params": {},
        "mode": True,
        "description": "Warm film grade (sepia, contrast, saturation, hue) or grayscale in monochrome mode",
    },
    "paper_tint": {
        "fn": paper_tint,
        "category": "overlay",
        "params": {},
        "skip_monochrome": True,
        "description": "8% warm paper wash (color mode only)",
    },
    "vignette": {
        "fn": vignette,
        "category": "overlay",
        "params": {},
        "description": "Soft radial darkening toward the corners",
    },
    "grain": {
        "fn": grain,
        "category": "texture",
        "params": {},
        "random": True,
        "description": "Per-pixel monochrome grain in [-22.5, +22.5]",
    },
    "scratches": {
        "fn": scratches,
        "category": "texture",
        "params": {},
        "random": True,
        "description": "15 translucent white/black surface scratches",
    },
    "light_leak": {
        "fn": light_leak,
        "category": "overlay",
        "params": {},
        "random": True,
        "description": "Red or amber radial light leak near a corner",
    },
}

FILM_STACK = ("color_grade", "paper_tint", "vignette", "grain", "scratches", "light_leak")

CATEGORIES = {
    "color": "Color",
    "overlay": "Overlay",
    "texture": "Texture",
}

# Process-wide unseeded source; tests pass their own rng instead
_default_rng = np.random.RandomState()


def default_rng():
    """Return the shared random source used when no rng is injected."""
    return _default_rng


def get_effect(name: str):
    """Get an effect by name. Returns (fn, default_params).

    Raises ValueError if the effect doesn't exist.
    """
    if name not in EFFECTS:
        available = ", ".join(sorted(EFFECTS.keys()))
        raise ValueError(f"Unknown effect: {name}. Available: {available}")
    entry = EFFECTS[name]
    return entry["fn"], entry["params"].copy()


def list_effects(category: str = None) -> list[dict]:
    """List effects in stack order with descriptions.

    Args:
        category: Optional filter — only return effects in this category.
    """
    results = []
    for name in FILM_STACK:
        entry = EFFECTS[name]
        if category and entry.get("category") != category:
            continue
        results.append({
            "name": name,
            "description": entry["description"],
            "category": entry.get("category", "other"),
            "monochrome": not entry.get("skip_monochrome", False),
        })
    return results


def list_categories() -> list[str]:
    """Return ordered list of category keys."""
    return list(CATEGORIES.keys())


def apply_effect(frame, effect_name: str, monochrome: bool = False, rng=None, **params):
    """Apply a single named effect to a frame."""
    fn, defaults = get_effect(effect_name)
    entry = EFFECTS[effect_name]
    merged = {**defaults, **params}
    if entry.get("mode"):
        merged["monochrome"] = monochrome
    if entry.get("random"):
        merged["rng"] = rng if rng is not None else default_rng()
    return fn(frame, **merged)


def apply_film_stack(frame: np.ndarray, monochrome: bool = False, rng=None) -> np.ndarray:
    """Run the full instant-film chain over a frame.

    Args:
        frame: (H, W, 4) uint8 RGBA array. Not modified.
        monochrome: Grayscale grade; also drops the paper tint.
        rng: Random source for grain, scratches and light leak. Defaults to
             the shared unseeded source.

    Returns:
        Styled (H, W, 4) uint8 frame of the same size.
    """
    if rng is None:
        rng = default_rng()
    for name in FILM_STACK:
        if monochrome and EFFECTS[name].get("skip_monochrome"):
            continue
        frame = apply_effect(frame, name, monochrome=monochrome, rng=rng)
    return frame
