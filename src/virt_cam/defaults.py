"""Fallback values used whenever persisted camera data is absent or invalid."""
from __future__ import annotations

import math

DEFAULT_CAMERA_TYPE = "Attached"
DEFAULT_SHOW_WORLD_CAM = True
DEFAULT_FOV = 90.0
# Baseline before a document is overlaid; first-run cameras derive their layer
# from their siblings instead.
DEFAULT_LAYER = 0
FIRST_CAMERA_LAYER = -1000
DEFAULT_ANTI_ALIASING = 1
DEFAULT_RENDER_SCALE = 1.0
DEFAULT_TARGET_POS = (0.0, 1.5, -1.5)
DEFAULT_TARGET_ROT = (3.0, 0.0, 0.0)
DEFAULT_SCREEN_SIZE = (1920, 1080)

DEFAULT_WALLS = "Visible"
DEFAULT_DEBRIS = True
DEFAULT_UI = True
DEFAULT_AVATAR = True
DEFAULT_FLOOR = True
DEFAULT_NOTES = True

ANTI_ALIASING_MIN = 0
ANTI_ALIASING_MAX = 8
RENDER_SCALE_MAX = 3.0
FOV_MAX = 179.0


def validate_fov(value: float) -> float:
    try:
        fov = float(value)
    except (TypeError, ValueError, OverflowError) as exc:
        raise ValueError("Field of view must be numeric") from exc
    if not (0.0 < fov <= FOV_MAX):
        raise ValueError(f"Field of view must be greater than 0 and at most {FOV_MAX:g} degrees")
    return fov


def clamp_anti_aliasing(value: int) -> int:
    return min(max(int(value), ANTI_ALIASING_MIN), ANTI_ALIASING_MAX)


def clamp_render_scale(value: float) -> float:
    return min(float(value), RENDER_SCALE_MAX)


def validate_render_scale(value: float) -> float:
    """Return ``value`` clamped to the maximum; it must be positive and finite."""

    try:
        scale = float(value)
    except (TypeError, ValueError, OverflowError) as exc:
        raise ValueError("Render scale must be numeric") from exc
    if not math.isfinite(scale) or scale <= 0:
        raise ValueError("Render scale must be a positive finite value")
    return clamp_render_scale(scale)


def derive_first_layer(sibling_layers: list[int] | tuple[int, ...]) -> int:
    """Return the layer for a camera created without a persisted file.

    New cameras are placed underneath every existing sibling.
    """

    if not sibling_layers:
        return FIRST_CAMERA_LAYER
    return min(sibling_layers) - 1


__all__ = [
    "ANTI_ALIASING_MAX",
    "ANTI_ALIASING_MIN",
    "DEFAULT_ANTI_ALIASING",
    "DEFAULT_AVATAR",
    "DEFAULT_CAMERA_TYPE",
    "DEFAULT_DEBRIS",
    "DEFAULT_FLOOR",
    "DEFAULT_FOV",
    "DEFAULT_LAYER",
    "DEFAULT_NOTES",
    "DEFAULT_RENDER_SCALE",
    "DEFAULT_SCREEN_SIZE",
    "DEFAULT_SHOW_WORLD_CAM",
    "DEFAULT_TARGET_POS",
    "DEFAULT_TARGET_ROT",
    "DEFAULT_UI",
    "DEFAULT_WALLS",
    "FIRST_CAMERA_LAYER",
    "FOV_MAX",
    "RENDER_SCALE_MAX",
    "clamp_anti_aliasing",
    "clamp_render_scale",
    "derive_first_layer",
    "validate_fov",
    "validate_render_scale",
]
