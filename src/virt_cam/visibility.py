"""Culling mask derivation for virtual cameras."""
from __future__ import annotations

from enum import IntEnum, IntFlag

from .state import CameraType, VisibilityPreferences, WallVisibility


class RenderLayer(IntEnum):
    """Scene layers whose visibility is controlled per camera."""

    THIRD_PERSON = 3
    UI = 5
    FIRST_PERSON = 6
    NOTES = 8
    DEBRIS = 9
    AVATAR = 10
    WALLS = 11
    FLOOR = 13
    WALL_TEXTURES = 27


class VisibilityMasks(IntFlag):
    """Culling mask bits reserved for the visibility preferences."""

    THIRD_PERSON = 1 << RenderLayer.THIRD_PERSON
    UI = 1 << RenderLayer.UI
    FIRST_PERSON = 1 << RenderLayer.FIRST_PERSON
    NOTES = 1 << RenderLayer.NOTES
    DEBRIS = 1 << RenderLayer.DEBRIS
    AVATAR = 1 << RenderLayer.AVATAR
    WALLS = 1 << RenderLayer.WALLS
    FLOOR = 1 << RenderLayer.FLOOR
    WALL_TEXTURES = 1 << RenderLayer.WALL_TEXTURES


# Every layer of a 32 bit culling mask.
DEFAULT_BASE_CULLING_MASK = 0xFFFFFFFF

_ALL_VISIBILITY_BITS = 0
for _member in VisibilityMasks:
    _ALL_VISIBILITY_BITS |= int(_member)
del _member


def compute_culling_mask(
    preferences: VisibilityPreferences,
    camera_type: CameraType,
    *,
    base_mask: int = DEFAULT_BASE_CULLING_MASK,
    auto_opaque_walls: bool = False,
    probably_wall_map: bool = False,
) -> int:
    """Return the culling mask for a camera with the given preferences.

    ``base_mask`` holds every layer the camera may render. All reserved
    visibility bits are cleared from it and then re-added according to the
    preferences. Walls are forced fully opaque when the map looks like it
    relies on walls and ``auto_opaque_walls`` is enabled.
    """

    mask = int(base_mask) & ~_ALL_VISIBILITY_BITS

    if preferences.walls is WallVisibility.VISIBLE or (auto_opaque_walls and probably_wall_map):
        mask |= VisibilityMasks.WALLS | VisibilityMasks.WALL_TEXTURES
    elif preferences.walls is WallVisibility.TRANSPARENT:
        mask |= VisibilityMasks.WALLS

    if preferences.floor:
        mask |= VisibilityMasks.FLOOR
    if preferences.notes:
        mask |= VisibilityMasks.NOTES
    if preferences.debris:
        mask |= VisibilityMasks.DEBRIS
    if preferences.ui:
        mask |= VisibilityMasks.UI
    if preferences.avatar:
        mask |= VisibilityMasks.AVATAR

    if camera_type is CameraType.FIRST_PERSON:
        mask |= VisibilityMasks.FIRST_PERSON
    else:
        mask |= VisibilityMasks.THIRD_PERSON
    return int(mask)


def describe_mask(mask: int) -> list[str]:
    """Return the names of the visibility bits set in ``mask``."""

    return [member.name for member in VisibilityMasks if mask & member]


__all__ = [
    "DEFAULT_BASE_CULLING_MASK",
    "RenderLayer",
    "VisibilityMasks",
    "compute_culling_mask",
    "describe_mask",
]
