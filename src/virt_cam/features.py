"""Nested sub-feature settings persisted alongside each camera.

The blocks are carried through load and save without being interpreted by
the camera settings, apart from ``ModmapExtensions.auto_opaque_walls`` which
feeds the culling mask. Keys written by other versions are kept in ``extra``
and written back verbatim.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, ClassVar


@dataclass(slots=True)
class FeatureBlock:
    # (document key, attribute name, value kind)
    FIELDS: ClassVar[tuple[tuple[str, str, str], ...]] = ()

    extra: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = dict(self.extra)
        for key, attr, _kind in self.FIELDS:
            payload[key] = getattr(self, attr)
        return payload


@dataclass(slots=True)
class FPSLimiter(FeatureBlock):
    """Frame rate cap for the camera; ``0`` renders every frame."""

    FIELDS: ClassVar[tuple[tuple[str, str, str], ...]] = (
        ("fpsLimit", "fps_limit", "int"),
    )

    fps_limit: int = 0


@dataclass(slots=True)
class SmoothFollow(FeatureBlock):
    """Smoothing applied when following the player's head."""

    FIELDS: ClassVar[tuple[tuple[str, str, str], ...]] = (
        ("position", "position", "float"),
        ("rotation", "rotation", "float"),
        ("forceUpright", "force_upright", "bool"),
        ("followReplayPosition", "follow_replay_position", "bool"),
    )

    position: float = 10.0
    rotation: float = 4.0
    force_upright: bool = False
    follow_replay_position: bool = True


@dataclass(slots=True)
class ModmapExtensions(FeatureBlock):
    """Behaviour tweaks for custom maps."""

    FIELDS: ClassVar[tuple[tuple[str, str, str], ...]] = (
        ("moveWithMap", "move_with_map", "bool"),
        ("autoOpaqueWalls", "auto_opaque_walls", "bool"),
        ("autoHideHUD", "auto_hide_hud", "bool"),
    )

    move_with_map: bool = True
    auto_opaque_walls: bool = False
    auto_hide_hud: bool = False


@dataclass(slots=True)
class Follow360(FeatureBlock):
    """Rotation following for 360 degree levels."""

    FIELDS: ClassVar[tuple[tuple[str, str, str], ...]] = (
        ("enabled", "enabled", "bool"),
        ("smoothing", "smoothing", "float"),
    )

    enabled: bool = True
    smoothing: float = 10.0


__all__ = [
    "FPSLimiter",
    "FeatureBlock",
    "Follow360",
    "ModmapExtensions",
    "SmoothFollow",
]
