"""Plain data structures describing a virtual camera's configuration."""
from __future__ import annotations

import math
from dataclasses import dataclass, field, fields
from enum import Enum

from . import defaults
from .features import FPSLimiter, Follow360, ModmapExtensions, SmoothFollow


class CameraType(str, Enum):
    """How the camera is placed in the scene."""

    FIRST_PERSON = "FirstPerson"
    # Parenting to arbitrary scene objects; mostly handled like Positionable.
    ATTACHED = "Attached"
    POSITIONABLE = "Positionable"


class WallVisibility(str, Enum):
    """Rendering mode for obstacle walls."""

    VISIBLE = "Visible"
    TRANSPARENT = "Transparent"
    HIDDEN = "Hidden"


@dataclass(frozen=True, slots=True)
class Vector3:
    """Simple 3D vector used for camera position and Euler rotation."""

    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    def __post_init__(self) -> None:
        for name in ("x", "y", "z"):
            try:
                value = float(getattr(self, name))
            except (TypeError, ValueError) as exc:
                raise ValueError("Vector components must be numeric") from exc
            if not math.isfinite(value):
                raise ValueError("Vector components must be finite")
            object.__setattr__(self, name, value)

    def as_list(self) -> list[float]:
        return [self.x, self.y, self.z]


@dataclass(frozen=True, slots=True)
class ViewRect:
    """Screen-space rectangle, in output pixels, the camera renders into."""

    x: float
    y: float
    width: float
    height: float

    def __post_init__(self) -> None:
        for name in ("x", "y", "width", "height"):
            try:
                value = float(getattr(self, name))
            except (TypeError, ValueError) as exc:
                raise ValueError("View rectangle values must be numeric") from exc
            if not math.isfinite(value):
                raise ValueError("View rectangle values must be finite")
            object.__setattr__(self, name, value)
        if self.width <= 0 or self.height <= 0:
            raise ValueError("View rectangle width and height must be positive")

    @classmethod
    def full_screen(cls, screen_size: tuple[int, int]) -> "ViewRect":
        width, height = screen_size
        return cls(0.0, 0.0, width, height)

    @property
    def aspect(self) -> float:
        return self.width / self.height

    def to_dict(self) -> dict[str, float]:
        return {
            "x": self.x,
            "y": self.y,
            "width": self.width,
            "height": self.height,
        }


@dataclass(slots=True)
class VisibilityPreferences:
    """Which categories of scene content the camera should render."""

    walls: WallVisibility = WallVisibility(defaults.DEFAULT_WALLS)
    debris: bool = defaults.DEFAULT_DEBRIS
    ui: bool = defaults.DEFAULT_UI
    avatar: bool = defaults.DEFAULT_AVATAR
    floor: bool = defaults.DEFAULT_FLOOR
    notes: bool = defaults.DEFAULT_NOTES


@dataclass(slots=True)
class CameraState:
    """Every configurable field of one camera, with no side effects attached."""

    type: CameraType = CameraType(defaults.DEFAULT_CAMERA_TYPE)
    show_world_cam: bool = defaults.DEFAULT_SHOW_WORLD_CAM
    fov: float = defaults.DEFAULT_FOV
    layer: int = defaults.DEFAULT_LAYER
    anti_aliasing: int = defaults.DEFAULT_ANTI_ALIASING
    render_scale: float = defaults.DEFAULT_RENDER_SCALE
    view_rect: ViewRect = field(
        default_factory=lambda: ViewRect.full_screen(defaults.DEFAULT_SCREEN_SIZE)
    )
    visibility: VisibilityPreferences = field(default_factory=VisibilityPreferences)
    target_pos: Vector3 = field(default_factory=lambda: Vector3(*defaults.DEFAULT_TARGET_POS))
    target_rot: Vector3 = field(default_factory=lambda: Vector3(*defaults.DEFAULT_TARGET_ROT))
    fps_limiter: FPSLimiter = field(default_factory=FPSLimiter)
    smooth_follow: SmoothFollow = field(default_factory=SmoothFollow)
    modmap_extensions: ModmapExtensions = field(default_factory=ModmapExtensions)
    follow_360: Follow360 = field(default_factory=Follow360)

    def reset(self, screen_size: tuple[int, int] = defaults.DEFAULT_SCREEN_SIZE) -> None:
        """Restore every field to its default, in place.

        The ``visibility`` instance is kept so views bound to it stay valid.
        """

        baseline = CameraState(view_rect=ViewRect.full_screen(screen_size))
        for item in fields(CameraState):
            if item.name == "visibility":
                continue
            setattr(self, item.name, getattr(baseline, item.name))
        for item in fields(VisibilityPreferences):
            setattr(self.visibility, item.name, getattr(baseline.visibility, item.name))


__all__ = [
    "CameraState",
    "CameraType",
    "Vector3",
    "ViewRect",
    "VisibilityPreferences",
    "WallVisibility",
]
