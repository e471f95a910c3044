"""Rendering backend abstractions used by virtual cameras."""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass

from .state import Vector3
from .visibility import DEFAULT_BASE_CULLING_MASK

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class RenderTargetSpec:
    """Parameters of the texture a camera renders into."""

    width: int
    height: int
    anti_aliasing: int = 1
    render_scale: float = 1.0

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ValueError("Render target dimensions must be positive integers")

    @property
    def samples(self) -> int:
        # A value of 0 disables multisampling; backends still need one sample.
        return max(1, int(self.anti_aliasing))

    def to_dict(self) -> dict[str, int | float]:
        return {
            "width": self.width,
            "height": self.height,
            "anti_aliasing": self.anti_aliasing,
            "render_scale": self.render_scale,
        }


class RenderCamera:
    """Live camera state as seen by the renderer.

    Backends either subclass this or mirror writes to their own camera
    objects. All attributes are plain values written by the settings layer.
    """

    def __init__(self) -> None:
        self.position = Vector3()
        self.euler_angles = Vector3()
        self.field_of_view = 60.0
        self.depth = 0
        self.aspect = 16 / 9
        self.culling_mask = DEFAULT_BASE_CULLING_MASK


class BaseRenderBackend(ABC):
    """Receives render target and compositing requests from cameras."""

    def create_camera(self, name: str) -> RenderCamera:
        return RenderCamera()

    @abstractmethod
    def allocate_render_target(self, name: str, spec: RenderTargetSpec) -> None:  # pragma: no cover - interface only
        raise NotImplementedError

    @abstractmethod
    def set_world_cam_active(self, name: str, active: bool) -> None:  # pragma: no cover - interface only
        raise NotImplementedError

    @abstractmethod
    def set_composite_order(self, names: list[str]) -> None:  # pragma: no cover - interface only
        raise NotImplementedError

    def release(self, name: str) -> None:  # pragma: no cover - optional override
        return None


class HeadlessRenderBackend(BaseRenderBackend):
    """Backend that only records the requested render state."""

    def __init__(self) -> None:
        self.render_targets: dict[str, RenderTargetSpec] = {}
        self.world_cams: dict[str, bool] = {}
        self.composite_order: list[str] = []
        self.allocations = 0

    def allocate_render_target(self, name: str, spec: RenderTargetSpec) -> None:
        self.render_targets[name] = spec
        self.allocations += 1
        logger.debug(
            "Allocated %dx%d render target for %s (aa=%d)",
            spec.width,
            spec.height,
            name,
            spec.anti_aliasing,
        )

    def set_world_cam_active(self, name: str, active: bool) -> None:
        self.world_cams[name] = bool(active)

    def set_composite_order(self, names: list[str]) -> None:
        self.composite_order = list(names)

    def release(self, name: str) -> None:
        self.render_targets.pop(name, None)
        self.world_cams.pop(name, None)
        self.composite_order = [item for item in self.composite_order if item != name]


__all__ = [
    "BaseRenderBackend",
    "HeadlessRenderBackend",
    "RenderCamera",
    "RenderTargetSpec",
]
