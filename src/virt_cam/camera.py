"""Virtual camera instances."""
from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import TYPE_CHECKING

from .defaults import DEFAULT_SCREEN_SIZE
from .render import BaseRenderBackend, HeadlessRenderBackend, RenderCamera, RenderTargetSpec
from .settings import CameraSettings
from .state import CameraType
from .visibility import DEFAULT_BASE_CULLING_MASK

if TYPE_CHECKING:  # pragma: no cover - typing only
    from .manager import CameraManager

logger = logging.getLogger(__name__)

_CAMERA_NAME = re.compile(r"^[A-Za-z0-9 _-]{1,64}$")


def validate_camera_name(name: str) -> str:
    """Return ``name`` when it can be used as a settings file name."""

    if not isinstance(name, str):
        raise ValueError("Camera name must be a string")
    cleaned = name.strip()
    if not _CAMERA_NAME.match(cleaned):
        raise ValueError(
            "Camera names may only contain letters, digits, spaces, '-' and '_' "
            "(1-64 characters)"
        )
    return cleaned


class VirtualCamera:
    """One camera rendering the scene into its own target."""

    def __init__(
        self,
        name: str,
        config_dir: Path | str,
        *,
        manager: "CameraManager | None" = None,
        backend: BaseRenderBackend | None = None,
        screen_size: tuple[int, int] = DEFAULT_SCREEN_SIZE,
    ) -> None:
        self.name = validate_camera_name(name)
        self.config_path = Path(config_dir) / f"{self.name}.json"
        self._manager = manager
        self._screen_size = screen_size
        self.backend = backend if backend is not None else HeadlessRenderBackend()
        self.render_camera: RenderCamera = self.backend.create_camera(self.name)
        self.render_target: RenderTargetSpec | None = None
        self.world_cam_active: bool | None = None
        self.settings = CameraSettings(self)

    # ------------------------------ environment ----------------------------
    @property
    def screen_size(self) -> tuple[int, int]:
        if self._manager is not None:
            return self._manager.screen_size
        return self._screen_size

    @property
    def base_culling_mask(self) -> int:
        if self._manager is not None:
            return self._manager.base_culling_mask
        return DEFAULT_BASE_CULLING_MASK

    @property
    def probably_wall_map(self) -> bool:
        if self._manager is not None:
            return self._manager.probably_wall_map
        return False

    def sibling_layers(self) -> list[int]:
        if self._manager is None:
            return []
        return self._manager.sibling_layers(exclude=self.name)

    def on_layer_changed(self) -> None:
        if self._manager is not None and self.name in self._manager.cameras:
            self._manager.apply_viewport_layers()

    # ------------------------------ render state ---------------------------
    def compute_render_target(self) -> RenderTargetSpec:
        settings = self.settings
        rect = settings.view_rect
        scale = settings.render_scale
        return RenderTargetSpec(
            width=max(1, round(rect.width * scale)),
            height=max(1, round(rect.height * scale)),
            anti_aliasing=settings.anti_aliasing,
            render_scale=scale,
        )

    def update_render_texture(self) -> bool:
        """Ask the backend for a new render target when its spec changed."""

        spec = self.compute_render_target()
        if spec == self.render_target:
            return False
        self.backend.allocate_render_target(self.name, spec)
        self.render_target = spec
        return True

    def activate_world_cam_if_necessary(self) -> bool:
        settings = self.settings
        active = settings.show_world_cam and settings.type is not CameraType.FIRST_PERSON
        if active == self.world_cam_active:
            return False
        self.backend.set_world_cam_active(self.name, active)
        self.world_cam_active = active
        return True

    def close(self) -> None:
        if self.world_cam_active:
            self.backend.set_world_cam_active(self.name, False)
            self.world_cam_active = False
        self.backend.release(self.name)
        logger.debug("Closed camera %s", self.name)

    def summary(self) -> dict[str, object]:
        settings = self.settings
        return {
            "name": self.name,
            "type": settings.type.value,
            "layer": settings.layer,
            "culling_mask": settings.culling_mask,
            "world_cam_active": bool(self.world_cam_active),
        }


__all__ = ["VirtualCamera", "validate_camera_name"]
