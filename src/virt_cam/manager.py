"""Registry of the virtual cameras that are currently alive."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterator

from .camera import VirtualCamera, validate_camera_name
from .defaults import DEFAULT_SCREEN_SIZE
from .render import BaseRenderBackend, HeadlessRenderBackend
from .visibility import DEFAULT_BASE_CULLING_MASK

logger = logging.getLogger(__name__)

DEFAULT_CAMERA_NAME = "Main"


class CameraManager:
    """Creates, loads and orders the virtual cameras of one output."""

    def __init__(
        self,
        config_dir: Path | str,
        *,
        backend: BaseRenderBackend | None = None,
        screen_size: tuple[int, int] = DEFAULT_SCREEN_SIZE,
        base_culling_mask: int = DEFAULT_BASE_CULLING_MASK,
    ) -> None:
        width, height = screen_size
        if width <= 0 or height <= 0:
            raise ValueError("Screen size must be positive")
        self._config_dir = Path(config_dir)
        self.backend = backend if backend is not None else HeadlessRenderBackend()
        self.screen_size = (int(width), int(height))
        self.base_culling_mask = int(base_culling_mask)
        self._probably_wall_map = False
        self.cameras: dict[str, VirtualCamera] = {}

    @property
    def config_dir(self) -> Path:
        return self._config_dir

    def __iter__(self) -> Iterator[VirtualCamera]:
        return iter(list(self.cameras.values()))

    def __len__(self) -> int:
        return len(self.cameras)

    def get(self, name: str) -> VirtualCamera | None:
        return self.cameras.get(name)

    # ------------------------------ lifecycle ------------------------------
    def add_camera(self, name: str, *, load_from_file: bool = True) -> VirtualCamera:
        """Load the named camera and register it.

        The camera is registered after loading so it is not counted among
        its own siblings when a first-run layer is derived.
        """

        cleaned = validate_camera_name(name)
        if cleaned in self.cameras:
            raise KeyError(f"Camera {cleaned!r} already exists")
        camera = VirtualCamera(
            cleaned,
            self._config_dir,
            manager=self,
            backend=self.backend,
            screen_size=self.screen_size,
        )
        camera.settings.load(load_from_file)
        self.cameras[cleaned] = camera
        self.apply_viewport_layers()
        logger.info("Camera %s loaded (layer %d)", cleaned, camera.settings.layer)
        return camera

    def load_all(self) -> list[VirtualCamera]:
        """Load every settings file in the config directory.

        A default camera is created when the directory holds none.
        """

        loaded: list[VirtualCamera] = []
        paths = sorted(self._config_dir.glob("*.json")) if self._config_dir.is_dir() else []
        for path in paths:
            if path.stem in self.cameras:
                continue
            try:
                loaded.append(self.add_camera(path.stem))
            except ValueError as exc:
                logger.warning("Skipping camera settings %s: %s", path, exc)
        if not self.cameras:
            loaded.append(self.add_camera(DEFAULT_CAMERA_NAME))
        return loaded

    def remove_camera(self, name: str) -> VirtualCamera:
        camera = self.cameras.pop(name)
        camera.close()
        self.apply_viewport_layers()
        logger.info("Camera %s removed", name)
        return camera

    # ------------------------------ queries --------------------------------
    def sibling_layers(self, exclude: str | None = None) -> list[int]:
        return [
            camera.settings.layer
            for camera_name, camera in self.cameras.items()
            if camera_name != exclude
        ]

    def apply_viewport_layers(self) -> list[str]:
        """Push the compositing order, lowest layer first, to the backend."""

        ordered = sorted(
            self.cameras.values(), key=lambda camera: (camera.settings.layer, camera.name)
        )
        names = [camera.name for camera in ordered]
        self.backend.set_composite_order(names)
        return names

    # ------------------------------ environment ----------------------------
    @property
    def probably_wall_map(self) -> bool:
        return self._probably_wall_map

    def set_probably_wall_map(self, value: bool) -> list[str]:
        """Update the scene hint and refresh every camera's culling mask.

        Returns the names of cameras whose mask changed.
        """

        self._probably_wall_map = bool(value)
        changed = [camera.name for camera in self if camera.settings.refresh_culling_mask()]
        if changed:
            logger.debug("Culling masks refreshed for %s", ", ".join(changed))
        return changed


__all__ = ["CameraManager", "DEFAULT_CAMERA_NAME"]
