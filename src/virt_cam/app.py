"""FastAPI application exposing the virtual camera settings."""
from __future__ import annotations

import logging
import os
from pathlib import Path

from fastapi import FastAPI, HTTPException, Response
from pydantic import BaseModel, Field

from .camera import VirtualCamera
from .defaults import DEFAULT_SCREEN_SIZE, FOV_MAX
from .manager import CameraManager
from .render import BaseRenderBackend
from .state import CameraType, WallVisibility
from .store import SettingsSaveError
from .version import APP_VERSION
from .visibility import DEFAULT_BASE_CULLING_MASK

DEFAULT_CONFIG_DIR = Path("data/cameras")


class VectorPayload(BaseModel):
    x: float
    y: float
    z: float


class ViewRectPayload(BaseModel):
    x: float = 0.0
    y: float = 0.0
    width: float = Field(..., gt=0)
    height: float = Field(..., gt=0)


class VisibleObjectsPayload(BaseModel):
    walls: WallVisibility | None = None
    debris: bool | None = None
    ui: bool | None = None
    avatar: bool | None = None
    floor: bool | None = None
    notes: bool | None = None


class SettingsUpdatePayload(BaseModel):
    type: CameraType | None = None
    show_world_cam: bool | None = None
    fov: float | None = Field(default=None, gt=0, le=FOV_MAX)
    layer: int | None = None
    # Out of range values are clamped by the camera settings.
    anti_aliasing: int | None = None
    render_scale: float | None = Field(default=None, gt=0)
    view_rect: ViewRectPayload | None = None
    target_pos: VectorPayload | None = None
    target_rot: VectorPayload | None = None
    visible_objects: VisibleObjectsPayload | None = None


class CameraCreatePayload(BaseModel):
    name: str = Field(..., min_length=1, max_length=64)


class ScenePayload(BaseModel):
    probably_wall_map: bool


def _parse_screen_size(value: str) -> tuple[int, int]:
    text = value.strip().lower()
    parts = text.split("x", 1)
    if len(parts) != 2:
        raise ValueError("Screen size must be formatted as <width>x<height>")
    try:
        width = int(parts[0].strip())
        height = int(parts[1].strip())
    except ValueError as exc:
        raise ValueError("Screen size values must be integers") from exc
    if width <= 0 or height <= 0:
        raise ValueError("Screen size values must be positive")
    return width, height


def create_app(
    config_dir: Path | str | None = None,
    *,
    backend: BaseRenderBackend | None = None,
    screen_size: tuple[int, int] | None = None,
    base_culling_mask: int | None = None,
) -> FastAPI:
    app = FastAPI(title="VirtCam", version=APP_VERSION)

    logger = logging.getLogger(__name__)

    if config_dir is None:
        config_dir = Path(os.getenv("VIRTCAM_CONFIG_DIR") or DEFAULT_CONFIG_DIR)

    if screen_size is None:
        screen_env = os.getenv("VIRTCAM_SCREEN_SIZE")
        screen_size = DEFAULT_SCREEN_SIZE
        if screen_env:
            try:
                screen_size = _parse_screen_size(screen_env)
            except ValueError as exc:
                logger.warning("Invalid VIRTCAM_SCREEN_SIZE value %r; ignoring (%s)", screen_env, exc)

    if base_culling_mask is None:
        mask_env = os.getenv("VIRTCAM_BASE_CULLING_MASK")
        base_culling_mask = DEFAULT_BASE_CULLING_MASK
        if mask_env:
            try:
                base_culling_mask = int(mask_env, 0)
            except ValueError:
                logger.warning("Invalid VIRTCAM_BASE_CULLING_MASK value %r; ignoring", mask_env)

    manager = CameraManager(
        config_dir,
        backend=backend,
        screen_size=screen_size,
        base_culling_mask=base_culling_mask,
    )
    app.state.camera_manager = manager

    def _get_camera(name: str) -> VirtualCamera:
        camera = manager.get(name)
        if camera is None:
            raise HTTPException(status_code=404, detail=f"Camera {name!r} not found")
        return camera

    def _save(camera: VirtualCamera) -> None:
        try:
            camera.settings.save()
        except SettingsSaveError as exc:
            logger.exception("Failed to save settings for camera %s", camera.name)
            raise HTTPException(status_code=500, detail=str(exc)) from exc

    @app.on_event("startup")
    async def startup() -> None:
        loaded = manager.load_all()
        logger.info(
            "Loaded %d camera(s) from %s: %s",
            len(loaded),
            manager.config_dir,
            ", ".join(camera.name for camera in loaded) or "none",
        )

    @app.on_event("shutdown")
    async def shutdown() -> None:  # pragma: no cover - framework hook
        for camera in manager:
            camera.close()
        logger.info("VirtCam application shutting down")

    @app.get("/api/cameras")
    async def list_cameras() -> dict[str, object]:
        results = [camera.summary() for camera in manager]
        return {"count": len(results), "results": results}

    @app.post("/api/cameras", status_code=201)
    async def create_camera(payload: CameraCreatePayload) -> dict[str, object]:
        try:
            camera = manager.add_camera(payload.name)
        except ValueError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        except KeyError as exc:
            raise HTTPException(status_code=409, detail=f"Camera {payload.name!r} already exists") from exc
        return camera.settings.describe()

    @app.get("/api/cameras/{name}")
    async def get_camera(name: str) -> dict[str, object]:
        return _get_camera(name).settings.describe()

    @app.patch("/api/cameras/{name}")
    async def update_camera(name: str, payload: SettingsUpdatePayload) -> dict[str, object]:
        camera = _get_camera(name)
        data = payload.model_dump(exclude_none=True)
        if not data:
            raise HTTPException(status_code=400, detail="No camera settings provided")
        try:
            camera.settings.update(data)
        except ValueError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        _save(camera)
        return camera.settings.describe()

    @app.post("/api/cameras/{name}/save")
    async def save_camera(name: str) -> dict[str, object]:
        camera = _get_camera(name)
        _save(camera)
        return {"name": camera.name, "path": str(camera.settings.path), "saved": True}

    @app.post("/api/cameras/{name}/reload")
    async def reload_camera(name: str) -> dict[str, object]:
        camera = _get_camera(name)
        result = camera.settings.load()
        response = camera.settings.describe()
        response["load"] = result.to_dict()
        return response

    @app.delete("/api/cameras/{name}", status_code=204)
    async def delete_camera(name: str) -> Response:
        _get_camera(name)
        manager.remove_camera(name)
        return Response(status_code=204)

    @app.get("/api/scene")
    async def get_scene() -> dict[str, object]:
        return {"probably_wall_map": manager.probably_wall_map}

    @app.post("/api/scene")
    async def update_scene(payload: ScenePayload) -> dict[str, object]:
        changed = manager.set_probably_wall_map(payload.probably_wall_map)
        return {"probably_wall_map": manager.probably_wall_map, "updated": changed}

    return app


__all__ = ["create_app", "SettingsUpdatePayload", "VectorPayload", "ViewRectPayload"]
