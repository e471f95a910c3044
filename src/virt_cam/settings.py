"""Reactive per-camera settings.

:class:`CameraSettings` stores every field in a :class:`CameraState` and
turns each mutation into the matching :class:`ReconcileStep` so the live
camera never drifts from its configuration.
"""
from __future__ import annotations

import logging
from contextlib import contextmanager
from pathlib import Path
from typing import TYPE_CHECKING, Any, Callable, Iterator, Mapping

from .applier import CameraStateApplier, ReconcileStep
from .defaults import clamp_anti_aliasing, validate_fov, validate_render_scale
from .features import FPSLimiter, Follow360, ModmapExtensions, SmoothFollow
from .merge import parse_vector3, parse_view_rect, state_to_document
from .state import (
    CameraState,
    CameraType,
    Vector3,
    ViewRect,
    VisibilityPreferences,
    WallVisibility,
)
from .store import ConfigurationStore, LoadResult
from .visibility import describe_mask

if TYPE_CHECKING:  # pragma: no cover - typing only
    from .camera import VirtualCamera

logger = logging.getLogger(__name__)


def _require_bool(value: Any, name: str) -> bool:
    if not isinstance(value, bool):
        raise ValueError(f"{name} must be a boolean")
    return value


def _require_int(value: Any, name: str) -> int:
    if isinstance(value, bool):
        raise ValueError(f"{name} must be an integer")
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if not isinstance(value, int):
        raise ValueError(f"{name} must be an integer")
    return value


def _as_vector(value: Any) -> Vector3:
    return value if isinstance(value, Vector3) else parse_vector3(value)


def _as_view_rect(value: Any) -> ViewRect:
    return value if isinstance(value, ViewRect) else parse_view_rect(value)


def _as_walls(value: Any) -> WallVisibility:
    try:
        return WallVisibility(value)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"Unknown wall visibility {value!r}") from exc


def _as_camera_type(value: Any) -> CameraType:
    try:
        return CameraType(value)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"Unknown camera type {value!r}") from exc


# Conversions run by CameraSettings.update before anything is assigned.
_FIELD_COERCERS: dict[str, Callable[[Any], Any]] = {
    "type": _as_camera_type,
    "show_world_cam": lambda value: _require_bool(value, "showWorldCam"),
    "fov": validate_fov,
    "layer": lambda value: _require_int(value, "Layer"),
    "anti_aliasing": lambda value: clamp_anti_aliasing(_require_int(value, "Anti-aliasing")),
    "render_scale": validate_render_scale,
    "view_rect": _as_view_rect,
    "target_pos": _as_vector,
    "target_rot": _as_vector,
}

_VISIBILITY_COERCERS: dict[str, Callable[[Any], Any]] = {
    "walls": _as_walls,
    "debris": lambda value: _require_bool(value, "Debris"),
    "ui": lambda value: _require_bool(value, "UI"),
    "avatar": lambda value: _require_bool(value, "Avatar"),
    "floor": lambda value: _require_bool(value, "Floor"),
    "notes": lambda value: _require_bool(value, "Notes"),
}


def _flag(attr: str, label: str) -> property:
    def getter(self: "VisibleObjects") -> bool:
        return getattr(self._preferences, attr)

    def setter(self: "VisibleObjects", value: bool) -> None:
        setattr(self._preferences, attr, _require_bool(value, label))
        self._changed()

    return property(getter, setter, doc=f"Whether {label.lower()} are rendered.")


class VisibleObjects:
    """Visibility toggles of one camera.

    Writes are broadcast to subscribers; the owning settings object listens
    and recomputes the culling mask.
    """

    def __init__(self, preferences: VisibilityPreferences) -> None:
        self._preferences = preferences
        self._listeners: list[Callable[[], None]] = []

    def subscribe(self, listener: Callable[[], None]) -> None:
        self._listeners.append(listener)

    def unsubscribe(self, listener: Callable[[], None]) -> None:
        try:
            self._listeners.remove(listener)
        except ValueError:
            pass

    def _changed(self) -> None:
        for listener in list(self._listeners):
            listener()

    @property
    def walls(self) -> WallVisibility:
        return self._preferences.walls

    @walls.setter
    def walls(self, value: WallVisibility | str) -> None:
        self._preferences.walls = _as_walls(value)
        self._changed()

    debris = _flag("debris", "Debris")
    ui = _flag("ui", "UI")
    avatar = _flag("avatar", "Avatar")
    floor = _flag("floor", "Floor")
    notes = _flag("notes", "Notes")

    def to_dict(self) -> dict[str, object]:
        return {
            "walls": self.walls.value,
            "debris": self.debris,
            "ui": self.ui,
            "avatar": self.avatar,
            "floor": self.floor,
            "notes": self.notes,
        }


class CameraSettings:
    """Persisted configuration of a single :class:`VirtualCamera`."""

    def __init__(self, camera: "VirtualCamera") -> None:
        self._camera = camera
        self._state = CameraState(view_rect=ViewRect.full_screen(camera.screen_size))
        self._store = ConfigurationStore(camera.config_path)
        self._applier = CameraStateApplier(camera, self._state)
        self._visible_objects = VisibleObjects(self._state.visibility)
        self._visible_objects.subscribe(self._on_visibility_changed)
        self._pending: set[ReconcileStep] | None = None
        self.last_load: LoadResult | None = None

    # ------------------------------ persistence ----------------------------
    def load(self, load_from_file: bool = True) -> LoadResult:
        """Reset to defaults, overlay the settings file and apply everything.

        Without a settings file (or with ``load_from_file`` disabled) the
        layer is placed below the sibling cameras and the defaults are saved.
        """

        result = self._store.load(
            self._state,
            read_file=load_from_file,
            screen_size=self._camera.screen_size,
            sibling_layers=self._camera.sibling_layers,
        )
        self._applier.apply_all()
        self.last_load = result
        return result

    def save(self) -> None:
        """Write every field to the settings file.

        Raises :class:`~virt_cam.store.SettingsSaveError` on I/O failure.
        """

        self._store.save(self._state)
        logger.debug("Saved camera settings %s", self._store.path)

    # ------------------------------ reconciliation -------------------------
    def _reconcile(self, *steps: ReconcileStep) -> None:
        if self._pending is not None:
            self._pending.update(steps)
            return
        self._applier.run(steps)

    @contextmanager
    def batch(self) -> Iterator["CameraSettings"]:
        """Defer side effects until the block exits, then apply them once."""

        if self._pending is not None:
            yield self
            return
        self._pending = set()
        try:
            yield self
        finally:
            steps, self._pending = self._pending, None
            self._applier.run(steps)

    def _on_visibility_changed(self) -> None:
        self._reconcile(ReconcileStep.CULLING_MASK)

    def refresh_culling_mask(self) -> bool:
        """Recompute the culling mask after an environment change."""

        return self._applier.recompute_culling_mask()

    # ------------------------------ properties -----------------------------
    @property
    def state(self) -> CameraState:
        return self._state

    @property
    def path(self) -> Path:
        return self._store.path

    @property
    def type(self) -> CameraType:
        return self._state.type

    @type.setter
    def type(self, value: CameraType | str) -> None:
        self._state.type = _as_camera_type(value)
        self._reconcile(
            ReconcileStep.TRANSFORM,
            ReconcileStep.WORLD_CAM,
            ReconcileStep.CULLING_MASK,
        )

    @property
    def show_world_cam(self) -> bool:
        return self._state.show_world_cam

    @show_world_cam.setter
    def show_world_cam(self, value: bool) -> None:
        self._state.show_world_cam = _require_bool(value, "showWorldCam")
        self._reconcile(ReconcileStep.WORLD_CAM)

    @property
    def fov(self) -> float:
        return self._state.fov

    @fov.setter
    def fov(self, value: float) -> None:
        self._state.fov = validate_fov(value)
        self._reconcile(ReconcileStep.PROJECTION)

    @property
    def layer(self) -> int:
        return self._state.layer

    @layer.setter
    def layer(self, value: int) -> None:
        self._state.layer = _require_int(value, "Layer")
        self._reconcile(ReconcileStep.PROJECTION)

    @property
    def anti_aliasing(self) -> int:
        return self._state.anti_aliasing

    @anti_aliasing.setter
    def anti_aliasing(self, value: int) -> None:
        self._state.anti_aliasing = clamp_anti_aliasing(_require_int(value, "Anti-aliasing"))
        self._reconcile(ReconcileStep.VIEWPORT)

    @property
    def render_scale(self) -> float:
        return self._state.render_scale

    @render_scale.setter
    def render_scale(self, value: float) -> None:
        scale = validate_render_scale(value)
        if scale == self._state.render_scale:
            return
        self._state.render_scale = scale
        self._reconcile(ReconcileStep.VIEWPORT)

    @property
    def view_rect(self) -> ViewRect:
        return self._state.view_rect

    @view_rect.setter
    def view_rect(self, value: ViewRect | Mapping[str, float] | list[float]) -> None:
        self._state.view_rect = _as_view_rect(value)
        self._reconcile(ReconcileStep.VIEWPORT)

    @property
    def aspect(self) -> float:
        return self._state.view_rect.aspect

    @property
    def target_pos(self) -> Vector3:
        return self._state.target_pos

    @target_pos.setter
    def target_pos(self, value: Vector3 | Mapping[str, float] | list[float]) -> None:
        self._state.target_pos = _as_vector(value)
        self._reconcile(ReconcileStep.TRANSFORM)

    @property
    def target_rot(self) -> Vector3:
        return self._state.target_rot

    @target_rot.setter
    def target_rot(self, value: Vector3 | Mapping[str, float] | list[float]) -> None:
        self._state.target_rot = _as_vector(value)
        self._reconcile(ReconcileStep.TRANSFORM)

    @property
    def visible_objects(self) -> VisibleObjects:
        return self._visible_objects

    @property
    def fps_limiter(self) -> FPSLimiter:
        return self._state.fps_limiter

    @property
    def smooth_follow(self) -> SmoothFollow:
        return self._state.smooth_follow

    @property
    def modmap_extensions(self) -> ModmapExtensions:
        return self._state.modmap_extensions

    @property
    def follow_360(self) -> Follow360:
        return self._state.follow_360

    @property
    def culling_mask(self) -> int:
        return self._camera.render_camera.culling_mask

    # ------------------------------ bulk access ----------------------------
    def update(self, changes: Mapping[str, Any]) -> None:
        """Assign several fields at once, reconciling the camera a single time.

        Every value is validated before the first assignment, so a rejected
        update leaves the settings and the live camera untouched.
        """

        unknown = set(changes) - set(_FIELD_COERCERS) - {"visible_objects"}
        if unknown:
            raise ValueError(f"Unknown camera settings: {', '.join(sorted(unknown))}")
        visibility = changes.get("visible_objects")
        if visibility is None:
            visibility = {}
        elif not isinstance(visibility, Mapping):
            raise ValueError("visible_objects must be a mapping")
        unknown = set(visibility) - set(_VISIBILITY_COERCERS)
        if unknown:
            raise ValueError(f"Unknown visibility settings: {', '.join(sorted(unknown))}")

        fields = {
            name: coerce(changes[name])
            for name, coerce in _FIELD_COERCERS.items()
            if changes.get(name) is not None
        }
        flags = {
            name: coerce(visibility[name])
            for name, coerce in _VISIBILITY_COERCERS.items()
            if visibility.get(name) is not None
        }
        with self.batch():
            for name, value in fields.items():
                setattr(self, name, value)
            for name, value in flags.items():
                setattr(self._visible_objects, name, value)

    def to_dict(self) -> dict[str, Any]:
        return state_to_document(self._state)

    def describe(self) -> dict[str, Any]:
        """Return the persisted fields plus the values derived from them."""

        payload = self.to_dict()
        mask = self.culling_mask
        target = self._camera.render_target
        payload.update(
            {
                "name": self._camera.name,
                "aspect": self.aspect,
                "culling_mask": mask,
                "visible_layers": describe_mask(mask),
                "render_target": target.to_dict() if target is not None else None,
                "world_cam_active": bool(self._camera.world_cam_active),
            }
        )
        return payload


__all__ = ["CameraSettings", "VisibleObjects"]
