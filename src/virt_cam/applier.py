"""Pushes camera settings onto the live render camera.

Every settings mutation ends up in :meth:`CameraStateApplier.run`, which
executes the requested steps in a fixed order. The transform must be in
place before the world camera and culling mask are evaluated, and the
viewport is reconciled last because it may reallocate the render target.
"""
from __future__ import annotations

import logging
from enum import IntEnum
from typing import TYPE_CHECKING, Callable, Iterable

from .state import CameraState, CameraType
from .visibility import compute_culling_mask

if TYPE_CHECKING:  # pragma: no cover - typing only
    from .camera import VirtualCamera

logger = logging.getLogger(__name__)


class ReconcileStep(IntEnum):
    """Side effects of a settings change, in the order they must run."""

    TRANSFORM = 0
    WORLD_CAM = 1
    CULLING_MASK = 2
    PROJECTION = 3
    VIEWPORT = 4


ALL_STEPS: tuple[ReconcileStep, ...] = tuple(ReconcileStep)


class CameraStateApplier:
    """Applies :class:`CameraState` fields to a :class:`VirtualCamera`."""

    def __init__(self, camera: "VirtualCamera", state: CameraState) -> None:
        self._camera = camera
        self._state = state
        self._handlers: dict[ReconcileStep, Callable[[], bool]] = {
            ReconcileStep.TRANSFORM: self.apply_transform,
            ReconcileStep.WORLD_CAM: self.activate_world_cam,
            ReconcileStep.CULLING_MASK: self.recompute_culling_mask,
            ReconcileStep.PROJECTION: self.apply_projection,
            ReconcileStep.VIEWPORT: self.reconcile_viewport,
        }

    def run(self, steps: Iterable[ReconcileStep]) -> list[ReconcileStep]:
        """Run ``steps`` in canonical order and return those that changed state."""

        changed: list[ReconcileStep] = []
        for step in sorted(set(steps)):
            if self._handlers[step]():
                changed.append(step)
        if changed:
            logger.debug(
                "Camera %s reconciled: %s",
                self._camera.name,
                ", ".join(step.name.lower() for step in changed),
            )
        return changed

    def apply_all(self) -> list[ReconcileStep]:
        return self.run(ALL_STEPS)

    def apply_transform(self) -> bool:
        if self._state.type is not CameraType.POSITIONABLE:
            return False
        live = self._camera.render_camera
        live.position = self._state.target_pos
        live.euler_angles = self._state.target_rot
        return True

    def activate_world_cam(self) -> bool:
        return self._camera.activate_world_cam_if_necessary()

    def compute_culling_mask(self) -> int:
        return compute_culling_mask(
            self._state.visibility,
            self._state.type,
            base_mask=self._camera.base_culling_mask,
            auto_opaque_walls=self._state.modmap_extensions.auto_opaque_walls,
            probably_wall_map=self._camera.probably_wall_map,
        )

    def recompute_culling_mask(self) -> bool:
        mask = self.compute_culling_mask()
        live = self._camera.render_camera
        if live.culling_mask == mask:
            return False
        live.culling_mask = mask
        return True

    def apply_projection(self) -> bool:
        live = self._camera.render_camera
        changed = False
        if live.field_of_view != self._state.fov:
            live.field_of_view = self._state.fov
            changed = True
        if live.depth != self._state.layer:
            live.depth = self._state.layer
            self._camera.on_layer_changed()
            changed = True
        return changed

    def reconcile_viewport(self) -> bool:
        live = self._camera.render_camera
        aspect = self._state.view_rect.aspect
        changed = live.aspect != aspect
        live.aspect = aspect
        return self._camera.update_render_texture() or changed


__all__ = ["ALL_STEPS", "CameraStateApplier", "ReconcileStep"]
