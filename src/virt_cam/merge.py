"""Tolerant overlay of persisted camera documents onto in-memory state.

Each field is extracted independently: a value of the wrong shape is
skipped and reported while the remaining fields are still applied, so old
or hand-edited files never prevent a camera from loading.
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Mapping, Sequence, TypeVar

from .defaults import clamp_anti_aliasing, validate_fov, validate_render_scale
from .features import FeatureBlock
from .state import CameraState, CameraType, Vector3, ViewRect, WallVisibility

logger = logging.getLogger(__name__)

E = TypeVar("E", bound=Enum)


@dataclass(slots=True)
class MergeReport:
    """Outcome of overlaying one document."""

    applied: list[str] = field(default_factory=list)
    skipped: dict[str, str] = field(default_factory=dict)
    ignored: list[str] = field(default_factory=list)

    @property
    def clean(self) -> bool:
        return not self.skipped

    def to_dict(self) -> dict[str, object]:
        return {
            "applied": list(self.applied),
            "skipped": dict(self.skipped),
            "ignored": list(self.ignored),
        }


# --------------------------------------------------------------------------
# Value parsers. Each raises ValueError when the value has the wrong shape.
# --------------------------------------------------------------------------


def parse_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    raise ValueError(f"expected a boolean, got {type(value).__name__}")


def parse_float(value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"expected a number, got {type(value).__name__}")
    try:
        number = float(value)
    except OverflowError as exc:
        raise ValueError("number is too large") from exc
    if not math.isfinite(number):
        raise ValueError("expected a finite number")
    return number


def parse_int(value: Any) -> int:
    if isinstance(value, bool):
        raise ValueError("expected an integer, got bool")
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    raise ValueError(f"expected an integer, got {value!r}")


def parse_enum(enum_type: type[E], value: Any) -> E:
    if not isinstance(value, str):
        raise ValueError(f"expected a {enum_type.__name__} name, got {type(value).__name__}")
    for member in enum_type:
        if member.value == value:
            return member
    raise ValueError(f"unknown {enum_type.__name__} {value!r}")


def parse_vector3(value: Any) -> Vector3:
    if isinstance(value, Mapping):
        if not all(axis in value for axis in ("x", "y", "z")):
            raise ValueError("vector objects must include 'x', 'y' and 'z'")
        items = [value["x"], value["y"], value["z"]]
    elif isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray)):
        items = list(value)
        if len(items) != 3:
            raise ValueError("vectors must contain three values")
    else:
        raise ValueError("unsupported vector value")
    return Vector3(*(parse_float(item) for item in items))


def parse_view_rect(value: Any) -> ViewRect:
    if isinstance(value, Mapping):
        keys = ("x", "y", "width", "height")
        if not all(key in value for key in keys):
            raise ValueError("view rectangles must include 'x', 'y', 'width' and 'height'")
        items = [value[key] for key in keys]
    elif isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray)):
        items = list(value)
        if len(items) != 4:
            raise ValueError("view rectangles must contain four values")
    else:
        raise ValueError("unsupported view rectangle value")
    return ViewRect(*(parse_float(item) for item in items))


_KIND_PARSERS: dict[str, Callable[[Any], Any]] = {
    "bool": parse_bool,
    "int": parse_int,
    "float": parse_float,
}


# --------------------------------------------------------------------------
# Field tables
# --------------------------------------------------------------------------

_TOP_LEVEL_FIELDS: tuple[tuple[str, str, Callable[[Any], Any]], ...] = (
    ("type", "type", lambda value: parse_enum(CameraType, value)),
    ("showWorldCam", "show_world_cam", parse_bool),
    ("FOV", "fov", lambda value: validate_fov(parse_float(value))),
    ("layer", "layer", parse_int),
    ("antiAliasing", "anti_aliasing", lambda value: clamp_anti_aliasing(parse_int(value))),
    ("renderScale", "render_scale", lambda value: validate_render_scale(parse_float(value))),
    ("viewRect", "view_rect", parse_view_rect),
    ("targetPos", "target_pos", parse_vector3),
    ("targetRot", "target_rot", parse_vector3),
)

_VISIBILITY_FIELDS: tuple[tuple[str, str, Callable[[Any], Any]], ...] = (
    ("Walls", "walls", lambda value: parse_enum(WallVisibility, value)),
    ("Debris", "debris", parse_bool),
    ("UI", "ui", parse_bool),
    ("Avatar", "avatar", parse_bool),
    ("Floor", "floor", parse_bool),
    ("Notes", "notes", parse_bool),
)

VISIBILITY_KEY = "visibleObjects"

# Document key -> CameraState attribute holding the block.
FEATURE_BLOCKS: tuple[tuple[str, str], ...] = (
    ("FPSLimiter", "fps_limiter"),
    ("Smoothfollow", "smooth_follow"),
    ("ModmapExtensions", "modmap_extensions"),
    ("Follow360", "follow_360"),
)


def try_extract(
    document: Mapping[str, Any],
    key: str,
    parser: Callable[[Any], Any],
    report: MergeReport,
    *,
    path: str | None = None,
) -> tuple[bool, Any]:
    """Parse ``document[key]`` and report the outcome.

    Returns ``(True, value)`` on success and ``(False, None)`` when the key
    is absent, ``null`` or malformed.
    """

    label = path or key
    if key not in document:
        return False, None
    raw = document[key]
    if raw is None:
        return False, None
    try:
        value = parser(raw)
    except (TypeError, ValueError) as exc:
        report.skipped[label] = str(exc)
        logger.warning("Ignoring camera setting %s: %s", label, exc)
        return False, None
    report.applied.append(label)
    return True, value


def _overlay_fields(
    target: object,
    document: Mapping[str, Any],
    table: Sequence[tuple[str, str, Callable[[Any], Any]]],
    report: MergeReport,
    prefix: str = "",
) -> None:
    for key, attr, parser in table:
        found, value = try_extract(document, key, parser, report, path=f"{prefix}{key}")
        if found:
            setattr(target, attr, value)


def overlay_feature_block(
    block: FeatureBlock, document: Any, report: MergeReport, *, path: str
) -> None:
    """Merge one nested sub-feature document into ``block``."""

    if not isinstance(document, Mapping):
        report.skipped[path] = "expected an object"
        logger.warning("Ignoring camera setting %s: expected an object", path)
        return
    table = [(key, attr, _KIND_PARSERS[kind]) for key, attr, kind in block.FIELDS]
    _overlay_fields(block, document, table, report, prefix=f"{path}.")
    known = {key for key, _attr, _kind in block.FIELDS}
    for key, value in document.items():
        if key not in known:
            block.extra[key] = value


def overlay_document(state: CameraState, document: Mapping[str, Any]) -> MergeReport:
    """Overlay ``document`` onto ``state`` field by field."""

    report = MergeReport()
    _overlay_fields(state, document, _TOP_LEVEL_FIELDS, report)

    visibility_doc = document.get(VISIBILITY_KEY)
    if isinstance(visibility_doc, Mapping):
        _overlay_fields(
            state.visibility, visibility_doc, _VISIBILITY_FIELDS, report, prefix=f"{VISIBILITY_KEY}."
        )
    elif visibility_doc is not None:
        report.skipped[VISIBILITY_KEY] = "expected an object"
        logger.warning("Ignoring camera setting %s: expected an object", VISIBILITY_KEY)

    for key, attr in FEATURE_BLOCKS:
        if document.get(key) is None:
            continue
        overlay_feature_block(getattr(state, attr), document[key], report, path=key)

    known = {key for key, _attr, _parser in _TOP_LEVEL_FIELDS}
    known.add(VISIBILITY_KEY)
    known.update(key for key, _attr in FEATURE_BLOCKS)
    report.ignored.extend(key for key in document if key not in known)
    return report


def state_to_document(state: CameraState) -> dict[str, Any]:
    """Return the persisted representation of ``state``."""

    visibility = state.visibility
    payload: dict[str, Any] = {
        "type": state.type.value,
        "showWorldCam": state.show_world_cam,
        "FOV": state.fov,
        "layer": state.layer,
        "antiAliasing": state.anti_aliasing,
        "renderScale": state.render_scale,
        "viewRect": state.view_rect.to_dict(),
        VISIBILITY_KEY: {
            "Walls": visibility.walls.value,
            "Debris": visibility.debris,
            "UI": visibility.ui,
            "Avatar": visibility.avatar,
            "Floor": visibility.floor,
            "Notes": visibility.notes,
        },
    }
    for key, attr in FEATURE_BLOCKS:
        payload[key] = getattr(state, attr).to_dict()
    payload["targetPos"] = state.target_pos.as_list()
    payload["targetRot"] = state.target_rot.as_list()
    return payload


__all__ = [
    "FEATURE_BLOCKS",
    "MergeReport",
    "VISIBILITY_KEY",
    "overlay_document",
    "overlay_feature_block",
    "parse_bool",
    "parse_enum",
    "parse_float",
    "parse_int",
    "parse_vector3",
    "parse_view_rect",
    "state_to_document",
    "try_extract",
]
