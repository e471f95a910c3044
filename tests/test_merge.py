from __future__ import annotations

import pytest

from virt_cam.merge import (
    MergeReport,
    overlay_document,
    parse_bool,
    parse_int,
    parse_vector3,
    parse_view_rect,
    state_to_document,
    try_extract,
)
from virt_cam.state import CameraState, CameraType, Vector3, ViewRect, WallVisibility


def test_valid_fields_survive_malformed_neighbours():
    state = CameraState()
    report = overlay_document(
        state,
        {
            "type": "Positionable",
            "FOV": "wide",
            "layer": 4,
            "showWorldCam": "yes",
            "targetPos": [1, 2, 3],
        },
    )

    assert state.type is CameraType.POSITIONABLE
    assert state.layer == 4
    assert state.target_pos == Vector3(1.0, 2.0, 3.0)
    assert state.fov == 90.0
    assert state.show_world_cam is True
    assert set(report.skipped) == {"FOV", "showWorldCam"}
    assert not report.clean


@pytest.mark.parametrize("fov", [0, -10, 180, 1e9])
def test_out_of_range_fov_is_skipped(fov):
    state = CameraState()
    report = overlay_document(state, {"FOV": fov})

    assert state.fov == 90.0
    assert "FOV" in report.skipped


def test_numeric_fields_are_clamped_not_rejected():
    state = CameraState()
    report = overlay_document(state, {"antiAliasing": 20, "renderScale": 5})

    assert state.anti_aliasing == 8
    assert state.render_scale == 3.0
    assert report.clean


@pytest.mark.parametrize("scale", [-2, 0])
def test_non_positive_render_scale_is_skipped(scale):
    state = CameraState()
    report = overlay_document(state, {"renderScale": scale, "antiAliasing": 2})

    assert state.render_scale == 1.0
    assert "renderScale" in report.skipped
    assert state.anti_aliasing == 2


def test_unknown_enum_value_is_skipped():
    state = CameraState()
    report = overlay_document(state, {"type": "Orbit", "visibleObjects": {"Walls": "Foggy", "UI": False}})

    assert state.type is CameraType.ATTACHED
    assert state.visibility.walls is WallVisibility.VISIBLE
    assert state.visibility.ui is False
    assert set(report.skipped) == {"type", "visibleObjects.Walls"}


def test_null_values_count_as_absent():
    state = CameraState()
    report = overlay_document(state, {"FOV": None, "layer": None})

    assert state.fov == 90.0
    assert report.applied == []
    assert report.clean


def test_visibility_block_must_be_an_object():
    state = CameraState()
    report = overlay_document(state, {"visibleObjects": ["Walls"]})

    assert report.skipped == {"visibleObjects": "expected an object"}


def test_unknown_keys_are_reported_as_ignored():
    state = CameraState()
    report = overlay_document(state, {"layer": 1, "legacyZoom": 2})

    assert report.ignored == ["legacyZoom"]
    assert report.clean


def test_feature_blocks_keep_unknown_keys():
    state = CameraState()
    overlay_document(
        state,
        {
            "Smoothfollow": {"position": 3, "limitRoll": True},
            "ModmapExtensions": {"autoOpaqueWalls": True},
            "FPSLimiter": {"fpsLimit": "fast"},
        },
    )

    assert state.smooth_follow.position == 3.0
    assert state.smooth_follow.extra == {"limitRoll": True}
    assert state.modmap_extensions.auto_opaque_walls is True
    assert state.fps_limiter.fps_limit == 0

    document = state_to_document(state)
    assert document["Smoothfollow"]["limitRoll"] is True
    assert document["Smoothfollow"]["position"] == 3.0


def test_feature_block_of_wrong_shape_is_skipped():
    state = CameraState()
    report = overlay_document(state, {"Follow360": "on"})

    assert "Follow360" in report.skipped
    assert state.follow_360.enabled is True


def test_view_rect_accepts_objects_and_lists():
    assert parse_view_rect({"x": 0, "y": 0, "width": 640, "height": 480}) == ViewRect(0, 0, 640, 480)
    assert parse_view_rect([10, 20, 30, 40]) == ViewRect(10, 20, 30, 40)
    with pytest.raises(ValueError):
        parse_view_rect([0, 0, 0, 10])
    with pytest.raises(ValueError):
        parse_view_rect("0,0,10,10")


def test_vectors_accept_objects_and_lists():
    assert parse_vector3({"x": 1, "y": 2, "z": 3}) == Vector3(1, 2, 3)
    with pytest.raises(ValueError):
        parse_vector3([1, 2])
    with pytest.raises(ValueError):
        parse_vector3([1, 2, "3"])


def test_scalar_parsers_are_strict():
    assert parse_bool(False) is False
    with pytest.raises(ValueError):
        parse_bool("true")
    with pytest.raises(ValueError):
        parse_bool(1)
    assert parse_int(3.0) == 3
    with pytest.raises(ValueError):
        parse_int(3.5)
    with pytest.raises(ValueError):
        parse_int(True)


def test_try_extract_uses_path_for_reporting():
    report = MergeReport()
    found, value = try_extract({"Floor": "no"}, "Floor", parse_bool, report, path="visibleObjects.Floor")

    assert (found, value) == (False, None)
    assert "visibleObjects.Floor" in report.skipped


def test_document_contains_every_field():
    document = state_to_document(CameraState())

    assert set(document) == {
        "type",
        "showWorldCam",
        "FOV",
        "layer",
        "antiAliasing",
        "renderScale",
        "viewRect",
        "visibleObjects",
        "FPSLimiter",
        "Smoothfollow",
        "ModmapExtensions",
        "Follow360",
        "targetPos",
        "targetRot",
    }
    assert document["type"] == "Attached"
    assert document["visibleObjects"]["Walls"] == "Visible"
    assert document["targetPos"] == [0.0, 1.5, -1.5]
