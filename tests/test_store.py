from __future__ import annotations

import json
from pathlib import Path

import pytest

from virt_cam.state import CameraState, CameraType, Vector3, ViewRect, WallVisibility
from virt_cam.store import ConfigurationStore, SettingsSaveError, read_document


def test_first_load_creates_file_below_every_camera(tmp_path: Path):
    store = ConfigurationStore(tmp_path / "Main.json")
    state = CameraState()

    result = store.load(state)

    assert result.created is True
    assert result.source == "defaults"
    assert state.layer == -1000
    document = json.loads((tmp_path / "Main.json").read_text(encoding="ascii"))
    assert document["layer"] == -1000
    assert document["FOV"] == 90.0


def test_first_load_uses_lowest_sibling_layer(tmp_path: Path):
    store = ConfigurationStore(tmp_path / "Side.json")
    state = CameraState()

    store.load(state, sibling_layers=lambda: [5, 2, 9])

    assert state.layer == 1


def test_sibling_layers_are_only_queried_without_a_file(tmp_path: Path):
    path = tmp_path / "Main.json"
    path.write_text(json.dumps({"layer": 7}), encoding="ascii")

    def fail() -> list[int]:
        raise AssertionError("registry should not be consulted")

    state = CameraState()
    ConfigurationStore(path).load(state, sibling_layers=fail)

    assert state.layer == 7


def test_save_and_load_round_trip(tmp_path: Path):
    store = ConfigurationStore(tmp_path / "nested" / "Cam.json")
    saved = CameraState()
    saved.type = CameraType.POSITIONABLE
    saved.fov = 72.5
    saved.layer = 3
    saved.anti_aliasing = 4
    saved.render_scale = 1.5
    saved.view_rect = ViewRect(10, 20, 640, 360)
    saved.target_pos = Vector3(1, 2, 3)
    saved.visibility.walls = WallVisibility.TRANSPARENT
    saved.visibility.notes = False
    saved.follow_360.enabled = False

    store.save(saved)
    loaded = CameraState()
    result = store.load(loaded)

    assert result.source == "file"
    assert result.report.clean
    assert loaded == saved


def test_load_resets_fields_missing_from_the_file(tmp_path: Path):
    path = tmp_path / "Cam.json"
    path.write_text(json.dumps({"layer": 2}), encoding="ascii")
    state = CameraState()
    state.fov = 40.0
    state.visibility.debris = False
    preferences = state.visibility

    ConfigurationStore(path).load(state, screen_size=(800, 600))

    assert state.fov == 90.0
    assert state.layer == 2
    assert state.visibility is preferences
    assert state.visibility.debris is True
    assert state.view_rect == ViewRect(0, 0, 800, 600)


def test_malformed_file_keeps_defaults_and_is_not_overwritten(tmp_path: Path):
    path = tmp_path / "Cam.json"
    path.write_text("{not json", encoding="ascii")
    state = CameraState()

    result = ConfigurationStore(path).load(state)

    assert result.error is not None
    assert result.created is False
    assert state == CameraState()
    assert path.read_text(encoding="ascii") == "{not json"


def test_non_object_document_is_rejected(tmp_path: Path):
    path = tmp_path / "Cam.json"
    path.write_text("[1, 2, 3]", encoding="ascii")

    with pytest.raises(ValueError):
        read_document(path)


def test_skipping_the_file_overwrites_it_with_defaults(tmp_path: Path):
    path = tmp_path / "Cam.json"
    path.write_text(json.dumps({"FOV": 30, "layer": 9}), encoding="ascii")
    state = CameraState()

    result = ConfigurationStore(path).load(state, read_file=False, sibling_layers=lambda: [4])

    assert result.created is True
    assert state.fov == 90.0
    assert state.layer == 3
    assert json.loads(path.read_text(encoding="ascii"))["FOV"] == 90.0


def test_save_failure_raises(tmp_path: Path):
    blocker = tmp_path / "blocker"
    blocker.write_text("", encoding="ascii")
    store = ConfigurationStore(blocker / "Cam.json")

    with pytest.raises(SettingsSaveError):
        store.save(CameraState())


def test_first_run_save_failure_is_reported(tmp_path: Path):
    blocker = tmp_path / "blocker"
    blocker.write_text("", encoding="ascii")
    state = CameraState()

    result = ConfigurationStore(blocker / "Cam.json").load(state)

    assert result.source == "defaults"
    assert result.created is False
    assert result.error is not None
    assert state.layer == -1000


def test_number_too_large_for_a_float_is_skipped(tmp_path: Path):
    path = tmp_path / "Cam.json"
    path.write_text('{"FOV": 1' + "0" * 400 + ', "layer": 4}', encoding="ascii")
    state = CameraState()

    result = ConfigurationStore(path).load(state)

    assert result.error is None
    assert "FOV" in result.report.skipped
    assert state.fov == 90.0
    assert state.layer == 4


def test_deeply_nested_document_degrades_to_defaults(tmp_path: Path):
    path = tmp_path / "Cam.json"
    path.write_text("[" * 100000 + "]" * 100000, encoding="ascii")
    state = CameraState()

    result = ConfigurationStore(path).load(state)

    assert result.source == "file"
    assert result.error is not None
    assert state == CameraState()
