from __future__ import annotations

import json
from pathlib import Path

import pytest

import virt_cam.diagnostics as diagnostics


def _write(path: Path, payload: object) -> None:
    path.write_text(json.dumps(payload), encoding="ascii")


def test_inspect_settings_file(tmp_path: Path):
    path = tmp_path / "Main.json"
    _write(path, {"type": "FirstPerson", "layer": 3, "renderScale": 2, "FOV": "wide"})

    payload = diagnostics.inspect_settings_file(path, screen_size=(640, 480))

    assert payload["camera"] == "Main"
    assert payload["status"] == "warning"
    assert payload["type"] == "FirstPerson"
    assert payload["layer"] == 3
    assert payload["render_target"] == {"width": 1280, "height": 960, "anti_aliasing": 1}
    assert "FIRST_PERSON" in payload["visible_layers"]
    assert "FOV" in payload["report"]["skipped"]


def test_json_output_and_exit_code(tmp_path: Path, capsys: pytest.CaptureFixture[str]):
    _write(tmp_path / "Good.json", {"layer": 1})
    (tmp_path / "Broken.json").write_text("{", encoding="ascii")

    exit_code = diagnostics.run(["--config-dir", str(tmp_path), "--json"])

    assert exit_code == 1
    payload = json.loads(capsys.readouterr().out)
    assert payload["version"] == diagnostics.APP_VERSION
    statuses = {entry["camera"]: entry["status"] for entry in payload["cameras"]}
    assert statuses == {"Broken": "error", "Good": "ok"}


def test_clean_directory_reports_success(tmp_path: Path, capsys: pytest.CaptureFixture[str]):
    _write(tmp_path / "Main.json", {"layer": -1000, "viewRect": [0, 0, 800, 600]})

    exit_code = diagnostics.run(["--config-dir", str(tmp_path), "--screen", "1024x768"])

    assert exit_code == 0
    output = capsys.readouterr().out
    assert "Main: Attached, layer -1000" in output
    assert "target 800x600" in output


def test_diagnostics_never_write(tmp_path: Path):
    path = tmp_path / "Main.json"
    path.write_text('{"layer": 2, "FOV": null}', encoding="ascii")

    diagnostics.run(["--config-dir", str(tmp_path), "--json"])

    assert path.read_text(encoding="ascii") == '{"layer": 2, "FOV": null}'
    assert sorted(item.name for item in tmp_path.iterdir()) == ["Main.json"]


def test_empty_directory(tmp_path: Path, capsys: pytest.CaptureFixture[str]):
    assert diagnostics.run(["--config-dir", str(tmp_path / "missing")]) == 0
    assert "No camera settings found" in capsys.readouterr().out


def test_invalid_screen_argument(tmp_path: Path):
    with pytest.raises(SystemExit):
        diagnostics.run(["--config-dir", str(tmp_path), "--screen", "wide"])
