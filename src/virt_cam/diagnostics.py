"""Command-line helpers for inspecting VirtCam camera settings files."""
from __future__ import annotations

import argparse
import json
import os
import sys
from pathlib import Path
from typing import Any, Sequence, cast

from .defaults import DEFAULT_SCREEN_SIZE
from .merge import overlay_document
from .state import CameraState, ViewRect
from .store import read_document
from .version import APP_VERSION
from .visibility import DEFAULT_BASE_CULLING_MASK, compute_culling_mask, describe_mask


def _screen_size(value: str) -> tuple[int, int]:
    parts = value.lower().split("x", 1)
    try:
        width, height = (int(part) for part in parts)
    except ValueError as exc:
        raise argparse.ArgumentTypeError("expected <width>x<height>") from exc
    if width <= 0 or height <= 0:
        raise argparse.ArgumentTypeError("screen dimensions must be positive")
    return width, height


def build_parser() -> argparse.ArgumentParser:
    """Return the argument parser for the diagnostics CLI."""

    parser = argparse.ArgumentParser(
        prog="python -m virt_cam.diagnostics",
        description="VirtCam settings diagnostics",
    )
    parser.add_argument(
        "--config-dir",
        type=Path,
        default=Path(os.getenv("VIRTCAM_CONFIG_DIR") or "data/cameras"),
        help="Directory holding one <camera>.json file per camera.",
    )
    parser.add_argument(
        "--screen",
        type=_screen_size,
        default=DEFAULT_SCREEN_SIZE,
        help="Output resolution used for the default view rectangle (e.g. 1920x1080).",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Emit results as JSON for scripting.",
    )
    return parser


def inspect_settings_file(
    path: Path,
    *,
    screen_size: tuple[int, int] = DEFAULT_SCREEN_SIZE,
    base_culling_mask: int = DEFAULT_BASE_CULLING_MASK,
) -> dict[str, object]:
    """Return a read-only summary of the camera settings stored at ``path``."""

    payload: dict[str, object] = {"camera": path.stem, "path": str(path)}
    try:
        document = read_document(path)
    except (OSError, ValueError) as exc:
        payload.update({"status": "error", "error": str(exc)})
        return payload

    state = CameraState(view_rect=ViewRect.full_screen(screen_size))
    report = overlay_document(state, document)
    mask = compute_culling_mask(
        state.visibility,
        state.type,
        base_mask=base_culling_mask,
        auto_opaque_walls=state.modmap_extensions.auto_opaque_walls,
    )
    rect = state.view_rect
    payload.update(
        {
            "status": "ok" if report.clean else "warning",
            "report": report.to_dict(),
            "type": state.type.value,
            "layer": state.layer,
            "culling_mask": mask,
            "visible_layers": describe_mask(mask),
            "render_target": {
                "width": max(1, round(rect.width * state.render_scale)),
                "height": max(1, round(rect.height * state.render_scale)),
                "anti_aliasing": state.anti_aliasing,
            },
        }
    )
    return payload


def collect_diagnostics(
    config_dir: Path,
    *,
    screen_size: tuple[int, int] = DEFAULT_SCREEN_SIZE,
) -> dict[str, object]:
    """Inspect every settings file in ``config_dir``."""

    paths = sorted(config_dir.glob("*.json")) if config_dir.is_dir() else []
    return {
        "version": APP_VERSION,
        "config_dir": str(config_dir),
        "screen_size": list(screen_size),
        "cameras": [inspect_settings_file(path, screen_size=screen_size) for path in paths],
    }


def run(argv: Sequence[str] | None = None) -> int:
    """Execute the diagnostics CLI with *argv* arguments."""

    parser = build_parser()
    args = parser.parse_args(argv)

    payload = collect_diagnostics(args.config_dir, screen_size=args.screen)
    cameras = cast("list[dict[str, Any]]", payload["cameras"])
    healthy = all(entry.get("status") == "ok" for entry in cameras)

    if args.json:
        json.dump(payload, sys.stdout)
        sys.stdout.write("\n")
        return 0 if healthy else 1

    print(f"VirtCam diagnostics (version {APP_VERSION})")
    if not cameras:
        print(f"No camera settings found in {args.config_dir}.")
        return 0

    for entry in cameras:
        status = entry.get("status")
        name = entry.get("camera")
        if status == "error":
            print(f"{name}: unreadable ({entry.get('error')})")
            continue
        target = entry.get("render_target", {})
        print(
            f"{name}: {entry.get('type')}, layer {entry.get('layer')}, "
            f"mask 0x{entry.get('culling_mask'):08X}, "
            f"target {target.get('width')}x{target.get('height')}"
        )
        report = entry.get("report", {})
        for field_name, reason in report.get("skipped", {}).items():
            print(f" - skipped {field_name}: {reason}")
        ignored = report.get("ignored", [])
        if ignored:
            print(f" - ignored unknown keys: {', '.join(ignored)}")
    return 0 if healthy else 1


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point used by `python -m virt_cam.diagnostics`."""

    return run(argv)


__all__ = [
    "build_parser",
    "collect_diagnostics",
    "inspect_settings_file",
    "run",
    "main",
]


if __name__ == "__main__":  # pragma: no cover - module behaviour
    sys.exit(main())
