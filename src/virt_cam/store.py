"""JSON file persistence for a single camera's settings."""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Iterable, Literal

from .defaults import DEFAULT_SCREEN_SIZE, derive_first_layer
from .merge import MergeReport, overlay_document, state_to_document
from .state import CameraState

logger = logging.getLogger(__name__)

# Settings files are written as plain ASCII so they stay hand-editable.
ENCODING = "ascii"


class SettingsSaveError(RuntimeError):
    """Raised when camera settings cannot be written to disk."""


@dataclass(frozen=True, slots=True)
class LoadResult:
    """Describes where a camera's settings came from."""

    path: Path
    source: Literal["file", "defaults"]
    created: bool = False
    report: MergeReport = field(default_factory=MergeReport)
    error: str | None = None

    def to_dict(self) -> dict[str, object]:
        return {
            "path": str(self.path),
            "source": self.source,
            "created": self.created,
            "report": self.report.to_dict(),
            "error": self.error,
        }


def read_document(path: Path) -> dict[str, Any]:
    """Return the JSON object stored at ``path``.

    Raises ``OSError`` when the file cannot be read and ``ValueError`` when
    it does not hold a JSON object.
    """

    text = path.read_text(encoding=ENCODING, errors="replace")
    try:
        payload = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid camera settings JSON: {exc}") from exc
    except RecursionError as exc:
        raise ValueError("Camera settings JSON is nested too deeply") from exc
    if not isinstance(payload, dict):
        raise ValueError("Camera settings file must contain a JSON object")
    return payload


class ConfigurationStore:
    """Loads and saves one camera's settings file."""

    def __init__(self, path: Path | str) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def exists(self) -> bool:
        return self._path.exists()

    def load(
        self,
        state: CameraState,
        *,
        read_file: bool = True,
        screen_size: tuple[int, int] = DEFAULT_SCREEN_SIZE,
        sibling_layers: Callable[[], Iterable[int]] | None = None,
    ) -> LoadResult:
        """Reset ``state`` to defaults and overlay the persisted document.

        When there is nothing to read the layer is derived from the sibling
        cameras returned by ``sibling_layers`` and the defaults are written
        out immediately. Never raises; problems are logged and reported in
        the returned result.
        """

        state.reset(screen_size)

        if read_file and self._path.exists():
            try:
                document = read_document(self._path)
            except (OSError, ValueError) as exc:
                logger.warning("Unable to read camera settings %s: %s", self._path, exc)
                return LoadResult(self._path, "file", error=str(exc))
            report = overlay_document(state, document)
            if report.skipped:
                logger.warning(
                    "Camera settings %s loaded with %d ignored field(s): %s",
                    self._path,
                    len(report.skipped),
                    ", ".join(sorted(report.skipped)),
                )
            return LoadResult(self._path, "file", report=report)

        layers = list(sibling_layers()) if sibling_layers is not None else []
        state.layer = derive_first_layer(layers)
        try:
            self.save(state)
        except SettingsSaveError as exc:
            logger.warning("Unable to create camera settings %s: %s", self._path, exc)
            return LoadResult(self._path, "defaults", error=str(exc))
        logger.info("Created camera settings %s with layer %d", self._path, state.layer)
        return LoadResult(self._path, "defaults", created=True)

    def save(self, state: CameraState) -> None:
        """Write the complete field set of ``state``, replacing the file."""

        payload = state_to_document(state)
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._path.write_text(json.dumps(payload, indent=2), encoding=ENCODING)
        except OSError as exc:
            raise SettingsSaveError(f"Failed to save camera settings: {exc}") from exc


__all__ = [
    "ConfigurationStore",
    "LoadResult",
    "SettingsSaveError",
    "read_document",
]
