"""Engine settings with validation and change notifications."""

from __future__ import annotations

import json
import logging
from copy import deepcopy
from pathlib import Path
from typing import Any, Mapping

from jsonschema import ValidationError

from ..errors import SettingsLoadError, SettingsValidationError
from ..viewmodels.signal import Signal
from .schema import DEFAULT_SETTINGS, merge_with_defaults

LOGGER = logging.getLogger(__name__)


class EngineSettings:
    """Validated view over the engine settings.

    Values are read and written with dotted keys such as
    ``"viewport.overscan"``.  Every successful ``set`` re-validates the whole
    document and emits ``settings_changed(key, value)``.
    """

    def __init__(self, data: Mapping[str, Any] | None = None) -> None:
        self.settings_changed = Signal()
        if data is None:
            self._data: dict[str, Any] = deepcopy(DEFAULT_SETTINGS)
        else:
            self._data = _merge(dict(data))

    @classmethod
    def from_file(cls, path: Path | str) -> "EngineSettings":
        return cls(load_settings(path))

    def get(self, key: str, default: Any | None = None) -> Any:
        """Return the value for *key*, supporting dotted access for nested keys."""

        target: Any = self._data
        for part in key.split("."):
            if not isinstance(target, dict) or part not in target:
                return default
            target = target[part]
        return target

    def set(self, key: str, value: Any) -> None:
        """Update *key* with *value*; the previous document survives a rejected value."""

        candidate = deepcopy(self._data)
        parts = key.split(".")
        target: dict[str, Any] = candidate
        for part in parts[:-1]:
            branch = target.get(part)
            if not isinstance(branch, dict):
                branch = {}
                target[part] = branch
            target = branch
        target[parts[-1]] = value
        self._data = _merge(candidate)
        LOGGER.debug("Setting %s changed to %r", key, value)
        self.settings_changed.emit(key, value)

    def as_dict(self) -> dict[str, Any]:
        return deepcopy(self._data)

    # Convenience accessors used by the view models --------------------
    @property
    def row_height(self) -> float:
        return self.get("viewport.row_height")

    @property
    def header_height(self) -> float:
        return self.get("viewport.header_height")

    @property
    def overscan(self) -> int:
        return self.get("viewport.overscan")

    @property
    def padding(self) -> int:
        return self.get("viewport.padding")

    @property
    def max_rendered_rows(self) -> int:
        return self.get("viewport.max_rendered_rows")

    @property
    def notify_throttle_ms(self) -> float:
        return self.get("fetch.notify_throttle_ms")


def load_settings(path: Path | str) -> dict[str, Any]:
    """Read a JSON settings file and return the validated, merged document."""

    path = Path(path)
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        raise SettingsLoadError(f"Could not read settings from {path}: {exc}") from exc
    if not isinstance(payload, dict):
        raise SettingsLoadError(f"Settings file {path} does not contain an object")
    return _merge(payload)


def _merge(payload: dict[str, Any]) -> dict[str, Any]:
    try:
        return merge_with_defaults(payload)
    except ValidationError as exc:
        raise SettingsValidationError(exc.message) from exc


__all__ = ["EngineSettings", "load_settings"]
