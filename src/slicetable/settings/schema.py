"""Schema helpers for the engine settings."""

from __future__ import annotations

from copy import deepcopy
from typing import Any

from jsonschema import Draft202012Validator

from ..config import (
    DEFAULT_NUM_ROWS_PER_PAGE,
    DEFAULT_OVERSCAN,
    DEFAULT_PADDING,
    HEADER_HEIGHT,
    MAX_RENDERED_ROWS,
    NOTIFY_THROTTLE_MS,
    ROW_HEIGHT,
)

SETTINGS_SCHEMA: dict[str, Any] = {
    "$id": "slicetable/settings.schema.json",
    "type": "object",
    "required": ["schema", "viewport", "fetch"],
    "properties": {
        "schema": {"const": "slicetable/settings@1"},
        "viewport": {
            "type": "object",
            "properties": {
                "row_height": {"type": "number", "exclusiveMinimum": 0},
                "header_height": {"type": "number", "exclusiveMinimum": 0},
                "overscan": {"type": "integer", "minimum": 0},
                "padding": {"type": "integer", "minimum": 0},
                "max_rendered_rows": {"type": "integer", "minimum": 1},
                "num_rows_per_page": {"type": "integer", "minimum": 1},
            },
            "additionalProperties": True,
        },
        "fetch": {
            "type": "object",
            "properties": {
                "notify_throttle_ms": {"type": "number", "minimum": 0},
            },
            "additionalProperties": True,
        },
    },
    "additionalProperties": True,
}

DEFAULT_SETTINGS: dict[str, Any] = {
    "schema": "slicetable/settings@1",
    "viewport": {
        "row_height": ROW_HEIGHT,
        "header_height": HEADER_HEIGHT,
        "overscan": DEFAULT_OVERSCAN,
        "padding": DEFAULT_PADDING,
        "max_rendered_rows": MAX_RENDERED_ROWS,
        "num_rows_per_page": DEFAULT_NUM_ROWS_PER_PAGE,
    },
    "fetch": {
        "notify_throttle_ms": NOTIFY_THROTTLE_MS,
    },
}

_SECTIONS = ("viewport", "fetch")

_validator = Draft202012Validator(SETTINGS_SCHEMA)


def merge_with_defaults(data: dict[str, Any] | None) -> dict[str, Any]:
    """Merge *data* with :data:`DEFAULT_SETTINGS` and validate the result."""

    merged = deepcopy(DEFAULT_SETTINGS)
    if data:
        for key, value in data.items():
            if key in _SECTIONS and isinstance(value, dict):
                target = merged.setdefault(key, {})
                for sub_key, sub_value in value.items():
                    target[sub_key] = sub_value
                continue
            merged[key] = value
    _validator.validate(merged)
    return merged


def validate_settings(data: dict[str, Any]) -> None:
    """Validate *data* against the settings schema."""

    _validator.validate(data)


__all__ = ["DEFAULT_SETTINGS", "SETTINGS_SCHEMA", "merge_with_defaults", "validate_settings"]
