"""Schema helpers for pull list options."""

from __future__ import annotations

from copy import deepcopy
from typing import Any, Mapping

from jsonschema import Draft202012Validator
from jsonschema.exceptions import ValidationError

from ..config import (
    DEFAULT_END_THRESHOLD,
    DEFAULT_INITIAL_PULL_AMOUNT,
    DEFAULT_PULL_AMOUNT,
    OPTIONS_SCHEMA_ID,
)
from ..errors import OptionsValidationError

OPTIONS_SCHEMA: dict[str, Any] = {
    "$id": "pullview/list-options.schema.json",
    "type": "object",
    "required": ["schema", "initial_amount", "pull_amount", "end_threshold"],
    "properties": {
        "schema": {"const": OPTIONS_SCHEMA_ID},
        "initial_amount": {"type": "integer", "minimum": 1},
        "pull_amount": {"type": "integer", "minimum": 1},
        "end_threshold": {"type": "number", "minimum": 0},
    },
    "additionalProperties": False,
}

DEFAULT_OPTIONS: dict[str, Any] = {
    "schema": OPTIONS_SCHEMA_ID,
    "initial_amount": DEFAULT_INITIAL_PULL_AMOUNT,
    "pull_amount": DEFAULT_PULL_AMOUNT,
    "end_threshold": DEFAULT_END_THRESHOLD,
}

_validator = Draft202012Validator(OPTIONS_SCHEMA)


def merge_with_defaults(data: Mapping[str, Any] | None) -> dict[str, Any]:
    """Merge *data* with :data:`DEFAULT_OPTIONS` and validate the result.

    ``None`` values in *data* fall back to the default for that key.
    """

    merged = deepcopy(DEFAULT_OPTIONS)
    if data:
        for key, value in data.items():
            if value is None:
                continue
            merged[key] = value
    validate_options(merged)
    return merged


def validate_options(data: Mapping[str, Any]) -> None:
    """Validate *data* against the options schema."""

    try:
        _validator.validate(dict(data))
    except ValidationError as exc:
        path = ".".join(str(part) for part in exc.absolute_path) or "<root>"
        raise OptionsValidationError(f"{path}: {exc.message}") from exc


__all__ = ["DEFAULT_OPTIONS", "OPTIONS_SCHEMA", "merge_with_defaults", "validate_options"]
