"""JSON Schema for plugin responses and validation of emitted lines."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, cast

from jsonschema import Draft202012Validator
from pydantic import BaseModel, ConfigDict

from .errors import ResponseValidationError

SCHEMA_DRAFT_URL = "https://json-schema.org/draft/2020-12/schema"


class ModuleResponse(BaseModel):
    """Conventional members of a legacy plugin response.

    Every member is optional; plugins may add any other member they like.
    """

    model_config = ConfigDict(extra="allow")

    failed: bool | None = None
    changed: bool | None = None
    rc: int | None = None
    status: int | None = None
    msg: str | None = None
    stdout: str | None = None
    stderr: str | None = None


def build_response_json_schema() -> dict[str, Any]:
    """Return the JSON Schema describing a single plugin response object."""
    schema = ModuleResponse.model_json_schema()
    schema.setdefault("$schema", SCHEMA_DRAFT_URL)
    schema["title"] = "LegacyModuleResponse"
    schema.setdefault("$id", "https://schemas.legacymod.dev/response.json")
    schema["type"] = "object"
    schema["additionalProperties"] = True

    Draft202012Validator.check_schema(schema)
    return schema


def export_response_schema(path: Path | str) -> dict[str, Any]:
    """Write the response JSON Schema to *path* and return it."""
    schema = build_response_json_schema()
    path_obj = Path(path)
    path_obj.write_text(
        json.dumps(schema, indent=2, sort_keys=True),
        encoding="utf-8",
    )
    return schema


def validate_response_line(line: str) -> dict[str, Any]:
    """Parse *line* as a plugin response and check it against the schema."""
    try:
        payload = json.loads(line)
    except json.JSONDecodeError as error:
        message = f"Response is not valid JSON: {error}"
        raise ResponseValidationError(message) from error

    if not isinstance(payload, dict):
        message = "Response must be a single JSON object"
        raise ResponseValidationError(message)

    validator = Draft202012Validator(build_response_json_schema())
    errors = sorted(validator.iter_errors(payload), key=lambda item: list(item.path))
    if errors:
        details = "; ".join(
            f"{'/'.join(str(part) for part in error.path) or '<root>'}: {error.message}"
            for error in errors
        )
        message = f"Response violates the protocol conventions: {details}"
        raise ResponseValidationError(message)
    return cast("dict[str, Any]", payload)


__all__ = [
    "ModuleResponse",
    "SCHEMA_DRAFT_URL",
    "build_response_json_schema",
    "export_response_schema",
    "validate_response_line",
]
