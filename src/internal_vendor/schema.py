# SPDX-License-Identifier: MIT
"""JSON Schema for ``internal/vendor.json`` and validation helpers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from jsonschema import Draft202012Validator, ValidationError

VENDOR_PACKAGE_SCHEMA: dict = {
    "type": "object",
    "required": ["vendor", "local"],
    "properties": {
        "vendor": {
            "type": "string",
            "description": "Import path of the package when it was vendored",
            "minLength": 1,
        },
        "local": {
            "type": "string",
            "description": "Import path of the copy inside the project",
            "minLength": 1,
        },
        "version": {
            "type": "string",
            "description": "Version identifier of the vendored copy",
        },
        "versionTime": {
            "type": "string",
            "description": "RFC 3339 timestamp of the version",
        },
    },
    "additionalProperties": True,
}

VENDOR_FILE_SCHEMA: dict = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "title": "Vendor File",
    "description": "Packages vendored into a project's internal folder",
    "type": "object",
    "properties": {
        "tool": {
            "type": "string",
            "description": "Tool that manages the file",
        },
        "package": {
            "type": "array",
            "items": VENDOR_PACKAGE_SCHEMA,
        },
    },
    "additionalProperties": True,
}

_validator = Draft202012Validator(VENDOR_FILE_SCHEMA)


@dataclass(frozen=True)
class ValidationErrorDetail:
    """A single schema violation.

    Attributes:
        field: Path to the invalid field (e.g. ``package[0].local``)
        message: Human-readable error message
    """

    field: str
    message: str

    def __str__(self) -> str:
        return f"{self.field}: {self.message}"


def _field_path(error: ValidationError) -> str:
    if not error.absolute_path:
        return "<root>"
    parts: list[str] = []
    for part in error.absolute_path:
        if isinstance(part, int):
            parts.append(f"[{part}]")
        elif parts:
            parts.append(f".{part}")
        else:
            parts.append(str(part))
    return "".join(parts)


def _format_message(error: ValidationError) -> str:
    if error.validator == "required":
        missing = [name for name in error.validator_value if name not in error.instance]
        return f"Missing required field: {', '.join(missing)}"
    if error.validator == "type":
        return f"Expected {error.validator_value}, got {type(error.instance).__name__}"
    if error.validator == "minLength":
        return "Must not be empty"
    return error.message


def validate_vendor_data(data: Any) -> list[ValidationErrorDetail]:
    """Check decoded vendor file JSON against the schema.

    Returns:
        Violations sorted by field path; empty if the data is valid
    """
    errors = [
        ValidationErrorDetail(field=_field_path(error), message=_format_message(error))
        for error in _validator.iter_errors(data)
    ]
    return sorted(errors, key=lambda e: e.field)
