from __future__ import annotations

import logging
import re
from enum import Enum
from typing import Any

import orjson
from jsonschema import Draft7Validator

logger = logging.getLogger(__name__)


class FieldType(str, Enum):
    TEXT = "text"
    EMAIL = "email"
    TEL = "tel"
    NUMBER = "number"
    TEXTAREA = "textarea"
    SELECT = "select"
    RADIO = "radio"
    CHECKBOX = "checkbox"
    DATE = "date"
    INFO = "info"


FIELD_TYPES = {member.value for member in FieldType}
OPTION_TYPES = {FieldType.SELECT.value, FieldType.RADIO.value, FieldType.CHECKBOX.value}
DEFAULT_COLUMN_SPAN = 12

_OPTION_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "label": {"type": "string"},
        "value": {"type": "string"},
        "defaultChecked": {"type": "boolean"},
    },
    "required": ["value"],
}

_FIELD_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "id": {"type": "string", "minLength": 1},
        "type": {"type": "string", "minLength": 1},
        "name": {"type": ["string", "null"]},
        "mappedField": {"type": ["string", "null"]},
        "label": {"type": ["string", "null"]},
        "placeholder": {"type": ["string", "null"]},
        "required": {"type": ["boolean", "null"]},
        "columnSpan": {"type": ["integer", "null"]},
        "visualRow": {"type": ["integer", "null"]},
        "options": {"type": ["array", "null"], "items": _OPTION_SCHEMA},
        "validation": {
            "type": ["object", "null"],
            "properties": {
                "min": {"type": ["number", "null"]},
                "max": {"type": ["number", "null"]},
                "pattern": {"type": ["string", "null"]},
            },
        },
        "infoText": {"type": ["string", "null"]},
        "dateFormat": {"type": ["string", "null"]},
        "showDateFormatHelper": {"type": ["boolean", "null"]},
    },
    "required": ["id", "type"],
}

FORM_CONFIG_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "name": {"type": "string"},
        "description": {"type": ["string", "null"]},
        "fields": {"type": "array", "items": _FIELD_SCHEMA},
        "submitConfig": {
            "type": "object",
            "properties": {
                "webServiceId": {"type": "string"},
                "webServiceName": {"type": ["string", "null"]},
                "successMessage": {"type": ["string", "null"]},
                "errorMessage": {"type": ["string", "null"]},
                "buttonText": {"type": ["string", "null"]},
            },
            "required": ["webServiceId"],
        },
        "createdAt": {"type": ["string", "null"]},
        "updatedAt": {"type": ["string", "null"]},
    },
    "required": ["name", "fields", "submitConfig"],
}

_CONFIG_VALIDATOR = Draft7Validator(FORM_CONFIG_SCHEMA)


def field_kind(field: dict[str, Any]) -> FieldType | None:
    try:
        return FieldType(field.get("type"))
    except ValueError:
        return None


def _error_location(error: Any) -> str:
    path = ".".join(str(part) for part in error.absolute_path)
    return path or "formConfig"


def _text(value: Any) -> str:
    return str(value).strip() if value is not None else ""


def _parse_options(raw_options: Any) -> list[dict[str, Any]] | None:
    if raw_options is None:
        return None
    return [
        {
            "label": _text(option.get("label")) or _text(option.get("value")),
            "value": str(option.get("value", "")),
            "default_checked": option.get("defaultChecked"),
        }
        for option in raw_options
    ]


def _parse_validation(raw: Any, loc: str, errors: list[str]) -> dict[str, Any] | None:
    if raw is None:
        return None
    pattern = raw.get("pattern")
    if pattern:
        try:
            re.compile(pattern)
        except re.error as exc:
            errors.append(f"{loc}: invalid validation pattern ({exc})")
    else:
        pattern = None
    return {"min": raw.get("min"), "max": raw.get("max"), "pattern": pattern}


def _parse_field(raw: dict[str, Any], loc: str, errors: list[str]) -> dict[str, Any]:
    field_type = _text(raw.get("type"))
    if field_type not in FIELD_TYPES:
        logger.warning("%s: unknown field type %r renders as text input", loc, field_type)

    column_span = raw.get("columnSpan")
    if column_span is None:
        column_span = DEFAULT_COLUMN_SPAN
    elif not 1 <= column_span <= 12:
        errors.append(f"{loc}: columnSpan must be between 1 and 12 ({column_span})")

    options = _parse_options(raw.get("options"))
    if field_type in {FieldType.SELECT.value, FieldType.RADIO.value} and not options:
        errors.append(f"{loc}: {field_type} fields need at least one option")

    return {
        "id": raw["id"],
        "type": field_type,
        "name": raw.get("name") or None,
        "mapped_field": raw.get("mappedField") or None,
        "label": raw.get("label") or "",
        "placeholder": raw.get("placeholder") or "",
        "required": bool(raw.get("required")),
        "column_span": column_span,
        "visual_row": raw.get("visualRow") or 1,
        "options": options,
        "validation": _parse_validation(raw.get("validation"), loc, errors),
        "info_text": raw.get("infoText") or "",
        "date_format": raw.get("dateFormat") or "",
        "show_date_format_helper": bool(raw.get("showDateFormatHelper")),
    }


def parse_form_config(raw: Any) -> tuple[dict[str, Any] | None, list[str]]:
    """Normalize a CMS ``FormConfig`` payload into snake_case dicts.

    Returns ``(config, errors)``. ``config`` is ``None`` whenever the payload
    does not satisfy ``FORM_CONFIG_SCHEMA``; otherwise every field is parsed
    and all semantic problems are collected into ``errors``.
    """
    schema_errors = sorted(_CONFIG_VALIDATOR.iter_errors(raw), key=lambda err: list(err.absolute_path))
    if schema_errors:
        return None, [f"{_error_location(error)}: {error.message}" for error in schema_errors]

    errors: list[str] = []
    seen_ids: set[str] = set()
    fields: list[dict[str, Any]] = []
    for index, raw_field in enumerate(raw["fields"], start=1):
        loc = f"fields[{index}] ({raw_field['id']})"
        if raw_field["id"] in seen_ids:
            errors.append(f"{loc}: duplicate field id")
        seen_ids.add(raw_field["id"])
        fields.append(_parse_field(raw_field, loc, errors))

    submit = raw["submitConfig"]
    config = {
        "name": raw["name"],
        "description": raw.get("description") or "",
        "fields": fields,
        "submit_config": {
            "web_service_id": submit["webServiceId"],
            "web_service_name": submit.get("webServiceName") or "",
            "success_message": submit.get("successMessage") or "",
            "error_message": submit.get("errorMessage") or "",
            "button_text": submit.get("buttonText") or "",
        },
        "created_at": raw.get("createdAt"),
        "updated_at": raw.get("updatedAt"),
    }
    return config, errors


def unwrap_form_data(raw: Any) -> tuple[str, str, str, Any]:
    """Split a stored ``FormFieldData`` document into its parts.

    Bare ``FormConfig`` documents are accepted too; their id comes back empty.
    """
    if isinstance(raw, dict) and "formConfig" in raw:
        config = raw.get("formConfig")
        name = raw.get("formName") or (config or {}).get("name", "")
        return (
            _text(raw.get("formId")),
            _text(name),
            _text(raw.get("formDescription")),
            config,
        )
    if isinstance(raw, dict):
        return "", _text(raw.get("name")), _text(raw.get("description")), raw
    return "", "", "", raw


def parse_form_config_json(text: str | bytes) -> tuple[dict[str, Any] | None, list[str]]:
    try:
        raw = orjson.loads(text) if text else None
    except orjson.JSONDecodeError:
        return None, ["Could not parse form configuration JSON"]
    _, _, _, config = unwrap_form_data(raw)
    return parse_form_config(config)
