from __future__ import annotations

from typing import Any, Mapping

from formengine.schema import FieldType


def effective_key(field: dict[str, Any]) -> str:
    """Key under which a field's value, error and payload entry live."""
    return field.get("mapped_field") or field.get("name") or field["id"]


def is_info(field: dict[str, Any]) -> bool:
    return field.get("type") == FieldType.INFO.value


def has_option_map(field: dict[str, Any]) -> bool:
    return field.get("type") == FieldType.CHECKBOX.value and field.get("options") is not None


def is_blank(value: Any) -> bool:
    # Mirrors JavaScript falsiness for the value shapes a form holds:
    # option-maps count as present even when empty.
    return value is None or value is False or value == ""


def group_fields_by_row(fields: list[dict[str, Any]]) -> list[tuple[int, list[dict[str, Any]]]]:
    buckets: dict[int, list[dict[str, Any]]] = {}
    for field in fields:
        buckets.setdefault(field.get("visual_row") or 1, []).append(field)
    return [(row, buckets[row]) for row in sorted(buckets)]


def option_checked(option: dict[str, Any], option_map: Mapping[str, Any] | None) -> bool:
    current = (option_map or {}).get(option["value"])
    if current is not None:
        return bool(current)
    if option.get("default_checked") is not None:
        return bool(option["default_checked"])
    return False


def values_from_form_data(fields: list[dict[str, Any]], form_data: Mapping[str, Any]) -> dict[str, Any]:
    """Collect posted HTML form data into engine values.

    Checkbox options are posted as ``<key>.<option value>`` and only when
    checked, so the full option-map is rebuilt from presence.
    """
    values: dict[str, Any] = {}
    for field in fields:
        if is_info(field):
            continue
        key = effective_key(field)
        if has_option_map(field):
            values[key] = {
                option["value"]: f"{key}.{option['value']}" in form_data
                for option in field["options"]
            }
            continue
        raw_value = form_data.get(key)
        if raw_value is not None:
            values[key] = str(raw_value)
    return values
