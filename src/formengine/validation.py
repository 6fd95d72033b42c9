from __future__ import annotations

import math
import re
from functools import lru_cache
from typing import Any

from formengine.fields import effective_key, is_blank, is_info
from formengine.schema import FieldType

EMAIL_PATTERN = re.compile(r"[^\s@]+@[^\s@]+\.[^\s@]+")
PHONE_PATTERN = re.compile(r"[0-9\s\-+()]+")

EMAIL_MESSAGE = "Please enter a valid email address"
PHONE_MESSAGE = "Please enter a valid phone number"
PATTERN_MESSAGE = "Invalid format"

_LENGTH_TYPES = {FieldType.TEXT.value, FieldType.TEXTAREA.value}
_DECIMAL_PATTERN = re.compile(r"[+-]?(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")
_PREFIXED_INT_PATTERN = re.compile(r"0[xX][0-9a-fA-F]+|0[oO][0-7]+|0[bB][01]+")


def js_number(value: str) -> float:
    """Convert text the way JavaScript's ``Number()`` does.

    Empty or whitespace-only text is 0; anything unparseable is NaN, which
    compares false against every bound.
    """
    text = value.strip()
    if not text:
        return 0.0
    if _DECIMAL_PATTERN.fullmatch(text):
        return float(text)
    if _PREFIXED_INT_PATTERN.fullmatch(text):
        return float(int(text, 0))
    if text in {"Infinity", "+Infinity"}:
        return math.inf
    if text == "-Infinity":
        return -math.inf
    return math.nan


def format_bound(bound: Any) -> str:
    if isinstance(bound, float) and bound.is_integer():
        return str(int(bound))
    return str(bound)


@lru_cache(maxsize=256)
def _compiled(pattern: str) -> re.Pattern[str]:
    """Compile a CMS validation pattern.

    Patterns use Python ``re`` syntax, compiled with ``re.ASCII`` so ``\\d`` and
    ``\\w`` only match ASCII characters, as they do in browser regexes.
    """
    return re.compile(pattern, re.ASCII)


def _check_bounds(field_type: str, value: str, validation: dict[str, Any]) -> str | None:
    minimum = validation.get("min")
    maximum = validation.get("max")
    if field_type in _LENGTH_TYPES:
        if minimum is not None and len(value) < minimum:
            return f"Minimum {format_bound(minimum)} characters required"
        if maximum is not None and len(value) > maximum:
            return f"Maximum {format_bound(maximum)} characters allowed"
    elif field_type == FieldType.NUMBER.value:
        number = js_number(value)
        if minimum is not None and number < minimum:
            return f"Minimum value is {format_bound(minimum)}"
        if maximum is not None and number > maximum:
            return f"Maximum value is {format_bound(maximum)}"
    return None


def validate_field(field: dict[str, Any], value: Any) -> str | None:
    if is_info(field):
        return None

    if field.get("required") and is_blank(value):
        return f"{field.get('label') or effective_key(field)} is required"

    if is_blank(value) or not isinstance(value, str):
        return None

    field_type = field.get("type")
    if field_type == FieldType.EMAIL.value and not EMAIL_PATTERN.fullmatch(value):
        return EMAIL_MESSAGE
    if field_type == FieldType.TEL.value and not PHONE_PATTERN.fullmatch(value):
        return PHONE_MESSAGE

    validation = field.get("validation")
    if not validation:
        return None

    message = _check_bounds(field_type, value, validation)
    if message:
        return message

    pattern = validation.get("pattern")
    if pattern and not _compiled(pattern).search(value):
        return PATTERN_MESSAGE
    return None


def validate_fields(fields: list[dict[str, Any]], values: dict[str, Any]) -> dict[str, str]:
    errors: dict[str, str] = {}
    for field in fields:
        if is_info(field):
            continue
        key = effective_key(field)
        message = validate_field(field, values.get(key))
        if message:
            errors[key] = message
    return errors
