from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Mapping, Protocol

from formengine.errors import (
    FormEngineError,
    RateLimitedError,
    SubmissionError,
    SubmissionInProgressError,
)
from formengine.fields import (
    effective_key,
    group_fields_by_row,
    has_option_map,
    is_info,
    option_checked,
)
from formengine.validation import validate_field, validate_fields

logger = logging.getLogger(__name__)


class SubmissionPhase(str, Enum):
    IDLE = "idle"
    SUBMITTING = "submitting"
    SUCCESS = "success"
    ERROR = "error"
    RATE_LIMITED = "rate-limited"


class Submitter(Protocol):
    async def submit(self, form_id: str, payload: dict[str, Any]) -> Any: ...


class FormEngine:
    """State for one rendered instance of a CMS-authored form.

    Holds field values and errors keyed by effective field key and drives
    the submission phase machine::

        idle -> submitting -> success | error | rate-limited

    A new submit attempt moves any terminal phase back through submitting.
    """

    def __init__(
        self,
        form_id: str,
        config: dict[str, Any],
        submitter: Submitter | None = None,
        values: Mapping[str, Any] | None = None,
    ) -> None:
        if not form_id or not config:
            raise FormEngineError("form_id and config are required")
        self.form_id = form_id
        self.config = config
        self.fields: list[dict[str, Any]] = config.get("fields") or []
        self._submitter = submitter
        self.values: dict[str, Any] = {}
        self.errors: dict[str, str] = {}
        self.phase = SubmissionPhase.IDLE
        self._in_flight = False
        for field in self.fields:
            key = effective_key(field)
            if values and key in values and not is_info(field):
                self.set_field_value(field, values[key])

    @property
    def is_submitting(self) -> bool:
        return self._in_flight

    def rows(self) -> list[tuple[int, list[dict[str, Any]]]]:
        return group_fields_by_row(self.fields)

    def field_by_key(self, key: str) -> dict[str, Any] | None:
        for field in self.fields:
            if effective_key(field) == key:
                return field
        return None

    def value_for(self, field: dict[str, Any]) -> Any:
        value = self.values.get(effective_key(field))
        if has_option_map(field):
            return value or {}
        return value or ""

    def error_for(self, field: dict[str, Any]) -> str | None:
        return self.errors.get(effective_key(field))

    def set_field_value(self, field: dict[str, Any], value: Any) -> None:
        """Store ``value`` under the field's key and drop any error on that key.

        Checkbox fields with options take the complete option-map; use
        :meth:`toggle_option` to change a single option.
        """
        key = effective_key(field)
        if has_option_map(field):
            if not isinstance(value, Mapping):
                raise TypeError(f"{key} expects a mapping of option values to booleans")
            self.values[key] = {str(k): bool(v) for k, v in value.items()}
        elif value is None:
            self.values[key] = ""
        else:
            self.values[key] = value if isinstance(value, (str, bool)) else str(value)
        self.errors.pop(key, None)

    def toggle_option(self, field: dict[str, Any], option_value: str, checked: bool) -> None:
        if not has_option_map(field):
            raise TypeError(f"{effective_key(field)} has no checkbox options")
        current = self.values.get(effective_key(field))
        option_map = {
            option["value"]: option_checked(option, current) for option in field["options"]
        }
        option_map[option_value] = checked
        self.set_field_value(field, option_map)

    def validate_field(self, field: dict[str, Any]) -> str | None:
        return validate_field(field, self.values.get(effective_key(field)))

    def validate(self) -> dict[str, str]:
        self.errors = validate_fields(self.fields, self.values)
        return self.errors

    def build_payload(self) -> dict[str, Any]:
        payload = dict(self.values)
        for field in self.fields:
            key = effective_key(field)
            if is_info(field):
                payload.pop(key, None)
                continue
            if not has_option_map(field):
                continue
            current = self.values.get(key)
            for option in field["options"]:
                payload[option["value"]] = option_checked(option, current)
            payload.pop(key, None)
        return payload

    async def handle_submit(self) -> SubmissionPhase:
        if self._in_flight:
            raise SubmissionInProgressError(f"Form {self.form_id} is already submitting")
        if self._submitter is None:
            raise FormEngineError(f"Form {self.form_id} has no submitter configured")

        if self.validate():
            logger.info("Form %s failed validation: %s", self.form_id, sorted(self.errors))
            return self.phase

        payload = self.build_payload()
        self._in_flight = True
        self.phase = SubmissionPhase.SUBMITTING
        try:
            await self._submitter.submit(self.form_id, payload)
            self.phase = SubmissionPhase.SUCCESS
            self.values = {}
        except RateLimitedError as exc:
            logger.warning("Form %s submission rate limited: %s", self.form_id, exc.message)
            self.phase = SubmissionPhase.RATE_LIMITED
        except SubmissionError as exc:
            logger.warning("Form %s submission failed: %s", self.form_id, exc.message)
            self.phase = SubmissionPhase.ERROR
        except Exception:
            logger.exception("Form %s submission raised unexpectedly", self.form_id)
            self.phase = SubmissionPhase.ERROR
        finally:
            self._in_flight = False
            if self.phase is SubmissionPhase.SUBMITTING:
                self.phase = SubmissionPhase.ERROR
        return self.phase
