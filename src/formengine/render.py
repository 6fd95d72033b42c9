from __future__ import annotations

from typing import Any

from jinja2 import Environment, FileSystemLoader, select_autoescape

from formengine.config import TEMPLATES_DIR
from formengine.engine import FormEngine, SubmissionPhase
from formengine.fields import effective_key, option_checked
from formengine.schema import FieldType, field_kind

FIELD_WIDGETS: dict[FieldType, str] = {
    FieldType.INFO: "info",
    FieldType.TEXTAREA: "textarea",
    FieldType.SELECT: "select",
    FieldType.RADIO: "radio",
    FieldType.CHECKBOX: "checkbox",
    FieldType.DATE: "date",
    FieldType.TEXT: "input",
    FieldType.EMAIL: "input",
    FieldType.TEL: "input",
    FieldType.NUMBER: "input",
}
DEFAULT_WIDGET = "input"

DEFAULT_SUCCESS_MESSAGE = "Form submitted successfully!"
DEFAULT_ERROR_MESSAGE = "Something went wrong. Please try again."
RATE_LIMIT_MESSAGE = "Too many form submissions. Please wait a few minutes before trying again."
DEFAULT_DATE_FORMAT = "MM/DD/YYYY"


def widget_for(field: dict[str, Any]) -> str:
    kind = field_kind(field)
    if kind is None:
        return DEFAULT_WIDGET
    return FIELD_WIDGETS[kind]


def field_input_type(field: dict[str, Any]) -> str:
    kind = field_kind(field)
    if kind in {FieldType.EMAIL, FieldType.TEL, FieldType.NUMBER}:
        return kind.value
    return "text"


def submission_banner(config: dict[str, Any], phase: SubmissionPhase) -> tuple[str, str] | None:
    """Return ``(css_class, message)`` for the outcome banner, if any."""
    submit_config = config.get("submit_config") or {}
    if phase is SubmissionPhase.SUCCESS:
        return "alert-success", submit_config.get("success_message") or DEFAULT_SUCCESS_MESSAGE
    if phase is SubmissionPhase.ERROR:
        return "alert-error", submit_config.get("error_message") or DEFAULT_ERROR_MESSAGE
    if phase is SubmissionPhase.RATE_LIMITED:
        return "alert-error", RATE_LIMIT_MESSAGE
    return None


def submit_button_text(config: dict[str, Any], submitting: bool) -> str:
    if submitting:
        return "Submitting..."
    return (config.get("submit_config") or {}).get("button_text") or "Submit"


def install_helpers(env: Environment) -> None:
    env.globals["field_key"] = effective_key
    env.globals["widget_for"] = widget_for
    env.globals["field_input_type"] = field_input_type
    env.globals["option_checked"] = option_checked
    env.globals["submission_banner"] = submission_banner
    env.globals["submit_button_text"] = submit_button_text
    env.globals["default_date_format"] = DEFAULT_DATE_FORMAT


def create_environment() -> Environment:
    env = Environment(
        loader=FileSystemLoader(str(TEMPLATES_DIR)),
        autoescape=select_autoescape(["html"]),
    )
    install_helpers(env)
    return env


_ENV: Environment | None = None


def _environment() -> Environment:
    global _ENV
    if _ENV is None:
        _ENV = create_environment()
    return _ENV


def render_form(
    form_id: str | None,
    config: dict[str, Any] | None,
    engine: FormEngine | None = None,
    action: str = "",
) -> str:
    """Render the form markup; an empty string when the form id or config is missing.

    ``engine`` supplies current values, errors and phase. Without one the form
    renders in its initial state.
    """
    if not form_id or not config:
        return ""
    if engine is None:
        engine = FormEngine(form_id, config)
    template = _environment().get_template("form.html")
    return template.render(engine=engine, config=config, action=action)
