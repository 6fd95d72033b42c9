from __future__ import annotations

import asyncio

from formengine.engine import FormEngine, SubmissionPhase
from formengine.errors import RateLimitedError
from formengine.render import (
    FIELD_WIDGETS,
    RATE_LIMIT_MESSAGE,
    field_input_type,
    render_form,
    submission_banner,
    submit_button_text,
    widget_for,
)
from formengine.schema import FieldType, parse_form_config
from tests.conftest import VALID_VALUES, FakeSubmitter


def test_every_field_type_has_a_widget():
    assert set(FIELD_WIDGETS) == set(FieldType)


def test_unknown_type_renders_as_text():
    field = {"id": "site", "type": "url"}
    assert widget_for(field) == "input"
    assert field_input_type(field) == "text"
    assert field_input_type({"type": "email"}) == "email"
    assert field_input_type({"type": "date"}) == "text"


def test_missing_form_renders_nothing(config):
    assert render_form(None, config) == ""
    assert render_form("contact", None) == ""
    assert render_form("contact", {}) == ""


def test_initial_render(config):
    html = render_form("contact", config)
    assert "<h2>Contact us</h2>" in html
    assert "Tell us about your project." in html
    assert '<div class="info-text">We reply within one business day.</div>' in html
    assert '<h3 class="form-info-heading">Before you start</h3>' in html
    assert 'id="first_name" name="firstName" required' in html
    assert 'name="Email__c"' in html
    assert 'type="email"' in html
    assert 'type="tel"' in html
    assert 'type="number"' in html
    assert '<option value="">-- Select --</option>' in html
    assert '<option value="sales">Sales</option>' in html
    assert 'type="radio" name="contact_method" value="phone"' in html
    assert 'name="prefs.updates" value="true" checked' in html
    assert 'name="prefs.newsletter" value="true">' in html
    assert 'placeholder="DD/MM/YYYY"' in html
    assert "Format: DD/MM/YYYY" in html
    assert "<textarea" in html
    assert 'grid-column: span 6' in html
    assert ">Send</button>" in html
    assert 'role="alert"' not in html


def test_rows_render_in_order(config):
    html = render_form("contact", config)
    positions = [html.index(f'data-row="{row}"') for row in range(1, 8)]
    assert positions == sorted(positions)


def test_errors_render_inline(config):
    engine = FormEngine("contact", config, values={"Email__c": "bad"})
    engine.validate()
    html = render_form("contact", config, engine)
    assert '<span id="email-error" class="field-error" role="alert">Please enter a valid email address</span>' in html
    assert 'aria-describedby="email-error"' in html
    assert 'value="bad"' in html
    assert "First name is required" in html


def test_values_are_escaped(config):
    engine = FormEngine("contact", config, values={"firstName": '"><script>'})
    html = render_form("contact", config, engine)
    assert "<script>" not in html
    assert "&#34;&gt;&lt;script&gt;" in html


def test_selected_values_render(config):
    engine = FormEngine(
        "contact",
        config,
        values={"topic": "support", "contact_method": "email", "prefs": {"newsletter": True, "updates": False}},
    )
    html = render_form("contact", config, engine)
    assert '<option value="support" selected>Support</option>' in html
    assert 'value="email" checked' in html
    assert 'name="prefs.newsletter" value="true" checked' in html
    assert 'name="prefs.updates" value="true">' in html


def test_banners(config):
    assert submission_banner(config, SubmissionPhase.IDLE) is None
    assert submission_banner(config, SubmissionPhase.SUBMITTING) is None
    assert submission_banner(config, SubmissionPhase.SUCCESS) == (
        "alert-success",
        "Thanks, we will be in touch.",
    )
    assert submission_banner(config, SubmissionPhase.ERROR) == (
        "alert-error",
        "Something went wrong. Please try again.",
    )
    assert submission_banner(config, SubmissionPhase.RATE_LIMITED) == ("alert-error", RATE_LIMIT_MESSAGE)


def test_button_text(raw_config):
    raw_config["submitConfig"].pop("buttonText")
    config, _ = parse_form_config(raw_config)
    assert submit_button_text(config, False) == "Submit"
    assert submit_button_text(config, True) == "Submitting..."


def test_rate_limited_banner_renders(config):
    engine = FormEngine(
        "contact", config, FakeSubmitter(RateLimitedError("Too many requests", 429)), values=VALID_VALUES
    )
    asyncio.run(engine.handle_submit())
    html = render_form("contact", config, engine)
    assert f'<div class="alert alert-error" role="alert">{RATE_LIMIT_MESSAGE}</div>' in html
