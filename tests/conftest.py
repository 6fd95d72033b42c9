from __future__ import annotations

import copy
from typing import Any

import httpx
import pytest
from fastapi.testclient import TestClient

from formengine.app import create_app
from formengine.client import SubmissionClient
from formengine.config import Settings
from formengine.schema import parse_form_config

API_URL = "http://backend.test"

RAW_CONFIG: dict[str, Any] = {
    "name": "Contact us",
    "description": "Tell us about your project.",
    "fields": [
        {
            "id": "intro",
            "type": "info",
            "label": "Before you start",
            "infoText": "We reply within one business day.",
            "columnSpan": 12,
            "visualRow": 1,
        },
        {
            "id": "first_name",
            "name": "firstName",
            "type": "text",
            "label": "First name",
            "required": True,
            "columnSpan": 6,
            "visualRow": 2,
            "validation": {"min": 2, "max": 20},
        },
        {
            "id": "email",
            "mappedField": "Email__c",
            "type": "email",
            "label": "Email",
            "required": True,
            "columnSpan": 6,
            "visualRow": 2,
        },
        {
            "id": "phone",
            "type": "tel",
            "label": "Phone",
            "columnSpan": 6,
            "visualRow": 3,
        },
        {
            "id": "age",
            "type": "number",
            "label": "Age",
            "columnSpan": 6,
            "visualRow": 3,
            "validation": {"min": 18, "max": 120},
        },
        {
            "id": "topic",
            "type": "select",
            "label": "Topic",
            "columnSpan": 6,
            "visualRow": 4,
            "options": [
                {"label": "Sales", "value": "sales"},
                {"label": "Support", "value": "support"},
            ],
        },
        {
            "id": "contact_method",
            "type": "radio",
            "label": "Preferred contact",
            "columnSpan": 6,
            "visualRow": 4,
            "options": [
                {"label": "Email", "value": "email"},
                {"label": "Phone", "value": "phone"},
            ],
        },
        {
            "id": "prefs",
            "name": "prefs",
            "type": "checkbox",
            "label": "Subscriptions",
            "columnSpan": 12,
            "visualRow": 5,
            "options": [
                {"label": "Newsletter", "value": "newsletter"},
                {"label": "Product updates", "value": "updates", "defaultChecked": True},
            ],
        },
        {
            "id": "start",
            "type": "date",
            "label": "Start date",
            "columnSpan": 6,
            "visualRow": 6,
            "dateFormat": "DD/MM/YYYY",
            "showDateFormatHelper": True,
        },
        {
            "id": "message",
            "type": "textarea",
            "label": "Message",
            "columnSpan": 12,
            "visualRow": 7,
            "validation": {"max": 500},
        },
    ],
    "submitConfig": {
        "webServiceId": "ws-contact",
        "successMessage": "Thanks, we will be in touch.",
        "buttonText": "Send",
    },
}

VALID_VALUES: dict[str, Any] = {
    "firstName": "Ada",
    "Email__c": "ada@example.com",
}


class FakeSubmitter:
    def __init__(self, error: Exception | None = None) -> None:
        self.error = error
        self.calls: list[tuple[str, dict[str, Any]]] = []

    async def submit(self, form_id: str, payload: dict[str, Any]) -> Any:
        self.calls.append((form_id, payload))
        if self.error is not None:
            raise self.error
        return {"success": True}


class Backend:
    """Programmable stand-in for the submission backend."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.status_code = 200
        self.body: Any = {"success": True, "message": "ok"}

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if isinstance(self.body, (dict, list)):
            return httpx.Response(self.status_code, json=self.body)
        return httpx.Response(self.status_code, content=self.body or b"")


@pytest.fixture()
def raw_config() -> dict[str, Any]:
    return copy.deepcopy(RAW_CONFIG)


@pytest.fixture()
def config(raw_config) -> dict[str, Any]:
    parsed, errors = parse_form_config(raw_config)
    assert errors == []
    return parsed


@pytest.fixture()
def backend() -> Backend:
    return Backend()


@pytest.fixture()
def submission_client(backend) -> SubmissionClient:
    return SubmissionClient(API_URL, transport=httpx.MockTransport(backend.handler))


@pytest.fixture(params=["sqlite", "json"])
def settings(request, tmp_path, monkeypatch) -> Settings:
    monkeypatch.setenv("STORAGE_BACKEND", request.param)
    monkeypatch.setenv("SQLITE_PATH", str(tmp_path / "forms.db"))
    monkeypatch.setenv("JSON_PATH", str(tmp_path / "forms.json"))
    monkeypatch.setenv("API_URL", API_URL)
    return Settings()


@pytest.fixture()
def client(settings, submission_client) -> TestClient:
    return TestClient(create_app(settings, submission_client))


@pytest.fixture()
def stored_form(client, raw_config) -> str:
    response = client.put(
        "/api/forms/contact",
        json={"formId": "contact", "formName": "Contact", "formConfig": raw_config},
    )
    assert response.status_code == 200
    return "contact"
