from __future__ import annotations

from pathlib import Path

from formengine.config import DEFAULT_API_URL, Settings


def test_defaults(monkeypatch):
    for name in ("API_URL", "REQUEST_TIMEOUT", "STORAGE_BACKEND", "PORT", "LOG_LEVEL", "SQLITE_PATH"):
        monkeypatch.delenv(name, raising=False)
    settings = Settings()
    assert settings.api_url == DEFAULT_API_URL
    assert settings.request_timeout == 10.0
    assert settings.storage_backend == "sqlite"
    assert settings.sqlite_path == Path("./data/forms.db")
    assert settings.port == 8000
    assert settings.log_level == "info"


def test_env_overrides(monkeypatch):
    monkeypatch.setenv("API_URL", "https://forms.example.com/")
    monkeypatch.setenv("REQUEST_TIMEOUT", "2.5")
    monkeypatch.setenv("STORAGE_BACKEND", "JSON")
    monkeypatch.setenv("PORT", "9000")
    settings = Settings()
    assert settings.api_url == "https://forms.example.com"
    assert settings.request_timeout == 2.5
    assert settings.storage_backend == "json"
    assert settings.port == 9000


def test_invalid_numbers_fall_back(monkeypatch):
    monkeypatch.setenv("REQUEST_TIMEOUT", "soon")
    monkeypatch.setenv("PORT", "http")
    settings = Settings()
    assert settings.request_timeout == 10.0
    assert settings.port == 8000
