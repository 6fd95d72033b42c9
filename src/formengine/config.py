from __future__ import annotations

import os
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent
TEMPLATES_DIR = BASE_DIR / "templates"

DEFAULT_API_URL = "http://localhost:5000"


class Settings:
    def __init__(self) -> None:
        self.api_url = os.getenv("API_URL", DEFAULT_API_URL).rstrip("/")
        timeout_value = os.getenv("REQUEST_TIMEOUT", "10")
        try:
            self.request_timeout = float(timeout_value)
        except ValueError:
            self.request_timeout = 10.0
        self.storage_backend = os.getenv("STORAGE_BACKEND", "sqlite").lower()
        self.sqlite_path = Path(os.getenv("SQLITE_PATH", "./data/forms.db"))
        self.json_path = Path(os.getenv("JSON_PATH", "./data/forms.json"))
        self.host = os.getenv("HOST", "0.0.0.0")
        port_value = os.getenv("PORT", "8000")
        try:
            self.port = int(port_value)
        except ValueError:
            self.port = 8000
        self.log_level = os.getenv("LOG_LEVEL", "info").lower()


def ensure_dirs(settings: Settings) -> None:
    settings.sqlite_path.parent.mkdir(parents=True, exist_ok=True)
    settings.json_path.parent.mkdir(parents=True, exist_ok=True)
