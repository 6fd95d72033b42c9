from __future__ import annotations

from formengine.config import Settings, ensure_dirs
from formengine.protocols import Storage
from formengine.repo_json import JSONStorage
from formengine.repo_sqlite import SQLiteStorage


def init_storage(settings: Settings) -> Storage:
    ensure_dirs(settings)
    if settings.storage_backend == "json":
        return JSONStorage(settings.json_path)
    return SQLiteStorage(settings.sqlite_path)
