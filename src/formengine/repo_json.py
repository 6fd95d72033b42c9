from __future__ import annotations

from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterator

from filelock import FileLock
from tinydb import Query, TinyDB

from formengine.utils import now_utc, parse_dt, to_iso


class JSONRepoBase:
    def __init__(self, path: Path, lock: FileLock) -> None:
        self._path = path
        self._lock = lock

    @contextmanager
    def _db(self) -> Iterator[TinyDB]:
        with self._lock:
            db = TinyDB(self._path)
            try:
                yield db
            finally:
                db.close()


class JSONFormConfigRepo(JSONRepoBase):
    def list_forms(self) -> list[dict[str, Any]]:
        with self._db() as db:
            items = db.table("form_configs").all()
        forms = [self._from_record(item) for item in items]
        return sorted(forms, key=lambda x: x["updated_at"], reverse=True)

    def get_form(self, form_id: str) -> dict[str, Any] | None:
        with self._db() as db:
            item = db.table("form_configs").get(Query().form_id == form_id)
        return self._from_record(item) if item else None

    def save_form(self, form: dict[str, Any]) -> dict[str, Any]:
        now = to_iso(now_utc())
        with self._db() as db:
            table = db.table("form_configs")
            existing = table.get(Query().form_id == form["form_id"])
            record = {
                "form_id": form["form_id"],
                "form_name": form.get("form_name", ""),
                "form_description": form.get("form_description", ""),
                "form_config": form["form_config"],
                "created_at": existing["created_at"] if existing else now,
                "updated_at": now,
            }
            table.upsert(record, Query().form_id == form["form_id"])
        return self._from_record(record)

    def delete_form(self, form_id: str) -> None:
        with self._db() as db:
            removed = db.table("form_configs").remove(Query().form_id == form_id)
        if not removed:
            raise KeyError(form_id)

    @staticmethod
    def _from_record(record: dict[str, Any]) -> dict[str, Any]:
        return {
            "form_id": record["form_id"],
            "form_name": record.get("form_name", ""),
            "form_description": record.get("form_description", ""),
            "form_config": record.get("form_config", {}),
            "created_at": parse_dt(record.get("created_at")),
            "updated_at": parse_dt(record.get("updated_at")),
        }


class JSONStorage:
    def __init__(self, path: Path) -> None:
        self._lock = FileLock(f"{path}.lock")
        self.forms = JSONFormConfigRepo(path, self._lock)
