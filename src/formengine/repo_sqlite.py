from __future__ import annotations

from pathlib import Path
from typing import Any

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from formengine.models import Base, FormConfigModel
from formengine.utils import dumps_json, loads_json, now_utc


class SQLiteFormConfigRepo:
    def __init__(self, session_factory: sessionmaker) -> None:
        self._Session = session_factory

    def list_forms(self) -> list[dict[str, Any]]:
        with self._Session() as session:
            rows = (
                session.query(FormConfigModel)
                .order_by(FormConfigModel.updated_at.desc())
                .all()
            )
            return [self._to_dict(row) for row in rows]

    def get_form(self, form_id: str) -> dict[str, Any] | None:
        with self._Session() as session:
            row = session.get(FormConfigModel, form_id)
            return self._to_dict(row) if row else None

    def save_form(self, form: dict[str, Any]) -> dict[str, Any]:
        now = now_utc()
        with self._Session() as session:
            row = session.get(FormConfigModel, form["form_id"])
            if row is None:
                row = FormConfigModel(form_id=form["form_id"], created_at=now)
                session.add(row)
            row.form_name = form.get("form_name", "")
            row.form_description = form.get("form_description", "")
            row.form_config = dumps_json(form["form_config"])
            row.updated_at = now
            session.commit()
            session.refresh(row)
            return self._to_dict(row)

    def delete_form(self, form_id: str) -> None:
        with self._Session() as session:
            row = session.get(FormConfigModel, form_id)
            if not row:
                raise KeyError(form_id)
            session.delete(row)
            session.commit()

    @staticmethod
    def _to_dict(row: FormConfigModel) -> dict[str, Any]:
        return {
            "form_id": row.form_id,
            "form_name": row.form_name or "",
            "form_description": row.form_description or "",
            "form_config": loads_json(row.form_config) or {},
            "created_at": row.created_at,
            "updated_at": row.updated_at,
        }


class SQLiteStorage:
    def __init__(self, path: Path) -> None:
        engine = create_engine(f"sqlite:///{path}", future=True)
        Base.metadata.create_all(engine)
        self._Session = sessionmaker(bind=engine, expire_on_commit=False)
        self.forms = SQLiteFormConfigRepo(self._Session)
