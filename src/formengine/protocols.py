from __future__ import annotations

from typing import Any, Protocol


class FormConfigRepository(Protocol):
    def list_forms(self) -> list[dict[str, Any]]: ...

    def get_form(self, form_id: str) -> dict[str, Any] | None: ...

    def save_form(self, form: dict[str, Any]) -> dict[str, Any]: ...

    def delete_form(self, form_id: str) -> None: ...


class Storage(Protocol):
    forms: FormConfigRepository
