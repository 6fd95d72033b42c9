from __future__ import annotations

from typing import Any

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import JSONResponse

from formengine.engine import FormEngine, SubmissionPhase
from formengine.errors import RejectedError, TransportError
from formengine.fields import effective_key
from formengine.render import submission_banner
from formengine.routes.public import load_form
from formengine.schema import parse_form_config, unwrap_form_data
from formengine.utils import to_iso

router = APIRouter()

_PHASE_STATUS = {
    SubmissionPhase.SUCCESS: 200,
    SubmissionPhase.RATE_LIMITED: 429,
    SubmissionPhase.ERROR: 502,
}


def sanitize_form_output(form: dict[str, Any]) -> dict[str, Any]:
    return {
        "formId": form["form_id"],
        "formName": form.get("form_name", ""),
        "formDescription": form.get("form_description", ""),
        "formConfig": form.get("form_config", {}),
        "createdAt": to_iso(form["created_at"]) if form.get("created_at") else None,
        "updatedAt": to_iso(form["updated_at"]) if form.get("updated_at") else None,
    }


def _load_config(request: Request, form_id: str) -> dict[str, Any]:
    _, config = load_form(request, form_id)
    if config is None:
        raise HTTPException(status_code=409, detail="Stored form configuration is invalid")
    return config


async def _read_values(request: Request) -> dict[str, Any]:
    payload = await request.json()
    values = payload.get("values", {}) if isinstance(payload, dict) else None
    if not isinstance(values, dict):
        raise HTTPException(status_code=400, detail="values must be an object")
    return values


def _build_engine(form_id: str, config: dict[str, Any], values: dict[str, Any], submitter: Any = None) -> FormEngine:
    try:
        return FormEngine(form_id, config, submitter, values=values)
    except TypeError as exc:
        raise HTTPException(status_code=400, detail=str(exc))


@router.get("/api/forms", tags=["api/forms"])
async def api_list_forms(request: Request) -> JSONResponse:
    storage = request.app.state.storage
    return JSONResponse([sanitize_form_output(form) for form in storage.forms.list_forms()])


@router.get("/api/forms/{form_id}", tags=["api/forms"])
async def api_get_form(request: Request, form_id: str) -> JSONResponse:
    form, _ = load_form(request, form_id)
    return JSONResponse(sanitize_form_output(form))


@router.put("/api/forms/{form_id}", tags=["api/forms"])
async def api_save_form(request: Request, form_id: str) -> JSONResponse:
    storage = request.app.state.storage
    payload = await request.json()
    body_id, name, description, raw_config = unwrap_form_data(payload)
    if body_id and body_id != form_id:
        raise HTTPException(status_code=400, detail="formId does not match the URL")
    config, errors = parse_form_config(raw_config)
    if config is None or errors:
        return JSONResponse({"detail": "Invalid form configuration", "errors": errors}, status_code=400)
    saved = storage.forms.save_form(
        {
            "form_id": form_id,
            "form_name": name or config["name"],
            "form_description": description or config["description"],
            "form_config": raw_config,
        }
    )
    return JSONResponse(sanitize_form_output(saved))


@router.delete("/api/forms/{form_id}", tags=["api/forms"])
async def api_delete_form(request: Request, form_id: str) -> JSONResponse:
    storage = request.app.state.storage
    try:
        storage.forms.delete_form(form_id)
    except KeyError:
        raise HTTPException(status_code=404, detail="Form not found")
    return JSONResponse({"deleted": form_id})


@router.get("/api/forms/{form_id}/layout", tags=["api/forms"])
async def api_form_layout(request: Request, form_id: str) -> JSONResponse:
    config = _load_config(request, form_id)
    engine = FormEngine(form_id, config)
    rows = [
        {
            "row": row,
            "fields": [
                {"id": field["id"], "key": effective_key(field), "columnSpan": field["column_span"]}
                for field in fields
            ],
        }
        for row, fields in engine.rows()
    ]
    return JSONResponse({"formId": form_id, "rows": rows})


@router.post("/api/forms/{form_id}/validate", tags=["api/submissions"])
async def api_validate(request: Request, form_id: str) -> JSONResponse:
    config = _load_config(request, form_id)
    engine = _build_engine(form_id, config, await _read_values(request))
    return JSONResponse({"errors": engine.validate()})


@router.post("/api/forms/{form_id}/submissions", tags=["api/submissions"])
async def api_submit(request: Request, form_id: str) -> JSONResponse:
    config = _load_config(request, form_id)
    values = await _read_values(request)
    engine = _build_engine(form_id, config, values, request.app.state.submission_client)
    phase = await engine.handle_submit()
    if engine.errors:
        return JSONResponse({"phase": phase.value, "errors": engine.errors}, status_code=400)
    banner = submission_banner(config, phase)
    return JSONResponse(
        {"phase": phase.value, "message": banner[1] if banner else ""},
        status_code=_PHASE_STATUS.get(phase, 500),
    )


@router.get("/api/web-services/{web_service_id}", tags=["api/web-services"])
async def api_fetch_web_service(request: Request, web_service_id: str) -> JSONResponse:
    client = request.app.state.submission_client
    try:
        data = await client.fetch_web_service_data(web_service_id)
    except RejectedError as exc:
        raise HTTPException(status_code=exc.status_code or 502, detail=exc.message)
    except TransportError as exc:
        raise HTTPException(status_code=502, detail=exc.message)
    return JSONResponse(data)


@router.get("/healthz", tags=["system"])
async def healthz() -> dict[str, str]:
    return {"status": "ok"}
