from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import HTMLResponse

from formengine.engine import FormEngine
from formengine.fields import values_from_form_data
from formengine.schema import parse_form_config

logger = logging.getLogger(__name__)

router = APIRouter()


def load_form(request: Request, form_id: str) -> tuple[dict[str, Any], dict[str, Any] | None]:
    """Fetch a stored form and its normalized config.

    The config is ``None`` when the stored document no longer parses. Callers
    answer 409 then: the JSON API with a detail, the HTML page with an empty body.
    """
    storage = request.app.state.storage
    form = storage.forms.get_form(form_id)
    if not form:
        raise HTTPException(status_code=404, detail="Form not found")
    config, errors = parse_form_config(form.get("form_config"))
    if config is None or errors:
        logger.error("Stored form %s has an invalid config: %s", form_id, errors)
        return form, None
    return form, config


def _render(request: Request, form_id: str, config: dict[str, Any] | None, engine: FormEngine | None) -> HTMLResponse:
    if config is None:
        return HTMLResponse("", status_code=409)
    templates = request.app.state.templates
    return templates.TemplateResponse(
        request,
        "form_page.html",
        {
            "config": config,
            "engine": engine or FormEngine(form_id, config),
            "action": request.url.path,
        },
    )


@router.get("/forms/{form_id}", response_class=HTMLResponse, tags=["public"])
async def show_form(request: Request, form_id: str) -> HTMLResponse:
    _, config = load_form(request, form_id)
    return _render(request, form_id, config, None)


@router.post("/forms/{form_id}", response_class=HTMLResponse, tags=["public"])
async def submit_form(request: Request, form_id: str) -> HTMLResponse:
    _, config = load_form(request, form_id)
    if config is None:
        return HTMLResponse("", status_code=409)

    form_data = await request.form()
    engine = FormEngine(
        form_id,
        config,
        request.app.state.submission_client,
        values=values_from_form_data(config["fields"], form_data),
    )
    await engine.handle_submit()
    return _render(request, form_id, config, engine)
