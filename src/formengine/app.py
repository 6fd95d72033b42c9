from __future__ import annotations

from fastapi import FastAPI
from fastapi.templating import Jinja2Templates

from formengine.client import SubmissionClient
from formengine.config import TEMPLATES_DIR, Settings
from formengine.render import install_helpers
from formengine.routes.api import router as api_router
from formengine.routes.public import router as public_router
from formengine.storage import init_storage


def create_app(
    settings: Settings | None = None,
    submission_client: SubmissionClient | None = None,
) -> FastAPI:
    settings = settings or Settings()
    storage = init_storage(settings)

    app = FastAPI(
        openapi_tags=[
            {"name": "public", "description": "Rendered forms (HTML)"},
            {"name": "api/forms", "description": "REST API: form configurations"},
            {"name": "api/submissions", "description": "REST API: validation and submission"},
            {"name": "api/web-services", "description": "REST API: web service proxy"},
            {"name": "system", "description": "System"},
        ]
    )

    app.state.storage = storage
    app.state.settings = settings
    app.state.submission_client = submission_client or SubmissionClient(
        settings.api_url, timeout=settings.request_timeout
    )

    templates = Jinja2Templates(directory=str(TEMPLATES_DIR))
    install_helpers(templates.env)
    app.state.templates = templates

    app.include_router(public_router)
    app.include_router(api_router)

    return app
