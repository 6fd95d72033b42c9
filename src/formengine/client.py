from __future__ import annotations

import logging
from typing import Any
from urllib.parse import quote, urlsplit

import httpx

from formengine.errors import RateLimitedError, RejectedError, TransportError

logger = logging.getLogger(__name__)

RATE_LIMIT_MARKER = "Too many"


def is_valid_api_url(url: str) -> bool:
    if not url:
        return False
    parsed = urlsplit(url)
    return parsed.scheme in {"http", "https"} and bool(parsed.netloc)


def _error_message(response: httpx.Response, fallback: str) -> str:
    try:
        body = response.json()
    except ValueError:
        return "Submission failed"
    if isinstance(body, dict) and body.get("error"):
        return str(body["error"])
    return fallback


class SubmissionClient:
    """HTTP client for the external form backend."""

    def __init__(
        self,
        api_url: str,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        if not is_valid_api_url(api_url):
            raise ValueError(f"Invalid API URL: {api_url!r}")
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.timeout, transport=self._transport)

    async def submit(self, form_id: str, payload: dict[str, Any]) -> Any:
        url = f"{self.api_url}/api/forms/{quote(form_id, safe='')}/submit"
        try:
            async with self._client() as client:
                response = await client.post(url, json=payload)
        except httpx.HTTPError as exc:
            logger.exception("Form submission transport failure: %s", url)
            raise TransportError(str(exc) or "Submission failed") from exc

        if response.is_success:
            logger.info("Form submitted: %s", form_id)
            try:
                return response.json()
            except ValueError:
                return {}

        message = _error_message(response, "Failed to submit form")
        if response.status_code == 429 or RATE_LIMIT_MARKER in message:
            raise RateLimitedError(message, response.status_code)
        raise RejectedError(message, response.status_code)

    async def check_health(self) -> Any:
        url = f"{self.api_url}/health"
        try:
            async with self._client() as client:
                response = await client.get(url)
        except httpx.HTTPError as exc:
            logger.exception("API health check failed: %s", url)
            raise TransportError("API health check failed") from exc
        if not response.is_success:
            raise RejectedError("API health check failed", response.status_code)
        return response.json()

    async def fetch_web_service_data(self, web_service_id: str) -> Any:
        if not web_service_id:
            raise ValueError("Web service ID is required")
        url = f"{self.api_url}/api/web-services/{quote(web_service_id, safe='')}/fetch"
        try:
            async with self._client() as client:
                response = await client.get(url)
        except httpx.HTTPError as exc:
            logger.exception("Web service fetch error: %s", url)
            raise TransportError(
                "Unable to connect to the server. Please check your connection."
            ) from exc

        if response.is_success:
            return response.json()

        try:
            body = response.json()
            message = (body.get("error") or body.get("message")) if isinstance(body, dict) else None
            message = message or "Failed to fetch web service data"
        except ValueError:
            message = response.reason_phrase or f"HTTP {response.status_code}"

        if response.status_code == 404:
            message = "Web service not found. Please check your configuration."
        elif response.status_code == 400:
            message = "Invalid web service configuration."
        elif response.status_code >= 500:
            message = "Service temporarily unavailable. Please try again later."
        logger.warning("Web service %s fetch failed: %s", web_service_id, message)
        raise RejectedError(message, response.status_code)
