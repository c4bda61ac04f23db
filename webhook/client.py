from __future__ import annotations  # Single best-effort forward to the scoring webhook

import logging
from typing import Any, Callable, Dict, List, Optional, Protocol, Tuple

import httpx
from pydantic import BaseModel, Field

from assessment.models import Submission
from assessment.results import unwrap_payload as unwrap
from config.settings import DEFAULT_WEBHOOK_URL
from observability import span


logger = logging.getLogger(__name__)  # Module logger setup


class HttpResponse(Protocol):  # Minimal HTTP response protocol
    @property
    def status_code(self) -> int: ...

    def json(self) -> Any: ...

    @property
    def text(self) -> str: ...


class HttpClient(Protocol):  # Minimal multipart-capable HTTP client protocol
    def post(
        self,
        url: str,
        *,
        data: Dict[str, str],
        files: Dict[str, Tuple[str, bytes, str]],
        timeout: float,
    ) -> HttpResponse: ...


class WebhookError(RuntimeError):  # Base webhook error
    def __init__(self, message: str, *, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class WebhookTimeout(WebhookError):  # Webhook did not answer within the route timeout
    pass


class WebhookRoute(BaseModel):  # Webhook endpoint configuration
    url: str = DEFAULT_WEBHOOK_URL
    timeout_s: float = Field(default=120.0, ge=0.1)
    audio_filename: Optional[str] = "recording.wav"


def multipart_parts(
    submission: Submission,
    audio_filename: Optional[str] = None,
) -> Tuple[Dict[str, str], Dict[str, Tuple[str, bytes, str]]]:  # Split a submission into form fields and files
    filename = audio_filename or submission.filename
    files = {"audio": (filename, submission.audio, submission.content_type)}
    return submission.form_fields(), files


def forward(
    submission: Submission,
    *,
    route: WebhookRoute,
    client: Optional[HttpClient] = None,
    events: Optional[List[Dict[str, Any]]] = None,
) -> Any:  # Post the submission once and return the decoded JSON unchanged
    data, files = multipart_parts(submission, route.audio_filename)
    trace: List[Dict[str, Any]] = events if events is not None else []
    logger.info(
        "Forwarding to webhook url=%s fields=%s bytes=%d",
        route.url,
        sorted(["audio", *data.keys()]),
        len(submission.audio),
    )
    with span(trace, "webhook.forward"):
        try:
            response, close_cb = _post(route.url, data, files, route.timeout_s, client)
        except httpx.TimeoutException as exc:
            logger.error("Webhook timed out after %.1fs: %s", route.timeout_s, exc)
            raise WebhookTimeout(f"Webhook did not respond within {route.timeout_s:g}s") from exc
        except httpx.HTTPError as exc:
            logger.error("Webhook transport failure: %s", exc)
            raise WebhookError(f"Webhook transport failed: {exc}") from exc
    try:
        if response.status_code >= 400:
            logger.error("Webhook error status: %s", response.status_code)
            raise WebhookError(
                f"Webhook returned status {response.status_code}",
                status_code=response.status_code,
            )
        try:
            return response.json()
        except ValueError as exc:
            logger.error("Invalid JSON payload from webhook: %s", exc)
            raise WebhookError("Webhook payload was not JSON") from exc
    finally:
        _close_safely(close_cb)


def _post(
    url: str,
    data: Dict[str, str],
    files: Dict[str, Tuple[str, bytes, str]],
    timeout: float,
    client: Optional[HttpClient],
) -> Tuple[HttpResponse, Optional[Callable[[], None]]]:  # Dispatch HTTP request
    if client is not None:
        return client.post(url, data=data, files=files, timeout=timeout), None
    http_client = httpx.Client(timeout=timeout)
    try:
        response = http_client.post(url, data=data, files=files)
    except Exception:
        http_client.close()
        raise
    return response, http_client.close


def _close_safely(close_cb: Optional[Callable[[], None]]) -> None:  # Close HTTP client callback when provided
    if close_cb is not None:
        close_cb()


__all__ = [
    "HttpClient",
    "HttpResponse",
    "WebhookError",
    "WebhookRoute",
    "WebhookTimeout",
    "forward",
    "multipart_parts",
    "unwrap",
]
