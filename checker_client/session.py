"""Submission flow: proxy first, one direct webhook call on a gateway timeout, polling for background jobs."""
from __future__ import annotations

import logging
import time
from typing import Any, Callable, Dict, Optional, Tuple

import httpx
from pydantic import ValidationError

from assessment.models import AssessmentResult, Submission
from assessment.results import unwrap_payload
from config.settings import settings
from observability import log_event

from .audio_input import PreparedAudio
from .form import CheckForm

logger = logging.getLogger(__name__)

CHECK_PATH = "/api/check-english"
STATUS_PATH = "/api/status"


class SubmissionError(RuntimeError):
    def __init__(self, message: str, *, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ProcessingTimeout(SubmissionError):
    def __init__(self) -> None:
        super().__init__(
            "Processing is taking longer than expected. Please try again with a shorter audio file."
        )


def _error_message(body: Any, response: httpx.Response) -> str:
    if isinstance(body, dict):
        detail = body.get("error") or body.get("detail")
        if isinstance(detail, dict):
            detail = detail.get("error") or detail.get("details")
        if isinstance(detail, str) and detail:
            return detail
    return f"Server error: {response.status_code} {response.reason_phrase}"


def _has_output(payload: Any) -> bool:
    return isinstance(payload, dict) and bool(payload.get("output"))


def _to_result(payload: Any) -> AssessmentResult:
    try:
        return AssessmentResult.model_validate(payload)
    except ValidationError as exc:
        logger.error("Assessment payload did not validate: %s", exc)
        raise SubmissionError("Invalid response format from server") from exc


class SubmissionClient:  # Mirrors what the browser does with one recording
    def __init__(
        self,
        proxy_url: Optional[str] = None,
        webhook_url: Optional[str] = None,
        *,
        http_client: Optional[httpx.Client] = None,
        poll_interval: Optional[float] = None,
        poll_timeout: Optional[float] = None,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.proxy_url = (proxy_url or settings.PROXY_URL).rstrip("/")
        self.webhook_url = webhook_url or settings.WEBHOOK_URL
        self.poll_interval = settings.POLL_INTERVAL_S if poll_interval is None else poll_interval
        self.poll_timeout = settings.POLL_TIMEOUT_S if poll_timeout is None else poll_timeout
        self._sleep = sleep
        self._clock = clock
        self._owns_client = http_client is None
        self._http = http_client or httpx.Client(timeout=settings.WEBHOOK_TIMEOUT_S)

    def __enter__(self) -> "SubmissionClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def close(self) -> None:
        if self._owns_client:
            self._http.close()

    def submit(self, form: CheckForm, audio: PreparedAudio) -> AssessmentResult:
        """Send one submission and return the rendered-ready assessment."""

        submission = form.submission(audio)
        data, files = self._parts(submission)
        endpoint = f"{self.proxy_url}{CHECK_PATH}"
        logger.info(
            "Submitting question=%r studyLevel=%s file=%s (%d bytes, %s) endpoint=%s",
            submission.question,
            submission.study_level,
            submission.filename,
            len(submission.audio),
            submission.content_type,
            endpoint,
        )
        try:
            response = self._http.post(endpoint, data=data, files=files, headers={"Accept": "application/json"})
        except httpx.HTTPError as exc:
            raise SubmissionError(f"Failed to send request to server: {exc}") from exc

        if response.status_code == 504:
            logger.error("Server error response status=504 body=%s", response.text[:200])
            return self._direct_webhook(submission)
        body = self._decode(response) if response.is_success else self._safe_json(response)
        if not response.is_success:
            logger.error("Server error response status=%s body=%s", response.status_code, body)
            raise SubmissionError(_error_message(body, response), status_code=response.status_code)

        payload = unwrap_payload(body)
        if isinstance(payload, dict) and payload.get("status") == "processing":
            return self._poll(str(payload.get("requestId", "")))
        if _has_output(payload):
            return _to_result(payload)
        logger.warning("Unexpected response format: %s", body)
        raise SubmissionError("Invalid response format from server")

    def _parts(self, submission: Submission) -> Tuple[Dict[str, str], Dict[str, Tuple[str, bytes, str]]]:
        files = {"audio": (submission.filename, submission.audio, submission.content_type)}
        return submission.form_fields(), files

    def _decode(self, response: httpx.Response) -> Any:
        text = response.text
        if not text:
            return {}
        try:
            return response.json()
        except ValueError as exc:
            logger.error("Error parsing response: %s", exc)
            raise SubmissionError("Invalid response from server", status_code=response.status_code) from exc

    def _direct_webhook(self, submission: Submission) -> AssessmentResult:
        log_event("client.fallback", "-", endpoint=self.webhook_url)
        logger.info("Backend timed out, calling webhook directly: %s", self.webhook_url)
        data, files = self._parts(submission)
        try:
            response = self._http.post(self.webhook_url, data=data, files=files)
        except httpx.HTTPError as exc:
            raise SubmissionError(f"Failed to process your audio: {exc}") from exc
        if not response.is_success:
            raise SubmissionError(
                f"Failed to process your audio: Webhook call failed: {response.status_code}",
                status_code=response.status_code,
            )
        try:
            payload = unwrap_payload(response.json())
        except ValueError as exc:
            raise SubmissionError("Failed to process your audio: webhook payload was not JSON") from exc
        if not _has_output(payload):
            raise SubmissionError("Failed to process your audio: webhook returned no assessment", status_code=504)
        return _to_result(payload)

    def _poll(self, request_id: str) -> AssessmentResult:
        logger.info("Processing started with request ID: %s", request_id)
        deadline = self._clock() + self.poll_timeout
        attempt = 0
        while True:
            self._sleep(self.poll_interval)
            if self._clock() > deadline:
                break
            attempt += 1
            log_event("client.poll", request_id, attempt=attempt)
            try:
                response = self._http.get(f"{self.proxy_url}{STATUS_PATH}", params={"requestId": request_id})
            except httpx.HTTPError as exc:
                logger.error("Error polling for results: %s", exc)
                continue
            body = self._safe_json(response)
            if not response.is_success:
                logger.warning("Status check failed: %s", response.status_code)
                # A JSON error body means the job itself failed; anything else may be transient.
                if isinstance(body, dict):
                    raise SubmissionError(_error_message(body, response), status_code=response.status_code)
                continue
            payload = unwrap_payload(body)
            if _has_output(payload):
                return _to_result(payload)
        raise ProcessingTimeout()

    @staticmethod
    def _safe_json(response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError:
            return None


__all__ = ["ProcessingTimeout", "SubmissionClient", "SubmissionError"]
