"""Forwarding helpers shared by the synchronous and background proxy paths."""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from assessment.models import Submission
from observability import log_event
from storage.jobs import complete_job, fail_job
from webhook import HttpClient, WebhookError, WebhookRoute, WebhookTimeout, forward

logger = logging.getLogger(__name__)


def relay(
    submission: Submission,
    *,
    route: WebhookRoute,
    client: Optional[HttpClient] = None,
    request_id: str = "-",
) -> Any:
    """Forward one submission and log its timing; webhook errors propagate."""

    events: List[Dict[str, Any]] = []
    try:
        payload = forward(submission, route=route, client=client, events=events)
    except WebhookError as exc:
        elapsed = events[-1]["ms"] if events else None
        log_event(
            "webhook.failed",
            request_id,
            error=type(exc).__name__,
            http_status=exc.status_code,
            ms=elapsed,
        )
        raise
    log_event("webhook.forward", request_id, ms=events[-1]["ms"] if events else None, bytes=len(submission.audio))
    return payload


def run_background_forward(
    request_id: str,
    submission: Submission,
    route: WebhookRoute,
    client: Optional[HttpClient] = None,
) -> None:
    """Forward in the background and record the outcome in the job store.

    Failures end up in the job row instead of being raised, since nobody
    is waiting on this call.
    """

    try:
        payload = relay(submission, route=route, client=client, request_id=request_id)
    except WebhookTimeout as exc:
        fail_job(request_id, str(exc), http_status=504)
        log_event("job.failed", request_id, http_status=504)
        return
    except WebhookError as exc:
        fail_job(request_id, str(exc), http_status=500)
        log_event("job.failed", request_id, http_status=500)
        return
    except Exception as exc:  # noqa: BLE001
        logger.exception("Background forward crashed for %s", request_id)
        fail_job(request_id, f"Failed to process request: {exc}", http_status=500)
        log_event("job.failed", request_id, http_status=500)
        return
    complete_job(request_id, payload)
    log_event("job.completed", request_id)


__all__ = ["relay", "run_background_forward"]
