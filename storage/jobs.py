"""Persistence helpers for background assessment jobs."""
from __future__ import annotations

import datetime as dt
import json
import uuid
from typing import Any, Literal, Optional

from pydantic import BaseModel

from .migrate import migrate
from .sqlite import get_conn

JobStatus = Literal["pending", "completed", "failed"]


class JobRecord(BaseModel):
    request_id: str
    status: JobStatus
    created_at: str
    updated_at: str
    question: Optional[str] = None
    result: Any = None
    error: Optional[str] = None
    http_status: Optional[int] = None


def _now() -> str:
    return dt.datetime.now(dt.timezone.utc).isoformat()


def _ensure_schema() -> None:
    from config.settings import settings

    migrate(settings.DB_PATH)


def create_job(question: Optional[str] = None) -> str:
    """Insert a pending job row and return its request id."""

    _ensure_schema()
    request_id = uuid.uuid4().hex
    timestamp = _now()
    with get_conn() as conn:
        conn.execute(
            """INSERT INTO assessment_jobs
               (request_id, status, created_at, updated_at, question)
               VALUES (?, 'pending', ?, ?, ?)""",
            (request_id, timestamp, timestamp, question),
        )
    return request_id


def complete_job(request_id: str, result: Any) -> None:
    with get_conn() as conn:
        conn.execute(
            """UPDATE assessment_jobs
               SET status = 'completed', updated_at = ?, result_json = ?, error = NULL, http_status = 200
               WHERE request_id = ?""",
            (_now(), json.dumps(result, ensure_ascii=False), request_id),
        )


def fail_job(request_id: str, error: str, http_status: int = 500) -> None:
    with get_conn() as conn:
        conn.execute(
            """UPDATE assessment_jobs
               SET status = 'failed', updated_at = ?, error = ?, http_status = ?
               WHERE request_id = ?""",
            (_now(), error, http_status, request_id),
        )


def get_job(request_id: str) -> Optional[JobRecord]:
    """Load a job by request id, or ``None`` when it was never created."""

    _ensure_schema()
    with get_conn() as conn:
        row = conn.execute(
            """SELECT request_id, status, created_at, updated_at, question, result_json, error, http_status
               FROM assessment_jobs WHERE request_id = ?""",
            (request_id,),
        ).fetchone()
    if row is None:
        return None
    return JobRecord(
        request_id=row["request_id"],
        status=row["status"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
        question=row["question"],
        result=json.loads(row["result_json"]) if row["result_json"] else None,
        error=row["error"],
        http_status=row["http_status"],
    )


__all__ = ["JobRecord", "complete_job", "create_job", "fail_job", "get_job"]
