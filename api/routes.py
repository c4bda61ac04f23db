"""FastAPI routes for the check-english proxy."""
from __future__ import annotations

import logging
from pathlib import PurePath
from typing import Any, Dict, Optional, Tuple

from fastapi import APIRouter, BackgroundTasks, Depends, File, Form, HTTPException, Query, UploadFile
from fastapi.responses import JSONResponse

from api.schemas import ErrorDetail, HelloResp, PresetsResp
from assessment.criteria import reserialize_criteria
from assessment.models import ProcessingAck, Submission
from audio.probe import probe_duration
from audio.transcode import to_mp3
from audio.validation import DurationError, check_duration, is_audio_mime
from config.presets import load_presets
from config.settings import settings
from observability import log_event
from services.relay import relay, run_background_forward
from storage.jobs import create_job, get_job
from webhook import HttpClient, WebhookError, WebhookRoute, WebhookTimeout


logger = logging.getLogger(__name__)

router = APIRouter()

READ_CHUNK_BYTES = 1024 * 1024

MOCK_RESULT: Dict[str, Any] = {
    "output": {
        "assessment": {
            "pronunciation": 8,
            "vocabulary": 7,
            "grammar": 8,
            "fluency": 7,
        },
        "feedback": (
            "Your pronunciation is good, but you could improve your vocabulary. "
            "Your grammar is strong, and your fluency is developing well."
        ),
    }
}


def get_webhook_client() -> Optional[HttpClient]:  # Overridden in tests; None means a fresh httpx client per call
    return None


def get_webhook_route() -> WebhookRoute:
    return WebhookRoute(
        url=settings.WEBHOOK_URL,
        timeout_s=settings.WEBHOOK_TIMEOUT_S,
        audio_filename=settings.WEBHOOK_AUDIO_FILENAME,
    )


def _error(status_code: int, error: str, details: Optional[str] = None) -> HTTPException:
    return HTTPException(status_code=status_code, detail=ErrorDetail(error=error, details=details).model_dump())


def _read_upload(audio: UploadFile) -> bytes:
    limit = settings.MAX_UPLOAD_BYTES
    chunks = []
    total = 0
    try:
        while True:
            chunk = audio.file.read(READ_CHUNK_BYTES)
            if not chunk:
                break
            total += len(chunk)
            if total > limit:
                raise HTTPException(
                    status_code=413,
                    detail=f"File too large. Maximum size is {limit // (1024 * 1024)}MB.",
                )
            chunks.append(chunk)
    finally:
        audio.file.close()
    return b"".join(chunks)


def _build_submission(
    audio: Optional[UploadFile],
    question: Optional[str],
    study_level: Optional[str],
    criteria: Optional[str],
) -> Tuple[Submission, bool]:  # The flag is true when the audio was converted to MP3
    if audio is None:
        raise HTTPException(status_code=400, detail="No audio file provided")
    content_type = audio.content_type or ""
    if not is_audio_mime(content_type):
        raise HTTPException(status_code=400, detail="Only audio files are allowed")
    data = _read_upload(audio)
    if not data:
        raise HTTPException(status_code=400, detail="No audio file provided")
    filename = audio.filename or "recording.wav"

    if settings.ENFORCE_DURATION:
        duration = probe_duration(data, PurePath(filename).suffix)
        if duration is None:
            logger.warning("Could not measure duration of %s, forwarding without check", filename)
        else:
            try:
                check_duration(
                    duration,
                    min_duration=settings.MIN_DURATION_S,
                    max_duration=settings.MAX_DURATION_S,
                )
            except DurationError as exc:
                raise HTTPException(status_code=400, detail=str(exc)) from exc

    transcoded = False
    if settings.TRANSCODE_UPLOADS:
        converted = to_mp3(data, filename, content_type)
        data, filename, content_type = converted.data, converted.filename, converted.content_type
        transcoded = converted.transcoded

    submission = Submission(
        audio=data,
        filename=filename,
        content_type=content_type,
        question=question or "",
        study_level=study_level or "",
        criteria=reserialize_criteria(criteria) if criteria else None,
    )
    return submission, transcoded


@router.get("/api/hello", response_model=HelloResp)
@router.get("/hello", response_model=HelloResp)
def hello() -> HelloResp:
    return HelloResp(message="Hello from the English check proxy!")


@router.get("/api/presets", response_model=PresetsResp)
def presets() -> PresetsResp:
    loaded = load_presets()
    return PresetsResp(
        questions=loaded.questions,
        study_levels=loaded.study_levels,
        criteria=loaded.criteria,
        min_duration_s=settings.MIN_DURATION_S,
        max_duration_s=settings.MAX_DURATION_S,
    )


@router.post("/api/check-english")
@router.post("/check-english")
def check_english(
    background_tasks: BackgroundTasks,
    audio: Optional[UploadFile] = File(None),
    question: Optional[str] = Form(None),
    studyLevel: Optional[str] = Form(None),
    criteria: Optional[str] = Form(None),
    client: Optional[HttpClient] = Depends(get_webhook_client),
    route: WebhookRoute = Depends(get_webhook_route),
) -> JSONResponse:
    submission, transcoded = _build_submission(audio, question, studyLevel, criteria)
    if transcoded:
        route = route.model_copy(update={"audio_filename": submission.filename})

    if settings.FORWARD_MODE == "background":
        request_id = create_job(submission.question or None)
        log_event(
            "submission.received",
            request_id,
            bytes=len(submission.audio),
            content_type=submission.content_type,
            status="processing",
        )
        background_tasks.add_task(run_background_forward, request_id, submission, route, client)
        ack = ProcessingAck(requestId=request_id)
        return JSONResponse(status_code=202, content=ack.model_dump(by_alias=True))

    log_event("submission.received", "-", bytes=len(submission.audio), content_type=submission.content_type)
    try:
        payload = relay(submission, route=route, client=client)
    except WebhookTimeout as exc:
        raise _error(504, "Webhook request timed out", str(exc)) from exc
    except WebhookError as exc:
        raise _error(500, "Failed to forward request to webhook", str(exc)) from exc
    except Exception as exc:  # noqa: BLE001
        logger.exception("Unexpected error while forwarding submission")
        raise _error(500, "Failed to process request", str(exc)) from exc
    return JSONResponse(content=payload)


@router.get("/api/status")
def status(requestId: Optional[str] = Query(None)) -> JSONResponse:
    if not requestId:
        raise HTTPException(status_code=400, detail="Missing requestId parameter")
    logger.info("Status check for request ID: %s", requestId)
    job = get_job(requestId)
    if job is None:
        if settings.STATUS_MOCK_ENABLED:
            return JSONResponse(content=MOCK_RESULT)
        raise HTTPException(status_code=404, detail="Unknown requestId")
    if job.status == "completed":
        return JSONResponse(content=job.result)
    if job.status == "failed":
        raise _error(job.http_status or 500, job.error or "Failed to process request")
    ack = ProcessingAck(requestId=job.request_id)
    return JSONResponse(content=ack.model_dump(by_alias=True))
