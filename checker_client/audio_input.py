"""Validate and optionally convert a recording before it leaves the client."""
from __future__ import annotations

import logging
import mimetypes
from pathlib import Path, PurePath
from typing import Callable, Optional

from pydantic import BaseModel

from audio.probe import probe_duration
from audio.recorder import Recording
from audio.transcode import to_mp3
from audio.validation import MAX_DURATION_S, MIN_DURATION_S, check_duration, check_upload

logger = logging.getLogger(__name__)

DurationProbe = Callable[[bytes, str], Optional[float]]


class PreparedAudio(BaseModel):  # Audio that passed every client-side check
    data: bytes
    filename: str
    content_type: str
    duration: float
    transcoded: bool = False
    warning: Optional[str] = None


def _finalize(
    data: bytes,
    filename: str,
    content_type: str,
    duration: float,
    *,
    transcode: bool,
) -> PreparedAudio:
    if not transcode:
        return PreparedAudio(data=data, filename=filename, content_type=content_type, duration=duration)
    converted = to_mp3(data, filename, content_type)
    if converted.warning:
        logger.warning("%s (%s)", converted.warning, filename)
    return PreparedAudio(
        data=converted.data,
        filename=converted.filename,
        content_type=converted.content_type,
        duration=duration,
        transcoded=converted.transcoded,
        warning=converted.warning,
    )


def prepare_upload(
    data: bytes,
    filename: str,
    content_type: Optional[str] = None,
    *,
    min_duration: float = MIN_DURATION_S,
    max_duration: float = MAX_DURATION_S,
    transcode: bool = False,
    probe: DurationProbe = probe_duration,
) -> PreparedAudio:
    """Check an uploaded file's type and length.

    A file whose duration cannot be read counts as zero seconds long, so it
    is rejected as too short rather than sent blind.
    """

    content_type = content_type or mimetypes.guess_type(filename)[0] or "application/octet-stream"
    check_upload(filename, content_type)
    duration = probe(data, PurePath(filename).suffix) or 0.0
    check_duration(duration, min_duration=min_duration, max_duration=max_duration)
    return _finalize(data, filename, content_type, duration, transcode=transcode)


def prepare_file(path: str | Path, **kwargs) -> PreparedAudio:
    target = Path(path)
    return prepare_upload(target.read_bytes(), target.name, **kwargs)


def prepare_recording(
    recording: Recording,
    *,
    min_duration: float = MIN_DURATION_S,
    max_duration: float = MAX_DURATION_S,
    transcode: bool = False,
) -> PreparedAudio:
    check_duration(recording.duration, min_duration=min_duration, max_duration=max_duration)
    return _finalize(
        recording.data,
        recording.filename,
        recording.content_type,
        recording.duration,
        transcode=transcode,
    )


__all__ = ["PreparedAudio", "prepare_file", "prepare_recording", "prepare_upload"]
