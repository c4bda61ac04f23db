"""Optional MP3 conversion before upload."""
from __future__ import annotations

import logging
from pathlib import PurePath
from typing import Optional

import ffmpeg
from pydantic import BaseModel

from .validation import is_mp3_upload

logger = logging.getLogger(__name__)

MP3_BITRATE = "64k"


class TranscodeResult(BaseModel):
    data: bytes
    filename: str
    content_type: str
    transcoded: bool = False
    warning: Optional[str] = None


def _mp3_name(filename: str) -> str:
    stem = PurePath(filename or "recording").stem or "recording"
    return f"{stem}.mp3"


def to_mp3(data: bytes, filename: str, content_type: str, *, bitrate: str = MP3_BITRATE) -> TranscodeResult:
    """Convert audio to MP3, returning the original bytes when conversion fails."""

    if is_mp3_upload(filename, content_type):
        return TranscodeResult(data=data, filename=filename, content_type=content_type)
    try:
        out, _ = (
            ffmpeg
            .input("pipe:0")
            .output("pipe:1", format="mp3", audio_bitrate=bitrate, ac=1)
            .run(input=data, capture_stdout=True, capture_stderr=True, quiet=True)
        )
    except ffmpeg.Error as exc:
        detail = exc.stderr.decode(errors="ignore").strip().splitlines()[-1:] if exc.stderr else []
        warning = "MP3 conversion failed, uploading original format"
        logger.warning("%s: %s", warning, detail[0] if detail else exc)
        return TranscodeResult(data=data, filename=filename, content_type=content_type, warning=warning)
    except OSError as exc:
        warning = "MP3 encoder unavailable, uploading original format"
        logger.warning("%s: %s", warning, exc)
        return TranscodeResult(data=data, filename=filename, content_type=content_type, warning=warning)
    if not out:
        warning = "MP3 conversion produced no audio, uploading original format"
        logger.warning(warning)
        return TranscodeResult(data=data, filename=filename, content_type=content_type, warning=warning)
    logger.info("Transcoded %s (%d bytes) to MP3 (%d bytes)", filename, len(data), len(out))
    return TranscodeResult(data=out, filename=_mp3_name(filename), content_type="audio/mpeg", transcoded=True)


__all__ = ["TranscodeResult", "to_mp3"]
