"""Duration window and file-type checks applied before a recording is submitted."""
from __future__ import annotations

from pathlib import PurePath
from typing import Optional

MIN_DURATION_S = 20
MAX_DURATION_S = 90

MP3_MIME_TYPES = frozenset({"audio/mp3", "audio/mpeg", "audio/mpeg3"})


class AudioValidationError(ValueError):  # Base error for rejected recordings
    pass


class DurationError(AudioValidationError):
    def __init__(self, message: str, duration: float) -> None:
        super().__init__(message)
        self.duration = duration


class AudioTooShort(DurationError):
    pass


class AudioTooLong(DurationError):
    pass


class UnsupportedAudioType(AudioValidationError):
    def __init__(self, content_type: Optional[str]) -> None:
        super().__init__(f"Invalid file type: {content_type or 'unknown'}. Please select an MP3 file.")
        self.content_type = content_type


def format_clock(seconds: float) -> str:
    """Format seconds as ``M:SS``."""

    total = int(seconds)
    minutes, remaining = divmod(total, 60)
    return f"{minutes}:{remaining:02d}"


def check_duration(
    seconds: float,
    *,
    min_duration: float = MIN_DURATION_S,
    max_duration: float = MAX_DURATION_S,
) -> float:
    """Raise when ``seconds`` falls outside the accepted window; bounds are inclusive."""

    shown = round(seconds)
    if seconds < min_duration:
        raise AudioTooShort(
            f"Audio must be at least {min_duration:g} seconds long. Current duration: {shown} seconds.",
            seconds,
        )
    if seconds > max_duration:
        raise AudioTooLong(
            f"Audio must be no longer than {max_duration:g} seconds ({format_clock(max_duration)}). "
            f"Current duration: {shown} seconds.",
            seconds,
        )
    return seconds


def is_audio_mime(content_type: Optional[str]) -> bool:  # Proxy rule: any audio/* type
    return bool(content_type) and content_type.lower().startswith("audio/")


def is_mp3_upload(filename: Optional[str], content_type: Optional[str]) -> bool:  # Client upload rule
    if content_type and content_type.lower() in MP3_MIME_TYPES:
        return True
    return bool(filename) and PurePath(filename).suffix.lower() == ".mp3"


def check_upload(filename: Optional[str], content_type: Optional[str]) -> None:
    if not is_mp3_upload(filename, content_type):
        raise UnsupportedAudioType(content_type)


__all__ = [
    "AudioTooLong",
    "AudioTooShort",
    "AudioValidationError",
    "DurationError",
    "MAX_DURATION_S",
    "MIN_DURATION_S",
    "UnsupportedAudioType",
    "check_duration",
    "check_upload",
    "format_clock",
    "is_audio_mime",
    "is_mp3_upload",
]
