"""Audio capture, validation and conversion helpers."""
from .probe import probe_duration
from .recorder import MicrophoneUnavailable, Recorder, Recording
from .transcode import TranscodeResult, to_mp3
from .validation import (
    AudioTooLong,
    AudioTooShort,
    AudioValidationError,
    DurationError,
    UnsupportedAudioType,
    check_duration,
    check_upload,
    format_clock,
    is_audio_mime,
    is_mp3_upload,
)

__all__ = [
    "AudioTooLong",
    "AudioTooShort",
    "AudioValidationError",
    "DurationError",
    "MicrophoneUnavailable",
    "Recorder",
    "Recording",
    "TranscodeResult",
    "UnsupportedAudioType",
    "check_duration",
    "check_upload",
    "format_clock",
    "is_audio_mime",
    "is_mp3_upload",
    "probe_duration",
    "to_mp3",
]
