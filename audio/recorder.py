"""Microphone capture with an enforced duration window."""
from __future__ import annotations

import io
import logging
import wave
from typing import Callable, List, Optional, Protocol

from pydantic import BaseModel

from .validation import MAX_DURATION_S, MIN_DURATION_S, AudioTooShort

logger = logging.getLogger(__name__)

WARNING_WINDOW_S = 10


class MicrophoneUnavailable(RuntimeError):
    def __init__(self, reason: str = "") -> None:
        super().__init__("Could not access microphone. Please check your permissions.")
        self.reason = reason


class FrameSource(Protocol):  # Anything that yields one second of PCM per read
    sample_rate: int
    channels: int
    sample_width: int

    def open(self) -> None: ...

    def read(self) -> bytes: ...

    def close(self) -> None: ...


class PyAudioSource:  # Default input device through PortAudio
    def __init__(self, sample_rate: int = 16000, channels: int = 1, device_index: Optional[int] = None) -> None:
        self.sample_rate = sample_rate
        self.channels = channels
        self.sample_width = 2
        self.device_index = device_index
        self._pa = None
        self._stream = None

    def open(self) -> None:
        try:
            import pyaudio  # loaded lazily, PortAudio is only needed for live capture
        except ImportError as exc:
            raise MicrophoneUnavailable("pyaudio is not installed") from exc
        self._pa = pyaudio.PyAudio()
        try:
            self._stream = self._pa.open(
                format=self._pa.get_format_from_width(self.sample_width),
                channels=self.channels,
                rate=self.sample_rate,
                input=True,
                input_device_index=self.device_index,
                frames_per_buffer=self.sample_rate,
            )
        except OSError:
            self._pa.terminate()
            self._pa = None
            raise

    def read(self) -> bytes:
        return self._stream.read(self.sample_rate, exception_on_overflow=False)

    def close(self) -> None:
        if self._stream is not None:
            self._stream.stop_stream()
            self._stream.close()
            self._stream = None
        if self._pa is not None:
            self._pa.terminate()
            self._pa = None


class Recording(BaseModel):
    data: bytes
    duration: float
    filename: str = "recording.wav"
    content_type: str = "audio/wav"


class Recorder:  # One recording session; auto-stops at the maximum duration
    def __init__(
        self,
        source: Optional[FrameSource] = None,
        *,
        min_duration: float = MIN_DURATION_S,
        max_duration: float = MAX_DURATION_S,
    ) -> None:
        self.source = source or PyAudioSource()
        self.min_duration = min_duration
        self.max_duration = max_duration
        self.elapsed = 0
        self.is_recording = False
        self._frames: List[bytes] = []
        self._result: Optional[Recording] = None

    def start(self) -> None:
        self.elapsed = 0
        self._frames = []
        self._result = None
        try:
            self.source.open()
        except MicrophoneUnavailable:
            raise
        except OSError as exc:
            logger.error("Error accessing microphone: %s", exc)
            raise MicrophoneUnavailable(str(exc)) from exc
        self.is_recording = True
        logger.info("Recording started (max %ss)", self.max_duration)

    def tick(self) -> bool:
        """Capture one second of audio; returns ``False`` once recording has stopped."""

        if not self.is_recording:
            return False
        frame = self.source.read()
        if frame:
            self._frames.append(frame)
        self.elapsed += 1
        if self.elapsed >= self.max_duration:
            logger.info("Maximum duration reached, stopping recording")
            self._finish()
            return False
        return True

    def seconds_left(self) -> Optional[int]:  # Countdown shown during the final seconds
        remaining = int(self.max_duration - self.elapsed)
        if self.is_recording and remaining <= WARNING_WINDOW_S:
            return remaining
        return None

    def record(self, should_stop: Optional[Callable[[int], bool]] = None) -> Recording:
        """Record until ``should_stop(elapsed)`` is true or the maximum is reached."""

        self.start()
        while self.tick():
            if should_stop is not None and should_stop(self.elapsed):
                break
        return self.stop()

    def stop(self) -> Recording:
        if self.is_recording:
            self._finish()
        if self._result is None:
            raise RuntimeError("Recorder was never started")
        if self._result.duration < self.min_duration:
            error = AudioTooShort(
                f"Recording is too short. Please record at least {self.min_duration:g} seconds.",
                self._result.duration,
            )
            error.recording = self._result  # type: ignore[attr-defined]
            raise error
        return self._result

    def _finish(self) -> None:
        self.is_recording = False
        self.source.close()
        pcm = b"".join(self._frames)
        bytes_per_second = self.source.sample_rate * self.source.channels * self.source.sample_width
        duration = len(pcm) / bytes_per_second if bytes_per_second else 0.0
        buffer = io.BytesIO()
        with wave.open(buffer, "wb") as wav:
            wav.setnchannels(self.source.channels)
            wav.setsampwidth(self.source.sample_width)
            wav.setframerate(self.source.sample_rate)
            wav.writeframes(pcm)
        self._result = Recording(data=buffer.getvalue(), duration=round(duration, 2))
        logger.info("Recording stopped after %.1fs", duration)


__all__ = ["FrameSource", "MicrophoneUnavailable", "PyAudioSource", "Recorder", "Recording"]
