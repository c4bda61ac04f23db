"""Measure recording length with ffprobe."""
from __future__ import annotations

import logging
import os
import tempfile
from typing import Any, Dict, Optional

import ffmpeg

logger = logging.getLogger(__name__)


def _duration_from_probe(info: Dict[str, Any]) -> Optional[float]:
    fmt = info.get("format") or {}
    if fmt.get("duration") is not None:
        return float(fmt["duration"])
    for stream in info.get("streams") or []:
        if stream.get("codec_type") == "audio" and stream.get("duration") is not None:
            return float(stream["duration"])
    return None


def probe_duration(data: bytes, suffix: str = "") -> Optional[float]:
    """Return the duration of ``data`` in seconds, or ``None`` when it cannot be decoded."""

    handle = tempfile.NamedTemporaryFile(suffix=suffix, delete=False)
    try:
        handle.write(data)
        handle.close()
        info = ffmpeg.probe(handle.name)
        return _duration_from_probe(info)
    except ffmpeg.Error as exc:
        logger.warning("ffprobe could not read audio: %s", exc.stderr.decode(errors="ignore") if exc.stderr else exc)
        return None
    except (OSError, ValueError) as exc:
        logger.warning("Audio duration probe unavailable: %s", exc)
        return None
    finally:
        os.unlink(handle.name)


__all__ = ["probe_duration"]
