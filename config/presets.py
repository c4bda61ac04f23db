"""YAML-driven preset questions and rubric defaults."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import List

import yaml
from pydantic import BaseModel, Field

from assessment.criteria import DEFAULT_CRITERIA
from assessment.models import Criterion, StudyLevel

logger = logging.getLogger(__name__)

DEFAULT_QUESTIONS = [
    "Talk about your dream vacation.",
    "Tell me about yourself.",
    "Describe your best friend and his hobbies.",
]


class Presets(BaseModel):
    questions: List[str] = Field(default_factory=lambda: list(DEFAULT_QUESTIONS))
    study_levels: List[StudyLevel] = Field(default_factory=lambda: list(StudyLevel))
    criteria: List[Criterion] = Field(default_factory=lambda: [c.model_copy() for c in DEFAULT_CRITERIA])

    def question(self, index: int) -> str:
        """Return the 1-based preset question."""

        if index < 1 or index > len(self.questions):
            raise IndexError(f"Preset question {index} out of range (1-{len(self.questions)})")
        return self.questions[index - 1]


def _load_yaml(path: Path) -> dict:
    with path.open("r", encoding="utf-8") as handle:
        return yaml.safe_load(handle) or {}


def load_presets(path: str | Path | None = None) -> Presets:
    """Load presets from YAML, using built-in defaults when the file is absent."""

    if path is None:
        from .settings import settings

        path = settings.PRESETS_PATH
    target = Path(path)
    try:
        raw = _load_yaml(target)
    except FileNotFoundError:
        logger.info("Presets file %s not found, using defaults", target)
        return Presets()
    return Presets.model_validate(raw)


__all__ = ["DEFAULT_QUESTIONS", "Presets", "load_presets"]
