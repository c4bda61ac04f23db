"""Pydantic schemas for the English check proxy API."""
from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field

from assessment.models import Criterion, StudyLevel


class HelloResp(BaseModel):
    message: str


class ErrorDetail(BaseModel):
    error: str
    details: Optional[str] = None


class PresetsResp(BaseModel):
    questions: List[str] = Field(default_factory=list)
    study_levels: List[StudyLevel] = Field(default_factory=list)
    criteria: List[Criterion] = Field(default_factory=list)
    min_duration_s: int
    max_duration_s: int
