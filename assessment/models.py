from __future__ import annotations  # Transit records for submissions and webhook assessments

from enum import Enum
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class StudyLevel(str, Enum):  # Student level sent alongside the recording
    THREE_UNITS = "3 Units"
    FOUR_UNITS = "4 Units"
    FIVE_UNITS = "5 Units"


class Criterion(BaseModel):  # Weighted rubric dimension
    name: str
    description: str = ""
    weight: int = Field(default=1, ge=0)


class Submission(BaseModel):  # One recording plus the metadata sent to the webhook
    audio: bytes
    filename: str = "recording.wav"
    content_type: str = "audio/wav"
    question: str = ""
    study_level: str = StudyLevel.THREE_UNITS.value
    criteria: Optional[str] = None

    def form_fields(self) -> Dict[str, str]:  # Non-file multipart fields, skipping empty ones
        fields: Dict[str, str] = {}
        if self.question:
            fields["question"] = self.question
        if self.study_level:
            fields["studyLevel"] = self.study_level
        if self.criteria:
            fields["criteria"] = self.criteria
        return fields


class CategoryScore(BaseModel):  # Per-criterion score returned by the webhook
    model_config = ConfigDict(extra="allow")

    score: float = 0.0
    comment: Optional[str] = ""

    @field_validator("score", mode="before")
    @classmethod
    def _coerce_score(cls, value: Any) -> Any:  # null or text scores count as 0
        try:
            return float(value)
        except (TypeError, ValueError):
            return 0.0

    @field_validator("comment", mode="before")
    @classmethod
    def _coerce_comment(cls, value: Any) -> Any:
        if value is None:
            return ""
        return value if isinstance(value, str) else str(value)


class Feedback(BaseModel):  # Free-text feedback lists
    model_config = ConfigDict(extra="allow")

    great_parts: List[str] = Field(default_factory=list)
    improvement_suggestions: List[str] = Field(default_factory=list)
    summary: str = ""

    @field_validator("great_parts", "improvement_suggestions", mode="before")
    @classmethod
    def _drop_nulls(cls, value: Any) -> Any:
        if value is None:
            return []
        if isinstance(value, list):
            return [item for item in value if item is not None]
        return value

    @field_validator("summary", mode="before")
    @classmethod
    def _coerce_summary(cls, value: Any) -> Any:
        return "" if value is None else value


class AssessmentOutput(BaseModel):
    model_config = ConfigDict(extra="allow")

    assessment: Dict[str, CategoryScore] = Field(default_factory=dict)
    feedback: Feedback = Field(default_factory=Feedback)

    @field_validator("assessment", mode="before")
    @classmethod
    def _coerce_scores(cls, value: Any) -> Any:  # Accept bare numbers from the legacy mock shape
        if not isinstance(value, dict):
            return value
        coerced: Dict[str, Any] = {}
        for category, data in value.items():
            if data is None:
                coerced[category] = {}
            elif isinstance(data, (int, float)) and not isinstance(data, bool):
                coerced[category] = {"score": data, "comment": ""}
            else:
                coerced[category] = data
        return coerced

    @field_validator("feedback", mode="before")
    @classmethod
    def _coerce_feedback(cls, value: Any) -> Any:
        if value is None:
            return {}
        if isinstance(value, str):
            return {"summary": value}
        return value


class WeightedAverage(BaseModel):
    model_config = ConfigDict(extra="allow")

    score: Optional[float] = None


class AssessmentResult(BaseModel):  # Webhook payload, consumed for display only
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    output: AssessmentOutput = Field(default_factory=AssessmentOutput)
    weighted_average: Optional[WeightedAverage] = Field(default=None, alias="weightedAverage")
    duration: Optional[float] = None
    word_count: Optional[float] = None
    transcript: Optional[str] = None
    population_mean: Optional[float] = None
    population_standard_deviation: Optional[float] = None
    sample_size: Optional[int] = None


class ProcessingAck(BaseModel):  # Acknowledgment returned when forwarding runs in the background
    model_config = ConfigDict(populate_by_name=True)

    status: Literal["processing"] = "processing"
    request_id: str = Field(alias="requestId")


__all__ = [
    "AssessmentOutput",
    "AssessmentResult",
    "CategoryScore",
    "Criterion",
    "Feedback",
    "ProcessingAck",
    "StudyLevel",
    "Submission",
    "WeightedAverage",
]
