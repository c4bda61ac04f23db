from __future__ import annotations  # Form state behind a single check-english submission

from typing import List

from pydantic import BaseModel, Field

from assessment.criteria import default_criteria, encode_criteria, with_weight
from assessment.models import Criterion, StudyLevel, Submission
from config.presets import Presets

from .audio_input import PreparedAudio


class QuestionRequired(ValueError):
    def __init__(self) -> None:
        super().__init__("Please enter a question or select a preset question")


class CheckForm(BaseModel):  # Question, level and rubric weights chosen by the user
    question: str = ""
    custom_question: bool = True
    study_level: StudyLevel = StudyLevel.THREE_UNITS
    criteria: List[Criterion] = Field(default_factory=default_criteria)

    def set_question_type(self, custom: bool) -> None:  # Switching between custom and preset clears the question
        self.custom_question = custom
        self.question = ""

    def choose_preset(self, presets: Presets, index: int) -> str:
        self.custom_question = False
        self.question = presets.question(index)
        return self.question

    def set_weight(self, name: str, value: object) -> None:
        self.criteria = with_weight(self.criteria, name, value)

    def validate_question(self) -> str:
        question = self.question.strip()
        if not question:
            raise QuestionRequired()
        return question

    def criteria_json(self) -> str:
        return encode_criteria(self.criteria)

    def submission(self, audio: PreparedAudio) -> Submission:
        return Submission(
            audio=audio.data,
            filename=audio.filename,
            content_type=audio.content_type,
            question=self.validate_question(),
            study_level=self.study_level.value,
            criteria=self.criteria_json(),
        )


__all__ = ["CheckForm", "QuestionRequired"]
