from __future__ import annotations  # Assessment domain package exports

from .criteria import DEFAULT_CRITERIA, encode_criteria, parse_criteria
from .models import AssessmentResult, Criterion, ProcessingAck, StudyLevel, Submission
from .results import ResultView, ScoreRow, build_result_view, render_text

__all__ = [
    "AssessmentResult",
    "Criterion",
    "DEFAULT_CRITERIA",
    "ProcessingAck",
    "ResultView",
    "ScoreRow",
    "StudyLevel",
    "Submission",
    "build_result_view",
    "encode_criteria",
    "parse_criteria",
    "render_text",
]
