"""Turn a webhook assessment payload into a display-ready view."""
from __future__ import annotations

import math
import textwrap
from typing import Any, List, Literal, Optional

from pydantic import BaseModel, Field, ValidationError

from .distribution import WordCountDistribution, describe_word_count
from .models import AssessmentResult

Band = Literal["success", "warning", "danger"]

BAR_CELLS = 20


class ScoreRow(BaseModel):
    label: str
    score: int
    bar_width: float
    band: Band
    comment: str = ""


class ResultView(BaseModel):
    question: str = ""
    overall: Optional[ScoreRow] = None
    rows: List[ScoreRow] = Field(default_factory=list)
    great_parts: List[str] = Field(default_factory=list)
    improvement_suggestions: List[str] = Field(default_factory=list)
    feedback_summary: str = ""
    transcript: str = ""
    duration: str = "N/A"
    word_count: Optional[int] = None
    distribution: Optional[WordCountDistribution] = None


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _numeric(value: Any) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    if not math.isfinite(number):
        return 0.0
    return number


def clamp_score(value: Any) -> float:
    """Clamp a score to the 0-100 range used for bar widths."""

    return min(100.0, max(0.0, _numeric(value)))


def score_band(value: Any) -> Band:
    score = _numeric(value)
    if score >= 70:
        return "success"
    if score >= 40:
        return "warning"
    return "danger"


def category_label(category: str) -> str:
    words = category.split("_")
    return " ".join(word[:1].upper() + word[1:] for word in words)


def format_duration(seconds: Any) -> str:
    if not seconds:
        return "N/A"
    try:
        sec = int(float(seconds))
    except (TypeError, ValueError, OverflowError):
        return "N/A"
    minutes, remaining = divmod(sec, 60)
    if minutes > 0:
        return f"{minutes}:{remaining:02d}"
    return f"{sec}s"


def score_row(label: str, score: Any, comment: str = "") -> ScoreRow:
    return ScoreRow(
        label=label,
        score=_round_half_up(_numeric(score)),
        bar_width=clamp_score(score),
        band=score_band(score),
        comment=comment or "",
    )


def unwrap_payload(payload: Any) -> Any:  # Webhook responses sometimes arrive wrapped in a list
    if isinstance(payload, list):
        return payload[0] if payload else None
    return payload


def build_result_view(payload: Any, *, question: str = "") -> Optional[ResultView]:
    """Build the view for a raw webhook payload.

    Returns ``None`` when the payload carries no per-category assessment,
    in which case there is nothing to render.
    """

    data = unwrap_payload(payload)
    if isinstance(data, AssessmentResult):
        result = data
    elif isinstance(data, dict):
        try:
            result = AssessmentResult.model_validate(data)
        except ValidationError:
            return None
    else:
        return None

    assessment = result.output.assessment
    if not assessment:
        return None

    rows = [
        score_row(category_label(category), entry.score, entry.comment)
        for category, entry in assessment.items()
    ]
    overall = None
    if result.weighted_average is not None and result.weighted_average.score is not None:
        overall = score_row("Overall Assessment", result.weighted_average.score)

    feedback = result.output.feedback
    word_count = None
    if result.word_count is not None and math.isfinite(result.word_count):
        word_count = int(result.word_count)
    return ResultView(
        question=question,
        overall=overall,
        rows=rows,
        great_parts=list(feedback.great_parts),
        improvement_suggestions=list(feedback.improvement_suggestions),
        feedback_summary=feedback.summary,
        transcript=result.transcript or "",
        duration=format_duration(result.duration),
        word_count=word_count,
        distribution=describe_word_count(
            result.word_count,
            result.population_mean,
            result.population_standard_deviation,
            result.sample_size,
        ),
    )


def _bar(row: ScoreRow) -> str:
    filled = _round_half_up(row.bar_width / 100 * BAR_CELLS)
    return "[" + "#" * filled + "." * (BAR_CELLS - filled) + "]"


def _wrap(text: str, indent: str = "    ") -> List[str]:
    return textwrap.wrap(text, width=76, initial_indent=indent, subsequent_indent=indent) or [indent.rstrip()]


def render_text(view: ResultView) -> str:
    """Plain-text report used by the command line front-end."""

    lines: List[str] = ["Assessment Results", "=" * 18]
    if view.question:
        lines.append(f"Question: {view.question}")
    stats = [f"Duration: {view.duration}"]
    if view.word_count is not None:
        stats.append(f"Word Count: {view.word_count} words")
    lines.append("  ".join(stats))
    if view.distribution is not None:
        lines.append(
            f"Word count percentile: {view.distribution.percentile:.1f}% "
            f"(population mean {view.distribution.mean:g}, sd {view.distribution.std_dev:g})"
        )
    if view.transcript:
        lines.append("")
        lines.append("Transcript")
        lines.extend(_wrap(view.transcript))
    if view.overall is not None:
        lines.append("")
        lines.append(f"{view.overall.label}: {view.overall.score}/100 {_bar(view.overall)}")
    lines.append("")
    for row in view.rows:
        lines.append(f"{row.label:<24} {row.score:>3}% {_bar(row)}")
        if row.comment:
            lines.extend(_wrap(row.comment))
    if view.great_parts:
        lines.append("")
        lines.append("What You Did Well")
        lines.extend(f"  - {item}" for item in view.great_parts)
    if view.improvement_suggestions:
        lines.append("")
        lines.append("Improvement Suggestions")
        lines.extend(f"  - {item}" for item in view.improvement_suggestions)
    if view.feedback_summary:
        lines.append("")
        lines.append("Feedback")
        lines.extend(_wrap(view.feedback_summary))
    return "\n".join(lines) + "\n"


__all__ = [
    "ResultView",
    "ScoreRow",
    "build_result_view",
    "category_label",
    "clamp_score",
    "format_duration",
    "render_text",
    "score_band",
    "score_row",
    "unwrap_payload",
]
