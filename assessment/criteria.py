"""Rubric criteria defaults and their JSON wire format."""
from __future__ import annotations

import json
import logging
from typing import Any, List, Sequence

from pydantic import TypeAdapter

from .models import Criterion

logger = logging.getLogger(__name__)

DEFAULT_CRITERIA: List[Criterion] = [
    Criterion(name="Vocabulary", description="Richness and appropriateness of vocabulary", weight=1),
    Criterion(name="Clarity", description="Clarity of expression", weight=1),
    Criterion(name="Fluency", description="Fluency and flow of speech", weight=1),
    Criterion(name="Grammar", description="Grammar and syntax correctness", weight=1),
]

_CRITERIA_LIST = TypeAdapter(List[Criterion])


def default_criteria() -> List[Criterion]:
    """Return a fresh copy of the built-in rubric."""

    return [criterion.model_copy() for criterion in DEFAULT_CRITERIA]


def encode_criteria(criteria: Sequence[Criterion]) -> str:
    """Serialise criteria the way a browser ``JSON.stringify`` call would."""

    payload = [
        {"name": item.name, "description": item.description, "weight": item.weight}
        for item in criteria
    ]
    return json.dumps(payload, separators=(",", ":"), ensure_ascii=False)


def parse_criteria(raw: str) -> List[Criterion]:
    """Parse a criteria JSON array back into models."""

    return _CRITERIA_LIST.validate_json(raw)


def normalize_weight(value: Any) -> int:
    try:
        weight = int(value)
    except (TypeError, ValueError):
        weight = 0
    return max(0, weight)


def with_weight(criteria: Sequence[Criterion], name: str, value: Any) -> List[Criterion]:
    """Return a copy of ``criteria`` with the weight of ``name`` replaced."""

    if not any(item.name == name for item in criteria):
        raise KeyError(f"Unknown criterion '{name}'")
    weight = normalize_weight(value)
    return [
        item.model_copy(update={"weight": weight}) if item.name == name else item.model_copy()
        for item in criteria
    ]


def reserialize_criteria(raw: str) -> str:
    """Normalise a criteria field received from a client.

    Valid JSON is re-dumped compactly; anything else is passed through
    unchanged so the webhook still sees what the client sent.
    """

    try:
        parsed = json.loads(raw)
    except (TypeError, ValueError) as exc:
        logger.warning("Failed to parse criteria as JSON, sending as-is: %s", exc)
        return raw
    return json.dumps(parsed, separators=(",", ":"), ensure_ascii=False)


__all__ = [
    "DEFAULT_CRITERIA",
    "default_criteria",
    "encode_criteria",
    "normalize_weight",
    "parse_criteria",
    "reserialize_criteria",
    "with_weight",
]
