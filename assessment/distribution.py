from __future__ import annotations  # Word-count position against the population of past responses

import math
from typing import List, Optional, Tuple

from pydantic import BaseModel


class WordCountDistribution(BaseModel):  # Where a response sits on the word-count bell curve
    word_count: float
    mean: float
    std_dev: float
    sample_size: Optional[int] = None
    z_score: float
    percentile: float


def _density(x: float, mean: float, std_dev: float) -> float:
    return (1.0 / (std_dev * math.sqrt(2 * math.pi))) * math.exp(-0.5 * ((x - mean) / std_dev) ** 2)


def word_count_percentile(word_count: float, mean: float, std_dev: float) -> float:  # Normal CDF scaled to 0-100
    if std_dev <= 0:
        raise ValueError("std_dev must be positive")
    z_score = (word_count - mean) / std_dev
    return (1 + math.erf(z_score / math.sqrt(2))) / 2 * 100


def bell_curve(mean: float, std_dev: float, points_per_sd: int = 10) -> List[Tuple[float, float]]:
    """Sample the normal density across three standard deviations.

    The lower bound is clipped at zero since word counts cannot be negative.
    """

    if std_dev <= 0:
        raise ValueError("std_dev must be positive")
    lower = max(0.0, mean - 3 * std_dev)
    upper = mean + 3 * std_dev
    step = std_dev / points_per_sd
    points: List[Tuple[float, float]] = []
    index = 0
    x = lower
    while x <= upper + 1e-9:
        points.append((x, _density(x, mean, std_dev)))
        index += 1
        x = lower + index * step
    return points


def describe_word_count(
    word_count: Optional[float],
    mean: Optional[float],
    std_dev: Optional[float],
    sample_size: Optional[int] = None,
) -> Optional[WordCountDistribution]:
    values = (word_count, mean, std_dev)
    if any(value is None or not math.isfinite(value) for value in values) or std_dev <= 0:
        return None
    z_score = (word_count - mean) / std_dev
    return WordCountDistribution(
        word_count=word_count,
        mean=mean,
        std_dev=std_dev,
        sample_size=sample_size,
        z_score=round(z_score, 3),
        percentile=round(word_count_percentile(word_count, mean, std_dev), 1),
    )


__all__ = ["WordCountDistribution", "bell_curve", "describe_word_count", "word_count_percentile"]
