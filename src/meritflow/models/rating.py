"""Performance ratings as a tagged value.

Review exports carry either numbers ("4.2", "80%") or named categories
("High Impact Performer"). Both survive ingestion untouched and are compared
only through :func:`rating_to_scale`.
"""

from __future__ import annotations

import re
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, Field

SCALE_MAX = 5.0


class NumericRating(BaseModel):
    """A rating given as a number on ``scale`` (5 for 0-5, 1 for percentages)."""

    model_config = {"frozen": True}

    kind: Literal["numeric"] = "numeric"
    value: float
    scale: float = SCALE_MAX


class CategoricalRating(BaseModel):
    """A free-text rating label, kept verbatim."""

    model_config = {"frozen": True}

    kind: Literal["categorical"] = "categorical"
    label: str


PerformanceRating = Annotated[
    Union[NumericRating, CategoricalRating], Field(discriminator="kind")
]

# Checked in order; the first tier whose pattern matches wins.
_CATEGORY_TIERS: list[tuple[re.Pattern[str], float]] = [
    (re.compile(r"\b(unsatisfactory|does not meet|below expectations|poor|low)\b"), 1.0),
    (re.compile(r"\b(developing|partially|needs improvement|inconsistent|building)\b"), 2.0),
    (re.compile(r"\b(exceeds|exceeded)\b"), 4.5),
    (re.compile(r"\b(high|excellent|impact|exceptional|outstanding|top)\b"), 5.0),
    (re.compile(r"\b(successful|solid|good|meets|strong|achieves|effective)\b"), 3.5),
]

TOP_TIER_MIN = 4.5
SOLID_MIN = 3.5


def category_score(label: str) -> Optional[float]:
    """Map a rating label onto the 0-5 scale, or None when unrecognised."""
    text = label.strip().lower()
    for pattern, score in _CATEGORY_TIERS:
        if pattern.search(text):
            return score
    return None


def rating_to_scale(rating: Optional[NumericRating | CategoricalRating]) -> Optional[float]:
    """Single conversion of any rating to a 0-5 float."""
    if rating is None:
        return None
    if isinstance(rating, CategoricalRating):
        return category_score(rating.label)
    if rating.scale <= 0:
        return None
    scaled = rating.value / rating.scale * SCALE_MAX
    return max(0.0, min(SCALE_MAX, scaled))


def rating_label(rating: Optional[NumericRating | CategoricalRating]) -> str:
    """Human-readable form for reports and reasoning strings."""
    if rating is None:
        return ""
    if isinstance(rating, CategoricalRating):
        return rating.label
    if rating.scale == 1:
        return f"{rating.value * 100:g}%"
    return f"{rating.value:g}"


def is_top_tier(rating: Optional[NumericRating | CategoricalRating]) -> bool:
    score = rating_to_scale(rating)
    return score is not None and score >= TOP_TIER_MIN


def is_solid(rating: Optional[NumericRating | CategoricalRating]) -> bool:
    score = rating_to_scale(rating)
    return score is not None and SOLID_MIN <= score < TOP_TIER_MIN
