# productlens/services/value_score.py

"""Single 0-10 desirability score from price, rating and review volume."""

import math

from productlens.models.product import ProductRecord

BASE_SCORE = 5.0
MAX_SCORE = 10.0

PRICE_WEIGHT = 2.0
PRICE_CEILING = 1000.0   # prices at or above this add nothing
PRICE_SPAN = 990.0       # prices at or below ceiling - span add the full weight
RATING_WEIGHT = 3.0
REVIEW_WEIGHT = 1.0
REVIEW_LOG_SCALE = 4.0   # 10^4 reviews saturate the review term

# Thresholds checked from the top; first match wins
_CATEGORY_THRESHOLDS: tuple[tuple[float, str], ...] = (
    (8.0, "excellent"),
    (6.0, "good"),
    (4.0, "fair"),
)


def _clamp01(value: float) -> float:
    return max(0.0, min(1.0, value))


def calculate_value_score(record: ProductRecord | None) -> float | None:
    """Score a record in [0, 10]; ``None`` when there is no record.

    Missing price, rating or review count simply contribute nothing.
    """
    if record is None:
        return None

    score = BASE_SCORE
    if record.price is not None:
        score += (
            _clamp01((PRICE_CEILING - record.price) / PRICE_SPAN)
            * PRICE_WEIGHT
        )
    if record.rating is not None:
        score += (record.rating / 5.0) * RATING_WEIGHT
    if record.review_count is not None:
        score += (
            _clamp01(math.log10(record.review_count + 1) / REVIEW_LOG_SCALE)
            * REVIEW_WEIGHT
        )
    return max(0.0, min(MAX_SCORE, score))


def value_category(score: float) -> str:
    """Label a value score: excellent, good, fair or poor."""
    for threshold, label in _CATEGORY_THRESHOLDS:
        if score >= threshold:
            return label
    return "poor"
