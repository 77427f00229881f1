"""Shared numeric helpers and score thresholds."""

import math
from typing import Dict, Mapping

from ..models.enums import RiskCategory, ScoreBand
from ..models.scores import MAX_TRUST_SCORE, MIN_TRUST_SCORE


TRUST_SCORE_SPAN = MAX_TRUST_SCORE - MIN_TRUST_SCORE

SCORE_THRESHOLDS = {
    ScoreBand.EXCELLENT: 750,
    ScoreBand.GOOD: 650,
    ScoreBand.FAIR: 550,
    ScoreBand.POOR: 450,
}


def clamp(value: float, lower: float, upper: float) -> float:
    """Bound value to [lower, upper]; NaN collapses to lower."""
    if math.isnan(value):
        return lower
    return max(lower, min(upper, value))


def round_half_up(value: float) -> int:
    """Round .5 away from zero for positives, matching display rounding."""
    return int(math.floor(value + 0.5))


def sigmoid(z: float) -> float:
    """Logistic function that does not overflow for large |z|."""
    if z >= 0:
        return 1.0 / (1.0 + math.exp(-z))
    exp_z = math.exp(z)
    return exp_z / (1.0 + exp_z)


def composite_to_trust_score(composite: float) -> int:
    """Map a weighted 0-1 composite onto the 300-900 trust score range."""
    raw = MIN_TRUST_SCORE + clamp(composite, 0.0, 1.0) * TRUST_SCORE_SPAN
    return int(clamp(round_half_up(raw), MIN_TRUST_SCORE, MAX_TRUST_SCORE))


def weighted_sum(values: Mapping[str, float], weights: Mapping[str, float]) -> float:
    """Dot product over the keys of ``weights``."""
    return sum(float(values[name]) * float(weight) for name, weight in weights.items())


def score_band(trust_score: int) -> ScoreBand:
    """Name the band a trust score falls into."""
    for band, threshold in SCORE_THRESHOLDS.items():
        if trust_score >= threshold:
            return band
    return ScoreBand.VERY_POOR


def risk_category_for_score(trust_score: int) -> RiskCategory:
    """Risk category from trust score thresholds alone."""
    if trust_score >= SCORE_THRESHOLDS[ScoreBand.EXCELLENT]:
        return RiskCategory.LOW
    if trust_score >= SCORE_THRESHOLDS[ScoreBand.GOOD]:
        return RiskCategory.MEDIUM
    if trust_score >= SCORE_THRESHOLDS[ScoreBand.FAIR]:
        return RiskCategory.HIGH
    return RiskCategory.VERY_HIGH


def round_map(values: Mapping[str, float], digits: int = 2) -> Dict[str, float]:
    return {name: round(float(value), digits) for name, value in values.items()}
