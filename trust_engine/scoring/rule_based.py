"""Deterministic rule-based trust scorer.

Component scores are computed on a 0-100 scale, combined with the canonical
weights (utility .35, upi .30, location .20, social .15) and mapped onto
300-900. Confidence reflects data completeness, not the score itself.
"""

import logging
from typing import Dict, Optional

from ..models.enums import ScoreSource, SignalLevel
from ..models.features import (
    FeatureRecord,
    LocationFeatures,
    SocialFeatures,
    UpiFeatures,
    UtilityFeatures,
)
from ..models.model_state import PRIOR_WEIGHTS
from ..models.scores import ComponentScores, Explanations, ScoreResult
from .numeric import clamp, composite_to_trust_score, risk_category_for_score, round_map, weighted_sum


logger = logging.getLogger(__name__)

RULE_BASED_MODEL_VERSION = "rule-based-v1"
MODEL_WEIGHTS: Dict[str, float] = dict(PRIOR_WEIGHTS)

HIGH_INCOME_THRESHOLD = 5000.0

_CONSISTENCY_POINTS = {SignalLevel.HIGH: 30.0, SignalLevel.MEDIUM: 20.0, SignalLevel.LOW: 10.0}
_VARIANCE_POINTS = {SignalLevel.LOW: 20.0, SignalLevel.MEDIUM: 12.0, SignalLevel.HIGH: 5.0}
_NETWORK_POINTS = {SignalLevel.HIGH: 40.0, SignalLevel.MEDIUM: 25.0, SignalLevel.LOW: 10.0}


def utility_score(utility: UtilityFeatures) -> float:
    """Bill payment discipline, 0-100."""
    if not utility.has_data:
        return 0.0

    score = utility.on_time_ratio * 50.0
    score -= min(utility.missed_payments * 5.0, 20.0)

    if utility.months_tracked >= 12:
        score += 20.0
    elif utility.months_tracked >= 6:
        score += 15.0
    elif utility.months_tracked >= 3:
        score += 10.0
    else:
        score += 5.0

    if utility.avg_payment_amount > 0:
        score += 10.0
    if utility.missed_payments == 0 and utility.months_tracked >= 6:
        score += 10.0
    return clamp(score, 0.0, 100.0)


def upi_score(upi: UpiFeatures) -> float:
    """Payment-app transaction stability, 0-100."""
    if not upi.has_data:
        return 0.0

    score = min(upi.avg_transactions_per_day / 10.0, 1.0) * 25.0
    score += _CONSISTENCY_POINTS[upi.income_consistency]
    score += _VARIANCE_POINTS[upi.transaction_variance]

    if upi.avg_monthly_income > 0 and upi.avg_monthly_expense > 0:
        cash_flow_ratio = upi.avg_monthly_income / upi.avg_monthly_expense
        if cash_flow_ratio >= 1.3:
            score += 15.0
        elif cash_flow_ratio >= 1.1:
            score += 10.0
        elif cash_flow_ratio >= 1.0:
            score += 5.0

    if upi.income_consistency == SignalLevel.HIGH and upi.avg_monthly_income > HIGH_INCOME_THRESHOLD:
        score += 10.0
    return clamp(score, 0.0, 100.0)


def location_score(location: LocationFeatures) -> float:
    """Residential stability, 0-100."""
    if not location.has_data:
        return 0.0

    score = location.stability_score * 50.0
    if location.months_at_location >= 24:
        score += 30.0
    elif location.months_at_location >= 12:
        score += 20.0
    elif location.months_at_location >= 6:
        score += 10.0
    else:
        score += 5.0

    if location.months_at_location >= 6:
        score += 20.0
    return clamp(score, 0.0, 100.0)


def social_score(social: SocialFeatures) -> float:
    """Social trust network, 0-100."""
    if not social.has_data:
        return 0.0

    score = _NETWORK_POINTS[social.network_strength]
    score += min(social.trust_connections * 3.0, 30.0)
    score += min(social.referrals_count * 5.0, 20.0)
    if social.trust_connections >= 5 and social.network_strength != SignalLevel.LOW:
        score += 10.0
    return clamp(score, 0.0, 100.0)


def component_scores(features: FeatureRecord) -> ComponentScores:
    """All four component scores for a feature record."""
    return ComponentScores(
        utility=utility_score(features.utility),
        upi=upi_score(features.upi),
        location=location_score(features.location),
        social=social_score(features.social),
    )


def data_confidence(features: FeatureRecord) -> float:
    """Weighted data-completeness coverage normalized to [0, 1]."""
    confidence = 0.0
    max_confidence = 0.35 + 0.30 + 0.20 + 0.15

    months_tracked = features.utility.months_tracked
    if months_tracked >= 6:
        confidence += 0.35
    elif months_tracked >= 3:
        confidence += 0.25
    elif months_tracked > 0:
        confidence += 0.15

    frequency = features.upi.avg_transactions_per_day
    if frequency >= 3:
        confidence += 0.30
    elif frequency >= 1:
        confidence += 0.20
    elif frequency > 0:
        confidence += 0.10

    months_at_location = features.location.months_at_location
    if months_at_location >= 6:
        confidence += 0.20
    elif months_at_location >= 3:
        confidence += 0.15
    elif months_at_location > 0:
        confidence += 0.10

    if features.social.has_data:
        connections = features.social.trust_connections
        if connections >= 3:
            confidence += 0.15
        elif connections >= 1:
            confidence += 0.10
        else:
            confidence += 0.05

    return clamp(confidence / max_confidence, 0.0, 1.0)


def _tiered(score: float, texts: Dict[int, str], fallback: str) -> str:
    for threshold in sorted(texts, reverse=True):
        if score >= threshold:
            return texts[threshold]
    return fallback


def explain_utility(utility: UtilityFeatures, score: float) -> str:
    if not utility.has_data:
        return "No utility payment history available"
    return _tiered(
        score,
        {
            80: "Excellent payment discipline with consistent on-time payments",
            60: "Good payment history with occasional delays",
            40: "Moderate payment consistency with some missed payments",
        },
        "Limited payment history or frequent delays detected",
    )


def explain_upi(upi: UpiFeatures, score: float) -> str:
    if not upi.has_data:
        return "No UPI transaction history available"
    return _tiered(
        score,
        {
            80: "Highly stable transaction patterns with consistent income",
            60: "Stable transaction activity with moderate income consistency",
            40: "Moderate transaction activity with some variance",
        },
        "Limited transaction history or high income volatility",
    )


def explain_location(location: LocationFeatures, score: float) -> str:
    if location.months_at_location == 0:
        return "No location stability data available"
    return _tiered(
        score,
        {
            80: "Strong residential stability over extended period",
            60: "Good location stability with established residence",
            40: "Moderate residential stability",
        },
        "Limited location history or recent relocation",
    )


def explain_social(social: SocialFeatures, score: float) -> str:
    if not social.has_data:
        return "No social trust data available"
    return _tiered(
        score,
        {
            80: "Strong trusted network with multiple verified connections",
            60: "Good social trust network with some connections",
            40: "Moderate social network presence",
        },
        "Limited social trust network or new user",
    )


def explain(features: FeatureRecord, scores: ComponentScores) -> Explanations:
    """Per-component explanation sentences."""
    return Explanations(
        utility=explain_utility(features.utility, scores.utility),
        upi=explain_upi(features.upi, scores.upi),
        location=explain_location(features.location, scores.location),
        social=explain_social(features.social, scores.social),
    )


class RuleBasedScorer:
    """Stateless scorer; identical input always yields identical output."""

    source = ScoreSource.RULE_BASED

    def __init__(self, weights: Optional[Dict[str, float]] = None) -> None:
        self._weights = dict(weights or MODEL_WEIGHTS)

    @property
    def weights(self) -> Dict[str, float]:
        return dict(self._weights)

    def score(self, features: FeatureRecord) -> ScoreResult:
        """Score a feature record."""
        scores = component_scores(features)
        normalized = scores.normalized()
        weighted = {name: normalized[name] * 100.0 * weight for name, weight in self._weights.items()}
        composite = weighted_sum(normalized, self._weights)
        trust_score = composite_to_trust_score(composite)

        result = ScoreResult(
            trust_score=trust_score,
            component_scores=scores,
            risk_category=risk_category_for_score(trust_score),
            explanations=explain(features, scores),
            confidence=data_confidence(features),
            source=self.source,
            weighted_scores=round_map(weighted),
            model_version=RULE_BASED_MODEL_VERSION,
        )
        logger.debug("Rule-based trust_score=%d composite=%.4f", trust_score, composite)
        return result
