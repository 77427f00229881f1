"""Translate a final trust score and confidence into loan terms."""

import logging
from typing import Dict, NamedTuple

from ..models.enums import ScoreBand
from ..models.scores import LoanEligibility
from .numeric import clamp, round_half_up, score_band


logger = logging.getLogger(__name__)


class EligibilityBand(NamedTuple):
    """Unscaled loan terms for one trust score band."""

    min_amount: int
    max_amount: int
    interest_rate_annual_pct: float
    tenure_months: int


ELIGIBILITY_BANDS: Dict[ScoreBand, EligibilityBand] = {
    ScoreBand.EXCELLENT: EligibilityBand(10000, 50000, 12.0, 12),
    ScoreBand.GOOD: EligibilityBand(5000, 25000, 15.0, 9),
    ScoreBand.FAIR: EligibilityBand(2000, 10000, 18.0, 6),
    ScoreBand.POOR: EligibilityBand(1000, 5000, 22.0, 3),
    ScoreBand.VERY_POOR: EligibilityBand(0, 2000, 24.0, 3),
}


def translate_eligibility(trust_score: int, confidence: float) -> LoanEligibility:
    """Map score band to loan terms, scaling the ceiling by confidence.

    ``min_amount`` is clamped to the scaled ``max_amount`` so the range stays
    ordered even when confidence is zero.
    """
    band = ELIGIBILITY_BANDS[score_band(int(trust_score))]
    safe_confidence = clamp(float(confidence), 0.0, 1.0)

    max_amount = round_half_up(band.max_amount * safe_confidence)
    min_amount = min(band.min_amount, max_amount)

    return LoanEligibility(
        min_amount=min_amount,
        max_amount=max_amount,
        interest_rate_annual_pct=band.interest_rate_annual_pct,
        recommended_tenure_months=band.tenure_months,
    )
