"""Synthetic labeled loan outcomes for pre-training the adaptive model."""

from datetime import datetime, timedelta
import logging
from typing import Any, Dict, List, NamedTuple, Optional, Sequence, Tuple

import numpy as np
import pandas as pd

from ..models.outcomes import LoanOutcome
from ..models.scores import ComponentScores, utc_now


logger = logging.getLogger(__name__)

Range = Tuple[float, float]


class OutcomeStratum(NamedTuple):
    """Generation parameters for one trust score band."""

    name: str
    count: int
    trust_score: Range
    repay_probability: float
    utility: Range
    upi: Range
    location: Range
    social: Range
    loan_amount: Range
    repaid_rate: Range
    defaulted_rate: Range


STRATA: Sequence[OutcomeStratum] = (
    OutcomeStratum("excellent", 50, (750, 900), 0.90, (80, 100), (75, 100), (70, 100), (60, 100),
                   (20000, 50000), (0.95, 1.0), (0.0, 0.6)),
    OutcomeStratum("good", 60, (650, 750), 0.75, (60, 90), (55, 90), (50, 90), (40, 90),
                   (10000, 30000), (0.85, 1.0), (0.0, 0.7)),
    OutcomeStratum("fair", 50, (550, 650), 0.55, (40, 80), (35, 80), (30, 80), (20, 80),
                   (5000, 20000), (0.75, 1.0), (0.0, 0.8)),
    OutcomeStratum("poor", 40, (300, 550), 0.30, (10, 60), (10, 60), (10, 60), (5, 50),
                   (2000, 10000), (0.60, 1.0), (0.0, 0.9)),
)

# breakdown bands as (name, inclusive lower bound), best first
BREAKDOWN_BANDS = (("excellent", 750), ("good", 650), ("fair", 550), ("poor", 300))
_BAND_MAX = {"excellent": 900, "good": 749, "fair": 649, "poor": 549}


def _uniform(rng: np.random.Generator, bounds: Range) -> float:
    return float(rng.uniform(bounds[0], bounds[1]))


def generate_training_dataset(seed: int = 42, now: Optional[datetime] = None) -> List[LoanOutcome]:
    """Generate 200 stratified loan outcomes, shuffled.

    Args:
        seed: Random seed; the same seed yields the same outcomes and order.
        now: Reference time; ``created_at`` falls within the year before it.

    Returns:
        List[LoanOutcome]: Shuffled outcomes.
    """
    rng = np.random.default_rng(seed)
    reference = now or utc_now()
    outcomes: List[LoanOutcome] = []

    for stratum in STRATA:
        for index in range(stratum.count):
            trust_score = int(round(_uniform(rng, stratum.trust_score)))
            repaid = bool(rng.random() < stratum.repay_probability)
            components = ComponentScores(
                utility=_uniform(rng, stratum.utility),
                upi=_uniform(rng, stratum.upi),
                location=_uniform(rng, stratum.location),
                social=_uniform(rng, stratum.social),
            )
            outcomes.append(
                LoanOutcome(
                    user_id="train_user_{0}_{1}".format(stratum.name, index),
                    trust_score=min(max(trust_score, 300), 900),
                    component_scores=components,
                    loan_amount=round(_uniform(rng, stratum.loan_amount), 2),
                    repaid=repaid,
                    repayment_rate=_uniform(rng, stratum.repaid_rate if repaid else stratum.defaulted_rate),
                    created_at=reference - timedelta(days=_uniform(rng, (0.0, 365.0))),
                )
            )

    order = rng.permutation(len(outcomes))
    shuffled = [outcomes[idx] for idx in order]
    logger.info("Generated synthetic training dataset rows=%d seed=%d", len(shuffled), seed)
    return shuffled


def outcomes_to_frame(outcomes: Sequence[LoanOutcome]) -> pd.DataFrame:
    """Flatten outcomes into one row each."""
    rows = []
    for outcome in outcomes:
        row = {
            "user_id": outcome.user_id,
            "trust_score": outcome.trust_score,
            "loan_amount": outcome.loan_amount,
            "repaid": outcome.repaid,
            "repayment_rate": outcome.repayment_rate,
            "created_at": outcome.created_at,
        }
        row.update({"{0}_score".format(name): value for name, value in outcome.component_scores.model_dump().items()})
        rows.append(row)
    return pd.DataFrame(
        rows,
        columns=[
            "user_id",
            "trust_score",
            "loan_amount",
            "repaid",
            "repayment_rate",
            "created_at",
            "utility_score",
            "upi_score",
            "location_score",
            "social_score",
        ],
    )


def dataset_stats(outcomes: Sequence[LoanOutcome]) -> Dict[str, Any]:
    """Totals and averages for a set of outcomes."""
    df = outcomes_to_frame(outcomes)
    total = int(len(df))
    if total == 0:
        return {
            "total_loans": 0,
            "repaid_loans": 0,
            "defaulted_loans": 0,
            "repayment_rate_pct": 0.0,
            "avg_trust_score": 0,
            "avg_loan_amount": 0,
        }
    repaid = int(df["repaid"].sum())
    return {
        "total_loans": total,
        "repaid_loans": repaid,
        "defaulted_loans": total - repaid,
        "repayment_rate_pct": round(repaid / total * 100.0, 1),
        "avg_trust_score": int(round(float(df["trust_score"].mean()))),
        "avg_loan_amount": int(round(float(df["loan_amount"].mean()))),
    }


def _band_for(trust_score: int) -> str:
    for name, lower in BREAKDOWN_BANDS:
        if trust_score >= lower:
            return name
    return BREAKDOWN_BANDS[-1][0]


def dataset_breakdown(outcomes: Sequence[LoanOutcome]) -> Dict[str, Dict[str, Any]]:
    """Loans, repaid count and repayment rate per trust score band."""
    df = outcomes_to_frame(outcomes)
    df["band"] = df["trust_score"].map(_band_for)
    grouped = df.groupby("band")["repaid"].agg(["count", "sum"])

    breakdown: Dict[str, Dict[str, Any]] = {}
    for name, lower in BREAKDOWN_BANDS:
        loans = int(grouped.loc[name, "count"]) if name in grouped.index else 0
        repaid = int(grouped.loc[name, "sum"]) if name in grouped.index else 0
        breakdown[name] = {
            "min": lower,
            "max": _BAND_MAX[name],
            "loans": loans,
            "repaid": repaid,
            "repayment_rate_pct": round(repaid / loans * 100.0, 1) if loans else 0.0,
        }
    return breakdown
