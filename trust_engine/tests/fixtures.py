"""Shared feature records and outcomes for unit tests."""

from datetime import datetime, timedelta, timezone

from trust_engine.models.features import FeatureRecord
from trust_engine.models.outcomes import LoanOutcome
from trust_engine.models.scores import ComponentScores


EXCELLENT_PAYLOAD = {
    "utility": {"on_time_ratio": 1.0, "missed_payments": 0, "months_tracked": 12, "avg_payment_amount": 800},
    "upi": {
        "avg_transactions_per_day": 5,
        "transaction_variance": "low",
        "income_consistency": "high",
        "avg_monthly_income": 20000,
        "avg_monthly_expense": 15000,
    },
    "location": {"stability_score": 0.9, "months_at_location": 24},
    "social": {"network_strength": "high", "referrals_count": 3, "trust_connections": 12},
}

ZERO_PAYLOAD = {
    "utility": {"on_time_ratio": 0.0, "missed_payments": 0, "months_tracked": 0, "avg_payment_amount": 0},
    "upi": {"avg_transactions_per_day": 0},
    "location": {"stability_score": 0.0, "months_at_location": 0},
    "social": {"network_strength": "low", "referrals_count": 0, "trust_connections": 0},
}

BASE_TIME = datetime(2024, 1, 1, tzinfo=timezone.utc)


def excellent_features() -> FeatureRecord:
    return FeatureRecord(**EXCELLENT_PAYLOAD)


def zero_features() -> FeatureRecord:
    return FeatureRecord(**ZERO_PAYLOAD)


def outcome(level: float, repaid: bool, index: int = 0, trust_score: int = 600) -> LoanOutcome:
    """Outcome whose four component scores all equal ``level``."""
    return LoanOutcome(
        user_id="user_{0}".format(index),
        trust_score=trust_score,
        component_scores=ComponentScores(utility=level, upi=level, location=level, social=level),
        loan_amount=5000.0,
        repaid=repaid,
        created_at=BASE_TIME + timedelta(hours=index),
    )
