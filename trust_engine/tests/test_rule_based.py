"""Unit tests for the deterministic rule-based scorer."""

import itertools
import unittest

from trust_engine.models.enums import RiskCategory, ScoreSource, SignalLevel
from trust_engine.models.features import FeatureRecord, UpiFeatures, UtilityFeatures
from trust_engine.scoring.rule_based import (
    MODEL_WEIGHTS,
    RuleBasedScorer,
    data_confidence,
    upi_score,
    utility_score,
)
from trust_engine.tests.fixtures import excellent_features, zero_features


class RuleBasedScorerTests(unittest.TestCase):
    """Scenario and property checks for rule-based scoring."""

    def setUp(self) -> None:
        self.scorer = RuleBasedScorer()

    def test_canonical_weights_sum_to_one(self) -> None:
        self.assertAlmostEqual(sum(MODEL_WEIGHTS.values()), 1.0)
        self.assertEqual(MODEL_WEIGHTS["upi"], 0.30)
        self.assertEqual(MODEL_WEIGHTS["social"], 0.15)

    def test_excellent_profile_scores_low_risk(self) -> None:
        """Strong signals across all groups land in the excellent band."""
        result = self.scorer.score(excellent_features())

        self.assertEqual(result.source, ScoreSource.RULE_BASED)
        self.assertEqual(result.component_scores.utility, 90.0)
        self.assertEqual(result.component_scores.upi, 87.5)
        self.assertEqual(result.component_scores.location, 95.0)
        self.assertEqual(result.component_scores.social, 95.0)
        self.assertEqual(result.trust_score, 846)
        self.assertGreaterEqual(result.trust_score, 750)
        self.assertEqual(result.risk_category, RiskCategory.LOW)
        self.assertAlmostEqual(result.confidence, 1.0)
        self.assertEqual(
            result.weighted_scores,
            {"utility": 31.5, "upi": 26.25, "location": 19.0, "social": 14.25},
        )

    def test_all_zero_features_hit_the_floor(self) -> None:
        result = self.scorer.score(zero_features())

        self.assertEqual(result.trust_score, 300)
        self.assertEqual(result.risk_category, RiskCategory.VERY_HIGH)
        self.assertAlmostEqual(result.confidence, 0.0)
        self.assertEqual(result.explanations.utility, "No utility payment history available")
        self.assertEqual(result.explanations.upi, "No UPI transaction history available")
        self.assertEqual(result.explanations.location, "No location stability data available")
        self.assertEqual(result.explanations.social, "No social trust data available")

    def test_empty_record_matches_zero_features(self) -> None:
        self.assertEqual(self.scorer.score(FeatureRecord()), self.scorer.score(zero_features()))

    def test_scoring_is_idempotent(self) -> None:
        features = excellent_features()
        self.assertEqual(self.scorer.score(features), self.scorer.score(features))

    def test_scores_stay_in_range_for_extreme_inputs(self) -> None:
        """Trust score stays in [300, 900] and components in [0, 100]."""
        levels = list(SignalLevel)
        for ratio, missed, months, level in itertools.product(
            (0.0, 0.5, 1.0), (0, 3, 50), (0, 2, 7, 36), levels
        ):
            features = FeatureRecord(
                utility={"on_time_ratio": ratio, "missed_payments": missed, "months_tracked": months,
                         "avg_payment_amount": 10 ** 6},
                upi={"avg_transactions_per_day": months * 10, "transaction_variance": level,
                     "income_consistency": level, "avg_monthly_income": 10 ** 7, "avg_monthly_expense": 1},
                location={"stability_score": ratio, "months_at_location": months * 10},
                social={"network_strength": level, "referrals_count": missed, "trust_connections": missed},
            )
            result = self.scorer.score(features)
            self.assertGreaterEqual(result.trust_score, 300)
            self.assertLessEqual(result.trust_score, 900)
            for value in result.component_scores.model_dump().values():
                self.assertGreaterEqual(value, 0.0)
                self.assertLessEqual(value, 100.0)
            self.assertGreaterEqual(result.confidence, 0.0)
            self.assertLessEqual(result.confidence, 1.0)

    def test_missed_payment_penalty_is_capped(self) -> None:
        few = utility_score(UtilityFeatures(on_time_ratio=1.0, missed_payments=4, months_tracked=12))
        many = utility_score(UtilityFeatures(on_time_ratio=1.0, missed_payments=40, months_tracked=12))
        self.assertEqual(few, many)
        self.assertEqual(few, 50.0)

    def test_upi_cash_flow_tiers(self) -> None:
        base = {"avg_transactions_per_day": 10, "transaction_variance": "medium", "income_consistency": "medium"}
        tight = upi_score(UpiFeatures(avg_monthly_income=1000, avg_monthly_expense=1000, **base))
        healthy = upi_score(UpiFeatures(avg_monthly_income=1300, avg_monthly_expense=1000, **base))
        negative = upi_score(UpiFeatures(avg_monthly_income=900, avg_monthly_expense=1000, **base))
        self.assertEqual(healthy - tight, 10.0)
        self.assertEqual(tight - negative, 5.0)

    def test_confidence_tracks_partial_data(self) -> None:
        features = FeatureRecord(utility={"on_time_ratio": 1.0, "months_tracked": 4})
        self.assertAlmostEqual(data_confidence(features), 0.25)


if __name__ == "__main__":
    unittest.main()
