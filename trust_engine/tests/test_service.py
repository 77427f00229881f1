"""Unit tests for trust score calculation and storage."""

import unittest

from trust_engine.models.exceptions import FeatureValidationError, ModelNotFoundError
from trust_engine.repositories.score_repository import InMemoryScoreRepository, ScoreSnapshot
from trust_engine.scoring.engine import TrustScoringEngine
from trust_engine.services.trust_score_service import TrustScoreService
from trust_engine.tests.fixtures import EXCELLENT_PAYLOAD, excellent_features, zero_features


class _BrokenScoreRepository(InMemoryScoreRepository):
    def save_snapshot(self, snapshot: ScoreSnapshot) -> ScoreSnapshot:
        raise IOError("database unavailable")


class TrustScoreServiceTests(unittest.TestCase):
    """calculate_and_save and get_user_trust_score."""

    def setUp(self) -> None:
        self.repository = InMemoryScoreRepository()
        self.service = TrustScoreService(TrustScoringEngine(), repository=self.repository)

    def test_calculation_is_stored(self) -> None:
        result = self.service.calculate_and_save("user_1", excellent_features())

        self.assertTrue(result.persisted)
        self.assertIsNone(result.persistence_error)
        self.assertEqual(result.assessment.score.trust_score, 846)

        snapshot = self.repository.latest_snapshot("user_1")
        self.assertEqual(snapshot.features, excellent_features())
        self.assertEqual(snapshot.component_scores, result.assessment.score.component_scores)

        profile = self.repository.get_profile("user_1")
        self.assertEqual(profile.trust_score, 846)
        self.assertEqual(profile.loan_eligibility_max, 50000)
        self.assertEqual(len(self.repository.history("user_1")), 1)

    def test_recalculation_replaces_profile_and_extends_history(self) -> None:
        self.service.calculate_and_save("user_1", excellent_features())
        self.service.calculate_and_save("user_1", zero_features())

        view = self.service.get_user_trust_score("user_1")
        self.assertEqual(view["trust_score"], 300)
        self.assertEqual(view["history_length"], 2)
        self.assertEqual(view["source"], "rule-based")
        self.assertEqual(view["loan_eligibility"]["max_amount"], 0)
        self.assertEqual(self.repository.latest_snapshot("user_1").features, zero_features())

    def test_raw_payload_is_normalized(self) -> None:
        result = self.service.calculate_and_save("user_2", {"features": EXCELLENT_PAYLOAD})
        self.assertEqual(result.assessment.score.trust_score, 846)

        payload = result.to_payload()
        self.assertEqual(payload["user_id"], "user_2")
        self.assertEqual(payload["assessment"]["score"]["trust_score"], 846)

    def test_invalid_payload_raises(self) -> None:
        with self.assertRaises(FeatureValidationError):
            self.service.calculate_and_save("user_3", {"utility": {"on_time_ratio": "often"}})
        with self.assertRaises(ModelNotFoundError):
            self.repository.get_profile("user_3")

    def test_storage_failure_returns_unsaved_score(self) -> None:
        service = TrustScoreService(TrustScoringEngine(), repository=_BrokenScoreRepository())
        result = service.calculate_and_save("user_4", excellent_features())

        self.assertFalse(result.persisted)
        self.assertIn("database unavailable", result.persistence_error)
        self.assertEqual(result.assessment.score.trust_score, 846)

    def test_unknown_user(self) -> None:
        with self.assertRaises(ModelNotFoundError):
            self.service.get_user_trust_score("nobody")


if __name__ == "__main__":
    unittest.main()
