"""HTTP tests for the trust score and model training routes."""

import dataclasses
import unittest

from fastapi.testclient import TestClient

from trust_engine.core.config import load_settings
from trust_engine.main import create_app
from trust_engine.tests.fixtures import EXCELLENT_PAYLOAD


def _test_settings():
    return dataclasses.replace(
        load_settings("/nonexistent/trust-engine.yml"),
        ai_provider="none",
        demo_mode=False,
        pretrain_on_startup=False,
        model_state_path=None,
    )


class TrustScoreApiTests(unittest.TestCase):
    """Request validation, status codes and response bodies."""

    def setUp(self) -> None:
        self.client = TestClient(create_app(_test_settings()))

    def test_health(self) -> None:
        response = self.client.get("/health")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {"status": "ok", "scorer": "rule-based"})

    def test_calculate_then_fetch(self) -> None:
        response = self.client.post(
            "/api/trust-score/calculate",
            json={"user_id": "user_1", "features": EXCELLENT_PAYLOAD},
        )
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertTrue(body["success"])
        self.assertTrue(body["persisted"])
        self.assertEqual(body["assessment"]["score"]["trust_score"], 846)
        self.assertEqual(body["assessment"]["scorer_used"], "rule-based")

        fetched = self.client.get("/api/trust-score/user_1")
        self.assertEqual(fetched.status_code, 200)
        self.assertEqual(fetched.json()["trust_score"], 846)
        self.assertEqual(fetched.json()["history_length"], 1)

    def test_unknown_user_is_404(self) -> None:
        self.assertEqual(self.client.get("/api/trust-score/nobody").status_code, 404)

    def test_malformed_features_are_422(self) -> None:
        response = self.client.post(
            "/api/trust-score/calculate",
            json={"user_id": "user_2", "features": {"upi": {"transaction_variance": "wild"}}},
        )
        self.assertEqual(response.status_code, 422)

    def test_missing_user_id_is_422(self) -> None:
        response = self.client.post("/api/trust-score/calculate", json={"features": {}})
        self.assertEqual(response.status_code, 422)

    def test_policy(self) -> None:
        body = self.client.get("/api/trust-score/policy").json()
        self.assertEqual(body["selected"], "rule-based")
        self.assertEqual(body["reason"], "insufficient_training_samples")


class ModelApiTests(unittest.TestCase):
    """Adaptive model training endpoints."""

    def setUp(self) -> None:
        self.client = TestClient(create_app(_test_settings()))

    def test_stats(self) -> None:
        body = self.client.get("/api/ml/stats").json()
        self.assertTrue(body["success"])
        self.assertEqual(body["stats"]["training_samples"], 0)
        self.assertEqual(body["stats"]["lifecycle"], "UNINITIALIZED")

    def test_initialization(self) -> None:
        status = self.client.get("/api/ml/init").json()
        self.assertFalse(status["initialized"])
        self.assertFalse(status["ready"])

        result = self.client.post("/api/ml/init").json()
        self.assertTrue(result["success"])
        self.assertEqual(result["stats"]["training_samples"], 200)

        status = self.client.get("/api/ml/init").json()
        self.assertTrue(status["initialized"])
        self.assertTrue(status["ready"])
        self.assertEqual(self.client.get("/api/trust-score/policy").json()["selected"], "adaptive")

    def test_train_simulate(self) -> None:
        response = self.client.post("/api/ml/train", json={"mode": "simulate", "count": 20, "seed": 11})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["training_samples"], 20)

    def test_train_history_without_outcomes(self) -> None:
        body = self.client.post("/api/ml/train", json={}).json()
        self.assertEqual(body["samples_trained"], 0)

    def test_train_rejects_bad_count(self) -> None:
        response = self.client.post("/api/ml/train", json={"mode": "simulate", "count": 0})
        self.assertEqual(response.status_code, 422)

    def test_record_outcome(self) -> None:
        missing = self.client.post(
            "/api/ml/record-outcome",
            json={"user_id": "ghost", "loan_amount": 5000, "repaid": True},
        )
        self.assertEqual(missing.status_code, 404)

        self.client.post("/api/trust-score/calculate", json={"user_id": "user_9", "features": EXCELLENT_PAYLOAD})
        recorded = self.client.post(
            "/api/ml/record-outcome",
            json={"user_id": "user_9", "loan_id": "loan-1", "loan_amount": 5000, "repaid": False},
        )
        self.assertEqual(recorded.status_code, 200)
        self.assertEqual(recorded.json()["training_samples"], 1)

    def test_reset(self) -> None:
        self.client.post("/api/ml/train", json={"mode": "simulate", "count": 5, "seed": 2})
        body = self.client.post("/api/ml/reset").json()
        self.assertTrue(body["success"])
        self.assertEqual(body["training_samples"], 0)


if __name__ == "__main__":
    unittest.main()
