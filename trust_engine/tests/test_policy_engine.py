"""Unit tests for scorer selection and the scoring engine."""

import json
import unittest

from trust_engine.models.enums import ScoreSource
from trust_engine.models.model_state import AdaptiveModelState, ModelWeights
from trust_engine.scoring.adaptive import AdaptiveScorer
from trust_engine.scoring.eligibility import translate_eligibility
from trust_engine.scoring.engine import TrustScoringEngine
from trust_engine.scoring.external_ai import ExternalAIScorer
from trust_engine.scoring.policy import ScoreSelectionPolicy
from trust_engine.scoring.rule_based import RuleBasedScorer
from trust_engine.services.ai_providers import GeminiProvider
from trust_engine.tests.fixtures import excellent_features, zero_features
from trust_engine.tests.test_external_ai import VALID_ANSWER, FakeTransport, gemini_response


class ScoreSelectionPolicyTests(unittest.TestCase):
    """Selection order and observability."""

    def test_rule_based_until_threshold(self) -> None:
        policy = ScoreSelectionPolicy(adaptive_sample_threshold=10)
        self.assertEqual(policy.select(0), ScoreSource.RULE_BASED)
        self.assertEqual(policy.select(9), ScoreSource.RULE_BASED)
        self.assertEqual(policy.select(10), ScoreSource.ADAPTIVE)

    def test_external_ai_takes_precedence(self) -> None:
        policy = ScoreSelectionPolicy(ai_enabled=True)
        self.assertEqual(policy.select(5000), ScoreSource.EXTERNAL_AI)

    def test_demo_mode_forces_rule_based(self) -> None:
        policy = ScoreSelectionPolicy(ai_enabled=True, demo_mode=True)
        self.assertEqual(policy.select(5000), ScoreSource.RULE_BASED)
        self.assertEqual(policy.describe(5000)["reason"], "demo_mode")

    def test_describe_reports_inputs(self) -> None:
        description = ScoreSelectionPolicy(adaptive_sample_threshold=3).describe(4)
        self.assertEqual(
            description,
            {
                "selected": "adaptive",
                "reason": "adaptive_model_ready",
                "demo_mode": False,
                "ai_enabled": False,
                "adaptive_sample_threshold": 3,
                "training_samples": 4,
            },
        )


class TrustScoringEngineTests(unittest.TestCase):
    """End-to-end assessment through each scorer."""

    def test_untrained_engine_uses_rule_based(self) -> None:
        engine = TrustScoringEngine()
        assessment = engine.assess(excellent_features())

        self.assertEqual(assessment.scorer_used, ScoreSource.RULE_BASED)
        self.assertEqual(assessment.score.trust_score, 846)
        self.assertFalse(assessment.external_ai_attempted)
        self.assertEqual(assessment.eligibility.max_amount, 50000)
        self.assertEqual(engine.which_scorer()["selected"], "rule-based")

    def test_zero_features_give_degenerate_eligibility(self) -> None:
        assessment = TrustScoringEngine().assess(zero_features())
        self.assertEqual(assessment.score.trust_score, 300)
        self.assertEqual(assessment.eligibility.min_amount, 0)
        self.assertEqual(assessment.eligibility.max_amount, 0)

    def test_trained_engine_combines_adaptive_and_rule_based(self) -> None:
        state = AdaptiveModelState(
            weights=ModelWeights(utility=0.25, upi=0.25, location=0.25, social=0.25),
            training_samples=10,
        )
        engine = TrustScoringEngine(
            policy=ScoreSelectionPolicy(adaptive_sample_threshold=10),
            adaptive=AdaptiveScorer(state=state),
        )
        features = excellent_features()
        rule = RuleBasedScorer().score(features)
        assessment = engine.assess(features)

        self.assertEqual(assessment.scorer_used, ScoreSource.ADAPTIVE)
        self.assertEqual(assessment.score.trust_score, 851)
        self.assertAlmostEqual(assessment.score.confidence, 0.01)
        self.assertIsNotNone(assessment.score.default_probability)
        self.assertEqual(assessment.score.explanations, rule.explanations)
        self.assertEqual(assessment.score.component_scores, rule.component_scores)
        self.assertEqual(assessment.eligibility, translate_eligibility(rule.trust_score, rule.confidence))
        self.assertEqual(assessment.training_samples, 10)

    def test_external_ai_failure_still_returns_score(self) -> None:
        transport = FakeTransport(response=gemini_response("no json here"))
        provider = GeminiProvider(api_key="k", endpoint="https://example.test/{model}", model="m", transport=transport)
        engine = TrustScoringEngine(
            policy=ScoreSelectionPolicy(ai_enabled=True),
            external_ai=ExternalAIScorer(provider),
        )
        assessment = engine.assess(excellent_features())

        self.assertTrue(assessment.external_ai_attempted)
        self.assertEqual(assessment.scorer_used, ScoreSource.RULE_BASED)
        self.assertEqual(assessment.score.trust_score, 846)

    def test_external_ai_success_drives_eligibility(self) -> None:
        transport = FakeTransport(response=gemini_response(json.dumps(VALID_ANSWER)))
        provider = GeminiProvider(api_key="k", endpoint="https://example.test/{model}", model="m", transport=transport)
        engine = TrustScoringEngine(
            policy=ScoreSelectionPolicy(ai_enabled=True),
            external_ai=ExternalAIScorer(provider),
        )
        assessment = engine.assess(excellent_features())

        self.assertEqual(assessment.scorer_used, ScoreSource.EXTERNAL_AI)
        self.assertEqual(assessment.eligibility.interest_rate_annual_pct, 15.0)
        self.assertEqual(assessment.eligibility.max_amount, 25000)


if __name__ == "__main__":
    unittest.main()
