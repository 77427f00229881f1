"""Trust scoring engine: policy-driven scorer selection plus eligibility."""

import logging
from typing import Any, Dict, Optional

from ..core.config import AppSettings
from ..models.enums import ScoreSource
from ..models.features import FeatureRecord
from ..models.scores import ScoreResult, TrustAssessment
from ..repositories.model_state_repository import (
    InMemoryModelStateRepository,
    JoblibModelStateRepository,
    ModelStateRepository,
)
from ..services.ai_providers import Transport, build_provider
from .adaptive import AdaptiveScorer
from .eligibility import translate_eligibility
from .external_ai import ExternalAIScorer
from .policy import ScoreSelectionPolicy
from .rule_based import RuleBasedScorer


logger = logging.getLogger(__name__)


class TrustScoringEngine:
    """Turn a feature record into a scored, eligibility-annotated assessment.

    Every path returns a score: external-AI failures fall back inside the
    external scorer, and the adaptive path reuses rule-based explanations.
    """

    def __init__(
        self,
        policy: Optional[ScoreSelectionPolicy] = None,
        rule_based: Optional[RuleBasedScorer] = None,
        adaptive: Optional[AdaptiveScorer] = None,
        external_ai: Optional[ExternalAIScorer] = None,
    ) -> None:
        self.policy = policy if policy is not None else ScoreSelectionPolicy()
        self.rule_based = rule_based if rule_based is not None else RuleBasedScorer()
        self.adaptive = adaptive if adaptive is not None else AdaptiveScorer()
        if external_ai is None:
            external_ai = ExternalAIScorer(provider=None, fallback=self.rule_based)
        self.external_ai = external_ai

    def which_scorer(self) -> Dict[str, Any]:
        """Report the scorer the next `assess` call would use."""
        return self.policy.describe(self.adaptive.training_samples)

    def assess(self, features: FeatureRecord) -> TrustAssessment:
        """Score ``features`` and attach loan eligibility."""
        training_samples = self.adaptive.training_samples
        choice = self.policy.select(training_samples)

        if choice == ScoreSource.EXTERNAL_AI:
            score = self.external_ai.score(features)
            eligibility = translate_eligibility(score.trust_score, score.confidence)
        elif choice == ScoreSource.ADAPTIVE:
            rule_result = self.rule_based.score(features)
            score = self._adaptive_result(rule_result)
            eligibility = translate_eligibility(rule_result.trust_score, rule_result.confidence)
        else:
            score = self.rule_based.score(features)
            eligibility = translate_eligibility(score.trust_score, score.confidence)

        logger.info(
            "Trust score assessed selected=%s used=%s trust_score=%d risk=%s",
            choice.value,
            score.source.value,
            score.trust_score,
            score.risk_category.value,
        )
        return TrustAssessment(
            score=score,
            eligibility=eligibility,
            scorer_used=score.source,
            external_ai_attempted=choice == ScoreSource.EXTERNAL_AI,
            training_samples=training_samples,
        )

    def _adaptive_result(self, rule_result: ScoreResult) -> ScoreResult:
        prediction = self.adaptive.predict_components(rule_result.component_scores)
        return ScoreResult(
            component_scores=rule_result.component_scores,
            explanations=rule_result.explanations,
            source=ScoreSource.ADAPTIVE,
            **prediction,
        )


def build_model_state_repository(settings: AppSettings) -> ModelStateRepository:
    """Durable joblib storage when a path is configured, else process memory."""
    if settings.model_state_path:
        return JoblibModelStateRepository(settings.model_state_path)
    logger.warning("No model_state_path configured; adaptive learning will not survive restarts.")
    return InMemoryModelStateRepository()


def build_engine(
    settings: AppSettings,
    repository: Optional[ModelStateRepository] = None,
    transport: Optional[Transport] = None,
) -> TrustScoringEngine:
    """Wire an engine from settings."""
    rule_based = RuleBasedScorer()
    adaptive = AdaptiveScorer(
        repository=repository or build_model_state_repository(settings),
        learning_rate=settings.adaptive_learning_rate,
        confidence_target_samples=settings.adaptive_confidence_target_samples,
    )
    external_ai = ExternalAIScorer(provider=build_provider(settings, transport), fallback=rule_based)
    return TrustScoringEngine(
        policy=ScoreSelectionPolicy.from_settings(settings),
        rule_based=rule_based,
        adaptive=adaptive,
        external_ai=external_ai,
    )
