"""Online-learning trust scorer backed by a small logistic model."""

import logging
from threading import RLock
from typing import Any, Dict, Iterable, Optional

from ..models.enums import RiskCategory, ScoreSource
from ..models.exceptions import ModelPersistenceError
from ..models.features import FeatureRecord
from ..models.model_state import (
    COMPONENTS,
    PRIOR_WEIGHTS,
    AdaptiveModelState,
    ModelCoefficients,
    ModelWeights,
)
from ..models.outcomes import LoanOutcome
from ..models.scores import ComponentScores, ScoreResult, utc_now
from ..repositories.model_state_repository import ModelStateRepository
from .numeric import clamp, composite_to_trust_score, round_map, sigmoid, weighted_sum
from .rule_based import component_scores, explain


logger = logging.getLogger(__name__)

DEFAULT_LEARNING_RATE = 0.01
DEFAULT_CONFIDENCE_TARGET_SAMPLES = 1000
REPAY_DECISION_THRESHOLD = 0.5

# (min trust score, max default probability) per risk tier, best first
_RISK_TIERS = (
    (RiskCategory.LOW, 750, 0.15),
    (RiskCategory.MEDIUM, 650, 0.30),
    (RiskCategory.HIGH, 550, 0.50),
)


def repayment_probability(normalized: Dict[str, float], coefficients: ModelCoefficients) -> float:
    """sigmoid(intercept + sum(coefficient_i * x_i))."""
    z = coefficients.intercept + weighted_sum(
        normalized, {name: getattr(coefficients, name) for name in COMPONENTS}
    )
    return sigmoid(z)


def risk_category_for_prediction(trust_score: int, default_probability: float) -> RiskCategory:
    """Both the score and the default probability must clear a tier."""
    for category, min_score, max_default in _RISK_TIERS:
        if trust_score >= min_score and default_probability < max_default:
            return category
    return RiskCategory.VERY_HIGH


def maturity_confidence(training_samples: int, target_samples: int) -> float:
    if target_samples <= 0:
        return 1.0
    return clamp(training_samples / float(target_samples), 0.0, 1.0)


def _renormalize(raw_weights: Dict[str, float]) -> ModelWeights:
    clipped = {name: max(0.0, value) for name, value in raw_weights.items()}
    total = sum(clipped.values())
    if total <= 0.0:
        logger.warning("All adaptive weights collapsed to zero; restoring priors.")
        return ModelWeights(**PRIOR_WEIGHTS)
    return ModelWeights(**{name: value / total for name, value in clipped.items()})


def apply_outcome(
    state: AdaptiveModelState,
    outcome: LoanOutcome,
    learning_rate: float = DEFAULT_LEARNING_RATE,
) -> AdaptiveModelState:
    """Return the state after one thresholded-error SGD step on ``outcome``.

    The error signal is ``label - prediction`` where prediction is the
    repayment probability thresholded at 0.5, not the raw probability.
    """
    normalized = outcome.component_scores.normalized()
    label = 1 if outcome.repaid else 0
    prediction = 1 if repayment_probability(normalized, state.coefficients) >= REPAY_DECISION_THRESHOLD else 0
    error = label - prediction

    weights, coefficients = state.weights, state.coefficients
    if error != 0:
        raw_weights = weights.as_dict()
        raw_coefficients = coefficients.as_dict()
        for name in COMPONENTS:
            step = learning_rate * error * normalized[name]
            raw_weights[name] += step
            raw_coefficients[name] += step
        raw_coefficients["intercept"] += learning_rate * error
        weights = _renormalize(raw_weights)
        coefficients = ModelCoefficients(**raw_coefficients)

    return AdaptiveModelState(
        weights=weights,
        coefficients=coefficients,
        training_samples=state.training_samples + 1,
        version=state.version,
        updated_at=utc_now(),
    )


class AdaptiveScorer:
    """Stateful scorer whose weights adapt to observed repayment outcomes.

    ``learn`` calls are serialized by a lock. The state object itself is
    immutable, so ``predict`` reads whichever snapshot is current without
    locking.
    """

    source = ScoreSource.ADAPTIVE

    def __init__(
        self,
        repository: Optional[ModelStateRepository] = None,
        state: Optional[AdaptiveModelState] = None,
        learning_rate: float = DEFAULT_LEARNING_RATE,
        confidence_target_samples: int = DEFAULT_CONFIDENCE_TARGET_SAMPLES,
    ) -> None:
        self._repository = repository
        self._learning_rate = float(learning_rate)
        self._confidence_target_samples = int(confidence_target_samples)
        self._lock = RLock()
        if state is None:
            state = self._load_initial_state()
        self._state = state

    def _load_initial_state(self) -> AdaptiveModelState:
        if self._repository is None:
            return AdaptiveModelState.priors()
        try:
            return self._repository.load_state()
        except ModelPersistenceError:
            logger.warning("Adaptive model state unreadable; continuing from priors.")
            return AdaptiveModelState.priors()

    @property
    def state(self) -> AdaptiveModelState:
        return self._state

    @property
    def training_samples(self) -> int:
        return self._state.training_samples

    @property
    def learning_rate(self) -> float:
        return self._learning_rate

    def confidence(self, state: Optional[AdaptiveModelState] = None) -> float:
        snapshot = state if state is not None else self._state
        return maturity_confidence(snapshot.training_samples, self._confidence_target_samples)

    def predict_components(self, scores: ComponentScores) -> Dict[str, Any]:
        """Headline numbers for already computed component scores."""
        snapshot = self._state
        normalized = scores.normalized()
        weights = snapshot.weights.as_dict()
        trust_score = composite_to_trust_score(weighted_sum(normalized, weights))
        default_probability = 1.0 - repayment_probability(normalized, snapshot.coefficients)
        return {
            "trust_score": trust_score,
            "default_probability": clamp(default_probability, 0.0, 1.0),
            "risk_category": risk_category_for_prediction(trust_score, default_probability),
            "confidence": self.confidence(snapshot),
            "weighted_scores": round_map(
                {name: normalized[name] * 100.0 * weight for name, weight in weights.items()}
            ),
            "model_version": snapshot.version,
        }

    def predict(self, features: FeatureRecord) -> ScoreResult:
        """Score ``features`` with the learned weights and coefficients."""
        scores = component_scores(features)
        prediction = self.predict_components(scores)
        logger.debug(
            "Adaptive trust_score=%d default_probability=%.4f samples=%d",
            prediction["trust_score"],
            prediction["default_probability"],
            self.training_samples,
        )
        return ScoreResult(
            component_scores=scores,
            explanations=explain(features, scores),
            source=self.source,
            **prediction,
        )

    def learn(self, outcome: LoanOutcome, persist: bool = True) -> AdaptiveModelState:
        """Apply one outcome and optionally save the new state.

        Raises:
            ModelPersistenceError: If saving fails; the in-memory update is
                kept and the new state is attached as ``payload``.
        """
        with self._lock:
            new_state = apply_outcome(self._state, outcome, self._learning_rate)
            self._state = new_state
            if persist:
                self._persist(new_state)
            return new_state

    def train_from_history(self, outcomes: Iterable[LoanOutcome]) -> AdaptiveModelState:
        """Apply ``learn`` once per outcome in the given order, then save once."""
        with self._lock:
            count = 0
            for outcome in outcomes:
                self.learn(outcome, persist=False)
                count += 1
            logger.info(
                "Adaptive batch training processed=%d training_samples=%d",
                count,
                self._state.training_samples,
            )
            if count:
                self._persist(self._state)
            return self._state

    def reset(self) -> AdaptiveModelState:
        """Return the model to priors and zero samples."""
        with self._lock:
            self._state = AdaptiveModelState(updated_at=utc_now())
            logger.info("Adaptive model reset to priors.")
            self._persist(self._state)
            return self._state

    def get_model_stats(self) -> Dict[str, Any]:
        """Read-only snapshot for observability."""
        snapshot = self._state
        return {
            "weights": snapshot.weights.as_dict(),
            "coefficients": snapshot.coefficients.as_dict(),
            "training_samples": snapshot.training_samples,
            "version": snapshot.version,
            "lifecycle": snapshot.lifecycle.value,
            "confidence": self.confidence(snapshot),
            "learning_rate": self._learning_rate,
            "updated_at": snapshot.updated_at.isoformat() if snapshot.updated_at else None,
        }

    def _persist(self, state: AdaptiveModelState) -> None:
        if self._repository is None:
            return
        try:
            self._repository.save_state(state)
        except ModelPersistenceError:
            raise
        except Exception as exc:
            logger.exception("Adaptive model state save failed.")
            raise ModelPersistenceError(
                "Could not save adaptive model state: {0}".format(exc), payload=state
            ) from exc
