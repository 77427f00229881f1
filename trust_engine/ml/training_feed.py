"""Drive adaptive model updates from labeled loan outcomes."""

import logging
from threading import RLock
from typing import Any, Dict, Iterable, List, Optional

import numpy as np

from ..models.exceptions import ModelPersistenceError
from ..models.outcomes import LoanOutcome
from ..models.scores import ComponentScores, utc_now
from ..repositories.outcome_repository import InMemoryLoanOutcomeRepository, LoanOutcomeRepository
from ..repositories.score_repository import InMemoryScoreRepository, ScoreRepository
from ..scoring.adaptive import AdaptiveScorer
from ..scoring.policy import DEFAULT_ADAPTIVE_SAMPLE_THRESHOLD
from .training_dataset import dataset_breakdown, dataset_stats, generate_training_dataset


logger = logging.getLogger(__name__)

DEFAULT_DATASET_SEED = 42


class TrainingFeed:
    """Ingest outcomes one at a time or in batch and train the adaptive scorer.

    A failed save never undoes learning: the in-memory state keeps the
    update and the result reports ``persisted=False``.
    """

    def __init__(
        self,
        adaptive: AdaptiveScorer,
        outcome_repository: Optional[LoanOutcomeRepository] = None,
        score_repository: Optional[ScoreRepository] = None,
        sample_threshold: int = DEFAULT_ADAPTIVE_SAMPLE_THRESHOLD,
        dataset_seed: int = DEFAULT_DATASET_SEED,
    ) -> None:
        self._adaptive = adaptive
        self._outcomes = outcome_repository if outcome_repository is not None else InMemoryLoanOutcomeRepository()
        self._scores = score_repository if score_repository is not None else InMemoryScoreRepository()
        self._sample_threshold = int(sample_threshold)
        self._dataset_seed = int(dataset_seed)
        self._lock = RLock()
        self._initialized = False

    @property
    def adaptive(self) -> AdaptiveScorer:
        return self._adaptive

    def _model_summary(self) -> Dict[str, Any]:
        stats = self._adaptive.get_model_stats()
        return {
            "training_samples": stats["training_samples"],
            "learned_weights": stats["weights"],
            "model_version": stats["version"],
            "confidence": stats["confidence"],
        }

    def learn(self, outcome: LoanOutcome) -> Dict[str, Any]:
        """Learn from a single outcome and save the new state."""
        persisted, persistence_error = True, None
        try:
            self._adaptive.learn(outcome)
        except ModelPersistenceError as exc:
            logger.warning("Learned from outcome user_id=%s but state not saved: %s", outcome.user_id, exc)
            persisted, persistence_error = False, str(exc)
        result = {"samples_trained": 1, "persisted": persisted, "persistence_error": persistence_error}
        result.update(self._model_summary())
        return result

    def record_loan_outcome(
        self,
        user_id: str,
        loan_id: Optional[str],
        loan_amount: float,
        repaid: bool,
        repayment_rate: Optional[float] = None,
    ) -> Dict[str, Any]:
        """Store an outcome built from the user's latest score, then learn from it.

        Raises:
            ModelNotFoundError: If the user has no stored score calculation.
        """
        snapshot = self._scores.latest_snapshot(user_id)
        outcome = LoanOutcome(
            user_id=user_id,
            loan_id=loan_id,
            trust_score=snapshot.assessment.score.trust_score,
            component_scores=snapshot.component_scores,
            loan_amount=loan_amount,
            repaid=repaid,
            repayment_rate=repayment_rate,
            created_at=utc_now(),
        )
        self._outcomes.add(outcome)
        logger.info("Recorded loan outcome user_id=%s loan_id=%s repaid=%s", user_id, loan_id, repaid)
        result = self.learn(outcome)
        result["message"] = "Loan outcome recorded and model updated"
        return result

    def _train_batch(self, outcomes: List[LoanOutcome]) -> Dict[str, Any]:
        persisted, persistence_error = True, None
        try:
            self._adaptive.train_from_history(outcomes)
        except ModelPersistenceError as exc:
            logger.warning("Batch training applied but state not saved: %s", exc)
            persisted, persistence_error = False, str(exc)
        result = {"samples_trained": len(outcomes), "persisted": persisted, "persistence_error": persistence_error}
        result.update(self._model_summary())
        return result

    def train_from_history(self, outcomes: Optional[Iterable[LoanOutcome]] = None) -> Dict[str, Any]:
        """Train on ``outcomes`` in the given order.

        When omitted, stored outcomes are used, oldest ``created_at`` first.
        """
        if outcomes is None:
            ordered = self._outcomes.list_ordered()
        else:
            ordered = list(outcomes)
        if not ordered:
            result = {"samples_trained": 0, "persisted": True, "persistence_error": None}
            result.update(self._model_summary())
            result["message"] = "No historical data available for training"
            return result
        logger.info("Starting batch training from history outcomes=%d", len(ordered))
        result = self._train_batch(ordered)
        result["message"] = "Model trained successfully"
        return result

    def simulate_outcomes(self, count: int = 100, seed: Optional[int] = None) -> Dict[str, Any]:
        """Train on random outcomes whose repay odds rise with trust score."""
        if count <= 0:
            raise ValueError("count must be positive")
        rng = np.random.default_rng(seed)
        now = utc_now()
        outcomes: List[LoanOutcome] = []
        for index in range(count):
            raw_score = float(rng.uniform(300.0, 900.0))
            repaid = bool(rng.random() < (raw_score - 300.0) / 600.0)
            components = rng.uniform(0.0, 100.0, size=4)
            outcomes.append(
                LoanOutcome(
                    user_id="demo_user_{0}".format(index),
                    trust_score=int(min(max(round(raw_score), 300), 900)),
                    component_scores=ComponentScores(
                        utility=float(components[0]),
                        upi=float(components[1]),
                        location=float(components[2]),
                        social=float(components[3]),
                    ),
                    loan_amount=round(float(rng.uniform(5000.0, 25000.0)), 2),
                    repaid=repaid,
                    repayment_rate=float(rng.uniform(0.9, 1.0) if repaid else rng.uniform(0.0, 0.5)),
                    created_at=now,
                )
            )
        result = self._train_batch(outcomes)
        result["message"] = "Simulated {0} loan outcomes and trained model".format(count)
        return result

    def initialize_model(self) -> Dict[str, Any]:
        """Pre-train on the synthetic dataset once.

        A model that already carries training samples (restored from storage)
        is treated as initialized and is not trained again.
        """
        with self._lock:
            if self._initialized:
                return {"success": True, "message": "Model already initialized", "stats": self._model_summary()}
            if self._adaptive.training_samples > 0:
                self._initialized = True
                logger.info(
                    "Adaptive model restored with samples=%d; skipping pre-training.",
                    self._adaptive.training_samples,
                )
                return {"success": True, "message": "Model restored from storage", "stats": self._model_summary()}

            dataset = generate_training_dataset(seed=self._dataset_seed)
            result = self._train_batch(dataset)
            self._initialized = True
            logger.info(
                "Adaptive model initialization complete samples=%d weights=%s",
                result["training_samples"],
                result["learned_weights"],
            )
            return {
                "success": True,
                "message": "Model initialized successfully",
                "persisted": result["persisted"],
                "persistence_error": result["persistence_error"],
                "stats": self._model_summary(),
                "dataset": {"stats": dataset_stats(dataset), "breakdown": dataset_breakdown(dataset)},
            }

    def initialization_status(self) -> Dict[str, Any]:
        samples = self._adaptive.training_samples
        return {
            "initialized": self._initialized,
            "training_samples": samples,
            "ready": samples >= self._sample_threshold,
            "confidence": self._adaptive.confidence(),
        }

    def reset_adaptive_model(self) -> Dict[str, Any]:
        """Return the adaptive model to priors."""
        with self._lock:
            persisted, persistence_error = True, None
            try:
                self._adaptive.reset()
            except ModelPersistenceError as exc:
                logger.warning("Adaptive model reset in memory but not saved: %s", exc)
                persisted, persistence_error = False, str(exc)
            self._initialized = False
            result = {"persisted": persisted, "persistence_error": persistence_error}
            result.update(self._model_summary())
            return result

    def reinitialize_model(self) -> Dict[str, Any]:
        """Reset to priors, then pre-train again."""
        with self._lock:
            logger.info("Force re-initializing adaptive model.")
            self.reset_adaptive_model()
            return self.initialize_model()

    def model_stats(self) -> Dict[str, Any]:
        return self._adaptive.get_model_stats()
