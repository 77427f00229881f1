"""Trust score calculation and storage for individual users."""

import logging
from typing import Any, Dict, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from ..ml.feature_normalizer import normalize_feature_payload
from ..models.exceptions import ScorePersistenceError
from ..models.features import FeatureRecord
from ..models.scores import TrustAssessment
from ..repositories.score_repository import (
    InMemoryScoreRepository,
    ScoreHistoryEntry,
    ScoreRepository,
    ScoreSnapshot,
    TrustProfile,
)
from ..scoring.engine import TrustScoringEngine


logger = logging.getLogger(__name__)


class CalculationResult(BaseModel):
    """Assessment plus whether it was durably stored."""

    model_config = ConfigDict(frozen=True)

    user_id: str
    assessment: TrustAssessment
    persisted: bool = Field(default=True)
    persistence_error: Optional[str] = Field(default=None)

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(mode="json")


class TrustScoreService:
    """Run the engine and hand the result to the score repository."""

    def __init__(self, engine: TrustScoringEngine, repository: Optional[ScoreRepository] = None) -> None:
        self._engine = engine
        self._repository = repository if repository is not None else InMemoryScoreRepository()

    @property
    def engine(self) -> TrustScoringEngine:
        return self._engine

    @property
    def repository(self) -> ScoreRepository:
        return self._repository

    def calculate_and_save(
        self,
        user_id: str,
        features: Union[FeatureRecord, Dict[str, Any]],
    ) -> CalculationResult:
        """Score the user and store snapshot, history and profile.

        A storage failure does not discard the score; it is reported through
        ``persisted`` and ``persistence_error``.

        Raises:
            FeatureValidationError: If a raw feature payload is malformed.
        """
        record = features if isinstance(features, FeatureRecord) else normalize_feature_payload(features)
        assessment = self._engine.assess(record)

        try:
            self._save(user_id, record, assessment)
        except Exception as exc:
            error = ScorePersistenceError(
                "Trust score computed but not saved: {0}".format(exc), payload=assessment
            )
            logger.exception("Failed saving trust score user_id=%s", user_id)
            return CalculationResult(
                user_id=user_id,
                assessment=assessment,
                persisted=False,
                persistence_error=str(error),
            )

        logger.info(
            "Trust score saved user_id=%s trust_score=%d scorer=%s",
            user_id,
            assessment.score.trust_score,
            assessment.scorer_used.value,
        )
        return CalculationResult(user_id=user_id, assessment=assessment)

    def _save(self, user_id: str, record: FeatureRecord, assessment: TrustAssessment) -> None:
        score = assessment.score
        self._repository.save_snapshot(
            ScoreSnapshot(
                user_id=user_id,
                assessment=assessment,
                features=record,
                created_at=assessment.assessed_at,
            )
        )
        self._repository.append_history(
            ScoreHistoryEntry(
                user_id=user_id,
                score=score.trust_score,
                breakdown=score.component_scores,
                created_at=assessment.assessed_at,
            )
        )
        self._repository.update_profile(
            TrustProfile(
                user_id=user_id,
                trust_score=score.trust_score,
                score_breakdown=score.component_scores,
                explanations=score.explanations,
                loan_eligibility_min=assessment.eligibility.min_amount,
                loan_eligibility_max=assessment.eligibility.max_amount,
                interest_rate=assessment.eligibility.interest_rate_annual_pct,
                score_last_updated=assessment.assessed_at,
            )
        )

    def get_user_trust_score(self, user_id: str) -> Dict[str, Any]:
        """Latest stored score for a user.

        Raises:
            ModelNotFoundError: If the user was never scored.
        """
        profile = self._repository.get_profile(user_id)
        snapshot = self._repository.latest_snapshot(user_id)
        score = snapshot.assessment.score
        return {
            "user_id": user_id,
            "trust_score": profile.trust_score,
            "risk_category": score.risk_category.value,
            "confidence": score.confidence,
            "source": score.source.value,
            "score_breakdown": profile.score_breakdown.model_dump(),
            "explanations": profile.explanations.model_dump(),
            "loan_eligibility": snapshot.assessment.eligibility.model_dump(),
            "score_last_updated": profile.score_last_updated.isoformat(),
            "history_length": len(self._repository.history(user_id)),
        }
