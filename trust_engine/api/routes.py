"""HTTP routes for trust score calculation and adaptive model training."""

import logging
from typing import Any, Dict, Literal, Optional

from fastapi import APIRouter, HTTPException, status
from pydantic import BaseModel, Field

from ..ml.training_feed import TrainingFeed
from ..models.exceptions import FeatureValidationError, ModelNotFoundError
from ..services.trust_score_service import TrustScoreService


logger = logging.getLogger(__name__)


class CalculateTrustScoreRequest(BaseModel):
    user_id: str = Field(..., min_length=1)
    features: Dict[str, Any] = Field(default_factory=dict)


class TrainModelRequest(BaseModel):
    mode: Literal["history", "simulate"] = Field(default="history")
    count: int = Field(default=100, ge=1, le=10000)
    seed: Optional[int] = Field(default=None)


class RecordOutcomeRequest(BaseModel):
    user_id: str = Field(..., min_length=1)
    loan_id: Optional[str] = Field(default=None)
    loan_amount: float = Field(..., ge=0)
    repaid: bool
    repayment_rate: Optional[float] = Field(default=None, ge=0.0, le=1.0)


def build_trust_score_router(service: TrustScoreService) -> APIRouter:
    """Build routes under ``/api/trust-score``."""
    router = APIRouter(prefix="/api/trust-score", tags=["trust-score"])

    @router.post("/calculate", summary="Calculate and store a user's trust score")
    def calculate_trust_score(payload: CalculateTrustScoreRequest) -> Dict[str, Any]:
        try:
            result = service.calculate_and_save(payload.user_id, payload.features)
        except FeatureValidationError as exc:
            raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc))
        except Exception as exc:
            logger.exception("Trust score calculation failed user_id=%s", payload.user_id)
            raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc))
        return {"success": True, **result.to_payload()}

    @router.get("/policy", summary="Which scorer the next calculation would use")
    def scorer_policy() -> Dict[str, Any]:
        return service.engine.which_scorer()

    @router.get("/{user_id}", summary="Get a user's latest stored trust score")
    def get_trust_score(user_id: str) -> Dict[str, Any]:
        try:
            return service.get_user_trust_score(user_id)
        except ModelNotFoundError as exc:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))

    return router


def build_ml_router(feed: TrainingFeed) -> APIRouter:
    """Build routes under ``/api/ml``."""
    router = APIRouter(prefix="/api/ml", tags=["ml"])

    @router.get("/stats", summary="Adaptive model statistics")
    def model_stats() -> Dict[str, Any]:
        return {"success": True, "stats": feed.model_stats()}

    @router.post("/train", summary="Train from stored outcomes or simulated ones")
    def train_model(payload: TrainModelRequest) -> Dict[str, Any]:
        try:
            if payload.mode == "simulate":
                result = feed.simulate_outcomes(count=payload.count, seed=payload.seed)
            else:
                result = feed.train_from_history()
        except ValueError as exc:
            raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc))
        return {"success": True, **result}

    @router.post("/record-outcome", summary="Record a loan outcome and learn from it")
    def record_outcome(payload: RecordOutcomeRequest) -> Dict[str, Any]:
        try:
            result = feed.record_loan_outcome(
                user_id=payload.user_id,
                loan_id=payload.loan_id,
                loan_amount=payload.loan_amount,
                repaid=payload.repaid,
                repayment_rate=payload.repayment_rate,
            )
        except ModelNotFoundError as exc:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
        return {"success": True, **result}

    @router.get("/init", summary="Adaptive model initialization status")
    def init_status() -> Dict[str, Any]:
        return feed.initialization_status()

    @router.post("/init", summary="Pre-train the adaptive model on the synthetic dataset")
    def init_model() -> Dict[str, Any]:
        return feed.initialize_model()

    @router.post("/reset", summary="Reset the adaptive model to priors")
    def reset_adaptive_model() -> Dict[str, Any]:
        return {"success": True, **feed.reset_adaptive_model()}

    return router
