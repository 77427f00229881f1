"""Labeled loan outcomes consumed by the training feed."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from .scores import MAX_TRUST_SCORE, MIN_TRUST_SCORE, ComponentScores, utc_now


class LoanOutcome(BaseModel):
    """Repayment result of a loan granted against a recorded trust score."""

    model_config = ConfigDict(frozen=True)

    user_id: str = Field(..., min_length=1)
    loan_id: Optional[str] = Field(default=None)
    trust_score: int = Field(..., ge=MIN_TRUST_SCORE, le=MAX_TRUST_SCORE)
    component_scores: ComponentScores
    loan_amount: float = Field(default=0.0, ge=0.0)
    repaid: bool
    repayment_rate: Optional[float] = Field(default=None, ge=0.0, le=1.0)
    created_at: datetime = Field(default_factory=utc_now)
