"""Score and eligibility records produced by the engine."""

from datetime import datetime, timezone
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .enums import RiskCategory, ScoreSource


MIN_TRUST_SCORE = 300
MAX_TRUST_SCORE = 900


def utc_now() -> datetime:
    """Return current UTC timestamp."""
    return datetime.now(timezone.utc)


class ComponentScores(BaseModel):
    """Four component scores on a 0-100 scale."""

    model_config = ConfigDict(frozen=True)

    utility: float = Field(..., ge=0.0, le=100.0)
    upi: float = Field(..., ge=0.0, le=100.0)
    location: float = Field(..., ge=0.0, le=100.0)
    social: float = Field(..., ge=0.0, le=100.0)

    def normalized(self) -> Dict[str, float]:
        """Return the scores rescaled to [0, 1]."""
        return {
            "utility": self.utility / 100.0,
            "upi": self.upi / 100.0,
            "location": self.location / 100.0,
            "social": self.social / 100.0,
        }


class Explanations(BaseModel):
    """One short human-readable sentence per component."""

    model_config = ConfigDict(frozen=True)

    utility: str
    upi: str
    location: str
    social: str


class ScoreResult(BaseModel):
    """Output of any scorer."""

    model_config = ConfigDict(frozen=True)

    trust_score: int = Field(..., ge=MIN_TRUST_SCORE, le=MAX_TRUST_SCORE)
    component_scores: ComponentScores
    risk_category: RiskCategory
    explanations: Explanations
    confidence: float = Field(..., ge=0.0, le=1.0)
    source: ScoreSource
    default_probability: Optional[float] = Field(default=None, ge=0.0, le=1.0)
    weighted_scores: Optional[Dict[str, float]] = Field(default=None)
    model_version: str = Field(default="rule-based-v1")
    fallback_reason: Optional[str] = Field(default=None)


class LoanEligibility(BaseModel):
    """Loan terms derived from a trust score and confidence."""

    model_config = ConfigDict(frozen=True)

    min_amount: int = Field(..., ge=0)
    max_amount: int = Field(..., ge=0)
    interest_rate_annual_pct: float = Field(..., gt=0)
    recommended_tenure_months: int = Field(..., gt=0)

    @model_validator(mode="after")
    def _check_range(self) -> "LoanEligibility":
        if self.min_amount > self.max_amount:
            raise ValueError("min_amount must not exceed max_amount")
        return self


class TrustAssessment(BaseModel):
    """Final score plus eligibility, as handed to persistence and display."""

    model_config = ConfigDict(frozen=True)

    score: ScoreResult
    eligibility: LoanEligibility
    scorer_used: ScoreSource
    external_ai_attempted: bool = Field(default=False)
    training_samples: int = Field(default=0, ge=0)
    assessed_at: datetime = Field(default_factory=utc_now)

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(mode="json")
