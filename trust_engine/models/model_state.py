"""Adaptive model state: the only mutable, persisted entity of the engine.

Instances are frozen. Training produces a new state and swaps it in, so a
reader always sees a consistent snapshot.
"""

from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .enums import ModelLifecycle


WEIGHT_SUM_TOLERANCE = 1e-6
ADAPTIVE_MODEL_VERSION = "1.0-adaptive"

PRIOR_WEIGHTS = {
    "utility": 0.35,
    "upi": 0.30,
    "location": 0.20,
    "social": 0.15,
}
COMPONENTS = ("utility", "upi", "location", "social")


class ModelWeights(BaseModel):
    """Composite weights; non-negative and summing to 1."""

    model_config = ConfigDict(frozen=True)

    utility: float = Field(default=PRIOR_WEIGHTS["utility"], ge=0.0)
    upi: float = Field(default=PRIOR_WEIGHTS["upi"], ge=0.0)
    location: float = Field(default=PRIOR_WEIGHTS["location"], ge=0.0)
    social: float = Field(default=PRIOR_WEIGHTS["social"], ge=0.0)

    @model_validator(mode="after")
    def _check_sum(self) -> "ModelWeights":
        total = self.utility + self.upi + self.location + self.social
        if abs(total - 1.0) > WEIGHT_SUM_TOLERANCE:
            raise ValueError("weights must sum to 1, got {0:.8f}".format(total))
        return self

    def as_dict(self) -> Dict[str, float]:
        return {name: float(getattr(self, name)) for name in COMPONENTS}


class ModelCoefficients(BaseModel):
    """Logistic-regression parameters (unconstrained)."""

    model_config = ConfigDict(frozen=True)

    intercept: float = Field(default=0.0)
    utility: float = Field(default=PRIOR_WEIGHTS["utility"])
    upi: float = Field(default=PRIOR_WEIGHTS["upi"])
    location: float = Field(default=PRIOR_WEIGHTS["location"])
    social: float = Field(default=PRIOR_WEIGHTS["social"])

    def as_dict(self) -> Dict[str, float]:
        payload = {"intercept": float(self.intercept)}
        payload.update({name: float(getattr(self, name)) for name in COMPONENTS})
        return payload


class AdaptiveModelState(BaseModel):
    """Weights, coefficients and training history of the adaptive scorer."""

    model_config = ConfigDict(frozen=True)

    weights: ModelWeights = Field(default_factory=ModelWeights)
    coefficients: ModelCoefficients = Field(default_factory=ModelCoefficients)
    training_samples: int = Field(default=0, ge=0)
    version: str = Field(default=ADAPTIVE_MODEL_VERSION)
    updated_at: Optional[datetime] = Field(default=None)

    @classmethod
    def priors(cls) -> "AdaptiveModelState":
        """Fresh, untrained state."""
        return cls()

    @property
    def lifecycle(self) -> ModelLifecycle:
        if self.training_samples > 0:
            return ModelLifecycle.TRAINED
        return ModelLifecycle.UNINITIALIZED

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(mode="json")

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "AdaptiveModelState":
        return cls.model_validate(payload)
