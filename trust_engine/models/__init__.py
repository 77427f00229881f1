"""Public model package exports for the trust scoring engine."""

from .enums import ModelLifecycle, RiskCategory, ScoreBand, ScoreSource, SignalLevel
from .exceptions import (
    ExternalScoringError,
    FeatureValidationError,
    ModelNotFoundError,
    ModelPersistenceError,
    PersistenceError,
    ScorePersistenceError,
    TrustEngineError,
)
from .features import FeatureRecord, LocationFeatures, SocialFeatures, UpiFeatures, UtilityFeatures
from .model_state import AdaptiveModelState, ModelCoefficients, ModelWeights
from .outcomes import LoanOutcome
from .scores import ComponentScores, Explanations, LoanEligibility, ScoreResult, TrustAssessment

__all__ = [
    "SignalLevel",
    "RiskCategory",
    "ScoreSource",
    "ScoreBand",
    "ModelLifecycle",
    "TrustEngineError",
    "FeatureValidationError",
    "ExternalScoringError",
    "ModelNotFoundError",
    "PersistenceError",
    "ModelPersistenceError",
    "ScorePersistenceError",
    "FeatureRecord",
    "UtilityFeatures",
    "UpiFeatures",
    "LocationFeatures",
    "SocialFeatures",
    "AdaptiveModelState",
    "ModelWeights",
    "ModelCoefficients",
    "LoanOutcome",
    "ComponentScores",
    "Explanations",
    "ScoreResult",
    "LoanEligibility",
    "TrustAssessment",
]
