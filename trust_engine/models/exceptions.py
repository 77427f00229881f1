"""Custom exceptions for scoring, training and persistence layers."""

from typing import Any, Optional


class TrustEngineError(Exception):
    """Base class for trust engine failures."""


class FeatureValidationError(TrustEngineError):
    """Raised when a raw feature payload cannot be turned into a feature record."""


class ExternalScoringError(TrustEngineError):
    """Raised inside the external-AI scorer; always recovered by fallback."""


class ModelNotFoundError(TrustEngineError):
    """Raised when a requested stored record does not exist."""


class PersistenceError(TrustEngineError):
    """Raised when a durable write or read fails.

    The computed value is attached so callers can still use it.
    """

    def __init__(self, message: str, payload: Optional[Any] = None) -> None:
        super().__init__(message)
        self.payload = payload


class ModelPersistenceError(PersistenceError):
    """Adaptive model state could not be saved or loaded."""


class ScorePersistenceError(PersistenceError):
    """Score snapshot, history or profile could not be saved."""
