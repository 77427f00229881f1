"""Persistence collaborators."""

from .model_state_repository import (
    InMemoryModelStateRepository,
    JoblibModelStateRepository,
    ModelStateRepository,
)
from .outcome_repository import InMemoryLoanOutcomeRepository, LoanOutcomeRepository
from .score_repository import (
    InMemoryScoreRepository,
    ScoreHistoryEntry,
    ScoreRepository,
    ScoreSnapshot,
    TrustProfile,
)

__all__ = [
    "ModelStateRepository",
    "InMemoryModelStateRepository",
    "JoblibModelStateRepository",
    "LoanOutcomeRepository",
    "InMemoryLoanOutcomeRepository",
    "ScoreRepository",
    "InMemoryScoreRepository",
    "ScoreSnapshot",
    "ScoreHistoryEntry",
    "TrustProfile",
]
