"""Storage contracts for score snapshots, score history and user profiles."""

from abc import ABC, abstractmethod
from datetime import datetime
import logging
from threading import RLock
from typing import Dict, List

from pydantic import BaseModel, ConfigDict, Field

from ..models.exceptions import ModelNotFoundError
from ..models.features import FeatureRecord
from ..models.scores import ComponentScores, Explanations, TrustAssessment, utc_now


logger = logging.getLogger(__name__)


class ScoreSnapshot(BaseModel):
    """One stored trust score calculation."""

    model_config = ConfigDict(frozen=True)

    user_id: str = Field(..., min_length=1)
    assessment: TrustAssessment
    features: FeatureRecord
    created_at: datetime = Field(default_factory=utc_now)

    @property
    def component_scores(self) -> ComponentScores:
        return self.assessment.score.component_scores


class ScoreHistoryEntry(BaseModel):
    """Compact score-history line."""

    model_config = ConfigDict(frozen=True)

    user_id: str
    score: int
    breakdown: ComponentScores
    created_at: datetime = Field(default_factory=utc_now)


class TrustProfile(BaseModel):
    """Latest score fields kept on the user profile."""

    model_config = ConfigDict(frozen=True)

    user_id: str
    trust_score: int
    score_breakdown: ComponentScores
    explanations: Explanations
    loan_eligibility_min: int
    loan_eligibility_max: int
    interest_rate: float
    score_last_updated: datetime


class ScoreRepository(ABC):
    """Persistence collaborator for computed scores."""

    @abstractmethod
    def save_snapshot(self, snapshot: ScoreSnapshot) -> ScoreSnapshot:
        """Store a full calculation snapshot."""

    @abstractmethod
    def append_history(self, entry: ScoreHistoryEntry) -> None:
        """Append a line to the user's score history."""

    @abstractmethod
    def update_profile(self, profile: TrustProfile) -> TrustProfile:
        """Replace the user's latest-score profile fields."""

    @abstractmethod
    def latest_snapshot(self, user_id: str) -> ScoreSnapshot:
        """Return the newest snapshot.

        Raises:
            ModelNotFoundError: If the user has no stored snapshot.
        """

    @abstractmethod
    def get_profile(self, user_id: str) -> TrustProfile:
        """Return the profile.

        Raises:
            ModelNotFoundError: If the user has no profile yet.
        """

    @abstractmethod
    def history(self, user_id: str) -> List[ScoreHistoryEntry]:
        """Return score history, oldest first."""


class InMemoryScoreRepository(ScoreRepository):
    """Thread-safe in-process score store."""

    def __init__(self) -> None:
        self._lock = RLock()
        self._snapshots: Dict[str, List[ScoreSnapshot]] = {}
        self._history: Dict[str, List[ScoreHistoryEntry]] = {}
        self._profiles: Dict[str, TrustProfile] = {}

    def save_snapshot(self, snapshot: ScoreSnapshot) -> ScoreSnapshot:
        with self._lock:
            self._snapshots.setdefault(snapshot.user_id, []).append(snapshot)
            return snapshot

    def append_history(self, entry: ScoreHistoryEntry) -> None:
        with self._lock:
            self._history.setdefault(entry.user_id, []).append(entry)

    def update_profile(self, profile: TrustProfile) -> TrustProfile:
        with self._lock:
            self._profiles[profile.user_id] = profile
            return profile

    def latest_snapshot(self, user_id: str) -> ScoreSnapshot:
        with self._lock:
            snapshots = self._snapshots.get(user_id)
            if not snapshots:
                raise ModelNotFoundError("No trust score calculation found for user_id={0}".format(user_id))
            return snapshots[-1]

    def get_profile(self, user_id: str) -> TrustProfile:
        with self._lock:
            profile = self._profiles.get(user_id)
            if profile is None:
                raise ModelNotFoundError("Profile not found: {0}".format(user_id))
            return profile

    def history(self, user_id: str) -> List[ScoreHistoryEntry]:
        with self._lock:
            return list(self._history.get(user_id, []))

