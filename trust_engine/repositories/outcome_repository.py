"""Storage for labeled loan outcomes."""

from abc import ABC, abstractmethod
import logging
from threading import RLock
from typing import List

from ..models.outcomes import LoanOutcome


logger = logging.getLogger(__name__)


class LoanOutcomeRepository(ABC):
    """Append-only store of repayment outcomes."""

    @abstractmethod
    def add(self, outcome: LoanOutcome) -> LoanOutcome:
        """Persist a new outcome."""

    @abstractmethod
    def list_ordered(self) -> List[LoanOutcome]:
        """Return all outcomes ordered by `created_at` ascending."""


class InMemoryLoanOutcomeRepository(LoanOutcomeRepository):
    """Thread-safe in-process outcome store."""

    def __init__(self) -> None:
        self._lock = RLock()
        self._outcomes: List[LoanOutcome] = []

    def add(self, outcome: LoanOutcome) -> LoanOutcome:
        with self._lock:
            self._outcomes.append(outcome)
            return outcome

    def list_ordered(self) -> List[LoanOutcome]:
        with self._lock:
            return sorted(self._outcomes, key=lambda item: item.created_at)
