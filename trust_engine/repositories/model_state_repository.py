"""Durable storage for the adaptive model state."""

from abc import ABC, abstractmethod
from datetime import datetime, timezone
import logging
import os
from pathlib import Path
from threading import RLock
from typing import Any, Dict, Optional

import joblib

from ..models.exceptions import ModelPersistenceError
from ..models.model_state import AdaptiveModelState


logger = logging.getLogger(__name__)

ARTIFACT_TYPE = "adaptive_trust_model"


class ModelStateRepository(ABC):
    """Load and save contract for `AdaptiveModelState`."""

    @abstractmethod
    def load_state(self) -> AdaptiveModelState:
        """Return the stored state, or priors when nothing was stored yet.

        Raises:
            ModelPersistenceError: If stored state exists but cannot be read.
        """

    @abstractmethod
    def save_state(self, state: AdaptiveModelState) -> None:
        """Durably store the state.

        Raises:
            ModelPersistenceError: If the write fails.
        """


class InMemoryModelStateRepository(ModelStateRepository):
    """Process-local store; learning is lost on restart."""

    def __init__(self, initial_state: Optional[AdaptiveModelState] = None) -> None:
        self._lock = RLock()
        self._state = initial_state
        self.save_count = 0

    def load_state(self) -> AdaptiveModelState:
        with self._lock:
            return self._state if self._state is not None else AdaptiveModelState.priors()

    def save_state(self, state: AdaptiveModelState) -> None:
        with self._lock:
            self._state = state
            self.save_count += 1


class JoblibModelStateRepository(ModelStateRepository):
    """Persist state as a joblib artifact with atomic file replacement."""

    def __init__(self, artifact_path: str) -> None:
        self._artifact_path = Path(artifact_path)
        self._lock = RLock()

    @property
    def artifact_path(self) -> str:
        """Return current artifact path as string."""
        return str(self._artifact_path)

    def load_state(self) -> AdaptiveModelState:
        with self._lock:
            if not self._artifact_path.exists():
                logger.warning(
                    "Adaptive model artifact not found path=%s; starting from priors.",
                    self._artifact_path,
                )
                return AdaptiveModelState.priors()
            try:
                artifact: Dict[str, Any] = joblib.load(self._artifact_path)
                if not isinstance(artifact, dict) or artifact.get("artifact_type") != ARTIFACT_TYPE:
                    raise ValueError("unexpected artifact content")
                state = AdaptiveModelState.from_payload(artifact["state"])
                logger.info(
                    "Adaptive model state loaded path=%s samples=%d",
                    self._artifact_path,
                    state.training_samples,
                )
                return state
            except Exception as exc:
                logger.exception("Failed loading adaptive model state path=%s", self._artifact_path)
                raise ModelPersistenceError(
                    "Could not load adaptive model state: {0}".format(exc)
                ) from exc

    def save_state(self, state: AdaptiveModelState) -> None:
        with self._lock:
            tmp_path = self._artifact_path.with_name(self._artifact_path.name + ".tmp")
            try:
                self._artifact_path.parent.mkdir(parents=True, exist_ok=True)
                artifact = {
                    "artifact_type": ARTIFACT_TYPE,
                    "state": state.to_payload(),
                    "saved_at": datetime.now(timezone.utc).isoformat(),
                }
                joblib.dump(artifact, tmp_path)
                os.replace(tmp_path, self._artifact_path)
                logger.info(
                    "Adaptive model state saved path=%s samples=%d",
                    self._artifact_path,
                    state.training_samples,
                )
            except Exception as exc:
                logger.exception("Failed saving adaptive model state path=%s", self._artifact_path)
                raise ModelPersistenceError(
                    "Could not save adaptive model state: {0}".format(exc),
                    payload=state,
                ) from exc
