"""Choose which scorer produces the headline trust score."""

import logging
from typing import Any, Dict

from ..core.config import AppSettings
from ..models.enums import ScoreSource


logger = logging.getLogger(__name__)

DEFAULT_ADAPTIVE_SAMPLE_THRESHOLD = 10


class ScoreSelectionPolicy:
    """Side-effect free scorer selection.

    Order of precedence: demo mode, then external AI, then the adaptive model
    once it has seen ``adaptive_sample_threshold`` outcomes, else rule-based.
    """

    def __init__(
        self,
        ai_enabled: bool = False,
        demo_mode: bool = False,
        adaptive_sample_threshold: int = DEFAULT_ADAPTIVE_SAMPLE_THRESHOLD,
    ) -> None:
        self.ai_enabled = bool(ai_enabled)
        self.demo_mode = bool(demo_mode)
        self.adaptive_sample_threshold = int(adaptive_sample_threshold)

    @classmethod
    def from_settings(cls, settings: AppSettings) -> "ScoreSelectionPolicy":
        return cls(
            ai_enabled=settings.ai_enabled,
            demo_mode=settings.demo_mode,
            adaptive_sample_threshold=settings.adaptive_sample_threshold,
        )

    def select(self, training_samples: int) -> ScoreSource:
        """Name the scorer that would be used for the next request."""
        if self.demo_mode:
            return ScoreSource.RULE_BASED
        if self.ai_enabled:
            return ScoreSource.EXTERNAL_AI
        if training_samples >= self.adaptive_sample_threshold:
            return ScoreSource.ADAPTIVE
        return ScoreSource.RULE_BASED

    def describe(self, training_samples: int) -> Dict[str, Any]:
        """Selection plus the inputs that led to it."""
        selected = self.select(training_samples)
        if self.demo_mode:
            reason = "demo_mode"
        elif selected == ScoreSource.EXTERNAL_AI:
            reason = "external_ai_enabled"
        elif selected == ScoreSource.ADAPTIVE:
            reason = "adaptive_model_ready"
        else:
            reason = "insufficient_training_samples"
        return {
            "selected": selected.value,
            "reason": reason,
            "demo_mode": self.demo_mode,
            "ai_enabled": self.ai_enabled,
            "adaptive_sample_threshold": self.adaptive_sample_threshold,
            "training_samples": int(training_samples),
        }
