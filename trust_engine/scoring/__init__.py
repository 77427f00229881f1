"""Scorers, eligibility translation and scorer selection."""

from .adaptive import AdaptiveScorer, apply_outcome, risk_category_for_prediction
from .eligibility import ELIGIBILITY_BANDS, translate_eligibility
from .engine import TrustScoringEngine, build_engine, build_model_state_repository
from .external_ai import ExternalAIScorer, build_prompt, extract_json_object, validate_payload
from .policy import ScoreSelectionPolicy
from .rule_based import RuleBasedScorer

__all__ = [
    "AdaptiveScorer",
    "apply_outcome",
    "risk_category_for_prediction",
    "ELIGIBILITY_BANDS",
    "translate_eligibility",
    "TrustScoringEngine",
    "build_engine",
    "build_model_state_repository",
    "ExternalAIScorer",
    "build_prompt",
    "extract_json_object",
    "validate_payload",
    "ScoreSelectionPolicy",
    "RuleBasedScorer",
]
