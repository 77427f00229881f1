"""Reusable enums for the trust scoring domain."""

from enum import Enum


class StringEnum(str, Enum):
    """Base enum class with string behavior for JSON serialization."""


class SignalLevel(StringEnum):
    """Three-tier qualitative level used by payment-app and social signals."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class RiskCategory(StringEnum):
    """Risk classification derived from a trust score."""

    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    VERY_HIGH = "VERY_HIGH"


class ScoreSource(StringEnum):
    """Scorer that produced a headline trust score."""

    RULE_BASED = "rule-based"
    ADAPTIVE = "adaptive"
    EXTERNAL_AI = "external-ai"


class ScoreBand(StringEnum):
    """Named trust score bands used for eligibility and reporting."""

    EXCELLENT = "excellent"
    GOOD = "good"
    FAIR = "fair"
    POOR = "poor"
    VERY_POOR = "very_poor"


class ModelLifecycle(StringEnum):
    """Adaptive model training lifecycle."""

    UNINITIALIZED = "UNINITIALIZED"
    TRAINED = "TRAINED"
