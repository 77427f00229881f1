"""Feature record consumed by every scorer.

Each group defaults to its "no data" state so a record built from an empty
payload is valid and scores at the lowest tier.
"""

from typing import Any, Dict

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .enums import SignalLevel


def _normalize_level(value: Any) -> Any:
    """Lower-case and strip tier labels before enum coercion."""
    if isinstance(value, str):
        return value.strip().lower()
    return value


class _FrozenModel(BaseModel):
    """Immutable base for feature groups."""

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)


class UtilityFeatures(_FrozenModel):
    """Utility-bill payment discipline."""

    on_time_ratio: float = Field(default=0.0, ge=0.0, le=1.0)
    missed_payments: int = Field(default=0, ge=0)
    months_tracked: int = Field(default=0, ge=0)
    avg_payment_amount: float = Field(default=0.0, ge=0.0)

    @property
    def has_data(self) -> bool:
        return self.months_tracked > 0


class UpiFeatures(_FrozenModel):
    """Payment-app transaction behavior."""

    avg_transactions_per_day: float = Field(default=0.0, ge=0.0)
    transaction_variance: SignalLevel = Field(default=SignalLevel.HIGH)
    income_consistency: SignalLevel = Field(default=SignalLevel.LOW)
    avg_monthly_income: float = Field(default=0.0, ge=0.0)
    avg_monthly_expense: float = Field(default=0.0, ge=0.0)

    @field_validator("transaction_variance", "income_consistency", mode="before")
    @classmethod
    def _normalize_levels(cls, value: Any) -> Any:
        return _normalize_level(value)

    @property
    def has_data(self) -> bool:
        return self.avg_transactions_per_day > 0


class LocationFeatures(_FrozenModel):
    """Residential stability."""

    stability_score: float = Field(default=0.0, ge=0.0, le=1.0)
    months_at_location: int = Field(default=0, ge=0)

    @property
    def has_data(self) -> bool:
        return self.stability_score > 0 or self.months_at_location > 0


class SocialFeatures(_FrozenModel):
    """Social-trust network signals."""

    network_strength: SignalLevel = Field(default=SignalLevel.LOW)
    referrals_count: int = Field(default=0, ge=0)
    trust_connections: int = Field(default=0, ge=0)

    @field_validator("network_strength", mode="before")
    @classmethod
    def _normalize_strength(cls, value: Any) -> Any:
        return _normalize_level(value)

    @property
    def has_data(self) -> bool:
        return (
            self.trust_connections > 0
            or self.referrals_count > 0
            or self.network_strength != SignalLevel.LOW
        )


class FeatureRecord(_FrozenModel):
    """Immutable snapshot of the four behavioral feature groups."""

    utility: UtilityFeatures = Field(default_factory=UtilityFeatures)
    upi: UpiFeatures = Field(default_factory=UpiFeatures)
    location: LocationFeatures = Field(default_factory=LocationFeatures)
    social: SocialFeatures = Field(default_factory=SocialFeatures)

    @field_validator("utility", "upi", "location", "social", mode="before")
    @classmethod
    def _none_group_is_no_data(cls, value: Any) -> Any:
        """Treat an explicit null group as an absent group."""
        return {} if value is None else value

    def to_payload(self) -> Dict[str, Any]:
        """Serialize into a plain JSON-compatible dictionary."""
        return self.model_dump(mode="json")
