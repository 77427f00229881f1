"""Build feature groups from raw bill, transaction, location and social records."""

import logging
from typing import Any, Iterable, Mapping, Optional, Union

import pandas as pd

from ..models.enums import SignalLevel
from ..models.features import (
    FeatureRecord,
    LocationFeatures,
    SocialFeatures,
    UpiFeatures,
    UtilityFeatures,
)


logger = logging.getLogger(__name__)

Records = Union[pd.DataFrame, Iterable[Mapping[str, Any]], None]

LOW_VARIATION_CV = 0.2
MEDIUM_VARIATION_CV = 0.5


def _frame(records: Records) -> pd.DataFrame:
    if records is None:
        return pd.DataFrame()
    if isinstance(records, pd.DataFrame):
        return records.copy()
    return pd.DataFrame(list(records))


def _column(df: pd.DataFrame, name: str) -> pd.Series:
    if name in df.columns:
        return df[name]
    return pd.Series([None] * len(df), index=df.index, dtype=object)


def _dates(series: pd.Series) -> pd.Series:
    return pd.to_datetime(series, errors="coerce", utc=True)


def _amounts(series: pd.Series) -> pd.Series:
    return pd.to_numeric(series, errors="coerce").fillna(0.0).clip(lower=0.0)


def extract_utility_features(bills: Records) -> UtilityFeatures:
    """Payment discipline from bills with due_date, paid_date, status and amount."""
    df = _frame(bills)
    if df.empty:
        logger.info("No utility bills found, using no-data defaults")
        return UtilityFeatures()

    due = _dates(_column(df, "due_date"))
    paid = _dates(_column(df, "paid_date"))
    status = _column(df, "status").astype(str).str.strip().str.lower()

    on_time = (status == "paid") & paid.notna() & due.notna() & (paid <= due)
    total = len(df)

    return UtilityFeatures(
        on_time_ratio=float(on_time.sum()) / total,
        missed_payments=int((status == "missed").sum()),
        months_tracked=int(due.dropna().dt.strftime("%Y-%m").nunique()),
        avg_payment_amount=float(_amounts(_column(df, "amount")).mean()),
    )


def _income_levels(monthly_income: pd.Series):
    """Map month-to-month income variation to (variance, consistency)."""
    if monthly_income.empty or monthly_income.mean() <= 0:
        return SignalLevel.HIGH, SignalLevel.LOW
    cv = float(monthly_income.std(ddof=0)) / float(monthly_income.mean())
    if cv < LOW_VARIATION_CV:
        return SignalLevel.LOW, SignalLevel.HIGH
    if cv < MEDIUM_VARIATION_CV:
        return SignalLevel.MEDIUM, SignalLevel.MEDIUM
    return SignalLevel.HIGH, SignalLevel.LOW


def extract_upi_features(transactions: Records) -> UpiFeatures:
    """Transaction stability from records with transaction_date, transaction_type and amount."""
    df = _frame(transactions)
    if df.empty:
        logger.info("No payment-app transactions found, using no-data defaults")
        return UpiFeatures()

    df = df.assign(
        _date=_dates(_column(df, "transaction_date")),
        _type=_column(df, "transaction_type").astype(str).str.strip().str.lower(),
        _amount=_amounts(_column(df, "amount")),
    )
    df = df[df["_date"].notna()]
    if df.empty:
        logger.warning("Payment-app transactions carry no valid dates, using no-data defaults")
        return UpiFeatures()

    span_days = (df["_date"].max() - df["_date"].min()).total_seconds() / 86400.0
    frequency = len(df) / max(1.0, span_days)
    df = df.assign(_month=df["_date"].dt.strftime("%Y-%m"))

    monthly_income = df[df["_type"] == "credit"].groupby("_month")["_amount"].sum()
    monthly_expense = df[df["_type"] == "debit"].groupby("_month")["_amount"].sum()
    variance, consistency = _income_levels(monthly_income)

    return UpiFeatures(
        avg_transactions_per_day=float(frequency),
        transaction_variance=variance,
        income_consistency=consistency,
        avg_monthly_income=float(monthly_income.mean()) if not monthly_income.empty else 0.0,
        avg_monthly_expense=float(monthly_expense.mean()) if not monthly_expense.empty else 0.0,
    )


def extract_location_features(record: Optional[Mapping[str, Any]]) -> LocationFeatures:
    if not record:
        return LocationFeatures()
    return LocationFeatures(
        stability_score=min(max(float(record.get("stability_score") or 0.0), 0.0), 1.0),
        months_at_location=max(int(record.get("months_at_location") or 0), 0),
    )


def extract_social_features(record: Optional[Mapping[str, Any]]) -> SocialFeatures:
    if not record:
        return SocialFeatures()
    return SocialFeatures(
        network_strength=record.get("network_strength") or SignalLevel.LOW,
        referrals_count=max(int(record.get("referrals_count") or 0), 0),
        trust_connections=max(int(record.get("trust_connections") or 0), 0),
    )


def extract_all_features(
    bills: Records = None,
    transactions: Records = None,
    location: Optional[Mapping[str, Any]] = None,
    social: Optional[Mapping[str, Any]] = None,
) -> FeatureRecord:
    """Assemble a full `FeatureRecord` from raw records."""
    features = FeatureRecord(
        utility=extract_utility_features(bills),
        upi=extract_upi_features(transactions),
        location=extract_location_features(location),
        social=extract_social_features(social),
    )
    logger.debug("Extracted features: %s", features.to_payload())
    return features
