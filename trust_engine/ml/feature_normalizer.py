"""Boundary normalization of raw feature payloads into `FeatureRecord`."""

import logging
import math
from typing import Any, Dict, List, Optional, Tuple

from pydantic import ValidationError

from ..models.exceptions import FeatureValidationError
from ..models.features import FeatureRecord


logger = logging.getLogger(__name__)

_GROUP_PATHS: Dict[str, List[Tuple[str, ...]]] = {
    "utility": [("utility",), ("features", "utility"), ("utility_bills",)],
    "upi": [("upi",), ("features", "upi"), ("payment_app",)],
    "location": [("location",), ("features", "location")],
    "social": [("social",), ("features", "social"), ("social_trust",)],
}

_FLOAT_FIELDS = {
    "utility": ("on_time_ratio", "avg_payment_amount"),
    "upi": ("avg_transactions_per_day", "avg_monthly_income", "avg_monthly_expense"),
    "location": ("stability_score",),
    "social": (),
}
_INT_FIELDS = {
    "utility": ("missed_payments", "months_tracked"),
    "upi": (),
    "location": ("months_at_location",),
    "social": ("referrals_count", "trust_connections"),
}
_LEVEL_FIELDS = {
    "utility": (),
    "upi": ("transaction_variance", "income_consistency"),
    "location": (),
    "social": ("network_strength",),
}


def _dig(payload: Dict[str, Any], paths: List[Tuple[str, ...]]) -> Any:
    """Read the first non-null value from multiple nested key paths."""
    for path in paths:
        node: Any = payload
        found = True
        for key in path:
            if isinstance(node, dict) and key in node:
                node = node[key]
                continue
            found = False
            break
        if found and node is not None:
            return node
    return None


def _to_number(group: str, field: str, value: Any) -> Optional[float]:
    """Coerce numbers and numeric strings; None and blank strings mean absent."""
    if value is None:
        return None
    if isinstance(value, bool):
        raise FeatureValidationError("{0}.{1} must be numeric, got a boolean".format(group, field))
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise FeatureValidationError("{0}.{1} must be numeric, got {2!r}".format(group, field, value))
    if math.isnan(number) or math.isinf(number):
        raise FeatureValidationError("{0}.{1} must be finite".format(group, field))
    return number


def _normalize_group(name: str, raw: Any) -> Dict[str, Any]:
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise FeatureValidationError("{0} must be an object, got {1}".format(name, type(raw).__name__))

    group: Dict[str, Any] = {}
    for field in _FLOAT_FIELDS[name]:
        number = _to_number(name, field, raw.get(field))
        if number is not None:
            group[field] = number
    for field in _INT_FIELDS[name]:
        number = _to_number(name, field, raw.get(field))
        if number is not None:
            group[field] = int(round(number))
    for field in _LEVEL_FIELDS[name]:
        level = raw.get(field)
        if isinstance(level, str) and level.strip():
            group[field] = level.strip().lower()
        elif level is not None and not isinstance(level, str):
            raise FeatureValidationError("{0}.{1} must be one of low/medium/high".format(name, field))
    return group


def normalize_feature_payload(payload: Any) -> FeatureRecord:
    """Build a validated `FeatureRecord` from a partial raw payload.

    Missing groups and fields take their "no data" defaults.

    Raises:
        FeatureValidationError: If the payload is not a mapping or any value
            is malformed or out of range.
    """
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        raise FeatureValidationError("feature payload must be an object")

    groups = {name: _normalize_group(name, _dig(payload, paths)) for name, paths in _GROUP_PATHS.items()}
    try:
        return FeatureRecord(**groups)
    except ValidationError as exc:
        details = "; ".join(
            "{0}: {1}".format(".".join(str(part) for part in error["loc"]), error["msg"])
            for error in exc.errors()
        )
        logger.warning("Rejected feature payload: %s", details)
        raise FeatureValidationError("Invalid feature payload: {0}".format(details)) from exc
