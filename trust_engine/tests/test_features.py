"""Unit tests for feature payload normalization and raw-record extraction."""

import unittest

import pandas as pd

from trust_engine.ml.feature_extraction import (
    extract_all_features,
    extract_location_features,
    extract_social_features,
    extract_upi_features,
    extract_utility_features,
)
from trust_engine.ml.feature_normalizer import normalize_feature_payload
from trust_engine.models.enums import SignalLevel
from trust_engine.models.exceptions import FeatureValidationError
from trust_engine.models.features import FeatureRecord
from trust_engine.tests.fixtures import EXCELLENT_PAYLOAD


class FeatureNormalizerTests(unittest.TestCase):
    """Boundary validation of raw payloads."""

    def test_empty_payload_is_no_data(self) -> None:
        self.assertEqual(normalize_feature_payload({}), FeatureRecord())
        self.assertEqual(normalize_feature_payload(None), FeatureRecord())

    def test_null_groups_and_fields_take_defaults(self) -> None:
        record = normalize_feature_payload(
            {"utility": None, "upi": {"avg_transactions_per_day": None}, "social": {"network_strength": None}}
        )
        self.assertEqual(record, FeatureRecord())

    def test_numeric_strings_and_mixed_case_levels(self) -> None:
        record = normalize_feature_payload(
            {
                "utility": {"on_time_ratio": "0.75", "months_tracked": "6", "missed_payments": 1.0},
                "upi": {"avg_transactions_per_day": " 2.5 ", "transaction_variance": " Medium", "income_consistency": "HIGH"},
                "social": {"network_strength": "High", "trust_connections": "4"},
            }
        )
        self.assertEqual(record.utility.on_time_ratio, 0.75)
        self.assertEqual(record.utility.months_tracked, 6)
        self.assertEqual(record.utility.missed_payments, 1)
        self.assertEqual(record.upi.avg_transactions_per_day, 2.5)
        self.assertEqual(record.upi.transaction_variance, SignalLevel.MEDIUM)
        self.assertEqual(record.upi.income_consistency, SignalLevel.HIGH)
        self.assertEqual(record.social.network_strength, SignalLevel.HIGH)
        self.assertEqual(record.social.trust_connections, 4)

    def test_nested_features_key(self) -> None:
        record = normalize_feature_payload({"features": EXCELLENT_PAYLOAD})
        self.assertEqual(record, FeatureRecord(**EXCELLENT_PAYLOAD))

    def test_rejects_malformed_values(self) -> None:
        bad_payloads = [
            [],
            {"utility": "lots"},
            {"utility": {"on_time_ratio": "abc"}},
            {"utility": {"on_time_ratio": 1.5}},
            {"upi": {"avg_monthly_income": -10}},
            {"upi": {"transaction_variance": "extreme"}},
            {"social": {"network_strength": 3}},
            {"location": {"stability_score": True}},
            {"location": {"months_at_location": float("nan")}},
        ]
        for payload in bad_payloads:
            with self.assertRaises(FeatureValidationError, msg=repr(payload)):
                normalize_feature_payload(payload)


class FeatureExtractionTests(unittest.TestCase):
    """Feature groups built from raw records."""

    def test_utility_bills(self) -> None:
        bills = [
            {"due_date": "2024-01-10", "paid_date": "2024-01-09", "status": "paid", "amount": 500},
            {"due_date": "2024-02-10", "paid_date": "2024-02-12", "status": "paid", "amount": 700},
            {"due_date": "2024-03-10", "paid_date": None, "status": "missed", "amount": 600},
            {"due_date": "2024-03-25", "paid_date": "2024-03-20", "status": "PAID", "amount": 200},
        ]
        utility = extract_utility_features(bills)
        self.assertAlmostEqual(utility.on_time_ratio, 0.5)
        self.assertEqual(utility.missed_payments, 1)
        self.assertEqual(utility.months_tracked, 3)
        self.assertAlmostEqual(utility.avg_payment_amount, 500.0)

    def test_upi_transactions(self) -> None:
        transactions = pd.DataFrame(
            [
                {"transaction_date": "2024-01-01", "transaction_type": "credit", "amount": 10000},
                {"transaction_date": "2024-01-15", "transaction_type": "debit", "amount": 4000},
                {"transaction_date": "2024-02-01", "transaction_type": "credit", "amount": 10000},
                {"transaction_date": "2024-02-10", "transaction_type": "debit", "amount": 5000},
                {"transaction_date": "2024-03-01", "transaction_type": "credit", "amount": 10000},
            ]
        )
        upi = extract_upi_features(transactions)
        self.assertAlmostEqual(upi.avg_transactions_per_day, 5 / 60.0)
        self.assertEqual(upi.transaction_variance, SignalLevel.LOW)
        self.assertEqual(upi.income_consistency, SignalLevel.HIGH)
        self.assertAlmostEqual(upi.avg_monthly_income, 10000.0)
        self.assertAlmostEqual(upi.avg_monthly_expense, 4500.0)

    def test_volatile_income_is_high_variance(self) -> None:
        transactions = [
            {"transaction_date": "2024-01-05", "transaction_type": "credit", "amount": 1000},
            {"transaction_date": "2024-02-05", "transaction_type": "credit", "amount": 9000},
        ]
        upi = extract_upi_features(transactions)
        self.assertEqual(upi.transaction_variance, SignalLevel.HIGH)
        self.assertEqual(upi.income_consistency, SignalLevel.LOW)

    def test_empty_inputs_are_no_data(self) -> None:
        self.assertEqual(extract_all_features(), FeatureRecord())
        self.assertEqual(extract_utility_features([]), extract_utility_features(None))
        self.assertEqual(extract_upi_features(pd.DataFrame()), FeatureRecord().upi)

    def test_location_and_social_records(self) -> None:
        location = extract_location_features({"stability_score": "0.8", "months_at_location": 18})
        social = extract_social_features({"network_strength": "medium", "referrals_count": None})
        self.assertEqual(location.stability_score, 0.8)
        self.assertEqual(location.months_at_location, 18)
        self.assertEqual(social.network_strength, SignalLevel.MEDIUM)
        self.assertEqual(social.referrals_count, 0)


if __name__ == "__main__":
    unittest.main()
