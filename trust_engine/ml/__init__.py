"""Feature extraction, synthetic training data and the training feed."""

from .feature_extraction import (
    extract_all_features,
    extract_location_features,
    extract_social_features,
    extract_upi_features,
    extract_utility_features,
)
from .feature_normalizer import normalize_feature_payload
from .training_dataset import dataset_breakdown, dataset_stats, generate_training_dataset
from .training_feed import TrainingFeed

__all__ = [
    "extract_all_features",
    "extract_location_features",
    "extract_social_features",
    "extract_upi_features",
    "extract_utility_features",
    "normalize_feature_payload",
    "dataset_breakdown",
    "dataset_stats",
    "generate_training_dataset",
    "TrainingFeed",
]
