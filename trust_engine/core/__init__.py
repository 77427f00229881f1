"""Core utilities for configuration and logging."""

from .config import AppSettings, is_usable_api_key, load_settings, normalize_ai_provider
from .logging_config import get_logger, setup_logging

__all__ = [
    "AppSettings",
    "is_usable_api_key",
    "load_settings",
    "normalize_ai_provider",
    "get_logger",
    "setup_logging",
]
