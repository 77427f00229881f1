"""Service layer exports."""

from .ai_providers import (
    ExternalAIProvider,
    GeminiProvider,
    GrokProvider,
    build_provider,
    urllib_json_transport,
)

__all__ = [
    "ExternalAIProvider",
    "GeminiProvider",
    "GrokProvider",
    "build_provider",
    "urllib_json_transport",
]
