"""Configuration loading utilities for YAML-based engine settings."""

from dataclasses import dataclass
import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from .logging_config import get_logger


logger = get_logger(__name__)
_BASE_DIR = Path(__file__).resolve().parent.parent
_CONFIG_PATH = _BASE_DIR / "config.yml"

AI_PROVIDER_NONE = "none"
AI_PROVIDER_GEMINI = "gemini"
AI_PROVIDER_GROK = "grok"

_AI_PROVIDER_ALIASES = {
    "": AI_PROVIDER_NONE,
    "none": AI_PROVIDER_NONE,
    "off": AI_PROVIDER_NONE,
    "gemini": AI_PROVIDER_GEMINI,
    "provider_a": AI_PROVIDER_GEMINI,
    "grok": AI_PROVIDER_GROK,
    "provider_b": AI_PROVIDER_GROK,
}

_PLACEHOLDER_KEYS = {
    "your-gemini-api-key-here",
    "your-grok-api-key-here",
    "your-api-key-here",
    "changeme",
}


@dataclass(frozen=True)
class AppSettings:
    """Engine settings loaded from YAML configuration and environment overrides."""

    app_name: str
    debug: bool
    host: str
    port: int
    log_level: str
    ai_provider: str
    ai_api_key: Optional[str]
    ai_timeout_sec: float
    ai_temperature: float
    ai_max_output_tokens: int
    gemini_endpoint: str
    gemini_model: str
    grok_endpoint: str
    grok_model: str
    demo_mode: bool
    adaptive_sample_threshold: int
    adaptive_learning_rate: float
    adaptive_confidence_target_samples: int
    pretrain_on_startup: bool
    model_state_path: Optional[str]

    @property
    def ai_enabled(self) -> bool:
        """Whether an external AI provider is selected."""
        return self.ai_provider != AI_PROVIDER_NONE

    @property
    def has_ai_credentials(self) -> bool:
        """Whether usable (non-placeholder) AI credentials are configured."""
        return is_usable_api_key(self.ai_api_key)


def is_usable_api_key(value: Optional[str]) -> bool:
    """Return False for empty or template placeholder credentials."""
    if value is None:
        return False
    text = str(value).strip()
    if not text:
        return False
    return text.lower() not in _PLACEHOLDER_KEYS


def _to_bool(value: Any, default: bool = False) -> bool:
    """Convert value to bool with a default fallback."""
    try:
        if isinstance(value, bool):
            return value
        return value.strip().lower() in {"1", "true", "yes", "on"}
    except (AttributeError, ValueError):
        logger.warning("Invalid boolean value '%s'. Using default=%s", value, default)
        return default


def _to_int(value: Any, default: int) -> int:
    """Convert value to int with a default fallback."""
    try:
        return int(value)
    except (TypeError, ValueError):
        logger.warning("Invalid integer value '%s'. Using default=%s", value, default)
        return default


def _to_float(value: Any, default: float) -> float:
    """Convert value to float with a default fallback."""
    try:
        return float(value)
    except (TypeError, ValueError):
        logger.warning("Invalid float value '%s'. Using default=%s", value, default)
        return default


def _to_positive_int(value: Any, default: int) -> int:
    """Convert to a strictly positive int, falling back to default."""
    parsed = _to_int(value, default)
    if parsed <= 0:
        logger.warning("Non-positive value '%s'. Using default=%s", value, default)
        return default
    return parsed


def _to_positive_float(value: Any, default: float) -> float:
    """Convert to a strictly positive float, falling back to default."""
    parsed = _to_float(value, default)
    if parsed <= 0:
        logger.warning("Non-positive value '%s'. Using default=%s", value, default)
        return default
    return parsed


def normalize_ai_provider(value: Any) -> str:
    """Map configured provider names and aliases to a canonical provider id."""
    key = str(value if value is not None else "").strip().lower()
    provider = _AI_PROVIDER_ALIASES.get(key)
    if provider is None:
        logger.warning("Unknown ai_provider '%s'. Using '%s'.", value, AI_PROVIDER_NONE)
        return AI_PROVIDER_NONE
    return provider


def _resolve_config_path(config_path: Optional[str]) -> Path:
    """Pick explicit path, then env override, then the packaged default."""
    if config_path:
        return Path(config_path)
    env_path = os.getenv("TRUST_ENGINE_CONFIG", "").strip()
    if env_path:
        return Path(env_path)
    return _CONFIG_PATH


def _read_config(path: Path) -> Dict[str, Any]:
    """Read and parse YAML configuration."""
    try:
        with path.open("r", encoding="utf-8") as config_file:
            config_data = yaml.safe_load(config_file) or {}
        if not isinstance(config_data, dict):
            logger.warning("Config file %s is not a mapping. Falling back to defaults.", path)
            return {}
        logger.info("Configuration loaded from %s", path)
        return config_data
    except FileNotFoundError:
        logger.warning("Config file not found at %s. Falling back to defaults.", path)
        return {}
    except Exception:
        logger.exception("Failed to load config file from %s", path)
        return {}


def _section(config: Dict[str, Any], name: str) -> Dict[str, Any]:
    """Return a config section, tolerating null or non-mapping values."""
    value = config.get(name)
    return value if isinstance(value, dict) else {}


def load_settings(config_path: Optional[str] = None) -> AppSettings:
    """Load and validate engine settings from `config.yml` and environment."""
    config = _read_config(_resolve_config_path(config_path))
    app_cfg = _section(config, "app")
    scoring_cfg = _section(config, "scoring")
    ai_cfg = _section(config, "ai")
    gemini_cfg = ai_cfg.get("gemini") if isinstance(ai_cfg.get("gemini"), dict) else {}
    grok_cfg = ai_cfg.get("grok") if isinstance(ai_cfg.get("grok"), dict) else {}
    storage_cfg = _section(config, "storage")

    ai_provider = normalize_ai_provider(
        os.getenv("TRUST_ENGINE_AI_PROVIDER") or scoring_cfg.get("ai_provider", AI_PROVIDER_NONE)
    )
    ai_api_key = os.getenv("TRUST_ENGINE_AI_API_KEY") or ai_cfg.get("api_key")
    demo_env = os.getenv("TRUST_ENGINE_DEMO_MODE")
    demo_mode = _to_bool(demo_env if demo_env is not None else scoring_cfg.get("demo_mode", False), False)
    model_state_path = os.getenv("TRUST_ENGINE_MODEL_STATE_PATH") or storage_cfg.get("model_state_path")

    return AppSettings(
        app_name=str(app_cfg.get("name", "Trust Score Engine")),
        debug=_to_bool(app_cfg.get("debug", False), False),
        host=str(app_cfg.get("host", "127.0.0.1")),
        port=_to_int(app_cfg.get("port", 8000), 8000),
        log_level=str(app_cfg.get("log_level", "INFO")),
        ai_provider=ai_provider,
        ai_api_key=str(ai_api_key) if ai_api_key is not None else None,
        ai_timeout_sec=_to_positive_float(ai_cfg.get("timeout_sec", 15.0), 15.0),
        ai_temperature=_to_float(ai_cfg.get("temperature", 0.4), 0.4),
        ai_max_output_tokens=_to_positive_int(ai_cfg.get("max_output_tokens", 1024), 1024),
        gemini_endpoint=str(
            gemini_cfg.get(
                "endpoint",
                "https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent",
            )
        ),
        gemini_model=str(gemini_cfg.get("model", "gemini-1.5-flash")),
        grok_endpoint=str(grok_cfg.get("endpoint", "https://api.x.ai/v1/chat/completions")),
        grok_model=str(grok_cfg.get("model", "grok-beta")),
        demo_mode=demo_mode,
        adaptive_sample_threshold=_to_positive_int(scoring_cfg.get("adaptive_sample_threshold", 10), 10),
        adaptive_learning_rate=_to_positive_float(scoring_cfg.get("adaptive_learning_rate", 0.01), 0.01),
        adaptive_confidence_target_samples=_to_positive_int(
            scoring_cfg.get("adaptive_confidence_target_samples", 1000),
            1000,
        ),
        pretrain_on_startup=_to_bool(scoring_cfg.get("pretrain_on_startup", False), False),
        model_state_path=str(model_state_path) if model_state_path else None,
    )
