"""HTTP clients for third-party text-generation endpoints."""

from abc import ABC, abstractmethod
import json
import logging
from typing import Any, Callable, Dict, Optional, Tuple
from urllib import error, parse, request

from ..core.config import AI_PROVIDER_GEMINI, AI_PROVIDER_GROK, AppSettings, is_usable_api_key
from ..models.exceptions import ExternalScoringError


logger = logging.getLogger(__name__)

# (url, headers, json body, timeout seconds) -> decoded JSON response
Transport = Callable[[str, Dict[str, str], Dict[str, Any], float], Dict[str, Any]]

SYSTEM_INSTRUCTION = "You are a financial risk assessment engine. Respond only with valid JSON."


def urllib_json_transport(
    url: str,
    headers: Dict[str, str],
    body: Dict[str, Any],
    timeout: float,
) -> Dict[str, Any]:
    """POST a JSON body and decode the JSON response."""
    req = request.Request(
        url=url,
        data=json.dumps(body).encode("utf-8"),
        headers=dict(headers, **{"Content-Type": "application/json", "Accept": "application/json"}),
        method="POST",
    )
    try:
        with request.urlopen(req, timeout=timeout) as response:
            payload = response.read().decode("utf-8")
            return json.loads(payload)
    except error.HTTPError as exc:
        if exc.code in {401, 403}:
            raise ExternalScoringError("AI endpoint unauthorized. Check ai.api_key in config.yml.") from exc
        if exc.code == 429:
            raise ExternalScoringError("AI endpoint rate limit exceeded.") from exc
        raise ExternalScoringError("AI endpoint request failed with status={0}".format(exc.code)) from exc
    except error.URLError as exc:
        raise ExternalScoringError("AI endpoint network/DNS error: {0}".format(exc)) from exc
    except OSError as exc:
        raise ExternalScoringError("AI endpoint transport error: {0}".format(exc)) from exc
    except ValueError as exc:
        raise ExternalScoringError("AI endpoint returned non-JSON body.") from exc


class ExternalAIProvider(ABC):
    """One third-party text-generation backend."""

    name = "external"

    def __init__(
        self,
        api_key: Optional[str],
        endpoint: str,
        model: str,
        timeout_sec: float = 15.0,
        temperature: float = 0.4,
        max_output_tokens: int = 1024,
        transport: Optional[Transport] = None,
    ) -> None:
        self._api_key = api_key
        self._endpoint = endpoint
        self._model = model
        self._timeout_sec = float(timeout_sec)
        self._temperature = float(temperature)
        self._max_output_tokens = int(max_output_tokens)
        self._transport = transport or urllib_json_transport

    @property
    def model(self) -> str:
        return self._model

    @property
    def has_credentials(self) -> bool:
        return is_usable_api_key(self._api_key)

    def generate(self, prompt: str) -> str:
        """Send ``prompt`` and return the generated text.

        Raises:
            ExternalScoringError: On transport failure or unexpected response shape.
        """
        if not self.has_credentials:
            raise ExternalScoringError("{0} API key not configured".format(self.name))
        url, headers, body = self._build_request(prompt)
        logger.info("Calling %s model=%s for trust score generation", self.name, self._model)
        response = self._transport(url, headers, body, self._timeout_sec)
        try:
            text = self._extract_text(response)
        except (KeyError, IndexError, TypeError) as exc:
            raise ExternalScoringError("Invalid response format from {0}".format(self.name)) from exc
        if not isinstance(text, str) or not text.strip():
            raise ExternalScoringError("Empty response content from {0}".format(self.name))
        return text

    @abstractmethod
    def _build_request(self, prompt: str) -> Tuple[str, Dict[str, str], Dict[str, Any]]:
        """Return url, headers and JSON body for one generation call."""

    @abstractmethod
    def _extract_text(self, response: Dict[str, Any]) -> str:
        """Pull the generated text out of the decoded response."""


class GeminiProvider(ExternalAIProvider):
    """Google generateContent API."""

    name = AI_PROVIDER_GEMINI

    def _build_request(self, prompt: str) -> Tuple[str, Dict[str, str], Dict[str, Any]]:
        url = "{0}?{1}".format(
            self._endpoint.format(model=self._model),
            parse.urlencode({"key": self._api_key}),
        )
        body = {
            "contents": [{"parts": [{"text": prompt}]}],
            "generationConfig": {
                "temperature": self._temperature,
                "topK": 32,
                "topP": 0.95,
                "maxOutputTokens": self._max_output_tokens,
            },
        }
        return url, {}, body

    def _extract_text(self, response: Dict[str, Any]) -> str:
        return response["candidates"][0]["content"]["parts"][0]["text"]


class GrokProvider(ExternalAIProvider):
    """OpenAI-compatible chat completions API."""

    name = AI_PROVIDER_GROK

    def _build_request(self, prompt: str) -> Tuple[str, Dict[str, str], Dict[str, Any]]:
        body = {
            "messages": [
                {"role": "system", "content": SYSTEM_INSTRUCTION},
                {"role": "user", "content": prompt},
            ],
            "model": self._model,
            "temperature": self._temperature,
            "max_tokens": self._max_output_tokens,
        }
        headers = {"Authorization": "Bearer {0}".format(self._api_key)}
        return self._endpoint, headers, body

    def _extract_text(self, response: Dict[str, Any]) -> str:
        return response["choices"][0]["message"]["content"]


def build_provider(settings: AppSettings, transport: Optional[Transport] = None) -> Optional[ExternalAIProvider]:
    """Instantiate the configured provider, or None when AI scoring is off."""
    common = {
        "api_key": settings.ai_api_key,
        "timeout_sec": settings.ai_timeout_sec,
        "temperature": settings.ai_temperature,
        "max_output_tokens": settings.ai_max_output_tokens,
        "transport": transport,
    }
    if settings.ai_provider == AI_PROVIDER_GEMINI:
        return GeminiProvider(endpoint=settings.gemini_endpoint, model=settings.gemini_model, **common)
    if settings.ai_provider == AI_PROVIDER_GROK:
        return GrokProvider(endpoint=settings.grok_endpoint, model=settings.grok_model, **common)
    return None
