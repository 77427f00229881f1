"""Trust scoring delegated to an external text-generation model.

Any failure (missing credentials, transport error, unparseable or invalid
response) is recovered locally by returning the rule-based result.
"""

import json
import logging
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, StrictStr, ValidationError

from ..models.enums import ScoreSource
from ..models.exceptions import ExternalScoringError
from ..models.features import FeatureRecord
from ..models.scores import MAX_TRUST_SCORE, MIN_TRUST_SCORE, ComponentScores, Explanations, ScoreResult
from ..services.ai_providers import ExternalAIProvider
from .numeric import risk_category_for_score, round_map
from .rule_based import MODEL_WEIGHTS, RuleBasedScorer, data_confidence


logger = logging.getLogger(__name__)

PROMPT_TEMPLATE = """You are a financial risk assessment engine for a micro-lending platform in India.

Given the following behavioral financial signals, evaluate the user's creditworthiness conservatively.

TASKS:
1. Generate a Trust Score between 300 and 900
2. Generate sub-scores (0.00 to 1.00) for:
   - utility_score: Utility bill payment discipline
   - upi_score: UPI transaction stability
   - location_score: Residential stability
   - social_score: Social trust network
3. Provide 1 short explanation sentence per category (max 15 words each)

RULES:
- Be conservative in scoring
- Penalize volatility and inconsistency
- Reward consistency and stability
- Do NOT hallucinate data
- Base scores ONLY on the provided data
- Score 0 for any category with missing data

INPUT DATA:
{features}

SCORING GUIDELINES:
- Utility: High on_time_ratio (>0.8) = good score, missed payments = penalty
- UPI: Low variance + high income consistency = good score
- Location: Higher months_at_location and stability_score = better
- Social: Higher network_strength and connections = better

Return output STRICTLY in this JSON format (no markdown, no extra text):
{{
  "trust_score": 742,
  "utility_score": 0.88,
  "upi_score": 0.72,
  "location_score": 0.90,
  "social_score": 0.79,
  "explanations": {{
    "utility": "Consistent on-time utility bill payments",
    "upi": "Stable transaction activity with moderate variance",
    "location": "Strong residential stability over time",
    "social": "Connected to a long-standing trusted network"
  }}
}}"""


class AIExplanations(BaseModel):
    model_config = ConfigDict(extra="ignore")

    utility: StrictStr
    upi: StrictStr
    location: StrictStr
    social: StrictStr


class AIScorePayload(BaseModel):
    """Expected shape of the model's JSON answer."""

    model_config = ConfigDict(extra="ignore")

    trust_score: int = Field(..., ge=MIN_TRUST_SCORE, le=MAX_TRUST_SCORE, strict=True)
    utility_score: float = Field(..., ge=0.0, le=1.0, strict=True)
    upi_score: float = Field(..., ge=0.0, le=1.0, strict=True)
    location_score: float = Field(..., ge=0.0, le=1.0, strict=True)
    social_score: float = Field(..., ge=0.0, le=1.0, strict=True)
    explanations: AIExplanations


def build_prompt(features: FeatureRecord) -> str:
    """Embed the feature record as JSON into the scoring prompt."""
    return PROMPT_TEMPLATE.format(features=json.dumps(features.to_payload(), indent=2))


def extract_json_object(text: str) -> Dict[str, Any]:
    """Return the first well-formed JSON object in ``text``.

    Every ``{`` is tried in text order, so objects inside fenced code blocks
    and objects embedded in prose are treated alike.

    Raises:
        ExternalScoringError: If no JSON object can be decoded.
    """
    decoder = json.JSONDecoder()
    index = text.find("{")
    while index != -1:
        try:
            candidate, _ = decoder.raw_decode(text, index)
        except ValueError:
            candidate = None
        if isinstance(candidate, dict):
            return candidate
        index = text.find("{", index + 1)
    raise ExternalScoringError("Could not extract JSON from AI response")


def validate_payload(payload: Dict[str, Any]) -> AIScorePayload:
    """Check schema and ranges of a decoded answer.

    Raises:
        ExternalScoringError: On any missing field, wrong type or out-of-range value.
    """
    try:
        return AIScorePayload.model_validate(payload)
    except ValidationError as exc:
        raise ExternalScoringError(
            "Invalid trust score result from AI: {0} error(s)".format(exc.error_count())
        ) from exc


class ExternalAIScorer:
    """Stateless scorer backed by an `ExternalAIProvider`."""

    source = ScoreSource.EXTERNAL_AI

    def __init__(
        self,
        provider: Optional[ExternalAIProvider],
        fallback: Optional[RuleBasedScorer] = None,
    ) -> None:
        self._provider = provider
        self._fallback = fallback if fallback is not None else RuleBasedScorer()

    @property
    def provider_name(self) -> Optional[str]:
        return self._provider.name if self._provider is not None else None

    def score(self, features: FeatureRecord) -> ScoreResult:
        """Try the provider once; return the rule-based result on any failure."""
        if self._provider is None or not self._provider.has_credentials:
            logger.warning("External AI credentials not configured; using rule-based scoring.")
            return self._fall_back(features, "missing_credentials")

        try:
            text = self._provider.generate(build_prompt(features))
            answer = validate_payload(extract_json_object(text))
        except ExternalScoringError as exc:
            logger.warning("External AI scoring failed provider=%s: %s", self._provider.name, exc)
            return self._fall_back(features, str(exc))
        except Exception as exc:
            logger.exception("Unexpected external AI failure provider=%s", self._provider.name)
            return self._fall_back(features, "unexpected_error: {0}".format(type(exc).__name__))

        result = self._to_result(features, answer)
        logger.info(
            "External AI trust score generated provider=%s trust_score=%d",
            self._provider.name,
            result.trust_score,
        )
        return result

    def _to_result(self, features: FeatureRecord, answer: AIScorePayload) -> ScoreResult:
        scores = ComponentScores(
            utility=float(answer.utility_score) * 100.0,
            upi=float(answer.upi_score) * 100.0,
            location=float(answer.location_score) * 100.0,
            social=float(answer.social_score) * 100.0,
        )
        trust_score = answer.trust_score
        return ScoreResult(
            trust_score=trust_score,
            component_scores=scores,
            risk_category=risk_category_for_score(trust_score),
            explanations=Explanations(**answer.explanations.model_dump()),
            confidence=data_confidence(features),
            source=self.source,
            weighted_scores=round_map(
                {name: getattr(scores, name) * weight for name, weight in MODEL_WEIGHTS.items()}
            ),
            model_version="external-ai:{0}:{1}".format(self._provider.name, self._provider.model),
        )

    def _fall_back(self, features: FeatureRecord, reason: str) -> ScoreResult:
        result = self._fallback.score(features)
        return result.model_copy(update={"fallback_reason": reason})
