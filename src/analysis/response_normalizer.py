import json
import re
from typing import Any, Callable, Dict, List, Optional, Tuple

from pydantic import (
    AliasChoices,
    BaseModel,
    Field,
    ValidationError,
    ValidationInfo,
    field_validator,
)

from analysis.models import ClauseCategory, ClauseFinding, NormalizedAnalysis, RiskTier
from analysis.prompt_builder import extract_contract_text
from analysis.snippet_grounding import SNIPPET_MAX_LENGTH, ground_snippet
from configs.category_rules import CategoryRules, load_category_rules
from configs.settings import Config
from tools.logger import setup_logger

logger = setup_logger("response-normalizer")

CODE_FENCE = re.compile(r"^```(?:json)?\s*(.*?)\s*```$", flags=re.DOTALL | re.IGNORECASE)
TRAILING_COMMA = re.compile(r",\s*([}\]])")

RISK_TIERS = {"low": "Low", "medium": "Medium", "high": "High"}

Payload = Dict[str, Any]
Strategy = Callable[[str], Optional[Payload]]


def normalize_tier(value, default: str) -> str:
    text = str(value or "").strip().lower()
    return RISK_TIERS.get(text, default)


# -------------------------------------------------
# Lenient schema for one clause as the service returns it
# -------------------------------------------------

class RawClause(BaseModel):
    """
    Clause as emitted by the generation service.

    Accepts camelCase or snake_case keys and normalizes values before they
    become a ClauseFinding. Unknown categories fail validation.
    """
    model_config = {"extra": "ignore"}

    category: ClauseCategory
    risk: RiskTier = "Medium"
    summary: str = ""
    why_it_matters: str = Field(
        default="",
        validation_alias=AliasChoices("whyItMatters", "why_it_matters", "rationale"),
    )
    snippet: Optional[Any] = None
    emoji: Optional[str] = None

    @field_validator("category", mode="before")
    @classmethod
    def canonical_category(cls, value, info: ValidationInfo):
        rules = (info.context or {}).get("rules") or load_category_rules()
        label = rules.canonical_label(value if isinstance(value, str) else None)
        if label is None:
            raise ValueError(f"unknown clause category {value!r}")
        return label

    @field_validator("risk", mode="before")
    @classmethod
    def normalize_risk(cls, value):
        return normalize_tier(value, "Medium")

    @field_validator("summary", "why_it_matters", mode="before")
    @classmethod
    def coerce_text(cls, value):
        if value is None:
            return ""
        return value.strip() if isinstance(value, str) else str(value)

    @field_validator("emoji", mode="before")
    @classmethod
    def drop_non_text_emoji(cls, value):
        return value if isinstance(value, str) and value.strip() else None


# -------------------------------------------------
# Parse strategies (tried in order; None hands over to the next)
# -------------------------------------------------

def _as_payload(parsed) -> Optional[Payload]:
    if isinstance(parsed, dict) and isinstance(parsed.get("clauses"), list):
        return parsed
    return None


def _loads(text: str) -> Optional[Payload]:
    # ValueError covers JSONDecodeError and oversized integer literals.
    try:
        return _as_payload(json.loads(text))
    except (ValueError, RecursionError):
        return None


def parse_strict(raw: str) -> Optional[Payload]:
    """Whole response is the JSON object (Markdown fences tolerated)."""
    text = raw.strip()
    fenced = CODE_FENCE.match(text)
    if fenced:
        text = fenced.group(1)
    return _loads(text)


def parse_brace_slice(raw: str) -> Optional[Payload]:
    """JSON object wrapped in prose: parse from the first '{' to the last '}'."""
    first = raw.find("{")
    last = raw.rfind("}")
    if first == -1 or last <= first:
        return None

    candidate = raw[first:last + 1]
    payload = _loads(candidate)
    if payload is None:
        payload = _loads(TRAILING_COMMA.sub(r"\1", candidate))
    return payload


class ResponseNormalizer:
    """
    Turns raw generation output into a NormalizedAnalysis.

    Never raises: unusable output degrades to a heuristic or empty result.
    Snippets are re-grounded against the contract text recovered from the
    prompt.

    Example:
        >>> normalizer = ResponseNormalizer()
        >>> normalizer.normalize('{"clauses": [], "overallRisk": "Low"}', prompt).parse_strategy
        'strict'
    """

    def __init__(
        self,
        rules: Optional[CategoryRules] = None,
        max_findings: int = Config.MAX_FINDINGS,
        snippet_max: int = SNIPPET_MAX_LENGTH,
    ):
        self.rules = rules or load_category_rules()
        self.max_findings = max_findings
        self.snippet_max = snippet_max

        self.strategies: List[Tuple[str, Strategy]] = [
            ("strict", parse_strict),
            ("brace_slice", parse_brace_slice),
            ("heuristic", self._parse_heuristic),
        ]

    # -------------------------------------------------
    # Public API
    # -------------------------------------------------

    def normalize(self, raw_text, prompt: str) -> NormalizedAnalysis:
        raw = raw_text if isinstance(raw_text, str) else ""
        contract_text = extract_contract_text(prompt)

        for name, strategy in self.strategies:
            payload = strategy(raw)
            if payload is None:
                logger.debug(f"Parse strategy '{name}' produced nothing")
                continue

            if name != "strict":
                logger.warning(f"Response required fallback parse strategy '{name}'")
            return self._build(payload, name, raw, contract_text)

        logger.warning("No usable structure in generation output; returning empty result")
        return NormalizedAnalysis(
            findings=[],
            overall_risk="Low",
            total_clauses=0,
            assessment="Analysis completed (text parsing)",
            parse_strategy="empty",
            raw_response=raw,
        )

    # -------------------------------------------------
    # Helpers
    # -------------------------------------------------

    def _parse_heuristic(self, raw: str) -> Optional[Payload]:
        """
        One generic finding per category mentioned in the raw output.

        No snippet is taken from the output; grounding derives it from the
        contract text.
        """
        mentions = self.rules.find_mentions(raw)
        if not mentions:
            return None

        return {
            "clauses": [
                {
                    "category": label,
                    "risk": "Low",
                    "summary": (
                        f"The analysis mentions {label} terms but returned "
                        "no structured details."
                    ),
                    "whyItMatters": self.rules.description_for(label),
                    "snippet": None,
                }
                for label in mentions
            ],
            "overallRisk": "Low",
            "summary": "Analysis completed (text parsing)",
        }

    def _build(
        self,
        payload: Payload,
        strategy: str,
        raw: str,
        contract_text: str,
    ) -> NormalizedAnalysis:
        findings: List[ClauseFinding] = []

        for item in payload.get("clauses", []):
            if not isinstance(item, dict):
                continue
            try:
                clause = RawClause.model_validate(item, context={"rules": self.rules})
            except ValidationError as e:
                logger.warning(f"Dropping clause that failed validation: {e.errors()[0]['msg']}")
                continue

            snippet = ground_snippet(
                clause.snippet,
                contract_text,
                self.rules.triggers_for(clause.category),
                self.snippet_max,
            )
            findings.append(
                ClauseFinding(
                    category=clause.category,
                    risk=clause.risk,
                    summary=clause.summary,
                    why_it_matters=clause.why_it_matters,
                    snippet=snippet,
                    emoji=clause.emoji,
                )
            )

            if len(findings) >= self.max_findings:
                break

        assessment = payload.get("summary")
        if not isinstance(assessment, str) or not assessment.strip():
            assessment = "Analysis completed"

        return NormalizedAnalysis(
            findings=findings,
            overall_risk=normalize_tier(payload.get("overallRisk"), "Low"),
            total_clauses=len(findings),
            assessment=assessment.strip(),
            parse_strategy=strategy,
            raw_response=raw,
        )
