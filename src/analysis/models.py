from datetime import datetime
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, Field


# -------------------------------------------------------------------
# Base (STRICT)
# -------------------------------------------------------------------

class StrictBaseModel(BaseModel):
    model_config = {
        "extra": "forbid"
    }


# -------------------------------------------------------------------
# Enumerations
# -------------------------------------------------------------------

ClauseCategory = Literal[
    "Auto-Renewals",
    "Data Privacy / Data Selling",
    "Cancellation Fees or Penalties",
    "Unilateral Changes",
    "Arbitration / No Class Action",
    "Limitation of Liability",
    "Jurisdiction & Governing Law",
]

RiskTier = Literal["Low", "Medium", "High"]

RiskLevel = Literal["Very Low", "Low", "Medium", "High"]

ParseStrategy = Literal["strict", "brace_slice", "heuristic", "empty"]


# -------------------------------------------------------------------
# Findings
# -------------------------------------------------------------------

class ClauseFinding(StrictBaseModel):
    """
    One flagged clause.

    The snippet is grounded by the normalizer: it is a literal substring of
    the analyzed text (up to a trailing "..." marker) or the fixed fallback
    slice, never text taken on trust from the generation service.
    """
    category: ClauseCategory
    risk: RiskTier
    summary: str
    why_it_matters: str
    snippet: str
    emoji: Optional[str] = None


# -------------------------------------------------------------------
# Normalizer output
# -------------------------------------------------------------------

class NormalizedAnalysis(StrictBaseModel):
    findings: List[ClauseFinding] = Field(default_factory=list)
    overall_risk: RiskTier = "Low"    # as reported by the service
    total_clauses: int = Field(default=0, ge=0)
    assessment: str = "Analysis completed"
    parse_strategy: ParseStrategy
    raw_response: str = ""


# -------------------------------------------------------------------
# Derived summary
# -------------------------------------------------------------------

class AnalysisSummary(StrictBaseModel):
    total_clauses: int = Field(ge=0)
    high_risk_clauses: int = Field(ge=0)
    medium_risk_clauses: int = Field(ge=0)
    low_risk_clauses: int = Field(ge=0)
    overall_risk: RiskTier
    clause_categories: Dict[str, int]
    has_risky_clauses: bool
    risk_level: RiskLevel


# -------------------------------------------------------------------
# Final result
# -------------------------------------------------------------------

class AnalysisResult(StrictBaseModel):
    analysis: NormalizedAnalysis
    summary: AnalysisSummary
    analyzed_at: datetime
    input_length: int = Field(ge=0)
    source_url: Optional[str] = None

    @property
    def findings(self) -> List[ClauseFinding]:
        return self.analysis.findings

    @property
    def overall_risk(self) -> str:
        return self.analysis.overall_risk
