from typing import Dict, List

from pydantic import BaseModel


class FindingLine(BaseModel):
    icon: str
    category: str
    risk: str
    risk_icon: str
    summary: str
    why_it_matters: str
    snippet: str


class RiskReport(BaseModel):
    headline: str
    risk_level: str
    risk_level_icon: str
    assessment: str
    findings: List[FindingLine]
    category_counts: Dict[str, int]
    source: str
