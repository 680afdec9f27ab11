from typing import Optional

from analysis.models import AnalysisSummary, NormalizedAnalysis
from configs.category_rules import CategoryRules, load_category_rules


class ContractAggregationAgent:
    """
    Derives the contract-level summary from the normalized findings.

    risk_level is computed from the findings alone; the service's
    overallRisk is echoed unchanged.
    """

    def __init__(self, rules: Optional[CategoryRules] = None):
        self.rules = rules or load_category_rules()

    # =========================================================
    # PUBLIC API
    # =========================================================

    def aggregate(self, analysis: NormalizedAnalysis) -> AnalysisSummary:
        findings = analysis.findings

        high = sum(1 for f in findings if f.risk == "High")
        medium = sum(1 for f in findings if f.risk == "Medium")
        low = sum(1 for f in findings if f.risk == "Low")

        categories = {label: 0 for label in self.rules.labels}
        for f in findings:
            categories[f.category] = categories.get(f.category, 0) + 1

        return AnalysisSummary(
            total_clauses=len(findings),
            high_risk_clauses=high,
            medium_risk_clauses=medium,
            low_risk_clauses=low,
            overall_risk=analysis.overall_risk,
            clause_categories=categories,
            has_risky_clauses=len(findings) > 0,
            risk_level=self.risk_level(high, medium, low),
        )

    @staticmethod
    def risk_level(high: int, medium: int, low: int) -> str:
        """
        High if any High; Medium if 2+ Medium; Low if any Medium or 3+ Low;
        Very Low otherwise.
        """
        if high > 0:
            return "High"
        if medium >= 2:
            return "Medium"
        if medium >= 1 or low >= 3:
            return "Low"
        return "Very Low"
