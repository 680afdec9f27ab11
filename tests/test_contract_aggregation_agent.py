import pytest

from agents.contract_aggregation_agent import ContractAggregationAgent
from analysis.models import ClauseFinding, NormalizedAnalysis


def _finding(risk, category="Auto-Renewals"):
    return ClauseFinding(
        category=category,
        risk=risk,
        summary="s",
        why_it_matters="w",
        snippet="x",
    )


def _analysis(*risks, overall="Low"):
    return NormalizedAnalysis(
        findings=[_finding(r) for r in risks],
        overall_risk=overall,
        total_clauses=len(risks),
        parse_strategy="strict",
    )


@pytest.mark.parametrize(
    "high, medium, low, expected",
    [
        (2, 1, 0, "High"),
        (0, 2, 0, "Medium"),
        (0, 0, 3, "Low"),
        (0, 1, 0, "Low"),
        (0, 0, 2, "Very Low"),
        (0, 0, 0, "Very Low"),
    ],
)
def test_risk_level_rule(high, medium, low, expected):
    assert ContractAggregationAgent.risk_level(high, medium, low) == expected


def test_summary_counts_tiers_and_categories():
    analysis = NormalizedAnalysis(
        findings=[
            _finding("High", "Arbitration / No Class Action"),
            _finding("Medium", "Auto-Renewals"),
            _finding("Medium", "Auto-Renewals"),
            _finding("Low", "Jurisdiction & Governing Law"),
        ],
        overall_risk="Low",
        total_clauses=4,
        parse_strategy="strict",
    )

    summary = ContractAggregationAgent().aggregate(analysis)

    assert (summary.high_risk_clauses, summary.medium_risk_clauses, summary.low_risk_clauses) == (1, 2, 1)
    assert summary.total_clauses == 4
    assert summary.clause_categories["Auto-Renewals"] == 2
    assert summary.clause_categories["Limitation of Liability"] == 0
    assert len(summary.clause_categories) == 7
    assert summary.has_risky_clauses is True


def test_computed_level_ignores_reported_overall_risk():
    summary = ContractAggregationAgent().aggregate(_analysis("High", overall="Low"))

    assert summary.overall_risk == "Low"
    assert summary.risk_level == "High"


def test_empty_findings_are_very_low():
    summary = ContractAggregationAgent().aggregate(_analysis())

    assert summary.risk_level == "Very Low"
    assert summary.has_risky_clauses is False
