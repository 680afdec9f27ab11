from datetime import datetime, timezone

from agents.contract_aggregation_agent import ContractAggregationAgent
from analysis.models import AnalysisResult, ClauseFinding, NormalizedAnalysis
from analysis.presentation.report_builder import build_risk_report, render_text, risk_icon


def _result(findings, source_url=None):
    analysis = NormalizedAnalysis(
        findings=findings,
        overall_risk="Medium",
        total_clauses=len(findings),
        assessment="Watch the renewal terms.",
        parse_strategy="strict",
    )
    return AnalysisResult(
        analysis=analysis,
        summary=ContractAggregationAgent().aggregate(analysis),
        analyzed_at=datetime.now(timezone.utc),
        input_length=120,
        source_url=source_url,
    )


def test_report_lists_findings_with_category_icons():
    finding = ClauseFinding(
        category="Auto-Renewals",
        risk="Medium",
        summary="Renews yearly.",
        why_it_matters="Charges continue.",
        snippet="renews automatically each year",
    )

    report = build_risk_report(_result([finding], source_url="https://example.com/terms"))

    assert report.headline == "Overall Risk: Medium • 1 clause(s)"
    assert report.risk_level == "Low"
    assert report.findings[0].icon == "🔄"
    assert report.findings[0].risk_icon == risk_icon("Medium")
    assert report.category_counts == {"Auto-Renewals": 1}
    assert report.source == "https://example.com/terms"

    text = render_text(report)
    assert "1. 🔄 Auto-Renewals" in text
    assert '"renews automatically each year"' in text


def test_service_emoji_overrides_category_icon():
    finding = ClauseFinding(
        category="Limitation of Liability",
        risk="High",
        summary="Caps damages.",
        why_it_matters="Little recourse.",
        snippet="not liable",
        emoji="🧯",
    )

    report = build_risk_report(_result([finding]))

    assert report.findings[0].icon == "🧯"
    assert report.source == "pasted text"


def test_empty_report_says_nothing_was_found():
    text = render_text(build_risk_report(_result([])))

    assert "No risky clauses detected" in text
    assert "Very Low" in text


def test_unknown_risk_gets_neutral_icon():
    assert risk_icon("HIGH") == risk_icon("high")
    assert risk_icon("unheard of") == "ℹ️"
