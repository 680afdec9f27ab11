from typing import Optional

from analysis.models import AnalysisResult
from analysis.presentation.risk_report import FindingLine, RiskReport
from configs.category_rules import CategoryRules, load_category_rules


RISK_ICONS = {
    "high": "🚨",
    "medium": "⚠️",
    "low": "✅",
    "very low": "🟢",
}

DEFAULT_RISK_ICON = "ℹ️"


def risk_icon(risk: str) -> str:
    return RISK_ICONS.get(str(risk or "").lower(), DEFAULT_RISK_ICON)


def build_risk_report(
    result: AnalysisResult,
    rules: Optional[CategoryRules] = None,
) -> RiskReport:
    """
    Converts an AnalysisResult into a display-ready report.

    Only categories that were actually flagged are listed in the counts.
    """
    rules = rules or load_category_rules()
    summary = result.summary

    findings = [
        FindingLine(
            icon=f.emoji or rules.icon_for(f.category),
            category=f.category,
            risk=f.risk,
            risk_icon=risk_icon(f.risk),
            summary=f.summary,
            why_it_matters=f.why_it_matters,
            snippet=f.snippet,
        )
        for f in result.findings
    ]

    return RiskReport(
        headline=f"Overall Risk: {result.overall_risk} • {summary.total_clauses} clause(s)",
        risk_level=summary.risk_level,
        risk_level_icon=risk_icon(summary.risk_level),
        assessment=result.analysis.assessment,
        findings=findings,
        category_counts={k: v for k, v in summary.clause_categories.items() if v},
        source=result.source_url or "pasted text",
    )


def render_text(report: RiskReport) -> str:
    lines = [
        report.headline,
        f"Computed risk level: {report.risk_level_icon} {report.risk_level}",
        f"Source: {report.source}",
        "",
        report.assessment,
    ]

    if not report.findings:
        lines += ["", "No risky clauses detected in this contract."]
        return "\n".join(lines)

    for idx, f in enumerate(report.findings, start=1):
        lines += [
            "",
            f"{idx}. {f.icon} {f.category} [{f.risk_icon} {f.risk}]",
            f"   {f.summary}",
        ]
        if f.why_it_matters:
            lines.append(f"   Why it matters: {f.why_it_matters}")
        if f.snippet:
            lines.append(f'   "{f.snippet}"')

    lines += ["", "Flagged categories:"]
    lines += [f"  - {k}: {v}" for k, v in report.category_counts.items()]
    return "\n".join(lines)
