"""
Report Builder — flat text report for download or the CLI.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional, Sequence

from gdc_compliance.models.schemas import ComplianceSummary, RequirementCompliance
from gdc_compliance.reports.summary import summarize

RULE = "=" * 80
THIN_RULE = "-" * 80

_STATUS_LABELS = {
    "met": "MET",
    "partially-met": "PARTIALLY MET",
    "not-met": "NOT MET",
    "not-found": "NOT FOUND",
}


def _bullets(items: Sequence[str], marker: str = "•", empty: str = "(none)") -> list[str]:
    if not items:
        return [f"  {empty}"]
    return [f"  {marker} {item}" for item in items]


def build_text_report(
    results: Sequence[RequirementCompliance],
    summary: Optional[ComplianceSummary] = None,
    document_names: Sequence[str] = (),
    generated_at: Optional[datetime] = None,
    document_fingerprints: Sequence[str] = (),
) -> str:
    """Render results and their summary as a plain-text report."""
    summary = summary or summarize(results)
    generated_at = generated_at or datetime.now(timezone.utc)

    lines: list[str] = [
        "GDC COMPLIANCE ANALYSIS REPORT",
        RULE,
        f"DOCUMENTS: {', '.join(document_names) if document_names else '(none)'}",
    ]
    if document_fingerprints:
        lines.append(f"FINGERPRINTS: {', '.join(document_fingerprints)}")
    lines += [
        f"ANALYSIS DATE: {generated_at.strftime('%Y-%m-%d %H:%M UTC')}",
        f"GDC REQUIREMENTS ANALYZED: {summary.total_requirements}",
        f"OVERALL COMPLIANCE SCORE: {summary.overall_score}%",
        "",
    ]

    if summary.extraction_degraded:
        lines += [
            "NOTE: Automated evidence extraction was degraded; template analysis was "
            f"used for {summary.fallback_count} requirement(s).",
            "",
        ]

    lines += [
        "EXECUTIVE SUMMARY:",
        summary.executive_summary,
        "",
        "COMPLIANCE BREAKDOWN:",
        f"  Fully Met: {summary.met_count} standards",
        f"  Partially Met: {summary.partially_met_count} standards",
        f"  Not Met: {summary.not_met_count} standards",
    ]
    if summary.not_found_count:
        lines.append(f"  Not Found: {summary.not_found_count} standards")
    lines += [
        f"  Critical Requirements: {summary.critical_met_count}/{summary.critical_total} met",
        "",
        "DOMAIN PERFORMANCE:",
    ]
    lines += _bullets([
        f"{d.domain}: {d.average_score}% ({d.met_count}/{d.total} met, {d.critical_count} critical)"
        for d in summary.domain_summaries
    ])

    lines += ["", "PRIORITY ACTIONS:"]
    lines += _bullets(
        [f"{a.code} ({a.score}%): {a.recommendation or a.title}" for a in summary.priority_actions],
        marker="→",
    )

    lines += ["", "GOLD STANDARD RECOMMENDATIONS:"]
    lines += _bullets(summary.gold_standard_recommendations, marker="*")

    roadmap = summary.implementation_roadmap
    lines += ["", "IMPLEMENTATION ROADMAP:", "QUICK WINS (0-30 days):"]
    lines += _bullets(roadmap.quick_wins)
    lines += ["MEDIUM TERM (1-6 months):"]
    lines += _bullets(roadmap.medium_term)
    lines += ["LONG TERM (6-12 months):"]
    lines += _bullets(roadmap.long_term)

    lines += ["", RULE, "REQUIREMENT DETAIL", RULE]
    if not results:
        lines.append("No requirements were analysed.")
    for item in results:
        analysis = item.analysis
        lines += [
            f"{item.requirement.code} {item.requirement.title} [{item.requirement.domain}]",
            f"  Status: {_STATUS_LABELS.get(analysis.status.value, analysis.status.value)}"
            f" | Score: {item.score}% | Confidence: {analysis.confidence}%"
            f" | Source: {analysis.source.value}",
            "  Evidence:",
        ]
        lines += [f"    - {e}" for e in analysis.evidence[:3]] or ["    - (none)"]
        lines.append("  Recommendations:")
        lines += [f"    - {r}" for r in analysis.recommendations[:3]] or ["    - (none)"]
        lines.append(THIN_RULE)

    lines += ["", "GDC Compliance Analyzer", ""]
    return "\n".join(lines)
