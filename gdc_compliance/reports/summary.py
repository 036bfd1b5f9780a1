"""
Summary — aggregate views over a list of RequirementCompliance records.

Every function here accepts an empty list. Domain ordering follows the
requirement catalog (the packaged one when none is passed).
"""

from __future__ import annotations

import logging
import math
from typing import Iterable, Optional, Sequence

from gdc_compliance.catalog.loader import get_catalog
from gdc_compliance.models.enums import (
    ComplianceStatus,
    ExtractionSource,
    RequirementCategory,
    SummaryTier,
)
from gdc_compliance.models.schemas import (
    ComplianceSummary,
    DomainSummary,
    ImplementationRoadmap,
    PriorityAction,
    Requirement,
    RequirementCompliance,
)

logger = logging.getLogger(__name__)

# ── Thresholds ───────────────────────────────────────────

EXCELLENT_MIN_SCORE = 85
GOOD_MIN_SCORE = 70
GOOD_MIN_CRITICAL_RATIO = 0.8
DEVELOPING_MIN_SCORE = 60

PRIORITY_CRITICAL_BELOW = 80
PRIORITY_ANY_BELOW = 60
PRIORITY_ACTION_LIMIT = 8

GOLD_STANDARD_LIMIT = 6
ROADMAP_LIMIT = 3

TIER_SENTENCES: dict[SummaryTier, str] = {
    SummaryTier.EXCELLENT: (
        "Programme demonstrates comprehensive GDC compliance with all critical "
        "requirements met. Ready for inspection with minor enhancements recommended."
    ),
    SummaryTier.GOOD: (
        "Strong foundation with most critical requirements met. Some systematic "
        "enhancements needed for excellence."
    ),
    SummaryTier.DEVELOPING: (
        "Basic compliance established but significant enhancements needed, "
        "particularly for critical requirements."
    ),
    SummaryTier.REQUIRES_SIGNIFICANT_DEVELOPMENT: (
        "Urgent attention needed for critical requirements and systematic "
        "framework implementation."
    ),
}


def _is_critical(item: RequirementCompliance) -> bool:
    return item.requirement.category == RequirementCategory.CRITICAL


def _is_met(item: RequirementCompliance) -> bool:
    return item.analysis.status == ComplianceStatus.MET


def _unique(values: Iterable[str], limit: int) -> list[str]:
    seen: list[str] = []
    for value in values:
        if value and value not in seen:
            seen.append(value)
            if len(seen) >= limit:
                break
    return seen


# ── Scores ───────────────────────────────────────────────

def overall_score(results: Sequence[RequirementCompliance]) -> int:
    if not results:
        return 0
    # half-up, so a mean of 80.5 reports as 81
    return int(math.floor(sum(r.score for r in results) / len(results) + 0.5))


def critical_counts(results: Sequence[RequirementCompliance]) -> tuple[int, int]:
    """(critical requirements met, critical requirements total)."""
    critical = [r for r in results if _is_critical(r)]
    return sum(1 for r in critical if _is_met(r)), len(critical)


def domain_summaries(
    results: Sequence[RequirementCompliance],
    catalog: Optional[Sequence[Requirement]] = None,
) -> list[DomainSummary]:
    """Per-domain averages, in catalog order (unknown domains after, in result order)."""
    if catalog is None:
        catalog = get_catalog()

    order: list[str] = []
    for requirement in catalog:
        if requirement.domain not in order:
            order.append(requirement.domain)
    for item in results:
        if item.requirement.domain not in order:
            order.append(item.requirement.domain)

    summaries: list[DomainSummary] = []
    for domain in order:
        members = [r for r in results if r.requirement.domain == domain]
        if not members:
            continue
        summaries.append(
            DomainSummary(
                domain=domain,
                average_score=overall_score(members),
                met_count=sum(1 for r in members if _is_met(r)),
                total=len(members),
                critical_count=sum(1 for r in members if _is_critical(r)),
            )
        )
    return summaries


# ── Executive summary ────────────────────────────────────

def executive_summary_tier(overall: int, critical_met: int, critical_total: int) -> SummaryTier:
    if overall >= EXCELLENT_MIN_SCORE and critical_met == critical_total:
        return SummaryTier.EXCELLENT
    if overall >= GOOD_MIN_SCORE and critical_met >= critical_total * GOOD_MIN_CRITICAL_RATIO:
        return SummaryTier.GOOD
    if overall >= DEVELOPING_MIN_SCORE:
        return SummaryTier.DEVELOPING
    return SummaryTier.REQUIRES_SIGNIFICANT_DEVELOPMENT


def executive_summary_text(tier: SummaryTier) -> str:
    return f"{tier.value} - {TIER_SENTENCES[tier]}"


# ── Actions and roadmap ──────────────────────────────────

def priority_actions(
    results: Sequence[RequirementCompliance],
    limit: int = PRIORITY_ACTION_LIMIT,
) -> list[PriorityAction]:
    """First *limit* records that are weak critical items or low scorers."""
    actions: list[PriorityAction] = []
    for item in results:
        if (_is_critical(item) and item.score < PRIORITY_CRITICAL_BELOW) or item.score < PRIORITY_ANY_BELOW:
            recommendations = item.analysis.recommendations
            actions.append(
                PriorityAction(
                    code=item.requirement.code,
                    title=item.requirement.title,
                    score=item.score,
                    recommendation=recommendations[0] if recommendations else "",
                )
            )
            if len(actions) >= limit:
                break
    return actions


def gold_standard_recommendations(results: Sequence[RequirementCompliance]) -> list[str]:
    practices = (
        practice
        for r in results
        if r.analysis.insights is not None
        for practice in r.analysis.insights.gold_standard_practices
    )
    return _unique(practices, GOLD_STANDARD_LIMIT)


def _timeline_entries(results: Iterable[RequirementCompliance], position: int) -> Iterable[str]:
    for r in results:
        insights = r.analysis.insights
        if insights is not None and len(insights.implementation_timeline) > position:
            yield insights.implementation_timeline[position]


def implementation_roadmap(results: Sequence[RequirementCompliance]) -> ImplementationRoadmap:
    return ImplementationRoadmap(
        quick_wins=_unique(
            _timeline_entries((r for r in results if r.score >= 70 and r.analysis.recommendations), 0),
            ROADMAP_LIMIT,
        ),
        medium_term=_unique(
            _timeline_entries((r for r in results if 50 <= r.score < 80), 1),
            ROADMAP_LIMIT,
        ),
        long_term=_unique(
            _timeline_entries((r for r in results if r.score < 70), 2),
            ROADMAP_LIMIT,
        ),
    )


# ── Combined ─────────────────────────────────────────────

def summarize(
    results: Sequence[RequirementCompliance],
    catalog: Optional[Sequence[Requirement]] = None,
) -> ComplianceSummary:
    overall = overall_score(results)
    critical_met, critical_total = critical_counts(results)
    tier = executive_summary_tier(overall, critical_met, critical_total)

    def _count(status: ComplianceStatus) -> int:
        return sum(1 for r in results if r.analysis.status == status)

    fallback_count = sum(
        1 for r in results if r.analysis.source == ExtractionSource.TEMPLATE_FALLBACK
    )

    summary = ComplianceSummary(
        overall_score=overall,
        total_requirements=len(results),
        met_count=_count(ComplianceStatus.MET),
        partially_met_count=_count(ComplianceStatus.PARTIALLY_MET),
        not_met_count=_count(ComplianceStatus.NOT_MET),
        not_found_count=_count(ComplianceStatus.NOT_FOUND),
        critical_met_count=critical_met,
        critical_total=critical_total,
        executive_summary_tier=tier,
        executive_summary=executive_summary_text(tier),
        domain_summaries=domain_summaries(results, catalog),
        priority_actions=priority_actions(results),
        gold_standard_recommendations=gold_standard_recommendations(results),
        implementation_roadmap=implementation_roadmap(results),
        extraction_degraded=fallback_count > 0,
        fallback_count=fallback_count,
    )
    logger.info(
        f"[SUMMARY] overall={overall}% tier={tier.value} "
        f"critical={critical_met}/{critical_total} fallbacks={fallback_count}"
    )
    return summary
