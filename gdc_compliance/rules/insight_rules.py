"""
Insight Rules — readiness, priority and risk derived from status and category.
"""

from __future__ import annotations

from typing import Optional

from gdc_compliance.models.enums import (
    ComplianceStatus,
    InspectionReadiness,
    PriorityLevel,
    RequirementCategory,
    RiskLevel,
)
from gdc_compliance.models.schemas import AnalysisInsights, Requirement

DEFAULT_GOLD_STANDARD_PRACTICES = [
    "Industry best practice benchmarking",
    "Cross-institutional collaboration",
    "Digital transformation integration",
]

DEFAULT_IMPLEMENTATION_TIMELINE = [
    "Quick win: Enhanced documentation (0-30 days)",
    "Medium term: Systematic monitoring (1-6 months)",
    "Long term: Excellence framework (6-12 months)",
]


def inspection_readiness(status: ComplianceStatus) -> InspectionReadiness:
    if status == ComplianceStatus.MET:
        return InspectionReadiness.READY
    if status == ComplianceStatus.PARTIALLY_MET:
        return InspectionReadiness.PARTIAL
    return InspectionReadiness.NOT_READY


def priority_level(requirement: Requirement, status: ComplianceStatus) -> PriorityLevel:
    if requirement.category == RequirementCategory.CRITICAL:
        return PriorityLevel.CRITICAL
    if status == ComplianceStatus.NOT_MET:
        return PriorityLevel.HIGH
    return PriorityLevel.MEDIUM


def risk_level(requirement: Requirement, status: ComplianceStatus) -> RiskLevel:
    if requirement.category == RequirementCategory.CRITICAL and status != ComplianceStatus.MET:
        return RiskLevel.HIGH
    if status == ComplianceStatus.NOT_MET:
        return RiskLevel.MEDIUM
    return RiskLevel.LOW


def derive_insights(
    requirement: Requirement,
    status: ComplianceStatus,
    *,
    gold_standard_practices: Optional[list[str]] = None,
    document_references: Optional[list[str]] = None,
    implementation_timeline: Optional[list[str]] = None,
) -> AnalysisInsights:
    """Build insights, filling any list the caller did not supply with defaults."""
    return AnalysisInsights(
        gold_standard_practices=gold_standard_practices or list(DEFAULT_GOLD_STANDARD_PRACTICES),
        document_references=document_references or [],
        implementation_timeline=implementation_timeline or list(DEFAULT_IMPLEMENTATION_TIMELINE),
        inspection_readiness=inspection_readiness(status),
        priority_level=priority_level(requirement, status),
        risk_level=risk_level(requirement, status),
    )
