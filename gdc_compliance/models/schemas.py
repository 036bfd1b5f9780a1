"""
Data schemas shared by the extractors, the orchestrator and the report layer.
Catalog records and per-run analysis records are frozen once created.
"""

from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .enums import (
    ComplianceLevel,
    ComplianceStatus,
    ExtractionSource,
    InspectionReadiness,
    PriorityLevel,
    RequirementCategory,
    RiskLevel,
    SummaryTier,
)


# ── Catalog ──────────────────────────────────────────────


class Requirement(BaseModel):
    """One checklist item from the GDC requirement catalog."""

    model_config = ConfigDict(frozen=True)

    id: str
    code: str
    domain: str
    title: str
    description: str = ""
    criteria: list[str]
    weight: int = 0  # informational only, never used in scoring
    category: RequirementCategory = RequirementCategory.STANDARD

    @field_validator("criteria")
    @classmethod
    def _criteria_not_empty(cls, value: list[str]) -> list[str]:
        cleaned = [c.strip() for c in value if c and c.strip()]
        if not cleaned:
            raise ValueError("criteria must contain at least one clause")
        return cleaned


# ── Uploads ──────────────────────────────────────────────


class UploadedDocument(BaseModel):
    """An uploaded file, read as text."""

    model_config = ConfigDict(frozen=True)

    name: str
    content: str = ""
    size: int = 0
    content_type: str = ""
    sha256: str = ""


# ── Extraction ───────────────────────────────────────────


class AnalysisInsights(BaseModel):
    """Optional structured extension attached to an analysis."""

    model_config = ConfigDict(frozen=True)

    gold_standard_practices: list[str] = []
    document_references: list[str] = []
    implementation_timeline: list[str] = []  # [quick win, medium term, long term]
    inspection_readiness: InspectionReadiness = InspectionReadiness.NOT_READY
    priority_level: PriorityLevel = PriorityLevel.MEDIUM
    risk_level: RiskLevel = RiskLevel.LOW


class RequirementAnalysis(BaseModel):
    """Extractor output for one requirement over the pooled documents."""

    model_config = ConfigDict(frozen=True)

    requirement: Requirement
    status: ComplianceStatus
    confidence: int = Field(ge=0, le=100)
    evidence: list[str] = []
    missing_elements: list[str] = []
    recommendations: list[str] = []
    relevant_content: list[str] = []
    source: ExtractionSource = ExtractionSource.TEMPLATE
    insights: Optional[AnalysisInsights] = None


class RequirementCompliance(BaseModel):
    """An analysis paired with its derived 0-100 score."""

    model_config = ConfigDict(frozen=True)

    requirement: Requirement
    analysis: RequirementAnalysis
    score: int = Field(ge=0, le=100)


# ── Aggregation ──────────────────────────────────────────


class DomainSummary(BaseModel):
    domain: str
    average_score: int = 0
    met_count: int = 0
    total: int = 0
    critical_count: int = 0


class PriorityAction(BaseModel):
    code: str
    title: str
    score: int
    recommendation: str = ""


class ImplementationRoadmap(BaseModel):
    quick_wins: list[str] = []
    medium_term: list[str] = []
    long_term: list[str] = []


class ComplianceSummary(BaseModel):
    overall_score: int = 0
    total_requirements: int = 0
    met_count: int = 0
    partially_met_count: int = 0
    not_met_count: int = 0
    not_found_count: int = 0
    critical_met_count: int = 0
    critical_total: int = 0
    executive_summary_tier: SummaryTier = SummaryTier.REQUIRES_SIGNIFICANT_DEVELOPMENT
    executive_summary: str = ""
    domain_summaries: list[DomainSummary] = []
    priority_actions: list[PriorityAction] = []
    gold_standard_recommendations: list[str] = []
    implementation_roadmap: ImplementationRoadmap = Field(default_factory=ImplementationRoadmap)
    extraction_degraded: bool = False
    fallback_count: int = 0


# ── Questionnaire ────────────────────────────────────────


class QuestionnaireAnswer(BaseModel):
    question: str
    answer: str
    evidence: str = ""
    compliance_level: ComplianceLevel = ComplianceLevel.PARTIALLY_COMPLIANT
    recommendations: list[str] = []
    references: list[str] = []


class FilledQuestionnaire(BaseModel):
    id: str
    programme_name: str
    institution: str
    questionnaire_type: str = "pre-inspection"  # "pre-inspection" | "annual-review" | "self-assessment"
    filled_date: date = Field(default_factory=lambda: datetime.now(timezone.utc).date())
    answers: list[QuestionnaireAnswer] = []
    overall_compliance: int = 0
    summary: str = ""
    generated_from_analysis: bool = True
    inspection_ready: bool = False
