"""Typed models shared across the analyzer."""

from .enums import (
    ComplianceLevel,
    ComplianceStatus,
    ExtractionSource,
    InspectionReadiness,
    PriorityLevel,
    RequirementCategory,
    RiskLevel,
    RunStatus,
    SummaryTier,
)
from .schemas import (
    AnalysisInsights,
    ComplianceSummary,
    DomainSummary,
    FilledQuestionnaire,
    ImplementationRoadmap,
    PriorityAction,
    QuestionnaireAnswer,
    Requirement,
    RequirementAnalysis,
    RequirementCompliance,
    UploadedDocument,
)

__all__ = [
    "AnalysisInsights",
    "ComplianceLevel",
    "ComplianceStatus",
    "ComplianceSummary",
    "DomainSummary",
    "ExtractionSource",
    "FilledQuestionnaire",
    "ImplementationRoadmap",
    "InspectionReadiness",
    "PriorityAction",
    "PriorityLevel",
    "QuestionnaireAnswer",
    "Requirement",
    "RequirementAnalysis",
    "RequirementCategory",
    "RequirementCompliance",
    "RiskLevel",
    "RunStatus",
    "SummaryTier",
    "UploadedDocument",
]
