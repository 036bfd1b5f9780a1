from enum import Enum


class RequirementCategory(str, Enum):
    CRITICAL = "critical"
    IMPORTANT = "important"
    STANDARD = "standard"


class ComplianceStatus(str, Enum):
    MET = "met"
    PARTIALLY_MET = "partially-met"
    NOT_MET = "not-met"
    NOT_FOUND = "not-found"


class ExtractionSource(str, Enum):
    LLM = "llm"
    TEMPLATE = "template"
    TEMPLATE_FALLBACK = "template-fallback"


class InspectionReadiness(str, Enum):
    READY = "ready"
    PARTIAL = "partial"
    NOT_READY = "not-ready"


class PriorityLevel(str, Enum):
    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class RiskLevel(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class SummaryTier(str, Enum):
    EXCELLENT = "EXCELLENT"
    GOOD = "GOOD"
    DEVELOPING = "DEVELOPING"
    REQUIRES_SIGNIFICANT_DEVELOPMENT = "REQUIRES SIGNIFICANT DEVELOPMENT"


class ComplianceLevel(str, Enum):
    FULLY_COMPLIANT = "fully-compliant"
    PARTIALLY_COMPLIANT = "partially-compliant"
    NON_COMPLIANT = "non-compliant"
    NOT_APPLICABLE = "not-applicable"


class RunStatus(str, Enum):
    RUNNING = "RUNNING"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"
    FAILED = "FAILED"
