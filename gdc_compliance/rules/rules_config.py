"""
Rules Config — constants for scoring and template status draws.

Kept as pydantic models so the numbers live in one place and can be
overridden in tests by passing a modified copy.
"""

from __future__ import annotations

from pydantic import BaseModel

from gdc_compliance.models.enums import ComplianceStatus, RequirementCategory


# ── Config models ────────────────────────────────────────

class ScoringConfig(BaseModel):
    """Score formula constants."""
    base_scores: dict[ComplianceStatus, float] = {
        ComplianceStatus.MET: 85,
        ComplianceStatus.PARTIALLY_MET: 65,
        ComplianceStatus.NOT_MET: 35,
        ComplianceStatus.NOT_FOUND: 0,
    }
    confidence_pivot: float = 50.0
    confidence_span: float = 50.0
    confidence_bonus_max: float = 20.0
    critical_bonus: float = 5.0
    min_score: float = 20.0
    max_score: float = 98.0
    fallback_score: int = 50


class StatusWeights(BaseModel):
    """Probability of each drawn status for one requirement category."""
    met: float
    partially_met: float
    not_met: float

    def as_pairs(self) -> list[tuple[ComplianceStatus, float]]:
        return [
            (ComplianceStatus.MET, self.met),
            (ComplianceStatus.PARTIALLY_MET, self.partially_met),
            (ComplianceStatus.NOT_MET, self.not_met),
        ]

    def total(self) -> float:
        return self.met + self.partially_met + self.not_met


class TemplateStatusConfig(BaseModel):
    """Category → status weights for the template extractor."""
    weights: dict[RequirementCategory, StatusWeights] = {
        RequirementCategory.CRITICAL: StatusWeights(met=0.2, partially_met=0.5, not_met=0.3),
        RequirementCategory.IMPORTANT: StatusWeights(met=0.3, partially_met=0.5, not_met=0.2),
        RequirementCategory.STANDARD: StatusWeights(met=0.4, partially_met=0.4, not_met=0.2),
    }


# ── Defaults ─────────────────────────────────────────────

DEFAULT_SCORING_CONFIG = ScoringConfig()
DEFAULT_STATUS_CONFIG = TemplateStatusConfig()
