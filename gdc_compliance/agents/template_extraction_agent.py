"""
Template Extraction Agent — synthesised analysis without an LLM.

The status is a weighted draw by requirement category; the evidence,
missing-element and recommendation sentences are fixed templates keyed by
status. With a seed, every requirement draws from its own Random seeded by
(seed, code), so the output does not depend on thread scheduling.
"""

from __future__ import annotations

import logging
import random
import threading
from typing import Optional, Sequence

from gdc_compliance.agents.base_agent import BaseExtractionAgent
from gdc_compliance.config import Settings, get_settings
from gdc_compliance.models.enums import ComplianceStatus, ExtractionSource
from gdc_compliance.models.schemas import Requirement, RequirementAnalysis, UploadedDocument
from gdc_compliance.rules.insight_rules import derive_insights
from gdc_compliance.rules.status_weights import draw_status

logger = logging.getLogger(__name__)


# ── Sentence templates ───────────────────────────────────

_EVIDENCE_TEMPLATES: dict[ComplianceStatus, list[str]] = {
    ComplianceStatus.MET: [
        "Comprehensive {title_lower} framework documented in {documents}",
        "Robust evidence for {criteria_pair}",
        "Systematic implementation with quality assurance processes",
        "Regular monitoring and continuous improvement cycles",
    ],
    ComplianceStatus.PARTIALLY_MET: [
        "Partial implementation of {title_lower} in {documents}",
        "Basic framework established but requires enhancement",
        "Some evidence available for {first_criterion}",
        "Limited monitoring systems with improvement opportunities",
    ],
    ComplianceStatus.NOT_MET: [
        "Limited evidence of {title_lower} in {documents}",
        "Significant gaps in {criteria_pair}",
        "Lack of systematic approach to {domain_lower}",
        "Development plan required for GDC compliance",
    ],
}

_MISSING_TEMPLATES: dict[ComplianceStatus, list[str]] = {
    ComplianceStatus.MET: [
        "Benchmarking of {title_lower} against sector exemplars",
    ],
    ComplianceStatus.PARTIALLY_MET: [
        "Comprehensive monitoring systems for {first_criterion}",
        "Systematic evidence collection",
    ],
    ComplianceStatus.NOT_MET: [
        "Documented evidence of {criteria_pair}",
        "Comprehensive monitoring systems",
        "Systematic evidence collection",
    ],
}

_RECOMMENDATION_TEMPLATES: dict[ComplianceStatus, list[str]] = {
    ComplianceStatus.MET: [
        "Maintain excellence in {title_lower}",
        "Share best practices across the institution",
        "Continue regular enhancement cycles",
    ],
    ComplianceStatus.PARTIALLY_MET: [
        "Develop comprehensive implementation plan for {title}",
        "Enhance documentation and evidence collection",
        "Implement systematic monitoring framework",
    ],
    ComplianceStatus.NOT_MET: [
        "Urgent development of implementation strategy for {title}",
        "Establish baseline compliance documentation",
        "Allocate dedicated resources for improvement",
    ],
}


def _describe_documents(documents: Sequence[UploadedDocument]) -> str:
    names = [doc.name for doc in documents if doc.name]
    if not names:
        return "the submitted documentation"
    if len(names) == 1:
        return names[0]
    if len(names) <= 3:
        return ", ".join(names)
    return f"{len(names)} submitted documents"


class TemplateExtractionAgent(BaseExtractionAgent):
    name = "template"
    rate_limited = False

    def __init__(self, settings: Optional[Settings] = None, seed: Optional[int] = None):
        self.settings = settings or get_settings()
        self.seed = seed if seed is not None else self.settings.random_seed
        self._shared_rng = random.Random()
        self._lock = threading.Lock()

    def _rng_for(self, requirement: Requirement) -> random.Random:
        if self.seed is not None:
            return random.Random(f"{self.seed}:{requirement.code}")
        # Unseeded: derive a per-call Random from the shared one
        with self._lock:
            return random.Random(self._shared_rng.getrandbits(64))

    def _real_extract(
        self,
        requirement: Requirement,
        documents: Sequence[UploadedDocument],
    ) -> RequirementAnalysis:
        rng = self._rng_for(requirement)
        status = draw_status(requirement.category, rng)
        confidence = rng.randint(
            self.settings.template_confidence_min,
            self.settings.template_confidence_max,
        )

        criteria = requirement.criteria
        values = {
            "title": requirement.title,
            "title_lower": requirement.title.lower(),
            "domain_lower": requirement.domain.lower(),
            "first_criterion": criteria[0].lower(),
            "criteria_pair": " and ".join(criteria[:2]),
            "documents": _describe_documents(documents),
        }

        has_text = any(doc.content.strip() for doc in documents)
        if not has_text:
            logger.debug(f"[EXTRACT:template] {requirement.code}: no readable text in documents")

        evidence = [t.format(**values) for t in _EVIDENCE_TEMPLATES[status][:3]]
        missing = [t.format(**values) for t in _MISSING_TEMPLATES[status]]
        recommendations = [t.format(**values) for t in _RECOMMENDATION_TEMPLATES[status]]

        return RequirementAnalysis(
            requirement=requirement,
            status=status,
            confidence=confidence,
            evidence=evidence,
            missing_elements=missing,
            recommendations=recommendations,
            relevant_content=[
                f"template-analysis: {len(documents)} document(s)"
                + ("" if has_text else ", no readable text")
            ],
            source=ExtractionSource.TEMPLATE,
            insights=derive_insights(requirement, status),
        )
