"""
Questionnaire Builder — pre-fills the GDC pre-inspection questionnaire
from an analysis run.

Each question maps to one catalog domain by its letter. The compliance level
of a question is the share of its domain's requirements that were met.
"""

from __future__ import annotations

import logging
import re
import uuid
from datetime import date, datetime, timezone
from typing import Optional, Sequence

from gdc_compliance.models.enums import ComplianceLevel, ComplianceStatus
from gdc_compliance.models.schemas import (
    FilledQuestionnaire,
    QuestionnaireAnswer,
    RequirementCompliance,
    UploadedDocument,
)
from gdc_compliance.reports.summary import overall_score

logger = logging.getLogger(__name__)

QUESTIONS: list[str] = [
    "A1. Provider name and address",
    "A2. The full title of the qualification",
    "B1. How the curriculum enables students to meet the learning outcomes",
    "B2. The integration of biomedical sciences throughout the curriculum",
    "C1. Assessment methods and their alignment with learning outcomes",
    "D1. Student clinical experience and patient care provision",
    "E1. Staff qualifications, experience, and development",
    "F1. Quality assurance processes and programme monitoring",
]

# Question letter → catalog domain. "Provider" has no catalog domain, so A
# questions always use the no-evidence rate.
QUESTION_DOMAINS: dict[str, str] = {
    "A": "Provider",
    "B": "Curriculum",
    "C": "Assessment",
    "D": "Patient Safety",
    "E": "Staffing",
    "F": "Quality Assurance",
}

NO_EVIDENCE_RATE = 0.7
FULLY_COMPLIANT_RATE = 0.8
NON_COMPLIANT_BELOW = 0.6
INSPECTION_READY_SCORE = 75

DEFAULT_RECOMMENDATIONS = [
    "Continue systematic quality enhancement",
    "Maintain comprehensive documentation",
    "Implement regular review cycles",
]

_KNOWN_INSTITUTIONS: list[tuple[tuple[str, ...], str]] = [
    (("manchester",), "University of Manchester"),
    (("kings", "kcl"), "King's College London"),
    (("birmingham",), "University of Birmingham"),
]


def institution_from_filename(file_name: str) -> str:
    lower = file_name.lower()
    for needles, institution in _KNOWN_INSTITUTIONS:
        if any(n in lower for n in needles):
            return institution
    return "University Dental School"


def programme_from_filename(file_name: str) -> str:
    stem = re.sub(r"\.[^/.]+$", "", file_name)
    words = re.sub(r"[-_]", " ", stem).split()
    return " ".join(w[:1].upper() + w[1:] for w in words) or "Unknown Programme"


def relevant_results(
    question: str, results: Sequence[RequirementCompliance]
) -> list[RequirementCompliance]:
    domain = QUESTION_DOMAINS.get(question[:1].upper())
    if domain is None:
        return []
    return [r for r in results if domain in r.requirement.domain]


def compliance_rate(relevant: Sequence[RequirementCompliance]) -> float:
    if not relevant:
        return NO_EVIDENCE_RATE
    met = sum(1 for r in relevant if r.analysis.status == ComplianceStatus.MET)
    return met / len(relevant)


def compliance_level(rate: float) -> ComplianceLevel:
    if rate >= FULLY_COMPLIANT_RATE:
        return ComplianceLevel.FULLY_COMPLIANT
    if rate < NON_COMPLIANT_BELOW:
        return ComplianceLevel.NON_COMPLIANT
    return ComplianceLevel.PARTIALLY_COMPLIANT


def _answer_text(question: str, relevant: Sequence[RequirementCompliance], doc_count: int) -> str:
    met = sum(1 for r in relevant if r.analysis.status == ComplianceStatus.MET)
    letter = question[:1].upper()

    if letter == "A":
        return (
            f"The institution maintains accreditation and governance documentation "
            f"across {doc_count} analysed file(s) supporting the GDC provider requirements."
        )
    if letter == "B":
        return (
            f"The curriculum aligns with GDC Preparing for Practice, with {met}/{len(relevant)} "
            f"relevant requirements fully met."
        )
    if letter == "C":
        return (
            f"The assessment strategy uses multiple methods with quality assurance, with "
            f"{met}/{len(relevant)} assessment-related requirements fully met."
        )
    topic = question.split(".", 1)[1].strip().lower() if "." in question else "this area"
    return (
        f"Analysis of {doc_count} document(s) shows approaches to {topic}, with "
        f"{met}/{len(relevant)} related requirements fully met."
    )


def build_questionnaire(
    results: Sequence[RequirementCompliance],
    documents: Sequence[UploadedDocument],
    *,
    questionnaire_type: str = "pre-inspection",
    filled_date: Optional[date] = None,
) -> FilledQuestionnaire:
    """Fill the eight pre-inspection questions from the analysis results."""
    names = [d.name for d in documents]
    first_name = names[0] if names else "Unknown Programme"

    answers: list[QuestionnaireAnswer] = []
    for question in QUESTIONS:
        relevant = relevant_results(question, results)
        answers.append(
            QuestionnaireAnswer(
                question=question,
                answer=_answer_text(question, relevant, len(documents)),
                evidence=(
                    f"Analysis of {len(documents)} document(s) and "
                    f"{len(relevant)} relevant requirement(s)"
                ),
                compliance_level=compliance_level(compliance_rate(relevant)),
                recommendations=list(DEFAULT_RECOMMENDATIONS),
                references=["GDC Education Standards", "Programme Documentation", *names],
            )
        )

    overall = overall_score(results)
    fully = sum(1 for a in answers if a.compliance_level == ComplianceLevel.FULLY_COMPLIANT)
    summary = "\n".join([
        "GDC PRE-INSPECTION QUESTIONNAIRE SUMMARY",
        "",
        f"Based on analysis of {len(documents)} document(s) and {len(results)} GDC requirements:",
        "",
        f"• Overall Compliance: {overall}%",
        f"• Fully Compliant Sections: {fully}/{len(answers)}",
        f"• Documents Analysed: {', '.join(names) if names else '(none)'}",
    ])

    questionnaire = FilledQuestionnaire(
        id=f"gdc-questionnaire-{uuid.uuid4().hex[:12]}",
        programme_name=programme_from_filename(first_name),
        institution=institution_from_filename(first_name),
        questionnaire_type=questionnaire_type,
        filled_date=filled_date or datetime.now(timezone.utc).date(),
        answers=answers,
        overall_compliance=overall,
        summary=summary,
        generated_from_analysis=True,
        inspection_ready=overall >= INSPECTION_READY_SCORE,
    )
    logger.info(
        f"[QUESTIONNAIRE] {questionnaire.id}: {fully}/{len(answers)} fully compliant, "
        f"overall={overall}%"
    )
    return questionnaire
