"""
Response Parser — turns the LLM's line-oriented answer into an analysis.

Expected shape (one header per line, items separated by "|"):

    STATUS: met|partially-met|not-met
    EVIDENCE: item1|item2|item3
    MISSING_ELEMENTS: item1|item2
    RECOMMENDATIONS: item1|item2|item3
    CONFIDENCE: NN%

plus optional DOCUMENT_REFERENCES, GOLD_STANDARD_PRACTICES and
IMPLEMENTATION_TIMELINE lines. Headers are matched case-insensitively and
may be wrapped in markdown bold. A header with an empty value collects the
following lines until the next header.

parse_structured_response() is strict and raises ResponseParseError when it
finds nothing it recognises. parse_response() never raises: it falls back to
keyword inference for the status and to placeholders for empty lists.
"""

from __future__ import annotations

import logging
import re
from typing import Optional, Sequence

from pydantic import BaseModel

from gdc_compliance.config import Settings, get_settings
from gdc_compliance.models.enums import ComplianceStatus, ExtractionSource
from gdc_compliance.models.schemas import Requirement, RequirementAnalysis
from gdc_compliance.rules.insight_rules import derive_insights

logger = logging.getLogger(__name__)

DEFAULT_LLM_CONFIDENCE = 75

# Per-list caps applied when building the analysis
MAX_EVIDENCE_ITEMS = 4
MAX_MISSING_ITEMS = 3
MAX_RECOMMENDATION_ITEMS = 4


class ResponseParseError(ValueError):
    """The response contains no recognisable header line."""


class ParsedFields(BaseModel):
    """Raw fields pulled from one LLM response."""
    status: Optional[ComplianceStatus] = None
    status_token: str = ""
    confidence: Optional[int] = None
    evidence: list[str] = []
    missing_elements: list[str] = []
    recommendations: list[str] = []
    document_references: list[str] = []
    gold_standard_practices: list[str] = []
    implementation_timeline: list[str] = []
    headers_found: list[str] = []


# ── Header matching ──────────────────────────────────────

_HEADER_FIELDS: list[tuple[str, str]] = [
    ("status", r"STATUS"),
    ("evidence", r"EVIDENCE(?:[_ ]FOUND)?"),
    ("missing_elements", r"MISSING[_ ]ELEMENTS"),
    ("recommendations", r"RECOMMENDATIONS?"),
    ("confidence", r"CONFIDENCE(?:[_ ]LEVEL)?"),
    ("document_references", r"DOCUMENT[_ ]REFERENCES"),
    ("gold_standard_practices", r"GOLD[_ ]STANDARD[_ ]PRACTICES"),
    ("implementation_timeline", r"IMPLEMENTATION[_ ]TIMELINE"),
]

_HEADER_RE = re.compile(
    r"^\s*(?:[-*>#]+\s+)?\**\s*(?P<name>"
    + "|".join(f"(?P<{field}>{pattern})" for field, pattern in _HEADER_FIELDS)
    + r")\s*\**\s*:\s*\**(?P<value>.*)$",
    re.IGNORECASE,
)

_CONFIDENCE_RE = re.compile(r"(\d{1,3}(?:\.\d+)?)\s*%?")
_BULLET_RE = re.compile(r"^(?:[-*•]|\d+[.)])\s+")

_LIST_FIELDS = (
    "evidence",
    "missing_elements",
    "recommendations",
    "document_references",
    "gold_standard_practices",
    "implementation_timeline",
)


def _clean_value(value: str) -> str:
    value = value.strip().strip("*").strip()
    if value.startswith("[") and value.endswith("]"):
        value = value[1:-1].strip()
    return value


def _split_items(value: str) -> list[str]:
    items: list[str] = []
    for part in _clean_value(value).split("|"):
        part = _BULLET_RE.sub("", part.strip()).strip().strip("[]").strip()
        if part:
            items.append(part)
    return items


def normalize_status(token: str) -> Optional[ComplianceStatus]:
    """Map a status token to a ComplianceStatus, or None when unrecognised."""
    text = re.sub(r"[\s_\-]+", " ", _clean_value(token).lower()).strip(" .")
    if not text:
        return None
    # Only the first alternative counts when the model echoes the whole menu
    text = text.split("|")[0].strip()
    if re.match(r"^partial(ly)?\b", text):
        return ComplianceStatus.PARTIALLY_MET
    if re.match(r"^not found\b", text):
        return ComplianceStatus.NOT_FOUND
    if re.match(r"^(not met|unmet)\b", text):
        return ComplianceStatus.NOT_MET
    if re.match(r"^met\b", text):
        return ComplianceStatus.MET
    return None


def _parse_confidence(value: str) -> Optional[int]:
    match = _CONFIDENCE_RE.search(value)
    if not match:
        return None
    return int(round(float(match.group(1))))


def parse_structured_response(raw: str) -> ParsedFields:
    """Parse header lines strictly; raise ResponseParseError if none are found."""
    parsed = ParsedFields()
    current: Optional[str] = None
    collecting = False
    collected_any = False

    for line in (raw or "").splitlines():
        match = _HEADER_RE.match(line)
        if match:
            field = next(f for f, _ in _HEADER_FIELDS if match.group(f))
            value = match.group("value")
            parsed.headers_found.append(field)
            current = field
            collecting = not _clean_value(value)
            collected_any = False
            if not collecting:
                _assign(parsed, field, value)
            continue

        if not collecting or current is None:
            continue
        if not line.strip():
            # a blank line ends a block once it has content
            if collected_any:
                collecting = False
            continue
        _assign(parsed, current, line)
        collected_any = True

    if not parsed.headers_found:
        raise ResponseParseError("no recognised header lines in response")
    return parsed


def _assign(parsed: ParsedFields, field: str, value: str) -> None:
    if field == "status":
        if parsed.status is None:
            parsed.status_token = _clean_value(value)
            parsed.status = normalize_status(value)
    elif field == "confidence":
        if parsed.confidence is None:
            parsed.confidence = _parse_confidence(value)
    elif field in _LIST_FIELDS:
        getattr(parsed, field).extend(_split_items(value))


# ── Keyword inference ────────────────────────────────────

_MET_WORDS = re.compile(r"\b(comprehensive|excellent)\b", re.IGNORECASE)
_PARTIAL_WORDS = re.compile(r"\b(partial|partially|some)\b", re.IGNORECASE)


def infer_status_from_keywords(raw: str) -> ComplianceStatus:
    """Secondary status guess from free text when no usable STATUS line exists."""
    text = raw or ""
    if _MET_WORDS.search(text):
        return ComplianceStatus.MET
    if _PARTIAL_WORDS.search(text):
        return ComplianceStatus.PARTIALLY_MET
    return ComplianceStatus.NOT_MET


# ── Full parse ───────────────────────────────────────────

def clamp_confidence(value: Optional[int], settings: Settings) -> int:
    if value is None:
        value = DEFAULT_LLM_CONFIDENCE
    return max(settings.llm_confidence_floor, min(settings.llm_confidence_ceiling, value))


def parse_response(
    raw: str,
    requirement: Requirement,
    document_names: Sequence[str] = (),
    settings: Optional[Settings] = None,
) -> RequirementAnalysis:
    """Build a RequirementAnalysis from an LLM response. Never raises."""
    settings = settings or get_settings()

    try:
        parsed = parse_structured_response(raw)
    except ResponseParseError as exc:
        logger.warning(f"[PARSE] {requirement.code}: {exc} — inferring from keywords")
        parsed = ParsedFields()

    status = parsed.status
    if status is None:
        status = infer_status_from_keywords(raw)
        logger.debug(
            f"[PARSE] {requirement.code}: status token {parsed.status_token!r} unusable, "
            f"inferred {status.value}"
        )

    evidence = parsed.evidence[:MAX_EVIDENCE_ITEMS] or [
        f"Document analysis for {requirement.code} in {requirement.domain}"
    ]
    missing_elements = parsed.missing_elements[:MAX_MISSING_ITEMS] or [
        f"Enhanced documentation framework for {requirement.title}"
    ]
    recommendations = parsed.recommendations[:MAX_RECOMMENDATION_ITEMS] or [
        f"Implement a comprehensive {requirement.domain.lower()} framework for {requirement.code}"
    ]

    names = ", ".join(document_names) if document_names else "uploaded documents"

    return RequirementAnalysis(
        requirement=requirement,
        status=status,
        confidence=clamp_confidence(parsed.confidence, settings),
        evidence=evidence,
        missing_elements=missing_elements,
        recommendations=recommendations,
        relevant_content=[f"llm-analysis: {names}"],
        source=ExtractionSource.LLM,
        insights=derive_insights(
            requirement,
            status,
            gold_standard_practices=parsed.gold_standard_practices,
            document_references=parsed.document_references,
            implementation_timeline=parsed.implementation_timeline,
        ),
    )
