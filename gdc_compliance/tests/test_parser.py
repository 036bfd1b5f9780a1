"""
Tests: LLM response parsing.

Run with:
    pytest gdc_compliance/tests/test_parser.py -v
"""

import pytest

from gdc_compliance.agents.response_parser import (
    ResponseParseError,
    infer_status_from_keywords,
    normalize_status,
    parse_response,
    parse_structured_response,
)
from gdc_compliance.config import Settings
from gdc_compliance.models.enums import (
    ComplianceStatus,
    ExtractionSource,
    InspectionReadiness,
    PriorityLevel,
    RequirementCategory,
    RiskLevel,
)
from gdc_compliance.models.schemas import Requirement


WELL_FORMED = """STATUS: partially-met
EVIDENCE: Incident log reviewed monthly|Risk register in the clinic handbook
MISSING_ELEMENTS: Clinical audit cycle
RECOMMENDATIONS: Introduce an annual audit cycle|Publish audit outcomes to staff
CONFIDENCE: 82%
"""


def _requirement(category: RequirementCategory = RequirementCategory.CRITICAL) -> Requirement:
    return Requirement(
        id="PS-1.1",
        code="S1.1",
        domain="Patient Safety",
        title="Clinical Governance Framework",
        criteria=["Clinical incident reporting", "Risk management protocols"],
        category=category,
    )


def _settings() -> Settings:
    return Settings(llm_confidence_floor=60, llm_confidence_ceiling=95)


class TestStructuredParse:
    def test_well_formed_response(self):
        parsed = parse_structured_response(WELL_FORMED)
        assert parsed.status == ComplianceStatus.PARTIALLY_MET
        assert parsed.evidence == [
            "Incident log reviewed monthly",
            "Risk register in the clinic handbook",
        ]
        assert parsed.missing_elements == ["Clinical audit cycle"]
        assert len(parsed.recommendations) == 2
        assert parsed.confidence == 82

    def test_markdown_bold_and_case(self):
        raw = "**Status:** Met\n**CONFIDENCE**: 88 %\n**Evidence:** Policy on file"
        parsed = parse_structured_response(raw)
        assert parsed.status == ComplianceStatus.MET
        assert parsed.confidence == 88
        assert parsed.evidence == ["Policy on file"]

    def test_values_on_following_lines(self):
        raw = (
            "STATUS: met\n"
            "EVIDENCE_FOUND:\n"
            "[Policy A|Policy B]\n"
            "- Policy C\n"
            "MISSING_ELEMENTS: None identified\n"
        )
        parsed = parse_structured_response(raw)
        assert parsed.evidence == ["Policy A", "Policy B", "Policy C"]
        assert parsed.missing_elements == ["None identified"]

    def test_optional_extras(self):
        raw = WELL_FORMED + (
            "DOCUMENT_REFERENCES: handbook.txt: section 2|policy.txt: page 4\n"
            "GOLD_STANDARD_PRACTICES: Peer review of incidents|Shared learning forum\n"
            "IMPLEMENTATION_TIMELINE: Audit tool (0-30 days)|Audit cycle (1-6 months)|Benchmarking (6-12 months)\n"
        )
        parsed = parse_structured_response(raw)
        assert parsed.document_references == ["handbook.txt: section 2", "policy.txt: page 4"]
        assert parsed.gold_standard_practices[0] == "Peer review of incidents"
        assert len(parsed.implementation_timeline) == 3

    def test_prose_only_raises(self):
        with pytest.raises(ResponseParseError):
            parse_structured_response("The programme has a strong governance culture.")

    def test_unknown_status_left_unset(self):
        parsed = parse_structured_response("STATUS: pending review\nCONFIDENCE: 70%")
        assert parsed.status is None
        assert parsed.status_token == "pending review"


class TestStatusNormalisation:
    @pytest.mark.parametrize(
        "token, expected",
        [
            ("met", ComplianceStatus.MET),
            ("[met]", ComplianceStatus.MET),
            ("partially-met", ComplianceStatus.PARTIALLY_MET),
            ("partially met", ComplianceStatus.PARTIALLY_MET),
            ("Partially_Met", ComplianceStatus.PARTIALLY_MET),
            ("partial", ComplianceStatus.PARTIALLY_MET),
            ("NOT-MET", ComplianceStatus.NOT_MET),
            ("not met.", ComplianceStatus.NOT_MET),
            ("not found", ComplianceStatus.NOT_FOUND),
            ("Not_Found", ComplianceStatus.NOT_FOUND),
            ("unclear", None),
            ("", None),
        ],
    )
    def test_tokens(self, token, expected):
        assert normalize_status(token) == expected


class TestKeywordInference:
    @pytest.mark.parametrize(
        "text, expected",
        [
            ("The framework is comprehensive and embedded.", ComplianceStatus.MET),
            ("Excellent evidence throughout.", ComplianceStatus.MET),
            ("There is some evidence of audit.", ComplianceStatus.PARTIALLY_MET),
            ("Only partial coverage was found.", ComplianceStatus.PARTIALLY_MET),
            ("Nothing handsome here.", ComplianceStatus.NOT_MET),
            ("", ComplianceStatus.NOT_MET),
        ],
    )
    def test_keywords(self, text, expected):
        assert infer_status_from_keywords(text) == expected


class TestParseResponse:
    def test_builds_llm_analysis(self):
        analysis = parse_response(WELL_FORMED, _requirement(), ["handbook.txt"], settings=_settings())
        assert analysis.status == ComplianceStatus.PARTIALLY_MET
        assert analysis.confidence == 82
        assert analysis.source == ExtractionSource.LLM
        assert analysis.relevant_content == ["llm-analysis: handbook.txt"]

    def test_insights_derived_for_critical_requirement(self):
        analysis = parse_response(WELL_FORMED, _requirement(), ["handbook.txt"], settings=_settings())
        insights = analysis.insights
        assert insights is not None
        assert insights.inspection_readiness == InspectionReadiness.PARTIAL
        assert insights.priority_level == PriorityLevel.CRITICAL
        assert insights.risk_level == RiskLevel.HIGH
        assert insights.gold_standard_practices
        assert len(insights.implementation_timeline) == 3

    def test_insights_for_standard_not_met(self):
        raw = "STATUS: not-met\nCONFIDENCE: 70%"
        analysis = parse_response(raw, _requirement(RequirementCategory.STANDARD), settings=_settings())
        assert analysis.insights.priority_level == PriorityLevel.HIGH
        assert analysis.insights.risk_level == RiskLevel.MEDIUM
        assert analysis.insights.inspection_readiness == InspectionReadiness.NOT_READY

    @pytest.mark.parametrize(
        "line, expected",
        [
            ("CONFIDENCE: 99%", 95),
            ("CONFIDENCE: 40%", 60),
            ("CONFIDENCE: 72", 72),
            ("CONFIDENCE: NN%", 75),
        ],
    )
    def test_confidence_clamped(self, line, expected):
        raw = f"STATUS: met\n{line}"
        analysis = parse_response(raw, _requirement(), settings=_settings())
        assert analysis.confidence == expected

    def test_missing_confidence_defaults(self):
        analysis = parse_response("STATUS: met", _requirement(), settings=_settings())
        assert analysis.confidence == 75

    def test_unknown_status_uses_keywords(self):
        raw = "STATUS: pending\nEVIDENCE: Comprehensive incident reporting policy"
        analysis = parse_response(raw, _requirement(), settings=_settings())
        assert analysis.status == ComplianceStatus.MET

    def test_prose_only_never_raises(self):
        raw = "The documents contain some evidence of audits but no register."
        analysis = parse_response(raw, _requirement(), ["a.txt", "b.txt"], settings=_settings())
        assert analysis.status == ComplianceStatus.PARTIALLY_MET
        assert analysis.confidence == 75
        assert analysis.evidence and analysis.missing_elements and analysis.recommendations
        assert "S1.1" in analysis.evidence[0]
        assert analysis.relevant_content == ["llm-analysis: a.txt, b.txt"]

    def test_empty_text_never_raises(self):
        analysis = parse_response("", _requirement(), settings=_settings())
        assert analysis.status == ComplianceStatus.NOT_MET
        assert 60 <= analysis.confidence <= 95

    def test_long_lists_are_capped(self):
        raw = (
            "STATUS: met\n"
            f"EVIDENCE: {' | '.join(f'evidence {i}' for i in range(10))}\n"
            f"MISSING_ELEMENTS: {' | '.join(f'gap {i}' for i in range(10))}\n"
            f"RECOMMENDATIONS: {' | '.join(f'action {i}' for i in range(10))}\n"
            "CONFIDENCE: 90%"
        )
        analysis = parse_response(raw, _requirement(), settings=_settings())
        assert analysis.evidence == ["evidence 0", "evidence 1", "evidence 2", "evidence 3"]
        assert analysis.missing_elements == ["gap 0", "gap 1", "gap 2"]
        assert len(analysis.recommendations) == 4
        assert analysis.recommendations[0] == "action 0"
