"""
Tests: analysis orchestration (batching, fallback, cancellation, ordering).

Run with:
    pytest gdc_compliance/tests/test_orchestrator.py -v
"""

import threading

from gdc_compliance.agents.base_agent import BaseExtractionAgent, ExtractionError
from gdc_compliance.catalog.loader import load_catalog
from gdc_compliance.config import Settings
from gdc_compliance.models.enums import (
    ComplianceStatus,
    ExtractionSource,
    RequirementCategory,
    SummaryTier,
)
from gdc_compliance.models.schemas import RequirementAnalysis, UploadedDocument
from gdc_compliance.orchestration.analyzer import CancellationToken, analyze, select_extractor
from gdc_compliance.agents.llm_extraction_agent import LLMExtractionAgent
from gdc_compliance.agents.template_extraction_agent import TemplateExtractionAgent
from gdc_compliance.reports.summary import executive_summary_tier, summarize


DOCS = [UploadedDocument(name="handbook.txt", content="Programme handbook text", size=23)]


def _settings(**overrides) -> Settings:
    values = {
        "analysis_mode": "template",
        "random_seed": 42,
        "batch_size": 4,
        "batch_delay_ms": 0,
        "llm_timeout_seconds": 5.0,
    }
    values.update(overrides)
    return Settings(**values)


class FixedExtractor(BaseExtractionAgent):
    """Returns the same status and confidence for every requirement."""

    name = "fixed"
    rate_limited = True

    def __init__(self, status=ComplianceStatus.PARTIALLY_MET, confidence=80, fail_codes=()):
        self.status = status
        self.confidence = confidence
        self.fail_codes = set(fail_codes)
        self.calls: list[str] = []
        self._lock = threading.Lock()

    def _real_extract(self, requirement, documents):
        with self._lock:
            self.calls.append(requirement.code)
        if requirement.code in self.fail_codes:
            raise ExtractionError(f"simulated failure for {requirement.code}")
        return RequirementAnalysis(
            requirement=requirement,
            status=self.status,
            confidence=self.confidence,
            evidence=["fixed evidence"],
            source=ExtractionSource.LLM,
        )


class RecordingToken(CancellationToken):
    def __init__(self):
        super().__init__()
        self.waits: list[float] = []

    def wait(self, timeout):
        self.waits.append(timeout)
        return super().wait(0)


class TestAnalyze:
    def test_zero_documents_returns_empty(self):
        extractor = FixedExtractor()
        assert analyze([], extractor=extractor, settings=_settings()) == []
        assert extractor.calls == []

    def test_one_record_per_requirement(self):
        catalog = load_catalog()
        docs = DOCS + [UploadedDocument(name="policy.txt", content="Policy", size=6)]
        results = analyze(docs, catalog=catalog, settings=_settings())
        assert len(results) == len(catalog) == 30
        assert sorted(r.requirement.code for r in results) == sorted(r.code for r in catalog)

    def test_sorted_by_score_descending(self):
        results = analyze(DOCS, catalog=load_catalog(), settings=_settings())
        scores = [r.score for r in results]
        assert scores == sorted(scores, reverse=True)

    def test_ties_keep_catalog_order(self):
        catalog = [r for r in load_catalog() if r.category.value == "important"]
        results = analyze(DOCS, catalog=catalog, extractor=FixedExtractor(), settings=_settings())
        assert [r.requirement.code for r in results] == [r.code for r in catalog]

    def test_template_mode_is_deterministic(self):
        a = analyze(DOCS, catalog=load_catalog(), settings=_settings())
        b = analyze(DOCS, catalog=load_catalog(), settings=_settings())
        assert [r.model_dump() for r in a] == [r.model_dump() for r in b]

    def test_failures_fall_back_to_template(self):
        catalog = load_catalog()[:8]
        failing = {catalog[1].code, catalog[6].code}
        extractor = FixedExtractor(fail_codes=failing)
        results = analyze(DOCS, catalog=catalog, extractor=extractor, settings=_settings())

        assert len(results) == 8
        by_code = {r.requirement.code: r for r in results}
        for code in failing:
            analysis = by_code[code].analysis
            assert analysis.source == ExtractionSource.TEMPLATE_FALLBACK
            assert analysis.relevant_content[0].startswith("template-fallback:")
        others = [r for r in results if r.requirement.code not in failing]
        assert all(r.analysis.source == ExtractionSource.LLM for r in others)

        summary = summarize(results)
        assert summary.extraction_degraded is True
        assert summary.fallback_count == 2

    def test_timeout_falls_back(self):
        release = threading.Event()
        catalog = load_catalog()[:4]
        slow_code = catalog[2].code

        class SlowExtractor(FixedExtractor):
            def _real_extract(self, requirement, documents):
                if requirement.code == slow_code:
                    release.wait(5)
                return super()._real_extract(requirement, documents)

        try:
            results = analyze(
                DOCS,
                catalog=catalog,
                extractor=SlowExtractor(),
                settings=_settings(llm_timeout_seconds=0.2),
            )
        finally:
            release.set()

        by_code = {r.requirement.code: r for r in results}
        assert by_code[slow_code].analysis.source == ExtractionSource.TEMPLATE_FALLBACK
        assert "timeout" in by_code[slow_code].analysis.relevant_content[0]
        assert len(results) == 4

    def test_batch_runs_concurrently(self):
        catalog = load_catalog()[:8]
        barrier = threading.Barrier(4, timeout=5)

        class BarrierExtractor(FixedExtractor):
            def _real_extract(self, requirement, documents):
                # Only passes if all four calls of the batch are in flight together
                barrier.wait()
                return super()._real_extract(requirement, documents)

        results = analyze(DOCS, catalog=catalog, extractor=BarrierExtractor(), settings=_settings())
        assert all(r.analysis.source == ExtractionSource.LLM for r in results)

    def test_progress_callback(self):
        seen = []
        catalog = load_catalog()[:6]
        analyze(
            DOCS,
            catalog=catalog,
            settings=_settings(),
            on_progress=lambda done, total, item: seen.append((done, total, item.requirement.code)),
        )
        assert [s[0] for s in seen] == [1, 2, 3, 4, 5, 6]
        assert all(s[1] == 6 for s in seen)


class TestPacingAndCancellation:
    def test_delay_between_batches_when_rate_limited(self):
        token = RecordingToken()
        analyze(
            DOCS,
            catalog=load_catalog()[:12],
            extractor=FixedExtractor(),
            settings=_settings(batch_delay_ms=500),
            cancel_token=token,
        )
        assert token.waits == [0.5, 0.5]

    def test_no_delay_on_template_path(self):
        token = RecordingToken()
        analyze(
            DOCS,
            catalog=load_catalog()[:12],
            extractor=TemplateExtractionAgent(_settings(), seed=1),
            settings=_settings(batch_delay_ms=10_000),
            cancel_token=token,
        )
        assert token.waits == []

    def test_cancel_between_batches_returns_partial(self):
        token = CancellationToken()
        extractor = FixedExtractor()

        def cancel_after_first_batch(done, total, item):
            if done == 4:
                token.cancel()

        results = analyze(
            DOCS,
            catalog=load_catalog()[:12],
            extractor=extractor,
            settings=_settings(batch_delay_ms=10_000),
            cancel_token=token,
            on_progress=cancel_after_first_batch,
        )
        assert len(results) == 4
        assert len(extractor.calls) == 4

    def test_cancel_before_start(self):
        token = CancellationToken()
        token.cancel()
        extractor = FixedExtractor()
        results = analyze(DOCS, catalog=load_catalog(), extractor=extractor,
                          settings=_settings(), cancel_token=token)
        assert results == []
        assert extractor.calls == []


class TestSelectExtractor:
    def test_template_mode(self):
        assert isinstance(select_extractor(_settings(analysis_mode="template")), TemplateExtractionAgent)

    def test_llm_mode(self):
        assert isinstance(select_extractor(_settings(analysis_mode="llm")), LLMExtractionAgent)

    def test_auto_mode_follows_api_key(self):
        assert isinstance(
            select_extractor(_settings(analysis_mode="auto", groq_api_key="")),
            TemplateExtractionAgent,
        )
        assert isinstance(
            select_extractor(_settings(analysis_mode="auto", groq_api_key="gsk-test")),
            LLMExtractionAgent,
        )

    def test_llm_mode_without_key_degrades(self, monkeypatch):
        # get_llm() raises ValueError without a key; every requirement falls back
        from gdc_compliance.services import llm_service

        monkeypatch.setattr(llm_service, "_llm_instance", None)
        monkeypatch.setattr(
            llm_service, "get_settings", lambda: _settings(analysis_mode="llm", groq_api_key="")
        )
        catalog = load_catalog()[:4]
        results = analyze(DOCS, catalog=catalog, settings=_settings(analysis_mode="llm", groq_api_key=""))
        assert len(results) == 4
        assert all(r.analysis.source == ExtractionSource.TEMPLATE_FALLBACK for r in results)
        assert all(r.analysis.evidence and r.analysis.recommendations for r in results)


def _one_per_category():
    catalog = load_catalog()
    picked = {}
    for requirement in catalog:
        picked.setdefault(requirement.category, requirement)
    return [picked[c] for c in (RequirementCategory.CRITICAL, RequirementCategory.IMPORTANT,
                                RequirementCategory.STANDARD)]


class AlwaysFailingExtractor(FixedExtractor):
    name = "failing"

    def _real_extract(self, requirement, documents):
        raise ExtractionError(f"upstream unavailable for {requirement.code}")


class TestScenarios:
    def test_all_met_at_high_confidence_is_excellent(self):
        catalog = _one_per_category()
        results = analyze(
            DOCS,
            catalog=catalog,
            extractor=FixedExtractor(ComplianceStatus.MET, confidence=90),
            settings=_settings(),
        )
        summary = summarize(results, catalog)

        assert len(results) == 3
        assert 85 <= summary.overall_score <= 98
        assert (summary.critical_met_count, summary.critical_total) == (1, 1)
        assert summary.executive_summary_tier == SummaryTier.EXCELLENT
        assert summary.extraction_degraded is False

    def test_excellent_boundary(self):
        assert executive_summary_tier(85, 1, 1) == SummaryTier.EXCELLENT
        assert executive_summary_tier(84, 1, 1) == SummaryTier.GOOD

    def test_always_failing_extractor_falls_back_everywhere(self):
        catalog = _one_per_category()
        results = analyze(DOCS, catalog=catalog, extractor=AlwaysFailingExtractor(), settings=_settings())

        assert len(results) == 3
        assert sorted(r.requirement.code for r in results) == sorted(r.code for r in catalog)
        for item in results:
            assert item.analysis.source == ExtractionSource.TEMPLATE_FALLBACK
            assert item.analysis.evidence and all(e.strip() for e in item.analysis.evidence)
            assert item.analysis.recommendations
            assert all(r.strip() for r in item.analysis.recommendations)
            assert 20 <= item.score <= 98

        summary = summarize(results, catalog)
        assert summary.extraction_degraded is True
        assert summary.fallback_count == 3
