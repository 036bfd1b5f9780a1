"""
Analysis Orchestrator — runs every catalog requirement through an extractor.

Flow per run:
  1. Pick the primary extractor (LLM or template) from settings.
  2. Fan out one batch of requirements at a time on a thread pool,
     then wait for the whole batch (fan-in). Each call is time-bounded.
  3. Any failure or timeout for a requirement is replaced by a template
     result tagged template-fallback; the run continues.
  4. Pause between batches only when the primary extractor is rate-limited.
  5. Score, then sort by score descending (stable, so ties keep catalog order).
"""

from __future__ import annotations

import logging
import threading
import time
from concurrent.futures import Future, ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from typing import Callable, Optional, Sequence

from gdc_compliance.agents.base_agent import BaseExtractionAgent
from gdc_compliance.agents.llm_extraction_agent import LLMExtractionAgent
from gdc_compliance.agents.template_extraction_agent import TemplateExtractionAgent
from gdc_compliance.catalog.loader import get_catalog
from gdc_compliance.config import Settings, get_settings
from gdc_compliance.models.enums import ExtractionSource
from gdc_compliance.models.schemas import (
    Requirement,
    RequirementAnalysis,
    RequirementCompliance,
    UploadedDocument,
)
from gdc_compliance.rules.scoring_rules import score

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int, RequirementCompliance], None]


class CancellationToken:
    """Cooperative cancel flag shared between a run and its controller."""

    def __init__(self):
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def wait(self, timeout: float) -> bool:
        """Sleep up to *timeout* seconds; returns True if cancelled meanwhile."""
        return self._event.wait(timeout)


def select_extractor(settings: Settings) -> BaseExtractionAgent:
    """Primary extractor for the configured analysis mode."""
    if settings.llm_enabled:
        return LLMExtractionAgent(settings)
    return TemplateExtractionAgent(settings)


def _as_fallback(analysis: RequirementAnalysis, reason: str) -> RequirementAnalysis:
    return analysis.model_copy(
        update={
            "source": ExtractionSource.TEMPLATE_FALLBACK,
            "relevant_content": [f"template-fallback: {reason}"] + list(analysis.relevant_content),
        }
    )


def _batches(items: Sequence[Requirement], size: int) -> list[Sequence[Requirement]]:
    size = max(1, size)
    return [items[i:i + size] for i in range(0, len(items), size)]


def analyze(
    documents: Sequence[UploadedDocument],
    *,
    catalog: Optional[Sequence[Requirement]] = None,
    extractor: Optional[BaseExtractionAgent] = None,
    fallback: Optional[TemplateExtractionAgent] = None,
    settings: Optional[Settings] = None,
    cancel_token: Optional[CancellationToken] = None,
    on_progress: Optional[ProgressCallback] = None,
) -> list[RequirementCompliance]:
    """
    Analyse the documents against every requirement in the catalog.

    Returns one RequirementCompliance per requirement processed, sorted by
    score descending. Zero documents returns an empty list. If cancelled,
    the records completed so far are returned.
    """
    if not documents:
        logger.info("[ANALYZE] No documents supplied — nothing to analyse")
        return []

    settings = settings or get_settings()
    requirements = list(catalog) if catalog is not None else list(get_catalog())
    primary = extractor or select_extractor(settings)
    fallback = fallback or TemplateExtractionAgent(settings)
    token = cancel_token or CancellationToken()

    total = len(requirements)
    batches = _batches(requirements, settings.batch_size)
    delay = settings.batch_delay_ms / 1000.0
    timeout = settings.llm_timeout_seconds

    logger.info(
        f"[ANALYZE] Starting analysis of {len(documents)} document(s) against "
        f"{total} requirements | extractor={primary.name} | "
        f"{len(batches)} batch(es) of {settings.batch_size}"
    )

    t0 = time.perf_counter()
    results: list[RequirementCompliance] = []
    fallback_count = 0

    for index, batch in enumerate(batches, start=1):
        if token.cancelled:
            logger.warning(
                f"[ANALYZE] Cancelled before batch {index}/{len(batches)} — "
                f"returning {len(results)} completed record(s)"
            )
            break

        logger.info(f"[ANALYZE] Batch {index}/{len(batches)}: {[r.code for r in batch]}")

        executor = ThreadPoolExecutor(
            max_workers=len(batch), thread_name_prefix=f"gdc-batch{index}"
        )
        try:
            futures: list[Future] = [
                executor.submit(primary.extract, requirement, documents)
                for requirement in batch
            ]
            deadline = time.monotonic() + timeout

            for requirement, future in zip(batch, futures):
                try:
                    remaining = max(0.0, deadline - time.monotonic())
                    analysis = future.result(timeout=remaining)
                except FutureTimeoutError:
                    logger.warning(
                        f"[ANALYZE] {requirement.code}: extractor timed out after {timeout:.0f}s "
                        f"— using template fallback"
                    )
                    analysis = _as_fallback(fallback.extract(requirement, documents), "timeout")
                    fallback_count += 1
                except Exception as exc:
                    logger.warning(
                        f"[ANALYZE] {requirement.code}: extractor failed ({exc}) "
                        f"— using template fallback"
                    )
                    reason = type(exc).__name__
                    analysis = _as_fallback(fallback.extract(requirement, documents), reason)
                    fallback_count += 1

                compliance = RequirementCompliance(
                    requirement=requirement,
                    analysis=analysis,
                    score=score(analysis),
                )
                results.append(compliance)

                if on_progress is not None:
                    try:
                        on_progress(len(results), total, compliance)
                    except Exception as exc:
                        logger.warning(f"[ANALYZE] Progress callback failed: {exc}")
        finally:
            # Timed-out calls may still be running; do not block on them
            executor.shutdown(wait=False, cancel_futures=True)

        is_last = index == len(batches)
        if not is_last and primary.rate_limited and delay > 0:
            if token.wait(delay):
                logger.warning(f"[ANALYZE] Cancelled during inter-batch delay after batch {index}")
                break

    results.sort(key=lambda c: -c.score)

    elapsed = time.perf_counter() - t0
    logger.info(
        f"[ANALYZE] Finished {len(results)}/{total} requirements in {elapsed:.2f}s "
        f"| fallbacks={fallback_count}"
    )
    return results
