"""
Base extraction agent that every evidence extractor inherits.

Design:
  - `extract()` is called by the orchestrator, once per requirement.
  - `_real_extract()` is the single abstract method — override in each agent.
  - Faults are logged and re-raised; recovery belongs to the orchestrator.
"""

from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod
from typing import Sequence

from gdc_compliance.models.schemas import Requirement, RequirementAnalysis, UploadedDocument

logger = logging.getLogger(__name__)


class ExtractionError(RuntimeError):
    """An extractor could not produce an analysis (transport or empty response)."""


class BaseExtractionAgent(ABC):
    """Abstract base for evidence extractors."""

    name: str = "base"
    # True when calls go to a rate-limited external service
    rate_limited: bool = False

    # ── Public entry point (called by the orchestrator) ──

    def extract(
        self,
        requirement: Requirement,
        documents: Sequence[UploadedDocument],
    ) -> RequirementAnalysis:
        t0 = time.perf_counter()
        logger.debug(
            f"▶ [EXTRACT:{self.name}] {requirement.code} over {len(documents)} document(s)"
        )
        try:
            analysis = self._real_extract(requirement, documents)
        except Exception as exc:
            elapsed = time.perf_counter() - t0
            logger.warning(
                f"✘ [EXTRACT:{self.name}] {requirement.code} FAILED after {elapsed:.3f}s: {exc}"
            )
            raise

        elapsed = time.perf_counter() - t0
        logger.info(
            f"✔ [EXTRACT:{self.name}] {requirement.code} → {analysis.status.value} "
            f"({analysis.confidence}%) in {elapsed:.3f}s"
        )
        return analysis

    # ── Subclass hook ────────────────────────────────────

    @abstractmethod
    def _real_extract(
        self,
        requirement: Requirement,
        documents: Sequence[UploadedDocument],
    ) -> RequirementAnalysis:
        ...
