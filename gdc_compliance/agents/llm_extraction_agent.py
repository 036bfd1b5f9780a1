"""
LLM Extraction Agent — delegated evidence extraction.

Builds one prompt per requirement over all uploaded documents, sends it to
the Groq model and parses the line-oriented answer. Any transport fault or
an empty answer raises so the orchestrator can substitute a template result.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Sequence

from gdc_compliance.agents.base_agent import BaseExtractionAgent, ExtractionError
from gdc_compliance.agents.response_parser import parse_response
from gdc_compliance.config import Settings, get_settings
from gdc_compliance.models.schemas import Requirement, RequirementAnalysis, UploadedDocument
from gdc_compliance.services.llm_service import llm_text_call

logger = logging.getLogger(__name__)

_PROMPT_PATH = (
    Path(__file__).resolve().parent.parent / "prompts" / "requirement_analysis_prompt.txt"
)


class LLMExtractionAgent(BaseExtractionAgent):
    name = "llm"
    rate_limited = True

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()
        self._template: Optional[str] = None

    def build_prompt(
        self,
        requirement: Requirement,
        documents: Sequence[UploadedDocument],
    ) -> str:
        if self._template is None:
            self._template = _PROMPT_PATH.read_text(encoding="utf-8")

        preview = self.settings.content_preview_chars
        blocks = []
        for doc in documents:
            content = doc.content[:preview]
            if len(doc.content) > preview:
                content += "…"
            blocks.append(f"DOCUMENT: {doc.name}\nCONTENT PREVIEW:\n{content or '(no readable text)'}\n---")

        return self._template.format(
            code=requirement.code,
            title=requirement.title,
            domain=requirement.domain,
            description=requirement.description or "(none)",
            criteria="; ".join(requirement.criteria),
            category=requirement.category.value,
            weight=requirement.weight,
            document_count=len(documents),
            documents="\n\n".join(blocks),
        )

    def _real_extract(
        self,
        requirement: Requirement,
        documents: Sequence[UploadedDocument],
    ) -> RequirementAnalysis:
        prompt = self.build_prompt(requirement, documents)
        logger.debug(f"[EXTRACT:llm] {requirement.code} prompt built ({len(prompt)} chars)")

        raw_response = llm_text_call(prompt)
        if not raw_response or not raw_response.strip():
            raise ExtractionError(f"Empty LLM response for {requirement.code}")

        return parse_response(
            raw_response,
            requirement,
            [doc.name for doc in documents],
            settings=self.settings,
        )
