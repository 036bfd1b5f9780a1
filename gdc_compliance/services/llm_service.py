"""
LLM Service — centralized Groq Cloud LLM client.

The delegated extractor uses this module for every LLM call. Provides:
  - get_llm()         → returns configured Groq ChatModel
  - llm_text_call()   → raw text response
"""

from __future__ import annotations

import logging
import time

from gdc_compliance.config import get_settings

logger = logging.getLogger(__name__)

_llm_instance = None


def get_llm():
    """
    Return a configured Groq LLM client (singleton).
    Uses langchain-groq's ChatGroq with a per-call timeout and no retries;
    recovery is the orchestrator's template fallback.
    """
    global _llm_instance
    if _llm_instance is not None:
        return _llm_instance

    settings = get_settings()

    if not settings.groq_api_key:
        raise ValueError("GROQ_API_KEY is not set in environment / .env file")

    from langchain_groq import ChatGroq

    _llm_instance = ChatGroq(
        api_key=settings.groq_api_key,
        model=settings.llm_model,
        temperature=settings.llm_temperature,
        max_tokens=settings.llm_max_tokens,
        timeout=settings.llm_timeout_seconds,
        max_retries=0,
    )
    logger.info(f"Initialized Groq LLM: {settings.llm_model}")
    return _llm_instance


def reset_llm() -> None:
    """Drop the cached client so the next call picks up new settings."""
    global _llm_instance
    _llm_instance = None


def llm_text_call(prompt: str) -> str:
    """
    Call the LLM and return the raw text response.
    An empty response is returned as-is; callers decide what that means.
    """
    logger.debug(f"[LLM-TEXT] Prompt length: {len(prompt)} chars")
    logger.debug(f"[LLM-TEXT] Prompt preview:\n{prompt[:500]}{'…' if len(prompt) > 500 else ''}")

    llm = get_llm()

    t0 = time.perf_counter()
    response = llm.invoke(prompt)
    elapsed = time.perf_counter() - t0
    content = response.content or ""

    # Log response metadata (finish_reason, token usage)
    meta = getattr(response, "response_metadata", {}) or {}
    finish_reason = meta.get("finish_reason", "unknown")
    usage = meta.get("token_usage") or meta.get("usage", {})
    logger.info(
        f"[LLM-TEXT] Response received in {elapsed:.2f}s | "
        f"Response length: {len(content)} chars | "
        f"finish_reason={finish_reason} | "
        f"tokens={usage}"
    )
    logger.debug(f"[LLM-TEXT] Full response:\n{content}")

    if not content.strip():
        logger.warning(f"[LLM-TEXT] Empty response (finish_reason={finish_reason})")

    return content
