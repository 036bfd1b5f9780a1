"""
Application configuration using Pydantic Settings.
All environment-specific values are centralized here.
"""

from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # ── App ──────────────────────────────────────────────
    app_name: str = "GDC Compliance Analyzer"
    analysis_mode: str = "auto"  # "auto" | "llm" | "template"

    # ── LLM ──────────────────────────────────────────────
    groq_api_key: str = ""
    llm_model: str = "llama-3.3-70b-versatile"
    llm_temperature: float = 0.2
    llm_max_tokens: int = 1500
    llm_timeout_seconds: float = 30.0

    # ── Analysis ─────────────────────────────────────────
    batch_size: int = 4
    batch_delay_ms: int = 500
    content_preview_chars: int = 3000
    llm_confidence_floor: int = 60
    llm_confidence_ceiling: int = 95
    template_confidence_min: int = 70
    template_confidence_max: int = 95
    random_seed: Optional[int] = None  # set for reproducible template draws

    # ── Catalog ──────────────────────────────────────────
    catalog_path: str = ""  # empty = packaged gdc_requirements.json

    # ── Uploads ──────────────────────────────────────────
    max_upload_bytes: int = 20 * 1024 * 1024
    allowed_extensions: list[str] = [".pdf", ".doc", ".docx", ".txt"]

    # ── Logging ──────────────────────────────────────────
    log_level: str = "INFO"

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "ignore",
    }

    @property
    def llm_enabled(self) -> bool:
        """True when the delegated LLM path should be the primary extractor."""
        mode = self.analysis_mode.lower()
        if mode == "llm":
            return True
        if mode == "template":
            return False
        return bool(self.groq_api_key)


@lru_cache()
def get_settings() -> Settings:
    """Return cached application settings (singleton)."""
    return Settings()
