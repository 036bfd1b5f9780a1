"""
Catalog Loader — reads the GDC requirement checklist from JSON.

The packaged catalog ships with the code; settings.catalog_path can point at
an alternative file. Any problem with the catalog is fatal for a run.
"""

from __future__ import annotations

import json
import logging
from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from gdc_compliance.config import get_settings
from gdc_compliance.models.schemas import Requirement

logger = logging.getLogger(__name__)

_CATALOG_PATH = Path(__file__).resolve().parent / "gdc_requirements.json"


class CatalogError(RuntimeError):
    """Raised when the requirement catalog cannot be loaded or is invalid."""


def load_catalog(path: Optional[str | Path] = None) -> tuple[Requirement, ...]:
    """
    Load and validate a requirement catalog.

    Every record is validated as a Requirement; codes must be unique and the
    catalog must not be empty. Order of the file is preserved.
    """
    catalog_file = Path(path) if path else _CATALOG_PATH

    if not catalog_file.is_file():
        raise CatalogError(f"Catalog file not found: {catalog_file}")

    try:
        raw = json.loads(catalog_file.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise CatalogError(f"Catalog file {catalog_file.name} is not valid JSON: {exc}") from exc

    if not isinstance(raw, list):
        raise CatalogError(f"Catalog file {catalog_file.name} must contain a JSON array")
    if not raw:
        raise CatalogError(f"Catalog file {catalog_file.name} is empty")

    requirements: list[Requirement] = []
    seen_codes: set[str] = set()
    for index, record in enumerate(raw):
        try:
            requirement = Requirement.model_validate(record)
        except ValidationError as exc:
            raise CatalogError(f"Invalid catalog record #{index}: {exc}") from exc

        if requirement.code in seen_codes:
            raise CatalogError(f"Duplicate requirement code in catalog: {requirement.code}")
        seen_codes.add(requirement.code)
        requirements.append(requirement)

    domains = {r.domain for r in requirements}
    logger.info(
        f"[CATALOG] Loaded {len(requirements)} requirements across "
        f"{len(domains)} domains from {catalog_file.name}"
    )
    return tuple(requirements)


@lru_cache()
def get_catalog() -> tuple[Requirement, ...]:
    """Return the configured catalog, loaded once per process."""
    settings = get_settings()
    return load_catalog(settings.catalog_path or None)
