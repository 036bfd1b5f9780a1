"""
GDC Compliance Analyzer — Main Entry Point

Analyse files directly (CLI), printing the text report:
    python -m gdc_compliance handbook.txt assessment_policy.txt

Run as an API server (for the frontend):
    python -m gdc_compliance --serve
    # or: uvicorn gdc_compliance.api:app --reload --port 8000

Or import and run programmatically:
    from gdc_compliance.main import run
    report = run(["path/to/handbook.txt"])
"""

from __future__ import annotations

import logging
import sys
from datetime import datetime, timezone
from typing import Sequence

from gdc_compliance.catalog.loader import CatalogError, get_catalog
from gdc_compliance.config import get_settings
from gdc_compliance.orchestration.analyzer import analyze
from gdc_compliance.reports.report_builder import build_text_report
from gdc_compliance.reports.summary import summarize
from gdc_compliance.services.file_service import FileService
from gdc_compliance.utils.logger import setup_logging


def run(file_paths: Sequence[str]) -> str:
    """Analyse the given files and return the text report."""
    settings = get_settings()
    setup_logging(settings.log_level)
    logger = logging.getLogger(__name__)

    logger.info("=" * 60)
    logger.info("  GDC COMPLIANCE ANALYZER")
    logger.info(
        f"  Mode: {'LLM' if settings.llm_enabled else 'TEMPLATE'} | "
        f"Started: {datetime.now(timezone.utc).isoformat()}"
    )
    logger.info("=" * 60)

    file_service = FileService()
    documents = [file_service.load_path(path) for path in file_paths]

    catalog = get_catalog()
    results = analyze(documents, catalog=catalog, settings=settings)
    summary = summarize(results, catalog)

    return build_text_report(
        results,
        summary,
        document_names=[d.name for d in documents],
        document_fingerprints=[d.sha256[:12] for d in documents],
    )


def serve(host: str = "0.0.0.0", port: int = 8000) -> None:
    """Start the FastAPI server (for frontend communication)."""
    import uvicorn

    setup_logging(get_settings().log_level)
    logger = logging.getLogger(__name__)
    logger.info(f"Starting API server on {host}:{port}")
    uvicorn.run("gdc_compliance.api:app", host=host, port=port, reload=True)


def main(argv: Sequence[str] | None = None) -> int:
    args = list(sys.argv[1:] if argv is None else argv)
    if "--serve" in args:
        serve()
        return 0

    if not args:
        print("usage: python -m gdc_compliance FILE [FILE ...] | --serve", file=sys.stderr)
        return 2

    try:
        report = run(args)
    except CatalogError as exc:
        logging.getLogger(__name__).error(f"Requirement catalog unavailable: {exc}")
        return 1
    except (OSError, ValueError) as exc:
        logging.getLogger(__name__).error(f"Could not read input: {exc}")
        return 1

    print(report)
    return 0


if __name__ == "__main__":
    sys.exit(main())
