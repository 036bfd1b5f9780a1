"""
API routes — thin HTTP layer that delegates to the orchestration.

Routes:
  GET    /health                               → API health check
  GET    /api/requirements                     → The requirement catalog
  POST   /api/analysis/upload                  → Upload files and start an analysis (background)
  GET    /api/analysis/list                    → List all runs
  GET    /api/analysis/{run_id}/status         → Poll run status and progress
  GET    /api/analysis/{run_id}/results        → Scored results and summary
  GET    /api/analysis/{run_id}/report         → Plain-text report download
  GET    /api/analysis/{run_id}/questionnaire  → Pre-filled pre-inspection questionnaire
  POST   /api/analysis/{run_id}/cancel         → Stop issuing further batches
  DELETE /api/analysis/{run_id}                → Discard a run
  WS     /api/analysis/ws/{run_id}             → Real-time progress
"""

from __future__ import annotations

import logging
import threading
import uuid
from datetime import datetime, timezone
from typing import Any, Optional

from fastapi import APIRouter, File, HTTPException, UploadFile, WebSocket, WebSocketDisconnect
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel

from gdc_compliance.api.websocket import AnalysisProgress
from gdc_compliance.catalog.loader import get_catalog
from gdc_compliance.config import get_settings
from gdc_compliance.models.enums import RunStatus
from gdc_compliance.models.schemas import RequirementCompliance, UploadedDocument
from gdc_compliance.orchestration.analyzer import CancellationToken, analyze
from gdc_compliance.reports.questionnaire import build_questionnaire
from gdc_compliance.reports.report_builder import build_text_report
from gdc_compliance.reports.summary import summarize
from gdc_compliance.services.file_service import FileService, FileTooLargeError, UnsupportedFileError

logger = logging.getLogger(__name__)

# ── Routers ──────────────────────────────────────────────
health_router = APIRouter()
catalog_router = APIRouter()
analysis_router = APIRouter()

# ── In-memory store (runs are discarded on reset) ────────
_runs: dict[str, dict[str, Any]] = {}


# ── Response schemas ─────────────────────────────────────
class UploadResponse(BaseModel):
    run_id: str
    status: RunStatus
    message: str


class StatusResponse(BaseModel):
    run_id: str
    status: RunStatus
    files: list[str] = []
    started_at: str
    finished_at: str = ""
    completed: int = 0
    total: int = 0
    overall_score: Optional[int] = None
    extraction_degraded: bool = False
    error: str = ""


class RunSummary(BaseModel):
    run_id: str
    status: RunStatus
    files: list[str] = []
    fingerprints: list[str] = []
    started_at: str


def _get_run(run_id: str) -> dict[str, Any]:
    run = _runs.get(run_id)
    if not run:
        raise HTTPException(status_code=404, detail=f"Analysis run {run_id} not found")
    return run


def _require_finished(run: dict[str, Any]) -> None:
    if run["status"] == RunStatus.RUNNING:
        raise HTTPException(status_code=409, detail=f"Analysis run {run['run_id']} is still running")
    if run["status"] == RunStatus.FAILED:
        raise HTTPException(
            status_code=409,
            detail=f"Analysis run {run['run_id']} failed: {run.get('error', '')}",
        )


# ── Health ───────────────────────────────────────────────

@health_router.get("/health")
async def health_check():
    settings = get_settings()
    return {
        "status": "ok",
        "app": settings.app_name,
        "analysis_mode": "llm" if settings.llm_enabled else "template",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


# ── Catalog ──────────────────────────────────────────────

@catalog_router.get("")
async def list_requirements():
    return [r.model_dump(mode="json") for r in get_catalog()]


# ── Upload & Start Analysis (background thread) ──────────

def _run_analysis_thread(run_id: str, documents: list[UploadedDocument], token: CancellationToken) -> None:
    """Run the analysis in a background thread so the HTTP response returns immediately."""
    progress = AnalysisProgress.get()
    run = _runs.get(run_id)
    if run is None:
        logger.info(f"[{run_id}] Run discarded before it started")
        return

    def _on_progress(completed: int, total: int, compliance: RequirementCompliance) -> None:
        run["completed"] = completed
        if run_id not in _runs:
            return
        progress.on_requirement_done(
            run_id,
            code=compliance.requirement.code,
            status=compliance.analysis.status.value,
            score=compliance.score,
            source=compliance.analysis.source.value,
            completed=completed,
            total=total,
        )

    try:
        catalog = get_catalog()
        run["total"] = len(catalog)
        progress.on_run_start(run_id, len(catalog), run["files"])

        results = analyze(documents, catalog=catalog, cancel_token=token, on_progress=_on_progress)
        summary = summarize(results, catalog)
        questionnaire = build_questionnaire(results, documents)
        report = build_text_report(
            results,
            summary,
            document_names=run["files"],
            document_fingerprints=run["fingerprints"],
        )

        # A cancel that lands after the last batch still yields a complete run
        partial = len(results) < len(catalog)
        status = RunStatus.CANCELLED if token.cancelled and partial else RunStatus.COMPLETED
        run.update({
            "status": status,
            "results": results,
            "summary": summary,
            "questionnaire": questionnaire,
            "report": report,
            "finished_at": datetime.now(timezone.utc).isoformat(),
        })
        progress.on_run_end(run_id, status.value, summary.overall_score)

    except Exception as e:
        logger.error(f"Analysis failed for {run_id}: {e}")
        run.update({
            "status": RunStatus.FAILED,
            "error": str(e),
            "finished_at": datetime.now(timezone.utc).isoformat(),
        })
        progress.on_error(run_id, str(e))
        progress.on_run_end(run_id, RunStatus.FAILED.value)

    finally:
        if run_id not in _runs:
            # Discarded mid-run; drop whatever the run emitted after the reset
            progress.clear(run_id)


def _start_run_thread(run_id: str, documents: list[UploadedDocument], token: CancellationToken) -> None:
    thread = threading.Thread(
        target=_run_analysis_thread,
        args=(run_id, documents, token),
        daemon=True,
        name=f"analysis-{run_id}",
    )
    thread.start()


@analysis_router.post("/upload", response_model=UploadResponse)
async def upload_documents(files: Optional[list[UploadFile]] = File(None)):
    """
    Upload one or more programme documents and start the analysis
    in a background thread. Returns immediately with the run_id
    so the frontend can connect via WebSocket for live progress.
    """
    if not files:
        raise HTTPException(status_code=400, detail="No files uploaded")

    file_service = FileService()
    documents: list[UploadedDocument] = []
    for upload in files:
        filename = upload.filename or "unknown.txt"
        data = await upload.read()
        try:
            documents.append(file_service.build_document(filename, data, upload.content_type or ""))
        except UnsupportedFileError as e:
            raise HTTPException(status_code=400, detail=str(e))
        except FileTooLargeError as e:
            raise HTTPException(status_code=413, detail=str(e))

    run_id = f"RUN-{uuid.uuid4().hex[:8].upper()}"
    names = [d.name for d in documents]
    logger.info(f"Received upload: {names} → {run_id}")

    token = CancellationToken()
    _runs[run_id] = {
        "run_id": run_id,
        "files": names,
        "fingerprints": [d.sha256[:12] for d in documents],
        "documents": documents,
        "status": RunStatus.RUNNING,
        "started_at": datetime.now(timezone.utc).isoformat(),
        "finished_at": "",
        "completed": 0,
        "total": 0,
        "token": token,
        "results": [],
        "summary": None,
        "questionnaire": None,
        "report": "",
        "error": "",
    }

    _start_run_thread(run_id, documents, token)

    return UploadResponse(
        run_id=run_id,
        status=RunStatus.RUNNING,
        message=(
            f"Analysis started for {len(names)} file(s). "
            f"Connect to /api/analysis/ws/{run_id} for live progress."
        ),
    )


# ── List All Runs ────────────────────────────────────────

@analysis_router.get("/list", response_model=list[RunSummary])
async def list_runs():
    return [
        RunSummary(
            run_id=r["run_id"],
            status=r["status"],
            files=r["files"],
            fingerprints=r["fingerprints"],
            started_at=r["started_at"],
        )
        for r in _runs.values()
    ]


# ── Status Polling ───────────────────────────────────────

@analysis_router.get("/{run_id}/status", response_model=StatusResponse)
async def get_run_status(run_id: str):
    run = _get_run(run_id)
    summary = run.get("summary")
    return StatusResponse(
        run_id=run["run_id"],
        status=run["status"],
        files=run["files"],
        started_at=run["started_at"],
        finished_at=run.get("finished_at", ""),
        completed=run.get("completed", 0),
        total=run.get("total", 0),
        overall_score=summary.overall_score if summary else None,
        extraction_degraded=summary.extraction_degraded if summary else False,
        error=run.get("error", ""),
    )


# ── Results, report, questionnaire ───────────────────────

@analysis_router.get("/{run_id}/results")
async def get_run_results(run_id: str):
    run = _get_run(run_id)
    _require_finished(run)
    return {
        "run_id": run_id,
        "status": run["status"],
        "results": [r.model_dump(mode="json") for r in run["results"]],
        "summary": run["summary"].model_dump(mode="json"),
    }


@analysis_router.get("/{run_id}/report", response_class=PlainTextResponse)
async def get_run_report(run_id: str):
    run = _get_run(run_id)
    _require_finished(run)
    return PlainTextResponse(
        run["report"],
        headers={"Content-Disposition": f'attachment; filename="gdc-compliance-report-{run_id}.txt"'},
    )


@analysis_router.get("/{run_id}/questionnaire")
async def get_run_questionnaire(run_id: str):
    run = _get_run(run_id)
    _require_finished(run)
    return run["questionnaire"].model_dump(mode="json")


# ── Cancel & reset ───────────────────────────────────────

@analysis_router.post("/{run_id}/cancel")
async def cancel_run(run_id: str):
    run = _get_run(run_id)
    if run["status"] == RunStatus.RUNNING:
        run["token"].cancel()
        logger.info(f"[{run_id}] Cancellation requested")
        return {"run_id": run_id, "message": "Cancellation requested"}
    return {"run_id": run_id, "message": f"Run already {run['status'].value}"}


@analysis_router.delete("/{run_id}")
async def delete_run(run_id: str):
    run = _get_run(run_id)
    run["token"].cancel()
    _runs.pop(run_id, None)
    AnalysisProgress.get().clear(run_id)
    logger.info(f"[{run_id}] Run discarded")
    return {"run_id": run_id, "message": "Run discarded"}


# ── WebSocket endpoint for real-time progress ────────────

@analysis_router.websocket("/ws/{run_id}")
async def ws_analysis_progress(websocket: WebSocket, run_id: str):
    """
    WebSocket endpoint — client connects here after POSTing /upload.
    Receives JSON events: run_start, requirement_done, run_end, error.
    """
    progress = AnalysisProgress.get()
    await progress.connect(run_id, websocket)
    try:
        while True:
            # Keep the connection alive; client can send pings
            await websocket.receive_text()
    except WebSocketDisconnect:
        progress.disconnect(run_id, websocket)
