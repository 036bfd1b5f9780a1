"""
WebSocket support for real-time analysis progress.

Provides:
  - AnalysisProgress singleton that the background run thread uses to broadcast events
  - WebSocket clients connect via /api/analysis/ws/{run_id} to get live updates
"""

from __future__ import annotations

import asyncio
import logging
import threading
from datetime import datetime, timezone
from typing import Any

from fastapi import WebSocket

logger = logging.getLogger(__name__)


class AnalysisProgress:
    """
    In-process event bus.
    Every connected WebSocket client for a given run_id receives
    JSON messages like:
        { "event": "run_start", "total": 30, "files": ["a.txt"], "ts": "..." }
        { "event": "requirement_done", "code": "S1.1", "score": 82, "completed": 1, "total": 30 }
        { "event": "run_end", "status": "COMPLETED", "overall_score": 71 }
        { "event": "error", "message": "..." }
    Late joiners receive the history of the run first.
    """

    _instance: AnalysisProgress | None = None

    def __init__(self) -> None:
        self._clients: dict[str, list[WebSocket]] = {}
        self._history: dict[str, list[dict[str, Any]]] = {}
        self._loop: asyncio.AbstractEventLoop | None = None
        self._lock = threading.Lock()

    @classmethod
    def get(cls) -> AnalysisProgress:
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    def set_loop(self, loop: asyncio.AbstractEventLoop) -> None:
        self._loop = loop

    # ── Client management ────────────────────────────────

    async def connect(self, run_id: str, ws: WebSocket) -> None:
        await ws.accept()
        with self._lock:
            self._clients.setdefault(run_id, []).append(ws)
            history = list(self._history.get(run_id, []))
        for msg in history:
            try:
                await ws.send_json(msg)
            except Exception as exc:
                logger.debug(f"[WS] Replay to {run_id} client stopped: {exc}")
                break

    def disconnect(self, run_id: str, ws: WebSocket) -> None:
        with self._lock:
            clients = self._clients.get(run_id, [])
            if ws in clients:
                clients.remove(ws)

    # ── Broadcasting (thread-safe for the background run) ─

    def emit(self, run_id: str, event: dict[str, Any]) -> None:
        event.setdefault("ts", datetime.now(timezone.utc).isoformat())
        with self._lock:
            self._history.setdefault(run_id, []).append(event)
            has_clients = bool(self._clients.get(run_id))

        if not has_clients:
            return

        loop = self._loop
        if loop is None or loop.is_closed():
            return

        asyncio.run_coroutine_threadsafe(self._broadcast(run_id, event), loop)

    async def _broadcast(self, run_id: str, event: dict[str, Any]) -> None:
        with self._lock:
            clients = list(self._clients.get(run_id, []))
        dead: list[WebSocket] = []
        for ws in clients:
            try:
                await ws.send_json(event)
            except Exception:
                dead.append(ws)
        for ws in dead:
            self.disconnect(run_id, ws)

    # ── Convenience helpers ──────────────────────────────

    def on_run_start(self, run_id: str, total: int, files: list[str]) -> None:
        self.emit(run_id, {"event": "run_start", "total": total, "files": files})
        logger.info(f"▶  [{run_id}] Analysis started: {len(files)} file(s), {total} requirements")

    def on_requirement_done(
        self, run_id: str, code: str, status: str, score: int, source: str,
        completed: int, total: int,
    ) -> None:
        self.emit(run_id, {
            "event": "requirement_done",
            "code": code,
            "status": status,
            "score": score,
            "source": source,
            "completed": completed,
            "total": total,
        })

    def on_run_end(self, run_id: str, status: str, overall_score: int | None = None) -> None:
        self.emit(run_id, {"event": "run_end", "status": status, "overall_score": overall_score})
        logger.info(f"══ [{run_id}] Analysis finished: {status}")

    def on_error(self, run_id: str, message: str) -> None:
        self.emit(run_id, {"event": "error", "message": message})
        logger.error(f"✗  [{run_id}] Analysis error: {message}")

    def clear(self, run_id: str) -> None:
        with self._lock:
            self._history.pop(run_id, None)
