"""
Structured JSON event log — append-only, one object per line (.jsonl).

Usage:
    from modules.observability.logger import StructuredLogger

    events = StructuredLogger(enabled=True)
    events.log("req_1a2b3c", "plan_start", {"city": "paris", "mode": "walking"})

Events are written to  logs/<request_id>.jsonl  relative to the backend/ root
(or EVENT_LOG_DIR).  When disabled, log() is a no-op apart from a DEBUG line
on the standard logger.

Planner event types:
    plan_start, candidates_found, fallback_locations_used, plan_complete
"""

from __future__ import annotations

import json
import logging
import os
import threading
from datetime import datetime, timezone
from pathlib import Path

import config

# logs/ directory lives alongside backend/main.py
_LOGS_DIR: Path = Path(__file__).resolve().parents[2] / "logs"

_std_logger = logging.getLogger(__name__)


class StructuredLogger:
    """Thread-safe, append-only JSONL logger."""

    def __init__(
        self,
        logs_dir: Path | str | None = None,
        enabled: bool | None = None,
    ) -> None:
        if logs_dir is None and config.EVENT_LOG_DIR:
            logs_dir = config.EVENT_LOG_DIR
        self._logs_dir = Path(logs_dir) if logs_dir else _LOGS_DIR
        self.enabled = config.EVENT_LOG_ENABLED if enabled is None else enabled
        self._lock = threading.Lock()
        self._handles: dict[str, object] = {}  # request_id -> file handle

    # ── public API ────────────────────────────────────────────────────────

    def log(self, request_id: str, event_type: str, payload: dict) -> None:
        """Append one structured JSON record to ``<request_id>.jsonl``."""
        _std_logger.debug("[%s] %s %s", request_id, event_type, payload)
        if not self.enabled:
            return
        record = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "request_id": request_id,
            "event_type": event_type,
            "payload": payload,
        }
        line = json.dumps(record, default=str, ensure_ascii=False) + "\n"

        with self._lock:
            fh = self._handles.get(request_id)
            if fh is None:
                fh = self._open(request_id)
            fh.write(line)  # type: ignore[union-attr]
            fh.flush()  # type: ignore[union-attr]

    def read(self, request_id: str) -> list[dict]:
        """Return every event recorded for *request_id*, oldest first."""
        path = self._logs_dir / f"{request_id}.jsonl"
        if not path.exists():
            return []
        with open(path, encoding="utf-8") as fh:
            return [json.loads(line) for line in fh if line.strip()]

    def close(self, request_id: str | None = None) -> None:
        """Close one or all open file handles."""
        with self._lock:
            if request_id:
                fh = self._handles.pop(request_id, None)
                if fh:
                    fh.close()  # type: ignore[union-attr]
            else:
                for fh in self._handles.values():
                    fh.close()  # type: ignore[union-attr]
                self._handles.clear()

    # ── internals ─────────────────────────────────────────────────────────

    def _open(self, request_id: str):  # noqa: ANN202
        os.makedirs(self._logs_dir, exist_ok=True)
        path = self._logs_dir / f"{request_id}.jsonl"
        fh = open(path, "a", encoding="utf-8")  # noqa: SIM115
        self._handles[request_id] = fh
        return fh
