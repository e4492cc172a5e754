"""
Structured JSON audit logger, append-only, one object per line (.jsonl).

Usage:
    from trip_planner.modules.observability.logger import get_audit_logger

    audit = get_audit_logger()
    audit.log("payments", "payment_processed", {"paymentId": "pi_123"})

Each stream is written to  <LOGS_DIR>/<stream>.jsonl.
Streams in use: bookings, payments, notifications, webhooks.
"""

from __future__ import annotations

import json
import logging
import os
import threading
from datetime import datetime, timezone
from pathlib import Path

from trip_planner import config


class StructuredLogger:
    """Thread-safe, append-only JSONL logger."""

    def __init__(self, logs_dir: Path | str | None = None) -> None:
        self._logs_dir = Path(logs_dir or config.LOGS_DIR)
        self._lock = threading.Lock()
        self._handles: dict[str, object] = {}  # stream -> file handle

    # ── public API ────────────────────────────────────────────────────────

    def log(self, stream: str, event_type: str, payload: dict, session_id: str | None = None) -> None:
        """Append one structured JSON record to ``<stream>.jsonl``."""
        record = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "session_id": session_id,
            "event_type": event_type,
            "payload": payload,
        }
        line = json.dumps(record, default=str, ensure_ascii=False) + "\n"

        with self._lock:
            fh = self._handles.get(stream)
            if fh is None:
                fh = self._open(stream)
            fh.write(line)  # type: ignore[union-attr]
            fh.flush()  # type: ignore[union-attr]

    def read(self, stream: str) -> list[dict]:
        """Return all records of a stream (used by tests and support tooling)."""
        path = self._logs_dir / f"{stream}.jsonl"
        if not path.exists():
            return []
        with open(path, encoding="utf-8") as fh:
            return [json.loads(line) for line in fh if line.strip()]

    def close(self, stream: str | None = None) -> None:
        """Close one or all open file handles."""
        with self._lock:
            if stream:
                fh = self._handles.pop(stream, None)
                if fh:
                    fh.close()  # type: ignore[union-attr]
            else:
                for fh in self._handles.values():
                    fh.close()  # type: ignore[union-attr]
                self._handles.clear()

    # ── internals ─────────────────────────────────────────────────────────

    def _open(self, stream: str):  # noqa: ANN202
        os.makedirs(self._logs_dir, exist_ok=True)
        path = self._logs_dir / f"{stream}.jsonl"
        fh = open(path, "a", encoding="utf-8")  # noqa: SIM115
        self._handles[stream] = fh
        return fh


_audit: StructuredLogger | None = None
_audit_lock = threading.Lock()


def get_audit_logger() -> StructuredLogger:
    global _audit
    with _audit_lock:
        if _audit is None:
            _audit = StructuredLogger()
        return _audit


def set_audit_logger(audit: StructuredLogger | None) -> None:
    global _audit
    with _audit_lock:
        if _audit is not None and _audit is not audit:
            _audit.close()
        _audit = audit


def configure_logging(level: str | None = None) -> None:
    """Root stdlib logging setup for the API process."""
    logging.basicConfig(
        level=getattr(logging, (level or config.LOG_LEVEL).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
