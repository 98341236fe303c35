"""Structured JSONL event logging for embed load sessions."""
import json
import logging
import os
import time

log = logging.getLogger(__name__)


class LoadEventLogger:
    """Writes one JSON line per orchestrator event to a per-session JSONL file.

    All logging is best-effort; methods never raise exceptions.
    Supports context-manager protocol for automatic close.

    An optional ``host`` label (e.g. the host page name) is included in every
    event when provided and omitted otherwise.
    """

    def __init__(self, run_id: str, target: str, log_dir: str = "data/logs/embed_events",
                 host: str | None = None, name: str = "embed"):
        self._run_id = run_id
        self._target = target
        self._host = host
        self._f = None
        try:
            os.makedirs(log_dir, exist_ok=True)
            safe_name = name.replace("/", "_").replace("\\", "_") or "embed"
            path = os.path.join(log_dir, f"{safe_name}_{run_id}.jsonl")
            self._f = open(path, "a", encoding="utf-8")
        except Exception as e:
            log.warning(f"LoadEventLogger: failed to open log file: {e}")

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()

    def _write(self, event: dict):
        if self._f is None:
            return
        try:
            event["ts"] = time.time()
            event["run_id"] = self._run_id
            event["target"] = self._target
            if self._host is not None:
                event["host"] = self._host
            self._f.write(json.dumps(event, ensure_ascii=False) + "\n")
            self._f.flush()
        except Exception as e:
            log.warning(f"LoadEventLogger: write failed: {e}")

    def log_attempt_start(self, attempt: int, max_attempts: int, ready_at_start: bool):
        self._write({
            "event": "attempt_start",
            "attempt": attempt,
            "max_attempts": max_attempts,
            "ready_at_start": ready_at_start,
        })

    def log_signal(self, signal: str, attempt: int | None, current_attempt: int, acted: bool):
        """Log a load/error/timeout/network signal.

        ``acted`` is False when the signal was discarded as stale or late.
        """
        self._write({
            "event": "signal",
            "signal": signal,
            "attempt": attempt,
            "current_attempt": current_attempt,
            "acted": acted,
        })

    def log_retry_scheduled(self, attempt: int, max_attempts: int, error_kind: str | None,
                            delay: float):
        self._write({
            "event": "retry_scheduled",
            "attempt": attempt,
            "max_attempts": max_attempts,
            "error_kind": error_kind,
            "delay": delay,
        })

    def log_load_success(self, attempt: int, attempt_duration: float, session_duration: float):
        self._write({
            "event": "load_success",
            "attempt": attempt,
            "attempt_duration": attempt_duration,
            "session_duration": session_duration,
        })

    def log_terminal_failure(self, attempt: int, error_kind: str, message: str,
                             retries_exhausted: bool, snapshot_path: str = ""):
        self._write({
            "event": "terminal_failure",
            "attempt": attempt,
            "error_kind": error_kind,
            "message": message,
            "retries_exhausted": retries_exhausted,
            "snapshot_path": snapshot_path,
        })

    def log_health_stop(self, reason: str, ticks: int, elapsed: float):
        self._write({
            "event": "health_stop",
            "reason": reason,
            "ticks": ticks,
            "elapsed": elapsed,
        })

    def close(self):
        if self._f is not None:
            try:
                self._f.flush()
                self._f.close()
            except Exception:
                pass
            self._f = None
