"""Diagnostic snapshot capture on terminal load failures.

Captures surface state, session counters and timing data when the orchestrator
gives up. Zero overhead unless a snapshot directory is configured.
"""
import json
import logging
import os
import time
from dataclasses import dataclass, field, asdict
from typing import Any

log = logging.getLogger(__name__)


@dataclass
class FailureSnapshot:
    target: str
    error_kind: str
    message: str
    attempt_number: int = 0
    max_retry_attempts: int = 0
    phase: str = ""
    surface_present: bool = False
    surface_src: str = ""
    surface_reachable: bool = False
    surface_ready: bool = False
    network_online: bool | None = None
    attempt_timings: list[float] = field(default_factory=list)
    session_elapsed: float = 0.0
    health_stats: dict[str, Any] = field(default_factory=dict)
    timestamp: float = field(default_factory=time.time)

    def to_dict(self) -> dict:
        return asdict(self)


def capture_failure_snapshot(
    host,
    config,
    state,
    error_kind: str,
    message: str,
    attempt_timings: list[float] | None = None,
    session_elapsed: float = 0.0,
    health_stats: dict | None = None,
) -> FailureSnapshot:
    """Best-effort capture of failure diagnostics. Never raises."""
    snapshot = FailureSnapshot(
        target=config.embed_target,
        error_kind=error_kind,
        message=message,
        attempt_number=state.attempt_number,
        max_retry_attempts=config.max_retry_attempts,
        phase=state.phase.value,
        attempt_timings=list(attempt_timings or []),
        session_elapsed=session_elapsed,
        health_stats=dict(health_stats or {}),
    )

    surface = None
    try:
        surface = host.get_surface()
    except Exception:
        pass

    if surface is not None:
        snapshot.surface_present = True
        try:
            snapshot.surface_src = surface.src or ""
        except Exception:
            pass
        try:
            snapshot.surface_reachable = bool(surface.has_context())
        except Exception:
            pass
        try:
            snapshot.surface_ready = bool(surface.is_ready())
        except Exception:
            pass

    try:
        snapshot.network_online = bool(host.is_network_online())
    except Exception:
        pass

    return snapshot


def save_failure_snapshot(snapshot: FailureSnapshot, base_dir: str = "data/logs/embed_failures") -> str:
    """Save snapshot to JSON under <base_dir>/<error_kind>/. Returns file path, or '' on failure."""
    try:
        out_dir = os.path.join(base_dir, snapshot.error_kind or "unknown")
        os.makedirs(out_dir, exist_ok=True)

        ts = time.strftime("%Y%m%d_%H%M%S") + f"_{int(time.time() * 1000) % 1000:03d}"
        path = os.path.join(out_dir, f"{ts}_attempt{snapshot.attempt_number}.json")

        with open(path, "w", encoding="utf-8") as f:
            json.dump(snapshot.to_dict(), f, ensure_ascii=False, indent=2, default=str)
        return path
    except Exception as e:
        log.debug(f"Failed to save failure snapshot: {e}")
        return ""
