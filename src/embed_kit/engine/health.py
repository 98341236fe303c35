"""Bounded-duration health poller for an in-progress embed load.

Safety net for load signals that never fire: every tick re-reads the
orchestrator phase and probes frame readiness, recording an observation.
The monitor never declares failure or triggers retries; it only lets
diagnostics and tests see whether progress is still being made. Its total
duration is capped so it cannot outlive a session.
"""
import collections
import logging

from .state import IN_FLIGHT, Phase
from .validator import check_ready

log = logging.getLogger(__name__)


class HealthMonitor:
    """Periodic observer of one orchestrator session."""

    def __init__(self, orchestrator, timers, *, interval: float = 2.0, duration: float = 30.0,
                 window: int = 20, event_logger=None):
        self._orch = orchestrator
        self._timers = timers
        self._interval = interval
        self._duration = duration
        self._event_logger = event_logger
        # (timestamp, phase, attempt_number, frame_ready)
        self._observations: collections.deque[tuple[float, Phase, int, bool]] = \
            collections.deque(maxlen=window)
        self._tick_timer = None
        self._deadline_timer = None
        self._started_at: float | None = None
        self._stopped_at: float | None = None
        self.ticks = 0
        self.stop_reason: str | None = None

    @property
    def running(self) -> bool:
        return self._deadline_timer is not None

    def start(self):
        """Begin polling. No-op while already running."""
        if self.running:
            return
        self._observations.clear()
        self.ticks = 0
        self.stop_reason = None
        self._started_at = self._timers.now()
        self._stopped_at = None
        self._deadline_timer = self._timers.call_later(
            self._duration, lambda: self.stop("expired"), "health_deadline")
        self._tick_timer = self._timers.call_later(self._interval, self._tick, "health_tick")
        log.debug(f"Health monitor started ({self._interval}s interval, {self._duration}s cap)")

    def stop(self, reason: str = "stopped"):
        if not self.running:
            return
        for handle in (self._tick_timer, self._deadline_timer):
            if handle is not None:
                handle.cancel()
        self._tick_timer = None
        self._deadline_timer = None
        self.stop_reason = reason
        self._stopped_at = self._timers.now()
        elapsed = self._elapsed()
        log.debug(f"Health monitor stopped: {reason} after {self.ticks} ticks ({elapsed:.1f}s)")
        if self._event_logger is not None:
            self._event_logger.log_health_stop(reason, self.ticks, elapsed)

    def _elapsed(self) -> float:
        if self._started_at is None:
            return 0.0
        end = self._stopped_at if self._stopped_at is not None else self._timers.now()
        return end - self._started_at

    def _tick(self):
        self._tick_timer = None
        self.ticks += 1
        orch = self._orch
        host = orch.host

        if orch.is_loaded():
            self.stop("loaded")
            return
        try:
            visible = bool(host.is_surface_visible())
        except Exception as e:
            log.debug(f"Health tick: visibility probe failed: {e}")
            visible = False
        if not visible:
            self.stop("inactive")
            return
        try:
            hidden = bool(host.is_content_hidden())
        except Exception as e:
            log.debug(f"Health tick: hidden probe failed: {e}")
            hidden = False
        if hidden:
            # Content is hidden only after a failure was reported
            self.stop("failure_reported")
            return

        try:
            surface = host.get_surface()
        except Exception:
            surface = None
        ready = check_ready(surface)
        self._observations.append((self._timers.now(), orch.phase, orch.attempt_number, ready))
        log.debug(f"Health tick {self.ticks}: phase={orch.phase.value} "
                  f"attempt={orch.attempt_number} ready={ready}")
        self._tick_timer = self._timers.call_later(self._interval, self._tick, "health_tick")

    @property
    def is_progressing(self) -> bool:
        """True while running and the latest observation shows an attempt in flight."""
        if not self.running or not self._observations:
            return self.running
        return self._observations[-1][1] in IN_FLIGHT

    @property
    def stats(self) -> dict:
        """Return observation counts for logging."""
        phases: dict[str, int] = {}
        ready_ticks = 0
        for _, phase, _, ready in self._observations:
            phases[phase.value] = phases.get(phase.value, 0) + 1
            ready_ticks += 1 if ready else 0
        return {
            "running": self.running,
            "ticks": self.ticks,
            "stop_reason": self.stop_reason,
            "elapsed": round(self._elapsed(), 2),
            "phases": phases,
            "ready_ticks": ready_ticks,
        }
