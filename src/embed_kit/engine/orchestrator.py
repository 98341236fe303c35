"""Load orchestrator: the state machine behind one embedded report.

Drives each load attempt to a terminal outcome (loaded, retry scheduled, or
terminal failure). All waiting is expressed as timers on an injected
TimerQueue; every handler runs to completion.

Every attempt gets a session-unique id, and every load/error/timeout signal
carries the id of the attempt that subscribed to it. Signals for any other
attempt are discarded, and the first transition out of LOADING is
authoritative for an attempt.

Requires an injected host and never opens a browser.
"""
import logging

from .errors import ErrorKind
from .failure_snapshot import capture_failure_snapshot, save_failure_snapshot
from .health import HealthMonitor
from .messages import (
    DISCONNECTED_MESSAGE,
    LOAD_ERROR_MESSAGE,
    LOADING_MESSAGE,
    OFFLINE_MESSAGE,
    SURFACE_MISSING_MESSAGE,
    VALIDATION_MESSAGE,
    retrying_message,
    timeout_message,
)
from .state import LoadAttemptState, LoadEvent, Phase, Signal
from .validator import ValidationResult, check_ready, validate

log = logging.getLogger(__name__)


class LoadOrchestrator:
    """Owns the LoadAttemptState of one tab-visit session."""

    def __init__(self, config, host, timers, *, event_logger=None):
        self.config = config
        self.host = host
        self.timers = timers
        self.state = LoadAttemptState()
        self._event_logger = event_logger
        self._attempt_id = 0
        self._timeout_timer = None
        self._settle_timer = None
        self._retry_timer = None
        self._session_started_at: float | None = None
        self._attempt_started_at: float | None = None
        self.attempt_timings: list[float] = []
        self.last_snapshot_path = ""
        self._content_hidden = False
        self.health = HealthMonitor(
            self, timers,
            interval=config.health_interval,
            duration=config.health_duration,
            event_logger=event_logger,
        )
        host.subscribe_network(self.on_network_reconnect, self.on_network_disconnect)

    # ── Read-only status ────────────────────────────────────────────────────

    @property
    def phase(self) -> Phase:
        return self.state.phase

    @property
    def attempt_number(self) -> int:
        return self.state.attempt_number

    @property
    def current_attempt_id(self) -> int:
        return self._attempt_id

    def get_last_error_kind(self) -> ErrorKind | None:
        return self.state.last_error_kind

    def is_loaded(self) -> bool:
        return self.state.loaded

    @property
    def timeout_armed(self) -> bool:
        return self._timeout_timer is not None and self._timeout_timer.active

    # ── Entry points ────────────────────────────────────────────────────────

    def activate(self):
        """Surface became the active one (tab switch)."""
        st = self.state
        if st.loaded:
            self._present("hide_loading_indicator")
            self._present("hide_error_surface")
            self._show_content()
            return
        if st.phase in (Phase.LOADING, Phase.SETTLING):
            return
        if st.phase is Phase.RETRY_PENDING and self._retry_timer is not None:
            return
        if st.phase is Phase.FAILED:
            # Terminal failure stays on screen until the user acts or the network returns
            return
        self.begin_attempt()

    def begin_attempt(self) -> bool:
        """Start a new load attempt. Returns False if preconditions were not met."""
        st = self.state
        if st.loaded:
            log.debug("begin_attempt: already loaded")
            return False
        if not self._probe("is_surface_visible", False):
            log.info("begin_attempt: surface not visible, deferring")
            return False

        self._cancel_timers()
        surface = self._probe("get_surface", None)
        if surface is None:
            self._report_terminal(ErrorKind.UNKNOWN, SURFACE_MISSING_MESSAGE)
            return False

        st.attempt_number += 1
        st.last_error_kind = None
        st.phase = Phase.LOADING
        self._attempt_id += 1
        attempt_id = self._attempt_id
        now = self.timers.now()
        if self._session_started_at is None:
            self._session_started_at = now
        self._attempt_started_at = now

        if self._content_hidden:
            self._show_content()
        self._present("hide_error_surface")
        self._present("show_loading_indicator", LOADING_MESSAGE)

        self._timeout_timer = self.timers.call_later(
            self.config.load_timeout,
            lambda: self.handle(LoadEvent(Signal.TIMEOUT, attempt_id)),
            "timeout",
        )
        try:
            surface.subscribe(
                lambda: self.handle(LoadEvent(Signal.COMPLETION, attempt_id)),
                lambda: self.handle(LoadEvent(Signal.ERROR, attempt_id)),
            )
        except Exception as e:
            # The timeout still bounds this attempt
            log.warning(f"Failed to subscribe to surface signals: {e}")

        ready = check_ready(surface)
        log.info(f"Load attempt {st.attempt_number}/{self.config.max_retry_attempts} started")
        if self._event_logger is not None:
            self._event_logger.log_attempt_start(
                st.attempt_number, self.config.max_retry_attempts, ready)

        if not self._probe("is_network_online", True):
            log.warning("Network offline at attempt start")
            self._report_terminal(ErrorKind.NETWORK, OFFLINE_MESSAGE)
            return True

        self.health.start()

        if ready:
            # Document already complete; no load signal will come
            self._cancel(self._timeout_timer)
            self._timeout_timer = None
            self._enter_settling(attempt_id, self.config.ready_settle_delay)
        return True

    def on_completion_signal(self, attempt_id: int | None = None) -> bool:
        return self.handle(LoadEvent(Signal.COMPLETION, self._tag(attempt_id)))

    def on_error_signal(self, attempt_id: int | None = None) -> bool:
        return self.handle(LoadEvent(Signal.ERROR, self._tag(attempt_id)))

    def on_timeout_elapsed(self, attempt_id: int | None = None) -> bool:
        return self.handle(LoadEvent(Signal.TIMEOUT, self._tag(attempt_id)))

    def on_network_reconnect(self) -> bool:
        return self.handle(LoadEvent(Signal.NETWORK_UP))

    def on_network_disconnect(self) -> bool:
        return self.handle(LoadEvent(Signal.NETWORK_DOWN))

    def on_user_retry_request(self) -> bool:
        return self.handle(LoadEvent(Signal.USER_RETRY))

    def on_user_refresh_request(self):
        """Full host-page refresh requested from the error surface."""
        log.info("Page refresh requested")
        self._present("reload_page")
        self._reset_session("reload")

    def _reset_session(self, reason: str):
        """Discard the session: the next activate() starts over."""
        self._cancel_timers()
        self.health.stop(reason)
        self.state = LoadAttemptState()
        self._content_hidden = False
        self._session_started_at = None
        self._attempt_started_at = None
        self.attempt_timings = []
        self.last_snapshot_path = ""

    def teardown(self):
        """Surface torn down: drop every pending timer and the session state."""
        self._reset_session("teardown")

    # ── Event dispatch ──────────────────────────────────────────────────────

    def handle(self, event: LoadEvent) -> bool:
        """Apply one signal. Returns True if it caused a transition."""
        sig = event.signal
        if sig is Signal.COMPLETION:
            acted = self._is_current(event, Phase.LOADING) and self._on_completion(event.attempt)
        elif sig is Signal.ERROR:
            acted = self._is_current(event, Phase.LOADING) and self._on_error()
        elif sig is Signal.TIMEOUT:
            acted = self._is_current(event, Phase.LOADING) and self._on_timeout()
        elif sig is Signal.NETWORK_UP:
            acted = self._on_network_up()
        elif sig is Signal.NETWORK_DOWN:
            acted = self._on_network_down()
        elif sig is Signal.USER_RETRY:
            acted = self._on_user_retry()
        else:
            raise ValueError(f"Unhandled signal: {sig!r}")

        if self._event_logger is not None:
            self._event_logger.log_signal(sig.value, event.attempt, self.state.attempt_number, acted)
        return acted

    def _tag(self, attempt_id: int | None) -> int:
        return self._attempt_id if attempt_id is None else attempt_id

    def _is_current(self, event: LoadEvent, expected: Phase) -> bool:
        if event.attempt != self._attempt_id:
            log.debug(f"Discarding stale {event.signal.value} signal "
                      f"(attempt id {event.attempt}, current {self._attempt_id})")
            return False
        if self.state.phase is not expected:
            log.debug(f"Ignoring {event.signal.value} signal in phase {self.state.phase.value}")
            return False
        return True

    def _on_completion(self, attempt_id: int) -> bool:
        self._cancel(self._timeout_timer)
        self._timeout_timer = None
        log.debug(f"Load signal for attempt {self.state.attempt_number}, settling")
        self._enter_settling(attempt_id, self.config.settle_delay)
        return True

    def _on_error(self) -> bool:
        self._cancel(self._timeout_timer)
        self._timeout_timer = None
        log.warning(f"Surface reported a load error (attempt {self.state.attempt_number})")
        self._fail(ErrorKind.NETWORK, LOAD_ERROR_MESSAGE)
        return True

    def _on_timeout(self) -> bool:
        self._timeout_timer = None
        self.state.last_error_kind = ErrorKind.TIMEOUT
        log.warning(f"Load timed out after {self.config.load_timeout}s "
                    f"(attempt {self.state.attempt_number})")
        self._fail(ErrorKind.TIMEOUT, timeout_message(self.config.max_retry_attempts))
        return True

    def _on_network_up(self) -> bool:
        st = self.state
        if st.last_error_kind is not ErrorKind.NETWORK or st.loaded:
            return False
        log.info("Network reconnected, retrying with a fresh budget")
        st.reset_budget()
        self.schedule_retry()
        return True

    def _on_network_down(self) -> bool:
        if self.state.loaded or not self._probe("is_surface_visible", False):
            return False
        log.warning("Network connection lost")
        self._report_terminal(ErrorKind.NETWORK, DISCONNECTED_MESSAGE)
        return True

    def _on_user_retry(self) -> bool:
        log.info("User requested retry")
        self.state.reset_budget()
        self.state.loaded = False
        return self.begin_attempt()

    # ── Transitions ─────────────────────────────────────────────────────────

    def _enter_settling(self, attempt_id: int, delay: float):
        self.state.phase = Phase.SETTLING
        self._settle_timer = self.timers.call_later(
            delay, lambda: self._validate(attempt_id), "settle")

    def _validate(self, attempt_id: int):
        self._settle_timer = None
        if attempt_id != self._attempt_id or self.state.phase is not Phase.SETTLING:
            return
        surface = self._probe("get_surface", None)
        if surface is None:
            result = ValidationResult(False, "surface_missing")
        else:
            result = validate(surface, self.config.expected_domain)
        if result.ok:
            self._mark_loaded()
            return
        log.warning(f"Content validation failed: {result.reason} "
                    f"(attempt {self.state.attempt_number})")
        self._fail(ErrorKind.PERMISSION, VALIDATION_MESSAGE)

    def _fail(self, kind: ErrorKind, message: str):
        """Record a retryable failure; retry while budget remains, else give up."""
        st = self.state
        st.last_error_kind = kind
        self._record_attempt_timing()
        if st.attempt_number < self.config.max_retry_attempts:
            self.schedule_retry()
        else:
            self._report_terminal(kind, message, retries_exhausted=True)

    def schedule_retry(self):
        """Show the retry indicator, wait retry_delay, then reload the surface."""
        st = self.state
        self._cancel_timers()
        st.phase = Phase.RETRY_PENDING
        mx = self.config.max_retry_attempts
        kind = st.last_error_kind.value if st.last_error_kind else None
        log.info(f"Retrying load ({st.attempt_number}/{mx}) in {self.config.retry_delay}s "
                 f"after {kind} failure")
        self._present("show_loading_indicator", retrying_message(st.attempt_number, mx))
        if self._event_logger is not None:
            self._event_logger.log_retry_scheduled(st.attempt_number, mx, kind, self.config.retry_delay)
        self._retry_timer = self.timers.call_later(self.config.retry_delay, self._clear_surface, "retry")

    def _clear_surface(self):
        # Clear, then restore the locator so the frame fetches a fresh document
        self._retry_timer = None
        if self.state.phase is not Phase.RETRY_PENDING:
            return
        surface = self._probe("get_surface", None)
        if surface is None:
            self._report_terminal(ErrorKind.UNKNOWN, SURFACE_MISSING_MESSAGE)
            return
        try:
            locator = surface.src or self.config.embed_target
            surface.set_src("")
        except Exception as e:
            log.warning(f"Failed to clear surface locator: {e}")
            locator = self.config.embed_target
        self._retry_timer = self.timers.call_later(
            self.config.reload_gap, lambda: self._restore_surface(surface, locator), "reload")

    def _restore_surface(self, surface, locator: str):
        self._retry_timer = None
        if self.state.phase is not Phase.RETRY_PENDING:
            return
        try:
            surface.set_src(locator)
        except Exception as e:
            log.warning(f"Failed to restore surface locator: {e}")
        self.begin_attempt()

    def _mark_loaded(self):
        st = self.state
        self._cancel_timers()
        attempt = st.attempt_number
        attempt_duration = self._record_attempt_timing()
        session_duration = self.timers.now() - (self._session_started_at or self.timers.now())
        st.loaded = True
        st.phase = Phase.LOADED
        st.reset_budget()
        self._present("hide_loading_indicator")
        self._present("hide_error_surface")
        self._show_content()
        log.info(f"Embedded report loaded (attempt {attempt}, {attempt_duration:.1f}s)")
        if self._event_logger is not None:
            self._event_logger.log_load_success(attempt, attempt_duration, session_duration)

    def _report_terminal(self, kind: ErrorKind, message: str, retries_exhausted: bool = False):
        st = self.state
        self._cancel_timers()
        st.last_error_kind = kind
        st.phase = Phase.FAILED
        self._present("hide_loading_indicator")
        self._present("show_error_surface", message, kind)
        self._present("hide_content_surface")
        self._content_hidden = True
        log.error(f"Embed load failed ({kind.value}): {message}")

        snapshot_path = ""
        if self.config.failure_snapshot_dir:
            snapshot = capture_failure_snapshot(
                self.host, self.config, st, kind.value, message,
                attempt_timings=self.attempt_timings,
                session_elapsed=self.timers.now() - (self._session_started_at or self.timers.now()),
                health_stats=self.health.stats,
            )
            snapshot_path = save_failure_snapshot(snapshot, self.config.failure_snapshot_dir)
            self.last_snapshot_path = snapshot_path
        if self._event_logger is not None:
            self._event_logger.log_terminal_failure(
                st.attempt_number, kind.value, message, retries_exhausted, snapshot_path)

    # ── Helpers ─────────────────────────────────────────────────────────────

    def _record_attempt_timing(self) -> float:
        if self._attempt_started_at is None:
            return 0.0
        duration = self.timers.now() - self._attempt_started_at
        self.attempt_timings.append(round(duration, 3))
        self._attempt_started_at = None
        return duration

    @staticmethod
    def _cancel(handle):
        if handle is not None:
            handle.cancel()

    def _cancel_timers(self):
        for handle in (self._timeout_timer, self._settle_timer, self._retry_timer):
            self._cancel(handle)
        self._timeout_timer = None
        self._settle_timer = None
        self._retry_timer = None

    def _show_content(self):
        self._content_hidden = False
        self._present("reveal_content_surface")

    def _present(self, method: str, *args):
        """Call a presentation method on the host. Host failures are logged, never raised."""
        try:
            getattr(self.host, method)(*args)
        except Exception as e:
            log.warning(f"Host {method} failed: {e}")

    def _probe(self, method: str, default):
        try:
            return getattr(self.host, method)()
        except Exception as e:
            log.warning(f"Host {method} failed: {e}")
            return default
