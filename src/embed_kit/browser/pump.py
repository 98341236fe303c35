"""Drive a TimerQueue while yielding to Playwright's event loop.

Uses page.wait_for_timeout() internally, which processes Playwright's event
loop so bridge callbacks fire. time.sleep() does NOT work.
"""
import logging
from dataclasses import dataclass
from typing import Any

from ..engine.state import Phase

log = logging.getLogger(__name__)

_SETTLED = (Phase.LOADED, Phase.FAILED)


@dataclass
class SettleResult:
    """Result from wait_until_settled()."""
    settled: bool = False
    loaded: bool = False
    phase: str = ""
    error_kind: str | None = None
    attempts: int = 0
    elapsed: float = 0.0


def _yield_to_page(page: Any, timers, remaining: float, poll_interval: int) -> bool:
    """Wait on the page until the next timer is due (capped). Returns False if the page is gone."""
    next_deadline = timers.next_deadline()
    wait = remaining
    if next_deadline is not None:
        wait = min(wait, max(next_deadline - timers.now(), 0.0))
    ms = min(poll_interval, max(int(wait * 1000), 1))
    try:
        page.wait_for_timeout(ms)
    except Exception as e:
        # Page may be closed/crashed
        log.debug(f"pump: page wait failed: {e}")
        return False
    return True


def pump(page: Any, timers, duration: float, poll_interval: int = 100) -> int:
    """Fire due timers for ``duration`` seconds. Returns the number of timers fired."""
    deadline = timers.now() + duration
    fired = 0
    while True:
        fired += timers.fire_due()
        remaining = deadline - timers.now()
        if remaining <= 0:
            break
        if not _yield_to_page(page, timers, remaining, poll_interval):
            break
    return fired


def wait_until_settled(page: Any, orchestrator, timeout: float = 120.0,
                       poll_interval: int = 100) -> SettleResult:
    """Pump until the orchestrator reaches LOADED or FAILED, or timeout elapses.

    A FAILED session can still recover (network reconnect), so callers that
    want to keep watching simply call this again.
    """
    timers = orchestrator.timers
    start = timers.now()
    deadline = start + timeout

    while True:
        timers.fire_due()
        if orchestrator.phase in _SETTLED:
            break
        remaining = deadline - timers.now()
        if remaining <= 0:
            break
        if not _yield_to_page(page, timers, remaining, poll_interval):
            break

    kind = orchestrator.get_last_error_kind()
    return SettleResult(
        settled=orchestrator.phase in _SETTLED,
        loaded=orchestrator.is_loaded(),
        phase=orchestrator.phase.value,
        error_kind=kind.value if kind else None,
        attempts=orchestrator.attempt_number,
        elapsed=timers.now() - start,
    )
