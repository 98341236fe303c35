"""Per-session load state and the typed events that drive it."""
from dataclasses import dataclass
from enum import Enum

from .errors import ErrorKind


class Phase(Enum):
    IDLE = "idle"
    LOADING = "loading"                 # attempt in flight, timeout armed
    SETTLING = "settling"               # load signal seen, waiting to validate
    RETRY_PENDING = "retry_pending"
    LOADED = "loaded"
    FAILED = "failed"                   # terminal until user action or reconnect


IN_FLIGHT = frozenset({Phase.LOADING, Phase.SETTLING, Phase.RETRY_PENDING})


class Signal(Enum):
    COMPLETION = "completion"
    ERROR = "error"
    TIMEOUT = "timeout"
    NETWORK_UP = "network_up"
    NETWORK_DOWN = "network_down"
    USER_RETRY = "user_retry"


@dataclass(frozen=True)
class LoadEvent:
    """A signal tagged with the attempt it belongs to.

    ``attempt`` is None for session-wide signals (network, user retry).
    """
    signal: Signal
    attempt: int | None = None


@dataclass
class LoadAttemptState:
    """Mutable record for one tab-visit session. Owned by the orchestrator."""
    attempt_number: int = 0
    last_error_kind: ErrorKind | None = None
    loaded: bool = False
    phase: Phase = Phase.IDLE

    def reset_budget(self):
        self.attempt_number = 0

    def to_dict(self) -> dict:
        return {
            "attempt_number": self.attempt_number,
            "last_error_kind": self.last_error_kind.value if self.last_error_kind else None,
            "loaded": self.loaded,
            "phase": self.phase.value,
        }
