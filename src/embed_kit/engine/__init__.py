"""engine: load orchestration, validation, and health monitoring."""
from .errors import ErrorKind, EmbedLoadError  # noqa: F401
from .state import LoadAttemptState, LoadEvent, Phase, Signal  # noqa: F401
from .timers import TimerQueue, TimerHandle  # noqa: F401
from .validator import ValidationResult, validate, check_ready  # noqa: F401
from .messages import ErrorPresentation, describe_error  # noqa: F401
from .health import HealthMonitor  # noqa: F401
from .failure_snapshot import FailureSnapshot, capture_failure_snapshot, save_failure_snapshot  # noqa: F401
from .orchestrator import LoadOrchestrator  # noqa: F401
