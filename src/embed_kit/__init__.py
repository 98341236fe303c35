"""embed-kit: resilient loading for embedded third-party reports.

Provides a timer-driven load orchestrator with retry, timeout and network
handling, post-load content validation, a bounded health monitor, structured
event logging, and a Playwright-backed host page integration.
"""
from .config import EmbedConfig  # noqa: F401
from .surface import EmbedHost, EmbedSurface  # noqa: F401
from .engine.errors import ErrorKind, EmbedLoadError  # noqa: F401
from .engine.orchestrator import LoadOrchestrator  # noqa: F401
from .engine.timers import TimerQueue  # noqa: F401
