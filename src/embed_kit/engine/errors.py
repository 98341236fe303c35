"""Normalized error kinds for embedded-content loading.

Every failure the orchestrator observes is classified into one of these kinds
so retry decisions and user-facing messaging work uniformly.
"""
from enum import Enum


class ErrorKind(Enum):
    """Closed set of load failure classifications."""
    NETWORK = "network"         # transport failure or known-offline
    TIMEOUT = "timeout"         # no load/error signal within the window
    PERMISSION = "permission"   # loaded but failed structural validation
    UNKNOWN = "unknown"         # catch-all, e.g. surface missing from the page


class EmbedLoadError(Exception):
    """Exception carrying a normalized ErrorKind."""

    def __init__(self, kind: ErrorKind, message: str = ""):
        self.kind = kind
        super().__init__(message or kind.value)
