"""User-facing failure messages and the actions offered with them."""
from dataclasses import dataclass

from .errors import ErrorKind

SURFACE_MISSING_MESSAGE = "System error: the report container could not be found."
OFFLINE_MESSAGE = "Network error: please check your network connection."
DISCONNECTED_MESSAGE = "The network connection was lost. Please check your connection."
LOAD_ERROR_MESSAGE = "Load error: the report failed to load."
VALIDATION_MESSAGE = "Validation error: the report content could not be loaded correctly."
LOADING_MESSAGE = "Loading report, please wait..."


def timeout_message(max_attempts: int) -> str:
    return (f"Load timed out: the report took too long to load after {max_attempts} attempts. "
            "Check your network connection or try again later.")


def retrying_message(attempt: int, max_attempts: int) -> str:
    return f"Load failed, retrying... ({attempt}/{max_attempts})"


@dataclass(frozen=True)
class ErrorPresentation:
    """What to show alongside a terminal failure message."""
    hint: str
    retry_label: str | None     # None: no retry button for this kind
    allow_refresh: bool = True


def describe_error(kind: ErrorKind) -> ErrorPresentation:
    """Map an error kind to its hint text and available actions."""
    if kind is ErrorKind.NETWORK:
        return ErrorPresentation(
            hint="Make sure your network connection works, or try again later.",
            retry_label="Retry",
        )
    if kind is ErrorKind.TIMEOUT:
        return ErrorPresentation(
            hint="Loading took too long; the network may be slow or the server busy.",
            retry_label="Reload",
        )
    if kind is ErrorKind.PERMISSION:
        # Access problems are not fixed by retrying in place.
        return ErrorPresentation(
            hint="You may need to sign in to the report provider or ask an administrator for access.",
            retry_label=None,
        )
    if kind is ErrorKind.UNKNOWN:
        return ErrorPresentation(
            hint="If the problem persists, contact technical support.",
            retry_label="Retry",
        )
    raise ValueError(f"Unhandled error kind: {kind!r}")
