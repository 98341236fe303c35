"""telemetry: structured JSONL event logging for load sessions."""
from .logger import LoadEventLogger  # noqa: F401
