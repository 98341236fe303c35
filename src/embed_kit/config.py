"""Immutable load configuration for one embedded report.

All values are runtime-injected; nothing is derived from package location.
Durations are in seconds.
"""
import ipaddress
import logging
import math
from dataclasses import dataclass, fields
from urllib.parse import urlparse

log = logging.getLogger(__name__)


def _safe_float(val, default: float) -> float:
    try:
        f = float(val)
        if math.isfinite(f):
            return f
    except (TypeError, ValueError):
        pass
    return default


def _safe_int(value, default: int = 0) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


# Second-level labels under country-code TLDs that act as public suffixes
# ("example.co.uk"). Not a public suffix list: pass expected_domain explicitly
# for hosts this does not cover.
_SECOND_LEVEL = {"ac", "co", "com", "edu", "gov", "net", "org"}


def registrable_domain(locator: str) -> str:
    """Best-effort registrable domain of the locator's host.

    "app.powerbi.com" -> "powerbi.com", "x.example.co.uk" -> "example.co.uk".
    IP literals are returned whole.
    """
    try:
        host = urlparse(locator).hostname or ""
    except ValueError:
        return ""
    try:
        ipaddress.ip_address(host)
        return host
    except ValueError:
        pass
    labels = [p for p in host.split(".") if p]
    if len(labels) >= 3 and len(labels[-1]) == 2 and labels[-2] in _SECOND_LEVEL:
        return ".".join(labels[-3:])
    return ".".join(labels[-2:])


@dataclass(frozen=True)
class EmbedConfig:
    """Load parameters for an embedded report. Defaults match the reference setup."""
    embed_target: str
    load_timeout: float = 10.0
    max_retry_attempts: int = 3
    retry_delay: float = 2.0
    settle_delay: float = 2.0           # after the load signal
    ready_settle_delay: float = 1.0     # document already complete at attempt start
    reload_gap: float = 0.5             # between clearing and restoring the locator
    health_interval: float = 2.0
    health_duration: float = 30.0
    expected_domain: str = ""
    failure_snapshot_dir: str = ""

    def __post_init__(self):
        if not self.expected_domain:
            object.__setattr__(self, "expected_domain", registrable_domain(self.embed_target))
        if self.max_retry_attempts < 1:
            raise ValueError("max_retry_attempts must be at least 1")
        if self.load_timeout <= 0:
            raise ValueError("load_timeout must be positive")

    @classmethod
    def from_dict(cls, data: dict) -> "EmbedConfig":
        """Build a config from loosely-typed input (e.g. parsed JSON or env strings).

        Unknown keys are ignored; unparseable values fall back to the defaults.
        """
        target = str(data.get("embed_target") or "")
        if not target:
            raise ValueError("embed_target is required")
        defaults = cls(embed_target=target)
        kwargs = {"embed_target": target}
        for f in fields(cls):
            if f.name == "embed_target" or f.name not in data:
                continue
            current = getattr(defaults, f.name)
            raw = data[f.name]
            if isinstance(current, int):
                kwargs[f.name] = _safe_int(raw, current)
            elif isinstance(current, float):
                kwargs[f.name] = _safe_float(raw, current)
            else:
                kwargs[f.name] = str(raw or "")
        unknown = set(data) - {f.name for f in fields(cls)}
        if unknown:
            log.debug(f"EmbedConfig: ignoring unknown keys {sorted(unknown)}")
        return cls(**kwargs)

    def as_dict(self) -> dict:
        return {f.name: getattr(self, f.name) for f in fields(self)}
