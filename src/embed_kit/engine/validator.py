"""Post-load content validation.

Runs after the settling delay that follows a load signal. A load signal only
means the frame finished its load sequence; it says nothing about whether the
report itself arrived.
"""
import logging
from dataclasses import dataclass
from typing import Any
from urllib.parse import urlparse

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class ValidationResult:
    ok: bool
    reason: str = ""

    def __bool__(self):
        return self.ok


def locator_matches_domain(locator: str, expected_domain: str) -> bool:
    """True if the locator's host is expected_domain or one of its subdomains."""
    if not locator or not expected_domain:
        return False
    try:
        host = (urlparse(locator).hostname or "").lower()
    except ValueError:
        return False
    domain = expected_domain.lower().lstrip(".")
    return host == domain or host.endswith("." + domain)


def validate(surface: Any, expected_domain: str) -> ValidationResult:
    """Check that the frame context is reachable and points at the expected domain.

    Pure and synchronous. Collaborator exceptions count as a failed check.
    """
    try:
        if not surface.has_context():
            return ValidationResult(False, "context_unreachable")
    except Exception as e:
        log.debug(f"validate: context probe failed: {e}")
        return ValidationResult(False, "context_unreachable")

    try:
        locator = surface.src
    except Exception as e:
        log.debug(f"validate: locator read failed: {e}")
        return ValidationResult(False, "locator_unreadable")
    if not locator_matches_domain(locator, expected_domain):
        return ValidationResult(False, "locator_mismatch")

    return ValidationResult(True)


def check_ready(surface: Any) -> bool:
    """Readiness probe: context reachable and document complete. Never raises."""
    if surface is None:
        return False
    try:
        return bool(surface.has_context() and surface.is_ready())
    except Exception as e:
        log.debug(f"check_ready: probe failed: {e}")
        return False
