"""Protocols for the page that hosts an embedded report.

The orchestrator drives these methods; it never touches selectors, styles or
the embedded document directly. A browser-backed implementation lives in
``embed_kit.browser``; tests provide in-memory fakes.
"""
from typing import Callable, Protocol, runtime_checkable

from .engine.errors import ErrorKind


@runtime_checkable
class EmbedSurface(Protocol):
    """The frame element that hosts the remote report."""

    @property
    def src(self) -> str:
        """Locator currently assigned to the frame ("" when cleared)."""
        ...

    def set_src(self, locator: str) -> None:
        """Assign a new locator. An empty string unloads the current document."""
        ...

    def has_context(self) -> bool:
        """True if the frame's rendering context is reachable at all."""
        ...

    def is_ready(self) -> bool:
        """True if the frame document reports it has finished loading.

        Cross-origin documents usually answer False here.
        """
        ...

    def subscribe(self, on_load: Callable[[], None], on_error: Callable[[], None]) -> None:
        """Route the frame's next load/error notifications to these callbacks.

        Replaces any previous subscription.
        """
        ...


@runtime_checkable
class EmbedHost(Protocol):
    """Presentation and environment probes consumed by the orchestrator."""

    # ── Presentation ────────────────────────────────────────────────────────

    def show_loading_indicator(self, message: str | None = None) -> None:
        ...

    def hide_loading_indicator(self) -> None:
        ...

    def show_error_surface(self, message: str, error_kind: ErrorKind) -> None:
        ...

    def hide_error_surface(self) -> None:
        ...

    def reveal_content_surface(self) -> None:
        ...

    def hide_content_surface(self) -> None:
        ...

    def reload_page(self) -> None:
        """Full host-page refresh (the last-resort action on error surfaces)."""
        ...

    # ── Probes ──────────────────────────────────────────────────────────────

    def get_surface(self) -> EmbedSurface | None:
        """Return the frame, or None if it is missing from the page."""
        ...

    def is_surface_visible(self) -> bool:
        """True if the embedding session is the one currently shown to the user."""
        ...

    def is_network_online(self) -> bool:
        ...

    def is_content_hidden(self) -> bool:
        """True if the content surface was hidden because a failure was reported."""
        ...

    def subscribe_network(self, on_online: Callable[[], None], on_offline: Callable[[], None]) -> None:
        """Route connectivity changes to these callbacks. Called once per orchestrator."""
        ...
