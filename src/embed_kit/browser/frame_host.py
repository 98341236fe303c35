"""Playwright-backed EmbedHost over a host page containing the report iframe.

Frame and window events reach Python through an exposed function (the
"bridge"): the page calls it on iframe load/error, window online/offline and
error-surface button clicks. Callbacks fire while the sync Playwright event
loop is being pumped (see ``embed_kit.browser.pump``).

Selectors are runtime-injected; nothing here knows about a specific report
provider.
"""
import logging
from typing import Any, Callable

from ..engine.errors import ErrorKind
from ..engine.messages import describe_error

log = logging.getLogger(__name__)

BRIDGE_NAME = "__embedKitSignal"

_INSTALL_JS = """
([selector, bridge]) => {
    const frame = document.querySelector(selector);
    if (!frame) return false;
    if (frame.dataset.embedKitBridge) return true;
    frame.dataset.embedKitBridge = "1";
    frame.addEventListener("load", () => window[bridge]("load"));
    frame.addEventListener("error", () => window[bridge]("error"));
    if (!window.__embedKitNetwork) {
        window.__embedKitNetwork = true;
        window.addEventListener("online", () => window[bridge]("online"));
        window.addEventListener("offline", () => window[bridge]("offline"));
    }
    return true;
}
"""

_FRAME_SRC_JS = """
(selector) => {
    const el = document.querySelector(selector);
    return el ? (el.getAttribute("src") || "") : "";
}
"""

_SET_SRC_JS = """
([selector, src]) => {
    const el = document.querySelector(selector);
    if (el) el.src = src || "about:blank";
}
"""

_HAS_CONTEXT_JS = """
(selector) => {
    const el = document.querySelector(selector);
    return !!(el && el.contentWindow);
}
"""

_IS_READY_JS = """
(selector) => {
    const el = document.querySelector(selector);
    try {
        return !!(el && el.contentDocument && el.contentDocument.readyState === "complete");
    } catch (e) {
        return false;
    }
}
"""

_SET_STYLE_JS = """
([selector, prop, value]) => {
    const el = document.querySelector(selector);
    if (el) el.style[prop] = value;
}
"""

_SHOW_LOADING_JS = """
([selector, message]) => {
    const el = document.querySelector(selector);
    if (!el) return;
    if (message) {
        const p = el.querySelector("p");
        if (p) p.textContent = message;
    }
    el.style.display = "flex";
}
"""

_SHOW_ERROR_JS = """
([selector, bridge, message, hint, retryLabel, allowRefresh]) => {
    const el = document.querySelector(selector);
    if (!el) return;
    el.replaceChildren();
    const main = document.createElement("p");
    main.className = "error-main-text";
    main.textContent = message;
    el.appendChild(main);
    if (hint) {
        const info = document.createElement("p");
        info.className = "error-additional-info";
        info.textContent = hint;
        el.appendChild(info);
    }
    const actions = document.createElement("div");
    actions.className = "error-actions";
    if (retryLabel) {
        const retry = document.createElement("button");
        retry.className = "retry-button";
        retry.textContent = retryLabel;
        retry.addEventListener("click", () => window[bridge]("retry"));
        actions.appendChild(retry);
    }
    if (allowRefresh) {
        const refresh = document.createElement("button");
        refresh.className = "refresh-button";
        refresh.textContent = "Refresh page";
        refresh.addEventListener("click", () => window[bridge]("refresh"));
        actions.appendChild(refresh);
    }
    el.appendChild(actions);
    el.style.display = "block";
}
"""

_IS_HIDDEN_JS = """
(selector) => {
    const el = document.querySelector(selector);
    return !!el && el.style.opacity === "0";
}
"""


class FrameSurface:
    """EmbedSurface over one iframe element.

    The browser reports load/error per element, not per document, so a late
    event from a superseded document cannot be told apart once a new attempt
    has subscribed. Changing the locator drops the current subscription:
    events arriving between a retry's clear and the next subscribe are ignored.
    """

    def __init__(self, page: Any, selector: str):
        self._page = page
        self._selector = selector
        self._on_load: Callable[[], None] | None = None
        self._on_error: Callable[[], None] | None = None

    @property
    def src(self) -> str:
        return self._page.evaluate(_FRAME_SRC_JS, self._selector)

    def set_src(self, locator: str) -> None:
        self._on_load = None
        self._on_error = None
        self._page.evaluate(_SET_SRC_JS, [self._selector, locator])

    def has_context(self) -> bool:
        return bool(self._page.evaluate(_HAS_CONTEXT_JS, self._selector))

    def is_ready(self) -> bool:
        return bool(self._page.evaluate(_IS_READY_JS, self._selector))

    def subscribe(self, on_load: Callable[[], None], on_error: Callable[[], None]) -> None:
        self._on_load = on_load
        self._on_error = on_error

    def dispatch(self, kind: str):
        """Route a bridge notification to the current subscriber."""
        if kind == "load":
            src = self.src
            if not src or src == "about:blank":
                # The cleared frame finishing its blank load during a retry
                log.debug("FrameSurface: ignoring load of cleared frame")
                return
            callback = self._on_load
        else:
            callback = self._on_error
        if callback is not None:
            callback()


class PlaywrightEmbedHost:
    """EmbedHost implementation driving a live Playwright page."""

    def __init__(
        self,
        page: Any,
        *,
        frame_selector: str = ".embed-frame",
        container_selector: str = "#embed",
        loading_selector: str = ".loading-overlay",
        error_selector: str = ".error-message",
    ):
        self._page = page
        self._frame_selector = frame_selector
        self._container_selector = container_selector
        self._loading_selector = loading_selector
        self._error_selector = error_selector
        self._surface = FrameSurface(page, frame_selector)
        self._on_online: Callable[[], None] | None = None
        self._on_offline: Callable[[], None] | None = None
        self._on_retry: Callable[[], None] | None = None
        self._on_refresh: Callable[[], None] | None = None
        self._exposed = False

    def install(self) -> bool:
        """Expose the bridge function and attach frame/window listeners.

        Returns False if the frame is not on the page yet.
        """
        if not self._exposed:
            self._page.expose_function(BRIDGE_NAME, self._on_bridge)
            self._exposed = True
        installed = bool(self._page.evaluate(_INSTALL_JS, [self._frame_selector, BRIDGE_NAME]))
        log.debug(f"PlaywrightEmbedHost: bridge installed={installed}")
        return installed

    def bind_actions(self, on_retry: Callable[[], None], on_refresh: Callable[[], None]):
        """Route error-surface button clicks."""
        self._on_retry = on_retry
        self._on_refresh = on_refresh

    def _on_bridge(self, kind: str):
        """Bridge entry point. Never lets an exception reach Playwright's dispatcher."""
        try:
            if kind in ("load", "error"):
                self._surface.dispatch(kind)
                return
            callback = {
                "online": self._on_online,
                "offline": self._on_offline,
                "retry": self._on_retry,
                "refresh": self._on_refresh,
            }.get(kind)
            if callback is None:
                log.debug(f"PlaywrightEmbedHost: unhandled bridge signal {kind!r}")
                return
            callback()
        except Exception as e:
            log.warning(f"PlaywrightEmbedHost: bridge handler error for {kind!r}: {e}")

    # ── Presentation ────────────────────────────────────────────────────────

    def _set_style(self, selector: str, prop: str, value: str):
        self._page.evaluate(_SET_STYLE_JS, [selector, prop, value])

    def show_loading_indicator(self, message: str | None = None) -> None:
        self._page.evaluate(_SHOW_LOADING_JS, [self._loading_selector, message or ""])

    def hide_loading_indicator(self) -> None:
        self._set_style(self._loading_selector, "display", "none")

    def show_error_surface(self, message: str, error_kind: ErrorKind) -> None:
        presentation = describe_error(error_kind)
        self._page.evaluate(_SHOW_ERROR_JS, [
            self._error_selector, BRIDGE_NAME, message, presentation.hint,
            presentation.retry_label or "", presentation.allow_refresh,
        ])

    def hide_error_surface(self) -> None:
        self._set_style(self._error_selector, "display", "none")

    def reveal_content_surface(self) -> None:
        self._set_style(self._frame_selector, "opacity", "1")

    def hide_content_surface(self) -> None:
        self._set_style(self._frame_selector, "opacity", "0")

    def reload_page(self) -> None:
        self._page.reload()
        self.install()

    # ── Probes ──────────────────────────────────────────────────────────────

    def get_surface(self) -> FrameSurface | None:
        if self._page.query_selector(self._frame_selector) is None:
            return None
        return self._surface

    def is_surface_visible(self) -> bool:
        return bool(self._page.is_visible(self._container_selector))

    def is_network_online(self) -> bool:
        return bool(self._page.evaluate("() => navigator.onLine"))

    def is_content_hidden(self) -> bool:
        return bool(self._page.evaluate(_IS_HIDDEN_JS, self._frame_selector))

    def subscribe_network(self, on_online: Callable[[], None], on_offline: Callable[[], None]) -> None:
        self._on_online = on_online
        self._on_offline = on_offline
