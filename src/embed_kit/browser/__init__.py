"""browser: Playwright host page integration.

Zero provider-specific dependencies; selectors are runtime-injected.
"""
from .frame_host import PlaywrightEmbedHost, FrameSurface, BRIDGE_NAME  # noqa: F401
from .pump import pump, wait_until_settled, SettleResult  # noqa: F401
from .session import open_host_page  # noqa: F401
