"""Shared fakes: a manual clock, an in-memory host page and its frame."""
import pytest

from embed_kit.config import EmbedConfig
from embed_kit.engine.orchestrator import LoadOrchestrator
from embed_kit.engine.timers import TimerQueue

TARGET = "https://app.powerbi.com/reportEmbed?reportId=d79fa9cc&autoAuth=true"


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now

    def run(self, timers, seconds):
        """Advance time, firing every timer that comes due along the way in order."""
        target = self.now + seconds
        while True:
            deadline = timers.next_deadline()
            if deadline is None or deadline > target:
                break
            self.now = max(self.now, deadline)
            timers.fire_due()
        self.now = target


class FakeSurface:
    def __init__(self, src=TARGET):
        self.src = src
        self.context = True
        self.ready = False
        self.subscriptions = []
        self.src_history = []

    def set_src(self, locator):
        self.src_history.append(locator)
        self.src = locator

    def has_context(self):
        return self.context

    def is_ready(self):
        return self.ready

    def subscribe(self, on_load, on_error):
        self.subscriptions.append((on_load, on_error))

    def fire_load(self):
        self.subscriptions[-1][0]()

    def fire_error(self):
        self.subscriptions[-1][1]()


class FakeHost:
    def __init__(self, surface=None):
        self.surface = surface if surface is not None else FakeSurface()
        self.visible = True
        self.online = True
        self.content_hidden = False
        self.calls = []
        self.on_online = None
        self.on_offline = None

    def _record(self, name, *args):
        self.calls.append((name, *args))

    def call_names(self):
        return [c[0] for c in self.calls]

    def last_error(self):
        errors = [c for c in self.calls if c[0] == "show_error_surface"]
        return errors[-1] if errors else None

    def show_loading_indicator(self, message=None):
        self._record("show_loading_indicator", message)

    def hide_loading_indicator(self):
        self._record("hide_loading_indicator")

    def show_error_surface(self, message, error_kind):
        self._record("show_error_surface", message, error_kind)

    def hide_error_surface(self):
        self._record("hide_error_surface")

    def reveal_content_surface(self):
        self.content_hidden = False
        self._record("reveal_content_surface")

    def hide_content_surface(self):
        self.content_hidden = True
        self._record("hide_content_surface")

    def reload_page(self):
        self._record("reload_page")

    def get_surface(self):
        return self.surface

    def is_surface_visible(self):
        return self.visible

    def is_network_online(self):
        return self.online

    def is_content_hidden(self):
        return self.content_hidden

    def subscribe_network(self, on_online, on_offline):
        self.on_online = on_online
        self.on_offline = on_offline


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def timers(clock):
    return TimerQueue(clock=clock)


@pytest.fixture
def surface():
    return FakeSurface()


@pytest.fixture
def host(surface):
    return FakeHost(surface)


@pytest.fixture
def make_orchestrator(timers, host):
    def _make(event_logger=None, **overrides):
        config = EmbedConfig(embed_target=TARGET, **overrides)
        return LoadOrchestrator(config, host, timers, event_logger=event_logger)
    return _make
