"""Smoke tests: public modules are importable."""


def test_package_imports():
    from embed_kit import (
        EmbedConfig,
        EmbedHost,
        EmbedSurface,
        ErrorKind,
        EmbedLoadError,
        LoadOrchestrator,
        TimerQueue,
    )
    assert callable(EmbedConfig)
    assert callable(LoadOrchestrator)
    assert callable(TimerQueue)
    assert ErrorKind.TIMEOUT.value == "timeout"
    assert issubclass(EmbedLoadError, Exception)
    assert EmbedHost is not None and EmbedSurface is not None


def test_engine_imports():
    from embed_kit.engine import (
        HealthMonitor,
        LoadAttemptState,
        Phase,
        capture_failure_snapshot,
        describe_error,
        validate,
    )
    assert callable(HealthMonitor)
    assert callable(capture_failure_snapshot)
    assert callable(describe_error)
    assert callable(validate)
    assert LoadAttemptState().phase is Phase.IDLE


def test_browser_imports():
    from embed_kit.browser import (
        PlaywrightEmbedHost,
        FrameSurface,
        open_host_page,
        pump,
        wait_until_settled,
    )
    assert callable(PlaywrightEmbedHost)
    assert callable(FrameSurface)
    assert callable(open_host_page)
    assert callable(pump)
    assert callable(wait_until_settled)


def test_telemetry_imports():
    from embed_kit.telemetry import LoadEventLogger
    assert callable(LoadEventLogger)


def test_fakes_satisfy_protocols():
    from embed_kit.surface import EmbedHost, EmbedSurface
    from conftest import FakeHost, FakeSurface
    assert isinstance(FakeSurface(), EmbedSurface)
    assert isinstance(FakeHost(), EmbedHost)
