"""Tests for failure snapshot capture and save."""
import json
import os
import tempfile
from unittest.mock import MagicMock, PropertyMock

from embed_kit.config import EmbedConfig
from embed_kit.engine.errors import ErrorKind
from embed_kit.engine.failure_snapshot import (
    FailureSnapshot,
    capture_failure_snapshot,
    save_failure_snapshot,
)
from embed_kit.engine.state import LoadAttemptState, Phase

from conftest import TARGET, FakeHost


def _failed_state(attempt=3):
    return LoadAttemptState(attempt_number=attempt, last_error_kind=ErrorKind.TIMEOUT,
                            phase=Phase.FAILED)


def test_capture_surface_state():
    host = FakeHost()
    host.surface.ready = True
    config = EmbedConfig(embed_target=TARGET)

    snapshot = capture_failure_snapshot(
        host, config, _failed_state(), "timeout", "took too long",
        attempt_timings=[10.0, 10.0, 10.0], session_elapsed=35.0,
        health_stats={"ticks": 5},
    )

    assert snapshot.target == TARGET
    assert snapshot.error_kind == "timeout"
    assert snapshot.attempt_number == 3
    assert snapshot.max_retry_attempts == 3
    assert snapshot.phase == "failed"
    assert snapshot.surface_present is True
    assert snapshot.surface_src == TARGET
    assert snapshot.surface_reachable is True
    assert snapshot.surface_ready is True
    assert snapshot.network_online is True
    assert snapshot.attempt_timings == [10.0, 10.0, 10.0]
    assert snapshot.health_stats == {"ticks": 5}


def test_capture_missing_surface():
    host = FakeHost()
    host.surface = None
    snapshot = capture_failure_snapshot(
        host, EmbedConfig(embed_target=TARGET), _failed_state(0), "unknown", "missing")
    assert snapshot.surface_present is False
    assert snapshot.surface_src == ""


def test_capture_never_raises():
    """capture_failure_snapshot should never raise, even with a broken host."""
    surface = MagicMock()
    type(surface).src = PropertyMock(side_effect=RuntimeError("detached"))
    surface.has_context.side_effect = RuntimeError("detached")
    surface.is_ready.side_effect = RuntimeError("detached")

    host = MagicMock()
    host.get_surface.return_value = surface
    host.is_network_online.side_effect = RuntimeError("closed")

    snapshot = capture_failure_snapshot(
        host, EmbedConfig(embed_target=TARGET), _failed_state(), "network", "gone")
    assert snapshot.surface_present is True
    assert snapshot.surface_reachable is False
    assert snapshot.network_online is None


def test_save_and_load():
    snapshot = FailureSnapshot(target=TARGET, error_kind="permission", message="denied",
                               attempt_number=2, attempt_timings=[2.0, 2.0])

    with tempfile.TemporaryDirectory() as tmpdir:
        path = save_failure_snapshot(snapshot, base_dir=tmpdir)
        assert path.endswith("_attempt2.json")
        assert os.path.dirname(path) == os.path.join(tmpdir, "permission")

        with open(path) as f:
            data = json.load(f)

    assert data["target"] == TARGET
    assert data["error_kind"] == "permission"
    assert data["message"] == "denied"
    assert data["attempt_timings"] == [2.0, 2.0]
    assert "timestamp" in data


def test_save_failure_returns_empty_path():
    snapshot = FailureSnapshot(target=TARGET, error_kind="timeout", message="x")
    with tempfile.TemporaryDirectory() as tmpdir:
        blocker = os.path.join(tmpdir, "file")
        with open(blocker, "w") as f:
            f.write("x")
        assert save_failure_snapshot(snapshot, base_dir=blocker) == ""


def test_orchestrator_saves_snapshot_on_terminal_failure(make_orchestrator, clock, timers):
    with tempfile.TemporaryDirectory() as tmpdir:
        orch = make_orchestrator(failure_snapshot_dir=tmpdir, max_retry_attempts=1)
        orch.begin_attempt()
        clock.run(timers, 10.0)
        assert orch.phase is Phase.FAILED
        assert orch.last_snapshot_path.startswith(os.path.join(tmpdir, "timeout"))

        with open(orch.last_snapshot_path) as f:
            data = json.load(f)
    assert data["attempt_number"] == 1
    assert data["phase"] == "failed"
    assert data["attempt_timings"] == [10.0]
    assert data["health_stats"]["running"] is True


def test_no_snapshot_without_directory(make_orchestrator, clock, timers):
    orch = make_orchestrator(max_retry_attempts=1)
    orch.begin_attempt()
    clock.run(timers, 10.0)
    assert orch.phase is Phase.FAILED
    assert orch.last_snapshot_path == ""
