"""Tests for the command-line watcher."""
from contextlib import contextmanager
from unittest.mock import MagicMock, patch

import pytest

from embed_kit import cli

from conftest import TARGET


def test_parser_defaults():
    args = cli.build_parser().parse_args(["https://intranet.example.com/dash"])
    assert args.host_url == "https://intranet.example.com/dash"
    assert args.target == ""
    assert args.timeout == 10.0
    assert args.retries == 3
    assert args.retry_delay == 2.0
    assert args.frame_selector == ".embed-frame"
    assert args.headed is False
    assert args.wait == 120.0


def test_config_from_args():
    args = cli.build_parser().parse_args([
        "https://intranet.example.com/dash", "--timeout", "20", "--retries", "5",
        "--retry-delay", "1.5", "--failure-dir", "/tmp/failures",
    ])
    config = cli.config_from_args(args, TARGET)
    assert config.embed_target == TARGET
    assert config.load_timeout == 20.0
    assert config.max_retry_attempts == 5
    assert config.retry_delay == 1.5
    assert config.failure_snapshot_dir == "/tmp/failures"
    assert config.expected_domain == "powerbi.com"


def test_main_passes_parsed_args_to_run():
    with patch.object(cli, "run", return_value=0) as run:
        assert cli.main(["https://intranet.example.com/dash", "-v"]) == 0
    args = run.call_args[0][0]
    assert args.verbose is True


@contextmanager
def _fake_page(*args, **kwargs):
    yield MagicMock()


def test_run_fails_when_frame_missing():
    args = cli.build_parser().parse_args(["https://intranet.example.com/dash"])
    host = MagicMock()
    host.install.return_value = False
    with patch("playwright.sync_api.sync_playwright"), \
            patch("embed_kit.browser.open_host_page", _fake_page), \
            patch("embed_kit.browser.PlaywrightEmbedHost", return_value=host):
        assert cli.run(args) == 1


def test_run_fails_without_target():
    args = cli.build_parser().parse_args(["https://intranet.example.com/dash"])
    host = MagicMock()
    host.install.return_value = True
    host.get_surface.return_value.src = ""
    with patch("playwright.sync_api.sync_playwright"), \
            patch("embed_kit.browser.open_host_page", _fake_page), \
            patch("embed_kit.browser.PlaywrightEmbedHost", return_value=host):
        assert cli.run(args) == 1


@pytest.mark.parametrize("argv", [
    ["--retries", "0"],
    ["--retries", "-2"],
    ["--timeout", "0"],
    ["--timeout", "-1.5"],
    ["--timeout", "nan"],
])
def test_parser_rejects_invalid_budget(argv, capsys):
    with pytest.raises(SystemExit) as exc_info:
        cli.build_parser().parse_args(["https://intranet.example.com/dash", *argv])
    assert exc_info.value.code == 2
    assert f"argument {argv[0]}" in capsys.readouterr().err


def test_main_reports_invalid_retries_without_traceback():
    with patch.object(cli, "run") as run, pytest.raises(SystemExit) as exc_info:
        cli.main(["https://intranet.example.com/dash", "--retries", "0"])
    assert exc_info.value.code == 2
    run.assert_not_called()
