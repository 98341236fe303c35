"""Tests for ErrorKind, EmbedLoadError and failure messaging."""
import pytest

from embed_kit.engine.errors import EmbedLoadError, ErrorKind
from embed_kit.engine.messages import describe_error, retrying_message, timeout_message


def test_kind_values():
    assert ErrorKind.NETWORK.value == "network"
    assert ErrorKind.TIMEOUT.value == "timeout"
    assert ErrorKind.PERMISSION.value == "permission"
    assert ErrorKind.UNKNOWN.value == "unknown"


def test_load_error_with_message():
    err = EmbedLoadError(ErrorKind.TIMEOUT, "took too long")
    assert err.kind == ErrorKind.TIMEOUT
    assert str(err) == "took too long"


def test_load_error_default_message():
    err = EmbedLoadError(ErrorKind.PERMISSION)
    assert str(err) == "permission"


def test_load_error_is_exception():
    with pytest.raises(EmbedLoadError) as exc_info:
        raise EmbedLoadError(ErrorKind.NETWORK, "offline")
    assert exc_info.value.kind == ErrorKind.NETWORK


def test_timeout_message_names_attempt_count():
    assert "after 3 attempts" in timeout_message(3)
    assert "after 5 attempts" in timeout_message(5)


def test_retrying_message():
    assert retrying_message(2, 3) == "Load failed, retrying... (2/3)"


@pytest.mark.parametrize("kind", list(ErrorKind))
def test_every_kind_has_a_presentation(kind):
    presentation = describe_error(kind)
    assert presentation.hint
    assert presentation.allow_refresh


def test_permission_offers_no_retry():
    assert describe_error(ErrorKind.PERMISSION).retry_label is None
    assert describe_error(ErrorKind.TIMEOUT).retry_label == "Reload"
    assert describe_error(ErrorKind.NETWORK).retry_label == "Retry"


def test_describe_error_rejects_unknown_values():
    with pytest.raises(ValueError):
        describe_error("network")
