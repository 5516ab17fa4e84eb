"""Tests for restpipe.types.config."""
from __future__ import annotations

import pytest

from restpipe.errors import ConfigurationError
from restpipe.types.config import (
    AbortController,
    AbortSignal,
    PipelineOptions,
    RetryOptions,
    ThrottlingOptions,
)


# ---------------------------------------------------------------------------
# RetryOptions
# ---------------------------------------------------------------------------


class TestRetryOptions:
    def test_defaults(self) -> None:
        o = RetryOptions()
        assert o.max_retries == 3
        assert o.retry_delay_in_ms == 1000
        assert o.max_retry_delay_in_ms == 64000
        assert o.ignore_system_errors is False
        assert o.ignore_http_status_codes is False
        assert o.jitter == (0.8, 1.2)
        assert o.retryable_status_codes == {408, 429, 500, 502, 503, 504}
        assert "ECONNRESET" in o.system_error_codes

    def test_is_frozen(self) -> None:
        o = RetryOptions()
        with pytest.raises(AttributeError):
            o.max_retries = 5  # type: ignore[misc]

    def test_negative_max_retries_rejected(self) -> None:
        with pytest.raises(ConfigurationError):
            RetryOptions(max_retries=-1)

    def test_negative_delay_rejected(self) -> None:
        with pytest.raises(ConfigurationError):
            RetryOptions(retry_delay_in_ms=-5)

    def test_inverted_jitter_rejected(self) -> None:
        with pytest.raises(ConfigurationError):
            RetryOptions(jitter=(1.2, 0.8))


def test_throttling_defaults() -> None:
    o = ThrottlingOptions()
    assert o.max_retry_after_in_ms == 180_000
    assert o.max_retries == 3


# ---------------------------------------------------------------------------
# PipelineOptions.from_env
# ---------------------------------------------------------------------------


class TestFromEnv:
    def test_defaults_when_unset(self, monkeypatch: pytest.MonkeyPatch) -> None:
        for name in (
            "RESTPIPE_MAX_RETRIES",
            "RESTPIPE_RETRY_DELAY_MS",
            "RESTPIPE_MAX_RETRY_DELAY_MS",
            "RESTPIPE_MAX_RETRY_AFTER_MS",
            "RESTPIPE_USER_AGENT_PREFIX",
        ):
            monkeypatch.delenv(name, raising=False)
        o = PipelineOptions.from_env()
        assert o.retry == RetryOptions()
        assert o.throttling == ThrottlingOptions()
        assert o.user_agent_prefix is None

    def test_reads_variables(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("RESTPIPE_MAX_RETRIES", "5")
        monkeypatch.setenv("RESTPIPE_RETRY_DELAY_MS", "250")
        monkeypatch.setenv("RESTPIPE_MAX_RETRY_DELAY_MS", "4000")
        monkeypatch.setenv("RESTPIPE_MAX_RETRY_AFTER_MS", "9000")
        monkeypatch.setenv("RESTPIPE_USER_AGENT_PREFIX", "myapp/1.0")
        o = PipelineOptions.from_env()
        assert o.retry.max_retries == 5
        assert o.retry.retry_delay_in_ms == 250
        assert o.retry.max_retry_delay_in_ms == 4000
        assert o.throttling.max_retry_after_in_ms == 9000
        assert o.throttling.max_retries == 5
        assert o.user_agent_prefix == "myapp/1.0"

    def test_invalid_integer(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("RESTPIPE_MAX_RETRIES", "lots")
        with pytest.raises(ConfigurationError, match="RESTPIPE_MAX_RETRIES"):
            PipelineOptions.from_env()


# ---------------------------------------------------------------------------
# AbortSignal / AbortController
# ---------------------------------------------------------------------------


class TestAbortSignal:
    def test_initially_not_aborted(self) -> None:
        assert AbortSignal().aborted is False

    def test_controller_aborts_signal(self) -> None:
        c = AbortController()
        c.abort("shutting down")
        assert c.signal.aborted is True
        assert c.signal.reason == "shutting down"

    def test_listeners_called_once(self) -> None:
        c = AbortController()
        calls: list[str] = []
        c.signal.add_listener(lambda: calls.append("a"))
        c.signal.add_listener(lambda: calls.append("b"))
        c.abort()
        c.abort()
        assert calls == ["a", "b"]
        assert c.signal.listener_count == 0

    def test_removed_listener_not_called(self) -> None:
        c = AbortController()
        calls: list[int] = []

        def listener() -> None:
            calls.append(1)

        c.signal.add_listener(listener)
        c.signal.remove_listener(listener)
        c.signal.remove_listener(listener)
        c.abort()
        assert calls == []
