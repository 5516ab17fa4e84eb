"""Tests for restpipe.errors."""
from __future__ import annotations

import asyncio
import errno
import socket

import pytest

from restpipe.errors import (
    AbortError,
    ConfigurationError,
    PipelineError,
    PipelineUsageError,
    RestError,
    RetryBudgetExceededError,
    TransportError,
    get_error_message,
    to_pipeline_error,
)


# ---------------------------------------------------------------------------
# Hierarchy
# ---------------------------------------------------------------------------


class TestPipelineError:
    def test_is_exception(self) -> None:
        assert issubclass(PipelineError, Exception)

    def test_cause_default_none(self) -> None:
        assert PipelineError("boom").cause is None

    def test_cause_set(self) -> None:
        orig = ValueError("original")
        assert PipelineError("wrapped", cause=orig).cause is orig

    def test_attempts_default_none(self) -> None:
        assert PipelineError("boom").attempts is None


@pytest.mark.parametrize(
    "cls",
    [RestError, TransportError, RetryBudgetExceededError, AbortError, ConfigurationError, PipelineUsageError],
)
def test_subclasses_of_pipeline_error(cls: type) -> None:
    assert issubclass(cls, PipelineError)


class TestRestError:
    def test_defaults(self) -> None:
        err = RestError("fail")
        assert err.code is None
        assert err.status_code is None
        assert err.request is None
        assert err.response is None

    def test_repr_omits_request_and_response(self) -> None:
        err = RestError("fail", code="X", status_code=500)
        assert repr(err) == "RestError('fail', code='X', status_code=500)"

    def test_transport_error_default_code(self) -> None:
        assert TransportError("down").code == RestError.REQUEST_SEND_ERROR

    def test_budget_error_carries_attempts(self) -> None:
        err = RetryBudgetExceededError("gave up", attempts=4, status_code=503)
        assert err.attempts == 4
        assert err.status_code == 503
        assert isinstance(err, RestError)


# ---------------------------------------------------------------------------
# get_error_message
# ---------------------------------------------------------------------------


class TestGetErrorMessage:
    def test_exception_message(self) -> None:
        assert get_error_message(ValueError("bad")) == "bad"

    def test_exception_without_message_uses_type(self) -> None:
        assert get_error_message(KeyboardInterrupt()) == "KeyboardInterrupt"

    def test_dict_is_json(self) -> None:
        assert get_error_message({"a": 1}) == 'Unknown error {"a": 1}'

    def test_other_values(self) -> None:
        assert get_error_message(42) == "Unknown error 42"


# ---------------------------------------------------------------------------
# to_pipeline_error
# ---------------------------------------------------------------------------


class TestToPipelineError:
    def test_pipeline_errors_pass_through(self) -> None:
        err = AbortError("stop")
        assert to_pipeline_error(err) is err

    def test_connection_reset(self) -> None:
        exc = ConnectionResetError(errno.ECONNRESET, "reset by peer")
        err = to_pipeline_error(exc)
        assert isinstance(err, TransportError)
        assert err.code == "ECONNRESET"
        assert err.cause is exc
        assert err.__cause__ is exc

    def test_dns_failure(self) -> None:
        err = to_pipeline_error(socket.gaierror(-2, "Name or service not known"))
        assert isinstance(err, TransportError)
        assert err.code == "ENOTFOUND"

    def test_timeout(self) -> None:
        err = to_pipeline_error(TimeoutError())
        assert isinstance(err, TransportError)
        assert err.code == "ETIMEDOUT"

    def test_asyncio_timeout(self) -> None:
        err = to_pipeline_error(asyncio.TimeoutError())
        assert isinstance(err, TransportError)
        assert err.code == "ETIMEDOUT"

    def test_unknown_exception(self) -> None:
        exc = RuntimeError("oops")
        err = to_pipeline_error(exc)
        assert type(err) is RestError
        assert err.code == RestError.REQUEST_SEND_ERROR
        assert str(err) == "oops"
