"""Error hierarchy for the request pipeline."""
from __future__ import annotations

import asyncio
import errno
import json
import socket
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from restpipe.types.request import PipelineRequest
    from restpipe.types.response import PipelineResponse


class PipelineError(Exception):
    """Base error for all restpipe errors.

    ``attempts`` is filled in by the retry policy when the error ends a
    request, and stays None otherwise.
    """

    def __init__(self, message: str, *, cause: BaseException | None = None) -> None:
        super().__init__(message)
        self.cause = cause
        self.attempts: int | None = None


class RestError(PipelineError):
    """A request sent through the pipeline failed."""

    # The request could not be sent (DNS failure, connection lost, ...).
    REQUEST_SEND_ERROR = "REQUEST_SEND_ERROR"
    # The response could not be parsed.
    PARSE_ERROR = "PARSE_ERROR"

    def __init__(
        self,
        message: str,
        *,
        code: str | None = None,
        status_code: int | None = None,
        request: PipelineRequest | None = None,
        response: PipelineResponse | None = None,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(message, cause=cause)
        self.code = code
        self.status_code = status_code
        self.request = request
        self.response = response

    def __repr__(self) -> str:
        # Request and response are left out: their headers may hold secrets.
        return (
            f"{type(self).__name__}({str(self)!r}, code={self.code!r}, "
            f"status_code={self.status_code!r})"
        )


class TransportError(RestError):
    """A connection-level failure (reset, DNS, timeout, TLS handshake)."""

    def __init__(self, message: str, *, code: str = RestError.REQUEST_SEND_ERROR, **kwargs: Any) -> None:
        super().__init__(message, code=code, **kwargs)


class RetryBudgetExceededError(RestError):
    """Every allowed attempt was made and the last outcome was still retryable."""

    def __init__(self, message: str, *, attempts: int, **kwargs: Any) -> None:
        super().__init__(message, **kwargs)
        self.attempts = attempts


class AbortError(PipelineError):
    """The operation was aborted through its abort signal."""


class ConfigurationError(PipelineError):
    """Invalid pipeline or client configuration."""


class PipelineUsageError(PipelineError):
    """A policy misused its continuation."""


def get_error_message(exc: object) -> str:
    """Return a readable message for anything caught by an ``except`` clause."""
    if isinstance(exc, BaseException):
        return str(exc) or type(exc).__name__
    try:
        stringified = json.dumps(exc) if isinstance(exc, (dict, list)) else str(exc)
    except (TypeError, ValueError):
        stringified = "[unable to stringify input]"
    return f"Unknown error {stringified}"


def to_pipeline_error(exc: Exception) -> PipelineError:
    """Normalise an exception raised below the retry policy.

    Pipeline errors pass through unchanged. Socket-level failures become
    :class:`TransportError` carrying their system error code; anything else
    becomes a :class:`RestError` with ``REQUEST_SEND_ERROR``.
    """
    if isinstance(exc, PipelineError):
        return exc
    message = get_error_message(exc)
    error: PipelineError
    if isinstance(exc, socket.gaierror):
        error = TransportError(message, code="ENOTFOUND", cause=exc)
    elif isinstance(exc, (TimeoutError, asyncio.TimeoutError)):
        error = TransportError(message, code="ETIMEDOUT", cause=exc)
    elif isinstance(exc, OSError) and exc.errno in errno.errorcode:
        error = TransportError(message, code=errno.errorcode[exc.errno], cause=exc)
    else:
        error = RestError(message, code=RestError.REQUEST_SEND_ERROR, cause=exc)
    error.__cause__ = exc
    return error
