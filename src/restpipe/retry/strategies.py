"""Retry strategies: decide whether and when an attempt is retried.

Every strategy exposes ``decide(request, outcome, state)`` and returns a
:class:`RetryDecision`, or ``None`` when it has no opinion on the outcome.
Strategies never raise.
"""
from __future__ import annotations

import random
from dataclasses import dataclass, field, replace
from typing import Protocol, runtime_checkable

from restpipe._delay import parse_header_value_as_number
from restpipe.errors import AbortError, RestError
from restpipe.retry.state import RetryDecision, RetryState
from restpipe.types.config import RetryOptions, ThrottlingOptions
from restpipe.types.outcome import Outcome
from restpipe.types.request import PipelineRequest
from restpipe.types.response import PipelineResponse

# Checked in order; the first parseable header wins.
RETRY_AFTER_MS_HEADERS = ("retry-after-ms", "x-ms-retry-after-ms")
RETRY_AFTER_SECONDS_HEADER = "Retry-After"


@runtime_checkable
class RetryStrategy(Protocol):
    """Decision contract shared by every strategy."""

    @property
    def name(self) -> str:
        ...

    def decide(
        self, request: PipelineRequest, outcome: Outcome, state: RetryState
    ) -> RetryDecision | None:
        ...


def calculate_retry_delay(retry_number: int, options: RetryOptions) -> float:
    """Compute the jittered exponential delay in milliseconds.

    *retry_number* starts at 1 for the first retry.
    """
    exponential = options.retry_delay_in_ms * (2 ** max(0, retry_number - 1))
    clamped = min(options.max_retry_delay_in_ms, exponential)
    low, high = options.jitter
    return min(options.max_retry_delay_in_ms, clamped * random.uniform(low, high))


def is_system_error(outcome: Outcome, options: RetryOptions) -> bool:
    error = outcome.error
    return isinstance(error, RestError) and error.code in options.system_error_codes


@dataclass(frozen=True)
class ExponentialRetryStrategy:
    """Retry transport failures and retryable statuses with exponential backoff."""

    options: RetryOptions = field(default_factory=RetryOptions)
    name: str = "exponentialRetryStrategy"

    def decide(
        self, request: PipelineRequest, outcome: Outcome, state: RetryState
    ) -> RetryDecision | None:
        error = outcome.error
        if isinstance(error, AbortError):
            return RetryDecision.no_retry(error)

        if is_system_error(outcome, self.options):
            if self.options.ignore_system_errors:
                return None
            return RetryDecision.retry(calculate_retry_delay(state.attempts, self.options))

        status = outcome.status
        if status is not None and status in self.options.retryable_status_codes:
            if self.options.ignore_http_status_codes:
                return None
            return RetryDecision.retry(calculate_retry_delay(state.attempts, self.options))

        if error is not None:
            return RetryDecision.no_retry(error)
        return None


@dataclass(frozen=True)
class ThrottlingRetryStrategy:
    """Honour the wait a server asks for on 429 responses."""

    options: ThrottlingOptions = field(default_factory=ThrottlingOptions)
    name: str = "throttlingRetryStrategy"

    def decide(
        self, request: PipelineRequest, outcome: Outcome, state: RetryState
    ) -> RetryDecision | None:
        response = outcome.effective_response
        if response is None or response.status != 429:
            return None
        retry_after_ms = get_retry_after_in_ms(response)
        if retry_after_ms is None:
            return None
        return RetryDecision.retry(
            min(retry_after_ms, self.options.max_retry_after_in_ms), server_hint=True
        )


def get_retry_after_in_ms(response: PipelineResponse) -> float | None:
    """Return the server's requested wait in milliseconds, if any.

    Negative values are treated as missing.
    """
    for header in RETRY_AFTER_MS_HEADERS:
        value = parse_header_value_as_number(response, header)
        if value is not None:
            return value if value >= 0 else None

    seconds = parse_header_value_as_number(response, RETRY_AFTER_SECONDS_HEADER)
    if seconds is not None:
        return seconds * 1000 if seconds >= 0 else None
    return None


def exponential_retry_strategy(options: RetryOptions | None = None) -> ExponentialRetryStrategy:
    return ExponentialRetryStrategy(options=options or RetryOptions())


def system_error_retry_strategy(options: RetryOptions | None = None) -> ExponentialRetryStrategy:
    """Exponential strategy that only retries transport-level failures."""
    base = options or RetryOptions()
    return ExponentialRetryStrategy(
        options=replace(base, ignore_http_status_codes=True, ignore_system_errors=False),
        name="systemErrorRetryStrategy",
    )


def throttling_retry_strategy(options: ThrottlingOptions | None = None) -> ThrottlingRetryStrategy:
    return ThrottlingRetryStrategy(options=options or ThrottlingOptions())
