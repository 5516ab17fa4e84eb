"""Retry strategies and the retry policy executor."""
from __future__ import annotations

from restpipe.retry.state import RetryDecision, RetryState
from restpipe.retry.strategies import (
    ExponentialRetryStrategy,
    RetryStrategy,
    ThrottlingRetryStrategy,
    calculate_retry_delay,
    exponential_retry_strategy,
    get_retry_after_in_ms,
    system_error_retry_strategy,
    throttling_retry_strategy,
)
from restpipe.retry.policy import (
    RetryPolicy,
    default_retry_policy,
    exponential_retry_policy,
    retry_policy,
    system_error_retry_policy,
    throttling_retry_policy,
)

__all__ = [
    "RetryDecision",
    "RetryState",
    "ExponentialRetryStrategy",
    "RetryStrategy",
    "ThrottlingRetryStrategy",
    "calculate_retry_delay",
    "exponential_retry_strategy",
    "get_retry_after_in_ms",
    "system_error_retry_strategy",
    "throttling_retry_strategy",
    "RetryPolicy",
    "default_retry_policy",
    "exponential_retry_policy",
    "retry_policy",
    "system_error_retry_policy",
    "throttling_retry_policy",
]
