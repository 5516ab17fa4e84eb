"""restpipe: composable HTTP request pipeline with retries and cancellation."""
from __future__ import annotations

from restpipe._version import __version__

# Types
from restpipe.types.headers import HttpHeaders
from restpipe.types.config import (
    AbortController,
    AbortSignal,
    PipelineOptions,
    RetryOptions,
    ThrottlingOptions,
)
from restpipe.types.request import PipelineRequest, create_pipeline_request
from restpipe.types.response import PipelineResponse
from restpipe.types.outcome import Outcome

# Errors
from restpipe.errors import (
    PipelineError,
    RestError,
    TransportError,
    RetryBudgetExceededError,
    AbortError,
    ConfigurationError,
    PipelineUsageError,
    get_error_message,
)

# Timing
from restpipe.timer import LoopTimer, Timer
from restpipe._delay import create_abortable_future, delay

# Pipeline
from restpipe.pipeline import FunctionPolicy, Pipeline, PipelinePolicy, SendRequest, policy
from restpipe.transport import HttpClient, HttpxTransport, StubResponse, StubTransport

# Retry
from restpipe.retry import (
    ExponentialRetryStrategy,
    RetryDecision,
    RetryPolicy,
    RetryState,
    RetryStrategy,
    ThrottlingRetryStrategy,
    default_retry_policy,
    exponential_retry_policy,
    exponential_retry_strategy,
    retry_policy,
    system_error_retry_policy,
    system_error_retry_strategy,
    throttling_retry_policy,
    throttling_retry_strategy,
)

# Policies
from restpipe.policies import log_policy, set_client_request_id_policy, user_agent_policy

# Client
from restpipe.defaults import create_pipeline_from_options
from restpipe.client import PipelineClient

__all__ = [
    "__version__",
    # Types
    "HttpHeaders",
    "AbortController",
    "AbortSignal",
    "PipelineOptions",
    "RetryOptions",
    "ThrottlingOptions",
    "PipelineRequest",
    "create_pipeline_request",
    "PipelineResponse",
    "Outcome",
    # Errors
    "PipelineError",
    "RestError",
    "TransportError",
    "RetryBudgetExceededError",
    "AbortError",
    "ConfigurationError",
    "PipelineUsageError",
    "get_error_message",
    # Timing
    "LoopTimer",
    "Timer",
    "create_abortable_future",
    "delay",
    # Pipeline
    "FunctionPolicy",
    "Pipeline",
    "PipelinePolicy",
    "SendRequest",
    "policy",
    "HttpClient",
    "HttpxTransport",
    "StubResponse",
    "StubTransport",
    # Retry
    "ExponentialRetryStrategy",
    "RetryDecision",
    "RetryPolicy",
    "RetryState",
    "RetryStrategy",
    "ThrottlingRetryStrategy",
    "default_retry_policy",
    "exponential_retry_policy",
    "exponential_retry_strategy",
    "retry_policy",
    "system_error_retry_policy",
    "system_error_retry_strategy",
    "throttling_retry_policy",
    "throttling_retry_strategy",
    # Policies
    "log_policy",
    "set_client_request_id_policy",
    "user_agent_policy",
    # Client
    "create_pipeline_from_options",
    "PipelineClient",
]
