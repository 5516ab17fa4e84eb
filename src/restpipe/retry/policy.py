"""Retry policy: drives the bounded retry loop around the rest of the pipeline."""
from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import replace

from restpipe._delay import delay
from restpipe.errors import (
    AbortError,
    ConfigurationError,
    RestError,
    RetryBudgetExceededError,
    to_pipeline_error,
)
from restpipe.pipeline import SendRequest
from restpipe.retry.state import RetryDecision, RetryState
from restpipe.retry.strategies import (
    RetryStrategy,
    exponential_retry_strategy,
    system_error_retry_strategy,
    throttling_retry_strategy,
)
from restpipe.timer import Timer
from restpipe.types.config import (
    DEFAULT_RETRY_POLICY_COUNT,
    RetryOptions,
    ThrottlingOptions,
)
from restpipe.types.outcome import Outcome
from restpipe.types.request import PipelineRequest
from restpipe.types.response import PipelineResponse

RETRY_ABORT_MESSAGE = "The retry operation was aborted."


class RetryPolicy:
    """Pipeline policy that resends a request while its strategies ask for it.

    Strategies are consulted in order after every attempt and the first one
    with an opinion wins; with no opinion the outcome is final. The same
    request object is resent, so its ``request_id`` is stable across
    attempts. At most ``max_retries + 1`` attempts are made, and the final
    error records how many were made in ``attempts``.
    """

    resends = True

    def __init__(
        self,
        strategies: Iterable[RetryStrategy],
        *,
        max_retries: int = DEFAULT_RETRY_POLICY_COUNT,
        name: str = "retryPolicy",
        timer: Timer | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        if max_retries < 0:
            raise ConfigurationError(f"max_retries must be >= 0, got {max_retries}")
        self._strategies = tuple(strategies)
        self._max_retries = max_retries
        self._name = name
        self._timer = timer
        self._log = logger or logging.getLogger("restpipe.retry")

    @property
    def name(self) -> str:
        return self._name

    @property
    def strategies(self) -> Sequence[RetryStrategy]:
        return self._strategies

    @property
    def max_retries(self) -> int:
        return self._max_retries

    async def handle(self, request: PipelineRequest, next_fn: SendRequest) -> PipelineResponse:
        state = RetryState()

        while True:
            state.attempts += 1
            self._log.debug(
                "Retry %d: attempting to send request %s", state.retry_count, request.request_id
            )
            response: PipelineResponse | None = None
            error = None
            try:
                response = await next_fn(request)
            except AbortError as exc:
                self._log.debug("Retry %d: request %s aborted", state.retry_count, request.request_id)
                exc.attempts = state.attempts
                raise
            except Exception as exc:
                error = to_pipeline_error(exc)
                self._log.debug(
                    "Retry %d: request %s failed: %s", state.retry_count, request.request_id, error
                )

            outcome = Outcome(response=response, error=error)
            state.last_outcome = outcome

            # Cancellation wins over any retry decision or the budget.
            if request.abort_signal is not None and request.abort_signal.aborted:
                self._log.debug("Retry %d: request %s aborted", state.retry_count, request.request_id)
                aborted = AbortError(RETRY_ABORT_MESSAGE, cause=error)
                aborted.attempts = state.attempts
                raise aborted

            decision = self._decide(request, outcome, state)

            if decision is None or not decision.should_retry:
                final = decision.error if decision is not None and decision.error is not None else error
                if final is not None:
                    final.attempts = state.attempts
                    raise final
                return response  # type: ignore[return-value]

            if state.retry_count >= self._max_retries:
                self._log.info(
                    "Maximum retries reached for request %s after %d attempts",
                    request.request_id,
                    state.attempts,
                )
                raise self._budget_exceeded(request, outcome, state)

            if decision.server_hint:
                state.record_retry_after(decision.retry_after_ms)
            state.total_delay_ms += decision.retry_after_ms
            self._log.info(
                "Retry %d: waiting %.0fms before resending request %s",
                state.retry_count + 1,
                decision.retry_after_ms,
                request.request_id,
            )
            try:
                await delay(
                    decision.retry_after_ms,
                    abort_signal=request.abort_signal,
                    abort_message=RETRY_ABORT_MESSAGE,
                    timer=self._timer,
                )
            except AbortError as exc:
                exc.attempts = state.attempts
                raise

    def _decide(
        self, request: PipelineRequest, outcome: Outcome, state: RetryState
    ) -> RetryDecision | None:
        self._log.debug("Retry %d: processing %d retry strategies", state.retry_count, len(self._strategies))
        if isinstance(outcome.error, AbortError):
            return RetryDecision.no_retry(outcome.error)
        for strategy in self._strategies:
            decision = strategy.decide(request, outcome, state)
            if decision is not None:
                self._log.debug(
                    "Retry %d: %s decided should_retry=%s",
                    state.retry_count,
                    strategy.name,
                    decision.should_retry,
                )
                return decision
        return None

    def _budget_exceeded(
        self, request: PipelineRequest, outcome: Outcome, state: RetryState
    ) -> RetryBudgetExceededError:
        cause = outcome.error
        if cause is None:
            cause = RestError(
                f"Unexpected status code: {outcome.status}",
                status_code=outcome.status,
                request=request,
                response=outcome.response,
            )
        code = cause.code if isinstance(cause, RestError) else None
        error = RetryBudgetExceededError(
            f"{request.method} {request.url} failed after {state.attempts} attempts: {cause}",
            attempts=state.attempts,
            code=code,
            status_code=outcome.status,
            request=request,
            response=outcome.effective_response,
            cause=cause,
        )
        error.__cause__ = cause
        return error


def retry_policy(
    strategies: Iterable[RetryStrategy],
    *,
    max_retries: int = DEFAULT_RETRY_POLICY_COUNT,
    name: str = "retryPolicy",
    timer: Timer | None = None,
) -> RetryPolicy:
    return RetryPolicy(strategies, max_retries=max_retries, name=name, timer=timer)


def default_retry_policy(
    options: RetryOptions | None = None,
    throttling: ThrottlingOptions | None = None,
    *,
    timer: Timer | None = None,
) -> RetryPolicy:
    """Throttling hints first, then exponential backoff for everything else."""
    options = options or RetryOptions()
    return RetryPolicy(
        [throttling_retry_strategy(throttling), exponential_retry_strategy(options)],
        max_retries=options.max_retries,
        name="defaultRetryPolicy",
        timer=timer,
    )


def exponential_retry_policy(
    options: RetryOptions | None = None, *, timer: Timer | None = None
) -> RetryPolicy:
    """Exponential backoff on retryable status codes only."""
    options = options or RetryOptions()
    return RetryPolicy(
        [exponential_retry_strategy(_replace_ignore_system_errors(options))],
        max_retries=options.max_retries,
        name="exponentialRetryPolicy",
        timer=timer,
    )


def system_error_retry_policy(
    options: RetryOptions | None = None, *, timer: Timer | None = None
) -> RetryPolicy:
    """Exponential backoff on transport failures (DNS, resets, timeouts) only."""
    options = options or RetryOptions()
    return RetryPolicy(
        [system_error_retry_strategy(options)],
        max_retries=options.max_retries,
        name="systemErrorRetryPolicy",
        timer=timer,
    )


def throttling_retry_policy(
    options: ThrottlingOptions | None = None, *, timer: Timer | None = None
) -> RetryPolicy:
    """Retry 429 responses that carry a Retry-After hint."""
    options = options or ThrottlingOptions()
    return RetryPolicy(
        [throttling_retry_strategy(options)],
        max_retries=options.max_retries,
        name="throttlingRetryPolicy",
        timer=timer,
    )


def _replace_ignore_system_errors(options: RetryOptions) -> RetryOptions:
    return replace(options, ignore_system_errors=True)
