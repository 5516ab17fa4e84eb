"""Configuration types."""
from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Callable

from restpipe.errors import ConfigurationError

DEFAULT_RETRY_POLICY_COUNT = 3

RETRYABLE_STATUS_CODES = frozenset({408, 429, 500, 502, 503, 504})
SYSTEM_ERROR_CODES = frozenset(
    {"ETIMEDOUT", "ESOCKETTIMEDOUT", "ECONNREFUSED", "ECONNRESET", "ENOENT", "ENOTFOUND"}
)


@dataclass(frozen=True)
class RetryOptions:
    """Configuration for exponential retry behaviour."""

    max_retries: int = DEFAULT_RETRY_POLICY_COUNT
    retry_delay_in_ms: int = 1000
    max_retry_delay_in_ms: int = 64000
    ignore_system_errors: bool = False
    ignore_http_status_codes: bool = False
    jitter: tuple[float, float] = (0.8, 1.2)
    retryable_status_codes: frozenset[int] = RETRYABLE_STATUS_CODES
    system_error_codes: frozenset[str] = SYSTEM_ERROR_CODES

    def __post_init__(self) -> None:
        if self.max_retries < 0:
            raise ConfigurationError(f"max_retries must be >= 0, got {self.max_retries}")
        if self.retry_delay_in_ms < 0 or self.max_retry_delay_in_ms < 0:
            raise ConfigurationError("retry delays must be non-negative")
        low, high = self.jitter
        if low < 0 or high < low:
            raise ConfigurationError(f"invalid jitter range: {self.jitter}")


@dataclass(frozen=True)
class ThrottlingOptions:
    """Configuration for honouring server Retry-After hints."""

    max_retries: int = DEFAULT_RETRY_POLICY_COUNT
    max_retry_after_in_ms: int = 180_000


@dataclass(frozen=True)
class PipelineOptions:
    """Options used to build the default pipeline."""

    retry: RetryOptions = field(default_factory=RetryOptions)
    throttling: ThrottlingOptions = field(default_factory=ThrottlingOptions)
    user_agent_prefix: str | None = None
    request_id_header_name: str = "x-ms-client-request-id"
    allowed_header_names: tuple[str, ...] = ()

    @classmethod
    def from_env(cls) -> PipelineOptions:
        """Build options from ``RESTPIPE_*`` environment variables.

        Unset variables keep their defaults.
        """
        defaults = RetryOptions()
        retry = RetryOptions(
            max_retries=_env_int("RESTPIPE_MAX_RETRIES", defaults.max_retries),
            retry_delay_in_ms=_env_int("RESTPIPE_RETRY_DELAY_MS", defaults.retry_delay_in_ms),
            max_retry_delay_in_ms=_env_int(
                "RESTPIPE_MAX_RETRY_DELAY_MS", defaults.max_retry_delay_in_ms
            ),
        )
        throttling = ThrottlingOptions(
            max_retries=retry.max_retries,
            max_retry_after_in_ms=_env_int(
                "RESTPIPE_MAX_RETRY_AFTER_MS", ThrottlingOptions().max_retry_after_in_ms
            ),
        )
        return cls(
            retry=retry,
            throttling=throttling,
            user_agent_prefix=os.environ.get("RESTPIPE_USER_AGENT_PREFIX") or None,
        )


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}") from None


class AbortSignal:
    """An observable flag indicating whether an operation has been aborted.

    Once aborted it stays aborted. Listeners registered with
    :meth:`add_listener` run once, in registration order, when the signal
    fires.
    """

    def __init__(self) -> None:
        self._aborted = False
        self._reason: str | None = None
        self._listeners: list[Callable[[], None]] = []

    @property
    def aborted(self) -> bool:
        return self._aborted

    @property
    def reason(self) -> str | None:
        return self._reason

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    def add_listener(self, listener: Callable[[], None]) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: Callable[[], None]) -> None:
        try:
            self._listeners.remove(listener)
        except ValueError:
            pass

    def _abort(self, reason: str | None = None) -> None:
        if self._aborted:
            return
        self._aborted = True
        self._reason = reason
        listeners, self._listeners = self._listeners, []
        for listener in listeners:
            listener()


class AbortController:
    """Controls an :class:`AbortSignal` to cancel an in-flight operation."""

    def __init__(self) -> None:
        self.signal = AbortSignal()

    def abort(self, reason: str | None = None) -> None:
        self.signal._abort(reason)
