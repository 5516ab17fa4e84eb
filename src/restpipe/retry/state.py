"""Per-operation retry bookkeeping and strategy decisions."""
from __future__ import annotations

from dataclasses import dataclass

from restpipe.errors import PipelineError
from restpipe.types.outcome import Outcome


@dataclass
class RetryState:
    """Counters for one logical operation. Never shared between requests."""

    attempts: int = 0
    total_delay_ms: float = 0.0
    retry_after_ms: float = 0.0
    last_outcome: Outcome | None = None

    @property
    def retry_count(self) -> int:
        """Retries made so far; the first attempt is not a retry."""
        return max(0, self.attempts - 1)

    def record_retry_after(self, retry_after_ms: float) -> None:
        self.retry_after_ms = max(self.retry_after_ms, retry_after_ms)


@dataclass(frozen=True)
class RetryDecision:
    """What a strategy wants done after an attempt.

    Strategies return ``None`` instead when they have no opinion.
    """

    should_retry: bool
    retry_after_ms: float = 0.0
    error: PipelineError | None = None
    server_hint: bool = False

    @classmethod
    def retry(cls, after_ms: float, *, server_hint: bool = False) -> RetryDecision:
        return cls(should_retry=True, retry_after_ms=max(0.0, after_ms), server_hint=server_hint)

    @classmethod
    def no_retry(cls, error: PipelineError | None = None) -> RetryDecision:
        return cls(should_retry=False, error=error)
