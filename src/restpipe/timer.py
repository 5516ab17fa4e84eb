"""Timer service used by the delay primitive."""
from __future__ import annotations

import asyncio
from typing import Any, Callable, Protocol, runtime_checkable


@runtime_checkable
class Timer(Protocol):
    """Schedules one-shot callbacks."""

    def schedule(self, delay_seconds: float, callback: Callable[[], None]) -> Any:
        """Run *callback* once after *delay_seconds* and return a handle."""
        ...

    def cancel(self, handle: Any) -> None:
        """Cancel a scheduled callback. Cancelling twice is a no-op."""
        ...


class LoopTimer:
    """Timer backed by the running asyncio event loop."""

    def schedule(
        self, delay_seconds: float, callback: Callable[[], None]
    ) -> asyncio.TimerHandle:
        loop = asyncio.get_running_loop()
        return loop.call_later(max(0.0, delay_seconds), callback)

    def cancel(self, handle: asyncio.TimerHandle) -> None:
        handle.cancel()


_default_timer: Timer = LoopTimer()


def get_default_timer() -> Timer:
    return _default_timer
