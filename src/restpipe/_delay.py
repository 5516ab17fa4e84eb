"""Abortable waits."""
from __future__ import annotations

import asyncio
import math
from typing import Any, Callable, TypeVar

from restpipe.errors import AbortError
from restpipe.timer import Timer, get_default_timer
from restpipe.types.config import AbortSignal
from restpipe.types.response import PipelineResponse

T = TypeVar("T")

STANDARD_ABORT_MESSAGE = "The operation was aborted."

Resolve = Callable[[Any], None]
Reject = Callable[[BaseException], None]


def create_abortable_future(
    build: Callable[[Resolve, Reject], None],
    *,
    abort_signal: AbortSignal | None = None,
    abort_message: str | None = None,
    cleanup_before_abort: Callable[[], None] | None = None,
) -> asyncio.Future[Any]:
    """Return a future settled by *build*, or failed with AbortError on abort.

    *build* receives ``resolve`` and ``reject`` callbacks. The abort listener
    is removed as soon as the future settles, whichever way it settles.
    """
    loop = asyncio.get_running_loop()
    future: asyncio.Future[Any] = loop.create_future()
    message = abort_message or STANDARD_ABORT_MESSAGE

    if abort_signal is not None and abort_signal.aborted:
        future.set_exception(AbortError(message))
        return future

    def remove_listener() -> None:
        if abort_signal is not None:
            abort_signal.remove_listener(on_abort)

    def on_abort() -> None:
        if cleanup_before_abort is not None:
            cleanup_before_abort()
        remove_listener()
        if not future.done():
            future.set_exception(AbortError(message))

    def resolve(value: Any) -> None:
        remove_listener()
        if not future.done():
            future.set_result(value)

    def reject(exc: BaseException) -> None:
        remove_listener()
        if not future.done():
            future.set_exception(exc)

    # Also covers the future being cancelled by the task awaiting it.
    future.add_done_callback(lambda _: remove_listener())

    try:
        build(resolve, reject)
    except Exception as exc:
        reject(exc)
        return future

    if abort_signal is not None and not future.done():
        abort_signal.add_listener(on_abort)
    return future


async def delay(
    delay_ms: float,
    value: T | None = None,
    *,
    abort_signal: AbortSignal | None = None,
    abort_message: str | None = None,
    timer: Timer | None = None,
) -> T | None:
    """Wait *delay_ms* milliseconds, then return *value*.

    Raises AbortError without scheduling anything when *abort_signal* is
    already aborted, and cancels the pending timer when it fires mid-wait.
    """
    timer = timer or get_default_timer()
    handle: Any = None

    def build(resolve: Resolve, reject: Reject) -> None:
        nonlocal handle
        handle = timer.schedule(max(0.0, delay_ms) / 1000.0, lambda: resolve(value))

    def cancel_timer() -> None:
        if handle is not None:
            timer.cancel(handle)

    future = create_abortable_future(
        build,
        abort_signal=abort_signal,
        abort_message=abort_message,
        cleanup_before_abort=cancel_timer,
    )
    try:
        return await future
    except asyncio.CancelledError:
        cancel_timer()
        raise


def parse_header_value_as_number(response: PipelineResponse, header_name: str) -> float | None:
    """Return the header value as a number, or None when missing or not numeric."""
    value = response.headers.get(header_name)
    if not value:
        return None
    try:
        number = float(value.strip())
    except ValueError:
        return None
    if not math.isfinite(number):
        return None
    return number
