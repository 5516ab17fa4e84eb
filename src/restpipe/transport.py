"""Transports: the terminal step of the pipeline that actually sends requests.

Transports never retry; retrying is the pipeline's job.
"""
from __future__ import annotations

import asyncio
import logging
import socket
from dataclasses import dataclass, field
from typing import Protocol, Union, runtime_checkable

import httpx

from restpipe._delay import STANDARD_ABORT_MESSAGE
from restpipe.errors import AbortError, RestError, TransportError
from restpipe.types.headers import HttpHeaders
from restpipe.types.request import PipelineRequest
from restpipe.types.response import PipelineResponse

logger = logging.getLogger("restpipe.transport")

_NAME_RESOLUTION_MARKERS = (
    "name or service not known",
    "nodename nor servname",
    "getaddrinfo failed",
    "temporary failure in name resolution",
    "no address associated",
)


@runtime_checkable
class HttpClient(Protocol):
    """Sends a single request and returns its response."""

    async def send_request(self, request: PipelineRequest) -> PipelineResponse:
        ...


class HttpxTransport:
    """Transport backed by :class:`httpx.AsyncClient`.

    Connection failures are mapped to :class:`TransportError` with a system
    error code so retry strategies can classify them. The send is abandoned
    with AbortError as soon as the request's abort signal fires.
    """

    def __init__(self, client: httpx.AsyncClient | None = None) -> None:
        self._client = client or httpx.AsyncClient()
        self._owns_client = client is None

    async def send_request(self, request: PipelineRequest) -> PipelineResponse:
        signal = request.abort_signal
        if signal is None:
            return await self._send(request)
        if signal.aborted:
            raise AbortError(STANDARD_ABORT_MESSAGE)

        task = asyncio.ensure_future(self._send(request))

        def on_abort() -> None:
            task.cancel()

        signal.add_listener(on_abort)
        try:
            return await task
        except asyncio.CancelledError:
            if signal.aborted:
                raise AbortError(STANDARD_ABORT_MESSAGE) from None
            raise
        finally:
            signal.remove_listener(on_abort)

    async def _send(self, request: PipelineRequest) -> PipelineResponse:
        timeout = request.timeout if request.timeout > 0 else httpx.USE_CLIENT_DEFAULT
        logger.debug("Sending %s %s", request.method, request.url)
        try:
            resp = await self._client.request(
                request.method,
                request.url,
                headers=list(request.headers.items()),
                content=request.body,
                timeout=timeout,
            )
        except httpx.TimeoutException as exc:
            raise TransportError(str(exc), code="ETIMEDOUT", request=request, cause=exc) from exc
        except httpx.ConnectError as exc:
            code = "ENOTFOUND" if _is_name_resolution_failure(exc) else "ECONNREFUSED"
            raise TransportError(str(exc), code=code, request=request, cause=exc) from exc
        except (httpx.ReadError, httpx.WriteError, httpx.RemoteProtocolError) as exc:
            raise TransportError(str(exc), code="ECONNRESET", request=request, cause=exc) from exc
        except httpx.TransportError as exc:
            raise TransportError(
                str(exc), code=RestError.REQUEST_SEND_ERROR, request=request, cause=exc
            ) from exc

        return PipelineResponse(
            status=resp.status_code,
            request=request,
            headers=HttpHeaders(resp.headers.multi_items()),
            body=resp.content,
        )

    async def aclose(self) -> None:
        """Close the underlying client if this transport created it."""
        if self._owns_client:
            await self._client.aclose()


def _is_name_resolution_failure(exc: BaseException) -> bool:
    seen: set[int] = set()
    current: BaseException | None = exc
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        if isinstance(current, socket.gaierror):
            return True
        message = str(current).lower()
        if any(marker in message for marker in _NAME_RESOLUTION_MARKERS):
            return True
        current = current.__cause__ or current.__context__
    return False


# ---------------------------------------------------------------------------
# In-memory transport
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class StubResponse:
    """A scripted reply for :class:`StubTransport`."""

    status: int = 200
    headers: dict[str, str] = field(default_factory=dict)
    body: bytes = b""


StubReply = Union[StubResponse, Exception]


class StubTransport:
    """In-memory transport for tests and offline use.

    Replies are handed out in order; once exhausted the last one repeats.
    Exceptions in the script are raised instead of returned. A request whose
    abort signal has fired is rejected with AbortError and not recorded.
    """

    def __init__(self, replies: list[StubReply] | None = None) -> None:
        self._replies = list(replies) if replies else [StubResponse()]
        self._idx = 0
        self.requests: list[PipelineRequest] = []
        self.sent_headers: list[HttpHeaders] = []

    @property
    def attempts(self) -> int:
        return len(self.requests)

    async def send_request(self, request: PipelineRequest) -> PipelineResponse:
        if request.abort_signal is not None and request.abort_signal.aborted:
            raise AbortError(STANDARD_ABORT_MESSAGE)
        self.requests.append(request)
        self.sent_headers.append(request.headers.copy())
        reply = self._replies[min(self._idx, len(self._replies) - 1)]
        self._idx += 1
        if isinstance(reply, Exception):
            raise reply
        return PipelineResponse(
            status=reply.status,
            request=request,
            headers=HttpHeaders(reply.headers),
            body=reply.body,
        )