"""Client facade: a transport plus a pipeline composed once."""
from __future__ import annotations

from restpipe.defaults import create_pipeline_from_options
from restpipe.pipeline import Pipeline
from restpipe.transport import HttpClient, HttpxTransport
from restpipe.types.config import AbortSignal, PipelineOptions
from restpipe.types.headers import HeadersInit
from restpipe.types.request import PipelineRequest, RequestBody, create_pipeline_request
from restpipe.types.response import PipelineResponse


class PipelineClient:
    """Sends requests through a fixed pipeline.

    The chain is composed when the client is created and reused for every
    request; build a new client to change it.
    """

    def __init__(
        self,
        transport: HttpClient | None = None,
        pipeline: Pipeline | None = None,
        options: PipelineOptions | None = None,
    ) -> None:
        self._transport = transport or HttpxTransport()
        self._pipeline = pipeline if pipeline is not None else create_pipeline_from_options(options)
        self._send = self._pipeline.compose(self._transport)

    @classmethod
    def from_env(cls, *, transport: HttpClient | None = None) -> PipelineClient:
        """Create a client whose default pipeline is configured from ``RESTPIPE_*`` variables."""
        return cls(transport=transport, options=PipelineOptions.from_env())

    @property
    def pipeline(self) -> Pipeline:
        return self._pipeline

    @property
    def transport(self) -> HttpClient:
        return self._transport

    async def send(self, request: PipelineRequest) -> PipelineResponse:
        """Send a request through the middleware chain."""
        return await self._send(request)

    async def request(
        self,
        method: str,
        url: str,
        *,
        headers: HeadersInit = None,
        body: RequestBody = None,
        timeout: float = 0.0,
        abort_signal: AbortSignal | None = None,
    ) -> PipelineResponse:
        return await self.send(
            create_pipeline_request(
                url,
                method=method,
                headers=headers,
                body=body,
                timeout=timeout,
                abort_signal=abort_signal,
            )
        )

    async def aclose(self) -> None:
        """Close the transport if it holds connections."""
        if hasattr(self._transport, "aclose"):
            await self._transport.aclose()

    async def __aenter__(self) -> PipelineClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()
