"""Request types."""
from __future__ import annotations

import uuid
from dataclasses import dataclass, field

from restpipe.types.config import AbortSignal
from restpipe.types.headers import HeadersInit, HttpHeaders

RequestBody = bytes | str | None


def _new_request_id() -> str:
    return str(uuid.uuid4())


@dataclass(eq=False)
class PipelineRequest:
    """An outbound HTTP request flowing through the pipeline.

    The same instance is resent on every attempt, so ``request_id`` stays
    stable and ``body`` must be replayable.
    """

    url: str
    method: str = "GET"
    headers: HttpHeaders = field(default_factory=HttpHeaders)
    body: RequestBody = None
    timeout: float = 0.0
    request_id: str = field(default_factory=_new_request_id)
    abort_signal: AbortSignal | None = None

    def __post_init__(self) -> None:
        self.method = self.method.upper()
        if not isinstance(self.headers, HttpHeaders):
            self.headers = HttpHeaders(self.headers)
        if not self.request_id:
            self.request_id = _new_request_id()


def create_pipeline_request(
    url: str,
    *,
    method: str = "GET",
    headers: HeadersInit = None,
    body: RequestBody = None,
    timeout: float = 0.0,
    request_id: str | None = None,
    abort_signal: AbortSignal | None = None,
) -> PipelineRequest:
    """Create a request, filling in defaults for everything not given."""
    return PipelineRequest(
        url=url,
        method=method,
        headers=HttpHeaders(headers),
        body=body,
        timeout=timeout,
        request_id=request_id or _new_request_id(),
        abort_signal=abort_signal,
    )
