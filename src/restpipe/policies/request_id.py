"""Policy propagating the request identifier as a header."""
from __future__ import annotations

from restpipe.pipeline import SendRequest
from restpipe.types.request import PipelineRequest
from restpipe.types.response import PipelineResponse

DEFAULT_REQUEST_ID_HEADER = "x-ms-client-request-id"


class SetClientRequestIdPolicy:
    """Sends ``request.request_id`` in a header unless the caller set one.

    The id is generated once per request, so every retry carries the same
    value.
    """

    name = "setClientRequestIdPolicy"

    def __init__(self, header_name: str = DEFAULT_REQUEST_ID_HEADER) -> None:
        self.header_name = header_name

    async def handle(self, request: PipelineRequest, next_fn: SendRequest) -> PipelineResponse:
        if not request.headers.has(self.header_name):
            request.headers.set(self.header_name, request.request_id)
        return await next_fn(request)


def set_client_request_id_policy(
    header_name: str = DEFAULT_REQUEST_ID_HEADER,
) -> SetClientRequestIdPolicy:
    return SetClientRequestIdPolicy(header_name)
