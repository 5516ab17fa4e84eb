"""The result of a single attempt."""
from __future__ import annotations

from dataclasses import dataclass

from restpipe.errors import PipelineError, RestError
from restpipe.types.response import PipelineResponse


@dataclass(frozen=True)
class Outcome:
    """Either the response or the error produced by one attempt."""

    response: PipelineResponse | None = None
    error: PipelineError | None = None

    def __post_init__(self) -> None:
        if (self.response is None) == (self.error is None):
            raise ValueError("Outcome needs exactly one of response or error")

    @property
    def succeeded(self) -> bool:
        return self.response is not None

    @property
    def failed(self) -> bool:
        return self.error is not None

    @property
    def status(self) -> int | None:
        """Status code of the response, or of the error when it carries one."""
        if self.response is not None:
            return self.response.status
        if isinstance(self.error, RestError):
            return self.error.status_code
        return None

    @property
    def effective_response(self) -> PipelineResponse | None:
        """The response, or the one attached to a :class:`RestError`."""
        if self.response is not None:
            return self.response
        if isinstance(self.error, RestError):
            return self.error.response
        return None
