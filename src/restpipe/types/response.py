"""Response types."""
from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any

from restpipe.types.headers import HttpHeaders
from restpipe.types.request import PipelineRequest


@dataclass(frozen=True)
class PipelineResponse:
    """A response received from the transport."""

    status: int
    request: PipelineRequest
    headers: HttpHeaders = field(default_factory=HttpHeaders)
    body: bytes = b""

    @property
    def text(self) -> str:
        return self.body.decode("utf-8", errors="replace")

    def json(self) -> Any:
        return json.loads(self.body)
