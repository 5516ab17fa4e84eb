"""restpipe type definitions."""
from __future__ import annotations

from restpipe.types.headers import HttpHeaders
from restpipe.types.config import (
    AbortController,
    AbortSignal,
    PipelineOptions,
    RetryOptions,
    ThrottlingOptions,
)
from restpipe.types.request import PipelineRequest, create_pipeline_request
from restpipe.types.response import PipelineResponse
from restpipe.types.outcome import Outcome

__all__ = [
    # Headers
    "HttpHeaders",
    # Config
    "AbortController",
    "AbortSignal",
    "PipelineOptions",
    "RetryOptions",
    "ThrottlingOptions",
    # Request/Response
    "PipelineRequest",
    "create_pipeline_request",
    "PipelineResponse",
    "Outcome",
]
