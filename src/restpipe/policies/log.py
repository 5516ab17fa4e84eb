"""Policy logging every request and response, with secrets redacted."""
from __future__ import annotations

import logging
from collections.abc import Iterable
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from restpipe.pipeline import SendRequest
from restpipe.types.headers import HttpHeaders
from restpipe.types.request import PipelineRequest
from restpipe.types.response import PipelineResponse

REDACTED = "REDACTED"

DEFAULT_ALLOWED_HEADER_NAMES = (
    "x-ms-client-request-id",
    "x-ms-return-client-request-id",
    "x-ms-request-id",
    "x-ms-retry-after-ms",
    "client-request-id",
    "traceparent",
    "Accept",
    "Accept-Encoding",
    "Cache-Control",
    "Connection",
    "Content-Length",
    "Content-Type",
    "Date",
    "ETag",
    "Expires",
    "If-Match",
    "If-Modified-Since",
    "If-None-Match",
    "If-Unmodified-Since",
    "Last-Modified",
    "Pragma",
    "Request-Id",
    "Retry-After",
    "retry-after-ms",
    "Server",
    "Transfer-Encoding",
    "User-Agent",
    "WWW-Authenticate",
)

DEFAULT_ALLOWED_QUERY_PARAMETERS = ("api-version",)


class Sanitizer:
    """Replaces header and query values outside the allow-lists."""

    def __init__(
        self,
        additional_allowed_header_names: Iterable[str] = (),
        additional_allowed_query_parameters: Iterable[str] = (),
    ) -> None:
        self.allowed_header_names = {
            n.lower() for n in (*DEFAULT_ALLOWED_HEADER_NAMES, *additional_allowed_header_names)
        }
        self.allowed_query_parameters = {
            n.lower()
            for n in (*DEFAULT_ALLOWED_QUERY_PARAMETERS, *additional_allowed_query_parameters)
        }

    def sanitize_headers(self, headers: HttpHeaders) -> dict[str, str]:
        return {
            name: value if name.lower() in self.allowed_header_names else REDACTED
            for name, value in headers.to_dict().items()
        }

    def sanitize_url(self, url: str) -> str:
        parts = urlsplit(url)
        if not parts.query:
            return url
        query = [
            (k, v if k.lower() in self.allowed_query_parameters else REDACTED)
            for k, v in parse_qsl(parts.query, keep_blank_values=True)
        ]
        return urlunsplit(parts._replace(query=urlencode(query)))


class LogPolicy:
    name = "logPolicy"

    def __init__(
        self,
        logger: logging.Logger | None = None,
        allowed_header_names: Iterable[str] = (),
        allowed_query_parameters: Iterable[str] = (),
    ) -> None:
        self.log = logger or logging.getLogger("restpipe")
        self.sanitizer = Sanitizer(allowed_header_names, allowed_query_parameters)

    async def handle(self, request: PipelineRequest, next_fn: SendRequest) -> PipelineResponse:
        if not self.log.isEnabledFor(logging.INFO):
            return await next_fn(request)

        self.log.info(
            "Request: method=%s url=%s id=%s headers=%s",
            request.method,
            self.sanitizer.sanitize_url(request.url),
            request.request_id,
            self.sanitizer.sanitize_headers(request.headers),
        )
        response = await next_fn(request)
        self.log.info("Response status code: %d", response.status)
        self.log.info("Headers: %s", self.sanitizer.sanitize_headers(response.headers))
        return response


def log_policy(
    logger: logging.Logger | None = None,
    allowed_header_names: Iterable[str] = (),
    allowed_query_parameters: Iterable[str] = (),
) -> LogPolicy:
    return LogPolicy(logger, allowed_header_names, allowed_query_parameters)
