"""Policy setting the User-Agent header."""
from __future__ import annotations

import platform

from restpipe._version import __version__
from restpipe.pipeline import SendRequest
from restpipe.types.request import PipelineRequest
from restpipe.types.response import PipelineResponse

USER_AGENT_HEADER = "User-Agent"


def get_user_agent_value(prefix: str | None = None) -> str:
    """Build ``[prefix ]restpipe/<version> Python/<version> (<os>-<release>; <machine>)``."""
    parts = [
        f"restpipe/{__version__}",
        f"Python/{platform.python_version()}",
        f"({platform.system()}-{platform.release()}; {platform.machine()})",
    ]
    value = " ".join(parts)
    return f"{prefix} {value}" if prefix else value


class UserAgentPolicy:
    name = "userAgentPolicy"

    def __init__(self, prefix: str | None = None) -> None:
        self.value = get_user_agent_value(prefix)

    async def handle(self, request: PipelineRequest, next_fn: SendRequest) -> PipelineResponse:
        if not request.headers.has(USER_AGENT_HEADER):
            request.headers.set(USER_AGENT_HEADER, self.value)
        return await next_fn(request)


def user_agent_policy(prefix: str | None = None) -> UserAgentPolicy:
    return UserAgentPolicy(prefix)
