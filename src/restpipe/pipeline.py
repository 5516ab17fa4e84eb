"""Pipeline composition: an ordered chain of named policies around a transport."""
from __future__ import annotations

import logging
from collections.abc import Awaitable, Iterable
from typing import TYPE_CHECKING, Callable, Protocol, runtime_checkable

from restpipe.errors import ConfigurationError, PipelineUsageError
from restpipe.types.request import PipelineRequest
from restpipe.types.response import PipelineResponse

if TYPE_CHECKING:
    from restpipe.transport import HttpClient

logger = logging.getLogger("restpipe.pipeline")

SendRequest = Callable[[PipelineRequest], Awaitable[PipelineResponse]]
PolicyHandler = Callable[[PipelineRequest, SendRequest], Awaitable[PipelineResponse]]


@runtime_checkable
class PipelinePolicy(Protocol):
    """A named unit of the chain wrapping everything added after it.

    ``next_fn`` may be called once per invocation. Policies that resend the
    request set a truthy ``resends`` attribute; they may call it again once
    the previous call has settled.
    """

    @property
    def name(self) -> str:
        ...

    async def handle(self, request: PipelineRequest, next_fn: SendRequest) -> PipelineResponse:
        ...


class FunctionPolicy:
    """Adapts a plain ``async (request, next_fn)`` function into a policy."""

    def __init__(self, name: str, handler: PolicyHandler, *, resends: bool = False) -> None:
        self._name = name
        self._handler = handler
        self.resends = resends

    @property
    def name(self) -> str:
        return self._name

    async def handle(self, request: PipelineRequest, next_fn: SendRequest) -> PipelineResponse:
        return await self._handler(request, next_fn)

    def __repr__(self) -> str:
        return f"FunctionPolicy({self._name!r})"


def policy(name: str, *, resends: bool = False) -> Callable[[PolicyHandler], FunctionPolicy]:
    """Decorator turning an async handler function into a named policy."""

    def decorator(handler: PolicyHandler) -> FunctionPolicy:
        return FunctionPolicy(name, handler, resends=resends)

    return decorator


class Pipeline:
    """Ordered list of policies; the first added sees the request first.

    Placement errors (unknown or duplicate names) are raised when the chain
    is being configured, never while a request is in flight.
    """

    def __init__(self, policies: Iterable[PipelinePolicy] = ()) -> None:
        self._policies: list[PipelinePolicy] = []
        for p in policies:
            self.add_policy(p)

    def add_policy(
        self,
        policy: PipelinePolicy,
        *,
        before: str | None = None,
        after: str | None = None,
    ) -> None:
        """Append *policy*, or place it directly before/after a named policy."""
        if before is not None and after is not None:
            raise ConfigurationError("Specify at most one of 'before' and 'after'")
        self._ensure_unique(policy.name)
        if before is not None:
            index = self._index_of(before)
        elif after is not None:
            index = self._index_of(after) + 1
        else:
            index = len(self._policies)
        self._policies.insert(index, policy)

    def replace_policy(self, name: str, policy: PipelinePolicy) -> PipelinePolicy:
        """Swap the policy called *name* for *policy*; returns the old one."""
        index = self._index_of(name)
        if policy.name != name:
            self._ensure_unique(policy.name)
        old = self._policies[index]
        self._policies[index] = policy
        return old

    def remove_policy(self, name: str) -> PipelinePolicy:
        return self._policies.pop(self._index_of(name))

    def get_ordered_policies(self) -> list[PipelinePolicy]:
        return list(self._policies)

    def clone(self) -> Pipeline:
        return Pipeline(self._policies)

    def compose(self, transport: HttpClient) -> SendRequest:
        """Fold the policies around *transport* into one callable.

        Each policy invocation gets its own one-shot ``next_fn``. A second
        call raises PipelineUsageError, unless the policy ``resends`` and the
        previous call has already returned.
        """
        chain: SendRequest = transport.send_request
        for p in reversed(self._policies):
            chain = _bind(p, chain)
        names = [p.name for p in self._policies]
        logger.debug("Composed pipeline: %s", " -> ".join(names) or "<empty>")
        return chain

    async def send_request(
        self, transport: HttpClient, request: PipelineRequest
    ) -> PipelineResponse:
        return await self.compose(transport)(request)

    def _index_of(self, name: str) -> int:
        for i, p in enumerate(self._policies):
            if p.name == name:
                return i
        raise ConfigurationError(f"No policy named {name!r} in the pipeline")

    def _ensure_unique(self, name: str) -> None:
        if any(p.name == name for p in self._policies):
            raise ConfigurationError(f"A policy named {name!r} is already in the pipeline")

    def __len__(self) -> int:
        return len(self._policies)

    def __repr__(self) -> str:
        return f"Pipeline({[p.name for p in self._policies]!r})"


def _bind(policy: PipelinePolicy, inner: SendRequest) -> SendRequest:
    resends = getattr(policy, "resends", False)

    async def invoke(request: PipelineRequest) -> PipelineResponse:
        in_flight = False
        calls = 0

        async def next_fn(req: PipelineRequest) -> PipelineResponse:
            nonlocal in_flight, calls
            if in_flight:
                raise PipelineUsageError(
                    f"Policy {policy.name!r} called next while a previous call was in flight"
                )
            if calls and not resends:
                raise PipelineUsageError(f"Policy {policy.name!r} called next more than once")
            calls += 1
            in_flight = True
            try:
                return await inner(req)
            finally:
                in_flight = False

        return await policy.handle(request, next_fn)

    return invoke
