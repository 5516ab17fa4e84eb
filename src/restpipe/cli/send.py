"""CLI command: restpipe send -- send one request through the default pipeline."""

from __future__ import annotations

import asyncio
import logging
import sys
from dataclasses import replace

import click

from restpipe.client import PipelineClient
from restpipe.errors import ConfigurationError, PipelineError, RetryBudgetExceededError
from restpipe.transport import HttpClient
from restpipe.types.config import PipelineOptions
from restpipe.types.response import PipelineResponse


def _parse_header(raw: str) -> tuple[str, str]:
    name, sep, value = raw.partition(":")
    if not sep or not name.strip():
        raise click.BadParameter(f"expected 'Name: value', got {raw!r}", param_hint="--header")
    return name.strip(), value.strip()


async def _send(
    options: PipelineOptions,
    method: str,
    url: str,
    headers: list[tuple[str, str]],
    data: str | None,
    timeout: float,
    transport: HttpClient | None,
) -> PipelineResponse:
    async with PipelineClient(transport=transport, options=options) as client:
        return await client.request(method, url, headers=headers, body=data, timeout=timeout)


@click.command()
@click.argument("url")
@click.option("--method", "-X", default="GET", show_default=True, help="HTTP method")
@click.option("--header", "-H", "headers", multiple=True, help="Header as 'Name: value' (repeatable)")
@click.option("--data", "-d", default=None, help="Request body")
@click.option("--max-retries", type=int, default=None, help="Override the retry budget")
@click.option("--retry-delay-ms", type=int, default=None, help="Override the base backoff delay")
@click.option("--timeout", type=float, default=0.0, help="Per-attempt timeout in seconds (0 = client default)")
@click.option("--verbose", "-v", is_flag=True, default=False, help="Log every attempt to stderr")
@click.pass_context
def send(
    ctx: click.Context,
    url: str,
    method: str,
    headers: tuple[str, ...],
    data: str | None,
    max_retries: int | None,
    retry_delay_ms: int | None,
    timeout: float,
    verbose: bool,
) -> None:
    """Send a request to URL and print the response.

    Retry settings default to the RESTPIPE_* environment variables.
    """
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            stream=sys.stderr,
            format="%(asctime)s %(name)s %(levelname)s %(message)s",
        )

    parsed_headers = [_parse_header(h) for h in headers]

    try:
        options = PipelineOptions.from_env()
        retry = options.retry
        if max_retries is not None:
            retry = replace(retry, max_retries=max_retries)
        if retry_delay_ms is not None:
            retry = replace(retry, retry_delay_in_ms=retry_delay_ms)
        options = replace(
            options,
            retry=retry,
            throttling=replace(options.throttling, max_retries=retry.max_retries),
        )
    except ConfigurationError as exc:
        click.echo(f"Configuration error: {exc}", err=True)
        sys.exit(2)

    transport = (ctx.obj or {}).get("transport")

    try:
        response = asyncio.run(
            _send(options, method, url, parsed_headers, data, timeout, transport)
        )
    except RetryBudgetExceededError as exc:
        click.echo(f"Gave up after {exc.attempts} attempts: {exc}", err=True)
        sys.exit(1)
    except PipelineError as exc:
        click.echo(f"Request failed: {exc}", err=True)
        sys.exit(1)

    click.echo(f"{response.status}")
    for name, value in response.headers.items():
        click.echo(f"{name}: {value}")
    click.echo()
    click.echo(response.text)
