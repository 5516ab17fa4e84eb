"""restpipe CLI entry point: Click group with subcommands."""

import click

from restpipe._version import __version__


@click.group()
@click.version_option(version=__version__, prog_name="restpipe")
def cli() -> None:
    """restpipe - send HTTP requests through a retrying pipeline."""


# Import and register subcommands
from restpipe.cli.send import send  # noqa: E402

cli.add_command(send)
