"""Click CLI definitions - main entry point."""

from __future__ import annotations

import logging
import sys

import click

from appforge.commands.config_cmd import config_group
from appforge.commands.job_cmd import job_group
from appforge.commands.messages_cmd import messages_group


@click.group()
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx, debug: bool) -> None:
    """appforge - background code agent that builds apps in sandboxes."""
    level = logging.DEBUG if debug else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        stream=sys.stderr,
    )
    ctx.ensure_object(dict)
    ctx.obj["debug"] = debug


cli.add_command(job_group, "job")
cli.add_command(messages_group, "messages")
cli.add_command(config_group, "config")


if __name__ == "__main__":
    cli()
