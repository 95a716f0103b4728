"""CLI handlers for message commands."""

from __future__ import annotations

import asyncio

import click

from appforge.commands._helpers import get_context


def _run(coro):
    return asyncio.run(coro)


@click.group("messages")
def messages_group():
    """Inspect project conversations."""
    pass


@messages_group.command("list")
@click.argument("project_id")
def messages_list(project_id: str):
    """List a project's messages, oldest first."""

    async def _list():
        ctx = await get_context()
        try:
            messages = await ctx.message_repo.list_by_project(project_id)
            if not messages:
                click.echo("No messages found.")
                return
            for m in messages:
                stamp = m.created_at.strftime("%Y-%m-%d %H:%M:%S")
                click.echo(f"  [{stamp}] {m.role.value} ({m.type.value}): {m.content}")
                if m.fragment:
                    click.echo(f"      fragment: {m.fragment.title} {m.fragment.sandbox_url}")
                    for path in sorted(m.fragment.files):
                        click.echo(f"        {path}")
        finally:
            await ctx.close()

    _run(_list())
