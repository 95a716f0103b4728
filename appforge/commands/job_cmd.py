"""CLI handlers for job commands."""

from __future__ import annotations

import asyncio

import click

from appforge.commands._helpers import get_context
from appforge.models.job import JobOutcome, JobTrigger


def _run(coro):
    return asyncio.run(coro)


def _echo_outcome(outcome: JobOutcome) -> None:
    kind = "ERROR" if outcome.is_error else "RESULT"
    click.echo(f"Run {outcome.run_id}: {kind} ({outcome.status}, {outcome.iterations} iteration(s))")
    if outcome.message_id:
        click.echo(f"  Message: {outcome.message_id}")
    if not outcome.is_error:
        click.echo(f"  Title: {outcome.title}")
        click.echo(f"  URL: {outcome.url}")
        click.echo(f"  Files: {', '.join(sorted(outcome.files))}")
    if outcome.summary:
        click.echo(f"  Summary: {outcome.summary}")


@click.group("job")
def job_group():
    """Run and inspect code agent jobs."""
    pass


@job_group.command("run")
@click.argument("text")
@click.option("--project-id", "-p", required=True, help="Project the request belongs to")
def job_run(text: str, project_id: str):
    """Store the request as a user message, run it and wait for the outcome."""

    async def _dispatch():
        try:
            JobTrigger(request_text=text, project_id=project_id)
        except ValueError as e:
            click.echo(f"Error: {e}", err=True)
            return
        ctx = await get_context()
        try:
            outcome = await ctx.code_agent_service.submit(project_id, text)
            _echo_outcome(outcome)
        finally:
            await ctx.close()

    _run(_dispatch())


@job_group.command("resume")
@click.argument("run_id")
def job_resume(run_id: str):
    """Resume a failed or interrupted run, replaying its completed steps."""

    async def _resume():
        ctx = await get_context()
        try:
            outcome = await ctx.code_agent_service.resume(run_id)
            _echo_outcome(outcome)
        except ValueError as e:
            click.echo(f"Error: {e}", err=True)
        finally:
            await ctx.close()

    _run(_resume())


@job_group.command("show")
@click.argument("run_id")
def job_show(run_id: str):
    """Show a run's status and its completed steps."""

    async def _show():
        ctx = await get_context()
        try:
            service = ctx.code_agent_service
            run = await service.get_run(run_id)
            if not run:
                click.echo(f"Run not found: {run_id}", err=True)
                return
            click.echo(f"Run: {run.run_id}")
            click.echo(f"  Project: {run.trigger.project_id}")
            click.echo(f"  Request: {run.trigger.request_text}")
            click.echo(f"  Status: {run.status.value}")
            click.echo(f"  Attempts: {run.attempts}")
            if run.error:
                click.echo(f"  Error: {run.error}")
            click.echo(f"  Created: {run.created_at.isoformat()}")

            steps = await service.list_steps(run_id)
            click.echo(f"\n  Steps ({len(steps)}):")
            for step in steps:
                click.echo(f"    {step.completed_at.isoformat()}  {step.step_name}")

            totals = await ctx.usage_repo.get_run_totals(run_id)
            if totals["calls"]:
                click.echo(
                    f"\n  Usage: {totals['calls']} model call(s), "
                    f"{totals['input_tokens']} in / {totals['output_tokens']} out tokens"
                )
        finally:
            await ctx.close()

    _run(_show())
