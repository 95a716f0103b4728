"""Sandbox tool handlers: terminal, file writes, file reads.

Failures inside the sandbox are returned as ``ToolResult.err`` so the agent
reads them as ordinary tool output.
"""

from __future__ import annotations

import json
import logging

from appforge.models.agent_state import AgentState, ToolResult
from appforge.services.agent_tools.context import ToolContext

logger = logging.getLogger(__name__)


def format_command_failure(error: object, stdout: str, stderr: str) -> str:
    return f"Command failed: {error} \nstdout: {stdout} \nstderr: {stderr}"


def _string_list(arguments: dict, key: str) -> list[str]:
    value = arguments[key]
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ValueError(f"'{key}' must be a list of strings")
    return value


async def handle_terminal(ctx: ToolContext, arguments: dict, state: AgentState) -> ToolResult:
    command = arguments["command"]
    if not isinstance(command, str) or not command.strip():
        raise ValueError("'command' must be a non-empty string")

    try:
        sandbox = await ctx.sandbox()
        result = await sandbox.run(command, timeout=ctx.command_timeout)
    except Exception as e:
        logger.warning("terminal: %s", e)
        return ToolResult.err(format_command_failure(e, "", ""))

    if result.failed:
        message = format_command_failure(
            result.error or f"exit code {result.exit_code}", result.stdout, result.stderr,
        )
        logger.warning("terminal: %s (after %d ms)", message[:300], result.duration_ms)
        return ToolResult.err(message)
    logger.info("terminal: %s finished in %d ms", command[:100], result.duration_ms)
    return ToolResult.ok(result.stdout)


async def handle_create_or_update_files(
    ctx: ToolContext, arguments: dict, state: AgentState,
) -> ToolResult:
    entries = arguments["files"]
    if not isinstance(entries, list):
        raise ValueError("'files' must be a list of {path, content} objects")
    files = [(entry["path"], entry["content"]) for entry in entries]

    written: dict[str, str] = {}
    try:
        sandbox = await ctx.sandbox()
        for path, content in files:
            await sandbox.write_file(path, content)
            written[path] = content
    except Exception as e:
        logger.warning("createOrUpdateFile: failed after %d file(s): %s", len(written), e)
        return ToolResult.err(f"Error: {e}", files=written)

    return ToolResult.ok(
        "Updated files: " + ", ".join(written) if written else "No files given",
        files=written,
    )


async def handle_read_files(ctx: ToolContext, arguments: dict, state: AgentState) -> ToolResult:
    paths = _string_list(arguments, "files")
    try:
        sandbox = await ctx.sandbox()
        contents = [
            {"path": path, "content": await sandbox.read_file(path)}
            for path in paths
        ]
    except Exception as e:
        logger.warning("readFiles: %s", e)
        return ToolResult.err(f"Error: {e}")
    return ToolResult.ok(json.dumps(contents))
