"""Coding-agent tool handler registry.

Each tool handler is a simple async function with signature:

    async def handle(ctx: ToolContext, arguments: dict, state: AgentState) -> ToolResult

Handlers never mutate the state; file writes travel back in the result and
are merged by the agent network.
"""

from __future__ import annotations

from appforge.services.agent_tools.registry import TOOL_DEFINITIONS, get_tool_handlers

__all__ = ["TOOL_DEFINITIONS", "get_tool_handlers"]
