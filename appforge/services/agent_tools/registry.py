"""Tool handler registry: maps tool names to async handler functions."""

from __future__ import annotations

from collections.abc import Callable, Coroutine
from typing import Any

from appforge.models.agent_state import AgentState, ToolResult
from appforge.services.agent_tools import sandbox_tools
from appforge.services.agent_tools.context import ToolContext

# Type alias for tool handlers
ToolHandler = Callable[[ToolContext, dict, AgentState], Coroutine[Any, Any, ToolResult]]

TOOL_HANDLERS: dict[str, ToolHandler] = {
    "terminal": sandbox_tools.handle_terminal,
    "createOrUpdateFile": sandbox_tools.handle_create_or_update_files,
    "readFiles": sandbox_tools.handle_read_files,
}

TOOL_DEFINITIONS = [
    {
        "name": "terminal",
        "description": "Use the terminal to run commands",
        "parameters": {
            "type": "object",
            "properties": {
                "command": {"type": "string", "description": "Shell command to run"},
            },
            "required": ["command"],
        },
    },
    {
        "name": "createOrUpdateFile",
        "description": "Create or update files in the sandbox",
        "parameters": {
            "type": "object",
            "properties": {
                "files": {
                    "type": "array",
                    "items": {
                        "type": "object",
                        "properties": {
                            "path": {"type": "string", "description": "Relative file path, e.g. app/page.tsx"},
                            "content": {"type": "string", "description": "Complete file content"},
                        },
                        "required": ["path", "content"],
                    },
                    "description": "Files to write",
                },
            },
            "required": ["files"],
        },
    },
    {
        "name": "readFiles",
        "description": "Read files from the sandbox",
        "parameters": {
            "type": "object",
            "properties": {
                "files": {
                    "type": "array",
                    "items": {"type": "string"},
                    "description": "File paths to read",
                },
            },
            "required": ["files"],
        },
    },
]


def get_tool_handlers() -> dict[str, ToolHandler]:
    return TOOL_HANDLERS
