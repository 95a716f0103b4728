"""Tool execution context: dependencies shared by all coding-agent tools."""

from __future__ import annotations

from dataclasses import dataclass

from appforge.infra.sandbox.base import Sandbox, SandboxProvider


@dataclass
class ToolContext:
    """Dependency bundle passed to every tool handler.

    Holds the sandbox id rather than a live handle: each tool call reconnects,
    so the whole run addresses one sandbox session.
    """

    sandbox_id: str
    sandbox_provider: SandboxProvider
    command_timeout: int = 300

    async def sandbox(self) -> Sandbox:
        return await self.sandbox_provider.connect(self.sandbox_id)
