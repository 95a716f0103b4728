"""Sandbox protocol: the remote environment the coding agent works in.

A sandbox is provisioned once per job run and then looked up by id on every
tool call. The engine never tears it down; it expires on its own timeout.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, runtime_checkable


class SandboxUnavailableError(RuntimeError):
    """The sandbox is unreachable, unknown, or has expired."""

    def __init__(self, sandbox_id: str, reason: str = "") -> None:
        detail = f": {reason}" if reason else ""
        super().__init__(f"Sandbox {sandbox_id} unavailable{detail}")
        self.sandbox_id = sandbox_id


@dataclass(frozen=True)
class CommandResult:
    """Result of running a command inside a sandbox.

    A failed command is a value, not an exception: ``error`` describes the
    failure and both output buffers hold whatever was captured.
    """

    exit_code: int
    stdout: str
    stderr: str
    error: str = ""
    duration_ms: int = 0

    @property
    def failed(self) -> bool:
        return self.exit_code != 0 or bool(self.error)


@runtime_checkable
class Sandbox(Protocol):
    """A live handle on one sandbox session."""

    @property
    def sandbox_id(self) -> str:
        ...

    async def run(self, cmd: str, *, timeout: int = 300) -> CommandResult:
        """Execute a shell command, capturing stdout and stderr."""
        ...

    async def write_file(self, path: str, content: str) -> None:
        ...

    async def read_file(self, path: str) -> str:
        ...

    def get_host(self, port: int) -> str:
        """Externally reachable host name for a port inside the sandbox."""
        ...


@runtime_checkable
class SandboxProvider(Protocol):
    """Provisions sandboxes and reconnects to them by id."""

    async def create(self) -> str:
        """Create a sandbox and set its expiry. Returns its id."""
        ...

    async def connect(self, sandbox_id: str) -> Sandbox:
        """Reconnect to a live sandbox. Raises SandboxUnavailableError."""
        ...
