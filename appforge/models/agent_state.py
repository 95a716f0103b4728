"""Agent shared state and tool result models."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class NetworkStatus(str, Enum):
    RUNNING = "running"
    CONVERGED = "converged"
    EXHAUSTED = "exhausted"


@dataclass
class AgentState:
    """State shared by the coding agent's turns within one job run.

    ``files`` only grows or overwrites paths; the last write per path wins.
    """

    summary: str = ""
    files: dict[str, str] = field(default_factory=dict)

    def merge_files(self, updates: dict[str, str]) -> None:
        for path, content in updates.items():
            self.files[path] = content


@dataclass(frozen=True)
class ToolResult:
    """Outcome of a single tool call: Ok(output) or Err(description).

    ``files`` carries the file writes the call performed, for the router to
    merge into the shared state.
    """

    output: str
    is_error: bool = False
    files: dict[str, str] = field(default_factory=dict)

    @classmethod
    def ok(cls, output: str, files: dict[str, str] | None = None) -> ToolResult:
        return cls(output=output, files=dict(files or {}))

    @classmethod
    def err(cls, description: str, files: dict[str, str] | None = None) -> ToolResult:
        return cls(output=description, is_error=True, files=dict(files or {}))

    def to_doc(self) -> dict:
        return {"output": self.output, "is_error": self.is_error, "files": dict(self.files)}

    @classmethod
    def from_doc(cls, doc: dict) -> ToolResult:
        return cls(
            output=doc.get("output", ""),
            is_error=doc.get("is_error", False),
            files=dict(doc.get("files", {})),
        )
