"""Job trigger, job run and job outcome domain models."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

CODE_AGENT_EVENT = "code-agent/run"


class JobStatus(str, Enum):
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass(frozen=True)
class JobTrigger:
    """Immutable input of one orchestration job."""

    request_text: str
    project_id: str

    def __post_init__(self) -> None:
        if not self.request_text or not self.request_text.strip():
            raise ValueError("Job trigger value cannot be empty")
        if not self.project_id or not self.project_id.strip():
            raise ValueError("Job trigger projectId cannot be empty")

    @classmethod
    def from_event(cls, event: dict) -> JobTrigger:
        """Build a trigger from a ``code-agent/run`` event payload."""
        name = event.get("name")
        if name != CODE_AGENT_EVENT:
            raise ValueError(f"Unsupported event: {name!r}")
        data = event.get("data") or {}
        return cls(
            request_text=data.get("value", ""),
            project_id=data.get("projectId", ""),
        )

    def to_event(self) -> dict:
        return {
            "name": CODE_AGENT_EVENT,
            "data": {"value": self.request_text, "projectId": self.project_id},
        }


@dataclass(frozen=True)
class JobRun:
    """Durable record of one job run, used to resume it after a failure."""

    run_id: str
    trigger: JobTrigger
    status: JobStatus = JobStatus.RUNNING
    attempts: int = 0
    error: str = ""
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_doc(self) -> dict:
        return {
            "run_id": self.run_id,
            "event": self.trigger.to_event(),
            "status": self.status.value,
            "attempts": self.attempts,
            "error": self.error,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }

    @classmethod
    def from_doc(cls, doc: dict) -> JobRun:
        return cls(
            run_id=doc["run_id"],
            trigger=JobTrigger.from_event(doc["event"]),
            status=JobStatus(doc.get("status", JobStatus.RUNNING.value)),
            attempts=doc.get("attempts", 0),
            error=doc.get("error", ""),
            created_at=doc.get("created_at", datetime.now(timezone.utc)),
            updated_at=doc.get("updated_at", datetime.now(timezone.utc)),
        )


@dataclass(frozen=True)
class JobOutcome:
    """What a finished job run produced."""

    run_id: str
    is_error: bool
    status: str = ""  # network status: "converged" or "exhausted"
    url: str = ""
    title: str = ""
    summary: str = ""
    files: dict[str, str] = field(default_factory=dict)
    message_id: str = ""
    iterations: int = 0
