"""Shared in-memory fakes for storage, sandbox and LLM providers."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from appforge.infra.sandbox.base import CommandResult, SandboxUnavailableError
from appforge.models.job import JobRun, JobStatus
from appforge.models.message import Message
from appforge.models.provider import LLMConfig, LLMMessage, LLMResponse
from appforge.models.step import StepRecord
from appforge.models.usage import UsageEvent


class InMemoryStepStore:
    def __init__(self) -> None:
        self.records: dict[tuple[str, str], StepRecord] = {}

    async def find(self, run_id: str, step_name: str) -> StepRecord | None:
        return self.records.get((run_id, step_name))

    async def save(self, record: StepRecord) -> None:
        self.records.setdefault((record.run_id, record.step_name), record)

    async def list_by_run(self, run_id: str) -> list[StepRecord]:
        return [r for (rid, _), r in self.records.items() if rid == run_id]

    def names(self, run_id: str) -> list[str]:
        return [name for (rid, name) in self.records if rid == run_id]


class FakeMessageRepo:
    def __init__(self) -> None:
        self.messages: list[Message] = []

    async def append(self, message: Message) -> Message:
        saved = message.with_id(f"msg-{len(self.messages) + 1}")
        self.messages.append(saved)
        return saved

    async def find_recent(self, project_id: str, limit: int = 6) -> list[Message]:
        mine = [m for m in self.messages if m.project_id == project_id]
        mine.sort(key=lambda m: m.created_at, reverse=True)
        return mine[:limit]

    async def list_by_project(self, project_id: str) -> list[Message]:
        mine = [m for m in self.messages if m.project_id == project_id]
        return sorted(mine, key=lambda m: m.created_at)

    def seed(self, project_id: str, entries: list[tuple]) -> None:
        """Store (role, content) pairs one second apart, oldest first."""
        start = datetime(2025, 1, 1, tzinfo=timezone.utc)
        for i, (role, content) in enumerate(entries):
            self.messages.append(Message(
                project_id=project_id,
                role=role,
                content=content,
                created_at=start + timedelta(seconds=i),
                id=f"seed-{i}",
            ))


class FakeSandbox:
    def __init__(self, sandbox_id: str) -> None:
        self.sandbox_id = sandbox_id
        self.files: dict[str, str] = {}
        self.commands: list[str] = []
        self.command_results: dict[str, CommandResult] = {}
        self.fail_writes_on: set[str] = set()

    async def run(self, cmd: str, *, timeout: int = 300) -> CommandResult:
        self.commands.append(cmd)
        return self.command_results.get(cmd, CommandResult(exit_code=0, stdout=f"ran {cmd}", stderr=""))

    async def write_file(self, path: str, content: str) -> None:
        if path in self.fail_writes_on:
            raise OSError(f"disk full writing {path}")
        self.files[path] = content

    async def read_file(self, path: str) -> str:
        if path not in self.files:
            raise FileNotFoundError(path)
        return self.files[path]

    def get_host(self, port: int) -> str:
        return f"{port}-{self.sandbox_id}.e2b.app"


class FakeSandboxProvider:
    def __init__(self) -> None:
        self.sandboxes: dict[str, FakeSandbox] = {}
        self.created = 0
        self.connects = 0
        self.fail_connects = 0

    async def create(self) -> str:
        self.created += 1
        sandbox_id = f"sbx-{self.created}"
        self.sandboxes[sandbox_id] = FakeSandbox(sandbox_id)
        return sandbox_id

    async def connect(self, sandbox_id: str) -> FakeSandbox:
        self.connects += 1
        if self.fail_connects:
            self.fail_connects -= 1
            raise SandboxUnavailableError(sandbox_id, "connection reset")
        if sandbox_id not in self.sandboxes:
            raise SandboxUnavailableError(sandbox_id, "not found")
        return self.sandboxes[sandbox_id]


class ScriptedProvider:
    """Returns queued responses in order, then ``default`` forever.

    A queued exception instance is raised instead of returned.
    """

    def __init__(self, responses: list | None = None, default: LLMResponse | None = None) -> None:
        self.responses = list(responses or [])
        self.default = default or LLMResponse(content="", model="scripted")
        self.calls: list[list[LLMMessage]] = []
        self.configs: list[LLMConfig | None] = []

    async def complete(self, messages: list[LLMMessage], config: LLMConfig | None = None) -> LLMResponse:
        self.calls.append(list(messages))
        self.configs.append(config)
        item = self.responses.pop(0) if self.responses else self.default
        if isinstance(item, Exception):
            raise item
        return item


class FakeJobRunRepo:
    def __init__(self) -> None:
        self.runs: dict[str, JobRun] = {}

    async def insert(self, run: JobRun) -> JobRun:
        self.runs[run.run_id] = run
        return run

    async def find(self, run_id: str) -> JobRun | None:
        return self.runs.get(run_id)

    async def update_status(
        self, run_id: str, status: JobStatus, attempts: int, error: str = "",
    ) -> JobRun | None:
        run = self.runs.get(run_id)
        if run is None:
            return None
        updated = JobRun(
            run_id=run.run_id,
            trigger=run.trigger,
            status=status,
            attempts=attempts,
            error=error,
            created_at=run.created_at,
        )
        self.runs[run_id] = updated
        return updated


class FakeUsageRepo:
    def __init__(self) -> None:
        self.events: list[UsageEvent] = []

    async def insert(self, event: UsageEvent) -> UsageEvent:
        self.events.append(event)
        return event


@pytest.fixture
def step_store():
    return InMemoryStepStore()


@pytest.fixture
def message_repo():
    return FakeMessageRepo()


@pytest.fixture
def sandbox_provider():
    return FakeSandboxProvider()


@pytest.fixture
def job_run_repo():
    return FakeJobRunRepo()


@pytest.fixture
def usage_repo():
    return FakeUsageRepo()


@pytest.fixture
def scripted_provider():
    """Factory: ``scripted_provider([responses...], default=...)``."""
    return ScriptedProvider
