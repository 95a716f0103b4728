"""Code agent job service: runs one ``code-agent/run`` job end to end.

A job run provisions a sandbox, loads the project's recent conversation, lets
the coding agent work until it converges or hits the iteration cap, then
stores the outcome as an assistant message. Every side effect is a step, so a
run that fails on an infrastructure error is retried (or resumed later) under
the same run id without repeating completed work.
"""

from __future__ import annotations

import asyncio
import logging
import random
import uuid
from typing import Protocol

import httpx
from pymongo.errors import AutoReconnect, ConnectionFailure, NetworkTimeout

from appforge.config import AppConfig
from appforge.infra.providers.base import LLMProvider
from appforge.infra.sandbox.base import SandboxProvider, SandboxUnavailableError
from appforge.models.agent_state import AgentState
from appforge.models.job import JobOutcome, JobRun, JobStatus, JobTrigger
from appforge.models.message import Message, MessageRole
from appforge.models.provider import LLMConfig, LLMResponse
from appforge.models.step import StepRecord
from appforge.models.usage import UsageEvent
from appforge.services.agent_network import AgentNetwork, CodingAgent, UsageRecorder
from appforge.services.agent_tools import TOOL_DEFINITIONS
from appforge.services.agent_tools.context import ToolContext
from appforge.services.history_service import history_to_llm_messages, load_history
from appforge.services.result_service import ResultService
from appforge.services.step_service import StepExecutor, StepStore
from appforge.services.summarizer_service import SummarizerService

logger = logging.getLogger(__name__)

_RETRYABLE_ERRORS = (
    TimeoutError,
    ConnectionError,
    OSError,
    AutoReconnect,
    ConnectionFailure,
    NetworkTimeout,
    httpx.TransportError,
    SandboxUnavailableError,
)


class MessageStore(Protocol):
    async def append(self, message: Message) -> Message: ...

    async def find_recent(self, project_id: str, limit: int = 6) -> list[Message]: ...


class JobRunStore(Protocol):
    async def insert(self, run: JobRun) -> JobRun: ...

    async def find(self, run_id: str) -> JobRun | None: ...

    async def update_status(
        self, run_id: str, status: JobStatus, attempts: int, error: str = "",
    ) -> JobRun | None: ...


class UsageSink(Protocol):
    async def insert(self, event: UsageEvent) -> UsageEvent: ...


class CodeAgentService:
    """Dispatches, retries and resumes code agent job runs."""

    def __init__(
        self,
        message_repo: MessageStore,
        step_repo: StepStore,
        job_run_repo: JobRunStore,
        agent_provider: LLMProvider,
        summarizer_provider: LLMProvider,
        sandbox_provider: SandboxProvider,
        config: AppConfig,
        usage_repo: UsageSink | None = None,
    ) -> None:
        self._messages = message_repo
        self._steps = step_repo
        self._job_runs = job_run_repo
        self._agent_provider = agent_provider
        self._summarizer_provider = summarizer_provider
        self._sandbox_provider = sandbox_provider
        self._config = config
        self._usage_repo = usage_repo

    # --- Entry points ---

    async def dispatch(self, event: dict) -> JobOutcome:
        """Start a new run for a ``code-agent/run`` event.

        Raises ValueError for a malformed event, before anything is stored.
        """
        trigger = JobTrigger.from_event(event)
        run = JobRun(run_id=uuid.uuid4().hex, trigger=trigger)
        await self._job_runs.insert(run)
        logger.info("Dispatched run %s for project %s", run.run_id, trigger.project_id)
        return await self._execute(run)

    async def submit(self, project_id: str, text: str) -> JobOutcome:
        """Store the user's request in the conversation, then run it."""
        trigger = JobTrigger(request_text=text, project_id=project_id)
        await self._messages.append(Message(
            project_id=project_id,
            role=MessageRole.USER,
            content=text,
        ))
        return await self.dispatch(trigger.to_event())

    async def resume(self, run_id: str) -> JobOutcome:
        """Re-run a stored run. Completed steps replay from their records."""
        run = await self._job_runs.find(run_id)
        if run is None:
            raise ValueError(f"Unknown job run: {run_id}")
        if run.status == JobStatus.COMPLETED:
            logger.info("Run %s already completed, replaying its outcome", run_id)
        return await self._execute(run)

    async def get_run(self, run_id: str) -> JobRun | None:
        return await self._job_runs.find(run_id)

    async def list_steps(self, run_id: str) -> list[StepRecord]:
        return await self._steps.list_by_run(run_id)

    # --- Attempts ---

    async def _execute(self, run: JobRun) -> JobOutcome:
        max_attempts = max(1, self._config.jobs.max_attempts)
        base_delay = self._config.jobs.retry_base_delay
        attempts = run.attempts

        for attempt in range(max_attempts):
            attempts += 1
            await self._job_runs.update_status(run.run_id, JobStatus.RUNNING, attempts)
            try:
                outcome = await self._run_attempt(run)
            except _RETRYABLE_ERRORS as e:
                if attempt + 1 >= max_attempts:
                    logger.error(
                        "Run %s failed after %d attempt(s): %s", run.run_id, attempt + 1, e,
                    )
                    await self._job_runs.update_status(
                        run.run_id, JobStatus.FAILED, attempts, error=str(e),
                    )
                    raise
                # Exponential backoff with jitter: base * 2^attempt + random(0, 1)
                delay = base_delay * (1 << attempt) + random.random()
                logger.warning(
                    "Run %s attempt %d/%d failed, retrying in %.1fs",
                    run.run_id, attempt + 1, max_attempts, delay, exc_info=True,
                )
                await asyncio.sleep(delay)
                continue
            except Exception as e:
                logger.exception("Run %s failed", run.run_id)
                await self._job_runs.update_status(
                    run.run_id, JobStatus.FAILED, attempts, error=str(e),
                )
                raise

            await self._job_runs.update_status(run.run_id, JobStatus.COMPLETED, attempts)
            return outcome

        raise RuntimeError("unreachable")  # the loop always returns or raises

    async def _run_attempt(self, run: JobRun) -> JobOutcome:
        trigger = run.trigger
        steps = StepExecutor(run.run_id, self._steps)
        record_usage = self._usage_recorder(run)

        sandbox_id = await steps.run("get-sandbox-id", self._sandbox_provider.create)
        history = await steps.run(
            "get-previous-messages",
            lambda: load_history(
                self._messages, trigger.project_id, self._config.agent.history_limit,
            ),
        )

        tool_ctx = ToolContext(
            sandbox_id=sandbox_id,
            sandbox_provider=self._sandbox_provider,
            command_timeout=self._config.sandbox.command_timeout,
        )
        agent = CodingAgent(
            self._agent_provider,
            self._agent_llm_config(),
            steps,
            tool_ctx,
            record_usage=record_usage,
        )
        network = AgentNetwork(agent, max_iterations=self._config.agent.max_iterations)

        state = AgentState()
        result = await network.run(
            trigger.request_text, state, history_to_llm_messages(history),
        )

        summarizer = SummarizerService(
            self._summarizer_provider,
            self._summarizer_llm_config(),
            steps,
            record_usage=record_usage,
        )
        results = ResultService(
            self._messages, steps, self._sandbox_provider, port=self._config.sandbox.port,
        )
        persisted = await results.persist(trigger.project_id, state, sandbox_id, summarizer)

        logger.info(
            "Run %s finished: %s (%d executed, %d replayed steps)",
            run.run_id, "error" if persisted.is_error else "result",
            steps.executed, steps.replayed,
        )
        return JobOutcome(
            run_id=run.run_id,
            is_error=persisted.is_error,
            status=result.status.value,
            url=persisted.url,
            title=persisted.title,
            summary=state.summary,
            files=dict(state.files),
            message_id=persisted.message_id,
            iterations=result.iterations,
        )

    # --- Helpers ---

    def _agent_llm_config(self) -> LLMConfig:
        agent = self._config.agent
        return LLMConfig(
            model=agent.model,
            max_tokens=agent.max_tokens,
            temperature=agent.temperature,
            tools=TOOL_DEFINITIONS,
            provider_order=list(agent.provider_order),
        )

    def _summarizer_llm_config(self) -> LLMConfig:
        summarizer = self._config.summarizer
        return LLMConfig(model=summarizer.model, max_tokens=summarizer.max_tokens)

    def _usage_recorder(self, run: JobRun) -> UsageRecorder | None:
        if self._usage_repo is None:
            return None
        usage_repo = self._usage_repo

        async def record(source: str, response: LLMResponse) -> None:
            try:
                await usage_repo.insert(UsageEvent(
                    source=source,
                    model=response.model,
                    input_tokens=response.usage.get("input_tokens", 0),
                    output_tokens=response.usage.get("output_tokens", 0),
                    run_id=run.run_id,
                    project_id=run.trigger.project_id,
                ))
            except Exception:
                logger.warning("Failed to record usage for %s", source, exc_info=True)

        return record
