"""Result persister: classify the final agent state and store it as a message."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Protocol

from appforge.infra.sandbox.base import SandboxProvider
from appforge.models.agent_state import AgentState
from appforge.models.message import Fragment, Message, MessageRole, MessageType
from appforge.services.step_service import StepExecutor
from appforge.services.summarizer_service import SummarizerService

logger = logging.getLogger(__name__)

ERROR_MESSAGE = "Something went wrong. Please try again."


class MessageSink(Protocol):
    async def append(self, message: Message) -> Message: ...


def is_error_state(state: AgentState) -> bool:
    """A run failed unless it produced both a summary and at least one file."""
    return not state.summary or not state.files


@dataclass(frozen=True)
class PersistedResult:
    message_id: str
    is_error: bool
    url: str = ""
    title: str = ""


class ResultService:
    def __init__(
        self,
        message_repo: MessageSink,
        steps: StepExecutor,
        sandbox_provider: SandboxProvider,
        port: int = 3000,
    ) -> None:
        self._messages = message_repo
        self._steps = steps
        self._sandbox_provider = sandbox_provider
        self._port = port

    async def get_sandbox_url(self, sandbox_id: str) -> str:
        """Public URL of the app server, looked up now rather than at creation
        because the server only starts once the agent has done its work."""

        async def work() -> str:
            sandbox = await self._sandbox_provider.connect(sandbox_id)
            return f"http://{sandbox.get_host(self._port)}"

        return await self._steps.run("get-sandbox-url", work)

    async def _save(self, message: Message) -> str:
        async def work() -> dict:
            saved = await self._messages.append(message)
            return {"id": saved.id, "type": saved.type.value}

        doc = await self._steps.run("save-result", work)
        return doc["id"]

    async def persist(
        self,
        project_id: str,
        state: AgentState,
        sandbox_id: str,
        summarizer: SummarizerService,
    ) -> PersistedResult:
        if is_error_state(state):
            logger.info(
                "Run for project %s failed (summary=%s, files=%d)",
                project_id, bool(state.summary), len(state.files),
            )
            message_id = await self._save(Message(
                project_id=project_id,
                role=MessageRole.ASSISTANT,
                content=ERROR_MESSAGE,
                type=MessageType.ERROR,
            ))
            return PersistedResult(message_id=message_id, is_error=True)

        title = await summarizer.generate_title(state.summary)
        response = await summarizer.generate_response(state.summary)
        url = await self.get_sandbox_url(sandbox_id)

        message_id = await self._save(Message(
            project_id=project_id,
            role=MessageRole.ASSISTANT,
            content=response,
            type=MessageType.RESULT,
            fragment=Fragment(sandbox_url=url, title=title, files=dict(state.files)),
        ))
        logger.info("Saved fragment %r (%d files) for project %s", title, len(state.files), project_id)
        return PersistedResult(message_id=message_id, is_error=False, url=url, title=title)
