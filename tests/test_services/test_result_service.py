"""Tests for result classification and persistence."""

import pytest

from appforge.models.agent_state import AgentState
from appforge.models.message import MessageRole, MessageType
from appforge.models.provider import LLMConfig, LLMResponse
from appforge.services.result_service import ERROR_MESSAGE, ResultService, is_error_state
from appforge.services.step_service import StepExecutor
from appforge.services.summarizer_service import SummarizerService


class TestIsErrorState:
    @pytest.mark.parametrize(
        "summary,files,expected",
        [
            ("", {}, True),
            ("Built a counter", {}, True),
            ("", {"app/page.tsx": "x"}, True),
            ("Built a counter", {"app/page.tsx": "x"}, False),
        ],
    )
    def test_classification(self, summary, files, expected):
        assert is_error_state(AgentState(summary=summary, files=files)) is expected


class TestResultService:
    async def _setup(self, scripted_provider, step_store, message_repo, sandbox_provider, responses=None):
        sandbox_id = await sandbox_provider.create()
        steps = StepExecutor("run-1", step_store)
        provider = scripted_provider(responses or [])
        summarizer = SummarizerService(provider, LLMConfig(), steps)
        service = ResultService(message_repo, steps, sandbox_provider, port=3000)
        return service, summarizer, provider, sandbox_id

    @pytest.mark.asyncio
    async def test_success_saves_fragment(self, scripted_provider, step_store, message_repo, sandbox_provider):
        service, summarizer, _, sandbox_id = await self._setup(
            scripted_provider, step_store, message_repo, sandbox_provider,
            [LLMResponse(content="Counter App"), LLMResponse(content="I built a counter.")],
        )
        state = AgentState(summary="Built a counter", files={"app/page.tsx": "counter"})

        persisted = await service.persist("p1", state, sandbox_id, summarizer)

        assert not persisted.is_error
        assert persisted.url == "http://3000-sbx-1.e2b.app"
        assert persisted.title == "Counter App"
        [message] = message_repo.messages
        assert message.id == persisted.message_id
        assert message.role == MessageRole.ASSISTANT
        assert message.type == MessageType.RESULT
        assert message.content == "I built a counter."
        assert message.fragment.sandbox_url == "http://3000-sbx-1.e2b.app"
        assert message.fragment.files == {"app/page.tsx": "counter"}
        assert step_store.names("run-1") == [
            "generate-fragment-title", "generate-response", "get-sandbox-url", "save-result",
        ]

    @pytest.mark.asyncio
    async def test_error_saves_fixed_message(self, scripted_provider, step_store, message_repo, sandbox_provider):
        service, summarizer, provider, sandbox_id = await self._setup(
            scripted_provider, step_store, message_repo, sandbox_provider,
        )
        state = AgentState(summary="Built a counter", files={})

        persisted = await service.persist("p1", state, sandbox_id, summarizer)

        assert persisted.is_error
        [message] = message_repo.messages
        assert message.type == MessageType.ERROR
        assert message.content == ERROR_MESSAGE
        assert message.fragment is None
        assert provider.calls == []
        assert step_store.names("run-1") == ["save-result"]

    @pytest.mark.asyncio
    async def test_save_is_not_repeated_on_replay(self, scripted_provider, step_store, message_repo, sandbox_provider):
        service, summarizer, _, sandbox_id = await self._setup(
            scripted_provider, step_store, message_repo, sandbox_provider,
        )
        state = AgentState()
        first = await service.persist("p1", state, sandbox_id, summarizer)

        replay = ResultService(message_repo, StepExecutor("run-1", step_store), sandbox_provider)
        second = await replay.persist("p1", state, sandbox_id, summarizer)

        assert second.message_id == first.message_id
        assert len(message_repo.messages) == 1
