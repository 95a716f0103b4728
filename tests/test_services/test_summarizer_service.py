"""Tests for the post-run summarizers."""

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from appforge.infra.providers.anthropic import AnthropicProvider
from appforge.infra.providers.openrouter import OpenRouterProvider
from appforge.models.provider import LLMConfig, LLMResponse, ToolCall
from appforge.services.step_service import StepExecutor
from appforge.services.summarizer_service import (
    DEFAULT_RESPONSE,
    DEFAULT_TITLE,
    SummarizerService,
    output_text,
)


class TestOutputText:
    def test_string(self):
        assert output_text("Counter App", "Fragment") == "Counter App"

    def test_string_is_stripped(self):
        assert output_text("  Counter App\n", "Fragment") == "Counter App"

    def test_list_joined_with_space(self):
        assert output_text(["Counter", "App"], "Fragment") == "Counter App"

    def test_empty_falls_back(self):
        assert output_text("", "Fragment") == "Fragment"
        assert output_text([], "Fragment") == "Fragment"
        assert output_text(None, "Fragment") == "Fragment"

    def test_non_text_falls_back(self):
        assert output_text([{"type": "image"}], "Fragment") == "Fragment"


class TestSummarizerService:
    def _service(self, provider, step_store, record_usage=None) -> SummarizerService:
        return SummarizerService(
            provider,
            LLMConfig(model="google/gemini-flash-1.5-8b"),
            StepExecutor("run-1", step_store),
            record_usage=record_usage,
        )

    @pytest.mark.asyncio
    async def test_generate_title(self, scripted_provider, step_store):
        provider = scripted_provider([LLMResponse(content="Counter App")])
        title = await self._service(provider, step_store).generate_title("Built a counter")

        assert title == "Counter App"
        sent = provider.calls[0]
        assert sent[0].role == "system"
        assert sent[1].content == "Built a counter"
        assert step_store.names("run-1") == ["generate-fragment-title"]

    @pytest.mark.asyncio
    async def test_generate_response(self, scripted_provider, step_store):
        provider = scripted_provider([LLMResponse(content="I built you a counter.")])
        response = await self._service(provider, step_store).generate_response("Built a counter")
        assert response == "I built you a counter."
        assert step_store.names("run-1") == ["generate-response"]

    @pytest.mark.asyncio
    async def test_fallbacks(self, scripted_provider, step_store):
        provider = scripted_provider([
            LLMResponse(content=""),
            LLMResponse(content="", tool_calls=[ToolCall(id="1", name="terminal")]),
        ])
        service = self._service(provider, step_store)
        assert await service.generate_title("Built a counter") == DEFAULT_TITLE
        assert await service.generate_response("Built a counter") == DEFAULT_RESPONSE

    @pytest.mark.asyncio
    async def test_memoized(self, scripted_provider, step_store):
        await self._service(scripted_provider([LLMResponse(content="Counter App")]), step_store) \
            .generate_title("Built a counter")

        replay_provider = scripted_provider()
        title = await self._service(replay_provider, step_store).generate_title("Built a counter")
        assert title == "Counter App"
        assert replay_provider.calls == []

    @pytest.mark.asyncio
    async def test_records_usage(self, scripted_provider, step_store):
        sources = []

        async def record(source, response):
            sources.append(source)

        provider = scripted_provider([LLMResponse(content="A"), LLMResponse(content="B")])
        service = self._service(provider, step_store, record_usage=record)
        await service.generate_title("s")
        await service.generate_response("s")
        assert sources == ["title-generator", "response-generator"]


class TestSummarizerWithProviders:
    """Text split across several parts reaches the summarizer as a list."""

    @pytest.mark.asyncio
    async def test_anthropic_text_blocks_joined_with_space(self, step_store):
        provider = AnthropicProvider(api_key="test-key")
        provider._client = MagicMock()
        provider._client.messages.create = AsyncMock(return_value=SimpleNamespace(
            content=[
                SimpleNamespace(type="text", text="Counter"),
                SimpleNamespace(type="text", text="App"),
            ],
            model="claude-sonnet-4-20250514",
            stop_reason="end_turn",
            usage=SimpleNamespace(input_tokens=12, output_tokens=2),
        ))
        service = SummarizerService(provider, LLMConfig(), StepExecutor("run-1", step_store))

        assert await service.generate_title("Built a counter") == "Counter App"

    @pytest.mark.asyncio
    async def test_openrouter_content_parts_joined_with_space(self, step_store):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"choices": [{"message": {"content": [
                {"type": "text", "text": "I built"},
                {"type": "text", "text": "a counter."},
            ]}}]})

        provider = OpenRouterProvider(api_key="k")
        provider._client = httpx.AsyncClient(
            base_url="https://openrouter.test/api/v1",
            transport=httpx.MockTransport(handler),
        )
        service = SummarizerService(provider, LLMConfig(), StepExecutor("run-1", step_store))

        response = await service.generate_response("Built a counter")
        await provider.close()

        assert response == "I built a counter."

    @pytest.mark.asyncio
    async def test_text_parts_survive_replay(self, scripted_provider, step_store):
        first = scripted_provider([LLMResponse(content="CounterApp", text_parts=["Counter", "App"])])
        await SummarizerService(first, LLMConfig(), StepExecutor("run-1", step_store)) \
            .generate_title("Built a counter")

        replay = SummarizerService(scripted_provider(), LLMConfig(), StepExecutor("run-1", step_store))
        assert await replay.generate_title("Built a counter") == "Counter App"
