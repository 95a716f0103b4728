"""Tests for provider registry, fallback chain and the OpenRouter client."""

import json

import httpx
import pytest

from appforge.config import AppConfig, ProviderConfig
from appforge.infra.providers.anthropic import AnthropicProvider
from appforge.infra.providers.fallback import FallbackProvider
from appforge.infra.providers.openrouter import OpenRouterProvider
from appforge.infra.providers.registry import get_provider, get_provider_with_fallback
from appforge.models.provider import LLMConfig, LLMMessage, LLMResponse, ProviderType


class TestProviderRegistry:
    def _make_config(self) -> AppConfig:
        return AppConfig(
            providers={
                "anthropic": ProviderConfig(api_key="test-key", default_model="test-model"),
                "openrouter": ProviderConfig(api_key="or-key", default_model="or/model"),
            }
        )

    def test_get_anthropic(self):
        provider = get_provider(ProviderType.ANTHROPIC, self._make_config())
        assert isinstance(provider, AnthropicProvider)

    def test_get_openrouter(self):
        provider = get_provider(ProviderType.OPENROUTER, self._make_config())
        assert isinstance(provider, OpenRouterProvider)

    def test_get_by_string(self):
        provider = get_provider("anthropic", self._make_config())
        assert isinstance(provider, AnthropicProvider)

    def test_unknown_raises(self):
        with pytest.raises(ValueError):
            get_provider("nonexistent", self._make_config())

    def test_fallback_chain_starts_with_primary(self):
        provider = get_provider_with_fallback(self._make_config(), "openrouter")
        assert isinstance(provider, FallbackProvider)
        assert provider.names == ["openrouter", "anthropic"]

    def test_fallback_skips_providers_without_key(self):
        config = AppConfig(providers={
            "anthropic": ProviderConfig(),
            "openrouter": ProviderConfig(api_key="or-key"),
        })
        provider = get_provider_with_fallback(config, "anthropic")
        assert isinstance(provider, OpenRouterProvider)

    def test_no_keys_raises(self):
        with pytest.raises(RuntimeError, match="No LLM providers"):
            get_provider_with_fallback(AppConfig(), "openrouter")


class _Failing:
    def __init__(self, error: Exception) -> None:
        self.error = error

    async def complete(self, messages, config=None):
        raise self.error


class _Answering:
    async def complete(self, messages, config=None):
        return LLMResponse(content="ok")


class TestFallbackProvider:
    @pytest.mark.asyncio
    async def test_uses_next_provider_on_failure(self):
        provider = FallbackProvider([_Failing(RuntimeError("boom")), _Answering()], ["a", "b"])
        response = await provider.complete([LLMMessage(role="user", content="hi")])
        assert response.content == "ok"

    @pytest.mark.asyncio
    async def test_all_failing_reraises_last_error(self):
        provider = FallbackProvider([
            _Failing(RuntimeError("first")),
            _Failing(httpx.ConnectError("second")),
        ])
        with pytest.raises(httpx.ConnectError):
            await provider.complete([LLMMessage(role="user", content="hi")])

    def test_requires_providers(self):
        with pytest.raises(ValueError):
            FallbackProvider([])


class TestOpenRouterProvider:
    def _provider(self, handler) -> OpenRouterProvider:
        provider = OpenRouterProvider(api_key="k", model="openai/gpt-4.1")
        provider._client = httpx.AsyncClient(
            base_url="https://openrouter.test/api/v1",
            transport=httpx.MockTransport(handler),
        )
        return provider

    def test_convert_assistant_tool_calls(self):
        msg = LLMMessage(
            role="assistant",
            content="",
            tool_calls=[{"id": "c1", "name": "terminal", "arguments": {"command": "ls"}}],
        )
        d = OpenRouterProvider._convert_message(msg)
        assert d["content"] is None
        assert d["tool_calls"][0]["function"]["name"] == "terminal"
        assert json.loads(d["tool_calls"][0]["function"]["arguments"]) == {"command": "ls"}

    def test_convert_tool_message_drops_name(self):
        msg = LLMMessage(role="tool", content="out", tool_call_id="c1", name="terminal")
        d = OpenRouterProvider._convert_message(msg)
        assert "name" not in d
        assert d["tool_call_id"] == "c1"

    def test_parse_bad_arguments(self):
        calls = OpenRouterProvider._parse_tool_calls([
            {"id": "c1", "function": {"name": "terminal", "arguments": "{not json"}},
        ])
        assert calls[0].name == "terminal"
        assert calls[0].arguments == {}

    @pytest.mark.asyncio
    async def test_complete(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen.update(json.loads(request.content))
            return httpx.Response(200, json={
                "model": "openai/gpt-4.1",
                "choices": [{
                    "finish_reason": "tool_calls",
                    "message": {
                        "content": None,
                        "tool_calls": [{
                            "id": "c1",
                            "type": "function",
                            "function": {"name": "readFiles", "arguments": '{"files": ["app/page.tsx"]}'},
                        }],
                    },
                }],
                "usage": {"prompt_tokens": 12, "completion_tokens": 4},
            })

        provider = self._provider(handler)
        response = await provider.complete(
            [LLMMessage(role="user", content="read the page")],
            LLMConfig(
                model="openai/gpt-4.1",
                temperature=0.1,
                tools=[{"name": "readFiles", "parameters": {"type": "object"}}],
                provider_order=["openai"],
            ),
        )
        await provider.close()

        assert seen["model"] == "openai/gpt-4.1"
        assert seen["temperature"] == 0.1
        assert seen["tools"][0]["type"] == "function"
        assert seen["provider"] == {"order": ["openai"]}
        assert "stop" not in seen
        assert response.content == ""
        assert response.tool_calls[0].arguments == {"files": ["app/page.tsx"]}
        assert response.usage == {"input_tokens": 12, "output_tokens": 4}

    @pytest.mark.asyncio
    async def test_non_vendor_model_uses_default(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen.update(json.loads(request.content))
            return httpx.Response(200, json={"choices": [{"message": {"content": "hi"}}]})

        provider = self._provider(handler)
        response = await provider.complete(
            [LLMMessage(role="user", content="hi")], LLMConfig(model="claude-sonnet"),
        )
        await provider.close()
        assert seen["model"] == "openai/gpt-4.1"
        assert response.content == "hi"
