"""OpenRouter LLM provider using httpx.

OpenRouter fronts OpenAI and Gemini models behind one OpenAI-compatible API,
which is how the coding agent (``openai/gpt-4.1``) and the summarizers
(``google/gemini-flash-1.5-8b``) are reached.
"""

from __future__ import annotations

import json
import logging

import httpx

from appforge.models.provider import LLMConfig, LLMMessage, LLMResponse, ToolCall

logger = logging.getLogger(__name__)

OPENROUTER_BASE_URL = "https://openrouter.ai/api/v1"
DEFAULT_MODEL = "openai/gpt-4.1"


class OpenRouterProvider:
    """LLM provider using the OpenRouter API (OpenAI-compatible)."""

    def __init__(self, api_key: str = "", model: str = "", base_url: str = "") -> None:
        self._default_model = model or DEFAULT_MODEL
        self._client = httpx.AsyncClient(
            base_url=base_url or OPENROUTER_BASE_URL,
            headers={
                "Authorization": f"Bearer {api_key}",
                "Content-Type": "application/json",
                "X-Title": "appforge",
            },
            timeout=180.0,
        )

    @staticmethod
    def _convert_message(msg: LLMMessage) -> dict:
        """Convert an LLMMessage to OpenAI-compatible format.

        Internal tool calls are flat {id, name, arguments: dict}; OpenAI wants
        {id, type, function: {name, arguments: json_string}}.
        """
        d = msg.to_dict()

        if msg.tool_calls:
            d["tool_calls"] = [
                {
                    "id": tc.get("id", ""),
                    "type": "function",
                    "function": {
                        "name": tc.get("name", ""),
                        "arguments": json.dumps(tc.get("arguments", {})),
                    },
                }
                for tc in msg.tool_calls
            ]
            if not msg.content:
                d["content"] = None

        if msg.role == "tool" and "name" in d:
            del d["name"]

        return d

    def _resolve_model(self, model: str) -> str:
        """OpenRouter models use 'vendor/model' names; anything else gets the default."""
        if model and "/" in model:
            return model
        return self._default_model

    @staticmethod
    def _text_parts(content) -> list[str]:
        """Content is a plain string, or a list of typed parts for some models."""
        if isinstance(content, str):
            return [content] if content else []
        if isinstance(content, list):
            return [
                p.get("text", "") for p in content
                if isinstance(p, dict) and p.get("type") == "text" and p.get("text")
            ]
        return []

    @staticmethod
    def _parse_tool_calls(raw_calls: list[dict]) -> list[ToolCall]:
        tool_calls = []
        for tc in raw_calls:
            func = tc.get("function", {})
            args = func.get("arguments", "{}")
            if isinstance(args, str):
                try:
                    args = json.loads(args) if args else {}
                except json.JSONDecodeError:
                    logger.warning("Unparseable arguments for tool %s", func.get("name"))
                    args = {}
            tool_calls.append(
                ToolCall(id=tc.get("id", ""), name=func.get("name", ""), arguments=args)
            )
        return tool_calls

    async def complete(
        self,
        messages: list[LLMMessage],
        config: LLMConfig | None = None,
    ) -> LLMResponse:
        """Generate a completion via OpenRouter."""
        config = config or LLMConfig()
        model = self._resolve_model(config.model)

        payload: dict = {
            "model": model,
            "messages": [self._convert_message(m) for m in messages],
            "max_tokens": config.max_tokens,
            "temperature": config.temperature,
        }
        if config.tools:
            payload["tools"] = [{"type": "function", "function": t} for t in config.tools]
        if config.provider_order:
            payload["provider"] = {"order": config.provider_order}

        logger.debug("Sending request to OpenRouter with model: %s", model)
        response = await self._client.post("/chat/completions", json=payload)
        response.raise_for_status()
        data = response.json()

        choice = data["choices"][0]
        message = choice["message"]
        raw_usage = data.get("usage", {})
        text_parts = self._text_parts(message.get("content"))

        return LLMResponse(
            content="".join(text_parts),
            model=data.get("model", model),
            finish_reason=choice.get("finish_reason", "") or "",
            tool_calls=self._parse_tool_calls(message.get("tool_calls") or []),
            usage={
                "input_tokens": raw_usage.get("prompt_tokens", 0),
                "output_tokens": raw_usage.get("completion_tokens", 0),
            },
            text_parts=text_parts,
        )

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()
