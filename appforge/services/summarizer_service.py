"""Post-run summarizers: fragment title and user-facing response."""

from __future__ import annotations

import logging
from typing import Any

from appforge.infra.providers.base import LLMProvider
from appforge.models.provider import LLMConfig, LLMMessage, LLMResponse
from appforge.prompts import FRAGMENT_TITLE_PROMPT, RESPONSE_PROMPT
from appforge.services.agent_network import UsageRecorder
from appforge.services.step_service import StepExecutor

logger = logging.getLogger(__name__)

DEFAULT_TITLE = "Fragment"
DEFAULT_RESPONSE = "Here is what I built for you."


def output_text(output: Any, fallback: str) -> str:
    """Plain text of a single-shot agent output.

    Strings are used as they are, lists of strings are joined with a single
    space, and anything else (including empty output) gives ``fallback``.
    """
    if isinstance(output, list) and output and all(isinstance(p, str) for p in output):
        output = " ".join(output)
    if isinstance(output, str) and output.strip():
        return output.strip()
    return fallback


class SummarizerService:
    """Two stateless single-turn agents run on the final task summary."""

    def __init__(
        self,
        provider: LLMProvider,
        llm_config: LLMConfig,
        steps: StepExecutor,
        record_usage: UsageRecorder | None = None,
    ) -> None:
        self._provider = provider
        self._llm_config = llm_config
        self._steps = steps
        self._record_usage = record_usage

    async def _run_agent(
        self, name: str, step_name: str, system_prompt: str, summary: str, fallback: str,
    ) -> str:
        async def work() -> str:
            response: LLMResponse = await self._provider.complete(
                [
                    LLMMessage(role="system", content=system_prompt),
                    LLMMessage(role="user", content=summary),
                ],
                self._llm_config,
            )
            if self._record_usage:
                await self._record_usage(name, response)
            if response.has_tool_calls and not response.content:
                logger.warning("%s returned no text output", name)
                return fallback
            return output_text(response.text_parts or response.content, fallback)

        return await self._steps.run(step_name, work)

    async def generate_title(self, summary: str) -> str:
        return await self._run_agent(
            "title-generator", "generate-fragment-title",
            FRAGMENT_TITLE_PROMPT, summary, DEFAULT_TITLE,
        )

    async def generate_response(self, summary: str) -> str:
        return await self._run_agent(
            "response-generator", "generate-response",
            RESPONSE_PROMPT, summary, DEFAULT_RESPONSE,
        )
