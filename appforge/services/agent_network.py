"""Coding agent and the network router that drives it.

One agent turn is one model inference followed by every tool call it emitted,
executed in emitted order. The network repeats turns until the agent's text
carries a task summary (converged) or the iteration cap is reached
(exhausted). Inferences and tool calls are steps, so a resumed run replays
them from their records instead of calling the model or the sandbox again.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from appforge.infra.providers.base import LLMProvider
from appforge.models.agent_state import AgentState, NetworkStatus, ToolResult
from appforge.models.provider import LLMConfig, LLMMessage, LLMResponse, ToolCall
from appforge.prompts import CODE_AGENT_PROMPT
from appforge.services.agent_tools.context import ToolContext
from appforge.services.agent_tools.registry import ToolHandler, get_tool_handlers
from appforge.services.convergence import extract_task_summary
from appforge.services.step_service import StepExecutor

logger = logging.getLogger(__name__)

DEFAULT_MAX_ITERATIONS = 12

# Sent after a turn that neither called tools nor finished, so the next
# request does not end on an assistant message.
CONTINUE_PROMPT = (
    "Continue working on the task. When everything is done, end your reply "
    "with <task_summary>...</task_summary>."
)

UsageRecorder = Callable[[str, LLMResponse], Awaitable[None]]


@dataclass(frozen=True)
class NetworkResult:
    status: NetworkStatus
    iterations: int
    last_text: str = ""

    @property
    def converged(self) -> bool:
        return self.status == NetworkStatus.CONVERGED


class CodingAgent:
    """Runs single turns of the coding agent against the sandbox tools."""

    name = "code-agent"

    def __init__(
        self,
        provider: LLMProvider,
        llm_config: LLMConfig,
        steps: StepExecutor,
        tool_ctx: ToolContext,
        handlers: dict[str, ToolHandler] | None = None,
        record_usage: UsageRecorder | None = None,
    ) -> None:
        self._provider = provider
        self._llm_config = llm_config
        self._steps = steps
        self._tool_ctx = tool_ctx
        self._handlers = handlers if handlers is not None else get_tool_handlers()
        self._record_usage = record_usage

    async def _infer(self, messages: list[LLMMessage]) -> LLMResponse:
        async def work() -> dict:
            response = await self._provider.complete(messages, self._llm_config)
            if self._record_usage:
                await self._record_usage(self.name, response)
            return response.to_doc()

        return LLMResponse.from_doc(await self._steps.run(f"{self.name}-inference", work))

    async def _execute_tool(self, tool_call: ToolCall, state: AgentState) -> ToolResult:
        """Execute one tool call as a step. Never raises for tool-level failures."""
        name = tool_call.name
        handler = self._handlers.get(name)
        if handler is None:
            logger.warning("Agent called unknown tool: %s", name)
            return ToolResult.err(f"Unknown tool: {name}")

        async def work() -> dict:
            try:
                result = await handler(self._tool_ctx, tool_call.arguments, state)
            except KeyError as e:
                logger.warning("Tool %s missing required argument: %s", name, e)
                result = ToolResult.err(f"Missing required argument: {e}")
            except (ValueError, TypeError) as e:
                logger.warning("Tool %s received invalid argument: %s", name, e)
                result = ToolResult.err(f"Invalid argument: {e}")
            return result.to_doc()

        return ToolResult.from_doc(await self._steps.run(name, work))

    async def run_turn(self, messages: list[LLMMessage], state: AgentState) -> str:
        """Run one turn, appending to ``messages`` and merging file writes into ``state``.

        Returns the turn's assistant text.
        """
        response = await self._infer(messages)

        if not response.has_tool_calls:
            messages.append(LLMMessage(role="assistant", content=response.content))
            return response.content

        messages.append(LLMMessage(
            role="assistant",
            content=response.content,
            tool_calls=[tc.to_dict() for tc in response.tool_calls],
        ))
        for tc in response.tool_calls:
            result = await self._execute_tool(tc, state)
            state.merge_files(result.files)
            logger.info(
                "[tool] %s -> %s", tc.name, "error" if result.is_error else "ok",
            )
            messages.append(LLMMessage(
                role="tool",
                content=result.output,
                tool_call_id=tc.id,
                name=tc.name,
            ))
        return response.content


class AgentNetwork:
    """Router loop: RUNNING until CONVERGED (summary found) or EXHAUSTED (cap hit)."""

    def __init__(
        self,
        agent: CodingAgent,
        max_iterations: int = DEFAULT_MAX_ITERATIONS,
        system_prompt: str = CODE_AGENT_PROMPT,
    ) -> None:
        if max_iterations < 1:
            raise ValueError("max_iterations must be at least 1")
        self._agent = agent
        self._max_iterations = max_iterations
        self._system_prompt = system_prompt

    async def run(
        self,
        input_text: str,
        state: AgentState,
        history: list[LLMMessage] | None = None,
    ) -> NetworkResult:
        messages = [
            LLMMessage(role="system", content=self._system_prompt),
            *(history or []),
            LLMMessage(role="user", content=input_text),
        ]

        status = NetworkStatus.RUNNING
        iterations = 0
        last_text = ""
        while status == NetworkStatus.RUNNING:
            last_text = await self._agent.run_turn(messages, state)
            iterations += 1

            summary = extract_task_summary(last_text)
            if summary:
                state.summary = summary
                status = NetworkStatus.CONVERGED
            elif iterations >= self._max_iterations:
                status = NetworkStatus.EXHAUSTED
            elif messages[-1].role == "assistant":
                messages.append(LLMMessage(role="user", content=CONTINUE_PROMPT))

        logger.info(
            "Agent network %s after %d iteration(s), %d file(s)",
            status.value, iterations, len(state.files),
        )
        return NetworkResult(status=status, iterations=iterations, last_text=last_text)
