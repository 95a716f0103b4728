"""Conversation history loader for the coding agent's context."""

from __future__ import annotations

import logging
from typing import Protocol

from appforge.models.message import Message, MessageRole
from appforge.models.provider import LLMMessage

logger = logging.getLogger(__name__)

DEFAULT_HISTORY_LIMIT = 6


class RecentMessageSource(Protocol):
    async def find_recent(self, project_id: str, limit: int = 6) -> list[Message]: ...


def to_agent_role(role: MessageRole) -> str:
    return "assistant" if role == MessageRole.ASSISTANT else "user"


async def load_history(
    repo: RecentMessageSource,
    project_id: str,
    limit: int = DEFAULT_HISTORY_LIMIT,
) -> list[dict]:
    """Return the ``limit`` most recent messages, oldest first.

    Entries are plain ``{"role", "content"}`` dicts so the snapshot can be
    memoized as a step result.
    """
    messages = await repo.find_recent(project_id, limit)
    history = [
        {"role": to_agent_role(m.role), "content": m.content}
        for m in reversed(messages)
    ]
    logger.debug("Loaded %d history messages for project %s", len(history), project_id)
    return history


def history_to_llm_messages(history: list[dict]) -> list[LLMMessage]:
    return [LLMMessage(role=h["role"], content=h["content"]) for h in history]
