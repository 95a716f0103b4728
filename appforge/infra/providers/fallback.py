"""Fallback LLM provider that tries multiple providers in order."""

from __future__ import annotations

import logging

from appforge.models.provider import LLMConfig, LLMMessage, LLMResponse

logger = logging.getLogger(__name__)


class FallbackProvider:
    """Wraps multiple LLM providers, trying each in order until one succeeds."""

    def __init__(self, providers: list, names: list[str] | None = None) -> None:
        if not providers:
            raise ValueError("FallbackProvider requires at least one provider")
        self._providers = providers
        self._names = names or [f"provider-{i}" for i in range(len(providers))]

    @property
    def names(self) -> list[str]:
        return list(self._names)

    async def complete(
        self,
        messages: list[LLMMessage],
        config: LLMConfig | None = None,
    ) -> LLMResponse:
        """Try each provider in order. Return the first successful response."""
        last_error: Exception | None = None

        for provider, name in zip(self._providers, self._names):
            try:
                return await provider.complete(messages, config)
            except Exception as e:
                last_error = e
                logger.warning("Provider '%s' failed: %s. Trying next...", name, e)

        # The last error propagates with its original type
        logger.error("All %d providers failed", len(self._providers))
        if last_error is None:
            raise RuntimeError("No provider produced a response")
        raise last_error

    async def close(self) -> None:
        for provider in self._providers:
            close = getattr(provider, "close", None)
            if close is not None:
                await close()
