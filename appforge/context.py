"""AppContext: wires DB, config, providers and services together."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from appforge.config import AppConfig, load_config
from appforge.infra.db.client import MongoClient

if TYPE_CHECKING:
    from pathlib import Path

    from appforge.infra.db.job_runs import JobRunRepo
    from appforge.infra.db.messages import MessageRepo
    from appforge.infra.db.steps import StepRepo
    from appforge.infra.db.usage import UsageRepo
    from appforge.infra.providers.base import LLMProvider
    from appforge.infra.sandbox.e2b_backend import E2BSandboxProvider
    from appforge.services.code_agent_service import CodeAgentService

logger = logging.getLogger(__name__)


class AppContext:
    """Central wiring for all application dependencies.

    Lazily initializes repos and services on first access. Call `initialize()`
    to set up the database connection and run migrations.
    """

    def __init__(self, config: AppConfig | None = None, config_path: Path | None = None) -> None:
        self.config = config or load_config(config_path)
        self._mongo: MongoClient | None = None
        self._message_repo: MessageRepo | None = None
        self._step_repo: StepRepo | None = None
        self._job_run_repo: JobRunRepo | None = None
        self._usage_repo: UsageRepo | None = None
        self._agent_provider: LLMProvider | None = None
        self._summarizer_provider: LLMProvider | None = None
        self._sandbox_provider: E2BSandboxProvider | None = None
        self._code_agent_service: CodeAgentService | None = None

    async def initialize(self) -> None:
        """Initialize the database connection and run migrations."""
        from appforge.infra.db.migrations import run_migrations

        self._mongo = MongoClient(
            uri=self.config.mongodb.uri,
            database=self.config.mongodb.database,
        )
        await run_migrations(self._mongo.db)
        logger.info("AppContext initialized")

    async def close(self) -> None:
        """Close all connections."""
        for provider in (self._agent_provider, self._summarizer_provider):
            close = getattr(provider, "close", None)
            if close is not None:
                await close()
        if self._mongo:
            self._mongo.close()
        logger.info("AppContext closed")

    @property
    def mongo(self) -> MongoClient:
        if self._mongo is None:
            raise RuntimeError("AppContext not initialized. Call initialize() first.")
        return self._mongo

    @property
    def message_repo(self) -> MessageRepo:
        if self._message_repo is None:
            from appforge.infra.db.messages import MessageRepo

            self._message_repo = MessageRepo(self.mongo.db)
        return self._message_repo

    @property
    def step_repo(self) -> StepRepo:
        if self._step_repo is None:
            from appforge.infra.db.steps import StepRepo

            self._step_repo = StepRepo(self.mongo.db)
        return self._step_repo

    @property
    def job_run_repo(self) -> JobRunRepo:
        if self._job_run_repo is None:
            from appforge.infra.db.job_runs import JobRunRepo

            self._job_run_repo = JobRunRepo(self.mongo.db)
        return self._job_run_repo

    @property
    def usage_repo(self) -> UsageRepo:
        if self._usage_repo is None:
            from appforge.infra.db.usage import UsageRepo

            self._usage_repo = UsageRepo(self.mongo.db)
        return self._usage_repo

    @property
    def agent_provider(self) -> LLMProvider:
        if self._agent_provider is None:
            from appforge.infra.providers.registry import get_provider_with_fallback

            self._agent_provider = get_provider_with_fallback(
                self.config, self.config.agent.provider,
            )
        return self._agent_provider

    @property
    def summarizer_provider(self) -> LLMProvider:
        if self._summarizer_provider is None:
            from appforge.infra.providers.registry import get_provider_with_fallback

            self._summarizer_provider = get_provider_with_fallback(
                self.config, self.config.summarizer.provider,
            )
        return self._summarizer_provider

    @property
    def sandbox_provider(self) -> E2BSandboxProvider:
        if self._sandbox_provider is None:
            from appforge.infra.sandbox.e2b_backend import E2BSandboxProvider

            self._sandbox_provider = E2BSandboxProvider(self.config.sandbox)
        return self._sandbox_provider

    @property
    def code_agent_service(self) -> CodeAgentService:
        if self._code_agent_service is None:
            from appforge.services.code_agent_service import CodeAgentService

            self._code_agent_service = CodeAgentService(
                message_repo=self.message_repo,
                step_repo=self.step_repo,
                job_run_repo=self.job_run_repo,
                agent_provider=self.agent_provider,
                summarizer_provider=self.summarizer_provider,
                sandbox_provider=self.sandbox_provider,
                config=self.config,
                usage_repo=self.usage_repo,
            )
        return self._code_agent_service
