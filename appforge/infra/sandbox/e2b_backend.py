"""E2B sandbox backend built on the e2b Code Interpreter SDK."""

from __future__ import annotations

import logging
import time
from typing import Any

from e2b import CommandExitException, NotFoundException, SandboxException, TimeoutException
from e2b_code_interpreter import AsyncSandbox

from appforge.config import SandboxConfig
from appforge.infra.sandbox.base import CommandResult, SandboxUnavailableError

logger = logging.getLogger(__name__)


class E2BSandbox:
    """Sandbox handle wrapping an ``AsyncSandbox``."""

    def __init__(self, inner: Any) -> None:
        self._inner = inner

    @property
    def sandbox_id(self) -> str:
        return self._inner.sandbox_id

    async def run(self, cmd: str, *, timeout: int = 300) -> CommandResult:
        """Run a shell command, accumulating output through E2B's callbacks.

        Non-zero exits and command timeouts come back as a failed
        CommandResult carrying both buffers.
        """
        logger.debug("[%s] run: %s", self.sandbox_id, cmd[:200])
        buffer = {"stdout": "", "stderr": ""}

        def on_stdout(chunk) -> None:
            buffer["stdout"] += str(chunk)

        def on_stderr(chunk) -> None:
            buffer["stderr"] += str(chunk)

        t0 = time.monotonic()
        try:
            result = await self._inner.commands.run(
                cmd,
                timeout=timeout,
                on_stdout=on_stdout,
                on_stderr=on_stderr,
            )
        except CommandExitException as e:
            logger.info("[%s] command exited %s: %s", self.sandbox_id, e.exit_code, cmd[:100])
            return CommandResult(
                exit_code=e.exit_code,
                stdout=buffer["stdout"] or (e.stdout or ""),
                stderr=buffer["stderr"] or (e.stderr or ""),
                error=str(e) or f"exit code {e.exit_code}",
                duration_ms=int((time.monotonic() - t0) * 1000),
            )
        except TimeoutException as e:
            logger.info("[%s] command timed out after %ss: %s", self.sandbox_id, timeout, cmd[:100])
            return CommandResult(
                exit_code=-1,
                stdout=buffer["stdout"],
                stderr=buffer["stderr"],
                error=f"Timed out after {timeout}s: {e}",
                duration_ms=int((time.monotonic() - t0) * 1000),
            )
        except SandboxException as e:
            raise SandboxUnavailableError(self.sandbox_id, str(e)) from e

        return CommandResult(
            exit_code=result.exit_code,
            stdout=result.stdout or buffer["stdout"],
            stderr=result.stderr or buffer["stderr"],
            error=result.error or "",
            duration_ms=int((time.monotonic() - t0) * 1000),
        )

    async def write_file(self, path: str, content: str) -> None:
        """Write a text file; E2B creates parent directories."""
        try:
            await self._inner.files.write(path, content)
        except SandboxException as e:
            raise SandboxUnavailableError(self.sandbox_id, str(e)) from e

    async def read_file(self, path: str) -> str:
        try:
            return await self._inner.files.read(path)
        except NotFoundException as e:
            raise FileNotFoundError(path) from e
        except SandboxException as e:
            raise SandboxUnavailableError(self.sandbox_id, str(e)) from e

    def get_host(self, port: int) -> str:
        return self._inner.get_host(port)


class E2BSandboxProvider:
    """Creates E2B sandboxes from a pre-built template and reconnects by id."""

    def __init__(self, config: SandboxConfig) -> None:
        self._config = config

    def _api_kwargs(self) -> dict:
        return {"api_key": self._config.api_key} if self._config.api_key else {}

    async def create(self) -> str:
        inner = await AsyncSandbox.create(
            template=self._config.template,
            timeout=self._config.timeout,
            **self._api_kwargs(),
        )
        await inner.set_timeout(self._config.timeout)
        logger.info(
            "Sandbox created: id=%s template=%s timeout=%ss",
            inner.sandbox_id, self._config.template, self._config.timeout,
        )
        return inner.sandbox_id

    async def connect(self, sandbox_id: str) -> E2BSandbox:
        try:
            inner = await AsyncSandbox.connect(sandbox_id, **self._api_kwargs())
        except SandboxException as e:
            raise SandboxUnavailableError(sandbox_id, str(e)) from e
        return E2BSandbox(inner)
