"""Durable step executor: at-most-once, memoized units of work per job run.

Every externally visible side effect of a job run (sandbox creation, model
calls, tool calls, storage writes) goes through ``StepExecutor.run``. When a
run is retried or resumed, steps that already completed return their recorded
result instead of executing again. Failures are never recorded, so a failed
step runs again on the next attempt.
"""

from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Awaitable, Callable
from typing import Any, Protocol

from appforge.models.step import StepRecord

logger = logging.getLogger(__name__)

StepWork = Callable[[], Awaitable[Any]]


class StepStore(Protocol):
    async def find(self, run_id: str, step_name: str) -> StepRecord | None: ...

    async def save(self, record: StepRecord) -> None: ...

    async def list_by_run(self, run_id: str) -> list[StepRecord]: ...


class StepExecutor:
    """Runs named steps for one attempt of one job run.

    A name used several times within the same attempt gets an occurrence
    suffix (``terminal``, ``terminal:1``, ...). Replays issue steps in the same
    order, so they hit the same keys.
    """

    def __init__(self, run_id: str, store: StepStore) -> None:
        self._run_id = run_id
        self._store = store
        self._occurrences: Counter[str] = Counter()
        self.replayed = 0
        self.executed = 0

    @property
    def run_id(self) -> str:
        return self._run_id

    def _next_key(self, name: str) -> str:
        index = self._occurrences[name]
        self._occurrences[name] += 1
        return name if index == 0 else f"{name}:{index}"

    async def run(self, name: str, work: StepWork) -> Any:
        key = self._next_key(name)
        record = await self._store.find(self._run_id, key)
        if record is not None:
            logger.debug("Step %s/%s replayed from record", self._run_id, key)
            self.replayed += 1
            return record.result

        result = await work()
        await self._store.save(StepRecord(run_id=self._run_id, step_name=key, result=result))
        self.executed += 1
        logger.debug("Step %s/%s completed", self._run_id, key)
        return result
