"""Step record repository - memoized step results per job run."""

from __future__ import annotations

import logging

from appforge.models.step import StepRecord

logger = logging.getLogger(__name__)


class StepRepo:
    """Stores completed step results keyed by (run_id, step_name)."""

    COLLECTION = "job_steps"

    def __init__(self, db) -> None:
        self._col = db[self.COLLECTION]

    async def find(self, run_id: str, step_name: str) -> StepRecord | None:
        doc = await self._col.find_one({"run_id": run_id, "step_name": step_name})
        return StepRecord.from_doc(doc) if doc else None

    async def save(self, record: StepRecord) -> None:
        """Record a completed step. An existing record for the key is kept."""
        await self._col.update_one(
            {"run_id": record.run_id, "step_name": record.step_name},
            {"$setOnInsert": record.to_doc()},
            upsert=True,
        )

    async def list_by_run(self, run_id: str) -> list[StepRecord]:
        """Completed steps of a run, in completion order."""
        cursor = self._col.find({"run_id": run_id}).sort("completed_at", 1)
        return [StepRecord.from_doc(doc) async for doc in cursor]
