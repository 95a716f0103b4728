"""Job run repository - MongoDB CRUD for job runs."""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from appforge.models.job import JobRun, JobStatus

logger = logging.getLogger(__name__)


class JobRunRepo:
    """CRUD operations for job runs in MongoDB."""

    COLLECTION = "job_runs"

    def __init__(self, db) -> None:
        self._col = db[self.COLLECTION]

    async def insert(self, run: JobRun) -> JobRun:
        await self._col.insert_one(run.to_doc())
        return run

    async def find(self, run_id: str) -> JobRun | None:
        doc = await self._col.find_one({"run_id": run_id})
        return JobRun.from_doc(doc) if doc else None

    async def update_status(
        self,
        run_id: str,
        status: JobStatus,
        attempts: int,
        error: str = "",
    ) -> JobRun | None:
        result = await self._col.find_one_and_update(
            {"run_id": run_id},
            {
                "$set": {
                    "status": status.value,
                    "attempts": attempts,
                    "error": error,
                    "updated_at": datetime.now(timezone.utc),
                }
            },
            return_document=True,
        )
        return JobRun.from_doc(result) if result else None
