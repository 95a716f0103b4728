"""Usage repository - MongoDB CRUD for token usage events."""

from __future__ import annotations

import logging

from appforge.models.usage import UsageEvent

logger = logging.getLogger(__name__)


class UsageRepo:
    """CRUD and aggregation operations for usage events in MongoDB."""

    COLLECTION = "usage_events"

    def __init__(self, db) -> None:
        self._col = db[self.COLLECTION]

    async def insert(self, event: UsageEvent) -> UsageEvent:
        """Insert a new usage event. Returns event with assigned id."""
        doc = event.to_doc()
        doc.pop("_id", None)
        result = await self._col.insert_one(doc)
        return UsageEvent(
            id=str(result.inserted_id),
            source=event.source,
            model=event.model,
            input_tokens=event.input_tokens,
            output_tokens=event.output_tokens,
            run_id=event.run_id,
            project_id=event.project_id,
            timestamp=event.timestamp,
        )

    async def get_run_totals(self, run_id: str) -> dict:
        """Sum input/output tokens across all model calls of a run."""
        pipeline = [
            {"$match": {"run_id": run_id}},
            {
                "$group": {
                    "_id": None,
                    "input_tokens": {"$sum": "$input_tokens"},
                    "output_tokens": {"$sum": "$output_tokens"},
                    "calls": {"$sum": 1},
                }
            },
        ]
        async for doc in self._col.aggregate(pipeline):
            return {
                "input_tokens": doc.get("input_tokens", 0),
                "output_tokens": doc.get("output_tokens", 0),
                "calls": doc.get("calls", 0),
            }
        return {"input_tokens": 0, "output_tokens": 0, "calls": 0}
