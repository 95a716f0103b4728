"""MongoDB index creation."""

from __future__ import annotations

import logging

import pymongo

logger = logging.getLogger(__name__)


async def run_migrations(db) -> None:
    """Create indexes on startup."""
    logger.info("Running MongoDB migrations...")

    messages = db["messages"]
    await messages.create_index(
        [("project_id", pymongo.ASCENDING), ("created_at", pymongo.DESCENDING)]
    )

    # One record per step key; this is what makes a step at-most-once
    job_steps = db["job_steps"]
    await job_steps.create_index(
        [("run_id", pymongo.ASCENDING), ("step_name", pymongo.ASCENDING)],
        unique=True,
    )

    job_runs = db["job_runs"]
    await job_runs.create_index([("run_id", pymongo.ASCENDING)], unique=True)
    await job_runs.create_index(
        [("status", pymongo.ASCENDING), ("created_at", pymongo.DESCENDING)]
    )

    usage_events = db["usage_events"]
    await usage_events.create_index(
        [("run_id", pymongo.ASCENDING), ("timestamp", pymongo.ASCENDING)]
    )
    await usage_events.create_index(
        [("source", pymongo.ASCENDING), ("timestamp", pymongo.DESCENDING)]
    )
