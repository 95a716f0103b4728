"""Step record domain model."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any


@dataclass(frozen=True)
class StepRecord:
    """Memoized result of a completed step within a job run."""

    run_id: str
    step_name: str
    result: Any = None
    completed_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_doc(self) -> dict:
        return {
            "run_id": self.run_id,
            "step_name": self.step_name,
            "result": self.result,
            "completed_at": self.completed_at,
        }

    @classmethod
    def from_doc(cls, doc: dict) -> StepRecord:
        return cls(
            run_id=doc["run_id"],
            step_name=doc["step_name"],
            result=doc.get("result"),
            completed_at=doc.get("completed_at", datetime.now(timezone.utc)),
        )
