"""Usage event domain model."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone


@dataclass(frozen=True)
class UsageEvent:
    """Token usage of one model call made by a job run."""

    source: str  # "code-agent", "title-generator", "response-generator"
    model: str
    input_tokens: int
    output_tokens: int
    run_id: str = ""
    project_id: str = ""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    id: str | None = None

    def to_doc(self) -> dict:
        """Serialize to MongoDB document."""
        doc: dict = {
            "source": self.source,
            "model": self.model,
            "input_tokens": self.input_tokens,
            "output_tokens": self.output_tokens,
            "run_id": self.run_id,
            "project_id": self.project_id,
            "timestamp": self.timestamp,
        }
        if self.id:
            doc["_id"] = self.id
        return doc

    @classmethod
    def from_doc(cls, doc: dict) -> UsageEvent:
        """Deserialize from MongoDB document."""
        return cls(
            id=str(doc["_id"]),
            source=doc["source"],
            model=doc.get("model", ""),
            input_tokens=doc.get("input_tokens", 0),
            output_tokens=doc.get("output_tokens", 0),
            run_id=doc.get("run_id", ""),
            project_id=doc.get("project_id", ""),
            timestamp=doc.get("timestamp", datetime.now(timezone.utc)),
        )
