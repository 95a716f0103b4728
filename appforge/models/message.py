"""Chat message and fragment domain models."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum


class MessageRole(str, Enum):
    USER = "USER"
    ASSISTANT = "ASSISTANT"


class MessageType(str, Enum):
    RESULT = "RESULT"
    ERROR = "ERROR"


@dataclass(frozen=True)
class Fragment:
    """Generated app bundle: live sandbox URL, display title, and files."""

    sandbox_url: str
    title: str
    files: dict[str, str] = field(default_factory=dict)
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_doc(self) -> dict:
        return {
            "sandbox_url": self.sandbox_url,
            "title": self.title,
            "files": dict(self.files),
            "created_at": self.created_at,
        }

    @classmethod
    def from_doc(cls, doc: dict) -> Fragment:
        return cls(
            sandbox_url=doc.get("sandbox_url", ""),
            title=doc.get("title", ""),
            files=dict(doc.get("files", {})),
            created_at=doc.get("created_at", datetime.now(timezone.utc)),
        )


@dataclass(frozen=True)
class Message:
    """A chat message in a project conversation."""

    project_id: str
    role: MessageRole
    content: str
    type: MessageType = MessageType.RESULT
    fragment: Fragment | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    id: str | None = None

    def __post_init__(self) -> None:
        if not self.project_id:
            raise ValueError("Message project_id cannot be empty")

    def with_id(self, message_id: str) -> Message:
        """Return a copy carrying the storage-assigned id."""
        return Message(
            project_id=self.project_id,
            role=self.role,
            content=self.content,
            type=self.type,
            fragment=self.fragment,
            created_at=self.created_at,
            updated_at=self.updated_at,
            id=message_id,
        )

    def to_doc(self) -> dict:
        """Serialize to MongoDB document."""
        doc: dict = {
            "project_id": self.project_id,
            "role": self.role.value,
            "content": self.content,
            "type": self.type.value,
            "fragment": self.fragment.to_doc() if self.fragment else None,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }
        if self.id:
            doc["_id"] = self.id
        return doc

    @classmethod
    def from_doc(cls, doc: dict) -> Message:
        """Deserialize from MongoDB document."""
        fragment_doc = doc.get("fragment")
        return cls(
            id=str(doc["_id"]),
            project_id=doc["project_id"],
            role=MessageRole(doc["role"]),
            content=doc.get("content", ""),
            type=MessageType(doc.get("type", MessageType.RESULT.value)),
            fragment=Fragment.from_doc(fragment_doc) if fragment_doc else None,
            created_at=doc.get("created_at", datetime.now(timezone.utc)),
            updated_at=doc.get("updated_at", datetime.now(timezone.utc)),
        )
