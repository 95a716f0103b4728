"""Message repository - MongoDB reads and writes for project conversations."""

from __future__ import annotations

import logging

from appforge.models.message import Message

logger = logging.getLogger(__name__)


class MessageRepo:
    """Conversation storage for projects.

    Fragments are not a collection of their own: they are embedded in the
    assistant message they belong to.
    """

    COLLECTION = "messages"

    def __init__(self, db) -> None:
        self._col = db[self.COLLECTION]

    async def append(self, message: Message) -> Message:
        """Insert a new message. Returns message with assigned id."""
        doc = message.to_doc()
        doc.pop("_id", None)
        result = await self._col.insert_one(doc)
        logger.debug(
            "Appended %s %s message to project %s",
            message.role.value, message.type.value, message.project_id,
        )
        return message.with_id(str(result.inserted_id))

    async def find_recent(self, project_id: str, limit: int = 6) -> list[Message]:
        """Most recent messages of a project, newest first."""
        cursor = (
            self._col.find({"project_id": project_id})
            .sort("created_at", -1)
            .limit(limit)
        )
        return [Message.from_doc(doc) async for doc in cursor]

    async def list_by_project(self, project_id: str) -> list[Message]:
        """All messages of a project, oldest first."""
        cursor = self._col.find({"project_id": project_id}).sort("created_at", 1)
        return [Message.from_doc(doc) async for doc in cursor]
