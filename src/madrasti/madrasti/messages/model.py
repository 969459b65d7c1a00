from __future__ import annotations

from dataclasses import dataclass

from ..core.enums import MessageType

ADMIN_ID = "admin"
BROADCAST_ID = "all"


@dataclass(frozen=True)
class Message:
    """A message between the school administration and teachers.

    ``sender_id``/``receiver_id`` are "admin", "all" (broadcast) or a teacher id.
    """

    id: str
    sender_id: str
    sender_name: str
    receiver_id: str
    content: str
    timestamp: str
    is_read: bool = False
    type: MessageType = MessageType.DIRECT

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "senderId": self.sender_id,
            "senderName": self.sender_name,
            "receiverId": self.receiver_id,
            "content": self.content,
            "timestamp": self.timestamp,
            "isRead": self.is_read,
            "type": self.type.value,
        }

    @classmethod
    def from_dict(cls, d: dict) -> "Message":
        return cls(
            id=str(d["id"]),
            sender_id=str(d.get("senderId") or ""),
            sender_name=str(d.get("senderName") or ""),
            receiver_id=str(d.get("receiverId") or ""),
            content=str(d.get("content") or ""),
            timestamp=str(d.get("timestamp") or ""),
            is_read=bool(d.get("isRead")),
            type=MessageType(d.get("type") or MessageType.DIRECT.value),
        )
