from __future__ import annotations

from dataclasses import replace
from datetime import datetime
from typing import Callable, List

from ..common.datetime_utils import now_utc, to_iso
from ..common.ids import new_id
from ..common.validators import require_non_empty
from ..core.enums import MessageType
from ..core.exceptions import NotFoundError
from ..sync.school_store import SchoolStore
from .model import ADMIN_ID, BROADCAST_ID, Message

ADMIN_SENDER_NAME = "الإدارة"


class MessageService:
    """Administration <-> teacher messaging inside one school."""

    def __init__(self, store: SchoolStore, *, clock: Callable[[], datetime] = now_utc):
        self._store = store
        self._clock = clock

    def _post(self, *, sender_id: str, sender_name: str, receiver_id: str, content: str, type: MessageType) -> Message:
        message = Message(
            id=new_id("msg"),
            sender_id=sender_id,
            sender_name=sender_name,
            receiver_id=receiver_id,
            content=require_non_empty(content, "نص الرسالة"),
            timestamp=to_iso(self._clock()),
            is_read=False,
            type=type,
        )
        self._store.messages.append(message)
        return message

    def send_from_admin(self, *, receiver_id: str, content: str) -> Message:
        receiver_id = require_non_empty(receiver_id, "المستلم")
        if receiver_id == BROADCAST_ID:
            kind = MessageType.ANNOUNCEMENT
        else:
            if not self._store.teachers.find(lambda t: t.id == receiver_id):
                raise NotFoundError("المعلم غير موجود")
            kind = MessageType.DIRECT
        return self._post(
            sender_id=ADMIN_ID,
            sender_name=ADMIN_SENDER_NAME,
            receiver_id=receiver_id,
            content=content,
            type=kind,
        )

    def send_to_admin(self, *, teacher_id: str, content: str) -> Message:
        teacher = self._store.teachers.find(lambda t: t.id == teacher_id)
        if not teacher:
            raise NotFoundError("المعلم غير موجود")
        return self._post(
            sender_id=teacher.id,
            sender_name=teacher.name,
            receiver_id=ADMIN_ID,
            content=content,
            type=MessageType.DIRECT,
        )

    def conversation(self, teacher_id: str) -> List[Message]:
        """Admin view: everything exchanged with one teacher, oldest first."""

        msgs = [
            m
            for m in self._store.messages.list_all()
            if (m.sender_id == teacher_id and m.receiver_id == ADMIN_ID)
            or (m.sender_id == ADMIN_ID and m.receiver_id == teacher_id)
        ]
        return sorted(msgs, key=lambda m: m.timestamp)

    def admin_inbox(self) -> List[Message]:
        msgs = [m for m in self._store.messages.list_all() if m.receiver_id == ADMIN_ID]
        return sorted(msgs, key=lambda m: m.timestamp, reverse=True)

    def teacher_inbox(self, teacher_id: str) -> List[Message]:
        """Announcements plus direct messages for and from this teacher, newest first."""

        msgs = [
            m
            for m in self._store.messages.list_all()
            if m.receiver_id in (teacher_id, BROADCAST_ID) or m.sender_id == teacher_id
        ]
        return sorted(msgs, key=lambda m: m.timestamp, reverse=True)

    def unread_count(self, receiver_id: str) -> int:
        return sum(1 for m in self._store.messages.list_all() if m.receiver_id == receiver_id and not m.is_read)

    def mark_read(self, receiver_id: str, *, sender_id: str = "") -> int:
        """Mark messages addressed to ``receiver_id`` as read. Returns how many changed."""

        changed = [0]

        def apply(items: List[Message]) -> List[Message]:
            out = []
            for m in items:
                if m.receiver_id == receiver_id and not m.is_read and (not sender_id or m.sender_id == sender_id):
                    m = replace(m, is_read=True)
                    changed[0] += 1
                out.append(m)
            return out

        self._store.messages.mutate(apply)
        return changed[0]
