from __future__ import annotations

from typing import Callable, Generic, Hashable, List, Optional, Protocol, Type, TypeVar

from ..common.collections import remove_where, upsert_by_key
from ..core.enums import SlotWriteStatus
from .synced_slot import SyncedSlot


class SlotModel(Protocol):
    def to_dict(self) -> dict:
        raise NotImplementedError


M = TypeVar("M", bound=SlotModel)


class SlotListRepository(Generic[M]):
    """A list slot seen as a collection of domain objects.

    Every mutation is one read-modify-write of the whole slot under its lock,
    so one call is one local write and at most one (debounced) remote write.
    """

    def __init__(self, slot: SyncedSlot, model: Type[M]):
        self._slot = slot
        self._model = model
        self.last_status: Optional[SlotWriteStatus] = None

    @property
    def slot(self) -> SyncedSlot:
        return self._slot

    def _decode(self, raw) -> List[M]:
        return [self._model.from_dict(d) for d in (raw or [])]

    def list_all(self) -> List[M]:
        return self._decode(self._slot.get())

    def find(self, predicate: Callable[[M], bool]) -> Optional[M]:
        for item in self.list_all():
            if predicate(item):
                return item
        return None

    def save_all(self, items: List[M]) -> SlotWriteStatus:
        self.last_status = self._slot.set([i.to_dict() for i in items])
        return self.last_status

    def mutate(self, fn: Callable[[List[M]], List[M]]) -> List[M]:
        result: List[M] = []

        def apply(raw):
            items = fn(self._decode(raw))
            result[:] = items
            return [i.to_dict() for i in items]

        self.last_status = self._slot.update(apply)
        return list(result)

    def append(self, *items: M) -> List[M]:
        return self.mutate(lambda current: current + list(items))

    def upsert(self, item: M, *, key: Callable[[M], Hashable]) -> List[M]:
        return self.mutate(lambda current: upsert_by_key(current, item, key))

    def remove(self, predicate: Callable[[M], bool]) -> int:
        removed = [0]

        def apply(current: List[M]) -> List[M]:
            kept = remove_where(current, predicate)
            removed[0] = len(current) - len(kept)
            return kept

        self.mutate(apply)
        return removed[0]


class SlotValueRepository(Generic[M]):
    """A single-object slot (settings, week info)."""

    def __init__(self, slot: SyncedSlot, model: Type[M]):
        self._slot = slot
        self._model = model
        self.last_status: Optional[SlotWriteStatus] = None

    @property
    def slot(self) -> SyncedSlot:
        return self._slot

    def get(self) -> M:
        return self._model.from_dict(self._slot.get() or {})

    def save(self, value: M) -> SlotWriteStatus:
        self.last_status = self._slot.set(value.to_dict())
        return self.last_status
