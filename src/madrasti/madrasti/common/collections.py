from __future__ import annotations

from typing import Callable, Hashable, Iterable, List, TypeVar

T = TypeVar("T")


def upsert_by_key(items: Iterable[T], item: T, key: Callable[[T], Hashable]) -> List[T]:
    """Return a new list where ``item`` replaces any element sharing its natural key.

    The replaced element (if any) is dropped and ``item`` is appended, so the
    result does not depend on the order earlier upserts were applied in.
    """

    target = key(item)
    out = [x for x in items if key(x) != target]
    out.append(item)
    return out


def remove_where(items: Iterable[T], predicate: Callable[[T], bool]) -> List[T]:
    return [x for x in items if not predicate(x)]
