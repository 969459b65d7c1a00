from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import SchoolMetadata


class TenantRegistry(Protocol):
    """Ordered list of registered schools.

    Note (DIP): services depend on this interface, so the locally cached
    registry can be swapped for a server-backed one.
    """

    def list(self) -> Sequence[SchoolMetadata]:
        raise NotImplementedError

    def get(self, school_id: str) -> Optional[SchoolMetadata]:
        raise NotImplementedError

    def add(self, school: SchoolMetadata) -> None:
        raise NotImplementedError

    def update(self, school: SchoolMetadata) -> bool:
        raise NotImplementedError

    def remove(self, school_id: str) -> bool:
        """Drop the registry entry only; the school's slot data is left in place."""

        raise NotImplementedError
