from __future__ import annotations

from typing import Any, Optional, Protocol


class RemoteStore(Protocol):
    """Remote document store mirrored by the synced slots.

    Layout: tenant documents addressed by (school_id, slot_key) holding the slot
    value, and system documents addressed by a setting key in the registry
    namespace. Loads return None when no document exists; failures raise
    RemoteStoreError.
    """

    def load_school_data(self, school_id: str, slot_key: str) -> Optional[Any]:
        raise NotImplementedError

    def save_school_data(self, school_id: str, slot_key: str, value: Any) -> None:
        raise NotImplementedError

    def load_system_data(self, key: str) -> Optional[Any]:
        raise NotImplementedError

    def save_system_data(self, key: str, value: Any) -> None:
        raise NotImplementedError
