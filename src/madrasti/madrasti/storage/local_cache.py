from __future__ import annotations

import os
import threading
from pathlib import Path
from typing import Dict, Iterator, Optional, Protocol
from urllib.parse import quote, unquote

from ..core.exceptions import StorageError, StorageQuotaError


def slot_cache_key(school_id: str, slot_key: str) -> str:
    return f"{school_id}_{slot_key}"


class LocalCache(Protocol):
    """Synchronous on-device key-value cache (string values)."""

    def get_item(self, key: str) -> Optional[str]:
        raise NotImplementedError

    def set_item(self, key: str, value: str) -> None:
        raise NotImplementedError

    def remove_item(self, key: str) -> None:
        raise NotImplementedError

    def keys(self) -> Iterator[str]:
        raise NotImplementedError


class MemoryCache:
    """Process-local cache, used by tests and when no data directory is configured."""

    def __init__(self, *, max_bytes: int = 0):
        self._items: Dict[str, str] = {}
        self._max_bytes = int(max_bytes)
        self._lock = threading.Lock()

    def get_item(self, key: str) -> Optional[str]:
        with self._lock:
            return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        with self._lock:
            if self._max_bytes:
                used = sum(len(v.encode("utf-8")) for k, v in self._items.items() if k != key)
                if used + len(value.encode("utf-8")) > self._max_bytes:
                    raise StorageQuotaError(f"Local cache quota exceeded writing {key!r}")
            self._items[key] = value

    def remove_item(self, key: str) -> None:
        with self._lock:
            self._items.pop(key, None)

    def keys(self) -> Iterator[str]:
        with self._lock:
            return iter(list(self._items))


class JsonFileCache:
    """One file per key under ``directory``.

    Writes go to a temp file first and are moved into place, so a crash never
    leaves a half-written value behind.
    """

    SUFFIX = ".json"

    def __init__(self, directory: str | Path, *, max_bytes: int = 0):
        self._dir = Path(directory)
        self._max_bytes = int(max_bytes)
        self._lock = threading.Lock()
        self._dir.mkdir(parents=True, exist_ok=True)

    def _path(self, key: str) -> Path:
        return self._dir / (quote(key, safe="") + self.SUFFIX)

    def _used_bytes(self, *, excluding: Path) -> int:
        total = 0
        for p in self._dir.glob("*" + self.SUFFIX):
            if p != excluding:
                total += p.stat().st_size
        return total

    def get_item(self, key: str) -> Optional[str]:
        path = self._path(key)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError as e:
            raise StorageError(f"Cannot read {key!r}: {e}") from e

    def set_item(self, key: str, value: str) -> None:
        path = self._path(key)
        data = value.encode("utf-8")
        with self._lock:
            if self._max_bytes and self._used_bytes(excluding=path) + len(data) > self._max_bytes:
                raise StorageQuotaError(f"Local cache quota exceeded writing {key!r}")
            tmp = path.with_name(path.name + ".tmp")
            try:
                tmp.write_bytes(data)
                os.replace(tmp, path)
            except OSError as e:
                raise StorageError(f"Cannot write {key!r}: {e}") from e

    def remove_item(self, key: str) -> None:
        with self._lock:
            try:
                self._path(key).unlink()
            except FileNotFoundError:
                pass

    def keys(self) -> Iterator[str]:
        for p in sorted(self._dir.glob("*" + self.SUFFIX)):
            yield unquote(p.name[: -len(self.SUFFIX)])
