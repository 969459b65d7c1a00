from __future__ import annotations

import threading
from typing import Callable, Protocol


class Cancellable(Protocol):
    def cancel(self) -> None:
        raise NotImplementedError


class Scheduler(Protocol):
    """Where the synced slots run their deferred work.

    ``call_later`` backs the debounced remote write, ``submit`` the
    fire-and-forget remote fetch. Tests swap in a manual clock.
    """

    def call_later(self, delay: float, fn: Callable[[], None]) -> Cancellable:
        raise NotImplementedError

    def submit(self, fn: Callable[[], None]) -> None:
        raise NotImplementedError


class ThreadingScheduler:
    def __init__(self, *, name: str = "madrasti-sync"):
        self._name = name

    def call_later(self, delay: float, fn: Callable[[], None]) -> Cancellable:
        timer = threading.Timer(float(delay), fn)
        timer.name = f"{self._name}-timer"
        timer.daemon = True
        timer.start()
        return timer

    def submit(self, fn: Callable[[], None]) -> None:
        thread = threading.Thread(target=fn, name=f"{self._name}-fetch", daemon=True)
        thread.start()
