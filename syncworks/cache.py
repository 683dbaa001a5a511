"""Thread-safe cache that computes each value once."""

from __future__ import annotations

import threading
from typing import Callable, Dict, Generic, Hashable, TypeVar

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")


class _Slot:
    __slots__ = ("lock", "ready", "value")

    def __init__(self) -> None:
        self.lock = threading.Lock()
        self.ready = False
        self.value = None


class Cache(Generic[K, V]):
    """Remembers the result computed for each key.

    Computations for different keys run concurrently; for one key the
    computation runs once, and concurrent callers wait for its result.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._slots: Dict[K, _Slot] = {}

    def get_or_insert_with(self, key: K, f: Callable[[K], V]) -> V:
        """Return the cached value for ``key``, computing it with ``f`` if needed.

        If ``f`` raises, nothing is cached and the error propagates.
        """
        while True:
            with self._lock:
                slot = self._slots.get(key)
                owner = slot is None
                if owner:
                    slot = _Slot()
                    slot.lock.acquire()
                    self._slots[key] = slot
            if owner:
                try:
                    slot.value = f(key)
                    slot.ready = True
                    return slot.value
                except BaseException:
                    with self._lock:
                        del self._slots[key]
                    raise
                finally:
                    slot.lock.release()
            with slot.lock:
                if slot.ready:
                    return slot.value