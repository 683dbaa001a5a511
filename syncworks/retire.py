"""Retired pointers that are freed once no hazard pointer protects them."""

from __future__ import annotations

import threading
import time
from typing import Any, Callable, List, Optional, Tuple

from syncworks.hazard import HAZARDS, HazardBag

Free = Callable[[Any], object]


class RetiredSet:
    """Per-thread list of retired pointers, each with the function that frees it."""

    THRESHOLD = 64
    """``collect`` runs automatically once this many pointers are retired."""

    def __init__(self, hazards: Optional[HazardBag] = None) -> None:
        self._hazards = hazards if hazards is not None else HAZARDS
        self._inner: List[Tuple[Any, Free]] = []

    def retire(self, pointer: Any, free: Free) -> None:
        """Schedule ``free(pointer)`` for when ``pointer`` is unprotected.

        ``pointer`` must already be unreachable from shared state and must be
        retired only once.
        """
        self._inner.append((pointer, free))
        if len(self._inner) >= self.THRESHOLD:
            self.collect()

    def collect(self) -> None:
        """Free every retired pointer that no shield protects."""
        hazards = self._hazards.all_hazards()
        kept: List[Tuple[Any, Free]] = []
        ready: List[Tuple[Any, Free]] = []
        for entry in self._inner:
            (kept if entry[0] in hazards else ready).append(entry)
        self._inner = kept
        for pointer, free in ready:
            free(pointer)

    def drain(self) -> None:
        """Collect repeatedly until every retired pointer has been freed."""
        while self._inner:
            self.collect()
            if self._inner:
                time.sleep(0)

    def __len__(self) -> int:
        return len(self._inner)

    def __repr__(self) -> str:
        return f"RetiredSet(pending={len(self._inner)})"


_local = threading.local()


def _retired() -> RetiredSet:
    retired = getattr(_local, "retired", None)
    if retired is None:
        retired = RetiredSet(HAZARDS)
        _local.retired = retired
    return retired


def retire(pointer: Any, free: Free) -> None:
    """Retire ``pointer`` into the current thread's set, guarded by ``HAZARDS``."""
    _retired().retire(pointer, free)


def collect() -> None:
    """Free the current thread's retired pointers that nobody protects."""
    _retired().collect()