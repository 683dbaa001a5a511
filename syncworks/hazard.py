"""Hazard pointers: slots that announce which pointers a thread is using.

A pointer is any hashable token; ``None`` stands for the null pointer.
"""

from __future__ import annotations

import threading
from typing import Any, Iterator, Optional, Set, Tuple

from syncworks.adt import AtomicCell


class _HazardSlot:
    __slots__ = ("active", "hazard", "next")

    def __init__(self) -> None:
        self.active: AtomicCell = AtomicCell(True)
        self.hazard: AtomicCell = AtomicCell(None)
        self.next: Optional[_HazardSlot] = None

    def __repr__(self) -> str:
        return f"HazardSlot(active={self.active.load()}, hazard={self.hazard.load()!r})"


class HazardBag:
    """Bag (multiset) of hazard pointers.

    Slots form a grow-only list; a released slot is deactivated and later
    reused by another ``Shield``.
    """

    def __init__(self) -> None:
        self._head: AtomicCell = AtomicCell(None)

    def _slots(self) -> Iterator[_HazardSlot]:
        slot = self._head.load()
        while slot is not None:
            yield slot
            slot = slot.next

    def _try_acquire_inactive(self) -> Optional[_HazardSlot]:
        for slot in self._slots():
            swapped, _ = slot.active.compare_exchange(False, True)
            if swapped:
                return slot
        return None

    def acquire_slot(self) -> _HazardSlot:
        """Reuse an inactive slot or add a new one, and mark it active."""
        slot = self._try_acquire_inactive()
        if slot is not None:
            return slot
        slot = _HazardSlot()
        while True:
            head = self._head.load()
            slot.next = head
            swapped, _ = self._head.compare_exchange(head, slot)
            if swapped:
                return slot

    def all_hazards(self) -> Set[Any]:
        """Every pointer currently announced by some slot."""
        hazards = set()
        for slot in self._slots():
            pointer = slot.hazard.load()
            if pointer is not None:
                hazards.add(pointer)
        return hazards

    def slot_count(self) -> int:
        """Number of slots ever allocated in this bag."""
        return sum(1 for _ in self._slots())

    def __repr__(self) -> str:
        return f"HazardBag(slots={self.slot_count()})"


HAZARDS = HazardBag()
"""Default global bag of hazard pointers."""


class Shield:
    """Ownership of one hazard slot, used to protect one pointer at a time."""

    def __init__(self, hazards: Optional[HazardBag] = None) -> None:
        bag = hazards if hazards is not None else HAZARDS
        self._slot: Optional[_HazardSlot] = bag.acquire_slot()
        self._owner = threading.get_ident()

    def _live(self) -> _HazardSlot:
        if self._slot is None:
            raise ValueError("shield has been released")
        return self._slot

    def set(self, pointer: Any) -> None:
        """Announce ``pointer`` in this shield's slot."""
        self._live().hazard.store(pointer)

    def clear(self) -> None:
        """Withdraw the announced pointer."""
        self.set(None)

    @staticmethod
    def validate(pointer: Any, src: AtomicCell) -> Tuple[bool, Any]:
        """Check that ``src`` still holds ``pointer``.

        Returns ``(True, pointer)`` if so and ``(False, current)`` otherwise.
        """
        current = src.load()
        if current is pointer:
            return True, pointer
        return False, current

    def try_protect(self, pointer: Any, src: AtomicCell) -> Tuple[bool, Any]:
        """Announce ``pointer`` and validate it against ``src``.

        On failure the shield is cleared and ``(False, current)`` is returned.
        """
        self.set(pointer)
        ok, current = self.validate(pointer, src)
        if not ok:
            self.clear()
        return ok, current

    def protect(self, src: AtomicCell) -> Any:
        """Load a pointer from ``src`` and keep it protected; return it."""
        pointer = src.load()
        while True:
            ok, current = self.try_protect(pointer, src)
            if ok:
                return pointer
            pointer = current

    def release(self) -> None:
        """Clear the slot and give it back to the bag."""
        slot = self._slot
        if slot is None:
            return
        slot.hazard.store(None)
        slot.active.store(False)
        self._slot = None

    def __enter__(self) -> "Shield":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.release()

    def __repr__(self) -> str:
        if self._slot is None:
            return "Shield(<released>)"
        return f"Shield({self._slot!r})"