"""Lock-free Treiber stack and an elimination-backoff stack built on it."""

from __future__ import annotations

import random
import time
from abc import ABC, abstractmethod
from typing import Any, Optional

from syncworks.adt import AtomicCell

_ELIM_SIZE = 16
_ELIM_DELAY = 0.01


def _random_elim_index() -> int:
    return random.randrange(_ELIM_SIZE)


class CasFailed(Exception):
    """A compare-and-swap lost a race; the operation may be retried.

    For a push, the unserved request is kept in ``request``.
    """

    def __init__(self, request: Optional["Node"] = None) -> None:
        super().__init__("compare-and-swap failed")
        self.request = request


class Node:
    """A push request: the value and the link to the node below it."""

    __slots__ = ("data", "next")

    def __init__(self, data: Any) -> None:
        self.data = data
        self.next: AtomicCell = AtomicCell(None)

    def __repr__(self) -> str:
        return f"Node({self.data!r})"


class Stack(ABC):
    """A concurrent stack built from single-attempt operations."""

    @abstractmethod
    def try_push(self, req: Node) -> None:
        """Push ``req`` once; raise ``CasFailed`` if the attempt lost a race."""

    @abstractmethod
    def try_pop(self) -> Any:
        """Pop once; raise ``IndexError`` if empty, ``CasFailed`` on a lost race."""

    @abstractmethod
    def is_empty(self) -> bool:
        """Whether the stack holds no values."""

    def push(self, value: Any) -> None:
        """Push ``value``, retrying until it succeeds."""
        req = Node(value)
        while True:
            try:
                self.try_push(req)
                return
            except CasFailed:
                continue

    def pop(self) -> Any:
        """Pop the top value; raise ``IndexError`` if the stack is empty."""
        while True:
            try:
                return self.try_pop()
            except CasFailed:
                continue


class TreiberStack(Stack):
    """Treiber's lock-free stack; any number of producers and consumers."""

    def __init__(self) -> None:
        self._head: AtomicCell = AtomicCell(None)

    def try_push(self, req: Node) -> None:
        head = self._head.load()
        req.next.store(head)
        swapped, _ = self._head.compare_exchange(head, req)
        if not swapped:
            raise CasFailed(req)

    def try_pop(self) -> Any:
        head = self._head.load()
        if head is None:
            raise IndexError("pop from empty stack")
        following = head.next.load()
        swapped, _ = self._head.compare_exchange(head, following)
        if not swapped:
            raise CasFailed()
        return head.data

    def is_empty(self) -> bool:
        return self._head.load() is None


class ElimStack(Stack):
    """Elimination-backoff stack.

    When an operation on the inner stack loses a race, a push parks its
    request in a random slot for a short while, and a pop tries to take a
    parked request, so that the two cancel out without touching the inner
    stack.
    """

    def __init__(self, inner: Optional[Stack] = None) -> None:
        self._inner = inner if inner is not None else TreiberStack()
        self._slots = [AtomicCell(None) for _ in range(_ELIM_SIZE)]

    def try_push(self, req: Node) -> None:
        try:
            self._inner.try_push(req)
            return
        except CasFailed:
            pass

        slot = self._slots[_random_elim_index()]
        if slot.load() is not None:
            raise CasFailed(req)
        parked, _ = slot.compare_exchange(None, req)
        if not parked:
            raise CasFailed(req)

        time.sleep(_ELIM_DELAY)

        withdrawn, _ = slot.compare_exchange(req, None)
        if withdrawn:
            raise CasFailed(req)

    def try_pop(self) -> Any:
        try:
            return self._inner.try_pop()
        except CasFailed:
            pass

        slot = self._slots[_random_elim_index()]
        req = slot.load()
        if req is None:
            raise CasFailed()
        taken, _ = slot.compare_exchange(req, None)
        if not taken:
            raise CasFailed()
        return req.data

    def is_empty(self) -> bool:
        return self._inner.is_empty()