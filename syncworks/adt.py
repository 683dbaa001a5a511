"""Abstract map and set interfaces, and adapters between them."""

from __future__ import annotations

import copy
import threading
from abc import ABC, abstractmethod
from typing import Any, Callable, Generic, Hashable, Optional, Tuple, TypeVar

T = TypeVar("T")
R = TypeVar("R")


class KeyExistsError(KeyError):
    """Raised by ``insert`` when the key is already present.

    The rejected value is handed back in ``value``.
    """

    def __init__(self, key: Any, value: Any) -> None:
        super().__init__(key)
        self.key = key
        self.value = value


class AtomicCell(Generic[T]):
    """A shared cell whose operations are atomic with respect to each other.

    ``compare_exchange`` compares by identity, like a pointer comparison.
    """

    __slots__ = ("_value", "_lock")

    def __init__(self, value: T = None) -> None:
        self._value = value
        self._lock = threading.Lock()

    def load(self) -> T:
        with self._lock:
            return self._value

    def store(self, value: T) -> None:
        with self._lock:
            self._value = value

    def swap(self, value: T) -> T:
        """Store ``value`` and return the previous one."""
        with self._lock:
            previous, self._value = self._value, value
            return previous

    def compare_exchange(self, current: T, new: T) -> Tuple[bool, T]:
        """Replace the value with ``new`` if it is ``current``.

        Returns ``(True, current)`` on success and ``(False, actual)`` otherwise.
        """
        with self._lock:
            actual = self._value
            if actual is current:
                self._value = new
                return True, actual
            return False, actual

    def __repr__(self) -> str:
        return f"AtomicCell({self.load()!r})"


class SequentialMap(ABC):
    """A key-value map used by one thread at a time."""

    @abstractmethod
    def lookup(self, key: Hashable) -> Optional[Any]:
        """Return the value for ``key``, or ``None`` if it is absent."""

    @abstractmethod
    def insert(self, key: Hashable, value: Any) -> None:
        """Insert a pair; raise ``KeyExistsError`` if the key is present."""

    @abstractmethod
    def delete(self, key: Hashable) -> Any:
        """Remove ``key`` and return its value; raise ``KeyError`` if absent."""


class ConcurrentMap(ABC):
    """A key-value map shared between threads."""

    @abstractmethod
    def lookup(self, key: Hashable, f: Callable[[Optional[Any]], R]) -> R:
        """Call ``f`` with the value for ``key`` (or ``None``) and return its result."""

    @abstractmethod
    def insert(self, key: Hashable, value: Any) -> None:
        """Insert a pair; raise ``KeyExistsError`` if the key is present."""

    @abstractmethod
    def delete(self, key: Hashable) -> Any:
        """Remove ``key`` and return its value; raise ``KeyError`` if absent."""


class NonblockingMap(ABC):
    """A key-value map whose operations never block on each other."""

    @abstractmethod
    def lookup(self, key: Hashable) -> Optional[Any]:
        """Return the value for ``key``, or ``None`` if it is absent."""

    @abstractmethod
    def insert(self, key: Hashable, value: Any) -> None:
        """Insert a pair; raise ``KeyExistsError`` if the key is present."""

    @abstractmethod
    def delete(self, key: Hashable) -> Any:
        """Remove ``key`` and return a reference to its value; raise ``KeyError`` if absent."""


class LockedMap(ConcurrentMap):
    """A sequential map made concurrent by a single lock."""

    def __init__(self, inner: SequentialMap) -> None:
        self._inner = inner
        self._lock = threading.Lock()

    def lookup(self, key, f):
        with self._lock:
            return f(self._inner.lookup(key))

    def insert(self, key, value):
        with self._lock:
            self._inner.insert(key, value)

    def delete(self, key):
        with self._lock:
            return self._inner.delete(key)


class NonblockingConcurrentMap(ConcurrentMap):
    """Presents a nonblocking map as a concurrent map.

    ``delete`` returns a copy of the removed value, since the original may
    still be seen by concurrent lookups.
    """

    def __init__(self, inner: NonblockingMap) -> None:
        self._inner = inner

    def lookup(self, key, f):
        return f(self._inner.lookup(key))

    def insert(self, key, value):
        self._inner.insert(key, value)

    def delete(self, key):
        return copy.copy(self._inner.delete(key))


class ConcurrentSet(ABC):
    """A set shared between threads."""

    @abstractmethod
    def contains(self, value: Hashable) -> bool:
        """Return whether the set holds ``value``."""

    @abstractmethod
    def insert(self, value: Hashable) -> bool:
        """Add ``value``; return whether it was newly inserted."""

    @abstractmethod
    def remove(self, value: Hashable) -> bool:
        """Remove ``value``; return whether it was present."""