"""Explicitly reference-counted shared ownership of a value."""

from __future__ import annotations

import copy
import sys
import threading
from typing import Generic, Optional, TypeVar

T = TypeVar("T")

_MAX_REFCOUNT = sys.maxsize


class _ArcInner:
    __slots__ = ("count", "data", "lock")

    def __init__(self, data) -> None:
        self.count = 1
        self.data = data
        self.lock = threading.Lock()


class Arc(Generic[T]):
    """A handle that shares one value with its clones.

    Each handle holds one reference. ``clone`` adds a handle and ``drop``
    gives one up; when the last handle is dropped the value is released.
    A dropped handle raises ``ValueError`` when used.
    """

    __slots__ = ("_inner",)

    def __init__(self, data: T) -> None:
        self._inner: Optional[_ArcInner] = _ArcInner(data)

    @classmethod
    def _from_inner(cls, inner: _ArcInner) -> "Arc[T]":
        arc = cls.__new__(cls)
        arc._inner = inner
        return arc

    def _live(self) -> _ArcInner:
        inner = self._inner
        if inner is None:
            raise ValueError("Arc handle has been dropped")
        return inner

    @staticmethod
    def _release(inner: _ArcInner) -> None:
        with inner.lock:
            inner.count -= 1
            if inner.count == 0:
                inner.data = None

    @property
    def value(self) -> T:
        """The shared value."""
        return self._live().data

    def clone(self) -> "Arc[T]":
        """Return another handle to the same allocation."""
        inner = self._live()
        with inner.lock:
            if inner.count >= _MAX_REFCOUNT:
                raise OverflowError("too many Arc handles")
            inner.count += 1
        return self._from_inner(inner)

    def drop(self) -> None:
        """Give up this handle; the value is released with the last one."""
        inner = self._live()
        self._inner = None
        self._release(inner)

    def count(self) -> int:
        """Number of live handles to this allocation."""
        inner = self._live()
        with inner.lock:
            return inner.count

    def ptr_eq(self, other: "Arc[T]") -> bool:
        """Whether both handles share one allocation."""
        return self._live() is other._live()

    def get_mut(self) -> Optional[T]:
        """Return the value if this is the only handle, otherwise ``None``."""
        inner = self._live()
        with inner.lock:
            return inner.data if inner.count == 1 else None

    def set(self, value: T) -> None:
        """Replace the value; raises ``ValueError`` if the value is shared."""
        inner = self._live()
        with inner.lock:
            if inner.count != 1:
                raise ValueError("cannot modify a shared Arc")
            inner.data = value

    def make_mut(self) -> T:
        """Make this handle the only one to its value and return the value.

        If other handles exist, the value is copied into a new allocation
        (with ``copy.copy``) that only this handle refers to.
        """
        inner = self._live()
        with inner.lock:
            if inner.count == 1:
                return inner.data
            data = inner.data
        fresh = _ArcInner(copy.copy(data))
        self._inner = fresh
        self._release(inner)
        return fresh.data

    def try_unwrap(self) -> T:
        """Consume this handle and return the value if it is the only one.

        Raises ``ValueError`` and leaves the handle usable otherwise.
        """
        inner = self._live()
        with inner.lock:
            if inner.count != 1:
                raise ValueError("Arc is shared")
            inner.count = 0
            data, inner.data = inner.data, None
        self._inner = None
        return data

    def __enter__(self) -> "Arc[T]":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if self._inner is not None:
            self.drop()

    def __repr__(self) -> str:
        if self._inner is None:
            return "Arc(<dropped>)"
        return repr(self._inner.data)

    def __str__(self) -> str:
        if self._inner is None:
            return "Arc(<dropped>)"
        return str(self._inner.data)