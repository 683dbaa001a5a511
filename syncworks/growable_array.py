"""Lock-free growable array of atomic cells, organised as a tree of segments."""

from __future__ import annotations

import operator
from typing import Generic, List, Optional, TypeVar

from syncworks.adt import AtomicCell

T = TypeVar("T")

SEGMENT_LOGSIZE = 10

_Segment = List[AtomicCell]


class _Root:
    """The root segment together with the height of the tree below it."""

    __slots__ = ("height", "segment")

    def __init__(self, height: int, segment: _Segment) -> None:
        self.height = height
        self.segment = segment


class GrowableArray(Generic[T]):
    """Array of ``AtomicCell`` slots that grows on demand.

    Segments are the inner nodes of a tree: at height 1 a segment holds the
    element cells, above that its cells hold child segments. When an index
    does not fit, a new root is added whose first branch is the old root.
    The array owns only the segments; the elements belong to whoever stores
    them.
    """

    def __init__(self, segment_logsize: int = SEGMENT_LOGSIZE) -> None:
        if segment_logsize <= 0:
            raise ValueError("segment_logsize must be positive")
        self._logsize = segment_logsize
        self._mask = (1 << segment_logsize) - 1
        self._root: AtomicCell = AtomicCell(None)

    def _new_segment(self) -> _Segment:
        return [AtomicCell(None) for _ in range(1 << self._logsize)]

    def _required_height(self, index: int) -> int:
        height = 1
        while index >> (height * self._logsize):
            height += 1
        return height

    def height(self) -> int:
        """Number of segment levels; 0 while nothing has been allocated."""
        root: Optional[_Root] = self._root.load()
        return 0 if root is None else root.height

    def _grown_root(self, needed: int) -> _Root:
        while True:
            root: Optional[_Root] = self._root.load()
            if root is not None and root.height >= needed:
                return root
            if root is None:
                candidate = _Root(1, self._new_segment())
            else:
                segment = self._new_segment()
                segment[0].store(root.segment)
                candidate = _Root(root.height + 1, segment)
            self._root.compare_exchange(root, candidate)

    def get(self, index: int) -> AtomicCell:
        """Return the cell at ``index``, allocating segments as needed."""
        index = operator.index(index)
        if index < 0:
            raise IndexError("index must be non-negative")
        root = self._grown_root(self._required_height(index))
        segment = root.segment
        for level in range(root.height, 1, -1):
            digit = (index >> ((level - 1) * self._logsize)) & self._mask
            cell = segment[digit]
            child = cell.load()
            if child is None:
                fresh = self._new_segment()
                swapped, actual = cell.compare_exchange(None, fresh)
                child = fresh if swapped else actual
            segment = child
        return segment[index & self._mask]

    def __repr__(self) -> str:
        return f"GrowableArray(height={self.height()})"