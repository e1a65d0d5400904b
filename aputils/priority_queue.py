"""Generic largest-first priority queue."""

import heapq
from typing import Any, Callable, Generic, List, Optional, TypeVar

T = TypeVar("T")

DEFAULT_CAPACITY = 8


class _MaxEntry:
    """Heap entry that inverts ordering so heapq pops the largest key first."""

    __slots__ = ('key', 'item')

    def __init__(self, key: Any, item: Any):
        self.key = key
        self.item = item

    def __lt__(self, other: '_MaxEntry') -> bool:
        return other.key < self.key


class PriorityQueue(Generic[T]):
    """
    Largest-first priority queue on top of heapq.

    Items are ordered by `key(item)` (the item itself when no key is given).
    Capacity is bookkeeping only: it starts at `capacity` and doubles whenever
    a push finds the queue full. Order among equal keys is unspecified.
    """

    def __init__(self, capacity: int = DEFAULT_CAPACITY, key: Optional[Callable[[T], Any]] = None):
        self._key = key
        self._heap: List[_MaxEntry] = []
        self._capacity = capacity if capacity > 0 else DEFAULT_CAPACITY

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def is_empty(self) -> bool:
        return not self._heap

    def __len__(self) -> int:
        return len(self._heap)

    def push(self, item: T) -> None:
        """Insert an item."""
        if len(self._heap) >= self._capacity:
            self._capacity <<= 1
        key = self._key(item) if self._key else item
        heapq.heappush(self._heap, _MaxEntry(key, item))

    def peek(self) -> T:
        """Return the largest item without removing it."""
        if not self._heap:
            raise IndexError("peek from an empty priority queue")
        return self._heap[0].item

    def pop(self) -> T:
        """Remove and return the largest item."""
        if not self._heap:
            raise IndexError("pop from an empty priority queue")
        return heapq.heappop(self._heap).item

    def clear(self) -> None:
        """Remove all items; capacity is kept."""
        self._heap.clear()
