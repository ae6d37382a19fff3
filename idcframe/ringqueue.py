"""A fixed-capacity first-in, first-out ring queue."""

from __future__ import annotations

from collections.abc import Iterator
from typing import Generic, TypeVar

__all__ = ["RingQueue"]

T = TypeVar("T")


class RingQueue(Generic[T]):
    """A FIFO queue stored in a fixed array that wraps around."""

    def __init__(self, capacity: int) -> None:
        if capacity <= 0:
            raise ValueError(f"capacity must be positive, got {capacity}")
        self.capacity = capacity
        self._data: list[T | None] = [None] * capacity
        self._head = 0
        self._length = 0

    def push(self, item: T) -> None:
        """Append ``item`` at the tail; a full queue raises OverflowError."""
        if self.full():
            raise OverflowError("ring queue is full")
        tail = (self._head + self._length) % self.capacity
        self._data[tail] = item
        self._length += 1

    def pop(self) -> T:
        """Remove and return the item at the head."""
        if self.empty():
            raise IndexError("pop from an empty ring queue")
        item = self._data[self._head]
        self._data[self._head] = None
        self._head = (self._head + 1) % self.capacity
        self._length -= 1
        return item  # type: ignore[return-value]

    def front(self) -> T:
        """Return the item at the head without removing it."""
        if self.empty():
            raise IndexError("front of an empty ring queue")
        return self._data[self._head]  # type: ignore[return-value]

    def empty(self) -> bool:
        return self._length == 0

    def full(self) -> bool:
        return self._length == self.capacity

    def __len__(self) -> int:
        return self._length

    def __iter__(self) -> Iterator[T]:
        for offset in range(self._length):
            yield self._data[(self._head + offset) % self.capacity]  # type: ignore[misc]

    def __repr__(self) -> str:
        return f"RingQueue(capacity={self.capacity}, items={list(self)!r})"