"""Fixed-capacity window of the most recent accepted lines."""

from __future__ import annotations

from collections import deque
from typing import Generic, TypeVar

from tailwatch.watching.types import EmitOrder

T = TypeVar("T")


class BoundedEventBuffer(Generic[T]):
    """Keeps at most ``capacity`` items, dropping the oldest on overflow.

    With NEWEST_LAST items are appended on the right and the oldest falls off
    the left; NEWEST_FIRST mirrors that. The side never changes after
    construction, so snapshots are always chronological or always
    reverse-chronological.

    Example:
        buf = BoundedEventBuffer(2)
        for x in "abc":
            buf.insert(x)
        buf.snapshot()  # ('b', 'c')
    """

    def __init__(self, capacity: int, emit_order: EmitOrder = EmitOrder.NEWEST_LAST) -> None:
        if capacity < 1:
            raise ValueError(f"capacity must be positive, got {capacity}")
        self._items: deque[T] = deque(maxlen=capacity)
        self._emit_order = emit_order

    @property
    def capacity(self) -> int:
        return self._items.maxlen or 0

    @property
    def emit_order(self) -> EmitOrder:
        return self._emit_order

    def insert(self, item: T) -> None:
        # deque(maxlen) discards from the opposite end on overflow
        if self._emit_order is EmitOrder.NEWEST_FIRST:
            self._items.appendleft(item)
        else:
            self._items.append(item)

    def snapshot(self) -> tuple[T, ...]:
        """Immutable copy of the current window in emit order."""
        return tuple(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __repr__(self) -> str:
        return f"<BoundedEventBuffer {len(self)}/{self.capacity} {self._emit_order}>"
