import heapq
import itertools
import threading
from enum import IntEnum
from typing import Any, List, Optional, Tuple


class Priority(IntEnum):
    """Named ranks; any int is accepted where a priority is expected."""

    LOW = 0
    NORMAL = 10
    HIGH = 20
    URGENT = 30


class PriorityTaskQueue:
    """
    Max-priority queue of work items. Items of equal priority carry no
    ordering guarantee. All methods take ``cond``'s lock, so a pool can share
    the same condition for its own bookkeeping.
    """

    def __init__(self, cond: Optional[threading.Condition] = None) -> None:
        self.cond = cond if cond is not None else threading.Condition(threading.RLock())
        self._heap: List[Tuple[int, int, Any]] = []
        self._counter = itertools.count()

    def push(self, priority: int, item: Any) -> None:
        with self.cond:
            heapq.heappush(self._heap, (-int(priority), next(self._counter), item))
            self.cond.notify_all()

    def pop(self) -> Tuple[int, Any]:
        """Remove and return ``(priority, item)`` for the highest priority. Raises IndexError when empty."""
        with self.cond:
            if not self._heap:
                raise IndexError("pop from an empty PriorityTaskQueue")
            neg_priority, _, item = heapq.heappop(self._heap)
            return -neg_priority, item

    def peek_priority(self) -> Optional[int]:
        with self.cond:
            return -self._heap[0][0] if self._heap else None

    def __len__(self) -> int:
        with self.cond:
            return len(self._heap)

    def __bool__(self) -> bool:
        return len(self) > 0
