"""Priority-scheduled worker pool."""

from .queue import Priority, PriorityTaskQueue
from .workers import PoolStoppedError, WorkerPool

__all__ = ["Priority", "PriorityTaskQueue", "PoolStoppedError", "WorkerPool"]
