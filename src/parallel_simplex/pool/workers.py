import itertools
import logging
import sys
import threading
from concurrent.futures import Future
from dataclasses import dataclass
from typing import Any, Callable, List

from .queue import Priority, PriorityTaskQueue

LOGGER = logging.getLogger("parallel_simplex.pool.workers")

# Retire tokens outrank every user priority so a shrink is never stuck behind queued work.
_RETIRE = object()
_RETIRE_PRIORITY = sys.maxsize


class PoolStoppedError(RuntimeError):
    """Raised when work is submitted to a pool that has been shut down."""


@dataclass
class _Task:
    fn: Callable[[], Any]
    future: Future


class WorkerPool:
    """
    Resizable set of worker threads draining one shared priority queue.

    The queue, the pending counter and the retirement counter are guarded by a
    single condition variable. A task that raises delivers the exception
    through its future; nothing is dropped at the worker boundary.
    """

    def __init__(self, threads: int) -> None:
        if threads <= 0:
            raise ValueError("threads must be positive")
        self._queue = PriorityTaskQueue()
        self._cond = self._queue.cond
        self._workers: List[threading.Thread] = []
        self._threads: List[threading.Thread] = []
        self._ids = itertools.count()
        self._pending = 0
        self._in_flight = 0
        self._retire_requested = 0
        self._stopping = False
        with self._cond:
            self._spawn(threads)
        LOGGER.info("Worker pool started with %s thread(s)", threads)

    def submit(self, fn: Callable[[], Any], priority: int = Priority.NORMAL) -> Future:
        future: Future = Future()
        with self._cond:
            if self._stopping:
                raise PoolStoppedError("pool stopped")
            self._pending += 1
            self._queue.push(priority, _Task(fn, future))
        return future

    def resize(self, threads: int) -> None:
        """
        Grow by spawning workers, shrink by queueing one retire token per
        worker to remove. Outstanding retirements are cancelled before any new
        thread is spawned, so rapid resize sequences converge on the last size.
        """

        if threads <= 0:
            raise ValueError("threads must be positive")
        with self._cond:
            if self._stopping:
                raise PoolStoppedError("pool stopped")
            effective = len(self._workers) - self._retire_requested
            if threads > effective:
                grow = threads - effective
                cancelled = min(grow, self._retire_requested)
                self._retire_requested -= cancelled
                self._spawn(grow - cancelled)
            elif threads < effective:
                shrink = effective - threads
                self._retire_requested += shrink
                for _ in range(shrink):
                    self._queue.push(_RETIRE_PRIORITY, _RETIRE)
            LOGGER.info("Worker pool resized from %s to %s thread(s)", effective, threads)

    def wait_all(self) -> None:
        """Block until the queue is empty and no task is running."""
        with self._cond:
            self._cond.wait_for(lambda: not self._queue and self._in_flight == 0)

    def pending_tasks(self) -> int:
        with self._cond:
            return self._pending

    def thread_count(self) -> int:
        with self._cond:
            return len(self._workers)

    def shutdown(self) -> None:
        """Stop accepting work, let workers drain the queue, and join every thread."""
        with self._cond:
            already_stopping = self._stopping
            self._stopping = True
            self._cond.notify_all()
            threads = list(self._threads)
        current = threading.current_thread()
        for thread in threads:
            if thread is not current:
                thread.join()
        if not already_stopping:
            LOGGER.info("Worker pool shut down (%s thread(s) joined)", len(threads))

    def __enter__(self) -> "WorkerPool":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.shutdown()

    def _spawn(self, count: int) -> None:
        self._threads = [thread for thread in self._threads if thread.is_alive()]
        for _ in range(count):
            thread = threading.Thread(
                target=self._worker_loop,
                name=f"simplex-worker-{next(self._ids)}",
                daemon=True,
            )
            self._workers.append(thread)
            self._threads.append(thread)
            thread.start()

    def _worker_loop(self) -> None:
        me = threading.current_thread()
        while True:
            with self._cond:
                self._cond.wait_for(lambda: self._stopping or bool(self._queue))
                if not self._queue:
                    self._workers.remove(me)
                    return
                _, item = self._queue.pop()
                if item is _RETIRE:
                    if self._retire_requested > 0:
                        self._retire_requested -= 1
                        self._workers.remove(me)
                        LOGGER.debug("%s retired", me.name)
                        self._cond.notify_all()
                        return
                    self._cond.notify_all()
                    continue
                self._in_flight += 1
            try:
                self._execute(item)
            finally:
                with self._cond:
                    self._in_flight -= 1
                    self._pending -= 1
                    self._cond.notify_all()

    def _execute(self, task: _Task) -> None:
        if not task.future.set_running_or_notify_cancel():
            return
        try:
            result = task.fn()
        except BaseException as exc:
            LOGGER.exception("Task raised; delivering the error through its future")
            task.future.set_exception(exc)
        else:
            task.future.set_result(result)
