import threading
import time

import pytest

from parallel_simplex.pool import Priority, PoolStoppedError, WorkerPool


def test_submit_returns_future_result():
    with WorkerPool(2) as pool:
        future = pool.submit(lambda: 21 * 2)
        assert future.result(timeout=5) == 42


def test_task_exception_is_delivered_through_future():
    with WorkerPool(1) as pool:
        failing = pool.submit(lambda: 1 / 0)
        with pytest.raises(ZeroDivisionError):
            failing.result(timeout=5)
        # the worker survives the fault
        assert pool.submit(lambda: "ok").result(timeout=5) == "ok"
        pool.wait_all()
        assert pool.pending_tasks() == 0


def test_urgent_task_preempts_queued_low_priority_work():
    started = threading.Event()
    gate = threading.Event()
    order = []

    def block() -> bool:
        started.set()
        return gate.wait(timeout=5)

    with WorkerPool(1) as pool:
        blocker = pool.submit(block)
        assert started.wait(timeout=5)
        low = pool.submit(lambda: order.append("low"), priority=Priority.LOW)
        urgent = pool.submit(lambda: order.append("urgent"), priority=Priority.URGENT)
        assert pool.pending_tasks() == 3
        gate.set()
        for future in (blocker, low, urgent):
            future.result(timeout=5)

    assert order == ["urgent", "low"]


def test_wait_all_blocks_until_drained():
    done = []
    with WorkerPool(3) as pool:
        for i in range(20):
            pool.submit(lambda i=i: (time.sleep(0.005), done.append(i)))
        pool.wait_all()
        assert len(done) == 20
        assert pool.pending_tasks() == 0


def test_resize_down_converges():
    with WorkerPool(4) as pool:
        assert pool.thread_count() == 4
        pool.resize(2)
        pool.wait_all()
        assert pool.thread_count() == 2


def test_rapid_resize_sequence_is_exact():
    with WorkerPool(4) as pool:
        for size in (1, 3, 2, 5, 1, 2):
            pool.resize(size)
        pool.wait_all()
        assert pool.thread_count() == 2
        assert pool.submit(lambda: "alive").result(timeout=5) == "alive"


def test_resize_up_runs_tasks_concurrently():
    barrier = threading.Barrier(4)
    with WorkerPool(1) as pool:
        pool.resize(4)
        assert pool.thread_count() == 4
        futures = [pool.submit(lambda: barrier.wait(timeout=5)) for _ in range(4)]
        # every task must be running at once for the barrier to release
        assert sorted(f.result(timeout=10) for f in futures) == [0, 1, 2, 3]


def test_submit_after_shutdown_raises():
    pool = WorkerPool(2)
    pool.shutdown()

    with pytest.raises(PoolStoppedError):
        pool.submit(lambda: None)
    with pytest.raises(PoolStoppedError):
        pool.resize(3)
    assert pool.thread_count() == 0


def test_shutdown_drains_queued_work_and_is_idempotent():
    pool = WorkerPool(1)
    futures = [pool.submit(lambda i=i: i) for i in range(10)]
    pool.shutdown()
    pool.shutdown()

    assert [f.result(timeout=0) for f in futures] == list(range(10))


def test_invalid_sizes_rejected():
    with pytest.raises(ValueError):
        WorkerPool(0)
    with WorkerPool(1) as pool:
        with pytest.raises(ValueError):
            pool.resize(0)


class _Interrupt(BaseException):
    pass


def test_base_exception_resolves_future_and_keeps_worker():
    def interrupt():
        raise _Interrupt("stop")

    with WorkerPool(1) as pool:
        future = pool.submit(interrupt)
        with pytest.raises(_Interrupt):
            future.result(timeout=5)
        assert pool.thread_count() == 1
        assert pool.submit(lambda: "ok").result(timeout=5) == "ok"
        pool.wait_all()
        assert pool.pending_tasks() == 0
