import threading

import pytest

from parallel_simplex.pool import Priority, PriorityTaskQueue


def test_pops_highest_priority_first():
    queue = PriorityTaskQueue()
    queue.push(Priority.LOW, "low")
    queue.push(Priority.URGENT, "urgent")
    queue.push(Priority.NORMAL, "normal")
    queue.push(Priority.HIGH, "high")

    assert [queue.pop()[1] for _ in range(4)] == ["urgent", "high", "normal", "low"]


def test_accepts_plain_integer_ranks():
    queue = PriorityTaskQueue()
    queue.push(5, "five")
    queue.push(Priority.NORMAL, "normal")
    queue.push(-3, "negative")

    assert queue.peek_priority() == Priority.NORMAL
    assert queue.pop() == (10, "normal")
    assert queue.pop() == (5, "five")
    assert queue.pop() == (-3, "negative")


def test_empty_queue():
    queue = PriorityTaskQueue()

    assert len(queue) == 0
    assert not queue
    assert queue.peek_priority() is None
    with pytest.raises(IndexError):
        queue.pop()


def test_shares_external_condition():
    cond = threading.Condition(threading.RLock())
    queue = PriorityTaskQueue(cond)

    assert queue.cond is cond
    with cond:
        queue.push(Priority.HIGH, "item")
        assert len(queue) == 1


def test_concurrent_pushes_are_all_kept():
    queue = PriorityTaskQueue()

    def producer(offset: int) -> None:
        for i in range(200):
            queue.push(i % 7, offset + i)

    threads = [threading.Thread(target=producer, args=(k * 1000,)) for k in range(4)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    priorities = [queue.pop()[0] for _ in range(len(queue))]
    assert len(priorities) == 800
    assert priorities == sorted(priorities, reverse=True)
