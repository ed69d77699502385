"""Tests for the BatchBuffer module."""

import threading

from signoz_adapter.buffer import BatchBuffer
from signoz_adapter.models import LogRecord


def _record(i: int) -> LogRecord:
    return LogRecord(timestamp=i, message=f"log-{i}")


class TestDrain:
    def test_drain_returns_records_in_append_order(self):
        buf = BatchBuffer()
        for i in range(5):
            buf.append(_record(i))

        batch = buf.drain()

        assert [r.message for r in batch] == [f"log-{i}" for i in range(5)]
        assert buf.pending_count == 0

    def test_second_drain_is_empty(self):
        buf = BatchBuffer()
        buf.append(_record(0))
        buf.drain()

        assert buf.drain() == []

    def test_drain_empty_buffer(self):
        assert BatchBuffer().drain() == []

    def test_appends_after_drain_start_new_batch(self):
        buf = BatchBuffer()
        buf.append(_record(0))
        first = buf.drain()
        buf.append(_record(1))

        assert [r.timestamp for r in first] == [0]
        assert [r.timestamp for r in buf.drain()] == [1]


class TestPendingCount:
    def test_pending_count_reflects_buffer_state(self):
        buf = BatchBuffer()
        assert buf.pending_count == 0

        buf.append(_record(0))
        buf.append(_record(1))
        assert buf.pending_count == 2

        buf.drain()
        assert buf.pending_count == 0


class TestCapacity:
    def test_unbounded_by_default(self):
        buf = BatchBuffer()
        for i in range(1000):
            buf.append(_record(i))
        assert buf.pending_count == 1000
        assert buf.dropped == 0
        assert buf.max_size is None

    def test_non_positive_cap_means_unbounded(self):
        assert BatchBuffer(max_size=0).max_size is None

    def test_drop_oldest_when_full(self):
        buf = BatchBuffer(max_size=3)
        for i in range(5):
            buf.append(_record(i))

        assert buf.dropped == 2
        assert [r.timestamp for r in buf.drain()] == [2, 3, 4]

    def test_cap_survives_drain(self):
        buf = BatchBuffer(max_size=2)
        buf.append(_record(0))
        buf.drain()
        for i in range(3):
            buf.append(_record(i))
        assert buf.pending_count == 2


class TestConcurrency:
    def test_concurrent_appends_and_drains_lose_nothing(self):
        buf = BatchBuffer()
        drained: list[LogRecord] = []
        done = threading.Event()

        def producer(offset):
            for i in range(500):
                buf.append(_record(offset + i))

        def drainer():
            while not done.is_set():
                drained.extend(buf.drain())

        drain_thread = threading.Thread(target=drainer)
        drain_thread.start()
        producers = [threading.Thread(target=producer, args=(n * 1000,)) for n in range(4)]
        for t in producers:
            t.start()
        for t in producers:
            t.join()
        done.set()
        drain_thread.join()
        drained.extend(buf.drain())

        assert len(drained) == 2000
        assert len({r.timestamp for r in drained}) == 2000
