"""Batch buffer — thread-safe accumulator drained by the flush thread."""

import logging
import threading
from collections import deque

from signoz_adapter.models import LogRecord

logger = logging.getLogger(__name__)


class BatchBuffer:
    """Append-only buffer of LogRecords with an atomic swap-on-drain.

    The lock is held only while appending or swapping the underlying
    sequence, never while a drained batch is serialized or sent.

    With ``max_size`` set, appending to a full buffer discards the oldest
    record and counts it in ``dropped``.
    """

    def __init__(self, max_size: int | None = None):
        if max_size is not None and max_size <= 0:
            max_size = None
        self._max_size = max_size
        self._records: deque[LogRecord] = deque(maxlen=max_size)
        self._lock = threading.Lock()
        self._dropped = 0

    def append(self, record: LogRecord):
        with self._lock:
            if self._max_size is not None and len(self._records) >= self._max_size:
                self._dropped += 1
            self._records.append(record)

    def drain(self) -> list[LogRecord]:
        """Return everything buffered so far and start a fresh sequence."""
        with self._lock:
            if not self._records:
                return []
            batch = self._records
            self._records = deque(maxlen=self._max_size)
        return list(batch)

    @property
    def pending_count(self) -> int:
        with self._lock:
            return len(self._records)

    @property
    def dropped(self) -> int:
        with self._lock:
            return self._dropped

    @property
    def max_size(self) -> int | None:
        return self._max_size
