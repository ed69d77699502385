"""Pipeline metrics — thread-safe counters shared by ingestion and flush threads."""

import threading
import time


class PipelineMetrics:
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._received = 0
        self._filtered = 0
        self._buffered = 0
        self._batches_sent = 0
        self._records_sent = 0
        self._batches_failed = 0
        self._records_failed = 0
        self._send_times: list[float] = []
        self._start_time = time.monotonic()

    def record_received(self) -> None:
        with self._lock:
            self._received += 1

    def record_filtered(self) -> None:
        with self._lock:
            self._filtered += 1

    def record_buffered(self) -> None:
        with self._lock:
            self._buffered += 1

    def record_delivered(self, count: int, send_time_ms: float) -> None:
        """Record one successful batch send.

        Args:
            count: Number of log records in the batch.
            send_time_ms: Time taken by the HTTP request, in milliseconds.
        """
        with self._lock:
            self._batches_sent += 1
            self._records_sent += count
            self._send_times.append(send_time_ms)

    def record_failed(self, count: int) -> None:
        """Record one batch of *count* records that was dropped after a failed send."""
        with self._lock:
            self._batches_failed += 1
            self._records_failed += count

    def snapshot(self) -> dict:
        """Return a point-in-time snapshot of all counters.

        Returns:
            Dictionary with ingestion counters (received, filtered, buffered),
            delivery counters (batches and records sent or failed), the
            average send time and uptime.
        """
        with self._lock:
            send_times = list(self._send_times)
            avg_send = sum(send_times) / len(send_times) if send_times else 0.0

            return {
                "received": self._received,
                "filtered": self._filtered,
                "buffered": self._buffered,
                "batches_sent": self._batches_sent,
                "records_sent": self._records_sent,
                "batches_failed": self._batches_failed,
                "records_failed": self._records_failed,
                "avg_send_time_ms": round(avg_send, 2),
                "uptime_seconds": round(time.monotonic() - self._start_time, 2),
            }
