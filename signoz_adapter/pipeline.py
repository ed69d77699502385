"""Pipeline orchestrator — ingestion loop plus an independent periodic flush thread."""

import logging
import threading
import time
from typing import Iterable

from signoz_adapter.buffer import BatchBuffer
from signoz_adapter.config import AdapterConfig
from signoz_adapter.delivery import DeliveryError
from signoz_adapter.filters import should_process
from signoz_adapter.metrics import PipelineMetrics
from signoz_adapter.models import RawMessage
from signoz_adapter.normalizer import normalize

logger = logging.getLogger(__name__)


class LogPipeline:
    """Wires filter, normalizer, buffer and delivery client together.

    ``run()`` consumes messages on the calling thread; the flush thread
    started by ``start()`` drains the buffer every ``flush_interval``
    seconds. Delivery failures are logged and the batch is dropped.
    """

    def __init__(
        self,
        config: AdapterConfig,
        delivery,
        buffer: BatchBuffer | None = None,
        metrics: PipelineMetrics | None = None,
        shutdown_event: threading.Event | None = None,
    ):
        self._config = config
        self._state = config.normalizer_state()
        self._delivery = delivery
        self._buffer = buffer if buffer is not None else BatchBuffer(
            max_size=config.max_buffer_size or None
        )
        self._metrics = metrics if metrics is not None else PipelineMetrics()
        self._shutdown = shutdown_event if shutdown_event is not None else threading.Event()
        self._flush_thread: threading.Thread | None = None
        self._reported_dropped = 0

    @property
    def buffer(self) -> BatchBuffer:
        return self._buffer

    @property
    def metrics(self) -> PipelineMetrics:
        return self._metrics

    @property
    def is_running(self) -> bool:
        """True while the flush thread is alive."""
        return self._flush_thread is not None and self._flush_thread.is_alive()

    def stats(self) -> dict:
        """Metrics snapshot plus the buffer's pending and dropped counts."""
        snap = self._metrics.snapshot()
        snap["pending"] = self._buffer.pending_count
        snap["dropped"] = self._buffer.dropped
        return snap

    # ------------------------------------------------------------------
    # Ingestion
    # ------------------------------------------------------------------

    def process(self, message: RawMessage) -> bool:
        """Filter, normalize and buffer one message. Returns True if buffered."""
        self._metrics.record_received()
        if not should_process(message, self._config.filter):
            self._metrics.record_filtered()
            return False

        record = normalize(message, self._state)
        self._buffer.append(record)
        self._metrics.record_buffered()
        return True

    def run(self, source: Iterable[RawMessage]):
        """Consume *source* until it is exhausted or shutdown is requested."""
        for message in source:
            if self._shutdown.is_set():
                break
            self.process(message)
        logger.info("Message source closed")

    # ------------------------------------------------------------------
    # Flushing
    # ------------------------------------------------------------------

    def flush(self) -> int:
        """Drain the buffer and deliver it. Returns the number of records delivered."""
        self._report_dropped()
        batch = self._buffer.drain()
        if not batch:
            return 0

        start = time.monotonic()
        try:
            self._delivery.deliver(batch)
        except DeliveryError as exc:
            self._metrics.record_failed(len(batch))
            logger.error("Error sending logs: %s (dropped %d records)", exc, len(batch))
            return 0
        except Exception:
            self._metrics.record_failed(len(batch))
            logger.exception("Unexpected delivery failure (dropped %d records)", len(batch))
            return 0

        elapsed_ms = (time.monotonic() - start) * 1000
        self._metrics.record_delivered(len(batch), elapsed_ms)
        logger.debug("Delivered batch of %d records in %.1f ms", len(batch), elapsed_ms)
        return len(batch)

    def _report_dropped(self):
        dropped = self._buffer.dropped
        if dropped > self._reported_dropped:
            logger.warning(
                "Buffer full, dropped %d oldest records (%d total)",
                dropped - self._reported_dropped,
                dropped,
            )
            self._reported_dropped = dropped

    def _flush_loop(self):
        while not self._shutdown.wait(timeout=self._config.flush_interval):
            self.flush()

    def start(self):
        """Start the background flush thread."""
        if self._flush_thread is not None:
            return
        self._flush_thread = threading.Thread(
            target=self._flush_loop, name="signoz-flush", daemon=True
        )
        self._flush_thread.start()

    def stop(self):
        """Stop the flush thread and deliver whatever is still buffered."""
        self._shutdown.set()
        if self._flush_thread is not None:
            self._flush_thread.join(timeout=self._config.request_timeout + 5)
            self._flush_thread = None
        self.flush()
        logger.info("Pipeline metrics: %s", self.stats())
