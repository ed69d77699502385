"""Message sources — the host-facing side of the pipeline.

The pipeline pulls messages from any iterable of RawMessage. Two sources are
provided: a queue drained until a ``None`` sentinel, and a reader for NDJSON
envelopes (one JSON object per line, e.g. on stdin).
"""

import io
import json
import logging
import queue
import threading
from datetime import datetime, timezone
from typing import BinaryIO, Iterator, TextIO

from signoz_adapter.models import ContainerInfo, RawMessage
from signoz_adapter.normalizer import parse_rfc3339_datetime

logger = logging.getLogger(__name__)


class QueueSource:
    """Iterates over a queue.Queue until a ``None`` poison pill is received.

    With a *shutdown_event*, iteration also ends within *poll_interval*
    seconds of the event being set, even if nothing is ever queued.
    """

    def __init__(
        self,
        q: queue.Queue,
        shutdown_event: threading.Event | None = None,
        poll_interval: float = 0.5,
    ):
        self._queue = q
        self._shutdown = shutdown_event
        self._poll_interval = poll_interval

    def __iter__(self) -> Iterator[RawMessage]:
        while self._shutdown is None or not self._shutdown.is_set():
            try:
                item = self._queue.get(timeout=self._poll_interval)
            except queue.Empty:
                continue
            if item is None:
                return
            yield item

    def put(self, message: RawMessage):
        self._queue.put(message)

    def close(self):
        """Put the sentinel that ends iteration."""
        self._queue.put(None)


def _parse_time(value) -> datetime:
    if not value:
        return datetime.now(timezone.utc)
    moment = parse_rfc3339_datetime(value)
    if moment is None:
        raise ValueError(f"invalid time {value!r}")
    return moment


def envelope_to_message(envelope: dict) -> RawMessage:
    """Build a RawMessage from a decoded envelope dict.

    Raises KeyError, TypeError or ValueError on a malformed envelope.
    """
    container = envelope.get("container") or {}
    labels = container.get("labels") or {}
    return RawMessage(
        time=_parse_time(envelope.get("time")),
        data=str(envelope["data"]),
        source=str(envelope.get("source", "stdout")),
        container=ContainerInfo(
            id=str(container.get("id", "")),
            name=str(container.get("name", "")),
            image=str(container.get("image", "")),
            labels={str(k): str(v) for k, v in labels.items()},
        ),
    )


def read_envelopes(stream: TextIO) -> Iterator[RawMessage]:
    """Yield RawMessages from NDJSON envelope lines, skipping malformed ones."""
    for lineno, line in enumerate(stream, start=1):
        line = line.strip()
        if not line:
            continue
        try:
            envelope = json.loads(line)
            if not isinstance(envelope, dict):
                raise TypeError("envelope is not a JSON object")
            message = envelope_to_message(envelope)
        except (KeyError, TypeError, ValueError, AttributeError) as exc:
            logger.warning("Skipping malformed envelope on line %d: %s", lineno, exc)
            continue
        yield message


def text_stream(binary: BinaryIO) -> TextIO:
    """Decode a byte stream as UTF-8, replacing invalid bytes instead of failing."""
    return io.TextIOWrapper(binary, encoding="utf-8", errors="replace")


def start_reader(stream: TextIO, source: QueueSource) -> threading.Thread:
    """Feed envelopes from *stream* into *source* on a daemon thread.

    The source is closed when the stream ends. A source built with a shutdown
    event stops iterating on its own while this thread is blocked on a read.
    """

    def _pump():
        try:
            for message in read_envelopes(stream):
                source.put(message)
        finally:
            source.close()

    thread = threading.Thread(target=_pump, name="envelope-reader", daemon=True)
    thread.start()
    return thread
