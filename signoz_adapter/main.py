"""Entry point — reads NDJSON envelopes from stdin and ships them to SigNoz."""

import logging
import os
import queue
import signal
import sys
import threading

from signoz_adapter.config import load_config
from signoz_adapter.delivery import HttpDeliveryClient
from signoz_adapter.pipeline import LogPipeline
from signoz_adapter.sources import QueueSource, start_reader, text_stream


def main(argv=None):
    logging.basicConfig(
        level=os.environ.get("LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        stream=sys.stderr,
    )
    logger = logging.getLogger(__name__)

    config = load_config(argv)
    shutdown_event = threading.Event()
    source = QueueSource(queue.Queue(), shutdown_event=shutdown_event)

    def handle_signal(signum, frame):
        logger.info("Received signal %d, shutting down...", signum)
        # The reader thread may stay blocked on stdin; the source stops polling.
        shutdown_event.set()

    signal.signal(signal.SIGINT, handle_signal)
    signal.signal(signal.SIGTERM, handle_signal)

    logger.info(
        "Starting SigNoz adapter: endpoint=%s, flush_interval=%.1fs, host=%s",
        config.endpoint,
        config.flush_interval,
        config.hostname,
    )

    with HttpDeliveryClient(config.endpoint, timeout=config.request_timeout) as delivery:
        pipeline = LogPipeline(config, delivery, shutdown_event=shutdown_event)
        pipeline.start()
        start_reader(text_stream(sys.stdin.buffer), source)
        try:
            pipeline.run(source)
        finally:
            pipeline.stop()


if __name__ == "__main__":
    main()
