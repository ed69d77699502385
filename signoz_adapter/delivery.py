"""HTTP delivery — posts a batch of records to the collector as one JSON array."""

import json
import logging

import httpx

from signoz_adapter.models import LogRecord, record_to_dict

logger = logging.getLogger(__name__)

DEFAULT_ENDPOINT = "http://localhost:8082"
DEFAULT_TIMEOUT = 10.0


class DeliveryError(Exception):
    """Raised when a batch could not be serialized or was not accepted."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


def serialize_batch(batch: list[LogRecord]) -> bytes:
    """Serialize records to a UTF-8 JSON array."""
    try:
        return json.dumps([record_to_dict(r) for r in batch]).encode("utf-8")
    except (TypeError, ValueError) as exc:
        raise DeliveryError(f"Failed to serialize batch: {exc}") from exc


class HttpDeliveryClient:
    """Sends batches with a single POST each. No retry: a failed batch is lost."""

    def __init__(
        self,
        endpoint: str = DEFAULT_ENDPOINT,
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.BaseTransport | None = None,
    ):
        self._endpoint = endpoint or DEFAULT_ENDPOINT
        self._client = httpx.Client(timeout=timeout, transport=transport)

    @property
    def endpoint(self) -> str:
        return self._endpoint

    def deliver(self, batch: list[LogRecord]):
        """POST *batch* to the endpoint as a single JSON array.

        Args:
            batch: Records in append order.

        Raises:
            DeliveryError: on serialization failure, an invalid endpoint URL,
                any transport error or timeout, or a status other than 200.
        """
        body = serialize_batch(batch)
        logger.info("Sending %d logs to %s", len(batch), self._endpoint)
        try:
            resp = self._client.post(
                self._endpoint,
                content=body,
                headers={"Content-Type": "application/json"},
            )
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise DeliveryError(f"Failed to send logs: {exc}") from exc

        if resp.status_code != httpx.codes.OK:
            raise DeliveryError(
                f"Failed to send logs, status: {resp.status_code} {resp.reason_phrase}",
                status_code=resp.status_code,
            )

    def close(self):
        self._client.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
