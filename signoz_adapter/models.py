"""Data model — raw container messages in, normalized log records out."""

from dataclasses import dataclass, field
from datetime import datetime


@dataclass(frozen=True)
class ContainerInfo:
    id: str = ""
    name: str = ""
    image: str = ""
    labels: dict = field(default_factory=dict)


@dataclass(frozen=True)
class RawMessage:
    """One log line as handed over by the host, with its container metadata."""

    time: datetime
    data: str
    source: str = "stdout"
    container: ContainerInfo = field(default_factory=ContainerInfo)


@dataclass
class LogRecord:
    timestamp: int
    severity_text: str = "info"
    severity_number: int = 9
    message: str = ""
    attributes: dict[str, str] = field(default_factory=dict)
    resources: dict[str, str] = field(default_factory=dict)


def record_to_dict(record: LogRecord) -> dict:
    """Convert a LogRecord to the collector's wire layout."""
    return {
        "timestamp": record.timestamp,
        "severity_text": record.severity_text,
        "severity_number": record.severity_number,
        "attributes": dict(record.attributes),
        "resources": dict(record.resources),
        "message": record.message,
    }
