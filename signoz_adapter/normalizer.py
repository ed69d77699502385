"""Log normalizer — turns a raw container message into a structured LogRecord.

Severity comes from a JSON ``level`` field when the payload is a JSON object,
otherwise from the first severity name found in the raw text.
"""

import logging
import re
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from signoz_adapter.models import LogRecord, RawMessage
from signoz_adapter.payload import JsonValue, parse_payload, stringify

logger = logging.getLogger(__name__)

SEVERITY_NUMBERS = {
    "TRACE": 1,
    "DEBUG": 5,
    "INFO": 9,
    "WARN": 13,
    "WARNING": 13,
    "ERROR": 17,
    "FATAL": 21,
}

# Substring scan order: most severe first, longer names before their prefixes.
_MATCH_ORDER = ("FATAL", "ERROR", "WARNING", "WARN", "INFO", "DEBUG", "TRACE")

RESERVED_KEYS = frozenset(
    ("timestamp", "level", "message", "service", "namespace", "env", "environment")
)

DEFAULT_LEVEL = "info"

COMPOSE_SERVICE_LABEL = "com.docker.compose.service"
SWARM_TASK_LABEL = "com.docker.swarm.task.name"

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

_RFC3339_RE = re.compile(
    r"(\d{4}-\d{2}-\d{2})T(\d{2}:\d{2}:\d{2})(\.\d+)?(Z|[+-]\d{2}:\d{2})"
)


@dataclass(frozen=True)
class NormalizerState:
    hostname: str
    environment: str = ""
    auto_parse_json: bool = True
    auto_log_level_string_match: bool = True


def severity_number(level: str) -> int:
    """Case-insensitive severity lookup; unknown levels map to 0."""
    return SEVERITY_NUMBERS.get(level.upper(), 0)


def match_severity(text: str) -> tuple[str, int] | None:
    """Find the first severity name contained in *text*."""
    for name in _MATCH_ORDER:
        if name in text:
            return name.lower(), SEVERITY_NUMBERS[name]
    return None


def parse_rfc3339_datetime(value: str) -> datetime | None:
    """Parse an RFC3339 timestamp to an aware datetime, or None if malformed."""
    match = _RFC3339_RE.fullmatch(value)
    if match is None:
        return None
    date_part, time_part, fraction, offset = match.groups()
    # fromisoformat before 3.11 wants exactly six fractional digits.
    fraction = "." + (fraction or ".")[1:7].ljust(6, "0")
    offset = "+00:00" if offset == "Z" else offset
    try:
        parsed = datetime.fromisoformat(f"{date_part}T{time_part}{fraction}{offset}")
    except ValueError:
        return None
    return parsed


def parse_rfc3339(value: str) -> int | None:
    """Parse an RFC3339 timestamp to epoch seconds.

    Args:
        value: Timestamp such as ``2024-01-15T10:30:00Z`` or
            ``2024-01-15T12:30:00.5+02:00``.

    Returns:
        Whole seconds since the Unix epoch (floored), or None if *value* is
        not a well-formed RFC3339 timestamp.
    """
    parsed = parse_rfc3339_datetime(value)
    if parsed is None:
        return None
    return epoch_seconds(parsed)


def epoch_seconds(moment: datetime) -> int:
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    # Offset arithmetic stays valid at the edges of the datetime range.
    return (moment - _EPOCH) // timedelta(seconds=1)


def service_name_for(message: RawMessage) -> str:
    """Image name, overridden by the compose service label, then the swarm task label."""
    container = message.container
    service = container.image
    if COMPOSE_SERVICE_LABEL in container.labels:
        service = container.labels[COMPOSE_SERVICE_LABEL]
    if SWARM_TASK_LABEL in container.labels:
        service = container.labels[SWARM_TASK_LABEL]
    return service


def _apply_json_fields(record: LogRecord, payload: JsonValue):
    timestamp = payload.get_string("timestamp")
    if timestamp is not None:
        parsed = parse_rfc3339(timestamp)
        if parsed is not None:
            record.timestamp = parsed
        else:
            logger.debug("Ignoring malformed timestamp %r", timestamp)

    level = payload.get_string("level")
    if level is not None:
        record.severity_text = level
        record.severity_number = severity_number(level)

    message = payload.get_string("message")
    if message is not None:
        record.message = message

    for key in ("env", "environment"):
        env = payload.get_string(key)
        if env is not None:
            record.resources["deployment.environment"] = env

    service = payload.get_string("service")
    if service is not None:
        record.resources["service.name"] = service

    namespace = payload.get_string("namespace")
    if namespace is not None:
        record.resources["namespace"] = namespace

    for key, value in payload.items():
        if key not in RESERVED_KEYS:
            record.attributes[key] = stringify(value)


def normalize(message: RawMessage, state: NormalizerState) -> LogRecord:
    """Build the LogRecord for one accepted message.

    JSON objects contribute timestamp, level, message, environment, service,
    namespace and attributes. Non-JSON payloads fall back to substring
    severity matching when enabled. JSON arrays and scalars leave the
    defaults untouched and skip the substring fallback.

    Args:
        message: The accepted raw message with its container metadata.
        state: Hostname, global environment and the parsing switches.

    Returns:
        A new LogRecord. Payload content never makes this raise.
    """
    record = LogRecord(
        timestamp=epoch_seconds(message.time),
        severity_text=DEFAULT_LEVEL,
        severity_number=severity_number(DEFAULT_LEVEL),
        message=message.data,
        resources={
            "service.name": service_name_for(message),
            "host.name": state.hostname,
        },
    )
    if state.environment:
        record.resources["deployment.environment"] = state.environment

    # auto_parse_json is carried in state but parsing is always attempted.
    payload = parse_payload(message.data)
    if payload is not None:
        if payload.is_object():
            _apply_json_fields(record, payload)
    elif state.auto_log_level_string_match:
        matched = match_severity(message.data)
        if matched is not None:
            record.severity_text, record.severity_number = matched

    return record
