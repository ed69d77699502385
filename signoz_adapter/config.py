"""Configuration — frozen dataclass loaded from env vars, an optional YAML file and CLI args."""

import argparse
import logging
import os
import socket
from dataclasses import dataclass, field

import yaml

from signoz_adapter.delivery import DEFAULT_ENDPOINT, DEFAULT_TIMEOUT
from signoz_adapter.filters import FilterConfig, parse_filter_options
from signoz_adapter.normalizer import NormalizerState

logger = logging.getLogger(__name__)


def get_hostname() -> str:
    """``HOSTNAME`` env var, else the system hostname, else ``unknown``."""
    hostname = os.environ.get("HOSTNAME", "")
    if hostname:
        return hostname
    try:
        return socket.gethostname().strip() or "unknown"
    except OSError as exc:
        logger.warning("Error getting hostname: %s", exc)
        return "unknown"


@dataclass(frozen=True)
class AdapterConfig:
    endpoint: str = DEFAULT_ENDPOINT
    request_timeout: float = DEFAULT_TIMEOUT
    flush_interval: float = 5.0
    max_buffer_size: int = 0
    auto_parse_json: bool = True
    auto_log_level_string_match: bool = True
    environment: str = ""
    hostname: str = "unknown"
    filter: FilterConfig = field(default_factory=FilterConfig)

    def normalizer_state(self) -> NormalizerState:
        return NormalizerState(
            hostname=self.hostname,
            environment=self.environment,
            auto_parse_json=self.auto_parse_json,
            auto_log_level_string_match=self.auto_log_level_string_match,
        )


def load_yaml_config(path: str | None) -> dict:
    """Load a YAML config file. Returns empty dict if no path or file missing."""
    if not path:
        return {}
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        logger.info("Loaded YAML config from %s", path)
        return data
    except FileNotFoundError:
        logger.warning("Config file %s not found, using defaults", path)
        return {}


def parse_option(raw: str) -> tuple[str, str]:
    """Split a ``KEY=VALUE`` CLI option."""
    key, sep, value = raw.partition("=")
    if not sep or not key:
        raise argparse.ArgumentTypeError(f"expected KEY=VALUE, got {raw!r}")
    return key.strip(), value


def build_cli_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Ship container logs to a SigNoz collector",
    )
    parser.add_argument(
        "--config", default=None,
        help="Path to YAML config file with route options",
    )
    parser.add_argument(
        "--option", dest="options", action="append", type=parse_option, default=[],
        metavar="KEY=VALUE",
        help="Route option, e.g. filter.name=web* (repeatable)",
    )
    parser.add_argument("--endpoint", type=str, default=None)
    parser.add_argument("--flush-interval", type=float, default=None)
    parser.add_argument("--timeout", type=float, default=None)
    return parser


def load_config(argv: list[str] | None = None) -> AdapterConfig:
    """Build AdapterConfig from defaults <- env vars <- YAML <- CLI args.

    Pass argv for testability; when None, argparse reads sys.argv.
    """
    args = build_cli_parser().parse_args(argv)

    yaml_data = load_yaml_config(args.config or os.environ.get("CONFIG_PATH"))
    options = {str(k): str(v) for k, v in (yaml_data.get("options") or {}).items()}
    options.update(dict(args.options))

    endpoint = os.environ.get("SIGNOZ_LOG_ENDPOINT", "") or DEFAULT_ENDPOINT
    timeout = float(os.environ.get("SIGNOZ_REQUEST_TIMEOUT", DEFAULT_TIMEOUT))
    flush_interval = float(
        os.environ.get("FLUSH_INTERVAL", AdapterConfig.flush_interval)
    )

    return AdapterConfig(
        endpoint=args.endpoint if args.endpoint is not None else endpoint,
        request_timeout=args.timeout if args.timeout is not None else timeout,
        flush_interval=(
            args.flush_interval if args.flush_interval is not None else flush_interval
        ),
        max_buffer_size=int(os.environ.get("MAX_BUFFER_SIZE", AdapterConfig.max_buffer_size)),
        auto_parse_json="DISABLE_JSON_PARSE" not in os.environ,
        auto_log_level_string_match="DISABLE_LOG_LEVEL_STRING_MATCH" not in os.environ,
        environment=os.environ.get("ENV", ""),
        hostname=get_hostname(),
        filter=parse_filter_options(options),
    )
