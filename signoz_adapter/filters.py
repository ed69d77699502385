"""Container filtering — pure predicates over container id, name, source and labels."""

from dataclasses import dataclass, field

from signoz_adapter.models import RawMessage


@dataclass(frozen=True)
class FilterConfig:
    name_pattern: str = ""
    container_id: str = ""
    sources: tuple[str, ...] = ()
    label_patterns: dict = field(default_factory=dict)


def parse_filter_options(options: dict) -> FilterConfig:
    """Build a FilterConfig from ``filter.*`` route options.

    ``filter.sources`` is a comma list; ``filter.labels`` is a comma list of
    ``key:pattern`` pairs. Pairs without exactly one ``:`` are dropped.
    """
    sources = tuple(options.get("filter.sources", "").split(","))

    label_patterns = {}
    labels_str = options.get("filter.labels", "")
    if labels_str:
        for pair in labels_str.split(","):
            parts = pair.split(":")
            if len(parts) == 2:
                label_patterns[parts[0]] = parts[1]

    return FilterConfig(
        name_pattern=options.get("filter.name", ""),
        container_id=options.get("filter.id", ""),
        sources=sources,
        label_patterns=label_patterns,
    )


def matches_pattern(value: str, pattern: str) -> bool:
    """Match *value* against a pattern with an optional leading/trailing ``*``."""
    if len(pattern) >= 2 and pattern.startswith("*") and pattern.endswith("*"):
        return pattern[1:-1] in value
    if pattern.startswith("*"):
        return value.endswith(pattern[1:])
    if pattern.endswith("*"):
        return value.startswith(pattern[:-1])
    return value == pattern


def _sources_restricted(sources: tuple[str, ...]) -> bool:
    return len(sources) > 0 and sources[0] != ""


def should_process(message: RawMessage, config: FilterConfig) -> bool:
    """Return True if *message* passes every configured filter criterion."""
    container = message.container

    if config.container_id and container.id != config.container_id:
        return False

    if config.name_pattern and not matches_pattern(container.name, config.name_pattern):
        return False

    if _sources_restricted(config.sources) and message.source not in config.sources:
        return False

    for key, pattern in config.label_patterns.items():
        value = container.labels.get(key)
        if value is None:
            return False
        if not matches_pattern(value, pattern):
            return False

    return True
