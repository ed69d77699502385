from datetime import datetime, timezone

import pytest

from signoz_adapter.models import ContainerInfo, RawMessage
from signoz_adapter.normalizer import NormalizerState

MESSAGE_TIME = datetime(2024, 1, 15, 10, 30, 0, tzinfo=timezone.utc)
MESSAGE_EPOCH = 1705314600


def make_message(
    data="hello world",
    source="stdout",
    container_id="abc123",
    name="/web-1",
    image="nginx:latest",
    labels=None,
    time=MESSAGE_TIME,
) -> RawMessage:
    return RawMessage(
        time=time,
        data=data,
        source=source,
        container=ContainerInfo(
            id=container_id,
            name=name,
            image=image,
            labels=labels if labels is not None else {},
        ),
    )


@pytest.fixture
def state():
    return NormalizerState(hostname="test-host")


@pytest.fixture
def message_factory():
    return make_message
