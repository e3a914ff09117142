# tests/conftest.py
"""
Shared doubles for the recorder tests.

SyncExecutor stands in for the threaded executor: publish() calls matching
callbacks inline, and every add/remove is recorded so tests can count sink
registrations. FakeSink records lifecycle calls instead of writing files.
"""

from datetime import datetime, timezone
from typing import Any, List, Optional

import pytest

from sdk.config import RecorderParams
from sdk.runtime import Node


class SyncExecutor:
    def __init__(self):
        self.nodes: List[Node] = []
        self.added: List[Node] = []
        self.removed: List[Node] = []

    def add_node(self, node: Node) -> None:
        self.nodes.append(node)
        self.added.append(node)

    def remove_node(self, node: Node) -> None:
        if node in self.nodes:
            self.nodes.remove(node)
            self.removed.append(node)

    def shutdown(self) -> None:
        self.nodes.clear()

    def publish(self, topic: str, msg: Any) -> int:
        delivered = 0
        for node in list(self.nodes):
            for sub in node.subscriptions_for(topic):
                sub.deliver(topic, msg)
                delivered += 1
        return delivered


class FakeSink(Node):
    def __init__(self, storage, options, fail_on_record: bool = False):
        super().__init__()
        self.storage_options = storage
        self.record_options = options
        self.fail_on_record = fail_on_record
        self.record_calls = 0
        self.stop_calls = 0
        self.is_recording = False

    def record(self) -> None:
        self.record_calls += 1
        if self.fail_on_record:
            raise PermissionError(f"cannot write {self.storage_options.uri}")
        self.is_recording = True

    def stop(self) -> None:
        self.stop_calls += 1
        self.is_recording = False


class SinkFactory:
    """Callable sink factory that keeps every sink it built."""

    def __init__(self):
        self.created: List[FakeSink] = []
        self.fail_on_create: Optional[Exception] = None
        self.fail_on_record = False

    def __call__(self, storage, options):
        if self.fail_on_create is not None:
            raise self.fail_on_create
        sink = FakeSink(storage, options, fail_on_record=self.fail_on_record)
        self.created.append(sink)
        return sink

    @property
    def active(self) -> List[FakeSink]:
        return [s for s in self.created if s.is_recording]


class StepClock:
    """Returns the queued instants in order, then keeps repeating the last one."""

    def __init__(self, *instants: datetime):
        self._instants = list(instants) or [datetime(2024, 10, 2, 3, 4, 5, tzinfo=timezone.utc)]

    def __call__(self) -> datetime:
        if len(self._instants) > 1:
            return self._instants.pop(0)
        return self._instants[0]


@pytest.fixture
def executor():
    return SyncExecutor()


@pytest.fixture
def sink_factory():
    return SinkFactory()


@pytest.fixture
def params():
    return RecorderParams(dataFolder="/data", fileDuration=60, loggedTopics=["/a", "/b"])


@pytest.fixture
def step_clock():
    return StepClock
