"""Capture sink: a node that writes every message on the selected topics to a bag."""

from __future__ import annotations

import functools
import threading
from typing import Any, Callable, List, Optional

from core.events import Event
from sdk.events import RecordOptions, StorageOptions
from sdk.ids import node_name
from sdk.registry import Registry
from sdk.runtime import ALL_TOPICS, Node, Subscription

DEFAULT_DEPTH = 100

SinkFactory = Callable[[StorageOptions, RecordOptions], "Recorder"]


def _payload(msg: Any) -> Any:
    if hasattr(msg, "model_dump"):
        return msg.model_dump(mode="json")
    return msg


class Recorder(Node):
    """Subscribe to the topics in ``record_options`` and persist them through ``writer``.

    ``writer`` follows the bag writer plugin contract: ``open(storage)``,
    ``write(event)`` and ``close()``. Nothing is opened until :meth:`record`.
    """

    def __init__(
        self,
        writer: Any,
        storage_options: StorageOptions,
        record_options: RecordOptions,
        *,
        depth: int = DEFAULT_DEPTH,
        name: Optional[str] = None,
    ) -> None:
        super().__init__(name or node_name("recorder"))
        self.writer = writer
        self.storage_options = storage_options
        self.record_options = record_options
        self.depth = depth
        self.recorded = 0
        self.dropped = 0
        self._active: List[Subscription] = []
        self._lock = threading.Lock()
        self._recording = False

    @property
    def is_recording(self) -> bool:
        return self._recording

    @property
    def uri(self) -> str:
        return self.storage_options.uri

    def record(self) -> None:
        with self._lock:
            if self._recording:
                return
            self.writer.open(self.storage_options)
            if self.record_options.all_topics:
                self._active.append(self.create_subscription(ALL_TOPICS, self._write, self.depth))
            else:
                for topic in self.record_options.topics:
                    cb = functools.partial(self._write, topic)
                    self._active.append(self.create_subscription(topic, cb, self.depth))
            self._recording = True
        self.get_logger().info("recording to %s", self.uri)

    def stop(self) -> None:
        with self._lock:
            if not self._recording:
                return
            self._recording = False
            for sub in self._active:
                self.destroy_subscription(sub)
            self._active.clear()
            self.writer.close()
        self.get_logger().info(
            "stopped recording to %s (%d messages, %d after stop)",
            self.uri, self.recorded, self.dropped,
        )

    def _write(self, topic: str, msg: Any) -> None:
        with self._lock:
            if not self._recording:
                self.dropped += 1
                return
            self.writer.write(Event(topic=topic, data=_payload(msg)))
            self.recorded += 1


def recorder_factory(registry: Registry, writer_key: str, depth: int = DEFAULT_DEPTH) -> SinkFactory:
    """Build a sink factory that gives every new recorder a fresh writer plugin."""

    def create(storage: StorageOptions, options: RecordOptions) -> Recorder:
        return Recorder(registry.create(writer_key), storage, options, depth=depth)

    return create


__all__ = ["Recorder", "SinkFactory", "recorder_factory"]
