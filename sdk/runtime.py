
from __future__ import annotations
import logging
import threading
from collections import deque
from dataclasses import dataclass
from typing import Any, Callable, Deque, Dict, List, Optional, Tuple

from .ids import node_name

log = logging.getLogger(__name__)

ALL_TOPICS = "*"
Callback = Callable[..., None]


@dataclass(frozen=True, eq=False)
class Subscription:
    topic: str
    callback: Callback
    depth: int = 10

    def matches(self, topic: str) -> bool:
        return self.topic == ALL_TOPICS or self.topic == topic

    def deliver(self, topic: str, msg: Any) -> None:
        # catch-all subscriptions need to know where the message came from
        if self.topic == ALL_TOPICS:
            self.callback(topic, msg)
        else:
            self.callback(msg)


class Node:
    """Something the executor dispatches messages to.

    Subscriptions are matched by exact topic name, or by ``"*"`` for every
    topic published on the executor. Exact subscriptions are called with the
    message, ``"*"`` subscriptions with ``(topic, message)``.
    """

    def __init__(self, name: Optional[str] = None):
        self.name = name or node_name(type(self).__name__.lower())
        self._subs: List[Subscription] = []
        self._subs_lock = threading.Lock()

    def create_subscription(self, topic: str, callback: Callback, depth: int = 10) -> Subscription:
        sub = Subscription(topic, callback, max(1, depth))
        with self._subs_lock:
            self._subs.append(sub)
        return sub

    def destroy_subscription(self, sub: Subscription) -> None:
        with self._subs_lock:
            if sub in self._subs:
                self._subs.remove(sub)

    def subscriptions_for(self, topic: str) -> List[Subscription]:
        with self._subs_lock:
            return [s for s in self._subs if s.matches(topic)]

    def get_logger(self) -> logging.Logger:
        return logging.getLogger(f"node.{self.name}")


class _NodeWorker:
    """One thread per node: callbacks of a node run in arrival order, never overlapping."""

    _STOP = object()

    def __init__(self, node: Node):
        self.node = node
        self.dropped = 0
        self._inbox: Deque[Tuple[Any, str, Any]] = deque()
        self._cond = threading.Condition()
        self._thread = threading.Thread(target=self._run, name=f"exec-{node.name}", daemon=True)

    def start(self) -> None:
        self._thread.start()

    def enqueue(self, sub: Subscription, topic: str, msg: Any) -> None:
        with self._cond:
            pending = sum(1 for s, _, _ in self._inbox if s is sub)
            if pending >= sub.depth:
                # keep-last: drop the oldest message of this subscription
                for i, (s, _, _) in enumerate(self._inbox):
                    if s is sub:
                        del self._inbox[i]
                        break
                self.dropped += 1
            self._inbox.append((sub, topic, msg))
            self._cond.notify()

    def stop(self) -> None:
        with self._cond:
            self._inbox.append((self._STOP, "", None))
            self._cond.notify()
        if threading.current_thread() is not self._thread:
            self._thread.join()

    def _run(self) -> None:
        while True:
            with self._cond:
                while not self._inbox:
                    self._cond.wait()
                sub, topic, msg = self._inbox.popleft()
            if sub is self._STOP:
                return
            try:
                sub.deliver(topic, msg)
            except Exception:
                log.exception("callback on %s for topic %s failed", self.node.name, sub.topic)


class RepeatingTimer:
    def __init__(self, period: float, callback: Callable[[], None], name: str = "timer"):
        self.period = period
        self.callback = callback
        self._cancelled = threading.Event()
        self._thread = threading.Thread(target=self._run, name=name, daemon=True)

    def start(self) -> None:
        self._thread.start()

    def cancel(self) -> None:
        self._cancelled.set()

    def _run(self) -> None:
        while not self._cancelled.wait(self.period):
            try:
                self.callback()
            except Exception:
                log.exception("timer %s callback failed", self._thread.name)


class Executor:
    """Multi-threaded dispatch of published messages to registered nodes."""

    def __init__(self):
        self._workers: Dict[str, _NodeWorker] = {}
        self._timers: List[RepeatingTimer] = []
        self._lock = threading.Lock()
        self._shutdown = threading.Event()

    # -- registration -----------------------------------------------------
    def add_node(self, node: Node) -> None:
        with self._lock:
            if node.name in self._workers:
                raise ValueError(f"node {node.name!r} already added")
            worker = _NodeWorker(node)
            self._workers[node.name] = worker
        worker.start()
        log.debug("added node %s", node.name)

    def remove_node(self, node: Node) -> None:
        with self._lock:
            worker = self._workers.pop(node.name, None)
        if worker is None:
            return
        worker.stop()
        if worker.dropped:
            log.warning("node %s dropped %d messages on full queues", node.name, worker.dropped)
        log.debug("removed node %s", node.name)

    def has_node(self, node: Node) -> bool:
        with self._lock:
            return node.name in self._workers

    # -- messaging ----------------------------------------------------------
    def publish(self, topic: str, msg: Any) -> int:
        """Queue ``msg`` for every matching subscription; returns how many matched."""
        with self._lock:
            workers = list(self._workers.values())
        delivered = 0
        for worker in workers:
            for sub in worker.node.subscriptions_for(topic):
                worker.enqueue(sub, topic, msg)
                delivered += 1
        return delivered

    def create_timer(self, period: float, callback: Callable[[], None]) -> RepeatingTimer:
        timer = RepeatingTimer(period, callback, name=f"timer-{len(self._timers)}")
        with self._lock:
            self._timers.append(timer)
        timer.start()
        return timer

    # -- lifecycle ------------------------------------------------------------
    def spin(self, timeout: Optional[float] = None) -> bool:
        """Block until :meth:`shutdown`; returns False if ``timeout`` expired first."""
        return self._shutdown.wait(timeout)

    def shutdown(self) -> None:
        self._shutdown.set()
        with self._lock:
            timers, self._timers = self._timers, []
            workers = list(self._workers.values())
            self._workers.clear()
        for timer in timers:
            timer.cancel()
        for worker in workers:
            worker.stop()

    @property
    def is_shutdown(self) -> bool:
        return self._shutdown.is_set()
