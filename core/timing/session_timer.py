
from dataclasses import dataclass
from time import monotonic_ns
from typing import Callable

NS_PER_S = 1_000_000_000
NS_PER_MS = 1_000_000

@dataclass
class SessionTimer:
    """Monotonic stopwatch; ``clock`` is injectable so split logic can be tested."""
    clock: Callable[[], int] = monotonic_ns
    started_ns: int = 0
    stopped_ns: int = 0
    running: bool = False

    def start(self):
        self.started_ns = self.clock()
        self.stopped_ns = 0
        self.running = True

    def stop(self) -> float:
        assert self.running
        self.stopped_ns = self.clock()
        self.running = False
        return self.elapsed_ms

    @property
    def elapsed_ns(self) -> int:
        if self.started_ns == 0 and not self.running:
            return 0
        end = self.clock() if self.running else self.stopped_ns
        return end - self.started_ns

    @property
    def elapsed_ms(self) -> float:
        return self.elapsed_ns / NS_PER_MS

    def exceeded(self, seconds: int) -> bool:
        return seconds > 0 and self.running and self.elapsed_ns >= seconds * NS_PER_S
