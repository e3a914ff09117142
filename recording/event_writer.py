from __future__ import annotations
import json
from pathlib import Path
from typing import Any, IO, List
from threading import Lock

class JsonlWriter:
    """
    JSONL file writer with a byte-bounded write cache.
    Lines are held in memory until ``cache_bytes`` is reached, then flushed.
    A cache of 0 writes through on every line. Thread-safe within a process.
    """
    def __init__(self, out_path: Path, cache_bytes: int = 0):
        ensure_dir(out_path.parent)
        self.path = out_path
        self._f: IO[str] = out_path.open("a", encoding="utf-8")
        self._cache: List[str] = []
        self._cached = 0
        self._cache_bytes = max(0, cache_bytes)
        self._lock = Lock()
        self.count = 0
        self.bytes_written = 0

    def write(self, obj: Any) -> int:
        line = json.dumps(obj, ensure_ascii=False) + "\n"
        size = len(line.encode("utf-8"))
        with self._lock:
            self._cache.append(line)
            self._cached += size
            self.count += 1
            self.bytes_written += size
            if self._cached >= self._cache_bytes:
                self._flush_locked()
        return size

    def flush(self) -> None:
        with self._lock:
            self._flush_locked()

    def _flush_locked(self) -> None:
        if self._cache:
            self._f.write("".join(self._cache))
            self._cache.clear()
            self._cached = 0
        self._f.flush()

    def close(self):
        with self._lock:
            try:
                self._flush_locked()
            finally:
                self._f.close()


def ensure_dir(p: Path) -> None:
    p.mkdir(parents=True, exist_ok=True)
