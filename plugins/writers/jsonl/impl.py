
from __future__ import annotations
import json
import logging
import shutil
from pathlib import Path
from time import monotonic_ns
from typing import Callable, Optional

from core.events import BagFileInfo, BagMeta, Event, event_dump, now_ts_ms
from core.timing.session_timer import SessionTimer
from recording.event_writer import JsonlWriter
from sdk.events import StorageOptions

log = logging.getLogger(__name__)

METADATA_FILE = "metadata.json"


class JsonlBagWriter:
    """Write a bag directory of JSONL split files plus a ``metadata.json`` summary.

    A new split is started when the current one has been open for
    ``max_bagfile_duration`` seconds or has grown past ``max_bagfile_size``
    bytes (0 disables either limit).
    """

    def __init__(self, clock: Callable[[], int] = monotonic_ns):
        self._clock = clock
        self._storage: Optional[StorageOptions] = None
        self._dir: Optional[Path] = None
        self._file: Optional[JsonlWriter] = None
        self._info: Optional[BagFileInfo] = None
        self._timer = SessionTimer(clock=clock)
        self.meta: Optional[BagMeta] = None

    @property
    def is_open(self) -> bool:
        return self._file is not None

    def open(self, storage: StorageOptions) -> None:
        bag_dir = Path(storage.uri)
        if bag_dir.exists():
            raise FileExistsError(f"bag directory already exists: {bag_dir}")
        bag_dir.mkdir(parents=True)
        self._storage = storage
        self._dir = bag_dir
        self.meta = BagMeta(uri=str(bag_dir), storage_id=storage.storage_id)
        try:
            self._open_split()
        except Exception:
            self._storage = self._dir = self.meta = None
            shutil.rmtree(bag_dir, ignore_errors=True)
            raise

    def write(self, event: Event) -> None:
        if self._file is None:
            raise RuntimeError("writer is not open")
        if self._should_split():
            self._close_split()
            self._open_split()
        size = self._file.write(event_dump(event))
        info = self._info
        if info.starting_ts_ms is None:
            info.starting_ts_ms = event.ts_ms
        info.message_count += 1
        info.size_bytes += size
        info.duration_ms = max(0, event.ts_ms - info.starting_ts_ms)
        self.meta.message_count += 1
        self.meta.topics[event.topic] = self.meta.topics.get(event.topic, 0) + 1

    def close(self) -> None:
        if self._file is None:
            return
        self._close_split()
        self.meta.closed_ts_ms = now_ts_ms()
        (self._dir / METADATA_FILE).write_text(
            json.dumps(event_dump(self.meta), indent=2), encoding="utf-8"
        )
        log.info("closed bag %s (%d messages, %d files)",
                 self._dir, self.meta.message_count, len(self.meta.files))

    def _should_split(self) -> bool:
        storage = self._storage
        if self._timer.exceeded(storage.max_bagfile_duration):
            return True
        return storage.max_bagfile_size > 0 and self._info.size_bytes >= storage.max_bagfile_size

    def _open_split(self) -> None:
        index = len(self.meta.files)
        path = self._dir / f"{self._dir.name}_{index}.jsonl"
        self._file = JsonlWriter(path, cache_bytes=self._storage.max_cache_size)
        self._info = BagFileInfo(path=path.name)
        self.meta.files.append(self._info)
        self._timer.start()
        log.debug("opened split %s", path)

    def _close_split(self) -> None:
        try:
            self._file.close()
        finally:
            self._file = None
            self._timer.stop()
