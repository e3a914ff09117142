"""Recording session lifecycle: the idle/recording state machine."""

from __future__ import annotations

import logging
import threading
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Dict, Optional

from config.paths import BagPathNamer
from core.errors import SinkCreationError
from sdk.config import RecorderParams
from sdk.events import MAX_CACHE_SIZE, StorageOptions
from sdk.ids import now_utc

from .recorder import Recorder, SinkFactory
from .topic_filter import FilterPolicy, resolve

log = logging.getLogger(__name__)


class SessionState(str, Enum):
    IDLE = "idle"
    RECORDING = "recording"


class SessionController:
    """Own the single live capture sink and the state that says whether it exists.

    ``executor`` is anything with ``add_node`` / ``remove_node``;
    ``sink_factory`` builds an inactive sink from storage and record options.
    Every operation runs under one re-entrant lock, so control signals handled
    on different executor threads never interleave, and ``state`` is
    RECORDING exactly when a sink is registered and recording.
    """

    def __init__(
        self,
        params: RecorderParams,
        executor: Any,
        sink_factory: SinkFactory,
        *,
        clock: Callable[[], datetime] = now_utc,
        namer: Optional[BagPathNamer] = None,
        storage_id: str = "jsonl",
    ) -> None:
        self.params = params
        self.executor = executor
        self.policy: FilterPolicy = resolve(params.logged_topics)
        self.storage_id = storage_id
        self.sessions_started = 0

        self._sink_factory = sink_factory
        self._clock = clock
        self._namer = namer or BagPathNamer(params.data_folder)
        self._lock = threading.RLock()
        self._state = SessionState.IDLE
        self._sink: Optional[Recorder] = None
        self._path: Optional[str] = None

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------
    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def is_recording(self) -> bool:
        return self._state is SessionState.RECORDING

    @property
    def current_path(self) -> Optional[str]:
        return self._path

    def status(self) -> Dict[str, Any]:
        with self._lock:
            return {
                "state": self._state.value,
                "path": self._path,
                "topics": self.policy.describe(),
                "file_duration": self.params.file_duration,
                "data_folder": self.params.data_folder,
                "sessions_started": self.sessions_started,
            }

    def storage_options(self, path: str) -> StorageOptions:
        return StorageOptions(
            uri=path,
            storage_id=self.storage_id,
            max_bagfile_size=0,
            max_bagfile_duration=self.params.file_duration,
            max_cache_size=MAX_CACHE_SIZE,
            storage_preset_profile="",
            snapshot_mode=False,
        )

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def start_session(self) -> bool:
        """Open a new bag. Returns False if a session is already running.

        Raises :class:`SinkCreationError` if the sink cannot be created,
        registered or started; the controller is then still idle.
        """

        with self._lock:
            if self._state is SessionState.RECORDING:
                log.debug("start_session ignored, already recording to %s", self._path)
                return False

            path = self._namer.next_path(self._clock())
            storage = self.storage_options(path)
            options = self.policy.to_record_options()
            log.info("Data Folder: %s", self.params.data_folder)
            log.info("File Duration: %d seconds", self.params.file_duration)
            log.info("Logged Topics: %s", self.policy.describe())
            log.info("Storage Path: %s", path)

            sink: Optional[Recorder] = None
            registered = False
            try:
                sink = self._sink_factory(storage, options)
                self.executor.add_node(sink)
                registered = True
                sink.record()
            except Exception as exc:
                if sink is not None:
                    self._discard(sink, registered)
                log.error("could not start recording to %s: %s", path, exc)
                raise SinkCreationError(path, exc) from exc

            self._sink = sink
            self._path = path
            self._state = SessionState.RECORDING
            self.sessions_started += 1
            return True

    def stop_session(self) -> bool:
        """Close the running bag. Returns False (and does nothing) when idle."""

        with self._lock:
            if self._state is not SessionState.RECORDING:
                return False
            sink, self._sink = self._sink, None
            try:
                # deregister first so messages already queued for the sink are written
                self.executor.remove_node(sink)
                sink.stop()
            finally:
                self._state = SessionState.IDLE
            log.info("stopped recording to %s", self._path)
            self._path = None
            return True

    def reset_session(self) -> bool:
        """Roll over to a fresh bag path; from idle this is just a start."""

        with self._lock:
            self.stop_session()
            return self.start_session()

    def apply(self, enable: bool) -> Optional[str]:
        """Act on one control intent; returns "started", "stopped" or None.

        The state check and the transition happen under the same lock, so an
        intent that arrives during a reset is judged against the state the
        reset leaves behind. Raises :class:`SinkCreationError` like
        :meth:`start_session`.
        """

        with self._lock:
            if enable and self._state is SessionState.IDLE:
                self.start_session()
                return "started"
            if not enable and self._state is SessionState.RECORDING:
                self.stop_session()
                return "stopped"
            return None

    def rollover(self) -> bool:
        """Reset only if a session is running; used by the periodic reset timer."""

        with self._lock:
            if self._state is not SessionState.RECORDING:
                return False
            return self.reset_session()

    def shutdown(self) -> None:
        self.stop_session()

    def __enter__(self) -> "SessionController":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.shutdown()

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    def _discard(self, sink: Recorder, registered: bool) -> None:
        if registered:
            self.executor.remove_node(sink)
        try:
            sink.stop()
        except Exception:
            log.exception("error while stopping failed sink %s", sink.name)


__all__ = ["SessionController", "SessionState"]
