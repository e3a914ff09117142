"""Assemble executor, session controller and control listener into one process."""

from __future__ import annotations

import logging
from typing import Any, Optional

from config.paths import ensure_data_folder
from sdk.config import AppConfig
from sdk.events import BagControl
from sdk.registry import Registry
from sdk.runtime import Executor, RepeatingTimer

from .control_listener import ControlListener
from .recorder import SinkFactory, recorder_factory
from .session_manager import SessionController

log = logging.getLogger(__name__)


class BagRecorderNode:
    """Everything the ``run`` command needs, owned in one place."""

    def __init__(
        self,
        cfg: AppConfig,
        *,
        executor: Optional[Any] = None,
        sink_factory: Optional[SinkFactory] = None,
    ) -> None:
        self.cfg = cfg
        self.executor = executor if executor is not None else Executor()
        self.registry = Registry(cfg.plugins)
        self.controller = SessionController(
            cfg.params,
            self.executor,
            sink_factory or recorder_factory(self.registry, cfg.writer),
            storage_id=cfg.writer.rpartition(".")[2],
        )
        self.listener = ControlListener(
            self.controller,
            topic=cfg.control_topic,
            depth=cfg.control_depth,
            name=cfg.node_name,
        )
        self._reset_timer: Optional[RepeatingTimer] = None

    def start(self, autostart: bool = True) -> None:
        ensure_data_folder(self.cfg.params.data_folder)
        self.executor.add_node(self.listener)
        if self.cfg.reset_interval > 0:
            self._reset_timer = self.executor.create_timer(self.cfg.reset_interval, self._rollover)
        if autostart:
            self.controller.start_session()

    def send_control(self, enable: bool, source: Optional[str] = None) -> int:
        """Publish a control message the same way an external sender would."""
        return self.executor.publish(self.cfg.control_topic, BagControl(enable_recording=enable, source=source))

    def shutdown(self) -> None:
        if self._reset_timer is not None:
            self._reset_timer.cancel()
        self.executor.remove_node(self.listener)
        self.controller.shutdown()
        self.executor.shutdown()

    def _rollover(self) -> None:
        if self.controller.rollover():
            log.info("periodic reset, now recording to %s", self.controller.current_path)


__all__ = ["BagRecorderNode"]
