"""Listens on the control topic and turns enable/disable intents into session calls."""

from __future__ import annotations

from typing import Any, Mapping, Optional, Union

from core.errors import SinkCreationError
from sdk.events import CONTROL_TOPIC, BagControl
from sdk.runtime import Node

from .session_manager import SessionController


class ControlListener(Node):
    """Subscribe to ``BagControl`` messages and drive a :class:`SessionController`.

    Only state-changing intents reach the controller: enable while idle starts
    a session, disable while recording stops it. Duplicates are logged and
    dropped, since the control channel may deliver the same intent twice.
    """

    def __init__(
        self,
        controller: SessionController,
        *,
        topic: str = CONTROL_TOPIC,
        depth: int = 10,
        name: str = "BagRecorder",
    ) -> None:
        super().__init__(name)
        self.controller = controller
        self.topic = topic
        self.create_subscription(topic, self.on_control, depth)

    def on_control(self, msg: Union[BagControl, Mapping[str, Any]]) -> Optional[str]:
        """Handle one control message; returns the action taken or None."""

        logger = self.get_logger()
        if not isinstance(msg, BagControl):
            msg = BagControl(**msg)
        logger.info("Message Received (enable_recording=%s, source=%s)",
                    msg.enable_recording, msg.source or "-")

        try:
            action = self.controller.apply(msg.enable_recording)
        except SinkCreationError as exc:
            logger.error("recording not started, waiting for next enable: %s", exc)
            return None

        if action == "started":
            logger.info("Message Received: starting new recording at %s", self.controller.current_path)
        elif action == "stopped":
            logger.info("Message Received: stopping existing recording")
        else:
            logger.debug("Message Received: recorder already %s, ignoring",
                         self.controller.state.value)
        return action


__all__ = ["ControlListener"]
