"""Recording session control: topic selection, session state machine, control listener."""

from .control_listener import ControlListener
from .session_manager import SessionController, SessionState
from .topic_filter import FilterMode, FilterPolicy, resolve

__all__ = [
    "ControlListener",
    "SessionController",
    "SessionState",
    "FilterMode",
    "FilterPolicy",
    "resolve",
]
