"""Exceptions raised by the recorder core."""

from __future__ import annotations


class ConfigError(ValueError):
    """Recorder parameters could not be loaded or failed validation."""


class SinkCreationError(RuntimeError):
    """The capture sink could not be created, registered or activated.

    The session controller guarantees that it is still idle when this is
    raised, so the caller may simply retry on the next enable signal.
    """

    def __init__(self, path: str, cause: BaseException) -> None:
        super().__init__(f"failed to open bag at {path}: {cause}")
        self.path = path
        self.cause = cause


class PluginError(LookupError):
    """A registry key points to a module or attribute that cannot be loaded."""


__all__ = ["ConfigError", "SinkCreationError", "PluginError"]
