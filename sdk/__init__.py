from .config import AppConfig, RecorderParams, load_config
from .events import BagControl, RecordOptions, StorageOptions
from .runtime import Executor, Node

__all__ = [
    "AppConfig",
    "RecorderParams",
    "load_config",
    "BagControl",
    "RecordOptions",
    "StorageOptions",
    "Executor",
    "Node",
]
