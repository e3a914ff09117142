"""Records persisted into bag files."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import time

import ulid
from pydantic import BaseModel, ConfigDict, Field


def now_ts_ms() -> int:
    """Return the current timestamp in milliseconds."""

    return int(time.time() * 1000)


def new_event_id() -> str:
    """Generate a ULID based identifier for events."""

    return str(ulid.new())


class Event(BaseModel):
    """One message received on a recorded topic."""

    model_config = ConfigDict(extra="allow")

    id: str = Field(default_factory=new_event_id)
    ts_ms: int = Field(default_factory=now_ts_ms)
    topic: str
    data: Any = None


class BagFileInfo(BaseModel):
    """A single split file inside a bag directory."""

    path: str
    message_count: int = 0
    size_bytes: int = 0
    starting_ts_ms: Optional[int] = None
    duration_ms: int = 0


class BagMeta(BaseModel):
    """Summary written next to the split files when a bag is closed."""

    uri: str
    storage_id: str
    created_ts_ms: int = Field(default_factory=now_ts_ms)
    closed_ts_ms: Optional[int] = None
    message_count: int = 0
    topics: Dict[str, int] = Field(default_factory=dict)
    files: List[BagFileInfo] = Field(default_factory=list)


def event_dump(model: BaseModel) -> Dict[str, Any]:
    """Return a JSON-ready ``dict`` for ``model``."""

    return model.model_dump(mode="json")


__all__ = ["Event", "BagFileInfo", "BagMeta", "event_dump", "now_ts_ms", "new_event_id"]
