
from __future__ import annotations
from pydantic import BaseModel, Field
from typing import List, Optional
from .ids import now_utc_ns
CONTROL_TOPIC = "/bag_control"
MAX_CACHE_SIZE = 10 * 1024 * 1024
class BagControl(BaseModel):
    enable_recording: bool
    source: Optional[str] = None
    stamp_ns: int = Field(default_factory=now_utc_ns)
class StorageOptions(BaseModel):
    uri: str
    storage_id: str = "jsonl"
    max_bagfile_size: int = 0
    max_bagfile_duration: int = 0
    max_cache_size: int = MAX_CACHE_SIZE
    storage_preset_profile: str = ""
    snapshot_mode: bool = False
class RecordOptions(BaseModel):
    all_topics: bool = False
    is_discovery_disabled: bool = False
    topics: List[str] = Field(default_factory=list)
    rmw_serialization_format: str = "cdr"
    topic_polling_interval_ms: int = 1000
