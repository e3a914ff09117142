
from __future__ import annotations
import time, ulid
from datetime import datetime, timezone
def now_utc_ns() -> int: return time.time_ns()
def now_utc() -> datetime: return datetime.now(timezone.utc)
def new_ulid() -> str: return str(ulid.new())
def node_name(prefix: str) -> str: return f"{prefix}_{new_ulid().lower()}"
