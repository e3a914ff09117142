# config/paths.py
"""
Bag directory naming and data folder helpers.

Design goals
- One place that decides where a recording session writes
- Bag directories are named from the session start instant rendered in UTC,
  so names compare the same across deployments in different timezones
- Naming is a pure computation; directory creation and writeability checks
  are separate helpers
"""

from __future__ import annotations

import errno
import os
import sys
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional, Union

BAG_PREFIX = "Bag_"
UTC_STAMP = "%Y_%m_%d_%H_%M_%S"


# ---------- OS defaults ----------

def _platform_default_base() -> Path:
    """
    Returns an OS-specific base directory for user data, following conventions:
    - Windows: %LOCALAPPDATA%/BagRecorder
    - macOS:   ~/Library/Application Support/BagRecorder
    - Linux:   ~/.local/share/bag_recorder
    """
    if sys.platform.startswith("win"):
        base = os.getenv("LOCALAPPDATA") or os.getenv("APPDATA") or str(Path.home() / "AppData" / "Local")
        return Path(base) / "BagRecorder"
    elif sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support" / "BagRecorder"
    else:
        # Linux / other POSIX
        return Path(os.getenv("XDG_DATA_HOME", Path.home() / ".local" / "share")) / "bag_recorder"


def default_data_folder() -> Path:
    """Default ``dataFolder`` when neither the config file nor env set one."""
    return _platform_default_base() / "Data"


# ---------- Naming ----------

def utc_stamp(now: datetime) -> str:
    """
    Render ``now`` as YYYY_MM_DD_HH_MM_SS in UTC.
    Naive datetimes are taken to already be UTC.
    """
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return now.astimezone(timezone.utc).strftime(UTC_STAMP)


def compute_path(root: str, now: datetime) -> str:
    """Bag directory for a session started at ``now``: ``<root>/Bag_<stamp>``."""
    return f"{root}/{BAG_PREFIX}{utc_stamp(now)}"


class BagPathNamer:
    """
    Issues bag paths for successive sessions of one controller.

    Two sessions starting within the same UTC second would get the same
    ``compute_path`` value; the second and later ones get ``_1``, ``_2``, ...
    appended. The first path of every second is the bare value.
    """

    def __init__(self, root: str) -> None:
        self.root = root
        self._lock = threading.Lock()
        self._last_stamp: Optional[str] = None
        self._repeat = 0

    def next_path(self, now: datetime) -> str:
        base = compute_path(self.root, now)
        stamp = utc_stamp(now)
        with self._lock:
            if stamp == self._last_stamp:
                self._repeat += 1
                return f"{base}_{self._repeat}"
            self._last_stamp = stamp
            self._repeat = 0
            return base


# ---------- Filesystem helpers ----------

def ensure_data_folder(root: Union[str, Path]) -> Path:
    """Create the data folder (and parents). Raises if a file is in the way."""
    p = Path(root)
    p.mkdir(parents=True, exist_ok=True)
    return p


def verify_writeable(root: Union[str, Path]) -> None:
    """
    Raise OSError if the data folder is not writeable.
    """
    p = Path(root)
    try:
        p.mkdir(parents=True, exist_ok=True)
        test = p / ".write_test"
        test.write_text("ok", encoding="utf-8")
        test.unlink(missing_ok=True)
    except OSError as e:
        raise OSError(errno.EACCES, f"Not writeable: {p}", str(e)) from e


def list_bags(root: Union[str, Path]) -> List[Path]:
    """Bag directories under ``root``, newest name first."""
    p = Path(root)
    if not p.is_dir():
        return []
    return sorted(
        (d for d in p.iterdir() if d.is_dir() and d.name.startswith(BAG_PREFIX)),
        key=lambda d: d.name,
        reverse=True,
    )


# ---------- CLI sanity check ----------

if __name__ == "__main__":
    root = default_data_folder()
    try:
        verify_writeable(root)
    except OSError as e:
        print(f"[WARN] Writeability check failed: {e}")

    print("Data folder:  ", root)
    print("Next bag path:", compute_path(str(root), datetime.now(timezone.utc)))
    for bag in list_bags(root):
        print("  ", bag.name)
