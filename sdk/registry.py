
from __future__ import annotations
from importlib import import_module
from typing import Any, Dict, Mapping, Optional
from core.errors import PluginError
class Registry:
    """Maps short keys (``writer.jsonl``) to ``module:attr`` import targets."""
    def __init__(self, targets: Optional[Mapping[str, str]] = None):
        self._map: Dict[str, str] = dict(targets or {})
    def target(self, key: str) -> str:
        return self._map.get(key, key)
    def load(self, key: str) -> Any:
        target = self.target(key)
        mod_path, _, obj = target.partition(":")
        try:
            mod = import_module(mod_path)
        except ImportError as exc:
            raise PluginError(f"cannot import {mod_path!r} for {key!r}") from exc
        if not obj:
            return mod
        try:
            return getattr(mod, obj)
        except AttributeError as exc:
            raise PluginError(f"{mod_path!r} has no attribute {obj!r}") from exc
    def create(self, key: str, *args, **kwargs):
        return self.load(key)(*args, **kwargs)
