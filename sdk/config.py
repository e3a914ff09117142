
from __future__ import annotations
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Union
import json
import logging
import os

from config.paths import default_data_folder
from core.errors import ConfigError
from .events import CONTROL_TOPIC

log = logging.getLogger(__name__)

WILDCARD = "*"
DEFAULT_TOPICS = ("/rosout", "/system_messenger", "/labjack_ain")
NODE_NAME = "BagRecorder"

ENV_DATA_FOLDER = "BAG_RECORDER_DATA_FOLDER"
ENV_FILE_DURATION = "BAG_RECORDER_FILE_DURATION"
ENV_LOGGED_TOPICS = "BAG_RECORDER_LOGGED_TOPICS"


class RecorderParams(BaseModel):
    """The three node parameters, read once and never mutated."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    data_folder: str = Field(default_factory=lambda: str(default_data_folder()), alias="dataFolder")
    file_duration: int = Field(60, gt=0, alias="fileDuration")
    logged_topics: List[str] = Field(default_factory=lambda: list(DEFAULT_TOPICS), alias="loggedTopics")

    @field_validator("data_folder")
    @classmethod
    def _non_blank_folder(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("dataFolder must not be blank")
        return v

    @field_validator("logged_topics")
    @classmethod
    def _valid_topics(cls, v: List[str]) -> List[str]:
        if not v:
            raise ValueError("loggedTopics must name at least one topic or '*'")
        for topic in v:
            if not topic.strip():
                raise ValueError("loggedTopics contains a blank entry")
        if v[0] == WILDCARD and len(v) > 1:
            log.warning("loggedTopics starts with '*', ignoring explicit names %s", v[1:])
        elif WILDCARD in v[1:]:
            raise ValueError("'*' must be the only entry of loggedTopics")
        return v


class AppConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    params: RecorderParams = Field(default_factory=RecorderParams)
    node_name: str = NODE_NAME
    control_topic: str = CONTROL_TOPIC
    control_depth: int = Field(10, gt=0)
    reset_interval: float = Field(0.0, ge=0.0)
    writer: str = "writer.jsonl"
    log_level: str = "INFO"
    log_file: Optional[str] = None
    http_host: str = "127.0.0.1"
    http_port: int = 8765
    plugins: Dict[str, str] = Field(default_factory=lambda: {
        "writer.jsonl": "plugins.writers.jsonl.impl:JsonlBagWriter",
    })


_PARAM_KEYS = {"dataFolder", "fileDuration", "loggedTopics", "data_folder", "file_duration", "logged_topics"}


def _read_file(path: Path) -> Dict[str, Any]:
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise ConfigError(f"cannot read config file {path}: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise ConfigError(f"config file {path} is not valid JSON: {exc}") from exc
    if not isinstance(raw, dict):
        raise ConfigError(f"config file {path} must contain a JSON object")
    # ROS style: {"BagRecorder": {"ros__parameters": {...}}}
    for value in raw.values():
        if isinstance(value, dict) and isinstance(value.get("ros__parameters"), dict):
            return _known_keys(value["ros__parameters"])
    return raw


def _known_keys(block: Mapping[str, Any]) -> Dict[str, Any]:
    known = _PARAM_KEYS | set(AppConfig.model_fields)
    ignored = sorted(k for k in block if k not in known)
    if ignored:
        log.debug("ignoring ROS parameters not used by the recorder: %s", ", ".join(ignored))
    return {k: v for k, v in block.items() if k in known}


def _env_overrides(environ: Mapping[str, str]) -> Dict[str, Any]:
    out: Dict[str, Any] = {}
    if environ.get(ENV_DATA_FOLDER):
        out["dataFolder"] = environ[ENV_DATA_FOLDER]
    if environ.get(ENV_FILE_DURATION):
        out["fileDuration"] = environ[ENV_FILE_DURATION]
    if environ.get(ENV_LOGGED_TOPICS) is not None:
        out["loggedTopics"] = [t.strip() for t in environ[ENV_LOGGED_TOPICS].split(",")]
    return out


def load_config(
    path: Optional[Union[str, Path]] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> AppConfig:
    """Build an :class:`AppConfig` from defaults, an optional JSON file and env vars.

    Recorder parameters may sit at the top level of the file, under
    ``"params"``, or under ``<node>.ros__parameters``. Environment variables
    win over the file. Any validation problem raises :class:`ConfigError`.
    """

    environ = os.environ if environ is None else environ
    raw: Dict[str, Any] = _read_file(Path(path)) if path is not None else {}

    params: Dict[str, Any] = dict(raw.pop("params", None) or {})
    for key in list(raw):
        if key in _PARAM_KEYS:
            params[key] = raw.pop(key)
    params.update(_env_overrides(environ))

    try:
        return AppConfig(params=RecorderParams(**params), **raw)
    except ValidationError as exc:
        raise ConfigError(str(exc)) from exc
