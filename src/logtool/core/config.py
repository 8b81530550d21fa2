"""Writer configuration and environment overrides."""

from __future__ import annotations

import os
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .models import Level

DEFAULT_BASE_PATH = Path("/data")
DEFAULT_LOG_NAME = "logtool"
MAX_SIZE = 1800 * 1024 * 1024
BUFFER_SIZE = 256 * 1024
FLUSH_INTERVAL = 5.0

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


class LogConfig(BaseModel):
    """Settings shared by the facade and the rotating writer."""

    model_config = ConfigDict(frozen=True)

    log_name: str = Field(default=DEFAULT_LOG_NAME, description="Subdirectory under <base>/logs.")
    base_path: Path = Field(default=DEFAULT_BASE_PATH, description="Root storage directory.")
    level: Level = Field(default=Level.DEBUG, description="Minimum level written by the facade.")
    also_stdout: bool = Field(default=False, description="Echo records to stdout as well.")
    max_size: int = Field(default=MAX_SIZE, gt=0, description="Bytes per file before a new slot.")
    buffer_size: int = Field(default=BUFFER_SIZE, gt=0, description="Userspace buffer per file.")
    flush_interval: float = Field(
        default=FLUSH_INTERVAL, gt=0, description="Seconds between background flushes."
    )

    @field_validator("log_name")
    @classmethod
    def _check_log_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("invalid log name: must not be empty")
        if "/" in v or "\\" in v or v in (".", ".."):
            raise ValueError(f"invalid log name '{v}': must be a single path component")
        return v

    @field_validator("base_path", mode="before")
    @classmethod
    def _check_base_path(cls, v: object) -> object:
        if isinstance(v, str) and not v.strip():
            raise ValueError("base path must not be empty")
        return v

    @field_validator("level", mode="before")
    @classmethod
    def _check_level(cls, v: object) -> object:
        if isinstance(v, str):
            v = Level.parse(v)
        if isinstance(v, int) and not isinstance(v, bool):
            try:
                level = Level(v)
            except ValueError as exc:
                raise ValueError(f"invalid log level: {v}") from exc
            if not level.is_filterable:
                raise ValueError(f"invalid log level: {level.file_name}")
            return level
        return v


def _env_bool(name: str, raw: str) -> bool:
    value = raw.strip().lower()
    if value in _TRUE:
        return True
    if value in _FALSE:
        return False
    raise ValueError(f"{name} must be a boolean (1/0, true/false, yes/no, on/off)")


def resolve_config(cfg: LogConfig | None = None) -> LogConfig:
    """Return config with optional env overrides applied.

    Recognized variables: LOGTOOL_NAME, LOGTOOL_PATH, LOGTOOL_LEVEL and
    LOGTOOL_ALSO_STDOUT. Empty variables are ignored.
    """
    if cfg is None:
        cfg = LogConfig()

    updates: dict[str, object] = {}
    name = os.getenv("LOGTOOL_NAME")
    if name:
        updates["log_name"] = name
    path = os.getenv("LOGTOOL_PATH")
    if path:
        updates["base_path"] = path
    level = os.getenv("LOGTOOL_LEVEL")
    if level:
        try:
            updates["level"] = Level.parse(level)
        except ValueError as exc:
            raise ValueError(f"LOGTOOL_LEVEL: {exc}") from exc
    stdout = os.getenv("LOGTOOL_ALSO_STDOUT")
    if stdout:
        updates["also_stdout"] = _env_bool("LOGTOOL_ALSO_STDOUT", stdout)

    if not updates:
        return cfg
    try:
        return LogConfig.model_validate({**cfg.model_dump(), **updates})
    except ValidationError as exc:
        names = ", ".join(str(err["loc"][0]) for err in exc.errors())
        raise ValueError(f"invalid LOGTOOL_* environment override ({names}): {exc}") from exc
