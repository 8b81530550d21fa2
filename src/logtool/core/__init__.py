"""File-writing core: levels, config, path layout, buffers, rotating writer."""

from __future__ import annotations

from .buffer_pool import BufferPool
from .config import LogConfig, resolve_config
from .models import Level
from .paths import LogFileError, log_dir, log_file_name, resolve_log_path
from .stream import LevelFileStream
from .writer import RotatingFileWriter, format_line

__all__ = [
    "BufferPool",
    "Level",
    "LevelFileStream",
    "LogConfig",
    "LogFileError",
    "RotatingFileWriter",
    "format_line",
    "log_dir",
    "log_file_name",
    "resolve_config",
    "resolve_log_path",
]
