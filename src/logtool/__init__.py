"""Leveled file logging with hourly and size-based rotation."""

from __future__ import annotations

from .core import BufferPool, Level, LevelFileStream, LogConfig, LogFileError, RotatingFileWriter
from .facade import (
    LogTool,
    action,
    also_stdout,
    debug,
    default_tool,
    error,
    exit,
    info,
    init,
    is_debug,
    set_level,
    set_name,
    set_path,
    warn,
)
from .stdlib import LevelStream, LogToolHandler, install

__all__ = [
    "BufferPool",
    "Level",
    "LevelFileStream",
    "LevelStream",
    "LogConfig",
    "LogFileError",
    "LogTool",
    "LogToolHandler",
    "RotatingFileWriter",
    "action",
    "also_stdout",
    "debug",
    "default_tool",
    "error",
    "exit",
    "info",
    "init",
    "install",
    "is_debug",
    "set_level",
    "set_name",
    "set_path",
    "warn",
]
