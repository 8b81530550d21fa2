"""Leveled logging facade over the rotating file writer.

A ``LogTool`` holds the process configuration, filters records by level,
adds the caller prefix and hands records to a lazily created
``RotatingFileWriter``. The module-level functions delegate to a default
instance, so most applications only need::

    import logtool

    logtool.init("billing", level="info")
    logtool.info("charged %s", order_id)
    ...
    logtool.exit()
"""

from __future__ import annotations

import json
import logging
import sys
import threading
from datetime import datetime
from pathlib import Path
from typing import Any, TextIO

from .core.config import LogConfig, resolve_config
from .core.models import Level
from .core.writer import Clock, RotatingFileWriter
from .prefix import caller_prefix

fallback = logging.getLogger("logtool.fallback")


def _coerce_level(level: Level | str | int) -> Level:
    if isinstance(level, str):
        level = Level.parse(level)
    else:
        level = Level(level)
    if not level.is_filterable:
        raise ValueError(f"invalid log level: {level.file_name}")
    return level


def encode_action(value: Any) -> str:
    """Serialize an ACTION payload as compact JSON.

    Strings that already hold valid JSON are kept verbatim.
    """
    if isinstance(value, str):
        try:
            json.loads(value)
        except ValueError:
            return json.dumps(value, ensure_ascii=False)
        return value
    try:
        return json.dumps(value, ensure_ascii=False, separators=(",", ":"))
    except (TypeError, ValueError) as exc:
        raise ValueError(f"action data is not JSON serializable: {exc}") from exc


class LogTool:
    def __init__(
        self,
        config: LogConfig | None = None,
        *,
        clock: Clock | None = None,
        stdout: TextIO | None = None,
    ) -> None:
        self._config = config or LogConfig()
        self._clock: Clock = clock or datetime.now
        self._stdout = stdout
        self._writer: RotatingFileWriter | None = None
        self._inited = False
        self._lock = threading.Lock()

    @property
    def config(self) -> LogConfig:
        return self._config

    @property
    def level(self) -> Level:
        return self._config.level

    @property
    def inited(self) -> bool:
        return self._inited

    @property
    def writer(self) -> RotatingFileWriter | None:
        return self._writer

    def init(
        self,
        log_name: str,
        level: Level | str = Level.DEBUG,
        also_stdout: bool = False,
        **overrides: Any,
    ) -> LogConfig:
        """Configure and enable file output.

        Invalid names or levels raise ValueError. A second call warns and
        updates settings, but an already open writer keeps its files.
        LOGTOOL_* environment variables take precedence over arguments.
        """
        with self._lock:
            if self._inited:
                fallback.warning("logtool: already initialized (log name %r)", self._config.log_name)
            data = {
                **self._config.model_dump(),
                **overrides,
                "log_name": log_name,
                "level": _coerce_level(level),
                "also_stdout": also_stdout,
            }
            self._config = resolve_config(LogConfig.model_validate(data))
            self._inited = True
            return self._config

    def set_level(self, level: Level | str) -> None:
        self._update(level=_coerce_level(level))

    def set_name(self, name: str) -> None:
        if not name or not name.strip():
            raise ValueError("invalid log name: must not be empty")
        self._update(log_name=name)

    def set_path(self, path: str | Path) -> None:
        """Change the base path; empty values are ignored."""
        if str(path).strip():
            self._update(base_path=path)

    def also_stdout(self, enabled: bool) -> None:
        self._update(also_stdout=enabled)

    def _update(self, **changes: Any) -> None:
        with self._lock:
            self._config = LogConfig.model_validate({**self._config.model_dump(), **changes})

    def is_debug(self) -> bool:
        return self._config.level == Level.DEBUG

    def enabled(self, level: Level) -> bool:
        """Whether records at ``level`` pass the threshold.

        DEFAULT and ACTION records are never filtered.
        """
        if level in (Level.DEFAULT, Level.ACTION):
            return True
        return level >= self._config.level

    def log(
        self,
        level: Level,
        msg: object,
        *args: object,
        skip: int = 0,
        prefix: str | None = None,
    ) -> None:
        """Write ``msg % args`` at ``level`` if enabled.

        ``skip`` counts extra wrapper frames between the application and
        this call, so the caller prefix points at application code. An
        explicit ``prefix`` replaces the computed one.
        """
        if not self.enabled(level):
            return
        text = str(msg)
        if args:
            text = text % args
        self._emit(level, text, 2 + skip, prefix)

    def debug(self, msg: object, *args: object) -> None:
        self.log(Level.DEBUG, msg, *args, skip=1)

    def info(self, msg: object, *args: object) -> None:
        self.log(Level.INFO, msg, *args, skip=1)

    def warn(self, msg: object, *args: object) -> None:
        self.log(Level.WARN, msg, *args, skip=1)

    def error(self, msg: object, *args: object) -> None:
        self.log(Level.ERROR, msg, *args, skip=1)

    def action(self, value: Any, *, skip: int = 0) -> None:
        """Write a structured event; raises ValueError for unserializable data."""
        self._emit(Level.ACTION, encode_action(value), 2 + skip)

    def _emit(self, level: Level, text: str, depth: int, prefix: str | None = None) -> None:
        if prefix is None:
            prefix = caller_prefix(depth)
        if not self._inited:
            now = self._clock()
            msg = text.rstrip("\n")
            self._print(f"{now:%Y-%m-%d %H:%M:%S} {prefix} [{level.file_name}] {msg}")
            return
        self._ensure_writer().write(level, text, prefix)
        if self._config.also_stdout:
            now = self._clock()
            msg = text.rstrip("\n")
            self._print(f"{now:%Y-%m-%d %H:%M:%S} [{level.file_name}] {msg}")

    def _print(self, line: str) -> None:
        print(line, file=self._stdout or sys.stdout)

    def _ensure_writer(self) -> RotatingFileWriter:
        writer = self._writer
        if writer is not None:
            return writer
        with self._lock:
            if self._writer is None:
                self._writer = RotatingFileWriter(self._config, clock=self._clock)
            return self._writer

    def flush(self) -> None:
        """Flush and fsync open files; the background flusher keeps running."""
        writer = self._writer
        if writer is not None:
            writer.flush_all()

    def exit(self) -> None:
        """Flush everything written so far to stable storage."""
        writer = self._writer
        if writer is not None:
            writer.exit()

    def close(self) -> None:
        """Flush and close all files; a later write reopens them."""
        with self._lock:
            writer, self._writer = self._writer, None
        if writer is not None:
            writer.close()


_default = LogTool()


def default_tool() -> LogTool:
    return _default


def init(
    log_name: str,
    level: Level | str = Level.DEBUG,
    also_stdout: bool = False,
    **overrides: Any,
) -> LogConfig:
    return _default.init(log_name, level, also_stdout, **overrides)


def set_level(level: Level | str) -> None:
    _default.set_level(level)


def set_name(name: str) -> None:
    _default.set_name(name)


def set_path(path: str | Path) -> None:
    _default.set_path(path)


def also_stdout(enabled: bool) -> None:
    _default.also_stdout(enabled)


def is_debug() -> bool:
    return _default.is_debug()


def debug(msg: object, *args: object) -> None:
    _default.log(Level.DEBUG, msg, *args, skip=1)


def info(msg: object, *args: object) -> None:
    _default.log(Level.INFO, msg, *args, skip=1)


def warn(msg: object, *args: object) -> None:
    _default.log(Level.WARN, msg, *args, skip=1)


def error(msg: object, *args: object) -> None:
    _default.log(Level.ERROR, msg, *args, skip=1)


def action(value: Any) -> None:
    _default.action(value, skip=1)


def exit() -> None:
    _default.exit()
