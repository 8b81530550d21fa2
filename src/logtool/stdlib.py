"""Adapters that route standard-library output into a LogTool.

``LevelStream`` is a minimal file-like object for code that prints or writes
to a stream; ``LogToolHandler`` plugs into the ``logging`` module.
"""

from __future__ import annotations

import logging
import threading

from .core.models import Level
from .facade import LogTool

_MARKERS: dict[str, Level] = {
    "[D]": Level.DEBUG,
    "[I]": Level.INFO,
    "[W]": Level.WARN,
    "[E]": Level.ERROR,
}


def split_marker(text: str) -> tuple[Level, str]:
    """Return the level selected by a leading ``[D]``/``[I]``/``[W]``/``[E]`` marker.

    Unmarked text stays at DEFAULT and is returned unchanged.
    """
    if len(text) > 3 and text[0] == "[":
        level = _MARKERS.get(text[:3])
        if level is not None:
            return level, text[3:]
    return Level.DEFAULT, text


class LevelStream:
    """File-like sink writing one record per complete line.

    Text is buffered until a newline arrives, so ``print(a, b)`` or a
    traceback written in pieces still yields whole lines. ``flush()`` writes
    out any unterminated tail.
    """

    def __init__(self, tool: LogTool, level: Level = Level.DEFAULT) -> None:
        self.tool = tool
        self.level = level
        self._pending = ""
        self._lock = threading.Lock()

    def write(self, data: str) -> int:
        with self._lock:
            self._pending += data
            *lines, self._pending = self._pending.split("\n")
        # Emit outside the lock: a failed write may report back into this stream.
        for line in lines:
            self._emit(line)
        return len(data)

    def flush(self) -> None:
        with self._lock:
            tail, self._pending = self._pending, ""
        self._emit(tail)
        self.tool.flush()

    def writable(self) -> bool:
        return True

    def _emit(self, line: str) -> None:
        if not line:
            return
        level, text = self.level, line
        if level is Level.DEFAULT:
            level, text = split_marker(line)
        self.tool.log(level, text, skip=2)


def level_for(levelno: int) -> Level:
    """Map a ``logging`` level number onto a file level."""
    if levelno >= logging.ERROR:
        return Level.ERROR
    if levelno >= logging.WARNING:
        return Level.WARN
    if levelno >= logging.INFO:
        return Level.INFO
    return Level.DEBUG


class LogToolHandler(logging.Handler):
    """``logging.Handler`` writing formatted records through a LogTool.

    Records from the ``logtool`` logger hierarchy are skipped: that is where
    write failures are reported, and feeding them back into the writer would
    recurse.
    """

    def __init__(self, tool: LogTool, level: int = logging.NOTSET) -> None:
        super().__init__(level)
        self.tool = tool

    def emit(self, record: logging.LogRecord) -> None:
        if record.name == "logtool" or record.name.startswith("logtool."):
            return
        try:
            prefix = f"reqid-{record.thread} {record.filename} {record.lineno} : "
            self.tool.log(level_for(record.levelno), self.format(record), prefix=prefix)
        except Exception:
            self.handleError(record)


def install(
    tool: LogTool, logger: logging.Logger | None = None, level: int = logging.NOTSET
) -> LogToolHandler:
    """Attach a LogToolHandler to ``logger`` (the root logger by default)."""
    handler = LogToolHandler(tool, level)
    (logger or logging.getLogger()).addHandler(handler)
    return handler
